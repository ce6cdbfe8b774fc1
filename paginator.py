"""paginator.py — Resolve final article page numbers against the TOC's own length.

The TOC sits in front of the articles, so its page count shifts every article's
start page, and the TOC in turn prints those start pages. This is settled by a
bounded fixed-point iteration: guess the TOC length, assign pages, build the TOC,
and repeat with the realized length until the guess holds.
"""

import math
from dataclasses import dataclass, field

from models import Section, TocEntry
from toc_builder import build_toc

RECORDS_PER_PAGE = 15
MAX_ITERATIONS = 3
SECTION_HEADER_PAGES = 1


@dataclass
class Resolution:
    sections: list[Section]
    toc_entries: list[TocEntry]
    toc_pdf: bytes
    toc_page_count: int
    toc_start_page: int
    iterations: int
    approximate: bool = False
    history: list[int] = field(default_factory=list)   # realized TOC page count per pass


def estimate_toc_pages(entry_count: int, records_per_page: int = RECORDS_PER_PAGE) -> int:
    """Seed estimate of TOC length: ceil(entries / records per page), at least 1."""
    return max(1, math.ceil(entry_count / records_per_page))


def assign_start_pages(sections: list[Section], first_page: int) -> list[TocEntry]:
    """
    Walk sections and their members in order, setting each article's start page.
    Every section is preceded by SECTION_HEADER_PAGES divider pages.
    """
    entries = []
    cursor = first_page
    number = 1
    for section in sections:
        cursor += SECTION_HEADER_PAGES
        for article in section.members:
            if article.page_count is None:
                raise ValueError(f"Article '{article.title}' has not been rendered")
            article.start_page = cursor
            entries.append(TocEntry(
                number=number,
                title=article.title,
                author=article.author,
                section=section.name,
                page=cursor,
            ))
            cursor += article.page_count
            number += 1
    return entries


def resolve_pages(
    sections: list[Section],
    cover_pages: int,
    description_pages: int,
    records_per_page: int = RECORDS_PER_PAGE,
    max_iterations: int = MAX_ITERATIONS,
    toc_builder=build_toc,
    verbose: bool = True,
) -> Resolution:
    """
    Assign every article its final start page and build the matching TOC.

    Articles must already be rendered (page_count set). Stops as soon as the
    TOC's realized page count equals the count the pages were assigned with.
    If `max_iterations` passes do not converge, the last pass is returned with
    approximate=True instead of failing.
    """
    if max_iterations < 1:
        raise ValueError("max_iterations must be at least 1")

    base_page = 1 + cover_pages + description_pages
    entry_count = sum(len(s.members) for s in sections)
    estimate = estimate_toc_pages(entry_count, records_per_page)
    history = []

    for iteration in range(1, max_iterations + 1):
        entries = assign_start_pages(sections, base_page + estimate)
        toc = toc_builder(entries, base_page)
        history.append(toc.page_count)

        if verbose:
            print(f"  Pass {iteration}: assumed {estimate} TOC page(s), built {toc.page_count}")

        if toc.page_count == estimate:
            return Resolution(
                sections=sections,
                toc_entries=entries,
                toc_pdf=toc.pdf_bytes,
                toc_page_count=toc.page_count,
                toc_start_page=base_page,
                iterations=iteration,
                history=history,
            )
        estimate = toc.page_count

    if verbose:
        print(f"  WARNING: TOC length did not settle after {max_iterations} passes; "
              "page numbers may be off by a page")
    return Resolution(
        sections=sections,
        toc_entries=entries,
        toc_pdf=toc.pdf_bytes,
        toc_page_count=toc.page_count,
        toc_start_page=base_page,
        iterations=max_iterations,
        approximate=True,
        history=history,
    )
