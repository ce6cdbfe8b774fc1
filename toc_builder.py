"""toc_builder.py — Render the table of contents and report its real page count."""

from dataclasses import dataclass

import fitz  # pymupdf

from layout import (
    CONTENT_BOTTOM,
    CONTENT_WIDTH,
    GREY,
    MARGIN_LEFT,
    MARGIN_RIGHT,
    MARGIN_TOP,
    PAGE_WIDTH,
    SAVE_OPTIONS,
    fit_text,
    load_font,
    new_page,
    write_line,
)
from models import TocEntry

TOC_HEADING = "СОДЕРЖАНИЕ"

HEADING_SIZE = 16
SECTION_SIZE = 12
TITLE_SIZE = 11
AUTHOR_SIZE = 10

# Vertical space consumed by each block, in points
HEADING_HEIGHT = 40
SECTION_HEADER_HEIGHT = 26
RECORD_HEIGHT = 44
TITLE_TO_AUTHOR = 15

PAGE_NUMBER_COLUMN = 40
AUTHOR_INDENT = 14


@dataclass
class TocBuild:
    pdf_bytes: bytes
    page_count: int


def _group_by_section(entries: list[TocEntry]) -> list[tuple[str, list[TocEntry]]]:
    """Group consecutive entries by section, keeping the order they arrive in."""
    groups: list[tuple[str, list[TocEntry]]] = []
    for entry in entries:
        if groups and groups[-1][0] == entry.section:
            groups[-1][1].append(entry)
        else:
            groups.append((entry.section, [entry]))
    return groups


def build_toc(
    entries: list[TocEntry],
    start_page: int,
    heading: str = TOC_HEADING,
    font_file: str | None = None,
) -> TocBuild:
    """
    Render TOC pages for `entries` (already in final order) and return the
    PDF bytes together with the number of physical pages produced.

    A record (numbered title line plus author/page line) is never split
    across pages, and a section header is never left at the bottom of a page
    without at least one record under it. Deterministic: the same arguments
    always produce the same bytes.
    """
    if start_page < 1:
        raise ValueError(f"start_page must be >= 1, got {start_page}")

    font = load_font(font_file)
    title_width = CONTENT_WIDTH - PAGE_NUMBER_COLUMN
    author_width = title_width - AUTHOR_INDENT
    right_edge = PAGE_WIDTH - MARGIN_RIGHT

    doc = fitz.open()
    page = new_page(doc)
    y = MARGIN_TOP
    write_line(page, heading, PAGE_WIDTH / 2, y + HEADING_SIZE, font, HEADING_SIZE, align="center")
    y += HEADING_HEIGHT

    for section, members in _group_by_section(entries):
        if y + SECTION_HEADER_HEIGHT + RECORD_HEIGHT > CONTENT_BOTTOM:
            page = new_page(doc)
            y = MARGIN_TOP
        write_line(page, fit_text(section, font, SECTION_SIZE, CONTENT_WIDTH),
                   MARGIN_LEFT, y + SECTION_SIZE, font, SECTION_SIZE)
        y += SECTION_HEADER_HEIGHT

        for entry in members:
            if y + RECORD_HEIGHT > CONTENT_BOTTOM:
                page = new_page(doc)
                y = MARGIN_TOP
            title_line = fit_text(f"{entry.number}. {entry.title}", font, TITLE_SIZE, title_width)
            write_line(page, title_line, MARGIN_LEFT, y + TITLE_SIZE, font, TITLE_SIZE)
            author_baseline = y + TITLE_SIZE + TITLE_TO_AUTHOR
            write_line(page, fit_text(entry.author, font, AUTHOR_SIZE, author_width),
                       MARGIN_LEFT + AUTHOR_INDENT, author_baseline, font, AUTHOR_SIZE, color=GREY)
            write_line(page, str(entry.page), right_edge, author_baseline,
                       font, AUTHOR_SIZE, color=GREY, align="right")
            y += RECORD_HEIGHT

    doc.set_page_labels([{"startpage": 0, "prefix": "", "style": "D", "firstpagenum": start_page}])
    page_count = doc.page_count
    pdf_bytes = doc.tobytes(**SAVE_OPTIONS)
    doc.close()
    return TocBuild(pdf_bytes=pdf_bytes, page_count=page_count)


def build_section_header(name: str, font_file: str | None = None) -> bytes:
    """Single divider page announcing a section, placed before its first article."""
    font = load_font(font_file)
    doc = fitz.open()
    page = new_page(doc)
    baseline = page.rect.height / 3
    write_line(page, fit_text(name, font, HEADING_SIZE, CONTENT_WIDTH),
               PAGE_WIDTH / 2, baseline, font, HEADING_SIZE, align="center")
    pdf_bytes = doc.tobytes(**SAVE_OPTIONS)
    doc.close()
    return pdf_bytes
