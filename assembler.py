"""assembler.py — Build a complete journal issue: render, order, paginate, merge, stamp."""

from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import date
from pathlib import Path

from tqdm import tqdm

from layout import load_font
from models import Article, AssemblyOutcome, AssemblyRequest, IssueSummary, Part, RenderResult
from paginator import resolve_pages
from pdf_merge import DEFAULT_STRATEGIES, MergeChainExhausted, merge
from renderers import RenderError, render_file
from renderers.placeholder import render_placeholder
from sections import group_articles
from settings import DEFAULT_RENDER_WORKERS
from toc_builder import build_section_header, build_toc
from workspace import WorkspaceManager

REQUIRED_PART_LABELS = {
    "cover": "Титульный лист",
    "description": "Описание журнала и редакции",
    "final": "Заключительная страница",
}

REMEDIATION = {
    "missing_required_part": "Upload the missing parts and build the issue again.",
    "renderer_failure": (
        "Re-export the failing file (e.g. save it again as .docx or PDF); "
        "if the renderer was unavailable, install LibreOffice or retry later."
    ),
    "merge_chain_exhausted": (
        "No merge backend produced a valid PDF: check the part PDFs, "
        "or install pypdf, poppler-utils (pdfunite) or pdftk."
    ),
    "assembly_failure": (
        "The issue could not be laid out: check ISSUEBIND_FONT_FILE and that "
        "every uploaded PDF opens in a viewer, then build the issue again."
    ),
}


def validate_required_parts(cover, description, final) -> list[str]:
    """Return the labels of required parts that were not supplied."""
    supplied = {"cover": cover, "description": description, "final": final}
    return [label for kind, label in REQUIRED_PART_LABELS.items() if not supplied[kind]]


def create_issue_summary(articles: list[Article], page_count: int = 0, today: date | None = None) -> IssueSummary:
    today = today or date.today()
    return IssueSummary(
        name=f"Выпуск {today:%d.%m.%Y}",
        date=f"{today:%d.%m.%Y}",
        year=today.year,
        month=today.month,
        article_count=len(articles),
        articles=[{"title": a.title, "author": a.author, "page": a.start_page} for a in articles],
        page_count=page_count,
    )


def _failure(kind: str, **fields) -> AssemblyOutcome:
    return AssemblyOutcome(kind=kind, remediation=REMEDIATION[kind], **fields)


def render_all(
    jobs: list[tuple[str, Path | None]],
    workspace_root: Path,
    renderer=render_file,
    workers: int = DEFAULT_RENDER_WORKERS,
    policy: str = "placeholder",
    verbose: bool = True,
) -> tuple[list[RenderResult], list[str]]:
    """
    Render (label, source) jobs concurrently. Results come back in job order.

    Under the "placeholder" policy a failed job is replaced by a labelled
    placeholder page and its error is reported in the returned list. Under
    "abort" the first failure cancels outstanding jobs and is re-raised.
    """
    results: list[RenderResult | None] = [None] * len(jobs)
    errors = []

    def _render(index: int, label: str, source: Path | None) -> RenderResult:
        if source is None:
            raise RenderError(f"No source file for {label}")
        out_dir = workspace_root / f"render-{index:03d}"
        out_dir.mkdir(parents=True, exist_ok=True)
        try:
            return renderer(source, out_dir)
        except OSError as e:
            raise RenderError(str(e), source=str(source)) from e

    executor = ThreadPoolExecutor(max_workers=max(1, workers))
    try:
        futures = {
            executor.submit(_render, i, label, source): i
            for i, (label, source) in enumerate(jobs)
        }
        with tqdm(total=len(jobs), desc="  Rendering", unit="part", disable=not verbose) as pbar:
            for future in as_completed(futures):
                index = futures[future]
                label = jobs[index][0]
                try:
                    results[index] = future.result()
                except Exception as e:
                    error = e
                    if not isinstance(e, RenderError):
                        # A renderer bug fails this part only
                        error = RenderError(f"{type(e).__name__}: {e}", source=str(jobs[index][1] or ""))
                    kind = "retryable" if error.retryable else "fatal"
                    message = f"{label}: {error} ({kind})"
                    if policy == "abort":
                        executor.shutdown(wait=False, cancel_futures=True)
                        raise type(error)(message, source=error.source or label) from e
                    errors.append(message)
                    if verbose:
                        tqdm.write(f"  WARNING: {message}; using a placeholder page")
                    results[index] = render_placeholder(label, str(error))
                pbar.update(1)
    finally:
        executor.shutdown(wait=True, cancel_futures=True)
    return results, errors


def assemble_issue(
    cover: Path | None,
    description: Path | None,
    articles: list[Article],
    final: Path | None,
    *,
    title: str,
    workspace: WorkspaceManager | None = None,
    renderer=render_file,
    render_workers: int = DEFAULT_RENDER_WORKERS,
    render_failure_policy: str = "placeholder",
    strategies=DEFAULT_STRATEGIES,
    font_file: str | None = None,
    toc_heading: str | None = None,
    verbose: bool = True,
) -> AssemblyOutcome:
    """
    Assemble cover, description, TOC, sectioned articles and final page into
    one PDF with resolved page numbers and running footers.

    Never raises for the failure modes of the pipeline; they come back as an
    AssemblyOutcome whose `kind` names the failure. The request's workspace is
    removed before this function returns, whatever the outcome.
    """
    if render_failure_policy not in ("placeholder", "abort"):
        raise ValueError(f"Unknown render failure policy: {render_failure_policy}")

    missing = validate_required_parts(cover, description, final)
    if missing:
        return _failure("missing_required_part", missing_parts=missing,
                        errors=[f"Missing: {label}" for label in missing])

    try:
        load_font(font_file)
    except Exception as e:
        return _failure("assembly_failure", errors=[f"Font: {type(e).__name__}: {e}"])

    workspace = workspace or WorkspaceManager()
    articles = list(articles)

    with workspace.scoped() as handle:
        if verbose:
            print(f"=== Phase 1: Rendering {len(articles) + 3} parts ===")
        jobs = [("cover", Path(cover)), ("description", Path(description))]
        jobs += [(f"article '{a.title}'", Path(a.source) if a.source else None) for a in articles]
        jobs.append(("final", Path(final)))

        try:
            results, render_errors = render_all(
                jobs, handle.root, renderer, render_workers, render_failure_policy, verbose
            )
        except RenderError as e:
            return _failure("renderer_failure", errors=[str(e)])

        try:
            return _paginate_and_merge(
                articles, results, handle, title=title, strategies=strategies,
                font_file=font_file, toc_heading=toc_heading, render_errors=render_errors,
                verbose=verbose,
            )
        except MergeChainExhausted as e:
            return _failure(
                "merge_chain_exhausted",
                errors=[f"{name}: {cause}" for name, cause in e.attempts],
            )
        except Exception as e:
            # e.g. an unreadable font file or a rendered PDF MuPDF cannot reopen
            return _failure("assembly_failure", errors=[f"{type(e).__name__}: {e}"])


def _paginate_and_merge(
    articles: list[Article],
    results: list[RenderResult],
    handle,
    *,
    title: str,
    strategies,
    font_file: str | None,
    toc_heading: str | None,
    render_errors: list[str],
    verbose: bool,
) -> AssemblyOutcome:
    cover_result, description_result = results[0], results[1]
    final_result = results[-1]
    for article, result in zip(articles, results[2:-1]):
        article.page_count = result.page_count
        article.pdf_bytes = result.pdf_bytes
        article.placeholder = result.placeholder

    if verbose:
        print("=== Phase 2: Resolving page numbers ===")
    sections = group_articles(articles)

    def _toc(entries, start_page):
        kwargs = {"font_file": font_file}
        if toc_heading:
            kwargs["heading"] = toc_heading
        return build_toc(entries, start_page, **kwargs)

    resolution = resolve_pages(
        sections,
        cover_pages=cover_result.page_count,
        description_pages=description_result.page_count,
        toc_builder=_toc,
        verbose=verbose,
    )

    parts = []

    def _add(kind: str, pdf_bytes: bytes, page_count: int) -> None:
        part = Part(kind=kind, ordinal=len(parts), pdf_bytes=pdf_bytes)
        part.page_count = page_count
        parts.append(part)

    _add("cover", cover_result.pdf_bytes, cover_result.page_count)
    _add("description", description_result.pdf_bytes, description_result.page_count)
    _add("toc", resolution.toc_pdf, resolution.toc_page_count)
    for section in resolution.sections:
        _add("section", build_section_header(section.name, font_file=font_file), 1)
        for article in section.members:
            _add("article", article.pdf_bytes, article.page_count)
    _add("final", final_result.pdf_bytes, final_result.page_count)

    request = AssemblyRequest(
        parts=parts, sections=resolution.sections,
        workspace=handle, toc_entries=resolution.toc_entries,
    )

    if verbose:
        print(f"=== Phase 3: Merging {len(parts)} parts ===")
    pdf_bytes = merge(
        request.parts,
        handle.root,
        title=title,
        skip_leading_pages=cover_result.page_count + description_result.page_count,
        strategies=strategies,
        font_file=font_file,
        verbose=verbose,
    )

    ordered_articles = [a for s in resolution.sections for a in s.members]
    total_pages = sum(p.page_count for p in parts)
    if verbose:
        print(f"  Done: {total_pages} pages, {len(ordered_articles)} articles"
              + (" (approximate pagination)" if resolution.approximate else ""))
    return AssemblyOutcome(
        kind="ok",
        pdf_bytes=pdf_bytes,
        toc_entries=request.toc_entries,
        approximate_pagination=resolution.approximate,
        summary=create_issue_summary(ordered_articles, total_pages),
        errors=render_errors,
    )
