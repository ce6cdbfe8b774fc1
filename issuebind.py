#!/usr/bin/env python3
"""
issuebind — Assemble a journal issue PDF from separately written parts.

Inputs: a cover, a journal/editorial description, any number of articles and
a final page (PDF, DOCX/DOC/ODT/RTF via LibreOffice, or plain text/Markdown/HTML).
Output: one PDF with a table of contents, section divider pages and running
footers with page numbers.

Quick start:
  1. Optionally set ISSUEBIND_TITLE / ISSUEBIND_FONT_FILE in .env
  2. python issuebind.py --cover cover.pdf --description about.docx \\
         --final back.pdf --manifest articles.json --dry-run
  3. python issuebind.py --cover cover.pdf --description about.docx \\
         --final back.pdf --manifest articles.json
"""

import argparse
import json
import sys
from pathlib import Path


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Assemble a journal issue PDF with a table of contents and page footers",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Dry run: list sections, ordering and the estimated TOC size, no rendering:
  python issuebind.py --cover c.pdf --description d.pdf --final f.pdf --manifest issue.json --dry-run

  # Articles straight from files (title from file name, section unclassified):
  python issuebind.py --cover c.pdf --description d.pdf --final f.pdf a1.docx a2.docx

  # Stop on the first file that cannot be converted:
  python issuebind.py ... --abort-on-render-failure

  # Remove stale workspaces left by crashed runs:
  python issuebind.py --reap

Manifest format (JSON list):
  [{"path": "a1.docx", "title": "...", "author": "...", "section": "ТЕХНИЧЕСКИЕ НАУКИ"}]
        """,
    )
    parser.add_argument("articles", nargs="*", type=Path, help="Article files")
    parser.add_argument("--cover", type=Path, default=None, metavar="FILE", help="Cover page")
    parser.add_argument("--description", type=Path, default=None, metavar="FILE",
                        help="Journal and editorial board description")
    parser.add_argument("--final", type=Path, default=None, metavar="FILE", help="Final page")
    parser.add_argument("--manifest", type=Path, default=None, metavar="JSON",
                        help="JSON list of articles with path, title, author and section")
    parser.add_argument("--title", type=str, default=None,
                        help="Journal title for the running footer (default: ISSUEBIND_TITLE)")
    parser.add_argument("--output", type=Path, default=None, metavar="PATH",
                        help="Output PDF path (default: output/<title>.pdf)")
    parser.add_argument("--workspace-dir", type=Path, default=None, metavar="DIR",
                        help="Root for per-run scratch directories")
    parser.add_argument("--workers", type=int, default=None, metavar="N",
                        help="Parallel renders (default: ISSUEBIND_RENDER_WORKERS or 4)")
    parser.add_argument("--abort-on-render-failure", action="store_true",
                        help="Fail instead of inserting a placeholder page for broken files")
    parser.add_argument("--dry-run", action="store_true",
                        help="Show section ordering and TOC estimate without rendering")
    parser.add_argument("--reap", action="store_true",
                        help="Delete stale workspaces older than the TTL and exit")
    return parser.parse_args(argv)


def load_articles(manifest: Path | None, files: list[Path]):
    """Articles from the manifest first, then bare files in the order given."""
    from models import Article

    articles = []
    if manifest:
        entries = json.loads(manifest.read_text(encoding="utf-8"))
        if not isinstance(entries, list):
            raise ValueError(f"Manifest {manifest} must contain a JSON list")
        for entry in entries:
            path = Path(entry["path"])
            if not path.is_absolute():
                path = manifest.parent / path
            articles.append(Article(
                title=entry.get("title") or path.stem.replace("_", " "),
                author=entry.get("author", ""),
                section=entry.get("section", ""),
                source=path,
            ))
    for path in files:
        articles.append(Article(title=path.stem.replace("_", " "), author="", source=path))
    return articles


def print_section_list(sections) -> None:
    from script_detect import language_name

    total = sum(len(s.members) for s in sections)
    print(f"\nFound {total} articles in {len(sections)} sections:")
    print("-" * 70)
    number = 1
    for section in sections:
        print(f"  {section.name}")
        for article in section.members:
            print(f"    {number:2d}. {article.author:<30} {article.title[:40]:<40} "
                  f"[{language_name(article.script)}]")
            number += 1
    print("-" * 70)


def warn_missing_libreoffice(sources) -> bool:
    """Print a warning when office files were passed but LibreOffice is not installed."""
    from renderers import OFFICE_EXTENSIONS
    from renderers.office_renderer import check_libreoffice

    office_files = [s for s in sources if s and Path(s).suffix.lower() in OFFICE_EXTENSIONS]
    if not office_files or check_libreoffice():
        return False
    print(f"WARNING: LibreOffice not found; {len(office_files)} office file(s) cannot be converted:")
    for source in office_files:
        print(f"  {source}")
    return True


def main(argv=None) -> int:
    args = parse_args(argv)

    # Lazy imports keep --help fast
    from settings import load_settings
    from workspace import WorkspaceManager

    settings = load_settings()
    workspace = WorkspaceManager(args.workspace_dir or settings.workspace_dir, settings.workspace_ttl_s)

    if args.reap:
        removed = workspace.reap()
        print(f"Removed {len(removed)} stale workspace(s) from {workspace.root}")
        return 0

    articles = load_articles(args.manifest, args.articles)
    warn_missing_libreoffice([args.cover, args.description, args.final] + [a.source for a in articles])

    if args.dry_run:
        from paginator import estimate_toc_pages
        from sections import group_articles

        sections = group_articles(articles)
        print_section_list(sections)
        print(f"  Estimated TOC length: {estimate_toc_pages(len(articles))} page(s)")
        print("\nDry run complete. Nothing rendered.")
        return 0

    from assembler import assemble_issue

    title = args.title or settings.title
    policy = "abort" if args.abort_on_render_failure else settings.render_failure_policy

    outcome = assemble_issue(
        args.cover,
        args.description,
        articles,
        args.final,
        title=title,
        workspace=workspace,
        render_workers=args.workers or settings.render_workers,
        render_failure_policy=policy,
        font_file=settings.font_file,
    )

    if not outcome.ok:
        print(f"\nERROR: issue not built ({outcome.kind})")
        for error in outcome.errors:
            print(f"  {error}")
        print(f"  {outcome.remediation}")
        return 1

    safe_title = title.replace(" ", "_").replace("/", "_")
    output_file = args.output or Path("output") / f"{safe_title}.pdf"
    output_file.parent.mkdir(parents=True, exist_ok=True)
    output_file.write_bytes(outcome.pdf_bytes)

    print(f"\nDone! Issue saved to: {output_file}")
    if outcome.summary:
        print(f"{outcome.summary.name}: {outcome.summary.page_count} pages")
    if outcome.approximate_pagination:
        print("WARNING: table of contents page numbers may be off by one page")
    for error in outcome.errors:
        print(f"  Placeholder used for {error}")
    print("Contents:")
    for entry in outcome.toc_entries:
        print(f"  [{entry.page:>3}] {entry.number}. {entry.title} ({entry.author})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
