"""renderers/ — Turn uploaded sources into page-counted PDF units."""

from pathlib import Path

from models import RenderResult
from renderers.base import (
    RenderError,
    RendererUnavailableError,
    UnsupportedFormatError,
)

PDF_EXTENSIONS = {".pdf"}
OFFICE_EXTENSIONS = {".docx", ".doc", ".odt", ".rtf"}
TEXT_EXTENSIONS = {".txt", ".md", ".markdown", ".html", ".htm"}
SUPPORTED_EXTENSIONS = PDF_EXTENSIONS | OFFICE_EXTENSIONS | TEXT_EXTENSIONS

__all__ = [
    "RenderError",
    "RendererUnavailableError",
    "UnsupportedFormatError",
    "SUPPORTED_EXTENSIONS",
    "render_file",
]


def render_file(file_path: Path, out_dir: Path) -> RenderResult:
    """Dispatch to the appropriate renderer based on file extension."""
    file_path = Path(file_path)
    suffix = file_path.suffix.lower()

    if not file_path.exists():
        raise RenderError(f"Source not found: {file_path}", source=str(file_path))

    if suffix in PDF_EXTENSIONS:
        from renderers.pdf_renderer import render_pdf
        return render_pdf(file_path, out_dir)
    elif suffix in OFFICE_EXTENSIONS:
        from renderers.office_renderer import render_office
        return render_office(file_path, out_dir)
    elif suffix in TEXT_EXTENSIONS:
        from renderers.text_renderer import render_text
        return render_text(file_path, out_dir)
    else:
        raise UnsupportedFormatError(
            f"Unsupported file format: '{suffix}'. "
            f"Supported: {', '.join(sorted(SUPPORTED_EXTENSIONS))}",
            source=str(file_path),
        )
