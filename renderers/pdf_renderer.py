"""renderers/pdf_renderer.py — PDF sources pass through unchanged after validation."""

from pathlib import Path

from models import RenderResult
from renderers.base import RenderError, result_from_pdf


def render_pdf(file_path: Path, out_dir: Path | None = None) -> RenderResult:
    file_path = Path(file_path)
    try:
        pdf_bytes = file_path.read_bytes()
    except OSError as e:
        raise RenderError(f"Cannot read {file_path}: {e}", source=str(file_path)) from e
    return result_from_pdf(pdf_bytes, source=str(file_path))
