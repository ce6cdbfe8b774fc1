"""renderers/base.py — Shared renderer errors, locking and text cleanup."""

import html
import re
import threading

from models import RenderResult

# MuPDF contexts are not thread-safe; renders run on a thread pool, so every
# pymupdf call made by a renderer holds this lock. Subprocess work does not.
FITZ_LOCK = threading.Lock()


class RenderError(RuntimeError):
    """A source could not be turned into PDF pages."""

    retryable = False

    def __init__(self, message: str, source: str = ""):
        super().__init__(message)
        self.source = source


class UnsupportedFormatError(RenderError):
    """The source format can never be rendered. Fatal."""

    retryable = False


class RendererUnavailableError(RenderError):
    """The rendering tool is missing or timed out. Trying again later may work."""

    retryable = True


def result_from_pdf(pdf_bytes: bytes, source: str = "") -> RenderResult:
    """Validate PDF bytes and count their pages."""
    import fitz  # pymupdf

    with FITZ_LOCK:
        try:
            doc = fitz.open(stream=pdf_bytes, filetype="pdf")
        except (RuntimeError, ValueError) as e:
            raise RenderError(f"Not a readable PDF: {e}", source=source) from e
        with doc:
            page_count = doc.page_count
    if page_count < 1:
        raise RenderError("PDF has no pages", source=source)
    return RenderResult(page_count=page_count, pdf_bytes=pdf_bytes)


def clean_text(text: str) -> str:
    """Normalize whitespace and typographic entities; keeps form feeds as page breaks."""
    text = html.unescape(text)
    text = text.replace("\u00ad", "")
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    pages = []
    for chunk in text.split("\f"):
        lines = [re.sub(r"[ \t]+", " ", line).strip() for line in chunk.split("\n")]
        cleaned_lines = []
        prev_blank = False
        for line in lines:
            if not line:
                if not prev_blank:
                    cleaned_lines.append("")
                prev_blank = True
            else:
                cleaned_lines.append(line)
                prev_blank = False
        pages.append("\n".join(cleaned_lines).strip())
    return "\f".join(pages)
