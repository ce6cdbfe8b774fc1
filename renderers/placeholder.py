"""renderers/placeholder.py — One-page stand-in for a part that failed to render."""

import fitz  # pymupdf

from layout import (
    CONTENT_WIDTH,
    GREY,
    MARGIN_LEFT,
    MARGIN_TOP,
    PAGE_WIDTH,
    SAVE_OPTIONS,
    fit_text,
    load_font,
    new_page,
    write_line,
)
from models import RenderResult
from renderers.base import FITZ_LOCK

PLACEHOLDER_HEADING = "MISSING CONTENT"


def render_placeholder(label: str, reason: str = "", font_file: str | None = None) -> RenderResult:
    """Build a clearly labelled single page naming the part and why it is missing."""
    with FITZ_LOCK:
        font = load_font(font_file)
        doc = fitz.open()
        page = new_page(doc)
        y = MARGIN_TOP + 120
        write_line(page, PLACEHOLDER_HEADING, PAGE_WIDTH / 2, y, font, 20, align="center")
        y += 36
        write_line(page, fit_text(label, font, 13, CONTENT_WIDTH), PAGE_WIDTH / 2, y, font, 13,
                   align="center")
        if reason:
            y += 24
            first_line = reason.strip().splitlines()[0] if reason.strip() else ""
            write_line(page, fit_text(first_line, font, 10, CONTENT_WIDTH), MARGIN_LEFT, y,
                       font, 10, color=GREY)
        pdf_bytes = doc.tobytes(**SAVE_OPTIONS)
        doc.close()
    return RenderResult(page_count=1, pdf_bytes=pdf_bytes, placeholder=True)
