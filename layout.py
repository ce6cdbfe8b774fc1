"""layout.py — Page geometry and text-fitting helpers shared by the PDF writers."""

import os
from pathlib import Path

import fitz  # pymupdf

MM = 72 / 25.4

# A4 portrait, in points
PAGE_WIDTH = 595.28
PAGE_HEIGHT = 841.89
MARGIN_LEFT = 20 * MM
MARGIN_RIGHT = 20 * MM
MARGIN_TOP = 25 * MM
MARGIN_BOTTOM = 25 * MM
CONTENT_WIDTH = PAGE_WIDTH - MARGIN_LEFT - MARGIN_RIGHT
CONTENT_BOTTOM = PAGE_HEIGHT - MARGIN_BOTTOM

ELLIPSIS = "…"
GREY = (0.4, 0.4, 0.4)
BLACK = (0, 0, 0)

# Name under which the generated-page font is embedded on rotated pages
ROTATED_FONT_NAME = "ibfont"

# Saved this way so that identical input gives identical bytes.
SAVE_OPTIONS = {"garbage": 3, "deflate": True, "no_new_id": True}


def load_font(font_file: str | Path | None = None) -> fitz.Font:
    """
    Font used for generated pages. The built-in Helvetica covers Latin text;
    point ISSUEBIND_FONT_FILE at a TTF for full Cyrillic/Kazakh coverage.
    """
    font_file = font_file or os.getenv("ISSUEBIND_FONT_FILE", "").strip() or None
    if font_file:
        path = Path(font_file)
        if not path.exists():
            raise FileNotFoundError(f"Font file not found: {path}")
        return fitz.Font(fontfile=str(path))
    return fitz.Font("helv")


def fit_text(text: str, font: fitz.Font, fontsize: float, max_width: float) -> str:
    """Return `text`, truncated with an ellipsis if wider than max_width."""
    text = " ".join((text or "").split())
    if font.text_length(text, fontsize=fontsize) <= max_width:
        return text
    budget = max_width - font.text_length(ELLIPSIS, fontsize=fontsize)
    cut = len(text)
    while cut > 0 and font.text_length(text[:cut], fontsize=fontsize) > budget:
        cut -= 1
    return text[:cut].rstrip() + ELLIPSIS


def write_line(
    page: fitz.Page,
    text: str,
    x: float,
    baseline: float,
    font: fitz.Font,
    fontsize: float,
    color=BLACK,
    align: str = "left",
) -> None:
    """
    Write one line of text; `x` is the left edge, right edge or centre per `align`.
    Coordinates are in the displayed frame, so rotated pages get upright text.
    """
    width = font.text_length(text, fontsize=fontsize)
    if align == "right":
        x -= width
    elif align == "center":
        x -= width / 2
    if page.rotation:
        # insert_text draws in unrotated coordinates
        page.insert_font(fontname=ROTATED_FONT_NAME, fontbuffer=font.buffer)
        page.insert_text(
            fitz.Point(x, baseline) * page.derotation_matrix,
            text,
            fontsize=fontsize,
            fontname=ROTATED_FONT_NAME,
            color=color,
            rotate=page.rotation,
        )
        return
    writer = fitz.TextWriter(page.rect)
    writer.append((x, baseline), text, font=font, fontsize=fontsize)
    writer.write_text(page, color=color)


def draw_rule(page: fitz.Page, start, end, color=GREY, width: float = 0.5) -> None:
    """Draw a straight line given in the displayed frame."""
    start, end = fitz.Point(start), fitz.Point(end)
    if page.rotation:
        start, end = start * page.derotation_matrix, end * page.derotation_matrix
    page.draw_line(start, end, color=color, width=width)


def new_page(doc: fitz.Document) -> fitz.Page:
    return doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)


def page_count_of(pdf_bytes: bytes) -> int:
    with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
        return doc.page_count
