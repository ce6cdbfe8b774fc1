"""footer.py — Stamp the alternating running footer and page numbers onto a merged issue."""

import fitz  # pymupdf

from layout import (
    CONTENT_WIDTH,
    GREY,
    MARGIN_LEFT,
    MARGIN_RIGHT,
    SAVE_OPTIONS,
    draw_rule,
    fit_text,
    load_font,
    write_line,
)

FOOTER_SIZE = 9
FOOTER_BASELINE_FROM_BOTTOM = 30
RULE_GAP = 12
RULE_WIDTH = 0.5


def footer_text(title: str, page_number: int) -> str:
    """Odd pages carry the number on the right, even pages on the left."""
    if page_number % 2:
        return f"{title} | {page_number}"
    return f"{page_number} | {title}"


def stamp(
    pdf_bytes: bytes,
    skip_leading_pages: int,
    title: str,
    font_file: str | None = None,
) -> bytes:
    """
    Add a footer and a thin rule above it to every page after the first
    `skip_leading_pages`. Purely additive: page content is never moved.
    Positions follow the displayed page, so rotated pages are stamped too.
    """
    if skip_leading_pages < 0:
        raise ValueError("skip_leading_pages cannot be negative")

    font = load_font(font_file)
    with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
        for index, page in enumerate(doc, start=1):
            if index <= skip_leading_pages:
                continue
            rect = page.rect
            left = rect.x0 + MARGIN_LEFT
            right = rect.x1 - MARGIN_RIGHT
            baseline = rect.y1 - FOOTER_BASELINE_FROM_BOTTOM
            rule_y = baseline - RULE_GAP

            # Leave room for the number and separator when shortening the title
            reserve = font.text_length(f"{index} | ", fontsize=FOOTER_SIZE)
            width = min(right - left, CONTENT_WIDTH) - reserve
            text = footer_text(fit_text(title, font, FOOTER_SIZE, width), index)

            draw_rule(page, (left, rule_y), (right, rule_y), color=GREY, width=RULE_WIDTH)
            if index % 2:
                write_line(page, text, right, baseline, font, FOOTER_SIZE, color=GREY, align="right")
            else:
                write_line(page, text, left, baseline, font, FOOTER_SIZE, color=GREY)
        return doc.tobytes(**SAVE_OPTIONS)
