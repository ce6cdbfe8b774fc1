"""renderers/text_renderer.py — Typeset plain text, Markdown and HTML sources with pymupdf."""

from pathlib import Path

import fitz  # pymupdf
from bs4 import BeautifulSoup

from layout import (
    CONTENT_BOTTOM,
    CONTENT_WIDTH,
    MARGIN_LEFT,
    MARGIN_TOP,
    SAVE_OPTIONS,
    load_font,
    new_page,
    write_line,
)
from models import RenderResult
from renderers.base import FITZ_LOCK, RenderError, clean_text

BODY_SIZE = 11
LINE_HEIGHT = 16
PARAGRAPH_GAP = 8


def _read_source(file_path: Path) -> str:
    raw = file_path.read_text(encoding="utf-8")
    if file_path.suffix.lower() in (".html", ".htm"):
        soup = BeautifulSoup(raw, "html.parser")
        for tag in soup(["script", "style"]):
            tag.decompose()
        for br in soup.find_all("br"):
            br.replace_with("\n")
        blocks = [el.get_text(" ", strip=True) for el in soup.find_all(["h1", "h2", "h3", "p", "li"])]
        raw = "\n\n".join(b for b in blocks if b) or soup.get_text("\n")
    return clean_text(raw)


def wrap_paragraph(text: str, font: fitz.Font, fontsize: float, max_width: float) -> list[str]:
    """Greedy word wrap. A single word wider than the line is hard-split."""
    lines = []
    current = ""
    for word in text.split():
        candidate = f"{current} {word}" if current else word
        if font.text_length(candidate, fontsize=fontsize) <= max_width:
            current = candidate
            continue
        if current:
            lines.append(current)
        while font.text_length(word, fontsize=fontsize) > max_width:
            cut = len(word)
            while cut > 1 and font.text_length(word[:cut], fontsize=fontsize) > max_width:
                cut -= 1
            lines.append(word[:cut])
            word = word[cut:]
        current = word
    if current:
        lines.append(current)
    return lines


def typeset_text(text: str, font_file: str | None = None) -> bytes:
    """Lay out text on A4 pages. A form feed starts a new page."""
    font = load_font(font_file)
    doc = fitz.open()
    for page_text in text.split("\f"):
        page = new_page(doc)
        y = MARGIN_TOP
        for paragraph in page_text.split("\n\n"):
            for line in wrap_paragraph(paragraph.replace("\n", " "), font, BODY_SIZE, CONTENT_WIDTH):
                if y + LINE_HEIGHT > CONTENT_BOTTOM:
                    page = new_page(doc)
                    y = MARGIN_TOP
                write_line(page, line, MARGIN_LEFT, y + BODY_SIZE, font, BODY_SIZE)
                y += LINE_HEIGHT
            y += PARAGRAPH_GAP
    pdf_bytes = doc.tobytes(**SAVE_OPTIONS)
    doc.close()
    return pdf_bytes


def render_text(file_path: Path, out_dir: Path | None = None) -> RenderResult:
    file_path = Path(file_path)
    try:
        text = _read_source(file_path)
    except (OSError, UnicodeDecodeError) as e:
        raise RenderError(f"Cannot read {file_path}: {e}", source=str(file_path)) from e
    with FITZ_LOCK:
        pdf_bytes = typeset_text(text)
        with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
            page_count = doc.page_count
    return RenderResult(page_count=page_count, pdf_bytes=pdf_bytes)
