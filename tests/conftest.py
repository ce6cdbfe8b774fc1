"""Shared fixtures: small PDFs fabricated with pymupdf."""

import sys
from pathlib import Path

import fitz  # pymupdf
import pytest

# Ensure the project root is importable without installation
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from layout import PAGE_HEIGHT, PAGE_WIDTH  # noqa: E402


def pdf_bytes(pages: int, label: str = "page") -> bytes:
    doc = fitz.open()
    for n in range(1, pages + 1):
        page = doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
        page.insert_text((72, 100), f"{label} {n}", fontsize=12)
    data = doc.tobytes()
    doc.close()
    return data


def page_texts(data: bytes) -> list[str]:
    with fitz.open(stream=data, filetype="pdf") as doc:
        return [page.get_text() for page in doc]


@pytest.fixture
def make_pdf(tmp_path):
    """Factory writing an n-page PDF to tmp_path and returning its path."""

    def _make(name: str, pages: int = 1, label: str | None = None) -> Path:
        path = tmp_path / name
        path.write_bytes(pdf_bytes(pages, label or path.stem))
        return path

    return _make
