"""Tests for the document renderers (renderers/)."""

import pytest

from conftest import page_texts
from renderers import (
    RenderError,
    RendererUnavailableError,
    UnsupportedFormatError,
    render_file,
)
from renderers.base import clean_text
from renderers.office_renderer import render_office
from renderers.placeholder import render_placeholder


class TestDispatch:
    def test_pdf_passthrough(self, make_pdf, tmp_path):
        source = make_pdf("paper.pdf", 3)
        result = render_file(source, tmp_path / "out")
        assert result.page_count == 3
        assert result.pdf_bytes == source.read_bytes()
        assert not result.placeholder

    def test_unsupported_format_is_fatal(self, tmp_path):
        source = tmp_path / "paper.pages"
        source.write_text("x")
        with pytest.raises(UnsupportedFormatError) as excinfo:
            render_file(source, tmp_path)
        assert not excinfo.value.retryable

    def test_missing_source(self, tmp_path):
        with pytest.raises(RenderError):
            render_file(tmp_path / "absent.pdf", tmp_path)

    def test_corrupt_pdf(self, tmp_path):
        source = tmp_path / "bad.pdf"
        source.write_bytes(b"")
        with pytest.raises(RenderError):
            render_file(source, tmp_path)


class TestTextRenderer:
    def test_plain_text(self, tmp_path):
        source = tmp_path / "note.txt"
        source.write_text("First paragraph here.\n\nSecond paragraph.", encoding="utf-8")
        result = render_file(source, tmp_path)
        assert result.page_count == 1
        text = page_texts(result.pdf_bytes)[0]
        assert "First paragraph here." in text and "Second paragraph." in text

    def test_form_feed_breaks_page(self, tmp_path):
        source = tmp_path / "two.md"
        source.write_text("Page one\fPage two", encoding="utf-8")
        assert render_file(source, tmp_path).page_count == 2

    def test_long_text_flows_onto_more_pages(self, tmp_path):
        source = tmp_path / "long.txt"
        source.write_text("\n\n".join(f"Paragraph {i} " + "word " * 40 for i in range(80)),
                          encoding="utf-8")
        assert render_file(source, tmp_path).page_count > 1

    def test_html_is_reduced_to_text(self, tmp_path):
        source = tmp_path / "page.html"
        source.write_text("<html><head><style>p{}</style></head><body><h1>Heading</h1>"
                          "<p>Body text</p><script>alert(1)</script></body></html>", encoding="utf-8")
        text = page_texts(render_file(source, tmp_path).pdf_bytes)[0]
        assert "Heading" in text and "Body text" in text
        assert "alert" not in text


class TestOfficeRenderer:
    def test_missing_libreoffice_is_retryable(self, tmp_path, monkeypatch):
        monkeypatch.setattr("renderers.office_renderer.find_libreoffice", lambda: None)
        source = tmp_path / "paper.docx"
        source.write_bytes(b"PK")
        with pytest.raises(RendererUnavailableError) as excinfo:
            render_office(source, tmp_path)
        assert excinfo.value.retryable

    def test_availability_check(self, monkeypatch):
        from renderers.office_renderer import check_libreoffice

        monkeypatch.setattr("renderers.office_renderer.find_libreoffice", lambda: None)
        assert not check_libreoffice()
        monkeypatch.setattr("renderers.office_renderer.find_libreoffice", lambda: "/usr/bin/soffice")
        assert check_libreoffice()


class TestPlaceholder:
    def test_single_labelled_page(self):
        result = render_placeholder("article 'Broken'", "Unsupported file format: '.xyz'")
        assert result.placeholder
        assert result.page_count == 1
        text = page_texts(result.pdf_bytes)[0]
        assert "MISSING CONTENT" in text and "Broken" in text


class TestCleanText:
    def test_collapses_whitespace_and_blank_lines(self):
        assert clean_text("a  b\n\n\n\nc") == "a b\n\nc"

    def test_keeps_form_feeds(self):
        assert clean_text("one \f two") == "one\ftwo"

    def test_unescapes_entities(self):
        assert clean_text("Tom &amp; Jerry") == "Tom & Jerry"
