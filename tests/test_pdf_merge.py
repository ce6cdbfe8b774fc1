"""Tests for the merge fallback chain (pdf_merge.py)."""

import fitz  # pymupdf
import pytest

from conftest import page_texts, pdf_bytes
from models import Part
from pdf_merge import (
    DEFAULT_STRATEGIES,
    MergeChainExhausted,
    MergeStrategy,
    concatenate,
    merge,
    merge_with_pymupdf,
    merge_with_pypdf,
)


def _part(kind: str, ordinal: int, pages: int, label: str) -> Part:
    part = Part(kind=kind, ordinal=ordinal, pdf_bytes=pdf_bytes(pages, label))
    part.page_count = pages
    return part


def _failing(name: str):
    def _run(pdfs, work_dir):
        raise RuntimeError(f"{name} is broken")
    return MergeStrategy(name, _run)


def _parts() -> list[Part]:
    return [
        _part("cover", 0, 1, "cover"),
        _part("description", 1, 2, "desc"),
        _part("article", 2, 3, "art"),
        _part("final", 3, 1, "final"),
    ]


class TestStrategies:
    @pytest.mark.parametrize("strategy", [merge_with_pymupdf, merge_with_pypdf])
    def test_library_strategies_concatenate(self, strategy, tmp_path):
        merged = strategy([pdf_bytes(2, "a"), pdf_bytes(3, "b")], tmp_path)
        texts = page_texts(merged)
        assert len(texts) == 5
        assert "a 1" in texts[0] and "b 3" in texts[4]

    def test_default_chain_order(self):
        assert [s.name for s in DEFAULT_STRATEGIES] == ["pymupdf", "pypdf", "pdfunite", "pdftk"]


class TestConcatenate:
    def test_first_success_wins(self, tmp_path):
        merged, used = concatenate([pdf_bytes(1), pdf_bytes(1)], tmp_path, 2, verbose=False)
        assert used == "pymupdf"

    def test_primary_failure_falls_through(self, tmp_path):
        chain = (_failing("primary"), MergeStrategy("pypdf", merge_with_pypdf))
        merged, used = concatenate([pdf_bytes(2), pdf_bytes(4)], tmp_path, 6, chain, verbose=False)
        assert used == "pypdf"
        with fitz.open(stream=merged, filetype="pdf") as doc:
            assert doc.page_count == 6

    def test_wrong_page_count_counts_as_failure(self, tmp_path):
        short = MergeStrategy("short", lambda pdfs, work_dir: pdfs[0])
        chain = (short, MergeStrategy("pymupdf", merge_with_pymupdf))
        _, used = concatenate([pdf_bytes(1), pdf_bytes(1)], tmp_path, 2, chain, verbose=False)
        assert used == "pymupdf"

    def test_exhaustion_reports_every_cause(self, tmp_path):
        chain = (_failing("one"), _failing("two"))
        with pytest.raises(MergeChainExhausted) as excinfo:
            concatenate([pdf_bytes(1), pdf_bytes(1)], tmp_path, 2, chain, verbose=False)
        assert [name for name, _ in excinfo.value.attempts] == ["one", "two"]
        assert "two is broken" in str(excinfo.value)


class TestMerge:
    def test_ordinal_order_and_total_pages(self, tmp_path):
        parts = _parts()
        merged = merge(list(reversed(parts)), tmp_path, title="Vestnik", skip_leading_pages=3,
                       verbose=False)
        texts = page_texts(merged)
        assert len(texts) == sum(p.page_count for p in parts)
        assert "cover 1" in texts[0]
        assert "desc 2" in texts[2]
        assert "art 1" in texts[3]
        assert "final 1" in texts[6]

    def test_fallback_produces_same_concatenation(self, tmp_path):
        chain = (_failing("pymupdf"), MergeStrategy("pypdf", merge_with_pypdf))
        merged = merge(_parts(), tmp_path, title="Vestnik", skip_leading_pages=3,
                       strategies=chain, verbose=False)
        texts = page_texts(merged)
        assert len(texts) == 7
        assert "art 3" in texts[5]

    def test_footers_stamped_once_on_the_whole(self, tmp_path):
        merged = merge(_parts(), tmp_path, title="Vestnik", skip_leading_pages=3, verbose=False)
        texts = page_texts(merged)
        assert all("Vestnik" not in t for t in texts[:3])
        assert all(t.count("Vestnik") == 1 for t in texts[3:])

    def test_single_part_is_only_stamped(self, tmp_path):
        chain = (_failing("everything"),)
        merged = merge([_part("article", 0, 2, "solo")], tmp_path, title="Vestnik",
                       skip_leading_pages=0, strategies=chain, verbose=False)
        texts = page_texts(merged)
        assert len(texts) == 2
        assert "Vestnik" in texts[0]

    def test_unrendered_part_rejected(self, tmp_path):
        with pytest.raises(ValueError):
            merge([Part(kind="cover", ordinal=0)], tmp_path, "T", 0, verbose=False)

    def test_duplicate_ordinals_rejected(self, tmp_path):
        parts = [_part("cover", 0, 1, "a"), _part("final", 0, 1, "b")]
        with pytest.raises(ValueError):
            merge(parts, tmp_path, "T", 0, verbose=False)

    def test_empty_rejected(self, tmp_path):
        with pytest.raises(ValueError):
            merge([], tmp_path, "T", 0, verbose=False)


class TestPart:
    def test_page_count_set_once(self):
        part = Part(kind="article", ordinal=0)
        part.page_count = 2
        with pytest.raises(ValueError):
            part.page_count = 3

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            Part(kind="appendix", ordinal=0)
