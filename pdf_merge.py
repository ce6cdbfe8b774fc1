"""pdf_merge.py — Concatenate rendered parts into one PDF through an ordered fallback chain."""

import io
import shutil
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

import fitz  # pymupdf

from footer import stamp
from layout import SAVE_OPTIONS, page_count_of
from models import Part

MERGE_TIMEOUT_S = 120


class MergeChainExhausted(RuntimeError):
    """Every merge strategy failed. `attempts` holds (strategy name, cause) pairs."""

    def __init__(self, attempts: list[tuple[str, str]]):
        self.attempts = attempts
        details = "; ".join(f"{name}: {cause}" for name, cause in attempts)
        super().__init__(f"All merge strategies failed ({details})")


@dataclass(frozen=True)
class MergeStrategy:
    name: str
    run: Callable[[list[bytes], Path], bytes]


def _run(cmd: list[str], desc: str = "") -> None:
    """Run a subprocess command, raising on non-zero exit."""
    result = subprocess.run(cmd, capture_output=True, text=True, timeout=MERGE_TIMEOUT_S)
    if result.returncode != 0:
        raise RuntimeError(
            f"Command failed ({desc}): {' '.join(cmd)}\n"
            f"stderr: {result.stderr[-2000:]}"
        )


def _write_inputs(pdfs: list[bytes], work_dir: Path) -> list[Path]:
    paths = []
    for i, data in enumerate(pdfs):
        path = work_dir / f"part{i:03d}.pdf"
        path.write_bytes(data)
        paths.append(path)
    return paths


def merge_with_pymupdf(pdfs: list[bytes], work_dir: Path) -> bytes:
    with fitz.open() as out:
        for data in pdfs:
            with fitz.open(stream=data, filetype="pdf") as src:
                out.insert_pdf(src)
        return out.tobytes(**SAVE_OPTIONS)


def merge_with_pypdf(pdfs: list[bytes], work_dir: Path) -> bytes:
    from pypdf import PdfReader, PdfWriter

    writer = PdfWriter()
    for data in pdfs:
        writer.append(PdfReader(io.BytesIO(data)))
    buffer = io.BytesIO()
    writer.write(buffer)
    writer.close()
    return buffer.getvalue()


def _merge_with_tool(binary: str, build_cmd, pdfs: list[bytes], work_dir: Path) -> bytes:
    if not shutil.which(binary):
        raise RuntimeError(f"{binary} not installed")
    with tempfile.TemporaryDirectory(dir=work_dir, prefix=f"{binary}-") as tmp:
        tmp = Path(tmp)
        inputs = _write_inputs(pdfs, tmp)
        output = tmp / "merged.pdf"
        _run(build_cmd(inputs, output), desc=f"merge with {binary}")
        return output.read_bytes()


def merge_with_pdfunite(pdfs: list[bytes], work_dir: Path) -> bytes:
    return _merge_with_tool(
        "pdfunite",
        lambda inputs, output: ["pdfunite", *map(str, inputs), str(output)],
        pdfs, work_dir,
    )


def merge_with_pdftk(pdfs: list[bytes], work_dir: Path) -> bytes:
    return _merge_with_tool(
        "pdftk",
        lambda inputs, output: ["pdftk", *map(str, inputs), "cat", "output", str(output)],
        pdfs, work_dir,
    )


DEFAULT_STRATEGIES = (
    MergeStrategy("pymupdf", merge_with_pymupdf),
    MergeStrategy("pypdf", merge_with_pypdf),
    MergeStrategy("pdfunite", merge_with_pdfunite),
    MergeStrategy("pdftk", merge_with_pdftk),
)


def concatenate(
    pdfs: list[bytes],
    work_dir: Path,
    expected_pages: int,
    strategies=DEFAULT_STRATEGIES,
    verbose: bool = True,
) -> tuple[bytes, str]:
    """
    Try each strategy in order; return (merged bytes, strategy name) from the
    first one whose output has exactly `expected_pages` pages. Raises
    MergeChainExhausted with every cause when none succeeds.
    """
    attempts = []
    for strategy in strategies:
        try:
            merged = strategy.run(pdfs, work_dir)
            got = page_count_of(merged)
            if got != expected_pages:
                raise RuntimeError(f"produced {got} pages, expected {expected_pages}")
        except Exception as e:
            attempts.append((strategy.name, str(e).splitlines()[0] if str(e) else type(e).__name__))
            if verbose:
                print(f"  Merge via {strategy.name} failed: {attempts[-1][1]}")
            continue
        return merged, strategy.name
    raise MergeChainExhausted(attempts)


def merge(
    parts: list[Part],
    work_dir: Path,
    title: str,
    skip_leading_pages: int,
    strategies=DEFAULT_STRATEGIES,
    font_file: str | None = None,
    verbose: bool = True,
) -> bytes:
    """
    Concatenate parts in ordinal order, then stamp footers once on the result.
    A single part skips concatenation and is only stamped.
    """
    if not parts:
        raise ValueError("Nothing to merge")
    ordered = sorted(parts, key=lambda p: p.ordinal)
    for prev, cur in zip(ordered, ordered[1:]):
        if prev.ordinal == cur.ordinal:
            raise ValueError(f"Duplicate part ordinal {cur.ordinal}")
    for part in ordered:
        if part.page_count is None:
            raise ValueError(f"{part.kind} part #{part.ordinal} has not been rendered")

    if len(ordered) == 1:
        combined = ordered[0].pdf_bytes
    else:
        expected = sum(p.page_count for p in ordered)
        combined, used = concatenate(
            [p.pdf_bytes for p in ordered], Path(work_dir), expected, strategies, verbose
        )
        if verbose:
            print(f"  Merged {len(ordered)} parts ({expected} pages) via {used}")
    return stamp(combined, skip_leading_pages, title, font_file=font_file)
