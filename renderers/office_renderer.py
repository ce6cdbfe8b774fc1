"""renderers/office_renderer.py — Convert word-processor files to PDF with headless LibreOffice."""

import shutil
import subprocess
from pathlib import Path

from models import RenderResult
from renderers.base import RenderError, RendererUnavailableError, result_from_pdf

CONVERT_TIMEOUT_S = 60
LIBREOFFICE_BINARIES = ("soffice", "libreoffice")


def find_libreoffice() -> str | None:
    """Return the first LibreOffice executable on PATH, or None."""
    for name in LIBREOFFICE_BINARIES:
        path = shutil.which(name)
        if path:
            return path
    return None


def check_libreoffice() -> bool:
    return find_libreoffice() is not None


def render_office(file_path: Path, out_dir: Path) -> RenderResult:
    """
    Convert a .docx/.doc/.odt/.rtf file to PDF inside out_dir.
    A missing LibreOffice or a timeout is retryable; a failed conversion is not.
    """
    file_path = Path(file_path)
    out_dir = Path(out_dir)
    binary = find_libreoffice()
    if binary is None:
        raise RendererUnavailableError(
            "LibreOffice not found (install it: apt install libreoffice)",
            source=str(file_path),
        )

    out_dir.mkdir(parents=True, exist_ok=True)
    # A private profile dir lets several conversions run at once
    profile_dir = out_dir / ".lo-profile"
    cmd = [
        binary,
        f"-env:UserInstallation={profile_dir.resolve().as_uri()}",
        "--headless",
        "--convert-to", "pdf",
        "--outdir", str(out_dir),
        str(file_path),
    ]
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=CONVERT_TIMEOUT_S)
    except subprocess.TimeoutExpired as e:
        raise RendererUnavailableError(
            f"LibreOffice timed out after {CONVERT_TIMEOUT_S}s", source=str(file_path)
        ) from e

    pdf_path = out_dir / f"{file_path.stem}.pdf"
    if result.returncode != 0 or not pdf_path.exists():
        raise RenderError(
            f"Conversion failed: {' '.join(cmd)}\n"
            f"stderr: {result.stderr[-2000:]}",
            source=str(file_path),
        )
    return result_from_pdf(pdf_path.read_bytes(), source=str(file_path))
