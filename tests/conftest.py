import sys
from pathlib import Path

import fitz  # PyMuPDF
import pytest

# Ensure project root is on sys.path so `import dhtracker...` works when running pytest from repo root
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))


def write_pdf(fp: Path, pages):
    """Write a PDF with one page per entry of ``pages``; each entry is a list of text lines."""
    doc = fitz.open()
    for lines in pages:
        page = doc.new_page()
        y = 72
        for ln in lines:
            page.insert_text((36, y), ln, fontsize=8)
            y += 14
    doc.save(str(fp))
    doc.close()
    return fp


@pytest.fixture
def make_pdf(tmp_path):
    def _make(name, pages, directory=None):
        d = Path(directory) if directory else tmp_path
        d.mkdir(parents=True, exist_ok=True)
        return write_pdf(d / name, pages)
    return _make


@pytest.fixture
def inbox(tmp_path):
    d = tmp_path / "labs" / "inbox"
    d.mkdir(parents=True)
    return d
