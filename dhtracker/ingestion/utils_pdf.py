import logging
from typing import Dict, List

import fitz  # PyMuPDF

logger = logging.getLogger(__name__)


class DocumentReadError(RuntimeError):
    """A PDF could not be opened or one of its pages could not be decoded."""


def page_text(page: fitz.Page) -> str:
    """Join every text span on the page with single spaces.

    Spans are trimmed individually and empty ones dropped. Line and column
    structure is not kept, so callers must not rely on it.
    """
    parts: List[str] = []
    d = page.get_text("dict")
    for b in d.get("blocks", []):
        for l in b.get("lines", []):
            for s in l.get("spans", []):
                txt = s.get("text", "").strip()
                if txt:
                    parts.append(txt)
    return " ".join(parts)


def extract_pdf_pages(pdf_path: str) -> List[Dict]:
    """Extract flattened text by page with basic metadata."""
    out = []
    try:
        with fitz.open(pdf_path) as doc:
            for i, page in enumerate(doc, start=1):
                out.append({"page": i, "text": page_text(page)})
    except (OSError, RuntimeError, ValueError) as e:
        raise DocumentReadError(f"Failed to read {pdf_path}: {e}") from e
    logger.debug(f"Extracted {len(out)} pages from {pdf_path}")
    return out
