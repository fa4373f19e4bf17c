#!/usr/bin/env python3
"""
Print the flattened text of a few PDF pages, exactly as the importer sees it.

Usage:
  python scripts/pdf_dump.py [PDF] [START_PAGE] [COUNT]
"""
import argparse
import os
import sys
from pathlib import Path

import fitz  # PyMuPDF

# Ensure repo root is importable when running directly
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from dhtracker.constants import INBOX_DIR
from dhtracker.ingestion.utils_pdf import page_text
from dhtracker.ingestion.vendors.portal import resolve_report_date


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Dump flattened PDF page text")
    parser.add_argument("pdf", nargs="?", default=os.path.join(INBOX_DIR, "labs.pdf"))
    parser.add_argument("start", nargs="?", type=int, default=1)
    parser.add_argument("count", nargs="?", type=int, default=3)
    args = parser.parse_args(argv)
    pdf_path = args.pdf
    start = max(1, args.start)
    count = args.count

    if not os.path.exists(pdf_path):
        print("Missing PDF:", pdf_path, file=sys.stderr)
        return 2

    with fitz.open(pdf_path) as doc:
        end = min(doc.page_count, start + count - 1)
        print(f"PDF: {pdf_path}")
        print(f"Pages: {doc.page_count}")
        print(f"Dumping pages {start}..{end}")

        for p in range(start, end + 1):
            text = page_text(doc[p - 1])
            print("\n" + "=" * 80)
            print(f"PAGE {p}  (report date: {resolve_report_date(text) or '-'})")
            print("=" * 80)
            print(text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
