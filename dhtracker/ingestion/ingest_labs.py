import argparse
import json
import logging
import os
import sys
import tempfile
from typing import Dict, List, Optional

from dotenv import load_dotenv
load_dotenv()

from dhtracker.constants import (
    BIOMARKERS_PATH,
    INBOX_DIR,
    LOG_LEVEL,
    PROCESSED_EXTS,
    SUPPORTED_EXTS,
    TRACKED_TESTS,
)
from dhtracker.ingestion.merge import build_series, merge_points
from dhtracker.ingestion.model import MeasurementPoint
from dhtracker.ingestion.utils_pdf import DocumentReadError, extract_pdf_pages
from dhtracker.ingestion.vendors import portal as v_portal

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_NO_INBOX = 2


class InboxNotFoundError(FileNotFoundError):
    pass


def scan_inbox(src: str) -> List[str]:
    """Return lab files directly under ``src`` (not recursive), sorted by name."""
    if not os.path.isdir(src):
        raise InboxNotFoundError(f"Missing inbox folder: {src}")
    files = [
        name for name in os.listdir(src)
        if name.lower().endswith(SUPPORTED_EXTS) and os.path.isfile(os.path.join(src, name))
    ]
    return sorted(files)


def parse_document(fp: str) -> List[MeasurementPoint]:
    pages = extract_pdf_pages(fp)
    return v_portal.extract_points([p["text"] for p in pages], os.path.basename(fp), TRACKED_TESTS)


def write_series(series: Dict, out_path: str):
    """Overwrite the artifact in one step so readers never see a partial file."""
    out_dir = os.path.dirname(os.path.abspath(out_path))
    os.makedirs(out_dir, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=out_dir, prefix=".biomarkers-", suffix=".json")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(series, f, indent=2)
            f.write("\n")
        os.replace(tmp, out_path)
    except BaseException:
        if os.path.exists(tmp):
            os.remove(tmp)
        raise


def main(src: str, out: str) -> Optional[int]:
    """Import every PDF in ``src`` and rewrite ``out``.

    Returns the number of points written, or None when the inbox holds no lab
    files (the existing artifact is left alone).
    """
    files = scan_inbox(src)
    if not files:
        logger.info(f"No lab files found in {src}. Drop PDF/CSV/HTML exports there, then rerun.")
        return None

    per_doc: List[List[MeasurementPoint]] = []
    for name in files:
        fp = os.path.join(src, name)
        if not name.lower().endswith(PROCESSED_EXTS):
            logger.warning(f"Skipping unsupported file type: {name}")
            continue
        logger.info(f"Parsing {name}")
        per_doc.append(parse_document(fp))

    points = merge_points(per_doc)
    write_series(build_series(points), out)
    logger.info(f"Wrote {len(points)} points from {len(per_doc)} documents to {out}")
    return len(points)


def cli(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Import lab report PDFs into the biomarker series")
    parser.add_argument("--src", default=INBOX_DIR)
    parser.add_argument("--out", default=BIOMARKERS_PATH)
    args = parser.parse_args(argv)

    logging.basicConfig(level=LOG_LEVEL, format="%(levelname)s %(name)s: %(message)s")
    try:
        main(args.src, args.out)
    except InboxNotFoundError as e:
        logger.error(str(e))
        return EXIT_NO_INBOX
    except DocumentReadError as e:
        logger.error(f"{e}. Nothing was written; fix or remove the file and rerun.")
        return EXIT_FAILED
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(cli())
