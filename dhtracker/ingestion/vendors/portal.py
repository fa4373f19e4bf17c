"""
Patient-portal "Lab Results" export.

After text extraction each page is one long line. A page header carries the
report date and every result follows the same token sequence:

    Status: Final Lab Results Jan 19, 2026 08:59 AM ...
    Test Name Platelets Result 340 x10**9/L Reference Range (Units) 140-400 (x10**9/L)
    Abnormality - Test Name ...

Columns reflow freely between exports, so everything here matches on labels
rather than on position.
"""
import logging
import re
from functools import lru_cache
from typing import List, Optional, Sequence, Tuple

from dhtracker.constants import TRACKED_TESTS
from dhtracker.ingestion.model import MeasurementPoint, PageContext, ParsedResult
from .utils import MONTHS, clean_abnormality, is_critical, parse_number, parse_ref_range, to_iso

logger = logging.getLogger(__name__)

RESULT_MARKER = "Test Name"

header_date_re = re.compile(
    r"Status:\s*Final\s+(?:Lab\s+Results\s+)?"
    r"([A-Za-z]{3})\s+(\d{1,2}),\s*(\d{4})\s+\d{1,2}:\d{2}\s*(?:AM|PM)\b",
    re.IGNORECASE,
)

# A result segment ends at the next result, the next panel header, a footer
# line, a page marker or end of text.
SEGMENT_END = (
    r"(?=\s*(?:\bTest\s+Name\b|\b(?i:Status:\s*Final)\b|\bPrinted\s+(?:on|by)\b"
    r"|\bReport\s+Request\s+ID\b|\bPage\s+\d+\s+of\s+\d+\b|$))"
)

value_units_re = re.compile(r"([0-9.]+)(?:\s+(\S+))?")
# The range token may be split by reflow ("140 - 400", "< 16.0"); it runs up to the "(units)" echo.
ref_range_re = re.compile(r"Reference\s+Range\s*\(Units\)\s*(.+?)\s*(?:\(|\bAbnormality\b|$)")
abnormality_re = re.compile(r"\bAbnormality\b\s*(.*)$", re.DOTALL)
BODY_LABELS = {"Reference", "Abnormality"}


def resolve_report_date(text: str) -> Optional[str]:
    """Return the page's report date as YYYY-MM-DD, or None when there is no usable header."""
    m = header_date_re.search(text or "")
    if not m:
        return None
    mon = MONTHS.get(m.group(1).lower())
    if mon is None:
        return None
    return to_iso(int(m.group(3)), mon, int(m.group(2)))


@lru_cache(maxsize=None)
def result_pattern(label: str) -> "re.Pattern[str]":
    """Compile the segment pattern for one test label.

    The label is matched literally; whitespace inside it matches any run of
    whitespace so that reflowed text still lines up.
    """
    label_re = r"\s+".join(re.escape(part) for part in label.split())
    return re.compile(
        rf"\bTest\s+Name\s+{label_re}\s+Result\s+(?P<body>.*?){SEGMENT_END}",
        re.DOTALL,
    )


def _parse_body(body: str) -> Optional[ParsedResult]:
    m = value_units_re.match(body)
    if not m:
        return None
    value = parse_number(m.group(1))
    if value is None:
        return None
    units = m.group(2) or ""
    if units in BODY_LABELS:
        units = ""

    ref_low: Optional[float] = None
    ref_high: Optional[float] = None
    rm = ref_range_re.search(body)
    if rm:
        ref_low, ref_high = parse_ref_range(rm.group(1))

    abnormality = None
    am = abnormality_re.search(body)
    if am:
        abnormality = clean_abnormality(am.group(1))

    return ParsedResult(
        value=value,
        units=units,
        ref_low=ref_low,
        ref_high=ref_high,
        abnormality=abnormality,
        is_critical=is_critical(abnormality),
    )


def parse_result(text: str, label: str) -> Optional[ParsedResult]:
    """Find the first result for ``label`` on a page and parse it; None if absent or unusable."""
    if not text or not label.strip():
        return None
    m = result_pattern(label).search(text)
    if not m:
        return None
    return _parse_body(m.group("body").strip())


def extract_points(
    pages: Sequence[str],
    source: str,
    tracked: Sequence[Tuple[str, str]] = TRACKED_TESTS,
) -> List[MeasurementPoint]:
    """Parse one document's page texts into dated points.

    The last header date seen is carried forward to later pages without a
    header. Pages before the first header, and pages without any result
    marker, produce nothing.
    """
    ctx = PageContext(source=source)
    out: List[MeasurementPoint] = []

    for pi, text in enumerate(pages, start=1):
        ctx.pages_seen += 1
        found = resolve_report_date(text)
        if found:
            ctx.current_date = found

        if RESULT_MARKER not in text:
            ctx.pages_skipped += 1
            continue
        if ctx.current_date is None:
            logger.debug(f"{source} p{pi}: results before any report date, skipping page")
            ctx.pages_skipped += 1
            continue

        for label, name in tracked:
            res = parse_result(text, label)
            if res is None:
                continue
            out.append(MeasurementPoint.from_result(name, ctx.current_date, ctx.source, res))

    logger.info(
        f"{source}: {len(out)} points from {ctx.pages_seen} pages ({ctx.pages_skipped} skipped)"
    )
    return out
