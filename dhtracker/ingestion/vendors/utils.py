import math
import re
from datetime import date
from typing import Optional, Tuple

MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}

# Placeholder shown in the Abnormality column when a result is in range.
# The mojibake variants come from en/em dashes decoded with the wrong codepage.
ABNORMALITY_PLACEHOLDERS = {"-", "--", "–", "—", "â€“", "â€”", "�"}

critical_re = re.compile(r"\bcritical\b", re.IGNORECASE)
value_re = re.compile(r"[0-9.]+")
range_re = re.compile(r"^([0-9.]+)\s*-\s*([0-9.]+)$")
upper_re = re.compile(r"^<=?\s*([0-9.]+)$")
lower_re = re.compile(r"^>=?\s*([0-9.]+)$")


def to_iso(y: int, m: int, d: int) -> Optional[str]:
    """Return YYYY-MM-DD, or None if the parts are not a real calendar date."""
    try:
        return date(y, m, d).isoformat()
    except ValueError:
        return None


def parse_number(tok: Optional[str]) -> Optional[float]:
    """Parse a plain decimal token (digits and dots only). Non-finite or malformed -> None."""
    if not tok or not value_re.fullmatch(tok):
        return None
    try:
        val = float(tok)
    except ValueError:
        return None
    return val if math.isfinite(val) else None


def parse_ref_range(token: Optional[str]) -> Tuple[Optional[float], Optional[float]]:
    """Parse a reference range token into (low, high).

    Accepts ``low-high``, ``<high``, ``<=high``, ``>low`` and ``>=low``. A bound
    that does not parse is left as None; any other shape gives (None, None).
    """
    if not token:
        return None, None
    t = token.strip().replace("–", "-").replace("—", "-")
    m = range_re.match(t)
    if m:
        return parse_number(m.group(1)), parse_number(m.group(2))
    m = upper_re.match(t)
    if m:
        return None, parse_number(m.group(1))
    m = lower_re.match(t)
    if m:
        return parse_number(m.group(1)), None
    return None, None


def clean_abnormality(text: Optional[str]) -> Optional[str]:
    if text is None:
        return None
    t = text.strip()
    if not t or t in ABNORMALITY_PLACEHOLDERS:
        return None
    return t


def is_critical(abnormality: Optional[str]) -> bool:
    return bool(abnormality and critical_re.search(abnormality))
