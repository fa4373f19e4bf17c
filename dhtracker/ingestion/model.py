from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class ParsedResult:
    """One test result as read from a page, before it is dated and named."""
    value: float
    units: str
    ref_low: Optional[float] = None
    ref_high: Optional[float] = None
    abnormality: Optional[str] = None
    is_critical: bool = False


@dataclass(frozen=True)
class MeasurementPoint:
    name: str
    date: str  # YYYY-MM-DD
    value: float
    units: str
    ref_low: Optional[float]
    ref_high: Optional[float]
    abnormality: Optional[str]
    is_critical: bool
    source: str

    @property
    def key(self) -> Tuple[str, str]:
        return (self.name, self.date)

    @classmethod
    def from_result(cls, name: str, date: str, source: str, result: ParsedResult) -> "MeasurementPoint":
        return cls(
            name=name,
            date=date,
            value=result.value,
            units=result.units,
            ref_low=result.ref_low,
            ref_high=result.ref_high,
            abnormality=result.abnormality,
            is_critical=result.is_critical,
            source=source,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "date": self.date,
            "value": self.value,
            "units": self.units,
            "refLow": self.ref_low,
            "refHigh": self.ref_high,
            "abnormality": self.abnormality,
            "isCritical": self.is_critical,
            "source": self.source,
        }


@dataclass
class PageContext:
    """Per-document state threaded through the page loop."""
    source: str
    current_date: Optional[str] = None
    pages_seen: int = 0
    pages_skipped: int = 0
