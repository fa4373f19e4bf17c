import logging
from datetime import datetime, UTC
from typing import Dict, Iterable, List, Optional, Set, Tuple

from dhtracker.ingestion.model import MeasurementPoint

logger = logging.getLogger(__name__)


def dedupe_points(points: Iterable[MeasurementPoint]) -> List[MeasurementPoint]:
    """Keep the first point for each (name, date); later ones are dropped."""
    seen: Set[Tuple[str, str]] = set()
    out: List[MeasurementPoint] = []
    dropped = 0
    for p in points:
        if p.key in seen:
            dropped += 1
            logger.debug(f"Dropping duplicate {p.name} on {p.date} from {p.source}")
            continue
        seen.add(p.key)
        out.append(p)
    if dropped:
        logger.info(f"Dropped {dropped} duplicate points")
    return out


def sort_points(points: Iterable[MeasurementPoint]) -> List[MeasurementPoint]:
    # ISO dates sort chronologically as plain strings
    return sorted(points, key=lambda p: (p.name, p.date))


def merge_points(point_lists: Iterable[Iterable[MeasurementPoint]]) -> List[MeasurementPoint]:
    """Combine per-document point lists (in processing order) into the final series."""
    combined: List[MeasurementPoint] = []
    for pts in point_lists:
        combined.extend(pts)
    return sort_points(dedupe_points(combined))


def build_series(points: Iterable[MeasurementPoint], generated_at: Optional[datetime] = None) -> Dict:
    ts = generated_at or datetime.now(UTC)
    return {
        "generatedAt": ts.isoformat(timespec="seconds").replace("+00:00", "Z"),
        "points": [p.to_dict() for p in points],
        "events": [],
    }
