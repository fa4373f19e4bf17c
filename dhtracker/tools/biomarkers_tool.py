from typing import Optional, List, Dict
import json
import os
import math
import pandas as pd
import logging

from dhtracker.constants import BIOMARKERS_PATH, POINT_KEYS

logger = logging.getLogger(__name__)


def _load_df(series_path: Optional[str] = None) -> Optional[pd.DataFrame]:
    sp = series_path or BIOMARKERS_PATH
    if not os.path.exists(sp):
        logger.warning(f'Biomarker series not found at {sp}')
        return None
    try:
        with open(sp, "r", encoding="utf-8") as f:
            data = json.load(f)
        df = pd.DataFrame(data.get("points") or [], columns=POINT_KEYS)
    except (ValueError, AttributeError):
        logger.error(f'Failed to load biomarker series at {sp}')
        return None
    if df.empty:
        logger.warning(f'Biomarker series is empty at {sp}')
        return None
    return df


def _safe_float(x) -> Optional[float]:
    try:
        if x is None:
            return None
        if isinstance(x, float) and (math.isnan(x) or math.isinf(x)):
            return None
        return float(x)
    except (TypeError, ValueError):
        return None


def _native(x):
    if x is None or pd.isna(x):
        return None
    # numpy scalars -> plain Python so the dict can go straight to JSON
    return x.item() if hasattr(x, "item") else x


def _record(r: pd.Series) -> Dict:
    return {k: _native(r.get(k)) for k in POINT_KEYS}


def _select(df: pd.DataFrame, name: str) -> pd.DataFrame:
    return df[df["name"].str.lower() == name.lower()].copy()


def list_biomarkers(prefix: Optional[str] = None, series_path: Optional[str] = None) -> List[str]:
    """
    Return a list of all biomarker names in the series.

    Args:
        prefix: Optional prefix to filter names by.
        series_path: Optional path to the biomarkers JSON file.
    """
    df = _load_df(series_path)
    if df is None:
        return []
    names = [str(x) for x in df["name"].dropna().unique()]
    names.sort(key=lambda s: s.lower())
    if prefix:
        pl = prefix.lower()
        names = [n for n in names if n.lower().startswith(pl)]
    return names


def latest_value(name: str, series_path: Optional[str] = None) -> Optional[Dict]:
    """Return the most recent point for a biomarker."""
    df = _load_df(series_path)
    if df is None:
        return None
    dff = _select(df, name)
    if dff.empty:
        logger.warning(f'No points found for {name}')
        return None
    dff = dff.sort_values("date", ascending=False)
    return _record(dff.iloc[0])


def history(name: str, limit: Optional[int] = None, ascending: bool = True, series_path: Optional[str] = None) -> List[Dict]:
    """
    Return the history for a biomarker.

    Args:
        name: Canonical biomarker name, e.g., "Platelets".
        limit: Max number of points to return (most recent ones).
        ascending: Sort order by date.
        series_path: Optional path to the biomarkers JSON file.
    """
    df = _load_df(series_path)
    if df is None:
        return []
    dff = _select(df, name)
    if dff.empty:
        logger.warning(f'No points found for {name}')
        return []
    dff = dff.sort_values("date", ascending=ascending)
    if limit is not None and limit > 0:
        dff = dff.tail(limit) if ascending else dff.head(limit)
    return [_record(r) for _, r in dff.iterrows()]


def summary(name: str, series_path: Optional[str] = None) -> Optional[Dict]:
    """
    Return a summary for a biomarker (last value/date, delta, unit, ref range).

    Args:
        name: Canonical biomarker name.
        series_path: Optional path to the biomarkers JSON file.
    """
    logger.info(f'Building summary for {name}')
    df = _load_df(series_path)
    if df is None:
        return None
    dff = _select(df, name)
    if dff.empty:
        logger.warning(f'No points found for {name}')
        return None
    dff = dff.sort_values("date")
    vals = pd.to_numeric(dff["value"], errors="coerce").dropna()
    if vals.empty:
        logger.warning(f'No numeric values for {name}')
        return None

    last = dff.iloc[-1]
    last_val = _safe_float(last.get("value"))
    prev_val = _safe_float(dff.iloc[-2].get("value")) if len(dff) >= 2 else None
    delta = (last_val - prev_val) if (last_val is not None and prev_val is not None) else None
    pct = (delta / prev_val * 100.0) if (delta is not None and prev_val not in (None, 0)) else None
    rl = _safe_float(last.get("refLow"))
    rh = _safe_float(last.get("refHigh"))
    out_of_range = None

    if last_val is not None:
        if rl is not None and last_val < rl:
            out_of_range = "LOW"
        if rh is not None and last_val > rh:
            out_of_range = "HIGH"

    return {
        "name": str(last.get("name", name)),
        "count": int(len(dff)),
        "first_date": dff.iloc[0].get("date"),
        "last_date": last.get("date"),
        "last_value": last_val,
        "units": last.get("units"),
        "min": float(vals.min()),
        "max": float(vals.max()),
        "mean": float(vals.mean()),
        "delta_from_prev": delta,
        "pct_change_from_prev": pct,
        "ref_low": rl,
        "ref_high": rh,
        "abnormality": None if pd.isna(last.get("abnormality")) else last.get("abnormality"),
        "critical_count": int(dff["isCritical"].fillna(False).astype(bool).sum()),
        "out_of_range": out_of_range,
    }
