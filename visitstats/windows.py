from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

import pandas as pd

from visitstats.lookup import get_field
from visitstats.models import VisitRecord, WindowMetric, WindowMetrics
from visitstats.options import DEFAULT_TIMEZONE, is_valid_timezone

logger = logging.getLogger(__name__)

WINDOWS = ("daily", "weekly", "monthly", "yearly")

Interval = Tuple[pd.Timestamp, pd.Timestamp]

# Days outside the nanosecond range cannot be bucketed.
MIN_DAY = pd.Timestamp.min.ceil("D")
MAX_DAY = pd.Timestamp.max.floor("D")


@dataclass(frozen=True)
class WindowBounds:
    current: Interval
    previous: Interval


def parse_timestamp(value: object, tz: str = "UTC") -> Optional[pd.Timestamp]:
    """Parse a record timestamp into ``tz``; None when it cannot be parsed.

    Naive values are taken to be local to ``tz``; aware values are converted.
    """
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    try:
        ts = pd.Timestamp(value)
    except (ValueError, TypeError, OverflowError):
        return None
    if pd.isna(ts):
        return None
    try:
        if ts.tzinfo is None:
            ts = ts.tz_localize(tz, ambiguous=True, nonexistent="shift_forward")
        else:
            ts = ts.tz_convert(tz)
    except (ValueError, TypeError):
        return None
    if pd.isna(ts):
        return None
    return ts


def calendar_day(ts: pd.Timestamp) -> pd.Timestamp:
    """Midnight of the timestamp's local calendar day, as a naive Timestamp."""
    return ts.tz_localize(None).normalize() if ts.tzinfo is not None else ts.normalize()


def window_bounds(reference_day: pd.Timestamp) -> Dict[str, WindowBounds]:
    day = calendar_day(reference_day)
    one_day = pd.Timedelta(days=1)

    week_start = day - pd.Timedelta(days=day.weekday())
    month_start = day.replace(day=1)
    year_start = day.replace(month=1, day=1)

    return {
        "daily": WindowBounds(current=(day, day), previous=(day - one_day, day - one_day)),
        "weekly": WindowBounds(
            current=(week_start, day),
            previous=(week_start - pd.Timedelta(days=7), week_start - one_day),
        ),
        "monthly": WindowBounds(
            current=(month_start, day),
            previous=((month_start - one_day).replace(day=1), month_start - one_day),
        ),
        "yearly": WindowBounds(
            current=(year_start, day),
            previous=(year_start.replace(year=year_start.year - 1), year_start - one_day),
        ),
    }


def trend_percent(current: int, previous: int) -> float:
    if previous == 0:
        return 0.0
    return (current - previous) / previous * 100


def _reference(reference_instant: object, tz: str) -> pd.Timestamp:
    if reference_instant is None:
        return pd.Timestamp.now(tz=tz)
    ref = parse_timestamp(reference_instant, tz)
    if ref is None:
        raise ValueError(f"Invalid reference instant: {reference_instant!r}")
    return ref


def record_days(records: Iterable[VisitRecord], tz: str = "UTC") -> Tuple[pd.Series, int]:
    """Calendar days of all parseable record timestamps plus the number skipped."""
    days = []
    skipped = 0
    for r in records or []:
        ts = parse_timestamp(get_field(r, "created_at"), tz)
        day = calendar_day(ts) if ts is not None else None
        if day is None or not (MIN_DAY <= day <= MAX_DAY):
            skipped += 1
            continue
        days.append(day)
    return pd.Series(days, dtype="datetime64[ns]"), skipped


def _count(days: pd.Series, interval: Interval) -> int:
    if days.empty:
        return 0
    start, end = interval
    return int(days.between(start, end, inclusive="both").sum())


def aggregate_windows(
    records: Iterable[VisitRecord],
    reference_instant: object = None,
    tz: str = "UTC",
) -> Tuple[WindowMetrics, int]:
    if not is_valid_timezone(tz):
        logger.warning("Unknown timezone %r, using %s", tz, DEFAULT_TIMEZONE)
        tz = DEFAULT_TIMEZONE
    ref = _reference(reference_instant, tz)
    days, skipped = record_days(records, tz)
    if skipped:
        logger.debug("Skipped %d visit record(s) with missing or unparseable timestamps", skipped)

    metrics = {}
    for name, bounds in window_bounds(ref).items():
        current = _count(days, bounds.current)
        previous = _count(days, bounds.previous)
        metrics[name] = WindowMetric(count=current, trend_percent=trend_percent(current, previous))
    return WindowMetrics(**metrics), skipped
