from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Literal, Optional

import pandas as pd

StationSource = Literal["records", "catalog"]
ChartMode = Literal["all", "top10", "least10"]

STATION_SOURCES = ("records", "catalog")
CHART_MODES = ("all", "top10", "least10")
DEFAULT_TOP_N = 5
DEFAULT_TIMEZONE = "UTC"


@dataclass(frozen=True)
class AggregationOptions:
    top_n: int = DEFAULT_TOP_N
    include_windows: bool = True
    station_source: StationSource = "records"
    timezone: str = DEFAULT_TIMEZONE
    chart_mode: ChartMode = "all"
    selected_stations: List[str] = field(default_factory=list)


def _as_str_list(values: Optional[Iterable[object]]) -> List[str]:
    if not values:
        return []
    out: List[str] = []
    for v in values:
        if v is None:
            continue
        s = str(v).strip()
        if s:
            out.append(s)
    return out


def is_valid_timezone(tz: str) -> bool:
    try:
        pd.Timestamp("2000-01-01").tz_localize(tz)
    except Exception:
        return False
    return True


def normalize_options(raw: Optional[dict] = None, *, default_timezone: str = DEFAULT_TIMEZONE) -> AggregationOptions:
    raw = raw or {}

    top_n = raw.get("top_n", DEFAULT_TOP_N)
    try:
        top_n = int(top_n)
    except Exception:
        top_n = DEFAULT_TOP_N
    top_n = max(1, min(100, top_n))

    include_windows = raw.get("include_windows", True)
    include_windows = True if include_windows is None else bool(include_windows)

    station_source = str(raw.get("station_source") or "records").strip().lower()
    if station_source not in STATION_SOURCES:
        station_source = "records"

    timezone = str(raw.get("timezone") or default_timezone).strip()
    if not is_valid_timezone(timezone):
        timezone = DEFAULT_TIMEZONE

    chart_mode = str(raw.get("chart_mode") or "all").strip().lower()
    if chart_mode not in CHART_MODES:
        chart_mode = "all"

    return AggregationOptions(
        top_n=top_n,
        include_windows=include_windows,
        station_source=station_source,  # type: ignore[arg-type]
        timezone=timezone,
        chart_mode=chart_mode,  # type: ignore[arg-type]
        selected_stations=_as_str_list(raw.get("selected_stations")),
    )
