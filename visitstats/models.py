from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Station:
    id: Any
    name: str = ""
    visitors_count: Optional[int] = None


@dataclass(frozen=True)
class Place:
    id: Any
    locality_name: str = ""


@dataclass(frozen=True)
class VisitRecord:
    created_at: Any = None
    station_id: Any = None
    place_id: Any = None


@dataclass(frozen=True)
class RankingEntry:
    name: str
    visit_count: int


@dataclass(frozen=True)
class WindowMetric:
    count: int = 0
    trend_percent: float = 0.0


@dataclass(frozen=True)
class WindowMetrics:
    daily: WindowMetric = field(default_factory=WindowMetric)
    weekly: WindowMetric = field(default_factory=WindowMetric)
    monthly: WindowMetric = field(default_factory=WindowMetric)
    yearly: WindowMetric = field(default_factory=WindowMetric)


@dataclass(frozen=True)
class Diagnostics:
    record_count: int = 0
    skipped_records: int = 0
    missing_station_names: int = 0
    missing_place_names: int = 0


@dataclass(frozen=True)
class AggregationResult:
    top_stations: List[RankingEntry] = field(default_factory=list)
    all_stations: List[RankingEntry] = field(default_factory=list)
    top_places: List[RankingEntry] = field(default_factory=list)
    window_metrics: Optional[WindowMetrics] = None
    diagnostics: Diagnostics = field(default_factory=Diagnostics)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
