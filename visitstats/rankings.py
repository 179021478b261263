from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

import pandas as pd

from visitstats.lookup import as_optional_int, get_field, normalize_id, normalize_lookup, resolve_name
from visitstats.models import RankingEntry, Station, VisitRecord

logger = logging.getLogger(__name__)

STATION_LABEL = "Station"
PLACE_LABEL = "Place"
CHART_LIMIT = 10


@dataclass(frozen=True)
class Rankings:
    top_stations: List[RankingEntry] = field(default_factory=list)
    all_stations: List[RankingEntry] = field(default_factory=list)
    top_places: List[RankingEntry] = field(default_factory=list)
    missing_station_names: int = 0
    missing_place_names: int = 0


def count_by(records: Iterable[VisitRecord], field_name: str) -> pd.Series:
    """Visit counts per normalized id, in order of first appearance."""
    ids = [normalize_id(get_field(r, field_name)) for r in records or []]
    s = pd.Series(ids, dtype=object).dropna()
    if s.empty:
        return pd.Series(dtype="int64")
    return s.groupby(s, sort=False).size()


def rank_counts(counts: pd.Series, lookup: Mapping, label: str) -> List[RankingEntry]:
    if counts.empty:
        return []
    ranked = counts.sort_values(ascending=False, kind="stable")
    return [RankingEntry(name=resolve_name(lookup, key, label), visit_count=int(n)) for key, n in ranked.items()]


def _missing(counts: pd.Series, lookup: Mapping) -> int:
    return int(sum(1 for key in counts.index if key not in lookup))


def aggregate_rankings(
    records: Sequence[VisitRecord],
    station_lookup: Optional[Mapping] = None,
    place_lookup: Optional[Mapping] = None,
    top_n: int = 5,
) -> Rankings:
    station_lookup = normalize_lookup(station_lookup)
    place_lookup = normalize_lookup(place_lookup)
    records = list(records or [])

    station_counts = count_by(records, "station_id")
    place_counts = count_by(records, "place_id")

    all_stations = rank_counts(station_counts, station_lookup, STATION_LABEL)
    all_places = rank_counts(place_counts, place_lookup, PLACE_LABEL)

    missing_stations = _missing(station_counts, station_lookup)
    missing_places = _missing(place_counts, place_lookup)
    if missing_stations or missing_places:
        logger.debug(
            "Fallback names used for %d station id(s) and %d place id(s)", missing_stations, missing_places
        )

    return Rankings(
        top_stations=all_stations[:top_n],
        all_stations=all_stations,
        top_places=all_places[:top_n],
        missing_station_names=missing_stations,
        missing_place_names=missing_places,
    )


def rank_catalog_stations(stations: Sequence[Station], top_n: int = 5) -> Rankings:
    """Rank stations by their precomputed ``visitors_count``."""
    rows = []
    for s in stations or []:
        key = normalize_id(get_field(s, "id"))
        if key is None:
            continue
        name = get_field(s, "name")
        rows.append(
            {
                "id": key,
                "name": str(name) if name else f"{STATION_LABEL} {key}",
                "visit_count": as_optional_int(get_field(s, "visitors_count")) or 0,
            }
        )
    if not rows:
        return Rankings()

    df = pd.DataFrame(rows).drop_duplicates(subset=["id"], keep="last")
    df = df.sort_values("visit_count", ascending=False, kind="stable")
    all_stations = [RankingEntry(name=r.name, visit_count=int(r.visit_count)) for r in df.itertuples(index=False)]
    return Rankings(top_stations=all_stations[:top_n], all_stations=all_stations)


def select_chart_entries(
    entries: Sequence[RankingEntry],
    selected: Optional[Iterable[str]] = None,
    mode: str = "all",
) -> List[RankingEntry]:
    """Bar chart view of a ranking: optional name selection, then all / top10 / least10."""
    if mode not in ("all", "top10", "least10"):
        raise ValueError(f"Unknown chart mode: {mode!r}")
    out = list(entries)
    if selected is not None:
        wanted = set(selected)
        out = [e for e in out if e.name in wanted]
    if mode == "top10":
        return sorted(out, key=lambda e: e.visit_count, reverse=True)[:CHART_LIMIT]
    if mode == "least10":
        return sorted(out, key=lambda e: e.visit_count)[:CHART_LIMIT]
    return out
