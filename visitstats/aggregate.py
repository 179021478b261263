from __future__ import annotations

from dataclasses import asdict, is_dataclass, replace
from typing import Any, Dict, Optional, Sequence

from visitstats.charts import all_stations_bar, to_vega_spec, top_places_pie, top_stations_pie
from visitstats.lookup import build_place_lookup, build_station_lookup
from visitstats.models import AggregationResult, Diagnostics, Place, Station, VisitRecord
from visitstats.options import AggregationOptions
from visitstats.rankings import aggregate_rankings, rank_catalog_stations, select_chart_entries
from visitstats.windows import aggregate_windows


def aggregate(
    stations: Sequence[Station],
    places: Sequence[Place],
    records: Sequence[VisitRecord],
    options: Optional[AggregationOptions] = None,
    reference_instant: object = None,
) -> AggregationResult:
    """Turn the three raw datasets into one dashboard aggregation.

    Pure: the same inputs (and the same ``reference_instant``) always give an
    equal result. Malformed records degrade to fallback names or skipped
    timestamps instead of raising.
    """
    options = options or AggregationOptions()
    stations = list(stations or [])
    places = list(places or [])
    records = list(records or [])

    rankings = aggregate_rankings(
        records,
        build_station_lookup(stations),
        build_place_lookup(places),
        top_n=options.top_n,
    )
    top_stations, all_stations = rankings.top_stations, rankings.all_stations
    if options.station_source == "catalog":
        catalog = rank_catalog_stations(stations, top_n=options.top_n)
        top_stations, all_stations = catalog.top_stations, catalog.all_stations

    window_metrics = None
    skipped = 0
    if options.include_windows:
        window_metrics, skipped = aggregate_windows(records, reference_instant, tz=options.timezone)

    return AggregationResult(
        top_stations=top_stations,
        all_stations=all_stations,
        top_places=rankings.top_places,
        window_metrics=window_metrics,
        diagnostics=Diagnostics(
            record_count=len(records),
            skipped_records=skipped,
            missing_station_names=rankings.missing_station_names,
            missing_place_names=rankings.missing_place_names,
        ),
    )


def _aggregate_ctx(options: AggregationOptions, ctx: Dict[str, Any]) -> AggregationResult:
    return aggregate(
        ctx.get("stations", []),
        ctx.get("places", []),
        ctx.get("records", []),
        options,
        reference_instant=ctx.get("reference_instant"),
    )


def compute_overview(options: AggregationOptions, ctx: Dict[str, Any]) -> Dict[str, Any]:
    result = _aggregate_ctx(options, ctx)
    chart_entries = select_chart_entries(result.all_stations, options.selected_stations or None, options.chart_mode)
    charts = {
        "top_stations": to_vega_spec(top_stations_pie(result.top_stations)),
        "top_places": to_vega_spec(top_places_pie(result.top_places)),
        "all_stations": to_vega_spec(all_stations_bar(chart_entries)),
    }
    return {"options": asdict(options), "result": result.to_dict(), "charts": charts}


def compute_rankings(options: AggregationOptions, ctx: Dict[str, Any]) -> Dict[str, Any]:
    result = _aggregate_ctx(replace(options, include_windows=False), ctx)
    payload = result.to_dict()
    payload.pop("window_metrics", None)
    return {"options": asdict(options), "rankings": payload}


def compute_windows(options: AggregationOptions, ctx: Dict[str, Any]) -> Dict[str, Any]:
    result = _aggregate_ctx(replace(options, include_windows=True), ctx)
    return {
        "options": asdict(options),
        "window_metrics": asdict(result.window_metrics) if result.window_metrics else {},
        "skipped_records": result.diagnostics.skipped_records,
    }


def compute_debug(options: AggregationOptions, ctx: Dict[str, Any]) -> Dict[str, Any]:
    result = _aggregate_ctx(options, ctx)
    return {
        "options": asdict(options),
        "row_counts": {
            "stations_rows": len(ctx.get("stations", []) or []),
            "places_rows": len(ctx.get("places", []) or []),
            "records_rows": len(ctx.get("records", []) or []),
        },
        "data_quality": asdict(result.diagnostics),
        "station_sample": [asdict(s) if is_dataclass(s) else dict(s) for s in (ctx.get("stations", []) or [])[:3]],
    }
