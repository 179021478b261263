from __future__ import annotations

from dataclasses import asdict
import logging
import math

import numpy as np
import pandas as pd
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.responses import Response
from fastapi.encoders import jsonable_encoder

from api.schemas import (
    AggregationOptionsModel,
    MetaPlacesResponse,
    MetaStationsResponse,
    PlaceModel,
    StationModel,
)
from visitstats.aggregate import aggregate, compute_debug, compute_overview, compute_rankings, compute_windows
from visitstats.config import configure_logging, get_settings
from visitstats.data import load_dashboard_data
from visitstats.lookup import normalize_id
from visitstats.options import AggregationOptions, normalize_options


settings = get_settings()
configure_logging(settings.LOG_LEVEL)

app = FastAPI(title="Station Visit Dashboard API", version=settings.VERSION)
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _options_from_model(model: AggregationOptionsModel) -> AggregationOptions:
    raw = model.model_dump()
    return normalize_options(raw, default_timezone=get_settings().TIMEZONE)


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        )
    )


def _error(exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


@app.get("/meta/stations")
def meta_stations():
    try:
        data_ctx = load_dashboard_data()
        stations = [
            StationModel(id=normalize_id(s.id), name=s.name, visitors_count=s.visitors_count)
            for s in data_ctx.get("stations", [])
        ]
        return _json(MetaStationsResponse(stations=stations).model_dump())
    except Exception as exc:
        logger.exception("meta_stations failed")
        return _error(exc)


@app.get("/meta/places")
def meta_places():
    try:
        data_ctx = load_dashboard_data()
        places = [PlaceModel(id=normalize_id(p.id), locality_name=p.locality_name) for p in data_ctx.get("places", [])]
        return _json(MetaPlacesResponse(places=places).model_dump())
    except Exception as exc:
        logger.exception("meta_places failed")
        return _error(exc)


@app.post("/overview")
def overview(options: AggregationOptionsModel):
    try:
        ctx = load_dashboard_data()
        return _json(compute_overview(_options_from_model(options), ctx))
    except Exception as exc:
        logger.exception("overview failed")
        return _error(exc)


@app.post("/rankings")
def rankings(options: AggregationOptionsModel):
    try:
        ctx = load_dashboard_data()
        return _json(compute_rankings(_options_from_model(options), ctx))
    except Exception as exc:
        logger.exception("rankings failed")
        return _error(exc)


@app.post("/windows")
def windows(options: AggregationOptionsModel):
    try:
        ctx = load_dashboard_data()
        return _json(compute_windows(_options_from_model(options), ctx))
    except Exception as exc:
        logger.exception("windows failed")
        return _error(exc)


@app.post("/debug")
def debug(options: AggregationOptionsModel):
    try:
        ctx = load_dashboard_data()
        return _json(compute_debug(_options_from_model(options), ctx))
    except Exception as exc:
        logger.exception("debug failed")
        return _error(exc)


@app.post("/export/{page}")
def export_page(page: str, options: AggregationOptionsModel):
    opts = _options_from_model(options)
    ctx = load_dashboard_data()
    result = aggregate(ctx.get("stations", []), ctx.get("places", []), ctx.get("records", []), opts)

    filename = f"{page}.csv"
    if page == "stations":
        export_df = pd.DataFrame([asdict(e) for e in result.all_stations])
    elif page == "places":
        export_df = pd.DataFrame([asdict(e) for e in result.top_places])
    elif page == "windows" and result.window_metrics is not None:
        export_df = pd.DataFrame(
            [{"window": name, **metric} for name, metric in asdict(result.window_metrics).items()]
        )
    else:
        export_df = pd.DataFrame()

    csv_bytes = export_df.to_csv(index=False).encode("utf-8")
    return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": f"attachment; filename={filename}"})
