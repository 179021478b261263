from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd
import requests

from visitstats.config import Settings, get_settings
from visitstats.lookup import as_optional_int
from visitstats.models import Place, Station, VisitRecord

logger = logging.getLogger(__name__)

STATION_COLUMNS = {
    "id": "id",
    "Station_ID": "id",
    "Station_Name": "name",
    "name": "name",
    "Visitors_Count": "visitors_count",
    "visitors_count": "visitors_count",
}

PLACE_COLUMNS = {
    "id": "id",
    "Place_ID": "id",
    "Locality_Name": "locality_name",
    "locality_name": "locality_name",
    "name": "locality_name",
}

VISIT_COLUMNS = {
    "date_created": "created_at",
    "created_at": "created_at",
    "Station": "station_id",
    "Station_ID": "station_id",
    "station_id": "station_id",
    "Place": "place_id",
    "Place_ID": "place_id",
    "place_id": "place_id",
}


class DataSourceError(RuntimeError):
    """Raised when the content API cannot deliver a collection."""


def items_url(resource: str, settings: Settings) -> str:
    return f"{settings.BASE_URL}items/{resource}"


def fetch_items(
    resource: str,
    settings: Optional[Settings] = None,
    session: Optional[requests.Session] = None,
) -> List[Dict[str, Any]]:
    settings = settings or get_settings()
    url = items_url(resource, settings)
    getter = session.get if session is not None else requests.get
    logger.debug("Fetching %s", url)
    try:
        resp = getter(url, params={"limit": settings.FETCH_LIMIT}, timeout=settings.TIMEOUT)
        resp.raise_for_status()
        payload = resp.json()
    except (requests.exceptions.RequestException, ValueError) as exc:
        raise DataSourceError(f"Failed to fetch {resource}: {exc}") from exc

    rows = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(rows, list):
        raise DataSourceError(f"Unexpected payload for {resource}: missing 'data' list")
    logger.debug("Fetched %d %s rows", len(rows), resource)
    return rows


def rename_row(row: Dict[str, Any], columns: Dict[str, str]) -> Dict[str, Any]:
    """Map raw API fields to model fields; the first populated alias wins."""
    out: Dict[str, Any] = {}
    if not isinstance(row, dict):
        return out
    for raw_key, key in columns.items():
        if raw_key not in row:
            continue
        value = row[raw_key]
        if isinstance(value, dict):
            # Expanded relational fields come back as nested objects.
            value = value.get("id")
        if out.get(key) is None:
            out[key] = value
    return out


def to_stations(rows: Iterable[Dict[str, Any]]) -> List[Station]:
    stations = []
    for row in rows or []:
        r = rename_row(row, STATION_COLUMNS)
        stations.append(
            Station(
                id=r.get("id"),
                name=str(r.get("name") or ""),
                visitors_count=as_optional_int(r.get("visitors_count")),
            )
        )
    return stations


def to_places(rows: Iterable[Dict[str, Any]]) -> List[Place]:
    places = []
    for row in rows or []:
        r = rename_row(row, PLACE_COLUMNS)
        places.append(Place(id=r.get("id"), locality_name=str(r.get("locality_name") or "")))
    return places


def to_visit_records(rows: Iterable[Dict[str, Any]]) -> List[VisitRecord]:
    records = []
    for row in rows or []:
        r = rename_row(row, VISIT_COLUMNS)
        records.append(
            VisitRecord(
                created_at=r.get("created_at"),
                station_id=r.get("station_id"),
                place_id=r.get("place_id"),
            )
        )
    return records


def load_stations(settings: Optional[Settings] = None) -> List[Station]:
    settings = settings or get_settings()
    try:
        return to_stations(fetch_items(settings.STATIONS_RESOURCE, settings))
    except DataSourceError:
        logger.exception("load_stations failed")
        return []


def load_places(settings: Optional[Settings] = None) -> List[Place]:
    settings = settings or get_settings()
    try:
        return to_places(fetch_items(settings.PLACES_RESOURCE, settings))
    except DataSourceError:
        logger.exception("load_places failed")
        return []


def load_visit_records(settings: Optional[Settings] = None) -> List[VisitRecord]:
    settings = settings or get_settings()
    try:
        return to_visit_records(fetch_items(settings.VISITS_RESOURCE, settings))
    except DataSourceError:
        logger.exception("load_visit_records failed")
        return []


# ---------------- Public API (Streamlit + FastAPI use) ----------------
def load_dashboard_data(settings: Optional[Settings] = None) -> Dict[str, object]:
    """Fetch stations, places and visit records concurrently."""
    settings = settings or get_settings()
    with ThreadPoolExecutor(max_workers=3) as pool:
        stations = pool.submit(load_stations, settings)
        places = pool.submit(load_places, settings)
        records = pool.submit(load_visit_records, settings)
        ctx = {
            "stations": stations.result(),
            "places": places.result(),
            "records": records.result(),
        }
    ctx["fetched_at"] = pd.Timestamp.now(tz=settings.TIMEZONE)
    logger.info(
        "Loaded %d stations, %d places, %d visit records",
        len(ctx["stations"]),
        len(ctx["places"]),
        len(ctx["records"]),
    )
    return ctx
