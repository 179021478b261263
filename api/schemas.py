from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class AggregationOptionsModel(BaseModel):
    top_n: int = 5
    include_windows: bool = True
    station_source: Literal["records", "catalog"] = "records"
    timezone: Optional[str] = None
    chart_mode: Literal["all", "top10", "least10"] = "all"
    selected_stations: List[str] = Field(default_factory=list)


class StationModel(BaseModel):
    id: Optional[str] = None
    name: str = ""
    visitors_count: Optional[int] = None


class PlaceModel(BaseModel):
    id: Optional[str] = None
    locality_name: str = ""


class MetaStationsResponse(BaseModel):
    stations: List[StationModel]


class MetaPlacesResponse(BaseModel):
    places: List[PlaceModel]
