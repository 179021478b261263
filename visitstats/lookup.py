from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict, Iterable, Optional

import pandas as pd

from visitstats.models import Place, Station


def normalize_id(value: object) -> Optional[str]:
    """Canonical string form of an identifier, or None when there is none.

    ``1``, ``"1"``, ``1.0`` and ``" 1 "`` all normalize to ``"1"``.
    """
    if value is None:
        return None
    if isinstance(value, float):
        if pd.isna(value):
            return None
        if value.is_integer():
            return str(int(value))
    elif not isinstance(value, (str, int)) and pd.api.types.is_scalar(value) and pd.isna(value):
        return None
    s = str(value).strip()
    if not s:
        return None
    return s


def get_field(entity: Any, name: str) -> Any:
    if isinstance(entity, Mapping):
        return entity.get(name)
    return getattr(entity, name, None)


def _name(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and pd.isna(value):
        return ""
    return str(value)


def build_lookup(entities: Iterable[Any], name_field: str = "name", id_field: str = "id") -> Dict[str, str]:
    lookup: Dict[str, str] = {}
    for entity in entities or []:
        key = normalize_id(get_field(entity, id_field))
        if key is None:
            continue
        # Later duplicates overwrite earlier ones.
        lookup[key] = _name(get_field(entity, name_field))
    return lookup


def build_station_lookup(stations: Iterable[Station]) -> Dict[str, str]:
    return build_lookup(stations, name_field="name")


def build_place_lookup(places: Iterable[Place]) -> Dict[str, str]:
    return build_lookup(places, name_field="locality_name")


def normalize_lookup(lookup: Optional[Mapping]) -> Dict[str, str]:
    """Re-key a caller supplied mapping on normalized ids."""
    if not lookup:
        return {}
    out: Dict[str, str] = {}
    for key, value in lookup.items():
        norm = normalize_id(key)
        if norm is not None:
            out[norm] = _name(value)
    return out


def resolve_name(lookup: Mapping, entity_id: object, label: str) -> str:
    key = normalize_id(entity_id)
    if key is not None and key in lookup:
        return lookup[key]
    return f"{label} {key if key is not None else entity_id}"


def as_optional_int(value: object) -> Optional[int]:
    if value is None:
        return None
    num = pd.to_numeric(pd.Series([value]), errors="coerce").iloc[0]
    if pd.isna(num):
        return None
    return int(num)
