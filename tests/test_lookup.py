"""
Lookup builder tests
"""

import math

import pandas as pd
import pytest

from visitstats.lookup import (
    as_optional_int,
    build_lookup,
    build_place_lookup,
    build_station_lookup,
    normalize_id,
    normalize_lookup,
    resolve_name,
)
from visitstats.models import Place, Station


class TestNormalizeId:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (1, "1"),
            ("1", "1"),
            (1.0, "1"),
            (" 7 ", "7"),
            ("X99", "X99"),
            (2.5, "2.5"),
        ],
    )
    def test_normalizes_equivalent_ids(self, value, expected):
        assert normalize_id(value) == expected

    @pytest.mark.parametrize("value", [None, "", "   ", math.nan, pd.NA, pd.NaT])
    def test_missing_ids_become_none(self, value):
        assert normalize_id(value) is None

    @pytest.mark.parametrize("value", ["NA", "null", "None", "n/a"])
    def test_word_like_ids_are_kept(self, value):
        assert normalize_id(value) == value


class TestBuildLookup:
    def test_maps_id_to_name(self, stations):
        """Station ids map to their names"""
        lookup = build_station_lookup(stations)

        assert lookup == {"1": "Central", "2": "North", "3": "Harbour"}

    def test_last_duplicate_wins(self):
        entities = [{"id": 1, "name": "First"}, {"id": 2, "name": "Other"}, {"id": 1, "name": "Second"}]

        assert build_lookup(entities) == {"1": "Second", "2": "Other"}

    def test_missing_name_resolves_to_empty_string(self):
        entities = [{"id": 1}, {"id": 2, "name": None}, Station(id=3, name=math.nan)]

        assert build_lookup(entities) == {"1": "", "2": "", "3": ""}

    def test_entities_without_id_are_skipped(self):
        assert build_lookup([{"name": "Nowhere"}, {"id": None, "name": "Null"}]) == {}

    def test_empty_input(self):
        assert build_lookup([]) == {}
        assert build_lookup(None) == {}

    def test_place_lookup_uses_locality_name(self, places):
        assert build_place_lookup(places) == {"p1": "Old Town", "p2": "Riverside"}

    def test_place_lookup_ignores_unrelated_name_field(self):
        assert build_place_lookup([Place(id=5)]) == {"5": ""}


class TestResolveName:
    def test_known_id(self):
        assert resolve_name({"1": "Central"}, 1, "Station") == "Central"

    def test_fallback_label(self):
        assert resolve_name({"1": "Central"}, "X99", "Station") == "Station X99"
        assert resolve_name({}, 7, "Place") == "Place 7"

    def test_empty_name_is_kept(self):
        assert resolve_name({"4": ""}, 4, "Station") == ""

    def test_normalize_lookup_rekeys_mixed_ids(self):
        assert normalize_lookup({1: "Central", "2": "North", None: "x"}) == {"1": "Central", "2": "North"}


class TestAsOptionalInt:
    @pytest.mark.parametrize("value, expected", [(3, 3), ("12", 12), (4.0, 4), (None, None), ("abc", None)])
    def test_coercion(self, value, expected):
        assert as_optional_int(value) == expected
