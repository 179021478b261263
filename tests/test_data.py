"""
Content API loader tests
"""

import pytest
import requests

from visitstats import data
from visitstats.config import Settings
from visitstats.data import (
    DataSourceError,
    fetch_items,
    load_dashboard_data,
    load_stations,
    to_places,
    to_stations,
    to_visit_records,
)
from visitstats.models import Place, Station, VisitRecord


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error")

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


@pytest.fixture
def settings(monkeypatch):
    monkeypatch.setenv("VISITSTATS_BASE_URL", "https://cms.example.org")
    monkeypatch.setenv("VISITSTATS_FETCH_LIMIT", "500")
    return Settings()


@pytest.fixture
def fake_api(monkeypatch):
    calls = []
    responses = {
        "Stations": FakeResponse({"data": [{"id": 1, "Station_Name": "Central", "Visitors_Count": "12"}]}),
        "Places": FakeResponse({"data": [{"id": "p1", "Locality_Name": "Old Town"}]}),
        "Visitor_Analysis": FakeResponse(
            {"data": [{"date_created": "2024-01-02T10:00:00Z", "Station": 1, "Place": {"id": "p1"}}]}
        ),
    }

    def fake_get(url, params=None, timeout=None):
        calls.append((url, params, timeout))
        return responses[url.rsplit("/", 1)[-1]]

    monkeypatch.setattr(data.requests, "get", fake_get)
    return calls, responses


class TestFetchItems:
    def test_builds_url_and_limit(self, settings, fake_api):
        calls, _ = fake_api
        rows = fetch_items("Stations", settings)

        assert rows == [{"id": 1, "Station_Name": "Central", "Visitors_Count": "12"}]
        assert calls == [("https://cms.example.org/items/Stations", {"limit": 500}, 10.0)]

    def test_http_error(self, settings, fake_api):
        _, responses = fake_api
        responses["Stations"] = FakeResponse({}, status_code=503)

        with pytest.raises(DataSourceError):
            fetch_items("Stations", settings)

    def test_invalid_json(self, settings, fake_api):
        _, responses = fake_api
        responses["Stations"] = FakeResponse(ValueError("bad json"))

        with pytest.raises(DataSourceError):
            fetch_items("Stations", settings)

    def test_missing_data_list(self, settings, fake_api):
        _, responses = fake_api
        responses["Stations"] = FakeResponse({"errors": ["nope"]})

        with pytest.raises(DataSourceError):
            fetch_items("Stations", settings)

    def test_connection_error(self, settings, monkeypatch):
        def boom(*args, **kwargs):
            raise requests.exceptions.ConnectionError("down")

        monkeypatch.setattr(data.requests, "get", boom)

        with pytest.raises(DataSourceError):
            fetch_items("Stations", settings)


class TestRowMapping:
    def test_to_stations(self):
        rows = [
            {"id": 1, "Station_Name": "Central", "Visitors_Count": "12"},
            {"id": 2, "name": "North"},
            "garbage",
        ]

        assert to_stations(rows) == [
            Station(id=1, name="Central", visitors_count=12),
            Station(id=2, name="North", visitors_count=None),
            Station(id=None, name="", visitors_count=None),
        ]

    def test_to_places(self):
        assert to_places([{"id": "p1", "Locality_Name": "Old Town"}]) == [Place(id="p1", locality_name="Old Town")]

    def test_to_visit_records_flattens_relations(self):
        rows = [{"date_created": "2024-01-02", "Station": {"id": 3, "Station_Name": "X"}, "Place_ID": 4}]

        assert to_visit_records(rows) == [VisitRecord(created_at="2024-01-02", station_id=3, place_id=4)]


class TestLoaders:
    def test_failure_is_logged_not_raised(self, settings, fake_api, caplog):
        _, responses = fake_api
        responses["Stations"] = FakeResponse({}, status_code=500)

        assert load_stations(settings) == []
        assert "load_stations failed" in caplog.text

    def test_load_dashboard_data(self, settings, fake_api):
        ctx = load_dashboard_data(settings)

        assert ctx["stations"] == [Station(id=1, name="Central", visitors_count=12)]
        assert ctx["places"] == [Place(id="p1", locality_name="Old Town")]
        assert ctx["records"] == [VisitRecord(created_at="2024-01-02T10:00:00Z", station_id=1, place_id="p1")]
        assert "fetched_at" in ctx

    def test_partial_failure_keeps_other_collections(self, settings, fake_api):
        _, responses = fake_api
        responses["Places"] = FakeResponse({}, status_code=404)

        ctx = load_dashboard_data(settings)

        assert ctx["places"] == []
        assert len(ctx["stations"]) == 1


def test_settings_base_url_gets_trailing_slash(settings):
    assert settings.BASE_URL == "https://cms.example.org/"
