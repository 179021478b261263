import pytest

from visitstats.models import Place, Station, VisitRecord


@pytest.fixture
def stations():
    return [
        Station(id=1, name="Central", visitors_count=40),
        Station(id=2, name="North", visitors_count=75),
        Station(id=3, name="Harbour", visitors_count=None),
    ]


@pytest.fixture
def places():
    return [
        Place(id="p1", locality_name="Old Town"),
        Place(id="p2", locality_name="Riverside"),
    ]


@pytest.fixture
def records():
    return [
        VisitRecord(created_at="2024-01-02T09:00:00", station_id=1, place_id="p1"),
        VisitRecord(created_at="2024-01-02T11:30:00", station_id=1, place_id="p2"),
        VisitRecord(created_at="2024-01-01T18:00:00", station_id=2, place_id="p1"),
        VisitRecord(created_at="2023-12-20T10:00:00", station_id=2, place_id="p1"),
        VisitRecord(created_at="2023-06-15T10:00:00", station_id=1, place_id="p3"),
        VisitRecord(created_at="not a date", station_id=9, place_id=None),
    ]
