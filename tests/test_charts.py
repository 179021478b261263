"""
Chart spec tests
"""

from visitstats.charts import (
    all_stations_bar,
    ranking_frame,
    to_vega_spec,
    top_places_pie,
    top_stations_pie,
)
from visitstats.models import RankingEntry

ENTRIES = [RankingEntry("Central", 3), RankingEntry("North", 2)]


def _rows(spec):
    return next(iter(spec["datasets"].values()))


class TestCharts:
    def test_ranking_frame(self):
        df = ranking_frame(ENTRIES)

        assert list(df.columns) == ["name", "visit_count"]
        assert df["visit_count"].tolist() == [3, 2]

    def test_ranking_frame_empty(self):
        assert list(ranking_frame([]).columns) == ["name", "visit_count"]

    def test_pie_specs(self):
        for chart in (top_stations_pie(ENTRIES), top_places_pie(ENTRIES)):
            spec = to_vega_spec(chart)

            assert spec["mark"]["type"] == "arc"
            assert spec["encoding"]["theta"]["field"] == "visit_count"
            assert _rows(spec) == [{"name": "Central", "visit_count": 3}, {"name": "North", "visit_count": 2}]

    def test_pie_titles(self):
        assert to_vega_spec(top_stations_pie(ENTRIES))["title"] == "Top 5 Most Visited Stations"
        assert to_vega_spec(top_places_pie(ENTRIES))["title"] == "Top 5 Most Visited Places"

    def test_bar_keeps_ranking_order(self):
        spec = to_vega_spec(all_stations_bar(ENTRIES))

        assert spec["mark"]["type"] == "bar"
        assert spec["encoding"]["x"]["sort"] == ["Central", "North"]

    def test_empty_rankings_still_render(self):
        spec = to_vega_spec(all_stations_bar([]))

        assert spec["mark"]["type"] == "bar"
