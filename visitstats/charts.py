from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Sequence

import altair as alt
import pandas as pd

from visitstats.models import RankingEntry

alt.data_transformers.disable_max_rows()

COLORS = ["#FFAB91", "#FFCC80", "#FFF59D", "#A5D6A7", "#81D4FA", "#B39DDB", "#F48FB1"]


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def ranking_frame(entries: Sequence[RankingEntry]) -> pd.DataFrame:
    if not entries:
        return pd.DataFrame({"name": pd.Series(dtype=str), "visit_count": pd.Series(dtype="int64")})
    return pd.DataFrame([asdict(e) for e in entries])


def _pie(entries: Sequence[RankingEntry], title: str) -> alt.Chart:
    df = ranking_frame(entries)
    order = df["name"].tolist()
    return (
        alt.Chart(df, title=title)
        .mark_arc(outerRadius=110)
        .encode(
            theta=alt.Theta("visit_count:Q", stack=True),
            color=alt.Color(
                "name:N",
                title=None,
                sort=order,
                scale=alt.Scale(domain=order, range=COLORS),
            ),
            order=alt.Order("visit_count:Q", sort="descending"),
            tooltip=[alt.Tooltip("name:N", title="Name"), alt.Tooltip("visit_count:Q", title="Visits", format=",")],
        )
    )


def top_stations_pie(entries: Sequence[RankingEntry]) -> alt.Chart:
    return _pie(entries, "Top 5 Most Visited Stations")


def top_places_pie(entries: Sequence[RankingEntry]) -> alt.Chart:
    return _pie(entries, "Top 5 Most Visited Places")


def all_stations_bar(entries: Sequence[RankingEntry]) -> alt.Chart:
    df = ranking_frame(entries)
    order = df["name"].tolist()
    return (
        alt.Chart(df, title="All Stations Visit Count")
        .mark_bar(cornerRadiusTopLeft=10, cornerRadiusTopRight=10, size=40)
        .encode(
            x=alt.X("name:N", title=None, sort=order, axis=alt.Axis(labelAngle=-45)),
            y=alt.Y("visit_count:Q", title="Visitors", axis=alt.Axis(format="~s")),
            color=alt.Color("name:N", legend=None, sort=order, scale=alt.Scale(range=COLORS)),
            tooltip=[alt.Tooltip("name:N", title="Station"), alt.Tooltip("visit_count:Q", title="Visitors", format=",")],
        )
        .properties(height=500)
    )
