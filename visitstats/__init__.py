"""Core (UI-agnostic) station visit statistics.

This package contains:
- data loading (content API -> model dataclasses)
- option normalization
- lookup / ranking / time-window aggregation
- payload builders (JSON-serializable dicts)
- chart helpers (Altair -> Vega-Lite spec dict)
"""
