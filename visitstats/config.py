from __future__ import annotations

import logging
import os
import sys
from functools import lru_cache
from typing import List

from dotenv import load_dotenv

load_dotenv()

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _with_slash(url: str) -> str:
    return url if url.endswith("/") else url + "/"


class Settings:
    PROJECT_NAME: str = "Station Visit Dashboard"
    VERSION: str = "0.1.0"

    def __init__(self) -> None:
        self.BASE_URL: str = _with_slash(os.getenv("VISITSTATS_BASE_URL", "http://localhost:8055/"))
        self.STATIONS_RESOURCE: str = os.getenv("VISITSTATS_STATIONS_RESOURCE", "Stations")
        self.PLACES_RESOURCE: str = os.getenv("VISITSTATS_PLACES_RESOURCE", "Places")
        self.VISITS_RESOURCE: str = os.getenv("VISITSTATS_VISITS_RESOURCE", "Visitor_Analysis")
        self.FETCH_LIMIT: int = int(os.getenv("VISITSTATS_FETCH_LIMIT", 1000000))
        self.TIMEOUT: float = float(os.getenv("VISITSTATS_TIMEOUT", 10.0))
        self.TIMEZONE: str = os.getenv("VISITSTATS_TIMEZONE", "UTC")
        self.LOG_LEVEL: str = os.getenv("VISITSTATS_LOG_LEVEL", "INFO").upper()
        self.ALLOWED_ORIGINS: List[str] = [
            o.strip()
            for o in os.getenv("VISITSTATS_ALLOWED_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
            if o.strip()
        ]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def configure_logging(level: str = "INFO") -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    # urllib3 logs every connection at DEBUG.
    logging.getLogger("urllib3").setLevel(logging.WARNING)
