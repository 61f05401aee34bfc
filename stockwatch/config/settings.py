import os
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field

ChartSpan = Literal["1d", "1w", "1m", "3m", "6m"]

DEFAULT_QUOTE_URL = (
    "http://query.yahooapis.com/v1/public/yql?q=select%20*%20from%20yahoo.finance.quote"
    "%20where%20symbol%20%3D%20%22{symbol}%22&format=json"
    "&env=store%3A%2F%2Fdatatables.org%2Falltableswithkeys"
)
DEFAULT_FEED_URL = "http://feeds.finance.yahoo.com/rss/2.0/headline?s={symbol}&region=US&lang=en-US"
DEFAULT_SEARCH_URL = (
    "http://autoc.finance.yahoo.com/autoc?query={query}"
    "&callback=YAHOO.Finance.SymbolSuggest.ssCallback"
)
DEFAULT_CHART_URL = "http://chart.finance.yahoo.com/z?s={symbol}&z=m&t={span}"


class Settings(BaseModel):
    QUOTE_URL: str = DEFAULT_QUOTE_URL
    FEED_URL: str = DEFAULT_FEED_URL
    SEARCH_URL: str = DEFAULT_SEARCH_URL
    CHART_URL: str = DEFAULT_CHART_URL
    CONNECT_TIMEOUT_SEC: float = Field(default=20.0, gt=0)
    READ_TIMEOUT_SEC: float = Field(default=25.0, gt=0)
    PROBE_HOST: str = "query.yahooapis.com"
    PROBE_PORT: int = Field(default=80, gt=0, lt=65536)
    PROBE_TIMEOUT_SEC: float = Field(default=3.0, gt=0)
    DEFAULT_CHART_SPAN: ChartSpan = "3m"

    @classmethod
    def from_env(cls) -> "Settings":
        raw = {
            "QUOTE_URL": os.getenv("STOCKWATCH_QUOTE_URL"),
            "FEED_URL": os.getenv("STOCKWATCH_FEED_URL"),
            "SEARCH_URL": os.getenv("STOCKWATCH_SEARCH_URL"),
            "CHART_URL": os.getenv("STOCKWATCH_CHART_URL"),
            "CONNECT_TIMEOUT_SEC": os.getenv("STOCKWATCH_CONNECT_TIMEOUT_SEC"),
            "READ_TIMEOUT_SEC": os.getenv("STOCKWATCH_READ_TIMEOUT_SEC"),
            "PROBE_HOST": os.getenv("STOCKWATCH_PROBE_HOST"),
            "PROBE_PORT": os.getenv("STOCKWATCH_PROBE_PORT"),
            "PROBE_TIMEOUT_SEC": os.getenv("STOCKWATCH_PROBE_TIMEOUT_SEC"),
            "DEFAULT_CHART_SPAN": os.getenv("STOCKWATCH_DEFAULT_CHART_SPAN"),
        }
        # unset variables fall back to the model defaults
        return cls.model_validate({k: v.strip() for k, v in raw.items() if v is not None and v.strip()})


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()
