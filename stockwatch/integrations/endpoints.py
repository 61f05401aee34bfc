from __future__ import annotations

from typing import get_args
from urllib.parse import quote_plus

from stockwatch.config.settings import ChartSpan, Settings, get_settings

CHART_SPANS: tuple[str, ...] = get_args(ChartSpan)


def encode_param(value: str) -> str:
    """Lowercase and form-encode one URL parameter; reserved characters never pass through."""
    return quote_plus(value.strip().lower(), safe="")


class Endpoints:
    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()

    def quote_url(self, ticker: str) -> str:
        return self.settings.QUOTE_URL.replace("{symbol}", encode_param(ticker))

    def feed_url(self, ticker: str) -> str:
        return self.settings.FEED_URL.replace("{symbol}", encode_param(ticker))

    def search_url(self, query: str) -> str:
        return self.settings.SEARCH_URL.replace("{query}", encode_param(query))

    def chart_url(self, ticker: str, span: str | None = None) -> str:
        value = span or self.settings.DEFAULT_CHART_SPAN
        if value not in CHART_SPANS:
            raise ValueError(f"span must be one of: {', '.join(CHART_SPANS)}")
        return self.settings.CHART_URL.replace("{symbol}", encode_param(ticker)).replace("{span}", value)
