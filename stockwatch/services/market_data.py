from __future__ import annotations

from stockwatch.config.settings import Settings, get_settings
from stockwatch.errors import ParseError
from stockwatch.integrations.endpoints import Endpoints
from stockwatch.integrations.http_transport import HttpTransport
from stockwatch.parsers.feed_parser import parse_feed
from stockwatch.parsers.quote_parser import parse_quote
from stockwatch.parsers.ticker_parser import parse_tickers
from stockwatch.schemas.quote import Quote


class MarketDataService:
    """One request and one parse per call; errors propagate to the caller."""

    def __init__(
        self,
        *,
        transport: HttpTransport | None = None,
        endpoints: Endpoints | None = None,
        settings: Settings | None = None,
    ) -> None:
        cfg = settings or get_settings()
        self.endpoints = endpoints or Endpoints(cfg)
        self.transport = transport or HttpTransport(
            connect_timeout_sec=cfg.CONNECT_TIMEOUT_SEC,
            read_timeout_sec=cfg.READ_TIMEOUT_SEC,
        )

    def fetch_quote(self, ticker: str) -> Quote:
        return parse_quote(self.transport.fetch(self.endpoints.quote_url(ticker)))

    def fetch_feed(self, ticker: str) -> dict[str | None, str | None]:
        return parse_feed(self.transport.fetch(self.endpoints.feed_url(ticker)))

    def search_tickers(self, query: str) -> dict[str, str]:
        return parse_tickers(self.transport.fetch(self.endpoints.search_url(query)))

    def fetch_chart(self, ticker: str, span: str | None = None) -> bytes:
        url = self.endpoints.chart_url(ticker, span)
        image = self.transport.fetch_bytes(url)
        if not image:
            raise ParseError("empty chart image", field="chart")
        return image
