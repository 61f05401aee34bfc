from __future__ import annotations


class StockwatchError(Exception):
    """Base error for market data acquisition and parsing."""


class NetworkUnavailableError(StockwatchError):
    """No active network; raised before any request is attempted."""


class TransportError(StockwatchError):
    def __init__(self, message: str, *, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class ParseError(StockwatchError):
    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class RefreshInProgressError(StockwatchError):
    """A refresh is already running against the same portfolio."""
