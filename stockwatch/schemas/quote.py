from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from pydantic import BaseModel, Field


class Quote(BaseModel):
    """Last known snapshot of one monitored instrument."""

    ticker: str
    name: str | None = None
    last_trade_price: float = 0.0
    change: float = 0.0
    percent_change: float = 0.0
    days_low: float = 0.0
    days_high: float = 0.0
    year_low: float = 0.0
    year_high: float = 0.0
    volume: int = Field(default=0, ge=0)
    average_daily_volume: int = Field(default=0, ge=0)
    market_capitalization: str | None = None
    stock_exchange: str | None = None

    @classmethod
    def placeholder(cls, ticker: str) -> "Quote":
        return cls(ticker=ticker)

    @property
    def has_data(self) -> bool:
        return self.name is not None

    @property
    def market_open(self) -> bool:
        # days_low == 0 marks a session that has not opened yet
        return self.days_low != 0


def compute_percent_change(change: float, last_trade_price: float) -> float:
    if last_trade_price == 0:
        return 0.0
    return change / last_trade_price * 100.0


def format_two_places(value: float) -> str:
    return str(Decimal(repr(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
