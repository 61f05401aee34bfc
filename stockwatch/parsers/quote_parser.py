from __future__ import annotations

from typing import Any, BinaryIO

from stockwatch.errors import ParseError
from stockwatch.parsers.envelope import extract_object, get_object, get_string, read_text
from stockwatch.schemas.quote import Quote, compute_percent_change

# provider placeholder for "no value"; decoded to None here and nowhere else
_ABSENT = "null"


def _to_float(obj: dict[str, Any], key: str) -> float:
    value = get_string(obj, key)
    if "_" in value:
        raise ParseError(f"invalid numeric value for {key}: {value!r}", field=key)
    try:
        return float(value)
    except ValueError as exc:
        raise ParseError(f"invalid numeric value for {key}: {value!r}", field=key) from exc


def _to_int(obj: dict[str, Any], key: str) -> int:
    value = get_string(obj, key)
    # int() and float() accept digit separators; the wire format does not
    if "_" in value:
        raise ParseError(f"invalid integer value for {key}: {value!r}", field=key)
    try:
        parsed = int(value)
    except ValueError as exc:
        raise ParseError(f"invalid integer value for {key}: {value!r}", field=key) from exc
    if parsed < 0:
        raise ParseError(f"negative value for {key}: {value!r}", field=key)
    return parsed


def _to_optional_str(obj: dict[str, Any], key: str) -> str | None:
    value = get_string(obj, key)
    return None if value == _ABSENT else value


def _day_range(obj: dict[str, Any]) -> tuple[float, float]:
    """DaysLow/DaysHigh pair; (0.0, 0.0) before the market opens."""
    if _to_optional_str(obj, "DaysLow") is None:
        return 0.0, 0.0
    return _to_float(obj, "DaysLow"), _to_float(obj, "DaysHigh")


def decode_quote(obj: dict[str, Any]) -> Quote:
    last_trade_price = _to_float(obj, "LastTradePriceOnly")
    change = _to_float(obj, "Change")
    days_low, days_high = _day_range(obj)

    return Quote(
        ticker=get_string(obj, "Symbol"),
        name=get_string(obj, "Name"),
        last_trade_price=last_trade_price,
        change=change,
        # always derived, never read from the payload
        percent_change=compute_percent_change(change, last_trade_price),
        days_low=days_low,
        days_high=days_high,
        year_low=_to_float(obj, "YearLow"),
        year_high=_to_float(obj, "YearHigh"),
        volume=_to_int(obj, "Volume"),
        average_daily_volume=_to_int(obj, "AverageDailyVolume"),
        market_capitalization=_to_optional_str(obj, "MarketCapitalization"),
        stock_exchange=get_string(obj, "StockExchange"),
    )


def _quote_nodes(stream: BinaryIO) -> list[dict[str, Any]]:
    envelope = extract_object(read_text(stream))
    results = get_object(get_object(envelope, "query"), "results")
    node = results.get("quote")
    if isinstance(node, dict):
        return [node]
    if isinstance(node, list) and all(isinstance(item, dict) for item in node):
        return node
    raise ParseError("missing object 'quote'", field="quote")


def parse_quotes(stream: BinaryIO) -> list[Quote]:
    """Parse a quote envelope holding one quote object or an array of them."""
    try:
        return [decode_quote(node) for node in _quote_nodes(stream)]
    finally:
        stream.close()


def parse_quote(stream: BinaryIO) -> Quote:
    quotes = parse_quotes(stream)
    if len(quotes) != 1:
        raise ParseError(f"expected exactly one quote, got {len(quotes)}", field="quote")
    return quotes[0]
