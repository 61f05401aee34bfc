from __future__ import annotations

from typing import BinaryIO

from stockwatch.errors import ParseError
from stockwatch.parsers.envelope import extract_object, get_array, get_object, get_string, read_text


def suggestion_label(name: str, symbol: str) -> str:
    return f"{name} ({symbol})"


def parse_tickers(stream: BinaryIO) -> dict[str, str]:
    """Parse a ticker-search payload into display label -> symbol, in result order."""
    try:
        envelope = extract_object(read_text(stream))
        results = get_array(get_object(envelope, "ResultSet"), "Result")

        tickers: dict[str, str] = {}
        for position, row in enumerate(results):
            if not isinstance(row, dict):
                raise ParseError(f"result {position} is not an object", field="Result")
            name = get_string(row, "name")
            symbol = get_string(row, "symbol")
            tickers[suggestion_label(name, symbol)] = symbol
        return tickers
    finally:
        stream.close()
