from __future__ import annotations

import json
from typing import Any, BinaryIO

from stockwatch.errors import ParseError, TransportError


def read_text(stream: BinaryIO, *, encoding: str = "utf-8") -> str:
    raw = stream.read()
    try:
        return raw.decode(encoding)
    except UnicodeDecodeError as exc:
        raise TransportError(f"response body is not valid {encoding}") from exc


def extract_object(text: str) -> dict[str, Any]:
    """Load the JSON object between the first '{' and the last '}', dropping any callback wrapper."""
    start = text.find("{")
    end = text.rfind("}")
    if start < 0 or end < start:
        raise ParseError("payload does not contain a JSON object")
    try:
        decoded = json.loads(text[start : end + 1])
    except json.JSONDecodeError as exc:
        raise ParseError(f"malformed JSON payload: {exc.msg}") from exc
    if not isinstance(decoded, dict):
        raise ParseError("payload must be a JSON object")
    return decoded


def get_object(parent: dict[str, Any], key: str) -> dict[str, Any]:
    value = parent.get(key)
    if not isinstance(value, dict):
        raise ParseError(f"missing object {key!r}", field=key)
    return value


def get_array(parent: dict[str, Any], key: str) -> list[Any]:
    value = parent.get(key)
    if not isinstance(value, list):
        raise ParseError(f"missing array {key!r}", field=key)
    return value


def get_string(obj: dict[str, Any], key: str) -> str:
    if key not in obj:
        raise ParseError(f"missing field {key!r}", field=key)
    value = obj[key]
    # org.json-style getString: JSON null and scalars read back as text
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise ParseError(f"field {key!r} is not a scalar value", field=key)
