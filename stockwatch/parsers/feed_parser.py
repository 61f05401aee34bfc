from __future__ import annotations

from collections import deque
from typing import Any, BinaryIO, Optional

from lxml import etree

from stockwatch.errors import ParseError


class _EventCursor:
    """Pull-style start/end events over a byte stream, fed chunk by chunk.

    ``depth`` counts open elements; it is 0 before the root opens and must be
    0 again when the stream is exhausted.
    """

    def __init__(self, stream: BinaryIO, chunk_size: int = 4096) -> None:
        self._stream = stream
        self._chunk_size = chunk_size
        self._parser = etree.XMLPullParser(events=("start", "end"), resolve_entities=False)
        self._pending: deque[tuple[str, Any]] = deque()
        self._eof = False
        self.depth = 0

    def _fill(self) -> None:
        chunk = self._stream.read(self._chunk_size)
        try:
            if chunk:
                self._parser.feed(chunk)
            else:
                self._eof = True
                self._parser.close()
        except etree.XMLSyntaxError as exc:
            raise ParseError(f"malformed feed document: {exc}") from exc
        for event, elem in self._parser.read_events():
            # comments and processing instructions carry a non-string tag
            if isinstance(elem.tag, str):
                self._pending.append((event, elem))

    def next(self) -> Optional[tuple[str, Any]]:
        while not self._pending:
            if self._eof:
                return None
            self._fill()
        event, elem = self._pending.popleft()
        self.depth += 1 if event == "start" else -1
        return event, elem

    def require(self, context: str) -> tuple[str, Any]:
        item = self.next()
        if item is None:
            raise ParseError(f"unexpected end of document inside <{context}>", field=context)
        return item


def _skip(cursor: _EventCursor, elem: Any) -> None:
    depth = 1
    while depth:
        event, _ = cursor.require(elem.tag)
        depth += 1 if event == "start" else -1
    elem.clear()


def _read_text(cursor: _EventCursor, name: str) -> str:
    event, elem = cursor.require(name)
    if event == "start":
        raise ParseError(f"unexpected <{elem.tag}> inside <{name}>", field=name)
    if elem.tag != name:
        raise ParseError(f"expected </{name}>, found </{elem.tag}>", field=name)
    return elem.text or ""


def _read_item(cursor: _EventCursor, item: Any) -> tuple[str | None, str | None]:
    title: str | None = None
    link: str | None = None
    while True:
        event, elem = cursor.require("item")
        if event == "end":
            item.clear()
            return title, link
        if elem.tag == "title":
            title = _read_text(cursor, "title")
        elif elem.tag == "link":
            link = _read_text(cursor, "link")
        else:
            _skip(cursor, elem)


def _read_feed(cursor: _EventCursor) -> dict[str | None, str | None]:
    entries: dict[str | None, str | None] = {}

    if cursor.next() is None:
        raise ParseError("empty feed document")

    opened = cursor.require("feed")
    if opened[0] == "start":
        # children of the first container element (the RSS channel)
        while True:
            event, elem = cursor.require(opened[1].tag)
            if event == "end":
                break
            if elem.tag == "item":
                title, link = _read_item(cursor, elem)
                entries[title] = link
            else:
                _skip(cursor, elem)

    while cursor.next() is not None:
        pass
    if cursor.depth != 0:
        raise ParseError(f"unbalanced feed document, {cursor.depth} element(s) left open")
    return entries


def parse_feed(stream: BinaryIO) -> dict[str | None, str | None]:
    """Parse an RSS document into item title -> link, in document order."""
    try:
        return _read_feed(_EventCursor(stream))
    finally:
        stream.close()
