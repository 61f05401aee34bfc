from __future__ import annotations

from typing import Any, Iterator, Optional

import requests

from stockwatch.errors import TransportError


class ResponseStream:
    """Readable body of one GET response; the consumer must close it."""

    def __init__(self, response: Any, url: str, chunk_size: int = 8192) -> None:
        self._response = response
        self.url = url
        self._chunks: Iterator[bytes] = iter(response.iter_content(chunk_size=chunk_size))
        self._buffer = b""
        self.closed = False

    def _next_chunk(self) -> bytes | None:
        try:
            return next(self._chunks, None)
        except requests.RequestException as exc:
            raise TransportError(f"failed reading response body: {exc}", url=self.url) from exc

    def read(self, size: int = -1) -> bytes:
        if self.closed:
            raise ValueError("read from closed stream")
        if size is None or size < 0:
            parts = [self._buffer]
            while (chunk := self._next_chunk()) is not None:
                parts.append(chunk)
            self._buffer = b""
            return b"".join(parts)

        while len(self._buffer) < size:
            chunk = self._next_chunk()
            if chunk is None:
                break
            self._buffer += chunk
        data, self._buffer = self._buffer[:size], self._buffer[size:]
        return data

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._response.close()

    def __enter__(self) -> "ResponseStream":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class HttpTransport:
    """Single bounded GET per call, no retries and no request body."""

    def __init__(
        self,
        *,
        connect_timeout_sec: float = 20.0,
        read_timeout_sec: float = 25.0,
        session: Optional[Any] = None,
    ) -> None:
        self.connect_timeout_sec = connect_timeout_sec
        self.read_timeout_sec = read_timeout_sec
        self.session = session or requests

    def fetch(self, url: str) -> ResponseStream:
        try:
            response = self.session.get(
                url,
                timeout=(self.connect_timeout_sec, self.read_timeout_sec),
                stream=True,
            )
        except requests.RequestException as exc:
            print(f"[TRANSPORT][fetch_error] url={url} error={exc}", flush=True)
            raise TransportError(f"request failed: {exc}", url=url) from exc

        try:
            response.raise_for_status()
        except requests.RequestException as exc:
            response.close()
            print(
                f"[TRANSPORT][fetch_error] url={url} status={getattr(response, 'status_code', None)}",
                flush=True,
            )
            raise TransportError(f"unexpected response: {exc}", url=url) from exc

        return ResponseStream(response, url)

    def fetch_bytes(self, url: str) -> bytes:
        with self.fetch(url) as stream:
            return stream.read()
