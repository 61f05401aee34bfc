import unittest
from unittest.mock import MagicMock

import requests

from stockwatch.errors import TransportError
from stockwatch.integrations.http_transport import HttpTransport, ResponseStream


def ok_response(chunks: list[bytes]) -> MagicMock:
    response = MagicMock()
    response.status_code = 200
    response.raise_for_status.return_value = None
    response.iter_content.return_value = iter(chunks)
    return response


class TestHttpTransport(unittest.TestCase):
    def test_fetch_uses_get_with_connect_and_read_timeouts(self):
        session = MagicMock()
        session.get.return_value = ok_response([b"{}"])
        transport = HttpTransport(session=session)

        stream = transport.fetch("https://example.test/q")

        session.get.assert_called_once_with(
            "https://example.test/q",
            timeout=(20.0, 25.0),
            stream=True,
        )
        self.assertIsInstance(stream, ResponseStream)
        stream.close()

    def test_stream_reads_body_from_start_and_closes_response(self):
        session = MagicMock()
        response = ok_response([b"hello ", b"world"])
        session.get.return_value = response
        transport = HttpTransport(session=session)

        with transport.fetch("https://example.test/q") as stream:
            self.assertEqual(stream.read(3), b"hel")
            self.assertEqual(stream.read(), b"lo world")
            self.assertEqual(stream.read(), b"")

        self.assertTrue(stream.closed)
        response.close.assert_called_once_with()

    def test_close_is_idempotent(self):
        response = ok_response([])
        stream = ResponseStream(response, "https://example.test/q")

        stream.close()
        stream.close()

        response.close.assert_called_once_with()

    def test_connection_failure_maps_to_transport_error(self):
        session = MagicMock()
        cause = requests.ConnectionError("connection refused")
        session.get.side_effect = cause
        transport = HttpTransport(session=session)

        with self.assertRaises(TransportError) as ctx:
            transport.fetch("https://example.test/q")

        self.assertIs(ctx.exception.__cause__, cause)
        self.assertEqual(ctx.exception.url, "https://example.test/q")

    def test_timeout_maps_to_transport_error(self):
        session = MagicMock()
        session.get.side_effect = requests.ConnectTimeout("timed out")
        transport = HttpTransport(session=session)

        with self.assertRaises(TransportError):
            transport.fetch("https://example.test/q")

    def test_non_2xx_closes_response_and_raises(self):
        session = MagicMock()
        response = MagicMock()
        response.status_code = 503
        response.raise_for_status.side_effect = requests.HTTPError("503 Server Error")
        session.get.return_value = response
        transport = HttpTransport(session=session)

        with self.assertRaises(TransportError):
            transport.fetch("https://example.test/q")

        response.close.assert_called_once_with()

    def test_read_failure_maps_to_transport_error(self):
        def broken_body():
            yield b"partial"
            raise requests.exceptions.ChunkedEncodingError("connection reset")

        session = MagicMock()
        response = ok_response([])
        response.iter_content.return_value = broken_body()
        session.get.return_value = response
        transport = HttpTransport(session=session)

        stream = transport.fetch("https://example.test/q")
        with self.assertRaises(TransportError):
            stream.read()
        stream.close()

        response.close.assert_called_once_with()

    def test_fetch_bytes_reads_everything_and_closes(self):
        session = MagicMock()
        response = ok_response([b"\x89PNG", b"data"])
        session.get.return_value = response
        transport = HttpTransport(session=session, connect_timeout_sec=1.0, read_timeout_sec=2.0)

        body = transport.fetch_bytes("https://example.test/chart")

        self.assertEqual(body, b"\x89PNGdata")
        self.assertEqual(session.get.call_args.kwargs["timeout"], (1.0, 2.0))
        response.close.assert_called_once_with()

    def test_default_transport_uses_module_level_requests(self):
        # no Session is shared between worker threads
        transport = HttpTransport()

        self.assertIs(transport.session, requests)


if __name__ == "__main__":
    unittest.main()
