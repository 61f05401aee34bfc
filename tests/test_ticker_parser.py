import io
import json
import unittest

from stockwatch.errors import ParseError
from stockwatch.parsers.ticker_parser import parse_tickers


def jsonp(results) -> io.BytesIO:
    body = json.dumps({"ResultSet": {"Query": "arm", "Result": results}})
    return io.BytesIO(f"YAHOO.Finance.SymbolSuggest.ssCallback({body})".encode("utf-8"))


class TestTickerParser(unittest.TestCase):
    def test_results_map_label_to_symbol_in_order(self):
        stream = jsonp(
            [
                {"symbol": "ARM.L", "name": "ARM Holdings plc", "exch": "LSE", "type": "S"},
                {"symbol": "ARMH", "name": "ARM Holdings plc", "exch": "NMS", "type": "S"},
                {"symbol": "^FTSE", "name": "FTSE 100", "exch": "FSI", "type": "I"},
            ]
        )

        tickers = parse_tickers(stream)

        self.assertEqual(
            list(tickers.items()),
            [
                ("ARM Holdings plc (ARM.L)", "ARM.L"),
                ("ARM Holdings plc (ARMH)", "ARMH"),
                ("FTSE 100 (^FTSE)", "^FTSE"),
            ],
        )
        self.assertTrue(stream.closed)

    def test_empty_result_set_gives_empty_mapping(self):
        self.assertEqual(parse_tickers(jsonp([])), {})

    def test_missing_symbol_fails_whole_call(self):
        stream = jsonp([{"symbol": "A", "name": "Agilent"}, {"name": "No Symbol Inc"}])

        with self.assertRaises(ParseError) as ctx:
            parse_tickers(stream)

        self.assertEqual(ctx.exception.field, "symbol")
        self.assertTrue(stream.closed)

    def test_missing_result_array_raises(self):
        stream = io.BytesIO(b'cb({"ResultSet": {"Query": "x"}})')

        with self.assertRaises(ParseError) as ctx:
            parse_tickers(stream)

        self.assertEqual(ctx.exception.field, "Result")

    def test_non_object_result_raises(self):
        with self.assertRaises(ParseError):
            parse_tickers(jsonp(["ARM.L"]))

    def test_unbalanced_payload_raises(self):
        with self.assertRaises(ParseError):
            parse_tickers(io.BytesIO(b'cb({"ResultSet": {"Result": [}'))


if __name__ == "__main__":
    unittest.main()
