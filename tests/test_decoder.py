"""
Tests for cell decoding and identifier cleanup.
"""

import math

import pytest

from csvgrid.core.decoder import decode_cell, parse_float, unquote_cell
from csvgrid.core.identifiers import enforce_naming_convention, is_valid_id


class TestParseFloat:
    """Locale-independent number parsing."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("2e9", 2e9),
            ("-10.34e-3", -10.34e-3),
            ("4", 4.0),
            ("+4.5", 4.5),
            (".5", 0.5),
            ("5.", 5.0),
            (" 6.99 ", 6.99),
            ("1E+3", 1000.0),
        ],
    )
    def test_numbers(self, text, expected):
        assert parse_float(text) == pytest.approx(expected)

    @pytest.mark.parametrize("text", ["", "abc", "1,000.5", "1_000", "nan", "inf", "1.2.3", "--1", "e5"])
    def test_rejected(self, text):
        assert parse_float(text) is None

    @pytest.mark.parametrize(
        "text, expected",
        [("Infinity", math.inf), ("-Infinity", -math.inf), ("+infinity", math.inf), (" INFINITY ", math.inf)],
    )
    def test_infinity_symbols(self, text, expected):
        assert parse_float(text) == expected
        assert parse_float(text, ",") == expected

    def test_overflow_is_infinite(self):
        assert parse_float("1e400") == math.inf

    def test_decimal_comma(self):
        assert parse_float("-10,34e-3", ",") == pytest.approx(-0.01034)
        assert parse_float("1.5", ",") is None


class TestDecodeCell:
    """Cell decoding never raises; failures decode to NaN."""

    def test_valid_value(self):
        assert decode_cell("2e9", "-999") == 2e9

    def test_invalid_token(self):
        assert math.isnan(decode_cell("-999", "-999"))

    def test_invalid_token_is_compared_verbatim(self):
        assert decode_cell("-999.0", "-999") == -999.0
        assert decode_cell(" -999", "-999") == -999.0

    def test_garbage(self):
        assert math.isnan(decode_cell("abc", None))
        assert math.isnan(decode_cell("", None))

    def test_quoted_value_is_nan(self):
        assert math.isnan(decode_cell('"4.5"', None))

    def test_decimal_separator(self):
        assert decode_cell("6,99", None, ",") == pytest.approx(6.99)
        assert math.isnan(decode_cell("6.99", None, ","))


class TestUnquote:

    def test_unquote(self):
        assert unquote_cell('"ab,""cd,e""f"') == 'ab,"cd,e"f'
        assert unquote_cell("plain") == "plain"
        assert unquote_cell('"') == '"'


class TestNamingConvention:
    """Resource id grammar and cleanup."""

    @pytest.mark.parametrize("resource_id", ["Foo", "_x", "a1_b2", "ThisIsTheFooVariable"])
    def test_valid(self, resource_id):
        assert is_valid_id(resource_id)

    @pytest.mark.parametrize("resource_id", ["", "1a", "a b", "a-b", "°C"])
    def test_invalid(self, resource_id):
        assert not is_valid_id(resource_id)

    def test_invalid_characters_removed(self):
        assert enforce_naming_convention("Wind speed (m/s)") == "Windspeedms"

    def test_invalid_leading_characters_removed(self):
        assert enforce_naming_convention("1st_value") == "st_value"
        assert enforce_naming_convention("2 (x)") == "x"

    def test_nothing_left(self):
        assert enforce_naming_convention("°%") is None
        assert enforce_naming_convention("123") is None
        assert enforce_naming_convention("") is None
