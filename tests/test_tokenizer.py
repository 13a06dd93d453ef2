"""
Tests for the quote-aware cell tokenizer.

Tests cover:
- Plain and quoted fields
- Escaped quotes and separators inside quotes
- Short lines and malformed quoting
"""

import pytest

from csvgrid.core.decoder import unquote_cell
from csvgrid.core.tokenizer import get_cell, locate_cell


@pytest.mark.parametrize(
    "line, index, expected",
    [
        ("1.2,3.4,4.5", 2, "4.5"),
        ('".,.",1,abc', 2, "abc"),
        ('1,".,.",abc', 2, "abc"),
        ('1,abc,".,."', 1, "abc"),
        ('"ab,""cd,e""f",1.20', 1, "1.20"),
    ],
)
def test_get_cell(line, index, expected):
    assert get_cell(line, index, ",") == expected


class TestPlainFields:
    """Fields without quotes."""

    def test_first_and_last_field(self):
        line = "a;b;c"
        assert get_cell(line, 0, ";") == "a"
        assert get_cell(line, 2, ";") == "c"

    def test_bounds_are_slices_of_the_line(self):
        line = "10;200;3000"
        assert locate_cell(line, 1, ";") == (3, 6)

    def test_empty_fields(self):
        line = "a,,c,"
        assert get_cell(line, 1, ",") == ""
        assert get_cell(line, 3, ",") == ""

    def test_empty_line_has_one_empty_field(self):
        assert get_cell("", 0, ",") == ""
        assert locate_cell("", 1, ",") is None

    def test_separator_is_not_a_comma_by_default(self):
        assert get_cell("1,5;2,5", 1, ";") == "2,5"


class TestShortLines:
    """Lines with fewer fields than requested."""

    def test_index_past_end(self):
        assert locate_cell("1,2,3", 3, ",") is None

    def test_negative_index(self):
        assert locate_cell("1,2,3", -1, ",") is None

    def test_trailing_quoted_field_is_last(self):
        assert locate_cell('1,"x"', 2, ",") is None


class TestQuotedFields:
    """Quoted fields and RFC 4180 escapes."""

    def test_quotes_are_part_of_the_bounds(self):
        line = '".,.",1'
        start, stop = locate_cell(line, 0, ",")
        assert line[start:stop] == '".,."'

    def test_escaped_quotes_are_skipped(self):
        line = '"ab,""cd,e""f",1.20'
        cell = get_cell(line, 0, ",")
        assert cell == '"ab,""cd,e""f"'
        assert unquote_cell(cell) == 'ab,"cd,e"f'

    def test_empty_quoted_field(self):
        assert get_cell('"",x', 0, ",") == '""'
        assert get_cell('"",x', 1, ",") == "x"

    def test_unterminated_quote(self):
        assert locate_cell('1,"abc', 1, ",") is None
        assert locate_cell('1,"abc,2', 2, ",") is None

    def test_text_after_closing_quote(self):
        assert locate_cell('"ab"c,1', 0, ",") is None
        assert locate_cell('"ab"c,1', 1, ",") is None

    def test_fields_before_malformed_field_are_found(self):
        assert get_cell('1,2,"oops', 1, ",") == "2"

    def test_quote_inside_unquoted_field_is_literal(self):
        assert get_cell('ab"c,1', 0, ",") == 'ab"c'
        assert get_cell('ab"c,1', 1, ",") == "1"


class TestFieldIndependence:
    """Quoting in one field never changes the extraction of another."""

    @pytest.mark.parametrize(
        "fields",
        [
            ["1", "2", "3"],
            ["", "x", ""],
            ["abc", "4.5e3", "-7", "zz"],
        ],
    )
    def test_joined_fields_roundtrip(self, fields):
        line = ";".join(fields)

        for k, expected in enumerate(fields):
            assert get_cell(line, k, ";") == expected
        assert locate_cell(line, len(fields), ";") is None

    @pytest.mark.parametrize("quoted", ['"a;b"', '"x""y;z"', '""', '";;;"'])
    def test_quoted_neighbour(self, quoted):
        for position in range(3):
            fields = ["1", "2", "3"]
            fields[position] = quoted
            line = ";".join(fields)

            for k in range(3):
                expected = quoted if k == position else fields[k]
                assert get_cell(line, k, ";") == expected
