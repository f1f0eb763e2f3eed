"""Tests for numeric, date and text normalization."""

import pytest

from src.stage1_bundler.normalization import (
    AutoNormalizer,
    DateNormalizer,
    NumericNormalizer,
    TextCleaner,
    parse_float,
    to_number,
)


class TestNumbers:
    """parse_float, to_number and NumericNormalizer."""

    def test_parse_float_reads_leading_number(self):
        assert parse_float("12abc") == 12.0
        assert parse_float("  -3.5e2 units") == -350.0
        assert parse_float(7) == 7.0

    def test_parse_float_rejects_non_numbers(self):
        assert parse_float("abc") is None
        assert parse_float(None) is None
        assert parse_float(True) is None
        assert parse_float(float("nan")) is None

    def test_to_number_is_strict(self):
        assert to_number("3.5") == 3.5
        assert to_number(" 10 ") == 10.0
        assert to_number("") is None
        assert to_number("12abc") is None
        assert to_number("inf") is None
        assert to_number(False) is None

    def test_currency_and_separators(self):
        assert NumericNormalizer.normalize("$1,234.50") == 1234.5
        assert NumericNormalizer.normalize("€ 99") == 99.0
        assert NumericNormalizer.normalize("") is None
        assert NumericNormalizer.normalize("n/a") is None

    def test_percent(self):
        assert NumericNormalizer.normalize_percent("45%") == pytest.approx(0.45)
        assert NumericNormalizer.normalize_percent("0.3") == 0.3
        assert NumericNormalizer.normalize_percent(None) is None

    def test_formatting(self):
        assert NumericNormalizer.format(1234.5) == "1,234.5"
        assert NumericNormalizer.format(None) == "N/A"
        assert NumericNormalizer.format_currency(-1234.5) == "-$1,234.50"
        assert NumericNormalizer.format_currency(10, "EUR") == "€10.00"
        assert NumericNormalizer.round(2.345678) == 2.35


class TestDates:
    """DateNormalizer."""

    def test_normalize_to_iso_utc(self):
        assert DateNormalizer.normalize("2024-01-15") == "2024-01-15T00:00:00.000Z"
        assert DateNormalizer.normalize("2024-01-15T10:30:00+02:00") == "2024-01-15T08:30:00.000Z"

    def test_numbers_are_epoch_milliseconds(self):
        assert DateNormalizer.normalize(0) == "1970-01-01T00:00:00.000Z"
        assert DateNormalizer.normalize(86_400_000) == "1970-01-02T00:00:00.000Z"

    def test_unparseable_values(self):
        assert DateNormalizer.normalize("not a date") is None
        assert DateNormalizer.normalize("") is None
        assert DateNormalizer.normalize(None) is None
        assert DateNormalizer.format("garbage") == "N/A"

    def test_helpers(self):
        assert DateNormalizer.to_date_string("2023-07-04T12:00:00Z") == "2023-07-04"
        assert DateNormalizer.extract_year("2023-07-04") == 2023
        assert DateNormalizer.format("2025-01-15") == "1/15/2025"

    def test_parse_fallback_layouts(self):
        assert DateNormalizer.parse("03/04/2024").strftime("%Y-%m-%d") == "2024-03-04"
        # Month 13 is impossible, so the swapped reading wins
        assert DateNormalizer.parse("13/01/2024").strftime("%Y-%m-%d") == "2024-01-13"
        assert DateNormalizer.parse("2024.03.05").strftime("%Y-%m-%d") == "2024-03-05"
        assert DateNormalizer.parse("someday") is None


class TestText:
    """TextCleaner."""

    def test_clean_strips_markup(self):
        assert TextCleaner.clean("Hello <b>world</b>&nbsp;&amp; co") == "Hello world & co"
        assert TextCleaner.clean("Result[1] holds") == "Result holds"
        assert TextCleaner.clean(None) == ""

    def test_clean_leaves_single_spaces_where_markup_was(self):
        assert TextCleaner.clean("  Big [1] Title ") == "Big Title"
        assert TextCleaner.clean("See <i>the</i> [ref\n2] notes") == "See the notes"

    def test_clean_abstract_joins_lines(self):
        assert TextCleaner.clean_abstract("First line\r\n\n  second   line\n") == "First line second line"

    def test_truncate_and_sanitize(self):
        assert TextCleaner.truncate("abcdefgh", 4) == "abcd..."
        assert TextCleaner.truncate("abc", 4) == "abc"
        assert TextCleaner.sanitize("Hi! <there>_ok-") == "Hi there_ok-"


class TestAutoNormalizer:
    """Key-routed field normalization."""

    def test_routes_fields_by_key(self):
        record = {
            "order_date": "2024-01-15",
            "revenue": "$1,200",
            "growth_rate": "12%",
            "tags": "a; b",
            "title": "  Big   Title ",
            "other": 5,
        }

        normalized = AutoNormalizer().normalize_record(record)

        assert normalized == {
            "order_date": "2024-01-15T00:00:00.000Z",
            "revenue": 1200.0,
            "growth_rate": pytest.approx(0.12),
            "tags": ["a", "b"],
            "title": "Big Title",
            "other": 5,
        }

    def test_normalizing_twice_changes_nothing(self):
        normalizer = AutoNormalizer()
        record = {
            "title": "  Big [1] Title ",
            "description": "Line one\n\n  line <b>two</b>",
            "revenue": "$1,200",
            "tags": "a; b",
            "published": "2024-01-15",
        }

        once = normalizer.normalize_record(record)

        assert once["title"] == "Big Title"
        assert normalizer.normalize_record(once) == once

    def test_does_not_mutate_input(self):
        record = {"revenue": "$5"}
        AutoNormalizer().normalize_record(record)

        assert record == {"revenue": "$5"}

    def test_first_present_delimiter_wins(self):
        normalized = AutoNormalizer().normalize_record({"keywords": "x|y, z"})

        assert normalized["keywords"] == ["x|y", "z"]

    def test_non_dict_records_pass_through(self):
        assert AutoNormalizer().normalize_records([1, {"count": "3"}]) == [1, {"count": 3.0}]
