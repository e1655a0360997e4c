"""Unit tests for recognized-text normalization."""

import pytest

from ocr.normalizer import (
    add_minutes,
    collapse_whitespace,
    meridiem_of,
    normalize_clock,
    normalize_text,
    split_lines,
    time_to_minutes,
)


class TestNormalizeText:

    def test_empty_input(self):
        assert normalize_text("") == []
        assert normalize_text(None) == []

    def test_trims_and_drops_blank_lines(self):
        text = "  Monday 9:00-10:00 Math  \n\n   \n\tTuesday 11:00-12:00 Art\n"
        assert normalize_text(text) == [
            "Monday 9:00-10:00 Math",
            "Tuesday 11:00-12:00 Art",
        ]

    def test_drops_short_lines(self):
        assert normalize_text("Mon\n1234\nabcde") == ["abcde"]

    def test_drops_header_noise_case_insensitive(self):
        text = "\n".join([
            "CLASS SCHEDULE 2024",
            "Header row here",
            "My Timetable",
            "Monday 9:00-10:00 Math",
        ])
        assert normalize_text(text) == ["Monday 9:00-10:00 Math"]

    def test_preserves_order(self):
        text = "Friday 9:00-10:00 B\nMonday 9:00-10:00 A"
        assert normalize_text(text) == [
            "Friday 9:00-10:00 B",
            "Monday 9:00-10:00 A",
        ]

    def test_split_lines_keeps_short_lines(self):
        assert split_lines("a\r\nbb\n") == ["a", "bb"]


class TestNormalizeClock:

    @pytest.mark.parametrize("token,expected", [
        ("9:00", "09:00"),
        ("09:30", "09:30"),
        ("23:59", "23:59"),
        ("2:00 PM", "14:00"),
        ("2:00pm", "14:00"),
        ("12:00 PM", "12:00"),
        ("12:15 AM", "00:15"),
        ("11:45 a.m.", "11:45"),
        ("13:00 PM", "13:00"),
        ("23:30 pm", "23:30"),
    ])
    def test_valid_tokens(self, token, expected):
        assert normalize_clock(token) == expected

    @pytest.mark.parametrize("token", ["", None, "24:00", "9:60", "13:00 AM", "24:00 PM", "0:30 am", "noon"])
    def test_invalid_tokens(self, token):
        assert normalize_clock(token) is None

    def test_meridiem_argument_applies_to_bare_token(self):
        assert normalize_clock("3:00", "pm") == "15:00"

    def test_token_suffix_wins_over_argument(self):
        assert normalize_clock("9:00 AM", "pm") == "09:00"

    def test_meridiem_of(self):
        assert meridiem_of("2:00 PM") == "pm"
        assert meridiem_of("2:00 a.m.") == "am"
        assert meridiem_of("2:00") is None


class TestTimeHelpers:

    def test_time_to_minutes(self):
        assert time_to_minutes("01:30") == 90
        assert time_to_minutes("bad") is None

    def test_add_minutes_wraps_midnight(self):
        assert add_minutes("09:30", 60) == "10:30"
        assert add_minutes("23:30", 60) == "00:30"

    def test_collapse_whitespace(self):
        assert collapse_whitespace("  a \t b  ") == "a b"
