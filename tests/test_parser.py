"""Unit tests for the heuristic line parser."""

from ocr.models import ExtractedEntry
from ocr.parser import TimetableLineParser


class TestParseLine:

    def setup_method(self):
        self.parser = TimetableLineParser()

    def test_full_line(self):
        entry = self.parser.parse_line("Monday 09:00-10:30 Room 101 Calculus")
        assert entry == ExtractedEntry(
            day="Monday",
            start_time="09:00",
            end_time="10:30",
            title="Calculus",
            location="Room 101",
        )

    def test_line_without_time_is_skipped(self):
        assert self.parser.parse_line("Room 101") is None
        assert self.parser.parse_line("Monday Calculus Room 101") is None

    def test_day_defaults_to_monday(self):
        entry = self.parser.parse_line("10:00-11:00 Chemistry")
        assert entry.day == "Monday"
        assert entry.title == "Chemistry"

    def test_location_defaults_to_empty(self):
        entry = self.parser.parse_line("Tuesday 10:00-11:00 Chemistry")
        assert entry.location == ""

    def test_single_digit_hour_padded(self):
        entry = self.parser.parse_line("Wednesday 9:00-10:00 Biology")
        assert entry.start_time == "09:00"
        assert entry.end_time == "10:00"

    def test_pm_times_converted(self):
        entry = self.parser.parse_line("Thursday 2:00 PM - 3:30 PM History")
        assert (entry.start_time, entry.end_time) == ("14:00", "15:30")
        assert entry.title == "History"

    def test_trailing_suffix_shared_with_start(self):
        entry = self.parser.parse_line("Friday 2:00-3:30 pm Drama")
        assert (entry.start_time, entry.end_time) == ("14:00", "15:30")

    def test_trailing_suffix_not_shared_across_noon(self):
        entry = self.parser.parse_line("Friday 11:00-1:00 PM Seminar")
        assert (entry.start_time, entry.end_time) == ("11:00", "13:00")

    def test_end_before_start_passes_through(self):
        entry = self.parser.parse_line("Friday 15:00-14:00 Odd")
        assert (entry.start_time, entry.end_time) == ("15:00", "14:00")

    def test_24h_time_with_stray_pm(self):
        entry = self.parser.parse_line("Tuesday 13:00-14:00 PM Lab")
        assert (entry.start_time, entry.end_time) == ("13:00", "14:00")
        assert entry.title == "Lab"

    def test_leading_suffix_shared_with_end(self):
        entry = self.parser.parse_line("Monday 2:00 PM - 3:00 Art")
        assert (entry.start_time, entry.end_time) == ("14:00", "15:00")

    def test_leading_suffix_not_shared_backwards(self):
        entry = self.parser.parse_line("Monday 11:00 PM - 1:00 Night Lab")
        assert (entry.start_time, entry.end_time) == ("23:00", "01:00")

    def test_empty_brackets_removed_from_title(self):
        entry = self.parser.parse_line("Monday 09:00-10:30 Calculus (Room 101)")
        assert entry.title == "Calculus"
        assert entry.location == "Room 101"

    def test_invalid_clock_skips_line(self):
        assert self.parser.parse_line("Monday 25:00-26:00 Nothing") is None

    def test_separator_debris_removed_from_title(self):
        entry = self.parser.parse_line("Monday | 09:00-10:00 | Room 12 | Statistics")
        assert entry.title == "Statistics"

    def test_title_keeps_inner_words(self):
        entry = self.parser.parse_line("Intro to Economics Tuesday 13:00-14:30 Lab-3")
        assert entry.title == "Intro to Economics"
        assert entry.location == "Lab-3"
        assert entry.day == "Tuesday"


class TestParseLines:

    def setup_method(self):
        self.parser = TimetableLineParser()

    def test_empty(self):
        assert self.parser.parse_lines([]) == []
        assert self.parser.parse_text("") == []

    def test_synthesized_titles_follow_input_order(self):
        entries = self.parser.parse_lines([
            "Monday 9:00-10:00 Room 101",
            "Monday 9:00-10:00 Room 101",
        ])
        assert [e.title for e in entries] == ["Class 1", "Class 2"]

    def test_synthesized_title_counts_produced_entries_only(self):
        entries = self.parser.parse_lines([
            "Notes without times",
            "Tuesday 8:00-9:00 Algebra",
            "Tuesday 9:00-10:00 Room 7",
        ])
        assert [e.title for e in entries] == ["Algebra", "Class 2"]

    def test_parse_text_normalizes_first(self):
        text = "\n".join([
            "WEEKLY SCHEDULE",
            "Mon",
            "Monday 09:00-10:30 Room 101 Calculus",
            "",
            "Wednesday 11:00 to 12:00 Hall 2 Physics",
            "Office hours by appointment",
        ])
        entries = self.parser.parse_text(text)
        assert [e.to_dict() for e in entries] == [
            {"day": "Monday", "startTime": "09:00", "endTime": "10:30",
             "title": "Calculus", "location": "Room 101"},
            {"day": "Wednesday", "startTime": "11:00", "endTime": "12:00",
             "title": "Physics", "location": "Hall 2"},
        ]
