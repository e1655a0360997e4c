"""
Heuristic line parser.

Turns normalized OCR lines into schedule entries. A line only becomes an
entry when it carries a recognizable time range; everything else is dropped.
"""

import re
from typing import Iterable, List, Optional

import structlog

from ocr.fields import (
    TimeRange,
    extract_day,
    extract_location,
    extract_time_range,
    strip_fields,
)
from ocr.models import DEFAULT_DAY, ExtractedEntry
from ocr.normalizer import (
    collapse_whitespace,
    meridiem_of,
    normalize_clock,
    normalize_text,
    time_to_minutes,
)

logger = structlog.get_logger()

# Separator debris left behind once the fields are cut out
_EDGE_JUNK = ' .-–—:,;|/\\'

# "Calculus (Room 101)" leaves "( )" behind
_EMPTY_BRACKETS = re.compile(r'\(\s*\)|\[\s*\]|\{\s*\}')


class TimetableLineParser:
    """Field-by-field parser for recognized timetable text."""

    def parse_text(self, raw_text: Optional[str]) -> List[ExtractedEntry]:
        """Normalize a raw OCR blob and parse it."""
        return self.parse_lines(normalize_text(raw_text))

    def parse_lines(self, lines: Iterable[str]) -> List[ExtractedEntry]:
        entries: List[ExtractedEntry] = []
        for line in lines:
            entry = self.parse_line(line, ordinal=len(entries) + 1)
            if entry:
                entries.append(entry)
        logger.debug("heuristic_lines_parsed", entries=len(entries))
        return entries

    def parse_line(self, line: str, ordinal: int = 1) -> Optional[ExtractedEntry]:
        """
        Parse one line. ``ordinal`` numbers the synthesized ``Class N``
        title when nothing but fields is left on the line.
        """
        time_range = extract_time_range(line)
        if not time_range:
            return None

        times = self._to_24h(time_range)
        if not times:
            logger.debug("heuristic_bad_time", line=line)
            return None
        start, end = times

        day = extract_day(line) or DEFAULT_DAY
        location = extract_location(line) or ""

        title = _EMPTY_BRACKETS.sub(' ', strip_fields(line))
        title = collapse_whitespace(title).strip(_EDGE_JUNK)
        title = collapse_whitespace(title)
        if not title:
            title = f"Class {ordinal}"

        return ExtractedEntry(
            day=day,
            start_time=start,
            end_time=end,
            title=title,
            location=location,
        )

    def _to_24h(self, time_range: TimeRange) -> Optional[tuple]:
        """
        Normalize both tokens. A suffix written on only one token is shared
        with the other when that keeps the start at or before the end.
        """
        start = normalize_clock(time_range.start)
        end = normalize_clock(time_range.end)
        start_suffix = meridiem_of(time_range.start)
        end_suffix = meridiem_of(time_range.end)

        if end and end_suffix and not start_suffix:
            shared = normalize_clock(time_range.start, end_suffix)
            if shared and time_to_minutes(shared) <= time_to_minutes(end):
                start = shared
        elif start and start_suffix and not end_suffix:
            shared = normalize_clock(time_range.end, start_suffix)
            if shared and time_to_minutes(shared) >= time_to_minutes(start):
                end = shared

        if not start or not end:
            return None
        return start, end
