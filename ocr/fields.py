"""
Single-line field extractors: time range, weekday, room/location.

Each extractor is stateless and returns None when the line has no match.
"""

import re
from typing import NamedTuple, Optional

_CLOCK = r'\d{1,2}:\d{2}(?:\s*[ap]\.?m\b\.?)?'

# "9:00-10:30", "09:00 – 10:30", "2:00 PM to 3:00 PM"
TIME_RANGE_PATTERN = re.compile(
    r'(' + _CLOCK + r')\s*(?:[-–—]+|to)\s*(' + _CLOCK + r')',
    re.IGNORECASE
)

DAY_PATTERN = re.compile(
    r'\b(monday|tuesday|wednesday|thursday|friday|saturday|sunday)\b',
    re.IGNORECASE
)

# "Room 101", "Lab-3", "Hall B12", "lecture 4"
LOCATION_PATTERN = re.compile(
    r'\b(?:room|lab|hall|lecture)\s*[a-z]?[-\s]?\d+[a-z]?\b',
    re.IGNORECASE
)


class TimeRange(NamedTuple):
    start: str
    end: str


def extract_time_range(line: str) -> Optional[TimeRange]:
    """Start and end tokens exactly as written, meridiem suffix included."""
    m = TIME_RANGE_PATTERN.search(line or "")
    if not m:
        return None
    return TimeRange(m.group(1).strip(), m.group(2).strip())


def extract_day(line: str) -> Optional[str]:
    m = DAY_PATTERN.search(line or "")
    if not m:
        return None
    return m.group(1).capitalize()


def extract_location(line: str) -> Optional[str]:
    m = LOCATION_PATTERN.search(line or "")
    return m.group(0) if m else None


def strip_fields(line: str) -> str:
    """Remove the first time range, day and location match from a line."""
    for pattern in (TIME_RANGE_PATTERN, DAY_PATTERN, LOCATION_PATTERN):
        line = pattern.sub(' ', line, count=1)
    return line
