"""
Text normalization helpers for recognized timetable text.

Splits an OCR text blob into candidate lines and turns loose clock tokens
("9:00", "2:30 pm", "12:15AM") into 24-hour HH:MM strings.
"""

import re
from typing import List, Optional

MIN_LINE_LENGTH = 5

# Substring match, so "Timetable" headings are dropped along with "Table"
NOISE_PATTERN = re.compile(r'header|table|schedule', re.IGNORECASE)

CLOCK_PATTERN = re.compile(
    r'^\s*(\d{1,2}):(\d{2})\s*(?:([ap])\.?\s*m\.?)?\s*$',
    re.IGNORECASE
)

_WHITESPACE = re.compile(r'\s+')


def split_lines(text: Optional[str]) -> List[str]:
    """Trimmed, non-empty lines in their original order."""
    if not text:
        return []
    lines = (line.strip() for line in text.splitlines())
    return [line for line in lines if line]


def is_noise_line(line: str) -> bool:
    return len(line) < MIN_LINE_LENGTH or bool(NOISE_PATTERN.search(line))


def normalize_text(text: Optional[str]) -> List[str]:
    """
    Produce the line sequence handed to the heuristic parser.
    Short lines and header/table/schedule lines are dropped.
    """
    return [line for line in split_lines(text) if not is_noise_line(line)]


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE.sub(' ', text).strip()


def meridiem_of(token: str) -> Optional[str]:
    """'am', 'pm' or None for a clock token."""
    m = CLOCK_PATTERN.match(token or "")
    if not m or not m.group(3):
        return None
    return m.group(3).lower() + "m"


def normalize_clock(token: Optional[str], meridiem: Optional[str] = None) -> Optional[str]:
    """
    Convert a clock token to 24h HH:MM.

    A suffix on the token itself wins over the ``meridiem`` argument.
    A 24h hour with a stray PM ("13:00 PM") keeps its 24h reading.
    Returns None when the token is not a valid time of day.
    """
    if not token:
        return None
    m = CLOCK_PATTERN.match(token)
    if not m:
        return None

    h, mi = int(m.group(1)), int(m.group(2))
    suffix = (m.group(3).lower() + "m") if m.group(3) else meridiem

    if mi > 59:
        return None
    if suffix == "pm" and 13 <= h <= 23:
        suffix = None

    if suffix:
        if h < 1 or h > 12:
            return None
        if suffix == "pm" and h < 12:
            h += 12
        elif suffix == "am" and h == 12:
            h = 0
    elif h > 23:
        return None

    return f"{h:02d}:{mi:02d}"


def time_to_minutes(t: str) -> Optional[int]:
    """Convert HH:MM to total minutes."""
    try:
        parts = t.split(':')
        return int(parts[0]) * 60 + int(parts[1])
    except (AttributeError, ValueError, IndexError):
        return None


def add_minutes(time_str: str, minutes: int) -> str:
    total = time_to_minutes(time_str) + minutes
    return f"{(total // 60) % 24:02d}:{total % 60:02d}"
