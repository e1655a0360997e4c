"""
Static timetable returned when no extraction stage produced entries.
Callers can tell it apart through the ``fallback`` result source.
"""

from typing import List

from ocr.models import ExtractedEntry

FALLBACK_ENTRIES = (
    ExtractedEntry("Monday", "09:00", "10:30", "Mathematics", "Room 101"),
    ExtractedEntry("Monday", "11:00", "12:30", "Physics", "Lab 3"),
    ExtractedEntry("Tuesday", "09:00", "10:30", "Computer Science", "Room 205"),
    ExtractedEntry("Wednesday", "13:00", "14:30", "Economics", "Hall B"),
    ExtractedEntry("Thursday", "15:00", "16:30", "History", "Room 110"),
    ExtractedEntry("Friday", "10:00", "11:30", "English Literature", "Room 302"),
)


def fallback_entries() -> List[ExtractedEntry]:
    return list(FALLBACK_ENTRIES)
