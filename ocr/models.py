"""
Schedule entry models shared by every extraction stage.
"""

from dataclasses import dataclass
from typing import Dict, List

WEEKDAYS = (
    "Monday", "Tuesday", "Wednesday", "Thursday",
    "Friday", "Saturday", "Sunday",
)

DEFAULT_DAY = "Monday"

SOURCE_VISION = "vision"
SOURCE_HEURISTIC = "heuristic"
SOURCE_FALLBACK = "fallback"


@dataclass(frozen=True)
class ExtractedEntry:
    """One class/event row of a timetable. Times are 24h HH:MM."""

    day: str
    start_time: str
    end_time: str
    title: str
    location: str = ""

    def to_dict(self) -> Dict[str, str]:
        """JSON shape used on the wire and by the persistence layer."""
        return {
            "day": self.day,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "title": self.title,
            "location": self.location,
        }


@dataclass(frozen=True)
class ExtractionResult:
    """Entries plus the stage that produced them."""

    entries: List[ExtractedEntry]
    source: str

    @property
    def is_fallback(self) -> bool:
        return self.source == SOURCE_FALLBACK

    def to_dict(self) -> Dict:
        return {
            "result": [e.to_dict() for e in self.entries],
            "source": self.source,
        }
