"""
Schedule entry store.

In-memory stand-in for the relational schedule_entries table: one insert
per extracted entry, no transaction across a batch.
"""

import itertools
import threading
from typing import Any, Dict, Iterable, List

import structlog

from ocr.models import ExtractedEntry

logger = structlog.get_logger()

DEFAULT_NOTIFY_BEFORE = 15  # minutes


class ScheduleStore:
    """Schedule rows grouped by timetable id."""

    def __init__(self):
        self._rows: Dict[int, List[Dict[str, Any]]] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def create_entry(self, timetable_id: int, entry: ExtractedEntry) -> Dict[str, Any]:
        with self._lock:
            row = {
                "id": next(self._ids),
                "timetableId": timetable_id,
                **entry.to_dict(),
                "color": None,
                "recurring": True,
                "notifyBefore": DEFAULT_NOTIFY_BEFORE,
            }
            self._rows.setdefault(timetable_id, []).append(row)
        return dict(row)

    def create_entries(
        self, timetable_id: int, entries: Iterable[ExtractedEntry]
    ) -> List[Dict[str, Any]]:
        created = [self.create_entry(timetable_id, e) for e in entries]
        logger.info("schedule_entries_created", timetable_id=timetable_id,
                    count=len(created))
        return created

    def get_entries(self, timetable_id: int) -> List[Dict[str, Any]]:
        with self._lock:
            return [dict(row) for row in self._rows.get(timetable_id, [])]
