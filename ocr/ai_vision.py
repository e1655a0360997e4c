"""
AI Vision Extraction Module
Uses Google Gemini as the PRIMARY extraction engine.
Gemini reads timetable structure from messy photos and screenshots far
better than Tesseract, and answers in JSON mode.

The service is treated as loosely typed: the entry list may sit under any
of several keys and individual entries are normalized field by field.
Any failure yields an empty list so the caller can move to the next stage.
"""

import json
import re
from typing import Any, Dict, List, Optional

from google import genai
from google.genai import types

import structlog

from ocr.models import DEFAULT_DAY, WEEKDAYS, ExtractedEntry
from ocr.normalizer import add_minutes, normalize_clock

logger = structlog.get_logger()

DEFAULT_MODEL = "gemini-2.5-flash"

# Probed in this order; the first key holding a list wins
RESPONSE_KEYS = ("entries", "timetable", "schedule", "classes")

SYSTEM_INSTRUCTION = (
    "You are an AI assistant that specializes in extracting timetable "
    "information from images. Extract classes, times, days, and locations "
    "in JSON format."
)

EXTRACTION_PROMPT = """Extract the timetable information from this image.

Return ONLY a JSON object of this shape (no markdown, no explanation):
{
    "entries": [
        {
            "day": "Monday",
            "startTime": "09:00",
            "endTime": "10:30",
            "title": "Course name exactly as written",
            "location": "Room 101"
        }
    ]
}

Rules:
- day is a full English weekday name (Monday ... Sunday)
- startTime and endTime use 24-hour HH:MM (2pm = 14:00)
- location is an empty string when no room is visible
- the same course on several days is several entries

If unreadable: {"entries": []}
"""


class AIVisionExtractor:
    """
    Sends a timetable image to Gemini and turns the JSON answer into
    ExtractedEntry values. A single call per image, no retries.
    """

    def __init__(
        self,
        api_key: str = "",
        model_name: str = DEFAULT_MODEL,
        timeout: float = 15.0,
        client: Optional[Any] = None,
    ):
        self.model_name = model_name
        self.timeout = timeout
        self._client = client

        if self._client is None and api_key:
            try:
                self._client = genai.Client(
                    api_key=api_key,
                    http_options=types.HttpOptions(timeout=int(timeout * 1000)),
                )
                logger.info("gemini_configured", model=self.model_name)
            except Exception as e:
                logger.warning("gemini_config_failed", error=str(e))
        elif self._client is None:
            logger.info("gemini_no_api_key",
                        msg="Set GEMINI_API_KEY to enable vision extraction")

    def is_available(self) -> bool:
        return self._client is not None

    def extract(self, image_data: bytes, mime_type: str = "image/png") -> List[ExtractedEntry]:
        """Entries found in the image, or [] on any failure."""
        if not self.is_available():
            return []

        try:
            raw_text = self._call_gemini(image_data, mime_type)
        except Exception as e:
            logger.error("gemini_error", model=self.model_name, error=str(e))
            return []

        if not raw_text:
            logger.warning("gemini_empty_response", model=self.model_name)
            return []

        logger.info("gemini_response_ok", model=self.model_name,
                    length=len(raw_text))
        items = entries_from_payload(parse_json_response(raw_text))
        entries = normalize_entries(items)
        if items and not entries:
            logger.warning("gemini_no_classes_parsed", model=self.model_name,
                           raw_entries=len(items))
        return entries

    def _call_gemini(self, image_data: bytes, mime_type: str) -> str:
        contents = [
            types.Content(
                role="user",
                parts=[
                    types.Part.from_bytes(data=image_data, mime_type=mime_type),
                    types.Part.from_text(text=EXTRACTION_PROMPT),
                ],
            )
        ]
        response = self._client.models.generate_content(
            model=self.model_name,
            contents=contents,
            config=types.GenerateContentConfig(
                system_instruction=SYSTEM_INSTRUCTION,
                response_mime_type="application/json",
            ),
        )
        if not response or not response.text:
            return ""
        return response.text.strip()


# ---------------------------------------------------------------------------
# Response parsing
# ---------------------------------------------------------------------------

def parse_json_response(text: Optional[str]) -> Optional[Any]:
    """Parse JSON from a model response, tolerating markdown code fences."""
    if not text:
        return None
    text = re.sub(r'^```(?:json)?\s*', '', text.strip(), flags=re.MULTILINE)
    text = re.sub(r'^```\s*$', '', text, flags=re.MULTILINE)
    text = text.strip()

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        logger.warning("gemini_json_parse_failed", preview=text[:200])
        return None


def entries_from_payload(payload: Any) -> List[Any]:
    """The entry list under the first known key that holds a list."""
    if not isinstance(payload, dict):
        return []
    for key in RESPONSE_KEYS:
        value = payload.get(key)
        if isinstance(value, list):
            return value
    return []


def _text(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def _first(item: Dict[str, Any], *keys: str) -> str:
    for key in keys:
        value = _text(item.get(key))
        if value:
            return value
    return ""


def normalize_day(raw: str) -> str:
    """Full weekday name; three-letter prefixes are accepted."""
    lowered = raw.strip().lower()
    if len(lowered) >= 3:
        for day in WEEKDAYS:
            if day.lower() == lowered or day.lower().startswith(lowered[:3]):
                return day
    return DEFAULT_DAY


def normalize_entries(items: List[Any]) -> List[ExtractedEntry]:
    """
    Coerce loosely typed entry dicts into ExtractedEntry values.
    Entries without a usable start time are dropped.
    """
    entries: List[ExtractedEntry] = []
    for item in items:
        if not isinstance(item, dict):
            continue

        start = normalize_clock(_first(item, "startTime", "start_time", "start"))
        if not start:
            continue
        end = normalize_clock(_first(item, "endTime", "end_time", "end"))
        if not end:
            end = add_minutes(start, 60)

        title = _first(item, "title", "course", "name", "subject")
        if not title:
            title = f"Class {len(entries) + 1}"

        entries.append(ExtractedEntry(
            day=normalize_day(_text(item.get("day"))),
            start_time=start,
            end_time=end,
            title=title,
            location=_first(item, "location", "room"),
        ))
    return entries
