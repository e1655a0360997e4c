"""
Extraction orchestrator.

Runs the fallback chain for one timetable image:
  1. Gemini vision extraction
  2. Tesseract OCR + heuristic line parsing
  3. Static fallback timetable
The first stage that yields entries wins; results are never merged.
"""

import re
from typing import Callable, List, Optional, Tuple, Union

import structlog

from ocr.ai_vision import AIVisionExtractor
from ocr.extractor import TesseractEngine
from ocr.models import (
    SOURCE_FALLBACK,
    SOURCE_HEURISTIC,
    SOURCE_VISION,
    WEEKDAYS,
    ExtractedEntry,
    ExtractionResult,
)
from ocr.parser import TimetableLineParser
from pipeline.config import PipelineConfig
from pipeline.fallback import fallback_entries
from vision.preprocessor import ImagePayload, decode_image_payload, prepare_for_vision

logger = structlog.get_logger()

HHMM_PATTERN = re.compile(r'^[0-2]?[0-9]:[0-5][0-9]$')

Stage = Callable[[ImagePayload, bool], Optional[List[ExtractedEntry]]]


def is_valid_entry(entry: ExtractedEntry) -> bool:
    return (
        entry.day in WEEKDAYS
        and bool(HHMM_PATTERN.match(entry.start_time))
        and bool(HHMM_PATTERN.match(entry.end_time))
        and bool(entry.title.strip())
    )


class TimetableExtractionOrchestrator:
    """
    Turns an image into a non-empty list of schedule entries.

    Collaborators are injected so tests can stub them. ``vision`` needs an
    ``extract(image_bytes, mime_type)`` method and ``ocr_engine`` a
    ``recognize(image_bytes, enhance=...)`` method.
    """

    def __init__(
        self,
        vision: Optional[AIVisionExtractor],
        ocr_engine: Optional[TesseractEngine],
        parser: Optional[TimetableLineParser] = None,
        max_upload_bytes: Optional[int] = None,
    ):
        self.vision = vision
        self.ocr_engine = ocr_engine
        self.parser = parser or TimetableLineParser()
        self.max_upload_bytes = max_upload_bytes
        self.stages: List[Tuple[str, Stage]] = [
            (SOURCE_VISION, self._vision_stage),
            (SOURCE_HEURISTIC, self._heuristic_stage),
        ]

    @classmethod
    def from_config(cls, config: PipelineConfig) -> "TimetableExtractionOrchestrator":
        vision = AIVisionExtractor(
            api_key=config.gemini_api_key,
            model_name=config.gemini_model,
            timeout=config.vision_timeout_seconds,
        )
        ocr_engine = TesseractEngine(
            language=config.ocr_language,
            timeout=config.ocr_timeout_seconds,
            tesseract_cmd=config.tesseract_cmd,
        )
        return cls(vision, ocr_engine, max_upload_bytes=config.max_upload_bytes)

    def extract(self, image_data: Union[bytes, str], enhance: bool = True) -> List[ExtractedEntry]:
        return self.extract_with_source(image_data, enhance).entries

    def extract_with_source(
        self, image_data: Union[bytes, str], enhance: bool = True
    ) -> ExtractionResult:
        """
        Run the chain. Only InvalidImageError escapes; every stage failure
        is logged and the next stage runs.
        """
        payload = decode_image_payload(image_data, self.max_upload_bytes)
        logger.info("extraction_started", mime_type=payload.mime_type,
                    size=len(payload.data), enhance=enhance)

        for source, stage in self.stages:
            try:
                entries = stage(payload, enhance)
            except Exception as e:
                logger.warning(f"{source}_stage_failed", error=str(e))
                continue

            valid = [e for e in entries or [] if is_valid_entry(e)]
            if len(valid) < len(entries or []):
                logger.warning(f"{source}_entries_dropped",
                               dropped=len(entries) - len(valid))
            if valid:
                logger.info(f"{source}_stage_done", entries=len(valid))
                return ExtractionResult(valid, source)
            logger.warning(f"{source}_stage_empty")

        logger.warning("fallback_stage_used")
        return ExtractionResult(fallback_entries(), SOURCE_FALLBACK)

    def _vision_stage(self, payload: ImagePayload, enhance: bool) -> Optional[List[ExtractedEntry]]:
        if self.vision is None:
            return None
        payload = prepare_for_vision(payload)
        return self.vision.extract(payload.data, payload.mime_type)

    def _heuristic_stage(self, payload: ImagePayload, enhance: bool) -> Optional[List[ExtractedEntry]]:
        if self.ocr_engine is None:
            return None
        raw_text = self.ocr_engine.recognize(payload.data, enhance=enhance)
        return self.parser.parse_text(raw_text)
