"""
OCR engine: recognized text for one timetable image.

Runs Tesseract on the preprocessed grayscale image and returns the whole
text blob. Parsing that text into entries is the line parser's job.
"""

from typing import Optional

import pytesseract

import structlog

from vision.preprocessor import ImagePreprocessor

logger = structlog.get_logger()

# 3 = OEM default (LSTM when available); 6 = single uniform block of text
TESSERACT_CONFIG = "--oem 3 --psm 6"


class TesseractEngine:
    """Recognizes text in an image with Tesseract."""

    def __init__(
        self,
        language: str = "eng",
        timeout: float = 10.0,
        tesseract_cmd: str = "",
        preprocessor: Optional[ImagePreprocessor] = None,
    ):
        self.language = language
        self.timeout = timeout
        self.preprocessor = preprocessor or ImagePreprocessor()
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd

    def recognize(self, image_bytes: bytes, enhance: bool = True) -> str:
        """
        Return the recognized text. Tesseract errors and timeouts
        (RuntimeError from pytesseract) propagate to the caller.
        """
        img = self.preprocessor.process(image_bytes, enhance=enhance)
        text = pytesseract.image_to_string(
            img,
            lang=self.language,
            config=TESSERACT_CONFIG,
            timeout=self.timeout,
        )
        logger.debug("ocr_raw_text", length=len(text),
                     preview=text[:200].replace('\n', '|'))
        return text
