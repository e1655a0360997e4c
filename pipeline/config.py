"""
Pipeline configuration.

Read once from the environment by the application entry point and passed
into the collaborators; nothing below reads os.environ directly.
"""

import os
from dataclasses import dataclass

DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "")
    try:
        return float(raw) if raw else default
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


@dataclass(frozen=True)
class PipelineConfig:
    gemini_api_key: str = ""
    gemini_model: str = DEFAULT_GEMINI_MODEL
    vision_timeout_seconds: float = 15.0
    ocr_timeout_seconds: float = 10.0
    tesseract_cmd: str = ""
    ocr_language: str = "eng"
    max_upload_size_mb: int = 20

    @property
    def vision_enabled(self) -> bool:
        return bool(self.gemini_api_key)

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    @classmethod
    def from_env(cls) -> "PipelineConfig":
        return cls(
            gemini_api_key=os.getenv("GEMINI_API_KEY", ""),
            gemini_model=os.getenv("GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
            vision_timeout_seconds=_env_float("VISION_TIMEOUT_SECONDS", 15.0),
            ocr_timeout_seconds=_env_float("OCR_TIMEOUT_SECONDS", 10.0),
            tesseract_cmd=os.getenv("TESSERACT_CMD", ""),
            ocr_language=os.getenv("OCR_LANGUAGE", "eng"),
            max_upload_size_mb=int(_env_float("MAX_UPLOAD_SIZE_MB", 20)),
        )
