"""
Image payload handling and OCR preprocessing.

Accepts raw bytes, bare base64 or a ``data:`` URI, checks that the payload
really is an image, and prepares a grayscale variant for Tesseract:
  - Phone photos (skew, uneven lighting)
  - Small screenshots (upscaled before OCR)
"""

import base64
import binascii
import io
import math
import re
from typing import NamedTuple, Optional, Union

import cv2
import numpy as np
from PIL import Image, UnidentifiedImageError

import structlog

from pipeline.errors import InvalidImageError

logger = structlog.get_logger()

DATA_URI_PATTERN = re.compile(
    r'^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(?:;[^,;]*)*?),(?P<data>.*)$',
    re.DOTALL
)


class ImagePayload(NamedTuple):
    data: bytes
    mime_type: str


def decode_image_payload(
    payload: Union[bytes, str, None], max_bytes: Optional[int] = None
) -> ImagePayload:
    """
    Decode and validate an image payload.
    Raises InvalidImageError for anything that is not a readable image.
    """
    if not payload:
        raise InvalidImageError("Image payload is empty")

    if isinstance(payload, str):
        data = _decode_base64_text(payload.strip())
    else:
        data = bytes(payload)

    if not data:
        raise InvalidImageError("Image payload is empty")
    if max_bytes and len(data) > max_bytes:
        raise InvalidImageError(
            f"Image too large: {len(data) / 1024 / 1024:.1f}MB > "
            f"{max_bytes / 1024 / 1024:.0f}MB"
        )

    return ImagePayload(data, sniff_mime_type(data))


def _decode_base64_text(text: str) -> bytes:
    m = DATA_URI_PATTERN.match(text)
    if m:
        if ";base64" not in m.group("params").lower():
            raise InvalidImageError("Data URI is not base64 encoded")
        text = m.group("data")
    text = re.sub(r'\s+', '', text)
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidImageError(f"Image payload is not valid base64: {e}") from e


# Pillow reports multi-picture JPEGs from phone cameras as MPO
MIME_OVERRIDES = {"MPO": "image/jpeg"}

# Image types the vision service accepts as-is
VISION_MIME_TYPES = frozenset({
    "image/png", "image/jpeg", "image/webp", "image/heic", "image/heif",
})


def sniff_mime_type(data: bytes) -> str:
    """MIME type from the image header, via Pillow."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            fmt = img.format
    except (UnidentifiedImageError, OSError) as e:
        raise InvalidImageError("Payload is not a recognizable image") from e
    mime = MIME_OVERRIDES.get(fmt or "") or Image.MIME.get(fmt or "")
    if not mime:
        raise InvalidImageError(f"Unsupported image format: {fmt}")
    return mime


def prepare_for_vision(payload: ImagePayload) -> ImagePayload:
    """Re-encode GIF/BMP/TIFF and other formats the vision service rejects as PNG."""
    if payload.mime_type in VISION_MIME_TYPES:
        return payload
    with Image.open(io.BytesIO(payload.data)) as img:
        converted = img.convert("RGBA")
    buf = io.BytesIO()
    converted.save(buf, format="PNG")
    logger.info("vision_payload_reencoded", from_mime=payload.mime_type)
    return ImagePayload(buf.getvalue(), "image/png")


class ImagePreprocessor:
    """
    Produces the grayscale image Tesseract reads.
    With ``enhance`` the image is also deskewed, CLAHE-equalized and,
    when small, upscaled and denoised.
    """

    def __init__(self, max_dim: int = 3000):
        self.max_dim = max_dim

    def process(self, image_bytes: bytes, enhance: bool = True) -> np.ndarray:
        img = self.load(image_bytes)
        img = self._limit_size(img, max_dim=self.max_dim)
        gray = cv2.cvtColor(img, cv2.COLOR_BGR2GRAY)
        logger.debug("preprocessing_image",
                     size=f"{gray.shape[1]}x{gray.shape[0]}", enhance=enhance)
        if not enhance:
            return gray

        deskewed = self._deskew(gray)
        clahe = cv2.createCLAHE(clipLimit=3.0, tileGridSize=(8, 8))
        enhanced = clahe.apply(deskewed)

        # Dark-theme screenshots read better inverted
        if np.mean(gray) < 128:
            enhanced = cv2.bitwise_not(enhanced)

        h_img, w_img = enhanced.shape[:2]
        if max(h_img, w_img) < 1500:
            upscaled = cv2.resize(enhanced, None, fx=2, fy=2,
                                  interpolation=cv2.INTER_CUBIC)
            enhanced = cv2.fastNlMeansDenoising(upscaled, h=10)

        return enhanced

    def load(self, image_bytes: bytes) -> np.ndarray:
        """Decode to a BGR array; Pillow covers formats OpenCV cannot read."""
        buf = np.frombuffer(image_bytes, dtype=np.uint8)
        img = cv2.imdecode(buf, cv2.IMREAD_COLOR) if buf.size else None
        if img is None:
            try:
                pil_img = Image.open(io.BytesIO(image_bytes)).convert("RGB")
            except (UnidentifiedImageError, OSError) as e:
                raise InvalidImageError("Could not read image") from e
            img = cv2.cvtColor(np.array(pil_img), cv2.COLOR_RGB2BGR)
        return img

    # ------------------------------------------------------------------
    # Utilities
    # ------------------------------------------------------------------
    def _limit_size(self, img: np.ndarray, max_dim: int = 3000) -> np.ndarray:
        h, w = img.shape[:2]
        if max(h, w) <= max_dim:
            return img
        scale = max_dim / max(h, w)
        return cv2.resize(img, (int(w * scale), int(h * scale)),
                          interpolation=cv2.INTER_AREA)

    def _deskew(self, gray: np.ndarray) -> np.ndarray:
        """Correct rotation using Hough line detection."""
        edges = cv2.Canny(gray, 50, 150, apertureSize=3)
        lines = cv2.HoughLinesP(edges, 1, np.pi / 180, threshold=80,
                                minLineLength=80, maxLineGap=10)
        if lines is None or len(lines) == 0:
            return gray

        angles = []
        for line in lines:
            x1, y1, x2, y2 = line[0]
            angle = math.degrees(math.atan2(y2 - y1, x2 - x1))
            if abs(angle) < 30:
                angles.append(angle)

        if not angles:
            return gray

        median_angle = float(np.median(angles))
        if abs(median_angle) < 0.3 or abs(median_angle) > 20:
            return gray

        logger.info("deskew", angle=round(median_angle, 2))
        h, w = gray.shape[:2]
        M = cv2.getRotationMatrix2D((w // 2, h // 2), median_angle, 1.0)
        return cv2.warpAffine(gray, M, (w, h),
                              flags=cv2.INTER_CUBIC,
                              borderMode=cv2.BORDER_REPLICATE)
