"""Detector collaborators — shape and text observations from a pixel buffer.

Public API
----------
- :data:`ShapeDetector` — ``(image, params) -> list[RawObservation]``
- :data:`TextDetector` — ``(image) -> list[TextObservation]``
- :func:`detect_rectangles` — OpenCV reference shape detector
- :func:`detect_text` — PaddleOCR reference text detector
- :func:`has_paddleocr` — import probe for the optional OCR extra
"""

from typing import Callable, List

import numpy as np

from ..config import DetectorParams
from ..models import RawObservation, TextObservation
from .shapes import detect_rectangles, ink_mask, to_gray
from .text import detect_text, has_paddleocr, parse_ocr_results

ShapeDetector = Callable[[np.ndarray, DetectorParams], List[RawObservation]]
TextDetector = Callable[[np.ndarray], List[TextObservation]]

__all__ = [
    "ShapeDetector",
    "TextDetector",
    "detect_rectangles",
    "detect_text",
    "has_paddleocr",
    "ink_mask",
    "parse_ocr_results",
    "to_gray",
]
