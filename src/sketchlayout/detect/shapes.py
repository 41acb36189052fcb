"""Reference shape detector — quadrilateral contours via OpenCV.

Reports rectangles in detector space (fractions of the image, origin
bottom-left) so that every consumer goes through
:func:`sketchlayout.normalize.to_canvas_rect`.
"""

from __future__ import annotations

import logging
from typing import List, Optional

import cv2
import numpy as np

from ..config import DetectorParams
from ..models import NormalizedRect, RawObservation

log = logging.getLogger(__name__)


def to_gray(image: np.ndarray) -> np.ndarray:
    """Convert an RGB / RGBA / gray pixel buffer to uint8 grayscale."""
    if image.ndim == 2:
        gray = image
    elif image.shape[2] == 4:
        gray = cv2.cvtColor(image, cv2.COLOR_RGBA2GRAY)
    else:
        gray = cv2.cvtColor(image, cv2.COLOR_RGB2GRAY)
    if gray.dtype != np.uint8:
        gray = gray.astype(np.uint8)
    return gray


def ink_mask(gray: np.ndarray) -> np.ndarray:
    """Binary mask (255 = stroke) using an inverse Otsu threshold."""
    _, binary = cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY_INV + cv2.THRESH_OTSU)
    return binary


def _corner_deviation(quad: np.ndarray) -> float:
    """Largest deviation (degrees) of any corner of *quad* from 90°."""
    pts = quad.reshape(-1, 2).astype(np.float64)
    worst = 0.0
    for i in range(4):
        prev_pt = pts[i - 1]
        pt = pts[i]
        next_pt = pts[(i + 1) % 4]
        v1 = prev_pt - pt
        v2 = next_pt - pt
        denom = np.linalg.norm(v1) * np.linalg.norm(v2)
        if denom == 0:
            return 90.0
        cos_a = float(np.clip(np.dot(v1, v2) / denom, -1.0, 1.0))
        angle = float(np.degrees(np.arccos(cos_a)))
        worst = max(worst, abs(angle - 90.0))
    return worst


def _observation_for(
    contour: np.ndarray,
    img_w: int,
    img_h: int,
    params: DetectorParams,
) -> Optional[RawObservation]:
    perimeter = cv2.arcLength(contour, True)
    if perimeter <= 0:
        return None
    # Hand-drawn edges wobble; a loose epsilon still yields four corners.
    approx = cv2.approxPolyDP(contour, 0.04 * perimeter, True)
    if len(approx) != 4 or not cv2.isContourConvex(approx):
        return None
    if _corner_deviation(approx) > params.corner_tolerance:
        return None

    x, y, w, h = cv2.boundingRect(approx)
    if w <= 0 or h <= 0:
        return None
    if max(w, h) / float(min(img_w, img_h)) < params.minimum_size:
        return None
    aspect = w / float(h)
    if not (params.minimum_aspect_ratio <= aspect <= params.maximum_aspect_ratio):
        return None

    confidence = min(1.0, cv2.contourArea(approx) / float(w * h))
    if confidence < params.minimum_confidence:
        return None

    rect = NormalizedRect(
        x=x / img_w,
        y=1.0 - (y + h) / img_h,
        width=w / img_w,
        height=h / img_h,
    )
    return RawObservation(rect=rect, confidence=confidence)


def detect_rectangles(image: np.ndarray, params: DetectorParams) -> List[RawObservation]:
    """Find rectangle-like strokes in *image*.

    Both the outer and inner edge of a thick stroke are reported; the
    deduplicator is responsible for collapsing them.

    Parameters
    ----------
    image : np.ndarray
        ``(H, W)`` or ``(H, W, 3|4)`` uint8 pixel buffer.
    params : DetectorParams
        Size, aspect, confidence and corner thresholds plus the result cap.

    Returns
    -------
    list[RawObservation]
        Sorted by confidence (highest first), at most
        ``params.maximum_observations`` entries.
    """
    if image is None or image.size == 0:
        return []
    gray = to_gray(image)
    img_h, img_w = gray.shape[:2]
    if int(gray.min()) == int(gray.max()):
        return []

    binary = ink_mask(gray)
    binary = cv2.dilate(binary, np.ones((3, 3), np.uint8), iterations=1)
    contours, _ = cv2.findContours(binary, cv2.RETR_LIST, cv2.CHAIN_APPROX_SIMPLE)

    found: List[RawObservation] = []
    for contour in contours:
        obs = _observation_for(contour, img_w, img_h, params)
        if obs is not None:
            found.append(obs)

    found.sort(key=lambda o: o.confidence, reverse=True)
    log.debug(
        "detect_rectangles: %d contours -> %d rectangles (cap %d)",
        len(contours),
        len(found),
        params.maximum_observations,
    )
    return found[: params.maximum_observations]
