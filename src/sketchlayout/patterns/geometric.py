"""Geometric patterns — look inside each detected rectangle.

Crops the sketch under every candidate rectangle and inspects the
strokes it contains: diagonal crosses mark image placeholders, marks in
small squares mark checkboxes, and separate inner shapes mark cards.
Size-only signals (radio buttons, icons, progress bars, dropdown arrows)
are derived from the rectangle itself.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

import cv2
import numpy as np

from ..config import SketchConfig
from ..detect.shapes import to_gray
from ..models import NormalizedRect, PatternType, RawObservation, Rect, SketchedPattern
from ..normalize import clamp_rect, to_canvas_rect

log = logging.getLogger(__name__)

# Slope bands (degrees from horizontal) that count as diagonal strokes.
_DIAGONAL_MIN_DEG = 20.0
_DIAGONAL_MAX_DEG = 70.0
# Crops smaller than this (px) are too coarse for stroke analysis.
_MIN_CROP_PX = 8


# ── Crop helpers ───────────────────────────────────────────────────────


def crop_region(gray: np.ndarray, norm: NormalizedRect) -> Optional[np.ndarray]:
    """Cut the pixels under a detector-space rectangle out of *gray*."""
    img_h, img_w = gray.shape[:2]
    x0 = int(round(norm.x * img_w))
    x1 = int(round((norm.x + norm.width) * img_w))
    y0 = int(round((1.0 - norm.max_y()) * img_h))
    y1 = int(round((1.0 - norm.y) * img_h))
    x0, x1 = max(0, x0), min(img_w, x1)
    y0, y1 = max(0, y0), min(img_h, y1)
    if x1 - x0 < 1 or y1 - y0 < 1:
        return None
    return gray[y0:y1, x0:x1]


def interior_ink(crop: np.ndarray, cfg: SketchConfig) -> np.ndarray:
    """Ink mask (uint8, 255 = stroke) of *crop* with the drawn frame trimmed off."""
    h, w = crop.shape[:2]
    bx = int(round(w * cfg.crop_border_frac))
    by = int(round(h * cfg.crop_border_frac))
    inner = crop[by : h - by, bx : w - bx] if (h - 2 * by > 0 and w - 2 * bx > 0) else crop
    return np.where(inner < cfg.ink_threshold, 255, 0).astype(np.uint8)


def diagonal_strokes(ink: np.ndarray, min_length: float) -> Tuple[bool, bool]:
    """Return ``(rising, falling)``: whether diagonal segments of each slope exist.

    Image rows grow downward, so a "falling" segment has a positive
    ``dy/dx`` in pixel coordinates.
    """
    if ink.size == 0 or not ink.any():
        return False, False
    min_len = max(3, int(min_length))
    segments = cv2.HoughLinesP(
        ink,
        rho=1,
        theta=np.pi / 180,
        threshold=max(5, min_len // 2),
        minLineLength=min_len,
        maxLineGap=max(2, min_len // 5),
    )
    if segments is None:
        return False, False

    rising = falling = False
    for x1, y1, x2, y2 in segments.reshape(-1, 4):
        dx = float(x2 - x1)
        dy = float(y2 - y1)
        if dx == 0:
            continue
        angle = float(np.degrees(np.arctan(abs(dy / dx))))
        if not (_DIAGONAL_MIN_DEG <= angle <= _DIAGONAL_MAX_DEG):
            continue
        if dy / dx > 0:
            falling = True
        else:
            rising = True
    return rising, falling


def count_internal_elements(crop: np.ndarray, cfg: SketchConfig) -> int:
    """Count separate shapes drawn inside a rectangle, ignoring its frame."""
    ink = interior_ink(crop, cfg)
    if not ink.any():
        return 0
    # Close small gaps so one hand-drawn shape is one contour.
    ink = cv2.dilate(ink, np.ones((3, 3), np.uint8), iterations=1)
    contours, _ = cv2.findContours(ink, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
    min_area = cfg.element_min_area_frac * ink.shape[0] * ink.shape[1]
    count = 0
    for contour in contours:
        _, _, w, h = cv2.boundingRect(contour)
        if w * h >= min_area:
            count += 1
    return count


def _has_empty_corners(crop: np.ndarray, cfg: SketchConfig) -> bool:
    """True when the crop's corners hold no ink, as with a drawn circle."""
    h, w = crop.shape[:2]
    ch, cw = max(1, h // 6), max(1, w // 6)
    corners = (
        crop[:ch, :cw],
        crop[:ch, w - cw :],
        crop[h - ch :, :cw],
        crop[h - ch :, w - cw :],
    )
    return all(not (c < cfg.ink_threshold).any() for c in corners)


# ── Per-rectangle tests ────────────────────────────────────────────────


def _is_checkbox_sized(norm: NormalizedRect, aspect: float, cfg: SketchConfig) -> bool:
    return (
        abs(aspect - 1.0) < cfg.checkbox_aspect_tol
        and norm.width < cfg.checkbox_max_size
        and norm.height < cfg.checkbox_max_size
    )


def _is_image_placeholder(crop: np.ndarray, cfg: SketchConfig) -> bool:
    if min(crop.shape[:2]) < _MIN_CROP_PX:
        return False
    ink = interior_ink(crop, cfg)
    # An X spans the box: each stroke covers most of the shorter side.
    rising, falling = diagonal_strokes(ink, 0.4 * min(ink.shape[:2]))
    return rising and falling


def _has_checkmark(crop: np.ndarray, cfg: SketchConfig) -> bool:
    ink = interior_ink(crop, cfg)
    if not ink.any():
        return False
    if min(crop.shape[:2]) < _MIN_CROP_PX:
        # Too small for line fitting; any interior ink counts as a mark.
        return True
    rising, falling = diagonal_strokes(ink, 0.25 * min(ink.shape[:2]))
    return rising or falling


def _pattern(
    prefix: str,
    index: int,
    ptype: PatternType,
    rect: Rect,
    confidence: float,
) -> SketchedPattern:
    return SketchedPattern(
        id=f"{prefix}-{index}",
        type=ptype,
        bounding_box=rect,
        confidence=confidence,
        associated_rectangle=rect,
    )


def detect_geometric_patterns(
    image: np.ndarray,
    observations: Sequence[RawObservation],
    canvas_size: Tuple[float, float],
    cfg: Optional[SketchConfig] = None,
) -> List[SketchedPattern]:
    """Inspect each rectangle's contents and shape for UI conventions.

    Parameters
    ----------
    image : np.ndarray
        The sketch pixel buffer the observations were detected on.
    observations : sequence of RawObservation
        Output of the shape detector run with geometric-pattern parameters.
    canvas_size : (width, height)
        Canvas dimensions in pixels; patterns are reported in canvas space.
    cfg : SketchConfig, optional
        Thresholds and confidence discounts.

    Returns
    -------
    list[SketchedPattern]
        Unordered; a rectangle may carry several signals.
    """
    if cfg is None:
        cfg = SketchConfig()
    canvas_w, canvas_h = canvas_size
    if canvas_w <= 0 or canvas_h <= 0 or image is None or image.size == 0:
        return []

    gray = to_gray(image)
    canvas_rects: List[Optional[Rect]] = [
        clamp_rect(to_canvas_rect(o.rect, canvas_w, canvas_h), canvas_w, canvas_h)
        for o in observations
    ]

    patterns: List[SketchedPattern] = []

    def emit(ptype: PatternType, rect: Rect, confidence: float) -> None:
        patterns.append(_pattern("geo", len(patterns) + 1, ptype, rect, confidence))
        log.debug("geometric pattern %s at %s (%.2f)", ptype.value, rect.bbox(), confidence)

    for obs, rect in zip(observations, canvas_rects):
        if rect is None:
            continue
        norm = obs.rect
        aspect = rect.aspect_ratio()
        area = norm.area()
        crop = crop_region(gray, norm)
        checkbox_sized = _is_checkbox_sized(norm, aspect, cfg)

        if crop is not None:
            if checkbox_sized:
                if _has_checkmark(crop, cfg):
                    emit(PatternType.checkbox, rect, obs.confidence * cfg.checkbox_discount)
            elif _is_image_placeholder(crop, cfg):
                emit(PatternType.image_placeholder, rect, obs.confidence)

            if norm.width > cfg.card_min_width and norm.height > cfg.card_min_height:
                n = count_internal_elements(crop, cfg)
                if n >= cfg.card_min_elements:
                    emit(
                        PatternType.card_with_elements,
                        rect,
                        min(cfg.card_confidence_cap, 0.2 * n + 0.3),
                    )

        if area < cfg.radio_max_area and abs(aspect - 1.0) < cfg.radio_aspect_tol:
            if crop is None or _has_empty_corners(crop, cfg):
                emit(PatternType.radio_button, rect, obs.confidence * cfg.radio_discount)

        if area < cfg.icon_max_area and abs(aspect - 1.0) < cfg.icon_aspect_tol:
            emit(PatternType.icon_symbol, rect, obs.confidence * cfg.icon_discount)

        if aspect > cfg.progress_min_aspect and norm.height < cfg.progress_max_height:
            emit(PatternType.progress_bar, rect, obs.confidence * cfg.progress_discount)

        if (
            area < cfg.dropdown_arrow_max_area
            and cfg.dropdown_arrow_min_aspect < aspect < cfg.dropdown_arrow_max_aspect
        ):
            container = _dropdown_container(obs, observations, canvas_rects, cfg)
            if container is not None:
                emit(PatternType.dropdown_arrow, container, obs.confidence * cfg.dropdown_discount)

    log.info("detect_geometric_patterns: %d signals", len(patterns))
    return patterns


def _dropdown_container(
    arrow: RawObservation,
    observations: Sequence[RawObservation],
    canvas_rects: Sequence[Optional[Rect]],
    cfg: SketchConfig,
) -> Optional[Rect]:
    """First rectangle more than twice as wide whose centre is close to *arrow*."""
    ax = arrow.rect.x + arrow.rect.width * 0.5
    ay = arrow.rect.y + arrow.rect.height * 0.5
    for other, other_rect in zip(observations, canvas_rects):
        if other is arrow or other_rect is None:
            continue
        if other.rect.width <= arrow.rect.width * 2:
            continue
        ox = other.rect.x + other.rect.width * 0.5
        oy = other.rect.y + other.rect.height * 0.5
        if ((ax - ox) ** 2 + (ay - oy) ** 2) ** 0.5 < cfg.dropdown_arrow_max_distance:
            return other_rect
    return None
