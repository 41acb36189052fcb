"""Observation normalizer — detector space to canvas space.

Every stage that needs to move between the detector's normalized,
bottom-left-origin coordinates and canvas pixels goes through
:func:`to_canvas_rect` / :func:`to_normalized_rect`.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from .config import SketchConfig
from .models import Annotation, NormalizedRect, RawObservation, Rect, TextObservation

logger = logging.getLogger("sketchlayout.normalize")

CanvasSize = Tuple[float, float]


class DeviceClass(str, Enum):
    """Input device hint; only changes the minimum-size threshold."""

    precise = "precise"  # no pencil: finger/mouse input, stricter threshold
    stylus = "stylus"


def _valid_canvas(canvas_size: CanvasSize) -> bool:
    w, h = canvas_size
    return w > 0 and h > 0


def to_canvas_rect(norm: NormalizedRect, canvas_w: float, canvas_h: float) -> Rect:
    """Scale a normalized rect to pixels and flip the vertical axis."""
    x0 = norm.x * canvas_w
    y0 = (1.0 - norm.max_y()) * canvas_h
    return Rect(x0, y0, x0 + norm.width * canvas_w, y0 + norm.height * canvas_h)


def to_normalized_rect(rect: Rect, canvas_w: float, canvas_h: float) -> NormalizedRect:
    """Inverse of :func:`to_canvas_rect`."""
    return NormalizedRect(
        x=rect.x0 / canvas_w,
        y=1.0 - rect.y1 / canvas_h,
        width=rect.width() / canvas_w,
        height=rect.height() / canvas_h,
    )


def clamp_rect(rect: Rect, canvas_w: float, canvas_h: float) -> Optional[Rect]:
    """Intersect *rect* with the canvas; return None if nothing is left."""
    x0 = max(0.0, min(rect.x0, canvas_w))
    y0 = max(0.0, min(rect.y0, canvas_h))
    x1 = max(0.0, min(rect.x1, canvas_w))
    y1 = max(0.0, min(rect.y1, canvas_h))
    if x1 <= x0 or y1 <= y0:
        return None
    return Rect(x0, y0, x1, y1)


def min_size_for(device_class: DeviceClass, cfg: SketchConfig) -> float:
    if device_class == DeviceClass.precise:
        return cfg.min_size_precise
    return cfg.min_size_stylus


def normalize_observations(
    observations: Iterable[RawObservation],
    canvas_size: CanvasSize,
    device_class: DeviceClass = DeviceClass.stylus,
    cfg: Optional[SketchConfig] = None,
) -> List[Rect]:
    """Convert detector observations to clamped canvas rectangles.

    Rectangles whose clamped width or height falls below the device-class
    minimum are dropped. Input order is preserved.
    """
    if cfg is None:
        cfg = SketchConfig()
    if not _valid_canvas(canvas_size):
        return []
    canvas_w, canvas_h = canvas_size
    min_size = min_size_for(device_class, cfg)

    rects: List[Rect] = []
    for obs in observations:
        clamped = clamp_rect(to_canvas_rect(obs.rect, canvas_w, canvas_h), canvas_w, canvas_h)
        if clamped is None:
            continue
        if clamped.width() < min_size or clamped.height() < min_size:
            logger.debug("Dropping small rect %s (min %.1f px)", clamped.bbox(), min_size)
            continue
        rects.append(clamped)
    return rects


def normalize_annotations(
    text_observations: Iterable[TextObservation],
    canvas_size: CanvasSize,
) -> List[Annotation]:
    """Convert recognised text to canvas-space annotations, skipping blanks."""
    if not _valid_canvas(canvas_size):
        return []
    canvas_w, canvas_h = canvas_size
    annotations: List[Annotation] = []
    for obs in text_observations:
        text = obs.text.strip()
        if not text:
            continue
        clamped = clamp_rect(to_canvas_rect(obs.rect, canvas_w, canvas_h), canvas_w, canvas_h)
        if clamped is None:
            continue
        annotations.append(Annotation(text=text, position=clamped))
    return annotations
