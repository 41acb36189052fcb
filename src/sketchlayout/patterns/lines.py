"""Line patterns — reclassify detected rectangles by proportion alone.

Each rule is tested independently, so a rectangle may carry several
signals (a thin wide bar is both a hamburger line and a text line).
Consumers pick the highest-confidence signal per rectangle.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Tuple

from ..config import SketchConfig
from ..models import PatternType, RawObservation, Rect, SketchedPattern
from ..normalize import clamp_rect, to_canvas_rect

log = logging.getLogger(__name__)


def _line_rules(
    rect: Rect,
    canvas_w: float,
    canvas_h: float,
    cfg: SketchConfig,
) -> List[Tuple[PatternType, float]]:
    """Return ``(pattern, discount)`` for every rule *rect* satisfies."""
    aspect = rect.aspect_ratio()
    rel_h = rect.height() / canvas_h
    hits: List[Tuple[PatternType, float]] = []

    if aspect > cfg.hamburger_min_aspect and rel_h < cfg.hamburger_max_height:
        hits.append((PatternType.hamburger_menu, cfg.hamburger_discount))
    if (
        cfg.form_field_min_aspect < aspect < cfg.form_field_max_aspect
        and cfg.form_field_min_height < rel_h < cfg.form_field_max_height
    ):
        hits.append((PatternType.form_field, cfg.form_field_discount))
    if aspect > cfg.text_line_min_aspect and rel_h < cfg.text_line_max_height:
        hits.append((PatternType.text_lines, cfg.text_line_discount))

    # Tab bars hug the bottom of the canvas.
    in_bottom_band = rect.y1 > canvas_h * (1.0 - cfg.tab_bottom_band)
    if 1.0 < aspect < cfg.tab_max_aspect and in_bottom_band and rel_h < cfg.tab_max_height:
        hits.append((PatternType.tab_indicator, cfg.tab_discount))
    return hits


def detect_line_patterns(
    observations: Iterable[RawObservation],
    canvas_size: Tuple[float, float],
    cfg: Optional[SketchConfig] = None,
) -> List[SketchedPattern]:
    """Turn raw rectangles into line-pattern signals in canvas space.

    Parameters
    ----------
    observations : iterable of RawObservation
        Output of the shape detector run with line-pattern parameters.
    canvas_size : (width, height)
        Canvas dimensions in pixels.
    cfg : SketchConfig, optional
        Supplies aspect/height cutoffs and confidence discounts.
    """
    if cfg is None:
        cfg = SketchConfig()
    canvas_w, canvas_h = canvas_size
    if canvas_w <= 0 or canvas_h <= 0:
        return []

    patterns: List[SketchedPattern] = []
    for obs in observations:
        rect = clamp_rect(to_canvas_rect(obs.rect, canvas_w, canvas_h), canvas_w, canvas_h)
        if rect is None:
            continue
        for ptype, discount in _line_rules(rect, canvas_w, canvas_h, cfg):
            patterns.append(
                SketchedPattern(
                    id=f"line-{len(patterns) + 1}",
                    type=ptype,
                    bounding_box=rect,
                    confidence=obs.confidence * discount,
                    associated_rectangle=rect,
                )
            )
            log.debug("line pattern %s at %s", ptype.value, rect.bbox())

    log.info("detect_line_patterns: %d signals", len(patterns))
    return patterns
