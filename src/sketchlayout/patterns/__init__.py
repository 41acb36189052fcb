"""Pattern recognizer — weighted UI-convention signals from raw detections.

Three independent analyses run over the same image and are concatenated:

- line patterns: proportions of detected rectangles
- geometric patterns: strokes inside detected rectangles
- textual patterns: reserved, contributes nothing

Public API
----------
- :func:`recognize_patterns` — run all three analyses concurrently
- :func:`run_line_analysis` / :func:`run_geometric_analysis` /
  :func:`run_textual_analysis` — the individual detector tasks
- :func:`best_pattern_for` — highest-confidence signal for a rectangle
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .._tasks import run_tasks
from ..config import GEOMETRIC_PATTERN_PARAMS, LINE_PATTERN_PARAMS, SketchConfig
from ..detect.shapes import detect_rectangles
from ..models import Rect, SketchedPattern, TextObservation
from .geometric import count_internal_elements, detect_geometric_patterns
from .lines import detect_line_patterns
from .textual import detect_textual_patterns

log = logging.getLogger(__name__)

CanvasSize = Tuple[float, float]


def run_line_analysis(
    image: np.ndarray,
    canvas_size: CanvasSize,
    shape_detector=detect_rectangles,
    cfg: Optional[SketchConfig] = None,
) -> List[SketchedPattern]:
    """Detect with line-pattern parameters, then apply the line rules."""
    observations = shape_detector(image, LINE_PATTERN_PARAMS)
    return detect_line_patterns(observations, canvas_size, cfg)


def run_geometric_analysis(
    image: np.ndarray,
    canvas_size: CanvasSize,
    shape_detector=detect_rectangles,
    cfg: Optional[SketchConfig] = None,
) -> List[SketchedPattern]:
    """Detect with geometric-pattern parameters, then inspect each crop."""
    observations = shape_detector(image, GEOMETRIC_PATTERN_PARAMS)
    return detect_geometric_patterns(image, observations, canvas_size, cfg)


def run_textual_analysis(
    image: np.ndarray,
    canvas_size: CanvasSize,
    text_observations: Sequence[TextObservation] = (),
    cfg: Optional[SketchConfig] = None,
) -> List[SketchedPattern]:
    return detect_textual_patterns(image, text_observations, canvas_size, cfg)


def recognize_patterns(
    image: np.ndarray,
    canvas_size: CanvasSize,
    shape_detector=detect_rectangles,
    cfg: Optional[SketchConfig] = None,
) -> List[SketchedPattern]:
    """Run the three analyses concurrently and merge their signals.

    A failing or timed-out analysis contributes no signals; the others
    are unaffected.
    """
    if cfg is None:
        cfg = SketchConfig()
    outcomes = run_tasks(
        {
            "line": lambda: run_line_analysis(image, canvas_size, shape_detector, cfg),
            "geometric": lambda: run_geometric_analysis(
                image, canvas_size, shape_detector, cfg
            ),
            "textual": lambda: run_textual_analysis(image, canvas_size, (), cfg),
        },
        timeout_s=cfg.detector_timeout_s,
        max_workers=cfg.max_workers,
    )
    merged: List[SketchedPattern] = []
    for name in ("line", "geometric", "textual"):
        merged.extend(outcomes[name][0])
    log.info("recognize_patterns: %d signals", len(merged))
    return merged


def best_pattern_for(
    rect: Rect,
    patterns: Iterable[SketchedPattern],
    tolerance: float,
) -> Optional[SketchedPattern]:
    """Return the highest-confidence pattern associated with *rect*.

    A pattern is associated when every edge of its associated rectangle
    lies within *tolerance* pixels of *rect*'s. Ties keep the earlier
    pattern.
    """
    best: Optional[SketchedPattern] = None
    for pattern in patterns:
        assoc = pattern.associated_rectangle
        if assoc is None or not assoc.matches(rect, tolerance):
            continue
        if best is None or pattern.confidence > best.confidence:
            best = pattern
    return best


__all__ = [
    "best_pattern_for",
    "count_internal_elements",
    "detect_geometric_patterns",
    "detect_line_patterns",
    "detect_textual_patterns",
    "recognize_patterns",
    "run_geometric_analysis",
    "run_line_analysis",
    "run_textual_analysis",
]
