from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from .config import SketchConfig
from .models import Rect

logger = logging.getLogger("sketchlayout.dedup")


def is_duplicate(
    candidate: Rect,
    accepted: Rect,
    canvas_size: Tuple[float, float],
    cfg: SketchConfig,
) -> bool:
    """Return True if *candidate* represents the same stroke as *accepted*.

    Two independent criteria: mutual containment (intersection over either
    area above ``cfg.dedup_overlap``) and near-identity (centres and sizes
    within canvas-relative tolerances).
    """
    inter = candidate.intersection_area(accepted)
    cand_area = candidate.area()
    acc_area = accepted.area()
    if cand_area > 0 and inter / cand_area > cfg.dedup_overlap:
        return True
    if acc_area > 0 and inter / acc_area > cfg.dedup_overlap:
        return True

    canvas_w, canvas_h = canvas_size
    position_tol = canvas_w * cfg.dedup_position_tol
    size_tol = min(canvas_w, canvas_h) * cfg.dedup_size_tol
    return (
        abs(candidate.mid_x() - accepted.mid_x()) < position_tol
        and abs(candidate.mid_y() - accepted.mid_y()) < position_tol
        and abs(candidate.width() - accepted.width()) < size_tol
        and abs(candidate.height() - accepted.height()) < size_tol
    )


def dedup_rectangles(
    rects: List[Rect],
    canvas_size: Tuple[float, float],
    cfg: Optional[SketchConfig] = None,
) -> List[Rect]:
    """Collapse rectangles that represent the same drawn shape.

    Greedy single pass, largest area first. The result is ordered
    largest-accepted-first, not spatially; callers needing spatial order
    must re-sort.
    """
    if cfg is None:
        cfg = SketchConfig()
    if len(rects) <= 1:
        return list(rects)

    # sorted() is stable, so equal areas keep their input order.
    ordered = sorted(rects, key=lambda r: r.area(), reverse=True)
    kept: List[Rect] = []
    for rect in ordered:
        if any(is_duplicate(rect, existing, canvas_size, cfg) for existing in kept):
            logger.debug("Removing duplicate rect %s", rect.bbox())
            continue
        kept.append(rect)

    logger.info("Deduplicated rectangles: %d -> %d", len(rects), len(kept))
    return kept
