from __future__ import annotations

import logging
from typing import List, Sequence

from .models import DetectedComponent

logger = logging.getLogger("sketchlayout.grouping")


def group_spatially(
    components: Sequence[DetectedComponent],
    alignment_tolerance: float,
) -> List[List[DetectedComponent]]:
    """Sweep components top-to-bottom into row groups.

    The topmost remaining component anchors a row; every remaining
    component whose vertical centre lies within *alignment_tolerance* of
    the anchor's joins it. Rows come out top-to-bottom, each sorted by
    horizontal centre. Every component lands in exactly one row.
    """
    # sorted() is stable, so ties keep their input order.
    remaining = sorted(components, key=lambda c: c.rect.mid_y())
    rows: List[List[DetectedComponent]] = []

    while remaining:
        anchor_y = remaining[0].rect.mid_y()
        row: List[DetectedComponent] = []
        rest: List[DetectedComponent] = []
        for comp in remaining:
            if abs(comp.rect.mid_y() - anchor_y) <= alignment_tolerance:
                row.append(comp)
            else:
                rest.append(comp)
        row.sort(key=lambda c: c.rect.mid_x())
        rows.append(row)
        remaining = rest

    logger.debug(
        "group_spatially: %d components -> %d rows", len(components), len(rows)
    )
    return rows
