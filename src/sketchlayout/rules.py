"""Layout rule engine — semantic role, direction, alignment and spacing per row.

Group type is decided by an ordered rule list (first match wins):

1. upper quarter of the canvas and navigation-like, or the first row → header
2. navigation-like → navigation
3. form-like → form section
4. several members, all buttons → button group
5. an image and a label together → card grid
6. lower quarter of the canvas → footer
7. central band and wider than 60 % of the canvas → hero section
8. anything else → standalone

Header, navigation, button-group, form and card-grid rows then have their
direction, alignment and spacing fixed from the :class:`LayoutConfig`;
other rows keep the values measured from their members.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from statistics import pvariance
from typing import List, Optional, Sequence, Tuple

from .config import LayoutConfig
from .grouping import group_spatially
from .models import (
    Alignment,
    DetectedComponent,
    FlexDirection,
    GroupType,
    LayoutGroup,
    Rect,
    UIComponentType,
)
from .models import bounding_rect as _bounding_rect

logger = logging.getLogger("sketchlayout.rules")

CanvasSize = Tuple[float, float]

NAVIGATION_TYPES = frozenset(
    {
        UIComponentType.navbar,
        UIComponentType.navs,
        UIComponentType.tab,
        UIComponentType.breadcrumb,
    }
)
FORM_TYPES = frozenset(
    {
        UIComponentType.form_control,
        UIComponentType.textarea,
        UIComponentType.dropdown,
    }
)

# Population variance (px²) of member centres below which a row is centred.
ALIGNMENT_VARIANCE = 100.0
MIN_SPACING = 8.0
MAX_SPACING = 48.0
DEFAULT_SPACING = 16.0


def bounding_rect(components: Sequence[DetectedComponent]) -> Rect:
    """Union of the members' rectangles."""
    return _bounding_rect([c.rect for c in components])


def _spread(values: Sequence[float]) -> float:
    return max(values) - min(values) if values else 0.0


def determine_group_type(
    components: Sequence[DetectedComponent],
    rect: Rect,
    canvas_size: CanvasSize,
    index: int,
) -> GroupType:
    """Classify a row of components by member kinds and canvas position.

    ``index`` is the row's 0-based position top to bottom.
    """
    canvas_w, canvas_h = canvas_size
    kinds = [c.type.ui_equivalent() for c in components]
    kind_set = set(kinds)
    y_frac = rect.mid_y() / canvas_h if canvas_h > 0 else 0.0
    has_nav = bool(kind_set & NAVIGATION_TYPES)

    if y_frac < 0.25 and (has_nav or index == 0):
        return GroupType.header
    if has_nav:
        return GroupType.navigation
    if kind_set & FORM_TYPES:
        return GroupType.form_section
    if len(components) > 1 and all(k == UIComponentType.button for k in kinds):
        return GroupType.button_group
    if UIComponentType.image in kind_set and UIComponentType.label in kind_set:
        return GroupType.card_grid
    if y_frac > 0.75:
        return GroupType.footer
    if 0.2 < y_frac < 0.7 and rect.width() > canvas_w * 0.6:
        return GroupType.hero_section
    return GroupType.standalone


def determine_flex_direction(components: Sequence[DetectedComponent]) -> FlexDirection:
    """Row when members spread mostly sideways, grid when evenly, else column."""
    if len(components) < 2:
        return FlexDirection.column
    x_spread = _spread([c.rect.mid_x() for c in components])
    y_spread = _spread([c.rect.mid_y() for c in components])
    if x_spread > y_spread * 1.5:
        return FlexDirection.row
    if len(components) > 4 and abs(x_spread - y_spread) < min(x_spread, y_spread) * 0.5:
        return FlexDirection.grid
    return FlexDirection.column


def determine_alignment(
    components: Sequence[DetectedComponent],
    direction: FlexDirection,
) -> Alignment:
    """Centre when members line up on the cross axis, else start."""
    if len(components) < 2:
        return Alignment.start
    if direction == FlexDirection.row:
        centres = [c.rect.mid_y() for c in components]
    else:
        centres = [c.rect.mid_x() for c in components]
    if pvariance(centres) < ALIGNMENT_VARIANCE:
        return Alignment.center
    return Alignment.start


def compute_spacing(
    components: Sequence[DetectedComponent],
    direction: FlexDirection,
) -> float:
    """Median positive gap along the main axis, clamped to [8, 48].

    Defaults to 16 when there is no positive gap.
    """
    if len(components) < 2:
        return DEFAULT_SPACING
    if direction == FlexDirection.row:
        ordered = sorted(components, key=lambda c: c.rect.mid_x())
        gaps = [b.rect.x0 - a.rect.x1 for a, b in zip(ordered, ordered[1:])]
    else:
        ordered = sorted(components, key=lambda c: c.rect.mid_y())
        gaps = [b.rect.y0 - a.rect.y1 for a, b in zip(ordered, ordered[1:])]
    positive = sorted(g for g in gaps if g > 0)
    if not positive:
        return DEFAULT_SPACING
    median = positive[len(positive) // 2]
    return max(MIN_SPACING, min(MAX_SPACING, median))


def apply_type_overrides(group: LayoutGroup, config: LayoutConfig) -> LayoutGroup:
    """Return a copy of *group* with fixed layout values for its type.

    The argument is not modified. Types without a convention keep their
    measured direction, alignment and spacing.
    """
    gap = config.component_gap
    if group.type in (GroupType.header, GroupType.navigation):
        layout = (FlexDirection.row, Alignment.space_between, gap)
    elif group.type == GroupType.button_group:
        layout = (FlexDirection.row, Alignment.center, gap / 2)
    elif group.type == GroupType.form_section:
        layout = (FlexDirection.column, Alignment.start, gap)
    elif group.type == GroupType.card_grid:
        layout = (FlexDirection.grid, Alignment.start, gap * 1.5)
    else:
        layout = (group.direction, group.alignment, group.spacing)
    direction, alignment, spacing = layout
    return replace(
        group,
        components=list(group.components),
        direction=direction,
        alignment=alignment,
        spacing=spacing,
    )


def _order_members(group: LayoutGroup) -> LayoutGroup:
    # Rows (and grids) read left to right, columns top to bottom.
    if group.direction == FlexDirection.column:
        ordered = sorted(group.components, key=lambda c: c.rect.mid_y())
    else:
        ordered = sorted(group.components, key=lambda c: c.rect.mid_x())
    return replace(group, components=ordered)


def standalone_groups(components: Sequence[DetectedComponent]) -> List[LayoutGroup]:
    """One standalone group per component, with no layout inferred."""
    return [
        LayoutGroup(
            id=f"group-{i}",
            type=GroupType.standalone,
            components=[comp],
            direction=FlexDirection.column,
            alignment=Alignment.start,
            spacing=0.0,
            bounding_rect=comp.rect,
        )
        for i, comp in enumerate(components, start=1)
    ]


def process_layout(
    components: Sequence[DetectedComponent],
    canvas_size: CanvasSize,
    config: Optional[LayoutConfig] = None,
) -> List[LayoutGroup]:
    """Group components into rows and assign each row its layout rule.

    Parameters
    ----------
    components : sequence of DetectedComponent
        Classified components, in any order.
    canvas_size : (width, height)
        Canvas dimensions in pixels.
    config : LayoutConfig, optional
        Defaults to :meth:`LayoutConfig.default`. A disabled config yields
        :func:`standalone_groups` in input order.

    Returns
    -------
    list[LayoutGroup]
        Top to bottom; ids ``group-<n>``.
    """
    if config is None:
        config = LayoutConfig.default()
    if not components:
        return []
    if not config.enabled:
        return standalone_groups(components)

    groups: List[LayoutGroup] = []
    rows = group_spatially(components, config.alignment_tolerance)
    for index, row in enumerate(rows):
        rect = bounding_rect(row)
        direction = determine_flex_direction(row)
        group = LayoutGroup(
            id=f"group-{index + 1}",
            type=determine_group_type(row, rect, canvas_size, index),
            components=list(row),
            direction=direction,
            alignment=determine_alignment(row, direction),
            spacing=compute_spacing(row, direction),
            bounding_rect=rect,
        )
        group = _order_members(apply_type_overrides(group, config))
        logger.debug(
            "%s: %s %s/%s spacing=%.1f (%d members)",
            group.id,
            group.type.value,
            group.direction.value,
            group.alignment.value,
            group.spacing,
            len(group.components),
        )
        groups.append(group)

    logger.info("process_layout: %d components -> %d groups", len(components), len(groups))
    return groups
