"""Plain-text layout descriptions for the prompt builder."""

from __future__ import annotations

from typing import Sequence, Tuple

from ..models import (
    ALIGNMENT_CSS,
    DIRECTION_DISPLAY_NAMES,
    GROUP_DISPLAY_NAMES,
    DetectedComponent,
    LayoutGroup,
    Rect,
)


def describe_group(index: int, group: LayoutGroup) -> str:
    """Four-line description of one group; *index* is 1-based."""
    members = ", ".join(c.type.display_name for c in group.components)
    return "\n".join(
        [
            f"Section {index} ({GROUP_DISPLAY_NAMES[group.type]}): {members}",
            f"- Layout: {DIRECTION_DISPLAY_NAMES[group.direction]} with "
            f"{ALIGNMENT_CSS[group.alignment]} alignment",
            f"- Spacing: {int(group.spacing)}px gaps",
            f"- Components: {len(group.components)}",
        ]
    )


def generate_layout_description(groups: Sequence[LayoutGroup]) -> str:
    """Describe *groups* section by section, top to bottom."""
    return "\n\n".join(describe_group(i, g) for i, g in enumerate(groups, start=1))


def position_description(rect: Rect, canvas_size: Tuple[float, float]) -> str:
    """Name the ninth of the canvas holding *rect*'s centre (``"top-left"`` …)."""
    canvas_w, canvas_h = canvas_size
    x = rect.mid_x() / canvas_w if canvas_w > 0 else 0.0
    y = rect.mid_y() / canvas_h if canvas_h > 0 else 0.0

    if x < 0.33:
        col = "left"
    elif x > 0.66:
        col = "right"
    else:
        col = "center"

    if y < 0.33:
        return f"top-{col}"
    if y > 0.66:
        return f"bottom-{col}"
    return "center" if col == "center" else f"middle-{col}"


def describe_components(
    components: Sequence[DetectedComponent],
    canvas_size: Tuple[float, float],
) -> str:
    """One line per component: type, size, position and label."""
    lines = []
    for i, comp in enumerate(components, start=1):
        size = f"{int(comp.rect.width())}×{int(comp.rect.height())}"
        pos = position_description(comp.rect, canvas_size)
        lines.append(
            f"Element {i} ({comp.type.display_name}): {size} at {pos}, label: {comp.label}"
        )
    return "\n".join(lines)
