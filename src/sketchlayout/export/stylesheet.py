"""Stylesheet fragment for an inferred layout.

The fixed class rules come first and are identical for every run with the
same :class:`LayoutConfig`; one rule per group follows, carrying that
group's direction, alignment and spacing.
"""

from __future__ import annotations

from string import Template
from typing import Dict, List, Optional, Sequence

from ..config import LayoutConfig
from ..models import ALIGNMENT_CSS, FlexDirection, GroupType, LayoutGroup

GROUP_CLASSES: Dict[GroupType, str] = {
    GroupType.header: "group-header",
    GroupType.navigation: "group-navigation",
    GroupType.hero_section: "group-hero",
    GroupType.card_grid: "group-card-grid",
    GroupType.form_section: "group-form",
    GroupType.button_group: "group-button",
    GroupType.footer: "group-footer",
    GroupType.standalone: "group-standalone",
}

_BASE_TEMPLATE = Template(
    """\
/* Auto-layout stylesheet */
.auto-layout-container {
    max-width: ${max_width}px;
    margin: 0 auto;
    padding: ${padding}px;
    min-height: 100vh;
    display: flex;
    flex-direction: column;
    gap: ${section_gap}px;
}

.layout-group {
    display: flex;
    align-items: center;
}

.group-header { justify-content: space-between; }
.group-navigation { justify-content: space-between; padding: 16px 0; }
.group-hero { justify-content: center; text-align: center; padding: 48px 0; }
.group-button { gap: ${button_gap}px; justify-content: center; }
.group-form { flex-direction: column; align-items: stretch; gap: ${gap}px; }
.group-footer { justify-content: center; padding: 32px 0; margin-top: auto; }
.group-standalone { flex-direction: column; align-items: flex-start; }

.group-card-grid {
    display: grid;
    grid-template-columns: repeat(auto-fit, minmax(280px, 1fr));
    gap: ${card_gap}px;
    align-items: start;
}
"""
)

_RESPONSIVE_TEMPLATE = Template(
    """
/* Responsive layout */
@media (max-width: ${breakpoint}px) {
    .auto-layout-container { padding: 16px; gap: 24px; }
    .layout-group { flex-direction: column; }
    .group-navigation { gap: 12px; }
    .group-card-grid { grid-template-columns: 1fr; }
    .group-button { flex-wrap: wrap; }
${group_rules}}
"""
)


def _px(value: float) -> int:
    return int(value)


def group_selector(group: LayoutGroup) -> str:
    return f'.layout-group.{GROUP_CLASSES[group.type]}[data-group="{group.id}"]'


def group_rule(group: LayoutGroup) -> str:
    """CSS rule for one group, keyed by its id."""
    selector = group_selector(group)
    lines: List[str] = [f"{selector} {{"]
    if group.direction == FlexDirection.grid:
        lines.append("    display: grid;")
        lines.append("    grid-template-columns: repeat(auto-fit, minmax(280px, 1fr));")
    else:
        lines.append(f"    flex-direction: {group.direction.value};")
        lines.append(f"    justify-content: {ALIGNMENT_CSS[group.alignment]};")
    lines.append(f"    gap: {_px(group.spacing)}px;")
    lines.append("}")
    return "\n".join(lines)


def collapse_rule(group: LayoutGroup) -> str:
    """Narrow-viewport override for one group.

    Uses the same selector as :func:`group_rule` and is emitted after it,
    so rows become columns and grids a single column below the breakpoint.
    """
    if group.direction == FlexDirection.grid:
        declaration = "grid-template-columns: 1fr;"
    else:
        declaration = "flex-direction: column;"
    return f"    {group_selector(group)} {{ {declaration} }}"


def generate_stylesheet(
    groups: Sequence[LayoutGroup],
    config: Optional[LayoutConfig] = None,
    breakpoint_px: int = 768,
) -> str:
    """Render the stylesheet for *groups*.

    Parameters
    ----------
    groups : sequence of LayoutGroup
        Output of :func:`sketchlayout.rules.process_layout`.
    config : LayoutConfig, optional
        Supplies container width, padding and gaps.
    breakpoint_px : int
        Viewport width below which rows collapse to columns and grids to
        a single column. Omitted when ``config.use_responsive_grid`` is off.
    """
    if config is None:
        config = LayoutConfig.default()
    parts = [
        _BASE_TEMPLATE.substitute(
            max_width=_px(config.max_content_width),
            padding=_px(config.container_padding),
            section_gap=_px(config.section_gap),
            gap=_px(config.component_gap),
            button_gap=_px(config.component_gap / 2),
            card_gap=_px(config.component_gap * 1.5),
        )
    ]
    for group in groups:
        parts.append(group_rule(group) + "\n")
    if config.use_responsive_grid:
        collapse = "".join(collapse_rule(group) + "\n" for group in groups)
        parts.append(
            _RESPONSIVE_TEMPLATE.substitute(breakpoint=breakpoint_px, group_rules=collapse)
        )
    return "\n".join(parts)
