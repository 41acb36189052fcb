"""Tests for sketchlayout.export.description — plain-text layout summaries."""

import pytest

from conftest import make_component, make_rect
from sketchlayout.export.description import (
    describe_components,
    describe_group,
    generate_layout_description,
    position_description,
)
from sketchlayout.models import (
    Alignment,
    FlexDirection,
    GroupType,
    LayoutGroup,
    PatternType,
    UIComponentType,
)

CANVAS = (300.0, 300.0)


class TestDescribeGroup:
    def test_button_group(self, button_row):
        group = LayoutGroup(
            id="group-1",
            type=GroupType.button_group,
            components=button_row,
            direction=FlexDirection.row,
            alignment=Alignment.center,
            spacing=8.0,
        )
        assert describe_group(1, group) == (
            "Section 1 (Button Group): Button, Button, Button\n"
            "- Layout: horizontal with center alignment\n"
            "- Spacing: 8px gaps\n"
            "- Components: 3"
        )

    def test_pattern_members_use_pattern_names(self):
        group = LayoutGroup(
            id="group-2",
            type=GroupType.navigation,
            components=[make_component(0, 0, 100, 10, PatternType.hamburger_menu)],
            direction=FlexDirection.row,
            alignment=Alignment.space_between,
            spacing=16.0,
        )
        text = describe_group(2, group)
        assert text.startswith("Section 2 (Navigation): Hamburger Menu")
        assert "space-between alignment" in text

    def test_sections_separated_by_blank_line(self):
        g = LayoutGroup(id="g", type=GroupType.standalone, components=[make_component(0, 0, 5, 5)])
        text = generate_layout_description([g, g])
        assert text.count("\n\n") == 1
        assert "Section 2 (Standalone)" in text
        assert "- Layout: vertical with flex-start alignment" in text

    def test_empty(self):
        assert generate_layout_description([]) == ""


class TestPositionDescription:
    @pytest.mark.parametrize(
        "bbox, expected",
        [
            ((0, 0, 20, 20), "top-left"),
            ((140, 0, 160, 20), "top-center"),
            ((280, 0, 300, 20), "top-right"),
            ((0, 140, 20, 160), "middle-left"),
            ((140, 140, 160, 160), "center"),
            ((280, 140, 300, 160), "middle-right"),
            ((0, 280, 20, 300), "bottom-left"),
            ((280, 280, 300, 300), "bottom-right"),
        ],
    )
    def test_ninths(self, bbox, expected):
        assert position_description(make_rect(*bbox), CANVAS) == expected


class TestDescribeComponents:
    def test_line_format(self):
        comps = [
            make_component(0, 0, 300, 30, UIComponentType.navbar, label="Top nav"),
            make_component(140, 140, 160, 160, UIComponentType.icon, label="Icon 1"),
        ]
        lines = describe_components(comps, CANVAS).splitlines()
        assert lines == [
            "Element 1 (Navigation Bar): 300×30 at top-center, label: Top nav",
            "Element 2 (Icon): 20×20 at center, label: Icon 1",
        ]
