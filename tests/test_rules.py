"""Tests for sketchlayout.rules — group type, direction, alignment, spacing."""

import pytest

from conftest import make_component, make_rect
from sketchlayout.config import LayoutConfig
from sketchlayout.models import (
    Alignment,
    FlexDirection,
    GroupType,
    LayoutGroup,
    PatternType,
    UIComponentType,
)
from sketchlayout.rules import (
    apply_type_overrides,
    compute_spacing,
    determine_alignment,
    determine_flex_direction,
    determine_group_type,
    process_layout,
)

CANVAS = (400.0, 400.0)


def _group_type(components, index=1):
    from sketchlayout.rules import bounding_rect

    return determine_group_type(components, bounding_rect(components), CANVAS, index)


class TestGroupType:
    def test_first_row_near_top_is_header(self):
        comps = [make_component(40, 10, 120, 40, UIComponentType.button)]
        assert _group_type(comps, index=0) == GroupType.header

    def test_navigation_near_top_is_header_at_any_index(self):
        comps = [make_component(0, 10, 400, 50, UIComponentType.navbar)]
        assert _group_type(comps, index=3) == GroupType.header

    def test_navigation_mid_canvas(self):
        comps = [make_component(40, 190, 120, 220, UIComponentType.tab)]
        assert _group_type(comps) == GroupType.navigation

    def test_hamburger_pattern_counts_as_navigation(self):
        comps = [make_component(40, 190, 120, 200, PatternType.hamburger_menu)]
        assert _group_type(comps) == GroupType.navigation

    def test_form_section(self):
        comps = [
            make_component(40, 190, 120, 220, UIComponentType.label),
            make_component(140, 190, 320, 220, UIComponentType.form_control),
        ]
        assert _group_type(comps) == GroupType.form_section

    def test_button_group_needs_several_buttons(self, button_row):
        assert _group_type(button_row) == GroupType.button_group
        assert _group_type(button_row[:1]) != GroupType.button_group

    def test_image_and_label_make_card_grid(self):
        comps = [
            make_component(40, 150, 140, 250, UIComponentType.image),
            make_component(160, 190, 260, 210, UIComponentType.label),
        ]
        assert _group_type(comps) == GroupType.card_grid

    def test_footer(self):
        comps = [make_component(100, 350, 160, 390, UIComponentType.container)]
        assert _group_type(comps) == GroupType.footer

    def test_wide_central_row_is_hero(self):
        comps = [make_component(40, 150, 360, 250, UIComponentType.container)]
        assert _group_type(comps) == GroupType.hero_section

    def test_standalone(self):
        comps = [make_component(100, 180, 150, 220, UIComponentType.container)]
        assert _group_type(comps) == GroupType.standalone


class TestDirectionAndAlignment:
    def test_single_member(self):
        comps = [make_component(0, 0, 10, 10)]
        assert determine_flex_direction(comps) == FlexDirection.column
        assert determine_alignment(comps, FlexDirection.column) == Alignment.start

    def test_row(self, button_row):
        assert determine_flex_direction(button_row) == FlexDirection.row
        assert determine_alignment(button_row, FlexDirection.row) == Alignment.center

    def test_column(self):
        comps = [make_component(100, 0, 140, 20), make_component(100, 100, 140, 120)]
        assert determine_flex_direction(comps) == FlexDirection.column
        assert determine_alignment(comps, FlexDirection.column) == Alignment.center

    def test_grid(self):
        centres = [(0, 0), (100, 0), (0, 100), (100, 100), (50, 50)]
        comps = [make_component(x, y, x + 20, y + 20) for x, y in centres]
        assert determine_flex_direction(comps) == FlexDirection.grid

    def test_scattered_row_aligns_start(self):
        comps = [make_component(0, 0, 40, 20), make_component(200, 40, 240, 60)]
        assert determine_alignment(comps, FlexDirection.row) == Alignment.start

    @pytest.mark.parametrize("offset, expected", [(18, Alignment.center), (20, Alignment.start)])
    def test_population_variance_threshold(self, offset, expected):
        # Two centres `offset` apart have population variance (offset / 2) ** 2.
        comps = [make_component(0, 0, 40, 20), make_component(60, offset, 100, offset + 20)]
        assert determine_alignment(comps, FlexDirection.row) == expected


class TestSpacing:
    def _row(self, gap):
        return [make_component(0, 0, 40, 20), make_component(40 + gap, 0, 80 + gap, 20)]

    @pytest.mark.parametrize("gap, expected", [(20, 20), (100, 48), (2, 8)])
    def test_clamped_median(self, gap, expected):
        assert compute_spacing(self._row(gap), FlexDirection.row) == expected

    def test_overlap_defaults(self):
        assert compute_spacing(self._row(-10), FlexDirection.row) == 16

    def test_median_of_odd_count(self):
        comps = [
            make_component(0, 0, 10, 10),
            make_component(20, 0, 30, 10),  # gap 10
            make_component(60, 0, 70, 10),  # gap 30
            make_component(90, 0, 100, 10),  # gap 20
        ]
        assert compute_spacing(comps, FlexDirection.row) == 20


class TestTypeOverrides:
    def _group(self, group_type, components):
        return LayoutGroup(
            id="group-1",
            type=group_type,
            components=components,
            direction=FlexDirection.column,
            alignment=Alignment.start,
            spacing=24.0,
            bounding_rect=make_rect(0, 0, 400, 40),
        )

    def test_header_returns_new_group(self, layout_cfg):
        members = [make_component(0, 0, 400, 40, UIComponentType.navbar)]
        group = self._group(GroupType.header, members)
        result = apply_type_overrides(group, layout_cfg)
        assert result is not group
        assert result.id == group.id
        assert result.direction == FlexDirection.row
        assert result.alignment == Alignment.space_between
        assert result.spacing == layout_cfg.component_gap

    def test_argument_unchanged(self, layout_cfg):
        members = [make_component(0, 0, 400, 40, UIComponentType.navbar)]
        group = self._group(GroupType.header, members)
        apply_type_overrides(group, layout_cfg)
        assert group.direction == FlexDirection.column
        assert group.alignment == Alignment.start
        assert group.spacing == 24.0
        assert group.components is members

    def test_member_list_not_shared(self, layout_cfg):
        group = self._group(GroupType.standalone, [make_component(0, 0, 40, 20)])
        result = apply_type_overrides(group, layout_cfg)
        assert result.components == group.components
        assert result.components is not group.components
        assert result.direction == FlexDirection.column
        assert result.spacing == 24.0


class TestProcessLayout:
    def test_button_row_becomes_button_group(self, button_row, layout_cfg):
        (group,) = process_layout(button_row, CANVAS, layout_cfg)
        assert group.id == "group-1"
        assert group.type == GroupType.button_group
        assert group.direction == FlexDirection.row
        assert group.alignment == Alignment.center
        assert group.spacing == layout_cfg.component_gap / 2
        assert group.bounding_rect == make_rect(40, 190, 320, 220)

    def test_members_ordered_left_to_right(self, button_row):
        (group,) = process_layout(list(reversed(button_row)), CANVAS)
        assert [c.id for c in group.components] == ["b1", "b2", "b3"]

    def test_input_list_order_unchanged(self, button_row):
        reversed_row = list(reversed(button_row))
        process_layout(reversed_row, CANVAS)
        assert [c.id for c in reversed_row] == ["b3", "b2", "b1"]

    def test_header_overrides(self, layout_cfg):
        comps = [
            make_component(0, 0, 400, 40, UIComponentType.navbar),
            make_component(40, 190, 120, 220, UIComponentType.button),
        ]
        groups = process_layout(comps, CANVAS, layout_cfg)
        assert [g.id for g in groups] == ["group-1", "group-2"]
        header = groups[0]
        assert header.type == GroupType.header
        assert header.direction == FlexDirection.row
        assert header.alignment == Alignment.space_between
        assert header.spacing == layout_cfg.component_gap

    def test_card_grid_spacing(self, layout_cfg):
        comps = [
            make_component(40, 150, 140, 250, UIComponentType.image),
            make_component(160, 190, 260, 210, UIComponentType.label),
        ]
        # Place below a first row so the header rule does not apply.
        comps.append(make_component(40, 10, 100, 30, UIComponentType.container))
        groups = process_layout(comps, CANVAS, layout_cfg)
        card = groups[1]
        assert card.type == GroupType.card_grid
        assert card.direction == FlexDirection.grid
        assert card.spacing == layout_cfg.component_gap * 1.5

    def test_every_component_in_one_group(self):
        comps = [
            make_component(x, y, x + 40, y + 20)
            for x, y in [(10, 10), (100, 12), (10, 100), (200, 105), (50, 300), (300, 310)]
        ]
        groups = process_layout(comps, CANVAS)
        ids = [c.id for g in groups for c in g.components]
        assert sorted(ids) == sorted(c.id for c in comps)

    def test_groups_top_to_bottom(self):
        comps = [make_component(10, 300, 50, 320), make_component(10, 10, 50, 30)]
        groups = process_layout(comps, CANVAS)
        assert groups[0].bounding_rect.y0 < groups[1].bounding_rect.y0

    def test_disabled_yields_standalone_groups(self, button_row):
        groups = process_layout(button_row, CANVAS, LayoutConfig.disabled())
        assert len(groups) == 3
        for group, comp in zip(groups, button_row):
            assert group.type == GroupType.standalone
            assert group.components == [comp]
            assert group.spacing == 0
            assert group.direction == FlexDirection.column
            assert group.bounding_rect == comp.rect

    def test_empty(self):
        assert process_layout([], CANVAS) == []
