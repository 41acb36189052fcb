"""Tests for sketchlayout.classify — component typing and labeling."""

import pytest

from conftest import make_rect
from sketchlayout.classify import (
    classify_components,
    classify_rect,
    geometric_type,
    keyword_hint,
    match_annotation,
    reading_order,
)
from sketchlayout.models import (
    Annotation,
    ComponentType,
    PatternType,
    SketchedPattern,
    UIComponentType,
)

CANVAS = (400.0, 400.0)


def _ann(text, x0, y0, x1, y1):
    return Annotation(text=text, position=make_rect(x0, y0, x1, y1))


class TestKeywordHint:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("Profile Photo", UIComponentType.image),
            ("avatar", UIComponentType.image),
            ("Submit btn", UIComponentType.button),
            ("NAV", UIComponentType.navbar),
            ("email field", UIComponentType.form_control),
            ("product card", UIComponentType.media_object),
            ("dropdown", UIComponentType.dropdown),
            ("hello", None),
        ],
    )
    def test_keywords(self, text, expected):
        assert keyword_hint(text) == expected

    def test_first_rule_wins(self):
        # "icon button" hits the icon rule before the button rule.
        assert keyword_hint("icon button") == UIComponentType.icon


class TestGeometricType:
    @pytest.mark.parametrize(
        "bbox, expected",
        [
            ((0, 0, 400, 40), UIComponentType.navbar),
            ((40, 100, 240, 130), UIComponentType.button_group),
            ((40, 190, 120, 220), UIComponentType.button),
            ((40, 40, 100, 200), UIComponentType.form_control),
            ((40, 40, 240, 240), UIComponentType.image),
            ((10, 10, 30, 30), UIComponentType.label),
            ((100, 100, 200, 200), None),
        ],
    )
    def test_rules(self, bbox, expected):
        assert geometric_type(make_rect(*bbox), CANVAS) == expected


class TestMatchAnnotation:
    def test_inside_beats_nearby(self, default_cfg):
        rect = make_rect(100, 100, 200, 200)
        nearby = _ann("near", 205, 120, 240, 140)
        inside = _ann("inside", 120, 120, 180, 140)
        assert match_annotation(rect, [nearby, inside], default_cfg).text == "inside"

    def test_nearby_used_when_nothing_inside(self, default_cfg):
        rect = make_rect(100, 100, 200, 200)
        assert match_annotation(rect, [_ann("near", 205, 120, 240, 140)], default_cfg)

    def test_far_annotation_ignored(self, default_cfg):
        rect = make_rect(100, 100, 200, 200)
        assert match_annotation(rect, [_ann("far", 230, 120, 260, 140)], default_cfg) is None


class TestClassifyRect:
    def test_pattern_takes_precedence(self, default_cfg):
        rect = make_rect(40, 100, 200, 140)
        pattern = SketchedPattern(
            id="line-1",
            type=PatternType.form_field,
            bounding_box=rect,
            confidence=0.7,
            associated_rectangle=rect,
        )
        ctype, text = classify_rect(
            rect, CANVAS, [pattern], [_ann("Email", 50, 110, 120, 130)], cfg=default_cfg
        )
        assert ctype == ComponentType.pattern(PatternType.form_field)
        assert text == "Email"

    def test_keyword_over_geometry(self):
        rect = make_rect(40, 190, 120, 220)  # button-shaped
        ctype, _ = classify_rect(rect, CANVAS, annotations=[_ann("photo", 50, 195, 100, 215)])
        assert ctype == ComponentType.ui(UIComponentType.image)

    def test_annotated_plain_text_keeps_geometry(self):
        rect = make_rect(40, 190, 120, 220)
        ctype, text = classify_rect(rect, CANVAS, annotations=[_ann("Submit", 50, 195, 100, 215)])
        assert ctype == ComponentType.ui(UIComponentType.button)
        assert text == "Submit"

    def test_annotated_tall_box_is_textarea(self):
        rect = make_rect(100, 100, 200, 200)
        ctype, _ = classify_rect(rect, CANVAS, annotations=[_ann("notes", 110, 110, 160, 130)])
        assert ctype == ComponentType.ui(UIComponentType.textarea)

    def test_annotated_small_box_is_label(self):
        rect = make_rect(10, 10, 30, 30)
        ctype, _ = classify_rect(rect, CANVAS, annotations=[_ann("Title", 12, 12, 28, 28)])
        assert ctype == ComponentType.ui(UIComponentType.label)

    def test_ambiguous_falls_back_to_container(self):
        ctype, text = classify_rect(make_rect(100, 100, 200, 200), CANVAS)
        assert ctype == ComponentType.ui(UIComponentType.container)
        assert text is None


class TestClassifyComponents:
    def test_ids_and_labels_in_reading_order(self):
        rects = [make_rect(240, 190, 320, 220), make_rect(40, 190, 120, 220)]
        comps = classify_components(rects, CANVAS)
        assert [c.id for c in comps] == ["component-1", "component-2"]
        assert comps[0].rect == rects[1]
        assert [c.label for c in comps] == ["Button 1", "Button 2"]

    def test_counters_are_per_type(self):
        rects = [
            make_rect(0, 0, 400, 40),  # navbar
            make_rect(100, 100, 200, 200),  # container
            make_rect(40, 300, 120, 330),  # button
            make_rect(200, 300, 280, 330),  # button
        ]
        labels = [c.label for c in classify_components(rects, CANVAS)]
        assert labels == ["Navigation Bar 1", "Container 1", "Button 1", "Button 2"]

    def test_annotation_becomes_label(self):
        rects = [make_rect(40, 190, 120, 220)]
        (comp,) = classify_components(
            rects, CANVAS, annotations=[_ann("Sign in", 50, 195, 110, 215)]
        )
        assert comp.label == "Sign in"

    def test_one_component_per_rect(self):
        rects = [make_rect(i * 50, i * 30, i * 50 + 40, i * 30 + 25) for i in range(6)]
        assert len(classify_components(rects, CANVAS)) == len(rects)

    def test_deterministic(self):
        rects = [make_rect(240, 190, 320, 220), make_rect(40, 190, 120, 220)]
        assert classify_components(rects, CANVAS) == classify_components(rects, CANVAS)

    def test_invalid_canvas(self):
        assert classify_components([make_rect(0, 0, 10, 10)], (0, 400)) == []

    def test_reading_order(self):
        a = make_rect(200, 10, 250, 40)
        b = make_rect(10, 10, 50, 40)
        c = make_rect(10, 100, 50, 140)
        assert reading_order([c, a, b]) == [b, a, c]
