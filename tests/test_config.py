"""Tests for sketchlayout.config — defaults, presets, and validation."""

import dataclasses

import pytest

from sketchlayout.config import (
    GEOMETRIC_PATTERN_PARAMS,
    HIGH_PRECISION_PARAMS,
    LENIENT_PARAMS,
    LINE_PATTERN_PARAMS,
    ConfigValidationError,
    DetectorParams,
    LayoutConfig,
    SketchConfig,
    detector_params,
)


class TestLayoutConfig:
    def test_defaults(self):
        cfg = LayoutConfig.default()
        assert cfg.enabled is True
        assert cfg.container_padding == 32
        assert cfg.component_gap == 16
        assert cfg.section_gap == 48
        assert cfg.alignment_tolerance == 20
        assert cfg.use_responsive_grid is True
        assert cfg.max_content_width == 1200

    def test_disabled_preset(self):
        cfg = LayoutConfig.disabled()
        assert cfg.enabled is False
        assert cfg.component_gap == 0
        assert cfg.use_responsive_grid is False

    def test_immutable(self):
        cfg = LayoutConfig.default()
        with pytest.raises(dataclasses.FrozenInstanceError):
            cfg.component_gap = 4  # type: ignore[misc]

    def test_negative_gap_rejected(self):
        with pytest.raises(ConfigValidationError, match="component_gap"):
            LayoutConfig(component_gap=-1)


class TestDetectorParams:
    def test_high_precision_preset(self):
        p = detector_params(True)
        assert p is HIGH_PRECISION_PARAMS
        assert p.minimum_size == 0.1
        assert p.minimum_confidence == 0.7
        assert p.corner_tolerance == 10
        assert p.maximum_observations == 8

    def test_lenient_preset(self):
        p = detector_params(False)
        assert p is LENIENT_PARAMS
        assert p.minimum_confidence < HIGH_PRECISION_PARAMS.minimum_confidence
        assert p.maximum_observations > HIGH_PRECISION_PARAMS.maximum_observations

    def test_pattern_presets(self):
        assert LINE_PATTERN_PARAMS.minimum_confidence == 0.25
        assert LINE_PATTERN_PARAMS.maximum_observations == 25
        assert GEOMETRIC_PATTERN_PARAMS.minimum_confidence == 0.2
        assert GEOMETRIC_PATTERN_PARAMS.maximum_observations == 30

    def test_inverted_aspect_bounds_rejected(self):
        with pytest.raises(ConfigValidationError, match="aspect"):
            DetectorParams(minimum_aspect_ratio=5.0, maximum_aspect_ratio=2.0)

    def test_zero_observations_rejected(self):
        with pytest.raises(ConfigValidationError, match="maximum_observations"):
            DetectorParams(maximum_observations=0)


class TestSketchConfig:
    def test_defaults(self):
        cfg = SketchConfig()
        assert cfg.dedup_overlap == 0.8
        assert cfg.dedup_position_tol == 0.02
        assert cfg.dedup_size_tol == 0.05
        assert cfg.hamburger_discount == 0.8
        assert cfg.form_field_discount == 0.7
        assert cfg.text_line_discount == 0.6
        assert cfg.card_confidence_cap == 0.9
        assert cfg.responsive_breakpoint_px == 768

    def test_vars_round_trip(self):
        """vars(cfg) should produce a dict that can reconstruct the config."""
        cfg = SketchConfig(dedup_overlap=0.7, ocr_model_tier="server")
        cfg2 = SketchConfig(**vars(cfg))
        assert vars(cfg) == vars(cfg2)


class TestConfigValidation:
    """Validate __post_init__ range guards."""

    @pytest.mark.parametrize(
        "field_name", ["dedup_overlap", "hamburger_discount", "annotation_overlap"]
    )
    def test_unit_range_rejected(self, field_name):
        with pytest.raises(ConfigValidationError, match=field_name):
            SketchConfig(**{field_name: 1.5})

    def test_unit_range_boundaries(self):
        cfg = SketchConfig(dedup_overlap=0.0, card_confidence_cap=1.0)
        assert cfg.dedup_overlap == 0.0
        assert cfg.card_confidence_cap == 1.0

    def test_timeout_must_be_positive(self):
        with pytest.raises(ConfigValidationError, match="detector_timeout_s"):
            SketchConfig(detector_timeout_s=0)

    def test_form_field_aspect_order(self):
        with pytest.raises(ConfigValidationError, match="form_field_min_aspect"):
            SketchConfig(form_field_min_aspect=6.0, form_field_max_aspect=2.0)

    def test_bad_model_tier(self):
        with pytest.raises(ConfigValidationError, match="ocr_model_tier"):
            SketchConfig(ocr_model_tier="huge")

    def test_ink_threshold_range(self):
        with pytest.raises(ConfigValidationError, match="ink_threshold"):
            SketchConfig(ink_threshold=300)

    def test_max_workers_at_least_one(self):
        with pytest.raises(ConfigValidationError, match="max_workers"):
            SketchConfig(max_workers=0)
