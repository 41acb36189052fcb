from __future__ import annotations

from dataclasses import dataclass


class ConfigValidationError(ValueError):
    """Raised when a configuration field has an invalid value."""


def _check_range(
    name: str, value: float, lo: float, hi: float, *, inclusive: bool = True
) -> None:
    if inclusive:
        if not (lo <= value <= hi):
            raise ConfigValidationError(f"{name}={value} out of range [{lo}, {hi}]")
    else:
        if not (lo < value < hi):
            raise ConfigValidationError(f"{name}={value} out of range ({lo}, {hi})")


def _check_positive(name: str, value: float) -> None:
    if value <= 0:
        raise ConfigValidationError(f"{name}={value} must be > 0")


def _check_non_negative(name: str, value: float) -> None:
    if value < 0:
        raise ConfigValidationError(f"{name}={value} must be >= 0")


# ── Layout configuration ───────────────────────────────────────────────


@dataclass(frozen=True)
class LayoutConfig:
    """Auto-layout settings supplied once per invocation."""

    enabled: bool = True
    # Container margins (px).
    container_padding: float = 32.0
    # Gap between related components (px).
    component_gap: float = 16.0
    # Gap between different sections (px).
    section_gap: float = 48.0
    # Vertical-centre distance (px) within which components share a row.
    alignment_tolerance: float = 20.0
    use_responsive_grid: bool = True
    max_content_width: float = 1200.0

    def __post_init__(self) -> None:
        for name in (
            "container_padding",
            "component_gap",
            "section_gap",
            "alignment_tolerance",
            "max_content_width",
        ):
            _check_non_negative(name, getattr(self, name))

    @classmethod
    def default(cls) -> "LayoutConfig":
        return cls()

    @classmethod
    def disabled(cls) -> "LayoutConfig":
        """Preset that short-circuits grouping into standalone groups."""
        return cls(
            enabled=False,
            container_padding=0.0,
            component_gap=0.0,
            section_gap=0.0,
            alignment_tolerance=0.0,
            use_responsive_grid=False,
            max_content_width=0.0,
        )


# ── Detector parameters ────────────────────────────────────────────────


@dataclass(frozen=True)
class DetectorParams:
    """Parameters handed to a shape detector.

    Sizes are fractions of the shorter image side; ``corner_tolerance`` is
    the allowed deviation (degrees) of each corner from 90°.
    """

    minimum_size: float = 0.1
    minimum_aspect_ratio: float = 0.25
    maximum_aspect_ratio: float = 4.0
    minimum_confidence: float = 0.7
    corner_tolerance: float = 10.0
    maximum_observations: int = 8

    def __post_init__(self) -> None:
        _check_range("minimum_size", self.minimum_size, 0.0, 1.0)
        _check_range("minimum_confidence", self.minimum_confidence, 0.0, 1.0)
        _check_positive("minimum_aspect_ratio", self.minimum_aspect_ratio)
        _check_positive("maximum_aspect_ratio", self.maximum_aspect_ratio)
        _check_range("corner_tolerance", self.corner_tolerance, 0.0, 90.0)
        if self.minimum_aspect_ratio > self.maximum_aspect_ratio:
            raise ConfigValidationError(
                f"minimum_aspect_ratio ({self.minimum_aspect_ratio}) must be <= "
                f"maximum_aspect_ratio ({self.maximum_aspect_ratio})"
            )
        if self.maximum_observations < 1:
            raise ConfigValidationError(
                f"maximum_observations={self.maximum_observations} must be >= 1"
            )


# Strict settings for the component pass: few, clean rectangles.
HIGH_PRECISION_PARAMS = DetectorParams()

# Hand-drawn input is wobbly; accept more and rougher shapes.
LENIENT_PARAMS = DetectorParams(
    minimum_size=0.05,
    minimum_aspect_ratio=0.1,
    maximum_aspect_ratio=10.0,
    minimum_confidence=0.5,
    corner_tolerance=30.0,
    maximum_observations=15,
)

# Pattern passes look for small marks (checkboxes, badges, lines).
LINE_PATTERN_PARAMS = DetectorParams(
    minimum_size=0.003,
    minimum_aspect_ratio=0.05,
    maximum_aspect_ratio=20.0,
    minimum_confidence=0.25,
    corner_tolerance=40.0,
    maximum_observations=25,
)

GEOMETRIC_PATTERN_PARAMS = DetectorParams(
    minimum_size=0.002,
    minimum_aspect_ratio=0.05,
    maximum_aspect_ratio=20.0,
    minimum_confidence=0.2,
    corner_tolerance=35.0,
    maximum_observations=30,
)


def detector_params(high_precision: bool) -> DetectorParams:
    """Return the component-pass preset for the given mode flag."""
    return HIGH_PRECISION_PARAMS if high_precision else LENIENT_PARAMS


# ── Pipeline thresholds ────────────────────────────────────────────────


@dataclass
class SketchConfig:
    """Tunables for sketch interpretation.

    The geometric thresholds were tuned by hand against real sketches; they
    live here so they can be recalibrated without touching stage logic.
    """

    # ── Normalizer ─────────────────────────────────────────────────────
    # Minimum clamped width/height (px) for finger/mouse ("precise") input.
    min_size_precise: float = 20.0
    # Minimum clamped width/height (px) for stylus input.
    min_size_stylus: float = 10.0

    # ── Deduplication ──────────────────────────────────────────────────
    # Intersection over either area above which a rect is a duplicate.
    dedup_overlap: float = 0.8
    # Centre tolerance as a fraction of canvas width.
    dedup_position_tol: float = 0.02
    # Size tolerance as a fraction of the shorter canvas side.
    dedup_size_tol: float = 0.05

    # ── Line patterns ──────────────────────────────────────────────────
    hamburger_min_aspect: float = 3.0
    hamburger_max_height: float = 0.05
    hamburger_discount: float = 0.8
    form_field_min_aspect: float = 2.0
    form_field_max_aspect: float = 6.0
    form_field_min_height: float = 0.03
    form_field_max_height: float = 0.15
    form_field_discount: float = 0.7
    text_line_min_aspect: float = 4.0
    text_line_max_height: float = 0.08
    text_line_discount: float = 0.6
    # Tab bar: aspect in (1, tab_max_aspect), bottom edge within the
    # lowest tab_bottom_band of the canvas.
    tab_max_aspect: float = 3.0
    tab_bottom_band: float = 0.3
    tab_max_height: float = 0.1
    tab_discount: float = 0.8

    # ── Geometric patterns ─────────────────────────────────────────────
    # Checkbox: |aspect - 1| below this, both sides under checkbox_max_size.
    checkbox_aspect_tol: float = 0.3
    checkbox_max_size: float = 0.1
    checkbox_discount: float = 0.8
    radio_max_area: float = 0.005
    radio_aspect_tol: float = 0.15
    radio_discount: float = 0.8
    icon_max_area: float = 0.02
    icon_aspect_tol: float = 0.4
    icon_discount: float = 0.6
    progress_min_aspect: float = 6.0
    progress_max_height: float = 0.05
    progress_discount: float = 0.8
    card_min_width: float = 0.2
    card_min_height: float = 0.15
    card_min_elements: int = 2
    card_confidence_cap: float = 0.9
    dropdown_arrow_max_area: float = 0.01
    dropdown_arrow_min_aspect: float = 0.5
    dropdown_arrow_max_aspect: float = 2.0
    # Centre distance (fraction of the image) to the container rectangle.
    dropdown_arrow_max_distance: float = 0.1
    dropdown_discount: float = 0.6
    # Fraction of the crop border ignored so the drawn frame is not ink.
    crop_border_frac: float = 0.12
    # Grayscale value (0-255) below which a pixel counts as ink.
    ink_threshold: int = 128
    # Minimum inner-element area as a fraction of the crop area.
    element_min_area_frac: float = 0.01

    # ── Classifier ─────────────────────────────────────────────────────
    # Fraction of an annotation's box that must lie inside a rect.
    annotation_overlap: float = 0.5
    # Edge distance (px) at which a nearby annotation still applies.
    annotation_max_distance: float = 20.0

    # ── Text detector ──────────────────────────────────────────────────
    enable_text_detection: bool = True
    # PaddleOCR model tier: "mobile" or "server".
    ocr_model_tier: str = "mobile"
    # Recognitions scoring below this are discarded.
    ocr_min_confidence: float = 0.5

    # ── Execution ──────────────────────────────────────────────────────
    # Shared deadline (seconds) for the detector tasks; expiry counts as an
    # empty result. An expired task keeps running in its worker thread and
    # still holds up interpreter exit until it returns.
    detector_timeout_s: float = 10.0
    max_workers: int = 5

    # ── Emitter ────────────────────────────────────────────────────────
    responsive_breakpoint_px: int = 768

    def __post_init__(self) -> None:
        """Validate field ranges to catch misconfiguration early."""
        _unit = [
            "dedup_overlap",
            "dedup_position_tol",
            "dedup_size_tol",
            "hamburger_max_height",
            "hamburger_discount",
            "form_field_min_height",
            "form_field_max_height",
            "form_field_discount",
            "text_line_max_height",
            "text_line_discount",
            "progress_max_height",
            "progress_discount",
            "tab_bottom_band",
            "tab_max_height",
            "tab_discount",
            "checkbox_aspect_tol",
            "checkbox_max_size",
            "checkbox_discount",
            "radio_max_area",
            "radio_aspect_tol",
            "radio_discount",
            "icon_max_area",
            "icon_aspect_tol",
            "icon_discount",
            "card_min_width",
            "card_min_height",
            "card_confidence_cap",
            "dropdown_arrow_max_area",
            "dropdown_arrow_max_distance",
            "dropdown_discount",
            "crop_border_frac",
            "element_min_area_frac",
            "annotation_overlap",
            "ocr_min_confidence",
        ]
        for name in _unit:
            _check_range(name, getattr(self, name), 0.0, 1.0)

        _pos_floats = [
            "hamburger_min_aspect",
            "form_field_min_aspect",
            "form_field_max_aspect",
            "text_line_min_aspect",
            "progress_min_aspect",
            "tab_max_aspect",
            "dropdown_arrow_min_aspect",
            "dropdown_arrow_max_aspect",
            "detector_timeout_s",
        ]
        for name in _pos_floats:
            _check_positive(name, getattr(self, name))

        for name in ("min_size_precise", "min_size_stylus", "annotation_max_distance"):
            _check_non_negative(name, getattr(self, name))

        for name in ("card_min_elements", "max_workers", "responsive_breakpoint_px"):
            val = getattr(self, name)
            if val < 1:
                raise ConfigValidationError(f"{name}={val} must be >= 1")

        if self.form_field_min_aspect >= self.form_field_max_aspect:
            raise ConfigValidationError(
                f"form_field_min_aspect ({self.form_field_min_aspect}) must be < "
                f"form_field_max_aspect ({self.form_field_max_aspect})"
            )
        if self.form_field_min_height >= self.form_field_max_height:
            raise ConfigValidationError(
                f"form_field_min_height ({self.form_field_min_height}) must be < "
                f"form_field_max_height ({self.form_field_max_height})"
            )
        if self.ocr_model_tier not in ("mobile", "server"):
            raise ConfigValidationError(
                f"ocr_model_tier={self.ocr_model_tier!r} must be 'mobile' or 'server'"
            )
        if not (0 <= self.ink_threshold <= 255):
            raise ConfigValidationError(
                f"ink_threshold={self.ink_threshold} out of range [0, 255]"
            )
