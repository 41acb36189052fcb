"""Sketch interpretation: hand-drawn UI sketches to structured layouts.

Frequently-used symbols are re-exported here for convenience.
For specialised imports (pattern analyses, stylesheet helpers, detector
internals, etc.) import directly from the relevant submodule — e.g.::

    from sketchlayout.patterns.geometric import count_internal_elements
    from sketchlayout.export.stylesheet import group_rule
    from sketchlayout.detect.text import parse_ocr_results
"""

# ── Core models & config ──────────────────────────────────────────────

from .classify import classify_components
from .config import (
    ConfigValidationError,
    DetectorParams,
    LayoutConfig,
    SketchConfig,
    detector_params,
)
from .dedup import dedup_rectangles
from .detect import detect_rectangles, detect_text, has_paddleocr
from .export import (
    describe_components,
    generate_layout_description,
    generate_stylesheet,
)
from .grouping import group_spatially
from .ingest import IngestError, SketchMeta, decode_sketch_image, ingest_sketch
from .models import (
    Alignment,
    Annotation,
    ComponentType,
    DetectedComponent,
    FlexDirection,
    GroupType,
    LayoutGroup,
    NormalizedRect,
    PatternType,
    RawObservation,
    Rect,
    SketchedPattern,
    TextObservation,
    UIComponentType,
)
from .normalize import DeviceClass, normalize_annotations, normalize_observations
from .patterns import best_pattern_for, recognize_patterns
from .pipeline import (
    SketchResult,
    StageResult,
    interpret_sketch,
    run_pipeline,
)
from .rules import process_layout

__all__ = [
    # Models & config
    "ConfigValidationError",
    "DetectorParams",
    "LayoutConfig",
    "SketchConfig",
    "detector_params",
    "Alignment",
    "Annotation",
    "ComponentType",
    "DetectedComponent",
    "FlexDirection",
    "GroupType",
    "LayoutGroup",
    "NormalizedRect",
    "PatternType",
    "RawObservation",
    "Rect",
    "SketchedPattern",
    "TextObservation",
    "UIComponentType",
    # Stages
    "DeviceClass",
    "normalize_observations",
    "normalize_annotations",
    "dedup_rectangles",
    "recognize_patterns",
    "best_pattern_for",
    "classify_components",
    "group_spatially",
    "process_layout",
    "generate_stylesheet",
    "generate_layout_description",
    "describe_components",
    # Detectors
    "detect_rectangles",
    "detect_text",
    "has_paddleocr",
    # Pipeline
    "SketchResult",
    "StageResult",
    "interpret_sketch",
    "run_pipeline",
    # Ingest
    "IngestError",
    "SketchMeta",
    "decode_sketch_image",
    "ingest_sketch",
]
