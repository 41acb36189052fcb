"""Pipeline stage infrastructure: gating, timing, and stage-result recording.

Provides a canonical pipeline contract for the sketch flow:

    ingest → detect ‖ text ‖ patterns → normalize → dedup → classify → layout → export

Every stage produces a :class:`StageResult` that is kept on the
:class:`SketchResult`. Gating logic is centralised in :func:`gate` so that
the CLI and tests behave identically.

Detector stages run concurrently over the same read-only image and are
joined before classification; everything after the join is a pure,
single-threaded transform (:func:`interpret_sketch`). No stage failure
aborts the run: a failed detector contributes an empty list and a run may
legitimately finish with zero components.
"""

from __future__ import annotations

import hashlib
import logging
import time
import traceback
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generator, List, Optional, Sequence, Tuple

import numpy as np

from ._tasks import run_tasks
from .config import LayoutConfig, SketchConfig, detector_params
from .models import (
    Annotation,
    DetectedComponent,
    LayoutGroup,
    RawObservation,
    Rect,
    SketchedPattern,
    TextObservation,
)
from .normalize import DeviceClass

logger = logging.getLogger("sketchlayout.pipeline")

CanvasSize = Tuple[float, float]

# ── Skip reasons (exhaustive enumeration) ──────────────────────────────


class SkipReason(str, Enum):
    """Why a pipeline stage was skipped."""

    disabled_by_config = "disabled_by_config"
    missing_dependency = "missing_dependency"
    missing_inputs = "missing_inputs"
    no_image = "no_image"
    upstream_failed = "upstream_failed"
    not_applicable = "not_applicable"


# ── Stage result ───────────────────────────────────────────────────────


@dataclass
class StageResult:
    """Outcome record for a single pipeline stage."""

    stage: str
    enabled: bool = False
    ran: bool = False
    status: str = "skipped"  # "success" | "skipped" | "failed"
    skip_reason: Optional[str] = None
    duration_ms: int = 0
    counts: Dict[str, Any] = field(default_factory=dict)
    inputs: Dict[str, Any] = field(default_factory=dict)
    outputs: Dict[str, Any] = field(default_factory=dict)
    error: Optional[Dict[str, str]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize stage result to a JSON-compatible dict."""
        d: Dict[str, Any] = {
            "stage": self.stage,
            "enabled": self.enabled,
            "ran": self.ran,
            "status": self.status,
        }
        if self.skip_reason is not None:
            d["skip_reason"] = self.skip_reason
        d["duration_ms"] = self.duration_ms
        if self.counts:
            d["counts"] = self.counts
        if self.inputs:
            d["inputs"] = self.inputs
        if self.outputs:
            d["outputs"] = self.outputs
        if self.error is not None:
            d["error"] = self.error
        return d


def _error_dict(exc: BaseException) -> Dict[str, str]:
    return {
        "type": type(exc).__name__,
        "message": str(exc),
        "stack": "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        ),
    }


# ── Canonical gating function ──────────────────────────────────────────

# Ordered stage names: the canonical pipeline sequence.
STAGE_ORDER: List[str] = [
    "ingest",
    "detect",
    "text",
    "patterns",
    "normalize",
    "dedup",
    "classify",
    "layout",
    "export",
]


def gate(
    stage: str,
    cfg: SketchConfig,
    inputs: Dict[str, Any] | None = None,
) -> tuple[bool, Optional[str]]:
    """Decide whether *stage* should run.

    Parameters
    ----------
    stage : str
        One of :data:`STAGE_ORDER`.
    cfg : SketchConfig
        Effective configuration for the run.
    inputs : dict, optional
        Lightweight metadata about upstream outputs (e.g.
        ``{"has_image": True, "custom_text_detector": False}``).

    Returns
    -------
    (should_run, skip_reason)
        *should_run* is ``True`` when the stage should execute.
        When ``False``, *skip_reason* explains why.
    """
    if inputs is None:
        inputs = {}

    # Stages that always run unconditionally.
    if stage in ("ingest", "normalize", "dedup", "classify", "layout", "export"):
        return True, None

    if stage in ("detect", "patterns"):
        if inputs.get("ingest_failed"):
            return False, SkipReason.upstream_failed.value
        if not inputs.get("has_image", True):
            return False, SkipReason.no_image.value
        return True, None

    if stage == "text":
        if not cfg.enable_text_detection:
            return False, SkipReason.disabled_by_config.value
        if inputs.get("ingest_failed"):
            return False, SkipReason.upstream_failed.value
        if not inputs.get("has_image", True):
            return False, SkipReason.no_image.value
        if not inputs.get("custom_text_detector", False):
            from .detect.text import has_paddleocr

            if not has_paddleocr():
                return False, SkipReason.missing_dependency.value
        return True, None

    # Unknown stage: not applicable.
    return False, SkipReason.not_applicable.value


# ── Stage context manager ──────────────────────────────────────────────


@contextmanager
def run_stage(
    stage: str,
    cfg: SketchConfig,
    inputs: Dict[str, Any] | None = None,
) -> Generator[StageResult, None, None]:
    """Context manager that wraps a pipeline stage with gating + timing.

    Usage::

        with run_stage("dedup", cfg) as sr:
            if sr.ran:
                # … do the work …
                sr.counts["rectangles"] = 12
                sr.status = "success"

    The yielded :class:`StageResult` has ``ran=True`` only when
    :func:`gate` approves the stage. Exceptions are recorded on the
    result and re-raised.
    """
    should_run, skip_reason = gate(stage, cfg, inputs)

    sr = StageResult(stage=stage)
    if stage == "text":
        sr.enabled = cfg.enable_text_detection
    else:
        sr.enabled = True

    if inputs:
        sr.inputs = inputs

    if not should_run:
        sr.ran = False
        sr.status = "skipped"
        sr.skip_reason = skip_reason
        yield sr
        return

    sr.ran = True
    t0 = time.perf_counter()
    try:
        yield sr
        # If the caller didn't explicitly set status, mark success if no error.
        if sr.status not in ("success", "failed"):
            sr.status = "success"
    except Exception as exc:
        sr.status = "failed"
        sr.error = _error_dict(exc)
        # Re-raise so the outer handler can decide fallback policy.
        raise
    finally:
        elapsed = time.perf_counter() - t0
        sr.duration_ms = int(elapsed * 1000)


# ── Input fingerprint (determinism aid) ────────────────────────────────


def input_fingerprint(
    pixels: Optional[np.ndarray],
    canvas_size: CanvasSize,
    layout_config: LayoutConfig,
    cfg: SketchConfig,
) -> str:
    """Compute a reproducibility fingerprint for a pipeline run.

    Hashes the decoded pixels, so two encodings of the same image match.
    """
    if pixels is not None:
        pixel_digest = hashlib.sha256(np.ascontiguousarray(pixels).tobytes()).hexdigest()
        shape = "x".join(str(d) for d in pixels.shape)
    else:
        pixel_digest, shape = "none", "0"
    parts = [
        pixel_digest,
        shape,
        f"{canvas_size[0]}x{canvas_size[1]}",
        str(sorted(vars(layout_config).items())),
        str(sorted(vars(cfg).items())),
    ]
    return hashlib.sha256("|".join(parts).encode()).hexdigest()[:16]


# ── Sketch-level result container ──────────────────────────────────────


@dataclass
class SketchResult:
    """Structured result from :func:`run_pipeline` for a single sketch.

    Contains every artefact produced by the pipeline so that the caller
    can serialise or render without repeating any computation.
    """

    canvas_width: float = 0.0
    canvas_height: float = 0.0
    fingerprint: str = ""

    # Stage results
    stages: Dict[str, StageResult] = field(default_factory=dict)

    # Detector artefacts
    observations: List[RawObservation] = field(default_factory=list)
    text_observations: List[TextObservation] = field(default_factory=list)
    patterns: List[SketchedPattern] = field(default_factory=list)

    # Interpretation artefacts
    rectangles: List[Rect] = field(default_factory=list)
    annotations: List[Annotation] = field(default_factory=list)
    components: List[DetectedComponent] = field(default_factory=list)
    groups: List[LayoutGroup] = field(default_factory=list)

    # Emitted text
    stylesheet: str = ""
    description: str = ""
    component_description: str = ""

    def to_summary_dict(self) -> Dict[str, Any]:
        """Return a lightweight summary suitable for JSON serialisation."""
        return {
            "canvas_width": self.canvas_width,
            "canvas_height": self.canvas_height,
            "fingerprint": self.fingerprint,
            "stages": {
                n: self.stages[n].to_dict() for n in STAGE_ORDER if n in self.stages
            },
            "counts": {
                "observations": len(self.observations),
                "text_observations": len(self.text_observations),
                "patterns": len(self.patterns),
                "rectangles": len(self.rectangles),
                "annotations": len(self.annotations),
                "components": len(self.components),
                "groups": len(self.groups),
            },
            "groups": [
                {"id": g.id, "type": g.type.value, "components": len(g.components)}
                for g in self.groups
            ],
        }

    def to_dict(self) -> Dict[str, Any]:
        """Full JSON-compatible dump of components, groups and emitted text."""
        d = self.to_summary_dict()
        d["patterns"] = [p.to_dict() for p in self.patterns]
        d["annotations"] = [a.to_dict() for a in self.annotations]
        d["components"] = [c.to_dict() for c in self.components]
        d["groups"] = [g.to_dict() for g in self.groups]
        d["stylesheet"] = self.stylesheet
        d["description"] = self.description
        return d


# ── Post-join interpretation (pure) ────────────────────────────────────


def interpret_sketch(
    observations: Sequence[RawObservation],
    canvas_size: CanvasSize,
    *,
    text_observations: Sequence[TextObservation] = (),
    patterns: Sequence[SketchedPattern] = (),
    layout_config: LayoutConfig | None = None,
    cfg: SketchConfig | None = None,
    device_class: DeviceClass = DeviceClass.stylus,
) -> SketchResult:
    """Turn joined detector output into components, groups and text.

    Runs normalize → dedup → classify → layout → export on the calling
    thread. Identical input yields identical output.
    """
    from .classify import classify_components
    from .dedup import dedup_rectangles
    from .export import describe_components, generate_layout_description, generate_stylesheet
    from .normalize import normalize_annotations, normalize_observations
    from .rules import process_layout

    if layout_config is None:
        layout_config = LayoutConfig.default()
    if cfg is None:
        cfg = SketchConfig()

    res = SketchResult(
        canvas_width=float(canvas_size[0]),
        canvas_height=float(canvas_size[1]),
        observations=list(observations),
        text_observations=list(text_observations),
        patterns=list(patterns),
    )

    with run_stage("normalize", cfg) as sr:
        res.rectangles = normalize_observations(
            observations, canvas_size, device_class=device_class, cfg=cfg
        )
        res.annotations = normalize_annotations(text_observations, canvas_size)
        sr.inputs = {"device_class": device_class.value}
        sr.counts = {
            "observations": len(res.observations),
            "rectangles": len(res.rectangles),
            "annotations": len(res.annotations),
        }
    res.stages["normalize"] = sr

    with run_stage("dedup", cfg) as sr:
        before = len(res.rectangles)
        res.rectangles = dedup_rectangles(res.rectangles, canvas_size, cfg)
        sr.counts = {"before": before, "after": len(res.rectangles)}
    res.stages["dedup"] = sr

    with run_stage("classify", cfg) as sr:
        res.components = classify_components(
            res.rectangles,
            canvas_size,
            patterns=res.patterns,
            annotations=res.annotations,
            alignment_tolerance=layout_config.alignment_tolerance,
            cfg=cfg,
        )
        sr.counts = {"components": len(res.components)}
    res.stages["classify"] = sr

    with run_stage("layout", cfg) as sr:
        res.groups = process_layout(res.components, canvas_size, layout_config)
        sr.inputs = {"enabled": layout_config.enabled}
        sr.counts = {"groups": len(res.groups)}
    res.stages["layout"] = sr

    with run_stage("export", cfg) as sr:
        res.stylesheet = generate_stylesheet(
            res.groups, layout_config, breakpoint_px=cfg.responsive_breakpoint_px
        )
        res.description = generate_layout_description(res.groups)
        res.component_description = describe_components(res.components, canvas_size)
        sr.counts = {
            "stylesheet_chars": len(res.stylesheet),
            "description_lines": len(res.description.splitlines()),
        }
    res.stages["export"] = sr

    return res


# ── Stage helpers (keep run_pipeline focused on orchestration) ─────────


def _run_ingest_stage(image, cfg: SketchConfig) -> tuple:
    """Stage 1: decode the sketch.  Returns (pixels_or_None, StageResult)."""
    from .ingest import IngestError, ingest_sketch

    pixels = None
    try:
        with run_stage("ingest", cfg) as sr:
            pixels, meta = ingest_sketch(image)
            sr.counts = {"width": meta.width, "height": meta.height}
            sr.status = "success"
    except IngestError as exc:
        logger.warning("Ingest failed: %s", exc)
    return pixels, sr


def _task_stage(
    stage: str,
    error: Optional[BaseException],
    duration_ms: int,
    counts: Dict[str, Any],
) -> StageResult:
    sr = StageResult(stage=stage, enabled=True, ran=True, duration_ms=duration_ms)
    sr.counts = counts
    if error is None:
        sr.status = "success"
    else:
        sr.status = "failed"
        sr.error = _error_dict(error)
    return sr


def _skipped_stage(stage: str, cfg: SketchConfig, inputs: Dict[str, Any]) -> StageResult:
    with run_stage(stage, cfg, inputs) as sr:
        pass
    return sr


def _run_detector_stages(
    pixels: Optional[np.ndarray],
    canvas_size: CanvasSize,
    cfg: SketchConfig,
    high_precision: bool,
    shape_detector,
    text_detector,
    ingest_failed: bool,
) -> tuple:
    """Stages 2–4: detect ‖ text ‖ patterns (parallel).

    Returns (observations, text_observations, patterns, stages).
    """
    from .patterns import run_geometric_analysis, run_line_analysis, run_textual_analysis

    gate_inputs = {
        "has_image": pixels is not None,
        "ingest_failed": ingest_failed,
        "custom_text_detector": text_detector is not None,
    }
    stages: Dict[str, StageResult] = {}
    tasks: Dict[str, Any] = {}

    if gate("detect", cfg, gate_inputs)[0]:
        params = detector_params(high_precision)
        tasks["detect"] = lambda: shape_detector(pixels, params)
    else:
        stages["detect"] = _skipped_stage("detect", cfg, gate_inputs)

    if gate("text", cfg, gate_inputs)[0]:
        if text_detector is None:
            from .detect.text import detect_text

            tasks["text"] = lambda: detect_text(pixels, cfg)
        else:
            tasks["text"] = lambda: text_detector(pixels)
    else:
        stages["text"] = _skipped_stage("text", cfg, gate_inputs)

    if gate("patterns", cfg, gate_inputs)[0]:
        tasks["line"] = lambda: run_line_analysis(pixels, canvas_size, shape_detector, cfg)
        tasks["geometric"] = lambda: run_geometric_analysis(
            pixels, canvas_size, shape_detector, cfg
        )
        tasks["textual"] = lambda: run_textual_analysis(pixels, canvas_size, (), cfg)
    else:
        stages["patterns"] = _skipped_stage("patterns", cfg, gate_inputs)

    t0 = time.perf_counter()
    outcomes = run_tasks(tasks, timeout_s=cfg.detector_timeout_s, max_workers=cfg.max_workers)
    duration_ms = int((time.perf_counter() - t0) * 1000)

    observations: List[RawObservation] = []
    text_observations: List[TextObservation] = []
    patterns: List[SketchedPattern] = []

    if "detect" in outcomes:
        observations, err = outcomes["detect"]
        stages["detect"] = _task_stage(
            "detect",
            err,
            duration_ms,
            {"observations": len(observations), "high_precision": high_precision},
        )
    if "text" in outcomes:
        text_observations, err = outcomes["text"]
        stages["text"] = _task_stage(
            "text", err, duration_ms, {"fragments": len(text_observations)}
        )
    if "line" in outcomes:
        counts: Dict[str, Any] = {}
        first_error: Optional[BaseException] = None
        failed: List[str] = []
        for name in ("line", "geometric", "textual"):
            found, err = outcomes[name]
            patterns.extend(found)
            counts[name] = len(found)
            if err is not None:
                failed.append(name)
                first_error = first_error or err
        sr = _task_stage("patterns", first_error, duration_ms, counts)
        if failed:
            sr.outputs = {"failed_analyses": failed}
        stages["patterns"] = sr

    return observations, text_observations, patterns, stages


def run_pipeline(
    image,
    canvas_size: CanvasSize | None = None,
    *,
    layout_config: LayoutConfig | None = None,
    cfg: SketchConfig | None = None,
    device_class: DeviceClass = DeviceClass.stylus,
    high_precision: bool = True,
    shape_detector=None,
    text_detector=None,
) -> SketchResult:
    """Run the full pipeline on one sketch and return results.

    This is the **library-grade** entry point.  It performs no file I/O
    beyond reading *image* when it is a path; callers are responsible
    for serialisation.

    Parameters
    ----------
    image : bytes, path, PIL image or numpy array
        The sketch. Undecodable input yields an empty result, not an error.
    canvas_size : (width, height), optional
        Pixel space of the output. Defaults to the image size.
    layout_config : LayoutConfig, optional
        Defaults to :meth:`LayoutConfig.default`.
    cfg : SketchConfig, optional
        Pipeline thresholds. Defaults to ``SketchConfig()``.
    device_class : DeviceClass
        Input device; selects the normalizer's minimum size.
    high_precision : bool
        Selects the strict or lenient shape-detector preset.
    shape_detector : callable, optional
        ``(image, DetectorParams) -> list[RawObservation]``; defaults to
        :func:`sketchlayout.detect.detect_rectangles`.
    text_detector : callable, optional
        ``(image) -> list[TextObservation]``; defaults to PaddleOCR when
        installed, otherwise the text stage is skipped.

    Returns
    -------
    SketchResult
        All artefacts produced by the pipeline.
    """
    from .detect.shapes import detect_rectangles

    if layout_config is None:
        layout_config = LayoutConfig.default()
    if cfg is None:
        cfg = SketchConfig()
    if shape_detector is None:
        shape_detector = detect_rectangles

    # Stage 1: ingest
    pixels, sr_ingest = _run_ingest_stage(image, cfg)
    ingest_failed = sr_ingest.status == "failed"

    if canvas_size is None:
        if pixels is not None:
            canvas_size = (float(pixels.shape[1]), float(pixels.shape[0]))
        else:
            canvas_size = (0.0, 0.0)

    # Stages 2–4: detect ‖ text ‖ patterns (parallel)
    observations, text_observations, patterns, detector_stages = _run_detector_stages(
        pixels,
        canvas_size,
        cfg,
        high_precision,
        shape_detector,
        text_detector,
        ingest_failed,
    )

    # Stages 5–9: pure transform after the join
    res = interpret_sketch(
        observations,
        canvas_size,
        text_observations=text_observations,
        patterns=patterns,
        layout_config=layout_config,
        cfg=cfg,
        device_class=device_class,
    )
    collected = {"ingest": sr_ingest, **detector_stages, **res.stages}
    res.stages = {n: collected[n] for n in STAGE_ORDER if n in collected}
    res.fingerprint = input_fingerprint(pixels, canvas_size, layout_config, cfg)

    logger.info(
        "run_pipeline: %d components in %d groups", len(res.components), len(res.groups)
    )
    return res
