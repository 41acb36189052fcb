"""Shared test fixtures for sketchlayout."""

import cv2
import numpy as np
import pytest

from sketchlayout.config import LayoutConfig, SketchConfig
from sketchlayout.models import (
    ComponentType,
    DetectedComponent,
    NormalizedRect,
    PatternType,
    RawObservation,
    Rect,
    TextObservation,
    UIComponentType,
)
from sketchlayout.normalize import to_normalized_rect

# ── Helpers ────────────────────────────────────────────────────────────


def make_rect(x0: float, y0: float, x1: float, y1: float) -> Rect:
    """Create a canvas-space Rect."""
    return Rect(float(x0), float(y0), float(x1), float(y1))


_component_ids = iter(range(1, 1_000_000))


def make_component(
    x0: float,
    y0: float,
    x1: float,
    y1: float,
    kind=UIComponentType.button,
    id: str | None = None,
    label: str | None = None,
) -> DetectedComponent:
    """Create a DetectedComponent with sane defaults.

    *kind* may be a UIComponentType or a PatternType.
    """
    if isinstance(kind, PatternType):
        ctype = ComponentType.pattern(kind)
    else:
        ctype = ComponentType.ui(kind)
    if id is None:
        id = f"c{next(_component_ids)}"
    return DetectedComponent(
        id=id,
        rect=make_rect(x0, y0, x1, y1),
        type=ctype,
        label=label if label is not None else id,
    )


def make_observation(
    x0: float,
    y0: float,
    x1: float,
    y1: float,
    canvas=(400.0, 400.0),
    confidence: float = 1.0,
) -> RawObservation:
    """Detector observation for a canvas-space rectangle."""
    norm = to_normalized_rect(make_rect(x0, y0, x1, y1), canvas[0], canvas[1])
    return RawObservation(rect=norm, confidence=confidence)


def make_text(
    text: str,
    x0: float,
    y0: float,
    x1: float,
    y1: float,
    canvas=(400.0, 400.0),
) -> TextObservation:
    """Text observation for a canvas-space rectangle."""
    return TextObservation(
        text=text, rect=to_normalized_rect(make_rect(x0, y0, x1, y1), canvas[0], canvas[1])
    )


def blank_sketch(width: int = 400, height: int = 400) -> np.ndarray:
    """White RGB canvas."""
    return np.full((height, width, 3), 255, dtype=np.uint8)


def draw_box(img: np.ndarray, x0: int, y0: int, x1: int, y1: int, thickness: int = 3) -> None:
    """Draw a black rectangle outline in place."""
    cv2.rectangle(img, (x0, y0), (x1, y1), (0, 0, 0), thickness)


def draw_line(img: np.ndarray, x0: int, y0: int, x1: int, y1: int, thickness: int = 3) -> None:
    """Draw a black stroke in place."""
    cv2.line(img, (x0, y0), (x1, y1), (0, 0, 0), thickness)


def fake_shape_detector(observations):
    """Shape detector stub returning *observations* for any image/params."""

    def _detect(image, params):
        return list(observations)

    return _detect


# ── Fixtures ───────────────────────────────────────────────────────────


@pytest.fixture
def default_cfg() -> SketchConfig:
    """Return a default SketchConfig."""
    return SketchConfig()


@pytest.fixture
def layout_cfg() -> LayoutConfig:
    """Return the default LayoutConfig."""
    return LayoutConfig.default()


@pytest.fixture
def canvas() -> tuple:
    """A 400×400 canvas."""
    return (400.0, 400.0)


@pytest.fixture
def button_row() -> list[DetectedComponent]:
    """Three equal buttons on one row, mid-canvas, 20 px apart.

    Layout (x):  [40..120] [140..220] [240..320], all y 190..220
    """
    return [
        make_component(40, 190, 120, 220, UIComponentType.button, id="b1"),
        make_component(140, 190, 220, 220, UIComponentType.button, id="b2"),
        make_component(240, 190, 320, 220, UIComponentType.button, id="b3"),
    ]


@pytest.fixture
def unit_rect() -> NormalizedRect:
    """Detector-space rect covering the centre quarter of the image."""
    return NormalizedRect(x=0.25, y=0.25, width=0.5, height=0.5)
