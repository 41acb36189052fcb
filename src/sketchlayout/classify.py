"""Component classifier — one typed, labeled component per rectangle.

Type precedence, highest first:

1. a pattern signal whose associated rectangle matches the rectangle
2. keyword hints in a nearby annotation (``"btn"``, ``"photo"`` …), or a
   text-bearing type when the annotated shape is otherwise ambiguous
3. geometric fallback on proportions relative to the canvas
4. ``container``

An annotation, when one applies, always becomes the label. Otherwise the
label is ``"<Display Name> <n>"`` with *n* counting components of that
type in reading order.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .config import SketchConfig
from .models import (
    Annotation,
    ComponentType,
    DetectedComponent,
    Rect,
    SketchedPattern,
    UIComponentType,
)
from .patterns import best_pattern_for

logger = logging.getLogger("sketchlayout.classify")

CanvasSize = Tuple[float, float]

# Ordered: the first keyword found in the annotation decides the type.
KEYWORD_HINTS: List[Tuple[Tuple[str, ...], UIComponentType]] = [
    (("img", "photo", "avatar"), UIComponentType.image),
    (("icon",), UIComponentType.icon),
    (("btn", "button"), UIComponentType.button),
    (("nav",), UIComponentType.navbar),
    (("input", "field", "form"), UIComponentType.form_control),
    (("card",), UIComponentType.media_object),
    (("list",), UIComponentType.list_group),
    (("tab",), UIComponentType.tab),
    (("badge",), UIComponentType.badge),
    (("progress",), UIComponentType.progress_bar),
    (("dropdown",), UIComponentType.dropdown),
    (("table",), UIComponentType.table),
]

# Annotated shapes at least this tall (fraction of canvas) read as text areas.
_TEXTAREA_MIN_HEIGHT = 0.15
# Unannotated shapes thinner than this (fraction of canvas) read as labels.
_LABEL_MAX_HEIGHT = 0.1


def keyword_hint(text: str) -> Optional[UIComponentType]:
    """Map annotation text to a component type by keyword, if any."""
    lowered = text.lower()
    for keywords, ui_type in KEYWORD_HINTS:
        if any(k in lowered for k in keywords):
            return ui_type
    return None


def geometric_type(rect: Rect, canvas_size: CanvasSize) -> Optional[UIComponentType]:
    """Guess a type from proportions alone; None when the shape is ambiguous."""
    canvas_w, canvas_h = canvas_size
    aspect = rect.width() / max(rect.height(), 1.0)
    rel_w = rect.width() / canvas_w
    rel_h = rect.height() / canvas_h

    if rel_w > 0.8 and rel_h < 0.15:
        return UIComponentType.navbar
    if aspect > 3 and rel_h < 0.1:
        return UIComponentType.button_group
    if aspect > 1.5 and rel_h < 0.2:
        return UIComponentType.button
    if aspect < 0.7 and rel_h > 0.2:
        return UIComponentType.form_control
    if rel_w > 0.3 and rel_h > 0.3:
        return UIComponentType.image
    if rel_h < _LABEL_MAX_HEIGHT:
        return UIComponentType.label
    return None


def match_annotation(
    rect: Rect,
    annotations: Sequence[Annotation],
    cfg: SketchConfig,
) -> Optional[Annotation]:
    """Pick the annotation that belongs to *rect*.

    Annotations mostly inside the rectangle (covered fraction at least
    ``cfg.annotation_overlap``) win over ones merely touching or nearby;
    within each tier the closest, then the earliest, wins. Annotations
    farther than ``cfg.annotation_max_distance`` never match.
    """
    best: Optional[Tuple[Tuple[int, float, float, int], Annotation]] = None
    for idx, ann in enumerate(annotations):
        distance = rect.edge_distance(ann.position)
        if distance >= cfg.annotation_max_distance:
            continue
        ann_area = ann.position.area()
        covered = rect.intersection_area(ann.position) / ann_area if ann_area > 0 else 0.0
        tier = 0 if covered >= cfg.annotation_overlap else 1
        key = (tier, distance, -covered, idx)
        if best is None or key < best[0]:
            best = (key, ann)
    return best[1] if best is not None else None


def classify_rect(
    rect: Rect,
    canvas_size: CanvasSize,
    patterns: Sequence[SketchedPattern] = (),
    annotations: Sequence[Annotation] = (),
    alignment_tolerance: float = 20.0,
    cfg: Optional[SketchConfig] = None,
) -> Tuple[ComponentType, Optional[str]]:
    """Return ``(type, annotation_text)`` for a single rectangle."""
    if cfg is None:
        cfg = SketchConfig()
    annotation = match_annotation(rect, annotations, cfg)
    text = annotation.text if annotation is not None else None

    pattern = best_pattern_for(rect, patterns, alignment_tolerance)
    if pattern is not None:
        return ComponentType.pattern(pattern.type), text

    canvas_h = canvas_size[1]
    if text is not None:
        hinted = keyword_hint(text)
        if hinted is not None:
            return ComponentType.ui(hinted), text
        guessed = geometric_type(rect, canvas_size)
        if guessed is not None and guessed != UIComponentType.label:
            return ComponentType.ui(guessed), text
        if rect.height() / canvas_h >= _TEXTAREA_MIN_HEIGHT:
            return ComponentType.ui(UIComponentType.textarea), text
        return ComponentType.ui(UIComponentType.label), text

    guessed = geometric_type(rect, canvas_size)
    if guessed is not None:
        return ComponentType.ui(guessed), None
    return ComponentType.ui(UIComponentType.container), None


def reading_order(rects: Iterable[Rect]) -> List[Rect]:
    """Sort rectangles top-to-bottom, then left-to-right."""
    return sorted(rects, key=lambda r: (r.y0, r.x0, r.y1, r.x1))


def classify_components(
    rects: Sequence[Rect],
    canvas_size: CanvasSize,
    patterns: Sequence[SketchedPattern] = (),
    annotations: Sequence[Annotation] = (),
    alignment_tolerance: float = 20.0,
    cfg: Optional[SketchConfig] = None,
) -> List[DetectedComponent]:
    """Classify and label deduplicated rectangles.

    Rectangles are processed in reading order; ids are ``component-<n>``
    in that order. Identical input always yields identical output.
    """
    if cfg is None:
        cfg = SketchConfig()
    canvas_w, canvas_h = canvas_size
    if canvas_w <= 0 or canvas_h <= 0:
        return []

    counters: Dict[ComponentType, int] = {}
    components: List[DetectedComponent] = []
    for index, rect in enumerate(reading_order(rects), start=1):
        ctype, text = classify_rect(
            rect, canvas_size, patterns, annotations, alignment_tolerance, cfg
        )
        counters[ctype] = counters.get(ctype, 0) + 1
        label = text if text is not None else f"{ctype.display_name} {counters[ctype]}"
        components.append(
            DetectedComponent(id=f"component-{index}", rect=rect, type=ctype, label=label)
        )
        logger.debug("component-%d: %s %r at %s", index, ctype, label, rect.bbox())

    logger.info("Classified %d components", len(components))
    return components
