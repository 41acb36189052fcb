"""Textual patterns — reserved hook for text-derived pattern signals.

Annotation text reaches components through the classifier, so this
analysis currently reports nothing.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..config import SketchConfig
from ..models import SketchedPattern, TextObservation


def detect_textual_patterns(
    image: np.ndarray,
    text_observations: Sequence[TextObservation],
    canvas_size: Tuple[float, float],
    cfg: Optional[SketchConfig] = None,
) -> List[SketchedPattern]:
    return []
