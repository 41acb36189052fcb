"""Reference text detector — PaddleOCR over the sketch image.

Recognised fragments are returned in detector space (fractions of the
image, origin bottom-left), the same convention the shape detector uses.
"""

from __future__ import annotations

import logging
from typing import List, Optional

import numpy as np

from ..config import SketchConfig
from ..models import NormalizedRect, TextObservation

log = logging.getLogger(__name__)


def has_paddleocr() -> bool:
    """Return True if PaddleOCR is importable."""
    try:
        import os

        os.environ.setdefault("PADDLE_PDX_DISABLE_MODEL_SOURCE_CHECK", "True")
        import paddleocr  # noqa: F401

        return True
    except ImportError:
        return False


def _field(result, name: str):
    # PaddleOCR returns dict-like OCRResult objects in 3.x.
    if hasattr(result, "get"):
        return result.get(name)
    return getattr(result, name, None)


def parse_ocr_results(
    results,
    img_w: int,
    img_h: int,
    min_conf: float,
) -> List[TextObservation]:
    """Convert PaddleOCR ``predict`` output into :class:`TextObservation` items."""
    observations: List[TextObservation] = []
    for page_result in results:
        polys = _field(page_result, "dt_polys")
        texts = _field(page_result, "rec_texts")
        scores = _field(page_result, "rec_scores")
        if polys is None or texts is None or scores is None:
            continue

        for poly, text, conf in zip(polys, texts, scores):
            if not text or conf < min_conf:
                continue
            xs = [float(p[0]) for p in poly]
            ys = [float(p[1]) for p in poly]
            x0, x1 = max(0.0, min(xs)), min(float(img_w), max(xs))
            y0, y1 = max(0.0, min(ys)), min(float(img_h), max(ys))
            if x1 <= x0 or y1 <= y0:
                continue
            observations.append(
                TextObservation(
                    text=str(text),
                    rect=NormalizedRect(
                        x=x0 / img_w,
                        y=1.0 - y1 / img_h,
                        width=(x1 - x0) / img_w,
                        height=(y1 - y0) / img_h,
                    ),
                )
            )
    return observations


def detect_text(
    image: np.ndarray,
    cfg: Optional[SketchConfig] = None,
) -> List[TextObservation]:
    """Recognise handwritten annotations in *image*.

    Parameters
    ----------
    image : np.ndarray
        ``(H, W, 3)`` uint8 RGB pixel buffer.
    cfg : SketchConfig, optional
        Supplies the model tier and the recognition confidence floor.
    """
    from ._ocr_engine import _get_ocr

    if cfg is None:
        cfg = SketchConfig()
    if image is None or image.size == 0:
        return []

    img_h, img_w = image.shape[:2]
    ocr = _get_ocr(cfg)
    observations = parse_ocr_results(
        ocr.predict(image), img_w, img_h, cfg.ocr_min_confidence
    )
    log.info("detect_text: %d fragments", len(observations))
    return observations
