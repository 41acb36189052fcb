"""Shared PaddleOCR singleton used by the text detector.

The engine is cached by model tier so that changing
``ocr_model_tier`` in :class:`~sketchlayout.config.SketchConfig`
transparently returns a matching PaddleOCR instance.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..config import SketchConfig

# Model-name lookup by tier.
_MODEL_TIERS: dict[str, tuple[str, str]] = {
    "mobile": ("PP-OCRv5_mobile_det", "en_PP-OCRv5_mobile_rec"),
    "server": ("PP-OCRv5_server_det", "en_PP-OCRv5_server_rec"),
}

# Cache: config-key → PaddleOCR instance.
_ocr_cache: dict[tuple, object] = {}


def _engine_key(cfg: "SketchConfig | None") -> tuple:
    if cfg is None:
        return ("mobile",)
    return (cfg.ocr_model_tier,)


def _get_ocr(cfg: "SketchConfig | None" = None):
    """Return a lazily-initialised PaddleOCR recogniser.

    Sketches are photographed or exported upright, so document
    orientation and unwarping models are never loaded.
    """
    key = _engine_key(cfg)
    if key not in _ocr_cache:
        import os

        os.environ.setdefault("PADDLE_PDX_DISABLE_MODEL_SOURCE_CHECK", "True")

        from paddleocr import PaddleOCR

        tier = key[0] if key[0] in _MODEL_TIERS else "mobile"
        det_model, rec_model = _MODEL_TIERS[tier]

        _ocr_cache[key] = PaddleOCR(
            text_detection_model_name=det_model,
            text_recognition_model_name=rec_model,
            use_doc_orientation_classify=False,
            use_doc_unwarping=False,
            use_textline_orientation=False,
        )
    return _ocr_cache[key]
