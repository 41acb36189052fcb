"""Ingest stage — sketch image decoding and canvas metadata.

Centralises image decoding so that detectors and pattern analyses all
work from the same read-only RGB pixel buffer.

Public API
----------
- :func:`decode_sketch_image` — bytes / path / PIL image → RGB ``numpy`` array
- :func:`ingest_sketch` — decode + describe, return a :class:`SketchMeta`
- :class:`SketchMeta` — image-level metadata container
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Optional, Union

import numpy as np
from PIL import Image

log = logging.getLogger(__name__)

ImageSource = Union[bytes, bytearray, str, Path, Image.Image, np.ndarray]


# ---------------------------------------------------------------------------
# Data containers
# ---------------------------------------------------------------------------


@dataclass
class SketchMeta:
    """Image-level metadata returned by :func:`ingest_sketch`."""

    width: int
    height: int
    mode: str = "RGB"
    source: str = ""
    error: Optional[str] = None

    def to_dict(self) -> dict:
        """Serialize sketch metadata to a JSON-compatible dict."""
        d: dict = {
            "width": self.width,
            "height": self.height,
            "mode": self.mode,
            "source": self.source,
        }
        if self.error:
            d["error"] = self.error
        return d


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


class IngestError(Exception):
    """Raised when a sketch image cannot be decoded."""


def _open_image(source: ImageSource) -> Image.Image:
    if isinstance(source, Image.Image):
        return source
    if isinstance(source, (bytes, bytearray)):
        if not source:
            raise IngestError("Empty image bytes")
        return Image.open(BytesIO(bytes(source)))
    path = Path(source)  # type: ignore[arg-type]
    if not path.exists():
        raise IngestError(f"File not found: {path}")
    if not path.is_file():
        raise IngestError(f"Not a file: {path}")
    if path.stat().st_size == 0:
        raise IngestError(f"Empty file: {path}")
    return Image.open(path)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def decode_sketch_image(source: ImageSource) -> np.ndarray:
    """Decode *source* into an ``(H, W, 3)`` uint8 RGB array.

    Raises
    ------
    IngestError
        When the input is empty, missing, not a decodable image, or a
        pixel buffer that is not 8-bit.
    """
    if isinstance(source, np.ndarray):
        arr = source
        if arr.size == 0:
            raise IngestError("Empty pixel buffer")
        if arr.dtype != np.uint8:
            raise IngestError(f"Unsupported pixel buffer dtype {arr.dtype}; expected uint8")
        if arr.ndim == 2:
            arr = np.stack([arr] * 3, axis=-1)
        elif arr.ndim != 3 or arr.shape[2] not in (3, 4):
            raise IngestError(f"Unsupported pixel buffer shape {arr.shape}")
        return np.ascontiguousarray(arr[:, :, :3])

    try:
        img = _open_image(source)
        img.load()
    except IngestError:
        raise
    except Exception as exc:
        raise IngestError(f"Cannot decode image: {exc}") from exc

    # Flatten transparency onto white; strokes are drawn on a clear canvas.
    if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
        rgba = img.convert("RGBA")
        background = Image.new("RGBA", rgba.size, (255, 255, 255, 255))
        img = Image.alpha_composite(background, rgba)
    if img.mode != "RGB":
        img = img.convert("RGB")
    return np.array(img, dtype=np.uint8)


def ingest_sketch(source: ImageSource) -> tuple[np.ndarray, SketchMeta]:
    """Decode a sketch and return ``(pixels, meta)``.

    Raises
    ------
    IngestError
        Propagated from :func:`decode_sketch_image`.
    """
    pixels = decode_sketch_image(source)
    height, width = pixels.shape[:2]
    label = str(source) if isinstance(source, (str, Path)) else type(source).__name__
    meta = SketchMeta(width=int(width), height=int(height), source=label)
    log.info("Ingested sketch %s: %dx%d", label, width, height)
    return pixels, meta
