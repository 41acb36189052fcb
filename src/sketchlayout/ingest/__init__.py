"""Ingest stage — sketch image decoding.

Public API
----------
- :func:`decode_sketch_image` — decode bytes / path / PIL image to RGB pixels
- :func:`ingest_sketch` — decode and describe, return ``(pixels, SketchMeta)``
- :class:`SketchMeta` — image-level metadata container
- :class:`IngestError` — raised on undecodable input
"""

from .ingest import IngestError, SketchMeta, decode_sketch_image, ingest_sketch

__all__ = [
    "IngestError",
    "SketchMeta",
    "decode_sketch_image",
    "ingest_sketch",
]
