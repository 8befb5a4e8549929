"""
Pixel transform contract shared by every filter.

A filter implements at most two primitives:

    transform_pixel(color)          context-free, sees one pixel
    transform_pixel_at(image, x, y) context-aware, sees the whole input

and declares which ones it has through the `context_free` / `context_aware`
slots. The generic driver tries the context-aware primitive first and falls
back to the context-free one. Filters that need a global pass or change the
image size set `capability = Capability.WHOLE_IMAGE` and override `apply`.
"""
from __future__ import annotations
from enum import Enum
from typing import ClassVar
import numpy as np

from .color import Color
from .errors import InvalidFilterStateError, UnsupportedTransformError
from .image import Image


class Capability(Enum):
    PER_PIXEL = "per_pixel"      # relies on the generic per-pixel driver
    WHOLE_IMAGE = "whole_image"  # provides its own apply()


class Filter:
    """Base class for image filters."""

    capability: ClassVar[Capability] = Capability.PER_PIXEL
    context_free: ClassVar[bool] = False
    context_aware: ClassVar[bool] = False

    @property
    def name(self) -> str:
        raise NotImplementedError

    # ── Primitives ───────────────────────────────────────────────────
    def transform_pixel(self, color: Color) -> Color:
        raise UnsupportedTransformError(f"transform_pixel(color) not implemented for {self.name}")

    def transform_pixel_at(self, image: Image, x: int, y: int) -> Color:
        raise UnsupportedTransformError(f"transform_pixel_at(image, x, y) not implemented for {self.name}")

    def attempt_transform(self, image: Image, x: int, y: int) -> Color:
        """
        Context-aware transform with fallback to the context-free one.
        Raises InvalidFilterStateError when neither primitive is usable.
        """
        if self.context_aware:
            try:
                return self.transform_pixel_at(image, x, y)
            except UnsupportedTransformError:
                pass
        if self.context_free:
            try:
                return self.transform_pixel(image.get_pixel(x, y))
            except UnsupportedTransformError:
                pass
        raise InvalidFilterStateError(
            f"Filter '{self.name}' implements neither transform_pixel nor transform_pixel_at"
        )

    # ── Row drivers ──────────────────────────────────────────────────
    def transform_rows(self, image: Image, y_start: int, y_stop: int) -> np.ndarray:
        """
        RGB output for rows [y_start, y_stop) as a (rows, W, 3) uint8 array.
        Overrides must produce exactly what the per-pixel primitives produce.
        """
        width = image.width
        out = np.empty((y_stop - y_start, width, 3), dtype=np.uint8)
        for y in range(y_start, y_stop):
            row = out[y - y_start]
            for x in range(width):
                row[x] = self.attempt_transform(image, x, y).as_tuple()
        return out

    def render_rows(self, image: Image, out: np.ndarray, y_start: int, y_stop: int) -> None:
        """Write rows [y_start, y_stop) into `out`; alpha is copied from the source."""
        if y_start >= y_stop:
            return
        out[y_start:y_stop, :, :3] = self.transform_rows(image, y_start, y_stop)
        if image.has_alpha:
            out[y_start:y_stop, :, 3] = image.pixels[y_start:y_stop, :, 3]

    def apply(self, image: Image) -> Image:
        """Single-threaded whole-image run of the per-pixel driver."""
        out = image.new_buffer()
        self.render_rows(image, out, 0, image.height)
        return Image(out)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
