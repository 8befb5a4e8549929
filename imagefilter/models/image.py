from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Tuple
import numpy as np

from .color import Color
from .errors import InvalidArgumentError


@dataclass(frozen=True, eq=False)
class Image:
    """
    Simple data object: RGB(A) pixels (+ optional source path for bookkeeping).
    The pixel buffer is copied on construction and made read-only, so an Image
    never changes once produced. No codec logic outside the repository.
    """
    pixels: np.ndarray  # Shape (H, W, 3) or (H, W, 4), dtype uint8, RGB(A) order.
    path: Path | None = field(default=None)  # Source of the image.

    def __post_init__(self):
        raw = np.asarray(self.pixels)
        if raw.dtype != np.uint8 and raw.size:
            if raw.dtype.kind not in "biuf":
                raise InvalidArgumentError(f"Image pixels must be numeric, got dtype {raw.dtype}")
            if not np.isfinite(raw).all() or raw.min() < 0 or raw.max() > 255:
                raise InvalidArgumentError("Image pixel values must be in 0..255")
        pixels = np.array(raw, dtype=np.uint8)
        if pixels.ndim != 3 or pixels.shape[2] not in (3, 4):
            raise InvalidArgumentError(
                f"Image pixels must have shape (H, W, 3) or (H, W, 4), got {pixels.shape}"
            )
        if pixels.shape[0] < 1 or pixels.shape[1] < 1:
            raise InvalidArgumentError(f"Image must be at least 1x1, got {pixels.shape[1]}x{pixels.shape[0]}")
        pixels.setflags(write=False)
        object.__setattr__(self, "pixels", pixels)
        if self.path is not None:
            object.__setattr__(self, "path", Path(self.path))

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height)"""
        return self.width, self.height

    @property
    def has_alpha(self) -> bool:
        return self.pixels.shape[2] == 4

    @property
    def rgb(self) -> np.ndarray:
        """Read-only (H, W, 3) view of the color channels."""
        return self.pixels[:, :, :3]

    def get_pixel(self, x: int, y: int) -> Color:
        r, g, b = self.pixels[y, x, :3]
        return Color(int(r), int(g), int(b))

    def new_buffer(self) -> np.ndarray:
        """Writable, zeroed buffer with this image's dimensions and channel layout."""
        return np.zeros_like(self.pixels)
