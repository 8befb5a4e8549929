from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple

from .errors import InvalidArgumentError


def clamp_channel(value: int) -> int:
    """Clamp an integer channel value into [0, 255]."""
    return 0 if value < 0 else min(value, 255)


@dataclass(frozen=True)
class Color:
    """
    Value-object for one RGB pixel, channels are ints in [0, 255].
    """
    r: int
    g: int
    b: int

    def __post_init__(self):
        for channel in (self.r, self.g, self.b):
            if not 0 <= channel <= 255:
                raise InvalidArgumentError(
                    f"Color channels must be in [0, 255], got ({self.r}, {self.g}, {self.b})"
                )

    @classmethod
    def clamped(cls, r: int, g: int, b: int) -> Color:
        return cls(clamp_channel(r), clamp_channel(g), clamp_channel(b))

    def as_tuple(self) -> Tuple[int, int, int]:
        return self.r, self.g, self.b

    # ── Helpers shared by the luminance-based filters ────────────────
    def luma(self) -> int:
        """Perceived brightness floor(0.3R + 0.59G + 0.11B)."""
        return int(0.3 * self.r + 0.59 * self.g + 0.11 * self.b)


BLACK = Color(0, 0, 0)
WHITE = Color(255, 255, 255)
