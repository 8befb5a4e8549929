from __future__ import annotations
from dataclasses import dataclass
import numpy as np

from ..models.color import Color, clamp_channel
from ..models.errors import InvalidArgumentError
from ..models.filter import Capability, Filter
from ..models.image import Image
from .luminance import luma_array, round_half_up


@dataclass(frozen=True)
class LuminanceBounds:
    """Global min/max luma of an image (0..255)."""
    minimum: int = 0
    maximum: int = 255

    def __post_init__(self):
        if not 0 <= self.minimum <= self.maximum <= 255:
            raise InvalidArgumentError(
                f"Invalid luminance bounds ({self.minimum}, {self.maximum})"
            )

    @property
    def is_flat(self) -> bool:
        return self.minimum == self.maximum


def compute_bounds(image: Image) -> LuminanceBounds:
    """Statistics pass: min and max of floor(0.3R + 0.59G + 0.11B)."""
    luma = luma_array(image.rgb)
    return LuminanceBounds(int(luma.min()), int(luma.max()))


def stretch_value(value: int, bounds: LuminanceBounds) -> int:
    if bounds.is_flat:
        return value
    stretched = int(np.floor((value - bounds.minimum) * 255.0 / (bounds.maximum - bounds.minimum) + 0.5))
    return clamp_channel(stretched)


def stretch(color: Color, bounds: LuminanceBounds) -> Color:
    """
    Mapping pass. Every channel is stretched with the *luminance* bounds,
    not per-channel bounds, so saturated colors may shift hue.
    """
    return Color(
        stretch_value(color.r, bounds),
        stretch_value(color.g, bounds),
        stretch_value(color.b, bounds),
    )


def stretch_array(rgb: np.ndarray, bounds: LuminanceBounds) -> np.ndarray:
    if bounds.is_flat:
        return rgb.copy()
    span = bounds.maximum - bounds.minimum
    stretched = round_half_up((rgb.astype(np.float64) - bounds.minimum) * 255.0 / span)
    return np.clip(stretched, 0, 255).astype(np.uint8)


class AutoContrast(Filter):
    """
    Two-phase contrast stretch: compute_bounds() over the whole image, then
    a stateless per-pixel stretch(). apply() keeps its bounds local, so one
    instance can serve concurrent calls.

    The per-pixel primitive uses the bounds given at construction
    (default 0..255, which maps every channel to itself).
    """

    capability = Capability.WHOLE_IMAGE
    context_free = True

    def __init__(self, bounds: LuminanceBounds | None = None):
        self.bounds = bounds or LuminanceBounds()

    @property
    def name(self) -> str:
        return "autocontrast"

    def apply(self, image: Image) -> Image:
        bounds = compute_bounds(image)
        if bounds.is_flat:
            return image
        out = image.new_buffer()
        out[:, :, :3] = stretch_array(image.rgb, bounds)
        if image.has_alpha:
            out[:, :, 3] = image.pixels[:, :, 3]
        return Image(out)

    def transform_pixel(self, color: Color) -> Color:
        return stretch(color, self.bounds)

    def transform_rows(self, image: Image, y_start: int, y_stop: int) -> np.ndarray:
        return stretch_array(image.rgb[y_start:y_stop], self.bounds)
