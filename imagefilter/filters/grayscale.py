import numpy as np

from ..models.color import Color
from ..models.filter import Filter
from ..models.image import Image
from .luminance import luma_array


class Grayscale(Filter):
    """(r, g, b) -> (luma, luma, luma) with Rec. 601-style weights."""

    context_free = True

    @property
    def name(self) -> str:
        return "grayscale"

    def transform_pixel(self, color: Color) -> Color:
        gray = color.luma()
        return Color.clamped(gray, gray, gray)

    def transform_rows(self, image: Image, y_start: int, y_stop: int) -> np.ndarray:
        gray = np.clip(luma_array(image.rgb[y_start:y_stop]), 0, 255).astype(np.uint8)
        return np.repeat(gray[:, :, None], 3, axis=2)
