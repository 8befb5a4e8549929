import numpy as np

from ..models.color import Color
from ..models.filter import Filter
from ..models.image import Image


class Invert(Filter):
    context_free = True

    @property
    def name(self) -> str:
        return "invert"

    def transform_pixel(self, color: Color) -> Color:
        return Color(255 - color.r, 255 - color.g, 255 - color.b)

    def transform_rows(self, image: Image, y_start: int, y_stop: int) -> np.ndarray:
        return 255 - image.rgb[y_start:y_stop]
