from __future__ import annotations
from typing import Dict
import math
import numpy as np

from ..models.errors import InvalidArgumentError
from ..models.filter import Capability, Filter
from ..models.image import Image

MIN_OPTION_FACTOR = 1e-4


class Scale(Filter):
    """
    Nearest-neighbour resample by a positive factor. The only filter that
    changes image dimensions.
    """

    capability = Capability.WHOLE_IMAGE

    def __init__(self, factor: float):
        if factor <= 0:
            raise InvalidArgumentError("Scale factor must be positive")
        self.factor = float(factor)

    @classmethod
    def from_options(cls, options: Dict[str, str]) -> Scale:
        """Build from registry options; a missing `factor` means 1.0."""
        raw = options.get("factor")
        if raw is None:
            return cls(1.0)
        try:
            factor = float(raw)
        except ValueError:
            raise InvalidArgumentError(f"Invalid scale factor: {raw}") from None
        if not math.isfinite(factor):
            raise InvalidArgumentError(f"Invalid scale factor: {raw}")
        if factor < MIN_OPTION_FACTOR:
            raise InvalidArgumentError(f"Scale factor must be >= {MIN_OPTION_FACTOR}")
        return cls(factor)

    @property
    def name(self) -> str:
        return "scale"

    def output_size(self, width: int, height: int) -> tuple[int, int]:
        """(width, height) after scaling, rounded half up."""
        return math.floor(width * self.factor + 0.5), math.floor(height * self.factor + 0.5)

    def apply(self, image: Image) -> Image:
        dst_width, dst_height = self.output_size(image.width, image.height)
        if dst_width < 1 or dst_height < 1:
            raise InvalidArgumentError(
                f"Scaling {image.width}x{image.height} by {self.factor} gives an empty image"
            )

        src_x = np.minimum(image.width - 1, (np.arange(dst_width) / self.factor).astype(np.int64))
        src_y = np.minimum(image.height - 1, (np.arange(dst_height) / self.factor).astype(np.int64))
        return Image(image.pixels[src_y][:, src_x])
