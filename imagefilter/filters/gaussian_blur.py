import math
import numpy as np

from ..models.color import Color, clamp_channel
from ..models.filter import Filter
from ..models.image import Image
from .luminance import round_half_up

KERNEL_SIZE = 5
SIGMA = 1.0


def create_gaussian_kernel(size: int = KERNEL_SIZE, sigma: float = SIGMA) -> np.ndarray:
    """
    Sample the 2-D Gaussian density at integer offsets and L1-normalize,
    so kernel.sum() == 1 and flat regions keep their value.
    """
    half = size // 2
    sigma22 = 2.0 * sigma * sigma
    offsets = np.arange(-half, half + 1, dtype=np.float64)
    yy, xx = np.meshgrid(offsets, offsets, indexing="ij")
    kernel = np.exp(-(xx ** 2 + yy ** 2) / sigma22) / (math.pi * sigma22)
    return kernel / kernel.sum()


class GaussianBlur(Filter):
    """5x5 Gaussian blur, sigma 1.0, edge-clamped sampling."""

    context_aware = True

    def __init__(self):
        self.kernel = create_gaussian_kernel()
        self.radius = self.kernel.shape[0] // 2
        self._weights = self.kernel.tolist()

    @property
    def name(self) -> str:
        return "gaussianblur"

    def transform_pixel_at(self, image: Image, x: int, y: int) -> Color:
        width, height = image.width, image.height
        pixels = image.pixels
        radius = self.radius

        red = green = blue = 0.0
        for dy in range(-radius, radius + 1):
            py = min(height - 1, max(0, y + dy))
            weights = self._weights[dy + radius]
            for dx in range(-radius, radius + 1):
                px = min(width - 1, max(0, x + dx))
                weight = weights[dx + radius]
                r, g, b = pixels[py, px, :3]
                red += int(r) * weight
                green += int(g) * weight
                blue += int(b) * weight

        return Color(
            clamp_channel(math.floor(red + 0.5)),
            clamp_channel(math.floor(green + 0.5)),
            clamp_channel(math.floor(blue + 0.5)),
        )

    def transform_rows(self, image: Image, y_start: int, y_stop: int) -> np.ndarray:
        # Accumulates in the same (dy, dx) order as transform_pixel_at
        radius = self.radius
        rows = np.clip(np.arange(y_start - radius, y_stop + radius), 0, image.height - 1)
        cols = np.clip(np.arange(-radius, image.width + radius), 0, image.width - 1)
        window = image.rgb[rows][:, cols].astype(np.float64)

        n_rows, width = y_stop - y_start, image.width
        acc = np.zeros((n_rows, width, 3), dtype=np.float64)
        for ky in range(2 * radius + 1):
            weights = self._weights[ky]
            for kx in range(2 * radius + 1):
                acc += window[ky:ky + n_rows, kx:kx + width] * weights[kx]
        return np.clip(round_half_up(acc), 0, 255).astype(np.uint8)
