import numpy as np
import pytest

from imagefilter.models.color import Color
from imagefilter.models.image import Image

RED = Color(255, 0, 0)
GREEN = Color(0, 255, 0)
BLUE = Color(0, 0, 255)
YELLOW = Color(255, 255, 0)


def solid(width: int, height: int, color: Color, alpha: int | None = None) -> Image:
    channels = 3 if alpha is None else 4
    pixels = np.zeros((height, width, channels), dtype=np.uint8)
    pixels[:, :, :3] = color.as_tuple()
    if alpha is not None:
        pixels[:, :, 3] = alpha
    return Image(pixels)


@pytest.fixture
def corners_image() -> Image:
    """2x2: RED top-left, GREEN top-right, BLUE bottom-left, YELLOW bottom-right."""
    pixels = np.array([
        [RED.as_tuple(), GREEN.as_tuple()],
        [BLUE.as_tuple(), YELLOW.as_tuple()],
    ], dtype=np.uint8)
    return Image(pixels)


@pytest.fixture
def random_image() -> Image:
    rng = np.random.default_rng(1234)
    return Image(rng.integers(0, 256, size=(23, 17, 3), dtype=np.uint8))


@pytest.fixture
def random_rgba_image() -> Image:
    rng = np.random.default_rng(99)
    return Image(rng.integers(0, 256, size=(11, 9, 4), dtype=np.uint8))


@pytest.fixture
def gradient_image() -> Image:
    """Horizontal gray gradient, black to white."""
    pixels = np.zeros((8, 32, 3), dtype=np.uint8)
    for x in range(32):
        pixels[:, x, :] = x * 255 // 31
    return Image(pixels)
