import numpy as np

from ..models.filter import Capability, Filter
from ..models.image import Image

TARGET_BRIGHTNESS = 128
_BRIGHTNESS_WEIGHTS = np.array([299, 587, 114], dtype=np.int64)


def average_brightness(image: Image) -> float:
    """Mean of (299R + 587G + 114B) / 1000 over every pixel."""
    total = int((image.rgb.astype(np.int64) @ _BRIGHTNESS_WEIGHTS).sum())
    pixel_count = image.width * image.height
    return total / pixel_count / 1000.0


class AutoBrightness(Filter):
    """
    Scales every channel so the average perceived brightness lands on 128.
    Needs the global average first, so there is no per-pixel primitive.
    """

    capability = Capability.WHOLE_IMAGE

    @property
    def name(self) -> str:
        return "autobrightness"

    def apply(self, image: Image) -> Image:
        average = average_brightness(image)
        if average == 0:
            return image

        scale = TARGET_BRIGHTNESS / average
        out = image.new_buffer()
        # float -> int cast truncates toward zero
        scaled = (image.rgb.astype(np.float64) * scale).astype(np.int64)
        out[:, :, :3] = np.clip(scaled, 0, 255)
        if image.has_alpha:
            out[:, :, 3] = image.pixels[:, :, 3]
        return Image(out)
