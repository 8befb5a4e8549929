from .auto_brightness import AutoBrightness
from .auto_contrast import AutoContrast, LuminanceBounds, compute_bounds, stretch
from .edge_detection import EdgeDetection
from .gaussian_blur import GaussianBlur
from .grayscale import Grayscale
from .invert import Invert
from .scale import Scale

__all__ = [
    "AutoBrightness",
    "AutoContrast",
    "EdgeDetection",
    "GaussianBlur",
    "Grayscale",
    "Invert",
    "LuminanceBounds",
    "Scale",
    "compute_bounds",
    "stretch",
]
