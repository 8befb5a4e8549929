import numpy as np


def luma_array(rgb: np.ndarray) -> np.ndarray:
    """
    Vectorized floor(0.3R + 0.59G + 0.11B) over a (..., 3) uint8 array.
    Same operation order as Color.luma() so both agree bit for bit.
    """
    channels = rgb.astype(np.float64)
    r, g, b = channels[..., 0], channels[..., 1], channels[..., 2]
    return (0.3 * r + 0.59 * g + 0.11 * b).astype(np.int64)


def round_half_up(values: np.ndarray) -> np.ndarray:
    """Round .5 away from zero for non-negative values (np.round is banker's)."""
    return np.floor(values + 0.5)
