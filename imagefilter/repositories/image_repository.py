from __future__ import annotations
from io import BytesIO
from pathlib import Path
from typing import Union
import logging

import cv2
import numpy as np
from PIL import Image as PILImage

from ..models.errors import InvalidArgumentError
from ..models.image import Image

logger = logging.getLogger(__name__)

# Formats Pillow cannot write with an alpha channel
_NO_ALPHA_FORMATS = {"JPEG", "JPG", "BMP"}


class ImageRepository:
    """
    Handles codec work and file I/O for Image entities.
    """

    @staticmethod
    def create_image(pixels: np.ndarray, path: Union[str, Path] = None) -> Image:
        if path is None:
            return Image(pixels)
        return Image(pixels=pixels, path=Path(path))

    @staticmethod
    def _from_pil(pil_img: PILImage.Image) -> np.ndarray:
        has_alpha = pil_img.mode in ("RGBA", "LA", "PA") or (
            pil_img.mode == "P" and "transparency" in pil_img.info
        )
        target_mode = "RGBA" if has_alpha else "RGB"
        if pil_img.mode != target_mode:
            pil_img = pil_img.convert(target_mode)
        return np.asarray(pil_img, dtype=np.uint8)

    def decode(self, data: bytes) -> Image:
        with PILImage.open(BytesIO(data)) as pil_img:
            pil_img.load()
            return Image(self._from_pil(pil_img))

    @staticmethod
    def _to_pil(image: Image, fmt: str) -> PILImage.Image:
        pixels = image.pixels
        if image.has_alpha and fmt.upper() in _NO_ALPHA_FORMATS:
            pixels = image.rgb
        return PILImage.fromarray(np.ascontiguousarray(pixels))

    def encode(self, image: Image, fmt: str = "PNG") -> bytes:
        fmt = "JPEG" if fmt.upper() == "JPG" else fmt.upper()
        buffer = BytesIO()
        self._to_pil(image, fmt).save(buffer, format=fmt)
        return buffer.getvalue()

    @staticmethod
    def load(path: Union[str, Path]) -> Image:
        path = Path(path)
        arr = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
        if arr is None:
            raise FileNotFoundError(f"Image not found or unreadable: {path}")

        if arr.dtype != np.uint8:
            # 16-bit sources: keep the high byte
            arr = (arr >> 8).astype(np.uint8) if arr.dtype == np.uint16 else arr.astype(np.uint8)

        if arr.ndim == 2:
            arr = cv2.cvtColor(arr, cv2.COLOR_GRAY2RGB)
        elif arr.shape[2] == 4:
            arr = cv2.cvtColor(arr, cv2.COLOR_BGRA2RGBA)
        else:
            arr = cv2.cvtColor(arr, cv2.COLOR_BGR2RGB)

        logger.debug(f"Loaded {path} ({arr.shape[1]}x{arr.shape[0]}, {arr.shape[2]} channels)")
        return Image(pixels=arr, path=path)

    def save(self, image: Image, path: Union[str, Path, None] = None) -> Path:
        target = Path(path) if path is not None else image.path
        if target is None:
            raise InvalidArgumentError("Image has no path and none was given")
        target.parent.mkdir(parents=True, exist_ok=True)

        fmt = PILImage.registered_extensions().get(target.suffix.lower(), "PNG")
        self._to_pil(image, fmt).save(target, format=fmt)
        logger.debug(f"Saved {target}")
        return target
