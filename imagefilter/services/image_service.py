from pathlib import Path
from typing import Union
import os

import numpy as np
from dotenv import load_dotenv

from ..models.image import Image
from ..repositories.image_repository import ImageRepository

# Load environment variables
load_dotenv()


class ImageService:
    """I/O helpers.  No filter logic here."""
    def __init__(self, image_repository: ImageRepository | None = None):
        self.OUTPUT_IMG_EXT = os.getenv("OUTPUT_IMG_EXT")
        self.image_repository = image_repository or ImageRepository()

    def create_image(self, pixels: np.ndarray, path: Union[str, Path] = None) -> Image:
        return self.image_repository.create_image(pixels, path)

    def load(self, path: Union[str, Path]) -> Image:
        """Load a single image from disk into an Image object."""
        return self.image_repository.load(path)

    def decode(self, data: bytes) -> Image:
        return self.image_repository.decode(data)

    def encode(self, image: Image, fmt: str = "PNG") -> bytes:
        return self.image_repository.encode(image, fmt)

    def save(self, image: Image, path: Union[str, Path, None] = None) -> Path:
        """
        Save the image to `path`, or to the image's own path when omitted.
        Returns the path written.
        """
        return self.image_repository.save(image, path)

    def output_path_for(self, input_path: Union[str, Path], filter_name: str) -> Path:
        """
        input.jpg + grayscale -> input_grayscale.jpg, next to the input.
        OUTPUT_IMG_EXT overrides the extension.
        """
        input_path = Path(input_path)
        ext = self.OUTPUT_IMG_EXT or input_path.suffix or ".jpg"
        safe_name = filter_name.replace("|", "_")
        return input_path.with_name(f"{input_path.stem}_{safe_name}{ext}")
