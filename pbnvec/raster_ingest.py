"""Raster image ingestion into a color-addressable bitmap."""
from pathlib import Path
from typing import Union
import numpy as np
from PIL import Image
from PIL import ImageOps

from pbnvec.types import Color, PreconditionError, VectorizationError


class Bitmap:
    """
    Read-only RGB pixel grid addressed by ``(x, y)``.

    Pixels are stored as an ``(height, width, 3)`` uint8 array; ``color_at``
    hands out ``Color`` values so equal pixels compare equal.
    """

    def __init__(self, pixels: np.ndarray, original_path: str = ""):
        if pixels.ndim != 3 or pixels.shape[2] != 3:
            raise VectorizationError(f"Expected (H, W, 3) pixel array, got shape {pixels.shape}")
        self.pixels = np.array(pixels, dtype=np.uint8)
        self.pixels.setflags(write=False)
        self.original_path = original_path

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    def color_at(self, x: int, y: int) -> Color:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise PreconditionError(
                f"Pixel ({x}, {y}) outside {self.width}x{self.height} bitmap"
            )
        red, green, blue = self.pixels[y, x]
        return Color(int(red), int(green), int(blue))

    def unique_colors(self) -> int:
        return len(np.unique(self.pixels.reshape(-1, 3), axis=0))

    def __repr__(self) -> str:
        return f"Bitmap({self.width}x{self.height})"


def ingest(path: Union[str, Path]) -> Bitmap:
    """
    Ingest a raster image file.

    Args:
        path: Path to image file

    Returns:
        Bitmap of the image in 8-bit sRGB

    Raises:
        FileNotFoundError: If file doesn't exist
        VectorizationError: If file cannot be loaded
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")

    if not path.is_file():
        raise VectorizationError(f"Path is not a file: {path}")

    try:
        with Image.open(path) as img:
            # Apply EXIF orientation transformation to handle rotation
            img = ImageOps.exif_transpose(img)

            if img.mode == 'RGBA':
                # Composite on white background
                background = Image.new('RGB', img.size, (255, 255, 255))
                background.paste(img, mask=img.split()[3])
                img = background
            elif img.mode != 'RGB':
                img = img.convert('RGB')

            return Bitmap(np.array(img), original_path=str(path))

    except (IOError, OSError) as e:
        raise VectorizationError(f"Failed to load image {path}: {e}")


def ingest_from_array(image: np.ndarray, path: str = "") -> Bitmap:
    """
    Create a Bitmap from a numpy array.

    Args:
        image: Image array (H, W), (H, W, 3) or (H, W, 4); float arrays in
            [0, 1] are scaled to 8 bits
        path: Optional path for reference

    Returns:
        Bitmap
    """
    image = np.asarray(image)
    if image.ndim == 2:
        # Grayscale - convert to RGB
        image = np.stack([image] * 3, axis=-1)

    if image.ndim != 3:
        raise VectorizationError(f"Expected 3D array, got {image.ndim}D")

    is_unit_float = np.issubdtype(image.dtype, np.floating) and image.size and image.max() <= 1.0
    image = image.astype(np.float64)
    if is_unit_float:
        image = image * 255.0

    if image.shape[2] == 4:
        # RGBA - composite on white
        alpha = image[..., 3:4] / 255.0
        image = image[..., :3] * alpha + 255.0 * (1 - alpha)
    elif image.shape[2] != 3:
        raise VectorizationError(f"Expected 3 or 4 channels, got {image.shape[2]}")

    return Bitmap(np.round(image).astype(np.uint8), original_path=path)
