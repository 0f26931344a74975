"""Utility functions for decoding images and size conversions"""

import math
from io import BytesIO

from PIL import Image, UnidentifiedImageError

from .errors import DecodeError

BYTES_PER_MB = 1024 * 1024


def mb_to_bytes(size_mb: float) -> int:
    """
    Convert a megabyte budget to a whole number of bytes.

    Args:
        size_mb: Size in megabytes (1 MB = 1024 * 1024 bytes)

    Returns:
        Size in bytes, rounded down
    """
    return int(size_mb * BYTES_PER_MB)


def bytes_to_mb(size_bytes: int) -> float:
    """Convert a byte count to megabytes."""
    return size_bytes / BYTES_PER_MB


def validate_budget(budget_mb: float) -> float:
    """
    Check that a size budget is usable.

    Raises:
        ValueError: If budget is not a positive finite number
    """
    try:
        budget = float(budget_mb)
    except (TypeError, ValueError):
        raise ValueError(f"budget_mb must be a number, got {budget_mb!r}")
    if not math.isfinite(budget) or budget <= 0:
        raise ValueError(f"budget_mb must be > 0, got {budget_mb}")
    return budget


def validate_max_dimension(max_dimension: float) -> float:
    """
    Check that a maximum dimension bound is usable.

    Raises:
        ValueError: If max_dimension is not a positive finite number
    """
    try:
        bound = float(max_dimension)
    except (TypeError, ValueError):
        raise ValueError(f"max_dimension must be a number, got {max_dimension!r}")
    if not math.isfinite(bound) or bound <= 0:
        raise ValueError(f"max_dimension must be > 0, got {max_dimension}")
    return bound


def get_aspect_ratio(width: float, height: float) -> float:
    """
    Calculate aspect ratio.

    Args:
        width: Image width
        height: Image height

    Returns:
        Aspect ratio (width/height)
    """
    if height == 0:
        return 1.0
    return width / height


def decode_image(data: bytes) -> Image.Image:
    """
    Decode encoded image bytes into a fully loaded PIL Image.

    Args:
        data: Encoded image (JPEG, PNG, WebP...)

    Returns:
        Decoded PIL Image

    Raises:
        DecodeError: If the bytes are not a readable image
    """
    if not data:
        raise DecodeError("No image data")

    try:
        image = Image.open(BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise DecodeError(f"Could not decode image: {e}") from e

    if image.width <= 0 or image.height <= 0:
        raise DecodeError(f"Invalid image dimensions: {image.width}x{image.height}")
    return image


def get_image_info(image: Image.Image) -> dict:
    """
    Get image information.

    Args:
        image: PIL Image

    Returns:
        Dictionary with image info (width, height, mode, format)
    """
    return {
        'width': image.width,
        'height': image.height,
        'mode': image.mode,
        'format': image.format,
        'aspect_ratio': get_aspect_ratio(image.width, image.height),
    }

