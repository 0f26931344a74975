"""Dimension bounding for images before compression"""

import math
from typing import Tuple

from PIL import Image

from .log import get_logger
from .settings import DEFAULT_MAX_DIMENSION
from .utils import get_aspect_ratio, validate_max_dimension

logger = get_logger(__name__)


def calculate_downsample_size(
    width: float,
    height: float,
    max_dimension: float = DEFAULT_MAX_DIMENSION,
) -> Tuple[float, float]:
    """
    Calculate the size an image should be scaled to.

    The larger side becomes exactly max_dimension and the other side is
    scaled by the aspect ratio. Images that already fit keep their size.

    Args:
        width: Current width
        height: Current height
        max_dimension: Bound for the larger side

    Returns:
        Tuple of (target_width, target_height) as floats
    """
    if width <= max_dimension and height <= max_dimension:
        return (float(width), float(height))

    ratio = get_aspect_ratio(width, height)

    if ratio > 1:
        # Wider than tall
        return (float(max_dimension), max_dimension / ratio)
    return (max_dimension * ratio, float(max_dimension))


def _to_pixels(size: Tuple[float, float], max_dimension: float) -> Tuple[int, int]:
    """Round a float size to whole pixels, never above the bound or below 1."""
    limit = math.floor(max_dimension)
    return (
        max(1, min(limit, int(round(size[0])))),
        max(1, min(limit, int(round(size[1])))),
    )


def render_at_size(image: Image.Image, width: int, height: int) -> Image.Image:
    """
    Resample an image to exact dimensions.

    Args:
        image: PIL Image
        width: Target width
        height: Target height

    Returns:
        New resized PIL Image
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Invalid dimensions: {width}x{height}")
    return image.resize((width, height), Image.Resampling.LANCZOS)


def downsample(
    image: Image.Image,
    max_dimension: float = DEFAULT_MAX_DIMENSION,
) -> Image.Image:
    """
    Shrink an image so its larger side fits max_dimension.

    Never upscales: an image that already fits is returned as-is (same
    object). If resampling fails the original image is returned and the
    failure is only logged.

    Args:
        image: PIL Image
        max_dimension: Bound for the larger side (pixels)

    Returns:
        Downsampled PIL Image, or the input image
    """
    max_dimension = validate_max_dimension(max_dimension)
    width, height = image.size

    if width <= max_dimension and height <= max_dimension:
        return image

    target_w, target_h = _to_pixels(
        calculate_downsample_size(width, height, max_dimension), max_dimension
    )

    try:
        resized = render_at_size(image, target_w, target_h)
    except Exception as e:
        logger.warning(
            f"Downsample {width}x{height} -> {target_w}x{target_h} failed, "
            f"keeping original size: {e}"
        )
        return image

    logger.debug(f"Downsampled {width}x{height} -> {target_w}x{target_h}")
    return resized
