"""Format-specific image encoders with optional dependency support.

Provides a quality-parameterized JPEG encoder and a lossless PNG encoder.
SSIM scoring is available when scikit-image is installed.
"""

from abc import ABC, abstractmethod
from enum import Enum
from io import BytesIO
from typing import Dict, List, Optional

import numpy as np
from PIL import Image

from ..errors import EncodeError
from .result import EncoderOptions


# Optional dependency checks
SSIM_AVAILABLE = False
try:
    from skimage.metrics import structural_similarity
    SSIM_AVAILABLE = True
except ImportError:
    pass


class TargetFormat(Enum):
    """Output format family.

    LOSSY has a quality dial and is searched, LOSSLESS is encoded once.
    """
    LOSSY = "JPEG"
    LOSSLESS = "PNG"

    @property
    def format_name(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value) -> "TargetFormat":
        """Accept a member, a member name (lossy) or a format name (jpeg, png)."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().upper()
        if key in cls.__members__:
            return cls[key]
        if key == "JPG":
            key = "JPEG"
        for member in cls:
            if member.value == key:
                return member
        raise ValueError(f"Unknown target format: {value!r}")


class BaseEncoder(ABC):
    """Abstract base class for format-specific encoders."""

    format_name: str
    supports_quality: bool = True
    file_extension: str

    @abstractmethod
    def encode(
        self,
        image: Image.Image,
        options: EncoderOptions
    ) -> bytes:
        """Encode image to bytes.

        Args:
            image: PIL Image to encode
            options: Encoding options

        Returns:
            Encoded image bytes

        Raises:
            EncodeError: If no bytes could be produced
        """
        pass

    def prepare_image(self, image: Image.Image) -> Image.Image:
        """Prepare image for encoding (mode conversion, etc)."""
        return image

    def _save(self, image: Image.Image, **save_kwargs) -> bytes:
        """Prepare and save image, translating Pillow failures to EncodeError.

        Lazily loaded images decode their pixels here, so a truncated
        source fails inside the guarded region.
        """
        buffer = BytesIO()
        try:
            image = self.prepare_image(image)
            image.save(buffer, format=self.format_name, **save_kwargs)
        except (OSError, ValueError) as e:
            raise EncodeError(self.format_name, str(e)) from e

        encoded_bytes = buffer.getvalue()
        if not encoded_bytes:
            raise EncodeError(self.format_name, "encoder produced no data")
        return encoded_bytes


def to_pillow_quality(quality: float) -> int:
    """Map normalized quality (0-1) onto Pillow's 1-100 JPEG scale."""
    return max(1, min(100, int(round(quality * 100))))


class JpegEncoder(BaseEncoder):
    """JPEG encoder driven by a normalized quality."""

    format_name = "JPEG"
    supports_quality = True
    file_extension = ".jpg"

    def encode(self, image: Image.Image, options: EncoderOptions) -> bytes:
        """Encode image as JPEG."""
        return self._save(
            image,
            quality=to_pillow_quality(options.quality),
            optimize=options.optimize,
            progressive=options.progressive,
            subsampling=options.chroma_subsampling,
        )

    def prepare_image(self, image: Image.Image) -> Image.Image:
        """Convert to RGB for JPEG."""
        if image.mode == 'RGBA':
            # Composite on white background
            background = Image.new('RGB', image.size, (255, 255, 255))
            background.paste(image, mask=image.split()[3])
            return background
        elif image.mode in ('RGB', 'L'):
            return image
        return image.convert('RGB')


class PngEncoder(BaseEncoder):
    """PNG encoder (lossless, no quality setting)."""

    format_name = "PNG"
    supports_quality = False
    file_extension = ".png"

    def encode(self, image: Image.Image, options: EncoderOptions) -> bytes:
        """Encode image as PNG."""
        return self._save(image, optimize=options.optimize)

    def prepare_image(self, image: Image.Image) -> Image.Image:
        """Convert modes PNG cannot store."""
        if image.mode in ('CMYK', 'YCbCr', 'LAB', 'HSV'):
            return image.convert('RGB')
        return image


# Encoder registry
_ENCODERS: Dict[str, BaseEncoder] = {
    'JPEG': JpegEncoder(),
    'PNG': PngEncoder(),
}


def get_encoder(format_name: str) -> Optional[BaseEncoder]:
    """Get encoder for format.

    Args:
        format_name: Format name (JPEG, PNG) or a TargetFormat

    Returns:
        Encoder instance or None if format not supported
    """
    if isinstance(format_name, TargetFormat):
        format_name = format_name.format_name
    return _ENCODERS.get(format_name.upper())


def get_available_formats() -> List[str]:
    """Get list of available format names."""
    return list(_ENCODERS.keys())


def calculate_ssim_inmemory(
    original: Image.Image,
    compressed: Image.Image
) -> Optional[float]:
    """Calculate SSIM between two images in memory.

    Args:
        original: Original PIL Image
        compressed: Compressed PIL Image

    Returns:
        SSIM score (0.0 to 1.0) or None if scikit-image unavailable
    """
    if not SSIM_AVAILABLE:
        return None

    if original.size != compressed.size:
        compressed = compressed.resize(original.size, Image.Resampling.LANCZOS)

    if original.mode != compressed.mode or original.mode not in ('RGB', 'L'):
        original = original.convert('RGB')
        compressed = compressed.convert('RGB')

    orig_array = np.array(original)
    comp_array = np.array(compressed)

    if orig_array.ndim == 2:
        return float(structural_similarity(orig_array, comp_array, data_range=255))
    return float(structural_similarity(
        orig_array,
        comp_array,
        data_range=255,
        channel_axis=-1
    ))
