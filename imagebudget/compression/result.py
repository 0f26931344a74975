"""Encoded artifact and encoder options dataclasses."""

from dataclasses import dataclass
from typing import Optional, Tuple

from ..utils import bytes_to_mb


@dataclass(frozen=True)
class EncodedArtifact:
    """Encoded image bytes with details about how they were produced.

    Attributes:
        data: The encoded image bytes
        size_bytes: Length of data
        format_name: Format name (JPEG, PNG)
        file_extension: Extension for saving data (.jpg, .png)
        dimensions: Image dimensions (width, height)
        quality: Normalized quality (0-1) used, None for lossless formats
        iterations: Number of bisection encodes performed
        within_budget: True if size_bytes satisfies the requested budget
        ssim_score: Structural similarity score (0-1) if calculated
        message: Human-readable status message
    """
    data: bytes
    size_bytes: int
    format_name: str
    file_extension: str
    dimensions: Tuple[int, int]
    quality: Optional[float] = None
    iterations: int = 0
    within_budget: bool = True

    # Optional quality metric
    ssim_score: Optional[float] = None

    message: str = ""

    def __post_init__(self):
        if self.size_bytes != len(self.data):
            raise ValueError(
                f"size_bytes ({self.size_bytes}) does not match data length ({len(self.data)})"
            )

    def __len__(self) -> int:
        return self.size_bytes

    @property
    def size_mb(self) -> float:
        """Get size in megabytes."""
        return bytes_to_mb(self.size_bytes)


@dataclass(frozen=True)
class EncoderOptions:
    """Options for format-specific encoding.

    Attributes:
        quality: Normalized compression quality (0-1, 1 = best)
        chroma_subsampling: JPEG chroma mode (0=4:4:4, 1=4:2:2, 2=4:2:0)
        progressive: Enable progressive encoding
        optimize: Extra encoder pass for smaller output
    """
    quality: float = 1.0
    chroma_subsampling: int = 2
    progressive: bool = False
    optimize: bool = True

    def __post_init__(self):
        """Validate options."""
        if not 0.0 <= self.quality <= 1.0:
            raise ValueError(f"quality must be 0-1, got {self.quality}")
        if self.chroma_subsampling not in (0, 1, 2):
            raise ValueError(f"chroma_subsampling must be 0, 1, or 2")

    def with_quality(self, quality: float) -> "EncoderOptions":
        """Copy of these options at another quality."""
        return EncoderOptions(
            quality=quality,
            chroma_subsampling=self.chroma_subsampling,
            progressive=self.progressive,
            optimize=self.optimize,
        )
