"""Resize-and-compress pipeline"""

from typing import Optional

from PIL import Image

from .compression.encoders import BaseEncoder, TargetFormat
from .compression.result import EncodedArtifact
from .compression.strategy import get_strategy
from .downsample import downsample
from .log import get_logger
from .settings import CompressorSettings
from .utils import decode_image, mb_to_bytes, validate_budget

logger = get_logger(__name__)


class ImageCompressor:
    """Fits images into a size budget, optionally bounding their dimensions.

    Instances only hold settings, so one can be shared freely or created
    per call.
    """

    def __init__(
        self,
        settings: Optional[CompressorSettings] = None,
        encoder: Optional[BaseEncoder] = None,
    ):
        """
        Args:
            settings: Compressor settings (defaults if None)
            encoder: Encoder override used for every format (mostly for tests)
        """
        self.settings = settings if settings is not None else CompressorSettings()
        self.encoder = encoder

    def downsample(
        self,
        image: Image.Image,
        max_dimension: Optional[float] = None,
    ) -> Image.Image:
        """Bound the larger side of image (default: settings.max_dimension)."""
        if max_dimension is None:
            max_dimension = self.settings.max_dimension
        return downsample(image, max_dimension)

    def resize_and_compress(
        self,
        image: Image.Image,
        target_format,
        budget_mb: float,
        max_dimension: Optional[float] = None,
    ) -> Optional[EncodedArtifact]:
        """
        Downsample then compress image into budget_mb.

        Args:
            image: PIL Image
            target_format: TargetFormat (or "lossy"/"lossless"/"jpeg"/"png")
            budget_mb: Size budget in megabytes
            max_dimension: Bound for the larger side (default: settings.max_dimension)

        Returns:
            EncodedArtifact, or None if the budget cannot be met
        """
        target_format = TargetFormat.parse(target_format)
        budget_mb = validate_budget(budget_mb)
        resized = self.downsample(image, max_dimension)
        return self._compress(resized, target_format, budget_mb)

    def compress_only(
        self,
        image: Image.Image,
        target_format,
        budget_mb: float,
    ) -> Optional[EncodedArtifact]:
        """
        Compress image into budget_mb keeping its original dimensions.

        Args:
            image: PIL Image
            target_format: TargetFormat (or "lossy"/"lossless"/"jpeg"/"png")
            budget_mb: Size budget in megabytes

        Returns:
            EncodedArtifact, or None if the budget cannot be met
        """
        target_format = TargetFormat.parse(target_format)
        budget_mb = validate_budget(budget_mb)
        return self._compress(image, target_format, budget_mb)

    def encode_lossy_within_budget(
        self,
        image: Image.Image,
        budget_mb: float,
    ) -> Optional[EncodedArtifact]:
        """Quality-search a JPEG encoding of image into budget_mb."""
        return self.compress_only(image, TargetFormat.LOSSY, budget_mb)

    def encode_lossless_within_budget(
        self,
        image: Image.Image,
        budget_mb: float,
    ) -> Optional[EncodedArtifact]:
        """Encode image as PNG once; None if it exceeds budget_mb."""
        return self.compress_only(image, TargetFormat.LOSSLESS, budget_mb)

    def compress_bytes(
        self,
        data: bytes,
        target_format,
        budget_mb: float,
        max_dimension: Optional[float] = None,
        resize: bool = True,
    ) -> Optional[EncodedArtifact]:
        """
        Decode encoded image bytes and run them through the pipeline.

        Raises:
            DecodeError: If data is not a readable image
        """
        image = decode_image(data)
        if resize:
            return self.resize_and_compress(image, target_format, budget_mb, max_dimension)
        return self.compress_only(image, target_format, budget_mb)

    def _compress(
        self,
        image: Image.Image,
        target_format: TargetFormat,
        budget_mb: float,
    ) -> Optional[EncodedArtifact]:
        strategy = get_strategy(target_format, self.settings, self.encoder)
        result = strategy.compress(image, mb_to_bytes(budget_mb))

        if result is None:
            logger.info(
                f"No {target_format.format_name} result within {budget_mb:.2f} MB "
                f"for {image.width}x{image.height} image"
            )
        else:
            logger.info(result.message)
        return result


def resize_and_compress(
    image: Image.Image,
    target_format,
    budget_mb: float,
    max_dimension: Optional[float] = None,
    settings: Optional[CompressorSettings] = None,
) -> Optional[EncodedArtifact]:
    """Downsample then compress with a fresh ImageCompressor."""
    return ImageCompressor(settings).resize_and_compress(
        image, target_format, budget_mb, max_dimension
    )


def compress_only(
    image: Image.Image,
    target_format,
    budget_mb: float,
    settings: Optional[CompressorSettings] = None,
) -> Optional[EncodedArtifact]:
    """Compress at original dimensions with a fresh ImageCompressor."""
    return ImageCompressor(settings).compress_only(image, target_format, budget_mb)


def encode_lossy_within_budget(
    image: Image.Image,
    budget_mb: float,
    settings: Optional[CompressorSettings] = None,
) -> Optional[EncodedArtifact]:
    return ImageCompressor(settings).encode_lossy_within_budget(image, budget_mb)


def encode_lossless_within_budget(
    image: Image.Image,
    budget_mb: float,
    settings: Optional[CompressorSettings] = None,
) -> Optional[EncodedArtifact]:
    return ImageCompressor(settings).encode_lossless_within_budget(image, budget_mb)
