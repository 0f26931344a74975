"""Compression engine: bisection over encoder quality to meet a byte budget."""

import time
from enum import Enum
from io import BytesIO
from typing import Optional

from PIL import Image

from ..errors import EncodeError
from ..log import get_logger
from ..utils import bytes_to_mb
from .encoders import BaseEncoder, calculate_ssim_inmemory
from .result import EncodedArtifact, EncoderOptions

logger = get_logger(__name__)


# Constants
MAX_QUALITY = 1.0
MIN_QUALITY = 0.1  # Search stops once the upper bound drops to this floor
SEARCH_TOLERANCE = 0.05  # Search stops once the quality interval is this narrow


class OverBudgetPolicy(Enum):
    """What a lossy search returns when no tried quality fits the budget.

    BEST_EFFORT: the max-quality encoding, flagged as over budget
    STRICT: nothing (None)
    SMALLEST: the smallest encoding attempted, flagged as over budget
    """
    BEST_EFFORT = "best_effort"
    STRICT = "strict"
    SMALLEST = "smallest"


class CompressionEngine:
    """Encodes one image with one encoder against a byte budget.

    Holds only its encoder and options; every call starts from scratch.
    """

    def __init__(
        self,
        encoder: BaseEncoder,
        options: Optional[EncoderOptions] = None,
        min_quality: float = MIN_QUALITY,
        tolerance: float = SEARCH_TOLERANCE,
        calculate_ssim: bool = False,
    ):
        """Initialize engine with specific encoder.

        Args:
            encoder: Format-specific encoder to use
            options: Base encoding options (quality is overridden per attempt)
            min_quality: Quality floor for the search
            tolerance: Interval width at which the search stops
            calculate_ssim: Attach an SSIM score to returned artifacts
        """
        self.encoder = encoder
        self.options = options if options is not None else EncoderOptions()
        self.min_quality = min_quality
        self.tolerance = tolerance
        self.calculate_ssim = calculate_ssim

    def encode_at(self, image: Image.Image, quality: float) -> bytes:
        """Encode image at a normalized quality.

        Raises:
            EncodeError: If the encoder produced nothing
        """
        return self.encoder.encode(image, self.options.with_quality(quality))

    def compress_to_target(
        self,
        image: Image.Image,
        target_bytes: int,
        policy: OverBudgetPolicy = OverBudgetPolicy.BEST_EFFORT,
    ) -> Optional[EncodedArtifact]:
        """Find the highest quality whose encoding fits target_bytes.

        Encodes at max quality first and returns that immediately when it
        fits. Otherwise bisects the quality interval [0, 1] until it is
        narrower than the tolerance or its upper bound reaches the quality
        floor. Assumes encoded size never decreases as quality rises.

        Args:
            image: PIL Image to compress
            target_bytes: Budget in bytes
            policy: Result to return when no tried quality fits

        Returns:
            EncodedArtifact, or None if nothing could be encoded (or nothing
            fit under the STRICT policy)
        """
        start_time = time.time()

        top_bytes = None
        try:
            top_bytes = self.encode_at(image, MAX_QUALITY)
        except EncodeError as e:
            logger.warning(f"Max quality encode failed, searching lower qualities: {e}")

        if top_bytes is not None and len(top_bytes) <= target_bytes:
            logger.debug(
                f"{self.encoder.format_name} at max quality already fits: "
                f"{len(top_bytes)} <= {target_bytes} bytes"
            )
            return self._build_artifact(
                image, top_bytes, MAX_QUALITY, 0, True, target_bytes, start_time
            )

        low = 0.0
        high = MAX_QUALITY

        # Best-known-good starts at max quality, before it is known to fit
        best_bytes = top_bytes
        best_quality = MAX_QUALITY
        found = False

        smallest_bytes = top_bytes
        smallest_quality = MAX_QUALITY
        track_smallest = policy is OverBudgetPolicy.SMALLEST

        iterations = 0

        while (high - low) > self.tolerance and high > self.min_quality:
            mid = (low + high) / 2

            try:
                encoded = self.encode_at(image, mid)
            except EncodeError as e:
                logger.warning(f"Encode at quality {mid:.4f} failed, stopping search: {e}")
                break

            iterations += 1
            size = len(encoded)
            logger.debug(
                f"Search step {iterations}: quality={mid:.4f} size={size} "
                f"target={target_bytes} interval=[{low:.4f}, {high:.4f}]"
            )

            if size > target_bytes:
                # Still too large, lower the ceiling
                high = mid
                if track_smallest and (smallest_bytes is None or size < len(smallest_bytes)):
                    smallest_bytes = encoded
                    smallest_quality = mid
            else:
                best_bytes = encoded
                best_quality = mid
                found = True
                low = mid

            del encoded

        if found:
            return self._build_artifact(
                image, best_bytes, best_quality, iterations, True, target_bytes, start_time
            )

        logger.warning(
            f"No quality down to {high:.4f} fits {bytes_to_mb(target_bytes):.2f} MB "
            f"({policy.value} policy)"
        )

        if policy is OverBudgetPolicy.STRICT:
            return None
        if policy is OverBudgetPolicy.SMALLEST:
            if smallest_bytes is None:
                return None
            return self._build_artifact(
                image, smallest_bytes, smallest_quality, iterations, False,
                target_bytes, start_time
            )
        if best_bytes is None:
            return None
        return self._build_artifact(
            image, best_bytes, best_quality, iterations, False, target_bytes, start_time
        )

    def compress_once(
        self,
        image: Image.Image,
        target_bytes: int,
    ) -> Optional[EncodedArtifact]:
        """Encode a single time and accept the result only if it fits.

        Args:
            image: PIL Image to compress
            target_bytes: Budget in bytes

        Returns:
            EncodedArtifact, or None if encoding failed or the output is too large
        """
        start_time = time.time()

        try:
            encoded = self.encode_at(image, self.options.quality)
        except EncodeError as e:
            logger.warning(str(e))
            return None

        if len(encoded) > target_bytes:
            logger.info(
                f"{self.encoder.format_name} output {bytes_to_mb(len(encoded)):.2f} MB "
                f"exceeds budget {bytes_to_mb(target_bytes):.2f} MB"
            )
            return None

        quality = self.options.quality if self.encoder.supports_quality else None
        return self._build_artifact(
            image, encoded, quality, 0, True, target_bytes, start_time
        )

    def _build_artifact(
        self,
        image: Image.Image,
        encoded: bytes,
        quality: Optional[float],
        iterations: int,
        within_budget: bool,
        target_bytes: int,
        start_time: float,
    ) -> EncodedArtifact:
        ssim = None
        if self.calculate_ssim:
            with Image.open(BytesIO(encoded)) as compressed_img:
                ssim = calculate_ssim_inmemory(image, compressed_img)

        elapsed_ms = int((time.time() - start_time) * 1000)
        logger.debug(
            f"{self.encoder.format_name} done in {elapsed_ms} ms: "
            f"{len(encoded)} bytes after {iterations} search steps"
        )

        return EncodedArtifact(
            data=encoded,
            size_bytes=len(encoded),
            format_name=self.encoder.format_name,
            file_extension=self.encoder.file_extension,
            dimensions=image.size,
            quality=quality,
            iterations=iterations,
            within_budget=within_budget,
            ssim_score=ssim,
            message=self._build_message(within_budget, len(encoded), target_bytes, quality),
        )

    def _build_message(
        self,
        within_budget: bool,
        final_size: int,
        target_bytes: int,
        quality: Optional[float],
    ) -> str:
        """Build human-readable result message."""
        size_mb = bytes_to_mb(final_size)
        target_mb = bytes_to_mb(target_bytes)
        at_quality = f" at quality {quality:.2f}" if quality is not None else ""

        if within_budget:
            return f"Compressed to {size_mb:.2f} MB{at_quality}"
        return (
            f"Could not reach target {target_mb:.2f} MB. "
            f"Best effort: {size_mb:.2f} MB{at_quality}"
        )
