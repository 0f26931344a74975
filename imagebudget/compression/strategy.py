"""Budget strategies for lossy and lossless target formats.

Lossy: bisection search over encoder quality.
Lossless: encode once, accept or reject.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional, Type

from PIL import Image

from ..settings import CompressorSettings
from .encoders import BaseEncoder, TargetFormat, get_encoder
from .engine import CompressionEngine, OverBudgetPolicy
from .result import EncodedArtifact, EncoderOptions


class BudgetStrategy(ABC):
    """Abstract base class for per-format budget strategies."""

    target_format: TargetFormat

    def __init__(
        self,
        settings: Optional[CompressorSettings] = None,
        encoder: Optional[BaseEncoder] = None,
    ):
        """Initialize strategy.

        Args:
            settings: Compressor settings (defaults if None)
            encoder: Encoder override, registry encoder for the format if None
        """
        self.settings = settings if settings is not None else CompressorSettings()
        self.encoder = encoder if encoder is not None else get_encoder(self.target_format)

    def _make_engine(self) -> CompressionEngine:
        options = EncoderOptions(
            chroma_subsampling=self.settings.chroma_subsampling,
            progressive=self.settings.progressive,
            optimize=self.settings.optimize,
        )
        return CompressionEngine(
            self.encoder,
            options=options,
            min_quality=self.settings.min_quality,
            tolerance=self.settings.tolerance,
            calculate_ssim=self.settings.calculate_ssim,
        )

    @abstractmethod
    def compress(self, image: Image.Image, target_bytes: int) -> Optional[EncodedArtifact]:
        """Encode image within target_bytes.

        Args:
            image: PIL Image to compress
            target_bytes: Budget in bytes

        Returns:
            EncodedArtifact, or None when the budget cannot be met
        """
        pass


class LossyBudgetStrategy(BudgetStrategy):
    """Quality search for quality-parameterized formats."""

    target_format = TargetFormat.LOSSY

    @property
    def policy(self) -> OverBudgetPolicy:
        return OverBudgetPolicy(self.settings.over_budget_policy)

    def compress(self, image: Image.Image, target_bytes: int) -> Optional[EncodedArtifact]:
        return self._make_engine().compress_to_target(image, target_bytes, self.policy)


class LosslessBudgetStrategy(BudgetStrategy):
    """Single-shot accept/reject for formats without a quality dial."""

    target_format = TargetFormat.LOSSLESS

    def compress(self, image: Image.Image, target_bytes: int) -> Optional[EncodedArtifact]:
        return self._make_engine().compress_once(image, target_bytes)


_STRATEGIES: Dict[TargetFormat, Type[BudgetStrategy]] = {
    TargetFormat.LOSSY: LossyBudgetStrategy,
    TargetFormat.LOSSLESS: LosslessBudgetStrategy,
}


def get_strategy(
    target_format,
    settings: Optional[CompressorSettings] = None,
    encoder: Optional[BaseEncoder] = None,
) -> BudgetStrategy:
    """Create the budget strategy for a target format.

    Args:
        target_format: TargetFormat member or its name ("lossy", "jpeg", "png"...)
        settings: Compressor settings
        encoder: Optional encoder override

    Returns:
        Configured BudgetStrategy
    """
    return _STRATEGIES[TargetFormat.parse(target_format)](settings=settings, encoder=encoder)
