"""Image compression package with format-specific encoders and strategies."""

from .result import EncodedArtifact, EncoderOptions
from .engine import CompressionEngine, OverBudgetPolicy
from .encoders import (
    SSIM_AVAILABLE,
    BaseEncoder,
    TargetFormat,
    get_encoder,
    get_available_formats,
    calculate_ssim_inmemory,
)
from .strategy import (
    BudgetStrategy,
    LossyBudgetStrategy,
    LosslessBudgetStrategy,
    get_strategy,
)

__all__ = [
    'EncodedArtifact',
    'EncoderOptions',
    'CompressionEngine',
    'OverBudgetPolicy',
    'BaseEncoder',
    'TargetFormat',
    'BudgetStrategy',
    'LossyBudgetStrategy',
    'LosslessBudgetStrategy',
    'SSIM_AVAILABLE',
    'get_encoder',
    'get_available_formats',
    'get_strategy',
    'calculate_ssim_inmemory',
]
