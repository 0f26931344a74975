"""Fit images into a storage budget by bounding dimensions and searching encoder quality"""

from .errors import ImageBudgetError, DecodeError, EncodeError
from .downsample import downsample, calculate_downsample_size
from .compression import (
    EncodedArtifact,
    OverBudgetPolicy,
    TargetFormat,
)
from .compressor import (
    ImageCompressor,
    resize_and_compress,
    compress_only,
    encode_lossy_within_budget,
    encode_lossless_within_budget,
)
from .settings import CompressorSettings, load_settings, save_settings
from .log import configure_logging
from .utils import decode_image

__version__ = "0.1.0"

__all__ = [
    'ImageBudgetError',
    'DecodeError',
    'EncodeError',
    'downsample',
    'calculate_downsample_size',
    'EncodedArtifact',
    'OverBudgetPolicy',
    'TargetFormat',
    'ImageCompressor',
    'resize_and_compress',
    'compress_only',
    'encode_lossy_within_budget',
    'encode_lossless_within_budget',
    'CompressorSettings',
    'load_settings',
    'save_settings',
    'configure_logging',
    'decode_image',
]
