"""Compressor settings with JSON persistence"""

import json
import math
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .log import get_logger

logger = get_logger(__name__)

# Settings file location (working directory)
SETTINGS_FILE = Path.cwd() / "imagebudget_settings.json"

DEFAULT_MAX_DIMENSION = 2048.0
DEFAULT_MIN_QUALITY = 0.1
DEFAULT_TOLERANCE = 0.05

OVER_BUDGET_POLICIES = ("best_effort", "strict", "smallest")


@dataclass(frozen=True)
class CompressorSettings:
    """Tunable knobs for the compressor.

    Attributes:
        max_dimension: Default bound for the larger image side (pixels)
        min_quality: Lossy quality floor, search stops once high <= floor
        tolerance: Search stops once the quality interval is this narrow
        over_budget_policy: What the lossy search returns when nothing fits
            ("best_effort", "strict" or "smallest")
        chroma_subsampling: JPEG chroma mode (0=4:4:4, 1=4:2:2, 2=4:2:0)
        progressive: Enable progressive JPEG encoding
        optimize: Let Pillow optimize Huffman tables / PNG deflate
        calculate_ssim: Attach an SSIM score to each result
    """
    max_dimension: float = DEFAULT_MAX_DIMENSION
    min_quality: float = DEFAULT_MIN_QUALITY
    tolerance: float = DEFAULT_TOLERANCE
    over_budget_policy: str = "best_effort"
    chroma_subsampling: int = 2
    progressive: bool = False
    optimize: bool = True
    calculate_ssim: bool = False

    def __post_init__(self):
        """Validate settings."""
        if not math.isfinite(self.max_dimension) or self.max_dimension <= 0:
            raise ValueError(f"max_dimension must be > 0, got {self.max_dimension}")
        if not 0.0 <= self.min_quality < 1.0:
            raise ValueError(f"min_quality must be in [0, 1), got {self.min_quality}")
        if not 0.0 < self.tolerance < 1.0:
            raise ValueError(f"tolerance must be in (0, 1), got {self.tolerance}")
        if self.over_budget_policy not in OVER_BUDGET_POLICIES:
            raise ValueError(
                f"over_budget_policy must be one of {OVER_BUDGET_POLICIES}, "
                f"got {self.over_budget_policy!r}"
            )
        if self.chroma_subsampling not in (0, 1, 2):
            raise ValueError(f"chroma_subsampling must be 0, 1, or 2")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CompressorSettings":
        """Build settings from a dict, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


def load_settings(path: Optional[Union[str, Path]] = None) -> CompressorSettings:
    """
    Load settings from JSON file.

    Args:
        path: Settings file (default: imagebudget_settings.json in cwd)

    Returns:
        Loaded settings, or defaults if the file is missing or unreadable
    """
    settings_path = Path(path) if path is not None else SETTINGS_FILE
    if not settings_path.exists():
        return CompressorSettings()

    try:
        with open(settings_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (json.JSONDecodeError, IOError) as e:
        logger.warning(f"Could not read settings from {settings_path}: {e}")
        return CompressorSettings()

    if not isinstance(data, dict):
        logger.warning(f"Ignoring settings file {settings_path}: expected a JSON object")
        return CompressorSettings()

    return CompressorSettings.from_dict(data)


def save_settings(
    settings: CompressorSettings,
    path: Optional[Union[str, Path]] = None,
) -> bool:
    """
    Save settings to JSON file.

    Args:
        settings: Settings to save
        path: Settings file (default: imagebudget_settings.json in cwd)

    Returns:
        True if saved successfully
    """
    settings_path = Path(path) if path is not None else SETTINGS_FILE
    try:
        with open(settings_path, 'w', encoding='utf-8') as f:
            json.dump(settings.to_dict(), f, indent=2)
        return True
    except IOError as e:
        logger.warning(f"Could not save settings to {settings_path}: {e}")
        return False
