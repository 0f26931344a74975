import math
from io import BytesIO

import numpy as np
import pytest
from PIL import Image

from imagebudget.compression.encoders import BaseEncoder
from imagebudget.errors import EncodeError


def make_tiled_image(width, height, tile=100, seed=0):
    """Solid random-colour tiles, like a 6000x6000 checker of swatches."""
    rng = np.random.default_rng(seed)
    rows = math.ceil(height / tile)
    cols = math.ceil(width / tile)
    tiles = rng.integers(0, 256, size=(rows, cols, 3), dtype=np.uint8)
    pixels = np.repeat(np.repeat(tiles, tile, axis=0), tile, axis=1)[:height, :width]
    return Image.fromarray(np.ascontiguousarray(pixels))


def make_noise_image(width, height, seed=0):
    """Per-pixel noise: JPEG size drops steeply with quality."""
    rng = np.random.default_rng(seed)
    pixels = rng.integers(0, 256, size=(height, width, 3), dtype=np.uint8)
    return Image.fromarray(pixels)


class CurveEncoder(BaseEncoder):
    """Encoder whose output size is a known function of quality."""

    format_name = "FAKE"
    supports_quality = True
    file_extension = ".fake"

    def __init__(self, size_at, fail_when=None):
        self.size_at = size_at
        self.fail_when = fail_when
        self.calls = []

    def encode(self, image, options):
        self.calls.append(options.quality)
        if self.fail_when is not None and self.fail_when(options.quality):
            raise EncodeError(self.format_name, f"refused quality {options.quality}")
        return b"\x00" * max(1, int(self.size_at(options.quality)))


@pytest.fixture
def curve_encoder():
    """Factory for CurveEncoder instances."""
    return CurveEncoder


@pytest.fixture
def small_image():
    return Image.new("RGB", (64, 48), (120, 130, 140))


@pytest.fixture
def noise_image():
    return make_noise_image(256, 256)


@pytest.fixture(scope="session")
def large_tiled_image():
    return make_tiled_image(6000, 6000)


@pytest.fixture
def jpeg_bytes():
    buffer = BytesIO()
    make_tiled_image(400, 300, tile=50).save(buffer, format="JPEG", quality=90)
    return buffer.getvalue()


@pytest.fixture
def truncated_rgba_png():
    """Lazily opened RGBA PNG whose pixel data is cut in half."""
    rng = np.random.default_rng(1)
    pixels = rng.integers(0, 256, size=(200, 200, 4), dtype=np.uint8)
    buffer = BytesIO()
    Image.fromarray(pixels).save(buffer, format="PNG")
    data = buffer.getvalue()
    return Image.open(BytesIO(data[: len(data) // 2]))
