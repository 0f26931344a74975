from io import BytesIO

import pytest
from PIL import Image

from imagebudget import (
    CompressorSettings,
    DecodeError,
    ImageCompressor,
    TargetFormat,
    compress_only,
    encode_lossless_within_budget,
    encode_lossy_within_budget,
    resize_and_compress,
)
from imagebudget.compression.encoders import PngEncoder
from imagebudget.compression.result import EncoderOptions
from imagebudget.utils import bytes_to_mb


@pytest.mark.slow
def test_resize_and_compress_large_image(large_tiled_image):
    want = 2.0
    result = resize_and_compress(large_tiled_image, TargetFormat.LOSSY, want, max_dimension=200)

    assert result is not None
    assert result.within_budget
    assert result.size_mb <= want
    assert result.dimensions[0] <= 200 and result.dimensions[1] <= 200

    decoded = Image.open(BytesIO(result.data))
    assert decoded.size == result.dimensions


@pytest.mark.slow
def test_compress_only_keeps_dimensions(large_tiled_image):
    want = 2.0
    result = compress_only(large_tiled_image, "lossy", want)

    assert result is not None
    assert result.size_mb <= want
    assert result.dimensions == (6000, 6000)
    assert Image.open(BytesIO(result.data)).size == (6000, 6000)


def test_lossless_over_budget_returns_none(noise_image):
    png_size = len(PngEncoder().encode(noise_image, EncoderOptions()))
    budget = bytes_to_mb(png_size) / 2

    assert encode_lossless_within_budget(noise_image, budget) is None
    assert compress_only(noise_image, TargetFormat.LOSSLESS, budget) is None


def test_lossless_within_budget_returns_exact_length(noise_image):
    expected = PngEncoder().encode(noise_image, EncoderOptions())

    result = encode_lossless_within_budget(noise_image, bytes_to_mb(len(expected)))

    assert result is not None
    assert result.size_bytes == len(expected)
    assert result.data == expected
    assert result.format_name == "PNG"
    assert result.file_extension == ".png"


def test_lossless_resize_brings_image_under_budget(noise_image):
    png_size = len(PngEncoder().encode(noise_image, EncoderOptions()))
    budget = bytes_to_mb(png_size) / 2

    result = resize_and_compress(noise_image, "png", budget, max_dimension=64)

    assert result is not None
    assert result.dimensions == (64, 64)
    assert result.size_bytes < png_size / 2


def test_lossy_small_image_short_circuits(small_image):
    result = encode_lossy_within_budget(small_image, 1.0)

    assert result.iterations == 0
    assert result.quality == 1.0
    assert result.format_name == "JPEG"


def test_resize_uses_settings_default(curve_encoder):
    encoder = curve_encoder(lambda q: 100)
    compressor = ImageCompressor(CompressorSettings(max_dimension=50), encoder=encoder)

    result = compressor.resize_and_compress(Image.new("RGB", (400, 100)), "lossy", 1.0)

    assert result.dimensions == (50, 12)


def test_compress_only_does_not_resize(curve_encoder):
    encoder = curve_encoder(lambda q: 100)
    compressor = ImageCompressor(CompressorSettings(max_dimension=50), encoder=encoder)

    result = compressor.compress_only(Image.new("RGB", (400, 100)), "lossy", 1.0)

    assert result.dimensions == (400, 100)


def test_strict_policy_from_settings(noise_image):
    compressor = ImageCompressor(CompressorSettings(over_budget_policy="strict"))
    assert compressor.compress_only(noise_image, "lossy", 0.0001) is None


def test_best_effort_policy_is_default(noise_image):
    result = ImageCompressor().compress_only(noise_image, "lossy", 0.0001)

    assert result is not None
    assert not result.within_budget
    assert result.quality == 1.0


@pytest.mark.parametrize("budget", [0, -1.0, float("inf"), "abc"])
def test_invalid_budget_rejected(small_image, budget):
    with pytest.raises(ValueError):
        compress_only(small_image, "lossy", budget)


def test_unknown_format_rejected(small_image):
    with pytest.raises(ValueError):
        compress_only(small_image, "bmp", 1.0)


def test_compress_bytes(jpeg_bytes):
    compressor = ImageCompressor()

    resized = compressor.compress_bytes(jpeg_bytes, "lossy", 1.0, max_dimension=100)
    assert resized.dimensions == (100, 75)

    original = compressor.compress_bytes(jpeg_bytes, "lossy", 1.0, resize=False)
    assert original.dimensions == (400, 300)


def test_compress_bytes_rejects_garbage():
    with pytest.raises(DecodeError):
        ImageCompressor().compress_bytes(b"not an image", "lossy", 1.0)


@pytest.mark.parametrize("target_format", ["lossy", "lossless"])
def test_truncated_rgba_source_gives_no_result(truncated_rgba_png, target_format):
    result = resize_and_compress(truncated_rgba_png, target_format, 1.0, max_dimension=100)
    assert result is None
