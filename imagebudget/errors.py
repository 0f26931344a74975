"""Exceptions raised by the image budget package."""


class ImageBudgetError(Exception):
    """Base class for all package errors."""


class DecodeError(ImageBudgetError, ValueError):
    """Encoded input could not be decoded into an image."""


class EncodeError(ImageBudgetError, RuntimeError):
    """An encoder produced no usable output."""

    def __init__(self, format_name: str, message: str):
        self.format_name = format_name
        super().__init__(f"{format_name} encoding failed: {message}")
