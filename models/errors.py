"""Exception types raised by the meme core."""


class MemeError(Exception):
    """Base class for all meme generator errors."""


class InvalidDimension(MemeError, ValueError):
    """An image width or height is zero or negative."""

    def __init__(self, width: float, height: float):
        super().__init__(
            f"Image dimensions must be positive, got {width} x {height}"
        )
        self.width = width
        self.height = height


class AssetNotFound(MemeError, FileNotFoundError):
    """A template or image file could not be located."""


class InvalidImage(MemeError, ValueError):
    """A file exists but could not be decoded as an image."""
