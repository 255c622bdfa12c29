"""Display sizing and thumbnail fitting for meme images."""

import math
from typing import NamedTuple, Tuple

from PIL import Image

from models.errors import InvalidDimension

# Height cap for portrait and square images
MAX_PORTRAIT_HEIGHT = 600.0


class DisplaySize(NamedTuple):
    """Target on-screen size of the meme canvas."""
    width: float
    height: float

    def as_pixels(self) -> Tuple[int, int]:
        """Round to whole pixels, never collapsing an axis to zero."""
        return (max(1, int(round(self.width))), max(1, int(round(self.height))))


def _check_dimensions(width: float, height: float) -> None:
    if not (math.isfinite(width) and math.isfinite(height)) or width <= 0 or height <= 0:
        raise InvalidDimension(width, height)


def compute_display_size(
    source_width: float,
    source_height: float,
    viewport_width: float,
    max_portrait_height: float = MAX_PORTRAIT_HEIGHT,
) -> DisplaySize:
    """Fit an image into the display envelope without distorting it.

    Landscape images are limited by the viewport width. Portrait and
    square images are limited by ``max_portrait_height``. Images that
    already fit keep their intrinsic size.

    Raises:
        InvalidDimension: if either source dimension is not a positive
            finite number.
        ValueError: if the envelope is not positive and finite.
    """
    _check_dimensions(source_width, source_height)
    for name, value in (("viewport_width", viewport_width),
                        ("max_portrait_height", max_portrait_height)):
        if not math.isfinite(value) or value <= 0:
            raise ValueError(f"{name} must be a positive number, got {value}")

    # Square images go through the portrait branch (strict comparison)
    if source_width > source_height:
        final_width = min(source_width, viewport_width)
        final_height = final_width / source_width * source_height
    else:
        final_height = min(source_height, max_portrait_height)
        final_width = final_height / source_height * source_width

    return DisplaySize(final_width, final_height)


def display_size_for_image(
    image: Image.Image,
    viewport_width: float,
    max_portrait_height: float = MAX_PORTRAIT_HEIGHT,
) -> DisplaySize:
    """Compute the display size for an already loaded PIL image."""
    width, height = image.size
    return compute_display_size(width, height, viewport_width, max_portrait_height)


def compute_scale_factor(
    image_width: int,
    image_height: int,
    box_width: int,
    box_height: int,
) -> float:
    """Compute uniform scale factor to fit image within box bounds."""
    _check_dimensions(image_width, image_height)
    scale_x = box_width / image_width
    scale_y = box_height / image_height
    return min(scale_x, scale_y)


def make_thumbnail(image: Image.Image, box: int) -> Image.Image:
    """Return an aspect-fit copy of ``image`` inside a ``box`` x ``box`` square."""
    scale = compute_scale_factor(image.width, image.height, box, box)
    size = (max(1, round(image.width * scale)), max(1, round(image.height * scale)))
    return image.resize(size, Image.LANCZOS)
