"""Renders a meme image (template + top/bottom captions) using Pillow."""

import logging
from typing import List, Optional

from PIL import Image, ImageDraw, ImageFilter, ImageFont

from models.meme_config import CaptionState
from utils.fonts import load_font
from utils.image_utils import DisplaySize

logger = logging.getLogger(__name__)

PADDING = 16
SHADOW_COLOR = (0, 0, 0, 255)
SHADOW_RADIUS = 1


def wrap_text(draw: ImageDraw.ImageDraw, text: str, font: ImageFont.ImageFont,
              max_width: float) -> str:
    """Word-wrap ``text`` so every line fits within ``max_width`` pixels.

    Explicit newlines are kept. A single word wider than the limit gets a
    line of its own rather than being split.
    """
    lines: List[str] = []
    for paragraph in text.split("\n"):
        words = paragraph.split()
        if not words:
            lines.append("")
            continue
        current = words[0]
        for word in words[1:]:
            candidate = f"{current} {word}"
            if draw.textlength(candidate, font=font) <= max_width:
                current = candidate
            else:
                lines.append(current)
                current = word
        lines.append(current)
    return "\n".join(lines)


def _caption_position(draw, text, font, image_size, at_top: bool):
    """Top-left draw origin that centers ``text`` horizontally."""
    img_w, img_h = image_size
    left, top, right, bottom = draw.multiline_textbbox((0, 0), text, font=font, align="center")
    x = (img_w - (right - left)) / 2 - left
    if at_top:
        y = PADDING - top
    else:
        y = img_h - PADDING - (bottom - top) - top
    return x, y


def _draw_caption(canvas: Image.Image, caption: CaptionState, text: str,
                  at_top: bool) -> Image.Image:
    if not text.strip() or int(caption.font_size) < 1:
        return canvas

    font = load_font(caption.font_family, int(caption.font_size), caption.bold)
    draw = ImageDraw.Draw(canvas)
    wrapped = wrap_text(draw, text, font, canvas.width - 2 * PADDING)
    xy = _caption_position(draw, wrapped, font, canvas.size, at_top)

    if caption.shadow:
        layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        ImageDraw.Draw(layer).multiline_text(
            xy, wrapped, font=font, fill=SHADOW_COLOR, align="center")
        layer = layer.filter(ImageFilter.GaussianBlur(SHADOW_RADIUS))
        canvas = Image.alpha_composite(canvas, layer)
        draw = ImageDraw.Draw(canvas)

    draw.multiline_text(xy, wrapped, font=font, fill=caption.font_color, align="center")
    return canvas


def render_meme(
    image: Image.Image,
    caption: CaptionState,
    display_size: Optional[DisplaySize] = None,
) -> Image.Image:
    """Render the meme for one caption.

    Args:
        image: Template or user photo. Not modified.
        caption: Text and styling for both caption lines.
        display_size: If given, the image is scaled to this size first and
            the font size applies at that scale. Otherwise the image is
            rendered at its intrinsic resolution.

    Returns:
        New RGBA PIL Image.
    """
    caption.validate()
    canvas = image.convert("RGBA")  # always a new image
    if display_size is not None:
        canvas = canvas.resize(display_size.as_pixels(), Image.LANCZOS)

    canvas = _draw_caption(canvas, caption, caption.top_text, at_top=True)
    canvas = _draw_caption(canvas, caption, caption.bottom_text, at_top=False)
    logger.debug("Rendered meme %dx%d", canvas.width, canvas.height)
    return canvas


def save_meme(image: Image.Image, path: str) -> None:
    """Write a rendered meme to disk as PNG."""
    image.convert("RGB").save(path, format="PNG")
    logger.info("Saved meme to %s", path)
