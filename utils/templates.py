"""Bundled meme template discovery and image loading."""

import logging
import os
from typing import List

from PIL import Image, UnidentifiedImageError

from models.errors import AssetNotFound, InvalidImage

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif", ".bmp", ".webp")


def list_meme_templates(directory: str, prefix: str = "meme") -> List[str]:
    """Return sorted file names in ``directory`` that look like meme templates.

    A template is an image file whose name starts with ``prefix``.

    Raises:
        AssetNotFound: if the directory does not exist.
    """
    if not os.path.isdir(directory):
        raise AssetNotFound(f"Template directory not found: {directory}")

    names = []
    for entry in os.scandir(directory):
        if not entry.is_file():
            continue
        if not entry.name.startswith(prefix):
            continue
        if not entry.name.lower().endswith(IMAGE_EXTENSIONS):
            continue
        names.append(entry.name)

    logger.debug("Found %d templates in %s", len(names), directory)
    return sorted(names)


def _resolve_template(name: str, directory: str, prefix: str) -> str:
    """Map a template name, with or without extension, to a file path.

    Only names that ``list_meme_templates`` would offer are accepted.
    """
    if (not isinstance(name, str) or not name or os.path.basename(name) != name
            or name in (".", "..")):
        raise AssetNotFound(f"Invalid template name: {name!r}")
    if not name.startswith(prefix):
        raise AssetNotFound(f"Not a template: {name}")

    path = os.path.join(directory, name)
    if name.lower().endswith(IMAGE_EXTENSIONS):
        candidates = [path]
    else:
        candidates = [path + ext for ext in IMAGE_EXTENSIONS]
    for candidate in candidates:
        if os.path.isfile(candidate):
            return candidate
    raise AssetNotFound(f"Template not found: {name}")


def load_image(path: str) -> Image.Image:
    """Load an image from disk and convert it to RGBA.

    Raises:
        AssetNotFound: if the path does not point to a file.
        InvalidImage: if the file is not a readable image.
    """
    if not os.path.isfile(path):
        raise AssetNotFound(f"Image not found: {path}")
    try:
        with Image.open(path) as img:
            img.load()
            return img.convert("RGBA")
    except (UnidentifiedImageError, OSError) as e:
        raise InvalidImage(f"Could not read image {path}: {e}") from e


def load_template(name: str, directory: str, prefix: str = "meme") -> Image.Image:
    """Load a bundled template by file name.

    Raises:
        AssetNotFound: if no template with that name exists.
        InvalidImage: if the template file is corrupt.
    """
    path = _resolve_template(name, directory, prefix)
    logger.info("Loading template %s", path)
    return load_image(path)
