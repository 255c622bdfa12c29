"""Caption font discovery (Windows + Linux + macOS) and loading."""

import logging
import os
import sys
from typing import Dict, List, Optional

from PIL import ImageFont

logger = logging.getLogger(__name__)

# Cache: display name ("Arial Bold") -> file path
_font_cache: Optional[Dict[str, str]] = None

# Classic meme faces first, then common bold sans fonts
PREFERRED_FAMILIES = ("Impact", "Anton", "Arial", "DejaVu Sans", "Liberation Sans", "Helvetica")

# Symbol and icon fonts cannot render captions
_BLOCKED_SUBSTRINGS = ("symbol", "dings", "mdl2", "emoji", "icons", "assets", "marlett")

_FONT_EXTENSIONS = (".ttf", ".otf")


def _is_blocked(family: str) -> bool:
    family_lower = family.lower()
    return any(sub in family_lower for sub in _BLOCKED_SUBSTRINGS)


def _font_dirs() -> List[str]:
    """Return existing directories that may hold font files."""
    dirs = []

    # Project-bundled fonts (fonts/ next to the entry point)
    project_fonts = os.path.join(
        os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "fonts")
    candidates = [project_fonts]

    if sys.platform == "win32":
        windir = os.environ.get("WINDIR", r"C:\Windows")
        candidates.append(os.path.join(windir, "Fonts"))
        localappdata = os.environ.get("LOCALAPPDATA", "")
        if localappdata:
            candidates.append(os.path.join(localappdata, "Microsoft", "Windows", "Fonts"))
    elif sys.platform == "darwin":
        candidates.extend(("/System/Library/Fonts", "/Library/Fonts",
                           os.path.expanduser("~/Library/Fonts")))
    else:
        candidates.extend(("/usr/share/fonts", "/usr/local/share/fonts",
                           os.path.expanduser("~/.local/share/fonts"),
                           os.path.expanduser("~/.fonts")))

    for d in candidates:
        if not os.path.isdir(d):
            continue
        # Fonts are often nested one or more levels deep
        for root, _, files in os.walk(d):
            if any(f.lower().endswith(_FONT_EXTENSIONS) for f in files):
                dirs.append(root)
    return dirs


def discover_fonts() -> Dict[str, str]:
    """Scan font directories for .ttf/.otf files.

    Family and style come from the font's own metadata. Returns a dict
    mapping display name ("DejaVu Sans Bold") to file path.
    """
    global _font_cache
    if _font_cache is not None:
        return _font_cache

    fonts: Dict[str, str] = {}
    for font_dir in _font_dirs():
        for entry in os.scandir(font_dir):
            if not entry.is_file() or not entry.name.lower().endswith(_FONT_EXTENSIONS):
                continue
            try:
                family, style = ImageFont.truetype(entry.path, size=12).getname()
            except OSError:
                logger.debug("Skipping unreadable font %s", entry.path)
                continue
            if not family or _is_blocked(family):
                continue
            if style and style.lower() != "regular":
                display = f"{family} {style}"
            else:
                display = family
            fonts.setdefault(display, entry.path)

    logger.debug("Discovered %d fonts", len(fonts))
    _font_cache = dict(sorted(fonts.items()))
    return _font_cache


def find_font_path(family: str, bold: bool = False) -> Optional[str]:
    """Find the best matching font file for a family, preferring bold."""
    fonts = discover_fonts()

    candidates = [f"{family} Bold", family] if bold else [family]
    lower_fonts = {name.lower(): path for name, path in fonts.items()}
    for candidate in candidates:
        if candidate.lower() in lower_fonts:
            return lower_fonts[candidate.lower()]

    # Partial match (family name appears at the start of the font name)
    family_lower = family.lower()
    for name, path in fonts.items():
        if name.lower().startswith(family_lower):
            return path
    return None


def load_font(family: str, size: int, bold: bool = True) -> ImageFont.ImageFont:
    """Load a caption font, falling back to common meme faces and then
    Pillow's built-in font."""
    size = max(1, int(size))
    for name in (family,) + PREFERRED_FAMILIES:
        path = find_font_path(name, bold)
        if not path:
            continue
        try:
            return ImageFont.truetype(path, size)
        except OSError:
            logger.warning("Could not load font %s", path)
    logger.debug("No TrueType font for %r, using Pillow default", family)
    return ImageFont.load_default(size)


def get_font_families() -> List[str]:
    """Return sorted list of unique font family names."""
    suffixes = (" Bold Italic", " Bold Oblique", " Bold", " Italic", " Oblique",
                " Regular", " Light", " Medium", " Black", " Condensed")
    families = set()
    for name in discover_fonts():
        base = name
        for suffix in suffixes:
            if base.endswith(suffix):
                base = base[:-len(suffix)]
                break
        base = base.strip()
        if base:
            families.add(base)
    return sorted(families)


def clear_font_cache() -> None:
    global _font_cache
    _font_cache = None
