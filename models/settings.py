"""Application settings with environment variable overrides."""

import math
import os
from dataclasses import dataclass

# Bundled templates live next to the entry point
_APP_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DEFAULT_TEMPLATES_DIR = os.path.join(_APP_DIR, "memes")


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")
    if not math.isfinite(value) or value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


@dataclass
class AppSettings:
    """Display envelope, template catalogue location and gallery options."""
    templates_dir: str = DEFAULT_TEMPLATES_DIR
    template_prefix: str = "meme"
    max_portrait_height: float = 600.0
    max_viewport_width: float = 800.0   # desktop screens are much wider than a phone
    default_viewport_width: float = 390.0  # used when a web client sends none
    thumbnail_size: int = 100

    def clamp_viewport(self, width: float) -> float:
        """Limit a reported screen width to the configured maximum."""
        return min(width, self.max_viewport_width)

    @classmethod
    def from_env(cls) -> "AppSettings":
        """Build settings from ``MEME_*`` environment variables."""
        defaults = cls()
        return cls(
            templates_dir=os.environ.get("MEME_TEMPLATES_DIR") or defaults.templates_dir,
            template_prefix=os.environ.get("MEME_TEMPLATE_PREFIX", defaults.template_prefix),
            max_portrait_height=_env_float("MEME_MAX_PORTRAIT_HEIGHT",
                                           defaults.max_portrait_height),
            max_viewport_width=_env_float("MEME_MAX_VIEWPORT_WIDTH",
                                          defaults.max_viewport_width),
            default_viewport_width=_env_float("MEME_VIEWPORT_WIDTH",
                                              defaults.default_viewport_width),
            thumbnail_size=int(_env_float("MEME_THUMBNAIL_SIZE", defaults.thumbnail_size)),
        )
