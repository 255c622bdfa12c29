"""In-memory application state singleton for the web meme generator."""

import sys
import os
import threading
from typing import Optional
from PIL import Image

# Add parent directory so we can import shared modules
app_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if app_dir not in sys.path:
    sys.path.insert(0, app_dir)

from models.meme_config import CaptionState
from models.settings import AppSettings
from utils.image_utils import DisplaySize, display_size_for_image


class AppState:
    """Holds all session state: caption, current image and its display size."""

    def __init__(self, settings: Optional[AppSettings] = None):
        self.settings: AppSettings = settings or AppSettings.from_env()
        self.caption: CaptionState = CaptionState()
        self.image: Optional[Image.Image] = None
        self.image_name: str = ""
        self.display_size: Optional[DisplaySize] = None
        self.lock = threading.Lock()

    def set_image(self, img: Image.Image, name: str, viewport_width: float) -> DisplaySize:
        """Swap in a new image and recompute its display size."""
        size = display_size_for_image(
            img,
            self.settings.clamp_viewport(viewport_width),
            self.settings.max_portrait_height,
        )
        with self.lock:
            self.image = img
            self.image_name = name
            self.display_size = size
        return size

    def reset(self):
        with self.lock:
            self.caption = CaptionState()
            self.image = None
            self.image_name = ""
            self.display_size = None


# Module-level singleton
state = AppState()
