"""Caption state for a meme, with JSON serialization."""

from dataclasses import dataclass, asdict
import json
import math
import re

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")

MAX_FONT_SIZE = 500


@dataclass
class CaptionState:
    """Top and bottom caption text plus the styling shared by both lines."""
    top_text: str = ""
    bottom_text: str = ""
    font_size: float = 20.0
    font_color: str = "#ffffff"
    font_family: str = "Arial"
    bold: bool = True
    shadow: bool = True  # 1px black drop shadow behind the text

    def validate(self) -> None:
        """Raise ValueError if the caption cannot be rendered."""
        if not isinstance(self.top_text, str) or not isinstance(self.bottom_text, str):
            raise ValueError("Caption text must be a string")
        if not isinstance(self.font_family, str):
            raise ValueError(f"Font family must be a string, got {self.font_family!r}")
        if not isinstance(self.bold, bool) or not isinstance(self.shadow, bool):
            raise ValueError("bold and shadow must be true or false")
        size = self.font_size
        if (isinstance(size, bool) or not isinstance(size, (int, float))
                or not math.isfinite(size) or not 0 <= size <= MAX_FONT_SIZE):
            raise ValueError(
                f"Font size must be a number from 0 to {MAX_FONT_SIZE}, got {size!r}")
        if not isinstance(self.font_color, str) or not _HEX_COLOR.match(self.font_color):
            raise ValueError(f"Font color must be a #rrggbb value, got {self.font_color!r}")

    @property
    def is_empty(self) -> bool:
        return not self.top_text and not self.bottom_text

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "CaptionState":
        if not isinstance(d, dict):
            raise ValueError(f"Caption must be a JSON object, got {type(d).__name__}")
        caption = cls(**{k: v for k, v in d.items() if k in cls.__dataclass_fields__})
        if isinstance(caption.font_size, str):
            try:
                caption.font_size = float(caption.font_size)
            except ValueError:
                raise ValueError(f"Font size must be a number, got {caption.font_size!r}")
        elif isinstance(caption.font_size, int) and not isinstance(caption.font_size, bool):
            caption.font_size = float(caption.font_size)
        caption.validate()
        return caption

    def update(self, d: dict) -> None:
        """Apply a partial update; nothing changes if the result is invalid."""
        if not isinstance(d, dict):
            raise ValueError(f"Caption update must be a JSON object, got {type(d).__name__}")
        merged = self.to_dict()
        merged.update({k: v for k, v in d.items() if k in self.__dataclass_fields__})
        updated = CaptionState.from_dict(merged)
        for key, val in updated.to_dict().items():
            setattr(self, key, val)

    def save_json(self, path: str) -> None:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load_json(cls, path: str) -> "CaptionState":
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_dict(json.load(f))
