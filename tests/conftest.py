from pathlib import Path

import pytest
from PIL import Image


@pytest.fixture
def templates_dir(tmp_path: Path) -> Path:
    """A template directory with three memes and some files to be ignored."""
    d = tmp_path / "memes"
    d.mkdir()
    Image.new("RGB", (1200, 600), "red").save(d / "meme_wide.png")
    Image.new("RGB", (400, 800), "blue").save(d / "meme_tall.jpg")
    Image.new("RGB", (500, 500), "green").save(d / "meme_square.png")
    Image.new("RGB", (10, 10), "white").save(d / "background.png")
    (d / "meme_notes.txt").write_text("not an image")
    (d / "meme_subdir.png").mkdir()
    return d


@pytest.fixture
def gray_image() -> Image.Image:
    return Image.new("RGBA", (400, 300), (128, 128, 128, 255))
