import pytest

from utils import fonts

FAKE_FONTS = {
    "DejaVu Sans": "/fonts/DejaVuSans.ttf",
    "DejaVu Sans Bold": "/fonts/DejaVuSans-Bold.ttf",
    "Impact": "/fonts/impact.ttf",
}


@pytest.fixture
def fake_fonts(monkeypatch: pytest.MonkeyPatch) -> dict:
    monkeypatch.setattr(fonts, "_font_cache", dict(FAKE_FONTS))
    return FAKE_FONTS


@pytest.mark.parametrize("family, blocked", [
    ("Wingdings 2", True),
    ("Segoe UI Symbol", True),
    ("Noto Color Emoji", True),
    ("DejaVu Sans", False),
    ("Impact", False),
])
def test_is_blocked(family: str, blocked: bool) -> None:
    assert fonts._is_blocked(family) is blocked


def test_find_font_prefers_bold(fake_fonts: dict) -> None:
    assert fonts.find_font_path("DejaVu Sans", bold=True) == "/fonts/DejaVuSans-Bold.ttf"
    assert fonts.find_font_path("dejavu sans", bold=False) == "/fonts/DejaVuSans.ttf"


def test_find_font_bold_falls_back_to_regular(fake_fonts: dict) -> None:
    assert fonts.find_font_path("Impact", bold=True) == "/fonts/impact.ttf"


def test_find_font_partial_and_missing(fake_fonts: dict) -> None:
    assert fonts.find_font_path("Imp") == "/fonts/impact.ttf"
    assert fonts.find_font_path("Comic Sans") is None


def test_font_families(fake_fonts: dict) -> None:
    assert fonts.get_font_families() == ["DejaVu Sans", "Impact"]


def test_load_font_falls_back_to_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(fonts, "_font_cache", {})
    font = fonts.load_font("Impact", 24)
    assert font.getbbox("MEME")[2] > 0


def test_clear_font_cache(fake_fonts: dict) -> None:
    fonts.clear_font_cache()
    assert fonts._font_cache is None
