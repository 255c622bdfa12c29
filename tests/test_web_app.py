from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image

from models.settings import AppSettings
from web.app import app
from web.state import state


@pytest.fixture
def client(templates_dir: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(state, "settings", AppSettings(templates_dir=str(templates_dir)))
    state.reset()
    app.config["TESTING"] = True
    with app.test_client() as c:
        yield c
    state.reset()


def _select(client, name: str, **extra):
    return client.post("/api/select-template", json={"name": name, **extra})


def _png(resp) -> Image.Image:
    assert resp.mimetype == "image/png"
    return Image.open(BytesIO(resp.data))


def test_index_page(client) -> None:
    resp = client.get("/")
    assert resp.status_code == 200
    assert b"Meme generator" in resp.data


def test_list_templates(client) -> None:
    resp = client.get("/api/templates")
    assert resp.status_code == 200
    assert resp.get_json() == {
        "templates": ["meme_square.png", "meme_tall.jpg", "meme_wide.png"]
    }


def test_list_templates_missing_dir(client, monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr(state, "settings", AppSettings(templates_dir=str(tmp_path / "gone")))
    resp = client.get("/api/templates")
    assert resp.status_code == 404
    assert "error" in resp.get_json()


def test_thumbnail(client) -> None:
    resp = client.get("/api/templates/meme_wide.png/thumbnail")
    assert resp.status_code == 200
    assert _png(resp).size == (100, 50)


def test_thumbnail_unknown(client) -> None:
    resp = client.get("/api/templates/meme_nope.png/thumbnail")
    assert resp.status_code == 404


def test_select_landscape_template(client) -> None:
    resp = _select(client, "meme_wide.png", viewport_width=390)
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["width"] == 1200
    assert data["height"] == 600
    assert data["display_size"] == {"width": 390, "height": 195}


def test_select_portrait_template_uses_default_viewport(client) -> None:
    data = _select(client, "meme_tall.jpg").get_json()
    assert data["display_size"] == {"width": 300, "height": 600}


def test_select_square_template_takes_portrait_branch(client) -> None:
    data = _select(client, "meme_square.png", viewport_width=200).get_json()
    assert data["display_size"] == {"width": 500, "height": 500}


def test_viewport_is_clamped(client) -> None:
    data = _select(client, "meme_wide.png", viewport_width=5000).get_json()
    assert data["display_size"] == {"width": 800, "height": 400}


@pytest.mark.parametrize("viewport", ["wide", 0, -100, "nan", "inf", "-inf"])
def test_select_invalid_viewport(client, viewport) -> None:
    resp = _select(client, "meme_wide.png", viewport_width=viewport)
    assert resp.status_code == 400


def test_select_unknown_template(client) -> None:
    resp = _select(client, "meme_nope")
    assert resp.status_code == 404
    assert state.image is None


def test_display_size_follows_selection(client) -> None:
    assert client.get("/api/display-size").status_code == 400
    _select(client, "meme_wide.png", viewport_width=390)
    assert client.get("/api/display-size").get_json() == {"width": 390, "height": 195}
    _select(client, "meme_tall.jpg", viewport_width=390)
    assert client.get("/api/display-size").get_json() == {"width": 300, "height": 600}


@pytest.mark.parametrize("payload, expected", [
    ({"source_width": 1200, "source_height": 600, "viewport_width": 390,
      "max_portrait_height": 600}, {"width": 390, "height": 195}),
    ({"source_width": 400, "source_height": 800, "viewport_width": 390,
      "max_portrait_height": 600}, {"width": 300, "height": 600}),
    ({"source_width": 500, "source_height": 500}, {"width": 500, "height": 500}),
])
def test_calculate_display_size(client, payload: dict, expected: dict) -> None:
    resp = client.post("/api/display-size", json=payload)
    assert resp.status_code == 200
    assert resp.get_json() == expected


@pytest.mark.parametrize("payload", [
    {"source_width": 0, "source_height": 500},
    {"source_width": 500, "source_height": -1},
    {"source_width": "abc", "source_height": 500},
    {"source_height": 500},
    {"source_width": 500, "source_height": 500, "max_portrait_height": 0},
    {"source_width": "nan", "source_height": 500},
    {"source_width": 500, "source_height": "inf"},
    {"source_width": 500, "source_height": 500, "viewport_width": "nan"},
    {"source_width": 500, "source_height": 500, "max_portrait_height": "inf"},
])
def test_calculate_display_size_rejects_bad_input(client, payload: dict) -> None:
    resp = client.post("/api/display-size", json=payload)
    assert resp.status_code == 400
    assert "error" in resp.get_json()


def test_caption_update(client) -> None:
    assert client.get("/api/caption").get_json()["top_text"] == ""

    resp = client.put("/api/caption", json={"top_text": "TOP", "font_size": 30})
    assert resp.status_code == 200
    assert resp.get_json()["caption"]["top_text"] == "TOP"
    assert client.get("/api/caption").get_json()["font_size"] == 30


@pytest.mark.parametrize("payload", [
    {"font_size": -1},
    {"font_size": "inf"},
    {"font_size": 10000},
    {"font_color": "red"},
    {"font_family": 5},
    {"bold": "yes"},
    ["TOP"],
])
def test_caption_update_rejected(client, payload) -> None:
    client.put("/api/caption", json={"top_text": "before"})
    resp = client.put("/api/caption", json=payload)
    assert resp.status_code == 400
    assert client.get("/api/caption").get_json()["top_text"] == "before"


def test_preview_requires_image(client) -> None:
    assert client.get("/api/preview").status_code == 400
    assert client.get("/api/export").status_code == 400


def test_preview_at_display_size(client) -> None:
    _select(client, "meme_wide.png", viewport_width=390)
    client.put("/api/caption", json={"top_text": "TOP", "bottom_text": "BOTTOM"})
    resp = client.get("/api/preview")
    assert resp.status_code == 200
    assert _png(resp).size == (390, 195)


def test_export_full_resolution(client) -> None:
    _select(client, "meme_wide.png", viewport_width=390)
    resp = client.get("/api/export")
    assert resp.status_code == 200
    assert "meme_wide_meme.png" in resp.headers["Content-Disposition"]
    assert _png(resp).size == (1200, 600)


def test_upload_image(client) -> None:
    buf = BytesIO()
    Image.new("RGB", (640, 480), "yellow").save(buf, format="PNG")
    buf.seek(0)
    resp = client.post(
        "/api/upload-image",
        data={"file": (buf, "photo.png"), "viewport_width": "320"},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["name"] == "photo.png"
    assert data["display_size"] == {"width": 320, "height": 240}
    assert client.get("/api/image").status_code == 200


def test_upload_invalid_image(client) -> None:
    resp = client.post(
        "/api/upload-image",
        data={"file": (BytesIO(b"not an image"), "photo.png")},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 400
    assert state.image is None


def test_upload_without_file(client) -> None:
    resp = client.post("/api/upload-image", data={}, content_type="multipart/form-data")
    assert resp.status_code == 400


def test_cross_origin_post_rejected(client) -> None:
    resp = client.post("/api/select-template", json={"name": "meme_wide.png"},
                       headers={"Origin": "http://evil.example"})
    assert resp.status_code == 403


def test_calculate_display_size_rejects_bare_nan(client) -> None:
    resp = client.post("/api/display-size", data='{"source_width": NaN, "source_height": 500}',
                       content_type="application/json")
    assert resp.status_code == 400
    assert "error" in resp.get_json()


@pytest.mark.parametrize("url", ["/api/select-template", "/api/display-size"])
def test_non_object_body_rejected(client, url: str) -> None:
    resp = client.post(url, json=["meme_wide.png"])
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Expected a JSON object"}


def test_select_unlisted_image_rejected(client) -> None:
    resp = _select(client, "background.png")
    assert resp.status_code == 404
    assert state.image is None
    assert client.get("/api/templates/background.png/thumbnail").status_code == 404


def test_preview_after_rejected_caption(client) -> None:
    _select(client, "meme_wide.png", viewport_width=390)
    assert client.put("/api/caption", json={"font_family": 5}).status_code == 400
    resp = client.get("/api/preview")
    assert resp.status_code == 200
    assert _png(resp).size == (390, 195)


@pytest.mark.parametrize("viewport", ["nan", "inf"])
def test_upload_invalid_viewport(client, viewport: str) -> None:
    buf = BytesIO()
    Image.new("RGB", (64, 48), "yellow").save(buf, format="PNG")
    buf.seek(0)
    resp = client.post(
        "/api/upload-image",
        data={"file": (buf, "photo.png"), "viewport_width": viewport},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 400
    assert state.image is None


def test_no_session_secret() -> None:
    assert app.secret_key is None
