"""Flask application for the web meme generator."""

import sys
import os
import logging
import math
from io import BytesIO

from urllib.parse import urlparse

from flask import (
    Flask, render_template, request, jsonify, send_file
)
from PIL import Image

Image.MAX_IMAGE_PIXELS = 25_000_000

# Add parent directory so we can import shared modules
app_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if app_dir not in sys.path:
    sys.path.insert(0, app_dir)

from models.errors import AssetNotFound, InvalidImage, MemeError
from export.meme_renderer import render_meme
from utils.image_utils import compute_display_size, make_thumbnail
from utils.templates import list_meme_templates, load_template
from web.state import state

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config['MAX_CONTENT_LENGTH'] = 20 * 1024 * 1024  # 20 MB upload limit

ALLOWED_HOSTS = {"localhost", "127.0.0.1"}


@app.before_request
def csrf_check():
    """Reject non-GET/HEAD/OPTIONS requests with a foreign Origin or Referer."""
    if request.method in ("GET", "HEAD", "OPTIONS"):
        return
    origin = request.headers.get("Origin") or request.headers.get("Referer")
    if origin:
        host = urlparse(origin).hostname
        if host not in ALLOWED_HOSTS:
            return jsonify(error="Forbidden: cross-origin request"), 403


@app.errorhandler(AssetNotFound)
def handle_not_found(e):
    logger.warning("Asset not found: %s", e)
    return jsonify(error=str(e)), 404


@app.errorhandler(MemeError)
def handle_meme_error(e):
    logger.warning("Rejected request: %s", e)
    return jsonify(error=str(e)), 400


def _png_response(img: Image.Image, download_name=None):
    buf = BytesIO()
    img.convert("RGB").save(buf, format="PNG")
    buf.seek(0)
    if download_name:
        return send_file(buf, mimetype="image/png", as_attachment=True,
                         download_name=download_name)
    return send_file(buf, mimetype="image/png")


def _positive_number(value, name):
    """Parse a positive float from request data, or raise ValueError."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number")
    if not math.isfinite(number) or number <= 0:
        raise ValueError(f"{name} must be a positive finite number")
    return number


def _image_info():
    size = state.display_size
    return dict(
        ok=True,
        name=state.image_name,
        width=state.image.width,
        height=state.image.height,
        display_size={"width": size.width, "height": size.height},
    )


# ---------------------------------------------------------------------------
# Page route
# ---------------------------------------------------------------------------

@app.route("/")
def index():
    return render_template("index.html")


# ---------------------------------------------------------------------------
# Templates & images
# ---------------------------------------------------------------------------

@app.route("/api/templates")
def get_templates():
    names = list_meme_templates(state.settings.templates_dir, state.settings.template_prefix)
    return jsonify(templates=names)


@app.route("/api/templates/<name>/thumbnail")
def template_thumbnail(name):
    img = load_template(name, state.settings.templates_dir, state.settings.template_prefix)
    return _png_response(make_thumbnail(img, state.settings.thumbnail_size))


@app.route("/api/select-template", methods=["POST"])
def select_template():
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify(error="Expected a JSON object"), 400
    name = data.get("name", "")
    try:
        viewport = _positive_number(
            data.get("viewport_width", state.settings.default_viewport_width), "viewport_width")
    except ValueError as e:
        return jsonify(error=str(e)), 400

    img = load_template(name, state.settings.templates_dir, state.settings.template_prefix)
    state.set_image(img, name, viewport)
    return jsonify(**_image_info())


@app.route("/api/upload-image", methods=["POST"])
def upload_image():
    if "file" not in request.files:
        return jsonify(error="No file provided"), 400
    f = request.files["file"]
    if not f.filename:
        return jsonify(error="Empty filename"), 400
    try:
        viewport = _positive_number(
            request.form.get("viewport_width", state.settings.default_viewport_width),
            "viewport_width")
    except ValueError as e:
        return jsonify(error=str(e)), 400

    try:
        img = Image.open(f.stream)
        pixels = img.width * img.height
        if pixels > Image.MAX_IMAGE_PIXELS:
            return jsonify(error=f"Image too large ({pixels:,} pixels, max {Image.MAX_IMAGE_PIXELS:,})"), 400
        img = img.convert("RGBA")
    except (OSError, Image.DecompressionBombError) as e:
        raise InvalidImage(f"Invalid image: {e}") from e

    state.set_image(img, f.filename, viewport)
    return jsonify(**_image_info())


@app.route("/api/image")
def current_image():
    if state.image is None:
        return jsonify(error="No image selected"), 404
    return _png_response(state.image)


# ---------------------------------------------------------------------------
# Caption & display size
# ---------------------------------------------------------------------------

@app.route("/api/caption")
def get_caption():
    return jsonify(state.caption.to_dict())


@app.route("/api/caption", methods=["PUT"])
def update_caption():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify(error="Expected a JSON object"), 400
    try:
        with state.lock:
            state.caption.update(data)
    except ValueError as e:
        return jsonify(error=str(e)), 400
    return jsonify(ok=True, caption=state.caption.to_dict())


@app.route("/api/display-size")
def get_display_size():
    if state.display_size is None:
        return jsonify(error="No image selected"), 400
    size = state.display_size
    return jsonify(width=size.width, height=size.height)


@app.route("/api/display-size", methods=["POST"])
def calculate_display_size():
    """Compute a display size for arbitrary dimensions without touching state."""
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify(error="Expected a JSON object"), 400
    try:
        source_width = float(data["source_width"])
        source_height = float(data["source_height"])
        viewport = _positive_number(
            data.get("viewport_width", state.settings.default_viewport_width), "viewport_width")
        max_height = _positive_number(
            data.get("max_portrait_height", state.settings.max_portrait_height),
            "max_portrait_height")
    except KeyError as e:
        return jsonify(error=f"Missing field: {e.args[0]}"), 400
    except (TypeError, ValueError) as e:
        return jsonify(error=str(e)), 400

    size = compute_display_size(source_width, source_height, viewport, max_height)
    return jsonify(width=size.width, height=size.height)


# ---------------------------------------------------------------------------
# Rendering & export
# ---------------------------------------------------------------------------

@app.route("/api/preview")
def preview_meme():
    if state.image is None:
        return jsonify(error="No image selected"), 400
    img = render_meme(state.image, state.caption, state.display_size)
    return _png_response(img)


@app.route("/api/export")
def export_meme():
    if state.image is None:
        return jsonify(error="No image selected"), 400
    img = render_meme(state.image, state.caption)
    base = os.path.splitext(state.image_name)[0] or "meme"
    return _png_response(img, download_name=f"{base}_meme.png")


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5000))
    debug = os.environ.get("FLASK_DEBUG", "0") == "1"
    logging.basicConfig(
        level=logging.DEBUG if debug or os.environ.get("MEME_DEBUG") == "1" else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
    logger.info("Meme Generator Web - http://localhost:%d", port)
    app.run(host="127.0.0.1", port=port, debug=debug)
