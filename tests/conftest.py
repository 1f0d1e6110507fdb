"""Shared fixtures: a Flask app with its own temp folder and real image payloads."""
import io

import pytest
from PIL import Image
from werkzeug.datastructures import FileStorage

from app import create_app


def make_image(size=(1600, 1200), fmt="JPEG", mode="RGB", color=(200, 80, 40)):
    """Encode a solid-colour image and return its bytes"""
    if mode == "RGBA" and len(color) == 3:
        color = color + (128,)
    img = Image.new(mode, size, color)
    output = io.BytesIO()
    img.save(output, format=fmt)
    return output.getvalue()


def make_upload(data, filename="photo.jpg", content_type="image/jpeg"):
    return FileStorage(stream=io.BytesIO(data), filename=filename, content_type=content_type)


@pytest.fixture
def app(tmp_path):
    app = create_app({
        "TESTING": True,
        "TEMP_FOLDER": str(tmp_path / "temp"),
    })
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def jpeg_bytes():
    return make_image()


@pytest.fixture
def png_bytes():
    return make_image(size=(640, 480), fmt="PNG", mode="RGBA")
