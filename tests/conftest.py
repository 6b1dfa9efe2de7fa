"""Shared fixtures for QR server tests."""

from io import BytesIO

import pytest
from PIL import Image

from qrwatermark.app import app as flask_app


@pytest.fixture
def app():
    flask_app.config.update(TESTING=True)
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def png_bytes():
    """Build PNG bytes for a solid-color image."""

    def _make(size=(128, 128), color=(200, 30, 40, 255), mode="RGBA"):
        buffer = BytesIO()
        Image.new(mode, size, color).save(buffer, format="PNG")
        return buffer.getvalue()

    return _make
