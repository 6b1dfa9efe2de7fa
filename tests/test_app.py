"""Tests for the /generate endpoint."""

import json
from io import BytesIO

import pytest

from qrwatermark import raster
from qrwatermark.app import FALLBACK_ERROR_RESPONSE, build_error_response

CONTENT_ERROR = "Could not determine the desired QR code content."


def _post(client, **fields):
    return client.post("/generate", data=fields, content_type="multipart/form-data")


def _error_message(response):
    assert response.status_code == 400
    assert response.mimetype == "application/json"
    return response.get_json()["error"]


def test_generate_without_watermark(client):
    response = _post(client, url="https://example.com", size="256")

    assert response.status_code == 200
    assert response.mimetype == "image/png"
    assert raster.decode(response.data).size == (256, 256)


def test_generate_accepts_urlencoded_form(client):
    response = client.post("/generate", data={"url": "https://example.com", "size": "128"})

    assert response.status_code == 200
    assert raster.decode(response.data).size == (128, 128)


@pytest.mark.parametrize("fields", [{"size": "256"}, {"url": "", "size": "256"}])
def test_generate_requires_content(client, fields):
    response = _post(client, **fields)
    assert _error_message(response) == CONTENT_ERROR
    assert json.loads(response.data) == {"error": CONTENT_ERROR}


def test_content_is_checked_before_size(client):
    response = _post(client, url="", size="abc")
    assert _error_message(response) == CONTENT_ERROR


@pytest.mark.parametrize("size", [None, "", "abc", "12.5", "-5", "0", " 256", "1_000"])
def test_generate_requires_valid_size(client, size):
    fields = {"url": "https://example.com"}
    if size is not None:
        fields["size"] = size

    message = _error_message(_post(client, **fields))

    assert "QR code size" in message


def test_generate_rejects_size_above_limit(client, app, monkeypatch):
    monkeypatch.setitem(app.config, "QR_MAX_SIZE", 512)

    message = _error_message(_post(client, url="https://example.com", size="513"))

    assert "at most 512" in message


def test_generate_reports_size_too_small_for_content(client):
    message = _error_message(_post(client, url="https://example.com", size="10"))
    assert message.startswith("Could not generate QR code.")


def test_watermark_is_centered(client, png_bytes):
    color = (200, 30, 40, 255)
    response = _post(
        client,
        url="https://example.com",
        size="256",
        watermark=(BytesIO(png_bytes(size=(128, 128), color=color)), "logo.png"),
    )

    assert response.status_code == 200
    assert response.mimetype == "image/png"
    image = raster.decode(response.data).convert("RGBA")
    assert image.size == (256, 256)
    r, g, b, a = image.getpixel((128, 128))
    assert abs(r - 200) <= 2 and abs(g - 30) <= 2 and abs(b - 40) <= 2
    assert a == 255


def test_watermark_requests_are_idempotent(client, png_bytes):
    watermark = png_bytes(size=(100, 100), color=(0, 0, 255, 180))

    def request():
        return _post(
            client,
            url="https://example.com",
            size="300",
            watermark=(BytesIO(watermark), "logo.png"),
        )

    first, second = request(), request()

    assert first.status_code == second.status_code == 200
    assert first.data == second.data


def test_plain_requests_are_idempotent(client):
    first = _post(client, url="https://example.com", size="256")
    second = _post(client, url="https://example.com", size="256")
    assert first.data == second.data


def test_watermark_rejects_text_file(client):
    response = _post(
        client,
        url="https://example.com",
        size="256",
        watermark=(BytesIO(b"this is not an image"), "notes.txt"),
    )

    message = _error_message(response)
    assert "not a PNG" in message
    assert "text/plain" in message


def test_watermark_rejects_jpeg(client):
    response = _post(
        client,
        url="https://example.com",
        size="256",
        watermark=(BytesIO(b"\xff\xd8\xff\xe0" + b"\x00" * 64), "photo.jpg"),
    )
    assert "image/jpeg" in _error_message(response)


def test_watermark_rejects_corrupt_png(client):
    response = _post(
        client,
        url="https://example.com",
        size="256",
        watermark=(BytesIO(b"\x89PNG\r\n\x1a\n" + b"garbage" * 10), "broken.png"),
    )
    assert _error_message(response).startswith("Could not decode the watermark image.")


def test_watermark_rejects_empty_file(client):
    response = _post(
        client,
        url="https://example.com",
        size="256",
        watermark=(BytesIO(b""), "empty.png"),
    )
    assert _error_message(response).startswith("Could not upload the watermark image.")


def test_watermark_sent_as_text_field_is_an_error(client):
    response = _post(client, url="https://example.com", size="256", watermark="logo.png")
    assert _error_message(response).startswith("Could not upload the watermark image.")


def test_oversized_body_is_rejected(client, app, monkeypatch, png_bytes):
    monkeypatch.setitem(app.config, "MAX_CONTENT_LENGTH", 1024)
    response = _post(
        client,
        url="https://example.com",
        size="256",
        watermark=(BytesIO(b"\x89PNG\r\n\x1a\n" + b"\x00" * 4096), "big.png"),
    )

    message = _error_message(response)
    assert "exceeds 1024 bytes" in message


def test_generate_only_accepts_post(client):
    assert client.get("/generate").status_code == 405


def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json() == {"status": "ok"}


def test_build_error_response():
    assert json.loads(build_error_response("boom")) == {"error": "boom"}


def test_build_error_response_falls_back_when_unserializable():
    assert build_error_response(b"\xff") == FALLBACK_ERROR_RESPONSE


def test_watermark_over_pixel_limit_is_rejected(client, app, monkeypatch, png_bytes):
    monkeypatch.setitem(app.config, "QR_MAX_WATERMARK_PIXELS", 64 * 64)
    response = _post(
        client,
        url="https://example.com",
        size="256",
        watermark=(BytesIO(png_bytes(size=(3000, 3000), mode="L", color=0)), "huge.png"),
    )

    message = _error_message(response)
    assert message.startswith("Could not decode the watermark image.")
    assert "3000x3000" in message


def test_truncated_multipart_body_is_an_error(client):
    body = (
        b"--XyZ\r\n"
        b'Content-Disposition: form-data; name="url"\r\n\r\n'
        b"https://example.com\r\n"
        b"--XyZ\r\n"
        b'Content-Disposition: form-data; name="size"\r\n\r\n'
        b"256\r\n"
        b"--XyZ\r\n"
        b'Content-Disposition: form-data; name="watermark"; filename="logo.png"\r\n'
        b"Content-Type: image/png\r\n\r\n"
        b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR"
    )
    response = client.post(
        "/generate", data=body, content_type="multipart/form-data; boundary=XyZ"
    )

    assert _error_message(response)
    assert not response.data.startswith(b"\x89PNG")


def test_oversized_form_field_is_a_validation_error(client, app, monkeypatch):
    monkeypatch.setitem(app.config, "MAX_FORM_MEMORY_SIZE", 1000)

    message = _error_message(_post(client, url="a" * 5000, size="256"))

    assert "form fields" in message
    assert "exceeds 1000 bytes" in message
    assert "watermark" not in message
