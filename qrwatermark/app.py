import json
import logging
import re
from io import BytesIO

from flask import Flask, Response, jsonify, request, send_file
from werkzeug.datastructures import FileStorage
from werkzeug.exceptions import RequestEntityTooLarge

from qrwatermark import config, raster
from qrwatermark.encoder import QRCode
from qrwatermark.errors import (
    QRServerError,
    UploadError,
    ValidationError,
)
from qrwatermark.watermark import resize

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config.update(
    MAX_CONTENT_LENGTH=config.MAX_CONTENT_LENGTH,
    QR_MAX_SIZE=config.QR_MAX_SIZE,
    QR_WATERMARK_WIDTH=config.QR_WATERMARK_WIDTH,
    QR_MAX_WATERMARK_PIXELS=config.QR_MAX_WATERMARK_PIXELS,
)

FALLBACK_ERROR_RESPONSE = b'{"error": "An unknown error occurred."}'

_SIZE_PATTERN = re.compile(r"\+?[0-9]+")

# Message prefix identifying the failed stage; validation and format errors
# carry complete messages of their own
_STAGE_MESSAGES = {
    "upload": "Could not upload the watermark image.",
    "decode": "Could not decode the watermark image.",
    "resize": "Could not resize the watermark image.",
    "encode": "Could not generate QR code.",
    "composite": "Could not generate QR code with the watermark image.",
}


def build_error_response(message: str) -> bytes:
    """
    Serialize the message as a JSON error payload.
    Falls back to a static payload if the message cannot be serialized.
    """
    try:
        return json.dumps({"error": message}).encode("utf-8")
    except (TypeError, ValueError):
        logger.exception("Could not generate error message.")
        return FALLBACK_ERROR_RESPONSE


def _error(message: str) -> Response:
    return Response(
        build_error_response(message), status=400, mimetype="application/json"
    )


def _parse_content(raw: str) -> str:
    if not raw:
        raise ValidationError("Could not determine the desired QR code content.")
    return raw


def _parse_size(raw: str) -> int:
    if not raw:
        raise ValidationError("Could not determine the desired QR code size: missing size.")
    if not _SIZE_PATTERN.fullmatch(raw):
        raise ValidationError(
            f"Could not determine the desired QR code size: {raw!r} is not a number."
        )
    size = int(raw)
    if size <= 0:
        raise ValidationError(
            "Could not determine the desired QR code size: size must be positive."
        )
    max_size = app.config["QR_MAX_SIZE"]
    if size > max_size:
        raise ValidationError(
            f"Could not determine the desired QR code size: size must be at most {max_size}."
        )
    return size


def _watermark_upload():
    """Return the uploaded watermark file, or None when no file was provided."""
    upload = request.files.get("watermark")
    if upload is None:
        if "watermark" in request.form:
            raise UploadError("The watermark must be sent as a file.")
        return None
    # Browsers submit an empty, unnamed part when no file is selected
    if not upload.filename:
        return None
    return upload


def _oversized_request() -> QRServerError:
    max_length = app.config["MAX_CONTENT_LENGTH"]
    if request.content_length is None or request.content_length > max_length:
        return UploadError(f"The request body exceeds {max_length} bytes.")
    # Werkzeug also rejects single form fields over MAX_FORM_MEMORY_SIZE
    return ValidationError(
        "Could not read the form fields: a field exceeds "
        f"{request.max_form_memory_size} bytes."
    )


def _read_upload(upload: FileStorage) -> bytes:
    try:
        data = upload.read()
    except OSError as exc:
        raise UploadError(str(exc)) from exc
    if not data:
        raise UploadError("The file is empty.")
    return data


def _generate(code: QRCode, upload) -> bytes:
    if upload is None:
        logger.info("Watermark image was not uploaded, generating a plain QR code.")
        return code.generate()

    data = _read_upload(upload)
    raster.require_format(data)
    watermark = resize(
        raster.decode(data, max_pixels=app.config["QR_MAX_WATERMARK_PIXELS"]),
        app.config["QR_WATERMARK_WIDTH"],
    )
    return code.generate_with_watermark(watermark)


def _describe(exc: QRServerError) -> str:
    prefix = _STAGE_MESSAGES.get(exc.stage)
    if prefix is None:
        return str(exc)
    return f"{prefix} {exc}"


@app.route("/health", methods=["GET"])
def health_check():
    return jsonify({"status": "ok"}), 200


@app.route("/generate", methods=["POST"])
def generate():
    try:
        try:
            url = request.form.get("url", "")
            size = request.form.get("size", "")
            upload = _watermark_upload()
        except RequestEntityTooLarge as exc:
            raise _oversized_request() from exc

        code = QRCode(content=_parse_content(url), size=_parse_size(size))
        png = _generate(code, upload)
    except QRServerError as exc:
        logger.warning("Rejected QR code request at %s stage: %s", exc.stage, exc)
        return _error(_describe(exc))

    return send_file(BytesIO(png), mimetype="image/png")
