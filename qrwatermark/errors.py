"""Errors raised while handling a QR code request.

Every error is terminal for the request and is reported to the caller as an
HTTP 400 with a JSON ``{"error": ...}`` body.
"""


class QRServerError(Exception):
    """Base class for all request failures."""

    stage = "request"


class ValidationError(QRServerError):
    stage = "validate"


class EncodingError(QRServerError):
    stage = "encode"


class UploadError(QRServerError):
    stage = "upload"


class FormatError(QRServerError):
    stage = "format"


class DecodeError(QRServerError):
    stage = "decode"


class ResizeError(QRServerError):
    stage = "resize"


class CompositeError(QRServerError):
    stage = "composite"
