"""PNG decode/encode and content-type sniffing for uploaded images."""

import re
from io import BytesIO
from typing import Optional

from PIL import Image

from qrwatermark.errors import DecodeError, FormatError

PNG = "image/png"
OCTET_STREAM = "application/octet-stream"
TEXT_PLAIN = "text/plain; charset=utf-8"

SNIFF_LEN = 512

# (pattern, content type) pairs checked in order against the sniff window
_SIGNATURES = [
    (re.compile(rb"%PDF-"), "application/pdf"),
    (re.compile(rb"%!PS-Adobe-"), "application/postscript"),
    (re.compile(rb"\x00\x00[\x01\x02]\x00"), "image/x-icon"),
    (re.compile(rb"BM"), "image/bmp"),
    (re.compile(rb"GIF8[79]a"), "image/gif"),
    (re.compile(rb"RIFF....WEBPVP", re.DOTALL), "image/webp"),
    (re.compile(rb"\x89PNG\r\n\x1a\n"), PNG),
    (re.compile(rb"\xff\xd8\xff"), "image/jpeg"),
    (re.compile(rb"PK\x03\x04"), "application/zip"),
    (re.compile(rb"\x1f\x8b\x08"), "application/x-gzip"),
]

# Control bytes that never appear in plain text
_BINARY_BYTES = frozenset(
    list(range(0x00, 0x09)) + [0x0B] + list(range(0x0E, 0x1B)) + list(range(0x1C, 0x20))
)


def sniff_format(data: bytes) -> str:
    """
    Classify the data by inspecting at most its first 512 bytes.
    Unknown binary content is application/octet-stream; content without
    control bytes is plain text. Nothing is decoded.
    """
    window = data[:SNIFF_LEN]
    for pattern, content_type in _SIGNATURES:
        if pattern.match(window):
            return content_type
    if window and not any(byte in _BINARY_BYTES for byte in window):
        return TEXT_PLAIN
    return OCTET_STREAM


def require_format(data: bytes, expected: str = PNG) -> str:
    """Sniff ``data`` and fail unless it matches ``expected``."""
    content_type = sniff_format(data)
    if content_type != expected:
        raise FormatError(
            f"Provided watermark image is a {content_type}, not a PNG."
        )
    return content_type


def decode(data: bytes, max_pixels: Optional[int] = None) -> Image.Image:
    """
    Decode PNG bytes into a fully loaded image.
    Images with more than max_pixels pixels are rejected before their pixel
    data is decompressed.
    """
    try:
        image = Image.open(BytesIO(data), formats=["PNG"])
        if max_pixels is not None and image.width * image.height > max_pixels:
            raise DecodeError(
                f"image is {image.width}x{image.height}, "
                f"larger than the limit of {max_pixels} pixels"
            )
        # Force pixel decoding so truncated files fail here
        image.load()
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as exc:
        raise DecodeError(f"could not decode PNG image: {exc}") from exc
    return image


def encode(image: Image.Image) -> bytes:
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()
