"""Configuration management."""

import os
from typing import Tuple

from qrwatermark import MAX_UPLOAD_SIZE, WATERMARK_WIDTH


# Server
ADDR = os.getenv("QR_SERVER_ADDR", ":8080")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Request limits
MAX_CONTENT_LENGTH = int(os.getenv("QR_MAX_UPLOAD_SIZE", str(MAX_UPLOAD_SIZE)))
QR_MAX_SIZE = int(os.getenv("QR_MAX_SIZE", "4096"))

# Watermark
QR_WATERMARK_WIDTH = int(os.getenv("QR_WATERMARK_WIDTH", str(WATERMARK_WIDTH)))
QR_MAX_WATERMARK_PIXELS = int(os.getenv("QR_MAX_WATERMARK_PIXELS", str(4096 * 4096)))


def parse_addr(addr: str) -> Tuple[str, int]:
    """Split a ``host:port`` bind address; an empty host binds all interfaces."""
    host, sep, port = addr.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"invalid bind address: {addr!r}")
    return host or "0.0.0.0", int(port)
