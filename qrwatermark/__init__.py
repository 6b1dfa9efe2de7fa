"""QR code generation server with optional centered PNG watermarks."""

__version__ = "1.0.0"

# Shared constants
WATERMARK_WIDTH = 64  # Canonical watermark width in pixels
MAX_UPLOAD_SIZE = 1024 * 1024  # 1MB cap on the raw request body
QUIET_ZONE = 4  # Border around the symbol, in modules
