"""Render QR codes as square PNG images of an exact pixel size."""

from dataclasses import dataclass

import qrcode
from qrcode.exceptions import DataOverflowError
from PIL import Image

from qrwatermark import QUIET_ZONE, raster
from qrwatermark.errors import EncodingError
from qrwatermark.watermark import composite


def encode(
    content: str,
    size: int,
    error_correction: int = qrcode.constants.ERROR_CORRECT_M,
) -> bytes:
    """
    Encode the content as a size x size PNG QR code.
    The symbol, quiet zone included, is drawn at the largest whole number of
    pixels per module that fits and centered on a white canvas. Content that
    is empty, over QR capacity, or too large for one pixel per module raises
    EncodingError.
    """
    if not content:
        raise EncodingError("no content to encode")

    qr = qrcode.QRCode(
        version=None,
        error_correction=error_correction,
        box_size=1,
        border=QUIET_ZONE,
    )
    qr.add_data(content)
    try:
        qr.make(fit=True)
    except (DataOverflowError, ValueError) as exc:
        raise EncodingError(f"content cannot be encoded: {exc}") from exc

    modules = qr.modules_count + 2 * QUIET_ZONE
    pixels_per_module = size // modules
    if pixels_per_module < 1:
        raise EncodingError(
            f"size {size}px is too small for this content, "
            f"at least {modules}px is required"
        )

    qr.box_size = pixels_per_module
    symbol = qr.make_image(fill_color="black", back_color="white").convert("RGB")

    canvas = Image.new("RGB", (size, size), "white")
    offset = (size - modules * pixels_per_module) // 2
    canvas.paste(symbol, (offset, offset))
    return raster.encode(canvas)


@dataclass(frozen=True)
class QRCode:
    content: str
    size: int

    def generate(self) -> bytes:
        """Generate the plain QR code as PNG bytes."""
        return encode(self.content, self.size)

    def generate_with_watermark(self, watermark: Image.Image) -> bytes:
        """
        Generate the QR code with the watermark centered over it.
        The watermark should already be resized to the canonical width.
        """
        base = raster.decode(self.generate())
        return raster.encode(composite(base, watermark, self.size))
