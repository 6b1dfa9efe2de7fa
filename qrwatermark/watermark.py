"""Resize watermark images and composite them over QR codes."""

from typing import Tuple

from PIL import Image

from qrwatermark.errors import CompositeError, ResizeError


def resize(image: Image.Image, width: int) -> Image.Image:
    """
    Scale the image to the given width, preserving its aspect ratio.
    Uses Lanczos resampling and always returns RGBA. An empty source or a
    non-positive width raises ResizeError.
    """
    src_width, src_height = image.size
    if src_width == 0 or src_height == 0:
        raise ResizeError(f"cannot resize an empty {src_width}x{src_height} image")
    if width <= 0:
        raise ResizeError(f"invalid target width: {width}")

    height = max(1, int(0.7 + src_height * width / src_width))
    try:
        return image.convert("RGBA").resize(
            (width, height), resample=Image.Resampling.LANCZOS
        )
    except (OSError, ValueError) as exc:
        raise ResizeError(f"could not resize image: {exc}") from exc


def center_offset(size: int, watermark_size: Tuple[int, int]) -> Tuple[int, int]:
    """Top-left position that centers ``watermark_size`` in a ``size`` square."""
    width, height = watermark_size
    return size // 2 - width // 2, size // 2 - height // 2


def composite(base: Image.Image, watermark: Image.Image, size: int) -> Image.Image:
    """
    Draw the watermark centered over the base and return a new RGBA image.
    The watermark blends using its own alpha; parts outside the base are clipped.
    """
    x, y = center_offset(size, watermark.size)
    try:
        output = Image.new("RGBA", base.size)
        output.paste(base.convert("RGBA"), (0, 0))

        # Intersect the watermark footprint with the output bounds
        left, top = max(x, 0), max(y, 0)
        right = min(x + watermark.width, output.width)
        bottom = min(y + watermark.height, output.height)
        if left < right and top < bottom:
            visible = watermark.convert("RGBA").crop(
                (left - x, top - y, right - x, bottom - y)
            )
            output.alpha_composite(visible, dest=(left, top))
    except (OSError, ValueError) as exc:
        raise CompositeError(f"could not add watermark to QR code: {exc}") from exc
    return output
