"""Conversion of arbitrary images into 64x64 RGB565 pixel grids.

The LED matrix consumes one 16-bit integer per pixel. The packing order is
blue in bits 15-11, red in bits 10-5 and green in bits 4-0, which is what the
display firmware reads:

    value = ((B & 0b11111000) << 8) | ((R & 0b11111100) << 3) | (G >> 3)

Conversions are pure functions of the input bytes and the crop mode.
"""
from __future__ import annotations

import enum
import io
import logging
from typing import Tuple

from PIL import Image, UnidentifiedImageError

from pixelrelay.models import GRID_SIZE, PixelGrid

logger = logging.getLogger(__name__)

_RESAMPLE = Image.Resampling.LANCZOS


class DecodeError(Exception):
    """Raised when source bytes are not a supported image format."""


class CropMode(str, enum.Enum):
    NONE = "none"
    CENTER_SQUARE = "center-square"


def pack_rgb565(r: int, g: int, b: int) -> int:
    """Pack 8-bit channels into the display's 16-bit B5-R6-G5 layout."""

    return ((b & 0b11111000) << 8) | ((r & 0b11111100) << 3) | (g >> 3)


def center_square_box(width: int, height: int) -> Tuple[int, int, int, int]:
    """Return the ``(left, top, right, bottom)`` box of the centered square."""

    size = min(width, height)
    left = (width - size) // 2
    top = (height - size) // 2
    return left, top, left + size, top + size


def convert_image(data: bytes, crop: CropMode = CropMode.NONE) -> PixelGrid:
    """Decode *data*, optionally crop it, and pack it into a 64x64 grid.

    Parameters
    ----------
    data : bytes
        Encoded image (JPEG, PNG, WebP, ... anything Pillow can open).
    crop : CropMode
        ``CENTER_SQUARE`` crops the longer axis down to the shorter one,
        keeping the crop centered, before resizing.
    """

    crop = CropMode(crop)
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            if crop is CropMode.CENTER_SQUARE:
                img = img.crop(center_square_box(*img.size))
            if img.mode.startswith("I"):
                # 16-bit samples are scaled down, convert() would clip them at 255.
                img = img.convert("I").point(lambda v: v * (1 / 256)).convert("L")
            # Alpha is forced so every pixel is 4 bytes wide, then ignored.
            resized = img.convert("RGBA").resize((GRID_SIZE, GRID_SIZE), _RESAMPLE)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as exc:
        raise DecodeError(f"Unsupported or corrupt image: {exc}") from exc

    raw = resized.tobytes()
    rows = []
    for y in range(GRID_SIZE):
        row = []
        for x in range(GRID_SIZE):
            idx = (y * GRID_SIZE + x) * 4
            row.append(pack_rgb565(raw[idx], raw[idx + 1], raw[idx + 2]))
        rows.append(row)

    logger.debug("Converted %d-byte image (crop=%s) to %dx%d grid", len(data), crop.value, GRID_SIZE, GRID_SIZE)
    return PixelGrid(width=GRID_SIZE, height=GRID_SIZE, data=rows)
