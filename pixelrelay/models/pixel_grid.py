from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

GRID_SIZE = 64


class PixelGrid(BaseModel):
    """64x64 raster of packed 16-bit pixels, ``data[y][x]`` with a top-left origin."""

    model_config = ConfigDict(frozen=True)

    width: int = GRID_SIZE
    height: int = GRID_SIZE
    data: list[list[int]] = Field(..., min_length=GRID_SIZE, max_length=GRID_SIZE)
