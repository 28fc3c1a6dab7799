from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field

from .pixel_grid import PixelGrid


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PhotoRecord(BaseModel):
    """A photo submitted through the bot, as stored under ``/photos``."""

    id: str | None = None
    photo_url: str
    username: str = ""
    title: str = ""
    created_at: datetime = Field(default_factory=_utcnow)


class PhotoResponse(BaseModel):
    photo: PixelGrid
    title: str
    username: str


class PhotoURLResponse(BaseModel):
    publicURL: str
