from __future__ import annotations

from pydantic import BaseModel


class PlayingId(BaseModel):
    id: str = ""


class UserInfo(BaseModel):
    display_name: str | None = None
    email: str | None = None
    country: str | None = None
