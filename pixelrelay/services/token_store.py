"""Persistence of the long-lived Spotify refresh token.

The file backing keeps the token as bare text, one token per file, so an
existing ``refresh_token.cache`` keeps working across restarts.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path

logger = logging.getLogger(__name__)


class RefreshTokenStore(ABC):
    """Load-at-startup / save-on-update storage for the refresh token."""

    @abstractmethod
    def load(self) -> str | None:
        """Return the stored token, or ``None`` if nothing was saved yet."""

    @abstractmethod
    def save(self, token: str) -> None:
        ...


class FileRefreshTokenStore(RefreshTokenStore):
    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    def load(self) -> str | None:
        if not self._path.exists():
            return None
        token = self._path.read_text(encoding="utf-8").strip()
        if not token:
            return None
        logger.info("Refresh token loaded from %s", self._path)
        return token

    def save(self, token: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(token, encoding="utf-8")
        logger.info("Refresh token saved to %s", self._path)


class MemoryRefreshTokenStore(RefreshTokenStore):
    def __init__(self, token: str | None = None) -> None:
        self._token = token

    def load(self) -> str | None:
        return self._token

    def save(self, token: str) -> None:
        self._token = token
