"""Thin wrapper over the Spotify Web API calls the relay needs."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import spotipy

from .spotify_auth import SpotifyTokenProvider

logger = logging.getLogger(__name__)


class SpotifyServiceError(Exception):
    """Raised when a Spotify Web API call fails."""


class SpotifyService:
    def __init__(self, tokens: SpotifyTokenProvider, *, timeout: float = 10.0) -> None:
        self._tokens = tokens
        self._timeout = timeout

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def currently_playing(self) -> Optional[Dict[str, Any]]:
        """Currently playing object, ``None`` when nothing is playing."""
        return self._call("current_user_playing_track")

    def playback_state(self) -> Optional[Dict[str, Any]]:
        return self._call("current_playback")

    def me(self) -> Dict[str, Any]:
        return self._call("me") or {}

    @staticmethod
    def cover_url(playing: Dict[str, Any] | None) -> str | None:
        """URL of the largest album image of the playing item, if any."""

        item = (playing or {}).get("item") or {}
        images = (item.get("album") or {}).get("images") or []
        if not images:
            return None
        return images[0].get("url")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _call(self, method: str) -> Any:
        # AuthError from the token provider propagates unchanged.
        client = spotipy.Spotify(auth=self._tokens.get_access_token(), requests_timeout=self._timeout)
        logger.debug("Spotify %s", method)
        try:
            return getattr(client, method)()
        except spotipy.SpotifyException as exc:
            raise SpotifyServiceError(f"Spotify {method} failed with HTTP {exc.http_status}: {exc.msg}") from exc
        except OSError as exc:
            raise SpotifyServiceError(f"Spotify {method} failed: {exc}") from exc
