"""Spotify OAuth token handling.

A single account authorises the service once through ``/login``; the refresh
token obtained on ``/callback`` is persisted and reloaded at start-up. Access
tokens are derived from it on demand and shared by every request.
"""
from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable

from spotipy.cache_handler import MemoryCacheHandler
from spotipy.oauth2 import SpotifyOAuth, SpotifyOauthError

from pixelrelay.config import Settings
from .token_store import RefreshTokenStore

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Raised when no usable access token can be obtained."""


class SpotifyTokenProvider:
    """Hands out a valid access token, refreshing it at most once at a time.

    Parallel requests that find the token expired serialise on ``_lock``;
    the first one refreshes and the others reuse its result.
    """

    def __init__(
        self,
        oauth: SpotifyOAuth,
        store: RefreshTokenStore,
        *,
        leeway: int = 60,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._oauth = oauth
        self._store = store
        self._leeway = leeway
        self._clock = clock
        self._lock = threading.Lock()
        self._access_token: str | None = None
        self._expires_at = 0.0
        self._refresh_token = store.load()
        if self._refresh_token is None:
            logger.warning("No refresh token stored yet; visit /login to authorise the account.")

    @property
    def has_refresh_token(self) -> bool:
        return self._refresh_token is not None

    def authorize_url(self) -> str:
        return self._oauth.get_authorize_url()

    def exchange_code(self, code: str) -> None:
        """Run the authorization-code grant and persist the refresh token."""

        try:
            self._oauth.get_access_token(code, as_dict=False, check_cache=False)
        except (SpotifyOauthError, OSError) as exc:
            raise AuthError(f"Token exchange failed: {exc}") from exc

        token_info = self._oauth.cache_handler.get_cached_token()
        if not token_info or not token_info.get("refresh_token"):
            raise AuthError("Token exchange returned no refresh token")
        with self._lock:
            self._apply(token_info)
        logger.info("Spotify account authorised")

    def get_access_token(self) -> str:
        with self._lock:
            if self._access_token and self._clock() < self._expires_at - self._leeway:
                return self._access_token
            if self._refresh_token is None:
                raise AuthError("No refresh token available; authorise through /login first")

            logger.debug("Refreshing Spotify access token")
            try:
                token_info = self._oauth.refresh_access_token(self._refresh_token)
            except (SpotifyOauthError, OSError) as exc:
                raise AuthError(f"Token refresh failed: {exc}") from exc
            self._apply(token_info)
            return self._access_token  # type: ignore[return-value]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _apply(self, token_info: dict[str, Any]) -> None:
        self._access_token = token_info["access_token"]
        self._expires_at = float(token_info.get("expires_at") or self._clock() + token_info.get("expires_in", 3600))
        refresh_token = token_info.get("refresh_token")
        if refresh_token and refresh_token != self._refresh_token:
            self._refresh_token = refresh_token
            self._store.save(refresh_token)


def build_oauth(settings: Settings) -> SpotifyOAuth:
    return SpotifyOAuth(
        client_id=settings.spotify_client_id,
        client_secret=settings.spotify_client_secret,
        redirect_uri=settings.spotify_redirect_uri,
        scope=settings.spotify_scopes,
        cache_handler=MemoryCacheHandler(),
        open_browser=False,
    )
