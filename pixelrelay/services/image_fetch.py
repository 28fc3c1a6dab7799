"""Download of remote images (album covers, stored photos) as raw bytes."""
from __future__ import annotations

import logging

import httpx

from pixelrelay.config import get_settings

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """Raised when an image cannot be retrieved from its URL."""


class ImageFetcher:  # pylint: disable=too-few-public-methods
    """Synchronous HTTP client used by the raster endpoints."""

    def __init__(self, *, timeout: float = 10.0, max_bytes: int = 10 * 1024 * 1024, client: httpx.Client | None = None) -> None:
        self._max_bytes = max_bytes
        self._client = client or httpx.Client(timeout=timeout, follow_redirects=True)

    def fetch(self, url: str) -> bytes:
        logger.debug("GET image %s", url)
        try:
            resp = self._client.get(url)
        except httpx.HTTPError as exc:
            raise FetchError(f"Request for {url} failed: {exc}") from exc
        if resp.status_code >= 400:
            raise FetchError(f"Image download returned HTTP {resp.status_code} for {url}")
        if len(resp.content) > self._max_bytes:
            raise FetchError(f"Image at {url} exceeds {self._max_bytes} bytes")
        return resp.content

    def close(self) -> None:
        self._client.close()


def build_image_fetcher() -> ImageFetcher:
    settings = get_settings()
    return ImageFetcher(timeout=settings.image_fetch_timeout, max_bytes=settings.max_image_bytes)
