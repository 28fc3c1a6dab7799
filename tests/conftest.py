from __future__ import annotations

import io
import os

# Settings are read at import time by the handler modules.
os.environ.setdefault("SPOTIFY_CLIENT_ID", "test-client-id")
os.environ.setdefault("SPOTIFY_CLIENT_SECRET", "test-client-secret")
os.environ.setdefault("SPOTIFY_REDIRECT_URI", "http://localhost:3000/callback")
os.environ.setdefault("TELEGRAM_WEBHOOK_SECRET", "hook-secret")
os.environ.pop("TELEGRAM_BOT_TOKEN", None)

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from pixelrelay import dependencies
from pixelrelay.main import app
from pixelrelay.models import PhotoRecord
from pixelrelay.services.image_fetch import FetchError


def make_image_bytes(size=(64, 64), color=(0, 0, 0), fmt="PNG") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


class FakeSpotify:
    def __init__(self, *, playing=None, state=None, profile=None, error: Exception | None = None):
        self.playing = playing
        self.state = state
        self.profile = profile or {}
        self.error = error

    def _maybe_fail(self):
        if self.error is not None:
            raise self.error

    def currently_playing(self):
        self._maybe_fail()
        return self.playing

    def playback_state(self):
        self._maybe_fail()
        return self.state

    def me(self):
        self._maybe_fail()
        return self.profile

    @staticmethod
    def cover_url(playing):
        from pixelrelay.services.spotify import SpotifyService

        return SpotifyService.cover_url(playing)


class FakeFetcher:
    def __init__(self, images: dict[str, bytes] | None = None):
        self.images = images or {}
        self.requested: list[str] = []

    def fetch(self, url: str) -> bytes:
        self.requested.append(url)
        if url not in self.images:
            raise FetchError(f"no image at {url}")
        return self.images[url]


class FakePhotoStore:
    def __init__(self, records: list[PhotoRecord] | None = None, error: Exception | None = None):
        self.records = records or []
        self.added: list[PhotoRecord] = []
        self.error = error

    def recent_photos(self, limit: int = 5, *, offset: int = 0):
        if self.error is not None:
            raise self.error
        ordered = sorted(self.records, key=lambda r: r.created_at, reverse=True)
        return ordered[offset:offset + limit]

    def add_photo(self, record: PhotoRecord) -> str:
        if self.error is not None:
            raise self.error
        self.added.append(record)
        return f"photo-{len(self.added)}"


class FakeStorage:
    def __init__(self, blobs: dict[str, str] | None = None, error: Exception | None = None):
        self.blobs = blobs or {}
        self.uploads: list[tuple[bytes, str]] = []
        self.error = error

    def public_url(self, file_name: str):
        if self.error is not None:
            raise self.error
        return self.blobs.get(file_name)

    def upload_photo(self, file_bytes: bytes, *, content_type: str = "image/jpeg"):
        if self.error is not None:
            raise self.error
        self.uploads.append((file_bytes, content_type))
        name = f"upload-{len(self.uploads)}.jpg"
        url = f"https://storage.googleapis.com/bucket/{name}"
        self.blobs[name] = url
        return name, url


@pytest.fixture
def overrides():
    yield app.dependency_overrides
    app.dependency_overrides.clear()


@pytest.fixture
def client(overrides):
    return TestClient(app)


@pytest.fixture
def use(overrides):
    """Install fakes for the app's collaborators: ``use(spotify=..., fetcher=...)``."""

    getters = {
        "spotify": dependencies.get_spotify_service,
        "fetcher": dependencies.get_image_fetcher,
        "photos": dependencies.get_photo_store,
        "storage": dependencies.get_storage_service,
        "tokens": dependencies.get_token_provider,
    }

    def _provider(fake):
        # A zero-argument override, so FastAPI does not treat the fake as a query parameter.
        return lambda: fake

    def install(**fakes):
        for name, fake in fakes.items():
            overrides[getters[name]] = _provider(fake)
        return fakes

    return install
