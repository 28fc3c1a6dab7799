"""Process-wide collaborators, built lazily and injected with ``Depends``."""
from __future__ import annotations

from functools import lru_cache

from pixelrelay.config import get_settings
from pixelrelay.services.firebase_db import FirebasePhotoStore, build_photo_store
from pixelrelay.services.image_fetch import ImageFetcher, build_image_fetcher
from pixelrelay.services.photo_ingest import PhotoIngestor
from pixelrelay.services.spotify import SpotifyService
from pixelrelay.services.spotify_auth import SpotifyTokenProvider, build_oauth
from pixelrelay.services.storage import StorageService, build_storage_service
from pixelrelay.services.telegram import TelegramClient
from pixelrelay.services.token_store import FileRefreshTokenStore


@lru_cache()
def get_token_provider() -> SpotifyTokenProvider:
    settings = get_settings()
    return SpotifyTokenProvider(
        build_oauth(settings),
        FileRefreshTokenStore(settings.refresh_token_file),
        leeway=settings.token_expiry_leeway,
    )


@lru_cache()
def get_spotify_service() -> SpotifyService:
    return SpotifyService(get_token_provider())


@lru_cache()
def get_image_fetcher() -> ImageFetcher:
    return build_image_fetcher()


@lru_cache()
def get_storage_service() -> StorageService:
    return build_storage_service()


@lru_cache()
def get_photo_store() -> FirebasePhotoStore:
    return build_photo_store()


@lru_cache()
def get_telegram_client() -> TelegramClient:
    token = get_settings().telegram_bot_token
    if not token:
        raise RuntimeError("TELEGRAM_BOT_TOKEN is not configured")
    return TelegramClient(token=token)


def get_photo_ingestor() -> PhotoIngestor:
    return PhotoIngestor(get_telegram_client(), get_storage_service(), get_photo_store())
