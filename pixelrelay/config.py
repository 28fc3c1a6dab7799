from __future__ import annotations

from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from a .env file if present (local dev only)
load_dotenv()


class Settings(BaseSettings):
    """Application configuration loaded from environment variables or .env file."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Spotify OAuth
    spotify_client_id: str = Field(...)
    spotify_client_secret: str = Field(...)
    spotify_redirect_uri: str = Field(...)
    spotify_scopes: str = Field(
        "user-read-currently-playing user-read-playback-state user-read-private",
        description="Space separated OAuth scopes requested on /login.",
    )
    refresh_token_file: str = Field("./refresh_token.cache", description="Where the refresh token is persisted.")
    token_expiry_leeway: int = Field(60, ge=0, description="Refresh the access token this many seconds before expiry.")

    # Cloud Storage
    bucket_name: str = Field("pixelrelay-photos")
    public_images: bool = Field(True, description="If true, uploaded photos are made public.")

    # Firebase
    project_id: Optional[str] = Field(default=None, description="GCP project ID")
    firebase_credentials_json: Optional[str] = Field(
        default=None,
        validation_alias="GOOGLE_APPLICATION_CREDENTIALS",
        description="Path to service-account JSON file or JSON string itself.",
    )
    firebase_database_url: Optional[str] = Field(default=None)

    # Image pipeline
    photos_window: int = Field(5, ge=1, description="How many of the most recent photos /get-photo indexes.")
    image_fetch_timeout: float = Field(10.0, gt=0)
    max_image_bytes: int = Field(10 * 1024 * 1024, gt=0)

    # Telegram
    telegram_bot_token: Optional[str] = Field(default=None)
    telegram_use_polling: bool = Field(True)
    telegram_webhook_secret: Optional[str] = Field(default=None)

    # HTTP server
    host: str = Field("0.0.0.0")
    port: int = Field(3000)
    log_level: str = Field("INFO")

    @property
    def database_url(self) -> Optional[str]:
        if self.firebase_database_url:
            return self.firebase_database_url
        if self.project_id:
            return f"https://{self.project_id}.firebaseio.com"
        return None


@lru_cache()
def get_settings() -> Settings:  # pragma: no cover
    """Return a cached Settings instance so it is only parsed once."""

    return Settings()
