"""Google Cloud Storage helper for the photo bucket.

Photos submitted through the bot are stored flat at the bucket root under a
random name:

    {uuid4}.{ext}

``/get-photo-url`` resolves such a name back to its public URL.
"""
from __future__ import annotations

import logging
import uuid
from typing import Tuple

from google.api_core import exceptions as gcs_exceptions
from google.cloud import storage

from pixelrelay.config import get_settings

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when the bucket cannot be written to or queried."""


class StorageService:  # pylint: disable=too-few-public-methods
    """Wrapper around Google Cloud Storage uploads and public URLs."""

    _VALID_IMAGE_PREFIX = "image/"

    def __init__(
        self,
        bucket: storage.Bucket,
        *,
        public: bool = True,
        max_upload_bytes: int = 10 * 1024 * 1024,
    ) -> None:
        self._bucket = bucket
        self._public = public
        self._max_upload_bytes = max_upload_bytes

    # ------------------------------------------------------------------
    # Public helpers
    # ------------------------------------------------------------------

    def upload_photo(self, file_bytes: bytes, *, content_type: str = "image/jpeg") -> Tuple[str, str]:
        """Upload a photo and return ``(blob_name, public_url)``.

        Parameters
        ----------
        file_bytes : bytes
            Raw image bytes as received from the chat.
        content_type : str
            Mime type, must start with ``image/``.
        """

        if not content_type.startswith(self._VALID_IMAGE_PREFIX):
            raise ValueError("Unsupported content_type; expected image/*, got %s" % content_type)

        if len(file_bytes) > self._max_upload_bytes:
            raise ValueError("Image exceeds %d byte size limit." % self._max_upload_bytes)

        blob_name = f"{uuid.uuid4()}.{_content_type_to_extension(content_type)}"
        blob = self._bucket.blob(blob_name)
        try:
            blob.upload_from_string(file_bytes, content_type=content_type)
            if self._public:
                blob.make_public()
        except gcs_exceptions.GoogleAPIError as exc:
            raise StorageError(str(exc)) from exc

        logger.debug("Uploaded photo to gs://%s/%s", self._bucket.name, blob_name)
        return blob_name, blob.public_url

    def public_url(self, file_name: str) -> str | None:
        """Public URL of *file_name*, or ``None`` if no such blob exists."""

        blob = self._bucket.blob(file_name)
        try:
            exists = blob.exists()
        except gcs_exceptions.GoogleAPIError as exc:
            raise StorageError(str(exc)) from exc
        if not exists:
            logger.debug("Blob %s not found in bucket %s", file_name, self._bucket.name)
            return None
        return blob.public_url


# ------------------------------------------------------------------
# Helper functions
# ------------------------------------------------------------------

def _content_type_to_extension(content_type: str) -> str:
    mapping = {
        "image/jpeg": "jpg",
        "image/jpg": "jpg",
        "image/png": "png",
        "image/webp": "webp",
    }
    return mapping.get(content_type.lower(), "jpg")


def build_storage_service() -> StorageService:
    settings = get_settings()
    client = storage.Client(project=settings.project_id)
    bucket = client.bucket(settings.bucket_name)
    return StorageService(bucket, public=settings.public_images, max_upload_bytes=settings.max_image_bytes)
