"""Firebase Realtime Database helper for photo records.

Records live under the following path structure:

/photos/{push_id} -> {photo_url, username, title, created_at}

All data is validated with Pydantic models before being written or
returned.
"""
from __future__ import annotations

import json
import logging
from typing import Any, List

import firebase_admin
from firebase_admin import credentials, db
from firebase_admin.exceptions import FirebaseError

from pixelrelay.config import Settings, get_settings
from pixelrelay.models import PhotoRecord

logger = logging.getLogger(__name__)

PHOTOS_PATH = "photos"


class PhotoStoreError(Exception):
    """Raised when the photo records cannot be read or written."""


# ---------------------------------------------------------------------------
# Initialise the Firebase Admin SDK exactly once.
# ---------------------------------------------------------------------------


def init_firebase(settings: Settings) -> None:
    if firebase_admin._apps:  # type: ignore[attr-defined]
        return
    try:
        if settings.firebase_credentials_json:
            # Accept path or JSON string
            cred_obj: credentials.Base = (
                credentials.Certificate(settings.firebase_credentials_json)
                if settings.firebase_credentials_json.endswith(".json")
                else credentials.Certificate(json.loads(settings.firebase_credentials_json))
            )
        else:
            # Attempt default credentials (useful on Cloud Run with workload identity)
            cred_obj = credentials.ApplicationDefault()

        firebase_admin.initialize_app(cred_obj, {"databaseURL": settings.database_url})
        logger.info("Firebase Admin SDK initialised.")
    except Exception as exc:  # pragma: no cover
        logger.exception("Failed to initialise Firebase Admin SDK: %s", exc)
        raise


# ---------------------------------------------------------------------------
# Helper class
# ---------------------------------------------------------------------------


def _validate_photo_dict(data: dict[str, Any]) -> dict[str, Any]:
    record = PhotoRecord.model_validate(data)
    return record.model_dump(mode="json")


def newest_first(raw_items: dict[str, Any] | None, *, limit: int, offset: int = 0) -> List[PhotoRecord]:
    """Turn a ``{push_id: data}`` query result into records, newest first."""

    records = [
        PhotoRecord.model_validate({**data, "id": data.get("id") or key})
        for key, data in (raw_items or {}).items()
    ]
    records.sort(key=lambda p: p.created_at, reverse=True)
    return records[offset:offset + limit]


class FirebasePhotoStore:  # pylint: disable=too-few-public-methods
    """Wrapper around the ``/photos`` node of the Realtime Database."""

    def __init__(self, root: db.Reference | None = None) -> None:
        self._root = root if root is not None else db.reference("/")

    def _photos_ref(self):
        return self._root.child(PHOTOS_PATH)

    def add_photo(self, record: PhotoRecord | dict[str, Any]) -> str:
        if isinstance(record, PhotoRecord):
            data = record.model_dump(mode="json", exclude={"id"})
        else:
            data = _validate_photo_dict(record)
            data.pop("id", None)

        try:
            # push() returns a reference with a generated key
            push_ref = self._photos_ref().push()
            push_ref.set(data)
        except (FirebaseError, ValueError) as exc:
            raise PhotoStoreError(str(exc)) from exc
        logger.debug("Added photo id=%s url=%s", push_ref.key, data["photo_url"])
        return push_ref.key  # type: ignore[return-value]

    def recent_photos(self, limit: int = 5, *, offset: int = 0) -> List[PhotoRecord]:
        query = self._photos_ref().order_by_child("created_at").limit_to_last(limit + offset)
        try:
            raw_items = query.get()
        except (FirebaseError, ValueError) as exc:
            raise PhotoStoreError(str(exc)) from exc
        return newest_first(raw_items, limit=limit, offset=offset)


def build_photo_store() -> FirebasePhotoStore:
    init_firebase(get_settings())
    return FirebasePhotoStore()
