"""Ingestion of photos sent to the Telegram bot.

Each photo is uploaded to the bucket and recorded under ``/photos`` so that
``/get-photo`` can serve it to the display. The sender always gets a text
reply describing the outcome.
"""
from __future__ import annotations

import logging
from typing import Any

from starlette.concurrency import run_in_threadpool

from pixelrelay.models import PhotoRecord
from .firebase_db import FirebasePhotoStore, PhotoStoreError
from .storage import StorageError, StorageService
from .telegram import TelegramClient

logger = logging.getLogger(__name__)

REPLY_OK = "✔️ Imagen subida correctamente"
REPLY_UPLOAD_FAILED = "Error al subir la imagen: {}"
REPLY_INSERT_FAILED = "Error al guardar la foto: {}"
REPLY_GENERIC_FAILURE = "Ocurrió un error al procesar la foto."


class PhotoIngestor:
    def __init__(self, telegram: TelegramClient, storage: StorageService, photos: FirebasePhotoStore) -> None:
        self._telegram = telegram
        self._storage = storage
        self._photos = photos

    async def handle_update(self, update: dict[str, Any]) -> bool:
        message = update.get("message")
        if not message:
            return False
        return await self.handle_message(message)

    async def handle_message(self, message: dict[str, Any]) -> bool:
        """Ingest the photo carried by *message*; returns False if it has none."""

        sizes = message.get("photo") or []
        if not sizes:
            return False

        chat_id = message["chat"]["id"]
        # Telegram lists sizes smallest first.
        file_id = sizes[-1]["file_id"]
        sender = message.get("from") or {}

        try:
            file_path = await self._telegram.get_file(file_id)
            file_bytes = await self._telegram.download_file(file_path)

            try:
                _, url = await run_in_threadpool(self._storage.upload_photo, file_bytes, content_type="image/jpeg")
            except (StorageError, ValueError) as exc:
                logger.error("Photo upload failed: %s", exc)
                await self._telegram.send_text(chat_id, REPLY_UPLOAD_FAILED.format(exc))
                return True

            record = PhotoRecord(
                photo_url=url,
                username=sender.get("first_name") or "",
                title=message.get("caption") or "",
            )
            try:
                await run_in_threadpool(self._photos.add_photo, record)
            except PhotoStoreError as exc:
                logger.error("Photo record insert failed: %s", exc)
                await self._telegram.send_text(chat_id, REPLY_INSERT_FAILED.format(exc))
                return True

            await self._telegram.send_text(chat_id, REPLY_OK)
            logger.info("Ingested photo from chat %s as %s", chat_id, url)
        except Exception as exc:
            logger.exception("Processing photo failed: %s", exc)
            await self._telegram.send_text(chat_id, REPLY_GENERIC_FAILURE)
        return True
