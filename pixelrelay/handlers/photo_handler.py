"""Endpoints serving photos ingested by the bot."""
from __future__ import annotations

import logging
import re
import unicodedata

from fastapi import APIRouter, Depends, HTTPException, Query

from pixelrelay.config import get_settings
from pixelrelay.dependencies import get_image_fetcher, get_photo_store, get_storage_service
from pixelrelay.models import PhotoResponse, PhotoURLResponse
from pixelrelay.services.firebase_db import FirebasePhotoStore, PhotoStoreError
from pixelrelay.services.image_fetch import FetchError, ImageFetcher
from pixelrelay.services.storage import StorageError, StorageService
from pixelrelay.utils.raster import CropMode, DecodeError, convert_image

router = APIRouter()
settings = get_settings()
logger = logging.getLogger(__name__)

_INDEX_RE = re.compile(r"\d+")


def strip_accents(text: str) -> str:
    """Drop combining diacritics so the display font can render *text*."""

    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not "\u0300" <= ch <= "\u036f")


@router.get("/get-photo-url", response_model=PhotoURLResponse)
def get_photo_url(
    file_name: str | None = Query(None, alias="fileName"),
    storage: StorageService = Depends(get_storage_service),
):
    if not file_name:
        raise HTTPException(status_code=400, detail='Error: falta el parámetro "fileName".')
    try:
        url = storage.public_url(file_name)
    except StorageError as exc:
        logger.exception("/get-photo-url error: %s", exc)
        raise HTTPException(status_code=500, detail="Error al procesar la solicitud.") from exc
    if url is None:
        raise HTTPException(status_code=404, detail="Archivo no encontrado.")
    return PhotoURLResponse(publicURL=url)


@router.get("/get-photo", response_model=PhotoResponse)
def get_photo(
    photo_id: str | None = Query(None, alias="id"),
    photos: FirebasePhotoStore = Depends(get_photo_store),
    fetcher: ImageFetcher = Depends(get_image_fetcher),
):
    logger.debug("Photo requested: id=%r", photo_id)
    if photo_id is None or not _INDEX_RE.fullmatch(photo_id.strip()):
        raise HTTPException(status_code=400, detail='Error: parámetro "id" inválido.')
    try:
        index = int(photo_id)
    except ValueError:
        # Too many digits to convert; far past any stored photo.
        raise HTTPException(status_code=404, detail="Foto no encontrada.") from None

    try:
        recent = photos.recent_photos(settings.photos_window)
    except PhotoStoreError as exc:
        logger.exception("Fetching photos failed: %s", exc)
        raise HTTPException(status_code=500, detail="Error al obtener las fotos.") from exc

    if index >= len(recent):
        raise HTTPException(status_code=404, detail="Foto no encontrada.")

    photo = recent[index]
    try:
        grid = convert_image(fetcher.fetch(photo.photo_url), CropMode.CENTER_SQUARE)
    except (FetchError, DecodeError) as exc:
        logger.exception("/get-photo error: %s", exc)
        raise HTTPException(status_code=500, detail="Error al procesar la solicitud.") from exc

    return PhotoResponse(photo=grid, title=strip_accents(photo.title), username=strip_accents(photo.username))
