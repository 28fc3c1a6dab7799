"""Endpoints relaying the current Spotify playback to the display."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from pixelrelay.dependencies import get_image_fetcher, get_spotify_service
from pixelrelay.models import PixelGrid, PlayingId, UserInfo
from pixelrelay.services.image_fetch import FetchError, ImageFetcher
from pixelrelay.services.spotify import SpotifyService, SpotifyServiceError
from pixelrelay.services.spotify_auth import AuthError
from pixelrelay.utils.raster import CropMode, DecodeError, convert_image

router = APIRouter()
logger = logging.getLogger(__name__)

NOTHING_PLAYING = "No se está reproduciendo ninguna canción."


@router.get("/cover-64x64", response_model=PixelGrid)
def cover_64x64(
    spotify: SpotifyService = Depends(get_spotify_service),
    fetcher: ImageFetcher = Depends(get_image_fetcher),
):
    try:
        playing = spotify.currently_playing()
        if not playing or not playing.get("item"):
            raise HTTPException(status_code=404, detail=NOTHING_PLAYING)
        cover_url = spotify.cover_url(playing)
        if not cover_url:
            raise HTTPException(status_code=404, detail="La canción actual no tiene portada.")
        return convert_image(fetcher.fetch(cover_url), CropMode.NONE)
    except (AuthError, SpotifyServiceError, FetchError, DecodeError) as exc:
        logger.exception("/cover-64x64 error: %s", exc)
        raise HTTPException(status_code=500, detail="Error al procesar la portada.") from exc


@router.get("/id-playing", response_model=PlayingId)
def id_playing(spotify: SpotifyService = Depends(get_spotify_service)):
    try:
        state = spotify.playback_state()
    except (AuthError, SpotifyServiceError) as exc:
        logger.exception("/id-playing error: %s", exc)
        return JSONResponse(status_code=500, content={"error": "Error al obtener la canción actual."})

    if not state or state.get("is_playing") is False:
        return PlayingId(id="")
    item = state.get("item")
    song_id = item.get("id") if item else state.get("id")
    return PlayingId(id=song_id or "")


@router.get("/me", response_model=UserInfo)
def me(spotify: SpotifyService = Depends(get_spotify_service)):
    try:
        profile = spotify.me()
    except (AuthError, SpotifyServiceError) as exc:
        logger.exception("/me error: %s", exc)
        raise HTTPException(status_code=500, detail="Error al obtener información del usuario.") from exc
    return UserInfo(
        display_name=profile.get("display_name"),
        email=profile.get("email"),
        country=profile.get("country"),
    )
