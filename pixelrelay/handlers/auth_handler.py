"""OAuth handshake with Spotify (run once to authorise the account)."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse, RedirectResponse

from pixelrelay.dependencies import get_token_provider
from pixelrelay.services.spotify_auth import AuthError, SpotifyTokenProvider

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/login")
def login(tokens: SpotifyTokenProvider = Depends(get_token_provider)):
    return RedirectResponse(tokens.authorize_url())


@router.get("/callback", response_class=PlainTextResponse)
def callback(code: str | None = None, tokens: SpotifyTokenProvider = Depends(get_token_provider)):
    if not code:
        raise HTTPException(status_code=400, detail='Error: falta el parámetro "code".')
    try:
        tokens.exchange_code(code)
    except AuthError as exc:
        logger.exception("Token exchange failed: %s", exc)
        raise HTTPException(status_code=500, detail="Error al obtener el token.") from exc
    return "¡Autorización exitosa! Ahora puedes usar el servidor."
