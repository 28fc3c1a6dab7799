"""Delivery of Telegram updates to the photo ingestor.

Updates arrive either through ``POST /telegram/webhook`` (when a webhook
secret is configured) or through the long-polling loop started at app
start-up.
"""
from __future__ import annotations

import asyncio
import hmac
import logging
from typing import Any

from fastapi import APIRouter, Header, HTTPException, Request

from pixelrelay.config import get_settings
from pixelrelay.dependencies import get_photo_ingestor
from pixelrelay.services.photo_ingest import PhotoIngestor
from pixelrelay.services.telegram import TelegramClient

router = APIRouter()
settings = get_settings()
logger = logging.getLogger(__name__)

POLL_TIMEOUT = 30
POLL_ERROR_PAUSE = 5.0


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def verify_secret(secret_header: str | None) -> None:
    expected = settings.telegram_webhook_secret
    if not expected:
        raise HTTPException(status_code=403, detail="Webhook disabled")
    if secret_header is None:
        raise HTTPException(status_code=403, detail="Missing secret token header")
    if not hmac.compare_digest(expected, secret_header):
        raise HTTPException(status_code=403, detail="Invalid secret token")


# ---------------------------------------------------------------------------
# POST webhook
# ---------------------------------------------------------------------------


@router.post("/telegram/webhook")
async def receive_update(
    request: Request,
    x_telegram_bot_api_secret_token: str | None = Header(None, alias="X-Telegram-Bot-Api-Secret-Token"),
):
    verify_secret(x_telegram_bot_api_secret_token)

    try:
        update: dict[str, Any] = await request.json()
    except ValueError as exc:
        logger.error("Malformed update payload: %s", exc)
        raise HTTPException(status_code=400, detail="Bad payload") from exc
    logger.debug("Telegram update: %s", update)

    handled = await get_photo_ingestor().handle_update(update)
    return {"status": "received" if handled else "ignored"}


# ---------------------------------------------------------------------------
# Long polling
# ---------------------------------------------------------------------------


async def poll_updates(client: TelegramClient, ingestor: PhotoIngestor, *, timeout: int = POLL_TIMEOUT) -> None:
    """Fetch updates forever, acknowledging each one before moving on."""

    offset: int | None = None
    logger.info("Telegram bot started and listening for photos")
    while True:
        try:
            updates = await client.get_updates(offset, timeout=timeout)
        except Exception as exc:
            logger.error("getUpdates failed: %s", exc)
            await asyncio.sleep(POLL_ERROR_PAUSE)
            continue

        for update in updates:
            offset = update["update_id"] + 1
            try:
                await ingestor.handle_update(update)
            except Exception as exc:  # pragma: no cover
                logger.exception("Update %s failed: %s", update.get("update_id"), exc)
