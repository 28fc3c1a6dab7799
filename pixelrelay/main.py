from __future__ import annotations

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from pixelrelay.config import get_settings
from pixelrelay.dependencies import get_image_fetcher, get_photo_ingestor, get_telegram_client, get_token_provider
from pixelrelay.handlers import auth_handler, photo_handler, playback_handler, telegram_handler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    # Reload the persisted refresh token before the first request.
    get_token_provider()

    poller: asyncio.Task | None = None
    if settings.telegram_bot_token and settings.telegram_use_polling:
        poller = asyncio.create_task(
            telegram_handler.poll_updates(get_telegram_client(), get_photo_ingestor())
        )
    try:
        yield
    finally:
        if poller is not None:
            poller.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await poller
        if settings.telegram_bot_token:
            await get_telegram_client().close()
        get_image_fetcher().close()


app = FastAPI(title="pixelrelay API", lifespan=lifespan)

app.include_router(auth_handler.router)
app.include_router(playback_handler.router)
app.include_router(photo_handler.router)
app.include_router(telegram_handler.router)


@app.exception_handler(StarletteHTTPException)
async def plain_text_http_error(request, exc: StarletteHTTPException):
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=getattr(exc, "headers", None))


@app.get("/healthz")
async def healthz():
    return {"status": "ok"}


def run() -> None:  # pragma: no cover
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Server listening on %s:%s", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":  # pragma: no cover
    run()
