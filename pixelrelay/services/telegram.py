"""Telegram Bot API wrapper.

Provides async helper methods for polling updates, downloading photos and
replying with text. Only what the photo-ingestion bot needs is supported.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)


class TelegramAPIError(Exception):
    """Raised when the Telegram Bot API returns an error status."""

    def __init__(self, status: int, message: str, response_json: Optional[dict[str, Any]] = None):
        super().__init__(f"Telegram API error {status}: {message}")
        self.status = status
        self.response_json = response_json or {}


class TelegramClient:  # pylint: disable=too-few-public-methods
    """Minimal async client for the Telegram Bot API."""

    _BASE_URL = "https://api.telegram.org"

    def __init__(self, *, token: str, timeout: float = 10.0, client: httpx.AsyncClient | None = None) -> None:
        self._token = token
        self._api_url = f"{self._BASE_URL}/bot{token}"
        self._file_url = f"{self._BASE_URL}/file/bot{token}"
        self._timeout = timeout
        self._client = client or httpx.AsyncClient(timeout=timeout)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get_updates(self, offset: int | None = None, *, timeout: int = 30) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {"timeout": timeout, "allowed_updates": '["message"]'}
        if offset is not None:
            params["offset"] = offset
        # Long polling holds the request open for up to `timeout` seconds.
        return await self._call("getUpdates", params=params, timeout=timeout + self._timeout)

    async def get_file(self, file_id: str) -> str:
        """Return the ``file_path`` to download *file_id* from."""

        result = await self._call("getFile", params={"file_id": file_id})
        file_path = result.get("file_path")
        if not file_path:
            raise TelegramAPIError(200, "Missing file_path in getFile result")
        return file_path

    async def download_file(self, file_path: str) -> bytes:
        logger.debug("GET file %s", file_path)
        resp = await self._client.get(f"{self._file_url}/{file_path}")
        if resp.status_code >= 400:
            raise TelegramAPIError(resp.status_code, "Failed to download file")
        return resp.content

    async def send_text(self, chat_id: int | str, text: str) -> int:
        result = await self._call("sendMessage", json={"chat_id": chat_id, "text": text})
        return result.get("message_id", 0)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _call(
        self,
        method: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Any:
        url = f"{self._api_url}/{method}"
        # The token is part of the URL, log the method only.
        logger.debug("POST %s", method)
        resp = await self._client.post(url, params=params, json=json, timeout=timeout or self._timeout)
        try:
            data = resp.json()
        except ValueError:
            data = None
        if resp.status_code >= 400 or not data or not data.get("ok"):
            description = (data or {}).get("description") or resp.text
            raise TelegramAPIError(resp.status_code, description, data)
        return data["result"]

    async def close(self) -> None:
        await self._client.aclose()
