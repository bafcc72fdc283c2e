"""Telegram Bot API implementation of the blob store contract."""

import time
from typing import Any, Dict, Optional

import httpx

from common.constants import DEFAULT_MIME_TYPE
from common.logging_config import get_logger, short_handle
from gramstore.blob_store import BlobStoreAdapter
from gramstore.config import (
    TELEGRAM_API_BASE,
    TELEGRAM_BOT_TOKEN,
    TELEGRAM_CHAT_ID,
    TELEGRAM_MAX_OBJECT_SIZE,
    TELEGRAM_TIMEOUT_SECONDS,
)
from gramstore.exceptions import (
    RemoteRejectedError,
    RemoteUnavailableError,
    SizeLimitExceededError,
)

logger = get_logger(__name__)

# The Bot API refuses empty documents, so zero-byte payloads never leave the process.
EMPTY_OBJECT_HANDLE = "empty:"


class TelegramBlobStore(BlobStoreAdapter):
    """
    Stores chunks as documents posted to a Telegram chat.

    put -> sendDocument, get -> getFile + file download. Telegram offers no
    way to delete a document by file_id, so supports_delete stays False.
    """

    supports_delete = False

    def __init__(
        self,
        bot_token: str = TELEGRAM_BOT_TOKEN,
        chat_id: str = TELEGRAM_CHAT_ID,
        api_base: str = TELEGRAM_API_BASE,
        max_object_size: int = TELEGRAM_MAX_OBJECT_SIZE,
        timeout: float = TELEGRAM_TIMEOUT_SECONDS,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(max_object_size)
        self.bot_token = bot_token
        self.chat_id = chat_id
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self._client = http_client
        self._owns_client = http_client is None
        self._closed = False

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._closed:
            raise RuntimeError("TelegramBlobStore used after close()")
        if self._client is None:
            self._client = httpx.AsyncClient(base_url=self.api_base, timeout=self.timeout)
            logger.debug(f"Opened HTTP client to {self.api_base}")
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this adapter created it."""
        self._closed = True
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _method_path(self, method: str) -> str:
        return f"/bot{self.bot_token}/{method}"

    def _file_path(self, file_path: str) -> str:
        return f"/file/bot{self.bot_token}/{file_path}"

    async def _send(self, method: str, path: str, **kwargs) -> httpx.Response:
        """
        Issue one HTTP request, translating transport failures.

        Raises:
            RemoteUnavailableError: On connection errors, timeouts, 429 and 5xx responses
        """
        client = self._ensure_client()
        try:
            response = await client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise RemoteUnavailableError(f"Telegram request timed out: {type(e).__name__}") from e
        except httpx.TransportError as e:
            raise RemoteUnavailableError(f"Telegram unreachable: {type(e).__name__}") from e

        if response.status_code == 429 or response.status_code >= 500:
            raise RemoteUnavailableError(
                f"Telegram unavailable: HTTP {response.status_code} {self._description(response)}"
            )
        return response

    @staticmethod
    def _description(response: httpx.Response) -> str:
        try:
            return response.json().get("description", "")
        except ValueError:
            return response.reason_phrase

    def _parse_result(self, response: httpx.Response, method: str) -> Dict[str, Any]:
        """
        Unwrap a Bot API JSON envelope.

        Raises:
            RemoteRejectedError: If the HTTP status or the `ok` flag reports failure
        """
        try:
            payload = response.json()
        except ValueError as e:
            raise RemoteRejectedError(f"{method}: invalid JSON response (HTTP {response.status_code})") from e

        if response.status_code >= 400 or not payload.get("ok"):
            description = payload.get("description", f"HTTP {response.status_code}")
            raise RemoteRejectedError(f"{method} failed: {description}")

        return payload.get("result") or {}

    async def put(self, data: bytes, label: str) -> str:
        if len(data) > self.max_object_size:
            raise SizeLimitExceededError(len(data), self.max_object_size, what="Chunk")

        if not data:
            logger.info(f"Stored empty object for {label} without a remote call")
            return EMPTY_OBJECT_HANDLE

        start = time.monotonic()
        response = await self._send(
            "POST",
            self._method_path("sendDocument"),
            data={"chat_id": self.chat_id},
            files={"document": (label, data, DEFAULT_MIME_TYPE)},
        )
        result = self._parse_result(response, "sendDocument")

        document = result.get("document") or {}
        file_id = document.get("file_id")
        if not file_id:
            raise RemoteRejectedError("sendDocument returned no document file_id")

        duration = time.monotonic() - start
        logger.info(
            f"Uploaded {label} ({len(data)} bytes) in {duration:.3f}s, handle={short_handle(file_id)}"
        )
        return file_id

    async def resolve_download_path(self, handle: str) -> str:
        """
        Exchange a file_id for the transient file_path used by the download endpoint.
        """
        response = await self._send("POST", self._method_path("getFile"), json={"file_id": handle})
        result = self._parse_result(response, "getFile")

        file_path = result.get("file_path")
        if not file_path:
            logger.warning(f"getFile returned no file_path for {short_handle(handle)}")
            raise RemoteRejectedError("getFile returned no file_path")
        return file_path

    async def get(self, handle: str) -> bytes:
        if handle == EMPTY_OBJECT_HANDLE:
            return b""

        start = time.monotonic()
        file_path = await self.resolve_download_path(handle)

        response = await self._send("GET", self._file_path(file_path))
        if response.status_code >= 400:
            logger.warning(f"Download of {short_handle(handle)} failed: HTTP {response.status_code}")
            raise RemoteRejectedError(f"Chunk download failed: HTTP {response.status_code}")

        data = response.content
        duration = time.monotonic() - start
        logger.info(f"Downloaded {short_handle(handle)} ({len(data)} bytes) in {duration:.3f}s")
        return data

    async def test_connection(self) -> bool:
        try:
            response = await self._send("GET", self._method_path("getMe"))
            self._parse_result(response, "getMe")
            return True
        except Exception as e:
            logger.warning(f"Telegram connection test failed: {e}")
            return False
