"""Unit tests for TelegramBlobStore against a mocked Bot API."""

import json

import httpx
import pytest

from gramstore.exceptions import RemoteRejectedError, RemoteUnavailableError, SizeLimitExceededError
from gramstore.telegram_client import EMPTY_OBJECT_HANDLE, TelegramBlobStore

TOKEN = "123456:TEST-token"
API_BASE = "https://api.telegram.test"


def make_store(handler, max_object_size=1024):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=API_BASE)
    return TelegramBlobStore(
        bot_token=TOKEN,
        chat_id="-100200",
        api_base=API_BASE,
        max_object_size=max_object_size,
        http_client=http_client,
    )


@pytest.fixture
def bot_api():
    """Mock Bot API that stores documents in a dict."""
    documents = {}
    requests = []

    def handler(request):
        requests.append(request)
        path = request.url.path

        if path == f"/bot{TOKEN}/sendDocument":
            file_id = f"doc{len(documents)}"
            documents[file_id] = request.content
            return httpx.Response(200, json={"ok": True, "result": {"document": {"file_id": file_id}}})

        if path == f"/bot{TOKEN}/getFile":
            file_id = json.loads(request.content)["file_id"]
            if file_id not in documents:
                return httpx.Response(400, json={"ok": False, "description": "Bad Request: invalid file_id"})
            return httpx.Response(200, json={"ok": True, "result": {"file_path": f"documents/{file_id}"}})

        if path.startswith(f"/file/bot{TOKEN}/documents/"):
            return httpx.Response(200, content=b"payload-for-" + path.rsplit("/", 1)[-1].encode())

        if path == f"/bot{TOKEN}/getMe":
            return httpx.Response(200, json={"ok": True, "result": {"id": 1, "is_bot": True}})

        return httpx.Response(404, json={"ok": False, "description": "Not Found"})

    return handler, documents, requests


@pytest.mark.asyncio
async def test_put_sends_document_and_returns_file_id(bot_api):
    handler, documents, requests = bot_api
    store = make_store(handler)

    handle = await store.put(b"hello world", "notes.txt.part000")

    assert handle == "doc0"
    body = documents["doc0"]
    assert b"hello world" in body
    assert b"notes.txt.part000" in body
    assert b"-100200" in body
    assert requests[0].method == "POST"


@pytest.mark.asyncio
async def test_get_resolves_path_then_downloads(bot_api):
    handler, _, requests = bot_api
    store = make_store(handler)

    handle = await store.put(b"abc", "a.bin")
    data = await store.get(handle)

    assert data == b"payload-for-doc0"
    assert [r.url.path.rsplit("/", 1)[-1] for r in requests] == ["sendDocument", "getFile", "doc0"]


@pytest.mark.asyncio
async def test_put_rejects_oversized_payload_without_request(bot_api):
    handler, _, requests = bot_api
    store = make_store(handler, max_object_size=4)

    with pytest.raises(SizeLimitExceededError):
        await store.put(b"12345", "big.bin")

    assert requests == []


@pytest.mark.asyncio
async def test_empty_payload_uses_local_handle(bot_api):
    handler, _, requests = bot_api
    store = make_store(handler)

    handle = await store.put(b"", "empty.txt")

    assert handle == EMPTY_OBJECT_HANDLE
    assert await store.get(handle) == b""
    assert requests == []


@pytest.mark.asyncio
async def test_unknown_handle_is_rejected(bot_api):
    handler, _, _ = bot_api
    store = make_store(handler)

    with pytest.raises(RemoteRejectedError) as exc_info:
        await store.get("missing")

    assert "missing" not in str(exc_info.value)


@pytest.mark.asyncio
async def test_api_error_envelope_is_rejected():
    def handler(request):
        return httpx.Response(200, json={"ok": False, "description": "Forbidden: bot was kicked"})

    store = make_store(handler)

    with pytest.raises(RemoteRejectedError, match="bot was kicked"):
        await store.put(b"x", "x.bin")


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code", [429, 500, 502])
async def test_throttling_and_server_errors_are_unavailable(status_code):
    def handler(request):
        return httpx.Response(status_code, json={"ok": False, "description": "try later"})

    store = make_store(handler)

    with pytest.raises(RemoteUnavailableError):
        await store.put(b"x", "x.bin")


@pytest.mark.asyncio
async def test_transport_errors_are_unavailable():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    store = make_store(handler)

    with pytest.raises(RemoteUnavailableError):
        await store.get("doc0")


@pytest.mark.asyncio
async def test_test_connection(bot_api):
    handler, _, _ = bot_api
    assert await make_store(handler).test_connection() is True

    def failing(request):
        return httpx.Response(401, json={"ok": False, "description": "Unauthorized"})

    assert await make_store(failing).test_connection() is False


@pytest.mark.asyncio
async def test_delete_is_not_supported(bot_api):
    handler, _, requests = bot_api
    store = make_store(handler)

    assert store.supports_delete is False
    assert await store.delete("doc0") is False
    assert requests == []


@pytest.mark.asyncio
async def test_close_leaves_injected_client_open(bot_api):
    handler, _, _ = bot_api
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=API_BASE)
    store = TelegramBlobStore(bot_token=TOKEN, chat_id="1", api_base=API_BASE, http_client=http_client)

    await store.close()

    assert not http_client.is_closed
    await http_client.aclose()


@pytest.mark.asyncio
async def test_failed_download_hides_handle():
    def handler(request):
        if request.url.path.endswith("/getFile"):
            return httpx.Response(200, json={"ok": True, "result": {"file_path": "documents/f1"}})
        return httpx.Response(404, text="gone")

    store = make_store(handler)

    with pytest.raises(RemoteRejectedError) as exc_info:
        await store.get("AgADsecretHandle")

    assert "HTTP 404" in str(exc_info.value)
    assert "AgADsecret" not in str(exc_info.value)


@pytest.mark.asyncio
async def test_store_cannot_be_used_after_close():
    store = TelegramBlobStore(bot_token=TOKEN, chat_id="1", api_base=API_BASE)

    await store.close()

    with pytest.raises(RuntimeError):
        await store.put(b"x", "x.bin")
