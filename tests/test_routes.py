"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from gramstore.dependencies import get_blob_store, get_download_blob_store
from gramstore.main import app
from gramstore.repositories.chunk_repository import ChunkRepository
from gramstore.repositories.file_repository import FileRepository


@pytest.fixture
def client(test_db, blob_store):
    """Create FastAPI test client backed by the in-memory blob store."""
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    app.dependency_overrides[get_download_blob_store] = lambda: blob_store
    yield TestClient(app)
    app.dependency_overrides.clear()


def upload(client, name="notes.txt", content=b"hello world", folder_id=None):
    data = {"folder_id": str(folder_id)} if folder_id is not None else {}
    return client.post("/api/files", files={"file": (name, content, "text/plain")}, data=data)


def test_root_endpoint(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["status"] == "running"
    assert "X-Request-ID" in response.headers


def test_health_endpoint(client):
    assert client.get("/health").json() == {"status": "healthy", "service": "gramstore"}


class TestFileRoutes:
    def test_upload_and_download(self, client):
        response = upload(client)

        assert response.status_code == 201
        body = response.json()
        assert body["name"] == "notes.txt"
        assert body["size"] == 11
        assert body["mime_type"] == "text/plain"
        assert body["chunks"] == [{"chunk_index": 0, "size": 11}]

        download = client.get(f"/api/files/{body['id']}/download")
        assert download.status_code == 200
        assert download.content == b"hello world"
        assert download.headers["content-type"].startswith("text/plain")
        assert "notes.txt" in download.headers["content-disposition"]

    def test_blocked_extension(self, client):
        response = upload(client, name="setup.exe")

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_FILE"

    def test_unknown_folder(self, client):
        response = upload(client, folder_id=99)

        assert response.status_code == 404
        assert response.json()["code"] == "FOLDER_NOT_FOUND"

    def test_get_rename_delete(self, client, blob_store):
        file_id = upload(client).json()["id"]

        assert client.get(f"/api/files/{file_id}").json()["name"] == "notes.txt"

        renamed = client.patch(f"/api/files/{file_id}", json={"name": "renamed.txt"})
        assert renamed.status_code == 200
        assert renamed.json()["name"] == "renamed.txt"

        assert client.delete(f"/api/files/{file_id}").json() == {"success": True}
        assert blob_store.deleted == ["obj-0"]

        missing = client.get(f"/api/files/{file_id}")
        assert missing.status_code == 404
        assert missing.json()["code"] == "FILE_NOT_FOUND"

    def test_resumable_upload(self, client):
        pieces = [b"abcde", b"fghij", b"kl"]
        for index in (1, 0, 2):
            response = client.post(
                "/api/files/chunks",
                files={"chunk": ("blob", pieces[index], "application/octet-stream")},
                data={
                    "upload_id": "u1",
                    "chunk_index": str(index),
                    "total_chunks": "3",
                    "original_name": "big.bin",
                    "original_size": "12",
                },
            )
            assert response.status_code == 201
            assert response.json()["chunk_index"] == index

        merged = client.post("/api/files/chunks/merge", json={
            "upload_id": "u1",
            "file_name": "big.bin",
            "file_size": 12,
            "chunks": [0, 1, 2],
        })
        assert merged.status_code == 201

        download = client.get(f"/api/files/{merged.json()['id']}/download")
        assert download.content == b"abcdefghijkl"

    def test_incomplete_merge_is_conflict(self, client):
        client.post(
            "/api/files/chunks",
            files={"chunk": ("blob", b"abcde", "application/octet-stream")},
            data={"upload_id": "u1", "chunk_index": "0", "total_chunks": "2",
                  "original_name": "big.bin", "original_size": "7"},
        )

        response = client.post("/api/files/chunks/merge", json={
            "upload_id": "u1", "file_name": "big.bin", "file_size": 7, "chunks": [0, 1],
        })

        assert response.status_code == 409
        assert response.json()["code"] == "INCOMPLETE_UPLOAD"

    def test_invalid_chunk_index(self, client):
        response = client.post(
            "/api/files/chunks",
            files={"chunk": ("blob", b"x", "application/octet-stream")},
            data={"upload_id": "u1", "chunk_index": "5", "total_chunks": "2",
                  "original_name": "a.bin", "original_size": "1"},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_CHUNK"

    def test_cleanup_upload(self, client):
        client.post(
            "/api/files/chunks",
            files={"chunk": ("blob", b"abcde", "application/octet-stream")},
            data={"upload_id": "u1", "chunk_index": "0", "total_chunks": "2",
                  "original_name": "big.bin", "original_size": "7"},
        )

        response = client.delete("/api/files/chunks/u1")

        assert response.status_code == 200
        assert response.json()["cleared_count"] == 1
        assert client.delete("/api/files/chunks/u1").json()["cleared_count"] == 0


class TestFolderRoutes:
    def test_folder_lifecycle(self, client):
        created = client.post("/api/folders", json={"name": "docs"})
        assert created.status_code == 201
        folder_id = created.json()["id"]

        upload(client, folder_id=folder_id)

        entries = client.get("/api/entries").json()
        assert entries["folder_id"] == 1
        assert [f["name"] for f in entries["folders"]] == ["docs"]

        inner = client.get(f"/api/entries?parent_id={folder_id}").json()
        assert [f["name"] for f in inner["files"]] == ["notes.txt"]

        renamed = client.patch(f"/api/folders/{folder_id}", json={"name": "papers"})
        assert renamed.json()["name"] == "papers"

        path = client.get(f"/api/folders/{folder_id}/path").json()["path"]
        assert [f["name"] for f in path] == ["Root", "papers"]

        deleted = client.delete(f"/api/folders/{folder_id}")
        assert deleted.json() == {"success": True, "deleted_chunks": 1}
        assert client.get(f"/api/entries?parent_id={folder_id}").status_code == 404

    def test_root_delete_is_rejected(self, client):
        response = client.delete("/api/folders/1")

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_OPERATION"


class TestDownloadStoreLifetime:
    """Downloads go through the real store dependency, which must outlive the response body."""

    @pytest.fixture
    def tracked_store(self, test_db, make_blob_store, monkeypatch):
        events = []

        class TrackingStore(make_blob_store):
            async def get(self, handle):
                events.append(("get", self.closed))
                return await super().get(handle)

            async def close(self):
                events.append(("close",))
                await super().close()

        store = TrackingStore()
        monkeypatch.setattr("gramstore.dependencies.TelegramBlobStore", lambda: store)
        return store, events

    def test_store_closed_after_last_chunk(self, tracked_store):
        store, events = tracked_store
        store.objects.update({"h0": b"abcde", "h1": b"fgh"})
        file = FileRepository.create_file("a.bin", 1, 8, "application/octet-stream")
        ChunkRepository.create_chunks(file.id, [(0, "h0", 5), (1, "h1", 3)])

        response = TestClient(app).get(f"/api/files/{file.id}/download")

        assert response.status_code == 200
        assert response.content == b"abcdefgh"
        assert events == [("get", False), ("get", False), ("close",)]

    def test_store_closed_when_file_is_missing(self, tracked_store):
        store, events = tracked_store

        response = TestClient(app).get("/api/files/404/download")

        assert response.status_code == 404
        assert events == [("close",)]
