"""Shared pytest fixtures for all tests."""

import tempfile
from pathlib import Path
from typing import Dict, Generator, List, Optional

import pytest

from gramstore.blob_store import BlobStoreAdapter
from gramstore.database import init_database
from gramstore.exceptions import RemoteUnavailableError, SizeLimitExceededError


class FakeBlobStore(BlobStoreAdapter):
    """
    In-memory blob store.

    Args:
        max_object_size: Largest accepted payload
        supports_delete: Whether delete() removes objects
        fail_on_put: 0-based put call number that raises RemoteUnavailableError
    """

    def __init__(self, max_object_size: int = 1024, supports_delete: bool = True,
                 fail_on_put: Optional[int] = None):
        super().__init__(max_object_size)
        self.supports_delete = supports_delete
        self.fail_on_put = fail_on_put
        self.fail_get = False
        self.objects: Dict[str, bytes] = {}
        self.labels: Dict[str, str] = {}
        self.put_calls = 0
        self.deleted: List[str] = []
        self.closed = False

    async def put(self, data: bytes, label: str) -> str:
        if len(data) > self.max_object_size:
            raise SizeLimitExceededError(len(data), self.max_object_size, what="Chunk")

        call = self.put_calls
        self.put_calls += 1
        if self.fail_on_put is not None and call == self.fail_on_put:
            raise RemoteUnavailableError("simulated outage")

        handle = f"obj-{call}"
        self.objects[handle] = bytes(data)
        self.labels[handle] = label
        return handle

    async def get(self, handle: str) -> bytes:
        if self.fail_get:
            raise RemoteUnavailableError("simulated outage")
        return self.objects[handle]

    async def _delete_object(self, handle: str) -> None:
        self.deleted.append(handle)
        del self.objects[handle]

    async def test_connection(self) -> bool:
        return True

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def test_db(monkeypatch) -> Generator[Path, None, None]:
    """
    Create a temporary test database for each test.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        monkeypatch.setattr("gramstore.database.DATABASE_PATH", str(db_path))
        monkeypatch.setattr("gramstore.config.DATABASE_PATH", str(db_path))
        init_database()
        yield db_path


@pytest.fixture
def blob_store() -> FakeBlobStore:
    return FakeBlobStore()


@pytest.fixture
def make_blob_store():
    """Factory for blob stores with non-default limits or injected failures."""
    return FakeBlobStore
