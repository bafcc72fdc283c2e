"""Request-scoped wiring of the blob store and services."""

from typing import AsyncIterator

from fastapi import Depends

from gramstore.blob_store import BlobStoreAdapter
from gramstore.services.file_service import FileService
from gramstore.services.folder_service import FolderService
from gramstore.telegram_client import TelegramBlobStore


async def get_blob_store() -> AsyncIterator[BlobStoreAdapter]:
    """
    FastAPI dependency yielding a fresh blob store for one request.
    """
    blob_store = TelegramBlobStore()
    try:
        yield blob_store
    finally:
        await blob_store.close()


def get_file_service(blob_store: BlobStoreAdapter = Depends(get_blob_store)) -> FileService:
    return FileService(blob_store)


def get_folder_service(blob_store: BlobStoreAdapter = Depends(get_blob_store)) -> FolderService:
    return FolderService(blob_store)


async def get_download_blob_store() -> BlobStoreAdapter:
    """
    FastAPI dependency for streamed downloads.

    The response body outlives the dependency scope, so the route closes
    this store once the stream is exhausted or fails.
    """
    return TelegramBlobStore()
