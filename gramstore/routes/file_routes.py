"""File and upload API routes."""

from typing import AsyncIterator, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.responses import StreamingResponse

from gramstore.blob_store import BlobStoreAdapter
from gramstore.dependencies import get_download_blob_store, get_file_service
from gramstore.exceptions import SizeLimitExceededError
from gramstore.schemas.common import SuccessResponse
from gramstore.schemas.files import (
    CleanupUploadResponse,
    FileDetailResponse,
    FileResponse,
    MergeChunksRequest,
    RenameRequest,
    UploadChunkResponse,
)
from gramstore.services.file_service import FileService

router = APIRouter(prefix="/api/files", tags=["Files"])


async def _stream_then_close(stream: AsyncIterator[bytes], blob_store: BlobStoreAdapter) -> AsyncIterator[bytes]:
    try:
        async for piece in stream:
            yield piece
    finally:
        await blob_store.close()


@router.post("", response_model=FileDetailResponse, status_code=status.HTTP_201_CREATED)
async def upload_file(
    file: UploadFile = File(...),
    folder_id: Optional[int] = Form(None),
    file_service: FileService = Depends(get_file_service),
):
    """
    Upload a whole file in one request; it is split into chunks server-side.

    Raises:
        - 400: Invalid file name or type
        - 404: Folder not found
        - 413: File too large
        - 502: A chunk could not be stored
    """
    limit = file_service.uploads.max_file_size
    if file.size is not None and file.size > limit:
        raise SizeLimitExceededError(file.size, limit)

    data = await file.read()

    record = await file_service.upload_whole_file(
        data=data,
        name=file.filename,
        mime_type=file.content_type,
        folder_id=folder_id,
    )
    return FileDetailResponse.from_record(record)


@router.post("/chunks", response_model=UploadChunkResponse, status_code=status.HTTP_201_CREATED)
async def upload_chunk(
    chunk: UploadFile = File(...),
    upload_id: str = Form(...),
    chunk_index: int = Form(...),
    total_chunks: int = Form(...),
    original_name: str = Form(...),
    original_size: int = Form(...),
    folder_id: Optional[int] = Form(None),
    file_service: FileService = Depends(get_file_service),
):
    """
    Stage one chunk of a resumable upload.

    Raises:
        - 400: Invalid index, total or file name
        - 413: Chunk or declared file too large
        - 502: The chunk could not be stored
    """
    data = await chunk.read()

    temp_chunk = await file_service.upload_chunk(
        data=data,
        upload_id=upload_id,
        chunk_index=chunk_index,
        total_chunks=total_chunks,
        original_name=original_name,
        original_size=original_size,
        folder_id=folder_id,
    )
    return UploadChunkResponse(
        upload_id=temp_chunk.upload_id,
        chunk_index=temp_chunk.chunk_index,
        size=temp_chunk.size,
        chunk_id=temp_chunk.id,
    )


@router.post("/chunks/merge", response_model=FileDetailResponse, status_code=status.HTTP_201_CREATED)
async def merge_chunks(
    request: MergeChunksRequest,
    file_service: FileService = Depends(get_file_service),
):
    """
    Commit all staged chunks of an upload as one file.

    Raises:
        - 409: Not every declared chunk has been staged
        - 500: Promotion failed (the session is cleaned up)
    """
    record = await file_service.merge_chunks(
        upload_id=request.upload_id,
        name=request.file_name,
        size=request.file_size,
        mime_type=request.mime_type,
        folder_id=request.folder_id,
        expected_chunks=request.chunks,
    )
    return FileDetailResponse.from_record(record)


@router.delete("/chunks/{upload_id}", response_model=CleanupUploadResponse)
async def cleanup_upload(
    upload_id: str,
    file_service: FileService = Depends(get_file_service),
):
    """
    Abort a resumable upload and discard its staged chunks.
    """
    result = await file_service.cleanup_upload(upload_id)
    return CleanupUploadResponse(
        upload_id=result.upload_id,
        cleared_count=result.cleared_count,
        errors=result.errors,
    )


@router.get("/{file_id}", response_model=FileDetailResponse)
async def get_file_info(
    file_id: int,
    file_service: FileService = Depends(get_file_service),
):
    """
    File metadata with its chunk list.
    """
    return FileDetailResponse.from_record(file_service.get_file_info(file_id))


@router.get("/{file_id}/download")
async def download_file(
    file_id: int,
    blob_store: BlobStoreAdapter = Depends(get_download_blob_store),
):
    """
    Stream a file's chunks in order.

    The blob store stays open until the last chunk has been sent.

    Raises:
        - 404: File not found
        - 500: File has no chunks
    """
    try:
        file, stream_generator = FileService(blob_store).open_stream(file_id)
    except Exception:
        await blob_store.close()
        raise

    return StreamingResponse(
        _stream_then_close(stream_generator, blob_store),
        media_type=file.mime_type or "application/octet-stream",
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(file.name)}",
            "Content-Length": str(file.size),
        }
    )


@router.patch("/{file_id}", response_model=FileResponse)
async def rename_file(
    file_id: int,
    request: RenameRequest,
    file_service: FileService = Depends(get_file_service),
):
    """
    Rename a file.
    """
    return FileResponse.from_file(file_service.rename_file(file_id, request.name))


@router.delete("/{file_id}", response_model=SuccessResponse)
async def delete_file(
    file_id: int,
    file_service: FileService = Depends(get_file_service),
):
    """
    Delete a file and its chunks.
    """
    await file_service.delete_file(file_id)
    return SuccessResponse()
