"""Upload coordination: single-shot chunked uploads and resumable chunk sessions."""

import time
from typing import List, Optional, Sequence

from common.constants import DEFAULT_MIME_TYPE
from common.logging_config import get_logger
from gramstore.blob_store import BlobStoreAdapter
from gramstore.chunk_planner import chunk_label, plan_chunks
from gramstore.config import MAX_CHUNK_SIZE, MAX_FILE_SIZE, MAX_RESUMABLE_FILE_SIZE
from gramstore.database import get_db_connection
from gramstore.domain import CleanupResult, FileRecord
from gramstore.exceptions import (
    ChunkUploadFailedError,
    FolderNotFoundError,
    IncompleteUploadError,
    InvalidChunkError,
    MergeFailedError,
    SizeLimitExceededError,
)
from gramstore.repositories.chunk_repository import ChunkRepository
from gramstore.repositories.file_repository import FileRepository
from gramstore.repositories.folder_repository import FolderRepository
from gramstore.repositories.temp_chunk_repository import TempChunk, TempChunkRepository
from gramstore.services.cleanup_service import CleanupReconciler
from gramstore.utils import format_file_size, normalize_folder_id, validate_file_name

logger = get_logger(__name__)


class UploadCoordinator:
    """
    Drives chunk uploads to the blob store and commits chunk metadata.

    Chunks are uploaded one at a time so peak memory stays near one chunk
    (plus the caller's buffer in single-shot mode). Nothing is kept between
    calls: resumable sessions live entirely in the temp_chunks table.
    """

    def __init__(
        self,
        blob_store: BlobStoreAdapter,
        max_chunk_size: int = MAX_CHUNK_SIZE,
        max_file_size: int = MAX_FILE_SIZE,
        max_resumable_file_size: int = MAX_RESUMABLE_FILE_SIZE,
    ):
        self.blob_store = blob_store
        self.max_chunk_size = min(max_chunk_size, blob_store.max_object_size)
        self.max_file_size = max_file_size
        self.max_resumable_file_size = max_resumable_file_size
        self.file_repo = FileRepository()
        self.chunk_repo = ChunkRepository()
        self.folder_repo = FolderRepository()
        self.temp_chunk_repo = TempChunkRepository()
        self.reconciler = CleanupReconciler(blob_store)

    def _require_folder(self, folder_id: Optional[int]) -> int:
        folder_id = normalize_folder_id(folder_id)
        if self.folder_repo.get_by_id(folder_id) is None:
            raise FolderNotFoundError(f"Folder {folder_id} not found")
        return folder_id

    async def upload_whole_file(
        self,
        data: bytes,
        name: str,
        mime_type: Optional[str] = None,
        folder_id: Optional[int] = None,
    ) -> FileRecord:
        """
        Upload a fully buffered file as a sequence of chunks and commit it.

        Either the File and all of its FileChunk rows are created, or nothing
        is written to the metadata store.

        Raises:
            InvalidFileError: If the name is unusable
            SizeLimitExceededError: If the file exceeds max_file_size
            FolderNotFoundError: If the target folder does not exist
            ChunkUploadFailedError: If any chunk could not be stored remotely
        """
        name = validate_file_name(name)
        total_size = len(data)
        if total_size > self.max_file_size:
            raise SizeLimitExceededError(total_size, self.max_file_size)

        folder_id = self._require_folder(folder_id)
        mime_type = mime_type or DEFAULT_MIME_TYPE

        plan = plan_chunks(total_size, self.max_chunk_size)
        logger.info(
            f"Uploading '{name}' ({format_file_size(total_size)}) to folder {folder_id} "
            f"as {len(plan)} chunks"
        )

        uploaded = []
        for descriptor in plan:
            piece = data[descriptor.offset:descriptor.end]
            label = chunk_label(name, descriptor.index, len(plan))
            start = time.monotonic()
            try:
                handle = await self.blob_store.put(piece, label)
            except Exception as e:
                logger.error(f"Chunk {descriptor.index + 1}/{len(plan)} of '{name}' failed: {e}")
                await self._discard_handles([h for _, h, _ in uploaded], f"file '{name}'")
                raise ChunkUploadFailedError(descriptor.index, str(e)) from e

            uploaded.append((descriptor.index, handle, descriptor.length))
            logger.info(
                f"Chunk {descriptor.index + 1}/{len(plan)} of '{name}' stored "
                f"({descriptor.length} bytes, {time.monotonic() - start:.3f}s)"
            )

        with get_db_connection() as conn:
            try:
                file = self.file_repo.create_file(name, folder_id, total_size, mime_type, conn=conn)
                chunks = self.chunk_repo.create_chunks(file.id, uploaded, conn=conn)
                conn.commit()
            except Exception as e:
                conn.rollback()
                logger.error(f"Failed to record upload of '{name}': {e}", exc_info=True)
                await self._discard_handles([h for _, h, _ in uploaded], f"file '{name}'")
                raise

        logger.info(f"Uploaded '{name}' as file {file.id} with {len(chunks)} chunks")
        return FileRecord(file=file, chunks=chunks)

    async def upload_chunk(
        self,
        data: bytes,
        upload_id: str,
        chunk_index: int,
        total_chunks: int,
        original_name: str,
        original_size: int,
        folder_id: Optional[int] = None,
    ) -> TempChunk:
        """
        Store one pre-sliced chunk of a resumable upload and stage its record.

        Repeating a call for the same (upload_id, chunk_index) replaces the
        staged row, so retries never leave two records for one index.

        Raises:
            InvalidChunkError: If the upload id, index or total is unusable
            SizeLimitExceededError: If the chunk or declared file is too large
            ChunkUploadFailedError: If the remote upload fails
        """
        if not upload_id or not str(upload_id).strip():
            raise InvalidChunkError("upload_id is required")
        if total_chunks < 1:
            raise InvalidChunkError(f"total_chunks must be at least 1, got {total_chunks}")
        if not 0 <= chunk_index < total_chunks:
            raise InvalidChunkError(f"chunk_index {chunk_index} outside [0, {total_chunks})")

        original_name = validate_file_name(original_name)
        if original_size < 0:
            raise InvalidChunkError(f"original_size must be non-negative, got {original_size}")
        if original_size > self.max_resumable_file_size:
            raise SizeLimitExceededError(original_size, self.max_resumable_file_size)
        if len(data) > self.blob_store.max_object_size:
            raise SizeLimitExceededError(len(data), self.blob_store.max_object_size, what="Chunk")

        label = chunk_label(original_name, chunk_index, total_chunks)
        logger.info(
            f"Uploading chunk {chunk_index + 1}/{total_chunks} of '{original_name}' "
            f"({len(data)} bytes) [upload_id={upload_id}]"
        )

        try:
            handle = await self.blob_store.put(data, label)
        except Exception as e:
            logger.error(f"Chunk {chunk_index} upload failed [upload_id={upload_id}]: {e}")
            raise ChunkUploadFailedError(chunk_index, str(e), upload_id=upload_id) from e

        try:
            temp_chunk, previous_handle = self.temp_chunk_repo.upsert_chunk(
                upload_id=upload_id,
                chunk_index=chunk_index,
                telegram_file_id=handle,
                size=len(data),
                original_file_name=original_name,
                original_file_size=original_size,
                folder_id=folder_id,
            )
        except Exception:
            await self._discard_handles([handle], f"upload_id={upload_id}")
            raise

        if previous_handle and previous_handle != handle:
            await self._discard_handles([previous_handle], f"upload_id={upload_id}")

        return temp_chunk

    async def merge_chunks(
        self,
        upload_id: str,
        name: str,
        size: int,
        mime_type: Optional[str],
        folder_id: Optional[int],
        expected_chunks: Sequence,
    ) -> FileRecord:
        """
        Promote every staged chunk of `upload_id` into a committed file.

        Validation failures leave the staged chunks in place so the caller can
        upload what is missing and merge again. A failure while promoting
        rolls the transaction back and cleans the session up.

        Args:
            expected_chunks: The caller's list of chunks; its length is the declared chunk count

        Raises:
            IncompleteUploadError: If staged indices are not exactly 0..N-1
            MergeFailedError: If sizes disagree or promotion fails
        """
        expected = len(expected_chunks)
        name = validate_file_name(name)
        mime_type = mime_type or DEFAULT_MIME_TYPE

        temp_chunks = self.temp_chunk_repo.get_by_upload(upload_id)
        self._validate_staged(upload_id, expected, temp_chunks)

        staged_size = sum(chunk.size for chunk in temp_chunks)
        if staged_size != size:
            raise MergeFailedError(
                upload_id, f"staged chunks total {staged_size} bytes, declared size is {size}"
            )

        folder_id = self._require_folder(folder_id)

        logger.info(f"Merging {len(temp_chunks)} chunks into '{name}' [upload_id={upload_id}]")

        with get_db_connection() as conn:
            try:
                file = self.file_repo.create_file(name, folder_id, size, mime_type, conn=conn)
                chunks = self.chunk_repo.create_chunks(
                    file.id,
                    [(c.chunk_index, c.telegram_file_id, c.size) for c in temp_chunks],
                    conn=conn,
                )
                self.temp_chunk_repo.delete_by_upload(upload_id, conn=conn)
                conn.commit()
            except Exception as e:
                conn.rollback()
                logger.error(f"Promotion failed [upload_id={upload_id}]: {e}", exc_info=True)
                await self.reconciler.reconcile(upload_id)
                raise MergeFailedError(upload_id, str(e)) from e

        logger.info(f"Merged upload {upload_id} into file {file.id} ({format_file_size(size)})")
        return FileRecord(file=file, chunks=chunks)

    @staticmethod
    def _validate_staged(upload_id: str, expected: int, temp_chunks: List[TempChunk]) -> None:
        indices = {chunk.chunk_index for chunk in temp_chunks}
        missing = sorted(set(range(expected)) - indices)
        if expected < 1 or len(temp_chunks) != expected or missing:
            raise IncompleteUploadError(upload_id, expected, len(temp_chunks), missing)

    async def abort(self, upload_id: str) -> CleanupResult:
        """
        Abandon a resumable upload without creating a file.
        """
        logger.info(f"Aborting upload [upload_id={upload_id}]")
        return await self.reconciler.reconcile(upload_id)

    async def _discard_handles(self, handles: List[str], context: str) -> None:
        if not handles:
            return
        errors = await self.reconciler.delete_remote_objects(handles, context=context)
        if errors:
            logger.warning(f"{len(errors)} remote objects left orphaned [{context}]")
