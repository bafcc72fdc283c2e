"""File service: the operations exposed to the HTTP layer."""

from typing import AsyncIterator, Optional, Sequence, Tuple

from common.logging_config import get_logger
from gramstore.blob_store import BlobStoreAdapter
from gramstore.config import MAX_CHUNK_SIZE, MAX_FILE_SIZE, MAX_RESUMABLE_FILE_SIZE
from gramstore.domain import CleanupResult, DownloadedFile, FileRecord
from gramstore.exceptions import CorruptFileError, FileNotFoundError
from gramstore.repositories.chunk_repository import ChunkRepository
from gramstore.repositories.file_repository import File, FileRepository
from gramstore.repositories.temp_chunk_repository import TempChunk
from gramstore.services.cleanup_service import CleanupReconciler
from gramstore.services.reassembly_service import ReassemblyEngine
from gramstore.services.upload_service import UploadCoordinator
from gramstore.utils import validate_file_name

logger = get_logger(__name__)


class FileService:
    """
    Composes the transfer components around one blob store handle.

    Built per request; holds no state beyond its collaborators.
    """

    def __init__(
        self,
        blob_store: BlobStoreAdapter,
        max_chunk_size: int = MAX_CHUNK_SIZE,
        max_file_size: int = MAX_FILE_SIZE,
        max_resumable_file_size: int = MAX_RESUMABLE_FILE_SIZE,
    ):
        self.blob_store = blob_store
        self.file_repo = FileRepository()
        self.chunk_repo = ChunkRepository()
        self.uploads = UploadCoordinator(
            blob_store,
            max_chunk_size=max_chunk_size,
            max_file_size=max_file_size,
            max_resumable_file_size=max_resumable_file_size,
        )
        self.reassembly = ReassemblyEngine(blob_store)
        self.reconciler = CleanupReconciler(blob_store)

    async def upload_whole_file(
        self,
        data: bytes,
        name: str,
        mime_type: Optional[str] = None,
        folder_id: Optional[int] = None,
    ) -> FileRecord:
        return await self.uploads.upload_whole_file(data, name, mime_type, folder_id)

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
        return await self.uploads.upload_chunk(
            data, upload_id, chunk_index, total_chunks, original_name, original_size, folder_id
        )

    async def merge_chunks(
        self,
        upload_id: str,
        name: str,
        size: int,
        mime_type: Optional[str],
        folder_id: Optional[int],
        expected_chunks: Sequence,
    ) -> FileRecord:
        return await self.uploads.merge_chunks(upload_id, name, size, mime_type, folder_id, expected_chunks)

    async def cleanup_upload(self, upload_id: str) -> CleanupResult:
        return await self.uploads.abort(upload_id)

    async def download_file(self, file_id: int) -> DownloadedFile:
        """
        Reassemble a file and verify its length against the declared size.

        Raises:
            FileNotFoundError: If the file does not exist
            MissingChunksError: If the file has no chunks
            CorruptFileError: If the reassembled length differs from the declared size
        """
        downloaded = await self.reassembly.reassemble(file_id)
        if len(downloaded.data) != downloaded.size:
            logger.error(
                f"File {file_id} reassembled to {len(downloaded.data)} bytes, declared {downloaded.size}"
            )
            raise CorruptFileError(file_id, downloaded.size, len(downloaded.data))

        logger.info(f"Downloaded file {file_id} '{downloaded.name}' ({downloaded.size} bytes)")
        return downloaded

    def open_stream(self, file_id: int) -> Tuple[File, AsyncIterator[bytes]]:
        """
        Prepare a chunk-by-chunk download for streaming responses.

        Lookup errors are raised immediately; remote errors and a final length
        mismatch surface while iterating.
        """
        file, chunks = self.reassembly.load(file_id)

        async def stream_file_data():
            streamed = 0
            async for piece in self.reassembly.stream(file, chunks):
                streamed += len(piece)
                yield piece

            if streamed != file.size:
                logger.error(f"File {file_id} streamed {streamed} bytes, declared {file.size}")
                raise CorruptFileError(file_id, file.size, streamed)

            logger.info(f"Successfully streamed file {file_id}: {streamed} bytes total")

        return file, stream_file_data()

    async def delete_file(self, file_id: int) -> None:
        """
        Delete a file and its chunk rows, then best-effort delete the remote objects.

        Remote failures are logged only.
        """
        file = self.file_repo.get_by_id(file_id)
        if file is None:
            raise FileNotFoundError(f"File {file_id} not found")

        handles = [chunk.telegram_file_id for chunk in self.chunk_repo.get_chunks_by_file(file_id)]
        self.file_repo.delete_file(file_id)

        errors = await self.reconciler.delete_remote_objects(handles, context=f"file_id={file_id}")
        if errors:
            logger.warning(f"File {file_id} deleted with {len(errors)} remote objects left behind")
        logger.info(f"Deleted file {file_id} '{file.name}' ({len(handles)} chunks)")

    def get_file_info(self, file_id: int) -> FileRecord:
        file = self.file_repo.get_by_id(file_id)
        if file is None:
            raise FileNotFoundError(f"File {file_id} not found")
        return FileRecord(file=file, chunks=self.chunk_repo.get_chunks_by_file(file_id))

    def rename_file(self, file_id: int, new_name: str) -> File:
        new_name = validate_file_name(new_name)
        file = self.file_repo.rename_file(file_id, new_name)
        if file is None:
            raise FileNotFoundError(f"File {file_id} not found")
        return file
