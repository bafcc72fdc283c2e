"""Reassembly of committed files from their remote chunks."""

import time
from typing import AsyncIterator, List, Tuple

from common.constants import DEFAULT_MIME_TYPE
from common.logging_config import get_logger, short_handle
from gramstore.blob_store import BlobStoreAdapter
from gramstore.domain import DownloadedFile
from gramstore.exceptions import CorruptFileError, FileNotFoundError, MissingChunksError
from gramstore.repositories.chunk_repository import ChunkRepository, FileChunk
from gramstore.repositories.file_repository import File, FileRepository

logger = get_logger(__name__)


class ReassemblyEngine:
    """
    Downloads a file's chunks one by one in index order.
    """

    def __init__(self, blob_store: BlobStoreAdapter):
        self.blob_store = blob_store
        self.file_repo = FileRepository()
        self.chunk_repo = ChunkRepository()

    def load(self, file_id: int) -> Tuple[File, List[FileChunk]]:
        """
        Load a file record and its chunks sorted by index.

        Raises:
            FileNotFoundError: If the file does not exist
            MissingChunksError: If the file has no chunk records
            CorruptFileError: If chunk indices are not exactly 0..N-1
        """
        file = self.file_repo.get_by_id(file_id)
        if file is None:
            raise FileNotFoundError(f"File {file_id} not found")

        chunks = self.chunk_repo.get_chunks_by_file(file_id)
        if not chunks:
            logger.error(f"File {file_id} has no chunks in database")
            raise MissingChunksError(file_id)

        chunks = sorted(chunks, key=lambda chunk: chunk.chunk_index)
        indices = [chunk.chunk_index for chunk in chunks]
        if indices != list(range(len(chunks))):
            raise CorruptFileError(file_id, len(chunks), indices[-1] + 1, detail="contiguous chunk indices")

        return file, chunks

    async def stream(self, file: File, chunks: List[FileChunk]) -> AsyncIterator[bytes]:
        """
        Yield each chunk's bytes in index order, holding one chunk at a time.
        """
        total = len(chunks)
        received = 0
        for chunk in chunks:
            start = time.monotonic()
            try:
                data = await self.blob_store.get(chunk.telegram_file_id)
            except Exception as e:
                logger.error(
                    f"Chunk {chunk.chunk_index + 1}/{total} of file {file.id} "
                    f"({short_handle(chunk.telegram_file_id)}) failed after {received}/{file.size} bytes: {e}"
                )
                raise

            if len(data) != chunk.size:
                logger.warning(
                    f"Chunk {chunk.chunk_index} of file {file.id} returned {len(data)} bytes, "
                    f"recorded size is {chunk.size}"
                )

            received += len(data)
            logger.info(
                f"Chunk {chunk.chunk_index + 1}/{total} of file {file.id} fetched "
                f"({len(data)} bytes, {time.monotonic() - start:.3f}s)"
            )
            yield data

    async def reassemble(self, file_id: int) -> DownloadedFile:
        """
        Download and concatenate all chunks of a file.

        The returned size is the declared size from the file record; comparing
        it with len(data) is left to the caller.
        """
        file, chunks = self.load(file_id)
        logger.info(f"Reassembling file {file_id} '{file.name}' from {len(chunks)} chunks")

        buffer = bytearray()
        async for piece in self.stream(file, chunks):
            buffer.extend(piece)

        return DownloadedFile(
            data=bytes(buffer),
            name=file.name,
            mime_type=file.mime_type or DEFAULT_MIME_TYPE,
            size=file.size,
        )
