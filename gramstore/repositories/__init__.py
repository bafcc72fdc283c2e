"""Repository layer for data access."""

from gramstore.repositories.folder_repository import FolderRepository
from gramstore.repositories.file_repository import FileRepository
from gramstore.repositories.chunk_repository import ChunkRepository
from gramstore.repositories.temp_chunk_repository import TempChunkRepository

__all__ = [
    "FolderRepository",
    "FileRepository",
    "ChunkRepository",
    "TempChunkRepository",
]
