"""Pydantic schemas for file and upload endpoints."""

from typing import Any, List, Optional
from pydantic import BaseModel, Field

from gramstore.domain import FileRecord
from gramstore.repositories.file_repository import File


class FileResponse(BaseModel):
    """Response model for file metadata."""
    id: int
    name: str
    folder_id: Optional[int] = None
    size: int
    mime_type: Optional[str] = None
    created_at: str
    updated_at: str

    @classmethod
    def from_file(cls, file: File) -> "FileResponse":
        return cls(
            id=file.id,
            name=file.name,
            folder_id=file.folder_id,
            size=file.size,
            mime_type=file.mime_type,
            created_at=file.created_at.isoformat(),
            updated_at=file.updated_at.isoformat(),
        )


class ChunkResponse(BaseModel):
    """Chunk position and size; remote handles are not exposed."""
    chunk_index: int
    size: int


class FileDetailResponse(FileResponse):
    """Response model for a file together with its chunks."""
    chunks: List[ChunkResponse]

    @classmethod
    def from_record(cls, record: FileRecord) -> "FileDetailResponse":
        base = FileResponse.from_file(record.file)
        return cls(
            **base.model_dump(),
            chunks=[ChunkResponse(chunk_index=c.chunk_index, size=c.size) for c in record.chunks],
        )


class UploadChunkResponse(BaseModel):
    """Response model for one staged chunk."""
    upload_id: str
    chunk_index: int
    size: int
    chunk_id: int


class MergeChunksRequest(BaseModel):
    """Request model for merging a resumable upload."""
    upload_id: str
    file_name: str
    file_size: int = Field(ge=0)
    mime_type: Optional[str] = None
    folder_id: Optional[int] = None
    chunks: List[Any]


class CleanupUploadResponse(BaseModel):
    """Response model for aborting a resumable upload."""
    upload_id: str
    cleared_count: int
    errors: List[str] = []


class RenameRequest(BaseModel):
    """Request model for renaming a file or folder."""
    name: str
