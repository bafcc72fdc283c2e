"""Pydantic schemas for API requests and responses."""

from gramstore.schemas.common import ErrorResponse, SuccessResponse
from gramstore.schemas.files import (
    FileResponse,
    ChunkResponse,
    FileDetailResponse,
    UploadChunkResponse,
    MergeChunksRequest,
    CleanupUploadResponse,
    RenameRequest
)
from gramstore.schemas.folders import (
    CreateFolderRequest,
    FolderResponse,
    DirectoryContentsResponse,
    FolderPathResponse,
    DeleteFolderResponse
)

__all__ = [
    "ErrorResponse",
    "SuccessResponse",
    "FileResponse",
    "ChunkResponse",
    "FileDetailResponse",
    "UploadChunkResponse",
    "MergeChunksRequest",
    "CleanupUploadResponse",
    "RenameRequest",
    "CreateFolderRequest",
    "FolderResponse",
    "DirectoryContentsResponse",
    "FolderPathResponse",
    "DeleteFolderResponse"
]
