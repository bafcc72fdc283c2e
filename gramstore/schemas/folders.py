"""Pydantic schemas for folder endpoints."""

from typing import List, Optional
from pydantic import BaseModel

from gramstore.repositories.folder_repository import Folder
from gramstore.schemas.files import FileResponse


class CreateFolderRequest(BaseModel):
    """Request model for folder creation."""
    name: str
    parent_id: Optional[int] = None


class FolderResponse(BaseModel):
    """Response model for folder metadata."""
    id: int
    name: str
    parent_id: Optional[int] = None
    created_at: str

    @classmethod
    def from_folder(cls, folder: Folder) -> "FolderResponse":
        return cls(
            id=folder.id,
            name=folder.name,
            parent_id=folder.parent_id,
            created_at=folder.created_at.isoformat(),
        )


class DirectoryContentsResponse(BaseModel):
    """Response model for a directory listing."""
    folder_id: int
    folders: List[FolderResponse]
    files: List[FileResponse]


class FolderPathResponse(BaseModel):
    """Response model for the breadcrumb path of a folder."""
    path: List[FolderResponse]


class DeleteFolderResponse(BaseModel):
    """Response model for folder deletion."""
    success: bool = True
    deleted_chunks: int
