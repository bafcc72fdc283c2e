"""Folder and directory listing API routes."""

from typing import Optional

from fastapi import APIRouter, Depends, status

from gramstore.dependencies import get_folder_service
from gramstore.schemas.files import FileResponse, RenameRequest
from gramstore.schemas.folders import (
    CreateFolderRequest,
    DeleteFolderResponse,
    DirectoryContentsResponse,
    FolderPathResponse,
    FolderResponse,
)
from gramstore.services.folder_service import FolderService

router = APIRouter(prefix="/api", tags=["Folders"])


@router.get("/entries", response_model=DirectoryContentsResponse)
async def list_entries(
    parent_id: Optional[int] = None,
    folder_service: FolderService = Depends(get_folder_service),
):
    """
    List the subfolders and files of a folder (the root when parent_id is omitted).

    Raises:
        - 404: Folder not found
    """
    contents = folder_service.get_directory_contents(parent_id)
    return DirectoryContentsResponse(
        folder_id=contents.folder_id,
        folders=[FolderResponse.from_folder(f) for f in contents.folders],
        files=[FileResponse.from_file(f) for f in contents.files],
    )


@router.post("/folders", response_model=FolderResponse, status_code=status.HTTP_201_CREATED)
async def create_folder(
    request: CreateFolderRequest,
    folder_service: FolderService = Depends(get_folder_service),
):
    folder = folder_service.create_folder(request.name, request.parent_id)
    return FolderResponse.from_folder(folder)


@router.patch("/folders/{folder_id}", response_model=FolderResponse)
async def rename_folder(
    folder_id: int,
    request: RenameRequest,
    folder_service: FolderService = Depends(get_folder_service),
):
    """
    Rename a folder. The root folder cannot be renamed.
    """
    folder = folder_service.rename_folder(folder_id, request.name)
    return FolderResponse.from_folder(folder)


@router.delete("/folders/{folder_id}", response_model=DeleteFolderResponse)
async def delete_folder(
    folder_id: int,
    folder_service: FolderService = Depends(get_folder_service),
):
    """
    Delete a folder recursively with every file below it.
    """
    deleted_chunks = await folder_service.delete_folder(folder_id)
    return DeleteFolderResponse(deleted_chunks=deleted_chunks)


@router.get("/folders/{folder_id}/path", response_model=FolderPathResponse)
async def get_folder_path(
    folder_id: int,
    folder_service: FolderService = Depends(get_folder_service),
):
    path = folder_service.get_folder_path(folder_id)
    return FolderPathResponse(path=[FolderResponse.from_folder(f) for f in path])
