"""Folder service for business logic."""

from typing import List, Optional

from common.logging_config import get_logger
from gramstore.blob_store import BlobStoreAdapter
from gramstore.domain import DirectoryContents
from gramstore.exceptions import FolderNotFoundError, InvalidOperationError
from gramstore.repositories.chunk_repository import ChunkRepository
from gramstore.repositories.file_repository import FileRepository
from gramstore.repositories.folder_repository import Folder, FolderRepository
from gramstore.services.cleanup_service import CleanupReconciler
from gramstore.utils import normalize_folder_id

logger = get_logger(__name__)


def _validate_folder_name(name: Optional[str]) -> str:
    if not name or not name.strip():
        raise InvalidOperationError("Folder name must not be empty")
    return name.strip()


class FolderService:
    def __init__(self, blob_store: BlobStoreAdapter):
        self.folder_repo = FolderRepository()
        self.file_repo = FileRepository()
        self.chunk_repo = ChunkRepository()
        self.reconciler = CleanupReconciler(blob_store)

    def _get_folder(self, folder_id: int) -> Folder:
        folder = self.folder_repo.get_by_id(folder_id)
        if folder is None:
            raise FolderNotFoundError(f"Folder {folder_id} not found")
        return folder

    def create_folder(self, name: str, parent_id: Optional[int] = None) -> Folder:
        name = _validate_folder_name(name)
        parent = self._get_folder(normalize_folder_id(parent_id))
        return self.folder_repo.create_folder(name, parent.id)

    def rename_folder(self, folder_id: int, new_name: str) -> Folder:
        new_name = _validate_folder_name(new_name)
        folder = self._get_folder(folder_id)
        if folder.is_root:
            raise InvalidOperationError("The root folder cannot be renamed")

        self.folder_repo.rename_folder(folder_id, new_name)
        return self._get_folder(folder_id)

    async def delete_folder(self, folder_id: int) -> int:
        """
        Delete a folder with all of its subfolders and files.

        Rows go in one cascading delete; the remote objects of every chunk in
        the subtree are then deleted best-effort.

        Returns:
            Number of chunk objects that belonged to the deleted subtree
        """
        folder = self._get_folder(folder_id)
        if folder.is_root:
            raise InvalidOperationError("The root folder cannot be deleted")

        subtree = self.folder_repo.get_subtree_ids(folder_id)
        handles = self.chunk_repo.get_handles_by_folders(subtree)

        self.folder_repo.delete_folder(folder_id)

        errors = await self.reconciler.delete_remote_objects(handles, context=f"folder_id={folder_id}")
        logger.info(
            f"Deleted folder {folder_id} '{folder.name}' with {len(subtree) - 1} subfolders "
            f"and {len(handles)} chunks ({len(errors)} remote delete failures)"
        )
        return len(handles)

    def get_directory_contents(self, parent_id: Optional[int] = None) -> DirectoryContents:
        folder = self._get_folder(normalize_folder_id(parent_id))
        return DirectoryContents(
            folder_id=folder.id,
            folders=self.folder_repo.list_by_parent(folder.id),
            files=self.file_repo.list_by_folder(folder.id),
        )

    def get_folder_path(self, folder_id: int) -> List[Folder]:
        self._get_folder(folder_id)
        return self.folder_repo.get_path(folder_id)
