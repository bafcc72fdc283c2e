"""Service layer for business logic."""

from gramstore.services.cleanup_service import CleanupReconciler
from gramstore.services.file_service import FileService
from gramstore.services.folder_service import FolderService
from gramstore.services.reassembly_service import ReassemblyEngine
from gramstore.services.upload_service import UploadCoordinator

__all__ = [
    "CleanupReconciler",
    "FileService",
    "FolderService",
    "ReassemblyEngine",
    "UploadCoordinator",
]
