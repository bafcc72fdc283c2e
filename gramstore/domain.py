"""Composite records returned by the service layer."""

from dataclasses import dataclass, field
from typing import List

from gramstore.repositories.chunk_repository import FileChunk
from gramstore.repositories.file_repository import File
from gramstore.repositories.folder_repository import Folder


@dataclass(frozen=True)
class FileRecord:
    """
    A committed file together with its chunks in index order.
    """
    file: File
    chunks: List[FileChunk] = field(default_factory=list)

    @property
    def id(self) -> int:
        return self.file.id


@dataclass(frozen=True)
class DownloadedFile:
    """
    Reassembled file content and the metadata needed to serve it.
    """
    data: bytes
    name: str
    mime_type: str
    size: int


@dataclass(frozen=True)
class CleanupResult:
    """
    Outcome of reconciling one upload session.
    """
    upload_id: str
    cleared_count: int
    errors: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class SweepResult:
    """
    Outcome of one stale-upload sweep.
    """
    sessions: int
    cleared_count: int
    errors: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class DirectoryContents:
    folder_id: int
    folders: List[Folder] = field(default_factory=list)
    files: List[File] = field(default_factory=list)
