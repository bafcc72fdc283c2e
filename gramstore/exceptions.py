"""Custom exception classes for the storage service."""

from typing import List, Optional


class GramStoreException(Exception):
    """
    Base exception class for all storage service errors.
    """
    pass


class FileNotFoundError(GramStoreException):
    """
    Raised when a requested file does not exist.
    """
    pass


class FolderNotFoundError(GramStoreException):
    """
    Raised when a requested folder does not exist.
    """
    pass


class InvalidFileError(GramStoreException):
    """
    Raised when an uploaded file has an unusable name or a blocked extension.
    """
    pass


class InvalidChunkError(GramStoreException):
    """
    Raised when a chunk call carries an index or total that cannot be staged.
    """
    pass


class InvalidOperationError(GramStoreException):
    """
    Raised when an operation is not allowed on the target (e.g. deleting the root folder).
    """
    pass


class SizeLimitExceededError(GramStoreException):
    """
    Raised when a file or chunk is larger than the configured ceiling.
    """

    def __init__(self, size: int, limit: int, what: str = "File"):
        self.size = size
        self.limit = limit
        super().__init__(f"{what} size {size} bytes exceeds limit of {limit} bytes")


class RemoteUnavailableError(GramStoreException):
    """
    Raised when the blob backend cannot be reached or times out.
    """
    pass


class RemoteRejectedError(GramStoreException):
    """
    Raised when the blob backend answers but refuses the request.
    """
    pass


class ChunkUploadFailedError(GramStoreException):
    """
    Raised when storing one chunk on the blob backend fails.
    """

    def __init__(self, chunk_index: int, reason: str, upload_id: Optional[str] = None):
        self.chunk_index = chunk_index
        self.upload_id = upload_id
        context = f" [upload_id={upload_id}]" if upload_id else ""
        super().__init__(f"Failed to upload chunk {chunk_index}{context}: {reason}")


class IncompleteUploadError(GramStoreException):
    """
    Raised when a merge is requested before every declared chunk is staged.
    """

    def __init__(self, upload_id: str, expected: int, actual: int, missing: Optional[List[int]] = None):
        self.upload_id = upload_id
        self.expected = expected
        self.actual = actual
        self.missing = missing or []
        message = f"Upload {upload_id} is incomplete: expected {expected} chunks, found {actual}"
        if self.missing:
            shown = ", ".join(str(i) for i in self.missing[:10])
            more = "..." if len(self.missing) > 10 else ""
            message += f" (missing indices: {shown}{more})"
        super().__init__(message)


class MergeFailedError(GramStoreException):
    """
    Raised when staged chunks could not be promoted into a file.
    """

    def __init__(self, upload_id: str, reason: str):
        self.upload_id = upload_id
        super().__init__(f"Merge failed for upload {upload_id}: {reason}")


class MissingChunksError(GramStoreException):
    """
    Raised when a file record exists without any chunk records.
    """

    def __init__(self, file_id: int):
        self.file_id = file_id
        super().__init__(f"File {file_id} has no chunks")


class CorruptFileError(GramStoreException):
    """
    Raised when chunk sizes or indices disagree with the file record.
    """

    def __init__(self, file_id, expected: int, actual: int, detail: str = "bytes"):
        self.file_id = file_id
        self.expected = expected
        self.actual = actual
        super().__init__(f"File {file_id} is corrupt: expected {expected} {detail}, got {actual}")
