"""Reclaims staged chunks of aborted, failed or abandoned resumable uploads."""

from typing import List

from common.logging_config import get_logger, short_handle
from gramstore.blob_store import BlobStoreAdapter
from gramstore.config import TEMP_CHUNK_MAX_AGE
from gramstore.domain import CleanupResult, SweepResult
from gramstore.repositories.temp_chunk_repository import TempChunkRepository
from gramstore.utils import timestamp_seconds_ago

logger = get_logger(__name__)


class CleanupReconciler:
    """
    Removes the staging rows of an upload session and, where the backend
    allows it, the remote objects they point to.

    Metadata always wins: staging rows are deleted even when some remote
    deletes fail, and individual failures are reported, never raised.
    """

    def __init__(self, blob_store: BlobStoreAdapter):
        self.blob_store = blob_store
        self.temp_chunk_repo = TempChunkRepository()

    async def reconcile(self, upload_id: str) -> CleanupResult:
        """
        Clean up every staged chunk of one upload session.

        Calling this for an unknown or already-cleaned session is a no-op success.
        """
        temp_chunks = self.temp_chunk_repo.get_by_upload(upload_id)
        if not temp_chunks:
            logger.info(f"No staged chunks to clean [upload_id={upload_id}]")
            return CleanupResult(upload_id=upload_id, cleared_count=0)

        logger.info(f"Cleaning {len(temp_chunks)} staged chunks [upload_id={upload_id}]")

        errors = await self.delete_remote_objects(
            [chunk.telegram_file_id for chunk in temp_chunks],
            context=f"upload_id={upload_id}",
        )

        cleared = self.temp_chunk_repo.delete_by_upload(upload_id)
        logger.info(
            f"Cleanup complete [upload_id={upload_id}]: {cleared} rows cleared, "
            f"{len(errors)} remote delete failures"
        )
        return CleanupResult(upload_id=upload_id, cleared_count=cleared, errors=errors)

    async def delete_remote_objects(self, handles: List[str], context: str = "") -> List[str]:
        """
        Best-effort delete of remote objects, one at a time.

        Returns:
            Human-readable failure descriptions (empty when the backend cannot delete)
        """
        if not self.blob_store.supports_delete or not handles:
            return []

        errors = []
        for position, handle in enumerate(handles, start=1):
            try:
                deleted = await self.blob_store.delete(handle)
            except Exception as e:
                deleted = False
                logger.warning(f"Unexpected error deleting {short_handle(handle)} [{context}]: {e}")
            if not deleted:
                errors.append(f"Failed to delete remote object {position}/{len(handles)}")
        return errors

    async def sweep_stale(self, max_age_seconds: int = TEMP_CHUNK_MAX_AGE) -> SweepResult:
        """
        Reconcile every upload session that has not staged a chunk within `max_age_seconds`.
        """
        cutoff = timestamp_seconds_ago(max_age_seconds)
        upload_ids = self.temp_chunk_repo.find_stale_uploads(cutoff)
        if not upload_ids:
            logger.debug("No stale upload sessions")
            return SweepResult(sessions=0, cleared_count=0)

        logger.info(f"Sweeping {len(upload_ids)} stale upload sessions older than {cutoff}")

        cleared = 0
        errors = []
        for upload_id in upload_ids:
            result = await self.reconcile(upload_id)
            cleared += result.cleared_count
            errors.extend(result.errors)

        return SweepResult(sessions=len(upload_ids), cleared_count=cleared, errors=errors)
