"""Background task that reclaims abandoned resumable upload sessions."""

import asyncio
from typing import Callable, Optional

from common.logging_config import get_logger
from gramstore.blob_store import BlobStoreAdapter
from gramstore.config import SWEEP_INTERVAL, TEMP_CHUNK_MAX_AGE
from gramstore.domain import SweepResult
from gramstore.services.cleanup_service import CleanupReconciler
from gramstore.telegram_client import TelegramBlobStore

logger = get_logger(__name__)


class StaleUploadSweeper:
    """
    Periodically cleans staged chunks of sessions that stopped receiving chunks.
    """

    def __init__(
        self,
        blob_store_factory: Callable[[], BlobStoreAdapter] = TelegramBlobStore,
        interval_seconds: int = SWEEP_INTERVAL,
        max_age_seconds: int = TEMP_CHUNK_MAX_AGE,
    ):
        """
        Initialize sweeper task.

        Args:
            blob_store_factory: Builds a fresh adapter for each sweep cycle
            interval_seconds: Time between sweeps
            max_age_seconds: Sessions idle longer than this are reclaimed
        """
        self.blob_store_factory = blob_store_factory
        self.interval_seconds = interval_seconds
        self.max_age_seconds = max_age_seconds
        self._running = False
        self._task: Optional[asyncio.Task] = None

    async def start(self) -> None:
        """Start the background sweep task."""
        if self._running:
            logger.warning("Stale upload sweeper already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._run())
        logger.info(
            f"Started stale upload sweeper (interval: {self.interval_seconds}s, "
            f"max age: {self.max_age_seconds}s)"
        )

    async def stop(self) -> None:
        """Stop the background sweep task."""
        if not self._running:
            return

        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        logger.info("Stopped stale upload sweeper")

    async def _run(self) -> None:
        while self._running:
            try:
                await asyncio.sleep(self.interval_seconds)

                if not self._running:
                    break

                await self.sweep_once()

            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in stale upload sweep: {e}", exc_info=True)

    async def sweep_once(self) -> SweepResult:
        """Execute one sweep cycle with a fresh blob store."""
        blob_store = self.blob_store_factory()
        try:
            result = await CleanupReconciler(blob_store).sweep_stale(self.max_age_seconds)
        finally:
            await blob_store.close()

        if result.sessions:
            logger.info(
                f"Sweep complete: {result.sessions} sessions, {result.cleared_count} staged chunks cleared"
            )
        return result
