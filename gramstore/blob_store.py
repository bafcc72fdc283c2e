"""Contract for the remote byte store that holds chunk objects."""

from common.logging_config import get_logger, short_handle

logger = get_logger(__name__)


class BlobStoreAdapter:
    """
    Stores opaque byte objects on a remote backend.

    Implementations know nothing about files or chunking: callers hand in
    payloads already within `max_object_size` and keep the returned handles.
    Deletion is best-effort. `delete` never raises, and backends that cannot
    delete at all advertise it through `supports_delete`.
    """

    supports_delete: bool = False

    def __init__(self, max_object_size: int):
        self.max_object_size = max_object_size

    async def put(self, data: bytes, label: str) -> str:
        """
        Upload one object.

        Args:
            data: Payload, at most max_object_size bytes
            label: Advisory remote-side name, never parsed back

        Returns:
            Opaque handle identifying the stored object

        Raises:
            SizeLimitExceededError: If data is larger than max_object_size
            RemoteUnavailableError: If the backend cannot be reached
            RemoteRejectedError: If the backend refuses the object
        """
        raise NotImplementedError

    async def get(self, handle: str) -> bytes:
        """
        Fetch the exact bytes stored under `handle`.

        Raises:
            RemoteUnavailableError: If the backend cannot be reached
            RemoteRejectedError: If the backend does not know the handle
        """
        raise NotImplementedError

    async def delete(self, handle: str) -> bool:
        """
        Best-effort removal of a stored object.

        Returns:
            True if the backend confirmed deletion, False otherwise
        """
        if not self.supports_delete:
            logger.debug(f"Backend does not support deletion, leaving object {short_handle(handle)}")
            return False

        try:
            await self._delete_object(handle)
            logger.info(f"Deleted remote object {short_handle(handle)}")
            return True
        except Exception as e:
            logger.warning(f"Failed to delete remote object {short_handle(handle)}: {e}")
            return False

    async def _delete_object(self, handle: str) -> None:
        raise NotImplementedError

    async def test_connection(self) -> bool:
        """
        Liveness probe for startup and readiness checks.
        """
        raise NotImplementedError

    async def close(self) -> None:
        """Release network resources held by the adapter."""
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
