"""Minimal upload host used by the CLI: one primary upload wrapped in hooks."""
import logging
from typing import Any, Dict, List, Sequence

from ..protocols import HookHandler, IConfigProvider, IDestinationRegistry
from ..services.artifact_cache import ArtifactCache
from ..services.config import get_primary_destination
from .executor import DestinationNotFoundError, RetryingUploadExecutor
from .models import UploadBatch

logger = logging.getLogger(__name__)


class PrimaryUploadError(RuntimeError):
    """Raised when the host's own primary upload produced nothing."""


class LocalUploadHost:
    """
    Runs before-upload hooks, the primary upload and after-upload hooks.

    Implements IPluginHost protocol.
    """

    def __init__(self, registry: IDestinationRegistry, config: IConfigProvider):
        self._registry = registry
        self._config = config
        self._before: Dict[str, HookHandler] = {}
        self._after: Dict[str, HookHandler] = {}

    def register_before_upload(self, name: str, handler: HookHandler) -> None:
        self._before[name] = handler

    def register_after_upload(self, name: str, handler: HookHandler) -> None:
        self._after[name] = handler

    async def upload(self, items: Sequence[Dict[str, Any]]) -> UploadBatch:
        """
        Upload items through the primary bed, running every hook.

        Args:
            items: Output items with file_name, extension and buffer

        Returns:
            The batch, whose output holds the merged records

        Raises:
            PrimaryUploadError: no primary bed configured, or it failed
        """
        primary_id = get_primary_destination(self._config)
        if not primary_id:
            raise PrimaryUploadError("No primary bed configured (bed.uploader / bed.current)")

        batch = UploadBatch(output=[dict(item) for item in items], config=self._config)
        for handler in self._before.values():
            batch = await handler(batch) or batch

        batch.output = await self._upload_primary(primary_id, batch)

        for handler in self._after.values():
            batch = await handler(batch) or batch
        return batch

    async def _upload_primary(self, primary_id: str, batch: UploadBatch) -> List[Dict[str, Any]]:
        executor = RetryingUploadExecutor(self._registry, self._config)
        try:
            results = await executor.attempt(
                primary_id, ArtifactCache.capture(batch.output), max_retries=0
            )
        except DestinationNotFoundError as e:
            raise PrimaryUploadError(str(e)) from e
        if not results:
            raise PrimaryUploadError(f"Primary upload to {primary_id} failed")
        logger.info(f"Primary upload to {primary_id} done ({len(results)} results)")
        if len(results) != len(batch.output):
            logger.warning(
                f"Primary bed {primary_id} returned {len(results)} result(s) "
                f"for {len(batch.output)} item(s)"
            )

        output = []
        for index, result in enumerate(results):
            item = batch.output[index] if index < len(batch.output) else {}
            output.append(
                {
                    **result.metadata,
                    "file_name": result.file_name or item.get("file_name"),
                    "extension": item.get("extension"),
                    "url": result.url,
                    "img_url": result.img_url,
                }
            )
        return output
