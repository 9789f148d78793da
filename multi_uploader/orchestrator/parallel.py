"""Concurrent dispatch of backup uploads."""
import asyncio
import logging
from typing import Iterable, List, Optional, Sequence

from ..models import ImageArtifact, MergedRecord
from ..services.capabilities import CapabilityTable
from .executor import RetryingUploadExecutor

logger = logging.getLogger(__name__)


class ParallelDispatcher:
    """
    Runs the executor for every remaining backup bed at once.

    One task per bed, no concurrency cap. A failing bed never cancels or
    delays the others; results come back in the order beds were given.
    """

    def __init__(self, executor: RetryingUploadExecutor, capabilities: CapabilityTable):
        self._executor = executor
        self._capabilities = capabilities

    async def dispatch_all(
        self,
        destination_ids: Iterable[str],
        snapshot: Sequence[ImageArtifact],
        filename: Optional[str] = None,
        max_retries: int = 2,
        delay_ms: int = 2000,
    ) -> List[MergedRecord]:
        beds = list(destination_ids)
        if not beds:
            return []

        logger.info(
            f"🚀 Parallel uploading to: {', '.join(beds)}"
            + (f" (filename: {filename})" if filename else "")
        )

        tasks = [
            self._executor.attempt(
                bed,
                snapshot,
                filename if self._capabilities.supports_custom_filename(bed) else None,
                max_retries,
                delay_ms,
            )
            for bed in beds
        ]
        settled = await asyncio.gather(*tasks, return_exceptions=True)

        records: List[MergedRecord] = []
        for bed, outcome in zip(beds, settled):
            if isinstance(outcome, BaseException):
                logger.error(f"Backup task exception for {bed}: {outcome}")
                continue
            if not outcome:
                logger.warning(f"{bed} returned empty results")
                continue
            records.extend(MergedRecord(result=result, uploader=bed) for result in outcome)
        return records
