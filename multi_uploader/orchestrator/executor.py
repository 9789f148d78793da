"""Per-destination upload with isolated contexts and fixed-delay retries."""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Iterable, List, Optional, Sequence

from ..models import ImageArtifact, UploadResult
from ..protocols import IConfigProvider, IDestinationRegistry
from ..utils.events import EventEmitter
from .models import build_attempt_context

logger = logging.getLogger(__name__)


class MultiUploadError(Exception):
    """Base error for fan-out uploads."""


class DestinationNotFoundError(MultiUploadError):
    """Raised when a bed id is not registered. Never retried."""

    def __init__(self, destination_id: str):
        super().__init__(f"Uploader not found: {destination_id}")
        self.destination_id = destination_id


class TransientUploadError(MultiUploadError):
    """An attempt failed in a way worth retrying."""


class InvalidUploadResultError(TransientUploadError):
    """A destination finished without producing a usable URL."""


class RetryingUploadExecutor:
    """
    Runs one destination's upload, retrying on failure.

    Each attempt gets a freshly cloned UploadAttemptContext so retries and
    concurrent destinations never observe each other's state.
    """

    def __init__(
        self,
        registry: IDestinationRegistry,
        config: IConfigProvider,
        events: Optional[EventEmitter] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """
        Initialize executor.

        Args:
            registry: Destination lookup by bed id
            config: Host configuration, handed read-only to destinations
            events: Optional emitter for attempt/destination events
            sleep: Coroutine used for the delay between retries
        """
        self._registry = registry
        self._config = config
        self._events = events
        self._sleep = sleep

    async def attempt(
        self,
        destination_id: str,
        snapshot: Sequence[ImageArtifact],
        filename_override: Optional[str] = None,
        max_retries: int = 2,
        delay_ms: int = 2000,
    ) -> Optional[List[UploadResult]]:
        """
        Upload the snapshot to one destination.

        Args:
            destination_id: Bed id to look up in the registry
            snapshot: Immutable artifacts captured for this batch
            filename_override: Name applied to every cloned artifact, if any
            max_retries: Retries after the first attempt
            delay_ms: Fixed wait between attempts

        Returns:
            Validated results, or None once retries are exhausted

        Raises:
            DestinationNotFoundError: the bed id is not registered
        """
        destination = self._registry.get(destination_id)
        if destination is None or not callable(getattr(destination, "upload", None)):
            raise DestinationNotFoundError(destination_id)

        for attempt in range(max_retries + 1):
            try:
                context = build_attempt_context(
                    destination_id,
                    attempt,
                    snapshot,
                    filename_override,
                    self._config,
                    logger,
                )
                returned = await destination.upload(context)
                if returned is not None:
                    context.results = list(returned)

                results = self._validate(destination_id, context.results)
                logger.info(f"✅ {destination_id} upload successful")
                await self._emit("destination_succeeded", destination_id, results)
                return results
            except Exception as e:
                if attempt >= max_retries:
                    logger.error(f"❌ {destination_id} upload failed after maximum retries: {e}")
                    await self._emit("destination_failed", destination_id, e)
                    return None
                logger.warning(
                    f"⚠️ {destination_id} upload failed, retrying "
                    f"({attempt + 1}/{max_retries})... Error: {e}"
                )
                await self._emit("attempt_failed", destination_id, attempt + 1, e)
                await self._sleep(delay_ms / 1000)
        return None

    @staticmethod
    def _validate(destination_id: str, output: Iterable[Any]) -> List[UploadResult]:
        results = [UploadResult.from_any(item) for item in output or ()]
        if not results:
            raise InvalidUploadResultError(f"Uploader {destination_id} returned no valid output")
        if not any(result.has_url for result in results):
            raise InvalidUploadResultError(f"Uploader {destination_id} returned no URL/imgUrl")
        return results

    async def _emit(self, event_name: str, *args) -> None:
        if self._events:
            await self._events.emit(event_name, *args)
