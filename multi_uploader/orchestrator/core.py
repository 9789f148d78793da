"""Core orchestrator - coordinates the fan-out upload workflow."""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Iterable, Optional, Sequence

from ..models import ImageArtifact, MultiUploadConfig
from ..protocols import IConfigProvider, IDestinationRegistry
from ..services.capabilities import CapabilityTable, DestinationClassifier
from ..utils.events import BATCH_COMPLETE, BATCH_START, EventEmitter
from ..use_cases.filename_resolution import FilenameResolver
from ..use_cases.summary import SummaryFormatter
from .executor import RetryingUploadExecutor
from .merger import ResultMerger
from .models import BatchOutcome
from .parallel import ParallelDispatcher

logger = logging.getLogger(__name__)


class FanOutEngine:
    """
    Mirrors an already-uploaded batch to every backup bed.

    Follows:
    - Dependency Injection (registry, config and capabilities injected)
    - Single Responsibility (delegates to classifier, resolver, dispatcher, merger)

    Usage:
        engine = FanOutEngine(registry, host_config)
        outcome = await engine.run(primary_id, primary_output, snapshot, options)
        print(outcome.markdown)

    run() never raises: every failure degrades to fewer records.
    """

    def __init__(
        self,
        registry: IDestinationRegistry,
        config: IConfigProvider,
        capabilities: Optional[CapabilityTable] = None,
        events: Optional[EventEmitter] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """
        Initialize engine with dependencies.

        Args:
            registry: Destination lookup by bed id
            config: Host configuration accessor
            capabilities: Filename capability table (defaults built in)
            events: Optional event emitter
            sleep: Delay coroutine used between retries
        """
        self._events = events or EventEmitter()
        self._classifier = DestinationClassifier(capabilities)
        self._executor = RetryingUploadExecutor(registry, config, self._events, sleep)
        self._resolver = FilenameResolver()
        self._dispatcher = ParallelDispatcher(self._executor, self._classifier.capabilities)
        self._merger = ResultMerger()

    @property
    def events(self) -> EventEmitter:
        return self._events

    @property
    def classifier(self) -> DestinationClassifier:
        return self._classifier

    async def run(
        self,
        primary_id: Optional[str],
        primary_output: Iterable[Any],
        snapshot: Sequence[ImageArtifact],
        options: MultiUploadConfig,
        preset_filename: Optional[str] = None,
    ) -> BatchOutcome:
        primary_records = self._merger.tag_primary(primary_output, primary_id)

        if not options.bed_list:
            logger.warning("No image beds configured")
            return BatchOutcome(records=tuple(primary_records), warnings=("No image beds configured",))

        classification = self._classifier.classify(options.bed_list, primary_id)
        if not classification.has_backups:
            logger.warning("No backup beds found, skipping")
            return BatchOutcome(records=tuple(primary_records), warnings=("No backup beds found",))

        await self._events.emit(BATCH_START, list(classification.backups))

        try:
            resolution = await self._resolver.resolve(
                primary_records,
                snapshot,
                classification,
                self._executor,
                options,
                preset_filename=preset_filename,
            )
            remaining = [*resolution.remaining_no_custom_backups, *classification.custom_filename_backups]
            dispatched = await self._dispatcher.dispatch_all(
                remaining,
                snapshot,
                resolution.filename,
                options.retry_count,
                options.retry_delay,
            )
        except Exception as e:
            logger.error(f"Fan-out upload aborted, keeping primary results only: {e}")
            return BatchOutcome(records=tuple(primary_records), warnings=(str(e),))

        records = self._merger.merge(primary_records, resolution.priming_records, dispatched)
        outcome = BatchOutcome(
            records=tuple(records),
            filename=resolution.filename,
            warnings=resolution.warnings,
            markdown=SummaryFormatter.render(records) if options.generate_markdown else "",
        )
        logger.info(f"🎉 Multi-bed upload completed ({len(records)} results)")
        await self._events.emit(BATCH_COMPLETE, outcome)
        return outcome
