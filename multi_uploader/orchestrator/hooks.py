"""Host lifecycle hooks: snapshot before upload, fan out after upload."""
import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional

from ..models import CONFIG_SCHEMA, DEFAULT_EXTENSION, PLUGIN_NAME, ConfigOption, MultiUploadConfig
from ..protocols import IDestinationRegistry, IPluginHost
from ..services.artifact_cache import ArtifactCache
from ..services.capabilities import CapabilityTable
from ..services.config import get_primary_destination
from ..use_cases.filename_resolution import generate_unique_filename
from ..utils.events import EventEmitter
from .core import FanOutEngine
from .models import BatchOutcome, BatchState, UploadBatch

logger = logging.getLogger(__name__)


class MultiUploadPlugin:
    """
    Registers the fan-out engine on a host's upload lifecycle.

    Usage:
        plugin = MultiUploadPlugin(registry)
        plugin.register(host)

    The snapshot lives in ``batch.state`` between the two hooks, so
    overlapping batches never share it.
    """

    def __init__(
        self,
        registry: IDestinationRegistry,
        capabilities: Optional[CapabilityTable] = None,
        events: Optional[EventEmitter] = None,
        eager_unify: bool = True,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self._registry = registry
        self._capabilities = capabilities or CapabilityTable()
        self._events = events or EventEmitter()
        self._eager_unify = eager_unify
        self._sleep = sleep

    @property
    def events(self) -> EventEmitter:
        return self._events

    @staticmethod
    def config_schema() -> List[ConfigOption]:
        return list(CONFIG_SCHEMA)

    def register(self, host: IPluginHost) -> None:
        host.register_before_upload(PLUGIN_NAME, self.before_upload)
        host.register_after_upload(PLUGIN_NAME, self.after_upload)

    async def before_upload(self, batch: UploadBatch) -> UploadBatch:
        """Capture the snapshot and, when every bed takes custom names, name the primary too."""
        options = MultiUploadConfig.from_mapping(batch.config.get_config(PLUGIN_NAME))
        primary_id = get_primary_destination(batch.config)
        state = BatchState(
            snapshot=ArtifactCache.capture(batch.output),
            config=options,
            primary_id=primary_id,
        )

        if self._eager_unify and options.unify_filename and self._all_accept_custom(options, primary_id):
            extension = state.snapshot[0].extension if state.snapshot else DEFAULT_EXTENSION
            state.eager_filename = generate_unique_filename(extension)
            for item in batch.output:
                _set_file_name(item, state.eager_filename)
            logger.info(f"📝 Primary upload renamed to unified filename: {state.eager_filename}")

        batch.state[PLUGIN_NAME] = state
        return batch

    async def after_upload(self, batch: UploadBatch) -> UploadBatch:
        """Run the fan-out engine and replace the batch output with merged records."""
        state: Optional[BatchState] = batch.state.pop(PLUGIN_NAME, None)
        if state is None:
            logger.warning("No snapshot from before_upload; capturing from current output")
            state = BatchState(
                snapshot=ArtifactCache.capture(batch.output),
                config=MultiUploadConfig.from_mapping(batch.config.get_config(PLUGIN_NAME)),
                primary_id=get_primary_destination(batch.config),
            )

        outcome = await self.run(batch, state)
        batch.output = [record.to_dict() for record in outcome.records]
        if outcome.markdown:
            logger.info(f"\n📋 Markdown Link Summary:\n\n{outcome.markdown}")
        batch.state["outcome"] = outcome
        return batch

    async def run(self, batch: UploadBatch, state: BatchState) -> BatchOutcome:
        engine = FanOutEngine(
            self._registry,
            batch.config,
            capabilities=self._capabilities,
            events=self._events,
            sleep=self._sleep,
        )
        return await engine.run(
            state.primary_id,
            batch.output,
            state.snapshot,
            state.config,
            preset_filename=state.eager_filename,
        )

    def _all_accept_custom(self, options: MultiUploadConfig, primary_id: Optional[str]) -> bool:
        backups = [bed for bed in options.bed_list if bed != primary_id]
        if not backups:
            return False
        beds = [*backups, primary_id]
        return all(
            self._capabilities.supports_custom_filename(bed) for bed in beds
        )


def _set_file_name(item: Any, file_name: str) -> None:
    if isinstance(item, dict):
        key = "fileName" if "fileName" in item and "file_name" not in item else "file_name"
        item[key] = file_name
    elif hasattr(item, "file_name"):
        try:
            setattr(item, "file_name", file_name)
        except AttributeError:
            logger.debug(f"Cannot rename immutable output item {item!r}")
