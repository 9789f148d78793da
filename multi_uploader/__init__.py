"""
Multi Uploader - mirror one image upload to several image beds.

Follows SOLID principles:
- Single Responsibility: classifier, resolver, executor, dispatcher and
  merger each handle one concern
- Open/Closed: new beds are registry entries and capability table rows
- Dependency Injection: registry and host config injected into the engine

Usage:
    from multi_uploader import (
        DestinationRegistry, DictConfigProvider, LocalUploadHost, MultiUploadPlugin,
    )

    registry = DestinationRegistry({"smms": smms, "github": github})
    config = DictConfigProvider({
        "bed": {"current": "smms"},
        "multi-uploader": {"enabledBeds": "smms,github", "unifyFileName": True},
    })

    host = LocalUploadHost(registry, config)
    MultiUploadPlugin(registry).register(host)
    batch = await host.upload([{"file_name": "cat.png", "buffer": data}])
    print(batch.state["outcome"].markdown)
"""
from .models import (
    CONFIG_SCHEMA,
    PLUGIN_NAME,
    ConfigOption,
    FilenameCapability,
    ImageArtifact,
    MergedRecord,
    MultiUploadConfig,
    UploadResult,
)
from .orchestrator import (
    BatchOutcome,
    DestinationNotFoundError,
    FanOutEngine,
    LocalUploadHost,
    MultiUploadPlugin,
    RetryingUploadExecutor,
    UploadAttemptContext,
    UploadBatch,
)
from .services import (
    ArtifactCache,
    CapabilityTable,
    DestinationClassifier,
    DestinationRegistry,
    DictConfigProvider,
    HTTPDestination,
)
from .use_cases import FilenameResolver, SummaryFormatter

__version__ = "0.1.0"
__all__ = [
    # Main
    "FanOutEngine",
    "MultiUploadPlugin",
    "LocalUploadHost",
    "RetryingUploadExecutor",
    "DestinationNotFoundError",
    # Models
    "CONFIG_SCHEMA",
    "PLUGIN_NAME",
    "ConfigOption",
    "FilenameCapability",
    "ImageArtifact",
    "MergedRecord",
    "MultiUploadConfig",
    "UploadResult",
    "BatchOutcome",
    "UploadAttemptContext",
    "UploadBatch",
    # Services
    "ArtifactCache",
    "CapabilityTable",
    "DestinationClassifier",
    "DestinationRegistry",
    "DictConfigProvider",
    "HTTPDestination",
    # Use cases
    "FilenameResolver",
    "SummaryFormatter",
]
