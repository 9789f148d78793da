"""Services for multi_uploader module."""
from .artifact_cache import ArtifactCache
from .capabilities import CapabilityTable, Classification, DestinationClassifier
from .config import DictConfigProvider, ReadOnlyConfig, get_primary_destination
from .http_destination import HTTPDestination
from .registry import DestinationRegistry, capability_overrides

__all__ = [
    "ArtifactCache",
    "CapabilityTable",
    "Classification",
    "DestinationClassifier",
    "DictConfigProvider",
    "ReadOnlyConfig",
    "get_primary_destination",
    "HTTPDestination",
    "DestinationRegistry",
    "capability_overrides",
]
