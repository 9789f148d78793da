"""Destination registry keyed by bed id."""
from typing import Any, Dict, List, Mapping, Optional

from ..models import FilenameCapability
from ..protocols import IDestination
from .http_destination import HTTPDestination


class DestinationRegistry:
    """
    Dict-backed registry of image beds.

    Implements IDestinationRegistry protocol.
    """

    def __init__(self, destinations: Optional[Mapping[str, IDestination]] = None):
        self._destinations: Dict[str, IDestination] = dict(destinations or {})

    def register(self, destination_id: str, destination: IDestination) -> None:
        self._destinations[destination_id] = destination

    def get(self, destination_id: str) -> Optional[IDestination]:
        return self._destinations.get(destination_id)

    def ids(self) -> List[str]:
        return list(self._destinations)

    def __contains__(self, destination_id: str) -> bool:
        return destination_id in self._destinations

    @classmethod
    def from_config(cls, config: Mapping[str, Mapping[str, Any]]) -> "DestinationRegistry":
        """Build HTTP destinations from the ``destinations`` config block."""
        return cls({bed: HTTPDestination.from_mapping(options) for bed, options in config.items()})


def capability_overrides(config: Mapping[str, Mapping[str, Any]]) -> Dict[str, FilenameCapability]:
    """Read ``custom_filename`` flags from the ``destinations`` config block."""
    overrides = {}
    for bed, options in config.items():
        if "custom_filename" not in options:
            continue
        overrides[bed] = (
            FilenameCapability.CUSTOM
            if options["custom_filename"]
            else FilenameCapability.PROVIDER_ASSIGNED
        )
    return overrides
