"""Configuration accessors for the host and for destinations."""
from typing import Any, Dict, Mapping, Optional

from ..protocols import IConfigProvider

PRIMARY_DESTINATION_KEYS = ("bed.uploader", "bed.current")


class DictConfigProvider:
    """
    In-memory host configuration with dotted-key lookup.

    Implements IConfigProvider protocol.
    """

    def __init__(self, data: Optional[Mapping[str, Any]] = None):
        self._data: Dict[str, Any] = dict(data or {})

    def get_config(self, key: str) -> Any:
        if key in self._data:
            return self._data[key]

        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, Mapping) or part not in node:
                return None
            node = node[part]
        return node

    def set_config(self, key: str, value: Any) -> None:
        parts = key.split(".")
        node = self._data
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[parts[-1]] = value


class ReadOnlyConfig:
    """Config accessor handed to destinations; exposes lookups only."""

    __slots__ = ("_provider",)

    def __init__(self, provider: IConfigProvider):
        self._provider = provider

    def get_config(self, key: str) -> Any:
        return self._provider.get_config(key)


def get_primary_destination(config: IConfigProvider) -> Optional[str]:
    """Id of the bed the host's default upload path used."""
    for key in PRIMARY_DESTINATION_KEYS:
        value = config.get_config(key)
        if value:
            return str(value)
    return None
