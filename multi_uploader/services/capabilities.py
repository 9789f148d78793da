"""Destination filename capabilities and backup classification."""
from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional, Tuple

from ..models import FilenameCapability

# Beds that always assign their own filename
DEFAULT_CAPABILITIES: Dict[str, FilenameCapability] = {
    "smms": FilenameCapability.PROVIDER_ASSIGNED,
    "imgur": FilenameCapability.PROVIDER_ASSIGNED,
}


class CapabilityTable:
    """
    Static lookup of filename capability by destination id.

    Ids are matched case-insensitively. Unknown ids accept custom filenames.
    """

    def __init__(self, overrides: Optional[Mapping[str, FilenameCapability]] = None):
        self._table: Dict[str, FilenameCapability] = {
            key.lower(): value for key, value in DEFAULT_CAPABILITIES.items()
        }
        for key, value in (overrides or {}).items():
            self._table[key.lower()] = value

    def capability(self, destination_id: Optional[str]) -> FilenameCapability:
        if not destination_id:
            return FilenameCapability.CUSTOM
        return self._table.get(destination_id.lower(), FilenameCapability.CUSTOM)

    def supports_custom_filename(self, destination_id: Optional[str]) -> bool:
        return self.capability(destination_id) is FilenameCapability.CUSTOM


@dataclass(frozen=True)
class Classification:
    """Backup beds split by filename capability."""
    primary_id: Optional[str]
    backups: Tuple[str, ...]
    no_custom_filename_backups: Tuple[str, ...]
    custom_filename_backups: Tuple[str, ...]
    primary_supports_custom: bool

    @property
    def has_backups(self) -> bool:
        return bool(self.backups)


class DestinationClassifier:
    """Partitions the configured beds into primary and backups."""

    def __init__(self, capabilities: Optional[CapabilityTable] = None):
        self._capabilities = capabilities or CapabilityTable()

    @property
    def capabilities(self) -> CapabilityTable:
        return self._capabilities

    def classify(self, all_ids: Iterable[str], primary_id: Optional[str]) -> Classification:
        seen = set()
        backups = []
        for bed in all_ids:
            if bed == primary_id or bed in seen:
                continue
            seen.add(bed)
            backups.append(bed)

        supports = self._capabilities.supports_custom_filename
        return Classification(
            primary_id=primary_id,
            backups=tuple(backups),
            no_custom_filename_backups=tuple(b for b in backups if not supports(b)),
            custom_filename_backups=tuple(b for b in backups if supports(b)),
            primary_supports_custom=supports(primary_id),
        )
