"""Orchestrator data models."""
from dataclasses import dataclass, field
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..models import ImageArtifact, MergedRecord, MultiUploadConfig, UploadResult
from ..protocols import IConfigProvider
from ..services.config import ReadOnlyConfig


@dataclass
class AttemptArtifact:
    """Mutable per-attempt clone of an ImageArtifact."""
    file_name: str
    extension: str
    buffer: Optional[bytes]
    base64_image: Optional[str] = None
    url: Optional[str] = None
    img_url: Optional[str] = None


@dataclass
class UploadAttemptContext:
    """
    Isolated context for one upload attempt against one destination.

    Built only through build_attempt_context(); never shared between
    destinations or between retries of the same destination.
    """
    destination_id: str
    attempt: int
    artifacts: List[AttemptArtifact]
    config: ReadOnlyConfig
    logger: logging.Logger
    results: List[Any] = field(default_factory=list)

    def get_config(self, key: str) -> Any:
        return self.config.get_config(key)


def build_attempt_context(
    destination_id: str,
    attempt: int,
    snapshot: Sequence[ImageArtifact],
    filename_override: Optional[str],
    config: IConfigProvider,
    logger: logging.Logger,
) -> UploadAttemptContext:
    """
    Clone the snapshot into a fresh attempt context.

    Buffers are resolved from base64 where needed; encoded text and any URL
    fields are cleared so the destination performs a real upload.

    Raises:
        ValueError: an artifact's base64 content cannot be decoded
    """
    artifacts = [
        AttemptArtifact(
            file_name=filename_override or item.file_name,
            extension=item.extension,
            buffer=item.real_buffer(),
            base64_image=None,
            url=None,
            img_url=None,
        )
        for item in snapshot
    ]
    return UploadAttemptContext(
        destination_id=destination_id,
        attempt=attempt,
        artifacts=artifacts,
        config=ReadOnlyConfig(config),
        logger=logger.getChild(destination_id),
    )


@dataclass(frozen=True)
class FilenameResolution:
    """Outcome of the filename unification decision."""
    filename: Optional[str] = None
    priming_records: Tuple[MergedRecord, ...] = ()
    remaining_no_custom_backups: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()


@dataclass
class BatchState:
    """Batch-scoped state carried from the before-upload hook to the after-upload hook."""
    snapshot: Tuple[ImageArtifact, ...]
    config: MultiUploadConfig
    primary_id: Optional[str] = None
    eager_filename: Optional[str] = None


@dataclass(frozen=True)
class BatchOutcome:
    """Result of one fan-out batch."""
    records: Tuple[MergedRecord, ...]
    filename: Optional[str] = None
    warnings: Tuple[str, ...] = ()
    markdown: str = ""

    @property
    def uploaders(self) -> List[str]:
        return [record.uploader for record in self.records]

    def results_for(self, destination_id: str) -> List[UploadResult]:
        return [record.result for record in self.records if record.uploader == destination_id]


@dataclass
class UploadBatch:
    """One host upload batch as seen by the lifecycle hooks."""
    output: List[Any]
    config: IConfigProvider
    state: Dict[str, Any] = field(default_factory=dict)
