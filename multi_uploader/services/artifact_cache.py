"""
Artifact Cache - Single Responsibility: snapshot the batch's images once.

The snapshot is taken before any destination is touched and is never
mutated afterwards; every upload attempt clones from it.
"""
import logging
import time
from typing import Any, Iterable, Tuple

from ..models import DEFAULT_EXTENSION, ImageArtifact, read_field

logger = logging.getLogger(__name__)


class ArtifactCache:
    """Captures host output items into immutable ImageArtifact snapshots."""

    @staticmethod
    def capture(source_artifacts: Iterable[Any]) -> Tuple[ImageArtifact, ...]:
        """
        Capture the images of a batch.

        Args:
            source_artifacts: Host output items (mappings or objects) carrying
                file_name/fileName, extension/extname, buffer and/or
                base64_image/base64Image

        Returns:
            Tuple of ImageArtifact, in input order
        """
        snapshot = tuple(ArtifactCache._capture_one(item) for item in source_artifacts or ())
        missing = sum(1 for artifact in snapshot if not artifact.has_content)
        if missing:
            logger.warning(f"{missing} of {len(snapshot)} artifact(s) carry no image content")
        logger.info(f"Cached {len(snapshot)} file(s) for upload")
        return snapshot

    @staticmethod
    def _capture_one(item: Any) -> ImageArtifact:
        extension = read_field(item, "extension", "extname") or DEFAULT_EXTENSION
        file_name = read_field(item, "file_name", "fileName") or f"{int(time.time() * 1000)}{extension}"

        buffer = read_field(item, "buffer")
        base64_image = None
        if buffer is not None:
            buffer = bytes(buffer)
        else:
            base64_image = read_field(item, "base64_image", "base64Image") or None

        return ImageArtifact(
            file_name=file_name,
            extension=extension,
            buffer=buffer,
            base64_image=base64_image,
        )
