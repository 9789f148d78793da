"""Unified filename decision for a fan-out batch."""
from __future__ import annotations

import logging
import secrets
import string
import time
from typing import Optional, Sequence

from multi_uploader.models import DEFAULT_EXTENSION, ImageArtifact, MergedRecord, MultiUploadConfig
from multi_uploader.orchestrator.executor import DestinationNotFoundError, RetryingUploadExecutor
from multi_uploader.orchestrator.models import FilenameResolution
from multi_uploader.services.capabilities import Classification

logger = logging.getLogger(__name__)

_BASE36 = string.digits + string.ascii_lowercase


def to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def extract_filename_from_url(url: Optional[str]) -> Optional[str]:
    """Last path segment of a URL, without its query string."""
    if not url:
        return None
    filename = url.split("/")[-1].split("?")[0]
    return filename or None


def generate_unique_filename(extension: str = DEFAULT_EXTENSION) -> str:
    """``<base36 ms timestamp><8 random base36 chars><extension>``."""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(8))
    return f"{to_base36(int(time.time() * 1000))}{suffix}{extension}"


class FilenameResolver:
    """
    Decides the one canonical filename of a batch.

    Beds that cannot take a custom filename dictate the name; when exactly one
    such bed exists its name is learned from its upload URL, when none exist a
    synthetic name is generated, and when several exist unification is off.
    """

    async def resolve(
        self,
        primary_records: Sequence[MergedRecord],
        snapshot: Sequence[ImageArtifact],
        classification: Classification,
        executor: RetryingUploadExecutor,
        config: MultiUploadConfig,
        preset_filename: Optional[str] = None,
    ) -> FilenameResolution:
        remaining = tuple(classification.no_custom_filename_backups)
        if not config.unify_filename:
            return FilenameResolution(remaining_no_custom_backups=remaining)

        no_custom = list(classification.no_custom_filename_backups)
        if not classification.primary_supports_custom:
            no_custom.append(classification.primary_id)

        if len(no_custom) > 1:
            warning = (
                f"Multiple beds don't support custom filenames ({', '.join(map(str, no_custom))}). "
                "Unified filename disabled."
            )
            logger.warning(f"⚠️ {warning}")
            return FilenameResolution(remaining_no_custom_backups=remaining, warnings=(warning,))

        if not no_custom:
            filename = preset_filename or generate_unique_filename(
                snapshot[0].extension if snapshot else DEFAULT_EXTENSION
            )
            logger.info(f"📝 Generated unified filename: {filename}")
            return FilenameResolution(filename=filename, remaining_no_custom_backups=remaining)

        bed = no_custom[0]
        if bed == classification.primary_id:
            filename = None
            if primary_records:
                filename = extract_filename_from_url(primary_records[0].url)
                logger.info(f"📝 Extracted filename from {bed}: {filename}")
            return FilenameResolution(filename=filename, remaining_no_custom_backups=remaining)

        return await self._prime(bed, remaining, snapshot, executor, config)

    async def _prime(
        self,
        bed: str,
        remaining: Sequence[str],
        snapshot: Sequence[ImageArtifact],
        executor: RetryingUploadExecutor,
        config: MultiUploadConfig,
    ) -> FilenameResolution:
        """Upload to the single name-dictating backup first to learn its filename."""
        logger.info(f"🚀 Uploading to {bed} first (no custom filename support)...")
        remaining = tuple(b for b in remaining if b != bed)

        try:
            results = await executor.attempt(
                bed, snapshot, None, config.retry_count, config.retry_delay
            )
        except DestinationNotFoundError as e:
            logger.error(f"Priming upload skipped: {e}")
            return FilenameResolution(remaining_no_custom_backups=remaining, warnings=(str(e),))

        if not results:
            return FilenameResolution(remaining_no_custom_backups=remaining)

        filename = extract_filename_from_url(results[0].resolved_url)
        logger.info(f"📝 Extracted filename from {bed}: {filename}")
        return FilenameResolution(
            filename=filename,
            priming_records=tuple(MergedRecord(result=r, uploader=bed) for r in results),
            remaining_no_custom_backups=remaining,
        )
