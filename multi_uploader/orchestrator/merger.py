"""Ordering and tagging of the final result list."""
from typing import Any, Iterable, List, Optional

from ..models import MergedRecord, UploadResult

PRIMARY_TAG = "primary"


class ResultMerger:
    """Primary first, then the priming upload, then backups in configured order."""

    @staticmethod
    def tag_primary(primary_output: Iterable[Any], primary_id: Optional[str]) -> List[MergedRecord]:
        tag = primary_id or PRIMARY_TAG
        return [
            MergedRecord(result=UploadResult.from_any(item), uploader=tag)
            for item in primary_output or ()
        ]

    @staticmethod
    def merge(
        primary_records: Iterable[MergedRecord],
        priming_records: Iterable[MergedRecord],
        dispatched_records: Iterable[MergedRecord],
    ) -> List[MergedRecord]:
        return [*primary_records, *priming_records, *dispatched_records]
