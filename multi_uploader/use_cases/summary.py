"""Markdown link summary over merged results."""
from typing import Dict, List, Sequence

from multi_uploader.models import MergedRecord

FALLBACK_GROUP = "image"


class SummaryFormatter:
    """Renders merged records as one Markdown table per filename."""

    @staticmethod
    def group(records: Sequence[MergedRecord]) -> Dict[str, List[MergedRecord]]:
        groups: Dict[str, List[MergedRecord]] = {}
        for record in records:
            groups.setdefault(record.file_name or FALLBACK_GROUP, []).append(record)
        return groups

    @classmethod
    def render(cls, records: Sequence[MergedRecord]) -> str:
        if not records:
            return ""

        sections = []
        for filename, group in cls.group(records).items():
            rows = "\n".join(
                f"| {record.uploader or '-'} | ![]({record.url or ''}) | "
                f"[{record.url or ''}]({record.url or ''}) |"
                for record in group
            )
            sections.append(
                f"### 🖼️ {filename}\n\n"
                "| Destination | Preview | Link |\n"
                "|------|------|------|\n"
                f"{rows}\n"
            )
        return "\n".join(sections)
