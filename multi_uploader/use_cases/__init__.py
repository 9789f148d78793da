"""Application use cases for fan-out uploads."""

from .filename_resolution import (
    FilenameResolver,
    extract_filename_from_url,
    generate_unique_filename,
    to_base36,
)
from .summary import SummaryFormatter

__all__ = [
    "FilenameResolver",
    "extract_filename_from_url",
    "generate_unique_filename",
    "to_base36",
    "SummaryFormatter",
]
