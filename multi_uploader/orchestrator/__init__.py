"""Orchestrator package - coordinates fan-out upload workflows."""
from .core import FanOutEngine
from .executor import (
    DestinationNotFoundError,
    InvalidUploadResultError,
    MultiUploadError,
    RetryingUploadExecutor,
    TransientUploadError,
)
from .hooks import MultiUploadPlugin
from .host import LocalUploadHost, PrimaryUploadError
from .models import BatchOutcome, BatchState, UploadAttemptContext, UploadBatch, build_attempt_context

__all__ = [
    "FanOutEngine",
    "MultiUploadPlugin",
    "LocalUploadHost",
    "PrimaryUploadError",
    "RetryingUploadExecutor",
    "MultiUploadError",
    "DestinationNotFoundError",
    "TransientUploadError",
    "InvalidUploadResultError",
    "BatchOutcome",
    "BatchState",
    "UploadAttemptContext",
    "UploadBatch",
    "build_attempt_context",
]
