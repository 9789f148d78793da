"""
Protocols (Interfaces) for Dependency Inversion.

Following Interface Segregation Principle - small, focused interfaces.
"""
from typing import Any, Awaitable, Callable, Iterable, Optional, Protocol, TYPE_CHECKING, runtime_checkable

if TYPE_CHECKING:
    from .orchestrator.models import UploadAttemptContext


@runtime_checkable
class IConfigProvider(Protocol):
    """Interface for the host's configuration storage."""

    def get_config(self, key: str) -> Any:
        """Return the value stored under a dotted key, or None."""
        ...


@runtime_checkable
class IDestination(Protocol):
    """
    Interface for one image bed.

    The destination must upload every artifact in ``context.artifacts``.
    It reports results either by returning them or by appending them to
    ``context.results``; raising signals a failed attempt.
    """

    async def upload(self, context: "UploadAttemptContext") -> Optional[Iterable[Any]]:
        """Upload the attempt's artifacts."""
        ...


@runtime_checkable
class IDestinationRegistry(Protocol):
    """Interface for looking up destinations by id."""

    def get(self, destination_id: str) -> Optional[IDestination]:
        """Return the destination registered under this id."""
        ...


HookHandler = Callable[[Any], Awaitable[Any]]


@runtime_checkable
class IPluginHost(Protocol):
    """Interface for the host that runs upload lifecycle hooks."""

    def register_before_upload(self, name: str, handler: HookHandler) -> None:
        ...

    def register_after_upload(self, name: str, handler: HookHandler) -> None:
        ...

