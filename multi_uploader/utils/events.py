import inspect
import logging
from typing import Callable, Dict, List

logger = logging.getLogger(__name__)

BATCH_START = "batch_start"
ATTEMPT_FAILED = "attempt_failed"
DESTINATION_SUCCEEDED = "destination_succeeded"
DESTINATION_FAILED = "destination_failed"
BATCH_COMPLETE = "batch_complete"


class EventEmitter:
    """Simple event emitter for fan-out upload events."""

    def __init__(self):
        self._listeners: Dict[str, List[Callable]] = {}

    def on(self, event_name: str, callback: Callable):
        """Subscribe to an event."""
        listeners = self._listeners.setdefault(event_name, [])
        if callback not in listeners:
            listeners.append(callback)

    def off(self, event_name: str, callback: Callable):
        """Unsubscribe from an event."""
        if callback in self._listeners.get(event_name, []):
            self._listeners[event_name].remove(callback)

    def listener_count(self, event_name: str) -> int:
        return len(self._listeners.get(event_name, []))

    async def emit(self, event_name: str, *args, **kwargs):
        """Emit an event to all listeners. Listener errors are logged, never raised."""
        for callback in list(self._listeners.get(event_name, [])):
            try:
                if inspect.iscoroutinefunction(callback):
                    await callback(*args, **kwargs)
                else:
                    callback(*args, **kwargs)
            except Exception as e:
                logger.error(f"Error in event listener for {event_name}: {e}")
