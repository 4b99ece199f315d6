"""
Hooks

Event hooks raised by the container while resolving services.

Events:
    - ``resolve``: a new instance was created (never on singleton hits)
    - ``error``: a factory or constructor raised
    - ``cacheHit``: a build plan was found for the identifier
    - ``cacheMiss``: no build plan existed and the class is introspected

Listener exceptions are not caught; they propagate to the caller of
the operation that triggered the event.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

RESOLVE = 'resolve'
ERROR = 'error'
CACHE_HIT = 'cacheHit'
CACHE_MISS = 'cacheMiss'


@dataclass(frozen=True)
class ContainerEvent:
    """Data passed to hook listeners."""
    name: str
    id: str
    instance: Any = None
    error: Optional[BaseException] = None


Listener = Callable[[ContainerEvent], Any]


class HookRegistry:
    """Ordered listener lists keyed by event name."""

    def __init__(self):
        self._listeners: Dict[str, List[Listener]] = {}

    def on(self, event: str, callback: Listener) -> None:
        self._listeners.setdefault(event, []).append(callback)

    def trigger(self, event: str, id: str, instance: Any = None,
                error: Optional[BaseException] = None) -> None:
        listeners = self._listeners.get(event)
        if not listeners:
            return
        payload = ContainerEvent(name=event, id=id, instance=instance, error=error)
        for callback in list(listeners):
            callback(payload)
