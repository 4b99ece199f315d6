"""
InstanceRegistry

Singleton-scope storage: at most one instance per identifier for the
lifetime of the container. Instances are never evicted, and ``None`` is
a valid stored value.
"""

from typing import Any, Dict, Iterator


class InstanceRegistry:
    """Identifier -> instance mapping owned by one container."""

    def __init__(self):
        self._instances: Dict[str, Any] = {}

    def __contains__(self, identifier: str) -> bool:
        return identifier in self._instances

    def __getitem__(self, identifier: str) -> Any:
        return self._instances[identifier]

    def __len__(self) -> int:
        return len(self._instances)

    def __iter__(self) -> Iterator[str]:
        return iter(self._instances)

    def put(self, identifier: str, instance: Any) -> None:
        self._instances[identifier] = instance
