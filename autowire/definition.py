"""
Definition

Data class representing an explicit factory registration
"""

from dataclasses import dataclass
from typing import Any, Callable


@dataclass
class Definition:
    """Explicit factory for one identifier.

    The factory receives the container and returns the service value.
    """
    identifier: str
    factory: Callable[[Any], Any]
