"""
ResolutionStack

This module tracks the identifiers currently under construction so that
circular dependencies are reported instead of recursing forever.

The stack is an insertion-ordered set: pushing the same identifier twice
means the dependency graph loops back on itself, and the insertion order
gives the chain to report. Frames are entered with a context manager, so
an identifier is popped on every exit path, including exceptions.

Example (internal usage)::

    stack = ResolutionStack()
    with stack.frame("app.A"):
        with stack.frame("app.B"):
            stack.frame("app.A")  # raises CircularDependencyError: app.A -> app.B -> app.A
"""

from contextlib import contextmanager
from typing import Dict, Iterator, Tuple

from .exceptions import CircularDependencyError


class ResolutionStack:
    """Ordered set of identifiers being resolved, for cycle detection."""

    def __init__(self):
        self._resolving: Dict[str, None] = {}

    def __contains__(self, identifier: str) -> bool:
        return identifier in self._resolving

    def __len__(self) -> int:
        return len(self._resolving)

    @property
    def chain(self) -> Tuple[str, ...]:
        """Identifiers from the outermost resolution to the innermost."""
        return tuple(self._resolving)

    def check(self, identifier: str) -> None:
        """Raise if resolving ``identifier`` now would close a cycle.

        Raises:
            CircularDependencyError: When the identifier is already being resolved
        """
        if identifier in self._resolving:
            raise CircularDependencyError(self.chain + (identifier,))

    @contextmanager
    def frame(self, identifier: str) -> Iterator[None]:
        """Push ``identifier`` for the duration of the ``with`` block."""
        self.check(identifier)
        self._resolving[identifier] = None
        try:
            yield
        finally:
            del self._resolving[identifier]
