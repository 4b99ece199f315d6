"""
BuildPlanRepository

In-memory identifier -> BuildPlan mapping, seeded at most once per
container lifetime from a SignedMetadataStore and appended to as new
classes are introspected.

The repository owns the dirty flag: it is set whenever a plan is derived
during this process and cleared once the plans are persisted, so
``persist()`` performs no I/O when nothing new was resolved.
"""

import logging
from typing import Dict, Optional

from .build_plan import BuildPlan
from .cache import SignedMetadataStore

logger = logging.getLogger(__name__)


class BuildPlanRepository:
    """Build plans for one container.

    Attributes:
        store: Backing SignedMetadataStore, or None when caching is off
    """

    def __init__(self, store: Optional[SignedMetadataStore] = None):
        self._store = store
        self._plans: Dict[str, BuildPlan] = {}
        self._loaded = False
        self._dirty = False

    @property
    def store(self) -> Optional[SignedMetadataStore]:
        return self._store

    def attach(self, store: Optional[SignedMetadataStore]) -> None:
        """Replace the backing store (plans already in memory are kept)."""
        self._store = store

    @property
    def dirty(self) -> bool:
        return self._dirty

    def __contains__(self, identifier: str) -> bool:
        return identifier in self._plans

    def __len__(self) -> int:
        return len(self._plans)

    def get(self, identifier: str) -> Optional[BuildPlan]:
        return self._plans.get(identifier)

    def ensure_loaded(self) -> None:
        """Seed the repository from the store, once.

        The load is attempted at most once, whatever its outcome; an
        InvalidSignatureError from the store propagates to the caller.
        """
        if self._loaded or self._store is None:
            return

        self._loaded = True
        plans = self._store.load()
        if plans is not None:
            # Plans derived before the load take precedence
            plans.update(self._plans)
            self._plans = plans

    def add(self, identifier: str, plan: BuildPlan) -> None:
        """Record a newly derived plan and mark the repository dirty."""
        self._plans[identifier] = plan
        self._dirty = True

    def persistable(self) -> Dict[str, BuildPlan]:
        """Plans whose defaults can be written to the store."""
        plans = {}
        for identifier, plan in self._plans.items():
            if plan.is_persistable():
                plans[identifier] = plan
            else:
                logger.debug("Build plan for %s has non-literal defaults; not persisted", identifier)
        return plans

    def persist(self) -> bool:
        """Write the plans to the store if anything new was derived.

        Returns:
            True if the store was written

        Raises:
            CacheWriteError: When the store cannot be written
        """
        if self._store is None or not self._dirty:
            return False

        self._store.save(self.persistable())
        self._dirty = False
        return True

    def clear(self) -> bool:
        """Drop all plans and the persisted file.

        Returns:
            True if a cache file was removed
        """
        self._plans = {}
        self._loaded = False
        self._dirty = False
        if self._store is None:
            return False
        return self._store.clear()
