"""
BuildPlan

This module provides the cached, replayable description of how to
construct a class without introspecting it again.

A plan records, for each constructor parameter in declaration order,
either the identifier of the dependency to resolve or ``None`` meaning
"use the default value recorded at this index". Keyword-only parameters
also record their parameter name so the plan can pass them by keyword.

Example::

    plan = BuildPlan(
        target="app.services.Mailer",
        dependencies=("app.services.Transport", None),
        defaults={1: "noreply@example.com"},
    )
    plan.to_dict()
    # {'class': 'app.services.Mailer',
    #  'dependencies': ['app.services.Transport', None],
    #  'defaults': {'1': 'noreply@example.com'},
    #  'keywords': {}}
"""

import copy
import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple


@dataclass(frozen=True)
class BuildPlan:
    """Immutable build instructions for one class.

    Attributes:
        target: Type identifier of the class to instantiate
        dependencies: One entry per constructor parameter; ``None`` means
            the default value at the same index is used
        defaults: Index -> literal default value
        keywords: Index -> parameter name for keyword-only parameters
    """
    target: str
    dependencies: Tuple[Optional[str], ...] = ()
    defaults: Mapping[int, Any] = field(default_factory=dict)
    keywords: Mapping[int, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'dependencies', tuple(self.dependencies))
        defaults = {index: _detach(value) for index, value in self.defaults.items()}
        object.__setattr__(self, 'defaults', MappingProxyType(defaults))
        object.__setattr__(self, 'keywords', MappingProxyType(dict(self.keywords)))

    def default_for(self, index: int) -> Any:
        """Return the default recorded at ``index``.

        List and dict defaults are copied, so the constructed instance
        never shares state with the plan.
        """
        return _detach(self.defaults.get(index))

    def is_persistable(self) -> bool:
        """Check whether every recorded default survives a JSON round-trip."""
        return all(_is_literal(value) for value in self.defaults.values())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the structure written by the cache store."""
        return {
            'class': self.target,
            'dependencies': list(self.dependencies),
            'defaults': {str(index): value for index, value in self.defaults.items()},
            'keywords': {str(index): name for index, name in self.keywords.items()},
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'BuildPlan':
        """Rebuild a plan from the cache store structure.

        Raises:
            ValueError: When the structure does not describe a valid plan
        """
        if not isinstance(data, Mapping):
            raise ValueError("Build plan must be a mapping")

        target = data.get('class')
        dependencies = data.get('dependencies')
        defaults = data.get('defaults', {})
        keywords = data.get('keywords', {})

        if not isinstance(target, str) or not isinstance(dependencies, list):
            raise ValueError("Build plan requires 'class' and 'dependencies'")
        if not all(dep is None or isinstance(dep, str) for dep in dependencies):
            raise ValueError("Build plan dependencies must be identifiers or null")
        if not isinstance(defaults, Mapping) or not isinstance(keywords, Mapping):
            raise ValueError("Build plan 'defaults' and 'keywords' must be mappings")

        return cls(
            target=target,
            dependencies=tuple(dependencies),
            defaults={_slot(index, len(dependencies)): value for index, value in defaults.items()},
            keywords={_slot(index, len(dependencies)): str(name) for index, name in keywords.items()},
        )


def _slot(index: Any, size: int) -> int:
    slot = int(index)
    if not 0 <= slot < size:
        raise ValueError(f"Build plan index {index} is out of range")
    return slot


def _is_literal(value: Any) -> bool:
    # Exact types only: subclasses (enums, defaultdict, OrderedDict) would
    # come back from JSON as their base type
    if value is None or type(value) in (bool, int, str):
        return True
    if type(value) is float:
        return math.isfinite(value)
    if type(value) is list:
        return all(_is_literal(item) for item in value)
    if type(value) is dict:
        return all(type(key) is str and _is_literal(item) for key, item in value.items())
    return False


def _detach(value: Any) -> Any:
    """Copy literal containers; other defaults are shared as Python shares them."""
    if type(value) in (list, dict) and _is_literal(value):
        return copy.deepcopy(value)
    return value
