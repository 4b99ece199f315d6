"""
Resolver

This module constructs classes that have no explicit definition or alias.

For every identifier it either replays a cached BuildPlan (no
introspection) or introspects the constructor, resolves each parameter
according to the parameter policy, and records a new plan:

- Untyped or union-typed parameters use their default value
- Builtin-typed parameters (``str``, ``int``, ...) use their default value
- Class-typed parameters are resolved through ``container.get()``;
  an optional parameter falls back to its default when the dependency
  cannot be found

Circular dependencies are detected with a ResolutionStack whose frames
are popped on every exit path.
"""

import logging
from typing import TYPE_CHECKING, Any, Dict, List, Tuple

from .build_plan import BuildPlan
from .exceptions import CircularDependencyError, NotFoundError, UnresolvableError
from .hooks import CACHE_HIT, CACHE_MISS, ERROR, RESOLVE, HookRegistry
from .instance_registry import InstanceRegistry
from .plan_repository import BuildPlanRepository
from .resolution_stack import ResolutionStack
from .type_descriptor import ParameterDescriptor, TypeIndex, is_instantiable

if TYPE_CHECKING:
    from .container import AutowireContainer

logger = logging.getLogger(__name__)


class Resolver:
    """Autowiring engine behind ``AutowireContainer.get()``.

    Attributes:
        stack: Identifiers currently being constructed
    """

    def __init__(
        self,
        container: 'AutowireContainer',
        types: TypeIndex,
        plans: BuildPlanRepository,
        instances: InstanceRegistry,
        hooks: HookRegistry,
    ):
        self._container = container
        self._types = types
        self._plans = plans
        self._instances = instances
        self._hooks = hooks
        self.stack = ResolutionStack()

    def resolve(self, identifier: str) -> Any:
        """Construct the class named by ``identifier``.

        Raises:
            NotFoundError: When the identifier does not name a class
            CircularDependencyError: When the identifier is already being resolved
            UnresolvableError: When the class or one of its parameters
                cannot be resolved, or the constructor raised
            InvalidSignatureError: When the cache file fails verification
        """
        cls = self._types.lookup(identifier)
        if cls is None:
            raise NotFoundError(f"Class or service '{identifier}' not found.")

        self.stack.check(identifier)

        self._plans.ensure_loaded()
        caching = self._plans.store is not None

        plan = self._plans.get(identifier)
        if plan is not None:
            if caching:
                self._hooks.trigger(CACHE_HIT, identifier)
            with self.stack.frame(identifier):
                return self._build_from_plan(identifier, plan)

        if caching:
            self._hooks.trigger(CACHE_MISS, identifier)
        with self.stack.frame(identifier):
            return self._build_with_introspection(identifier, cls)

    def _build_from_plan(self, identifier: str, plan: BuildPlan) -> Any:
        """Replay a plan; every dependency still goes through ``get()``."""
        cls = self._types.lookup(plan.target)
        if cls is None:
            raise NotFoundError(f"Class or service '{plan.target}' not found.")

        args: List[Any] = []
        kwargs: Dict[str, Any] = {}
        for index, dependency in enumerate(plan.dependencies):
            if dependency is None:
                value = plan.default_for(index)
            else:
                value = self._container.get(dependency)
            _place(plan.keywords.get(index), value, args, kwargs)

        instance = self._instantiate(identifier, cls, args, kwargs)
        self._instances.put(identifier, instance)
        self._hooks.trigger(RESOLVE, identifier, instance=instance)
        return instance

    def _build_with_introspection(self, identifier: str, cls: type) -> Any:
        logger.debug("Introspecting %s", identifier)
        descriptor = self._types.describe(cls)

        if not descriptor.instantiable:
            raise UnresolvableError(
                f"Class '{identifier}' is not instantiable (abstract or interface)."
            )

        args: List[Any] = []
        kwargs: Dict[str, Any] = {}
        dependencies: List[Any] = []
        defaults: Dict[int, Any] = {}
        keywords: Dict[int, str] = {}

        for index, param in enumerate(descriptor.parameters):
            dependency, value = self._resolve_parameter(param, identifier)
            dependencies.append(dependency)
            if dependency is None:
                defaults[index] = value
            if param.keyword_only:
                keywords[index] = param.name
            _place(keywords.get(index), value, args, kwargs)

        instance = self._instantiate(identifier, cls, args, kwargs)

        self._plans.add(identifier, BuildPlan(
            target=identifier,
            dependencies=tuple(dependencies),
            defaults=defaults,
            keywords=keywords,
        ))
        self._instances.put(identifier, instance)
        self._hooks.trigger(RESOLVE, identifier, instance=instance)
        return instance

    def _resolve_parameter(self, param: ParameterDescriptor, owner: str) -> Tuple[Any, Any]:
        """Resolve one constructor parameter.

        Returns:
            ``(dependency_identifier, value)``; the identifier is None when
            the value is the parameter's default
        """
        if not param.has_single_concrete_type:
            if param.has_default:
                return None, param.default
            raise UnresolvableError(
                f"Cannot resolve parameter '{param.name}' in class '{owner}'. "
                f"No type hint or union type."
            )

        if param.is_builtin_primitive:
            if param.has_default:
                return None, param.default
            raise UnresolvableError(
                f"Cannot resolve primitive parameter '{param.name}' (type: {param.type_name}) "
                f"in class '{owner}'. Use set() to define this service manually.",
                f"Register a factory: container.set('{owner}', lambda c: ...)",
            )

        dependency = param.declared_type_identifier

        # An unbound interface behind an optional parameter counts as missing
        if (param.is_optional
                and not is_instantiable(param.declared_type)
                and not self._container.is_bound(dependency)):
            return None, param.default

        try:
            return dependency, self._container.get(dependency)
        except NotFoundError as e:
            if param.is_optional:
                return None, param.default
            raise self._dependency_error(dependency, param, owner, e) from e
        except CircularDependencyError:
            raise
        except UnresolvableError as e:
            raise self._dependency_error(dependency, param, owner, e) from e

    @staticmethod
    def _dependency_error(
        dependency: str,
        param: ParameterDescriptor,
        owner: str,
        cause: Exception,
    ) -> UnresolvableError:
        return UnresolvableError(
            f"Cannot resolve dependency '{dependency}' for parameter '{param.name}' "
            f"in class '{owner}'.",
            str(cause),
        )

    def _instantiate(self, identifier: str, cls: type, args: List[Any], kwargs: Dict[str, Any]) -> Any:
        try:
            return cls(*args, **kwargs)
        except Exception as e:
            self._hooks.trigger(ERROR, identifier, error=e)
            raise UnresolvableError(f"Failed to instantiate '{identifier}': {e}") from e


def _place(keyword: Any, value: Any, args: List[Any], kwargs: Dict[str, Any]) -> None:
    if keyword is None:
        args.append(value)
    else:
        kwargs[keyword] = value
