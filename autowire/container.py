"""
AutowireContainer

This module provides the container front-end. It is responsible for:

- Storing explicit factory definitions and interface aliases
- Holding one shared instance per identifier (singleton scope)
- Delegating everything else to the autowiring Resolver
- Persisting build plans to the signed cache file on request

Lookup precedence for ``get(id)``:

1. An existing instance
2. A factory registered with ``set()``
3. An alias registered with ``bind()``
4. Autowiring of the class named by ``id``

Example::

    container = AutowireContainer(ContainerConfig(
        cache_file="var/cache/container.cache",
        cache_key="secret",
    ))
    container.bind(LoggerInterface, FileLogger)
    container.set(ApiClient, lambda c: ApiClient(api_key="key"))

    controller = container.get(UserController)
    container.save_cache()
"""

import logging
from typing import Any, Callable, Dict, Mapping, Optional, Type, TypeVar, Union, overload

from .config import ContainerConfig
from .cache import SignedMetadataStore
from .definition import Definition
from .exceptions import UnresolvableError
from .hooks import ERROR, RESOLVE, HookRegistry, Listener
from .instance_registry import InstanceRegistry
from .plan_repository import BuildPlanRepository
from .resolver import Resolver
from .type_descriptor import TypeIndex

logger = logging.getLogger(__name__)

T = TypeVar('T')

Identifier = Union[str, type]


class AutowireContainer:
    """Autowiring DI container with a signed build-plan cache.

    Identifiers are strings: either ``"<module>.<qualname>"`` for classes
    or arbitrary keys registered with ``set()``. Every method also accepts
    the class object itself.

    Attributes:
        debug: Whether debug mode (no caching) is active
    """

    def __init__(self, config: Optional[ContainerConfig] = None):
        """Initialize a container.

        Args:
            config: Explicit settings; the environment is not consulted

        Raises:
            SignatureKeyRequiredError: When a cache file is configured
                outside debug mode without a signing key
        """
        config = config or ContainerConfig()
        self._debug = config.debug
        self._definitions: Dict[str, Definition] = {}
        self._aliases: Dict[str, str] = {}
        self._instances = InstanceRegistry()
        self._hooks = HookRegistry()
        self._types = TypeIndex()
        self._plans = BuildPlanRepository()
        self._resolver = Resolver(self, self._types, self._plans, self._instances, self._hooks)

        if config.cache_file is not None:
            self.enable_cache(config.cache_file, config.cache_key)

    @classmethod
    def create(cls, config: Optional[ContainerConfig] = None) -> 'AutowireContainer':
        """Factory method for fluent creation."""
        return cls(config)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides: Any) -> 'AutowireContainer':
        """Create a container configured from environment variables.

        See ContainerConfig.from_env() for the variables and precedence.
        """
        return cls(ContainerConfig.from_env(environ, **overrides))

    @property
    def debug(self) -> bool:
        return self._debug

    @property
    def cache(self) -> Optional[SignedMetadataStore]:
        """The configured cache store, or None."""
        return self._plans.store

    def enable_cache(self, path: str, signature_key: Optional[str] = None) -> 'AutowireContainer':
        """Persist build plans to ``path`` (disabled while in debug mode).

        Args:
            path: Cache file path
            signature_key: HMAC key; required unless in debug mode

        Raises:
            SignatureKeyRequiredError: When no key is given outside debug mode
        """
        self._plans.attach(SignedMetadataStore(path, signature_key, enabled=not self._debug))
        return self

    def set_debug(self, debug: bool) -> 'AutowireContainer':
        """Enable or disable debug mode (debug mode never saves the cache)."""
        self._debug = debug
        return self

    def on(self, event: str, callback: Listener) -> 'AutowireContainer':
        """Register a listener for ``resolve``, ``error``, ``cacheHit`` or ``cacheMiss``.

        Listeners run in registration order; exceptions they raise
        propagate to the caller of ``get()``.
        """
        self._hooks.on(event, callback)
        return self

    def set(self, id: Identifier, factory: Callable[['AutowireContainer'], Any]) -> None:
        """Register a factory. Overrides any alias for the same identifier.

        Args:
            id: Class or arbitrary key
            factory: Callable receiving the container and returning the service

        Example::

            container.set("db.dsn", lambda c: "sqlite://")
            container.set(Database, lambda c: Database(c.get("db.dsn")))
        """
        identifier = self._types.identify(id)
        self._definitions[identifier] = Definition(identifier, factory)

    def bind(self, interface: Identifier, implementation: Identifier) -> 'AutowireContainer':
        """Resolve ``interface`` to ``implementation``.

        Both identifiers share one instance once resolved.
        """
        self._aliases[self._types.identify(interface)] = self._types.identify(implementation)
        return self

    @overload
    def get(self, id: Type[T]) -> T: ...

    @overload
    def get(self, id: str) -> Any: ...

    def get(self, id: Union[str, Type[T]]) -> Any:
        """Return the shared instance for an identifier, creating it if needed.

        Raises:
            NotFoundError: When nothing is registered and no class matches
            UnresolvableError: When the service cannot be constructed
            InvalidSignatureError: When the cache file fails verification
        """
        identifier = self._types.identify(id)

        if identifier in self._instances:
            return self._instances[identifier]

        definition = self._definitions.get(identifier)
        if definition is not None:
            return self._call_factory(definition)

        target = self._aliases.get(identifier)
        if target is not None:
            instance = self.get(target)
            self._instances.put(identifier, instance)
            return instance

        return self._resolver.resolve(identifier)

    def _call_factory(self, definition: Definition) -> Any:
        try:
            instance = definition.factory(self)
        except Exception as e:
            self._hooks.trigger(ERROR, definition.identifier, error=e)
            raise UnresolvableError(
                f"Error while creating service '{definition.identifier}': {e}"
            ) from e

        self._instances.put(definition.identifier, instance)
        self._hooks.trigger(RESOLVE, definition.identifier, instance=instance)
        return instance

    def has(self, id: Identifier) -> bool:
        """Check whether ``get(id)`` has something to resolve (without constructing)."""
        identifier = self._types.identify(id)
        return self.is_bound(identifier) or self._types.lookup(identifier) is not None

    def is_bound(self, id: Identifier) -> bool:
        """Check for an instance, factory or alias (ignores autowiring)."""
        identifier = self._types.identify(id)
        return (
            identifier in self._instances
            or identifier in self._definitions
            or identifier in self._aliases
        )

    def save_cache(self) -> None:
        """Write build plans to disk if new classes were resolved.

        Call this at the end of bootstrap or of a request. Nothing is
        written in debug mode or when no new plan was derived.

        Raises:
            CacheWriteError: When the cache file cannot be written
        """
        if self._debug:
            return
        if self._plans.persist():
            logger.debug("Build-plan cache saved to %s", self._plans.store.path)

    def clear_cache(self) -> bool:
        """Drop build plans and delete the cache file.

        Already constructed instances are kept.

        Returns:
            True if a cache file was removed
        """
        return self._plans.clear()

    def __contains__(self, id: Identifier) -> bool:
        return self.has(id)

    def __getitem__(self, id: Union[str, Type[T]]) -> Callable[[], Any]:
        """Support subscript syntax: container[Type]().

        Example::

            # These are equivalent:
            service = container[MyService]()
            service = container.get(MyService)
        """

        def getter() -> Any:
            return self.get(id)

        return getter

    def __enter__(self) -> 'AutowireContainer':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        """Save the cache when the block exits cleanly.

        Returns:
            False (exceptions are not suppressed)
        """
        if exc_type is None:
            self.save_cache()
        return False
