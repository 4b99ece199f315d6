"""
ContainerConfig

Explicit configuration for AutowireContainer.

The container itself never reads the environment. ``from_env()`` builds
a config with the precedence: explicit override > environment > default.

Environment variables:
    - ``APP_DEBUG``: boolean (``1``, ``true``, ``on``, ``yes``)
    - ``APP_ENV``: ``local``, ``dev`` or ``development`` also enable debug
    - ``CONTAINER_CACHE_FILE``: path of the build-plan cache file
    - ``CONTAINER_CACHE_KEY``: HMAC key for the cache file
"""

import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional

DEBUG_ENVIRONMENTS = ('local', 'dev', 'development')
_TRUE_VALUES = ('1', 'true', 'on', 'yes')


@dataclass(frozen=True)
class ContainerConfig:
    """Container settings.

    Attributes:
        debug: Debug mode disables the build-plan cache
        cache_file: Path of the cache file (None disables caching)
        cache_key: HMAC signing key for the cache file
    """
    debug: bool = False
    cache_file: Optional[str] = None
    cache_key: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides: Any) -> 'ContainerConfig':
        """Build a config from environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ``
            **overrides: Explicit values (``debug``, ``cache_file``,
                ``cache_key``) that take priority over the environment

        Example::

            config = ContainerConfig.from_env(cache_key="secret")
        """
        env = os.environ if environ is None else environ

        if overrides.get('debug') is not None:
            debug = bool(overrides['debug'])
        else:
            debug = (
                _parse_bool(env.get('APP_DEBUG'))
                or env.get('APP_ENV', '') in DEBUG_ENVIRONMENTS
            )

        cache_file = overrides.get('cache_file')
        if cache_file is None:
            cache_file = env.get('CONTAINER_CACHE_FILE')

        cache_key = overrides.get('cache_key')
        if cache_key is None:
            cache_key = env.get('CONTAINER_CACHE_KEY')

        return cls(debug=debug, cache_file=cache_file, cache_key=cache_key)


def _parse_bool(value: Optional[str]) -> bool:
    return value is not None and value.strip().lower() in _TRUE_VALUES
