# Public API
from .build_plan import BuildPlan
from .cache import SignedMetadataStore
from .config import ContainerConfig
from .container import AutowireContainer
from .exceptions import (
    AutowireError,
    CacheIntegrityError,
    CacheWriteError,
    CircularDependencyError,
    InvalidSignatureError,
    NotFoundError,
    SignatureKeyRequiredError,
    UnresolvableError,
)
from .hooks import CACHE_HIT, CACHE_MISS, ERROR, RESOLVE, ContainerEvent
from .type_descriptor import type_identifier

__all__ = [
    "AutowireContainer",
    "ContainerConfig",
    "SignedMetadataStore",
    "BuildPlan",
    "type_identifier",
    # Events
    "ContainerEvent",
    "RESOLVE",
    "ERROR",
    "CACHE_HIT",
    "CACHE_MISS",
    # Exceptions
    "AutowireError",
    "NotFoundError",
    "UnresolvableError",
    "CircularDependencyError",
    "CacheIntegrityError",
    "SignatureKeyRequiredError",
    "CacheWriteError",
    "InvalidSignatureError",
]

# Version will be dynamically set by poetry-dynamic-versioning
try:
    from ._version import __version__
except ImportError:
    # Fallback for development
    __version__ = '0.0.0'
