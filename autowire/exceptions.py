"""
Autowire Exceptions

Custom exception hierarchy for the autowire container.

Every error carries a user-safe message (``str(error)``) and an optional
operator-facing ``debug_message`` with remediation details meant for logs.
"""

from typing import Optional, Sequence, Tuple


class AutowireError(Exception):
    """
    Base exception for all autowire errors.

    All container-specific exceptions inherit from this class.
    You can catch this to handle any container error generically.

    Attributes:
        message: User-facing message, safe to show in production
        debug_message: Additional details for logging (may be None)

    Example:
        >>> try:
        ...     service = container.get(MyService)
        ... except AutowireError as e:
        ...     logger.error("DI error: %s (%s)", e, e.debug_message)
    """

    def __init__(self, message: str = "Container error", debug_message: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.debug_message = debug_message

    def __str__(self) -> str:
        return self.message


class NotFoundError(AutowireError):
    """
    Raised when an identifier names nothing the container can resolve.

    This error occurs when calling ``get()`` with an identifier that has
    no instance, definition or alias, and that does not name an importable
    class.

    Common causes:
        - Typo in a string identifier
        - Requesting an arbitrary key that was never registered with ``set()``
        - Requesting a class whose module cannot be imported

    Solution:
        Register the key explicitly::

            container.set("mailer.dsn", lambda c: "smtp://localhost")
    """

    pass


class UnresolvableError(AutowireError):
    """
    Raised when an identifier exists but cannot be constructed.

    Common causes:
        - The class is abstract, a Protocol, or an ``ABC`` interface
        - A constructor parameter has no type hint (or a union type) and no default
        - A constructor parameter is a builtin type (``str``, ``int``, ...)
          without a default
        - A dependency of the class cannot be resolved
        - A factory or constructor raised an exception

    Solution:
        Bind interfaces to implementations, or register a factory for
        classes that need configuration values::

            container.bind(LoggerInterface, FileLogger)
            container.set(ApiClient, lambda c: ApiClient(api_key="secret"))
    """

    pass


class CircularDependencyError(UnresolvableError):
    """
    Raised when circular dependency is detected during resolution.

    This error occurs when type A depends on type B, and type B
    (directly or indirectly) depends on type A.

    Example of circular dependency::

        class ServiceA:
            def __init__(self, b: ServiceB): ...

        class ServiceB:
            def __init__(self, a: ServiceA): ...  # Circular!

    Attributes:
        chain: Identifiers from the outermost resolution down to the repeated one

    Solution:
        1. Refactor to remove the circular dependency
        2. Break the cycle with a factory registered via ``set()``
        3. Extract common functionality to a third service
    """

    def __init__(self, chain: Sequence[str]):
        self.chain: Tuple[str, ...] = tuple(chain)
        super().__init__(f"Circular dependency detected: {' -> '.join(self.chain)}")


class CacheIntegrityError(AutowireError):
    """
    Base class for build-plan cache errors.

    Raised when the cache store is misconfigured, cannot be written,
    or holds content whose signature does not verify.
    """

    pass


class SignatureKeyRequiredError(CacheIntegrityError):
    """
    Raised when caching is enabled without a signing key.

    An unsigned cache file can be replaced by anyone with write access
    to its directory, so the store refuses to start without a key.

    Solution:
        Pass a key to ``enable_cache(path, key)`` or set the
        ``CONTAINER_CACHE_KEY`` environment variable.
    """

    def __init__(self):
        super().__init__(
            "Cache signature key is required when caching is enabled",
            "Provide a signature key via enable_cache(path, key) or set the "
            "CONTAINER_CACHE_KEY environment variable. "
            "This prevents loading tampered cache files.",
        )


class CacheWriteError(CacheIntegrityError):
    """
    Raised when the cache directory or file cannot be written.

    Attributes:
        path: The directory or file that could not be written
    """

    def __init__(self, message: str, path: str, debug_message: Optional[str] = None):
        super().__init__(message, debug_message)
        self.path = path

    @classmethod
    def directory_not_writable(cls, directory: str) -> 'CacheWriteError':
        return cls(
            f"Cache directory is not writable: {directory}",
            directory,
            "Ensure the directory exists and has write permissions.",
        )

    @classmethod
    def write_failed(cls, path: str) -> 'CacheWriteError':
        return cls(
            f"Failed to write cache file: {path}",
            path,
            "Check file permissions and disk space.",
        )


class InvalidSignatureError(CacheIntegrityError):
    """
    Raised when the cache file signature is missing, malformed or wrong.

    This is never downgraded to a cache miss: a payload that fails
    verification may have been forged.

    Solution:
        Delete the cache file (``clear_cache()``) if the signing key was
        rotated on purpose; otherwise investigate who wrote the file.
    """

    def __init__(self):
        super().__init__(
            "Cache file signature is invalid",
            "The cache file may have been tampered with or the signature key has changed.",
        )
