"""
Error Messages Tests

Tests for the exception hierarchy and the separation of user-facing
and debug messages.
"""

import unittest

from autowire import (
    AutowireError,
    CacheIntegrityError,
    CacheWriteError,
    CircularDependencyError,
    InvalidSignatureError,
    NotFoundError,
    SignatureKeyRequiredError,
    UnresolvableError,
)


class TestExceptionHierarchy(unittest.TestCase):
    """Test that all exceptions inherit from AutowireError."""

    def test_not_found_error_inherits_from_base(self):
        """NotFoundError inherits from AutowireError."""
        error = NotFoundError("test")
        self.assertIsInstance(error, AutowireError)
        self.assertIsInstance(error, Exception)

    def test_unresolvable_error_inherits_from_base(self):
        """UnresolvableError inherits from AutowireError."""
        self.assertIsInstance(UnresolvableError("test"), AutowireError)

    def test_circular_dependency_error_is_unresolvable(self):
        """CircularDependencyError inherits from UnresolvableError."""
        error = CircularDependencyError(['a.A', 'a.B', 'a.A'])
        self.assertIsInstance(error, UnresolvableError)

    def test_cache_errors_inherit_from_cache_integrity_error(self):
        """Every cache failure is a CacheIntegrityError."""
        for error in (
            SignatureKeyRequiredError(),
            InvalidSignatureError(),
            CacheWriteError.write_failed('/tmp/x.cache'),
        ):
            with self.subTest(error=type(error).__name__):
                self.assertIsInstance(error, CacheIntegrityError)
                self.assertIsInstance(error, AutowireError)

    def test_not_found_is_not_unresolvable(self):
        """Callers can tell missing services from broken ones."""
        self.assertFalse(issubclass(NotFoundError, UnresolvableError))

    def test_catch_all_autowire_errors(self):
        """A single except clause catches every container error."""
        for error_class in (NotFoundError, UnresolvableError, CacheIntegrityError):
            with self.subTest(error_class=error_class.__name__):
                with self.assertRaises(AutowireError):
                    raise error_class("test")


class TestDebugMessages(unittest.TestCase):
    """User-facing and debug messages are kept apart."""

    def test_debug_message_none_by_default(self):
        error = AutowireError("Something failed")

        self.assertIsNone(error.debug_message)
        self.assertEqual(str(error), "Something failed")

    def test_debug_message_not_in_str(self):
        error = UnresolvableError("Service unavailable", "connection refused on port 5432")

        self.assertEqual(str(error), "Service unavailable")
        self.assertEqual(error.debug_message, "connection refused on port 5432")

    def test_default_message(self):
        self.assertEqual(str(AutowireError()), "Container error")

    def test_supports_exception_chaining(self):
        cause = ValueError("root cause")
        try:
            raise NotFoundError("outer") from cause
        except NotFoundError as e:
            self.assertIs(e.__cause__, cause)

    def test_directory_not_writable(self):
        error = CacheWriteError.directory_not_writable('/var/cache')

        self.assertEqual(str(error), 'Cache directory is not writable: /var/cache')
        self.assertEqual(error.path, '/var/cache')
        self.assertIn('write permissions', error.debug_message)

    def test_write_failed(self):
        error = CacheWriteError.write_failed('/var/cache/c.cache')

        self.assertEqual(str(error), 'Failed to write cache file: /var/cache/c.cache')
        self.assertIn('disk space', error.debug_message)

    def test_invalid_signature(self):
        error = InvalidSignatureError()

        self.assertEqual(str(error), 'Cache file signature is invalid')
        self.assertIn('signature key has changed', error.debug_message)

    def test_signature_key_required(self):
        error = SignatureKeyRequiredError()

        self.assertIn('signature key is required', str(error))
        self.assertIn('enable_cache', error.debug_message)
        self.assertNotIn('enable_cache', str(error))

    def test_circular_dependency_message(self):
        error = CircularDependencyError(['app.A', 'app.B', 'app.A'])

        self.assertEqual(str(error), 'Circular dependency detected: app.A -> app.B -> app.A')
        self.assertEqual(error.chain, ('app.A', 'app.B', 'app.A'))


if __name__ == '__main__':
    unittest.main()
