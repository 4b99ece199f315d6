"""
Test Configuration and Utilities

Common base classes and helper functions for autowire tests
"""

import os
import shutil
import tempfile
import unittest
from typing import List, Optional

from autowire import AutowireContainer, ContainerConfig, ContainerEvent

SIGNATURE_KEY = 'test-signature-key'


class AutowireTestCase(unittest.TestCase):
    """
    Base test case class for autowire tests.

    Provides a fresh temporary directory per test and a cache file path
    inside it, removed again after the test.
    """

    def setUp(self):
        """Create a temporary cache directory before each test"""
        self.temp_dir = tempfile.mkdtemp(prefix='autowire-test-')
        self.cache_file = os.path.join(self.temp_dir, 'container.cache')

    def tearDown(self):
        """Remove the temporary cache directory after each test"""
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def create_cached_container(
        self,
        signature_key: Optional[str] = SIGNATURE_KEY,
        debug: bool = False,
    ) -> AutowireContainer:
        """Create a container caching to this test's cache file."""
        return AutowireContainer(ContainerConfig(
            debug=debug,
            cache_file=self.cache_file,
            cache_key=signature_key,
        ))


def record_events(container: AutowireContainer, *events: str) -> List[ContainerEvent]:
    """
    Collect every event of the given names raised by the container.

    Example:
        >>> seen = record_events(container, 'resolve', 'cacheHit')
        >>> container.get(Service)
        >>> [event.name for event in seen]
        ['resolve']
    """
    seen: List[ContainerEvent] = []
    for event in events:
        container.on(event, seen.append)
    return seen
