"""
SignedMetadataStore

This module persists build plans to a single file protected by an
HMAC-SHA256 signature, so later processes can skip introspection.

File layout::

    #autowire-plans
    # HMAC-SHA256: <64 lowercase hex characters>
    {
      "app.services.Mailer": { ... }
    }

The first line is a format marker. The signature line covers the exact
UTF-8 bytes of the JSON payload that follows it. The payload is plain
data: loading it never executes code. An enabled store always signs.

Policy:
    - A missing, malformed or mismatched signature raises
      InvalidSignatureError. A payload that fails verification may have
      been forged and is never treated as a cache miss.
    - A verified payload that cannot be decoded is discarded and the
      container rebuilds its plans.
    - Write failures always raise CacheWriteError.
"""

import hashlib
import hmac
import json
import logging
import os
import re
import tempfile
from typing import Dict, Mapping, Optional

from .build_plan import BuildPlan
from .exceptions import CacheWriteError, InvalidSignatureError, SignatureKeyRequiredError

logger = logging.getLogger(__name__)

FORMAT_MARKER = '#autowire-plans'
SIGNATURE_PREFIX = '# HMAC-SHA256: '

FILE_MODE = 0o644

_SIGNED_HEADER = re.compile(
    r'\A' + re.escape(FORMAT_MARKER) + r'[ \t]*\n' + re.escape(SIGNATURE_PREFIX) + r'([a-f0-9]{64})\n'
)


class SignedMetadataStore:
    """Durable, tamper-evident storage for build plans.

    Attributes:
        path: Destination cache file
        enabled: Whether the store reads and writes at all

    Example::

        store = SignedMetadataStore("var/cache/plans.cache", signature_key="secret")
        store.save(plans)
        plans = store.load()  # None when there is nothing usable
    """

    def __init__(self, path: str, signature_key: Optional[str] = None, enabled: bool = True):
        """Create a store.

        Args:
            path: Path of the cache file
            signature_key: HMAC key (required when enabled)
            enabled: Whether caching is enabled

        Raises:
            SignatureKeyRequiredError: When enabled without a signing key
        """
        if enabled and signature_key is None:
            raise SignatureKeyRequiredError()

        self._path = os.fspath(path)
        self._signature_key = signature_key
        self._enabled = enabled

    @property
    def path(self) -> str:
        return self._path

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def signed(self) -> bool:
        return self._signature_key is not None

    def save(self, plans: Mapping[str, BuildPlan]) -> None:
        """Write the plans to disk atomically.

        Args:
            plans: Identifier -> BuildPlan mapping to persist

        Raises:
            CacheWriteError: When the directory cannot be created or the
                file cannot be written
        """
        if not self._enabled:
            return

        directory = os.path.dirname(os.path.abspath(self._path))
        try:
            os.makedirs(directory, exist_ok=True)
        except OSError as e:
            raise CacheWriteError.directory_not_writable(directory) from e

        payload = encode_plans(plans)
        content = FORMAT_MARKER + '\n' + SIGNATURE_PREFIX + self._sign(payload) + '\n' + payload

        # Sibling temp file renamed over the destination: readers never
        # see a partial file.
        try:
            fd, temp_path = tempfile.mkstemp(
                dir=directory,
                prefix=os.path.basename(self._path) + '.tmp.',
            )
        except OSError as e:
            raise CacheWriteError.write_failed(self._path) from e

        try:
            with os.fdopen(fd, 'w', encoding='utf-8', newline='\n') as handle:
                handle.write(content)
            # mkstemp creates the file owner-only
            os.chmod(temp_path, FILE_MODE)
            os.replace(temp_path, self._path)
        except OSError as e:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise CacheWriteError.write_failed(self._path) from e

        logger.debug("Saved %d build plan(s) to %s", len(plans), self._path)

    def load(self) -> Optional[Dict[str, BuildPlan]]:
        """Read plans from disk.

        Returns:
            Identifier -> BuildPlan mapping, or None when the store is
            disabled, the file is absent or unreadable, or the
            payload cannot be decoded

        Raises:
            InvalidSignatureError: When the signature is missing, malformed or does not match
        """
        if not self._enabled or not os.path.isfile(self._path):
            return None

        try:
            with open(self._path, 'r', encoding='utf-8', newline='') as handle:
                content = handle.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Cache file %s is not readable: %s", self._path, e)
            return None

        # An enabled store always has a signing key
        match = _SIGNED_HEADER.match(content)
        if match is None:
            logger.warning("Cache file %s has no valid signature header", self._path)
            raise InvalidSignatureError()

        payload = content[match.end():]
        if not hmac.compare_digest(self._sign(payload), match.group(1)):
            logger.warning("Cache file %s failed signature verification", self._path)
            raise InvalidSignatureError()

        plans = decode_plans(payload)
        if plans is None:
            logger.warning("Discarding unreadable cache payload in %s", self._path)
            return None

        logger.debug("Loaded %d build plan(s) from %s", len(plans), self._path)
        return plans

    def clear(self) -> bool:
        """Delete the cache file.

        Returns:
            True if a file was removed, False if none existed
        """
        try:
            os.remove(self._path)
        except FileNotFoundError:
            return False
        return True

    def exists(self) -> bool:
        return self._enabled and os.path.isfile(self._path)

    def _sign(self, payload: str) -> str:
        return hmac.new(
            self._signature_key.encode('utf-8'),
            payload.encode('utf-8'),
            hashlib.sha256,
        ).hexdigest()


def encode_plans(plans: Mapping[str, BuildPlan]) -> str:
    """Serialize plans to deterministic JSON text."""
    data = {identifier: plan.to_dict() for identifier, plan in plans.items()}
    return json.dumps(data, sort_keys=True, indent=2, ensure_ascii=True, allow_nan=False)


def decode_plans(payload: str) -> Optional[Dict[str, BuildPlan]]:
    """Parse JSON text produced by encode_plans.

    Returns:
        The decoded plans, or None when the payload is not a valid
        identifier -> plan mapping
    """
    try:
        data = json.loads(payload)
    except ValueError:
        return None

    if not isinstance(data, dict):
        return None

    try:
        return {str(identifier): BuildPlan.from_dict(entry) for identifier, entry in data.items()}
    except (TypeError, ValueError):
        return None
