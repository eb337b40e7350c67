"""
Cryptographically secure random source with periodic generator replacement.

Draws are counted; once the current generator has served ``max_operations``
draws it is discarded and a fresh one takes its place.  Only the swap is
serialised, ordinary draws never take the lock.
"""

import itertools
import logging
import os
import random
import threading

from core.errors import AlgorithmUnavailableError

logger = logging.getLogger(__name__)

MAX_OPERATIONS = 1_000_000


def _create_generator() -> random.SystemRandom:
    """Return a new OS-backed generator, failing if the platform has none."""
    try:
        os.urandom(1)
    except NotImplementedError as exc:
        raise AlgorithmUnavailableError(
            "No secure random number generator is available on this platform."
        ) from exc
    return random.SystemRandom()


class ReseedingRandom:
    """
    Secure byte generator shared by credential and scratch-code creation.

    Construct one instance and pass it explicitly to every consumer; the
    instance is safe to use from multiple threads.

    Usage::

        rng = ReseedingRandom()
        key_material = rng.next_bytes(10)
    """

    def __init__(self, max_operations: int = MAX_OPERATIONS) -> None:
        """
        Args:
            max_operations: Draws served by one generator before it is replaced.

        Raises:
            ValueError: If ``max_operations`` is not positive.
            AlgorithmUnavailableError: If no secure RNG exists.
        """
        if max_operations < 1:
            raise ValueError("max_operations must be positive.")
        self._max_operations = max_operations
        # next() on itertools.count is atomic under the GIL
        self._operations = itertools.count(1)
        self._generation_start = 0
        self._lock = threading.Lock()
        self._reseeds = 0
        self._generator = _create_generator()

    @property
    def reseed_count(self) -> int:
        """Number of times the underlying generator has been replaced."""
        return self._reseeds

    def next_bytes(self, length: int) -> bytes:
        """
        Return ``length`` secure random bytes.

        Raises:
            ValueError: If ``length`` is negative.
        """
        if length < 0:
            raise ValueError("length must be non-negative.")
        operation = next(self._operations)
        if operation - self._generation_start > self._max_operations:
            self._reseed(operation)
        return self._generator.randbytes(length)

    def _reseed(self, operation: int) -> None:
        with self._lock:
            # Another thread may have swapped while we waited.
            if operation - self._generation_start <= self._max_operations:
                return
            self._generator = _create_generator()
            self._generation_start = operation - 1
            self._reseeds += 1
        logger.debug("Random generator replaced after %d operations.", operation - 1)
