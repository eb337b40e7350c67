"""
Scratch (recovery) code generation.

Scratch codes are fixed-length decimal numbers derived from random bytes,
four bytes per code.  A draw that would produce a visibly short code
(leading zeros) is thrown away and replaced with a fresh one.
"""

import logging
from typing import List, Optional

from core.errors import AlgorithmUnavailableError, ConfigurationError
from core.rng import ReseedingRandom

logger = logging.getLogger(__name__)

SCRATCH_CODES = 5
SCRATCH_CODE_LENGTH = 8
BYTES_PER_SCRATCH_CODE = 4
# ~10% of draws are rejected; a run this long means the entropy source is broken
MAX_REDRAWS = 1000


class ScratchCodeGenerator:
    """Derives ``count`` recovery codes of exactly ``length`` digits."""

    def __init__(
        self,
        random_source: ReseedingRandom,
        count: int = SCRATCH_CODES,
        length: int = SCRATCH_CODE_LENGTH,
    ) -> None:
        if count < 0:
            raise ConfigurationError("Scratch code count must not be negative.")
        # 10**9 is the largest power of ten below 2**31
        if not 1 <= length <= 9:
            raise ConfigurationError("Scratch code length must be between 1 and 9.")
        self._random = random_source
        self.count = count
        self.length = length
        self._modulus = 10**length

    @property
    def buffer_size(self) -> int:
        """Bytes needed by :meth:`from_buffer` to fill every slot."""
        return self.count * BYTES_PER_SCRATCH_CODE

    def calculate_scratch_code(self, chunk: bytes) -> Optional[int]:
        """
        Turn a 4-byte chunk into a scratch code.

        Returns:
            The code, or None if it has fewer than ``length`` digits.

        Raises:
            ValueError: If ``chunk`` is shorter than 4 bytes.
        """
        if len(chunk) < BYTES_PER_SCRATCH_CODE:
            raise ValueError(f"The provided random byte buffer is too small ({len(chunk)}).")
        code = int.from_bytes(chunk[:BYTES_PER_SCRATCH_CODE], "big")
        code = (code & 0x7FFFFFFF) % self._modulus
        if code >= self._modulus // 10:
            return code
        return None

    def generate(self) -> int:
        """
        Draw fresh random bytes until a valid scratch code appears.

        Raises:
            AlgorithmUnavailableError: After ``MAX_REDRAWS`` rejected draws.
        """
        for _ in range(MAX_REDRAWS):
            code = self.calculate_scratch_code(self._random.next_bytes(BYTES_PER_SCRATCH_CODE))
            if code is not None:
                return code
        raise AlgorithmUnavailableError(
            f"Random source produced {MAX_REDRAWS} unusable scratch codes in a row."
        )

    def from_buffer(self, buffer: bytes) -> List[int]:
        """
        Derive ``count`` codes from ``buffer``, one 4-byte slot each.

        Invalid slots are replaced by :meth:`generate`.

        Raises:
            ValueError: If ``buffer`` is shorter than :attr:`buffer_size`.
        """
        if len(buffer) < self.buffer_size:
            raise ValueError(
                f"Scratch code buffer needs {self.buffer_size} bytes, got {len(buffer)}."
            )
        codes = []
        for slot in range(self.count):
            start = slot * BYTES_PER_SCRATCH_CODE
            code = self.calculate_scratch_code(buffer[start : start + BYTES_PER_SCRATCH_CODE])
            if code is None:
                logger.debug("Scratch code slot %d rejected, drawing a replacement.", slot)
                code = self.generate()
            codes.append(code)
        return codes
