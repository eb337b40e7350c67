"""
TOTP authenticator: credential creation, code generation and verification.

Produces codes identical to Google Authenticator.  Verification checks a
window of adjacent time steps to absorb clock skew between server and
client.  The authenticator keeps no per-account state; tracking which step
was consumed (replay protection) is up to the caller.
"""

import hmac
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from core import hotp
from core.rng import ReseedingRandom
from core.scratch import ScratchCodeGenerator
from core.secret import SecretKey
from core.totp import AuthenticatorConfig, Timestamp, time_step_counter
from qr.uri import create_qr_code_url

logger = logging.getLogger(__name__)

# 80 bits encode to a 16 character base32 secret
SECRET_BITS = 80


@dataclass(frozen=True)
class Credentials:
    """
    Freshly generated enrolment material.

    Attributes:
        secret_key:        The shared secret.
        verification_code: Code at time step 0 (the Unix epoch), for display.
        scratch_codes:     Single-use recovery codes.
    """

    secret_key: SecretKey
    verification_code: int
    scratch_codes: Tuple[int, ...] = ()


class Authenticator:
    """
    RFC 6238 authenticator.

    Usage::

        auth = Authenticator()
        creds = auth.create_credentials()
        auth.authorize(creds.secret_key, 123456)
    """

    def __init__(
        self,
        config: Optional[AuthenticatorConfig] = None,
        random_source: Optional[ReseedingRandom] = None,
    ) -> None:
        """
        Args:
            config:        Settings; defaults to :class:`AuthenticatorConfig`.
            random_source: Shared random source.  A private one is created
                           when omitted.
        """
        self.config = config or AuthenticatorConfig()
        self._random = random_source or ReseedingRandom()
        self._scratch = ScratchCodeGenerator(self._random)

    # ── Public API ───────────────────────────────────────────────────────

    def create_credentials(self) -> Credentials:
        """Generate a new secret key with its t=0 code and scratch codes."""
        key_length = SECRET_BITS // 8
        buffer = self._random.next_bytes(key_length + self._scratch.buffer_size)

        secret_key = SecretKey(buffer[:key_length])
        verification_code = self._calculate_code(secret_key.value, 0)
        scratch_codes = self._scratch.from_buffer(buffer[key_length:])
        logger.debug("Created credentials with %d scratch codes.", len(scratch_codes))

        return Credentials(secret_key, verification_code, tuple(scratch_codes))

    def create_one_time_password(
        self, secret_key: SecretKey, timestamp: Optional[Timestamp] = None
    ) -> int:
        """
        Return the code for ``secret_key`` at ``timestamp`` (default: now).

        Raises:
            AlgorithmUnavailableError: If HMAC-SHA1 is unavailable.
        """
        return self._calculate_code(secret_key.value, time_step_counter(self.config, timestamp))

    def authorize(
        self, secret_key: SecretKey, code: int, timestamp: Optional[Timestamp] = None
    ) -> bool:
        """
        Check ``code`` against every step in the verification window.

        For a window of size ``w`` the steps ``T - (w-1)//2`` through
        ``T + w//2`` are tried, so even windows lean towards clients whose
        clocks run ahead.

        Args:
            secret_key: The shared secret.
            code:       Code submitted by the user.
            timestamp:  Verification time (default: now).

        Returns:
            True if ``code`` matches any step in the window.

        Raises:
            AlgorithmUnavailableError: If HMAC-SHA1 is unavailable.
        """
        if code <= 0 or code >= self.config.key_modulus:
            return False

        counter = time_step_counter(self.config, timestamp)
        window = self.config.window_size
        start = -((window - 1) // 2)
        end = window // 2
        submitted = str(code).encode("ascii")
        for offset in range(start, end + 1):
            if counter + offset < 0:
                continue
            expected = self._calculate_code(secret_key.value, counter + offset)
            if hmac.compare_digest(str(expected).encode("ascii"), submitted):
                return True
        return False

    def create_qr_code(
        self, issuer: Optional[str], account_name: str, secret_key: SecretKey
    ) -> str:
        """Return a QR image URL provisioning ``secret_key`` in an authenticator app."""
        return create_qr_code_url(
            issuer,
            account_name,
            secret_key,
            digits=self.config.code_digits,
            period=self.config.period_seconds,
        )

    # ── Internals ─────────────────────────────────────────────────────────

    def _calculate_code(self, key: bytes, counter: int) -> int:
        return hotp.generate_hotp(key, counter, self.config.key_modulus)


def google_authenticator(config: Optional[AuthenticatorConfig] = None) -> Authenticator:
    """Return an authenticator with Google Authenticator defaults."""
    return Authenticator(config or AuthenticatorConfig())
