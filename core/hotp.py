"""
HOTP (HMAC-based One-Time Password) code derivation following RFC 4226.
"""

import struct

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, hmac

from core.errors import AlgorithmUnavailableError

DEFAULT_KEY_MODULUS = 10**6


def _hmac_sha1(secret_bytes: bytes, message: bytes) -> bytes:
    try:
        mac = hmac.HMAC(secret_bytes, hashes.SHA1())
    except UnsupportedAlgorithm as exc:
        raise AlgorithmUnavailableError(
            "HMAC-SHA1 is not supported by the cryptography backend."
        ) from exc
    mac.update(message)
    return mac.finalize()


def generate_hotp(
    secret_bytes: bytes,
    counter: int,
    key_modulus: int = DEFAULT_KEY_MODULUS,
) -> int:
    """
    Generate an HOTP code.

    Args:
        secret_bytes: Raw decoded secret bytes.
        counter:      Moving factor, a non-negative 64-bit integer.
        key_modulus:  ``10 ** digits`` for the wanted code length.

    Returns:
        Code in ``[0, key_modulus)``.

    Raises:
        ValueError:                If the secret is empty or the counter does
                                   not fit in 64 unsigned bits.
        AlgorithmUnavailableError: If HMAC-SHA1 cannot be obtained.
    """
    if not secret_bytes:
        raise ValueError("Secret must not be empty.")
    try:
        msg = struct.pack(">Q", counter)
    except struct.error as exc:
        raise ValueError(f"Counter out of range: {counter}") from exc
    digest = _hmac_sha1(secret_bytes, msg)

    # Dynamic truncation
    offset = digest[-1] & 0x0F
    code = (
        (digest[offset] & 0x7F) << 24
        | (digest[offset + 1] & 0xFF) << 16
        | (digest[offset + 2] & 0xFF) << 8
        | (digest[offset + 3] & 0xFF)
    )
    return code % key_modulus
