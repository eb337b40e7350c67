"""
Immutable secret-key value with Base32 / Base64 / hex text forms.
"""

import base64
import binascii
import hmac
import re
from enum import Enum
from typing import Union

from core.errors import DecodingError


class KeyRepresentation(str, Enum):
    """Supported text encodings of a secret key."""

    BASE32 = "BASE32"
    BASE64 = "BASE64"
    HEX = "HEX"


# ── Base32 ────────────────────────────────────────────────────────────────────

def normalize_base32(text: str) -> str:
    """
    Normalise a base32 secret: strip spaces and dashes, uppercase, add padding.

    Args:
        text: Raw user-supplied secret string.

    Returns:
        Uppercase base32 string with correct padding.

    Raises:
        DecodingError: If the string contains invalid base32 characters.
    """
    text = re.sub(r"[\s-]", "", text).upper()
    if not re.fullmatch(r"[A-Z2-7]+=*", text):
        raise DecodingError("Secret contains invalid base32 characters.")
    pad = (8 - len(text) % 8) % 8
    return text + "=" * pad


def _decode_base32(text: str) -> bytes:
    try:
        return base64.b32decode(normalize_base32(text))
    except binascii.Error as exc:
        raise DecodingError(f"Invalid base32 secret: {exc}") from exc


def _decode_base64(text: str) -> bytes:
    try:
        return base64.b64decode(text.strip(), validate=True)
    except binascii.Error as exc:
        raise DecodingError(f"Invalid base64 secret: {exc}") from exc


def _decode_hex(text: str) -> bytes:
    try:
        return bytes.fromhex(text.strip())
    except ValueError as exc:
        raise DecodingError(f"Invalid hex secret: {exc}") from exc


_DECODERS = {
    KeyRepresentation.BASE32: _decode_base32,
    KeyRepresentation.BASE64: _decode_base64,
    KeyRepresentation.HEX: _decode_hex,
}


# ── Secret key ────────────────────────────────────────────────────────────────

class SecretKey:
    """
    Shared TOTP secret.

    The key bytes are copied on construction and never change afterwards.
    Equality compares bytes in constant time.  ``repr()`` only reveals the
    key length.
    """

    __slots__ = ("_value",)

    def __init__(self, value: Union[bytes, bytearray, memoryview]) -> None:
        """
        Args:
            value: Raw key bytes.

        Raises:
            ValueError: If ``value`` is empty.
        """
        data = bytes(value)
        if not data:
            raise ValueError("Secret key must not be empty.")
        object.__setattr__(self, "_value", data)

    @classmethod
    def decode(
        cls,
        text: str,
        representation: KeyRepresentation = KeyRepresentation.BASE32,
    ) -> "SecretKey":
        """
        Build a key from its text form.

        Args:
            text:           Encoded secret.
            representation: Encoding used by ``text``.

        Returns:
            The decoded :class:`SecretKey`.

        Raises:
            DecodingError: If ``text`` is malformed or decodes to nothing.
        """
        raw = _DECODERS[KeyRepresentation(representation)](text)
        if not raw:
            raise DecodingError("Secret text decodes to an empty key.")
        return cls(raw)

    @property
    def value(self) -> bytes:
        """Raw key bytes."""
        return self._value

    def to(self, representation: KeyRepresentation) -> str:
        """Return the key encoded as ``representation``."""
        representation = KeyRepresentation(representation)
        if representation is KeyRepresentation.BASE32:
            # otpauth secrets are unpadded
            return base64.b32encode(self._value).decode("ascii").rstrip("=")
        if representation is KeyRepresentation.BASE64:
            return base64.b64encode(self._value).decode("ascii")
        return self._value.hex()

    def __len__(self) -> int:
        return len(self._value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SecretKey):
            return NotImplemented
        return hmac.compare_digest(self._value, other._value)

    def __hash__(self) -> int:
        return hash(self._value)

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("SecretKey is immutable.")

    def __delattr__(self, name: str) -> None:
        raise AttributeError("SecretKey is immutable.")

    def __repr__(self) -> str:
        return f"SecretKey(<{len(self._value)} bytes>)"
