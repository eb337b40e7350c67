"""
Exception types raised by the OTP engine.

Bad input (configuration, decoding) derives from :class:`ValueError`; a
broken runtime (missing HMAC or CSPRNG primitive) derives from
:class:`RuntimeError` so callers can tell the two apart.
"""


class OTPError(Exception):
    """Base class for all engine errors."""


class ConfigurationError(OTPError, ValueError):
    """An authenticator or scratch-code setting is out of range."""


class DecodingError(OTPError, ValueError):
    """Text could not be decoded into a secret key."""


class AlgorithmUnavailableError(OTPError, RuntimeError):
    """A cryptographic primitive is missing from the runtime environment."""
