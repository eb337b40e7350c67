"""
TOTP (Time-based One-Time Password) settings and time-step arithmetic
following RFC 6238.

Defaults match Google Authenticator: 30 second steps, 6 digits, and a
verification window of three steps.
"""

import os
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

from core.errors import ConfigurationError

Timestamp = Union[int, float, datetime]

MIN_DIGITS = 6
MAX_DIGITS = 8


@dataclass(frozen=True)
class AuthenticatorConfig:
    """
    Validated authenticator settings.

    Attributes:
        time_step_size: Length of one time step (RFC 6238 ``X``).
        window_size:    Number of adjacent steps checked during verification.
                        Larger windows tolerate more clock skew.
        code_digits:    Digits per generated code, 6 to 8.
        key_modulus:    ``10 ** code_digits``, derived.
    """

    time_step_size: timedelta = timedelta(seconds=30)
    window_size: int = 3
    code_digits: int = 6
    key_modulus: int = field(init=False)

    def __post_init__(self) -> None:
        if not isinstance(self.time_step_size, timedelta):
            raise ConfigurationError("Time step size must be a timedelta.")
        for name in ("window_size", "code_digits"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(f"{name} must be an integer, got {value!r}.")
        if self.window_size <= 0:
            raise ConfigurationError("Window size must be positive.")
        if self.code_digits < MIN_DIGITS:
            raise ConfigurationError(f"The minimum number of digits is {MIN_DIGITS}.")
        if self.code_digits > MAX_DIGITS:
            raise ConfigurationError(f"The maximum number of digits is {MAX_DIGITS}.")
        if self.time_step_size < timedelta(milliseconds=1):
            raise ConfigurationError("Time step size must be positive.")
        object.__setattr__(self, "key_modulus", 10**self.code_digits)

    @property
    def time_step_millis(self) -> int:
        return self.time_step_size // timedelta(milliseconds=1)

    @property
    def period_seconds(self) -> int:
        """
        Step size in whole seconds, as carried by an otpauth URI.

        Raises:
            ConfigurationError: If the step is not a whole number of seconds.
        """
        if self.time_step_millis % 1000:
            raise ConfigurationError("otpauth URIs only support whole-second time steps.")
        return self.time_step_millis // 1000

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "AuthenticatorConfig":
        """
        Build a config from ``TOTP_TIME_STEP`` (seconds), ``TOTP_WINDOW_SIZE``
        and ``TOTP_CODE_DIGITS``.  Unset variables keep their defaults.

        Raises:
            ConfigurationError: If a variable is not an integer or is out of range.
        """
        env = os.environ if environ is None else environ
        kwargs: dict = {}
        step = _int_from_env(env, "TOTP_TIME_STEP")
        if step is not None:
            kwargs["time_step_size"] = timedelta(seconds=step)
        window = _int_from_env(env, "TOTP_WINDOW_SIZE")
        if window is not None:
            kwargs["window_size"] = window
        digits = _int_from_env(env, "TOTP_CODE_DIGITS")
        if digits is not None:
            kwargs["code_digits"] = digits
        return cls(**kwargs)


def _int_from_env(env, name: str) -> Optional[int]:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}.") from exc


# ── Time helpers ──────────────────────────────────────────────────────────────

def unix_millis(timestamp: Optional[Timestamp] = None) -> int:
    """
    Convert ``timestamp`` to integer milliseconds since the epoch.

    Accepts Unix seconds (int or float) or a ``datetime``; naive datetimes are
    taken as UTC.  ``None`` means now.
    """
    if timestamp is None:
        return time.time_ns() // 1_000_000
    if isinstance(timestamp, datetime):
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        delta = timestamp - datetime(1970, 1, 1, tzinfo=timezone.utc)
        return delta // timedelta(milliseconds=1)
    if isinstance(timestamp, int):
        return timestamp * 1000
    return int(timestamp * 1000)


def time_step_counter(config: AuthenticatorConfig, timestamp: Optional[Timestamp] = None) -> int:
    """Return the RFC 6238 counter ``T`` for ``timestamp``."""
    return unix_millis(timestamp) // config.time_step_millis


def remaining_seconds(config: AuthenticatorConfig, timestamp: Optional[Timestamp] = None) -> float:
    """Return seconds until the time step containing ``timestamp`` ends."""
    step = config.time_step_millis
    return (step - unix_millis(timestamp) % step) / 1000
