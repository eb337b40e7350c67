"""
Build otpauth:// key URIs and QR image URLs for provisioning.

Reference: https://github.com/google/google-authenticator/wiki/Key-Uri-Format
"""

import urllib.parse
from typing import Optional

from core.secret import KeyRepresentation, SecretKey

QR_GENERATOR_URL = "https://chart.googleapis.com/chart?chs=200x200&chld=M%7C0&cht=qr&chl={}"

DEFAULT_DIGITS = 6
DEFAULT_PERIOD = 30

# RFC 3986 path characters kept literal in the label, besides unreserved ones
_LABEL_SAFE = ":@&=+$,;!*'()"


def format_label(account_name: str, issuer: Optional[str] = None) -> str:
    """Return ``issuer:account_name``, or just the account name without an issuer."""
    return f"{issuer}:{account_name}" if issuer else account_name


def build_otpauth_uri(
    account_name: str,
    secret_key: SecretKey,
    issuer: Optional[str] = None,
    digits: int = DEFAULT_DIGITS,
    period: int = DEFAULT_PERIOD,
) -> str:
    """
    Build an ``otpauth://totp`` URI.

    The URI carries the secret, so send it over a secure channel only.

    Args:
        account_name: Account the key belongs to, e.g. an email address.
        secret_key:   Shared secret, embedded as unpadded base32.
        issuer:       Optional provider name.  Must not contain ``:``.
        digits:       Code length shown by the client.  Omitted when 6.
        period:       Time step in whole seconds.  Omitted when 30.

    Raises:
        ValueError: On a blank account name, an issuer containing ``:``
                    or a non-positive period.
    """
    if not account_name or not account_name.strip():
        raise ValueError("Account name must not be empty.")
    if issuer and ":" in issuer:
        raise ValueError("Issuer cannot contain the ':' character.")
    if period < 1:
        raise ValueError("Period must be a positive number of seconds.")

    params: dict = {"secret": secret_key.to(KeyRepresentation.BASE32)}
    if issuer:
        params["issuer"] = issuer
    if digits != DEFAULT_DIGITS:
        params["digits"] = str(digits)
    if period != DEFAULT_PERIOD:
        params["period"] = str(period)

    query = urllib.parse.urlencode(params)
    label_encoded = urllib.parse.quote(format_label(account_name, issuer), safe=_LABEL_SAFE)
    return f"otpauth://totp/{label_encoded}?{query}"


def create_qr_code_url(
    issuer: Optional[str],
    account_name: str,
    secret_key: SecretKey,
    digits: int = DEFAULT_DIGITS,
    period: int = DEFAULT_PERIOD,
) -> str:
    """
    Return a Google Chart API URL rendering the otpauth URI as a QR code.

    The user scans the image with an authenticator app, or enters the
    secret manually.
    """
    uri = build_otpauth_uri(account_name, secret_key, issuer=issuer, digits=digits, period=period)
    return QR_GENERATOR_URL.format(urllib.parse.quote_plus(uri, safe=""))
