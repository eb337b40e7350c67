"""
TOTP authenticator – command-line entry point.

Usage
-----
    python main.py new --issuer Example --account alice@example.com
    python main.py code JBSWY3DPEHPK3PXP
    python main.py verify JBSWY3DPEHPK3PXP 123456
    python main.py uri JBSWY3DPEHPK3PXP alice@example.com --issuer Example

Or, if installed as a package:
    totp-authenticator ...
"""

import argparse
import logging
import sys
from datetime import timedelta
from typing import List, Optional

from core.authenticator import Authenticator
from core.secret import KeyRepresentation, SecretKey
from core.totp import AuthenticatorConfig
from qr.uri import build_otpauth_uri

# ── Logging setup ─────────────────────────────────────────────────────────────

logger = logging.getLogger("totp")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


# ── Bootstrap ─────────────────────────────────────────────────────────────────

def _build_config(args: argparse.Namespace) -> AuthenticatorConfig:
    """Environment settings, overridden by any command-line flags."""
    base = AuthenticatorConfig.from_env()
    return AuthenticatorConfig(
        time_step_size=timedelta(seconds=args.step) if args.step is not None else base.time_step_size,
        window_size=args.window if args.window is not None else base.window_size,
        code_digits=args.digits if args.digits is not None else base.code_digits,
    )


def _format_code(code: int, config: AuthenticatorConfig) -> str:
    return str(code).zfill(config.code_digits)


# ── Commands ──────────────────────────────────────────────────────────────────

def cmd_new(auth: Authenticator, args: argparse.Namespace) -> int:
    creds = auth.create_credentials()
    secret = creds.secret_key.to(KeyRepresentation.BASE32)
    print(f"Secret:            {secret}")
    print(f"Verification code: {_format_code(creds.verification_code, auth.config)}")
    print("Scratch codes:")
    for code in creds.scratch_codes:
        print(f"  {code}")
    if args.account:
        print("URI:", _uri(auth, args.account, creds.secret_key, args.issuer))
    logger.info("Generated new credentials.")
    return 0


def cmd_code(auth: Authenticator, args: argparse.Namespace) -> int:
    key = SecretKey.decode(args.secret)
    print(_format_code(auth.create_one_time_password(key, args.time), auth.config))
    return 0


def cmd_verify(auth: Authenticator, args: argparse.Namespace) -> int:
    key = SecretKey.decode(args.secret)
    if not args.code.isdigit():
        raise ValueError("Code must contain digits only.")
    ok = auth.authorize(key, int(args.code), args.time)
    print("OK" if ok else "FAIL")
    return 0 if ok else 1


def cmd_uri(auth: Authenticator, args: argparse.Namespace) -> int:
    key = SecretKey.decode(args.secret)
    print(_uri(auth, args.account, key, args.issuer))
    print(auth.create_qr_code(args.issuer, args.account, key))
    return 0


def _uri(auth: Authenticator, account: str, key: SecretKey, issuer: Optional[str]) -> str:
    return build_otpauth_uri(
        account,
        key,
        issuer=issuer,
        digits=auth.config.code_digits,
        period=auth.config.period_seconds,
    )


# ── Main ──────────────────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="totp-authenticator", description="RFC 6238 TOTP tool")
    parser.add_argument("--digits", type=int, help="code length (6-8)")
    parser.add_argument("--window", type=int, help="verification window in steps")
    parser.add_argument("--step", type=int, help="time step in seconds")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_new = sub.add_parser("new", help="create a secret with scratch codes")
    p_new.add_argument("--issuer")
    p_new.add_argument("--account")
    p_new.set_defaults(func=cmd_new)

    p_code = sub.add_parser("code", help="print the current code")
    p_code.add_argument("secret", help="base32 secret")
    p_code.add_argument("--time", type=float, help="Unix time (default: now)")
    p_code.set_defaults(func=cmd_code)

    p_verify = sub.add_parser("verify", help="check a code")
    p_verify.add_argument("secret", help="base32 secret")
    p_verify.add_argument("code")
    p_verify.add_argument("--time", type=float, help="Unix time (default: now)")
    p_verify.set_defaults(func=cmd_verify)

    p_uri = sub.add_parser("uri", help="print the otpauth URI and QR image URL")
    p_uri.add_argument("secret", help="base32 secret")
    p_uri.add_argument("account")
    p_uri.add_argument("--issuer")
    p_uri.set_defaults(func=cmd_uri)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)
    try:
        auth = Authenticator(_build_config(args))
        return args.func(auth, args)
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
