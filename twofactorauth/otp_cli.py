#!/usr/bin/env python3
"""
otp_cli.py — command-line wrapper around TwoFactorAuth.

Subcommands:
- secret     : create a new Base32 secret
- code       : print the current (or given-time) TOTP code
- verify     : verify a TOTP code (exit status 0 = valid, 1 = invalid)
- hotp       : HOTP code for a specific counter
- uri        : print the otpauth:// provisioning URI
- qr         : render the provisioning URI as a QR code (PNG file or data URI)
- check-time : compare the local clock with remote HTTP servers

Nothing is stored: the secret is always passed on the command line.
"""

import argparse
import logging
import sys

from . import base32
from .exceptions import TwoFactorAuthException
from .logging_setup import setup_logging
from .otp_core import (
    DEFAULT_ALGORITHM,
    DEFAULT_DIGITS,
    DEFAULT_DISCREPANCY,
    DEFAULT_LENIENCY,
    DEFAULT_QR_SIZE,
    DEFAULT_SECRET_BITS,
    DEFAULT_TIME_STEP,
    SUPPORTED_ALGORITHMS,
    hotp,
)
from .providers.rng import CSRNGProvider, HashRNGProvider
from .providers.time import HttpTimeProvider
from .twofactorauth import TwoFactorAuth

logger = logging.getLogger(__name__)


def _build_tfa(args, **providers) -> TwoFactorAuth:
    return TwoFactorAuth(
        issuer=args.issuer,
        digits=args.digits,
        period=args.period,
        algorithm=args.algorithm,
        **providers,
    )


# --- CLI command handlers ---
def cmd_secret(args):
    rng = HashRNGProvider() if args.insecure else CSRNGProvider()
    tfa = _build_tfa(args, rng_provider=rng)
    print(tfa.create_secret(args.bits, require_cryptosecure=not args.insecure))
    return 0


def cmd_code(args):
    tfa = _build_tfa(args)
    timestamp = tfa.get_time(args.time)
    code = tfa.get_code(args.secret, timestamp)
    print(f"TOTP ({tfa.digits}d): {code}  (valid ~{tfa.get_remaining_seconds(timestamp):2d}s)")
    return 0


def cmd_verify(args):
    tfa = _build_tfa(args)
    if tfa.verify_code(args.secret, args.code, args.discrepancy, args.time):
        print("[+] TOTP code is VALID")
        return 0
    print("[-] TOTP code is INVALID")
    return 1


def cmd_hotp(args):
    tfa = _build_tfa(args)
    code = hotp(base32.decode(args.secret), args.counter, tfa.digits, tfa.algorithm)
    print(f"HOTP({tfa.digits}d, counter={args.counter}): {code}")
    return 0


def cmd_uri(args):
    tfa = _build_tfa(args)
    print(tfa.get_qr_text(args.label, args.secret))
    return 0


def cmd_qr(args):
    tfa = _build_tfa(args)
    if args.output:
        image, mime_type = tfa.qrcode_provider.render(tfa.get_qr_text(args.label, args.secret), args.size)
        with open(args.output, "wb") as f:
            f.write(image)
        print(f"[*] Wrote {mime_type} QR code to {args.output}")
    else:
        print(tfa.get_qr_code_image_as_data_uri(args.label, args.secret, args.size))
    return 0


def cmd_check_time(args):
    tfa = _build_tfa(args)
    providers = [HttpTimeProvider(url) for url in args.url] if args.url else None
    tfa.ensure_correct_time(providers, args.leniency)
    print(f"[+] Local clock is within {args.leniency}s of the reference servers")
    return 0


def positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"{value} is not a positive integer")
    return number


# --- Argparse builder ---
def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--issuer", default=None, help="Issuer label for otpauth URI")
    common.add_argument("--digits", type=int, default=DEFAULT_DIGITS, help="Number of OTP digits")
    common.add_argument("--period", type=int, default=DEFAULT_TIME_STEP, help="TOTP time step (seconds)")
    common.add_argument("--algorithm", default=DEFAULT_ALGORITHM, choices=sorted(SUPPORTED_ALGORITHMS),
                        help="HMAC hash algorithm")

    p = argparse.ArgumentParser(prog="twofactorauth", description="TOTP/HOTP generator and verifier")
    p.add_argument("--verbose", action="store_true", help="Verbose (debug) logging")
    sub = p.add_subparsers(dest="cmd")

    # secret
    ps = sub.add_parser("secret", parents=[common], help="Create a new Base32 secret")
    ps.add_argument("--bits", type=positive_int, default=DEFAULT_SECRET_BITS, help="Bits of entropy")
    ps.add_argument("--insecure", action="store_true", help="Allow a non-cryptographic RNG")
    ps.set_defaults(func=cmd_secret)

    # code
    pc = sub.add_parser("code", parents=[common], help="Print the TOTP code")
    pc.add_argument("--secret", required=True, help="Base32 secret")
    pc.add_argument("--time", type=int, help="Unix timestamp (default: now)")
    pc.set_defaults(func=cmd_code)

    # verify
    pv = sub.add_parser("verify", parents=[common], help="Verify a TOTP code")
    pv.add_argument("--secret", required=True, help="Base32 secret")
    pv.add_argument("--code", required=True, help="OTP code to verify")
    pv.add_argument("--discrepancy", type=int, default=DEFAULT_DISCREPANCY, help="Allowed +/- step window")
    pv.add_argument("--time", type=int, help="Unix timestamp (default: now)")
    pv.set_defaults(func=cmd_verify)

    # hotp
    ph = sub.add_parser("hotp", parents=[common], help="Generate HOTP code for a specific counter")
    ph.add_argument("--secret", required=True, help="Base32 secret")
    ph.add_argument("--counter", type=int, required=True)
    ph.set_defaults(func=cmd_hotp)

    # uri
    pu = sub.add_parser("uri", parents=[common], help="Print the otpauth:// URI")
    pu.add_argument("--secret", required=True, help="Base32 secret")
    pu.add_argument("--label", required=True, help="Account label, e.g. alice@example.com")
    pu.set_defaults(func=cmd_uri)

    # qr
    pq = sub.add_parser("qr", parents=[common], help="Render the otpauth:// URI as a QR code")
    pq.add_argument("--secret", required=True, help="Base32 secret")
    pq.add_argument("--label", required=True, help="Account label")
    pq.add_argument("--size", type=positive_int, default=DEFAULT_QR_SIZE, help="Image size in pixels")
    pq.add_argument("--output", help="Write the image to this file instead of printing a data URI")
    pq.set_defaults(func=cmd_qr)

    # check-time
    pt = sub.add_parser("check-time", parents=[common], help="Compare local clock with HTTP servers")
    pt.add_argument("--url", action="append", help="Server to ask for the time (repeatable)")
    pt.add_argument("--leniency", type=int, default=DEFAULT_LENIENCY, help="Allowed drift (seconds)")
    pt.set_defaults(func=cmd_check_time)

    return p


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return 2

    setup_logging("DEBUG" if args.verbose else "WARNING")
    logger.debug("Running subcommand %s", args.cmd)
    try:
        return args.func(args)
    except (TwoFactorAuthException, ValueError) as e:
        print(f"[!] {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
