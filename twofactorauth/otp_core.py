#!/usr/bin/env python3
"""
otp_core.py — Core helpers for HOTP (RFC 4226) / TOTP (RFC 6238).

Goals:
- Pure functions over raw key bytes; no I/O, no global mutable state.
- TwoFactorAuth (twofactorauth.py) wraps these with a validated configuration
  and the injected providers; CLI and Flask backend go through that class.

Security notes:
- Every code comparison goes through code_equals() (constant time).
- Verification loops evaluate every candidate, they never return early.
"""

from typing import Tuple
from urllib.parse import quote
import hashlib
import hmac
import logging
import struct

from .exceptions import InvalidConfigurationError

logger = logging.getLogger(__name__)

# --- Config / constants ----------------------------------------------------
DEFAULT_DIGITS = 6          # standard: 6 digits
DEFAULT_TIME_STEP = 30      # TOTP step (seconds)
DEFAULT_ALGORITHM = "sha1"
DEFAULT_SECRET_BITS = 80    # 16 base32 characters
DEFAULT_DISCREPANCY = 1     # +/- one step
DEFAULT_LOOK_AHEAD = 1
DEFAULT_QR_SIZE = 200       # pixels
DEFAULT_LENIENCY = 5        # seconds, for time source checks

# upper bounds for values taken from untrusted input (HTTP API)
MAX_DISCREPANCY = 10
MAX_SECRET_BITS = 1024
MAX_QR_SIZE = 1000

SUPPORTED_ALGORITHMS = {
    "sha1": hashlib.sha1,
    "sha256": hashlib.sha256,
    "sha512": hashlib.sha512,
}


def normalize_algorithm(algorithm: str) -> str:
    """
    Return the canonical (lower case) algorithm name.

    Raises:
        InvalidConfigurationError: if the algorithm is not sha1/sha256/sha512
    """
    name = str(algorithm).strip().lower()
    if name not in SUPPORTED_ALGORITHMS:
        raise InvalidConfigurationError(f"Unsupported algorithm: {name}")
    return name


# --- RFC helpers -----------------------------------------------------------
def int_to_bytes(i: int) -> bytes:
    """
    Convert the counter to 8-byte big-endian as RFC 4226 requires.

    Example: int_to_bytes(1) -> b'\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x01'
    """
    return struct.pack(">Q", i)


def dynamic_truncate(hmac_digest: bytes) -> int:
    """
    Apply RFC 4226 dynamic truncation.

    - offset = last_byte & 0x0F
    - take 4 bytes at offset as a big-endian integer
    - clear the most significant bit -> 31-bit unsigned value
    """
    offset = hmac_digest[-1] & 0x0F
    (value,) = struct.unpack(">I", hmac_digest[offset:offset + 4])
    return value & 0x7FFFFFFF


def hotp(
    key: bytes,
    counter: int,
    digits: int = DEFAULT_DIGITS,
    algorithm: str = DEFAULT_ALGORITHM,
) -> str:
    """
    Compute an HOTP code (RFC 4226).

    Steps:
    1. Message = 8-byte counter (big-endian)
    2. HMAC-<algorithm>(key, message)
    3. Dynamic truncate -> dbc
    4. otp = dbc % 10^digits, zero-padded to "digits" characters

    Arguments:
        key: raw secret bytes (already base32-decoded)
        counter: non-negative integer counter
        digits: number of digits in the code
        algorithm: sha1 / sha256 / sha512

    Returns:
        str: zero-padded code

    Raises:
        ValueError: if counter is negative
    """
    if counter < 0:
        raise ValueError(f"Counter must be >= 0, got {counter}")
    digestmod = SUPPORTED_ALGORITHMS[normalize_algorithm(algorithm)]
    digest = hmac.new(key, int_to_bytes(counter), digestmod).digest()
    dbc = dynamic_truncate(digest)
    return str(dbc % (10 ** digits)).zfill(digits)


def time_slice(unix_time: int, period: int = DEFAULT_TIME_STEP, offset_steps: int = 0) -> int:
    """
    TOTP counter: floor(unix_time / period) + offset_steps.

    offset_steps is a number of whole periods, not seconds.
    """
    return int(unix_time // period) + offset_steps


def remaining_seconds(unix_time: int, period: int = DEFAULT_TIME_STEP) -> int:
    """Seconds left before the code for unix_time rolls over."""
    return int(period - (unix_time % period))


def code_equals(expected: str, given: str) -> bool:
    """
    Timing-safe comparison of two codes.

    Both sides are compared as UTF-8 bytes so non-ASCII user input is just a
    mismatch instead of a TypeError from hmac.compare_digest.
    """
    return hmac.compare_digest(expected.encode("utf-8"), given.encode("utf-8"))


def verify_hotp(
    key: bytes,
    code: str,
    counter: int,
    digits: int = DEFAULT_DIGITS,
    algorithm: str = DEFAULT_ALGORITHM,
    look_ahead: int = DEFAULT_LOOK_AHEAD,
) -> Tuple[bool, int]:
    """
    Verify an HOTP code against counter .. counter + look_ahead.

    All candidates are computed and compared, even after a match.

    Returns:
        (valid, next_counter)
        - next_counter: counter after the matching one, or the unchanged
          counter when nothing matched
    """
    valid = False
    next_counter = counter
    for i in range(look_ahead + 1):
        matched = code_equals(hotp(key, counter + i, digits, algorithm), code)
        # 1 only on the first match
        first = int(matched) & (1 - int(valid))
        next_counter += first * (i + 1)
        valid |= matched
    return valid, next_counter


def format_otpauth_uri(
    label: str,
    secret_b32: str,
    issuer: str = None,
    period: int = DEFAULT_TIME_STEP,
    algorithm: str = DEFAULT_ALGORITHM,
    digits: int = DEFAULT_DIGITS,
) -> str:
    """
    Build the otpauth:// provisioning URI (Key URI Format).

    - otpauth://totp/{label}?secret=...&issuer=...&period=...&algorithm=...&digits=...
    - label, secret and issuer are percent-encoded strictly (space -> %20,
      '&', '?', '/' encoded); a missing issuer gives "issuer=".

    Arguments:
        label: account label (e.g. 'alice@example.com')
        secret_b32: Base32 secret
        issuer: issuer label (e.g. 'MyService'), optional
        period: TOTP step in seconds
        algorithm: hash name, upper-cased in the URI
        digits: number of digits
    """
    return (
        f"otpauth://totp/{quote(label, safe='')}"
        f"?secret={quote(secret_b32, safe='')}"
        f"&issuer={quote(issuer or '', safe='')}"
        f"&period={int(period)}"
        f"&algorithm={quote(algorithm.upper(), safe='')}"
        f"&digits={int(digits)}"
    )
