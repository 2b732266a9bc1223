"""
twofactorauth package
=====================

Generate and verify OTP codes (HOTP / TOTP) per RFC 4226 & RFC 6238.

- HOTP: code = Truncate(HMAC(key=secret, msg=counter)) mod 10^digits
- TOTP: HOTP with counter = floor(timestamp / period)

Quick example:
>>> from twofactorauth import TwoFactorAuth
>>> tfa = TwoFactorAuth("MyService")
>>> secret = tfa.create_secret()
>>> code = tfa.get_code(secret)
>>> tfa.verify_code(secret, code)
True
"""

from .exceptions import (
    InsecureEntropySourceError,
    InvalidConfigurationError,
    InvalidEncodingError,
    QRException,
    RNGError,
    TimeDriftError,
    TimeException,
    TwoFactorAuthException,
)
from .twofactorauth import TwoFactorAuth

__version__ = "1.0.0"

__all__ = [
    "InsecureEntropySourceError",
    "InvalidConfigurationError",
    "InvalidEncodingError",
    "QRException",
    "RNGError",
    "TimeDriftError",
    "TimeException",
    "TwoFactorAuth",
    "TwoFactorAuthException",
]
