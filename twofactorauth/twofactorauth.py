"""
twofactorauth.py — TwoFactorAuth: a configured TOTP engine.

The configuration (issuer, digits, period, algorithm) is validated once in
__init__ and never changes afterwards, so a single instance can be shared
between threads / requests.

Providers are injected; defaults:
- qrcode_provider: QRCodeProvider (local PNG through the qrcode library)
- rng_provider:    CSRNGProvider (secrets.token_bytes)
- time_provider:   LocalMachineTimeProvider (time.time())
"""

from typing import Iterable, Optional
import base64
import logging
import math

from . import base32
from .exceptions import InsecureEntropySourceError, InvalidConfigurationError, RNGError
from .otp_core import (
    DEFAULT_ALGORITHM,
    DEFAULT_DIGITS,
    DEFAULT_DISCREPANCY,
    DEFAULT_LENIENCY,
    DEFAULT_QR_SIZE,
    DEFAULT_SECRET_BITS,
    DEFAULT_TIME_STEP,
    code_equals,
    format_otpauth_uri,
    hotp,
    normalize_algorithm,
    remaining_seconds,
    time_slice,
)
from .providers.qr import QRCodeProvider, QRCodeProviderProtocol
from .providers.rng import CSRNGProvider, RNGProviderProtocol
from .providers.time import (
    HttpTimeProvider,
    LocalMachineTimeProvider,
    TimeProviderProtocol,
    ensure_correct_time,
)

logger = logging.getLogger(__name__)


def _require_positive_int(name: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidConfigurationError(f"{name} must be int > 0")
    return value


class TwoFactorAuth:
    def __init__(
        self,
        issuer: Optional[str] = None,
        digits: int = DEFAULT_DIGITS,
        period: int = DEFAULT_TIME_STEP,
        algorithm: str = DEFAULT_ALGORITHM,
        qrcode_provider: Optional[QRCodeProviderProtocol] = None,
        rng_provider: Optional[RNGProviderProtocol] = None,
        time_provider: Optional[TimeProviderProtocol] = None,
    ):
        self.issuer = issuer
        self.digits = _require_positive_int("Digits", digits)
        self.period = _require_positive_int("Period", period)
        self.algorithm = normalize_algorithm(algorithm)
        self.qrcode_provider = qrcode_provider or QRCodeProvider()
        self.rng_provider = rng_provider or CSRNGProvider()
        self.time_provider = time_provider or LocalMachineTimeProvider()

    def __repr__(self):
        return (
            f"TwoFactorAuth(issuer={self.issuer!r}, digits={self.digits}, "
            f"period={self.period}, algorithm={self.algorithm!r})"
        )

    # --- Secrets -----------------------------------------------------------
    def create_secret(self, bits: int = DEFAULT_SECRET_BITS, require_cryptosecure: bool = True) -> str:
        """
        Create a new Base32 secret holding at least `bits` bits of entropy.

        One random byte is drawn per output character and masked to 5 bits
        (& 0x1F), so the secret is ceil(bits / 5) characters long.

        Raises:
            InvalidConfigurationError: if bits is not a positive int
            InsecureEntropySourceError: if require_cryptosecure is set and the
                RNG provider is not cryptographically secure
            RNGError: if the provider returned the wrong number of bytes
        """
        _require_positive_int("Bits", bits)
        byte_count = math.ceil(bits / 5)

        if not self.rng_provider.is_cryptographically_secure():
            if require_cryptosecure:
                raise InsecureEntropySourceError("RNG provider is not cryptographically secure")
            logger.warning("Creating secret with non-cryptographically secure RNG provider")

        rnd = self.rng_provider.get_random_bytes(byte_count)
        if len(rnd) != byte_count:
            raise RNGError(f"RNG provider returned {len(rnd)} bytes, expected {byte_count}")
        return "".join(base32.ALPHABET[b & 0x1F] for b in rnd)

    # --- Codes -------------------------------------------------------------
    def get_time(self, time: Optional[int] = None) -> int:
        return self.time_provider.get_time() if time is None else time

    def get_time_slice(self, time: Optional[int] = None, offset: int = 0) -> int:
        """Counter for `time` (provider time if None), shifted by `offset` steps."""
        return time_slice(self.get_time(time), self.period, offset)

    def get_remaining_seconds(self, time: Optional[int] = None) -> int:
        return remaining_seconds(self.get_time(time), self.period)

    def get_code(self, secret: str, time: Optional[int] = None) -> str:
        """
        Calculate the code for a Base32 secret at a point in time.

        Arguments:
            secret: Base32 secret (padded or not)
            time: Unix timestamp; None -> time provider

        Raises:
            InvalidEncodingError: if the secret is not valid Base32
        """
        key = base32.decode(secret)
        counter = self.get_time_slice(time)
        logger.debug("get_code: counter=%s period=%s", counter, self.period)
        return hotp(key, counter, self.digits, self.algorithm)

    def verify_code(
        self,
        secret: str,
        code: str,
        discrepancy: int = DEFAULT_DISCREPANCY,
        time: Optional[int] = None,
    ) -> bool:
        """
        Check a user-supplied code. Codes from `discrepancy` periods before up
        to `discrepancy` periods after `time` are accepted.

        Every candidate is computed and compared even after a match, so the
        time taken does not reveal which step matched.
        """
        result = False
        timestamp = self.get_time(time)

        for i in range(-discrepancy, discrepancy + 1):
            candidate = timestamp + i * self.period
            if candidate < 0:
                continue
            result |= code_equals(self.get_code(secret, candidate), code)

        return result

    # --- Provisioning ------------------------------------------------------
    def get_qr_text(self, label: str, secret: str) -> str:
        """otpauth:// URI to be encoded in the QR code."""
        return format_otpauth_uri(
            label,
            secret,
            issuer=self.issuer,
            period=self.period,
            algorithm=self.algorithm,
            digits=self.digits,
        )

    def get_qr_code_image_as_data_uri(self, label: str, secret: str, size: int = DEFAULT_QR_SIZE) -> str:
        """
        Render the provisioning URI and return it as a data: URI
        (data:<mime>;base64,<image>), ready for an <img src=...>.

        Raises:
            InvalidConfigurationError: if size is not a positive int
            QRException: if the rendering provider fails
        """
        _require_positive_int("Size", size)
        image, mime_type = self.qrcode_provider.render(self.get_qr_text(label, secret), size)
        return f"data:{mime_type};base64,{base64.b64encode(image).decode('ascii')}"

    # --- Clock -------------------------------------------------------------
    def ensure_correct_time(
        self,
        time_providers: Optional[Iterable[TimeProviderProtocol]] = None,
        leniency: int = DEFAULT_LENIENCY,
    ) -> None:
        """
        Compare this instance's time provider with other sources.

        Without explicit providers, google.com and github.com are queried.

        Raises:
            TimeDriftError: if any source is off by more than leniency seconds
            TimeException: if a source cannot be reached
        """
        if time_providers is None:
            time_providers = [
                HttpTimeProvider(),
                HttpTimeProvider("https://github.com"),
            ]
        ensure_correct_time(self.time_provider, time_providers, leniency)
