"""Entropy providers used by TwoFactorAuth.create_secret()."""

from typing import Protocol
import hashlib
import logging
import random
import secrets

logger = logging.getLogger(__name__)

# fixed-length digests only; shake_* needs a length argument
HASH_ALGORITHMS = hashlib.algorithms_guaranteed - {"shake_128", "shake_256"}


class RNGProviderProtocol(Protocol):
    def get_random_bytes(self, count: int) -> bytes: ...

    def is_cryptographically_secure(self) -> bool: ...


class CSRNGProvider:
    """Operating system CSPRNG (secrets.token_bytes)."""

    def get_random_bytes(self, count: int) -> bytes:
        return secrets.token_bytes(count)

    def is_cryptographically_secure(self) -> bool:
        return True


class HashRNGProvider:
    """
    Non-cryptographic RNG: Mersenne Twister output stretched through a hash.

    Only usable with create_secret(..., require_cryptosecure=False).
    """

    def __init__(self, algorithm: str = "sha256"):
        if algorithm not in HASH_ALGORITHMS:
            raise ValueError(f"Unsupported hash algorithm: {algorithm}")
        self.algorithm = algorithm
        self._random = random.Random()

    def get_random_bytes(self, count: int) -> bytes:
        out = b""
        while len(out) < count:
            seed = self._random.getrandbits(64).to_bytes(8, "big")
            out += hashlib.new(self.algorithm, out[-16:] + seed).digest()
        return out[:count]

    def is_cryptographically_secure(self) -> bool:
        return False
