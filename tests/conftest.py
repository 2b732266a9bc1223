import pytest

from twofactorauth import TwoFactorAuth

SECRET = "VMR466AB62ZBOKHE"

# RFC 6238 Appendix B secrets, base32 encoded
RFC_SECRET_SHA1 = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"
RFC_SECRET_SHA256 = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQGEZA"
RFC_SECRET_SHA512 = (
    "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"
    "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQGEZDGNA"
)


class SequentialRNGProvider:
    """Returns bytes 0, 1, 2, ... so secrets are predictable."""

    def __init__(self, secure=False):
        self.secure = secure
        self.requested = []

    def get_random_bytes(self, count):
        self.requested.append(count)
        return bytes(i % 256 for i in range(count))

    def is_cryptographically_secure(self):
        return self.secure


class FixedTimeProvider:
    def __init__(self, time):
        self.time = time

    def get_time(self):
        return self.time


class EchoQRProvider:
    """Image bytes are just '<text>@<size>' so tests can read them back."""

    def render(self, text, size):
        return f"{text}@{size}".encode("utf-8"), "test/test"


class FakeResponse:
    def __init__(self, headers=None, content=b"", status_error=None):
        self.headers = headers or {}
        self.content = content
        self._status_error = status_error

    def raise_for_status(self):
        if self._status_error:
            raise self._status_error


@pytest.fixture
def tfa():
    return TwoFactorAuth("Test")


@pytest.fixture
def secure_rng():
    return SequentialRNGProvider(secure=True)


@pytest.fixture
def insecure_rng():
    return SequentialRNGProvider(secure=False)
