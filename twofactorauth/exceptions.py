class TwoFactorAuthException(Exception):
    """Base error for everything raised by twofactorauth."""
    pass

class InvalidConfigurationError(TwoFactorAuthException):
    """Digits, period, algorithm or another setting is out of range."""
    pass

class InvalidEncodingError(TwoFactorAuthException, ValueError):
    """Base32 text contains a character outside the RFC 4648 alphabet."""
    pass

class InsecureEntropySourceError(TwoFactorAuthException):
    """A secure RNG was required but the provider is not one."""
    pass

class RNGError(TwoFactorAuthException):
    """RNG provider did not return the requested amount of data."""
    pass

class TimeException(TwoFactorAuthException):
    """Time source could not produce a timestamp."""
    pass

class TimeDriftError(TwoFactorAuthException):
    """Two time sources disagree by more than the allowed leniency."""
    pass

class QRException(TwoFactorAuthException):
    """Rendering provider failed to produce a QR code image."""
    pass
