"""Pluggable capabilities: entropy, wall clock and QR rendering."""

from .qr import QRCodeProvider, QRCodeProviderProtocol, QRServerProvider
from .rng import CSRNGProvider, HashRNGProvider, RNGProviderProtocol
from .time import (
    HttpTimeProvider,
    LocalMachineTimeProvider,
    TimeProviderProtocol,
    ensure_correct_time,
)

__all__ = [
    "CSRNGProvider",
    "HashRNGProvider",
    "HttpTimeProvider",
    "LocalMachineTimeProvider",
    "QRCodeProvider",
    "QRCodeProviderProtocol",
    "QRServerProvider",
    "RNGProviderProtocol",
    "TimeProviderProtocol",
    "ensure_correct_time",
]
