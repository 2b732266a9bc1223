"""
QR code rendering providers.

A provider turns the otpauth:// text into (image_bytes, mime_type);
TwoFactorAuth wraps the result into a data: URI.
"""

from io import BytesIO
from typing import Protocol, Tuple
import logging

import qrcode
import requests

from ..exceptions import QRException

logger = logging.getLogger(__name__)


class QRCodeProviderProtocol(Protocol):
    def render(self, text: str, size: int) -> Tuple[bytes, str]: ...


class QRCodeProvider:
    """
    Local PNG rendering with the qrcode library (no network access).

    The box size is picked so the image is at most `size` pixels wide.
    """

    mime_type = "image/png"

    def __init__(self, border: int = 4, error_correction: int = qrcode.constants.ERROR_CORRECT_L):
        self.border = border
        self.error_correction = error_correction

    def render(self, text: str, size: int) -> Tuple[bytes, str]:
        qr = qrcode.QRCode(
            version=None,
            error_correction=self.error_correction,
            box_size=1,
            border=self.border,
        )
        qr.add_data(text)
        qr.make(fit=True)
        qr.box_size = max(1, size // (qr.modules_count + 2 * self.border))

        img = qr.make_image(fill_color="black", back_color="white")
        buffer = BytesIO()
        img.save(buffer, format="PNG")
        return buffer.getvalue(), self.mime_type


class QRServerProvider:
    """Remote rendering through the goqr.me / qrserver.com HTTP API."""

    URL = "https://api.qrserver.com/v1/create-qr-code/"
    MIME_TYPES = {
        "png": "image/png",
        "gif": "image/gif",
        "jpg": "image/jpeg",
        "jpeg": "image/jpeg",
        "svg": "image/svg+xml",
        "eps": "application/postscript",
    }

    def __init__(self, image_format: str = "png", error_correction: str = "L",
                 margin: int = 4, timeout: float = 10.0):
        if image_format not in self.MIME_TYPES:
            raise QRException(f"Unsupported image format: {image_format}")
        self.image_format = image_format
        self.error_correction = error_correction
        self.margin = margin
        self.timeout = timeout

    def render(self, text: str, size: int) -> Tuple[bytes, str]:
        params = {
            "data": text,
            "size": f"{size}x{size}",
            "ecc": self.error_correction,
            "margin": self.margin,
            "format": self.image_format,
        }
        try:
            resp = requests.get(self.URL, params=params, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise QRException(f"Unable to retrieve QR code ({e})") from e
        logger.debug("Fetched %s bytes QR image from %s", len(resp.content), self.URL)
        return resp.content, self.MIME_TYPES[self.image_format]
