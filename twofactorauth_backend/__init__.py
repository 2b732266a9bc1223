"""
Backend package: Flask JSON API for TOTP secrets, codes and QR provisioning.
"""

from .app import create_app

__all__ = ['create_app']
