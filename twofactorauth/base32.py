"""
base32.py — RFC 4648 Base32 codec used for shared OTP secrets.

- encode(): no '=' padding is emitted; the last group is filled with zero bits.
- decode(): accepts padded and unpadded input (URIs from other tools often
  keep the '='), rejects anything outside the alphabet, lowercase included.

encode() is base64.b32encode with the padding stripped. decode() works on a
plain integer bit buffer, because base64.b32decode insists on correct padding.
"""

import base64

from .exceptions import InvalidEncodingError

ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"
PAD_CHAR = "="

# char -> 5-bit value, read-only after import
_LOOKUP = {char: value for value, char in enumerate(ALPHABET)}


def encode(data: bytes) -> str:
    """
    Encode raw bytes as Base32 text without padding.

    Arguments:
        data: raw bytes (b"" -> "")

    Returns:
        str: Base32 text, ceil(len(data) * 8 / 5) characters
    """
    return base64.b32encode(data).decode("ascii").rstrip(PAD_CHAR)


def decode(text: str) -> bytes:
    """
    Decode Base32 text (with or without '=' padding) into raw bytes.

    Steps:
    1. Reject any character that is not in ALPHABET or '='
    2. Skip padding, append 5 bits per character to the buffer
    3. Emit one byte per complete 8 bits; trailing bits (< 8) are dropped

    Arguments:
        text: Base32 text, upper case only

    Returns:
        bytes: decoded data

    Raises:
        InvalidEncodingError: if text contains a disallowed character
    """
    if not text:
        return b""

    for char in text:
        if char not in _LOOKUP and char != PAD_CHAR:
            raise InvalidEncodingError("Invalid base32 string")

    out = bytearray()
    buffer = 0
    bits = 0
    for char in text:
        if char == PAD_CHAR:
            continue
        buffer = (buffer << 5) | _LOOKUP[char]
        bits += 5
        if bits >= 8:
            bits -= 8
            out.append((buffer >> bits) & 0xFF)
            buffer &= (1 << bits) - 1
    return bytes(out)
