"""Deterministic fingerprints for stylesheet text."""
import base64
import struct
import zlib
from typing import Union


def fingerprint(data: Union[str, bytes]) -> str:
    """
    Return a short URL-safe fingerprint of the given ruleset text.

    Adler-32 over the UTF-8 bytes, packed little-endian and base64 encoded
    without padding, so the result is always 6 characters and identical
    for identical input on every platform.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    checksum = struct.pack("<I", zlib.adler32(data) & 0xFFFFFFFF)
    return base64.urlsafe_b64encode(checksum).rstrip(b"=").decode("ascii")
