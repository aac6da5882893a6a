from __future__ import annotations

import base64
import binascii
import string
from typing import Union

from ..errors import EncodingError, InvalidInput

BytesLike = Union[bytes, bytearray, memoryview]


def ensure_bytes(data: Union[BytesLike, str]) -> bytes:
    """
    Ensure input is bytes.

    Accepts:
      - bytes / bytearray / memoryview  -> bytes(data)
      - str: treated as UTF-8 text
    """
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    if isinstance(data, str):
        return data.encode("utf-8")
    raise TypeError(f"Unsupported type for ensure_bytes: {type(data)!r}")


def to_hex(b: BytesLike, prefix: bool = True) -> str:
    """
    Bytes -> hex string (lowercase). Prefix with '0x' by default.
    """
    s = bytes(b).hex()
    return f"0x{s}" if prefix else s


def from_hex(s: str) -> bytes:
    """
    Hex string (optionally '0x' prefixed) -> bytes.

    Enforces even-length (nibbles must pair to bytes); case-insensitive.

    Raises:
      InvalidInput on odd-length or non-hex strings.
    """
    if not isinstance(s, str):
        raise TypeError("from_hex expects a string")
    if s.startswith(("0x", "0X")):
        s = s[2:]
    if len(s) % 2 != 0:
        raise InvalidInput("Invalid hex string: length must be even", s)
    # bytes.fromhex skips whitespace
    if not all(c in string.hexdigits for c in s):
        raise InvalidInput("Invalid hex string: non-hex characters", s)
    return bytes.fromhex(s)


def b64encode(b: BytesLike) -> str:
    """Bytes -> standard (padded) base64 text."""
    return base64.b64encode(bytes(b)).decode("ascii")


def b64decode(s: Union[str, bytes]) -> bytes:
    """
    Strict base64 -> bytes.

    Accepts the standard and the URL-safe alphabet (the explorer serves
    commitments in either). Missing padding is tolerated.

    Raises:
      EncodingError on malformed input.
    """
    if isinstance(s, bytes):
        s = s.decode("ascii", errors="replace")
    if not isinstance(s, str):
        raise TypeError("b64decode expects str or bytes")
    text = s.strip().replace("-", "+").replace("_", "/")
    text += "=" * (-len(text) % 4)
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as e:
        raise EncodingError(f"invalid base64 {s!r}: {e}") from e


__all__ = [
    "BytesLike",
    "ensure_bytes",
    "to_hex",
    "from_hex",
    "b64encode",
    "b64decode",
]
