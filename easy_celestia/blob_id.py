"""
Blob ID codec.

The node addresses a blob by an opaque base64 ID, which it composes as

    height (uint64, little-endian, 8 bytes) ++ commitment bytes

The explorer instead reports a blob as a (height, base64 commitment) pair.
`encode_blob_id` turns the explorer pair into the node ID; getting the byte
order wrong silently points `da.Get` at nothing.

`decode_blob_id` is the inverse. Nothing in the client decomposes IDs today;
it is kept for tooling and for the round-trip tests.
"""

from __future__ import annotations

from typing import Tuple

from .errors import EncodingError
from .utils.bytes import b64decode, b64encode

HEIGHT_SIZE = 8
_HEIGHT_HEX_DIGITS = HEIGHT_SIZE * 2


def _height_hex_le(height: int) -> str:
    if isinstance(height, bool) or not isinstance(height, int):
        raise EncodingError(f"height must be an int, got {type(height).__name__}")
    if height < 0:
        raise EncodingError(f"height must be non-negative, got {height}")
    digits = format(height, "x")
    if len(digits) > _HEIGHT_HEX_DIGITS:
        raise EncodingError(f"height {height} does not fit in {HEIGHT_SIZE} bytes")
    padded = digits.rjust(_HEIGHT_HEX_DIGITS, "0")
    pairs = [padded[i:i + 2] for i in range(0, _HEIGHT_HEX_DIGITS, 2)]
    return "".join(reversed(pairs))


def encode_blob_id(height: int, commitment: str) -> str:
    """(height, base64 commitment) -> node blob ID (base64)."""
    id_hex = _height_hex_le(height) + b64decode(commitment).hex()
    return b64encode(bytes.fromhex(id_hex))


def decode_blob_id(blob_id: str) -> Tuple[int, bytes]:
    """Node blob ID (base64) -> (height, commitment bytes)."""
    raw = b64decode(blob_id)
    if len(raw) < HEIGHT_SIZE:
        raise EncodingError(f"blob id too short: {len(raw)} bytes")
    height = int.from_bytes(raw[:HEIGHT_SIZE], "little")
    return height, raw[HEIGHT_SIZE:]


__all__ = ["HEIGHT_SIZE", "encode_blob_id", "decode_blob_id"]
