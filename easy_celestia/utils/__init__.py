"""
Utility helpers for easy-celestia.

Re-exports:
- bytes: hex and base64 helpers
- hash: Keccak-256
- retry: fixed-delay async retry loop
"""

from .bytes import b64decode, b64encode, ensure_bytes, from_hex, to_hex
from .hash import keccak256, keccak256_hex
from .retry import RetryError, aretry_fixed

__all__ = [
    # bytes
    "to_hex",
    "from_hex",
    "ensure_bytes",
    "b64encode",
    "b64decode",
    # hash
    "keccak256",
    "keccak256_hex",
    # retry
    "RetryError",
    "aretry_fixed",
]
