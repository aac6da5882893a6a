from __future__ import annotations

from Crypto.Hash import keccak as _keccak

from .bytes import BytesLike, ensure_bytes, to_hex

# --- Keccak-256 (Ethereum-style) ----------------------------------------------
# hashlib only ships NIST SHA3 (different padding). Namespace derivation needs
# the original Keccak-256, provided by pycryptodome.


def keccak256(data: BytesLike | str) -> bytes:
    """Return Keccak-256 digest of *data*; str input is hashed as UTF-8."""
    h = _keccak.new(digest_bits=256)
    h.update(ensure_bytes(data))
    return h.digest()


def keccak256_hex(data: BytesLike | str, *, prefix: bool = True) -> str:
    """Return hex string of Keccak-256 digest (0x-prefixed by default)."""
    return to_hex(keccak256(data), prefix=prefix)


__all__ = ["keccak256", "keccak256_hex"]
