"""
Namespace derivation.

A Celestia namespace is a 29-byte identifier. Callers may hand us:

* raw bytes                -> used as-is (the caller owns the 29-byte contract)
* "0x" + hex               -> decoded verbatim
* any other string         -> Keccak-256 of the UTF-8 text; the first 10 bytes
                              of the digest fill bytes 19..28, the rest is zero

The explorer and the node disagree on representation: the explorer serves
namespaces as base64, the node wants the raw 29 bytes (base64 on the wire).
`namespace_from_explorer` bridges the two by producing a "0x" hex string that
round-trips through `derive_namespace`.
"""

from __future__ import annotations

from typing import Any, Mapping, Union

from .errors import InvalidInput
from .utils.bytes import BytesLike, b64decode, b64encode, from_hex, to_hex
from .utils.hash import keccak256

NAMESPACE_SIZE = 29
NAMESPACE_HASH_SIZE = 10

NamespaceLike = Union[str, BytesLike]


def derive_namespace(value: NamespaceLike) -> bytes:
    """Turn a human string, 0x-hex string or raw bytes into namespace bytes."""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if not isinstance(value, str):
        raise InvalidInput("namespace must be str or bytes", type(value).__name__)
    if value.startswith("0x"):
        return from_hex(value)

    digest = keccak256(value)[:NAMESPACE_HASH_SIZE]
    return bytes(NAMESPACE_SIZE - NAMESPACE_HASH_SIZE) + digest


def namespace_to_base64(value: NamespaceLike) -> str:
    """Node wire form of a namespace."""
    return b64encode(derive_namespace(value))


def namespace_to_hex(value: NamespaceLike, *, prefix: bool = False) -> str:
    """Hex form of a namespace; the explorer addresses namespaces by hex id."""
    return to_hex(derive_namespace(value), prefix=prefix)


def namespace_from_explorer(value: Union[str, Mapping[str, Any]]) -> str:
    """
    Reformat an explorer namespace into a "0x"-prefixed hex string.

    Accepts the base64 string itself or an explorer namespace object, whose
    base64 form lives under "hash".
    """
    if isinstance(value, Mapping):
        encoded = value.get("hash")
        if not isinstance(encoded, str):
            raise InvalidInput("explorer namespace object has no 'hash'", dict(value))
        value = encoded
    if not isinstance(value, str):
        raise InvalidInput("explorer namespace must be a base64 string", value)
    return to_hex(b64decode(value))


__all__ = [
    "NAMESPACE_SIZE",
    "NAMESPACE_HASH_SIZE",
    "NamespaceLike",
    "derive_namespace",
    "namespace_to_base64",
    "namespace_to_hex",
    "namespace_from_explorer",
]
