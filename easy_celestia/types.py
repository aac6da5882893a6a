"""
Typed shapes exchanged with the two backends.

Node (JSON-RPC)
---------------
`SubmitRequest` / `GetRequest` carry the method discriminant ("da.Submit",
"da.Get"), build their positional params and validate their result shape.
`envelope()` wraps either one into the JSON-RPC 2.0 request object.

Explorer (REST)
---------------
`ListFilter` is the sparse filter for GET /blob. `to_query()` is a pure
function producing ordered (key, value) pairs; absent fields never reach the
wire and multi-valued fields are comma-joined.

`BlobRef` is one item of an explorer blob listing, reduced to what is needed
to address the blob on the node.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import (Any, ClassVar, Dict, List, Mapping, Optional, Sequence,
                    Tuple, Union)

from .blob_id import encode_blob_id
from .errors import DecodeError, InvalidInput
from .namespace import namespace_from_explorer

JSON = Union[dict, list, str, int, float, bool, None]


# --- JSON-RPC requests --------------------------------------------------------


def _string_list(result: Any, method: str) -> List[str]:
    if result is None:
        return []
    if not isinstance(result, list) or not all(isinstance(x, str) for x in result):
        raise DecodeError(f"{method}: expected a list of strings, got {type(result).__name__}")
    return list(result)


@dataclass(frozen=True)
class SubmitRequest:
    """da.Submit: blobs (base64), gas price, namespace (base64) -> blob IDs."""

    method: ClassVar[str] = "da.Submit"

    blobs: Tuple[str, ...]
    gas_price: float
    namespace: str

    def params(self) -> List[Any]:
        return [list(self.blobs), self.gas_price, self.namespace]

    def parse_result(self, result: Any) -> List[str]:
        ids = _string_list(result, self.method)
        if len(ids) != len(self.blobs):
            raise DecodeError(
                f"{self.method}: node returned {len(ids)} ids for {len(self.blobs)} blobs"
            )
        return ids


@dataclass(frozen=True)
class GetRequest:
    """da.Get: blob IDs, namespace (base64) -> blob bodies (base64)."""

    method: ClassVar[str] = "da.Get"

    ids: Tuple[str, ...]
    namespace: str

    def params(self) -> List[Any]:
        return [list(self.ids), self.namespace]

    def parse_result(self, result: Any) -> List[str]:
        return _string_list(result, self.method)


JsonRpcRequest = Union[SubmitRequest, GetRequest]


def envelope(request: JsonRpcRequest, *, id: int = 1) -> Dict[str, Any]:
    """JSON-RPC 2.0 request object for a typed request."""
    return {"id": id, "jsonrpc": "2.0", "method": request.method, "params": request.params()}


# --- Explorer filters ---------------------------------------------------------


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class SortField(str, Enum):
    TIME = "time"
    SIZE = "size"


# (attribute, wire key) in transmission order
_FILTER_WIRE: Tuple[Tuple[str, str], ...] = (
    ("limit", "limit"),
    ("offset", "offset"),
    ("sort", "sort"),
    ("sort_by", "sort_by"),
    ("commitment", "commitment"),
    ("from_", "from"),
    ("to", "to"),
    ("namespaces", "namespaces"),
    ("signers", "signers"),
    ("cursor", "cursor"),
)
_FILTER_ALIASES = {"from": "from_", "sortBy": "sort_by"}

MultiValue = Union[str, Sequence[str]]


def _join(value: MultiValue) -> str:
    if isinstance(value, str):
        return value
    return ",".join(str(v) for v in value)


@dataclass(frozen=True)
class ListFilter:
    """
    Filter for the explorer blob listing.

    limit       number of blobs to return
    offset      offset into the listing
    sort        asc | desc
    sort_by     time | size (explorer uses its internal id when unset)
    commitment  commitment in URL-safe base64
    from_       unix timestamp lower bound (wire key "from")
    to          unix timestamp upper bound
    namespaces  one namespace or several (comma-joined on the wire)
    signers     one signer address or several (comma-joined on the wire)
    cursor      last entity id, for cursor pagination
    """

    limit: Optional[int] = None
    offset: Optional[int] = None
    sort: Optional[SortOrder] = None
    sort_by: Optional[SortField] = None
    commitment: Optional[str] = None
    from_: Optional[int] = None
    to: Optional[int] = None
    namespaces: Optional[MultiValue] = None
    signers: Optional[MultiValue] = None
    cursor: Optional[int] = None

    def __post_init__(self) -> None:
        for name in ("limit", "offset", "from_", "to", "cursor"):
            v = getattr(self, name)
            if v is not None and (isinstance(v, bool) or not isinstance(v, int) or v < 0):
                raise InvalidInput(f"{name} must be a non-negative int", v)
        try:
            if self.sort is not None:
                object.__setattr__(self, "sort", SortOrder(self.sort))
            if self.sort_by is not None:
                object.__setattr__(self, "sort_by", SortField(self.sort_by))
        except ValueError as e:
            raise InvalidInput(str(e)) from e
        for name in ("namespaces", "signers"):
            v = getattr(self, name)
            if v is None:
                continue
            if not isinstance(v, str):
                v = tuple(v)
            # an empty selection is the same as no filter
            object.__setattr__(self, name, v or None)

    @classmethod
    def from_fields(cls, **fields: Any) -> "ListFilter":
        """Build from keyword fields; accepts the wire spellings "from"/"sortBy" too."""
        known = {f.name for f in dataclasses.fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in fields.items():
            name = _FILTER_ALIASES.get(key, key)
            if name not in known:
                raise InvalidInput("unknown list filter field", key)
            kwargs[name] = value
        return cls(**kwargs)

    def replace(self, **changes: Any) -> "ListFilter":
        return dataclasses.replace(self, **changes)

    def merged(self, **fields: Any) -> "ListFilter":
        """Copy with keyword fields layered on top; None values keep the current value."""
        extra = ListFilter.from_fields(**fields)
        changes = {
            f.name: getattr(extra, f.name)
            for f in dataclasses.fields(extra)
            if getattr(extra, f.name) is not None
        }
        return self.replace(**changes)

    def to_query(self) -> List[Tuple[str, str]]:
        """Ordered query pairs; unset fields are left out."""
        pairs: List[Tuple[str, str]] = []
        for attr, key in _FILTER_WIRE:
            value = getattr(self, attr)
            if value is None:
                continue
            if isinstance(value, Enum):
                value = value.value
            elif attr in ("namespaces", "signers"):
                value = _join(value)
            pairs.append((key, str(value)))
        return pairs


# --- Explorer blob references -------------------------------------------------


@dataclass(frozen=True)
class BlobRef:
    """A blob as listed by the explorer: where it landed and what it holds."""

    height: int
    commitment: str
    namespace: str
    content_type: Optional[str] = None
    size: Optional[int] = None
    signer: Optional[str] = None
    time: Optional[str] = None
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_explorer(cls, item: Mapping[str, Any]) -> "BlobRef":
        if not isinstance(item, Mapping):
            raise DecodeError(f"explorer blob must be an object, got {type(item).__name__}")
        try:
            height = int(item["height"])
            commitment = item["commitment"]
            namespace = item["namespace"]
        except (KeyError, TypeError, ValueError) as e:
            raise DecodeError(f"malformed explorer blob: {e!r}") from e
        if not isinstance(commitment, str) or not commitment:
            raise DecodeError("explorer blob has no base64 commitment")
        if isinstance(namespace, Mapping):
            namespace = namespace.get("hash")
        if not isinstance(namespace, str):
            raise DecodeError("explorer blob has no base64 namespace")
        size = item.get("size")
        signer = item.get("signer")
        if isinstance(signer, Mapping):
            signer = signer.get("hash")
        time = item.get("time")
        return cls(
            height=height,
            commitment=commitment,
            namespace=namespace,
            content_type=item.get("content_type"),
            size=int(size) if isinstance(size, int) else None,
            signer=signer if isinstance(signer, str) else None,
            time=time if isinstance(time, str) else None,
            raw=dict(item),
        )

    @property
    def namespace_hex(self) -> str:
        """0x-hex namespace, ready for derive_namespace."""
        return namespace_from_explorer(self.namespace)

    @property
    def blob_id(self) -> str:
        """Node-form blob ID."""
        return encode_blob_id(self.height, self.commitment)


__all__ = [
    "JSON",
    "SubmitRequest",
    "GetRequest",
    "JsonRpcRequest",
    "envelope",
    "SortOrder",
    "SortField",
    "ListFilter",
    "BlobRef",
]
