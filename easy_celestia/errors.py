"""
Typed error classes for easy-celestia.

These are raised by the namespace/blob-id helpers, the HTTP request engine and
the facade so callers can catch specific failure modes while still being able
to catch the base `EasyCelestiaError`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

__all__ = [
    "EasyCelestiaError",
    "InvalidInput",
    "EncodingError",
    "HttpError",
    "RemoteError",
    "RetryExhausted",
    "DecodeError",
    "from_jsonrpc_error",
    "raise_for_jsonrpc_error",
    "error_fields",
]


class EasyCelestiaError(Exception):
    """Base class for all easy-celestia errors."""


@dataclass(slots=True)
class InvalidInput(EasyCelestiaError):
    """Raised for malformed caller input (hex namespaces, endpoints, networks)."""

    message: str
    value: Optional[Any] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.value is None:
            return f"InvalidInput: {self.message}"
        return f"InvalidInput: {self.message} (got {self.value!r})"


@dataclass(slots=True)
class EncodingError(EasyCelestiaError):
    """Raised when a blob ID cannot be encoded/decoded (height overflow, bad base64)."""

    message: str

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"EncodingError: {self.message}"


@dataclass(slots=True)
class HttpError(EasyCelestiaError):
    """
    Raised for a non-2xx, non-429 HTTP response.

    Fields:
      - status_code: HTTP status code
      - reason: HTTP reason phrase
      - detail: best-effort parsed JSON error body (None if the body wasn't JSON)
      - url: request URL, when known
    """

    status_code: int
    reason: str
    detail: Optional[Any] = None
    url: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        msg = f"HTTP Error: {self.status_code} {self.reason}"
        if self.detail is not None:
            msg += f" - {self.detail!r}"
        return msg


@dataclass(slots=True)
class RemoteError(EasyCelestiaError):
    """Raised when a successful HTTP response carries a JSON-RPC `error` object."""

    message: str
    code: Optional[int] = None
    data: Optional[Any] = None
    method: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        parts = [f"RPC[{self.method or '-'}]"]
        if self.code is not None:
            parts.append(f"code={self.code}")
        parts.append(f"msg={self.message!r}")
        if self.data is not None:
            parts.append(f"data={self.data!r}")
        return " ".join(parts)


@dataclass(slots=True)
class RetryExhausted(EasyCelestiaError):
    """Raised when a backend keeps answering 429 past the maximum attempt count."""

    attempts: int
    url: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        where = f" for {self.url}" if self.url else ""
        return f"Maximum retry attempts reached ({self.attempts}){where}"


@dataclass(slots=True)
class DecodeError(EasyCelestiaError):
    """Raised when a blob body (or response body) is not the JSON we expected."""

    message: str
    index: Optional[int] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        where = f" [blob {self.index}]" if self.index is not None else ""
        return f"DecodeError{where}: {self.message}"


def from_jsonrpc_error(err_obj: Any, *, method: Optional[str] = None) -> RemoteError:
    """
    Convert a JSON-RPC error member into RemoteError.

    `err_obj` should resemble {"code": int, "message": str, "data": any?}; some
    nodes send a bare string instead, which is used as the message.
    """
    if not isinstance(err_obj, dict):
        return RemoteError(message=str(err_obj), method=method)
    code = err_obj.get("code")
    return RemoteError(
        message=str(err_obj.get("message", "Unknown JSON-RPC error")),
        code=int(code) if isinstance(code, int) else None,
        data=err_obj.get("data"),
        method=method,
    )


def raise_for_jsonrpc_error(body: Any, *, method: Optional[str] = None) -> None:
    """If a parsed body carries a non-empty "error" member, raise RemoteError."""
    if isinstance(body, dict) and body.get("error"):
        raise from_jsonrpc_error(body["error"], method=method)


def error_fields(err: EasyCelestiaError) -> Dict[str, Any]:
    """Field dict of a typed error, handy for structured log events."""
    return {name: getattr(err, name) for name in getattr(err, "__dataclass_fields__", {})}
