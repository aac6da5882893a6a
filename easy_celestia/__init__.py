"""
easy-celestia: Celestia blobs from Python.
Convenience exports for the most common client APIs.
"""

from .version import __version__  # noqa: F401

# Core config & errors
from .config import EasyCelestiaOptions  # noqa: F401
from .errors import (  # noqa: F401
    DecodeError,
    EasyCelestiaError,
    EncodingError,
    HttpError,
    InvalidInput,
    RemoteError,
    RetryExhausted,
)

# Addressing
from .namespace import derive_namespace, namespace_from_explorer  # noqa: F401
from .blob_id import decode_blob_id, encode_blob_id  # noqa: F401

# Typed requests / filters
from .types import BlobRef, ListFilter, SortField, SortOrder  # noqa: F401

# Backend clients
from .rpc.http import ExplorerClient, NodeClient  # noqa: F401

# Facade
from .client import EasyCelestia  # noqa: F401

__all__ = [
    "__version__",
    # Core
    "EasyCelestiaOptions",
    "EasyCelestiaError", "InvalidInput", "EncodingError", "HttpError",
    "RemoteError", "RetryExhausted", "DecodeError",
    # Addressing
    "derive_namespace", "namespace_from_explorer",
    "encode_blob_id", "decode_blob_id",
    # Types
    "BlobRef", "ListFilter", "SortField", "SortOrder",
    # Clients
    "NodeClient", "ExplorerClient", "EasyCelestia",
]
