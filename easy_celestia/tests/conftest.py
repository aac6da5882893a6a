from __future__ import annotations

import base64
import hashlib
import json
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest

from easy_celestia.blob_id import encode_blob_id

NODE_URL = "http://node.test:26658"
EXPLORER_URL = "https://explorer.test/v1"


class FakeNode:
    """
    Minimal in-memory DA node speaking JSON-RPC over an httpx.MockTransport.

    Blob IDs are built the way the node builds them: LE height ++ commitment,
    where the commitment here is just sha256 of the blob.
    """

    def __init__(self) -> None:
        self.calls: List[Tuple[str, Any]] = []
        self.headers: List[httpx.Headers] = []
        self._store: Dict[Tuple[str, str], str] = {}
        self.height = 100
        self.overrides: Dict[str, Any] = {}

    def put(self, namespace_b64: str, data: bytes, height: Optional[int] = None) -> Tuple[int, str]:
        """Store a blob directly; returns (height, commitment_b64) as the explorer would list it."""
        self.height += 1
        h = self.height if height is None else height
        commitment = base64.b64encode(hashlib.sha256(data).digest()).decode()
        self._store[(namespace_b64, encode_blob_id(h, commitment))] = base64.b64encode(data).decode()
        return h, commitment

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        method, params = body["method"], body["params"]
        self.calls.append((method, params))
        self.headers.append(request.headers)
        if method in self.overrides:
            return self.overrides[method]

        if method == "da.Submit":
            blobs, _gas_price, ns = params
            ids = []
            for blob in blobs:
                h, commitment = self.put(ns, base64.b64decode(blob))
                ids.append(encode_blob_id(h, commitment))
            return _result(ids)

        if method == "da.Get":
            ids, ns = params
            try:
                return _result([self._store[(ns, i)] for i in ids])
            except KeyError as e:
                return httpx.Response(
                    200, json={"jsonrpc": "2.0", "id": 1, "error": {"code": 1, "message": f"blob: not found {e}"}}
                )

        return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": {"message": "method not found"}})


class FakeExplorer:
    """Serves canned /blob listings and /namespace lookups; records query params."""

    def __init__(self) -> None:
        self.blobs: List[Dict[str, Any]] = []
        self.requests: List[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path.endswith("/blob"):
            params = request.url.params
            offset = int(params.get("offset", 0))
            limit = int(params.get("limit", 10))
            return httpx.Response(200, json=self.blobs[offset:offset + limit])
        if "/namespace/" in path:
            return httpx.Response(200, json={"namespace_id": path.rsplit("/", 1)[-1], "blobs_count": 3})
        return httpx.Response(404, json={"message": "unknown path"})


def _result(result: Any) -> httpx.Response:
    return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": result})


@pytest.fixture
def fake_node() -> FakeNode:
    return FakeNode()


@pytest.fixture
def fake_explorer() -> FakeExplorer:
    return FakeExplorer()


@pytest.fixture
def celestia(fake_node: FakeNode, fake_explorer: FakeExplorer):
    from easy_celestia.client import EasyCelestia

    return EasyCelestia(
        node_endpoint=NODE_URL,
        node_api_key="token",
        celenium_endpoint=EXPLORER_URL,
        celenium_api_key="key",
        retry_delay=0.0,
        node_transport=httpx.MockTransport(fake_node.handler),
        explorer_transport=httpx.MockTransport(fake_explorer.handler),
    )
