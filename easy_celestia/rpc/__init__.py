"""
easy_celestia.rpc
-----------------

Backend HTTP clients.

This package exposes:
- HttpEngine:     request engine with fixed-delay 429 retries (see .http)
- NodeClient:     DA node JSON-RPC client (bearer auth, `result` unwrapping)
- ExplorerClient: Celenium REST client (apiKey header, plain JSON)

Import style:

    from easy_celestia.rpc import NodeClient, ExplorerClient
    node = NodeClient("http://localhost:26658", api_key="...")
    explorer = ExplorerClient("https://api-mocha.celenium.io/v1")
"""

from __future__ import annotations

from .http import ExplorerClient, HttpEngine, NodeClient

__all__ = ["HttpEngine", "NodeClient", "ExplorerClient"]
