from __future__ import annotations

"""
HTTP request engine shared by the node (JSON-RPC) and explorer (REST) clients.

- Async, built on httpx.AsyncClient; one engine per backend.
- Retries HTTP 429 only, with a fixed pause between attempts (default 20
  attempts, 1.1 s apart). Every other failure surfaces immediately.
- Non-2xx responses raise HttpError with a best-effort parsed JSON body;
  JSON bodies carrying an `error` member raise RemoteError.

Example:
    from easy_celestia.rpc.http import NodeClient
    from easy_celestia.types import GetRequest

    async with NodeClient("http://localhost:26658", api_key="...") as node:
        bodies = await node.call(GetRequest(ids=(blob_id,), namespace=ns_b64))
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Union

import httpx

from ..errors import (DecodeError, HttpError, RetryExhausted,
                      raise_for_jsonrpc_error)
from ..types import JSON, JsonRpcRequest, envelope
from ..utils.retry import RetryError, aretry_fixed
from ..version import __version__ as PKG_VERSION

log = logging.getLogger(__name__)

QueryParams = Union[Mapping[str, Any], Sequence[Tuple[str, Any]], None]

RATE_LIMITED = 429


class _RateLimited(Exception):
    def __init__(self, response: httpx.Response) -> None:
        super().__init__(f"HTTP {response.status_code}")
        self.response = response


@dataclass
class HttpEngine:
    """Issue requests against one backend, retrying while it answers 429."""

    base_url: str
    headers: Optional[Mapping[str, str]] = None
    timeout: float = 30.0
    max_attempts: int = 20
    retry_delay: float = 1.1
    transport: Optional[httpx.AsyncBaseTransport] = None
    _client: httpx.AsyncClient = field(init=False, repr=False)

    def __post_init__(self) -> None:
        merged_headers: Dict[str, str] = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": f"easy-celestia-python/{PKG_VERSION}",
        }
        if self.headers:
            merged_headers.update(dict(self.headers))
        self._client = httpx.AsyncClient(
            timeout=self.timeout,
            headers=merged_headers,
            transport=self.transport,
        )

    # --- context manager -------------------------------------------------

    async def __aenter__(self) -> "HttpEngine":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # --- public API ------------------------------------------------------

    async def send(
        self,
        path: str = "",
        method: str = "GET",
        payload: Any = None,
        params: QueryParams = None,
        *,
        rpc_method: Optional[str] = None,
    ) -> JSON:
        """Perform one logical request and return the parsed JSON body."""
        url = self._url(path)
        try:
            response = await aretry_fixed(
                self._send_once,
                method,
                url,
                payload,
                params,
                attempts=self.max_attempts,
                delay=self.retry_delay,
                exceptions=_RateLimited,
                on_retry=lambda attempt, _exc, delay: log.warning(
                    "rate limited by %s (attempt %d/%d), retrying in %.1fs",
                    url, attempt, self.max_attempts, delay,
                ),
            )
        except RetryError as e:
            log.error("giving up on %s after %d rate-limited attempts", url, e.attempts)
            raise RetryExhausted(attempts=e.attempts, url=url) from e
        return self._handle_response(response, url, rpc_method)

    # --- internals -------------------------------------------------------

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}" if path else self.base_url

    async def _send_once(
        self, method: str, url: str, payload: Any, params: QueryParams
    ) -> httpx.Response:
        body = None if payload is None else json.dumps(payload, separators=(",", ":"))
        log.debug("%s %s", method, url)
        r = await self._client.request(method, url, content=body, params=params or None)
        if r.status_code == RATE_LIMITED:
            raise _RateLimited(r)
        return r

    @staticmethod
    def _handle_response(r: httpx.Response, url: str, rpc_method: Optional[str]) -> JSON:
        if not r.is_success:
            # Keep the error body visible when the backend sends JSON
            try:
                detail = r.json()
            except ValueError:
                detail = None
            raise HttpError(
                status_code=r.status_code, reason=r.reason_phrase, detail=detail, url=url
            )
        try:
            data = r.json()
        except ValueError as e:
            raise DecodeError(f"non-JSON response from {url}: {r.text[:256]!r}") from e
        raise_for_jsonrpc_error(data, method=rpc_method)
        return data


class NodeClient:
    """JSON-RPC client for the DA node; returns only the `result` member."""

    def __init__(
        self,
        url: str,
        api_key: Optional[str] = None,
        *,
        timeout: float = 30.0,
        max_attempts: int = 20,
        retry_delay: float = 1.1,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        headers = {"Authorization": f"Bearer {api_key}"} if api_key else {}
        self._engine = HttpEngine(
            url,
            headers,
            timeout=timeout,
            max_attempts=max_attempts,
            retry_delay=retry_delay,
            transport=transport,
        )

    @property
    def url(self) -> str:
        return self._engine.base_url

    async def __aenter__(self) -> "NodeClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        await self.aclose()

    async def aclose(self) -> None:
        await self._engine.aclose()

    async def call(self, request: JsonRpcRequest) -> Any:
        """Send a typed JSON-RPC request and return its parsed result."""
        body = await self._engine.send(
            "", "POST", envelope(request), rpc_method=request.method
        )
        if not isinstance(body, dict):
            raise DecodeError(f"{request.method}: malformed JSON-RPC response")
        return request.parse_result(body.get("result"))


class ExplorerClient:
    """REST client for the Celenium explorer; returns the full parsed body."""

    def __init__(
        self,
        url: str,
        api_key: Optional[str] = None,
        *,
        timeout: float = 30.0,
        max_attempts: int = 20,
        retry_delay: float = 1.1,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        headers = {"apiKey": api_key} if api_key else {}
        self._engine = HttpEngine(
            url.rstrip("/"),
            headers,
            timeout=timeout,
            max_attempts=max_attempts,
            retry_delay=retry_delay,
            transport=transport,
        )

    @property
    def url(self) -> str:
        return self._engine.base_url

    async def __aenter__(self) -> "ExplorerClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        await self.aclose()

    async def aclose(self) -> None:
        await self._engine.aclose()

    async def get(self, path: str, params: QueryParams = None) -> JSON:
        return await self._engine.send(path, "GET", params=params)

    async def post(self, path: str, payload: Any) -> JSON:
        return await self._engine.send(path, "POST", payload)


__all__ = ["HttpEngine", "NodeClient", "ExplorerClient", "RATE_LIMITED"]
