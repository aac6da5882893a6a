"""
easy_celestia.client
====================

High-level client for the Celestia data-availability network.

Two backends sit behind one facade:

- the **DA node** JSON-RPC interface (`da.Submit`, `da.Get`), which stores and
  serves blobs under a namespace;
- the **Celenium explorer** REST API, which lists blobs (height, commitment,
  namespace, content type) across the network.

Typical usage
-------------
    from easy_celestia import EasyCelestia

    async with EasyCelestia(node_endpoint="http://localhost:26658", node_api_key="...") as celestia:
        blob_id = await celestia.submit("test", {"hello": "world"})
        [doc] = await celestia.get("test", blob_id)

        recent = await celestia.list_blobs_fetch_bodies(limit=10, sort="desc")

Design notes
------------
* Blobs are JSON documents on the way in: serialised compactly, UTF-8 encoded
  and base64-wrapped for the node.
* Listing with bodies is a fan-out/fan-in stage: at most `concurrency` body
  fetches are in flight, results are placed by listing index, and the first
  failure cancels the rest and propagates (no partial results).
"""

from __future__ import annotations

import asyncio
import json
import logging
from functools import partial
from typing import (Any, Awaitable, Callable, Iterable, List, Mapping, Optional,
                    Sequence, TypeVar, Union)

import httpx

from .config import DEFAULT_GAS_PRICE, EasyCelestiaOptions
from .errors import DecodeError, InvalidInput
from .namespace import (NamespaceLike, derive_namespace, namespace_to_base64,
                        namespace_to_hex)
from .rpc.http import ExplorerClient, NodeClient
from .types import BlobRef, GetRequest, ListFilter, SubmitRequest
from .utils.bytes import b64decode, b64encode

log = logging.getLogger(__name__)

T = TypeVar("T")

JSON_CONTENT_TYPES = frozenset({"application/json", "text/plain;charset=utf-8"})
OCTET_STREAM = "application/octet-stream"

BlobIds = Union[str, Sequence[str]]
BlobLike = Union[BlobRef, Mapping[str, Any]]


def _normalize_content_type(value: Optional[str]) -> str:
    return (value or "").replace(" ", "").lower()


def _encode_blob(blob: Any) -> str:
    data = json.dumps(blob, separators=(",", ":"), ensure_ascii=False)
    return b64encode(data.encode("utf-8"))


def _decode_blob(body: str, index: int) -> Any:
    raw = b64decode(body)
    try:
        return json.loads(raw.decode("utf-8"))
    except ValueError as e:
        raise DecodeError(f"blob is not valid JSON: {e}", index=index) from e


async def _gather_bounded(
    factories: Sequence[Callable[[], Awaitable[T]]], limit: int
) -> List[T]:
    """Run every factory with at most `limit` in flight; results keep input order."""
    sem = asyncio.Semaphore(limit)

    async def _run(factory: Callable[[], Awaitable[T]]) -> T:
        async with sem:
            return await factory()

    tasks = [asyncio.ensure_future(_run(f)) for f in factories]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for t in tasks:
            t.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


class EasyCelestia:
    """
    Facade over the DA node and the Celenium explorer.

    Parameters
    ----------
    options : EasyCelestiaOptions | None
        Full option set. When omitted, one is built from keyword overrides.
    node_transport / explorer_transport : httpx.AsyncBaseTransport | None
        Optional custom transports (tests, proxies).
    **overrides
        Any EasyCelestiaOptions field (node_endpoint, node_api_key, network, ...).
    """

    def __init__(
        self,
        options: Optional[EasyCelestiaOptions] = None,
        *,
        node_transport: Optional[httpx.AsyncBaseTransport] = None,
        explorer_transport: Optional[httpx.AsyncBaseTransport] = None,
        **overrides: Any,
    ) -> None:
        if options is None:
            options = EasyCelestiaOptions(**overrides)
        elif overrides:
            options = EasyCelestiaOptions.with_overrides(options, **overrides)
        if not options.node_endpoint:
            raise InvalidInput("node_endpoint is required")
        self.options = options
        self.node = NodeClient(
            options.node_endpoint,
            options.node_api_key,
            timeout=options.request_timeout,
            max_attempts=options.max_attempts,
            retry_delay=options.retry_delay,
            transport=node_transport,
        )
        self.celenium = ExplorerClient(
            options.resolved_celenium_endpoint(),
            options.celenium_api_key,
            timeout=options.request_timeout,
            max_attempts=options.max_attempts,
            retry_delay=options.retry_delay,
            transport=explorer_transport,
        )

    # ---- Lifecycle -----------------------------------------------------------

    async def __aenter__(self) -> "EasyCelestia":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        await self.aclose()

    async def aclose(self) -> None:
        await self.node.aclose()
        await self.celenium.aclose()

    # ---- Namespaces ----------------------------------------------------------

    @staticmethod
    def namespace(namespace: NamespaceLike) -> bytes:
        """Derive the 29-byte namespace for a string, 0x-hex string or raw bytes."""
        return derive_namespace(namespace)

    # ---- Node: submit --------------------------------------------------------

    async def submit(
        self, namespace: NamespaceLike, blob: Any, gas_price: float = DEFAULT_GAS_PRICE
    ) -> str:
        """
        Submit one JSON-serialisable blob and return its blob ID.

        Parameters
        ----------
        namespace : str | bytes
            Namespace under which the blob is submitted.
        blob : Any
            JSON-serialisable payload.
        gas_price : float
            Gas price passed through to the node.
        """
        request = SubmitRequest(
            blobs=(_encode_blob(blob),),
            gas_price=gas_price,
            namespace=namespace_to_base64(namespace),
        )
        ids = await self.node.call(request)
        log.debug("submitted blob %s", ids[0])
        return ids[0]

    async def submit_batch(
        self,
        namespace: NamespaceLike,
        blobs: Iterable[Any],
        gas_price: float = DEFAULT_GAS_PRICE,
    ) -> List[str]:
        """
        Submit several blobs in one `da.Submit` call.

        Returns the blob IDs in the order of `blobs`; the node preserves it.
        """
        request = SubmitRequest(
            blobs=tuple(_encode_blob(b) for b in blobs),
            gas_price=gas_price,
            namespace=namespace_to_base64(namespace),
        )
        ids = await self.node.call(request)
        log.debug("submitted %d blobs", len(ids))
        return ids

    # ---- Node: get -----------------------------------------------------------

    async def get_raw(self, namespace: NamespaceLike, ids: BlobIds) -> List[str]:
        """Fetch blobs by ID; returns the base64 bodies in request order."""
        if isinstance(ids, str):
            ids = [ids]
        request = GetRequest(ids=tuple(ids), namespace=namespace_to_base64(namespace))
        return await self.node.call(request)

    async def get(self, namespace: NamespaceLike, ids: BlobIds) -> List[Any]:
        """Fetch blobs by ID and parse each body as JSON (DecodeError on the first bad one)."""
        bodies = await self.get_raw(namespace, ids)
        return [_decode_blob(body, i) for i, body in enumerate(bodies)]

    # ---- Explorer ------------------------------------------------------------

    async def celenium_namespace(self, namespace: Union[str, bytes]) -> Any:
        """Explorer info for a namespace (hex id string or raw bytes)."""
        if isinstance(namespace, (bytes, bytearray, memoryview)):
            ns_id = namespace_to_hex(namespace)
        elif namespace.startswith("0x"):
            ns_id = namespace[2:]
        else:
            ns_id = namespace
        return await self.celenium.get(f"/namespace/{ns_id}")

    async def list_blobs_with_filters(
        self, filter: Optional[ListFilter] = None, **fields: Any
    ) -> List[Any]:
        """
        List blobs known to the explorer.

        Pass a ListFilter, keyword filter fields (limit, offset, sort, sort_by,
        commitment, from_, to, namespaces, signers, cursor), or both; keywords
        override the filter's values.
        """
        flt = self._filter(filter, fields)
        body = await self.celenium.get("/blob", flt.to_query())
        if not isinstance(body, list):
            raise DecodeError(f"explorer /blob returned {type(body).__name__}, expected a list")
        return body

    async def list_all_blobs(
        self, filter: Optional[ListFilter] = None, *, page_size: int = 100, **fields: Any
    ) -> List[Any]:
        """
        Page through the explorer listing with limit/offset until a short page.

        A `limit` on the filter caps the total number of blobs returned.
        """
        if page_size < 1:
            raise InvalidInput("page_size must be >= 1", page_size)
        flt = self._filter(filter, fields)
        cap = flt.limit
        offset = flt.offset or 0
        out: List[Any] = []
        while cap is None or len(out) < cap:
            size = page_size if cap is None else min(page_size, cap - len(out))
            page = await self.list_blobs_with_filters(flt.replace(limit=size, offset=offset))
            out.extend(page)
            if len(page) < size:
                break
            offset += len(page)
        return out

    # ---- Explorer + node: bodies ---------------------------------------------

    async def fetch_body(self, blob: BlobLike) -> Any:
        """
        Fetch the body of one listed blob, dispatching on its content type:

        - application/json, text/plain;charset=utf-8 -> parsed JSON
        - application/octet-stream                   -> raw bytes
        - anything else                              -> base64 string
        """
        ref = blob if isinstance(blob, BlobRef) else BlobRef.from_explorer(blob)
        namespace = ref.namespace_hex
        blob_id = ref.blob_id
        content_type = _normalize_content_type(ref.content_type)

        if content_type in JSON_CONTENT_TYPES:
            return self._single(await self.get(namespace, blob_id), ref)
        body = self._single(await self.get_raw(namespace, blob_id), ref)
        if content_type == OCTET_STREAM:
            return b64decode(body)
        return body

    async def fetch_bodies(
        self, blobs: Iterable[BlobLike], *, concurrency: Optional[int] = None
    ) -> List[Any]:
        """Fetch bodies for listed blobs, at most `concurrency` at a time, in listing order."""
        limit = self.options.max_concurrency if concurrency is None else concurrency
        if limit < 1:
            raise InvalidInput("concurrency must be >= 1", limit)
        refs = [b if isinstance(b, BlobRef) else BlobRef.from_explorer(b) for b in blobs]
        log.debug("fetching %d blob bodies (concurrency=%d)", len(refs), limit)
        return await _gather_bounded([partial(self.fetch_body, r) for r in refs], limit)

    async def list_blobs_fetch_bodies(
        self,
        filter: Optional[ListFilter] = None,
        *,
        concurrency: Optional[int] = None,
        **fields: Any,
    ) -> List[Any]:
        """`list_blobs_with_filters`, then fetch every listed blob's body."""
        blobs = await self.list_blobs_with_filters(filter, **fields)
        return await self.fetch_bodies(blobs, concurrency=concurrency)

    async def list_all_fetch_bodies(
        self,
        filter: Optional[ListFilter] = None,
        *,
        page_size: int = 100,
        concurrency: Optional[int] = None,
        **fields: Any,
    ) -> List[Any]:
        """`list_all_blobs`, then fetch every listed blob's body."""
        blobs = await self.list_all_blobs(filter, page_size=page_size, **fields)
        return await self.fetch_bodies(blobs, concurrency=concurrency)

    # ---- Helpers -------------------------------------------------------------

    @staticmethod
    def _filter(filter: Optional[ListFilter], fields: Mapping[str, Any]) -> ListFilter:
        if filter is None:
            return ListFilter.from_fields(**fields)
        return filter.merged(**fields) if fields else filter

    @staticmethod
    def _single(bodies: List[T], ref: BlobRef) -> T:
        if len(bodies) != 1:
            raise DecodeError(
                f"node returned {len(bodies)} bodies for blob at height {ref.height}"
            )
        return bodies[0]


__all__ = ["EasyCelestia", "JSON_CONTENT_TYPES", "OCTET_STREAM"]
