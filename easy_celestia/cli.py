"""
easy-celestia command-line front end.

Commands:
  easy-celestia namespace <value>              Derive a namespace (hex)
  easy-celestia submit <namespace> [-f FILE]   Submit a JSON document, print its blob ID
  easy-celestia get <namespace> <id>...        Fetch blobs by ID
  easy-celestia blobs [filters] [--bodies]     List explorer blobs (optionally with bodies)
  easy-celestia namespace-info <id>            Explorer info for a namespace

Configuration is resolved in this order (highest to lowest priority):
  1. Command-line flags (--node-endpoint, --network, ...)
  2. Environment variables (CELESTIA_NODE_ENDPOINT, CELESTIA_NETWORK, CELENIUM_API_KEY, ...)
  3. Built-in defaults (mocha)

Examples:
  echo '{"hello": "world"}' | easy-celestia submit test
  easy-celestia get test AQAAAAAAAAA...
  easy-celestia blobs --limit 5 --sort desc --bodies
"""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeVar

import typer

from .client import EasyCelestia
from .config import DEFAULT_GAS_PRICE, EasyCelestiaOptions
from .errors import EasyCelestiaError, error_fields
from .logging import get_logger, setup_logging
from .namespace import namespace_to_hex
from .types import ListFilter, SortField, SortOrder
from .utils.bytes import to_hex
from .version import version

T = TypeVar("T")

app = typer.Typer(
    name="easy-celestia",
    help="Submit and retrieve JSON blobs on Celestia; browse blobs via Celenium.",
    no_args_is_help=True,
    add_completion=False,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(version())
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    network: Optional[str] = typer.Option(
        None, "--network", help="Network profile (mainnet, mocha)", envvar="CELESTIA_NETWORK"
    ),
    node_endpoint: Optional[str] = typer.Option(
        None, "--node-endpoint", help="DA node JSON-RPC URL", envvar="CELESTIA_NODE_ENDPOINT"
    ),
    node_api_key: Optional[str] = typer.Option(
        None, "--node-api-key", help="DA node auth token", envvar="CELESTIA_NODE_API_KEY"
    ),
    celenium_endpoint: Optional[str] = typer.Option(
        None, "--celenium-endpoint", help="Override explorer URL", envvar="CELENIUM_ENDPOINT"
    ),
    celenium_api_key: Optional[str] = typer.Option(
        None, "--celenium-api-key", help="Explorer API key", envvar="CELENIUM_API_KEY"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
    _version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Print version"
    ),
) -> None:
    """
    easy-celestia CLI: blobs on the Celestia data-availability network.
    """
    setup_logging(level="DEBUG" if verbose else None)
    ctx.obj = {
        "network": network,
        "node_endpoint": node_endpoint,
        "node_api_key": node_api_key,
        "celenium_endpoint": celenium_endpoint,
        "celenium_api_key": celenium_api_key,
    }


# --- helpers ------------------------------------------------------------------


def _jsonable(obj: Any) -> Any:
    if isinstance(obj, (bytes, bytearray)):
        return to_hex(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def _pretty(obj: Any) -> str:
    return json.dumps(obj, indent=2, default=_jsonable, ensure_ascii=False)


def _run(ctx: typer.Context, action: Callable[[EasyCelestia], Awaitable[T]]) -> T:
    """Build a client from the global options, run `action`, map errors to exit 1."""
    log = get_logger(__name__)
    overrides: Dict[str, Any] = dict(ctx.obj or {})

    async def _main() -> T:
        options = EasyCelestiaOptions.with_overrides(None, **overrides)
        async with EasyCelestia(options) as celestia:
            return await action(celestia)

    try:
        return asyncio.run(_main())
    except EasyCelestiaError as e:
        log.debug("command failed", error=type(e).__name__, **error_fields(e))
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


# --- commands -----------------------------------------------------------------


@app.command()
def namespace(
    value: str = typer.Argument(..., help="Namespace string, 0x-hex, ..."),
) -> None:
    """Print the 29-byte namespace derived from VALUE as hex."""
    try:
        ns_hex = namespace_to_hex(value)
    except EasyCelestiaError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    typer.echo(ns_hex)


@app.command()
def submit(
    ctx: typer.Context,
    namespace: str = typer.Argument(..., help="Namespace (string or 0x-hex)"),
    input_file: Optional[Path] = typer.Option(
        None, "--file", "-f", help="JSON file (default: read from stdin)"
    ),
    gas_price: float = typer.Option(DEFAULT_GAS_PRICE, "--gas-price", help="Gas price"),
) -> None:
    """
    Submit a JSON document as a blob and print its blob ID.

    Examples:
      echo '{"hello": "world"}' | easy-celestia submit test
      easy-celestia submit test --file doc.json
    """
    text = input_file.read_text() if input_file else sys.stdin.read()
    if not text.strip():
        typer.echo("Error: no data provided", err=True)
        raise typer.Exit(1)
    try:
        doc = json.loads(text)
    except ValueError as e:
        typer.echo(f"Error: input is not valid JSON: {e}", err=True)
        raise typer.Exit(1)

    blob_id = _run(ctx, lambda c: c.submit(namespace, doc, gas_price))
    typer.echo(blob_id)


@app.command()
def get(
    ctx: typer.Context,
    namespace: str = typer.Argument(..., help="Namespace (string or 0x-hex)"),
    ids: List[str] = typer.Argument(..., help="Blob IDs (base64)"),
    raw: bool = typer.Option(False, "--raw", help="Print base64 bodies instead of JSON"),
) -> None:
    """Fetch blobs by ID and print them as a JSON array."""
    if raw:
        result = _run(ctx, lambda c: c.get_raw(namespace, ids))
    else:
        result = _run(ctx, lambda c: c.get(namespace, ids))
    typer.echo(_pretty(result))


@app.command()
def blobs(
    ctx: typer.Context,
    limit: Optional[int] = typer.Option(None, "--limit", help="Number of blobs"),
    offset: Optional[int] = typer.Option(None, "--offset", help="Offset"),
    sort: Optional[SortOrder] = typer.Option(None, "--sort", help="Sort order"),
    sort_by: Optional[SortField] = typer.Option(None, "--sort-by", help="Sort field"),
    commitment: Optional[str] = typer.Option(None, "--commitment", help="Commitment (URL base64)"),
    from_: Optional[int] = typer.Option(None, "--from", help="Unix time lower bound"),
    to: Optional[int] = typer.Option(None, "--to", help="Unix time upper bound"),
    namespaces: Optional[List[str]] = typer.Option(None, "--namespace", "-n", help="Namespace filter (repeatable)"),
    signers: Optional[List[str]] = typer.Option(None, "--signer", help="Signer filter (repeatable)"),
    cursor: Optional[int] = typer.Option(None, "--cursor", help="Cursor (last entity id)"),
    bodies: bool = typer.Option(False, "--bodies", help="Fetch each blob's body from the node"),
    all_pages: bool = typer.Option(False, "--all", help="Page through the whole listing"),
    concurrency: Optional[int] = typer.Option(None, "--concurrency", help="Parallel body fetches"),
) -> None:
    """List explorer blobs as JSON, optionally with their bodies."""
    try:
        flt = ListFilter(
            limit=limit,
            offset=offset,
            sort=sort,
            sort_by=sort_by,
            commitment=commitment,
            from_=from_,
            to=to,
            namespaces=namespaces or None,
            signers=signers or None,
            cursor=cursor,
        )
    except EasyCelestiaError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if bodies and all_pages:
        result = _run(ctx, lambda c: c.list_all_fetch_bodies(flt, concurrency=concurrency))
    elif bodies:
        result = _run(ctx, lambda c: c.list_blobs_fetch_bodies(flt, concurrency=concurrency))
    elif all_pages:
        result = _run(ctx, lambda c: c.list_all_blobs(flt))
    else:
        result = _run(ctx, lambda c: c.list_blobs_with_filters(flt))
    typer.echo(_pretty(result))


@app.command("namespace-info")
def namespace_info(
    ctx: typer.Context,
    namespace_id: str = typer.Argument(..., help="Namespace id (hex)"),
) -> None:
    """Print explorer info for a namespace."""
    result = _run(ctx, lambda c: c.celenium_namespace(namespace_id))
    typer.echo(_pretty(result))


def main() -> None:
    """Entry point for the easy-celestia CLI."""
    app()


if __name__ == "__main__":
    main()
