from __future__ import annotations

import base64
import json
import logging
from typing import Any

import httpx
import pytest
import respx
from typer.testing import CliRunner

from easy_celestia.blob_id import encode_blob_id
from easy_celestia.cli import app
from easy_celestia.namespace import derive_namespace, namespace_to_base64
from easy_celestia.version import version

runner = CliRunner()

NODE_URL = "http://localhost:26658"
EXPLORER_URL = "http://localhost:9876/v1"
BLOB_ID = encode_blob_id(42, base64.b64encode(b"\x11" * 32).decode())


def _rpc_ok(result: Any) -> httpx.Response:
    return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": result})


def _b64json(doc: Any) -> str:
    return base64.b64encode(json.dumps(doc).encode()).decode()


@pytest.fixture(autouse=True)
def isolated(monkeypatch: Any):
    for name in ("CELESTIA_NODE_ENDPOINT", "CELESTIA_NODE_API_KEY", "CELESTIA_NETWORK",
                 "CELENIUM_ENDPOINT", "CELENIUM_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    # the CLI installs its own root handler on every run
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_version() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.stdout.strip() == version()


def test_namespace_command() -> None:
    result = runner.invoke(app, ["namespace", "test"])
    assert result.exit_code == 0
    assert result.stdout.strip() == derive_namespace("test").hex()
    assert len(bytes.fromhex(result.stdout.strip())) == 29


def test_namespace_command_rejects_bad_hex() -> None:
    result = runner.invoke(app, ["namespace", "0xabc"])
    assert result.exit_code == 1
    assert "Error:" in result.output


@respx.mock
def test_submit_from_stdin() -> None:
    route = respx.post(NODE_URL).mock(return_value=_rpc_ok([BLOB_ID]))

    result = runner.invoke(
        app,
        ["--node-endpoint", NODE_URL, "--node-api-key", "tok", "submit", "test", "--gas-price", "0.01"],
        input='{"hello": "world"}',
    )
    assert result.exit_code == 0, result.output
    assert result.stdout.strip() == BLOB_ID

    request = route.calls.last.request
    assert request.headers["Authorization"] == "Bearer tok"
    body = json.loads(request.content)
    assert body["method"] == "da.Submit"
    blobs, gas_price, ns = body["params"]
    assert base64.b64decode(blobs[0]) == b'{"hello":"world"}'
    assert gas_price == 0.01
    assert ns == namespace_to_base64("test")


@respx.mock
def test_submit_from_file(tmp_path) -> None:
    respx.post(NODE_URL).mock(return_value=_rpc_ok([BLOB_ID]))
    doc = tmp_path / "doc.json"
    doc.write_text('[1, 2, 3]')

    result = runner.invoke(app, ["--node-endpoint", NODE_URL, "submit", "test", "-f", str(doc)])
    assert result.exit_code == 0, result.output
    assert result.stdout.strip() == BLOB_ID


def test_submit_rejects_invalid_json() -> None:
    result = runner.invoke(app, ["--node-endpoint", NODE_URL, "submit", "test"], input="{nope")
    assert result.exit_code == 1
    assert "not valid JSON" in result.output


def test_submit_requires_node_endpoint() -> None:
    result = runner.invoke(app, ["submit", "test"], input="{}")
    assert result.exit_code == 1
    assert "node_endpoint is required" in result.output


@respx.mock
def test_node_endpoint_from_env(monkeypatch: Any) -> None:
    monkeypatch.setenv("CELESTIA_NODE_ENDPOINT", NODE_URL)
    route = respx.post(NODE_URL).mock(return_value=_rpc_ok([BLOB_ID]))

    result = runner.invoke(app, ["submit", "test"], input="{}")
    assert result.exit_code == 0, result.output
    assert route.called


@respx.mock
def test_get_prints_json_array() -> None:
    route = respx.post(NODE_URL).mock(
        return_value=_rpc_ok([_b64json({"hello": "world"}), _b64json([1])])
    )
    result = runner.invoke(app, ["--node-endpoint", NODE_URL, "get", "test", BLOB_ID, BLOB_ID])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == [{"hello": "world"}, [1]]

    body = json.loads(route.calls.last.request.content)
    assert body["method"] == "da.Get"
    assert body["params"] == [[BLOB_ID, BLOB_ID], namespace_to_base64("test")]


@respx.mock
def test_get_raw() -> None:
    respx.post(NODE_URL).mock(return_value=_rpc_ok(["AAEC"]))
    result = runner.invoke(app, ["--node-endpoint", NODE_URL, "get", "test", BLOB_ID, "--raw"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == ["AAEC"]


@respx.mock
def test_get_remote_error_exits_1() -> None:
    respx.post(NODE_URL).mock(
        return_value=httpx.Response(
            200, json={"jsonrpc": "2.0", "id": 1, "error": {"code": 1, "message": "blob: not found"}}
        )
    )
    result = runner.invoke(app, ["--node-endpoint", NODE_URL, "get", "test", BLOB_ID])
    assert result.exit_code == 1
    assert "blob: not found" in result.output


@respx.mock
def test_blobs_listing_with_filters() -> None:
    listing = [{"height": 42, "commitment": "ESIz", "namespace": {"hash": "AA=="}}]
    route = respx.get(f"{EXPLORER_URL}/blob").mock(return_value=httpx.Response(200, json=listing))

    result = runner.invoke(
        app,
        [
            "--node-endpoint", NODE_URL,
            "--celenium-endpoint", EXPLORER_URL,
            "--celenium-api-key", "key",
            "blobs", "--limit", "5", "--sort", "desc", "--sort-by", "time",
            "-n", "aa", "-n", "bb",
        ],
    )
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == listing

    request = route.calls.last.request
    assert request.headers["apiKey"] == "key"
    assert request.url.params.multi_items() == [
        ("limit", "5"),
        ("sort", "desc"),
        ("sort_by", "time"),
        ("namespaces", "aa,bb"),
    ]


@respx.mock
def test_blobs_with_bodies() -> None:
    ns_b64 = namespace_to_base64("test")
    commitment = base64.b64encode(b"\x22" * 32).decode()
    listing = [
        {"height": 7, "commitment": commitment, "namespace": {"hash": ns_b64},
         "content_type": "application/json"},
    ]
    respx.get(f"{EXPLORER_URL}/blob").mock(return_value=httpx.Response(200, json=listing))
    node = respx.post(NODE_URL).mock(return_value=_rpc_ok([_b64json({"n": 7})]))

    result = runner.invoke(
        app,
        ["--node-endpoint", NODE_URL, "--celenium-endpoint", EXPLORER_URL, "blobs", "--bodies"],
    )
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == [{"n": 7}]
    body = json.loads(node.calls.last.request.content)
    assert body["params"] == [[encode_blob_id(7, commitment)], ns_b64]


def test_blobs_rejects_unknown_sort() -> None:
    result = runner.invoke(app, ["--node-endpoint", NODE_URL, "blobs", "--sort", "sideways"])
    assert result.exit_code != 0


@respx.mock
def test_namespace_info() -> None:
    route = respx.get(f"{EXPLORER_URL}/namespace/00ff").mock(
        return_value=httpx.Response(200, json={"namespace_id": "00ff", "blobs_count": 1})
    )
    result = runner.invoke(
        app,
        ["--node-endpoint", NODE_URL, "--celenium-endpoint", EXPLORER_URL, "namespace-info", "0x00ff"],
    )
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["blobs_count"] == 1
    assert route.called
