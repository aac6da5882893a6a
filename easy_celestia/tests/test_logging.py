from __future__ import annotations

import logging

import pytest

from easy_celestia.logging import _redact_secrets, get_logger, setup_logging


def test_redacts_top_level_and_nested_secrets():
    event = {
        "event": "request",
        "node_api_key": "s3cret",
        "celenium_api_key": None,
        "headers": {"Authorization": "Bearer s3cret", "apiKey": "k", "Accept": "application/json"},
    }
    out = _redact_secrets(logging.getLogger("t"), "info", event)
    assert out["node_api_key"] == "***"
    assert out["celenium_api_key"] is None
    assert out["headers"] == {"Authorization": "***", "apiKey": "***", "Accept": "application/json"}
    assert out["event"] == "request"


@pytest.fixture
def restore_root():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_setup_logging_is_idempotent(restore_root, monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    setup_logging(level="DEBUG", log_format="json")
    setup_logging(level="INFO")
    root = logging.getLogger()
    assert len(root.handlers) == 1
    assert root.level == logging.INFO
    assert logging.getLogger("httpx").level == logging.WARNING
    get_logger(__name__).info("configured", api_key="hidden")
