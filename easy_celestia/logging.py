from __future__ import annotations

"""
Structured logging setup for the easy-celestia CLI.

Library modules log through the stdlib ``logging`` package only. The CLI calls
:func:`setup_logging` once, which configures **structlog** so that:
- stdlib records (including httpx) go through the same processor chain,
- output is JSON or a pretty console renderer,
- well-known secret keys (bearer tokens, API keys) are redacted.

Quick start
-----------
    from easy_celestia.logging import setup_logging, get_logger

    setup_logging(level="DEBUG", log_format="console")
    log = get_logger(__name__)
    log.info("submitted", blob_id="AQAAAAAAAAA...")

Environment
-----------
- LOG_LEVEL: one of DEBUG, INFO, WARNING, ERROR (default: WARNING)
- LOG_FORMAT: "console" (default) or "json"
"""

import logging
import os
import sys
from typing import Any, Dict, Iterable, Mapping, Optional

import structlog
from structlog.processors import JSONRenderer

# ------------------------------ Redaction ------------------------------------


REDACT_KEYS = {"authorization", "token", "api_key", "apikey", "node_api_key", "celenium_api_key"}


def _mask(value: Any) -> Any:
    if not isinstance(value, Mapping):
        return value
    return {
        k: "***" if str(k).lower() in REDACT_KEYS and v is not None else _mask(v)
        for k, v in value.items()
    }


def _redact_secrets(_: logging.Logger, __: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Mask secret values, also inside nested mappings such as request headers."""
    return _mask(event_dict)


# ------------------------------ Setup ----------------------------------------


def _base_processors() -> Iterable:
    yield structlog.stdlib.add_log_level
    yield structlog.processors.TimeStamper(fmt="iso", utc=True)
    yield structlog.processors.StackInfoRenderer()
    yield structlog.processors.format_exc_info
    yield _redact_secrets
    yield structlog.processors.UnicodeDecoder()


def setup_logging(
    *,
    level: Optional[str | int] = None,
    log_format: Optional[str] = None,
) -> None:
    """
    Configure structlog + stdlib logging. Safe to call more than once.

    Parameters
    ----------
    level: str|int
        Log level (e.g., "INFO"). Defaults to $LOG_LEVEL or WARNING.
    log_format: str
        "console" (default) or "json". Defaults to $LOG_FORMAT or "console".
    """
    level = level or os.getenv("LOG_LEVEL", "").upper() or "WARNING"
    log_format = (log_format or os.getenv("LOG_FORMAT", "") or "console").lower()

    processors = list(_base_processors())
    if log_format == "json":
        renderer = JSONRenderer(sort_keys=True)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False, sort_keys=False)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            *processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=False,
    )

    # stdlib records share the processor chain through ProcessorFormatter
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=[
                structlog.stdlib.add_logger_name,
                *processors,
            ],
        )
    )

    root = logging.getLogger()
    root.setLevel(level)
    for h in list(root.handlers):
        root.removeHandler(h)
    root.addHandler(handler)

    # httpx logs every request at INFO
    logging.getLogger("httpcore").setLevel(os.getenv("LOG_LEVEL_HTTPCORE", "WARNING"))
    logging.getLogger("httpx").setLevel(os.getenv("LOG_LEVEL_HTTPX", "WARNING"))


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """
    Return a structlog logger; bind module name if provided.
    """
    log = structlog.get_logger(name)
    if name:
        return log.bind(logger=name)
    return log


__all__ = ["setup_logging", "get_logger"]
