"""
structlog configuration for OmniPass.

Every record carries timestamp (ISO 8601 UTC), level, event_type, logger and
keyword context. Full 0x addresses in `address` are shortened before
rendering so logs never hold complete wallet addresses.

Env: LOG_LEVEL (default INFO), LOG_FORMAT=json|console (default json).
Imports nothing from backend_omnipass so any module can log at import time.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

import structlog

ADDRESS_KEYS = ("address", "requester")
SHORT_ADDRESS_LEN = 10


def _level_from_env() -> int:
    return getattr(logging, os.getenv("LOG_LEVEL", "INFO").strip().upper(), logging.INFO)


def _format_from_env() -> str:
    return os.getenv("LOG_FORMAT", "json").strip().lower()


def shorten(value: str) -> str:
    return value[:SHORT_ADDRESS_LEN] + "..." if len(value) > SHORT_ADDRESS_LEN + 3 else value


def _stamp(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    event_dict.setdefault("timestamp", datetime.now(timezone.utc).isoformat())
    return event_dict


def _event_type(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """structlog's positional event becomes event_type; message mirrors it unless given."""
    if "event" in event_dict and "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event")
    event_dict.setdefault("message", str(event_dict.get("event_type", "")))
    return event_dict


def _shorten_addresses(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    for key in ADDRESS_KEYS:
        value = event_dict.get(key)
        if isinstance(value, str) and value.startswith("0x"):
            event_dict[key] = shorten(value)
    return event_dict


def configure_structlog(level: int | None = None, fmt: str | None = None) -> None:
    """(Re)configure structlog. Called once at import with env defaults."""
    level = _level_from_env() if level is None else level
    fmt = _format_from_env() if fmt is None else fmt
    renderer: Any
    if fmt == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            _stamp,
            _shorten_addresses,
            _event_type,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Structured logger for a module; `logger=name` is bound on every record.

        logger = get_logger(__name__)
        logger.warning("price_lookup_failed", asset="ethereum", error=str(e))
    """
    return structlog.get_logger(name).bind(logger=name)


def bind_address(address: str) -> structlog.BoundLogger:
    """Logger for one analysis request, with the (shortened) address bound."""
    return get_logger("backend_omnipass.analysis").bind(address=shorten(address))
