"""
structlog setup for the Genesis client.

Every line carries event_type, level, an ISO-8601 UTC timestamp and the
emitting module under `logger`; gateway and session code add account,
project_id, method and tx_hash as they apply. LOG_FORMAT picks the renderer
(json, the default, or console) and LOG_LEVEL the threshold.

Imports nothing from genesis_client so every module can import it first.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

import structlog

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_LEVEL_VALUE = getattr(logging, LOG_LEVEL, logging.INFO)

LOG_FORMAT = os.getenv("LOG_FORMAT", "json").strip().lower()

EventDict = dict[str, Any]


def _add_timestamp(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("timestamp", datetime.now(timezone.utc).isoformat())
    return event_dict


def _normalize_event(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Move structlog's positional `event` to event_type and mirror it as message."""
    if "event" in event_dict and "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event")
    if "event_type" in event_dict:
        event_dict.setdefault("message", str(event_dict["event_type"]))
    return event_dict


def _renderer(fmt: str) -> Any:
    if fmt == "json":
        return structlog.processors.JSONRenderer(default=str)
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_structlog(level: int = LOG_LEVEL_VALUE, fmt: str = LOG_FORMAT) -> None:
    """Install the processor chain; runs once when this module is first imported."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _add_timestamp,
            _normalize_event,
            _renderer(fmt),
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
    Module logger with `logger=name` bound.

        logger = get_logger(__name__)
        logger.info("transaction_confirmed", method="backProject", tx_hash=tx_hash)

    renders as {"event_type": "transaction_confirmed", "method": "backProject",
    "tx_hash": "0x...", "level": "info", "logger": "genesis_client.gateway.contract", ...}.
    """
    return structlog.get_logger(name).bind(logger=name)


def bind_account(account: str | None) -> structlog.BoundLogger:
    """Logger with the connected wallet account attached to every line."""
    return get_logger("genesis_client").bind(account=account)
