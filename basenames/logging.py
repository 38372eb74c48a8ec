from __future__ import annotations

"""
Structured logging setup for the basenames client.

This module configures **structlog** + the stdlib ``logging`` package so that:
- Library and CLI events are emitted either through a pretty console renderer
  (default, since the main consumer is a terminal) or as JSON lines.
- Context variables (e.g., the basename being verified) are merged into each event.
- Values under well-known secret keys are redacted.
- Log level & format are configurable via arguments or environment variables.

Quick start
-----------
    from basenames.logging import setup_logging, get_logger

    setup_logging()  # call once on process start
    log = get_logger(__name__)
    log.info("verify_started", basename="alice.basetest.eth")

Environment
-----------
- LOG_LEVEL: one of DEBUG, INFO, WARNING, ERROR (default: INFO)
- LOG_FORMAT: "console" (default) or "json"
"""

import logging
import os
import sys
from typing import Any, Dict, Iterable, Optional

import structlog
from structlog.contextvars import merge_contextvars
from structlog.processors import JSONRenderer

# ------------------------------ Redaction ------------------------------------


REDACT_KEYS = {"authorization", "private_key", "password", "secret", "api_key", "mnemonic"}


def _redact_secrets(_: logging.Logger, __: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    for k in list(event_dict.keys()):
        if k.lower() in REDACT_KEYS and event_dict[k] is not None:
            event_dict[k] = "***"
    return event_dict


# ------------------------------ Setup ----------------------------------------


def _base_processors(service_name: str, include_stacktrace: bool) -> Iterable:
    yield structlog.stdlib.add_log_level
    yield structlog.processors.TimeStamper(fmt="iso", utc=True)
    yield merge_contextvars
    yield structlog.processors.StackInfoRenderer()
    if include_stacktrace:
        yield structlog.processors.format_exc_info
    yield _redact_secrets
    yield structlog.processors.UnicodeDecoder()

    def _ensure_service(_: logging.Logger, __: str, ev: Dict[str, Any]) -> Dict[str, Any]:
        ev.setdefault("service", service_name)
        return ev

    yield _ensure_service


def setup_logging(
    *,
    service_name: str = "basenames",
    level: Optional[str | int] = None,
    log_format: Optional[str] = None,
    include_stacktrace: Optional[bool] = None,
) -> None:
    """
    Configure structlog + stdlib logging. Safe to call more than once; the last
    call wins.

    Logs go to stderr so that command output on stdout stays machine-readable.
    """
    level = level or os.getenv("LOG_LEVEL", "").upper() or "INFO"
    log_format = (log_format or os.getenv("LOG_FORMAT", "") or "console").lower()
    if include_stacktrace is None:
        include_stacktrace = log_format == "json"

    processors = list(_base_processors(service_name, include_stacktrace))

    if log_format == "json":
        renderer = JSONRenderer(sort_keys=True)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty(), sort_keys=False)

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

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=[
                structlog.stdlib.add_log_level,
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

    logging.getLogger("asyncio").setLevel(os.getenv("LOG_LEVEL_ASYNCIO", "WARNING"))
    logging.getLogger("httpcore").setLevel(os.getenv("LOG_LEVEL_HTTPCORE", "WARNING"))
    logging.getLogger("httpx").setLevel(os.getenv("LOG_LEVEL_HTTPX", "WARNING"))


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """
    Return a structlog logger; bind module name if provided.
    """
    return structlog.get_logger(name) if name else structlog.get_logger()


# ------------------------------ Context helpers -------------------------------


def bind_context(**kv: Any) -> None:
    """Bind key/value pairs (e.g. basename, node) into the contextvars store."""
    structlog.contextvars.bind_contextvars(**kv)


def clear_context(*keys: str) -> None:
    """Clear specific keys from contextvars, or clear all if no keys provided."""
    if keys:
        structlog.contextvars.unbind_contextvars(*keys)
    else:
        structlog.contextvars.clear_contextvars()


__all__ = [
    "setup_logging",
    "get_logger",
    "bind_context",
    "clear_context",
]
