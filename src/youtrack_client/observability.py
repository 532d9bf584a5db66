from __future__ import annotations

import logging
from typing import Any, Dict

RESERVED_LOG_KEYS = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "message",
}


def _clean_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in fields.items() if k not in RESERVED_LOG_KEYS}


def log_event(
    event: str,
    logger: logging.Logger | None = None,
    *,
    level: int = logging.INFO,
    **fields: Any,
) -> None:
    """
    Minimal structured logging helper.
    - Puts fields into the record's extra dict so formatters can include keys.
    - Drops reserved LogRecord attributes to avoid collisions.
    """
    log = logger or logging.getLogger("youtrack_client.observability")
    extra = {"event": event, **_clean_fields(fields)}
    log.log(level, event, extra=extra)


__all__ = ["log_event"]
