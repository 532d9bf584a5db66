import logging
from typing import Any, Optional, TextIO

LOG_EXTRA_FIELDS = (
    "operation",
    "method",
    "endpoint",
    "status",
    "duration_ms",
    "attempt",
    "delay_s",
    "error_type",
)


class LogfmtFormatter(logging.Formatter):
    """Small logfmt-style formatter that tolerates missing extras."""

    def format(self, record: logging.LogRecord) -> str:
        kv: list[str] = [
            f"level={record.levelname.lower()}",
            f"logger={record.name}",
        ]

        msg = record.getMessage()
        if msg:
            kv.append(f"event={self._fmt_val(msg)}")

        for key in LOG_EXTRA_FIELDS:
            val = getattr(record, key, None)
            if val is None:
                continue
            kv.append(f"{key}={self._fmt_val(val)}")

        if record.exc_info and record.exc_info[0] is not None:
            kv.append(f"exc_type={record.exc_info[0].__name__}")

        return " ".join(kv)

    @staticmethod
    def _fmt_val(val: Any) -> str:
        if isinstance(val, (int, float, bool)):
            return str(val)
        s = str(val)
        if " " in s or "=" in s:
            s = '"' + s.replace('"', '\\"') + '"'
        return s


PACKAGE_LOGGER = "youtrack_client"


class _ClientHandler(logging.StreamHandler):
    """Marks handlers installed by setup_logging so a second call can find them."""


def setup_logging(
    level: str = "INFO",
    *,
    logger_name: str = PACKAGE_LOGGER,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Send the client's log events to a logfmt stream handler.
    Only the package logger is touched; the root logger and handlers
    installed by the application are left alone.
    """
    logger = logging.getLogger(logger_name)
    for h in list(logger.handlers):
        if isinstance(h, _ClientHandler):
            logger.removeHandler(h)

    handler = _ClientHandler(stream)
    handler.setFormatter(LogfmtFormatter())
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    return logger


__all__ = ["setup_logging", "LogfmtFormatter", "LOG_EXTRA_FIELDS", "PACKAGE_LOGGER"]
