"""
Formatters: JSON lines for the rotating file, plain text for the console.
"""
from __future__ import annotations

import json
import logging
import traceback
from datetime import datetime, timezone
from typing import Any, Optional

# Attributes passed through ``logger.info(..., extra={...})`` that are worth
# keeping as structured fields.
CONTEXT_KEYS = ("user_id", "intent", "action_type", "lot_id", "warehouse_id")


class JsonFormatter(logging.Formatter):
    """
    Format log records as one JSON object per line (JSON Lines).
    Chat context passed via ``extra`` lands under the ``context`` key.
    """

    def __init__(self, *, include_context: bool = True) -> None:
        super().__init__()
        self.include_context = include_context

    def format(self, record: logging.LogRecord) -> str:
        log_dict: dict[str, Any] = {
            "timestamp": _utc_iso(record.created),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_dict["exception"] = "".join(
                traceback.format_exception(*record.exc_info)
            ).strip()
        if record.pathname:
            log_dict["pathname"] = record.pathname
        if record.lineno:
            log_dict["lineno"] = record.lineno
        if self.include_context:
            context = {
                key: getattr(record, key)
                for key in CONTEXT_KEYS
                if getattr(record, key, None) is not None
            }
            if context:
                log_dict["context"] = context
        return json.dumps(log_dict, default=str, ensure_ascii=False)


def _utc_iso(created: float) -> str:
    return datetime.fromtimestamp(created, tz=timezone.utc).isoformat()


class PlainConsoleFormatter(logging.Formatter):
    """Human-readable format for console."""

    def __init__(
        self,
        fmt: Optional[str] = None,
        datefmt: Optional[str] = None,
    ) -> None:
        if fmt is None:
            fmt = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
        if datefmt is None:
            datefmt = "%Y-%m-%d %H:%M:%S"
        super().__init__(fmt=fmt, datefmt=datefmt)
