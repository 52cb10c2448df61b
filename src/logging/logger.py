# src/logging/logger.py — v1
"""Logger setup: one JSON object (or text line) per record on stderr.

Library modules only call logging.getLogger(__name__); handlers are
attached by setup_logging(), which the CLI calls once at startup. Run,
pipeline and stage identifiers come from logging.context; per-record
fields passed through `extra=` (duration_ms, completed, ...) are emitted
alongside the message.
"""

from __future__ import annotations

import json
import logging
import re
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from prodanalyzer.logging.context import get_context

ROOT_LOGGER_NAME = "prodanalyzer"

_SIZE_PATTERN = re.compile(r"^(\d+)\s*(KB|MB|GB)$", re.IGNORECASE)
_SIZE_UNITS = {"KB": 1024, "MB": 1024**2, "GB": 1024**3}

# Provider SDKs and their HTTP stacks log every request at INFO.
NOISY_LOGGERS = ("httpx", "httpcore", "anthropic", "openai", "google", "urllib3")

# Attributes every LogRecord carries; anything else came in through `extra=`.
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "asctime", "taskName"}


def record_fields(record: logging.LogRecord) -> dict[str, Any]:
    """Return the custom fields attached to a record via `extra=`."""
    return {k: v for k, v in vars(record).items() if k not in _RECORD_ATTRS}


class JsonFormatter(logging.Formatter):
    """Structured JSON formatter for log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = get_context().as_dict()
        if context:
            entry["context"] = context
        fields = record_fields(record)
        if fields:
            entry["fields"] = fields
        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Single-line formatter for terminals: time, level, run/stage, message."""

    def format(self, record: logging.LogRecord) -> str:
        ctx = get_context()
        stamp = datetime.fromtimestamp(record.created, timezone.utc).strftime("%H:%M:%S")
        where = "/".join(p for p in (ctx.pipeline, ctx.stage) if p)
        line = f"{stamp} {record.levelname:<7} {record.name}"
        if ctx.run_id:
            line += f" [{ctx.run_id}{' ' + where if where else ''}]"
        line += f" - {record.getMessage()}"
        fields = record_fields(record)
        if fields:
            line += " " + " ".join(f"{k}={v}" for k, v in fields.items())
        if record.exc_info and record.exc_info[1] is not None:
            line += "\n" + self.formatException(record.exc_info)
        return line


def parse_size(size: str) -> int:
    """Parse a size such as '10MB' (KB, MB or GB, case-insensitive) into bytes."""
    match = _SIZE_PATTERN.match(size.strip())
    if not match:
        raise ValueError(f"Invalid size {size!r}, expected e.g. '10MB'")
    return int(match.group(1)) * _SIZE_UNITS[match.group(2).upper()]


def rotating_file_handler(
    log_file: str | Path, rotation: str = "10MB", retention: int = 30
) -> RotatingFileHandler:
    """Size-rotated UTF-8 file handler; parent directories are created."""
    path = Path(log_file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        path, maxBytes=parse_size(rotation), backupCount=retention, encoding="utf-8"
    )


def quiet_libraries(level: int = logging.WARNING) -> None:
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(level)


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    log_file: str | Path | None = None,
    rotation: str = "10MB",
    retention: int = 30,
) -> logging.Logger:
    """Attach handlers to the prodanalyzer logger, replacing earlier ones.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        log_format: "json" or "text".
        log_file: Optional file that receives the same records, rotated by size.
        rotation: Max file size before rotation (e.g. "10MB").
        retention: Number of rotated files to keep.

    Returns:
        The configured prodanalyzer root logger.
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    formatter: logging.Formatter = JsonFormatter() if log_format == "json" else TextFormatter()

    # stdout carries CLI results
    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_file:
        file_handler = rotating_file_handler(log_file, rotation, retention)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    quiet_libraries()
    return root
