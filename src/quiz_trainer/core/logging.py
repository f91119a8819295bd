"""Logging helpers: JSON log files and per-session context."""

from __future__ import annotations

import json
import logging
import os
import sys
import tempfile
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, MutableMapping

__all__ = [
    "JsonLogFormatter",
    "SessionLogAdapter",
    "configure_logger",
    "session_logger",
]

_FILE_MARKER = "_quiz_trainer_file"
_CONSOLE_MARKER = "_quiz_trainer_console"


class JsonLogFormatter(logging.Formatter):
    """Emit log records as structured JSON lines."""

    _RESERVED = frozenset(
        logging.LogRecord("", 0, "", 0, "", (), None).__dict__
    ) | {"message", "asctime", "taskName"}

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        extras = {
            key: _coerce_value(value)
            for key, value in record.__dict__.items()
            if key not in self._RESERVED
        }
        if extras:
            payload["extra"] = extras
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True)


class SessionLogAdapter(logging.LoggerAdapter):
    """Attach ``session_id`` and ``transport`` to every record."""

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        extra = dict(self.extra or {})
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        return msg, kwargs


def session_logger(
    session_id: str,
    transport: str,
    *,
    logger: logging.Logger | None = None,
    **extra: Any,
) -> SessionLogAdapter:
    base = logger or logging.getLogger("quiz_trainer.session")
    context = {"session_id": session_id, "transport": transport}
    context.update(extra)
    return SessionLogAdapter(base, context)


def configure_logger(
    name: str,
    *,
    log_dir: Path,
    level: str = "INFO",
    verbose: bool = False,
    max_bytes: int = 1024 * 1024,
    backup_count: int = 3,
    filename: str | None = None,
) -> tuple[logging.Logger, Path]:
    """Configure ``name`` with a rotating JSON file handler.

    Returns the logger and the path actually written to, which falls back to
    a temporary directory when ``log_dir`` is not writable. ``verbose`` adds
    a plain-text stderr handler; calling again without it removes that
    handler. Repeated calls reuse the file handler while its path is unchanged.
    """

    logger = logging.getLogger(name)
    logger.propagate = False
    logger.setLevel(logging.DEBUG)

    file_level = logging.DEBUG if verbose else _coerce_level(level)
    log_name = filename or f"{name.rsplit('.', 1)[-1]}.log"

    handler = _find_handler(logger, _FILE_MARKER)
    if handler is not None and handler.baseFilename != os.path.abspath(
        log_dir / log_name
    ):
        logger.removeHandler(handler)
        handler.close()
        handler = None
    if handler is None:
        handler = _open_file_handler(
            log_dir / log_name, max_bytes=max_bytes, backup_count=backup_count
        )
        setattr(handler, _FILE_MARKER, True)
        logger.addHandler(handler)
    handler.setLevel(file_level)
    log_path = Path(handler.baseFilename)

    console = _find_handler(logger, _CONSOLE_MARKER)
    if verbose and console is None:
        console = logging.StreamHandler(stream=sys.stderr)
        console.setLevel(logging.DEBUG)
        console.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
        setattr(console, _CONSOLE_MARKER, True)
        logger.addHandler(console)
    elif not verbose and console is not None:
        logger.removeHandler(console)
        console.close()

    return logger, log_path


def _find_handler(logger: logging.Logger, marker: str) -> Any:
    for handler in logger.handlers:
        if getattr(handler, marker, False):
            return handler
    return None


def _open_file_handler(
    path: Path, *, max_bytes: int, backup_count: int
) -> RotatingFileHandler:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
    except PermissionError:
        fallback = Path(tempfile.gettempdir()) / "quiz-trainer-logs"
        fallback.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            fallback / path.name,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
    handler.setFormatter(JsonLogFormatter())
    return handler


def _coerce_level(level: str) -> int:
    numeric = logging.getLevelName(level.upper())
    if isinstance(numeric, int):
        return numeric
    return logging.INFO


def _coerce_value(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, dict):
        return {str(key): _coerce_value(val) for key, val in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_coerce_value(item) for item in value]
    return repr(value)
