"""
AIDA Centralized Logging
------------------------
Structured logging with turn_id propagation for per-message traceability.

Design:
- Every inbound chat message gets a unique turn_id
- turn_id propagates through: Orchestrator -> Command gate -> Dialogue
- Console output via Rich, file output as JSON lines
- Clear severity discipline: INFO=state, WARNING=recoverable, ERROR=abort

Usage:
    from infra.logging import get_logger, TurnContext, log_turn_end

    logger = get_logger("orchestrator")

    with TurnContext() as turn_id:
        logger.info("Processing message")
        log_turn_end(turn_id, success=True, route="command")
"""

import contextvars
import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from rich.logging import RichHandler

ROOT_LOGGER_NAME = "aida"

# Structured fields copied from log records into JSON output
EXTRA_FIELDS = (
    "original_message",
    "normalized",
    "command_type",
    "matched_trigger",
    "action",
    "route",
    "session_id",
    "success",
    "error",
    "execution_time_ms",
)

# Context variable for turn_id - thread-safe and async-safe
_turn_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "turn_id", default=None
)


def generate_turn_id() -> str:
    """Generate a unique turn ID."""
    return f"turn_{uuid.uuid4().hex[:12]}"


def get_turn_id() -> Optional[str]:
    """Get the current turn ID from context."""
    return _turn_id_var.get()


def set_turn_id(turn_id: str) -> contextvars.Token:
    """Set the current turn ID in context."""
    return _turn_id_var.set(turn_id)


def reset_turn_id(token: contextvars.Token) -> None:
    """Reset the turn ID to its previous value."""
    _turn_id_var.reset(token)


class TurnContext:
    """
    Context manager for turn scoping.

    Usage:
        with TurnContext() as turn_id:
            # All logs within this block carry turn_id
            logger.info("Processing...")
    """

    def __init__(self, turn_id: Optional[str] = None):
        self._turn_id = turn_id or generate_turn_id()
        self._token: Optional[contextvars.Token] = None

    def __enter__(self) -> str:
        self._token = set_turn_id(self._turn_id)
        return self._turn_id

    def __exit__(self, *args) -> None:
        if self._token is not None:
            reset_turn_id(self._token)
            self._token = None


class TurnIdFilter(logging.Filter):
    """Logging filter that adds turn_id to every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "turn_id", None) is None:
            record.turn_id = get_turn_id() or "-"
        return True


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured file logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "turn_id": getattr(record, "turn_id", "-"),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key in EXTRA_FIELDS:
            if hasattr(record, key):
                log_entry[key] = getattr(record, key)

        return json.dumps(log_entry, ensure_ascii=False, default=str)


class FileRotatingHandler(logging.FileHandler):
    """Simple file handler with size-based rotation."""

    MAX_BYTES = 10 * 1024 * 1024  # 10 MB
    BACKUP_COUNT = 3

    def __init__(self, filename: str, max_bytes: Optional[int] = None, backup_count: Optional[int] = None):
        self._base_path = Path(filename)
        self._max_bytes = max_bytes or self.MAX_BYTES
        self._backup_count = backup_count or self.BACKUP_COUNT

        self._base_path.parent.mkdir(parents=True, exist_ok=True)

        super().__init__(str(self._base_path), mode="a", encoding="utf-8")

    def emit(self, record: logging.LogRecord) -> None:
        try:
            if self._base_path.exists() and self._base_path.stat().st_size > self._max_bytes:
                self._rotate()
        except OSError:
            self.handleError(record)

        super().emit(record)

    def _rotate(self) -> None:
        """Rotate log files."""
        self.close()

        # Shift existing backups
        for i in range(self._backup_count - 1, 0, -1):
            src = self._base_path.with_suffix(f".{i}.log")
            dst = self._base_path.with_suffix(f".{i + 1}.log")
            if src.exists():
                if dst.exists():
                    dst.unlink()
                src.rename(dst)

        # Move current to .1
        if self._base_path.exists():
            backup = self._base_path.with_suffix(".1.log")
            if backup.exists():
                backup.unlink()
            self._base_path.rename(backup)

        self.stream = self._open()


# Global configuration state
_logging_initialized = False
_log_file_path: Optional[Path] = None


def configure_logging(
    level: int = logging.INFO,
    log_dir: Optional[str] = None,
    console: bool = True,
    file: bool = True,
    force: bool = False,
) -> None:
    """
    Configure the AIDA logging system.

    Args:
        level: Logging level (default INFO)
        log_dir: Directory for log files (default: ./logs)
        console: Enable Rich console output
        file: Enable JSON file output
        force: Reconfigure even if already initialised
    """
    global _logging_initialized, _log_file_path

    if _logging_initialized and not force:
        return

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(logging.DEBUG if file else level)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    turn_filter = TurnIdFilter()

    if console:
        console_handler = RichHandler(rich_tracebacks=True, show_path=False)
        console_handler.setLevel(level)
        console_handler.addFilter(turn_filter)
        console_handler.setFormatter(logging.Formatter("[%(turn_id)s] %(name)s: %(message)s"))
        root_logger.addHandler(console_handler)

    if file:
        log_path = Path(log_dir) if log_dir else Path("logs")
        log_path.mkdir(parents=True, exist_ok=True)

        _log_file_path = log_path / "aida.log"

        file_handler = FileRotatingHandler(str(_log_file_path))
        file_handler.setLevel(logging.DEBUG)  # File gets everything
        file_handler.setFormatter(JSONFormatter())
        file_handler.addFilter(turn_filter)
        root_logger.addHandler(file_handler)
    else:
        _log_file_path = None

    _logging_initialized = True


def get_log_file_path() -> Optional[Path]:
    """Path of the active JSON log file, if file logging is on."""
    return _log_file_path


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the AIDA namespace.

    Args:
        name: Logger name (prefixed with 'aida.' if not already)
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"

    return logging.getLogger(name)


def log_turn_end(
    turn_id: str,
    success: bool,
    route: str = "",
    error: Optional[str] = None,
) -> None:
    """
    Log the end of a turn with summary information.

    This is the TURN_END boundary event for post-mortems.
    """
    logger = get_logger("core.turn")

    extra = {
        "turn_id": turn_id,
        "success": success,
        "route": route,
    }

    if success:
        logger.info(f"TURN_END: success={success}, route={route}", extra=extra)
    else:
        extra["error"] = error or "Unknown error"
        logger.error(
            f"TURN_END: success={success}, route={route}, error={error or 'Unknown'}",
            extra=extra,
        )
