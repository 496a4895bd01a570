"""
Logging configuration for the POS.

Every log record is stamped with the register session it was emitted in
(``record.session_id``) and the operator working that session
(``record.operator_id``). Records emitted outside a session carry ``"-"``.

Usage:
    from pharmacy_pos.utils.logging import setup_logging, session_context

    setup_logging(level="INFO", json_format=False)

    with session_context("till-2", operator_id="u-17"):
        logger.info("[CART] Added line")  # stamped with till-2 / u-17
"""

import json
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any

NO_CONTEXT = "-"

_session_id_ctx: ContextVar[str | None] = ContextVar("pos_session_id", default=None)
_operator_id_ctx: ContextVar[str | None] = ContextVar("pos_operator_id", default=None)

# Attributes every LogRecord has; anything else came in through ``extra=``
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message", "session_id", "operator_id",
}


# =============================================================================
# REGISTER SESSION CONTEXT
# =============================================================================

def get_session_id() -> str | None:
    """Register session the current code runs in, if any."""
    return _session_id_ctx.get()


def get_operator_id() -> str | None:
    """Operator bound to the current register session, if any."""
    return _operator_id_ctx.get()


@contextmanager
def session_context(session_id: str, operator_id: str | None = None) -> Iterator[str]:
    """
    Bind a register session (and optionally its operator) for the block.

    Nested blocks restore the outer binding on exit. The operator of an
    enclosing block is kept when ``operator_id`` is not given.
    """
    session_token = _session_id_ctx.set(session_id)
    operator_token = _operator_id_ctx.set(operator_id) if operator_id is not None else None
    try:
        yield session_id
    finally:
        if operator_token is not None:
            _operator_id_ctx.reset(operator_token)
        _session_id_ctx.reset(session_token)


def _install_record_factory() -> None:
    """Wrap the active LogRecord factory so records carry the session context."""
    current = logging.getLogRecordFactory()
    if getattr(current, "_pos_stamped", False):
        return

    def factory(*args: Any, **kwargs: Any) -> logging.LogRecord:
        record = current(*args, **kwargs)
        record.session_id = _session_id_ctx.get() or NO_CONTEXT
        record.operator_id = _operator_id_ctx.get() or NO_CONTEXT
        return record

    factory._pos_stamped = True
    logging.setLogRecordFactory(factory)


_install_record_factory()


# =============================================================================
# FORMATTERS
# =============================================================================

class JSONFormatter(logging.Formatter):
    """One JSON object per line, for shipping register logs off the till."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "session_id": getattr(record, "session_id", NO_CONTEXT),
            "operator_id": getattr(record, "operator_id", NO_CONTEXT),
            "message": record.getMessage(),
        }

        extra = {k: v for k, v in record.__dict__.items() if k not in _RECORD_ATTRS}
        if extra:
            log_data["extra"] = extra

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class ConsoleFormatter(logging.Formatter):
    """
    Human-readable console formatter for development.

    ``12:03:44 INFO     [till-2/u-17] pharmacy_pos.core.checkout: [CHECKOUT] ...``
    """

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        level = f"{record.levelname:8}"
        if self.use_color:
            level = f"{self.COLORS.get(record.levelname, '')}{level}{self.RESET}"

        session_id = getattr(record, "session_id", NO_CONTEXT)
        operator_id = getattr(record, "operator_id", NO_CONTEXT)
        where = ""
        if session_id != NO_CONTEXT:
            where = f"[{session_id}/{operator_id}] " if operator_id != NO_CONTEXT else f"[{session_id}] "

        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        msg = f"{timestamp} {level} {where}{record.name}: {record.getMessage()}"

        if record.exc_info:
            msg += f"\n{self.formatException(record.exc_info)}"

        return msg


# =============================================================================
# SETUP
# =============================================================================

def setup_logging(
    level: str = "INFO",
    json_format: bool = False,
    module_levels: dict[str, str] | None = None,
) -> None:
    """
    Configure application logging.

    Args:
        level: Default log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: JSON lines instead of colored console output
        module_levels: Optional dict of module names to log levels
            Example: {"pharmacy_pos.core.cart": "WARNING"}
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(getattr(logging, level.upper()))
    handler.setFormatter(JSONFormatter() if json_format else ConsoleFormatter(use_color=sys.stdout.isatty()))
    root_logger.addHandler(handler)

    for module, mod_level in (module_levels or {}).items():
        logging.getLogger(module).setLevel(getattr(logging, mod_level.upper()))

    # pydantic-settings reads .env files through dotenv
    if "dotenv" not in (module_levels or {}):
        logging.getLogger("dotenv").setLevel(logging.WARNING)


def setup_logging_from_config(config: Any = None) -> None:
    """Configure logging from ``PosConfig`` (the cached one when not given)."""
    if config is None:
        from ..config import get_pos_config

        config = get_pos_config()
    setup_logging(level=config.log_level, json_format=config.log_json)
