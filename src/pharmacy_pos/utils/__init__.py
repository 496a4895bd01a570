"""Shared helpers: logging setup and money formatting."""

from .currency import (
    SUPPORTED_CURRENCIES,
    DEFAULT_CURRENCY,
    convert_to_decimal,
    format_currency,
    get_currency_symbol,
    parse_tendered_amount,
    quantize_money,
    validate_currency_code,
)
from .logging import (
    get_operator_id,
    get_session_id,
    session_context,
    setup_logging,
    setup_logging_from_config,
)

__all__ = [
    "SUPPORTED_CURRENCIES",
    "DEFAULT_CURRENCY",
    "convert_to_decimal",
    "format_currency",
    "get_currency_symbol",
    "parse_tendered_amount",
    "quantize_money",
    "validate_currency_code",
    "get_operator_id",
    "get_session_id",
    "session_context",
    "setup_logging",
    "setup_logging_from_config",
]
