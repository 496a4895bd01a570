"""
Currency utilities.

Money is carried as ``Decimal`` end to end. Rounding happens only here, at
the presentation boundary, never inside the pricing calculation.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any


# Supported currencies
SUPPORTED_CURRENCIES = {
    "USD": {"symbol": "$", "decimals": 2},
    "EUR": {"symbol": "€", "decimals": 2},
    "GBP": {"symbol": "£", "decimals": 2},
    "BDT": {"symbol": "৳", "decimals": 2},
    "INR": {"symbol": "₹", "decimals": 2},
}

DEFAULT_CURRENCY = "USD"


def convert_to_decimal(
    amount: float | str | int | Decimal | Any,
    field_name: str = "amount",
) -> Decimal:
    """
    Safely convert various types to Decimal.

    Floats go through ``str()`` so ``0.1`` becomes ``Decimal('0.1')`` rather
    than its binary expansion.

    Args:
        amount: Amount to convert
        field_name: Name of field (for error messages)

    Returns:
        Decimal value

    Raises:
        ValueError: If conversion fails

    Examples:
        >>> convert_to_decimal(1234.56)
        Decimal('1234.56')
        >>> convert_to_decimal("1,234.56")
        Decimal('1234.56')
    """
    if isinstance(amount, Decimal):
        return amount

    if isinstance(amount, bool):
        raise ValueError(f"Invalid {field_name}: '{amount}'")

    if isinstance(amount, str):
        amount = amount.replace(",", "").strip()

    try:
        return Decimal(str(amount))
    except (InvalidOperation, ValueError):
        raise ValueError(f"Invalid {field_name}: '{amount}'")


def parse_tendered_amount(value: str | float | int | Decimal | None) -> Decimal:
    """
    Parse what the operator typed into the cash field.

    Blank or unparseable input counts as nothing tendered.
    """
    if value is None:
        return Decimal("0")
    if isinstance(value, str) and not value.strip():
        return Decimal("0")
    try:
        return convert_to_decimal(value, field_name="tendered amount")
    except ValueError:
        return Decimal("0")


def quantize_money(amount: Decimal | float | int | str, currency: str = DEFAULT_CURRENCY) -> Decimal:
    """
    Round an amount for display using half-up rounding.

    Example:
        >>> quantize_money(Decimal("4.445"))
        Decimal('4.45')
    """
    decimals = SUPPORTED_CURRENCIES.get(currency.upper(), {"decimals": 2})["decimals"]
    exponent = Decimal(1).scaleb(-decimals)
    return convert_to_decimal(amount).quantize(exponent, rounding=ROUND_HALF_UP)


def validate_currency_code(currency: str) -> bool:
    """Return True if the currency code is supported."""
    return currency.upper() in SUPPORTED_CURRENCIES


def get_currency_symbol(currency: str) -> str:
    """
    Get the symbol for a currency code.

    Raises:
        ValueError: If currency not supported

    Example:
        >>> get_currency_symbol("USD")
        "$"
    """
    currency = currency.upper()
    if currency not in SUPPORTED_CURRENCIES:
        raise ValueError(f"Unsupported currency: '{currency}'")
    return SUPPORTED_CURRENCIES[currency]["symbol"]


def format_currency(
    amount: float | Decimal | str | int,
    currency: str = DEFAULT_CURRENCY,
    include_symbol: bool = True,
) -> str:
    """
    Format an amount as currency string.

    Args:
        amount: The amount to format (can be float, Decimal, str, or int)
        currency: Currency code (USD, EUR, GBP, BDT, INR)
        include_symbol: Whether to include currency symbol

    Returns:
        Formatted currency string (e.g., "$1,234.56" or "1,234.56")

    Examples:
        >>> format_currency(Decimal("94.5"))
        "$94.50"
        >>> format_currency(1234.56, "GBP", include_symbol=False)
        "1,234.56"
    """
    try:
        decimal_amount = convert_to_decimal(amount)
    except ValueError:
        raise ValueError(f"Invalid amount: '{amount}'")

    currency = currency.upper()
    if currency not in SUPPORTED_CURRENCIES:
        raise ValueError(
            f"Unsupported currency: '{currency}'. "
            f"Supported currencies: {', '.join(SUPPORTED_CURRENCIES.keys())}"
        )

    rounded = quantize_money(decimal_amount, currency)
    decimals = SUPPORTED_CURRENCIES[currency]["decimals"]
    formatted_number = f"{rounded:,.{decimals}f}"

    if include_symbol:
        symbol = SUPPORTED_CURRENCIES[currency]["symbol"]
        if rounded < 0:
            return f"-{symbol}{formatted_number[1:]}"
        return f"{symbol}{formatted_number}"
    return formatted_number
