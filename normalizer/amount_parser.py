"""
Amount parser for numbers supplied by the extraction model.

The model is asked for plain JSON numbers but does not always comply, so
amounts may arrive as strings with currency symbols, thousands separators,
parentheses or DR/CR suffixes.
"""
import math
import re
from typing import Optional, Union

Number = Union[str, int, float, None]


def parse_amount(value: Number) -> Optional[float]:
    """
    Parse an amount value from various formats into a float.

    Handles:
    - Plain numbers: 1000, -250.5
    - Grouped formats: "1,234.56"
    - Currency symbols and codes: $, €, £, ₹, USD, EUR, GBP, INR
    - Negative formats: -1000, (1000), 1000-, 1000 DR

    Args:
        value: A string/number that might be an amount

    Returns:
        A float value (positive or negative), or None if unparseable.
        Non-finite inputs (NaN, infinity) are returned unchanged.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        return float(value)

    value_str = str(value).strip()
    if not value_str:
        return None

    return _parse_signed_amount(value_str)


def _parse_signed_amount(value_str: str) -> Optional[float]:
    """
    Parse an amount string and determine its sign.

    Args:
        value_str: Raw amount string

    Returns:
        Amount as float (negative for DR, parentheses or minus), or None
    """
    value_str = value_str.strip()

    is_negative = False

    # DR/CR suffix (case-insensitive)
    dr_match = re.search(r'\s*(DR|Dr|dr)\.?\s*$', value_str)
    cr_match = re.search(r'\s*(CR|Cr|cr)\.?\s*$', value_str)

    if dr_match:
        is_negative = True
        value_str = value_str[:dr_match.start()]
    elif cr_match:
        value_str = value_str[:cr_match.start()]

    value_str = value_str.strip()

    # (1000) means negative
    if value_str.startswith('(') and value_str.endswith(')'):
        is_negative = True
        value_str = value_str[1:-1]

    value_str = _remove_currency_symbols(value_str).strip()

    if value_str.startswith('-'):
        is_negative = True
        value_str = value_str[1:]
    elif value_str.startswith('+'):
        value_str = value_str[1:]

    if value_str.endswith('-'):
        is_negative = True
        value_str = value_str[:-1]

    # Symbols may also sit after the sign, as in "-$200.00"
    value_str = _remove_currency_symbols(value_str).strip()

    value_str = value_str.replace(',', '').replace(' ', '')

    if not value_str:
        return None

    try:
        amount = float(value_str)
    except ValueError:
        return None

    if is_negative:
        amount = -abs(amount)
    return amount


def _remove_currency_symbols(value_str: str) -> str:
    """
    Remove currency symbols from a string.

    Args:
        value_str: String potentially containing currency symbols

    Returns:
        String with currency symbols removed
    """
    patterns = [
        r'USD\s*',
        r'EUR\s*',
        r'GBP\s*',
        r'INR\s*',
        r'Rs\.?\s*',
        r'\$\s*',
        r'€\s*',
        r'£\s*',
        r'₹\s*',
    ]

    for pattern in patterns:
        value_str = re.sub(pattern, '', value_str, flags=re.IGNORECASE)

    return value_str


def is_finite_amount(value: Optional[float]) -> bool:
    """Check that a parsed amount is a usable finite number."""
    return value is not None and math.isfinite(value)


def format_amount(amount: Optional[float], currency: Optional[str] = None) -> str:
    """
    Format an amount for display, e.g. ``USD 1,234.50``.

    Args:
        amount: The amount to format
        currency: Currency code or symbol to prefix

    Returns:
        Formatted string, or "" when there is no amount
    """
    if amount is None:
        return ""
    if not math.isfinite(amount):
        return str(amount)

    text = f"{amount:,.2f}"
    if currency:
        text = f"{currency} {text}"
    return text
