"""Amount parsing utilities."""

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

TWO_PLACES = Decimal("0.01")


def parse_amount(amount: Any) -> Decimal:
    """Parse a spreadsheet amount cell into a Decimal.

    Handles various formats:
    - 500, 500.0 (numeric cells)
    - "123.45"
    - "$123.45"
    - "-123.45"
    - "1,234.56"
    - "(123.45)" (negative in parentheses)

    Args:
        amount: Amount cell value

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount cannot be parsed
    """
    if isinstance(amount, bool):
        raise ValueError(f"Could not parse amount '{amount}'")
    if isinstance(amount, (Decimal, int, float)):
        value = Decimal(str(amount))
        if not value.is_finite():
            raise ValueError(f"Could not parse amount '{amount}'")
        return value

    if amount is None or not str(amount).strip():
        raise ValueError("Empty amount string")

    amount_str = str(amount).strip()

    # Handle parentheses notation (negative)
    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    # Remove currency symbols
    amount_str = re.sub(r"[$€£¥]", "", amount_str)

    # Remove commas
    amount_str = amount_str.replace(",", "").strip()

    try:
        value = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e}")
    if not value.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    return -value if is_negative else value


def parse_amount_or_zero(amount: Any) -> Decimal:
    """Parse an amount cell, falling back to 0 when it is not a number."""
    try:
        return parse_amount(amount)
    except ValueError:
        return Decimal("0")


def round_half_up(value: Decimal) -> Decimal:
    """Round to 2 decimals, halves away from zero."""
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
