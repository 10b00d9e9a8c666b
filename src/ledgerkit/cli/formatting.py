"""Presentation helpers for CLI output."""

from decimal import Decimal
from typing import Optional

DEFAULT_CURRENCY = "CHF"


def format_currency(amount: Optional[Decimal], currency: str = DEFAULT_CURRENCY) -> str:
    """Format an amount Swiss style, e.g. ``CHF 1'234.50``.

    A missing amount is shown as zero.
    """
    amount = amount if amount is not None else Decimal("0")
    grouped = f"{abs(amount):,.2f}".replace(",", "'")
    sign = "-" if amount < 0 else ""
    return f"{currency} {sign}{grouped}"


def format_amount(amount: Optional[Decimal]) -> str:
    """Format a line amount for tables; blank when absent."""
    if not amount:
        return ""
    return f"{amount:,.2f}".replace(",", "'")
