"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re

CENT = Decimal("0.01")


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a two-place Decimal.

    Handles various formats:
    - "123.45"
    - "CHF 123.45", "$123.45"
    - "-123.45"
    - "1,234.56", "1'234.56"
    - "(123.45)" (negative in parentheses)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount rounded to cents

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    amount_str = amount_str.strip()

    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    # Currency markers and thousands separators
    amount_str = re.sub(r"(?i)chf|eur|usd|[$€£]", "", amount_str)
    amount_str = amount_str.replace(",", "").replace("'", "").strip()

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e}")
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")

    amount = amount.quantize(CENT)
    return -amount if is_negative else amount


def parse_posting(posting: str) -> tuple[str, Decimal]:
    """Parse an ``ACCOUNT=AMOUNT`` posting argument.

    Args:
        posting: Posting string such as "1020=500.00"

    Returns:
        Tuple of (account reference, amount)

    Raises:
        ValueError: If the posting is malformed or the amount is not positive
    """
    account, sep, amount_str = posting.partition("=")
    if not sep or not account.strip():
        raise ValueError(f"Invalid posting '{posting}': expected ACCOUNT=AMOUNT")
    amount = parse_amount(amount_str)
    if amount <= 0:
        raise ValueError(f"Invalid posting '{posting}': amount must be positive")
    return account.strip(), amount
