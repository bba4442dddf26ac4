"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
from typing import Optional
import re


def parse_amount(amount_str: str) -> Decimal:
    """Parse a user-typed amount into a positive Decimal.

    Handles:
    - "150"
    - "150.50"
    - "150,50" (decimal comma)
    - "150 сом" / "$150" (currency markers are dropped)

    Args:
        amount_str: Amount string as typed in chat

    Returns:
        Decimal amount, quantized to two places

    Raises:
        ValueError: If the string is not a number or the number is not positive
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    cleaned = amount_str.strip().replace(",", ".")
    cleaned = re.sub(r"[$€£¥₽]|сом|смн|tjs", "", cleaned, flags=re.IGNORECASE)
    cleaned = cleaned.replace(" ", "")

    try:
        amount = Decimal(cleaned)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}'") from e

    if not amount.is_finite() or amount <= 0:
        raise ValueError(f"Amount must be greater than zero, got '{amount_str}'")
    return amount.quantize(Decimal("0.01"))


def split_amount_and_description(text: str) -> tuple[Decimal, Optional[str]]:
    """Split "amount description" input into its parts.

    The first whitespace-separated token is the amount; anything after it is
    the description.

    Raises:
        ValueError: If the first token is not a valid amount
    """
    parts = text.strip().split(maxsplit=1)
    if not parts:
        raise ValueError("Empty amount string")
    amount = parse_amount(parts[0])
    description = parts[1].strip() if len(parts) > 1 else None
    return amount, description or None


def format_amount(amount: Decimal, currency: Optional[str] = None) -> str:
    """Format an amount with a thin thousands separator and two decimals."""
    text = f"{amount:,.2f}".replace(",", " ")
    if text.endswith(".00"):
        text = text[:-3]
    return f"{text} {currency}" if currency else text
