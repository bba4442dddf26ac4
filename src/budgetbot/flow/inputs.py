"""Parsing of typed wizard input.

Parse failures are raised as ValidationError so the engine re-prompts the
current step.
"""

from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional

from budgetbot.domain.errors import NotFoundError, ValidationError
from budgetbot.utils.amount_parser import parse_amount, split_amount_and_description
from budgetbot.utils.date_parser import NO_DATE_WORDS, parse_optional_date

SKIP_WORDS = NO_DATE_WORDS | {"пропустить"}


def is_skip(text: str) -> bool:
    return text.strip().lower() in SKIP_WORDS


def read_amount(text: str) -> Decimal:
    try:
        return parse_amount(text)
    except ValueError as e:
        raise ValidationError(f"Enter a positive number, for example 150 or 99.90 ({e})") from e


def read_amount_and_description(text: str) -> tuple[Decimal, Optional[str]]:
    try:
        return split_amount_and_description(text)
    except ValueError as e:
        raise ValidationError(f"Start with a positive number, for example: 150 taxi ({e})") from e


def read_optional_date(text: str, today: date) -> Optional[datetime]:
    """Parse a date answer; "no"/"skip" style answers give None.

    Raises:
        ValidationError: If the text is not a date or the date is in the past
    """
    try:
        value = parse_optional_date(text, today)
    except ValueError as e:
        raise ValidationError("Enter a date as DD.MM.YYYY or \"no\"") from e
    if value is None:
        return None
    if value < today:
        raise ValidationError("The date cannot be in the past")
    return datetime.combine(value, time())


def read_text(text: str, max_length: int = 100) -> str:
    value = text.strip()
    if not value:
        raise ValidationError("The text cannot be empty")
    if len(value) > max_length:
        raise ValidationError(f"Keep it under {max_length} characters")
    return value


def button_id(args: list[str], index: int = 0) -> int:
    """Entity id carried by button data such as ``cat:<id>``.

    Raises:
        NotFoundError: If the data carries no valid id
    """
    try:
        return int(args[index])
    except (IndexError, ValueError) as e:
        raise NotFoundError(f"Unknown button data {':'.join(args)!r}") from e
