"""Tests for date and amount parsing."""

import pytest
from datetime import date, datetime
from decimal import Decimal

from budgetbot.domain.errors import ValidationError
from budgetbot.flow.inputs import is_skip, read_amount, read_amount_and_description, read_optional_date
from budgetbot.utils.amount_parser import format_amount, parse_amount, split_amount_and_description
from budgetbot.utils.date_parser import (
    days_in_month,
    format_date,
    month_start,
    next_month_start,
    parse_date,
    parse_optional_date,
)

TODAY = date(2026, 3, 10)


def test_parse_day_first_date():
    """Dates are typed day first."""
    assert parse_date("25.12.2026") == date(2026, 12, 25)


def test_parse_iso_date():
    """ISO dates are accepted too."""
    assert parse_date("2025-12-25") == date(2025, 12, 25)


def test_parse_relative_words():
    """Test parsing 'today' and 'tomorrow' in both languages."""
    assert parse_date("today", TODAY) == TODAY
    assert parse_date("Завтра", TODAY) == date(2026, 3, 11)


def test_parse_invalid_date():
    """Garbage is rejected."""
    with pytest.raises(ValueError):
        parse_date("not a date at all")
    with pytest.raises(ValueError):
        parse_date("   ")


def test_parse_optional_date_no_words():
    """'no' style answers mean no date."""
    for word in ["нет", "no", "None", "-", "skip"]:
        assert parse_optional_date(word, TODAY) is None


def test_month_helpers():
    """Month boundaries and lengths."""
    moment = datetime(2024, 2, 17, 15, 30)
    assert month_start(moment) == datetime(2024, 2, 1)
    assert next_month_start(moment) == datetime(2024, 3, 1)
    assert next_month_start(datetime(2025, 12, 5)) == datetime(2026, 1, 1)
    assert days_in_month(2024, 2) == 29
    assert days_in_month(2025, 2) == 28


def test_format_date():
    assert format_date(datetime(2026, 3, 5, 9, 0)) == "05.03.2026"
    assert format_date(None) == "-"


def test_parse_amount_variants():
    """Amounts with decimal commas and currency markers."""
    assert parse_amount("150") == Decimal("150.00")
    assert parse_amount("150,5") == Decimal("150.50")
    assert parse_amount("99.90 сом") == Decimal("99.90")
    assert parse_amount("$20") == Decimal("20.00")


def test_parse_amount_rejects_non_positive():
    """Zero, negatives and words are not amounts."""
    for text in ["0", "-10", "abc", "", "nan", "inf"]:
        with pytest.raises(ValueError):
            parse_amount(text)


def test_split_amount_and_description():
    """The first token is the amount, the rest the description."""
    assert split_amount_and_description("150 taxi home") == (Decimal("150.00"), "taxi home")
    assert split_amount_and_description(" 42 ") == (Decimal("42.00"), None)


def test_format_amount():
    assert format_amount(Decimal("1234.50")) == "1 234.50"
    assert format_amount(Decimal("1000"), "TJS") == "1 000 TJS"


def test_wizard_readers_raise_validation_errors():
    """Wizard input readers turn parse failures into ValidationError."""
    with pytest.raises(ValidationError):
        read_amount("lots")
    with pytest.raises(ValidationError):
        read_amount_and_description("taxi 150")
    with pytest.raises(ValidationError):
        read_optional_date("32.13.2026", TODAY)


def test_read_optional_date_rejects_past_dates():
    """Deadlines cannot lie in the past."""
    with pytest.raises(ValidationError):
        read_optional_date("01.01.2020", TODAY)

    assert read_optional_date("10.03.2026", TODAY) == datetime(2026, 3, 10)
    assert read_optional_date("no", TODAY) is None


def test_is_skip():
    assert is_skip(" Skip ")
    assert is_skip("пропустить")
    assert not is_skip("lunch")
