"""Utility functions for budgetbot."""

from budgetbot.utils.date_parser import parse_date, utcnow
from budgetbot.utils.amount_parser import parse_amount, format_amount

__all__ = ["parse_date", "utcnow", "parse_amount", "format_amount"]
