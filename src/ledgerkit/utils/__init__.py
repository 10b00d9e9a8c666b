"""Utility functions for ledgerkit."""

from ledgerkit.utils.date_parser import parse_date
from ledgerkit.utils.amount_parser import parse_amount, parse_posting

__all__ = ["parse_date", "parse_amount", "parse_posting"]
