"""Utility functions for contaparse."""

from contaparse.utils.date_parser import parse_ledger_date, format_ledger_date
from contaparse.utils.amount_parser import parse_amount, parse_amount_or_zero
from contaparse.utils.spreadsheet_reader import read_rows

__all__ = [
    "parse_ledger_date",
    "format_ledger_date",
    "parse_amount",
    "parse_amount_or_zero",
    "read_rows",
]
