"""Date parsing utilities for ledger export dates (e.g. "01/Ene/2024")."""

import re
from datetime import date, datetime
from typing import Optional

from dateutil.relativedelta import relativedelta

from contaparse.domain.errors import MalformedDateError, unknown_month

MONTH_ABBREVIATIONS = (
    "Ene",
    "Feb",
    "Mar",
    "Abr",
    "May",
    "Jun",
    "Jul",
    "Ago",
    "Sep",
    "Oct",
    "Nov",
    "Dic",
)

MONTH_NAMES = (
    "Enero",
    "Febrero",
    "Marzo",
    "Abril",
    "Mayo",
    "Junio",
    "Julio",
    "Agosto",
    "Septiembre",
    "Octubre",
    "Noviembre",
    "Diciembre",
)

# Any three letters: an unknown token is a validation failure, not a non-match
DATE_ROW_PATTERN = re.compile(r"^(\d{1,2})/([A-Za-z]{3})/(\d{4})$")


def is_ledger_date(value: str) -> bool:
    """Return True if value has the D[D]/Mon/YYYY shape."""
    return DATE_ROW_PATTERN.match(value.strip()) is not None


def parse_ledger_date(date_str: str) -> tuple[str, str]:
    """Split a ledger date into its month abbreviation and year.

    Args:
        date_str: Date string such as "01/Ene/2024"

    Returns:
        Tuple of (month abbreviation, 4-digit year string)

    Raises:
        MalformedDateError: If the string is not date-shaped or the month
            token is not one of the twelve known abbreviations
    """
    date_str = date_str.strip()
    match = DATE_ROW_PATTERN.match(date_str)
    if match is None:
        raise MalformedDateError(f"Could not parse date '{date_str}'")

    _, month_token, year = match.groups()
    if month_token not in MONTH_ABBREVIATIONS:
        raise MalformedDateError(unknown_month(month_token, date_str))
    return month_token, year


def format_ledger_date(value: date) -> str:
    """Format a date the way the ERP export does ("05/Mar/2024")."""
    return f"{value.day:02d}/{MONTH_ABBREVIATIONS[value.month - 1]}/{value.year}"


def last_day_of_previous_month(today: Optional[date] = None) -> date:
    """Return the last calendar day of the month before today."""
    if today is None:
        today = date.today()
    if isinstance(today, datetime):
        today = today.date()
    # day=31 clamps to the last day of the shifted month
    return today - relativedelta(months=1) + relativedelta(day=31)


def current_month_key(today: Optional[date] = None) -> str:
    """Return the "YYYY-MM" key used to partition upload history."""
    if today is None:
        today = date.today()
    return f"{today.year:04d}-{today.month:02d}"
