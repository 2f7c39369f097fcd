"""Read ERP export files into a raw row matrix."""

import csv
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any

from openpyxl import load_workbook

from contaparse.domain.errors import ValidationError
from contaparse.utils.date_parser import format_ledger_date

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 5 * 1024 * 1024
SUPPORTED_EXTENSIONS = (".xlsx", ".xlsm", ".csv")


def _cell_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return format_ledger_date(value.date())
    if isinstance(value, date):
        return format_ledger_date(value)
    return value


def read_rows(file_path: str | Path) -> list[list[Any]]:
    """Read the first sheet of a spreadsheet as a list of rows.

    Cells keep their raw values (no header coercion); date cells are
    rendered in the export's "DD/Mon/YYYY" text form and trailing empty
    cells are dropped.

    Args:
        file_path: Path to a .xlsx/.xlsm or .csv file

    Returns:
        List of rows, each a list of cell values

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValidationError: If the file is too large, has an unsupported
            extension or is empty
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    if path.stat().st_size > MAX_FILE_SIZE:
        raise ValidationError("File must not exceed 5MB")

    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        raise ValidationError(
            f"Unsupported file type '{suffix}'. Supported: {', '.join(SUPPORTED_EXTENSIONS)}"
        )

    if suffix == ".csv":
        rows = _read_csv(path)
    else:
        rows = _read_workbook(path)

    if not rows:
        raise ValidationError("File is empty")

    logger.debug("Read %d rows from %s", len(rows), path.name)
    return rows


def _read_workbook(path: Path) -> list[list[Any]]:
    workbook = load_workbook(path, read_only=True, data_only=True)
    try:
        worksheet = workbook.worksheets[0]
        rows = []
        for raw_row in worksheet.iter_rows(values_only=True):
            row = [_cell_value(value) for value in raw_row]
            while row and row[-1] is None:
                row.pop()
            rows.append(row)
    finally:
        workbook.close()

    while rows and not rows[-1]:
        rows.pop()
    return rows


def _read_csv(path: Path) -> list[list[Any]]:
    with open(path, "r", encoding="utf-8-sig", newline="") as f:
        # Try to detect delimiter
        sample = f.read(1024)
        f.seek(0)
        try:
            delimiter = csv.Sniffer().sniff(sample, delimiters=",;\t|").delimiter
        except csv.Error:
            delimiter = ","
        rows = [list(row) for row in csv.reader(f, delimiter=delimiter)]

    while rows and not any(cell.strip() for cell in rows[-1]):
        rows.pop()
    return rows
