"""Record export: tab-separated text and Excel workbooks."""

import logging
from pathlib import Path
from typing import Any, Sequence

from openpyxl import Workbook

from contaparse.database.base import Database
from contaparse.domain.concept import validate_record_kind
from contaparse.domain.entities import RECORD_KIND_GENERAL_EXPENSE, TransactionRecord
from contaparse.domain.segment import validate_process_family

logger = logging.getLogger(__name__)

BASE_HEADERS = ("Fecha", "Egresos", "Folio", "Proveedor", "Factura", "Importe", "Concepto")
TRAILING_HEADERS = ("Mes", "Año")


def export_headers(kind: str) -> list[str]:
    segment_header = "Segmento" if kind == RECORD_KIND_GENERAL_EXPENSE else "Vuelta"
    return [*BASE_HEADERS, segment_header, *TRAILING_HEADERS]


def record_row(record: TransactionRecord) -> list[Any]:
    return [
        record.date,
        record.movement_type,
        record.document_number,
        record.counterparty_name,
        record.invoice_ref,
        record.amount,
        record.concept,
        record.segment_label,
        record.month,
        record.year,
    ]


def to_tsv(records: Sequence[TransactionRecord], kind: str, include_header: bool = True) -> str:
    """Serialize records as tab-separated lines (record IDs are not exported)."""
    lines = []
    if include_header:
        lines.append("\t".join(export_headers(kind)))
    for record in records:
        lines.append("\t".join(str(value) for value in record_row(record)))
    return "\n".join(lines) + ("\n" if lines else "")


def write_xlsx(
    records: Sequence[TransactionRecord], kind: str, output_path: str | Path, sheet_name: str = "Datos"
) -> Path:
    """Write records to a single-sheet .xlsx workbook."""
    workbook = Workbook()
    worksheet = workbook.active
    worksheet.title = sheet_name[:31]
    worksheet.append(export_headers(kind))
    for record in records:
        row = record_row(record)
        row[5] = float(record.amount)
        worksheet.append(row)

    path = Path(output_path)
    workbook.save(path)
    logger.info("Wrote %d records to %s", len(records), path)
    return path


class ExportService:
    """Service for exporting stored records."""

    def __init__(self, db: Database):
        """Initialize export service.

        Args:
            db: Database instance
        """
        self.db = db

    def load(self, process_family: str, kind: str) -> list[TransactionRecord]:
        validate_process_family(process_family)
        validate_record_kind(kind)
        return self.db.list_records(process_family, kind)

    def export_tsv(self, process_family: str, kind: str, include_header: bool = True) -> str:
        return to_tsv(self.load(process_family, kind), kind, include_header=include_header)

    def export_xlsx(self, process_family: str, kind: str, output_path: str | Path) -> Path:
        records = self.load(process_family, kind)
        return write_xlsx(records, kind, output_path, sheet_name=f"{process_family}-{kind}")
