"""Spreadsheet import domain service."""

import logging
from datetime import date
from pathlib import Path
from typing import Any, Optional

from contaparse.database.base import Database
from contaparse.domain.concept import validate_record_kind
from contaparse.domain.concept_mapping import LEGACY_POSITIONS, ConceptMappingResolver
from contaparse.domain.detection import detect_file_type, needs_confirmation
from contaparse.domain.entities import (
    RECORD_KIND_GENERAL_EXPENSE,
    RECORD_KIND_LEDGER,
    FileDetectionResult,
)
from contaparse.domain.errors import ConflictError, ValidationError, file_type_already_uploaded
from contaparse.domain.normalizer import RecordNormalizer
from contaparse.domain.segment import SegmentService, validate_process_family
from contaparse.utils.date_parser import current_month_key
from contaparse.utils.spreadsheet_reader import read_rows

logger = logging.getLogger(__name__)


class PendingAccounts:
    """Account headers seen during normalization, held until the import commits."""

    def __init__(self):
        self.accounts: list[tuple[str, str, str, str]] = []

    def register_account(
        self, full_code: str, account_code: str, account_name: str, process_family: str
    ) -> None:
        self.accounts.append((full_code, account_code, account_name, process_family))

    def flush(self, db: Database) -> None:
        for account in self.accounts:
            db.register_account(*account)
        self.accounts.clear()


class SpreadsheetImportService:
    """Service for importing ERP export spreadsheets."""

    def __init__(self, db: Database, legacy: Optional[str] = None, strict: bool = False):
        """Initialize spreadsheet import service.

        Args:
            db: Database instance
            legacy: Position of the legacy general expense category table
                ("first", "fallback") or None
            strict: Abort the import on a malformed date instead of
                skipping the row
        """
        if legacy is not None and legacy not in LEGACY_POSITIONS:
            raise ValidationError(
                f"Invalid legacy position '{legacy}'. Must be one of: {', '.join(LEGACY_POSITIONS)}"
            )
        self.db = db
        self.legacy = legacy
        self.strict = strict
        self.segment_service = SegmentService(db)

    def detect(self, file_path: str) -> FileDetectionResult:
        """Classify a file without importing it.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValidationError: If the file cannot be read as a spreadsheet
        """
        return detect_file_type(read_rows(file_path))

    def import_file(
        self,
        file_path: str,
        process_family: Optional[str] = None,
        general_expense: Optional[bool] = None,
        confirmed: bool = False,
        force: bool = False,
        today: Optional[date] = None,
    ) -> dict[str, Any]:
        """Import an export spreadsheet.

        Args:
            file_path: Path to the .xlsx/.csv export
            process_family: Override the detected family ("apk"/"epk")
            general_expense: Override the detected general expense flag
            confirmed: Proceed even when detection confidence is low
            force: Replace a file of the same type already uploaded this month
            today: Reference date for the upload history (defaults to today)

        Returns:
            Dict with import statistics:
            - detection: FileDetectionResult
            - process_family: family the records were stored under
            - kind: record kind stored
            - imported: number of records stored
            - segments_added: segment labels newly registered
            - skipped: list of messages for skipped rows

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValidationError: If the file is invalid, the override is invalid
                or confidence is low and the import was not confirmed
            ConflictError: If the file type was already uploaded this month
            MalformedDateError: In strict mode, on a malformed date
        """
        path = Path(file_path)
        rows = read_rows(path)
        detection = detect_file_type(rows)

        overridden = process_family is not None or general_expense is not None
        if process_family is not None:
            validate_process_family(process_family)
        family = process_family or detection.process_family
        is_general_expense = (
            detection.is_general_expense if general_expense is None else general_expense
        )

        if not confirmed and not overridden and needs_confirmation(detection):
            raise ValidationError(
                f"Low detection confidence ({detection.confidence}%): detected "
                f"{family.upper()} {'GG' if is_general_expense else 'vueltas'}. "
                "Confirm the import or set the file type explicitly."
            )

        file_type = f"{family}-{'gg' if is_general_expense else 'vueltas'}"
        month = current_month_key(today)
        existing = self.db.get_upload(month, file_type)
        if existing is not None and not force:
            raise ConflictError(file_type_already_uploaded(file_type, month, existing.file_name))

        # Nothing is written until the whole file has normalized
        accounts = PendingAccounts()
        resolver = ConceptMappingResolver.from_database(self.db)
        normalizer = RecordNormalizer(
            resolver, catalog=accounts, legacy=self.legacy, strict=self.strict
        )
        result = normalizer.normalize(rows, family, general_expense=is_general_expense)

        if existing is not None:
            self.db.delete_upload(existing.id)
        kind = RECORD_KIND_GENERAL_EXPENSE if is_general_expense else RECORD_KIND_LEDGER
        self.db.replace_records(family, kind, result.records)
        accounts.flush(self.db)

        segments_added: list[str] = []
        if kind == RECORD_KIND_LEDGER:
            segments_added = self.segment_service.register_labels(family, result.segment_labels)

        self.db.record_upload(month, file_type, path.name, len(result.records))
        logger.info("Imported %s as %s: %d records", path.name, file_type, len(result.records))

        return {
            "detection": detection,
            "process_family": family,
            "kind": kind,
            "imported": len(result.records),
            "segments_added": segments_added,
            "skipped": result.skipped_rows,
        }

    def clear_records(self, process_family: str, kind: Optional[str] = None) -> int:
        """Delete stored records of a family, optionally of a single kind.

        Returns:
            Number of records deleted
        """
        validate_process_family(process_family)
        if kind is not None:
            validate_record_kind(kind)
        deleted = self.db.clear_records(process_family, kind)
        logger.info("Cleared %d %s records", deleted, process_family)
        return deleted

    def upload_status(self, today: Optional[date] = None) -> dict[str, Optional[str]]:
        """Return the file uploaded this month for each of the four file types."""
        month = current_month_key(today)
        uploads = {upload.file_type: upload.file_name for upload in self.db.list_uploads(month)}
        return {
            file_type: uploads.get(file_type)
            for file_type in ("apk-vueltas", "apk-gg", "epk-vueltas", "epk-gg")
        }
