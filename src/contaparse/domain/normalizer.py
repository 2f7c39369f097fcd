"""Ledger export normalization.

ERP ledger exports are not tabular: an account header row
(``132-020-000-000-00 | OBRA CIVIL``) opens a block, ``Segmento ...`` rows
switch the current segment, and date rows carry the transactions of the
current account and segment. Normalization is a fold over the rows carrying
that context forward.
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, NamedTuple, Optional, Protocol, Sequence

from contaparse.domain.account_code import extract_account_code, parse_account_code
from contaparse.domain.concept_mapping import ConceptMappingResolver
from contaparse.domain.detection import is_segment_row
from contaparse.domain.entities import (
    PROCESS_FAMILIES,
    RECORD_KIND_GENERAL_EXPENSE,
    RECORD_KIND_LEDGER,
    NormalizationResult,
    TransactionRecord,
)
from contaparse.domain.errors import MalformedDateError, ValidationError, invalid_process_family
from contaparse.utils.amount_parser import parse_amount_or_zero
from contaparse.utils.date_parser import is_ledger_date, parse_ledger_date

logger = logging.getLogger(__name__)

# Segment rows look like "Segmento:  01 VTA 3 APK"; the name is the last word
SEGMENT_PREFIX_TOKENS = 3


class AccountCatalog(Protocol):
    def register_account(
        self, full_code: str, account_code: str, account_name: str, process_family: str
    ) -> None: ...


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


class RowCells(NamedTuple):
    """Positional cells of a transaction row."""

    date: str
    movement_type: str
    document_number: str
    counterparty_text: str
    invoice_ref: str
    amount: Any

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> "RowCells":
        cells = list(row[:6]) + [None] * (6 - min(len(row), 6))
        return cls(
            date=_text(cells[0]),
            movement_type=_text(cells[1]),
            document_number=_text(cells[2]),
            counterparty_text=_text(cells[3]),
            invoice_ref=_text(cells[4]),
            amount=cells[5],
        )


@dataclass(frozen=True)
class ScanState:
    """Context accumulated while scanning an export."""

    current_account_code: Optional[str] = None
    current_original_label: str = ""
    current_segment_label: str = ""
    next_id: int = 1


def segment_label_from_row(text: str) -> str:
    """Return the segment name of a "Segmento" row ("" if there is none)."""
    tokens = text.split(" ")[SEGMENT_PREFIX_TOKENS:]
    return tokens[-1] if tokens else ""


class RecordNormalizer:
    """Turn a raw row matrix into TransactionRecords."""

    def __init__(
        self,
        resolver: ConceptMappingResolver,
        catalog: Optional[AccountCatalog] = None,
        legacy: Optional[str] = None,
        strict: bool = False,
    ):
        """Initialize normalizer.

        Args:
            resolver: Concept resolver holding the mapping tables
            catalog: Optional account catalog; every account header seen is
                registered into it
            legacy: Position of the legacy general expense table ("first",
                "fallback") or None to leave it out
            strict: Abort the whole file on a malformed date instead of
                skipping the row
        """
        self.resolver = resolver
        self.catalog = catalog
        self.legacy = legacy
        self.strict = strict

    def step(
        self,
        state: ScanState,
        row: Sequence[Any],
        process_family: str,
        general_expense: bool = False,
    ) -> tuple[ScanState, Optional[TransactionRecord]]:
        """Consume one row.

        Returns:
            Tuple of (new state, emitted record or None)

        Raises:
            MalformedDateError: If a date row has an unknown month token
        """
        if not row:
            return state, None

        first_cell = _text(row[0])
        if not first_cell:
            return state, None

        account = parse_account_code(first_cell)
        if account is not None:
            label = _text(row[1]) if len(row) > 1 else ""
            if self.catalog is not None:
                self.catalog.register_account(
                    account.full, account.account_code, label, process_family
                )
            return (
                replace(state, current_account_code=account.full, current_original_label=label),
                None,
            )

        if is_segment_row(first_cell):
            return replace(state, current_segment_label=segment_label_from_row(first_cell)), None

        if not is_ledger_date(first_cell):
            return state, None

        cells = RowCells.from_row(row)
        month, year = parse_ledger_date(cells.date)

        account_code = (
            extract_account_code(state.current_account_code)
            if state.current_account_code
            else None
        )
        concept = self.resolver.resolve(
            account_code,
            state.current_original_label,
            cells.counterparty_text,
            process_family,
            legacy=self.legacy if general_expense else None,
        )

        record = TransactionRecord(
            id=state.next_id,
            date=cells.date,
            movement_type=cells.movement_type,
            document_number=cells.document_number,
            counterparty_name=cells.counterparty_text,
            invoice_ref=cells.invoice_ref,
            amount=parse_amount_or_zero(cells.amount),
            concept=concept,
            segment_label=state.current_segment_label,
            month=month,
            year=year,
            kind=RECORD_KIND_GENERAL_EXPENSE if general_expense else RECORD_KIND_LEDGER,
        )
        return replace(state, next_id=state.next_id + 1), record

    def normalize(
        self,
        rows: Sequence[Sequence[Any]],
        process_family: str,
        general_expense: bool = False,
    ) -> NormalizationResult:
        """Normalize an export.

        Args:
            rows: Raw rows as read from the spreadsheet
            process_family: Family decided by detection ("apk" or "epk"),
                used as the mapping scope
            general_expense: Emit general expense ("segmento") records
                instead of primary ledger ("vuelta") records

        Returns:
            NormalizationResult with records, distinct segment labels in
            order of appearance and messages for skipped rows

        Raises:
            ValidationError: If process_family is not supported
            MalformedDateError: In strict mode, on the first malformed date
        """
        if process_family not in PROCESS_FAMILIES:
            raise ValidationError(invalid_process_family(process_family))

        state = ScanState()
        records: list[TransactionRecord] = []
        segment_labels: dict[str, None] = {}
        skipped: list[str] = []

        for row_num, row in enumerate(rows, start=1):
            try:
                state, record = self.step(state, row, process_family, general_expense)
            except MalformedDateError as e:
                if self.strict:
                    raise MalformedDateError(f"Row {row_num}: {e}") from e
                logger.warning("Skipping row %d: %s", row_num, e)
                skipped.append(f"Row {row_num}: {e}")
                continue

            if record is None:
                continue
            records.append(record)
            if record.segment_label:
                segment_labels.setdefault(record.segment_label, None)

        logger.info(
            "Normalized %d %s records (%d rows skipped)",
            len(records),
            process_family,
            len(skipped),
        )
        return NormalizationResult(
            records=records,
            segment_labels=list(segment_labels),
            skipped_rows=skipped,
        )
