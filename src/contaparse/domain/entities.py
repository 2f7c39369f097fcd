"""Domain model entities for contaparse.

These are pure data classes representing ledger concepts, independent of the
database schema and of the spreadsheet layout they were read from.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

PROCESS_FAMILIES = ("apk", "epk")
MAPPING_SCOPES = ("apk", "epk", "both")
MATCH_MODES = ("prefix", "substring", "exact")

RECORD_KIND_LEDGER = "ledger"
RECORD_KIND_GENERAL_EXPENSE = "general_expense"
RECORD_KIND_PRORATION = "proration"
RECORD_KINDS = (RECORD_KIND_LEDGER, RECORD_KIND_GENERAL_EXPENSE, RECORD_KIND_PRORATION)


@dataclass(frozen=True)
class AccountCode:
    """Decomposed hierarchical account code (e.g. 132-020-000-000-00)."""

    full: str
    main_group: str
    account_code: str


@dataclass(frozen=True)
class TransactionRecord:
    """Normalized ledger transaction.

    Primary ledger records carry their segment in the "vuelta" column and
    general expense records in the "segmento" column; proration records are
    synthetic and reuse the "vuelta" column.
    """

    id: int
    date: str
    movement_type: str
    document_number: str
    counterparty_name: str
    invoice_ref: str
    amount: Decimal
    concept: str
    segment_label: str
    month: str
    year: str
    kind: str = RECORD_KIND_LEDGER

    @property
    def segment_field(self) -> str:
        """Column name of the segment value for this record variant."""
        if self.kind == RECORD_KIND_GENERAL_EXPENSE:
            return "segmento"
        return "vuelta"

    @property
    def is_general_expense(self) -> bool:
        return self.kind == RECORD_KIND_GENERAL_EXPENSE


@dataclass(frozen=True)
class FileDetectionResult:
    """Classification of a raw export spreadsheet."""

    process_family: str
    has_segment_breakdown: bool
    is_general_expense: bool
    period: str
    data_group: str
    confidence: int
    indicators: dict[str, bool] = field(default_factory=dict)


@dataclass(frozen=True)
class ConceptMapping:
    """Account-code based concept mapping."""

    id: int
    account_code: str
    source_text: str
    target_concept: str
    scope: str
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class TextConceptMapping:
    """Text-pattern based concept mapping. Lower priority values win."""

    id: int
    pattern: str
    match_mode: str
    target_concept: str
    scope: str
    priority: int
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class Segment:
    """Proration weight unit (e.g. a production batch and its head count)."""

    label: str
    weight: int
    process_family: Optional[str] = None


@dataclass(frozen=True)
class Concept:
    """Concept (expense category) available for manual reassignment."""

    id: int
    text: str
    created_at: datetime


@dataclass(frozen=True)
class AccountCatalogEntry:
    """Account seen in an uploaded ledger."""

    id: int
    full_code: str
    account_code: str
    account_name: str
    process_family: str
    occurrences: int
    first_seen_at: datetime
    last_seen_at: datetime


@dataclass(frozen=True)
class UploadRecord:
    """Upload history entry used to prevent repeated monthly uploads."""

    id: int
    month: str
    file_type: str
    file_name: str
    record_count: int
    uploaded_at: datetime


@dataclass(frozen=True)
class NormalizationResult:
    """Output of one normalization pass over a spreadsheet."""

    records: list[TransactionRecord]
    segment_labels: list[str]
    skipped_rows: list[str]
