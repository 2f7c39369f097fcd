"""Proration of general expenses across segments."""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from contaparse.database.base import Database
from contaparse.domain.entities import (
    RECORD_KIND_GENERAL_EXPENSE,
    RECORD_KIND_PRORATION,
    Segment,
    TransactionRecord,
)
from contaparse.domain.errors import ProrationError, no_distributable_base
from contaparse.domain.segment import validate_process_family
from contaparse.utils.amount_parser import round_half_up
from contaparse.utils.date_parser import (
    MONTH_ABBREVIATIONS,
    format_ledger_date,
    last_day_of_previous_month,
)

logger = logging.getLogger(__name__)

PRORATION_SUFFIX = " (prorrateo)"


def concept_totals(records: Sequence[TransactionRecord]) -> dict[str, Decimal]:
    """Sum amounts per concept, in order of first appearance.

    Records without a concept or with a zero amount are ignored.
    """
    totals: dict[str, Decimal] = {}
    for record in records:
        if not record.concept or not record.amount:
            continue
        totals[record.concept] = totals.get(record.concept, Decimal("0")) + record.amount
    return totals


def generate_proration(
    records: Sequence[TransactionRecord],
    segments: Sequence[Segment],
    today: Optional[date] = None,
) -> list[TransactionRecord]:
    """Distribute each concept total across segments by weight.

    One record is emitted per (concept, segment) pair with
    amount = total * weight / total weight, rounded half-up to 2 decimals
    independently per pair, so a concept's parts may differ from its total
    by a few cents. Records are dated on the last day of the month before
    today.

    Args:
        records: General expense records
        segments: Segments with their weights
        today: Reference date (defaults to today)

    Returns:
        List of proration records

    Raises:
        ProrationError: If there are no segments or their weights sum to 0
    """
    total_weight = sum(segment.weight for segment in segments)
    if not segments or total_weight <= 0:
        raise ProrationError(no_distributable_base(len(segments), total_weight))

    period_end = last_day_of_previous_month(today)
    date_text = format_ledger_date(period_end)
    month = MONTH_ABBREVIATIONS[period_end.month - 1]
    year = str(period_end.year)

    proration: list[TransactionRecord] = []
    for concept, total in concept_totals(records).items():
        for segment in segments:
            amount = round_half_up(total * Decimal(segment.weight) / Decimal(total_weight))
            proration.append(
                TransactionRecord(
                    id=len(proration) + 1,
                    date=date_text,
                    movement_type="",
                    document_number="",
                    counterparty_name=f"{concept}{PRORATION_SUFFIX}",
                    invoice_ref="",
                    amount=amount,
                    concept=concept,
                    segment_label=segment.label,
                    month=month,
                    year=year,
                    kind=RECORD_KIND_PRORATION,
                )
            )
    return proration


class ProrationService:
    """Service for generating and storing proration records."""

    def __init__(self, db: Database):
        """Initialize proration service.

        Args:
            db: Database instance
        """
        self.db = db

    def generate(self, process_family: str, today: Optional[date] = None) -> list[TransactionRecord]:
        """Prorate the stored general expenses of a process family.

        The previous proration of the family is replaced.

        Args:
            process_family: "apk" or "epk"
            today: Reference date (defaults to today)

        Returns:
            The stored proration records

        Raises:
            ValidationError: If process_family is invalid
            ProrationError: If the family has no segments or zero total weight
        """
        validate_process_family(process_family)
        expenses = self.db.list_records(process_family, RECORD_KIND_GENERAL_EXPENSE)
        segments = self.db.list_segments(process_family)

        proration = generate_proration(expenses, segments, today=today)
        self.db.replace_records(process_family, RECORD_KIND_PRORATION, proration)
        logger.info(
            "Generated %d proration records for %s from %d general expense records",
            len(proration),
            process_family,
            len(expenses),
        )
        return proration

    def list_proration(self, process_family: str) -> list[TransactionRecord]:
        validate_process_family(process_family)
        return self.db.list_records(process_family, RECORD_KIND_PRORATION)
