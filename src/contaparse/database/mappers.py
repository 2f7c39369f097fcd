"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, making it easy to change when
the database schema changes.
"""

from decimal import Decimal

from contaparse.domain import entities as domain
from contaparse.database.models import (
    AccountCatalogEntry as ORMAccountCatalogEntry,
    Concept as ORMConcept,
    ConceptMapping as ORMConceptMapping,
    LedgerRecord as ORMLedgerRecord,
    Segment as ORMSegment,
    TextConceptMapping as ORMTextConceptMapping,
    Upload as ORMUpload,
)


def record_to_domain(orm_record: ORMLedgerRecord) -> domain.TransactionRecord:
    """Convert SQLAlchemy LedgerRecord model to domain TransactionRecord entity."""
    return domain.TransactionRecord(
        id=orm_record.record_id,
        date=orm_record.date,
        movement_type=orm_record.movement_type,
        document_number=orm_record.document_number,
        counterparty_name=orm_record.counterparty_name,
        invoice_ref=orm_record.invoice_ref,
        amount=Decimal(orm_record.amount),
        concept=orm_record.concept,
        segment_label=orm_record.segment_label,
        month=orm_record.month,
        year=orm_record.year,
        kind=orm_record.kind,
    )


def record_to_orm(
    record: domain.TransactionRecord, process_family: str, kind: str
) -> ORMLedgerRecord:
    """Convert domain TransactionRecord entity to a new SQLAlchemy LedgerRecord."""
    return ORMLedgerRecord(
        process_family=process_family,
        kind=kind,
        record_id=record.id,
        date=record.date,
        movement_type=record.movement_type,
        document_number=record.document_number,
        counterparty_name=record.counterparty_name,
        invoice_ref=record.invoice_ref,
        amount=record.amount,
        concept=record.concept,
        segment_label=record.segment_label,
        month=record.month,
        year=record.year,
    )


def concept_to_domain(orm_concept: ORMConcept) -> domain.Concept:
    """Convert SQLAlchemy Concept model to domain Concept entity."""
    return domain.Concept(
        id=orm_concept.id,
        text=orm_concept.text,
        created_at=orm_concept.created_at,
    )


def concept_mapping_to_domain(orm_mapping: ORMConceptMapping) -> domain.ConceptMapping:
    """Convert SQLAlchemy ConceptMapping model to domain ConceptMapping entity."""
    return domain.ConceptMapping(
        id=orm_mapping.id,
        account_code=orm_mapping.account_code,
        source_text=orm_mapping.source_text,
        target_concept=orm_mapping.target_concept,
        scope=orm_mapping.scope,
        created_at=orm_mapping.created_at,
        updated_at=orm_mapping.updated_at,
    )


def text_mapping_to_domain(orm_mapping: ORMTextConceptMapping) -> domain.TextConceptMapping:
    """Convert SQLAlchemy TextConceptMapping model to domain entity."""
    return domain.TextConceptMapping(
        id=orm_mapping.id,
        pattern=orm_mapping.pattern,
        match_mode=orm_mapping.match_mode,
        target_concept=orm_mapping.target_concept,
        scope=orm_mapping.scope,
        priority=orm_mapping.priority,
        created_at=orm_mapping.created_at,
        updated_at=orm_mapping.updated_at,
    )


def segment_to_domain(orm_segment: ORMSegment) -> domain.Segment:
    """Convert SQLAlchemy Segment model to domain Segment entity."""
    return domain.Segment(
        label=orm_segment.label,
        weight=orm_segment.weight,
        process_family=orm_segment.process_family,
    )


def catalog_entry_to_domain(orm_entry: ORMAccountCatalogEntry) -> domain.AccountCatalogEntry:
    """Convert SQLAlchemy AccountCatalogEntry model to domain entity."""
    return domain.AccountCatalogEntry(
        id=orm_entry.id,
        full_code=orm_entry.full_code,
        account_code=orm_entry.account_code,
        account_name=orm_entry.account_name,
        process_family=orm_entry.process_family,
        occurrences=orm_entry.occurrences,
        first_seen_at=orm_entry.first_seen_at,
        last_seen_at=orm_entry.last_seen_at,
    )


def upload_to_domain(orm_upload: ORMUpload) -> domain.UploadRecord:
    """Convert SQLAlchemy Upload model to domain UploadRecord entity."""
    return domain.UploadRecord(
        id=orm_upload.id,
        month=orm_upload.month,
        file_type=orm_upload.file_type,
        file_name=orm_upload.file_name,
        record_count=orm_upload.record_count,
        uploaded_at=orm_upload.uploaded_at,
    )
