"""SQLAlchemy models for contaparse database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    Numeric,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, sessionmaker, Session

Base = declarative_base()


def _now() -> datetime:
    return datetime.now(UTC)


class LedgerRecord(Base):
    """Normalized transaction record, partitioned by process family and kind."""

    __tablename__ = "ledger_records"

    id = Column(Integer, primary_key=True)
    process_family = Column(String, nullable=False, index=True)
    kind = Column(String, nullable=False, index=True)
    record_id = Column(Integer, nullable=False)
    date = Column(String, nullable=False)
    movement_type = Column(String, nullable=False, default="")
    document_number = Column(String, nullable=False, default="")
    counterparty_name = Column(String, nullable=False, default="")
    invoice_ref = Column(String, nullable=False, default="")
    amount = Column(Numeric(14, 2), nullable=False)
    concept = Column(String, nullable=False, default="")
    segment_label = Column(String, nullable=False, default="")
    month = Column(String, nullable=False)
    year = Column(String, nullable=False)

    __table_args__ = (
        UniqueConstraint("process_family", "kind", "record_id", name="uq_partition_record_id"),
    )


class Concept(Base):
    """Concept model."""

    __tablename__ = "concepts"

    id = Column(Integer, primary_key=True)
    text = Column(String, unique=True, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)


class ConceptMapping(Base):
    """Account-code concept mapping model."""

    __tablename__ = "concept_mappings"

    id = Column(Integer, primary_key=True)
    account_code = Column(String, nullable=False)
    source_text = Column(String, nullable=False, default="")
    target_concept = Column(String, nullable=False)
    scope = Column(String, nullable=False, default="both")
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)


class TextConceptMapping(Base):
    """Text-pattern concept mapping model."""

    __tablename__ = "text_concept_mappings"

    id = Column(Integer, primary_key=True)
    pattern = Column(String, nullable=False)
    match_mode = Column(String, nullable=False, default="prefix")
    target_concept = Column(String, nullable=False)
    scope = Column(String, nullable=False, default="apk")
    priority = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)


class Segment(Base):
    """Proration segment model."""

    __tablename__ = "segments"

    id = Column(Integer, primary_key=True)
    process_family = Column(String, nullable=False)
    label = Column(String, nullable=False)
    weight = Column(Integer, nullable=False, default=0)

    __table_args__ = (UniqueConstraint("process_family", "label", name="uq_family_segment"),)


class AccountCatalogEntry(Base):
    """Account seen in an uploaded ledger."""

    __tablename__ = "account_catalog"

    id = Column(Integer, primary_key=True)
    full_code = Column(String, nullable=False)
    account_code = Column(String, nullable=False)
    account_name = Column(String, nullable=False, default="")
    process_family = Column(String, nullable=False)
    occurrences = Column(Integer, nullable=False, default=1)
    first_seen_at = Column(DateTime, default=_now, nullable=False)
    last_seen_at = Column(DateTime, default=_now, nullable=False)

    __table_args__ = (
        UniqueConstraint("full_code", "process_family", name="uq_catalog_code_family"),
    )


class Upload(Base):
    """Upload history model."""

    __tablename__ = "uploads"

    id = Column(Integer, primary_key=True)
    month = Column(String, nullable=False)
    file_type = Column(String, nullable=False)
    file_name = Column(String, nullable=False)
    record_count = Column(Integer, nullable=False, default=0)
    uploaded_at = Column(DateTime, default=_now, nullable=False)

    __table_args__ = (UniqueConstraint("month", "file_type", name="uq_month_file_type"),)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
