"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional, Sequence

# Import entities directly to avoid circular import through domain/__init__.py
from contaparse.domain.entities import (
    AccountCatalogEntry,
    Concept,
    ConceptMapping,
    Segment,
    TextConceptMapping,
    TransactionRecord,
    UploadRecord,
)


class Database(ABC):
    """Abstract database interface for contaparse.

    Acts as the record store, mapping store and account catalog of the
    domain layer.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Record operations
    @abstractmethod
    def replace_records(
        self, process_family: str, kind: str, records: Sequence[TransactionRecord]
    ) -> None:
        """Replace all records of a process family and kind."""
        pass

    @abstractmethod
    def list_records(self, process_family: str, kind: str) -> list[TransactionRecord]:
        """List records of a process family and kind ordered by record ID."""
        pass

    @abstractmethod
    def get_record(
        self, process_family: str, kind: str, record_id: int
    ) -> Optional[TransactionRecord]:
        """Get a record by its ID within its partition."""
        pass

    @abstractmethod
    def update_record_concept(
        self, process_family: str, kind: str, record_id: int, concept: str
    ) -> None:
        """Update the concept of a single record."""
        pass

    @abstractmethod
    def replace_record_concepts(
        self, process_family: str, kind: str, concepts: Sequence[str], target_concept: str
    ) -> int:
        """Replace every occurrence of the given concepts. Returns updated count."""
        pass

    @abstractmethod
    def clear_records(self, process_family: str, kind: Optional[str] = None) -> int:
        """Delete records of a family, optionally of one kind. Returns deleted count."""
        pass

    # Concept operations
    @abstractmethod
    def create_concept(self, text: str) -> int:
        """Create a concept. Returns concept ID."""
        pass

    @abstractmethod
    def get_concept(self, concept_id: int) -> Optional[Concept]:
        """Get concept by ID."""
        pass

    @abstractmethod
    def get_concept_by_text(self, text: str) -> Optional[Concept]:
        """Get concept by its text."""
        pass

    @abstractmethod
    def list_concepts(self) -> list[Concept]:
        """List all concepts ordered by text."""
        pass

    @abstractmethod
    def update_concept(self, concept_id: int, text: str) -> None:
        """Rename a concept."""
        pass

    @abstractmethod
    def delete_concept(self, concept_id: int) -> None:
        """Delete a concept."""
        pass

    # Account-code mapping operations
    @abstractmethod
    def create_concept_mapping(
        self, account_code: str, source_text: str, target_concept: str, scope: str
    ) -> int:
        """Create an account-code mapping. Returns mapping ID."""
        pass

    @abstractmethod
    def get_concept_mapping(self, mapping_id: int) -> Optional[ConceptMapping]:
        """Get account-code mapping by ID."""
        pass

    @abstractmethod
    def list_concept_mappings(self) -> list[ConceptMapping]:
        """List account-code mappings in declaration order."""
        pass

    @abstractmethod
    def update_concept_mapping(
        self,
        mapping_id: int,
        account_code: Optional[str] = None,
        source_text: Optional[str] = None,
        target_concept: Optional[str] = None,
        scope: Optional[str] = None,
    ) -> None:
        """Update account-code mapping fields."""
        pass

    @abstractmethod
    def delete_concept_mapping(self, mapping_id: int) -> None:
        """Delete an account-code mapping."""
        pass

    # Text mapping operations
    @abstractmethod
    def create_text_mapping(
        self, pattern: str, match_mode: str, target_concept: str, scope: str, priority: int
    ) -> int:
        """Create a text mapping. Returns mapping ID."""
        pass

    @abstractmethod
    def get_text_mapping(self, mapping_id: int) -> Optional[TextConceptMapping]:
        """Get text mapping by ID."""
        pass

    @abstractmethod
    def list_text_mappings(self) -> list[TextConceptMapping]:
        """List text mappings in declaration order."""
        pass

    @abstractmethod
    def update_text_mapping(
        self,
        mapping_id: int,
        pattern: Optional[str] = None,
        match_mode: Optional[str] = None,
        target_concept: Optional[str] = None,
        scope: Optional[str] = None,
        priority: Optional[int] = None,
    ) -> None:
        """Update text mapping fields."""
        pass

    @abstractmethod
    def delete_text_mapping(self, mapping_id: int) -> None:
        """Delete a text mapping."""
        pass

    @abstractmethod
    def delete_all_text_mappings(self) -> int:
        """Delete every text mapping. Returns deleted count."""
        pass

    # Segment operations
    @abstractmethod
    def list_segments(self, process_family: str) -> list[Segment]:
        """List segments of a process family in insertion order."""
        pass

    @abstractmethod
    def upsert_segment(self, process_family: str, label: str, weight: int) -> None:
        """Create a segment or update its weight."""
        pass

    @abstractmethod
    def delete_segment(self, process_family: str, label: str) -> None:
        """Delete a segment."""
        pass

    # Account catalog operations
    @abstractmethod
    def register_account(
        self, full_code: str, account_code: str, account_name: str, process_family: str
    ) -> None:
        """Add an account to the catalog or bump its occurrence count."""
        pass

    @abstractmethod
    def list_account_catalog(self, process_family: Optional[str] = None) -> list[AccountCatalogEntry]:
        """List catalog entries ordered by family and code."""
        pass

    @abstractmethod
    def clear_account_catalog(self) -> int:
        """Delete every catalog entry. Returns deleted count."""
        pass

    # Upload history operations
    @abstractmethod
    def record_upload(self, month: str, file_type: str, file_name: str, record_count: int) -> int:
        """Record an upload. Returns upload ID."""
        pass

    @abstractmethod
    def get_upload(self, month: str, file_type: str) -> Optional[UploadRecord]:
        """Get the upload of a file type in a month."""
        pass

    @abstractmethod
    def delete_upload(self, upload_id: int) -> None:
        """Delete an upload history entry."""
        pass

    @abstractmethod
    def list_uploads(self, month: Optional[str] = None) -> list[UploadRecord]:
        """List uploads, optionally for one month."""
        pass
