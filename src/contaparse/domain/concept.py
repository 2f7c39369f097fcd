"""Concept domain service."""

import logging
from typing import Optional, Sequence

from contaparse.database.base import Database
from contaparse.domain.entities import RECORD_KINDS, Concept
from contaparse.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    concept_not_found,
    record_not_found,
)
from contaparse.domain.segment import validate_process_family

logger = logging.getLogger(__name__)

MAX_CONCEPT_LENGTH = 100

PREDEFINED_CONCEPTS = (
    "ALIMENTO",
    "COMBUSTIBLE",
    "COSTOS VARIABLES",
    "DEPRECIACIÓN",
    "ENERGÍA ELÉCTRICA",
    "EQUIPO DE TRANSPORTE",
    "FLETES",
    "MANTENIMIENTO",
    "MEDICAMENTOS",
    "OBRA CIVIL",
    "SUELDOS Y SALARIOS",
)


def validate_record_kind(kind: str) -> None:
    if kind not in RECORD_KINDS:
        raise ValidationError(
            f"Invalid record kind '{kind}'. Must be one of: {', '.join(RECORD_KINDS)}"
        )


class ConceptService:
    """Service for the concept list and for concept edits on stored records."""

    def __init__(self, db: Database):
        """Initialize concept service.

        Args:
            db: Database instance
        """
        self.db = db

    def _clean_text(self, text: str) -> str:
        text = text.strip()
        if not text:
            raise ValidationError("Concept cannot be empty")
        if len(text) > MAX_CONCEPT_LENGTH:
            raise ValidationError(f"Concept cannot exceed {MAX_CONCEPT_LENGTH} characters")
        return text

    def list_concepts(self) -> list[Concept]:
        return self.db.list_concepts()

    def add_concept(self, text: str) -> int:
        """Add a concept.

        Args:
            text: Concept text (1-100 characters after trimming)

        Returns:
            Concept ID

        Raises:
            ValidationError: If the text is empty or too long
            ConflictError: If the concept already exists
        """
        text = self._clean_text(text)
        if self.db.get_concept_by_text(text) is not None:
            raise ConflictError(f"Concept '{text}' already exists")
        return self.db.create_concept(text)

    def rename_concept(self, concept_id: int, text: str) -> None:
        """Rename a concept.

        Raises:
            NotFoundError: If the concept doesn't exist
            ConflictError: If another concept already has the new text
        """
        if self.db.get_concept(concept_id) is None:
            raise NotFoundError(concept_not_found(concept_id))
        text = self._clean_text(text)
        existing = self.db.get_concept_by_text(text)
        if existing is not None and existing.id != concept_id:
            raise ConflictError(f"Concept '{text}' already exists")
        self.db.update_concept(concept_id, text)

    def delete_concept(self, concept_id: int) -> None:
        if self.db.get_concept(concept_id) is None:
            raise NotFoundError(concept_not_found(concept_id))
        self.db.delete_concept(concept_id)

    def initialize_predefined(self) -> int:
        """Seed the predefined concepts when the concept list is empty.

        Returns:
            Number of concepts created
        """
        if self.db.list_concepts():
            return 0
        for text in PREDEFINED_CONCEPTS:
            self.db.create_concept(text)
        logger.info("Initialized %d predefined concepts", len(PREDEFINED_CONCEPTS))
        return len(PREDEFINED_CONCEPTS)

    def unique_concepts_from_records(self, process_family: str, kind: str) -> list[str]:
        """Return the distinct non-empty concepts of stored records, sorted."""
        validate_process_family(process_family)
        validate_record_kind(kind)
        records = self.db.list_records(process_family, kind)
        return sorted({record.concept for record in records if record.concept})

    def reassign_record_concept(
        self, process_family: str, kind: str, record_id: int, concept: str
    ) -> None:
        """Set the concept of one stored record.

        Raises:
            NotFoundError: If the record doesn't exist
        """
        validate_process_family(process_family)
        validate_record_kind(kind)
        concept = self._clean_text(concept)
        if self.db.get_record(process_family, kind, record_id) is None:
            raise NotFoundError(record_not_found(record_id, process_family, kind))
        self.db.update_record_concept(process_family, kind, record_id, concept)

    def replace_concepts(
        self,
        process_family: str,
        kind: str,
        selected_concepts: Sequence[str],
        target_concept: Optional[str],
    ) -> int:
        """Replace several concepts by one across stored records.

        Args:
            process_family: "apk" or "epk"
            kind: Record kind
            selected_concepts: Concepts to replace (at least one)
            target_concept: Concept to write instead

        Returns:
            Number of records updated

        Raises:
            ValidationError: If no concept is selected or target is empty
        """
        validate_process_family(process_family)
        validate_record_kind(kind)
        selected = [c.strip() for c in selected_concepts if c and c.strip()]
        if not selected:
            raise ValidationError("Select at least one concept to replace")
        if not target_concept or not target_concept.strip():
            raise ValidationError("Select a target concept")
        target = self._clean_text(target_concept)

        updated = self.db.replace_record_concepts(process_family, kind, selected, target)
        logger.info(
            "Replaced %d concepts with %r in %d %s %s records",
            len(selected),
            target,
            updated,
            process_family,
            kind,
        )
        return updated
