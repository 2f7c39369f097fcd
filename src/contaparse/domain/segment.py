"""Segment domain service."""

import logging
from typing import Sequence

from contaparse.database.base import Database
from contaparse.domain.entities import PROCESS_FAMILIES, Segment
from contaparse.domain.errors import NotFoundError, ValidationError, invalid_process_family

logger = logging.getLogger(__name__)


def validate_process_family(process_family: str) -> None:
    """Raise ValidationError unless process_family is "apk" or "epk"."""
    if process_family not in PROCESS_FAMILIES:
        raise ValidationError(invalid_process_family(process_family))


class SegmentService:
    """Service for managing proration segments and their weights."""

    def __init__(self, db: Database):
        """Initialize segment service.

        Args:
            db: Database instance
        """
        self.db = db

    def list_segments(self, process_family: str) -> list[Segment]:
        validate_process_family(process_family)
        return self.db.list_segments(process_family)

    def set_segment(self, process_family: str, label: str, weight: int) -> Segment:
        """Create a segment or update its weight.

        Args:
            process_family: "apk" or "epk"
            label: Segment name (stored upper-cased)
            weight: Non-negative integer weight (e.g. head count)

        Returns:
            The stored segment

        Raises:
            ValidationError: If the family, label or weight is invalid
        """
        validate_process_family(process_family)
        label = label.strip().upper()
        if not label:
            raise ValidationError("Segment label cannot be empty")
        if isinstance(weight, bool) or not isinstance(weight, int):
            raise ValidationError(f"Segment weight must be an integer, got '{weight}'")
        if weight < 0:
            raise ValidationError(f"Segment weight cannot be negative, got {weight}")

        self.db.upsert_segment(process_family, label, weight)
        return Segment(label=label, weight=weight, process_family=process_family)

    def delete_segment(self, process_family: str, label: str) -> None:
        """Delete a segment.

        Raises:
            NotFoundError: If the segment doesn't exist
        """
        validate_process_family(process_family)
        label = label.strip().upper()
        existing = {segment.label for segment in self.db.list_segments(process_family)}
        if label not in existing:
            raise NotFoundError(f"Segment '{label}' not found for {process_family}")
        self.db.delete_segment(process_family, label)

    def register_labels(self, process_family: str, labels: Sequence[str]) -> list[str]:
        """Add segments encountered in an upload with weight 0.

        Existing segments keep their weights.

        Returns:
            Labels that were added
        """
        validate_process_family(process_family)
        existing = {segment.label for segment in self.db.list_segments(process_family)}
        added = []
        for label in labels:
            label = label.strip().upper()
            if not label or label in existing:
                continue
            self.db.upsert_segment(process_family, label, 0)
            existing.add(label)
            added.append(label)

        if added:
            logger.info("Registered %d new %s segments: %s", len(added), process_family, added)
        return added

    def total_weight(self, process_family: str) -> int:
        return sum(segment.weight for segment in self.list_segments(process_family))
