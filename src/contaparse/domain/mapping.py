"""Concept mapping domain services.

Both mapping tables can be exchanged as pipe-delimited text files:

- account-code mappings: ``CODE|SOURCE TEXT|TARGET CONCEPT|SCOPE``
- text mappings: ``PATTERN|MATCH MODE|TARGET CONCEPT|PRIORITY|SCOPE``
"""

import logging
from typing import Optional

from contaparse.database.base import Database
from contaparse.domain.entities import MAPPING_SCOPES, MATCH_MODES, ConceptMapping, TextConceptMapping
from contaparse.domain.errors import (
    NotFoundError,
    ValidationError,
    invalid_scope,
    mapping_not_found,
    text_mapping_not_found,
)

logger = logging.getLogger(__name__)

# Match mode names used by earlier exports
MATCH_MODE_ALIASES = {
    "startswith": "prefix",
    "contains": "substring",
}


def normalize_scope(scope: str) -> str:
    scope = scope.strip().lower()
    if scope not in MAPPING_SCOPES:
        raise ValidationError(invalid_scope(scope))
    return scope


def normalize_match_mode(match_mode: str) -> str:
    mode = match_mode.strip().lower()
    mode = MATCH_MODE_ALIASES.get(mode, mode)
    if mode not in MATCH_MODES:
        raise ValidationError(
            f"Invalid match mode '{match_mode}'. Must be one of: {', '.join(MATCH_MODES)}"
        )
    return mode


def _required(value: Optional[str], field_name: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{field_name} cannot be empty")
    return value.strip()


class ConceptMappingService:
    """Service for account-code concept mappings."""

    def __init__(self, db: Database):
        """Initialize concept mapping service.

        Args:
            db: Database instance
        """
        self.db = db

    def list_mappings(self) -> list[ConceptMapping]:
        return self.db.list_concept_mappings()

    def get_mapping(self, mapping_id: int) -> Optional[ConceptMapping]:
        return self.db.get_concept_mapping(mapping_id)

    def add_mapping(
        self,
        account_code: str,
        target_concept: str,
        source_text: str = "",
        scope: str = "both",
    ) -> int:
        """Add an account-code mapping.

        Args:
            account_code: Second group of the account code (e.g. "020")
            target_concept: Concept to resolve to
            source_text: Account name the mapping was created from
            scope: "apk", "epk" or "both"

        Returns:
            Mapping ID

        Raises:
            ValidationError: If code or target is empty or scope is invalid
        """
        account_code = _required(account_code, "Account code")
        target_concept = _required(target_concept, "Target concept")
        scope = normalize_scope(scope)
        return self.db.create_concept_mapping(
            account_code=account_code,
            source_text=(source_text or "").strip(),
            target_concept=target_concept,
            scope=scope,
        )

    def update_mapping(
        self,
        mapping_id: int,
        account_code: Optional[str] = None,
        source_text: Optional[str] = None,
        target_concept: Optional[str] = None,
        scope: Optional[str] = None,
    ) -> None:
        """Update an account-code mapping.

        Raises:
            NotFoundError: If the mapping doesn't exist
        """
        if self.db.get_concept_mapping(mapping_id) is None:
            raise NotFoundError(mapping_not_found(mapping_id))
        self.db.update_concept_mapping(
            mapping_id,
            account_code=_required(account_code, "Account code") if account_code is not None else None,
            source_text=source_text.strip() if source_text is not None else None,
            target_concept=(
                _required(target_concept, "Target concept") if target_concept is not None else None
            ),
            scope=normalize_scope(scope) if scope is not None else None,
        )

    def delete_mapping(self, mapping_id: int) -> None:
        if self.db.get_concept_mapping(mapping_id) is None:
            raise NotFoundError(mapping_not_found(mapping_id))
        self.db.delete_concept_mapping(mapping_id)

    def import_text(self, content: str) -> int:
        """Append mappings from pipe-delimited text.

        Lines with fewer than two fields are ignored. The target defaults to
        the source text and the scope to "both".

        Returns:
            Number of mappings imported

        Raises:
            ValidationError: If a line carries an invalid scope
        """
        parsed = []
        for line_num, line in enumerate(content.splitlines(), start=1):
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            parts = [part.strip() for part in line.split("|")]
            if len(parts) < 2 or not parts[0]:
                logger.warning("Ignoring mapping line %d: %r", line_num, line)
                continue

            account_code, source_text = parts[0], parts[1]
            target = parts[2] if len(parts) > 2 and parts[2] else source_text
            try:
                scope = normalize_scope(parts[3]) if len(parts) > 3 and parts[3] else "both"
            except ValidationError as e:
                raise ValidationError(f"Line {line_num}: {e}") from e
            if not target:
                logger.warning("Ignoring mapping line %d without target: %r", line_num, line)
                continue
            parsed.append((account_code, source_text, target, scope))

        for account_code, source_text, target, scope in parsed:
            self.db.create_concept_mapping(account_code, source_text, target, scope)
        return len(parsed)

    def export_text(self) -> str:
        return "\n".join(
            f"{m.account_code}|{m.source_text}|{m.target_concept}|{m.scope}"
            for m in self.db.list_concept_mappings()
        )


class TextMappingService:
    """Service for text-pattern concept mappings."""

    def __init__(self, db: Database):
        """Initialize text mapping service.

        Args:
            db: Database instance
        """
        self.db = db

    def list_mappings(self) -> list[TextConceptMapping]:
        """List text mappings in the order they are applied."""
        return sorted(self.db.list_text_mappings(), key=lambda m: m.priority)

    def get_mapping(self, mapping_id: int) -> Optional[TextConceptMapping]:
        return self.db.get_text_mapping(mapping_id)

    def add_mapping(
        self,
        pattern: str,
        target_concept: str,
        match_mode: str = "prefix",
        scope: str = "apk",
        priority: Optional[int] = None,
    ) -> int:
        """Add a text mapping.

        Args:
            pattern: Text to look for in the counterparty text
            target_concept: Concept to resolve to
            match_mode: "prefix", "substring" or "exact"
            scope: "apk", "epk" or "both"
            priority: Lower values are tried first; defaults to after the
                last existing mapping

        Returns:
            Mapping ID

        Raises:
            ValidationError: If any field is invalid
        """
        pattern = _required(pattern, "Pattern")
        target_concept = _required(target_concept, "Target concept")
        match_mode = normalize_match_mode(match_mode)
        scope = normalize_scope(scope)
        if priority is None:
            priority = len(self.db.list_text_mappings()) + 1

        return self.db.create_text_mapping(
            pattern=pattern,
            match_mode=match_mode,
            target_concept=target_concept,
            scope=scope,
            priority=priority,
        )

    def update_mapping(
        self,
        mapping_id: int,
        pattern: Optional[str] = None,
        target_concept: Optional[str] = None,
        match_mode: Optional[str] = None,
        scope: Optional[str] = None,
        priority: Optional[int] = None,
    ) -> None:
        """Update a text mapping.

        Raises:
            NotFoundError: If the mapping doesn't exist
        """
        if self.db.get_text_mapping(mapping_id) is None:
            raise NotFoundError(text_mapping_not_found(mapping_id))
        self.db.update_text_mapping(
            mapping_id,
            pattern=_required(pattern, "Pattern") if pattern is not None else None,
            match_mode=normalize_match_mode(match_mode) if match_mode is not None else None,
            target_concept=(
                _required(target_concept, "Target concept") if target_concept is not None else None
            ),
            scope=normalize_scope(scope) if scope is not None else None,
            priority=priority,
        )

    def delete_mapping(self, mapping_id: int) -> None:
        if self.db.get_text_mapping(mapping_id) is None:
            raise NotFoundError(text_mapping_not_found(mapping_id))
        self.db.delete_text_mapping(mapping_id)

    def import_text(self, content: str) -> int:
        """Replace all text mappings with the ones in pipe-delimited text.

        The match mode defaults to "prefix", the priority to the line's
        position and the scope to "apk". Nothing is replaced if any line is
        invalid.

        Returns:
            Number of mappings imported

        Raises:
            ValidationError: If a line has fewer than three fields or an
                invalid match mode, priority or scope
        """
        lines = [line.strip() for line in content.splitlines()]
        lines = [line for line in lines if line and not line.startswith("#")]

        parsed = []
        for index, line in enumerate(lines, start=1):
            parts = [part.strip() for part in line.split("|")]
            if len(parts) < 3 or not parts[0] or not parts[2]:
                raise ValidationError(f"Line {index}: invalid format")
            try:
                match_mode = normalize_match_mode(parts[1] or "prefix")
                priority = int(parts[3]) if len(parts) > 3 and parts[3] else index
                scope = normalize_scope(parts[4]) if len(parts) > 4 and parts[4] else "apk"
            except ValueError as e:
                raise ValidationError(f"Line {index}: {e}") from e
            parsed.append((parts[0], match_mode, parts[2], scope, priority))

        self.db.delete_all_text_mappings()
        for pattern, match_mode, target, scope, priority in parsed:
            self.db.create_text_mapping(pattern, match_mode, target, scope, priority)
        logger.info("Imported %d text mappings", len(parsed))
        return len(parsed)

    def export_text(self) -> str:
        return "\n".join(
            f"{m.pattern}|{m.match_mode}|{m.target_concept}|{m.priority}|{m.scope}"
            for m in self.list_mappings()
        )
