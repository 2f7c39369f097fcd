"""Concept resolution.

The concept shown for a transaction is resolved through ordered strategies:
text-pattern mappings (matched against the transaction's counterparty text),
then account-code mappings, then the account name from the export itself.
An older generation of the tool mapped general expense accounts through a
fixed table keyed by account code; it is kept as an opt-in strategy.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from contaparse.database.base import Database
from contaparse.domain.entities import ConceptMapping, TextConceptMapping

logger = logging.getLogger(__name__)

LEGACY_FIRST = "first"
LEGACY_FALLBACK = "fallback"
LEGACY_POSITIONS = (LEGACY_FIRST, LEGACY_FALLBACK)

LEGACY_CATEGORY_OVERRIDES = {
    "001": "COSTOS VARIABLES",
    "002": "COSTOS VARIABLES",
    "010": "SUELDOS Y SALARIOS",
    "030": "DEPRECIACIÓN",
    "031": "EQUIPO DE TRANSPORTE",
    "040": "COMBUSTIBLE",
    "050": "MANTENIMIENTO",
    "060": "FLETES",
}


def normalize_code(code: str) -> str:
    """Strip leading zeros so "020" and "20" compare equal ("000" -> "0")."""
    return code.strip().lstrip("0") or "0"


def scope_applies(mapping_scope: str, scope: str) -> bool:
    return mapping_scope == "both" or mapping_scope == scope


def pattern_matches(pattern: str, match_mode: str, text: str) -> bool:
    """Case-insensitive test of a text mapping pattern."""
    pattern = pattern.strip().upper()
    text = text.strip().upper()
    if not pattern:
        return False
    if match_mode == "prefix":
        return text.startswith(pattern)
    if match_mode == "substring":
        return pattern in text
    if match_mode == "exact":
        return text == pattern
    return False


class MappingStrategy(ABC):
    """One tier of concept resolution."""

    name = "strategy"

    @abstractmethod
    def resolve(
        self, account_code: Optional[str], candidate_text: str, scope: str
    ) -> Optional[str]:
        """Return the target concept, or None if this tier has no opinion."""
        pass


class TextPatternStrategy(MappingStrategy):
    """Resolve by the first text mapping (in priority order) matching the text."""

    name = "text"

    def __init__(self, mappings: Sequence[TextConceptMapping]):
        # sorted() is stable: equal priorities keep declaration order
        self.mappings = sorted(mappings, key=lambda m: m.priority)

    def find(self, candidate_text: str, scope: str) -> Optional[TextConceptMapping]:
        if not candidate_text:
            return None
        for mapping in self.mappings:
            if not scope_applies(mapping.scope, scope):
                continue
            if pattern_matches(mapping.pattern, mapping.match_mode, candidate_text):
                return mapping
        return None

    def resolve(self, account_code, candidate_text, scope):
        mapping = self.find(candidate_text, scope)
        return mapping.target_concept if mapping else None


class AccountCodeStrategy(MappingStrategy):
    """Resolve by account code, ignoring leading zeros."""

    name = "code"

    def __init__(self, mappings: Sequence[ConceptMapping]):
        self.mappings = list(mappings)

    def find(self, account_code: Optional[str], scope: str) -> Optional[ConceptMapping]:
        if account_code is None:
            return None
        wanted = normalize_code(account_code)
        for mapping in self.mappings:
            if not scope_applies(mapping.scope, scope):
                continue
            if normalize_code(mapping.account_code) == wanted:
                return mapping
        return None

    def resolve(self, account_code, candidate_text, scope):
        mapping = self.find(account_code, scope)
        return mapping.target_concept if mapping else None


class LegacyCategoryStrategy(MappingStrategy):
    """Fixed general-expense categories keyed by account code."""

    name = "legacy"

    def __init__(self, overrides: Optional[dict[str, str]] = None):
        table = LEGACY_CATEGORY_OVERRIDES if overrides is None else overrides
        self.overrides = {normalize_code(code): concept for code, concept in table.items()}

    def resolve(self, account_code, candidate_text, scope):
        if account_code is None:
            return None
        return self.overrides.get(normalize_code(account_code))


def first_match(
    strategies: Sequence[MappingStrategy],
    account_code: Optional[str],
    candidate_text: str,
    scope: str,
) -> Optional[str]:
    """Return the first non-None answer of the strategies, in order."""
    for strategy in strategies:
        concept = strategy.resolve(account_code, candidate_text, scope)
        if concept is not None:
            logger.debug("Concept %r resolved by %s mapping", concept, strategy.name)
            return concept
    return None


class ConceptMappingResolver:
    """Resolve display concepts from a snapshot of the mapping tables."""

    def __init__(
        self,
        text_mappings: Sequence[TextConceptMapping] = (),
        code_mappings: Sequence[ConceptMapping] = (),
        legacy_strategy: Optional[LegacyCategoryStrategy] = None,
    ):
        """Initialize resolver.

        Args:
            text_mappings: Text-pattern mappings, in declaration order
            code_mappings: Account-code mappings, in declaration order
            legacy_strategy: Strategy used when a caller asks for the
                legacy table; defaults to the built-in table
        """
        self.text_strategy = TextPatternStrategy(text_mappings)
        self.code_strategy = AccountCodeStrategy(code_mappings)
        self.legacy_strategy = legacy_strategy or LegacyCategoryStrategy()

    @classmethod
    def from_database(cls, db: Database) -> "ConceptMappingResolver":
        """Load both mapping tables; storage errors propagate."""
        text_mappings = db.list_text_mappings()
        code_mappings = db.list_concept_mappings()
        logger.debug(
            "Loaded %d text mappings and %d code mappings",
            len(text_mappings),
            len(code_mappings),
        )
        return cls(text_mappings, code_mappings)

    def resolve_by_text(self, candidate_text: str, scope: str) -> Optional[TextConceptMapping]:
        return self.text_strategy.find(candidate_text, scope)

    def resolve_by_code(self, account_code: Optional[str], scope: str) -> Optional[ConceptMapping]:
        return self.code_strategy.find(account_code, scope)

    def strategies(self, legacy: Optional[str] = None) -> list[MappingStrategy]:
        """Build the strategy chain.

        Args:
            legacy: None to leave the legacy table out, "first" to run it
                before the generic tiers, "fallback" to run it after them
        """
        chain: list[MappingStrategy] = [self.text_strategy, self.code_strategy]
        if legacy == LEGACY_FIRST:
            chain.insert(0, self.legacy_strategy)
        elif legacy == LEGACY_FALLBACK:
            chain.append(self.legacy_strategy)
        elif legacy is not None:
            raise ValueError(
                f"Invalid legacy position '{legacy}'. Must be one of: {', '.join(LEGACY_POSITIONS)}"
            )
        return chain

    def resolve(
        self,
        account_code: Optional[str],
        original_label: str,
        candidate_text: str,
        scope: str,
        legacy: Optional[str] = None,
    ) -> str:
        """Resolve the display concept for one transaction.

        Args:
            account_code: Second group of the current account code
            original_label: Account name as it appears in the export
            candidate_text: Counterparty/concept text of the data row
            scope: Process family of the file ("apk" or "epk")
            legacy: Position of the legacy table, see strategies()

        Returns:
            The mapped concept, or original_label when nothing matches
        """
        concept = first_match(self.strategies(legacy), account_code, candidate_text, scope)
        return original_label if concept is None else concept
