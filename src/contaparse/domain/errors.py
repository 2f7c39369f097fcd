"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations or repeated uploads."""


class MalformedDateError(ValidationError):
    """A date-shaped cell carries an unknown month token."""


class ProrationError(DomainError):
    """Proration cannot run because there is no distributable base."""


def unknown_month(token: str, date_text: str) -> str:
    """Return message for a date with an unrecognized month abbreviation."""
    return f"Unknown month '{token}' in date '{date_text}'"


def invalid_scope(scope: str) -> str:
    """Return message for an unsupported mapping scope."""
    return f"Invalid scope '{scope}'. Must be one of: apk, both, epk"


def invalid_process_family(family: str) -> str:
    """Return message for an unsupported process family."""
    return f"Invalid process family '{family}'. Must be one of: apk, epk"


def mapping_not_found(mapping_id: int) -> str:
    """Return message for missing concept mapping."""
    return f"Concept mapping {mapping_id} not found"


def text_mapping_not_found(mapping_id: int) -> str:
    """Return message for missing text mapping."""
    return f"Text mapping {mapping_id} not found"


def concept_not_found(concept: str | int) -> str:
    """Return message for missing concept."""
    return f"Concept '{concept}' not found"


def record_not_found(record_id: int, process_family: str, kind: str) -> str:
    """Return message for missing stored record."""
    return f"Record {record_id} not found in {process_family} {kind} records"


def no_distributable_base(segment_count: int, total_weight: int) -> str:
    """Return message when proration has no segments or zero total weight."""
    if segment_count == 0:
        return "No distributable base: no segments configured"
    return f"No distributable base: total segment weight is {total_weight}"


def file_type_already_uploaded(file_type: str, month: str, file_name: str) -> str:
    """Return message when a file type was already uploaded this month."""
    return (
        f"A '{file_type}' file was already uploaded for {month} ({file_name}). "
        "Use --force to replace it."
    )
