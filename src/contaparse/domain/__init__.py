"""Domain layer for contaparse application."""

# Services are imported lazily: utils and database modules import
# domain.entities/domain.errors, which must not pull in every service.
_SERVICES = {
    "SpreadsheetImportService": "contaparse.domain.spreadsheet_import",
    "ConceptService": "contaparse.domain.concept",
    "ConceptMappingService": "contaparse.domain.mapping",
    "TextMappingService": "contaparse.domain.mapping",
    "SegmentService": "contaparse.domain.segment",
    "AccountCatalogService": "contaparse.domain.catalog",
    "ProrationService": "contaparse.domain.proration",
    "ExportService": "contaparse.domain.export",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        from importlib import import_module

        return getattr(import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
