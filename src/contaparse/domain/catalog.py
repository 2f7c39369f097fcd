"""Account catalog domain service."""

from datetime import datetime
from typing import Optional

from contaparse.database.base import Database
from contaparse.domain.entities import AccountCatalogEntry
from contaparse.domain.segment import validate_process_family


class AccountCatalogService:
    """Service for the catalog of accounts seen in uploaded ledgers."""

    def __init__(self, db: Database):
        """Initialize account catalog service.

        Args:
            db: Database instance
        """
        self.db = db

    def list_entries(self, process_family: Optional[str] = None) -> list[AccountCatalogEntry]:
        """List catalog entries, APK accounts first, then by code."""
        if process_family is not None:
            validate_process_family(process_family)
        return self.db.list_account_catalog(process_family)

    def stats(self) -> dict[str, int]:
        entries = self.db.list_account_catalog()
        return {
            "total": len(entries),
            "apk": sum(1 for e in entries if e.process_family == "apk"),
            "epk": sum(1 for e in entries if e.process_family == "epk"),
        }

    def export_text(self, generated_at: Optional[datetime] = None) -> str:
        """Render the catalog as commented pipe-delimited text."""
        entries = self.db.list_account_catalog()
        generated_at = generated_at or datetime.now()
        lines = [
            "# Catálogo de Cuentas Contables",
            f"# Generado: {generated_at:%Y-%m-%d %H:%M}",
            f"# Total de cuentas: {len(entries)}",
            "# Formato: CÓDIGO|NOMBRE|TIPO|OCURRENCIAS",
            "",
        ]
        lines.extend(
            f"{e.full_code}|{e.account_name}|{e.process_family.upper()}|{e.occurrences}"
            for e in entries
        )
        return "\n".join(lines)

    def clear(self) -> int:
        return self.db.clear_account_catalog()
