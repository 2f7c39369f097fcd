"""Shared pytest fixtures for contaparse tests."""

import tempfile
import os
import pytest
from openpyxl import Workbook

from contaparse.database.factories import create_sqlite_database
from contaparse.domain.concept import ConceptService
from contaparse.domain.mapping import ConceptMappingService, TextMappingService
from contaparse.domain.segment import SegmentService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def concept_service(temp_db):
    """Create a ConceptService with a temporary database."""
    return ConceptService(temp_db)


@pytest.fixture
def mapping_service(temp_db):
    """Create a ConceptMappingService with a temporary database."""
    return ConceptMappingService(temp_db)


@pytest.fixture
def text_mapping_service(temp_db):
    """Create a TextMappingService with a temporary database."""
    return TextMappingService(temp_db)


@pytest.fixture
def segment_service(temp_db):
    """Create a SegmentService with a temporary database."""
    return SegmentService(temp_db)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def apk_ledger_rows():
    """Rows of a primary-family ledger export broken down by vuelta."""
    return [
        ["AGROPECUARIA EJEMPLO SA DE CV"],
        ["Auxiliar de cuentas"],
        ["Del 01/Ene/2024 al 31/Ene/2024 Enero 2024"],
        ["Fecha", "Tipo", "Numero", "Concepto", "Referencia", "Cargos"],
        ["132-020-000-000-00", "OBRA CIVIL"],
        ["Segmento:  01 VTA 3 APK"],
        ["05/Ene/2024", "Egresos", "101", "CONSTRUCTORA DEL NORTE", "F-100", "1500.00"],
        ["12/Ene/2024", "Egresos", "102", "GRANJAS NOM SEM 2", "F-101", "250.50"],
        ["Segmento:  02 VTA 4 EPK"],
        ["20/Ene/2024", "Diario", "103", "CEMENTOS SA", "F-102", "(100.00)"],
        ["Total Segmento", "", "", "", "", "1650.50"],
        ["132-040-000-000-00", "COMBUSTIBLE Y LUBRICANTES APARCERÍA"],
        ["Segmento:  01 VTA 3 APK"],
        ["25/Ene/2024", "Egresos", "104", "GASOLINERA CENTRO", "F-103", 800],
    ]


@pytest.fixture
def apk_general_expense_rows():
    """Rows of a primary-family general expense export."""
    return [
        ["AGROPECUARIA EJEMPLO SA DE CV"],
        ["Auxiliar de cuentas"],
        ["Enero de 2024"],
        ["132-010-000-000-00", "SUELDOS APARCERÍA"],
        ["Segmento:  00 ADMON GG"],
        ["15/Ene/2024", "Egresos", "201", "NOMINA QUINCENAL", "", "1000.00"],
        ["31/Ene/2024", "Egresos", "202", "NOMINA QUINCENAL", "", "1000.00"],
        ["132-060-000-000-00", "FLETES"],
        ["Segmento:  00 ADMON GG"],
        ["20/Ene/2024", "Egresos", "203", "TRANSPORTES RAPIDOS", "T-9", "500.00"],
    ]


def write_workbook(path, rows):
    """Write rows to the first sheet of a new .xlsx file."""
    workbook = Workbook()
    worksheet = workbook.active
    for row in rows:
        worksheet.append(row)
    workbook.save(path)
    return path


@pytest.fixture
def workbook_factory(tmp_path):
    """Return a helper that writes rows to a named .xlsx file in tmp_path."""

    def factory(name, rows):
        return write_workbook(tmp_path / name, rows)

    return factory


@pytest.fixture
def apk_ledger_file(tmp_path, apk_ledger_rows):
    """An .xlsx primary-family ledger export."""
    return write_workbook(tmp_path / "apk_vueltas.xlsx", apk_ledger_rows)


@pytest.fixture
def apk_general_expense_file(tmp_path, apk_general_expense_rows):
    """An .xlsx primary-family general expense export."""
    return write_workbook(tmp_path / "apk_gg.xlsx", apk_general_expense_rows)
