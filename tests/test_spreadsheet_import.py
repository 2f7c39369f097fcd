"""Tests for reading and importing ERP export files."""

import pytest
from datetime import date, datetime
from decimal import Decimal

from contaparse.domain.entities import RECORD_KIND_GENERAL_EXPENSE, RECORD_KIND_LEDGER
from contaparse.domain.errors import ConflictError, MalformedDateError, ValidationError
from contaparse.domain.spreadsheet_import import SpreadsheetImportService
from contaparse.utils.spreadsheet_reader import read_rows

TODAY = date(2024, 2, 10)


class TestReadRows:
    """Tests for the spreadsheet reader."""

    def test_read_xlsx(self, apk_ledger_file):
        """Test reading the first sheet of a workbook."""
        rows = read_rows(apk_ledger_file)

        assert rows[4] == ["132-020-000-000-00", "OBRA CIVIL"]
        assert rows[5] == ["Segmento:  01 VTA 3 APK"]
        assert rows[-1] == ["25/Ene/2024", "Egresos", "104", "GASOLINERA CENTRO", "F-103", 800]

    def test_date_cells_rendered_as_ledger_dates(self, workbook_factory):
        """Test that real date cells come back in export text form."""
        path = workbook_factory(
            "dates.xlsx", [[datetime(2024, 3, 5), "D", "1", "X", "", 10]]
        )
        assert read_rows(path)[0][0] == "05/Mar/2024"

    def test_read_csv(self, tmp_path):
        """Test reading a comma separated export."""
        path = tmp_path / "export.csv"
        path.write_text(
            "132-020-000-000-00,OBRA CIVIL,,,,\n"
            "Segmento:  01 VTA 3 APK,,,,,\n"
            "05/Ene/2024,Egresos,101,CONSTRUCTORA,F-100,1500.00\n",
            encoding="utf-8",
        )

        rows = read_rows(path)

        assert len(rows) == 3
        assert rows[0][:2] == ["132-020-000-000-00", "OBRA CIVIL"]
        assert rows[2] == ["05/Ene/2024", "Egresos", "101", "CONSTRUCTORA", "F-100", "1500.00"]

    def test_missing_file(self, tmp_path):
        """Test reading a file that doesn't exist."""
        with pytest.raises(FileNotFoundError):
            read_rows(tmp_path / "missing.xlsx")

    def test_unsupported_extension(self, tmp_path):
        """Test rejecting unknown file types."""
        path = tmp_path / "export.pdf"
        path.write_bytes(b"%PDF")
        with pytest.raises(ValidationError, match="Unsupported file type"):
            read_rows(path)

    def test_empty_file(self, tmp_path):
        """Test rejecting an empty export."""
        path = tmp_path / "empty.csv"
        path.write_text("", encoding="utf-8")
        with pytest.raises(ValidationError, match="empty"):
            read_rows(path)


class TestSpreadsheetImportService:
    """Tests for SpreadsheetImportService."""

    def test_detect(self, temp_db, apk_ledger_file):
        """Test classifying a file without importing it."""
        detection = SpreadsheetImportService(temp_db).detect(str(apk_ledger_file))

        assert detection.process_family == "apk"
        assert not detection.is_general_expense
        assert detection.period == "Enero 2024"
        assert temp_db.list_records("apk", RECORD_KIND_LEDGER) == []

    def test_import_ledger(self, temp_db, segment_service, apk_ledger_file):
        """Test importing a ledger broken down by vuelta."""
        result = SpreadsheetImportService(temp_db).import_file(str(apk_ledger_file), today=TODAY)

        assert result["process_family"] == "apk"
        assert result["kind"] == RECORD_KIND_LEDGER
        assert result["imported"] == 4
        assert result["segments_added"] == ["APK", "EPK"]
        assert result["skipped"] == []

        records = temp_db.list_records("apk", RECORD_KIND_LEDGER)
        assert [r.amount for r in records] == [
            Decimal("1500.00"),
            Decimal("250.50"),
            Decimal("-100.00"),
            Decimal("800.00"),
        ]
        assert [s.label for s in segment_service.list_segments("apk")] == ["APK", "EPK"]
        assert len(temp_db.list_account_catalog("apk")) == 2

    def test_import_applies_stored_mappings(self, temp_db, mapping_service, apk_ledger_file):
        """Test that mappings stored in the database drive the concepts."""
        mapping_service.add_mapping("020", "CONSTRUCCIÓN", scope="apk")

        SpreadsheetImportService(temp_db).import_file(str(apk_ledger_file), today=TODAY)

        concepts = [r.concept for r in temp_db.list_records("apk", RECORD_KIND_LEDGER)]
        assert concepts[:3] == ["CONSTRUCCIÓN"] * 3
        assert concepts[3] == "COMBUSTIBLE Y LUBRICANTES APARCERÍA"

    def test_import_general_expenses(self, temp_db, segment_service, apk_general_expense_file):
        """Test importing a general expense file with the legacy table."""
        service = SpreadsheetImportService(temp_db, legacy="fallback")
        result = service.import_file(str(apk_general_expense_file), today=TODAY)

        assert result["kind"] == RECORD_KIND_GENERAL_EXPENSE
        assert result["segments_added"] == []
        records = temp_db.list_records("apk", RECORD_KIND_GENERAL_EXPENSE)
        assert [r.concept for r in records] == [
            "SUELDOS Y SALARIOS",
            "SUELDOS Y SALARIOS",
            "FLETES",
        ]
        assert segment_service.list_segments("apk") == []

    def test_reimport_replaces_records(self, temp_db, apk_ledger_file):
        """Test that a forced re-upload replaces the previous records."""
        service = SpreadsheetImportService(temp_db)
        service.import_file(str(apk_ledger_file), today=TODAY)

        with pytest.raises(ConflictError, match="already uploaded"):
            service.import_file(str(apk_ledger_file), today=TODAY)

        result = service.import_file(str(apk_ledger_file), force=True, today=TODAY)
        assert result["imported"] == 4
        assert len(temp_db.list_records("apk", RECORD_KIND_LEDGER)) == 4
        assert len(temp_db.list_uploads("2024-02")) == 1

    def test_next_month_upload_allowed(self, temp_db, apk_ledger_file):
        """Test that the duplicate guard is per month."""
        service = SpreadsheetImportService(temp_db)
        service.import_file(str(apk_ledger_file), today=TODAY)
        service.import_file(str(apk_ledger_file), today=date(2024, 3, 1))

        assert len(temp_db.list_uploads()) == 2

    def test_low_confidence_requires_confirmation(self, temp_db, workbook_factory):
        """Test that a weakly detected file needs confirmation or an override."""
        path = workbook_factory(
            "unknown.xlsx",
            [["Reporte"], ["05/Ene/2024", "Egresos", "1", "PROVEEDOR", "", 10]],
        )
        service = SpreadsheetImportService(temp_db)

        with pytest.raises(ValidationError, match="Low detection confidence"):
            service.import_file(str(path), today=TODAY)

        result = service.import_file(str(path), confirmed=True, today=TODAY)
        assert result["process_family"] == "epk"
        assert result["kind"] == RECORD_KIND_GENERAL_EXPENSE

    def test_override_file_type(self, temp_db, workbook_factory):
        """Test importing with an explicit family and kind."""
        path = workbook_factory(
            "unknown.xlsx",
            [["Segmento:  01 VTA 3 LOTE"], ["05/Ene/2024", "Egresos", "1", "PROVEEDOR", "", 10]],
        )
        result = SpreadsheetImportService(temp_db).import_file(
            str(path), process_family="apk", general_expense=False, today=TODAY
        )

        assert result["process_family"] == "apk"
        assert result["kind"] == RECORD_KIND_LEDGER
        assert result["segments_added"] == ["LOTE"]

    def test_invalid_override(self, temp_db, apk_ledger_file):
        """Test rejecting an unknown family override."""
        with pytest.raises(ValidationError, match="Invalid process family"):
            SpreadsheetImportService(temp_db).import_file(
                str(apk_ledger_file), process_family="xyz", today=TODAY
            )

    def test_invalid_legacy_position(self, temp_db):
        """Test rejecting an unknown legacy position."""
        with pytest.raises(ValidationError, match="Invalid legacy position"):
            SpreadsheetImportService(temp_db, legacy="middle")

    def test_skipped_rows_reported(self, temp_db, workbook_factory):
        """Test that malformed dates are skipped and reported."""
        path = workbook_factory(
            "bad_dates.xlsx",
            [
                ["132-020-000-000-00", "OBRA CIVIL APARCERIA"],
                ["Segmento:  01 VTA 3 APK"],
                ["05/Jan/2024", "Egresos", "1", "PROVEEDOR", "", 10],
                ["06/Ene/2024", "Egresos", "2", "PROVEEDOR", "", 20],
            ],
        )
        result = SpreadsheetImportService(temp_db).import_file(str(path), today=TODAY)

        assert result["imported"] == 1
        assert result["skipped"][0].startswith("Row 3:")

    def test_strict_mode_aborts(self, temp_db, workbook_factory):
        """Test that strict mode stores nothing on a malformed date."""
        path = workbook_factory(
            "bad_dates.xlsx",
            [
                ["132-020-000-000-00", "OBRA CIVIL APARCERIA"],
                ["Segmento:  01 VTA 3 APK"],
                ["05/Jan/2024", "Egresos", "1", "PROVEEDOR", "", 10],
            ],
        )
        with pytest.raises(MalformedDateError):
            SpreadsheetImportService(temp_db, strict=True).import_file(str(path), today=TODAY)

        assert temp_db.list_records("apk", RECORD_KIND_LEDGER) == []
        assert temp_db.list_uploads() == []

    def test_upload_status(self, temp_db, apk_ledger_file, apk_general_expense_file):
        """Test the monthly upload checklist."""
        service = SpreadsheetImportService(temp_db)
        service.import_file(str(apk_ledger_file), today=TODAY)
        service.import_file(str(apk_general_expense_file), today=TODAY)

        assert service.upload_status(TODAY) == {
            "apk-vueltas": "apk_vueltas.xlsx",
            "apk-gg": "apk_gg.xlsx",
            "epk-vueltas": None,
            "epk-gg": None,
        }
        assert all(v is None for v in service.upload_status(date(2024, 3, 1)).values())

    def test_clear_records(self, temp_db, apk_ledger_file, apk_general_expense_file):
        """Test clearing one record set and then the whole family."""
        service = SpreadsheetImportService(temp_db)
        service.import_file(str(apk_ledger_file), today=TODAY)
        service.import_file(str(apk_general_expense_file), today=TODAY)

        assert service.clear_records("apk", RECORD_KIND_GENERAL_EXPENSE) == 3
        assert temp_db.list_records("apk", RECORD_KIND_GENERAL_EXPENSE) == []
        assert len(temp_db.list_records("apk", RECORD_KIND_LEDGER)) == 4

        assert service.clear_records("apk") == 4
        assert temp_db.list_records("apk", RECORD_KIND_LEDGER) == []

    def test_clear_records_invalid_kind(self, temp_db):
        """Test rejecting an unknown record kind."""
        with pytest.raises(ValidationError, match="Invalid record kind"):
            SpreadsheetImportService(temp_db).clear_records("apk", "bogus")

    def test_failed_forced_reimport_keeps_previous_import(
        self, temp_db, apk_ledger_file, workbook_factory
    ):
        """Test that a forced re-upload aborted in strict mode changes nothing."""
        service = SpreadsheetImportService(temp_db)
        service.import_file(str(apk_ledger_file), today=TODAY)
        catalog_before = [entry.full_code for entry in temp_db.list_account_catalog()]

        path = workbook_factory(
            "bad_vueltas.xlsx",
            [
                ["132-099-000-000-00", "OTROS APARCERIA"],
                ["Segmento:  01 VTA 3 APK"],
                ["05/Jan/2024", "Egresos", "1", "PROVEEDOR", "", 10],
            ],
        )
        with pytest.raises(MalformedDateError):
            SpreadsheetImportService(temp_db, strict=True).import_file(
                str(path), confirmed=True, force=True, today=TODAY
            )

        uploads = temp_db.list_uploads("2024-02")
        assert [upload.file_name for upload in uploads] == ["apk_vueltas.xlsx"]
        assert len(temp_db.list_records("apk", RECORD_KIND_LEDGER)) == 4
        assert [entry.full_code for entry in temp_db.list_account_catalog()] == catalog_before
        with pytest.raises(ConflictError):
            service.import_file(str(apk_ledger_file), today=TODAY)
