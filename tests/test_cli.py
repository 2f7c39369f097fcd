"""Tests for CLI commands."""

import pytest
from decimal import Decimal

from contaparse.cli.main import cli
from contaparse.domain.entities import (
    RECORD_KIND_GENERAL_EXPENSE,
    RECORD_KIND_LEDGER,
    RECORD_KIND_PRORATION,
)


def invoke(cli_runner, temp_db, *args):
    return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args])


def test_help_does_not_need_database(cli_runner):
    """Test that the group help works without a database."""
    result = cli_runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "import" in result.output
    assert "prorate" in result.output


def test_package_exposes_main():
    """Test the console script entry point."""
    import contaparse
    from contaparse.cli.main import main

    assert contaparse.main is main


class TestImportCommands:
    """Tests for detect, import and status."""

    def test_detect(self, cli_runner, temp_db, apk_ledger_file):
        """Test detecting a file type."""
        result = invoke(cli_runner, temp_db, "detect", str(apk_ledger_file), "--show-indicators")

        assert result.exit_code == 0
        assert "Process family: APK" in result.output
        assert "Upload slot: apk-vueltas" in result.output
        assert "Period: Enero 2024" in result.output
        assert "apk_code: yes" in result.output

    def test_import(self, cli_runner, temp_db, apk_ledger_file):
        """Test importing a ledger."""
        result = invoke(cli_runner, temp_db, "import", str(apk_ledger_file))

        assert result.exit_code == 0
        assert "Imported: 4 records" in result.output
        assert "New segments: APK, EPK" in result.output
        assert len(temp_db.list_records("apk", RECORD_KIND_LEDGER)) == 4

    def test_import_twice_needs_force(self, cli_runner, temp_db, apk_ledger_file):
        """Test the monthly duplicate guard."""
        assert invoke(cli_runner, temp_db, "import", str(apk_ledger_file)).exit_code == 0

        result = invoke(cli_runner, temp_db, "import", str(apk_ledger_file))
        assert result.exit_code == 1
        assert "already uploaded" in result.output

        result = invoke(cli_runner, temp_db, "import", str(apk_ledger_file), "--force")
        assert result.exit_code == 0

    def test_import_low_confidence(self, cli_runner, temp_db, workbook_factory):
        """Test that a weak detection needs --yes or an explicit type."""
        path = workbook_factory(
            "unknown.xlsx", [["Reporte"], ["05/Ene/2024", "Egresos", "1", "X", "", 10]]
        )

        result = invoke(cli_runner, temp_db, "import", str(path))
        assert result.exit_code == 1
        assert "Low detection confidence" in result.output

        result = invoke(cli_runner, temp_db, "import", str(path), "--family", "apk", "--gg")
        assert result.exit_code == 0
        assert len(temp_db.list_records("apk", RECORD_KIND_GENERAL_EXPENSE)) == 1

    def test_import_legacy_and_strict(self, cli_runner, temp_db, apk_general_expense_file):
        """Test the legacy table option."""
        result = invoke(
            cli_runner, temp_db, "import", str(apk_general_expense_file), "--legacy", "first", "--strict"
        )

        assert result.exit_code == 0
        concepts = [r.concept for r in temp_db.list_records("apk", RECORD_KIND_GENERAL_EXPENSE)]
        assert concepts == ["SUELDOS Y SALARIOS", "SUELDOS Y SALARIOS", "FLETES"]

    def test_status(self, cli_runner, temp_db, apk_ledger_file):
        """Test the monthly upload checklist."""
        invoke(cli_runner, temp_db, "import", str(apk_ledger_file))

        result = invoke(cli_runner, temp_db, "status")

        assert result.exit_code == 0
        assert "Uploads this month: 1/4" in result.output
        assert "apk_vueltas.xlsx" in result.output


class TestRecordCommands:
    """Tests for view, concept, segment, prorate and export."""

    @pytest.fixture
    def imported(self, cli_runner, temp_db, apk_ledger_file, apk_general_expense_file):
        assert invoke(cli_runner, temp_db, "import", str(apk_ledger_file)).exit_code == 0
        assert invoke(cli_runner, temp_db, "import", str(apk_general_expense_file)).exit_code == 0

    def test_view(self, cli_runner, temp_db, imported):
        """Test listing stored records."""
        result = invoke(cli_runner, temp_db, "view", "apk")

        assert result.exit_code == 0
        assert "Found 4 record(s)" in result.output
        assert "CONSTRUCTORA DEL NORTE" in result.output
        assert "2,450.50" in result.output

    def test_view_general_expenses_by_concept(self, cli_runner, temp_db, imported):
        """Test filtering general expenses by concept."""
        result = invoke(cli_runner, temp_db, "view", "apk", "--kind", "gg", "--concept", "FLETES")

        assert result.exit_code == 0
        assert "Found 1 record(s)" in result.output
        assert "Segmento" in result.output

    def test_clear(self, cli_runner, temp_db, imported):
        """Test clearing stored records of a family."""
        result = invoke(cli_runner, temp_db, "clear", "apk", "--kind", "gg", "--yes")
        assert result.exit_code == 0
        assert "Cleared 3 records" in result.output

        result = invoke(cli_runner, temp_db, "clear", "apk", "--yes")
        assert result.exit_code == 0
        assert "Cleared 4 records" in result.output
        assert temp_db.list_records("apk", RECORD_KIND_LEDGER) == []

    def test_view_empty(self, cli_runner, temp_db):
        """Test viewing an empty partition."""
        result = invoke(cli_runner, temp_db, "view", "epk")
        assert result.exit_code == 0
        assert "No records found." in result.output

    def test_concept_replace_and_set(self, cli_runner, temp_db, imported):
        """Test editing concepts of stored records."""
        result = invoke(
            cli_runner,
            temp_db,
            "concept",
            "replace",
            "apk",
            "--from",
            "OBRA CIVIL",
            "--from",
            "COMBUSTIBLE Y LUBRICANTES APARCERÍA",
            "--to",
            "CONSTRUCCIÓN",
        )
        assert result.exit_code == 0
        assert "Updated 4 records" in result.output

        result = invoke(cli_runner, temp_db, "concept", "set", "apk", "4", "COMBUSTIBLE")
        assert result.exit_code == 0
        assert temp_db.get_record("apk", RECORD_KIND_LEDGER, 4).concept == "COMBUSTIBLE"

        result = invoke(cli_runner, temp_db, "concept", "used", "apk")
        assert result.output.split() == ["COMBUSTIBLE", "CONSTRUCCIÓN"]

    def test_concept_set_missing_record(self, cli_runner, temp_db, imported):
        """Test reassigning a record that doesn't exist."""
        result = invoke(cli_runner, temp_db, "concept", "set", "apk", "99", "X")
        assert result.exit_code == 1
        assert "Record 99 not found" in result.output

    def test_segment_and_prorate(self, cli_runner, temp_db, imported):
        """Test weighting segments and prorating general expenses."""
        assert invoke(cli_runner, temp_db, "segment", "set", "apk", "APK", "30").exit_code == 0
        assert invoke(cli_runner, temp_db, "segment", "set", "apk", "EPK", "70").exit_code == 0

        result = invoke(cli_runner, temp_db, "segment", "list", "apk")
        assert "30.00%" in result.output
        assert "Total" in result.output

        result = invoke(cli_runner, temp_db, "prorate", "apk")
        assert result.exit_code == 0
        assert "Generated 4 proration record(s)" in result.output

        amounts = [r.amount for r in temp_db.list_records("apk", RECORD_KIND_PRORATION)]
        assert amounts == [
            Decimal("600.00"),
            Decimal("1400.00"),
            Decimal("150.00"),
            Decimal("350.00"),
        ]

    def test_prorate_tsv(self, cli_runner, temp_db, imported):
        """Test printing proration rows for pasting."""
        invoke(cli_runner, temp_db, "segment", "set", "apk", "APK", "1")
        invoke(cli_runner, temp_db, "segment", "set", "apk", "EPK", "1")

        result = invoke(cli_runner, temp_db, "prorate", "apk", "--tsv")

        lines = result.output.splitlines()
        assert result.exit_code == 0
        assert len(lines) == 4
        assert lines[0].split("\t")[3] == "SUELDOS APARCERÍA (prorrateo)"

    def test_prorate_without_weights(self, cli_runner, temp_db, imported):
        """Test that proration fails with only zero-weight segments."""
        result = invoke(cli_runner, temp_db, "prorate", "apk")

        assert result.exit_code == 1
        assert "No distributable base" in result.output

    def test_segment_delete(self, cli_runner, temp_db, imported):
        """Test deleting segments."""
        assert invoke(cli_runner, temp_db, "segment", "delete", "apk", "epk").exit_code == 0
        result = invoke(cli_runner, temp_db, "segment", "delete", "apk", "EPK")
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_export_tsv(self, cli_runner, temp_db, imported, tmp_path):
        """Test exporting records as tab-separated text."""
        result = invoke(cli_runner, temp_db, "export", "apk", "--no-header")
        assert result.exit_code == 0
        assert len(result.output.splitlines()) == 4

        output = tmp_path / "gg.tsv"
        result = invoke(cli_runner, temp_db, "export", "apk", "--kind", "gg", "-o", str(output))
        assert result.exit_code == 0
        assert output.read_text(encoding="utf-8").startswith("Fecha\t")

    def test_export_xlsx_requires_output(self, cli_runner, temp_db, imported, tmp_path):
        """Test the xlsx export."""
        result = invoke(cli_runner, temp_db, "export", "apk", "--format", "xlsx")
        assert result.exit_code == 1

        output = tmp_path / "apk.xlsx"
        result = invoke(cli_runner, temp_db, "export", "apk", "--format", "xlsx", "-o", str(output))
        assert result.exit_code == 0
        assert output.exists()


class TestMappingCommands:
    """Tests for mapping, text-mapping, concept and catalog commands."""

    def test_mapping_lifecycle(self, cli_runner, temp_db):
        """Test adding, listing, updating and deleting a code mapping."""
        result = invoke(cli_runner, temp_db, "mapping", "add", "020", "OBRA CIVIL", "--scope", "apk")
        assert result.exit_code == 0
        assert "(ID: 1)" in result.output

        result = invoke(cli_runner, temp_db, "mapping", "update", "1", "--target", "CONSTRUCCIÓN")
        assert result.exit_code == 0

        result = invoke(cli_runner, temp_db, "mapping", "list")
        assert "CONSTRUCCIÓN" in result.output

        assert invoke(cli_runner, temp_db, "mapping", "delete", "1").exit_code == 0
        result = invoke(cli_runner, temp_db, "mapping", "delete", "1")
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_mapping_import_export(self, cli_runner, temp_db, tmp_path):
        """Test exchanging code mappings as files."""
        source = tmp_path / "mappings.txt"
        source.write_text("020|OBRA CIVIL|CONSTRUCCIÓN|apk\n030|DEPRECIACIÓN\n", encoding="utf-8")

        result = invoke(cli_runner, temp_db, "mapping", "import", str(source))
        assert result.exit_code == 0
        assert "Imported 2 mappings" in result.output

        result = invoke(cli_runner, temp_db, "mapping", "export")
        assert result.output.splitlines() == [
            "020|OBRA CIVIL|CONSTRUCCIÓN|apk",
            "030|DEPRECIACIÓN|DEPRECIACIÓN|both",
        ]

    def test_text_mapping_lifecycle(self, cli_runner, temp_db, tmp_path):
        """Test managing text mappings."""
        result = invoke(
            cli_runner, temp_db, "text-mapping", "add", "GRANJ", "SUELDOS Y SALARIOS", "--scope", "epk"
        )
        assert result.exit_code == 0

        result = invoke(cli_runner, temp_db, "text-mapping", "list")
        assert "GRANJ" in result.output

        output = tmp_path / "text.txt"
        assert invoke(cli_runner, temp_db, "text-mapping", "export", "-o", str(output)).exit_code == 0
        assert output.read_text(encoding="utf-8") == "GRANJ|prefix|SUELDOS Y SALARIOS|1|epk\n"

        bad = tmp_path / "bad.txt"
        bad.write_text("ONLY|two\n", encoding="utf-8")
        result = invoke(cli_runner, temp_db, "text-mapping", "import", str(bad))
        assert result.exit_code == 1
        assert "Line 1: invalid format" in result.output

    def test_text_mapping_used_on_import(self, cli_runner, temp_db, apk_ledger_file):
        """Test that a text mapping overrides the account label on import."""
        invoke(cli_runner, temp_db, "text-mapping", "add", "GRANJ", "SUELDOS Y SALARIOS")
        invoke(cli_runner, temp_db, "import", str(apk_ledger_file))

        assert temp_db.get_record("apk", RECORD_KIND_LEDGER, 2).concept == "SUELDOS Y SALARIOS"
        assert temp_db.get_record("apk", RECORD_KIND_LEDGER, 1).concept == "OBRA CIVIL"

    def test_concept_catalog_commands(self, cli_runner, temp_db):
        """Test the concept list commands."""
        result = invoke(cli_runner, temp_db, "concept", "init")
        assert "Created 11 predefined concepts" in result.output

        result = invoke(cli_runner, temp_db, "concept", "init")
        assert "already exist" in result.output

        result = invoke(cli_runner, temp_db, "concept", "add", "FLETES")
        assert result.exit_code == 1
        assert "already exists" in result.output

        result = invoke(cli_runner, temp_db, "concept", "list")
        assert "SUELDOS Y SALARIOS" in result.output

    def test_catalog(self, cli_runner, temp_db, apk_ledger_file):
        """Test listing, exporting and clearing the account catalog."""
        invoke(cli_runner, temp_db, "import", str(apk_ledger_file))

        result = invoke(cli_runner, temp_db, "catalog", "list")
        assert result.exit_code == 0
        assert "Accounts: 2 (APK: 2, EPK: 0)" in result.output

        result = invoke(cli_runner, temp_db, "catalog", "export")
        assert "132-020-000-000-00|OBRA CIVIL|APK|1" in result.output

        result = invoke(cli_runner, temp_db, "catalog", "clear", "--yes")
        assert "Removed 2 catalog entries" in result.output


def test_package_level_exports():
    """Test the services and parsers exposed by the subpackages."""
    from contaparse import domain, utils
    from contaparse.domain.proration import ProrationService
    from contaparse.utils.amount_parser import parse_amount

    assert domain.ProrationService is ProrationService
    assert utils.parse_amount is parse_amount
    assert set(domain.__all__) >= {"SpreadsheetImportService", "ExportService"}
    with pytest.raises(AttributeError):
        domain.NoSuchService
