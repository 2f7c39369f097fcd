"""Spreadsheet import and detection commands."""

import click
from contaparse.cli.error_handling import handle_domain_error
from contaparse.cli.record_options import KIND_CHOICES, family_argument, resolve_kind
from contaparse.domain.concept_mapping import LEGACY_POSITIONS
from contaparse.domain.detection import needs_confirmation, upload_file_type
from contaparse.domain.entities import PROCESS_FAMILIES, FileDetectionResult
from contaparse.domain.errors import DomainError
from contaparse.domain.spreadsheet_import import SpreadsheetImportService


def _confidence_label(confidence: int) -> str:
    if confidence >= 80:
        return "high"
    if confidence >= 50:
        return "medium"
    return "low"


def _echo_detection(detection: FileDetectionResult) -> None:
    file_kind = "GG" if detection.is_general_expense else "vueltas"
    click.echo(f"  Process family: {detection.process_family.upper()}")
    click.echo(f"  File type: {detection.process_family.upper()} - {file_kind}")
    click.echo(f"  Period: {detection.period}")
    click.echo(
        f"  Confidence: {detection.confidence}% ({_confidence_label(detection.confidence)})"
    )


@click.command("detect")
@click.argument("file", type=click.Path(exists=True))
@click.option("--show-indicators", is_flag=True, help="List which signals were found")
@click.pass_context
def detect_file(ctx, file: str, show_indicators: bool):
    """Classify an export file without importing it."""
    db = ctx.obj["db"]
    service = SpreadsheetImportService(db)

    try:
        detection = service.detect(file)
    except (DomainError, FileNotFoundError) as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Detection for {file}:")
    _echo_detection(detection)
    click.echo(f"  Upload slot: {upload_file_type(detection)}")
    if needs_confirmation(detection):
        click.echo("  Low confidence: confirm the file type before importing.")
    if show_indicators:
        for name, fired in detection.indicators.items():
            click.echo(f"    {name}: {'yes' if fired else 'no'}")


@click.command("import")
@click.argument("file", type=click.Path(exists=True))
@click.option(
    "--family",
    type=click.Choice(PROCESS_FAMILIES, case_sensitive=False),
    help="Process family (skips detection of the family)",
)
@click.option(
    "--gg/--ledger",
    "general_expense",
    default=None,
    help="Treat the file as general expenses (GG) or as a ledger with vueltas",
)
@click.option("--yes", "-y", "confirmed", is_flag=True, help="Import even with low confidence")
@click.option("--force", is_flag=True, help="Replace a file of the same type uploaded this month")
@click.option("--strict", is_flag=True, help="Abort on malformed dates instead of skipping rows")
@click.option(
    "--legacy",
    type=click.Choice(LEGACY_POSITIONS),
    help="Apply the legacy general expense category table first or as a fallback",
)
@click.pass_context
def import_file(
    ctx,
    file: str,
    family: str | None,
    general_expense: bool | None,
    confirmed: bool,
    force: bool,
    strict: bool,
    legacy: str | None,
):
    """Import an ERP ledger export (.xlsx or .csv)."""
    db = ctx.obj["db"]

    try:
        service = SpreadsheetImportService(db, legacy=legacy, strict=strict)
        result = service.import_file(
            file,
            process_family=family,
            general_expense=general_expense,
            confirmed=confirmed,
            force=force,
        )
    except (DomainError, FileNotFoundError) as e:
        handle_domain_error(ctx, e)
        return

    click.echo("\nImport complete:")
    _echo_detection(result["detection"])
    click.echo(f"  Stored as: {result['process_family'].upper()} {result['kind']}")
    click.echo(f"  Imported: {result['imported']} records")
    if result["segments_added"]:
        click.echo(f"  New segments: {', '.join(result['segments_added'])}")
    if result["skipped"]:
        click.echo(f"  Skipped: {len(result['skipped'])} rows")
        for message in result["skipped"]:
            click.echo(f"    {message}", err=True)


@click.command("status")
@click.pass_context
def upload_status(ctx):
    """Show which of the four monthly files have been uploaded."""
    db = ctx.obj["db"]
    service = SpreadsheetImportService(db)
    status = service.upload_status()

    uploaded = sum(1 for name in status.values() if name)
    click.echo(f"Uploads this month: {uploaded}/{len(status)}")
    for file_type, file_name in status.items():
        marker = "✓" if file_name else "✗"
        click.echo(f"  {marker} {file_type:<12} {file_name or 'pending'}")


@click.command("clear")
@family_argument
@click.option(
    "--kind",
    type=click.Choice(list(KIND_CHOICES), case_sensitive=False),
    help="Only clear this record set (default: all of them)",
)
@click.confirmation_option(prompt="Delete the stored records?")
@click.pass_context
def clear_records(ctx, process_family: str, kind: str | None):
    """Delete stored records of a process family."""
    db = ctx.obj["db"]
    service = SpreadsheetImportService(db)

    try:
        deleted = service.clear_records(process_family.lower(), resolve_kind(kind) if kind else None)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Cleared {deleted} records")


def register_commands(cli):
    """Register import commands with main CLI."""
    cli.add_command(detect_file)
    cli.add_command(import_file)
    cli.add_command(upload_status)
    cli.add_command(clear_records)
