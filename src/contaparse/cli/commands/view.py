"""Record viewing commands."""

import click
from contaparse.cli.record_options import family_argument, kind_option, resolve_kind
from contaparse.domain.export import ExportService


@click.command("view")
@family_argument
@kind_option
@click.option("--concept", help="Only show records with this concept")
@click.pass_context
def view_records(ctx, process_family: str, kind: str, concept: str | None):
    """View stored records of a process family."""
    db = ctx.obj["db"]
    service = ExportService(db)
    record_kind = resolve_kind(kind)

    records = service.load(process_family, record_kind)
    if concept:
        records = [r for r in records if r.concept == concept]

    if not records:
        click.echo("No records found.")
        return

    segment_header = records[0].segment_field.capitalize()
    click.echo(f"\nFound {len(records)} record(s):")
    click.echo(
        f"{'ID':<5} {'Fecha':<12} {'Folio':<10} {'Proveedor':<30} "
        f"{'Importe':>14}  {'Concepto':<25} {segment_header:<10}"
    )
    click.echo("-" * 114)

    total = 0
    for record in records:
        counterparty = record.counterparty_name[:28] + ".." if len(
            record.counterparty_name
        ) > 30 else record.counterparty_name
        concept_text = record.concept[:23] + ".." if len(record.concept) > 25 else record.concept
        click.echo(
            f"{record.id:<5} {record.date:<12} {record.document_number:<10} {counterparty:<30} "
            f"{record.amount:>14,.2f}  {concept_text:<25} {record.segment_label:<10}"
        )
        total += record.amount

    click.echo("-" * 114)
    click.echo(f"{'Total':<60} {total:>14,.2f}")


def register_commands(cli):
    """Register view commands with main CLI."""
    cli.add_command(view_records)
