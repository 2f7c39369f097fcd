"""Record export commands."""

from pathlib import Path

import click
from contaparse.cli.error_handling import handle_domain_error
from contaparse.cli.record_options import family_argument, kind_option, resolve_kind
from contaparse.domain.errors import DomainError
from contaparse.domain.export import ExportService


@click.command("export")
@family_argument
@kind_option
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["tsv", "xlsx"], case_sensitive=False),
    default="tsv",
    show_default=True,
)
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Output file (required for xlsx)")
@click.option("--no-header", is_flag=True, help="Omit the header row (tsv only)")
@click.pass_context
def export_records(
    ctx, process_family: str, kind: str, output_format: str, output: str | None, no_header: bool
):
    """Export stored records as tab-separated text or an Excel workbook."""
    db = ctx.obj["db"]
    service = ExportService(db)
    record_kind = resolve_kind(kind)

    try:
        if output_format.lower() == "xlsx":
            if not output:
                click.echo("Error: --output is required for xlsx export", err=True)
                ctx.exit(1)
            path = service.export_xlsx(process_family, record_kind, output)
            click.echo(f"Exported {process_family.upper()} {record_kind} records to {path}")
            return

        content = service.export_tsv(process_family, record_kind, include_header=not no_header)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if output:
        Path(output).write_text(content, encoding="utf-8")
        click.echo(f"Exported {process_family.upper()} {record_kind} records to {output}")
    else:
        click.echo(content, nl=False)


def register_commands(cli):
    """Register export commands with main CLI."""
    cli.add_command(export_records)
