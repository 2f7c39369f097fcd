"""Proration commands."""

import click
from contaparse.cli.error_handling import handle_domain_error
from contaparse.cli.record_options import family_argument
from contaparse.domain.entities import RECORD_KIND_PRORATION
from contaparse.domain.errors import DomainError
from contaparse.domain.export import to_tsv
from contaparse.domain.proration import ProrationService


@click.command("prorate")
@family_argument
@click.option("--tsv", "as_tsv", is_flag=True, help="Print the result as tab-separated rows without header")
@click.pass_context
def prorate(ctx, process_family: str, as_tsv: bool):
    """Distribute stored general expenses across the family's segments."""
    db = ctx.obj["db"]
    service = ProrationService(db)

    try:
        records = service.generate(process_family)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if as_tsv:
        click.echo(to_tsv(records, RECORD_KIND_PRORATION, include_header=False), nl=False)
        return

    if not records:
        click.echo("No general expenses to prorate.")
        return

    click.echo(f"\nGenerated {len(records)} proration record(s) for {process_family.upper()}:")
    for record in records:
        click.echo(f"  {record.segment_label:<12} {record.concept:<40} {record.amount:>14,.2f}")


def register_commands(cli):
    """Register proration commands with main CLI."""
    cli.add_command(prorate)
