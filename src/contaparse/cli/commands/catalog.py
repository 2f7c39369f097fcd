"""Account catalog commands."""

from pathlib import Path

import click
from contaparse.domain.catalog import AccountCatalogService
from contaparse.domain.entities import PROCESS_FAMILIES


@click.group()
def catalog_group():
    """Inspect the accounts seen in uploaded ledgers."""
    pass


@catalog_group.command("list")
@click.option("--family", type=click.Choice(PROCESS_FAMILIES, case_sensitive=False))
@click.pass_context
def list_catalog(ctx, family: str | None):
    """List catalog accounts."""
    db = ctx.obj["db"]
    service = AccountCatalogService(db)

    entries = service.list_entries(family)
    if not entries:
        click.echo("Catalog is empty.")
        return

    stats = service.stats()
    click.echo(f"\nAccounts: {stats['total']} (APK: {stats['apk']}, EPK: {stats['epk']})")
    click.echo(f"{'Code':<22} {'Type':<5} {'Seen':>5}  Name")
    for entry in entries:
        click.echo(
            f"{entry.full_code:<22} {entry.process_family.upper():<5} {entry.occurrences:>5}  {entry.account_name}"
        )


@catalog_group.command("export")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write to file instead of stdout")
@click.pass_context
def export_catalog(ctx, output: str | None):
    """Export the catalog as CODE|NAME|TYPE|OCCURRENCES lines."""
    db = ctx.obj["db"]
    service = AccountCatalogService(db)

    content = service.export_text()
    if output:
        Path(output).write_text(content + "\n", encoding="utf-8")
        click.echo(f"Exported catalog to {output}")
    else:
        click.echo(content)


@catalog_group.command("clear")
@click.confirmation_option(prompt="Delete all catalog entries?")
@click.pass_context
def clear_catalog(ctx):
    """Delete all catalog entries."""
    db = ctx.obj["db"]
    service = AccountCatalogService(db)

    removed = service.clear()
    click.echo(f"Removed {removed} catalog entries")


def register_commands(cli):
    """Register catalog commands with main CLI."""
    cli.add_command(catalog_group, name="catalog")
