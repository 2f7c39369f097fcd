"""Concept mapping management commands."""

from pathlib import Path

import click
from contaparse.cli.error_handling import handle_domain_error
from contaparse.domain.entities import MAPPING_SCOPES, MATCH_MODES
from contaparse.domain.errors import DomainError
from contaparse.domain.mapping import ConceptMappingService, TextMappingService


def _write_or_echo(content: str, output: str | None) -> None:
    if output:
        Path(output).write_text(content + "\n" if content else "", encoding="utf-8")
        click.echo(f"Exported mappings to {output}")
    elif content:
        click.echo(content)


@click.group()
def mapping_group():
    """Manage account-code concept mappings."""
    pass


@mapping_group.command("add")
@click.argument("account_code")
@click.argument("target_concept")
@click.option("--source-text", default="", help="Account name the mapping comes from")
@click.option(
    "--scope",
    type=click.Choice(MAPPING_SCOPES, case_sensitive=False),
    default="both",
    show_default=True,
)
@click.pass_context
def add_mapping(ctx, account_code: str, target_concept: str, source_text: str, scope: str):
    """Map an account code (e.g. 020) to a concept."""
    db = ctx.obj["db"]
    service = ConceptMappingService(db)

    try:
        mapping_id = service.add_mapping(
            account_code, target_concept, source_text=source_text, scope=scope
        )
        click.echo(f"Created mapping {account_code} -> '{target_concept}' (ID: {mapping_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@mapping_group.command("list")
@click.pass_context
def list_mappings(ctx):
    """List account-code mappings."""
    db = ctx.obj["db"]
    service = ConceptMappingService(db)

    mappings = service.list_mappings()
    if not mappings:
        click.echo("No mappings found.")
        return

    click.echo(f"\n{'ID':<5} {'Code':<8} {'Scope':<6} {'Source':<35} Concept")
    click.echo("-" * 90)
    for m in mappings:
        click.echo(
            f"{m.id:<5} {m.account_code:<8} {m.scope:<6} {m.source_text[:35]:<35} {m.target_concept}"
        )


@mapping_group.command("update")
@click.argument("mapping_id", type=int)
@click.option("--account-code", help="New account code")
@click.option("--source-text", help="New source text")
@click.option("--target", "target_concept", help="New target concept")
@click.option("--scope", type=click.Choice(MAPPING_SCOPES, case_sensitive=False))
@click.pass_context
def update_mapping(
    ctx,
    mapping_id: int,
    account_code: str | None,
    source_text: str | None,
    target_concept: str | None,
    scope: str | None,
):
    """Update an account-code mapping."""
    db = ctx.obj["db"]
    service = ConceptMappingService(db)

    try:
        service.update_mapping(
            mapping_id,
            account_code=account_code,
            source_text=source_text,
            target_concept=target_concept,
            scope=scope,
        )
        click.echo(f"Updated mapping {mapping_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@mapping_group.command("delete")
@click.argument("mapping_id", type=int)
@click.pass_context
def delete_mapping(ctx, mapping_id: int):
    """Delete an account-code mapping."""
    db = ctx.obj["db"]
    service = ConceptMappingService(db)

    try:
        service.delete_mapping(mapping_id)
        click.echo(f"Deleted mapping {mapping_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@mapping_group.command("import")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def import_mappings(ctx, file: str):
    """Append mappings from a CODE|SOURCE|TARGET|SCOPE file."""
    db = ctx.obj["db"]
    service = ConceptMappingService(db)

    try:
        count = service.import_text(Path(file).read_text(encoding="utf-8"))
        click.echo(f"Imported {count} mappings")
    except DomainError as e:
        handle_domain_error(ctx, e)


@mapping_group.command("export")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write to file instead of stdout")
@click.pass_context
def export_mappings(ctx, output: str | None):
    """Export mappings as CODE|SOURCE|TARGET|SCOPE lines."""
    db = ctx.obj["db"]
    service = ConceptMappingService(db)
    _write_or_echo(service.export_text(), output)


@click.group()
def text_mapping_group():
    """Manage text-pattern concept mappings."""
    pass


@text_mapping_group.command("add")
@click.argument("pattern")
@click.argument("target_concept")
@click.option(
    "--mode",
    "match_mode",
    type=click.Choice(MATCH_MODES, case_sensitive=False),
    default="prefix",
    show_default=True,
)
@click.option(
    "--scope",
    type=click.Choice(MAPPING_SCOPES, case_sensitive=False),
    default="apk",
    show_default=True,
)
@click.option("--priority", type=int, help="Lower values are tried first (default: last)")
@click.pass_context
def add_text_mapping(
    ctx, pattern: str, target_concept: str, match_mode: str, scope: str, priority: int | None
):
    """Map counterparty text matching PATTERN to a concept."""
    db = ctx.obj["db"]
    service = TextMappingService(db)

    try:
        mapping_id = service.add_mapping(
            pattern, target_concept, match_mode=match_mode, scope=scope, priority=priority
        )
        click.echo(
            f"Created text mapping '{pattern}' ({match_mode}) -> '{target_concept}' (ID: {mapping_id})"
        )
    except DomainError as e:
        handle_domain_error(ctx, e)


@text_mapping_group.command("list")
@click.pass_context
def list_text_mappings(ctx):
    """List text mappings in the order they are applied."""
    db = ctx.obj["db"]
    service = TextMappingService(db)

    mappings = service.list_mappings()
    if not mappings:
        click.echo("No text mappings found.")
        return

    click.echo(f"\n{'ID':<5} {'Prio':<5} {'Mode':<10} {'Scope':<6} {'Pattern':<30} Concept")
    click.echo("-" * 90)
    for m in mappings:
        click.echo(
            f"{m.id:<5} {m.priority:<5} {m.match_mode:<10} {m.scope:<6} {m.pattern[:30]:<30} {m.target_concept}"
        )


@text_mapping_group.command("update")
@click.argument("mapping_id", type=int)
@click.option("--pattern", help="New pattern")
@click.option("--target", "target_concept", help="New target concept")
@click.option("--mode", "match_mode", type=click.Choice(MATCH_MODES, case_sensitive=False))
@click.option("--scope", type=click.Choice(MAPPING_SCOPES, case_sensitive=False))
@click.option("--priority", type=int)
@click.pass_context
def update_text_mapping(
    ctx,
    mapping_id: int,
    pattern: str | None,
    target_concept: str | None,
    match_mode: str | None,
    scope: str | None,
    priority: int | None,
):
    """Update a text mapping."""
    db = ctx.obj["db"]
    service = TextMappingService(db)

    try:
        service.update_mapping(
            mapping_id,
            pattern=pattern,
            target_concept=target_concept,
            match_mode=match_mode,
            scope=scope,
            priority=priority,
        )
        click.echo(f"Updated text mapping {mapping_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@text_mapping_group.command("delete")
@click.argument("mapping_id", type=int)
@click.pass_context
def delete_text_mapping(ctx, mapping_id: int):
    """Delete a text mapping."""
    db = ctx.obj["db"]
    service = TextMappingService(db)

    try:
        service.delete_mapping(mapping_id)
        click.echo(f"Deleted text mapping {mapping_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@text_mapping_group.command("import")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def import_text_mappings(ctx, file: str):
    """Replace all text mappings with a PATTERN|MODE|TARGET|PRIORITY|SCOPE file."""
    db = ctx.obj["db"]
    service = TextMappingService(db)

    try:
        count = service.import_text(Path(file).read_text(encoding="utf-8"))
        click.echo(f"Imported {count} text mappings")
    except DomainError as e:
        handle_domain_error(ctx, e)


@text_mapping_group.command("export")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write to file instead of stdout")
@click.pass_context
def export_text_mappings(ctx, output: str | None):
    """Export text mappings as PATTERN|MODE|TARGET|PRIORITY|SCOPE lines."""
    db = ctx.obj["db"]
    service = TextMappingService(db)
    _write_or_echo(service.export_text(), output)


def register_commands(cli):
    """Register mapping commands with main CLI."""
    cli.add_command(mapping_group, name="mapping")
    cli.add_command(text_mapping_group, name="text-mapping")
