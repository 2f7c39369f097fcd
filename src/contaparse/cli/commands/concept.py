"""Concept management commands."""

import click
from contaparse.cli.error_handling import handle_domain_error
from contaparse.cli.record_options import family_argument, kind_option, resolve_kind
from contaparse.domain.concept import ConceptService
from contaparse.domain.errors import DomainError


@click.group()
def concept_group():
    """Manage concepts and the concepts of stored records."""
    pass


@concept_group.command("list")
@click.pass_context
def list_concepts(ctx):
    """List the concept catalog."""
    db = ctx.obj["db"]
    service = ConceptService(db)

    concepts = service.list_concepts()
    if not concepts:
        click.echo("No concepts found. Run 'concept init' to create the predefined concepts.")
        return

    click.echo("\nConcepts:")
    for concept in concepts:
        click.echo(f"  {concept.text} (ID: {concept.id})")


@concept_group.command("add")
@click.argument("text")
@click.pass_context
def add_concept(ctx, text: str):
    """Add a concept."""
    db = ctx.obj["db"]
    service = ConceptService(db)

    try:
        concept_id = service.add_concept(text)
        click.echo(f"Created concept '{text.strip()}' (ID: {concept_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@concept_group.command("rename")
@click.argument("concept_id", type=int)
@click.argument("text")
@click.pass_context
def rename_concept(ctx, concept_id: int, text: str):
    """Rename a concept."""
    db = ctx.obj["db"]
    service = ConceptService(db)

    try:
        service.rename_concept(concept_id, text)
        click.echo(f"Renamed concept {concept_id} to '{text.strip()}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


@concept_group.command("delete")
@click.argument("concept_id", type=int)
@click.pass_context
def delete_concept(ctx, concept_id: int):
    """Delete a concept."""
    db = ctx.obj["db"]
    service = ConceptService(db)

    try:
        service.delete_concept(concept_id)
        click.echo(f"Deleted concept {concept_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@concept_group.command("init")
@click.pass_context
def init_concepts(ctx):
    """Create the predefined concepts if none exist."""
    db = ctx.obj["db"]
    service = ConceptService(db)

    created = service.initialize_predefined()
    if created:
        click.echo(f"Created {created} predefined concepts")
    else:
        click.echo("Concepts already exist. Skipping initialization.")


@concept_group.command("used")
@family_argument
@kind_option
@click.pass_context
def used_concepts(ctx, process_family: str, kind: str):
    """List the distinct concepts of stored records."""
    db = ctx.obj["db"]
    service = ConceptService(db)

    concepts = service.unique_concepts_from_records(process_family, resolve_kind(kind))
    if not concepts:
        click.echo("No concepts found.")
        return
    for concept in concepts:
        click.echo(concept)


@concept_group.command("set")
@family_argument
@click.argument("record_id", type=int)
@click.argument("concept")
@kind_option
@click.pass_context
def set_record_concept(ctx, process_family: str, record_id: int, concept: str, kind: str):
    """Set the concept of one stored record."""
    db = ctx.obj["db"]
    service = ConceptService(db)

    try:
        service.reassign_record_concept(process_family, resolve_kind(kind), record_id, concept)
        click.echo(f"Record {record_id} now has concept '{concept.strip()}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


@concept_group.command("replace")
@family_argument
@click.option(
    "--from",
    "selected",
    multiple=True,
    required=True,
    help="Concept to replace (repeat for several)",
)
@click.option("--to", "target", required=True, help="Concept to write instead")
@kind_option
@click.pass_context
def replace_concepts(ctx, process_family: str, selected: tuple[str, ...], target: str, kind: str):
    """Replace several concepts by one across stored records."""
    db = ctx.obj["db"]
    service = ConceptService(db)

    try:
        updated = service.replace_concepts(process_family, resolve_kind(kind), selected, target)
        click.echo(f"Updated {updated} records to '{target.strip()}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register concept commands with main CLI."""
    cli.add_command(concept_group, name="concept")
