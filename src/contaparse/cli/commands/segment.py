"""Segment management commands."""

import click
from contaparse.cli.error_handling import handle_domain_error
from contaparse.cli.record_options import family_argument
from contaparse.domain.errors import DomainError
from contaparse.domain.segment import SegmentService


@click.group()
def segment_group():
    """Manage proration segments and their weights."""
    pass


@segment_group.command("list")
@family_argument
@click.pass_context
def list_segments(ctx, process_family: str):
    """List the segments of a process family."""
    db = ctx.obj["db"]
    service = SegmentService(db)

    segments = service.list_segments(process_family)
    if not segments:
        click.echo(f"No segments found for {process_family.upper()}.")
        return

    total = sum(segment.weight for segment in segments)
    click.echo(f"\nSegments for {process_family.upper()}:")
    for segment in segments:
        share = f"{segment.weight / total:.2%}" if total else "-"
        click.echo(f"  {segment.label:<15} {segment.weight:>8}  {share:>8}")
    click.echo(f"  {'Total':<15} {total:>8}")


@segment_group.command("set")
@family_argument
@click.argument("label")
@click.argument("weight", type=int)
@click.pass_context
def set_segment(ctx, process_family: str, label: str, weight: int):
    """Create a segment or set its weight."""
    db = ctx.obj["db"]
    service = SegmentService(db)

    try:
        segment = service.set_segment(process_family, label, weight)
        click.echo(f"Segment {segment.label} ({process_family.upper()}) weight: {segment.weight}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@segment_group.command("delete")
@family_argument
@click.argument("label")
@click.pass_context
def delete_segment(ctx, process_family: str, label: str):
    """Delete a segment."""
    db = ctx.obj["db"]
    service = SegmentService(db)

    try:
        service.delete_segment(process_family, label)
        click.echo(f"Deleted segment {label.strip().upper()}")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register segment commands with main CLI."""
    cli.add_command(segment_group, name="segment")
