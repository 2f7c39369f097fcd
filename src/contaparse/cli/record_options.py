"""Shared CLI options for selecting stored record partitions."""

import click

from contaparse.domain.entities import (
    PROCESS_FAMILIES,
    RECORD_KIND_GENERAL_EXPENSE,
    RECORD_KIND_LEDGER,
    RECORD_KIND_PRORATION,
)

KIND_CHOICES = {
    "ledger": RECORD_KIND_LEDGER,
    "gg": RECORD_KIND_GENERAL_EXPENSE,
    "proration": RECORD_KIND_PRORATION,
}

family_argument = click.argument(
    "process_family", type=click.Choice(PROCESS_FAMILIES, case_sensitive=False)
)

kind_option = click.option(
    "--kind",
    type=click.Choice(list(KIND_CHOICES), case_sensitive=False),
    default="ledger",
    show_default=True,
    help="Record set: ledger (vueltas), gg (general expenses) or proration",
)


def resolve_kind(kind: str) -> str:
    return KIND_CHOICES[kind.lower()]
