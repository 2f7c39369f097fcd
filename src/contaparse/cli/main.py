"""Main CLI entry point."""

import logging

import click
from contaparse.database.factories import create_sqlite_database

# Import and register all commands at module level
from contaparse.cli.commands import (
    import_cmd,
    view,
    mapping,
    concept,
    segment,
    prorate,
    export_cmd,
    catalog,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides CONTAPARSE_DB_PATH environment variable)",
    envvar="CONTAPARSE_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    envvar="CONTAPARSE_LOG_LEVEL",
    help="Logging level (overrides CONTAPARSE_LOG_LEVEL environment variable)",
)
@click.option("--verbose", "-v", is_flag=True, help="Shortcut for --log-level INFO")
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str, verbose: bool):
    """contaparse - ERP ledger export processing.

    Import Contpaq ledger exports, map their accounts to concepts, prorate
    general expenses across segments and export the results.
    """
    ctx.ensure_object(dict)

    level = logging.INFO if verbose and log_level.upper() == "WARNING" else log_level.upper()
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db


# Register all commands
import_cmd.register_commands(cli)
view.register_commands(cli)
mapping.register_commands(cli)
concept.register_commands(cli)
segment.register_commands(cli)
prorate.register_commands(cli)
export_cmd.register_commands(cli)
catalog.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
