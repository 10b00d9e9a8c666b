"""Main CLI entry point."""

import logging

import click
from ledgerkit.database.factories import create_sqlite_database

# Import and register all commands at module level
from ledgerkit.cli.commands import (
    tenant,
    chart,
    fiscal_year,
    entry,
    summary,
    carry_forward,
)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides LEDGERKIT_DB_PATH environment variable)",
    envvar="LEDGERKIT_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    envvar="LEDGERKIT_LOG_LEVEL",
    help="Logging verbosity",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str):
    """Ledgerkit - double-entry bookkeeping.

    Keep a chart of accounts and a journal per tenant, report balances per
    fiscal year and carry closing balances into the next year.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
tenant.register_commands(cli)
chart.register_commands(cli)
fiscal_year.register_commands(cli)
entry.register_commands(cli)
summary.register_commands(cli)
carry_forward.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
