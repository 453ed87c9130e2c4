"""Main CLI entry point."""

import logging

import click
from pocketledger.database.factories import DB_PATH_ENV_VAR, create_sqlite_database

from pocketledger.cli.commands import (
    account,
    add,
    category,
    import_cmd,
    init_categories,
    summary,
    transaction,
)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides POCKETLEDGER_DB_PATH environment variable)",
    envvar=DB_PATH_ENV_VAR,
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    envvar="POCKETLEDGER_LOG_LEVEL",
    help="Logging verbosity",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str):
    """Pocketledger - personal finance ledger.

    Track accounts and categories, split purchases into installments, schedule
    recurring expenses, import OFX bank statements and follow credit-card
    invoices.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(level=log_level.upper(), format=LOG_FORMAT)

    # --help never touches the database
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


COMMAND_MODULES = (init_categories, category, account, add, transaction, import_cmd, summary)

for module in COMMAND_MODULES:
    module.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
