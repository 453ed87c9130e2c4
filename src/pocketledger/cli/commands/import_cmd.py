"""OFX statement import command."""

import click
from pocketledger.cli.error_handling import handle_domain_error, resolve_account_or_exit
from pocketledger.domain.account import AccountService
from pocketledger.domain.category import CategoryService
from pocketledger.domain.entities import TransactionType
from pocketledger.domain.reconciliation import ReconciliationSession
from pocketledger.domain.statement_import import StatementImportService


def _parse_category_assignment(value: str) -> tuple[int, str]:
    number, sep, path = value.partition("=")
    if not sep or not number.strip().isdigit() or not path.strip():
        raise click.BadParameter(f"expected N=CATEGORY_PATH, got '{value}'", param_hint="--category")
    return int(number), path.strip()


def _print_session(session: ReconciliationSession, category_service: CategoryService) -> None:
    click.echo("-" * 100)
    click.echo(f"{'#':<5} {'Sel':<4} {'Date':<12} {'Amount':<13} {'Category':<25} {'Description'}")
    click.echo("-" * 100)
    for index, candidate in enumerate(session.candidates):
        mark = "[x]" if session.is_selected(index) else "[ ]"
        sign = "-" if candidate.type is TransactionType.EXPENSE else "+"
        category = ""
        if candidate.suggested_category_id is not None:
            category = category_service.format_category_path(candidate.suggested_category_id)
        duplicate = "  (possible duplicate)" if session.is_duplicate(index) else ""
        click.echo(
            f"{index + 1:<5} {mark:<4} {str(candidate.date):<12} "
            f"{f'{sign}${candidate.amount:,.2f}':<13} {category[:25]:<25} "
            f"{candidate.description[:35]}{duplicate}"
        )
    click.echo("-" * 100)
    click.echo(
        f"{len(session.selected)} of {len(session)} selected, "
        f"{len(session.duplicates)} possible duplicate(s)"
    )


@click.command("import")
@click.argument("ofx_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--account", required=True, help="Account name or ID")
@click.option("--skip-duplicates", is_flag=True, help="Deselect possible duplicates")
@click.option("--exclude", "excluded", type=int, multiple=True, help="Deselect row N (repeatable)")
@click.option("--drop", "dropped", type=int, multiple=True, help="Remove row N from the import (repeatable)")
@click.option(
    "--category",
    "assignments",
    multiple=True,
    help="Assign a category to row N, as N=CATEGORY_PATH (repeatable)",
)
@click.option("--yes", is_flag=True, help="Import without asking for confirmation")
@click.pass_context
def import_ofx(
    ctx,
    ofx_file: str,
    account: str,
    skip_duplicates: bool,
    excluded: tuple[int, ...],
    dropped: tuple[int, ...],
    assignments: tuple[str, ...],
    yes: bool,
):
    """Import transactions from an OFX bank statement.

    Every statement row is selected by default; rows matching an existing
    transaction (same amount and type, one day apart at most) are flagged as
    possible duplicates. Row numbers refer to the preview listing.

    Examples:
        pocketledger import statement.ofx --account Checking
        pocketledger import statement.ofx --account 1 --skip-duplicates --category 3="Food > Groceries"
    """
    db = ctx.obj["db"]
    service = StatementImportService(db)
    account_service = AccountService(db)
    category_service = CategoryService(db)

    account_id = resolve_account_or_exit(ctx, account_service, account)
    parsed_assignments = [_parse_category_assignment(value) for value in assignments]

    try:
        session = service.preview(ofx_file, account_id)

        for number, path in parsed_assignments:
            category = category_service.require_category_by_path(path)
            session = session.set_category(number - 1, category.id)
        if skip_duplicates:
            session = session.set_selected(session.duplicates, False)
        session = session.set_selected([number - 1 for number in excluded], False)
        for number in sorted(set(dropped), reverse=True):
            session = session.remove(number - 1)
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"\nStatement preview ({len(session)} transaction(s)):")
    _print_session(session, category_service)

    if not session.selected:
        click.echo("Nothing selected; no transactions imported.")
        return

    if not yes and not click.confirm(f"Import {len(session.selected)} transaction(s)?"):
        click.echo("Import cancelled.")
        return

    try:
        result = service.commit(session)
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo("\nImport complete:")
    click.echo(f"  Imported: {result['imported_count']} transactions")


def register_commands(cli):
    """Register import command with main CLI."""
    cli.add_command(import_ofx)
