"""Transaction commands: edits, listings, scoped deletes and series views."""

import click
from pocketledger.cli.error_handling import handle_domain_error, resolve_account_or_exit
from pocketledger.domain.account import AccountService
from pocketledger.domain.category import CategoryService
from pocketledger.domain.entities import GroupSummary, TransactionType
from pocketledger.domain.errors import ScopeResolutionError
from pocketledger.domain.scope import DeleteMode
from pocketledger.domain.transaction import TransactionService
from pocketledger.utils.amount_parser import parse_amount
from pocketledger.utils.date_parser import parse_date


TYPE_CHOICE = click.Choice([t.value for t in TransactionType], case_sensitive=False)


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("update")
@click.argument("transaction_id", type=int)
@click.option("--account", help="Move to this account (name or ID)")
@click.option("--date", help="New date (YYYY-MM-DD, 'today', 'yesterday', ...)")
@click.option("--amount", help="New positive amount, e.g. 75.00")
@click.option("--type", "transaction_type", type=TYPE_CHOICE, help="New direction")
@click.option("--description", help="New description")
@click.option("--category", help="Category path, or \"\" to clear it")
@click.option("--tag", "tags", multiple=True, help="Replace the tags (repeatable)")
@click.pass_context
def update_transaction(
    ctx,
    transaction_id: int,
    account: str | None,
    date: str | None,
    amount: str | None,
    transaction_type: str | None,
    description: str | None,
    category: str | None,
    tags: tuple[str, ...],
) -> None:
    """Change fields of one transaction.

    Only the given options are applied and series membership never changes,
    so editing one installment leaves its siblings alone.

    Examples:
        pocketledger transaction update 7 --amount 75.00
        pocketledger transaction update 7 --category ""
    """
    db = ctx.obj["db"]
    changes = {}

    try:
        if account is not None:
            changes["account_id"] = resolve_account_or_exit(ctx, AccountService(db), account)
        if date is not None:
            changes["date"] = parse_date(date)
        if amount is not None:
            changes["amount"] = parse_amount(amount)
        if category == "":
            changes["clear_category"] = True
        elif category is not None:
            changes["category_id"] = CategoryService(db).require_category_by_path(category).id
        if tags:
            changes["tags"] = tags

        TransactionService(db).update_transaction(
            transaction_id,
            transaction_type=transaction_type,
            description=description,
            **changes,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Updated transaction {transaction_id}")


@transaction_group.command("list")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@click.option("--category", help="Category path (e.g., 'Food > Groceries')")
@click.option("--account", help="Account name or ID")
@click.option("--uncategorized", is_flag=True, help="Show only uncategorized transactions")
@click.option(
    "--type",
    "transaction_type",
    type=TYPE_CHOICE,
    help="Show only income or expenses",
)
@click.pass_context
def list_transactions(
    ctx,
    start_date: str | None,
    end_date: str | None,
    category: str | None,
    account: str | None,
    uncategorized: bool,
    transaction_type: str | None,
):
    """View transactions with optional filters.

    Installments show their position (e.g. 2/10); recurring occurrences are
    marked with "R".
    """
    db = ctx.obj["db"]
    service = TransactionService(db)
    category_service = CategoryService(db)
    account_service = AccountService(db)

    try:
        start = parse_date(start_date) if start_date else None
        end = parse_date(end_date) if end_date else None
    except ValueError as e:
        click.echo(f"Error: Invalid date: {e}", err=True)
        ctx.exit(1)

    account_id = None
    if account:
        account_id = resolve_account_or_exit(ctx, account_service, account)

    # Empty category path means uncategorized
    if uncategorized:
        category = ""

    try:
        transactions = service.list_transactions(
            start_date=start,
            end_date=end,
            category_path=category,
            account_id=account_id,
            transaction_type=transaction_type.lower() if transaction_type else None,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    if not transactions:
        click.echo("No transactions found.")
        return

    accounts = {acc.id: acc.name for acc in account_service.list_accounts()}

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo("-" * 110)
    click.echo(
        f"{'ID':<6} {'Date':<12} {'Amount':<13} {'Series':<7} {'Account':<18} "
        f"{'Category':<25} {'Description':<25}"
    )
    click.echo("-" * 110)

    for txn in transactions:
        account_name = accounts.get(txn.account_id, "Unknown")
        category_name = ""
        if txn.category_id:
            category_name = category_service.format_category_path(txn.category_id)

        sign = "-" if txn.type is TransactionType.EXPENSE else "+"
        amount_str = f"{sign}${txn.amount:,.2f}"
        if txn.installment_group_id:
            series = f"{txn.installment_index}/{txn.installment_total}"
        elif txn.recurring_group_id:
            series = "R"
        else:
            series = ""
        description = (txn.description or "")[:25]

        click.echo(
            f"{txn.id:<6} {str(txn.date):<12} {amount_str:<13} {series:<7} {account_name:<18} "
            f"{category_name:<25} {description:<25}"
        )

    total_expenses = sum(txn.amount for txn in transactions if txn.type is TransactionType.EXPENSE)
    total_income = sum(txn.amount for txn in transactions if txn.type is TransactionType.INCOME)
    click.echo("-" * 110)
    click.echo(
        f"{'TOTAL':<6} {'':<12} Expenses: ${total_expenses:,.2f} | "
        f"Income: ${total_income:,.2f} | Count: {len(transactions)}"
    )


@transaction_group.command("delete")
@click.argument("transaction_id", type=int)
@click.option(
    "--scope",
    type=click.Choice([m.value for m in DeleteMode], case_sensitive=False),
    default=DeleteMode.SINGLE.value,
    help="For series members: only this one, this and later ones, or the whole series",
)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_transaction(ctx, transaction_id: int, scope: str, yes: bool) -> None:
    """Delete a transaction, optionally with its series siblings.

    Examples:
        pocketledger transaction delete 1
        pocketledger transaction delete 7 --scope future
        pocketledger transaction delete 7 --scope all --yes
    """
    db = ctx.obj["db"]
    transaction_service = TransactionService(db)
    mode = DeleteMode(scope.lower())

    allow_safe_fallback = False
    try:
        ids = transaction_service.resolve_delete_scope(transaction_id, mode)
    except ScopeResolutionError as e:
        click.echo(f"Warning: {e}", err=True)
        if not yes and not click.confirm(
            f"The series reference is inconsistent. Delete only transaction {transaction_id}?"
        ):
            click.echo("Deletion cancelled.")
            return
        ids = e.safe_scope
        allow_safe_fallback = True
    except ValueError as e:
        handle_domain_error(ctx, e)

    if not allow_safe_fallback and not yes:
        if len(ids) == 1:
            question = f"Are you sure you want to delete transaction {transaction_id}?"
        else:
            question = f"This will delete {len(ids)} transactions. Continue?"
        if not click.confirm(question):
            click.echo("Deletion cancelled.")
            return

    try:
        deleted = transaction_service.delete_with_scope(
            transaction_id, mode, allow_safe_fallback=allow_safe_fallback
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted {deleted} transaction(s)")


def _print_groups(groups: list[GroupSummary], category_service: CategoryService) -> None:
    click.echo("-" * 110)
    click.echo(
        f"{'Group':<38} {'Description':<22} {'Paid':<8} {'Monthly':>11} "
        f"{'Total':>12} {'Remaining':>12}  {'Period'}"
    )
    click.echo("-" * 110)
    for group in groups:
        description = (group.description or "")[:22]
        click.echo(
            f"{group.group_id:<38} {description:<22} "
            f"{f'{group.paid_installments}/{group.total_installments}':<8} "
            f"${group.monthly_amount:>10,.2f} ${group.total_amount:>11,.2f} "
            f"${group.remaining_amount:>11,.2f}  {group.first_date}..{group.last_date}"
        )
        if group.category_id:
            click.echo(f"{'':<38} {category_service.format_category_path(group.category_id)}")


@transaction_group.command("installments")
@click.option("--active", "active_only", is_flag=True, help="Only purchases with unpaid installments")
@click.pass_context
def list_installments(ctx, active_only: bool) -> None:
    """Summarize installment purchases."""
    db = ctx.obj["db"]
    groups = TransactionService(db).installment_groups(active_only=active_only)
    if not groups:
        click.echo("No active installment purchases found." if active_only else "No installment purchases found.")
        return
    click.echo(f"\nInstallment purchases ({len(groups)}):")
    _print_groups(groups, CategoryService(db))


@transaction_group.command("recurring")
@click.pass_context
def list_recurring(ctx) -> None:
    """Summarize recurring expenses."""
    db = ctx.obj["db"]
    groups = TransactionService(db).recurring_groups()
    if not groups:
        click.echo("No recurring expenses found.")
        return
    click.echo(f"\nRecurring expenses ({len(groups)}):")
    _print_groups(groups, CategoryService(db))


@transaction_group.command("cancel-recurring")
@click.argument("group_id")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def cancel_recurring(ctx, group_id: str, yes: bool) -> None:
    """Stop a recurring expense, keeping occurrences up to today.

    Examples:
        pocketledger transaction cancel-recurring 3f2b8c1e-...
    """
    db = ctx.obj["db"]
    service = TransactionService(db)

    if not yes and not click.confirm(f"Delete the future occurrences of '{group_id}'?"):
        click.echo("Cancelled.")
        return

    try:
        deleted = service.cancel_recurring(group_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted {deleted} future occurrence(s)")


def register_commands(cli: click.Group) -> None:
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
