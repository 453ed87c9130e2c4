"""Add transaction command."""

import click
from pocketledger.cli.error_handling import handle_domain_error, resolve_account_or_exit
from pocketledger.domain.account import AccountService
from pocketledger.domain.category import CategoryService
from pocketledger.domain.entities import TransactionType
from pocketledger.domain.transaction import TransactionService
from pocketledger.utils.amount_parser import parse_amount
from pocketledger.utils.date_parser import parse_date


@click.command("add")
@click.option("--account", required=True, help="Account name or ID")
@click.option(
    "--date",
    required=True,
    help="Transaction date, or first date of a series (YYYY-MM-DD or relative like 'today')",
)
@click.option(
    "--amount",
    required=True,
    help="Amount; the total price with --installments, the monthly charge with --recurring",
)
@click.option(
    "--type",
    "transaction_type",
    type=click.Choice([t.value for t in TransactionType], case_sensitive=False),
    default=TransactionType.EXPENSE.value,
    help="Transaction type (default: expense)",
)
@click.option("--description", help="Transaction description")
@click.option("--category", help="Category path (e.g., 'Food > Groceries')")
@click.option("--tag", "tags", multiple=True, help="Tag (repeatable)")
@click.option("--installments", type=int, help="Split the amount into N monthly installments")
@click.option("--recurring", type=int, help="Repeat the amount for N months")
@click.pass_context
def add_transaction(
    ctx,
    account: str,
    date: str,
    amount: str,
    transaction_type: str,
    description: str | None,
    category: str | None,
    tags: tuple[str, ...],
    installments: int | None,
    recurring: int | None,
):
    """Add a transaction, an installment purchase or a recurring expense.

    Examples:
        pocketledger add --account 1 --date 2024-01-15 --amount 50.00 --description "Grocery store"
        pocketledger add --account Visa --date 2024-01-31 --amount 100.00 --installments 3
        pocketledger add --account 1 --date today --amount 39.90 --recurring 12 --category Leisure
    """
    if installments is not None and recurring is not None:
        click.echo("Error: --installments and --recurring cannot be combined", err=True)
        ctx.exit(1)

    db = ctx.obj["db"]
    transaction_service = TransactionService(db)
    account_service = AccountService(db)
    category_service = CategoryService(db)

    account_id = resolve_account_or_exit(ctx, account_service, account)

    try:
        txn_date = parse_date(date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    try:
        txn_amount = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    category_id = None
    if category:
        try:
            category_id = category_service.require_category_by_path(category).id
        except ValueError as e:
            handle_domain_error(ctx, e)

    common = dict(
        account_id=account_id,
        transaction_type=transaction_type.lower(),
        description=description,
        category_id=category_id,
        tags=tags,
    )
    try:
        if installments is not None:
            created = transaction_service.create_installment_purchase(
                principal=txn_amount, installments=installments, start_date=txn_date, **common
            )
        elif recurring is not None:
            created = transaction_service.create_recurring_expense(
                monthly_amount=txn_amount, recurrences=recurring, start_date=txn_date, **common
            )
        else:
            transaction_id = transaction_service.create_transaction(
                amount=txn_amount, date=txn_date, **common
            )
            click.echo(f"Created transaction {transaction_id}")
            click.echo(f"  Date: {txn_date}")
            click.echo(f"  Amount: ${txn_amount:,.2f} ({transaction_type.lower()})")
            if description:
                click.echo(f"  Description: {description}")
            if category:
                click.echo(f"  Category: {category}")
            return
    except ValueError as e:
        handle_domain_error(ctx, e)

    label = "installment purchase" if installments is not None else "recurring expense"
    group_id = created[0].installment_group_id or created[0].recurring_group_id
    click.echo(f"Created {label} {group_id} with {len(created)} transactions:")
    for txn in created:
        position = f"{txn.installment_index}/{txn.installment_total}" if txn.installment_index else ""
        click.echo(f"  {txn.id:<6} {str(txn.date):<12} ${txn.amount:>10,.2f} {position}")


def register_commands(cli):
    """Register add command with main CLI."""
    cli.add_command(add_transaction)
