"""Account management commands."""

import click
from pocketledger.cli.error_handling import handle_domain_error, resolve_account_or_exit
from pocketledger.domain.account import AccountService
from pocketledger.domain.entities import AccountType
from pocketledger.utils.date_parser import parse_date


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option(
    "--type",
    "account_type",
    type=click.Choice([t.value for t in AccountType], case_sensitive=False),
    default=AccountType.CHECKING.value,
    help="Account type (default: checking)",
)
@click.option("--closing-day", type=int, help="Day of month the card closes (credit cards)")
@click.option("--due-day", type=int, help="Day of month the card invoice is due")
@click.pass_context
def create_account(
    ctx, name: str, account_type: str, closing_day: int | None, due_day: int | None
):
    """Create a new account.

    Examples:
        pocketledger account create "Checking"
        pocketledger account create "Visa" --type credit_card --closing-day 10 --due-day 20
    """
    db = ctx.obj["db"]
    service = AccountService(db)

    try:
        account_id = service.create_account(
            name=name,
            account_type=account_type.lower(),
            closing_day=closing_day,
            due_day=due_day,
        )
        click.echo(f"Created account '{name}' (ID: {account_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List all accounts."""
    db = ctx.obj["db"]
    service = AccountService(db)

    accounts = service.list_accounts()
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 60)
    for acc in accounts:
        line = f"ID: {acc.id:3d} | {acc.name:20s} | {acc.account_type.value}"
        if acc.closing_day is not None:
            line += f" | closes {acc.closing_day}, due {acc.due_day or '-'}"
        click.echo(line)


@account_group.command("invoice")
@click.argument("account", metavar="ACCOUNT")
@click.option("--date", "reference", help="Date inside the wanted period (default: today)")
@click.pass_context
def show_invoice(ctx, account: str, reference: str | None):
    """Show the credit-card invoice period containing a date.

    ACCOUNT can be an account name or ID.

    Examples:
        pocketledger account invoice "Visa"
        pocketledger account invoice 2 --date 2024-03-15
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)

    try:
        reference_date = parse_date(reference) if reference else None
        invoice = service.get_current_invoice(account_id, reference_date)
    except ValueError as e:
        handle_domain_error(ctx, e)

    status = "PAID" if invoice.is_paid else "OPEN"
    click.echo(f"\nInvoice {invoice.period_start} to {invoice.period_end} [{status}]")
    click.echo(f"  Closing day: {invoice.closing_day} | Due day: {invoice.due_day or '-'}")
    click.echo("-" * 60)
    for txn in invoice.transactions:
        click.echo(f"{str(txn.date):<12} ${txn.amount:>10,.2f}  {(txn.description or '')[:34]}")
    click.echo("-" * 60)
    click.echo(f"Total: ${invoice.total:,.2f} ({len(invoice.transactions)} transaction(s))")


@account_group.command("pay-invoice")
@click.argument("account", metavar="ACCOUNT")
@click.option("--date", "reference", help="Date inside the period to settle (default: today)")
@click.option("--unpaid", is_flag=True, help="Clear the paid mark instead")
@click.pass_context
def pay_invoice(ctx, account: str, reference: str | None, unpaid: bool):
    """Mark a credit-card invoice period as paid.

    Examples:
        pocketledger account pay-invoice "Visa"
        pocketledger account pay-invoice "Visa" --date 2024-03-15 --unpaid
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)

    try:
        reference_date = parse_date(reference) if reference else None
        invoice = service.get_current_invoice(account_id, reference_date)
        service.mark_invoice_paid(
            account_id, invoice.period_start, invoice.period_end, paid=not unpaid
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    state = "unpaid" if unpaid else "paid"
    click.echo(
        f"Invoice {invoice.period_start} to {invoice.period_end} "
        f"(${invoice.total:,.2f}) marked {state}"
    )


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
