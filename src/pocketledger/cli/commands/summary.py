"""Summary commands."""

import click
from pocketledger.cli.error_handling import handle_domain_error, resolve_account_or_exit
from pocketledger.domain.account import AccountService
from pocketledger.domain.report import ReportService
from pocketledger.utils.date_parser import parse_date


def _parse_range(ctx, start_date: str | None, end_date: str | None):
    start = end = None
    try:
        if start_date:
            start = parse_date(start_date)
        if end_date:
            end = parse_date(end_date)
    except ValueError as e:
        click.echo(f"Error: Invalid date: {e}", err=True)
        ctx.exit(1)
    return start, end


def _describe_range(start, end) -> str:
    if start is None and end is None:
        return "all time"
    return f"{start or '...'} to {end or '...'}"


def _date_options(command):
    command = click.option("--account", help="Account name or ID")(command)
    command = click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")(command)
    command = click.option(
        "--start-date", help="Start date (YYYY-MM-DD or relative like 'last month')"
    )(command)
    return command


@click.command("summary")
@_date_options
@click.pass_context
def summary(ctx, start_date: str | None, end_date: str | None, account: str | None) -> None:
    """Show income, expenses and balance for a period.

    Examples:
        pocketledger summary --start-date 2024-03-01 --end-date 2024-03-31
    """
    db = ctx.obj["db"]
    start, end = _parse_range(ctx, start_date, end_date)
    account_id = resolve_account_or_exit(ctx, AccountService(db), account) if account else None

    try:
        report = ReportService(db).summary(start, end, account_id=account_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nSummary for {_describe_range(start, end)}:")
    click.echo("-" * 40)
    click.echo(f"{'Income':<20} ${report.total_income:>16,.2f}")
    click.echo(f"{'Expenses':<20} ${report.total_expense:>16,.2f}")
    click.echo("-" * 40)
    click.echo(f"{'Balance':<20} ${report.balance:>16,.2f}")
    click.echo(f"{'Transactions':<20} {report.transaction_count:>17}")


@click.command("by-category")
@_date_options
@click.pass_context
def by_category(ctx, start_date: str | None, end_date: str | None, account: str | None) -> None:
    """Show expenses per category, largest first."""
    db = ctx.obj["db"]
    start, end = _parse_range(ctx, start_date, end_date)
    account_id = resolve_account_or_exit(ctx, AccountService(db), account) if account else None

    try:
        rows = ReportService(db).by_category(start, end, account_id=account_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    if not rows:
        click.echo("No expenses found.")
        return

    click.echo(f"\nExpenses by category for {_describe_range(start, end)}:")
    click.echo("-" * 70)
    for row in rows:
        click.echo(f"{row.category_name:<45} ${row.total:>12,.2f} {row.percentage:>7}%")
    click.echo("-" * 70)
    total = sum(row.total for row in rows)
    click.echo(f"{'TOTAL':<45} ${total:>12,.2f}")


def register_commands(cli):
    """Register summary commands with main CLI."""
    cli.add_command(summary)
    cli.add_command(by_category)
