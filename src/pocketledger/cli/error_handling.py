"""Turning domain failures into CLI exits."""

import logging

import click

from pocketledger.domain.account import AccountService
from pocketledger.domain.errors import DomainError

logger = logging.getLogger(__name__)

EXIT_FAILURE = 1


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Print ``error`` on stderr and stop the command with a failure status."""
    logger.debug("%s failed: %r", ctx.command_path, error)
    click.echo(f"Error: {error}", err=True)
    ctx.exit(EXIT_FAILURE)


def resolve_account_or_exit(
    ctx: click.Context, account_service: AccountService, account: str | int
) -> int:
    """Account ID for a name or ID given on the command line."""
    try:
        return account_service.resolve_account(account)
    except DomainError as e:
        handle_domain_error(ctx, e)
