"""CLI error handling helpers."""

import logging
from contextlib import contextmanager
from typing import Iterator

import click
from sqlalchemy.exc import SQLAlchemyError

from ledgerkit.domain.errors import DomainError

logger = logging.getLogger(__name__)


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def handle_storage_error(ctx: click.Context, error: SQLAlchemyError) -> None:
    """Render a storage failure without leaking driver details."""
    logger.error("Storage operation failed: %s", error)
    click.echo("Error: Operation failed, please retry", err=True)
    ctx.exit(1)


@contextmanager
def reported_errors(ctx: click.Context) -> Iterator[None]:
    """Turn domain and storage errors raised in the block into CLI errors."""
    try:
        yield
    except ValueError as e:
        handle_domain_error(ctx, e)
    except SQLAlchemyError as e:
        handle_storage_error(ctx, e)
