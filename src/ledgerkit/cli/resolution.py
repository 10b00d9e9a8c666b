"""CLI helpers for tenant, fiscal year and account resolution."""

from __future__ import annotations

import click
from ledgerkit.domain.entities import Account, ChartOfAccounts
from ledgerkit.domain.fiscal_year import FiscalYearService
from ledgerkit.domain.tenant import TenantService
from ledgerkit.utils.resolvers import resolve_account, resolve_fiscal_year, resolve_tenant


def resolve_tenant_or_exit(ctx: click.Context, tenant: str | int) -> int:
    """Resolve tenant name or ID, or exit with a CLI error."""
    try:
        return resolve_tenant(TenantService(ctx.obj["db"]), tenant)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)


def resolve_fiscal_year_or_exit(ctx: click.Context, tenant_id: int, fiscal_year: str | int) -> int:
    """Resolve fiscal year name or ID of a tenant, or exit with a CLI error."""
    try:
        return resolve_fiscal_year(FiscalYearService(ctx.obj["db"]), tenant_id, fiscal_year)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)


def resolve_account_or_exit(
    ctx: click.Context, chart: ChartOfAccounts, account: str | int
) -> Account:
    """Resolve account number or ID within a chart, or exit with a CLI error."""
    try:
        return resolve_account(chart, account)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)
