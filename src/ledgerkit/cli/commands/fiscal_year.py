"""Fiscal year commands."""

import click
from ledgerkit.cli.error_handling import reported_errors
from ledgerkit.cli.resolution import resolve_fiscal_year_or_exit, resolve_tenant_or_exit
from ledgerkit.domain.fiscal_year import FiscalYearService
from ledgerkit.utils.date_parser import parse_date, year_range


@click.group()
def fiscal_year_group():
    """Manage fiscal years."""
    pass


@fiscal_year_group.command("create")
@click.argument("tenant", metavar="TENANT")
@click.argument("name", metavar="NAME")
@click.option("--start", "start_date", help="First day (YYYY-MM-DD)")
@click.option("--end", "end_date", help="Last day (YYYY-MM-DD)")
@click.option("--year", type=int, help="Calendar year shortcut for --start/--end")
@click.option("--activate", is_flag=True, help="Make it the tenant's active fiscal year")
@click.pass_context
def create_fiscal_year(
    ctx,
    tenant: str,
    name: str,
    start_date: str | None,
    end_date: str | None,
    year: int | None,
    activate: bool,
):
    """Create a fiscal year.

    TENANT can be a tenant name or ID.

    Examples:
        ledgerkit fiscal-year create "Muster GmbH" 2024 --year 2024 --activate
        ledgerkit fiscal-year create "Muster GmbH" "2024/25" --start 2024-07-01 --end 2025-06-30
    """
    tenant_id = resolve_tenant_or_exit(ctx, tenant)

    if year is not None:
        if start_date or end_date:
            click.echo("Error: --year cannot be combined with --start or --end.", err=True)
            ctx.exit(1)
        start, end = year_range(year)
    else:
        if not start_date or not end_date:
            click.echo("Error: Either --year or both --start and --end are required.", err=True)
            ctx.exit(1)
        try:
            start = parse_date(start_date)
            end = parse_date(end_date)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)

    service = FiscalYearService(ctx.obj["db"])
    with reported_errors(ctx):
        fiscal_year_id = service.create_fiscal_year(tenant_id, name, start, end)
        if activate:
            service.set_active_fiscal_year(tenant_id, fiscal_year_id)
    click.echo(f"Created fiscal year '{name}' ({start} - {end}, ID: {fiscal_year_id})")
    if activate:
        click.echo("Fiscal year is now active")


@fiscal_year_group.command("list")
@click.argument("tenant", metavar="TENANT")
@click.pass_context
def list_fiscal_years(ctx, tenant: str):
    """List a tenant's fiscal years, newest first."""
    tenant_id = resolve_tenant_or_exit(ctx, tenant)
    service = FiscalYearService(ctx.obj["db"])

    fiscal_years = service.list_fiscal_years(tenant_id)
    if not fiscal_years:
        click.echo("No fiscal years found.")
        return

    active = service.get_active_fiscal_year(tenant_id)
    names = {fy.id: fy.name for fy in fiscal_years}
    click.echo("\nFiscal years:")
    click.echo("-" * 80)
    for fy in fiscal_years:
        status = "closed" if fy.is_closed else "open"
        if active is not None and active.id == fy.id:
            status += ", active"
        line = f"ID: {fy.id:3d} | {fy.name:12s} | {fy.start_date} - {fy.end_date} | {status}"
        if fy.carry_forward_source_fiscal_year_id is not None:
            source = names.get(fy.carry_forward_source_fiscal_year_id, fy.carry_forward_source_fiscal_year_id)
            line += f" | opened from {source}"
        click.echo(line)


@fiscal_year_group.command("close")
@click.argument("tenant", metavar="TENANT")
@click.argument("fiscal_year", metavar="FISCAL_YEAR")
@click.pass_context
def close_fiscal_year(ctx, tenant: str, fiscal_year: str):
    """Close a fiscal year against new postings."""
    tenant_id = resolve_tenant_or_exit(ctx, tenant)
    fiscal_year_id = resolve_fiscal_year_or_exit(ctx, tenant_id, fiscal_year)
    with reported_errors(ctx):
        closed = FiscalYearService(ctx.obj["db"]).close_fiscal_year(tenant_id, fiscal_year_id)
    click.echo(f"Closed fiscal year '{closed.name}'")


@fiscal_year_group.command("reopen")
@click.argument("tenant", metavar="TENANT")
@click.argument("fiscal_year", metavar="FISCAL_YEAR")
@click.pass_context
def reopen_fiscal_year(ctx, tenant: str, fiscal_year: str):
    """Reopen a closed fiscal year."""
    tenant_id = resolve_tenant_or_exit(ctx, tenant)
    fiscal_year_id = resolve_fiscal_year_or_exit(ctx, tenant_id, fiscal_year)
    with reported_errors(ctx):
        reopened = FiscalYearService(ctx.obj["db"]).reopen_fiscal_year(tenant_id, fiscal_year_id)
    click.echo(f"Reopened fiscal year '{reopened.name}'")


@fiscal_year_group.command("activate")
@click.argument("tenant", metavar="TENANT")
@click.argument("fiscal_year", metavar="FISCAL_YEAR")
@click.pass_context
def activate_fiscal_year(ctx, tenant: str, fiscal_year: str):
    """Make a fiscal year the default for new journal entries."""
    tenant_id = resolve_tenant_or_exit(ctx, tenant)
    fiscal_year_id = resolve_fiscal_year_or_exit(ctx, tenant_id, fiscal_year)
    with reported_errors(ctx):
        FiscalYearService(ctx.obj["db"]).set_active_fiscal_year(tenant_id, fiscal_year_id)
    click.echo(f"Fiscal year {fiscal_year} is now active")


@fiscal_year_group.command("delete")
@click.argument("tenant", metavar="TENANT")
@click.argument("fiscal_year", metavar="FISCAL_YEAR")
@click.pass_context
def delete_fiscal_year(ctx, tenant: str, fiscal_year: str):
    """Delete a fiscal year.

    Only fiscal years without journal entries and without carry-forward
    links can be deleted.
    """
    tenant_id = resolve_tenant_or_exit(ctx, tenant)
    fiscal_year_id = resolve_fiscal_year_or_exit(ctx, tenant_id, fiscal_year)

    if not click.confirm(f"Are you sure you want to delete fiscal year '{fiscal_year}'?"):
        click.echo("Deletion cancelled.")
        return

    with reported_errors(ctx):
        FiscalYearService(ctx.obj["db"]).delete_fiscal_year(tenant_id, fiscal_year_id)
    click.echo(f"Deleted fiscal year '{fiscal_year}'")


def register_commands(cli):
    """Register fiscal year commands with main CLI."""
    cli.add_command(fiscal_year_group, name="fiscal-year")
