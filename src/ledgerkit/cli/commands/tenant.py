"""Tenant management commands."""

import click
from ledgerkit.cli.error_handling import reported_errors
from ledgerkit.cli.resolution import resolve_tenant_or_exit
from ledgerkit.domain.tenant import TenantService


@click.group()
def tenant_group():
    """Manage tenants."""
    pass


@tenant_group.command("create")
@click.argument("name", metavar="TENANT_NAME")
@click.pass_context
def create_tenant(ctx, name: str):
    """Create a new tenant.

    Examples:
        ledgerkit tenant create "Muster GmbH"
    """
    service = TenantService(ctx.obj["db"])
    with reported_errors(ctx):
        tenant_id = service.create_tenant(name)
    click.echo(f"Created tenant '{name}' (ID: {tenant_id})")


@tenant_group.command("list")
@click.pass_context
def list_tenants(ctx):
    """List all tenants."""
    service = TenantService(ctx.obj["db"])

    tenants = service.list_tenants()
    if not tenants:
        click.echo("No tenants found.")
        return

    click.echo("\nTenants:")
    click.echo("-" * 60)
    for tenant in tenants:
        chart = tenant.chart_of_accounts_id if tenant.chart_of_accounts_id is not None else "-"
        click.echo(f"ID: {tenant.id:3d} | {tenant.name:30s} | Chart: {chart}")


@tenant_group.command("use-chart")
@click.argument("tenant", metavar="TENANT")
@click.argument("chart_id", type=int, metavar="CHART_ID")
@click.pass_context
def use_chart(ctx, tenant: str, chart_id: int):
    """Assign a chart of accounts to a tenant.

    TENANT can be a tenant name or ID. The chart must belong to the tenant;
    clone a template with 'chart clone' first.

    Examples:
        ledgerkit tenant use-chart "Muster GmbH" 2
    """
    tenant_id = resolve_tenant_or_exit(ctx, tenant)
    service = TenantService(ctx.obj["db"])
    with reported_errors(ctx):
        updated = service.assign_chart(tenant_id, chart_id)
    click.echo(f"Tenant '{updated.name}' now uses chart {chart_id}")


def register_commands(cli):
    """Register tenant commands with main CLI."""
    cli.add_command(tenant_group, name="tenant")
