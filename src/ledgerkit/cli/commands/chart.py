"""Chart of accounts commands."""

import click
from ledgerkit.cli.error_handling import reported_errors
from ledgerkit.cli.formatting import format_currency
from ledgerkit.cli.resolution import resolve_account_or_exit, resolve_tenant_or_exit
from ledgerkit.domain.chart import ChartService
from ledgerkit.domain.entities import MainType
from ledgerkit.domain.tenant import TenantService
from ledgerkit.utils.amount_parser import parse_amount

MAIN_TYPE_CHOICES = [main_type.value for main_type in MainType]


def _require_chart(ctx, chart_id: int):
    with reported_errors(ctx):
        return ChartService(ctx.obj["db"]).require_chart(chart_id)


@click.group()
def chart_group():
    """Manage charts of accounts."""
    pass


@chart_group.command("create")
@click.argument("name", metavar="CHART_NAME")
@click.option("--tenant", help="Owning tenant name or ID (omit to create a template)")
@click.pass_context
def create_chart(ctx, name: str, tenant: str | None):
    """Create an empty chart of accounts.

    Without --tenant the chart is a template that tenants can clone.

    Examples:
        ledgerkit chart create "KMU Kontenrahmen"
        ledgerkit chart create "Own chart" --tenant "Muster GmbH"
    """
    tenant_id = resolve_tenant_or_exit(ctx, tenant) if tenant else None
    service = ChartService(ctx.obj["db"])
    with reported_errors(ctx):
        chart_id = service.create_chart(name, tenant_id=tenant_id)
    kind = "template" if tenant_id is None else "chart of accounts"
    click.echo(f"Created {kind} '{name}' (ID: {chart_id})")


@chart_group.command("clone")
@click.argument("template_id", type=int, metavar="TEMPLATE_ID")
@click.argument("tenant", metavar="TENANT")
@click.option("--name", help="Name of the copy (defaults to '<tenant> - <template>')")
@click.pass_context
def clone_chart(ctx, template_id: int, tenant: str, name: str | None):
    """Copy a chart for a tenant.

    The copy is assigned to the tenant if the tenant has no chart yet.

    Examples:
        ledgerkit chart clone 1 "Muster GmbH"
    """
    db = ctx.obj["db"]
    tenant_id = resolve_tenant_or_exit(ctx, tenant)
    tenant_service = TenantService(db)
    with reported_errors(ctx):
        chart_id = ChartService(db).clone_chart(template_id, tenant_id, name=name)
        click.echo(f"Cloned chart {template_id} into chart {chart_id}")
        if tenant_service.require_tenant(tenant_id).chart_of_accounts_id is None:
            tenant_service.assign_chart(tenant_id, chart_id)
            click.echo(f"Assigned chart {chart_id} to tenant {tenant_id}")


@chart_group.command("list")
@click.option("--tenant", help="Only charts of this tenant (name or ID)")
@click.pass_context
def list_charts(ctx, tenant: str | None):
    """List charts of accounts."""
    tenant_id = resolve_tenant_or_exit(ctx, tenant) if tenant else None
    charts = ChartService(ctx.obj["db"]).list_charts(tenant_id=tenant_id)
    if not charts:
        click.echo("No charts of accounts found.")
        return

    click.echo("\nCharts of accounts:")
    click.echo("-" * 60)
    for chart in charts:
        owner = "template" if chart.is_template else f"tenant {chart.tenant_id}"
        click.echo(f"ID: {chart.id:3d} | {chart.name:30s} | {owner}")


@chart_group.command("show")
@click.argument("chart_id", type=int, metavar="CHART_ID")
@click.pass_context
def show_chart(ctx, chart_id: int):
    """Show groups and accounts of a chart."""
    chart = _require_chart(ctx, chart_id)

    click.echo(f"\n{chart.name} (ID: {chart.id})")
    click.echo("=" * 80)
    if not chart.groups:
        click.echo("No account groups.")
        return
    for group in chart.groups:
        click.echo(f"{group.name} (group {group.id})")
        click.echo("-" * 80)
        for account in group.accounts:
            marker = " *" if account.id == chart.retained_earnings_account_id else ""
            click.echo(
                f"    {account.number:<8} {account.name + marker:<36} "
                f"{account.main_type.value:<10} {format_currency(account.opening_balance):>18}"
            )
    if chart.retained_earnings_account_id is not None:
        click.echo("\n* retained earnings account")


@chart_group.command("add-group")
@click.argument("chart_id", type=int, metavar="CHART_ID")
@click.argument("name", metavar="GROUP_NAME")
@click.pass_context
def add_group(ctx, chart_id: int, name: str):
    """Append an account group to a chart."""
    with reported_errors(ctx):
        group_id = ChartService(ctx.obj["db"]).add_group(chart_id, name)
    click.echo(f"Created group '{name}' (ID: {group_id})")


@chart_group.command("add-account")
@click.argument("group_id", type=int, metavar="GROUP_ID")
@click.argument("number", metavar="NUMBER")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option(
    "--type",
    "main_type",
    required=True,
    type=click.Choice(MAIN_TYPE_CHOICES, case_sensitive=False),
    help="Account classification",
)
@click.option("--opening-balance", default="0", help="Balance at ledger inception")
@click.option("--description", help="Account description")
@click.pass_context
def add_account(
    ctx,
    group_id: int,
    number: str,
    name: str,
    main_type: str,
    opening_balance: str,
    description: str | None,
):
    """Add an account to a group.

    Examples:
        ledgerkit chart add-account 1 1020 "Bank" --type Asset
        ledgerkit chart add-account 3 2970 "Gewinnvortrag" --type Liability
    """
    try:
        balance = parse_amount(opening_balance)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    with reported_errors(ctx):
        account_id = ChartService(ctx.obj["db"]).add_account(
            group_id=group_id,
            number=number,
            name=name,
            main_type=MainType.parse(main_type),
            opening_balance=balance,
            description=description,
        )
    click.echo(f"Created account {number} '{name}' (ID: {account_id})")


@chart_group.command("set-opening-balance")
@click.argument("chart_id", type=int, metavar="CHART_ID")
@click.argument("account", metavar="ACCOUNT")
@click.argument("amount", metavar="AMOUNT")
@click.pass_context
def set_opening_balance(ctx, chart_id: int, account: str, amount: str):
    """Set an account's opening balance.

    ACCOUNT can be an account number or ID. The amount is in the account's
    own sign convention: positive is a normal balance.
    """
    chart = _require_chart(ctx, chart_id)
    account_obj = resolve_account_or_exit(ctx, chart, account)
    try:
        balance = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    with reported_errors(ctx):
        ChartService(ctx.obj["db"]).set_opening_balance(account_obj.id, balance)
    click.echo(f"Opening balance of {account_obj.number} set to {format_currency(balance)}")


@chart_group.command("set-retained-earnings")
@click.argument("chart_id", type=int, metavar="CHART_ID")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def set_retained_earnings(ctx, chart_id: int, account: str):
    """Choose the Liability account that receives net results on carry-forward.

    ACCOUNT can be an account number or ID.
    """
    chart = _require_chart(ctx, chart_id)
    account_obj = resolve_account_or_exit(ctx, chart, account)
    with reported_errors(ctx):
        ChartService(ctx.obj["db"]).set_retained_earnings_account(chart_id, account_obj.id)
    click.echo(f"Net results of chart {chart_id} are booked to {account_obj.number} '{account_obj.name}'")


def register_commands(cli):
    """Register chart commands with main CLI."""
    cli.add_command(chart_group, name="chart")
