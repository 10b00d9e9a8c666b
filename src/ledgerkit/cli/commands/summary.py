"""Summary and account ledger commands."""

import click
from ledgerkit.cli.error_handling import reported_errors
from ledgerkit.cli.formatting import format_amount, format_currency
from ledgerkit.cli.resolution import (
    resolve_account_or_exit,
    resolve_fiscal_year_or_exit,
    resolve_tenant_or_exit,
)
from ledgerkit.domain.chart import iter_accounts
from ledgerkit.domain.entities import ZERO, AggregationPeriod
from ledgerkit.domain.journal import JournalService
from ledgerkit.domain.summary import SummaryService

TOTAL_FIELDS = [
    ("Total assets", "total_assets"),
    ("Total liabilities", "total_liabilities"),
    ("Equity", "equity"),
    ("Total revenue", "total_revenue"),
    ("Total expenses", "total_expenses"),
    ("Net profit/loss", "net_profit_loss"),
]


def _display_totals(current, baseline=None):
    if baseline is None:
        click.echo(f"{'':<40} {'Balance':>20}")
    else:
        click.echo(f"{'':<40} {'Balance':>20} {'Baseline':>20} {'Change':>20}")
    click.echo("-" * 80 if baseline is None else "-" * 104)
    for label, field in TOTAL_FIELDS:
        value = getattr(current, field)
        if baseline is None:
            click.echo(f"{label:<40} {format_currency(value):>20}")
        else:
            previous = getattr(baseline, field)
            click.echo(
                f"{label:<40} {format_currency(value):>20} "
                f"{format_currency(previous):>20} {format_currency(value - previous):>20}"
            )


def _display_accounts(chart, current, baseline=None):
    click.echo()
    click.echo(f"{'Account':<40} {'Type':<10} {'Balance':>20}")
    click.echo("-" * 80)
    for account in iter_accounts(chart):
        balance = current.account_balances.get(account.id, ZERO)
        if baseline is not None:
            balance_change = balance - baseline.account_balances.get(account.id, ZERO)
            if balance == 0 and balance_change == 0:
                continue
        elif balance == 0:
            continue
        label = f"{account.number} {account.name}"
        click.echo(f"{label[:40]:<40} {account.main_type.value:<10} {format_currency(balance):>20}")


@click.command("summary")
@click.argument("tenant", metavar="TENANT")
@click.option("--fiscal-year", help="Fiscal year name or ID (default: whole ledger)")
@click.option("--baseline-fiscal-year", help="Compare against this fiscal year's closing balances")
@click.option(
    "--breakdown",
    type=click.Choice([period.value for period in AggregationPeriod], case_sensitive=False),
    help="Split revenue and expenses of the fiscal year into periods",
)
@click.option("--accounts", "show_accounts", is_flag=True, help="Show per-account balances")
@click.pass_context
def summary(
    ctx,
    tenant: str,
    fiscal_year: str | None,
    baseline_fiscal_year: str | None,
    breakdown: str | None,
    show_accounts: bool,
):
    """Show balance sheet and income totals.

    Examples:
        ledgerkit summary "Muster GmbH" --fiscal-year 2024
        ledgerkit summary "Muster GmbH" --fiscal-year 2025 --baseline-fiscal-year 2024
        ledgerkit summary "Muster GmbH" --fiscal-year 2024 --breakdown monthly
    """
    db = ctx.obj["db"]
    tenant_id = resolve_tenant_or_exit(ctx, tenant)
    if (baseline_fiscal_year or breakdown) and not fiscal_year:
        click.echo("Error: --baseline-fiscal-year and --breakdown require --fiscal-year.", err=True)
        ctx.exit(1)

    fiscal_year_id = resolve_fiscal_year_or_exit(ctx, tenant_id, fiscal_year) if fiscal_year else None
    baseline_id = None
    if baseline_fiscal_year:
        baseline_id = resolve_fiscal_year_or_exit(ctx, tenant_id, baseline_fiscal_year)

    service = SummaryService(db)
    with reported_errors(ctx):
        chart = JournalService(db).get_tenant_chart(tenant_id)
        baseline = None
        if baseline_id is not None:
            change = service.compare_fiscal_years(tenant_id, fiscal_year_id, baseline_id)
            current, baseline = change.current, change.baseline
        else:
            current = service.get_summary(tenant_id, fiscal_year_id)
        items = []
        if breakdown:
            items = service.get_breakdown(tenant_id, fiscal_year_id, AggregationPeriod(breakdown.lower()))

    scope = f"fiscal year {fiscal_year}" if fiscal_year else "all fiscal years"
    click.echo(f"\nFinancial summary ({scope}):")
    _display_totals(current, baseline)

    if show_accounts:
        _display_accounts(chart, current, baseline)

    if current.skipped_line_ids:
        click.echo(
            f"\nWarning: {len(current.skipped_line_ids)} line(s) reference accounts "
            "outside the chart and were ignored.",
            err=True,
        )

    if breakdown:
        click.echo()
        click.echo(f"{'Period':<12} {'Revenue':>20} {'Expenses':>20} {'Net':>20}")
        click.echo("-" * 75)
        for item in items:
            click.echo(
                f"{item.period_label:<12} {format_currency(item.revenue):>20} "
                f"{format_currency(item.expenses):>20} {format_currency(item.net_profit_loss):>20}"
            )


@click.command("ledger")
@click.argument("tenant", metavar="TENANT")
@click.argument("account", metavar="ACCOUNT")
@click.option("--fiscal-year", help="Fiscal year name or ID (default: whole ledger)")
@click.pass_context
def ledger(ctx, tenant: str, account: str, fiscal_year: str | None):
    """Show the postings of one account with a running balance.

    ACCOUNT can be an account number or ID.
    """
    db = ctx.obj["db"]
    tenant_id = resolve_tenant_or_exit(ctx, tenant)
    fiscal_year_id = resolve_fiscal_year_or_exit(ctx, tenant_id, fiscal_year) if fiscal_year else None

    with reported_errors(ctx):
        chart = JournalService(db).get_tenant_chart(tenant_id)
    account_obj = resolve_account_or_exit(ctx, chart, account)

    with reported_errors(ctx):
        rows = SummaryService(db).get_account_ledger(tenant_id, account_obj.id, fiscal_year_id)

    click.echo(f"\n{account_obj.number} {account_obj.name} ({account_obj.main_type.value})")
    if not rows:
        click.echo("No postings found.")
        return

    click.echo(f"{'No.':>5}  {'Date':<10}  {'Description':<30} {'Debit':>14} {'Credit':>14} {'Balance':>18}")
    click.echo("-" * 100)
    for row in rows:
        click.echo(
            f"{row.entry_number:>5}  {row.date.isoformat():<10}  {row.description[:30]:<30} "
            f"{format_amount(row.debit):>14} {format_amount(row.credit):>14} "
            f"{format_currency(row.balance):>18}"
        )


def register_commands(cli):
    """Register summary commands with main CLI."""
    cli.add_command(summary)
    cli.add_command(ledger)
