"""Carry-forward command."""

import click
from ledgerkit.cli.error_handling import reported_errors
from ledgerkit.cli.formatting import format_currency
from ledgerkit.cli.resolution import resolve_fiscal_year_or_exit, resolve_tenant_or_exit
from ledgerkit.domain.carry_forward import CarryForwardService
from ledgerkit.domain.fiscal_year import FiscalYearService


@click.command("carry-forward")
@click.argument("tenant", metavar="TENANT")
@click.option("--from", "source", required=True, help="Source fiscal year name or ID")
@click.option("--to", "target", required=True, help="Target fiscal year name or ID")
@click.option("--close-source", is_flag=True, help="Close the source fiscal year afterwards")
@click.option("--replace", is_flag=True, help="Replace an earlier carry-forward into the target")
@click.pass_context
def carry_forward(ctx, tenant: str, source: str, target: str, close_source: bool, replace: bool):
    """Carry closing balances of one fiscal year into the next.

    Balance sheet accounts are booked as one opening entry on the first day
    of the target fiscal year; the net result goes to the chart's retained
    earnings account.

    Examples:
        ledgerkit carry-forward "Muster GmbH" --from 2024 --to 2025 --close-source
    """
    tenant_id = resolve_tenant_or_exit(ctx, tenant)
    source_id = resolve_fiscal_year_or_exit(ctx, tenant_id, source)
    target_id = resolve_fiscal_year_or_exit(ctx, tenant_id, target)

    with reported_errors(ctx):
        source_was_open = not FiscalYearService(ctx.obj["db"]).require_fiscal_year(
            tenant_id, source_id
        ).is_closed
        entry = CarryForwardService(ctx.obj["db"]).carry_forward_balances(
            tenant_id,
            source_id,
            target_id,
            close_source=close_source,
            replace_existing=replace,
        )
    click.echo(
        f"Carried forward {len(entry.lines)} line(s) from {source} to {target} "
        f"as journal entry {entry.entry_number} ({format_currency(entry.total_debit)})"
    )
    if close_source and source_was_open:
        click.echo(f"Closed fiscal year {source}")


def register_commands(cli):
    """Register carry-forward command with main CLI."""
    cli.add_command(carry_forward)
