"""Journal entry commands."""

import click
from ledgerkit.cli.error_handling import reported_errors
from ledgerkit.cli.formatting import format_amount, format_currency
from ledgerkit.cli.resolution import (
    resolve_account_or_exit,
    resolve_fiscal_year_or_exit,
    resolve_tenant_or_exit,
)
from ledgerkit.domain.chart import index_accounts
from ledgerkit.domain.entities import NewJournalEntryLine
from ledgerkit.domain.journal import JournalService
from ledgerkit.utils.amount_parser import parse_posting
from ledgerkit.utils.date_parser import parse_date


@click.group()
def entry_group():
    """Record and manage journal entries."""
    pass


@entry_group.command("add")
@click.argument("tenant", metavar="TENANT")
@click.option(
    "--date",
    "entry_date",
    required=True,
    help="Entry date (YYYY-MM-DD or relative like 'today', 'yesterday')",
)
@click.option("--description", required=True, help="Entry description")
@click.option("--debit", "debits", multiple=True, help="Debit line as ACCOUNT=AMOUNT (repeatable)")
@click.option("--credit", "credits", multiple=True, help="Credit line as ACCOUNT=AMOUNT (repeatable)")
@click.option("--fiscal-year", help="Fiscal year name or ID (defaults to the active one)")
@click.option("--post", is_flag=True, help="Post the entry right away")
@click.option("--attachment", "attachments", multiple=True, help="Attachment reference (repeatable)")
@click.pass_context
def add_entry(
    ctx,
    tenant: str,
    entry_date: str,
    description: str,
    debits: tuple[str, ...],
    credits: tuple[str, ...],
    fiscal_year: str | None,
    post: bool,
    attachments: tuple[str, ...],
):
    """Record a balanced journal entry.

    ACCOUNT in a line is an account number or ID of the tenant's chart.

    Examples:
        ledgerkit entry add "Muster GmbH" --date 2024-03-01 --description "Sale" \\
            --debit 1020=500 --credit 3200=500
    """
    tenant_id = resolve_tenant_or_exit(ctx, tenant)
    service = JournalService(ctx.obj["db"])
    with reported_errors(ctx):
        chart = service.get_tenant_chart(tenant_id)

    try:
        txn_date = parse_date(entry_date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    lines = []
    for side, postings in (("debit", debits), ("credit", credits)):
        for posting in postings:
            try:
                account_ref, amount = parse_posting(posting)
            except ValueError as e:
                click.echo(f"Error: {e}", err=True)
                ctx.exit(1)
            account = resolve_account_or_exit(ctx, chart, account_ref)
            lines.append(NewJournalEntryLine(account_id=account.id, **{side: amount}))

    fiscal_year_id = None
    if fiscal_year:
        fiscal_year_id = resolve_fiscal_year_or_exit(ctx, tenant_id, fiscal_year)

    with reported_errors(ctx):
        entry = service.create_entry(
            tenant_id=tenant_id,
            entry_date=txn_date,
            description=description,
            lines=lines,
            fiscal_year_id=fiscal_year_id,
            posted=post,
            attachments=attachments,
        )
    click.echo(f"Created journal entry {entry.entry_number} (ID: {entry.id})")
    click.echo(f"  Date: {entry.date}")
    click.echo(f"  Amount: {format_currency(entry.total_debit)}")
    if entry.posted:
        click.echo("  Posted")


@entry_group.command("list")
@click.argument("tenant", metavar="TENANT")
@click.option("--fiscal-year", help="Fiscal year name or ID")
@click.option("--lines", "show_lines", is_flag=True, help="Show the lines of each entry")
@click.pass_context
def list_entries(ctx, tenant: str, fiscal_year: str | None, show_lines: bool):
    """List journal entries ordered by date."""
    tenant_id = resolve_tenant_or_exit(ctx, tenant)
    fiscal_year_id = resolve_fiscal_year_or_exit(ctx, tenant_id, fiscal_year) if fiscal_year else None
    service = JournalService(ctx.obj["db"])

    entries = service.list_entries(tenant_id, fiscal_year_id)
    if not entries:
        click.echo("No journal entries found.")
        return

    accounts = {}
    if show_lines:
        with reported_errors(ctx):
            accounts = index_accounts(service.get_tenant_chart(tenant_id))

    click.echo(f"\n{'No.':>5}  {'Date':<10}  {'Description':<40} {'Amount':>16}  Status")
    click.echo("-" * 90)
    for entry in entries:
        status = "posted" if entry.posted else "draft"
        if entry.is_carry_forward:
            status += ", opening"
        click.echo(
            f"{entry.entry_number:>5}  {entry.date.isoformat():<10}  "
            f"{entry.description[:40]:<40} {format_currency(entry.total_debit):>16}  {status}"
        )
        if show_lines:
            for line in entry.lines:
                account = accounts.get(line.account_id)
                label = f"{account.number} {account.name}" if account else f"account {line.account_id}"
                click.echo(
                    f"{'':19}{label[:36]:<36} {format_amount(line.debit):>14} {format_amount(line.credit):>14}"
                )


@entry_group.command("post")
@click.argument("entry_id", type=int, metavar="ENTRY_ID")
@click.pass_context
def post_entry(ctx, entry_id: int):
    """Mark a journal entry as posted."""
    with reported_errors(ctx):
        entry = JournalService(ctx.obj["db"]).post_entry(entry_id)
    click.echo(f"Posted journal entry {entry.entry_number}")


@entry_group.command("delete")
@click.argument("entry_id", type=int, metavar="ENTRY_ID")
@click.pass_context
def delete_entry(ctx, entry_id: int):
    """Delete a draft journal entry. Posted entries cannot be deleted."""
    service = JournalService(ctx.obj["db"])
    with reported_errors(ctx):
        entry = service.require_entry(entry_id)

    if not click.confirm(f"Are you sure you want to delete journal entry {entry.entry_number}?"):
        click.echo("Deletion cancelled.")
        return

    with reported_errors(ctx):
        service.delete_entry(entry_id)
    click.echo(f"Deleted journal entry {entry.entry_number}")


def register_commands(cli):
    """Register journal entry commands with main CLI."""
    cli.add_command(entry_group, name="entry")
