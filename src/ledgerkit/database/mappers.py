"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so the chart, entry and fiscal
year entities stay stable when the database schema changes.
"""

from decimal import Decimal
from typing import Optional

from ledgerkit.domain import entities as domain
from ledgerkit.database.models import (
    Tenant as ORMTenant,
    ChartOfAccounts as ORMChartOfAccounts,
    AccountGroup as ORMAccountGroup,
    Account as ORMAccount,
    FiscalYear as ORMFiscalYear,
    JournalEntry as ORMJournalEntry,
    JournalEntryLine as ORMJournalEntryLine,
)


def _amount(value) -> Optional[Decimal]:
    """Normalize a stored numeric value to a two-place Decimal."""
    if value is None:
        return None
    return Decimal(value).quantize(Decimal("0.01"))


def tenant_to_domain(orm_tenant: ORMTenant) -> domain.Tenant:
    """Convert SQLAlchemy Tenant model to domain Tenant entity."""
    return domain.Tenant(
        id=orm_tenant.id,
        name=orm_tenant.name,
        chart_of_accounts_id=orm_tenant.chart_of_accounts_id,
        active_fiscal_year_id=orm_tenant.active_fiscal_year_id,
        created_at=orm_tenant.created_at,
    )


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        group_id=orm_account.group_id,
        number=orm_account.number,
        name=orm_account.name,
        main_type=domain.MainType(orm_account.main_type),
        opening_balance=_amount(orm_account.opening_balance) or Decimal("0.00"),
        description=orm_account.description,
        created_at=orm_account.created_at,
    )


def account_group_to_domain(orm_group: ORMAccountGroup) -> domain.AccountGroup:
    """Convert SQLAlchemy AccountGroup model to domain AccountGroup entity."""
    return domain.AccountGroup(
        id=orm_group.id,
        chart_id=orm_group.chart_id,
        name=orm_group.name,
        accounts=tuple(account_to_domain(acc) for acc in orm_group.accounts),
    )


def chart_to_domain(orm_chart: ORMChartOfAccounts) -> domain.ChartOfAccounts:
    """Convert SQLAlchemy ChartOfAccounts model, with groups and accounts."""
    return domain.ChartOfAccounts(
        id=orm_chart.id,
        name=orm_chart.name,
        tenant_id=orm_chart.tenant_id,
        retained_earnings_account_id=orm_chart.retained_earnings_account_id,
        created_at=orm_chart.created_at,
        groups=tuple(account_group_to_domain(group) for group in orm_chart.groups),
    )


def fiscal_year_to_domain(orm_fiscal_year: ORMFiscalYear) -> domain.FiscalYear:
    """Convert SQLAlchemy FiscalYear model to domain FiscalYear entity."""
    return domain.FiscalYear(
        id=orm_fiscal_year.id,
        tenant_id=orm_fiscal_year.tenant_id,
        name=orm_fiscal_year.name,
        start_date=orm_fiscal_year.start_date,
        end_date=orm_fiscal_year.end_date,
        is_closed=orm_fiscal_year.is_closed,
        carry_forward_source_fiscal_year_id=orm_fiscal_year.carry_forward_source_fiscal_year_id,
        created_at=orm_fiscal_year.created_at,
        updated_at=orm_fiscal_year.updated_at,
    )


def journal_line_to_domain(orm_line: ORMJournalEntryLine) -> domain.JournalEntryLine:
    """Convert SQLAlchemy JournalEntryLine model to domain entity."""
    return domain.JournalEntryLine(
        id=orm_line.id,
        account_id=orm_line.account_id,
        debit=_amount(orm_line.debit),
        credit=_amount(orm_line.credit),
    )


def journal_entry_to_domain(orm_entry: ORMJournalEntry) -> domain.JournalEntry:
    """Convert SQLAlchemy JournalEntry model, with its lines."""
    return domain.JournalEntry(
        id=orm_entry.id,
        tenant_id=orm_entry.tenant_id,
        fiscal_year_id=orm_entry.fiscal_year_id,
        entry_number=orm_entry.entry_number,
        date=orm_entry.date,
        description=orm_entry.description,
        posted=orm_entry.posted,
        is_carry_forward=orm_entry.is_carry_forward,
        created_at=orm_entry.created_at,
        updated_at=orm_entry.updated_at,
        lines=tuple(journal_line_to_domain(line) for line in orm_entry.lines),
        attachments=tuple(orm_entry.attachments or ()),
    )
