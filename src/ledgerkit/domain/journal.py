"""Journal entry domain service."""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from ledgerkit.database.base import Database
from ledgerkit.domain.chart import find_account
from ledgerkit.domain.entities import (
    ZERO,
    ChartOfAccounts,
    FiscalYear,
    JournalEntry,
    NewJournalEntryLine,
)
from ledgerkit.domain.errors import (
    ClosedFiscalYearError,
    ConflictError,
    NotFoundError,
    UnbalancedEntryError,
    UnknownAccountError,
    ValidationError,
    account_not_in_chart,
    chart_not_found,
    entry_not_found,
    fiscal_year_closed,
    fiscal_year_not_found,
    no_chart_assigned,
    tenant_not_found,
    unbalanced_entry,
)

logger = logging.getLogger(__name__)

# Largest debit/credit difference still accepted as balanced
BALANCE_TOLERANCE = Decimal("0.005")


def line_totals(lines: Sequence[NewJournalEntryLine]) -> tuple[Decimal, Decimal]:
    """Return (total debit, total credit) of a set of lines."""
    total_debit = sum((line.debit or ZERO for line in lines), ZERO)
    total_credit = sum((line.credit or ZERO for line in lines), ZERO)
    return total_debit, total_credit


def validate_line(line: NewJournalEntryLine) -> None:
    """Check a single line carries exactly one positive amount."""
    debit = line.debit or ZERO
    credit = line.credit or ZERO
    if debit < 0 or credit < 0:
        raise ValidationError(
            f"Line for account {line.account_id} has a negative amount; "
            "use the opposite side instead"
        )
    if debit > 0 and credit > 0:
        raise ValidationError(
            f"Line for account {line.account_id} has both a debit and a credit amount"
        )
    if debit == 0 and credit == 0:
        raise ValidationError(f"Line for account {line.account_id} has no amount")


def validate_entry_lines(chart: ChartOfAccounts, lines: Sequence[NewJournalEntryLine]) -> None:
    """Enforce the double-entry rules on a set of lines.

    Raises:
        ValidationError: If there are fewer than two lines or a line is malformed
        UnknownAccountError: If a line references an account outside the chart
        UnbalancedEntryError: If debits and credits differ by more than the tolerance
    """
    if len(lines) < 2:
        raise ValidationError("A journal entry needs at least two lines")
    for line in lines:
        validate_line(line)
        if find_account(chart, line.account_id) is None:
            raise UnknownAccountError(account_not_in_chart(line.account_id, chart.id))

    total_debit, total_credit = line_totals(lines)
    if abs(total_debit - total_credit) > BALANCE_TOLERANCE:
        raise UnbalancedEntryError(unbalanced_entry(total_debit, total_credit))


class JournalService:
    """Service for recording and managing journal entries."""

    def __init__(self, db: Database):
        """Initialize journal service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_tenant_chart(self, tenant_id: int) -> ChartOfAccounts:
        """Load the chart of accounts assigned to a tenant.

        Raises:
            NotFoundError: If the tenant or its chart does not exist
            ValidationError: If the tenant has no chart assigned
        """
        tenant = self.db.get_tenant(tenant_id)
        if tenant is None:
            raise NotFoundError(tenant_not_found(tenant_id))
        if tenant.chart_of_accounts_id is None:
            raise ValidationError(no_chart_assigned(tenant_id))
        chart = self.db.get_chart_of_accounts(tenant.chart_of_accounts_id)
        if chart is None:
            raise NotFoundError(chart_not_found(tenant.chart_of_accounts_id))
        return chart

    def _resolve_fiscal_year(
        self, tenant_id: int, fiscal_year_id: Optional[int]
    ) -> Optional[FiscalYear]:
        if fiscal_year_id is None:
            tenant = self.db.get_tenant(tenant_id)
            fiscal_year_id = tenant.active_fiscal_year_id if tenant else None
            if fiscal_year_id is None:
                return None
        fiscal_year = self.db.get_fiscal_year(tenant_id, fiscal_year_id)
        if fiscal_year is None:
            raise NotFoundError(fiscal_year_not_found(fiscal_year_id, tenant_id))
        return fiscal_year

    def create_entry(
        self,
        tenant_id: int,
        entry_date: date,
        description: str,
        lines: Sequence[NewJournalEntryLine],
        fiscal_year_id: Optional[int] = None,
        posted: bool = False,
        attachments: Sequence[str] = (),
    ) -> JournalEntry:
        """Record a balanced journal entry.

        Args:
            tenant_id: Tenant ID
            entry_date: Transaction date
            description: Free-text description
            lines: Debit and credit lines
            fiscal_year_id: Fiscal year to book into; defaults to the tenant's
                active fiscal year
            posted: Mark the entry posted right away
            attachments: Opaque attachment references

        Returns:
            The stored journal entry

        Raises:
            NotFoundError: If tenant, chart or fiscal year does not exist
            ClosedFiscalYearError: If the fiscal year is closed
            ValidationError: If the date lies outside the fiscal year or lines are malformed
            UnknownAccountError: If a line references an account outside the chart
            UnbalancedEntryError: If debits and credits differ
        """
        chart = self.get_tenant_chart(tenant_id)
        fiscal_year = self._resolve_fiscal_year(tenant_id, fiscal_year_id)
        if fiscal_year is not None:
            if fiscal_year.is_closed:
                raise ClosedFiscalYearError(fiscal_year_closed(fiscal_year.name))
            if not fiscal_year.contains(entry_date):
                raise ValidationError(
                    f"Date {entry_date} is outside fiscal year '{fiscal_year.name}' "
                    f"({fiscal_year.start_date} - {fiscal_year.end_date})"
                )

        validate_entry_lines(chart, lines)

        entry = self.db.create_journal_entry(
            tenant_id=tenant_id,
            fiscal_year_id=fiscal_year.id if fiscal_year else None,
            lines=lines,
            description=description,
            entry_date=entry_date,
            posted=posted,
            attachments=attachments,
        )
        logger.info(
            "Recorded journal entry %s for tenant %s (%s)",
            entry.entry_number,
            tenant_id,
            f"{entry.total_debit:,.2f}",
        )
        return entry

    def get_entry(self, entry_id: int) -> Optional[JournalEntry]:
        """Get journal entry by ID, or None if not found."""
        return self.db.get_journal_entry(entry_id)

    def require_entry(self, entry_id: int) -> JournalEntry:
        """Get journal entry by ID or raise NotFoundError."""
        entry = self.db.get_journal_entry(entry_id)
        if entry is None:
            raise NotFoundError(entry_not_found(entry_id))
        return entry

    def list_entries(
        self, tenant_id: int, fiscal_year_id: Optional[int] = None
    ) -> list[JournalEntry]:
        """List a tenant's entries ordered by date and entry number."""
        return self.db.list_journal_entries(tenant_id, fiscal_year_id)

    def _check_fiscal_year_open(self, entry: JournalEntry) -> None:
        if entry.fiscal_year_id is None:
            return
        fiscal_year = self.db.get_fiscal_year(entry.tenant_id, entry.fiscal_year_id)
        if fiscal_year is not None and fiscal_year.is_closed:
            raise ClosedFiscalYearError(fiscal_year_closed(fiscal_year.name))

    def post_entry(self, entry_id: int) -> JournalEntry:
        """Mark an entry as posted. Posted entries can no longer be deleted."""
        entry = self.require_entry(entry_id)
        if entry.posted:
            return entry
        self._check_fiscal_year_open(entry)
        self.db.set_journal_entry_posted(entry_id, True)
        logger.info("Posted journal entry %s", entry.entry_number)
        return self.require_entry(entry_id)

    def delete_entry(self, entry_id: int) -> None:
        """Delete an unposted entry.

        Raises:
            NotFoundError: If the entry does not exist
            ConflictError: If the entry is posted
            ClosedFiscalYearError: If the entry's fiscal year is closed
        """
        entry = self.require_entry(entry_id)
        if entry.posted:
            raise ConflictError(
                f"Journal entry {entry.entry_number} is posted and cannot be deleted"
            )
        self._check_fiscal_year_open(entry)
        self.db.delete_journal_entry(entry_id)
        logger.info("Deleted journal entry %s", entry.entry_number)
