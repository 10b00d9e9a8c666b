"""Financial summary domain service.

Loads a tenant's chart and entries from the database and hands them to the
pure functions of ``ledgerkit.domain.balance``.
"""

import logging
from typing import Optional

from ledgerkit.database.base import Database
from ledgerkit.domain.balance import (
    compute_account_ledger,
    compute_financial_summary,
    compute_period_change_summary,
    compute_periodical_breakdown,
    diff_summaries,
)
from ledgerkit.domain.entities import (
    AccountLedgerRow,
    AggregationPeriod,
    ChartOfAccounts,
    FinancialSummary,
    FiscalYear,
    JournalEntry,
    PeriodBreakdownItem,
    PeriodChangeSummary,
)
from ledgerkit.domain.errors import NotFoundError, fiscal_year_not_found
from ledgerkit.domain.journal import JournalService

logger = logging.getLogger(__name__)


class SummaryService:
    """Service for building financial summaries of a tenant's ledger."""

    def __init__(self, db: Database):
        """Initialize summary service.

        Args:
            db: Database instance
        """
        self.db = db

    def _load(
        self, tenant_id: int, fiscal_year_id: Optional[int]
    ) -> tuple[ChartOfAccounts, Optional[FiscalYear], list[JournalEntry]]:
        """Load chart, fiscal year and the entries to fold.

        Without a fiscal year the whole ledger is folded. Carry-forward
        entries only restate balances of earlier entries, so they are left
        out there.
        """
        chart = JournalService(self.db).get_tenant_chart(tenant_id)
        fiscal_year = None
        if fiscal_year_id is not None:
            fiscal_year = self.db.get_fiscal_year(tenant_id, fiscal_year_id)
            if fiscal_year is None:
                raise NotFoundError(fiscal_year_not_found(fiscal_year_id, tenant_id))
        entries = self.db.list_journal_entries(tenant_id, fiscal_year_id)
        if fiscal_year is None:
            entries = [entry for entry in entries if not entry.is_carry_forward]
        logger.debug(
            "Loaded %d entries for tenant %s (fiscal year %s)",
            len(entries),
            tenant_id,
            fiscal_year_id,
        )
        return chart, fiscal_year, entries

    @staticmethod
    def _uses_opening_balances(fiscal_year: Optional[FiscalYear]) -> bool:
        """Stored opening balances apply unless a carry-forward supplied them."""
        return fiscal_year is None or fiscal_year.carry_forward_source_fiscal_year_id is None

    def get_summary(
        self, tenant_id: int, fiscal_year_id: Optional[int] = None, strict: bool = False
    ) -> FinancialSummary:
        """Summarize one fiscal year, or the whole ledger when none is given."""
        chart, fiscal_year, entries = self._load(tenant_id, fiscal_year_id)
        return compute_financial_summary(
            chart,
            entries,
            include_opening_balances=self._uses_opening_balances(fiscal_year),
            strict=strict,
        )

    def get_period_change(self, tenant_id: int, fiscal_year_id: int) -> PeriodChangeSummary:
        """Summarize a fiscal year against its opening position.

        The baseline is the fiscal year's carry-forward entry, or the stored
        opening balances for a first fiscal year.
        """
        chart, fiscal_year, entries = self._load(tenant_id, fiscal_year_id)
        opening_entries = [entry for entry in entries if entry.is_carry_forward]
        return compute_period_change_summary(
            chart,
            entries,
            opening_entries,
            include_opening_balances=self._uses_opening_balances(fiscal_year),
        )

    def compare_fiscal_years(
        self, tenant_id: int, fiscal_year_id: int, baseline_fiscal_year_id: int
    ) -> PeriodChangeSummary:
        """Summarize a fiscal year against another fiscal year's closing position."""
        current = self.get_summary(tenant_id, fiscal_year_id)
        baseline = self.get_summary(tenant_id, baseline_fiscal_year_id)
        return diff_summaries(current, baseline)

    def get_breakdown(
        self,
        tenant_id: int,
        fiscal_year_id: int,
        period: AggregationPeriod = AggregationPeriod.MONTHLY,
    ) -> list[PeriodBreakdownItem]:
        """Split a fiscal year's revenue and expenses into periods."""
        chart, fiscal_year, entries = self._load(tenant_id, fiscal_year_id)
        return compute_periodical_breakdown(
            chart, entries, fiscal_year.start_date, fiscal_year.end_date, period
        )

    def get_account_ledger(
        self, tenant_id: int, account_id: int, fiscal_year_id: Optional[int] = None
    ) -> list[AccountLedgerRow]:
        """List one account's postings with a running balance."""
        chart, fiscal_year, entries = self._load(tenant_id, fiscal_year_id)
        return compute_account_ledger(
            chart,
            entries,
            account_id,
            include_opening_balance=self._uses_opening_balances(fiscal_year),
        )
