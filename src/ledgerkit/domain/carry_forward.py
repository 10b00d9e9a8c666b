"""Carry-forward of balances from one fiscal year into the next.

The closing balances of the balance sheet accounts of a source fiscal year
are booked as one synthetic, posted journal entry into the target fiscal
year, dated on its first day. Revenue and expense accounts are not carried:
they restart at zero because summaries only fold the entries of one fiscal
year. The net result of the source year is booked to the chart's retained
earnings account so the synthetic entry balances.
"""

import logging
import threading
from contextlib import contextmanager
from decimal import Decimal
from typing import Iterator, Optional

from ledgerkit.database.base import Database
from ledgerkit.domain.balance import compute_financial_summary
from ledgerkit.domain.chart import iter_accounts, require_retained_earnings_account
from ledgerkit.domain.entities import (
    ZERO,
    Account,
    ChartOfAccounts,
    FinancialSummary,
    JournalEntry,
    NewJournalEntryLine,
)
from ledgerkit.domain.errors import (
    ClosedFiscalYearError,
    ConflictError,
    NotFoundError,
    ValidationError,
    fiscal_year_closed,
    fiscal_year_not_found,
    tenant_not_found,
)
from ledgerkit.domain.journal import JournalService, validate_entry_lines

logger = logging.getLogger(__name__)


class CarryForwardLocks:
    """Advisory locks keyed by (tenant ID, target fiscal year ID).

    A second carry-forward into the same target while one is running fails
    immediately instead of waiting, so opening balances are never posted twice.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._held: set[tuple[int, int]] = set()

    @contextmanager
    def hold(self, tenant_id: int, target_fiscal_year_id: int) -> Iterator[None]:
        key = (tenant_id, target_fiscal_year_id)
        with self._guard:
            if key in self._held:
                raise ConflictError(
                    f"A carry-forward into fiscal year {target_fiscal_year_id} "
                    "is already in progress"
                )
            self._held.add(key)
        try:
            yield
        finally:
            with self._guard:
                self._held.discard(key)

    def is_held(self, tenant_id: int, target_fiscal_year_id: int) -> bool:
        with self._guard:
            return (tenant_id, target_fiscal_year_id) in self._held


DEFAULT_LOCKS = CarryForwardLocks()


def _opening_line(account: Account, balance: Decimal) -> NewJournalEntryLine:
    """Line re-establishing a balance on its normal side."""
    normal_is_debit = account.main_type.is_debit_normal
    if balance < 0:
        normal_is_debit = not normal_is_debit
    amount = abs(balance)
    if normal_is_debit:
        return NewJournalEntryLine(account_id=account.id, debit=amount)
    return NewJournalEntryLine(account_id=account.id, credit=amount)


def build_carry_forward_lines(
    chart: ChartOfAccounts, summary: FinancialSummary, retained_earnings: Account
) -> list[NewJournalEntryLine]:
    """Build the opening lines for the next fiscal year.

    One line per Asset and Liability account with a non-zero balance, in
    chart order, followed by the net result on the retained earnings
    account: a profit is credited, a loss debited.
    """
    lines = []
    for account in iter_accounts(chart):
        if not account.main_type.is_balance_sheet:
            continue
        balance = summary.account_balances.get(account.id, ZERO)
        if balance != 0:
            lines.append(_opening_line(account, balance))

    if summary.net_profit_loss != 0:
        lines.append(_opening_line(retained_earnings, summary.net_profit_loss))
    return lines


class CarryForwardService:
    """Service moving closing balances of a fiscal year into the next one."""

    def __init__(self, db: Database, locks: Optional[CarryForwardLocks] = None):
        """Initialize carry-forward service.

        Args:
            db: Database instance
            locks: Lock registry; defaults to the process-wide registry
        """
        self.db = db
        self.locks = locks if locks is not None else DEFAULT_LOCKS

    def carry_forward_balances(
        self,
        tenant_id: int,
        source_fiscal_year_id: int,
        target_fiscal_year_id: int,
        close_source: bool = False,
        replace_existing: bool = False,
    ) -> JournalEntry:
        """Book the closing balances of the source year into the target year.

        Args:
            tenant_id: Tenant ID
            source_fiscal_year_id: Fiscal year whose closing balances are carried
            target_fiscal_year_id: Fiscal year receiving the opening entry
            close_source: Close the source fiscal year in the same transaction
            replace_existing: Replace an earlier carry-forward into the target
                instead of refusing

        Returns:
            The synthetic opening entry

        Raises:
            ValidationError: If source and target are the same, the tenant has
                no chart, the target does not follow the source, or there is
                nothing to carry
            NotFoundError: If tenant, chart or a fiscal year does not exist
            ConfigurationError: If the retained earnings account is not usable
            ClosedFiscalYearError: If the target fiscal year is closed
            ConflictError: If the target already received a carry-forward, or
                another carry-forward into it is running
            UnbalancedEntryError: If the source balances do not net out
        """
        if source_fiscal_year_id == target_fiscal_year_id:
            raise ValidationError("Source and target fiscal year must differ")

        with self.locks.hold(tenant_id, target_fiscal_year_id):
            tenant = self.db.get_tenant(tenant_id)
            if tenant is None:
                raise NotFoundError(tenant_not_found(tenant_id))
            source = self.db.get_fiscal_year(tenant_id, source_fiscal_year_id)
            if source is None:
                raise NotFoundError(fiscal_year_not_found(source_fiscal_year_id, tenant_id))
            target = self.db.get_fiscal_year(tenant_id, target_fiscal_year_id)
            if target is None:
                raise NotFoundError(fiscal_year_not_found(target_fiscal_year_id, tenant_id))

            chart = JournalService(self.db).get_tenant_chart(tenant_id)
            retained_earnings = require_retained_earnings_account(chart)

            if target.is_closed:
                raise ClosedFiscalYearError(fiscal_year_closed(target.name))
            if target.start_date <= source.end_date:
                raise ValidationError(
                    f"Target fiscal year '{target.name}' must start after "
                    f"source fiscal year '{source.name}' ends"
                )
            if target.carry_forward_source_fiscal_year_id is not None and not replace_existing:
                raise ConflictError(
                    f"Balances were already carried forward into '{target.name}'"
                )

            # Years that received a carry-forward hold their opening state in
            # the synthetic entry; only the first year starts from stored
            # opening balances.
            entries = self.db.list_journal_entries(tenant_id, source.id)
            summary = compute_financial_summary(
                chart,
                entries,
                include_opening_balances=source.carry_forward_source_fiscal_year_id is None,
            )
            if summary.skipped_line_ids:
                logger.warning(
                    "Carry-forward from '%s' ignores %d line(s) with unknown accounts",
                    source.name,
                    len(summary.skipped_line_ids),
                )

            lines = build_carry_forward_lines(chart, summary, retained_earnings)
            if not lines:
                raise ValidationError(
                    f"Fiscal year '{source.name}' has no balances to carry forward"
                )
            validate_entry_lines(chart, lines)

            with self.db.transaction():
                if replace_existing:
                    for existing in self.db.list_journal_entries(tenant_id, target.id):
                        if existing.is_carry_forward:
                            self.db.delete_journal_entry(existing.id)
                entry = self.db.create_journal_entry(
                    tenant_id=tenant_id,
                    fiscal_year_id=target.id,
                    lines=lines,
                    description=f"Balances carried forward from {source.name}",
                    entry_date=target.start_date,
                    posted=True,
                    is_carry_forward=True,
                )
                self.db.update_fiscal_year(
                    tenant_id,
                    target.id,
                    {"carry_forward_source_fiscal_year_id": source.id},
                )
                if close_source and not source.is_closed:
                    self.db.update_fiscal_year(tenant_id, source.id, {"is_closed": True})
                    if tenant.active_fiscal_year_id == source.id:
                        self.db.update_tenant(tenant_id, {"active_fiscal_year_id": None})

        logger.info(
            "Carried forward %d balance(s) from '%s' into '%s' (net result %s)",
            len(lines),
            source.name,
            target.name,
            f"{summary.net_profit_loss:,.2f}",
        )
        return entry
