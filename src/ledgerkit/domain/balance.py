"""Balance calculation engine.

Everything in this module is a pure function of a chart of accounts and a
collection of journal entries. Nothing here touches the database or mutates
its inputs, so results can be recomputed at will.

Sign convention: Asset and Expense accounts grow with debits
(``balance += debit - credit``); Liability and Revenue accounts grow with
credits (``balance += credit - debit``). A positive balance is therefore
always a normal balance for the account's type.
"""

import logging
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Iterable, Optional

from dateutil.relativedelta import relativedelta
from dateutil.rrule import rrule, DAILY, WEEKLY, MONTHLY

from ledgerkit.domain.chart import find_account, index_accounts
from ledgerkit.domain.entities import (
    ZERO,
    AccountLedgerRow,
    AggregationPeriod,
    ChartOfAccounts,
    FinancialSummary,
    JournalEntry,
    MainType,
    PeriodBreakdownItem,
    PeriodChangeSummary,
)
from ledgerkit.domain.errors import InvalidRangeError, UnknownAccountError, account_not_found

logger = logging.getLogger(__name__)

MONTH_LABELS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def signed_amount(
    main_type: MainType, debit: Optional[Decimal], credit: Optional[Decimal]
) -> Decimal:
    """Return a line's effect on an account balance of the given type."""
    debit = debit or ZERO
    credit = credit or ZERO
    if main_type.is_debit_normal:
        return debit - credit
    return credit - debit


def compute_financial_summary(
    chart: Optional[ChartOfAccounts],
    entries: Optional[Iterable[JournalEntry]],
    *,
    include_opening_balances: bool = False,
    strict: bool = False,
) -> FinancialSummary:
    """Compute per-account balances and totals from journal entries.

    Args:
        chart: Chart of accounts, or None
        entries: Journal entries to fold, in any order
        include_opening_balances: Seed each account with its stored opening
            balance instead of zero
        strict: Raise on lines whose account is not in the chart instead of
            skipping them

    Returns:
        FinancialSummary. An all-zero summary when there is no chart.

    Raises:
        UnknownAccountError: In strict mode, for a line referencing an
            account outside the chart
    """
    if chart is None:
        return FinancialSummary()

    accounts = index_accounts(chart)
    balances: dict[int, Decimal] = {
        account_id: (account.opening_balance if include_opening_balances else ZERO)
        for account_id, account in accounts.items()
    }
    skipped: list[int] = []

    for entry in entries or ():
        for line in entry.lines:
            account = accounts.get(line.account_id)
            if account is None:
                if strict:
                    raise UnknownAccountError(account_not_found(line.account_id))
                logger.warning(
                    "Skipping line %s of entry %s: account %s is not in chart %s",
                    line.id,
                    entry.entry_number,
                    line.account_id,
                    chart.id,
                )
                skipped.append(line.id)
                continue
            balances[account.id] += signed_amount(account.main_type, line.debit, line.credit)

    totals = {main_type: ZERO for main_type in MainType}
    for account_id, account in accounts.items():
        totals[account.main_type] += balances[account_id]

    total_assets = totals[MainType.ASSET]
    total_liabilities = totals[MainType.LIABILITY]
    total_revenue = totals[MainType.REVENUE]
    total_expenses = totals[MainType.EXPENSE]

    return FinancialSummary(
        total_assets=total_assets,
        total_liabilities=total_liabilities,
        total_revenue=total_revenue,
        total_expenses=total_expenses,
        net_profit_loss=total_revenue - total_expenses,
        equity=total_assets - total_liabilities,
        account_balances=balances,
        skipped_line_ids=tuple(skipped),
    )


def compute_period_change_summary(
    chart: Optional[ChartOfAccounts],
    current_entries: Optional[Iterable[JournalEntry]],
    baseline_entries: Optional[Iterable[JournalEntry]],
    *,
    include_opening_balances: bool = False,
    strict: bool = False,
) -> PeriodChangeSummary:
    """Compute a summary together with its change against a baseline.

    Both snapshots are folded over the same chart so they stay comparable.
    """
    current = compute_financial_summary(
        chart,
        current_entries,
        include_opening_balances=include_opening_balances,
        strict=strict,
    )
    baseline = compute_financial_summary(
        chart,
        baseline_entries,
        include_opening_balances=include_opening_balances,
        strict=strict,
    )
    return diff_summaries(current, baseline)


def diff_summaries(current: FinancialSummary, baseline: FinancialSummary) -> PeriodChangeSummary:
    """Subtract a baseline summary from a current one, total by total.

    Both summaries must come from the same chart of accounts.
    """
    account_changes = {
        account_id: balance - baseline.account_balances.get(account_id, ZERO)
        for account_id, balance in current.account_balances.items()
    }
    return PeriodChangeSummary(
        current=current,
        baseline=baseline,
        total_assets_period_change=current.total_assets - baseline.total_assets,
        total_liabilities_period_change=current.total_liabilities - baseline.total_liabilities,
        total_revenue_period_change=current.total_revenue - baseline.total_revenue,
        total_expenses_period_change=current.total_expenses - baseline.total_expenses,
        net_profit_loss_period_change=current.net_profit_loss - baseline.net_profit_loss,
        equity_period_change=current.equity - baseline.equity,
        account_balance_changes=account_changes,
    )


def _bucket_key(day: date, period: AggregationPeriod) -> str:
    if period == AggregationPeriod.MONTHLY:
        return f"{day.year:04d}-{day.month:02d}"
    if period == AggregationPeriod.WEEKLY:
        iso_year, iso_week, _ = day.isocalendar()
        return f"{iso_year:04d}-W{iso_week:02d}"
    return day.isoformat()


def _bucket(anchor: date, period: AggregationPeriod) -> tuple[date, date, str, int]:
    """Return start, end, label and year of the bucket starting at anchor."""
    if period == AggregationPeriod.MONTHLY:
        end = anchor + relativedelta(months=1, days=-1)
        label = f"{MONTH_LABELS[anchor.month - 1]} '{anchor.year % 100:02d}"
        return anchor, end, label, anchor.year
    if period == AggregationPeriod.WEEKLY:
        iso_year, iso_week, _ = anchor.isocalendar()
        return anchor, anchor + timedelta(days=6), f"KW{iso_week} '{iso_year % 100:02d}", iso_year
    return anchor, anchor, anchor.strftime("%d.%m.%y"), anchor.year


def compute_periodical_breakdown(
    chart: Optional[ChartOfAccounts],
    entries: Optional[Iterable[JournalEntry]],
    start_date: date,
    end_date: date,
    period: AggregationPeriod = AggregationPeriod.MONTHLY,
) -> list[PeriodBreakdownItem]:
    """Split revenue and expenses of a date range into periods.

    Weeks are ISO weeks starting on Monday. Buckets at the range edges are
    clipped to the range. Every bucket of the range is returned, including
    those without activity.

    Raises:
        InvalidRangeError: If end_date is before start_date
    """
    if end_date < start_date:
        raise InvalidRangeError(
            f"End date {end_date} must not be before start date {start_date}"
        )

    if period == AggregationPeriod.MONTHLY:
        first_anchor, frequency = start_date.replace(day=1), MONTHLY
    elif period == AggregationPeriod.WEEKLY:
        first_anchor = start_date - timedelta(days=start_date.weekday())
        frequency = WEEKLY
    else:
        first_anchor, frequency = start_date, DAILY

    anchors = rrule(
        frequency,
        dtstart=datetime.combine(first_anchor, datetime.min.time()),
        until=datetime.combine(end_date, datetime.min.time()),
    )

    buckets: dict[str, dict] = {}
    for anchor in anchors:
        bucket_start, bucket_end, label, year = _bucket(anchor.date(), period)
        buckets[_bucket_key(bucket_start, period)] = {
            "label": label,
            "year": year,
            "start": max(bucket_start, start_date),
            "end": min(bucket_end, end_date),
            "revenue": ZERO,
            "expenses": ZERO,
        }

    accounts = index_accounts(chart)
    for entry in entries or ():
        if not start_date <= entry.date <= end_date:
            continue
        bucket = buckets[_bucket_key(entry.date, period)]
        for line in entry.lines:
            account = accounts.get(line.account_id)
            if account is None:
                continue
            if account.main_type == MainType.REVENUE:
                bucket["revenue"] += signed_amount(account.main_type, line.debit, line.credit)
            elif account.main_type == MainType.EXPENSE:
                bucket["expenses"] += signed_amount(account.main_type, line.debit, line.credit)

    return [
        PeriodBreakdownItem(
            period_label=bucket["label"],
            sort_key=key,
            year=bucket["year"],
            start_date=bucket["start"],
            end_date=bucket["end"],
            revenue=bucket["revenue"],
            expenses=bucket["expenses"],
        )
        for key, bucket in sorted(buckets.items())
    ]


def compute_account_ledger(
    chart: Optional[ChartOfAccounts],
    entries: Optional[Iterable[JournalEntry]],
    account_id: int,
    *,
    include_opening_balance: bool = False,
) -> list[AccountLedgerRow]:
    """List the postings of one account with a running balance.

    Rows are ordered by entry date and entry number.

    Raises:
        UnknownAccountError: If the account is not part of the chart
    """
    account = find_account(chart, account_id)
    if account is None:
        raise UnknownAccountError(account_not_found(account_id))

    balance = account.opening_balance if include_opening_balance else ZERO
    rows: list[AccountLedgerRow] = []
    for entry in sorted(entries or (), key=lambda e: (e.date, e.entry_number)):
        for line in entry.lines:
            if line.account_id != account_id:
                continue
            balance += signed_amount(account.main_type, line.debit, line.credit)
            rows.append(
                AccountLedgerRow(
                    entry_id=entry.id,
                    entry_number=entry.entry_number,
                    date=entry.date,
                    description=entry.description,
                    debit=line.debit or ZERO,
                    credit=line.credit or ZERO,
                    balance=balance,
                )
            )
    return rows
