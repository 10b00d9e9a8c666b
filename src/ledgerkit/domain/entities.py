"""Domain model entities for ledgerkit.

These are pure data classes representing accounting concepts, independent of
database schema. Services and the balance engine only ever see these types;
the database layer converts ORM rows into them through the mappers.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


ZERO = Decimal("0")


class MainType(str, Enum):
    """Account classification governing the balance sign convention."""

    ASSET = "Asset"
    LIABILITY = "Liability"
    REVENUE = "Revenue"
    EXPENSE = "Expense"

    @property
    def is_debit_normal(self) -> bool:
        """True for accounts that increase with a debit."""
        return self in (MainType.ASSET, MainType.EXPENSE)

    @property
    def is_balance_sheet(self) -> bool:
        """True for accounts whose balances survive a fiscal year end."""
        return self in (MainType.ASSET, MainType.LIABILITY)

    @classmethod
    def parse(cls, value: str) -> "MainType":
        """Parse a main type name case-insensitively."""
        for member in cls:
            if member.value.lower() == value.strip().lower():
                return member
        valid = ", ".join(member.value for member in cls)
        raise ValueError(f"Invalid account type '{value}'. Must be one of: {valid}")


class AggregationPeriod(str, Enum):
    """Bucket size for periodical breakdowns."""

    MONTHLY = "monthly"
    WEEKLY = "weekly"
    DAILY = "daily"


@dataclass(frozen=True)
class Tenant:
    """Tenant owning a chart of accounts and fiscal years."""

    id: int
    name: str
    chart_of_accounts_id: Optional[int]
    active_fiscal_year_id: Optional[int]
    created_at: datetime


@dataclass(frozen=True)
class Account:
    """Leaf ledger account.

    ``opening_balance`` is the balance at ledger inception, expressed in the
    account's own sign convention (positive means a normal balance).
    """

    id: int
    group_id: int
    number: str
    name: str
    main_type: MainType
    opening_balance: Decimal
    description: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class AccountGroup:
    """Named flat container of accounts."""

    id: int
    chart_id: int
    name: str
    accounts: tuple[Account, ...] = ()


@dataclass(frozen=True)
class ChartOfAccounts:
    """Complete account structure for one tenant, or a template."""

    id: int
    name: str
    tenant_id: Optional[int]
    retained_earnings_account_id: Optional[int]
    created_at: datetime
    groups: tuple[AccountGroup, ...] = ()

    @property
    def is_template(self) -> bool:
        return self.tenant_id is None


@dataclass(frozen=True)
class NewJournalEntryLine:
    """Journal line before storage assigns it an ID."""

    account_id: int
    debit: Optional[Decimal] = None
    credit: Optional[Decimal] = None


@dataclass(frozen=True)
class JournalEntryLine:
    """One posting within a journal entry."""

    id: int
    account_id: int
    debit: Optional[Decimal]
    credit: Optional[Decimal]


@dataclass(frozen=True)
class JournalEntry:
    """Dated transaction made of debit and credit lines."""

    id: int
    tenant_id: int
    fiscal_year_id: Optional[int]
    entry_number: int
    date: date
    description: str
    posted: bool
    is_carry_forward: bool
    created_at: datetime
    updated_at: datetime
    lines: tuple[JournalEntryLine, ...] = ()
    attachments: tuple[str, ...] = ()

    @property
    def total_debit(self) -> Decimal:
        return sum((line.debit or ZERO for line in self.lines), ZERO)

    @property
    def total_credit(self) -> Decimal:
        return sum((line.credit or ZERO for line in self.lines), ZERO)


@dataclass(frozen=True)
class FiscalYear:
    """Accounting period with open/closed state."""

    id: int
    tenant_id: int
    name: str
    start_date: date
    end_date: date
    is_closed: bool
    carry_forward_source_fiscal_year_id: Optional[int]
    created_at: datetime
    updated_at: datetime

    def contains(self, day: date) -> bool:
        """Check whether a date falls inside the fiscal year (inclusive)."""
        return self.start_date <= day <= self.end_date


@dataclass(frozen=True)
class FinancialSummary:
    """Per-account balances and aggregate totals derived from entries.

    ``equity`` is assets minus liabilities. Retained earnings are kept on a
    Liability account, so after a carry-forward the accumulated result is
    part of ``total_liabilities`` rather than ``equity``.
    """

    total_assets: Decimal = ZERO
    total_liabilities: Decimal = ZERO
    total_revenue: Decimal = ZERO
    total_expenses: Decimal = ZERO
    net_profit_loss: Decimal = ZERO
    equity: Decimal = ZERO
    account_balances: dict[int, Decimal] = field(default_factory=dict)
    skipped_line_ids: tuple[int, ...] = ()


@dataclass(frozen=True)
class PeriodChangeSummary:
    """Current summary alongside its deltas against a baseline summary."""

    current: FinancialSummary
    baseline: FinancialSummary
    total_assets_period_change: Decimal
    total_liabilities_period_change: Decimal
    total_revenue_period_change: Decimal
    total_expenses_period_change: Decimal
    net_profit_loss_period_change: Decimal
    equity_period_change: Decimal
    account_balance_changes: dict[int, Decimal] = field(default_factory=dict)


@dataclass(frozen=True)
class PeriodBreakdownItem:
    """Revenue and expenses for one aggregation bucket."""

    period_label: str
    sort_key: str
    year: int
    start_date: date
    end_date: date
    revenue: Decimal
    expenses: Decimal

    @property
    def net_profit_loss(self) -> Decimal:
        return self.revenue - self.expenses


@dataclass(frozen=True)
class AccountLedgerRow:
    """One line of an account ledger with its running balance."""

    entry_id: int
    entry_number: int
    date: date
    description: str
    debit: Decimal
    credit: Decimal
    balance: Decimal
