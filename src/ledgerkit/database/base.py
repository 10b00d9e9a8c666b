"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Optional, Any, Sequence
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from ledgerkit.domain.entities import (
    Tenant,
    ChartOfAccounts,
    AccountGroup,
    Account,
    FiscalYear,
    JournalEntry,
    MainType,
    NewJournalEntryLine,
)


class Database(ABC):
    """Abstract database interface for ledgerkit.

    Every write commits immediately unless it runs inside ``transaction()``,
    in which case all writes of the block commit together or not at all.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def transaction(self) -> AbstractContextManager[None]:
        """Group writes into one atomic unit. Rolls back on exception."""
        pass

    # Tenant operations
    @abstractmethod
    def create_tenant(self, name: str) -> int:
        """Create a tenant. Returns tenant ID."""
        pass

    @abstractmethod
    def get_tenant(self, tenant_id: int) -> Optional[Tenant]:
        """Get tenant by ID."""
        pass

    @abstractmethod
    def list_tenants(self) -> list[Tenant]:
        """List all tenants."""
        pass

    @abstractmethod
    def update_tenant(self, tenant_id: int, patch: dict[str, Any]) -> Tenant:
        """Apply a field patch (chart_of_accounts_id, active_fiscal_year_id)."""
        pass

    # Chart of accounts operations
    @abstractmethod
    def create_chart_of_accounts(self, name: str, tenant_id: Optional[int] = None) -> int:
        """Create a chart of accounts. Returns chart ID."""
        pass

    @abstractmethod
    def get_chart_of_accounts(self, chart_id: int) -> Optional[ChartOfAccounts]:
        """Get chart by ID, with groups and accounts."""
        pass

    @abstractmethod
    def list_charts_of_accounts(self, tenant_id: Optional[int] = None) -> list[ChartOfAccounts]:
        """List charts, optionally filtered by tenant."""
        pass

    @abstractmethod
    def set_retained_earnings_account(self, chart_id: int, account_id: Optional[int]) -> None:
        """Set the chart's designated net result account."""
        pass

    @abstractmethod
    def create_account_group(self, chart_id: int, name: str) -> int:
        """Append an account group to a chart. Returns group ID."""
        pass

    @abstractmethod
    def get_account_group(self, group_id: int) -> Optional[AccountGroup]:
        """Get account group by ID."""
        pass

    @abstractmethod
    def create_account(
        self,
        group_id: int,
        number: str,
        name: str,
        main_type: MainType,
        opening_balance: Decimal = Decimal("0"),
        description: Optional[str] = None,
    ) -> int:
        """Create an account in a group. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def get_account_chart_id(self, account_id: int) -> Optional[int]:
        """Get the ID of the chart an account belongs to."""
        pass

    @abstractmethod
    def update_account_opening_balance(self, account_id: int, opening_balance: Decimal) -> None:
        """Update an account's opening balance."""
        pass

    # Fiscal year operations
    @abstractmethod
    def create_fiscal_year(
        self, tenant_id: int, name: str, start_date: date, end_date: date
    ) -> int:
        """Create an open fiscal year. Returns fiscal year ID."""
        pass

    @abstractmethod
    def get_fiscal_year(self, tenant_id: int, fiscal_year_id: int) -> Optional[FiscalYear]:
        """Get a tenant's fiscal year by ID."""
        pass

    @abstractmethod
    def list_fiscal_years(self, tenant_id: int) -> list[FiscalYear]:
        """List a tenant's fiscal years, newest first."""
        pass

    @abstractmethod
    def update_fiscal_year(
        self, tenant_id: int, fiscal_year_id: int, patch: dict[str, Any]
    ) -> FiscalYear:
        """Apply a field patch to a fiscal year and return the updated record."""
        pass

    @abstractmethod
    def delete_fiscal_year(self, tenant_id: int, fiscal_year_id: int) -> None:
        """Delete a fiscal year."""
        pass

    # Journal entry operations
    @abstractmethod
    def create_journal_entry(
        self,
        tenant_id: int,
        fiscal_year_id: Optional[int],
        lines: Sequence[NewJournalEntryLine],
        description: str,
        entry_date: date,
        posted: bool = False,
        is_carry_forward: bool = False,
        attachments: Sequence[str] = (),
    ) -> JournalEntry:
        """Create a journal entry. Assigns ID, entry number and timestamps."""
        pass

    @abstractmethod
    def get_journal_entry(self, entry_id: int) -> Optional[JournalEntry]:
        """Get journal entry by ID."""
        pass

    @abstractmethod
    def list_journal_entries(
        self, tenant_id: int, fiscal_year_id: Optional[int] = None
    ) -> list[JournalEntry]:
        """List a tenant's entries ordered by date and entry number.

        Args:
            tenant_id: Tenant ID
            fiscal_year_id: Optional fiscal year filter
        """
        pass

    @abstractmethod
    def set_journal_entry_posted(self, entry_id: int, posted: bool) -> None:
        """Update an entry's posted flag."""
        pass

    @abstractmethod
    def delete_journal_entry(self, entry_id: int) -> None:
        """Delete a journal entry and its lines."""
        pass

    @abstractmethod
    def count_journal_entries(self, tenant_id: int, fiscal_year_id: int) -> int:
        """Count entries booked into a fiscal year."""
        pass
