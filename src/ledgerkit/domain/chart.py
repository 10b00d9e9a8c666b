"""Chart of accounts model helpers and domain service."""

import logging
from decimal import Decimal
from typing import Iterator, Optional

from ledgerkit.database.base import Database
from ledgerkit.domain.entities import Account, ChartOfAccounts, MainType
from ledgerkit.domain.errors import (
    ConfigurationError,
    ConflictError,
    NotFoundError,
    ValidationError,
    account_not_found,
    account_not_in_chart,
    chart_not_found,
    group_not_found,
    no_retained_earnings_account,
    tenant_not_found,
)

logger = logging.getLogger(__name__)


def iter_accounts(chart: Optional[ChartOfAccounts]) -> Iterator[Account]:
    """Yield every account of a chart in group order."""
    if chart is None:
        return
    for group in chart.groups:
        yield from group.accounts


def index_accounts(chart: Optional[ChartOfAccounts]) -> dict[int, Account]:
    """Map account IDs to accounts. The first occurrence of an ID wins."""
    index: dict[int, Account] = {}
    for account in iter_accounts(chart):
        index.setdefault(account.id, account)
    return index


def find_account(chart: Optional[ChartOfAccounts], account_id: int) -> Optional[Account]:
    """Find an account in a chart.

    Returns None when the account is not part of the chart. Callers decide
    whether that is an error.
    """
    for account in iter_accounts(chart):
        if account.id == account_id:
            return account
    return None


def find_account_by_number(chart: Optional[ChartOfAccounts], number: str) -> Optional[Account]:
    """Find an account by its human-readable number."""
    for account in iter_accounts(chart):
        if account.number == number:
            return account
    return None


def require_retained_earnings_account(chart: ChartOfAccounts) -> Account:
    """Resolve the chart's designated net result account.

    The account is a Liability account. A carried net result therefore
    shows up in the target year's total liabilities, and the target
    year's derived equity starts at zero instead of at the source year's
    closing equity.

    Raises:
        ConfigurationError: If no account is designated, it is missing from
            the chart, or it is not a Liability account
    """
    if chart.retained_earnings_account_id is None:
        raise ConfigurationError(no_retained_earnings_account(chart.id))
    return _retained_earnings_candidate(chart, chart.retained_earnings_account_id)


def _retained_earnings_candidate(chart: ChartOfAccounts, account_id: int) -> Account:
    account = find_account(chart, account_id)
    if account is None:
        raise ConfigurationError(account_not_in_chart(account_id, chart.id))
    if account.main_type != MainType.LIABILITY:
        raise ConfigurationError(
            f"Retained earnings account {account.number} must be a "
            f"{MainType.LIABILITY.value} account, not {account.main_type.value}"
        )
    return account


class ChartService:
    """Service for managing charts of accounts."""

    def __init__(self, db: Database):
        """Initialize chart service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_chart(self, name: str, tenant_id: Optional[int] = None) -> int:
        """Create an empty chart of accounts.

        Args:
            name: Chart name
            tenant_id: Owning tenant, or None for a template

        Returns:
            Chart ID

        Raises:
            ValidationError: If name is empty
            NotFoundError: If the tenant does not exist
        """
        if not name or not name.strip():
            raise ValidationError("Chart name is required")
        if tenant_id is not None and self.db.get_tenant(tenant_id) is None:
            raise NotFoundError(tenant_not_found(tenant_id))

        chart_id = self.db.create_chart_of_accounts(name=name.strip(), tenant_id=tenant_id)
        logger.info("Created chart of accounts '%s' (ID: %s)", name, chart_id)
        return chart_id

    def get_chart(self, chart_id: int) -> Optional[ChartOfAccounts]:
        """Get chart by ID, or None if not found."""
        return self.db.get_chart_of_accounts(chart_id)

    def require_chart(self, chart_id: int) -> ChartOfAccounts:
        """Get chart by ID or raise NotFoundError."""
        chart = self.db.get_chart_of_accounts(chart_id)
        if chart is None:
            raise NotFoundError(chart_not_found(chart_id))
        return chart

    def list_charts(self, tenant_id: Optional[int] = None) -> list[ChartOfAccounts]:
        """List charts, optionally only those of one tenant."""
        return self.db.list_charts_of_accounts(tenant_id=tenant_id)

    def add_group(self, chart_id: int, name: str) -> int:
        """Append a group to a chart.

        Raises:
            NotFoundError: If the chart does not exist
            ConflictError: If the chart already has a group with that name
        """
        chart = self.require_chart(chart_id)
        if any(group.name == name for group in chart.groups):
            raise ConflictError(f"Group '{name}' already exists in chart {chart_id}")
        return self.db.create_account_group(chart_id=chart_id, name=name)

    def add_account(
        self,
        group_id: int,
        number: str,
        name: str,
        main_type: MainType,
        opening_balance: Decimal = Decimal("0"),
        description: Optional[str] = None,
    ) -> int:
        """Add an account to a group.

        Args:
            group_id: Owning group ID
            number: Account number, unique within the chart
            name: Account name
            main_type: Account classification
            opening_balance: Balance at ledger inception, in the account's sign convention
            description: Optional description

        Returns:
            Account ID

        Raises:
            NotFoundError: If the group does not exist
            ConflictError: If the number is already used in the chart
        """
        group = self.db.get_account_group(group_id)
        if group is None:
            raise NotFoundError(group_not_found(group_id))
        number = number.strip()
        if not number:
            raise ValidationError("Account number is required")

        chart = self.require_chart(group.chart_id)
        if find_account_by_number(chart, number) is not None:
            raise ConflictError(
                f"Account number '{number}' already exists in chart {chart.id}"
            )

        account_id = self.db.create_account(
            group_id=group_id,
            number=number,
            name=name,
            main_type=main_type,
            opening_balance=opening_balance,
            description=description,
        )
        logger.info("Added account %s '%s' to chart %s", number, name, chart.id)
        return account_id

    def set_opening_balance(self, account_id: int, opening_balance: Decimal) -> None:
        """Set an account's opening balance."""
        if self.db.get_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))
        self.db.update_account_opening_balance(account_id, opening_balance)

    def set_retained_earnings_account(self, chart_id: int, account_id: int) -> None:
        """Designate the account receiving net results on carry-forward.

        Raises:
            NotFoundError: If the chart does not exist
            ConfigurationError: If the account is not a Liability account of the chart
        """
        chart = self.require_chart(chart_id)
        account = _retained_earnings_candidate(chart, account_id)
        self.db.set_retained_earnings_account(chart_id, account_id)
        logger.info(
            "Chart %s now books net results to account %s", chart_id, account.number
        )

    def clone_chart(
        self, template_id: int, tenant_id: int, name: Optional[str] = None
    ) -> int:
        """Copy a chart's groups and accounts for a tenant.

        Opening balances start at zero in the copy. The retained earnings
        designation is carried over to the copied account.

        Returns:
            ID of the new chart
        """
        template = self.require_chart(template_id)
        tenant = self.db.get_tenant(tenant_id)
        if tenant is None:
            raise NotFoundError(tenant_not_found(tenant_id))

        chart_name = name or f"{tenant.name} - {template.name}"
        with self.db.transaction():
            chart_id = self.db.create_chart_of_accounts(name=chart_name, tenant_id=tenant_id)
            account_id_map: dict[int, int] = {}
            for group in template.groups:
                group_id = self.db.create_account_group(chart_id=chart_id, name=group.name)
                for account in group.accounts:
                    account_id_map[account.id] = self.db.create_account(
                        group_id=group_id,
                        number=account.number,
                        name=account.name,
                        main_type=account.main_type,
                        description=account.description,
                    )
            retained_id = template.retained_earnings_account_id
            if retained_id is not None and retained_id in account_id_map:
                self.db.set_retained_earnings_account(chart_id, account_id_map[retained_id])

        logger.info("Cloned chart %s into chart %s for tenant %s", template_id, chart_id, tenant_id)
        return chart_id
