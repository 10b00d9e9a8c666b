"""Shared domain error messages and error types."""

from decimal import Decimal


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class InvalidRangeError(ValidationError):
    """A date range whose end does not come after its start."""


class UnbalancedEntryError(ValidationError):
    """Journal entry whose debit and credit totals differ."""


class ClosedFiscalYearError(ValidationError):
    """Write attempted against a closed fiscal year."""


class ConfigurationError(ValidationError):
    """Chart or tenant setup is incomplete for the requested operation."""


class NotFoundError(DomainError):
    """Requested domain entity or path does not exist."""


class UnknownAccountError(NotFoundError):
    """Journal line references an account missing from the chart."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


def tenant_not_found(tenant_id: int) -> str:
    """Return message for missing tenant."""
    return f"Tenant {tenant_id} not found"


def chart_not_found(chart_id: int) -> str:
    """Return message for missing chart of accounts."""
    return f"Chart of accounts {chart_id} not found"


def group_not_found(group_id: int) -> str:
    """Return message for missing account group."""
    return f"Account group {group_id} not found"


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def account_not_in_chart(account_id: int, chart_id: int) -> str:
    """Return message for an account reference outside the chart."""
    return f"Account {account_id} is not part of chart of accounts {chart_id}"


def fiscal_year_not_found(fiscal_year_id: int, tenant_id: int) -> str:
    """Return message for missing fiscal year."""
    return f"Fiscal year {fiscal_year_id} not found for tenant {tenant_id}"


def entry_not_found(entry_id: int) -> str:
    """Return message for missing journal entry."""
    return f"Journal entry {entry_id} not found"


def no_chart_assigned(tenant_id: int) -> str:
    """Return message when a tenant has no chart of accounts."""
    return f"Tenant {tenant_id} has no chart of accounts assigned"


def no_retained_earnings_account(chart_id: int) -> str:
    """Return message when the net result target account is not configured."""
    return (
        f"Chart of accounts {chart_id} has no retained earnings account configured. "
        "Use 'chart set-retained-earnings' first."
    )


def fiscal_year_closed(name: str) -> str:
    """Return message for writes into a closed fiscal year."""
    return f"Fiscal year '{name}' is closed"


def unbalanced_entry(total_debit: Decimal, total_credit: Decimal) -> str:
    """Return message for an entry whose sides do not match."""
    return (
        f"Journal entry is unbalanced: debits {total_debit:,.2f} "
        f"!= credits {total_credit:,.2f}"
    )


def fiscal_year_delete_blocked(
    name: str, entry_count: int, is_source: bool, is_target: bool
) -> str:
    """Return message when a fiscal year has dependent data."""
    parts = []
    if entry_count > 0:
        parts.append(f"{entry_count} journal entr{'ies' if entry_count != 1 else 'y'}")
    if is_source:
        parts.append("balances carried forward into another fiscal year")
    if is_target:
        parts.append("balances carried forward from another fiscal year")
    return f"Cannot delete fiscal year '{name}': it has {' and '.join(parts)}."
