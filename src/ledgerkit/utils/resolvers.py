"""Utilities for resolving CLI references (names, numbers) to IDs."""

from typing import Optional

from ledgerkit.domain.chart import find_account, find_account_by_number
from ledgerkit.domain.entities import Account, ChartOfAccounts
from ledgerkit.domain.fiscal_year import FiscalYearService
from ledgerkit.domain.tenant import TenantService


def _as_int(value: str | int) -> Optional[int]:
    if isinstance(value, int):
        return value
    try:
        return int(value)
    except (ValueError, TypeError):
        return None


def resolve_tenant(tenant_service: TenantService, tenant: str | int) -> int:
    """Resolve tenant name or ID to tenant ID.

    Args:
        tenant_service: TenantService instance
        tenant: Tenant name (str) or ID (int or string representation of int)

    Returns:
        Tenant ID

    Raises:
        ValueError: If tenant is not found
    """
    tenant_id = _as_int(tenant)
    if tenant_id is not None:
        if tenant_service.get_tenant(tenant_id) is None:
            raise ValueError(f"Tenant ID {tenant_id} not found")
        return tenant_id

    for candidate in tenant_service.list_tenants():
        if candidate.name == tenant:
            return candidate.id

    raise ValueError(f"Tenant '{tenant}' not found")


def resolve_fiscal_year(
    fiscal_year_service: FiscalYearService, tenant_id: int, fiscal_year: str | int
) -> int:
    """Resolve fiscal year name or ID to fiscal year ID.

    Names are tried first, since fiscal years are commonly named after
    their calendar year ("2024"), which would otherwise read as an ID.

    Raises:
        ValueError: If the tenant has no such fiscal year
    """
    fiscal_years = fiscal_year_service.list_fiscal_years(tenant_id)
    for candidate in fiscal_years:
        if candidate.name == str(fiscal_year):
            return candidate.id

    fiscal_year_id = _as_int(fiscal_year)
    if fiscal_year_id is not None:
        for candidate in fiscal_years:
            if candidate.id == fiscal_year_id:
                return fiscal_year_id

    raise ValueError(f"Fiscal year '{fiscal_year}' not found")


def resolve_account(chart: ChartOfAccounts, account: str | int) -> Account:
    """Resolve an account number or ID within a chart.

    Account numbers take precedence over IDs.

    Raises:
        ValueError: If the chart has no such account
    """
    found = find_account_by_number(chart, str(account).strip())
    if found is not None:
        return found

    account_id = _as_int(account)
    if account_id is not None:
        found = find_account(chart, account_id)
        if found is not None:
            return found

    raise ValueError(f"Account '{account}' not found in chart '{chart.name}'")
