"""Fiscal year domain service."""

import logging
from datetime import date
from typing import Any, Optional

from ledgerkit.database.base import Database
from ledgerkit.domain.entities import FiscalYear, Tenant
from ledgerkit.domain.errors import (
    ClosedFiscalYearError,
    ConflictError,
    DependencyError,
    InvalidRangeError,
    NotFoundError,
    ValidationError,
    fiscal_year_closed,
    fiscal_year_delete_blocked,
    fiscal_year_not_found,
    tenant_not_found,
)

logger = logging.getLogger(__name__)


def validate_date_range(start_date: date, end_date: date) -> None:
    """Require end_date to be strictly after start_date."""
    if end_date <= start_date:
        raise InvalidRangeError(
            f"Fiscal year end date {end_date} must be after start date {start_date}"
        )


def _overlaps(first: FiscalYear, start_date: date, end_date: date) -> bool:
    return first.start_date <= end_date and start_date <= first.end_date


class FiscalYearService:
    """Service for managing fiscal years and their open/closed state."""

    def __init__(self, db: Database):
        """Initialize fiscal year service.

        Args:
            db: Database instance
        """
        self.db = db

    def _require_tenant(self, tenant_id: int) -> Tenant:
        tenant = self.db.get_tenant(tenant_id)
        if tenant is None:
            raise NotFoundError(tenant_not_found(tenant_id))
        return tenant

    def _check_no_overlap(
        self,
        tenant_id: int,
        start_date: date,
        end_date: date,
        exclude_id: Optional[int] = None,
    ) -> None:
        for other in self.db.list_fiscal_years(tenant_id):
            if other.id != exclude_id and _overlaps(other, start_date, end_date):
                raise ConflictError(
                    f"Fiscal year overlaps with '{other.name}' "
                    f"({other.start_date} - {other.end_date})"
                )

    def create_fiscal_year(
        self, tenant_id: int, name: str, start_date: date, end_date: date
    ) -> int:
        """Create an open fiscal year.

        Args:
            tenant_id: Owning tenant
            name: Display name, unique per tenant
            start_date: First day of the period
            end_date: Last day of the period

        Returns:
            Fiscal year ID

        Raises:
            InvalidRangeError: If end_date is not after start_date
            NotFoundError: If the tenant does not exist
            ConflictError: If the name is taken or the period overlaps another
        """
        if not name or not name.strip():
            raise ValidationError("Fiscal year name is required")
        validate_date_range(start_date, end_date)
        self._require_tenant(tenant_id)

        name = name.strip()
        if any(fy.name == name for fy in self.db.list_fiscal_years(tenant_id)):
            raise ConflictError(f"Fiscal year '{name}' already exists")
        self._check_no_overlap(tenant_id, start_date, end_date)

        fiscal_year_id = self.db.create_fiscal_year(
            tenant_id=tenant_id, name=name, start_date=start_date, end_date=end_date
        )
        logger.info("Created fiscal year '%s' (ID: %s) for tenant %s", name, fiscal_year_id, tenant_id)
        return fiscal_year_id

    def get_fiscal_year(self, tenant_id: int, fiscal_year_id: int) -> Optional[FiscalYear]:
        """Get fiscal year by ID, or None if not found."""
        return self.db.get_fiscal_year(tenant_id, fiscal_year_id)

    def require_fiscal_year(self, tenant_id: int, fiscal_year_id: int) -> FiscalYear:
        """Get fiscal year by ID or raise NotFoundError."""
        fiscal_year = self.db.get_fiscal_year(tenant_id, fiscal_year_id)
        if fiscal_year is None:
            raise NotFoundError(fiscal_year_not_found(fiscal_year_id, tenant_id))
        return fiscal_year

    def list_fiscal_years(self, tenant_id: int) -> list[FiscalYear]:
        """List fiscal years of a tenant, newest first."""
        return self.db.list_fiscal_years(tenant_id)

    def find_fiscal_year_for_date(self, tenant_id: int, day: date) -> Optional[FiscalYear]:
        """Return the fiscal year containing a date, if any."""
        for fiscal_year in self.db.list_fiscal_years(tenant_id):
            if fiscal_year.contains(day):
                return fiscal_year
        return None

    def update_fiscal_year(
        self,
        tenant_id: int,
        fiscal_year_id: int,
        name: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> FiscalYear:
        """Rename or move an open fiscal year.

        Raises:
            ClosedFiscalYearError: If the fiscal year is closed
            InvalidRangeError: If the resulting range is empty
            ConflictError: If the new name is taken or the range overlaps another fiscal year
        """
        fiscal_year = self.require_fiscal_year(tenant_id, fiscal_year_id)
        if fiscal_year.is_closed:
            raise ClosedFiscalYearError(fiscal_year_closed(fiscal_year.name))

        patch: dict[str, Any] = {}
        if name is not None and name.strip() != fiscal_year.name:
            name = name.strip()
            if not name:
                raise ValidationError("Fiscal year name is required")
            if any(fy.name == name for fy in self.db.list_fiscal_years(tenant_id)):
                raise ConflictError(f"Fiscal year '{name}' already exists")
            patch["name"] = name
        if start_date is not None and start_date != fiscal_year.start_date:
            patch["start_date"] = start_date
        if end_date is not None and end_date != fiscal_year.end_date:
            patch["end_date"] = end_date

        if not patch:
            logger.info("No changes to update for fiscal year %s", fiscal_year_id)
            return fiscal_year

        new_start = patch.get("start_date", fiscal_year.start_date)
        new_end = patch.get("end_date", fiscal_year.end_date)
        validate_date_range(new_start, new_end)
        self._check_no_overlap(tenant_id, new_start, new_end, exclude_id=fiscal_year_id)

        return self.db.update_fiscal_year(tenant_id, fiscal_year_id, patch)

    def close_fiscal_year(self, tenant_id: int, fiscal_year_id: int) -> FiscalYear:
        """Close a fiscal year against new postings.

        If the fiscal year was the tenant's active one, the tenant is left
        without an active fiscal year.
        """
        fiscal_year = self.require_fiscal_year(tenant_id, fiscal_year_id)
        if fiscal_year.is_closed:
            return fiscal_year

        tenant = self._require_tenant(tenant_id)
        with self.db.transaction():
            updated = self.db.update_fiscal_year(tenant_id, fiscal_year_id, {"is_closed": True})
            if tenant.active_fiscal_year_id == fiscal_year_id:
                self.db.update_tenant(tenant_id, {"active_fiscal_year_id": None})
        logger.info("Closed fiscal year '%s' (ID: %s)", fiscal_year.name, fiscal_year_id)
        return updated

    def reopen_fiscal_year(self, tenant_id: int, fiscal_year_id: int) -> FiscalYear:
        """Reopen a closed fiscal year."""
        fiscal_year = self.require_fiscal_year(tenant_id, fiscal_year_id)
        if not fiscal_year.is_closed:
            return fiscal_year
        logger.info("Reopening fiscal year '%s' (ID: %s)", fiscal_year.name, fiscal_year_id)
        return self.db.update_fiscal_year(tenant_id, fiscal_year_id, {"is_closed": False})

    def set_active_fiscal_year(self, tenant_id: int, fiscal_year_id: int) -> None:
        """Make a fiscal year the tenant's default for new postings.

        Raises:
            ClosedFiscalYearError: If the fiscal year is closed
        """
        fiscal_year = self.require_fiscal_year(tenant_id, fiscal_year_id)
        if fiscal_year.is_closed:
            raise ClosedFiscalYearError(fiscal_year_closed(fiscal_year.name))
        self.db.update_tenant(tenant_id, {"active_fiscal_year_id": fiscal_year_id})
        logger.info("Tenant %s now posts into fiscal year '%s'", tenant_id, fiscal_year.name)

    def get_active_fiscal_year(self, tenant_id: int) -> Optional[FiscalYear]:
        """Return the tenant's active fiscal year, if one is set."""
        tenant = self._require_tenant(tenant_id)
        if tenant.active_fiscal_year_id is None:
            return None
        return self.db.get_fiscal_year(tenant_id, tenant.active_fiscal_year_id)

    def delete_fiscal_year(self, tenant_id: int, fiscal_year_id: int) -> None:
        """Delete a fiscal year without dependent data.

        Raises:
            NotFoundError: If the fiscal year does not exist
            DependencyError: If it has journal entries or takes part in a carry-forward
        """
        fiscal_year = self.require_fiscal_year(tenant_id, fiscal_year_id)
        entry_count = self.db.count_journal_entries(tenant_id, fiscal_year_id)
        is_source = any(
            other.carry_forward_source_fiscal_year_id == fiscal_year_id
            for other in self.db.list_fiscal_years(tenant_id)
        )
        is_target = fiscal_year.carry_forward_source_fiscal_year_id is not None

        if entry_count > 0 or is_source or is_target:
            raise DependencyError(
                fiscal_year_delete_blocked(fiscal_year.name, entry_count, is_source, is_target)
            )

        tenant = self._require_tenant(tenant_id)
        with self.db.transaction():
            if tenant.active_fiscal_year_id == fiscal_year_id:
                self.db.update_tenant(tenant_id, {"active_fiscal_year_id": None})
            self.db.delete_fiscal_year(tenant_id, fiscal_year_id)
        logger.info("Deleted fiscal year '%s' (ID: %s)", fiscal_year.name, fiscal_year_id)
