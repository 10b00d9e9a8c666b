"""Tenant domain service."""

import logging
from typing import Optional

from ledgerkit.database.base import Database
from ledgerkit.domain.entities import Tenant
from ledgerkit.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    chart_not_found,
    tenant_not_found,
)

logger = logging.getLogger(__name__)


class TenantService:
    """Service for the tenant records the ledger depends on."""

    def __init__(self, db: Database):
        """Initialize tenant service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_tenant(self, name: str) -> int:
        """Create a new tenant.

        Raises:
            ConflictError: If a tenant with this name already exists
        """
        if not name or not name.strip():
            raise ValidationError("Tenant name is required")
        name = name.strip()
        for tenant in self.db.list_tenants():
            if tenant.name == name:
                raise ConflictError(f"Tenant with name '{name}' already exists")

        tenant_id = self.db.create_tenant(name=name)
        logger.info("Created tenant '%s' (ID: %s)", name, tenant_id)
        return tenant_id

    def get_tenant(self, tenant_id: int) -> Optional[Tenant]:
        """Get tenant by ID, or None if not found."""
        return self.db.get_tenant(tenant_id)

    def require_tenant(self, tenant_id: int) -> Tenant:
        """Get tenant by ID or raise NotFoundError."""
        tenant = self.db.get_tenant(tenant_id)
        if tenant is None:
            raise NotFoundError(tenant_not_found(tenant_id))
        return tenant

    def list_tenants(self) -> list[Tenant]:
        """List all tenants."""
        return self.db.list_tenants()

    def assign_chart(self, tenant_id: int, chart_id: int) -> Tenant:
        """Make a chart of accounts the tenant's ledger structure.

        Raises:
            NotFoundError: If tenant or chart does not exist
            ValidationError: If the chart is a template or belongs to another tenant
        """
        self.require_tenant(tenant_id)
        chart = self.db.get_chart_of_accounts(chart_id)
        if chart is None:
            raise NotFoundError(chart_not_found(chart_id))
        if chart.is_template:
            raise ValidationError(
                f"Chart {chart_id} is a template. Clone it for the tenant first."
            )
        if chart.tenant_id != tenant_id:
            raise ValidationError(f"Chart {chart_id} belongs to another tenant")

        logger.info("Tenant %s now uses chart %s", tenant_id, chart_id)
        return self.db.update_tenant(tenant_id, {"chart_of_accounts_id": chart_id})
