"""Shared pytest fixtures for ledgerkit tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal
from types import SimpleNamespace
import pytest

from ledgerkit.database.factories import create_sqlite_database
from ledgerkit.domain.carry_forward import CarryForwardLocks, CarryForwardService
from ledgerkit.domain.chart import ChartService
from ledgerkit.domain.entities import MainType, NewJournalEntryLine
from ledgerkit.domain.fiscal_year import FiscalYearService
from ledgerkit.domain.journal import JournalService
from ledgerkit.domain.summary import SummaryService
from ledgerkit.domain.tenant import TenantService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def tenant_service(temp_db):
    """Create a TenantService with a temporary database."""
    return TenantService(temp_db)


@pytest.fixture
def chart_service(temp_db):
    """Create a ChartService with a temporary database."""
    return ChartService(temp_db)


@pytest.fixture
def fiscal_year_service(temp_db):
    """Create a FiscalYearService with a temporary database."""
    return FiscalYearService(temp_db)


@pytest.fixture
def journal_service(temp_db):
    """Create a JournalService with a temporary database."""
    return JournalService(temp_db)


@pytest.fixture
def summary_service(temp_db):
    """Create a SummaryService with a temporary database."""
    return SummaryService(temp_db)


@pytest.fixture
def carry_forward_service(temp_db):
    """Create a CarryForwardService with its own lock registry."""
    return CarryForwardService(temp_db, locks=CarryForwardLocks())


@pytest.fixture
def sample_tenant(tenant_service):
    """Create a sample tenant for testing."""
    tenant_id = tenant_service.create_tenant("Muster GmbH")
    return tenant_service.get_tenant(tenant_id)


@pytest.fixture
def sample_chart(chart_service, tenant_service, sample_tenant):
    """Create a chart with one account per type and assign it to the sample tenant.

    Accounts are keyed by number: A100 (Asset), L200 (Liability), R300
    (Revenue), E400 (Expense) and 2970 (Liability, retained earnings).
    """
    chart_id = chart_service.create_chart("Test Chart", tenant_id=sample_tenant.id)
    assets = chart_service.add_group(chart_id, "Assets")
    liabilities = chart_service.add_group(chart_id, "Liabilities")
    income = chart_service.add_group(chart_id, "Income statement")

    chart_service.add_account(assets, "A100", "Bank", MainType.ASSET)
    chart_service.add_account(liabilities, "L200", "Loan", MainType.LIABILITY)
    retained_id = chart_service.add_account(
        liabilities, "2970", "Retained earnings", MainType.LIABILITY
    )
    chart_service.add_account(income, "R300", "Sales", MainType.REVENUE)
    chart_service.add_account(income, "E400", "Rent", MainType.EXPENSE)

    chart_service.set_retained_earnings_account(chart_id, retained_id)
    tenant_service.assign_chart(sample_tenant.id, chart_id)
    return chart_service.get_chart(chart_id)


@pytest.fixture
def accounts(sample_chart):
    """Map account numbers of the sample chart to account IDs."""
    return {
        account.number: account.id
        for group in sample_chart.groups
        for account in group.accounts
    }


@pytest.fixture
def fiscal_years(fiscal_year_service, sample_tenant, sample_chart):
    """Create calendar fiscal years 2024 (active) and 2025."""
    fy_2024 = fiscal_year_service.create_fiscal_year(
        sample_tenant.id, "2024", date(2024, 1, 1), date(2024, 12, 31)
    )
    fy_2025 = fiscal_year_service.create_fiscal_year(
        sample_tenant.id, "2025", date(2025, 1, 1), date(2025, 12, 31)
    )
    fiscal_year_service.set_active_fiscal_year(sample_tenant.id, fy_2024)
    return SimpleNamespace(fy_2024=fy_2024, fy_2025=fy_2025)


@pytest.fixture
def book(journal_service, sample_tenant, accounts):
    """Return a helper recording a two-line entry: book(date, debit_no, credit_no, amount)."""

    def _book(entry_date, debit_number, credit_number, amount, fiscal_year_id=None, **kwargs):
        amount = Decimal(amount)
        return journal_service.create_entry(
            tenant_id=sample_tenant.id,
            entry_date=entry_date,
            description=kwargs.pop("description", f"{debit_number} / {credit_number}"),
            lines=[
                NewJournalEntryLine(account_id=accounts[debit_number], debit=amount),
                NewJournalEntryLine(account_id=accounts[credit_number], credit=amount),
            ],
            fiscal_year_id=fiscal_year_id,
            **kwargs,
        )

    return _book


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
