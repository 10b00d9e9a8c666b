"""Tests for carrying closing balances into the next fiscal year."""

from datetime import date
from decimal import Decimal

import pytest

from ledgerkit.domain.errors import (
    ClosedFiscalYearError,
    ConfigurationError,
    ConflictError,
    NotFoundError,
    UnbalancedEntryError,
    ValidationError,
)


@pytest.fixture
def closing_2024(book, fiscal_years):
    """Bank 1000, loan 800, net profit 200 at the end of 2024."""
    book(date(2024, 1, 10), "A100", "L200", "800", description="Loan paid out")
    book(date(2024, 5, 1), "A100", "R300", "500", description="Sale")
    book(date(2024, 6, 1), "E400", "A100", "300", description="Rent")
    return fiscal_years


def _postings(entry, accounts):
    by_id = {account_id: number for number, account_id in accounts.items()}
    return [(by_id[line.account_id], line.debit, line.credit) for line in entry.lines]


def test_carries_balance_sheet_and_net_result(carry_forward_service, sample_tenant, accounts, closing_2024):
    entry = carry_forward_service.carry_forward_balances(
        sample_tenant.id, closing_2024.fy_2024, closing_2024.fy_2025
    )

    assert _postings(entry, accounts) == [
        ("A100", Decimal("1000.00"), None),
        ("L200", None, Decimal("800.00")),
        ("2970", None, Decimal("200.00")),
    ]
    assert entry.total_debit == entry.total_credit
    assert entry.fiscal_year_id == closing_2024.fy_2025
    assert entry.date == date(2025, 1, 1)
    assert entry.posted is True
    assert entry.is_carry_forward is True


def test_target_records_its_source(carry_forward_service, fiscal_year_service, sample_tenant, closing_2024):
    carry_forward_service.carry_forward_balances(
        sample_tenant.id, closing_2024.fy_2024, closing_2024.fy_2025
    )

    target = fiscal_year_service.get_fiscal_year(sample_tenant.id, closing_2024.fy_2025)
    source = fiscal_year_service.get_fiscal_year(sample_tenant.id, closing_2024.fy_2024)
    assert target.carry_forward_source_fiscal_year_id == closing_2024.fy_2024
    assert source.is_closed is False


def test_target_opens_with_balance_sheet_only(
    carry_forward_service, summary_service, sample_tenant, accounts, closing_2024
):
    carry_forward_service.carry_forward_balances(
        sample_tenant.id, closing_2024.fy_2024, closing_2024.fy_2025
    )

    opening = summary_service.get_summary(sample_tenant.id, closing_2024.fy_2025)
    assert opening.total_assets == Decimal("1000")
    assert opening.total_liabilities == Decimal("1000")
    assert opening.account_balances[accounts["2970"]] == Decimal("200")
    assert opening.total_revenue == 0
    assert opening.total_expenses == 0
    assert opening.net_profit_loss == 0


def test_loss_and_negative_asset(carry_forward_service, sample_tenant, accounts, book, fiscal_years):
    book(date(2024, 2, 1), "E400", "A100", "150")

    entry = carry_forward_service.carry_forward_balances(
        sample_tenant.id, fiscal_years.fy_2024, fiscal_years.fy_2025
    )

    assert _postings(entry, accounts) == [
        ("A100", None, Decimal("150.00")),
        ("2970", Decimal("150.00"), None),
    ]


def test_first_year_includes_opening_balances(
    carry_forward_service, chart_service, summary_service, sample_tenant, accounts, fiscal_years
):
    chart_service.set_opening_balance(accounts["A100"], Decimal("400"))
    chart_service.set_opening_balance(accounts["L200"], Decimal("400"))

    entry = carry_forward_service.carry_forward_balances(
        sample_tenant.id, fiscal_years.fy_2024, fiscal_years.fy_2025
    )

    assert _postings(entry, accounts) == [
        ("A100", Decimal("400.00"), None),
        ("L200", None, Decimal("400.00")),
    ]
    # The carried year starts from the synthetic entry, not from stored openings
    opening = summary_service.get_summary(sample_tenant.id, fiscal_years.fy_2025)
    assert opening.total_assets == Decimal("400")


def test_chained_carry_forward_does_not_double_count(
    carry_forward_service, fiscal_year_service, chart_service, sample_tenant, accounts, book, fiscal_years
):
    chart_service.set_opening_balance(accounts["A100"], Decimal("100"))
    chart_service.set_opening_balance(accounts["L200"], Decimal("100"))
    fy_2026 = fiscal_year_service.create_fiscal_year(
        sample_tenant.id, "2026", date(2026, 1, 1), date(2026, 12, 31)
    )
    carry_forward_service.carry_forward_balances(
        sample_tenant.id, fiscal_years.fy_2024, fiscal_years.fy_2025
    )
    book(date(2025, 3, 1), "A100", "R300", "50", fiscal_year_id=fiscal_years.fy_2025)

    entry = carry_forward_service.carry_forward_balances(
        sample_tenant.id, fiscal_years.fy_2025, fy_2026
    )

    assert _postings(entry, accounts) == [
        ("A100", Decimal("150.00"), None),
        ("L200", None, Decimal("100.00")),
        ("2970", None, Decimal("50.00")),
    ]


def test_close_source(carry_forward_service, fiscal_year_service, sample_tenant, closing_2024):
    carry_forward_service.carry_forward_balances(
        sample_tenant.id, closing_2024.fy_2024, closing_2024.fy_2025, close_source=True
    )

    source = fiscal_year_service.get_fiscal_year(sample_tenant.id, closing_2024.fy_2024)
    assert source.is_closed is True
    assert fiscal_year_service.get_active_fiscal_year(sample_tenant.id) is None


def test_rejects_same_source_and_target(carry_forward_service, sample_tenant, closing_2024):
    with pytest.raises(ValidationError, match="must differ"):
        carry_forward_service.carry_forward_balances(
            sample_tenant.id, closing_2024.fy_2024, closing_2024.fy_2024
        )


def test_rejects_unknown_fiscal_year(carry_forward_service, sample_tenant, closing_2024):
    with pytest.raises(NotFoundError):
        carry_forward_service.carry_forward_balances(sample_tenant.id, closing_2024.fy_2024, 999)


def test_rejects_unknown_tenant(carry_forward_service, closing_2024):
    with pytest.raises(NotFoundError):
        carry_forward_service.carry_forward_balances(999, closing_2024.fy_2024, closing_2024.fy_2025)


def test_rejects_closed_target(carry_forward_service, fiscal_year_service, sample_tenant, closing_2024):
    fiscal_year_service.close_fiscal_year(sample_tenant.id, closing_2024.fy_2025)

    with pytest.raises(ClosedFiscalYearError):
        carry_forward_service.carry_forward_balances(
            sample_tenant.id, closing_2024.fy_2024, closing_2024.fy_2025
        )


def test_rejects_target_before_source(carry_forward_service, sample_tenant, book, closing_2024):
    book(date(2025, 2, 1), "A100", "R300", "10", fiscal_year_id=closing_2024.fy_2025)

    with pytest.raises(ValidationError, match="must start after"):
        carry_forward_service.carry_forward_balances(
            sample_tenant.id, closing_2024.fy_2025, closing_2024.fy_2024
        )


def test_requires_retained_earnings_account(carry_forward_service, temp_db, sample_tenant, sample_chart, closing_2024):
    temp_db.set_retained_earnings_account(sample_chart.id, None)

    with pytest.raises(ConfigurationError):
        carry_forward_service.carry_forward_balances(
            sample_tenant.id, closing_2024.fy_2024, closing_2024.fy_2025
        )


def test_rejects_empty_source(carry_forward_service, sample_tenant, fiscal_years):
    with pytest.raises(ValidationError, match="no balances"):
        carry_forward_service.carry_forward_balances(
            sample_tenant.id, fiscal_years.fy_2024, fiscal_years.fy_2025
        )


def test_rejects_unbalanced_source(
    carry_forward_service, chart_service, journal_service, sample_tenant, accounts, fiscal_years
):
    chart_service.set_opening_balance(accounts["A100"], Decimal("250"))
    chart_service.set_opening_balance(accounts["L200"], Decimal("100"))

    with pytest.raises(UnbalancedEntryError):
        carry_forward_service.carry_forward_balances(
            sample_tenant.id, fiscal_years.fy_2024, fiscal_years.fy_2025
        )
    assert journal_service.list_entries(sample_tenant.id, fiscal_years.fy_2025) == []


def test_rejects_second_carry_forward(carry_forward_service, sample_tenant, closing_2024):
    carry_forward_service.carry_forward_balances(
        sample_tenant.id, closing_2024.fy_2024, closing_2024.fy_2025
    )

    with pytest.raises(ConflictError, match="already carried forward"):
        carry_forward_service.carry_forward_balances(
            sample_tenant.id, closing_2024.fy_2024, closing_2024.fy_2025
        )


def test_replace_existing_carry_forward(
    carry_forward_service, journal_service, sample_tenant, accounts, book, closing_2024
):
    carry_forward_service.carry_forward_balances(
        sample_tenant.id, closing_2024.fy_2024, closing_2024.fy_2025
    )
    book(date(2024, 12, 31), "A100", "R300", "100", fiscal_year_id=closing_2024.fy_2024)
    book(date(2025, 2, 1), "A100", "R300", "10", fiscal_year_id=closing_2024.fy_2025)

    carry_forward_service.carry_forward_balances(
        sample_tenant.id, closing_2024.fy_2024, closing_2024.fy_2025, replace_existing=True
    )

    entries = journal_service.list_entries(sample_tenant.id, closing_2024.fy_2025)
    opening = [entry for entry in entries if entry.is_carry_forward]
    assert len(opening) == 1
    assert len(entries) == 2
    assert opening[0].total_debit == Decimal("1100.00")


def test_fails_fast_while_target_is_locked(carry_forward_service, journal_service, sample_tenant, closing_2024):
    locks = carry_forward_service.locks

    with locks.hold(sample_tenant.id, closing_2024.fy_2025):
        with pytest.raises(ConflictError, match="in progress"):
            carry_forward_service.carry_forward_balances(
                sample_tenant.id, closing_2024.fy_2024, closing_2024.fy_2025
            )

    assert not locks.is_held(sample_tenant.id, closing_2024.fy_2025)
    assert journal_service.list_entries(sample_tenant.id, closing_2024.fy_2025) == []


def test_lock_is_released_after_failure(carry_forward_service, sample_tenant, fiscal_years):
    with pytest.raises(ValidationError):
        carry_forward_service.carry_forward_balances(
            sample_tenant.id, fiscal_years.fy_2024, fiscal_years.fy_2025
        )

    assert not carry_forward_service.locks.is_held(sample_tenant.id, fiscal_years.fy_2025)


def test_write_failure_leaves_no_partial_state(
    carry_forward_service, temp_db, journal_service, fiscal_year_service, sample_tenant, closing_2024, monkeypatch
):
    def failing_update(*args, **kwargs):
        raise RuntimeError("disk full")

    monkeypatch.setattr(temp_db, "update_fiscal_year", failing_update)

    with pytest.raises(RuntimeError):
        carry_forward_service.carry_forward_balances(
            sample_tenant.id, closing_2024.fy_2024, closing_2024.fy_2025
        )

    monkeypatch.undo()
    assert journal_service.list_entries(sample_tenant.id, closing_2024.fy_2025) == []
    target = fiscal_year_service.get_fiscal_year(sample_tenant.id, closing_2024.fy_2025)
    assert target.carry_forward_source_fiscal_year_id is None
