"""Tests for the pure balance calculation engine."""

import logging
from datetime import date, datetime
from decimal import Decimal

import pytest

from ledgerkit.domain.balance import (
    compute_account_ledger,
    compute_financial_summary,
    compute_period_change_summary,
    compute_periodical_breakdown,
    signed_amount,
)
from ledgerkit.domain.entities import (
    Account,
    AccountGroup,
    AggregationPeriod,
    ChartOfAccounts,
    JournalEntry,
    JournalEntryLine,
    MainType,
)
from ledgerkit.domain.errors import InvalidRangeError, UnknownAccountError

NOW = datetime(2024, 1, 1, 12, 0)

ASSET, LIABILITY, REVENUE, EXPENSE = 1, 2, 3, 4


def _account(account_id, number, main_type, opening_balance="0"):
    return Account(
        id=account_id,
        group_id=1,
        number=number,
        name=number,
        main_type=main_type,
        opening_balance=Decimal(opening_balance),
        description=None,
        created_at=NOW,
    )


def _chart(opening=None):
    opening = opening or {}
    accounts = (
        _account(ASSET, "A100", MainType.ASSET, opening.get(ASSET, "0")),
        _account(LIABILITY, "L200", MainType.LIABILITY, opening.get(LIABILITY, "0")),
        _account(REVENUE, "R300", MainType.REVENUE),
        _account(EXPENSE, "E400", MainType.EXPENSE),
    )
    group = AccountGroup(id=1, chart_id=1, name="All", accounts=accounts)
    return ChartOfAccounts(
        id=1,
        name="Test",
        tenant_id=1,
        retained_earnings_account_id=None,
        created_at=NOW,
        groups=(group,),
    )


_line_ids = iter(range(1, 10_000))


def _entry(number, entry_date, *postings):
    """Build an entry from (account_id, debit, credit) postings."""
    lines = tuple(
        JournalEntryLine(
            id=next(_line_ids),
            account_id=account_id,
            debit=Decimal(debit) if debit else None,
            credit=Decimal(credit) if credit else None,
        )
        for account_id, debit, credit in postings
    )
    return JournalEntry(
        id=number,
        tenant_id=1,
        fiscal_year_id=1,
        entry_number=number,
        date=entry_date,
        description=f"Entry {number}",
        posted=True,
        is_carry_forward=False,
        created_at=NOW,
        updated_at=NOW,
        lines=lines,
    )


@pytest.fixture
def chart():
    return _chart()


@pytest.fixture
def sale_and_rent():
    """A sale of 500 into the bank and 200 of rent paid from it."""
    return [
        _entry(1, date(2024, 1, 15), (ASSET, "500", None), (REVENUE, None, "500")),
        _entry(2, date(2024, 2, 1), (EXPENSE, "200", None), (ASSET, None, "200")),
    ]


def test_summary_of_sale_and_rent(chart, sale_and_rent):
    summary = compute_financial_summary(chart, sale_and_rent)

    assert summary.account_balances[ASSET] == Decimal("300")
    assert summary.account_balances[REVENUE] == Decimal("500")
    assert summary.account_balances[EXPENSE] == Decimal("200")
    assert summary.total_assets == Decimal("300")
    assert summary.total_liabilities == Decimal("0")
    assert summary.total_revenue == Decimal("500")
    assert summary.total_expenses == Decimal("200")
    assert summary.net_profit_loss == Decimal("300")
    assert summary.equity == Decimal("300")
    assert summary.skipped_line_ids == ()


def test_summary_without_chart_or_entries_is_zero(chart):
    for summary in (
        compute_financial_summary(None, None),
        compute_financial_summary(chart, None),
        compute_financial_summary(chart, []),
    ):
        assert summary.total_assets == 0
        assert summary.total_liabilities == 0
        assert summary.net_profit_loss == 0
        assert summary.equity == 0

    assert compute_financial_summary(chart, []).account_balances == {
        ASSET: 0,
        LIABILITY: 0,
        REVENUE: 0,
        EXPENSE: 0,
    }


def test_summary_is_idempotent_and_order_independent(chart, sale_and_rent):
    first = compute_financial_summary(chart, sale_and_rent)
    second = compute_financial_summary(chart, list(reversed(sale_and_rent)))

    assert first == second
    # Inputs are left untouched
    assert len(sale_and_rent) == 2
    assert sale_and_rent[0].entry_number == 1


def test_credit_normal_accounts_grow_with_credits(chart):
    entries = [
        _entry(1, date(2024, 3, 1), (ASSET, "1000", None), (LIABILITY, None, "1000")),
        _entry(2, date(2024, 3, 2), (LIABILITY, "250", None), (ASSET, None, "250")),
    ]

    summary = compute_financial_summary(chart, entries)

    assert summary.account_balances[LIABILITY] == Decimal("750")
    assert summary.account_balances[ASSET] == Decimal("750")
    assert summary.equity == Decimal("0")


def test_signed_amount_follows_main_type():
    assert signed_amount(MainType.ASSET, Decimal("10"), None) == Decimal("10")
    assert signed_amount(MainType.EXPENSE, None, Decimal("10")) == Decimal("-10")
    assert signed_amount(MainType.LIABILITY, None, Decimal("10")) == Decimal("10")
    assert signed_amount(MainType.REVENUE, Decimal("10"), None) == Decimal("-10")


def test_unknown_account_lines_are_skipped_and_reported(chart, caplog):
    entry = _entry(1, date(2024, 1, 2), (ASSET, "100", None), (999, None, "100"))
    skipped_line_id = entry.lines[1].id

    with caplog.at_level(logging.WARNING, logger="ledgerkit.domain.balance"):
        summary = compute_financial_summary(chart, [entry])

    assert summary.account_balances[ASSET] == Decimal("100")
    assert 999 not in summary.account_balances
    assert summary.skipped_line_ids == (skipped_line_id,)
    assert "not in chart" in caplog.text


def test_unknown_account_lines_raise_in_strict_mode(chart):
    entry = _entry(1, date(2024, 1, 2), (ASSET, "100", None), (999, None, "100"))

    with pytest.raises(UnknownAccountError):
        compute_financial_summary(chart, [entry], strict=True)


def test_unbalanced_entries_are_folded_as_given(chart):
    entry = _entry(1, date(2024, 1, 2), (ASSET, "100", None), (REVENUE, None, "90"))

    summary = compute_financial_summary(chart, [entry])

    assert summary.total_assets == Decimal("100")
    assert summary.total_revenue == Decimal("90")


def test_opening_balances_are_opt_in(sale_and_rent):
    chart = _chart(opening={ASSET: "1000", LIABILITY: "400"})

    without = compute_financial_summary(chart, sale_and_rent)
    with_opening = compute_financial_summary(chart, sale_and_rent, include_opening_balances=True)

    assert without.total_assets == Decimal("300")
    assert with_opening.total_assets == Decimal("1300")
    assert with_opening.total_liabilities == Decimal("400")
    assert with_opening.equity == Decimal("900")
    assert with_opening.net_profit_loss == without.net_profit_loss


def test_period_change_against_baseline(chart, sale_and_rent):
    baseline = sale_and_rent[:1]

    change = compute_period_change_summary(chart, sale_and_rent, baseline)

    assert change.current.total_assets == Decimal("300")
    assert change.baseline.total_assets == Decimal("500")
    assert change.total_assets_period_change == Decimal("-200")
    assert change.total_expenses_period_change == Decimal("200")
    assert change.total_revenue_period_change == Decimal("0")
    assert change.net_profit_loss_period_change == Decimal("-200")
    assert change.equity_period_change == Decimal("-200")
    assert change.account_balance_changes[EXPENSE] == Decimal("200")


def test_period_change_against_empty_baseline_equals_summary(chart, sale_and_rent):
    change = compute_period_change_summary(chart, sale_and_rent, [])

    assert change.total_assets_period_change == change.current.total_assets
    assert change.net_profit_loss_period_change == change.current.net_profit_loss


def test_monthly_breakdown_is_clipped_and_complete(chart, sale_and_rent):
    items = compute_periodical_breakdown(
        chart, sale_and_rent, date(2024, 1, 10), date(2024, 3, 5), AggregationPeriod.MONTHLY
    )

    assert [item.period_label for item in items] == ["Jan '24", "Feb '24", "Mar '24"]
    assert [item.sort_key for item in items] == ["2024-01", "2024-02", "2024-03"]
    assert items[0].start_date == date(2024, 1, 10)
    assert items[0].end_date == date(2024, 1, 31)
    assert items[2].end_date == date(2024, 3, 5)
    assert items[0].revenue == Decimal("500")
    assert items[1].expenses == Decimal("200")
    assert items[1].net_profit_loss == Decimal("-200")
    assert items[2].revenue == 0 and items[2].expenses == 0


def test_weekly_breakdown_uses_iso_weeks(chart):
    entries = [
        _entry(1, date(2024, 6, 5), (ASSET, "80", None), (REVENUE, None, "80")),
        _entry(2, date(2024, 6, 10), (EXPENSE, "30", None), (ASSET, None, "30")),
    ]

    items = compute_periodical_breakdown(
        chart, entries, date(2024, 6, 5), date(2024, 6, 12), AggregationPeriod.WEEKLY
    )

    assert [item.period_label for item in items] == ["KW23 '24", "KW24 '24"]
    assert [item.sort_key for item in items] == ["2024-W23", "2024-W24"]
    assert items[0].start_date == date(2024, 6, 5)
    assert items[0].end_date == date(2024, 6, 9)
    assert items[0].revenue == Decimal("80")
    assert items[1].expenses == Decimal("30")


def test_daily_breakdown_labels(chart, sale_and_rent):
    items = compute_periodical_breakdown(
        chart, sale_and_rent, date(2024, 1, 31), date(2024, 2, 1), AggregationPeriod.DAILY
    )

    assert [item.period_label for item in items] == ["31.01.24", "01.02.24"]
    assert items[1].expenses == Decimal("200")


def test_breakdown_ignores_entries_outside_range(chart, sale_and_rent):
    items = compute_periodical_breakdown(chart, sale_and_rent, date(2024, 2, 1), date(2024, 2, 29))

    assert len(items) == 1
    assert items[0].revenue == 0
    assert items[0].expenses == Decimal("200")


def test_breakdown_rejects_inverted_range(chart):
    with pytest.raises(InvalidRangeError):
        compute_periodical_breakdown(chart, [], date(2024, 2, 1), date(2024, 1, 1))


def test_account_ledger_running_balance(chart, sale_and_rent):
    later = _entry(3, date(2024, 1, 20), (ASSET, "50", None), (REVENUE, None, "50"))

    rows = compute_account_ledger(chart, sale_and_rent + [later], ASSET)

    assert [row.entry_number for row in rows] == [1, 3, 2]
    assert [row.balance for row in rows] == [Decimal("500"), Decimal("550"), Decimal("350")]
    assert rows[2].credit == Decimal("200")
    assert rows[2].debit == 0


def test_account_ledger_starts_from_opening_balance(sale_and_rent):
    chart = _chart(opening={ASSET: "1000"})

    rows = compute_account_ledger(chart, sale_and_rent, ASSET, include_opening_balance=True)

    assert rows[-1].balance == Decimal("1300")


def test_account_ledger_unknown_account(chart):
    with pytest.raises(UnknownAccountError):
        compute_account_ledger(chart, [], 999)
