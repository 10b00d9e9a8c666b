"""Tests for JournalService and the double-entry validation rules."""

from datetime import date
from decimal import Decimal

import pytest

from ledgerkit.domain.entities import MainType, NewJournalEntryLine
from ledgerkit.domain.errors import (
    ClosedFiscalYearError,
    ConflictError,
    NotFoundError,
    UnbalancedEntryError,
    UnknownAccountError,
    ValidationError,
)
from ledgerkit.domain.journal import validate_entry_lines


def _lines(accounts, *postings):
    return [
        NewJournalEntryLine(
            account_id=accounts[number],
            debit=Decimal(debit) if debit else None,
            credit=Decimal(credit) if credit else None,
        )
        for number, debit, credit in postings
    ]


def test_create_entry_in_active_fiscal_year(journal_service, sample_tenant, accounts, fiscal_years):
    entry = journal_service.create_entry(
        tenant_id=sample_tenant.id,
        entry_date=date(2024, 3, 1),
        description="Invoice 17",
        lines=_lines(accounts, ("A100", "500.00", None), ("R300", None, "500.00")),
        attachments=["receipts/17.pdf"],
    )

    assert entry.fiscal_year_id == fiscal_years.fy_2024
    assert entry.entry_number == 1
    assert entry.posted is False
    assert entry.is_carry_forward is False
    assert entry.total_debit == entry.total_credit == Decimal("500.00")
    assert entry.attachments == ("receipts/17.pdf",)
    assert [line.account_id for line in entry.lines] == [accounts["A100"], accounts["R300"]]


def test_entry_numbers_are_sequential_per_tenant(book, fiscal_years):
    first = book(date(2024, 3, 1), "A100", "R300", "10")
    second = book(date(2024, 2, 1), "E400", "A100", "5")

    assert (first.entry_number, second.entry_number) == (1, 2)


def test_list_entries_ordered_by_date(journal_service, sample_tenant, book, fiscal_years):
    book(date(2024, 3, 1), "A100", "R300", "10")
    book(date(2024, 2, 1), "E400", "A100", "5")
    book(date(2025, 1, 5), "A100", "R300", "7", fiscal_year_id=fiscal_years.fy_2025)

    all_entries = journal_service.list_entries(sample_tenant.id)
    entries_2024 = journal_service.list_entries(sample_tenant.id, fiscal_years.fy_2024)

    assert [e.entry_number for e in all_entries] == [2, 1, 3]
    assert [e.entry_number for e in entries_2024] == [2, 1]


def test_entry_without_fiscal_year(journal_service, sample_tenant, sample_chart, book):
    entry = book(date(2024, 3, 1), "A100", "R300", "10")

    assert entry.fiscal_year_id is None


def test_multi_line_entry(journal_service, sample_tenant, accounts, fiscal_years):
    entry = journal_service.create_entry(
        tenant_id=sample_tenant.id,
        entry_date=date(2024, 4, 1),
        description="Rent, partly on loan",
        lines=_lines(
            accounts,
            ("E400", "1200", None),
            ("A100", None, "700"),
            ("L200", None, "500"),
        ),
    )

    assert len(entry.lines) == 3


def test_rejects_unbalanced_entry(journal_service, sample_tenant, accounts, fiscal_years):
    with pytest.raises(UnbalancedEntryError, match="unbalanced"):
        journal_service.create_entry(
            tenant_id=sample_tenant.id,
            entry_date=date(2024, 3, 1),
            description="Typo",
            lines=_lines(accounts, ("A100", "100", None), ("R300", None, "90")),
        )
    assert journal_service.list_entries(sample_tenant.id) == []


def test_rejects_unknown_account(journal_service, sample_tenant, accounts, fiscal_years):
    lines = [
        NewJournalEntryLine(account_id=accounts["A100"], debit=Decimal("100")),
        NewJournalEntryLine(account_id=9999, credit=Decimal("100")),
    ]

    with pytest.raises(UnknownAccountError):
        journal_service.create_entry(sample_tenant.id, date(2024, 3, 1), "Lost", lines)


def test_rejects_account_of_other_chart(
    journal_service, chart_service, sample_tenant, accounts, fiscal_years
):
    other_chart = chart_service.create_chart("Other")
    group_id = chart_service.add_group(other_chart, "Assets")
    foreign_id = chart_service.add_account(group_id, "A100", "Bank", MainType.ASSET)
    lines = [
        NewJournalEntryLine(account_id=foreign_id, debit=Decimal("100")),
        NewJournalEntryLine(account_id=accounts["R300"], credit=Decimal("100")),
    ]

    with pytest.raises(UnknownAccountError):
        journal_service.create_entry(sample_tenant.id, date(2024, 3, 1), "Foreign", lines)


@pytest.mark.parametrize(
    "postings, message",
    [
        ((("A100", "100", None),), "at least two lines"),
        ((("A100", "100", "100"), ("R300", None, "0.01")), "both a debit and a credit"),
        ((("A100", None, None), ("R300", None, "100")), "no amount"),
        ((("A100", "-100", None), ("R300", "100", None)), "negative"),
    ],
)
def test_rejects_malformed_lines(sample_chart, accounts, postings, message):
    with pytest.raises(ValidationError, match=message):
        validate_entry_lines(sample_chart, _lines(accounts, *postings))


def test_tolerates_sub_cent_rounding(sample_chart, accounts):
    lines = _lines(accounts, ("A100", "100.004", None), ("R300", None, "100"))

    validate_entry_lines(sample_chart, lines)


def test_rejects_closed_fiscal_year(journal_service, fiscal_year_service, sample_tenant, book, fiscal_years):
    fiscal_year_service.close_fiscal_year(sample_tenant.id, fiscal_years.fy_2024)

    with pytest.raises(ClosedFiscalYearError):
        book(date(2024, 3, 1), "A100", "R300", "10", fiscal_year_id=fiscal_years.fy_2024)


def test_rejects_date_outside_fiscal_year(book, fiscal_years):
    with pytest.raises(ValidationError, match="outside fiscal year"):
        book(date(2025, 3, 1), "A100", "R300", "10", fiscal_year_id=fiscal_years.fy_2024)


def test_requires_assigned_chart(journal_service, tenant_service, accounts):
    tenant_id = tenant_service.create_tenant("No Chart AG")

    with pytest.raises(ValidationError, match="no chart of accounts"):
        journal_service.create_entry(
            tenant_id, date(2024, 3, 1), "x", _lines(accounts, ("A100", "1", None), ("R300", None, "1"))
        )


def test_unknown_tenant(journal_service):
    with pytest.raises(NotFoundError):
        journal_service.get_tenant_chart(42)


def test_post_and_delete(journal_service, book, fiscal_years):
    draft = book(date(2024, 3, 1), "A100", "R300", "10")
    posted = book(date(2024, 3, 2), "A100", "R300", "20")

    journal_service.post_entry(posted.id)
    journal_service.delete_entry(draft.id)

    assert journal_service.get_entry(draft.id) is None
    assert journal_service.require_entry(posted.id).posted is True
    with pytest.raises(ConflictError, match="posted"):
        journal_service.delete_entry(posted.id)


def test_delete_blocked_in_closed_fiscal_year(
    journal_service, fiscal_year_service, sample_tenant, book, fiscal_years
):
    draft = book(date(2024, 3, 1), "A100", "R300", "10")
    fiscal_year_service.close_fiscal_year(sample_tenant.id, fiscal_years.fy_2024)

    with pytest.raises(ClosedFiscalYearError):
        journal_service.delete_entry(draft.id)
    with pytest.raises(ClosedFiscalYearError):
        journal_service.post_entry(draft.id)


def test_require_missing_entry(journal_service):
    with pytest.raises(NotFoundError):
        journal_service.require_entry(404)
