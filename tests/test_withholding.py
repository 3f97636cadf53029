"""Tests for withholding tax tracking."""

import math
from datetime import date

import pytest

from freelance_tax.calculators import withholding as wht


@pytest.fixture
def docs():
    return [
        {"id": "a", "subtotal": 10_000, "withholding_tax_rate": 3, "wht_received": True,
         "issue_date": date(2025, 3, 1), "customer_name": "Acme"},
        {"id": "b", "subtotal": 20_000, "withholding_tax_rate": 5, "wht_received": False,
         "issue_date": "2025-06-15", "customer_name": "Beta", "customer_tax_id": "0105550000000"},
        {"id": "c", "subtotal": 5_000, "withholding_tax_rate": 0, "issue_date": "2025-02-01"},
        {"id": "d", "subtotal": 8_000, "withholding_tax_rate": 3, "wht_received": True,
         "issue_date": "2024-12-31"},
    ]


def test_wht_amount():
    """Subtotal times the rate in percent; missing fields count as zero."""
    assert math.isclose(wht.wht_amount({"subtotal": 10_000, "withholding_tax_rate": 3}), 300.0)
    assert wht.wht_amount({}) == 0.0


def test_withholding_documents_skips_zero_rate(docs):
    assert [d["id"] for d in wht.withholding_documents(docs)] == ["a", "b", "d"]


def test_summary_all(docs):
    """All 2025 WHT documents with received and pending split."""
    s = wht.summarize_withholding(docs, 2025)
    assert [d["id"] for d in s.documents] == ["a", "b"]
    assert math.isclose(s.total_amount, 1_300.0)
    assert math.isclose(s.received_amount, 300.0)
    assert s.received_count == 1
    assert s.pending_count == 1


def test_summary_by_status(docs):
    """Status filters narrow the selection before totalling."""
    received = wht.summarize_withholding(docs, 2025, "received")
    assert math.isclose(received.total_amount, 300.0)
    assert received.pending_count == 0
    pending = wht.summarize_withholding(docs, 2025, "pending")
    assert math.isclose(pending.total_amount, 1_000.0)
    assert pending.received_amount == 0.0
    assert pending.pending_count == 1


def test_summary_unknown_status(docs):
    with pytest.raises(ValueError):
        wht.summarize_withholding(docs, 2025, "lost")


def test_received_credit_by_year(docs):
    """Only received certificates for invoices issued in the year count."""
    assert math.isclose(wht.received_credit(docs, 2025), 300.0)
    assert math.isclose(wht.received_credit(docs, 2024), 240.0)
    assert wht.received_credit(docs, 2023) == 0.0


def test_mark_received_returns_copy(docs):
    """Toggling returns an updated copy and leaves the original alone."""
    original = docs[1]
    updated = wht.mark_received(original, True, date(2025, 7, 1))
    assert updated["wht_received"] is True
    assert updated["wht_received_date"] == date(2025, 7, 1)
    assert original["wht_received"] is False
    cleared = wht.mark_received(updated, False, date(2025, 7, 2))
    assert cleared["wht_received_date"] is None


def test_withholding_rows(docs):
    rows = wht.withholding_rows(docs[:2])
    assert rows[0]["customer_tax_id"] == "-"
    assert rows[0]["certificate"] == "received"
    assert rows[1]["issue_date"] == date(2025, 6, 15)
    assert math.isclose(rows[1]["wht_amount"], 1_000.0)
