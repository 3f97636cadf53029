"""Tests for sales document totals and running numbers."""

import math

import pytest

from freelance_tax.calculators import documents


def test_totals_default_vat():
    """Subtotal 1,500; 7% VAT 105; grand total 1,605."""
    items = [{"amount": 1_000}, {"quantity": 2, "price": 250}]
    t = documents.document_totals(items)
    assert t.subtotal == 1_500
    assert math.isclose(t.vat_amount, 105)
    assert math.isclose(t.grand_total, 1_605)
    assert t.wht_amount == 0
    assert math.isclose(t.net_total, 1_605)


def test_withholding_taken_from_subtotal():
    t = documents.document_totals([{"amount": 10_000}], vat_rate=7, wht_rate=3)
    assert math.isclose(t.wht_amount, 300)
    assert math.isclose(t.net_total, 10_400)


def test_no_vat_and_bad_items():
    t = documents.document_totals([{"amount": -50}, {"amount": "x"}, {"amount": 200}], vat_rate=0)
    assert t.subtotal == 200
    assert t.grand_total == 200
    assert documents.document_totals([]).grand_total == 0


def test_with_totals_fills_missing_fields():
    doc = {"type": "invoice", "items": [{"amount": 1_000}], "withholding_tax_rate": 3}
    filled = documents.with_totals(doc)
    assert filled["subtotal"] == 1_000
    assert math.isclose(filled["grand_total"], 1_070)
    assert "subtotal" not in doc
    assert documents.with_totals({"type": "invoice", "grand_total": 5}) == {"type": "invoice", "grand_total": 5}


@pytest.mark.parametrize(
    "doc_type, existing, expected",
    [
        ("invoice", [], "INV-2025-001"),
        ("invoice", ["INV-2025-001", "INV-2025-009", "INV-2024-050"], "INV-2025-010"),
        ("quotation", ["INV-2025-004", "QT-2025-002"], "QT-2025-003"),
        ("tax_receipt", ["TR-2025-999"], "TR-2025-1000"),
        ("memo", ["junk", None, "DOC-2025-x"], "DOC-2025-001"),
    ],
)
def test_next_document_no(doc_type, existing, expected):
    assert documents.next_document_no(doc_type, 2025, existing) == expected
