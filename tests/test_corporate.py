"""Tests for corporate income tax (SME tiers and the flat 20% rate)."""

import math

from freelance_tax.calculators import corporate


def test_sme_all_tiers():
    """4M profit: 0 on 300k, 15% on 2.7M, 20% on the last 1M."""
    res = corporate.calculate_corporate_tax(5_000_000, 1_000_000, is_sme=True)
    assert res.net_profit == 4_000_000.0
    assert math.isclose(res.tax, 605_000.0)
    assert [row["rate"] for row in res.brackets] == [0, 15, 20]
    assert [row["range"] for row in res.brackets] == ["0 - 300,000", "300,001 - 3,000,000", "> 3,000,000"]
    assert math.isclose(res.brackets[1]["amount"], 405_000.0)
    assert math.isclose(res.brackets[2]["amount"], 200_000.0)


def test_sme_small_profit_lists_zero_tier_only():
    """Profit inside the exempt tier owes nothing and shows one row."""
    res = corporate.calculate_corporate_tax(500_000, 300_000, is_sme=True)
    assert res.tax == 0.0
    assert len(res.brackets) == 1
    assert res.brackets[0]["amount"] == 0.0


def test_sme_middle_tier():
    """1M profit is taxed 15% on the 700k above the exempt tier."""
    res = corporate.calculate_corporate_tax(1_000_000, 0, is_sme=True)
    assert math.isclose(res.tax, 105_000.0)
    assert len(res.brackets) == 2


def test_regular_company_flat_rate():
    """Non-SMEs pay 20% of net profit."""
    res = corporate.calculate_corporate_tax(1_500_000, 500_000, is_sme=False)
    assert math.isclose(res.tax, 200_000.0)
    assert res.brackets == [{"range": "Net profit", "rate": 20, "amount": res.tax}]


def test_loss_is_not_taxed():
    """Expenses above revenue leave zero profit."""
    res = corporate.calculate_corporate_tax(100_000, 400_000, is_sme=False)
    assert res.net_profit == 0.0
    assert res.tax == 0.0
