"""Tests for the PND 90/94 filing assistant."""

import math

import pytest

from freelance_tax.calculators import filing


def test_to_deductions_groups_fields():
    """Insurance and funds are pooled; double donations count twice."""
    fd = filing.FilingDeductions(
        social_security=9_000, life_insurance=20_000, health_insurance=15_000,
        provident_fund=10_000, rmf=5_000, ssf=5_000,
        donation=1_000, donation_double=500, home_interest=20_000, other=1_000,
    )
    d = fd.to_deductions()
    assert d.social_security == 9_000
    assert d.life_insurance == 35_000
    assert d.provident_fund == 20_000
    assert d.donation == 2_000
    assert d.other == 21_000


def test_claimed_total_includes_allowance():
    fd = filing.FilingDeductions(social_security=9_000, rmf=1_000)
    assert fd.claimed_total() == 70_000


def test_prepare_filing_uses_flat_method():
    """1M income: 600k expenses, 69k allowances, 331k net, 10,600 tax."""
    result = filing.prepare_filing(1_000_000, filing.FilingDeductions(social_security=9_000), 5_000)
    assert result.expense_amount == 600_000
    assert math.isclose(result.net_income, 331_000)
    assert math.isclose(result.tax_before_credit, 10_600)
    assert math.isclose(result.tax_payable, 5_600)


def test_summary_rows():
    result = filing.prepare_filing(1_000_000, filing.FilingDeductions(social_security=9_000), 5_000)
    rows = filing.filing_summary_rows(result, "pnd94")
    assert len(rows) == 8
    assert rows[0] == ("Form", "PND 94 (half-year income)")
    assert rows[-1][1] == result.tax_payable


def test_summary_rows_unknown_form():
    result = filing.prepare_filing(0, filing.FilingDeductions())
    with pytest.raises(ValueError):
        filing.filing_summary_rows(result, "pnd91")


def test_summary_rows_with_claimed_allowances():
    """The claimed row sits under line 3 and shows the uncapped sum."""
    fd = filing.FilingDeductions(social_security=20_000)
    result = filing.prepare_filing(1_000_000, fd)
    rows = filing.filing_summary_rows(result, claimed=fd.claimed_total())
    assert len(rows) == 9
    assert rows[3] == ("3. Less allowances", 69_000)
    assert rows[4] == ("3a. Allowances claimed (before caps)", 80_000)
