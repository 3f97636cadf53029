"""Unit tests for the bracket calculator and the personal tax resolver.

Expected values are worked out by hand from the eight-tier schedule
(0/5/10/15/20/25/30/35%) and the allowance caps.
"""

import math

import pytest

from freelance_tax.calculators import taxes as tax_calc
from freelance_tax.calculators.taxes import (
    Deductions,
    ExpenseMethod,
    PersonalTaxInput,
    TaxBracket,
)


@pytest.mark.parametrize(
    "net_income, expected",
    [
        (0, 0.0),
        (150_000, 0.0),
        (300_000, 7_500.0),
        (500_000, 27_500.0),
        (750_000, 65_000.0),
        (1_000_000, 115_000.0),
        (2_000_000, 365_000.0),
        (5_000_000, 1_265_000.0),
        (6_000_000, 1_615_000.0),
    ],
)
def test_compute_tax_table(net_income, expected):
    """Tax at each bracket boundary and above the top threshold."""
    assert math.isclose(tax_calc.compute_tax(net_income), expected, abs_tol=1e-6)


def test_compute_tax_first_taxed_baht():
    """One baht over 150,000 is taxed at 5%."""
    assert math.isclose(tax_calc.compute_tax(150_001), 0.05, rel_tol=1e-6)


@pytest.mark.parametrize("bad", [-1, -1_000_000, float("nan"), None])
def test_compute_tax_invalid_is_zero(bad):
    """Negative or unusable income is treated as zero."""
    assert tax_calc.compute_tax(bad) == 0.0


def test_compute_tax_monotonic_and_continuous():
    """Tax never decreases with income and has no jumps at the boundaries."""
    prev = 0.0
    for income in range(0, 7_000_001, 25_000):
        tax = tax_calc.compute_tax(income)
        assert tax >= prev
        prev = tax
    for b in tax_calc.PERSONAL_BRACKETS[:-1]:
        below = tax_calc.compute_tax(b.upper)
        above = tax_calc.compute_tax(b.upper + 0.01)
        assert 0 <= above - below < 0.01


def test_default_table_matches_schedule():
    """The shipped table has eight contiguous brackets ending unbounded at 35%."""
    brackets = tax_calc.PERSONAL_BRACKETS
    assert len(brackets) == 8
    assert brackets[0] == TaxBracket(0.0, 150_000.0, 0.0)
    assert brackets[-1] == TaxBracket(5_000_000.0, None, 0.35)


@pytest.mark.parametrize(
    "table",
    [
        [TaxBracket(0, 100, 0.0), TaxBracket(150, None, 0.1)],
        [TaxBracket(0, 100, 0.1), TaxBracket(100, None, 0.1)],
        [TaxBracket(0, 100, 0.0), TaxBracket(100, 200, 0.1)],
        [],
    ],
)
def test_validate_brackets_rejects_bad_tables(table):
    """Gaps, flat rates, a bounded top bracket or an empty table are rejected."""
    with pytest.raises(ValueError):
        tax_calc.validate_brackets(table)


def test_flat_expense_capped():
    """Flat expenses never exceed 600,000 however large the income."""
    result = tax_calc.calculate_personal_tax(PersonalTaxInput(10_000_000, ExpenseMethod.FLAT))
    assert result.expense_amount == 600_000.0


def test_actual_expense_used_verbatim():
    """The actual method takes the supplied figure without caps; net is clamped at zero."""
    result = tax_calc.calculate_personal_tax(
        PersonalTaxInput(500_000, "actual", actual_expense=700_000)
    )
    assert result.expense_amount == 700_000.0
    assert result.net_income == 0.0
    assert result.tax_before_credit == 0.0


def test_donation_capped_at_ten_percent():
    """Pre-donation net income of 100,000 allows at most 10,000 of donations."""
    # 400,000 - 240,000 flat expense - 60,000 allowance = 100,000
    params = PersonalTaxInput(400_000, "flat", deductions=Deductions(donation=50_000))
    result = tax_calc.calculate_personal_tax(params)
    assert math.isclose(result.total_deductions, 70_000.0)
    assert math.isclose(result.net_income, 90_000.0)


def test_refund_when_credit_exceeds_tax():
    """Withholding credit above the tax yields a negative (refund) payable."""
    params = PersonalTaxInput(200_000, "flat", withholding_credit=10_000)
    result = tax_calc.calculate_personal_tax(params)
    assert result.tax_before_credit == 0.0
    assert result.tax_payable == -10_000.0
    assert result.is_refund


def test_full_calculation():
    """Caps on social security and insurance, uncapped funds, donation cap."""
    params = PersonalTaxInput(
        total_income=1_200_000,
        expense_method="flat",
        deductions=Deductions(
            social_security=12_000,
            life_insurance=150_000,
            provident_fund=50_000,
            donation=100_000,
            other=10_000,
        ),
        withholding_credit=12_000,
    )
    result = tax_calc.calculate_personal_tax(params)
    # base 60k + 9k + 100k + 50k + 10k = 229k; pre-donation 371k; donation 37.1k
    assert math.isclose(result.expense_amount, 600_000.0)
    assert math.isclose(result.total_deductions, 266_100.0)
    assert math.isclose(result.net_income, 333_900.0)
    assert math.isclose(result.tax_before_credit, 10_890.0)
    assert math.isclose(result.tax_payable, -1_110.0)
    assert math.isclose(result.average_rate, 0.9075, rel_tol=1e-6)


def test_breakdown_sums_to_tax():
    """Every bracket gets a row and the rows add up to the total tax."""
    result = tax_calc.calculate_personal_tax(PersonalTaxInput(3_000_000, "flat"))
    assert len(result.steps) == len(tax_calc.PERSONAL_BRACKETS)
    assert math.isclose(sum(s.tax for s in result.steps), result.tax_before_credit)
    assert math.isclose(sum(s.taxable_amount for s in result.steps), result.net_income)
    assert result.steps[-1].tax == 0.0


def test_zero_income():
    """Zero income gives zero tax and no division by zero."""
    result = tax_calc.calculate_personal_tax(PersonalTaxInput(0, "flat"))
    assert result.net_income == 0.0
    assert result.tax_before_credit == 0.0
    assert result.average_rate == 0.0


def test_inputs_clamped_at_boundary():
    """Negative and NaN fields become zero when the input is built."""
    params = PersonalTaxInput(
        float("nan"), "flat",
        deductions={"social_security": -5, "donation": float("nan")},
        withholding_credit=-100,
    )
    assert params.total_income == 0.0
    assert params.withholding_credit == 0.0
    assert params.deductions.social_security == 0.0
    assert params.deductions.donation == 0.0


def test_unknown_expense_method():
    """Only the flat and actual methods exist."""
    with pytest.raises(ValueError):
        PersonalTaxInput(100_000, "itemised")


def test_base_deduction_total():
    """Allowance plus capped social security and insurance, uncapped funds and other."""
    d = Deductions(social_security=20_000, life_insurance=200_000, provident_fund=300_000, other=5_000)
    assert tax_calc.base_deduction_total(d) == 60_000 + 9_000 + 100_000 + 300_000 + 5_000


def test_explicit_empty_table_is_not_replaced():
    """An empty table taxes nothing rather than falling back to the default."""
    assert tax_calc.compute_tax(1_000_000, []) == 0.0
    assert tax_calc.bracket_breakdown(1_000_000, []) == []
    with pytest.raises(ValueError):
        tax_calc.analyze_tax_bracket(100_000, [])


def test_custom_table_is_used():
    table = [TaxBracket(0, 100_000, 0.0), TaxBracket(100_000, None, 0.5)]
    assert tax_calc.compute_tax(300_000, table) == 100_000.0
    assert "_load_tax_tables" not in tax_calc.__all__
