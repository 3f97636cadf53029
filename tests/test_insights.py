from freelance_tax.calculators.taxes import (
    PersonalTaxInput,
    analyze_tax_bracket,
    calculate_personal_tax,
    calculate_vat_info,
    compare_expense_methods,
)
from freelance_tax.components.insights import generate_tax_insight


def _insight(income, actual_expense=0.0, credit=0.0):
    result = calculate_personal_tax(PersonalTaxInput(income, "flat", withholding_credit=credit))
    comparison = compare_expense_methods(income, actual_expense, 60_000)
    return generate_tax_insight(
        result, comparison, analyze_tax_bracket(result.net_income), calculate_vat_info(income)
    ).lower()


def test_insights_rule_based(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    text = _insight(200_000, credit=10_000)
    assert "refund" in text

    text_owed = _insight(1_000_000, actual_expense=900_000)
    assert "still owe" in text_owed
    assert "actual expense method saves" in text_owed


def test_insights_vat_and_bracket(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    assert "vat" in _insight(1_750_000)
    assert "away from the 5% bracket" in _insight(500_000)
