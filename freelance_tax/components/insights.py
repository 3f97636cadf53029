import os
from typing import Optional

from ..calculators.taxes import (
    BracketAnalysis,
    ExpenseComparison,
    ExpenseMethod,
    PersonalTaxResult,
    VatInfo,
)


def _openai_insight(prompt: str) -> Optional[str]:
    """Attempt to query OpenAI for an insight. Returns None on failure."""
    if not os.environ.get("OPENAI_API_KEY"):
        return None
    try:
        from openai import OpenAI  # type: ignore
        client = OpenAI()
        resp = client.responses.create(model="gpt-4o-mini", input=prompt)
        # Access unified text output helper
        text = getattr(resp, "output_text", None)
        if text:
            return text.strip()
    except Exception:
        return None
    return None


def generate_tax_insight(result: PersonalTaxResult,
                         comparison: ExpenseComparison,
                         bracket: BracketAnalysis,
                         vat: VatInfo) -> str:
    """Return a short insight about the taxpayer's position.

    Uses OpenAI when an API key is configured; otherwise builds a rule-based
    message so the app works offline and in tests.
    """
    prompt = (
        "You are a Thai freelance tax assistant. Give one or two sentences of "
        "practical advice in plain English. "
        f"Income: {result.total_income:,.0f} baht. Net taxable income: {result.net_income:,.0f}. "
        f"Tax: {result.tax_before_credit:,.0f}, payable after withholding: {result.tax_payable:,.0f}. "
        f"Flat-expense tax {comparison.flat_tax:,.0f} vs actual {comparison.actual_tax:,.0f}. "
        f"VAT threshold progress: {vat.percent_of_threshold:.0f}%."
    )
    text = _openai_insight(prompt)
    if text:
        return text

    # Fallback heuristic
    parts = []
    if result.tax_payable < 0:
        parts.append(f"You are due a refund of ฿{-result.tax_payable:,.0f}.")
    elif result.tax_payable > 0:
        parts.append(f"You still owe ฿{result.tax_payable:,.0f} after withholding credits.")
    else:
        parts.append("Your withholding credits cover your tax exactly.")

    if comparison.savings > 0:
        better = "flat 60%" if comparison.recommended_method is ExpenseMethod.FLAT else "actual"
        parts.append(f"The {better} expense method saves ฿{comparison.savings:,.0f}.")

    if bracket.is_near_boundary and bracket.next_bracket is not None:
        parts.append(
            f"You are ฿{bracket.income_to_next:,.0f} away from the "
            f"{bracket.next_bracket.rate * 100:g}% bracket."
        )

    if vat.status == "danger":
        parts.append("Income is at or near the 1.8M VAT threshold; prepare to register.")
    elif vat.status == "warning":
        parts.append("Keep an eye on VAT: income is above 1.5M baht.")
    return " ".join(parts)
