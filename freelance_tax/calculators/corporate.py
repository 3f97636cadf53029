"""Corporate income tax for company accounts.

SMEs (paid-up capital and revenue under the Revenue Department limits) pay a
tiered rate on net profit: nothing on the first 300,000 baht, 15% up to
3,000,000 and 20% above that.  Other companies pay a flat 20%.

Example
-------

>>> round(calculate_corporate_tax(5_000_000, 1_000_000, is_sme=True).tax, 2)
605000.0
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .taxes import _amount, _load_tax_tables, brackets_from_table


@dataclass
class CorporateTaxResult:
    total_revenue: float
    total_expenses: float
    net_profit: float
    tax: float
    brackets: List[Dict] = field(default_factory=list)


def _range_label(lower: float, upper: Optional[float]) -> str:
    if upper is None:
        return f"> {lower:,.0f}"
    start = 0 if lower == 0 else lower + 1
    return f"{start:,.0f} - {upper:,.0f}"


def calculate_corporate_tax(total_revenue: float, total_expenses: float, is_sme: bool,
                            tax_tables: Optional[Dict[str, Dict]] = None) -> CorporateTaxResult:
    """Compute corporate income tax on ``revenue - expenses``.

    ``brackets`` lists ``{"range", "rate", "amount"}`` rows with the rate in
    percent.  For SMEs the 0% tier is always listed; higher tiers only when
    profit reaches them.
    """
    tables = tax_tables or _load_tax_tables()
    corporate = tables["corporate"]

    revenue = _amount(total_revenue)
    expenses = _amount(total_expenses)
    net_profit = max(0.0, revenue - expenses)

    tax = 0.0
    rows = []
    if is_sme:
        for bracket in brackets_from_table(corporate["sme"]):
            amount = min(max(0.0, net_profit - bracket.lower), bracket.width)
            tier_tax = amount * bracket.rate
            if bracket.rate == 0 or amount > 0:
                rows.append({
                    "range": _range_label(bracket.lower, bracket.upper),
                    "rate": round(bracket.rate * 100),
                    "amount": tier_tax,
                })
            tax += tier_tax
    else:
        rate = float(corporate["standard_rate"])
        tax = net_profit * rate
        rows.append({"range": "Net profit", "rate": round(rate * 100), "amount": tax})

    return CorporateTaxResult(
        total_revenue=revenue,
        total_expenses=expenses,
        net_profit=net_profit,
        tax=tax,
        brackets=rows,
    )


__all__ = ["CorporateTaxResult", "calculate_corporate_tax"]
