"""Filing assistant for the PND 90 / PND 94 personal income tax returns.

The filing form collects allowances line by line; the tax engine works on a
handful of grouped buckets.  :class:`FilingDeductions` holds the form fields
and folds them into :class:`~freelance_tax.calculators.taxes.Deductions`.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import List, Optional, Tuple

from .taxes import (
    PERSONAL_ALLOWANCE,
    Deductions,
    ExpenseMethod,
    PersonalTaxInput,
    PersonalTaxResult,
    _amount,
    calculate_personal_tax,
)

FORM_TYPES = {
    "pnd90": "PND 90 (full-year income)",
    "pnd94": "PND 94 (half-year income)",
}


@dataclass
class FilingDeductions:
    social_security: float = 0.0
    life_insurance: float = 0.0
    health_insurance: float = 0.0
    provident_fund: float = 0.0
    rmf: float = 0.0
    ssf: float = 0.0
    donation: float = 0.0
    donation_double: float = 0.0  # education/hospital donations counted twice
    home_interest: float = 0.0
    other: float = 0.0

    def __post_init__(self):
        for f in fields(self):
            setattr(self, f.name, _amount(getattr(self, f.name)))

    def to_deductions(self) -> Deductions:
        return Deductions(
            social_security=self.social_security,
            life_insurance=self.life_insurance + self.health_insurance,
            provident_fund=self.provident_fund + self.rmf + self.ssf,
            donation=self.donation + self.donation_double * 2,
            other=self.home_interest + self.other,
        )

    def claimed_total(self) -> float:
        """Sum of every field as entered, plus the personal allowance (before caps)."""
        return PERSONAL_ALLOWANCE + sum(getattr(self, f.name) for f in fields(self))


def prepare_filing(total_income: float, deductions: FilingDeductions,
                   withholding_credit: float = 0.0) -> PersonalTaxResult:
    """Run the resolver the way the assistant does: flat 60% expenses."""
    return calculate_personal_tax(PersonalTaxInput(
        total_income=total_income,
        expense_method=ExpenseMethod.FLAT,
        deductions=deductions.to_deductions(),
        withholding_credit=withholding_credit,
    ))


def filing_summary_rows(result: PersonalTaxResult, form_type: str = "pnd90",
                        claimed: Optional[float] = None) -> List[Tuple[str, object]]:
    """Ordered ``(label, value)`` rows mirroring the return's summary section.

    When ``claimed`` (see :meth:`FilingDeductions.claimed_total`) is given, an
    extra row shows the allowances as entered next to the capped figure.
    """
    if form_type not in FORM_TYPES:
        raise ValueError(f"Unknown form type {form_type!r}; expected one of {tuple(FORM_TYPES)}")
    rows = [
        ("Form", FORM_TYPES[form_type]),
        ("1. Assessable income", result.total_income),
        ("2. Less expenses", result.expense_amount),
        ("3. Less allowances", result.total_deductions),
        ("4. Net income", result.net_income),
        ("5. Tax computed", result.tax_before_credit),
        ("6. Less withholding tax", result.withholding_credit),
        ("Tax to pay (refund if negative)", result.tax_payable),
    ]
    if claimed is not None:
        rows.insert(4, ("3a. Allowances claimed (before caps)", claimed))
    return rows


__all__ = ["FORM_TYPES", "FilingDeductions", "prepare_filing", "filing_summary_rows"]
