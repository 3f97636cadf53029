"""Thai personal income tax calculations.

This module implements the personal income tax rules used by the freelancer
tax planner.  Net income is taxed through Thailand's eight-tier progressive
schedule, after the expense deduction (flat 60% capped at 600,000 baht, or the
actual amount) and the personal allowances.  On top of the core resolver it
offers a handful of planning helpers: a comparison of the two expense methods,
a "how close am I to the next bracket" analysis, VAT registration tracking and
a marginal-tax simulator for taking on extra work.

Every function is a pure calculation.  Negative, ``NaN`` or missing amounts are
treated as zero rather than rejected because the UI does not validate before
calling.

Example
-------

>>> compute_tax(300000)
7500.0

>>> result = calculate_personal_tax(PersonalTaxInput(500000, "flat"))
>>> result.expense_amount, result.net_income
(300000.0, 140000.0)

The bracket table is read from ``data/tax_tables.json``; a custom table can be
passed to :func:`compute_tax` as a sequence of :class:`TaxBracket`.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

_DEFAULT_TAX_TABLE_PATH = Path(__file__).resolve().parent.parent / "data" / "tax_tables.json"

# Policy constants (baht)
FLAT_EXPENSE_RATE = 0.60
FLAT_EXPENSE_CAP = 600_000.0
PERSONAL_ALLOWANCE = 60_000.0
SOCIAL_SECURITY_CAP = 9_000.0
LIFE_INSURANCE_CAP = 100_000.0
DONATION_CAP_RATE = 0.10
BRACKET_PROXIMITY = 50_000.0

VAT_THRESHOLD = 1_800_000.0
VAT_WARNING_LEVEL = 1_500_000.0
VAT_DANGER_LEVEL = 1_700_000.0

JOB_ACCEPT_PERCENTAGE = 50.0


def _load_tax_tables(path: Optional[Path] = None) -> Dict[str, Dict]:
    """Load the bracket tables from JSON.

    Parameters
    ----------
    path : Path, optional
        Alternative JSON file.  Defaults to the table shipped with the package.
    """
    p = path or _DEFAULT_TAX_TABLE_PATH
    with open(p, "r", encoding="utf-8") as f:
        return json.load(f)


def _amount(value) -> float:
    """Coerce ``value`` to a non-negative float; anything unusable becomes 0."""
    try:
        v = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(v) or v < 0:
        return 0.0
    return v


@dataclass(frozen=True)
class TaxBracket:
    lower: float
    upper: Optional[float]  # None means no upper bound
    rate: float             # e.g. 0.05 for 5%

    @property
    def width(self) -> float:
        if self.upper is None:
            return float("inf")
        return self.upper - self.lower


def brackets_from_table(rows: Sequence[Mapping]) -> Tuple[TaxBracket, ...]:
    """Build brackets from ``{"start", "end", "rate"}`` rows."""
    brackets = tuple(
        TaxBracket(
            lower=float(r["start"]),
            upper=None if r["end"] is None else float(r["end"]),
            rate=float(r["rate"]),
        )
        for r in rows
    )
    validate_brackets(brackets)
    return brackets


def validate_brackets(brackets: Sequence[TaxBracket]) -> None:
    """Raise ``ValueError`` unless the table is contiguous from 0 to infinity
    with strictly increasing bounds and rates."""
    if not brackets:
        raise ValueError("bracket table is empty")
    if brackets[0].lower != 0:
        raise ValueError("first bracket must start at 0")
    if brackets[-1].upper is not None:
        raise ValueError("last bracket must be unbounded")
    for prev, cur in zip(brackets, brackets[1:]):
        if prev.upper is None or prev.upper != cur.lower:
            raise ValueError(f"brackets are not contiguous at {prev.upper!r}")
        if cur.rate <= prev.rate:
            raise ValueError(f"rates must increase (bracket starting at {cur.lower:,.0f})")
    for b in brackets:
        if b.upper is not None and b.upper <= b.lower:
            raise ValueError(f"empty bracket starting at {b.lower:,.0f}")


PERSONAL_BRACKETS: Tuple[TaxBracket, ...] = brackets_from_table(
    _load_tax_tables()["personal"]["brackets"]
)


class ExpenseMethod(str, Enum):
    """How business expenses are deducted from gross income."""
    FLAT = "flat"
    ACTUAL = "actual"


@dataclass
class Deductions:
    """Itemised allowances claimed on top of the personal allowance."""
    social_security: float = 0.0
    life_insurance: float = 0.0   # life and health insurance combined
    provident_fund: float = 0.0   # provident / retirement funds
    donation: float = 0.0
    other: float = 0.0

    def __post_init__(self):
        for f in fields(self):
            setattr(self, f.name, _amount(getattr(self, f.name)))


@dataclass
class PersonalTaxInput:
    total_income: float
    expense_method: Union[ExpenseMethod, str] = ExpenseMethod.FLAT
    actual_expense: float = 0.0   # only used with ExpenseMethod.ACTUAL
    deductions: Deductions = field(default_factory=Deductions)
    withholding_credit: float = 0.0

    def __post_init__(self):
        self.total_income = _amount(self.total_income)
        self.expense_method = ExpenseMethod(self.expense_method)
        self.actual_expense = _amount(self.actual_expense)
        self.withholding_credit = _amount(self.withholding_credit)
        if self.deductions is None:
            self.deductions = Deductions()
        elif isinstance(self.deductions, Mapping):
            self.deductions = Deductions(**self.deductions)


@dataclass(frozen=True)
class BracketTax:
    bracket: TaxBracket
    taxable_amount: float
    tax: float


@dataclass
class PersonalTaxResult:
    total_income: float
    expense_amount: float
    total_deductions: float
    net_income: float
    tax_before_credit: float
    withholding_credit: float
    tax_payable: float  # negative means a refund
    average_rate: float  # percent of total income
    steps: List[BracketTax]

    @property
    def is_refund(self) -> bool:
        return self.tax_payable < 0


def compute_tax(net_income: float, brackets: Optional[Sequence[TaxBracket]] = None) -> float:
    """Tax due on ``net_income`` under the progressive schedule.

    Income is poured into each bracket up to the bracket's width, so the result
    is continuous at every boundary.
    """
    brackets = PERSONAL_BRACKETS if brackets is None else brackets
    remaining = _amount(net_income)
    tax = 0.0
    for bracket in brackets:
        if remaining <= 0:
            break
        amount = min(remaining, bracket.width)
        tax += amount * bracket.rate
        remaining -= amount
    return tax


def bracket_breakdown(net_income: float, brackets: Optional[Sequence[TaxBracket]] = None) -> List[BracketTax]:
    """Per-bracket slice of ``net_income`` and the tax it contributes.

    One row is returned for every bracket, including empty ones.
    """
    brackets = PERSONAL_BRACKETS if brackets is None else brackets
    remaining = _amount(net_income)
    steps = []
    for bracket in brackets:
        amount = min(max(0.0, remaining), bracket.width)
        steps.append(BracketTax(bracket=bracket, taxable_amount=amount, tax=amount * bracket.rate))
        remaining -= amount
    return steps


def flat_expense(total_income: float) -> float:
    """60% of income, capped at 600,000 baht."""
    return min(_amount(total_income) * FLAT_EXPENSE_RATE, FLAT_EXPENSE_CAP)


def base_deduction_total(deductions: Deductions) -> float:
    """Personal allowance plus the capped itemised deductions, excluding donations.

    Provident fund and "other" are deliberately left uncapped.
    """
    return (
        PERSONAL_ALLOWANCE
        + min(deductions.social_security, SOCIAL_SECURITY_CAP)
        + min(deductions.life_insurance, LIFE_INSURANCE_CAP)
        + deductions.provident_fund
        + deductions.other
    )


def calculate_personal_tax(params: PersonalTaxInput) -> PersonalTaxResult:
    """Resolve net income, tax and tax payable for one taxpayer-year."""
    income = params.total_income
    if params.expense_method is ExpenseMethod.FLAT:
        expense = flat_expense(income)
    else:
        expense = params.actual_expense

    base = base_deduction_total(params.deductions)
    net_before_donation = max(0.0, income - expense - base)
    allowed_donation = min(params.deductions.donation, net_before_donation * DONATION_CAP_RATE)

    total_deductions = base + allowed_donation
    net_income = max(0.0, income - expense - total_deductions)

    tax = compute_tax(net_income)
    avg_rate = tax / income * 100 if income > 0 else 0.0

    return PersonalTaxResult(
        total_income=income,
        expense_amount=expense,
        total_deductions=total_deductions,
        net_income=net_income,
        tax_before_credit=tax,
        withholding_credit=params.withholding_credit,
        tax_payable=tax - params.withholding_credit,
        average_rate=avg_rate,
        steps=bracket_breakdown(net_income),
    )


@dataclass
class ExpenseComparison:
    flat_expense: float
    actual_expense: float
    net_income_flat: float
    net_income_actual: float
    flat_tax: float
    actual_tax: float
    recommended_method: ExpenseMethod
    savings: float
    break_even_expense: float
    break_even_percentage: float


def compare_expense_methods(gross_income: float, actual_expense: float,
                            other_deductions: float) -> ExpenseComparison:
    """Tax under the flat and actual expense methods, with a recommendation.

    ``other_deductions`` is the full non-expense deduction total (allowance
    included) and is applied identically to both scenarios.  Ties go to the
    flat method, which needs no receipts.
    """
    income = _amount(gross_income)
    actual = _amount(actual_expense)
    deductions = _amount(other_deductions)
    flat = flat_expense(income)

    net_flat = max(0.0, income - flat - deductions)
    net_actual = max(0.0, income - actual - deductions)
    tax_flat = compute_tax(net_flat)
    tax_actual = compute_tax(net_actual)

    method = ExpenseMethod.FLAT if tax_flat <= tax_actual else ExpenseMethod.ACTUAL
    return ExpenseComparison(
        flat_expense=flat,
        actual_expense=actual,
        net_income_flat=net_flat,
        net_income_actual=net_actual,
        flat_tax=tax_flat,
        actual_tax=tax_actual,
        recommended_method=method,
        savings=abs(tax_flat - tax_actual),
        break_even_expense=flat,
        break_even_percentage=flat / income * 100 if income > 0 else 0.0,
    )


@dataclass
class BracketAnalysis:
    current_bracket: TaxBracket
    next_bracket: Optional[TaxBracket]
    income_to_next: Optional[float]
    is_near_boundary: bool


def analyze_tax_bracket(net_income: float,
                        brackets: Optional[Sequence[TaxBracket]] = None) -> BracketAnalysis:
    """Locate the bracket holding ``net_income`` and how far the next one is.

    Brackets are matched as closed intervals in ascending order, so an income
    sitting exactly on a boundary belongs to the lower bracket.
    """
    brackets = list(PERSONAL_BRACKETS if brackets is None else brackets)
    if not brackets:
        raise ValueError("Bracket table is empty")
    income = _amount(net_income)

    index = len(brackets) - 1
    for i, b in enumerate(brackets):
        if b.lower <= income and (b.upper is None or income <= b.upper):
            index = i
            break

    current = brackets[index]
    nxt = brackets[index + 1] if index + 1 < len(brackets) else None
    to_next = nxt.lower - income if nxt is not None else None
    near = to_next is not None and 0 < to_next < BRACKET_PROXIMITY
    return BracketAnalysis(current_bracket=current, next_bracket=nxt,
                           income_to_next=to_next, is_near_boundary=near)


@dataclass
class VatInfo:
    threshold: float
    yearly_income: float
    remaining_to_threshold: float
    percent_of_threshold: float
    status: str  # "normal", "warning" or "danger"


def calculate_vat_info(yearly_income: float) -> VatInfo:
    """Progress toward the 1.8M baht VAT registration threshold."""
    income = _amount(yearly_income)
    if income >= VAT_DANGER_LEVEL:
        status = "danger"
    elif income >= VAT_WARNING_LEVEL:
        status = "warning"
    else:
        status = "normal"
    return VatInfo(
        threshold=VAT_THRESHOLD,
        yearly_income=income,
        remaining_to_threshold=max(0.0, VAT_THRESHOLD - income),
        percent_of_threshold=min(100.0, income / VAT_THRESHOLD * 100),
        status=status,
    )


@dataclass
class JobImpact:
    current_tax: float
    new_net_income: float
    new_tax: float
    additional_tax: float
    net_gain: float
    net_gain_percentage: float
    should_accept: bool


def simulate_job_impact(current_income: float, current_deductions: float,
                        additional_income: float) -> JobImpact:
    """Marginal tax and take-home share of accepting ``additional_income``.

    Both scenarios use the flat expense method; the expense is recomputed for
    the larger income while ``current_deductions`` stays fixed.
    """
    income = _amount(current_income)
    deductions = _amount(current_deductions)
    extra = _amount(additional_income)

    current_net = max(0.0, income - flat_expense(income) - deductions)
    current_tax = compute_tax(current_net)

    new_income = income + extra
    new_net = max(0.0, new_income - flat_expense(new_income) - deductions)
    new_tax = compute_tax(new_net)

    additional_tax = new_tax - current_tax
    net_gain = extra - additional_tax
    pct = net_gain / extra * 100 if extra > 0 else 0.0
    return JobImpact(
        current_tax=current_tax,
        new_net_income=new_net,
        new_tax=new_tax,
        additional_tax=additional_tax,
        net_gain=net_gain,
        net_gain_percentage=pct,
        should_accept=pct > JOB_ACCEPT_PERCENTAGE,
    )


__all__ = [
    "TaxBracket",
    "PERSONAL_BRACKETS",
    "ExpenseMethod",
    "Deductions",
    "PersonalTaxInput",
    "PersonalTaxResult",
    "BracketTax",
    "ExpenseComparison",
    "BracketAnalysis",
    "VatInfo",
    "JobImpact",
    "compute_tax",
    "bracket_breakdown",
    "flat_expense",
    "base_deduction_total",
    "calculate_personal_tax",
    "compare_expense_methods",
    "analyze_tax_bracket",
    "calculate_vat_info",
    "simulate_job_impact",
    "brackets_from_table",
    "validate_brackets",
]
