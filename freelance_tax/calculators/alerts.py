"""Proactive alerts for the notification bell.

Alerts are generated from invoice due dates, the VAT registration threshold and
tax bracket proximity.  Each alert carries a ``trigger_key`` that is unique per
event (e.g. ``inv_42_due_3``); callers pass the keys they have already stored
so the same alert is never raised twice.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional

from .reports import PENDING_STATUSES, as_date
from .taxes import (
    VAT_DANGER_LEVEL,
    VAT_THRESHOLD,
    Deductions,
    ExpenseMethod,
    PersonalTaxInput,
    analyze_tax_bracket,
    calculate_personal_tax,
)

logger = logging.getLogger(__name__)

# Social security is assumed at the annual maximum when estimating the bracket.
ASSUMED_SOCIAL_SECURITY = 9_000.0


@dataclass
class Alert:
    title: str
    message: str
    level: str  # "info", "warning", "error" or "success"
    trigger_key: str
    related_doc_id: Optional[str] = None
    related_doc_no: Optional[str] = None


def _invoice_alert(inv: Dict, today: date) -> Optional[Alert]:
    due = as_date(inv.get("due_date"))
    if due is None:
        return None
    days = (due - today).days
    doc_id = inv.get("id")
    doc_no = inv.get("document_no", "")

    if days < 0:
        return Alert(
            title="Invoice overdue",
            message=f"Invoice {doc_no} is {abs(days)} day(s) past due",
            level="error",
            trigger_key=f"inv_{doc_id}_overdue",
            related_doc_id=doc_id,
            related_doc_no=doc_no,
        )
    if days == 1:
        return Alert(
            title="Invoice due tomorrow",
            message=f"Invoice {doc_no} is due tomorrow",
            level="warning",
            trigger_key=f"inv_{doc_id}_due_1",
            related_doc_id=doc_id,
            related_doc_no=doc_no,
        )
    if days == 3:
        return Alert(
            title="Invoice due in 3 days",
            message=f"Invoice {doc_no} is due in 3 days",
            level="info",
            trigger_key=f"inv_{doc_id}_due_3",
            related_doc_id=doc_id,
            related_doc_no=doc_no,
        )
    return None


def _vat_alert(yearly_income: float, year: int) -> Optional[Alert]:
    if yearly_income >= VAT_THRESHOLD:
        return Alert(
            title="Income has passed 1.8M baht",
            message="You must register for VAT within 30 days",
            level="error",
            trigger_key=f"vat_{year}_exceeded",
        )
    if yearly_income >= VAT_DANGER_LEVEL:
        return Alert(
            title="Approaching the VAT threshold",
            message=f"Income this year is {yearly_income / 1_000_000:.2f}M baht, close to 1.8M",
            level="warning",
            trigger_key=f"vat_{year}_warning_1.7m",
        )
    return None


def _bracket_alert(yearly_income: float, year: int) -> Optional[Alert]:
    result = calculate_personal_tax(PersonalTaxInput(
        total_income=yearly_income,
        expense_method=ExpenseMethod.FLAT,
        deductions=Deductions(social_security=ASSUMED_SOCIAL_SECURITY),
    ))
    analysis = analyze_tax_bracket(result.net_income)
    if not analysis.is_near_boundary:
        return None
    current_pct = round(analysis.current_bracket.rate * 100)
    next_pct = round(analysis.next_bracket.rate * 100)
    return Alert(
        title="Close to the next tax bracket",
        message=f"Another {analysis.income_to_next:,.0f} baht of net income moves you into the {next_pct}% bracket",
        level="info",
        trigger_key=f"tax_{year}_bracket_warn_{current_pct}",
    )


def generate_alerts(invoices: Iterable[Dict], yearly_income: float, today: date,
                    existing_keys: Iterable[str] = ()) -> List[Alert]:
    """Build the alerts that should be raised today and are not yet stored."""
    seen = set(existing_keys)
    candidates = []

    for inv in invoices:
        if inv.get("status") not in PENDING_STATUSES:
            continue
        candidates.append(_invoice_alert(inv, today))

    candidates.append(_vat_alert(yearly_income, today.year))
    candidates.append(_bracket_alert(yearly_income, today.year))

    alerts = []
    for alert in candidates:
        if alert is None or alert.trigger_key in seen:
            continue
        seen.add(alert.trigger_key)
        alerts.append(alert)
    logger.debug("generated %d alert(s): %s", len(alerts), [a.trigger_key for a in alerts])
    return alerts


__all__ = ["Alert", "generate_alerts"]
