"""Dashboard aggregation over transactions and sales documents.

Records are plain dicts as returned by the document store.  Transactions carry
``date``, ``type`` (``"income"`` or ``"expense"``) and ``amount``.  Documents
carry ``type`` (``"invoice"``, ``"receipt"``, ...), ``status``, ``issue_date``,
``due_date``, ``grand_total`` and optionally ``created_at``,
``withholding_tax_rate`` and ``wht_received``.

``today`` is always passed in explicitly so results are reproducible.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd

from .taxes import _amount

logger = logging.getLogger(__name__)

DATE_RANGES = ("this_month", "3_months", "6_months", "year", "all")
PENDING_STATUSES = ("sent", "overdue")
DUE_SOON_DAYS = 7
RECENT_LIMIT = 5


def as_date(value) -> Optional[date]:
    """Normalise a date, datetime, pandas timestamp or ISO string to a ``date``.

    Missing or unparseable values give ``None``.
    """
    if value is None or value is pd.NaT or isinstance(value, (list, dict)):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    ts = pd.to_datetime(value, errors="coerce")
    if pd.isna(ts):
        logger.debug("unparseable date %r", value)
        return None
    return ts.date()


def range_start(range_name: str, today: date) -> Optional[date]:
    """First day covered by a dashboard range, or ``None`` for ``"all"``."""
    if range_name not in DATE_RANGES:
        raise ValueError(f"Unknown date range {range_name!r}; expected one of {DATE_RANGES}")
    month = pd.Timestamp(today).to_period("M")
    if range_name == "this_month":
        return month.start_time.date()
    if range_name == "3_months":
        return (month - 2).start_time.date()
    if range_name == "6_months":
        return (month - 5).start_time.date()
    if range_name == "year":
        return date(today.year, 1, 1)
    return None


def summarize_transactions(transactions: Iterable[Dict], start: Optional[date] = None) -> Tuple[float, float]:
    """Return ``(income, expense)`` totals for transactions dated on/after ``start``."""
    df = pd.DataFrame(list(transactions), columns=["date", "type", "amount"])
    if df.empty:
        return 0.0, 0.0
    df["date"] = pd.to_datetime(df["date"].map(as_date))
    df["amount"] = pd.to_numeric(df["amount"], errors="coerce").fillna(0.0)
    if start is not None:
        df = df[df["date"] >= pd.Timestamp(start)]
    totals = df.groupby("type")["amount"].sum()
    return float(totals.get("income", 0.0)), float(totals.get("expense", 0.0))


@dataclass
class DashboardSummary:
    income: float
    expense: float
    profit: float
    pending_income: float
    pending_invoices: List[Dict] = field(default_factory=list)
    overdue_invoices: List[Dict] = field(default_factory=list)
    due_soon_invoices: List[Dict] = field(default_factory=list)
    pending_wht: int = 0
    recent_documents: List[Dict] = field(default_factory=list)


def _is_invoice(doc: Dict) -> bool:
    return doc.get("type") == "invoice"


def _created(doc: Dict) -> date:
    return as_date(doc.get("created_at")) or as_date(doc.get("issue_date")) or date.min


def dashboard_summary(transactions: Iterable[Dict], documents: Iterable[Dict],
                      range_name: str, today: date) -> DashboardSummary:
    """Totals and to-do lists shown on the dashboard."""
    documents = list(documents)
    income, expense = summarize_transactions(transactions, range_start(range_name, today))

    pending = sorted(
        (d for d in documents if _is_invoice(d) and d.get("status") in PENDING_STATUSES),
        key=lambda d: as_date(d.get("due_date")) or date.max,
    )
    next_week = today + timedelta(days=DUE_SOON_DAYS)
    overdue = [d for d in pending if as_date(d.get("due_date")) and as_date(d["due_date"]) < today]
    due_soon = [d for d in pending
                if as_date(d.get("due_date")) and today <= as_date(d["due_date"]) <= next_week]

    pending_wht = sum(
        1 for d in documents
        if _is_invoice(d) and _amount(d.get("withholding_tax_rate")) > 0 and not d.get("wht_received")
    )
    recent = sorted(documents, key=_created, reverse=True)[:RECENT_LIMIT]

    logger.debug("dashboard %s: %d pending, %d overdue, %d due soon",
                 range_name, len(pending), len(overdue), len(due_soon))
    return DashboardSummary(
        income=income,
        expense=expense,
        profit=income - expense,
        pending_income=sum(_amount(d.get("grand_total")) for d in pending),
        pending_invoices=pending,
        overdue_invoices=overdue,
        due_soon_invoices=due_soon,
        pending_wht=pending_wht,
        recent_documents=recent,
    )


__all__ = [
    "DATE_RANGES",
    "DashboardSummary",
    "as_date",
    "range_start",
    "summarize_transactions",
    "dashboard_summary",
]
