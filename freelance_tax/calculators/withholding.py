"""Withholding tax (WHT) tracking for freelancer invoices.

Clients paying a freelancer withhold 1-5% of the pre-VAT subtotal and issue a
withholding certificate (50 Tawi).  The withheld amounts are a credit against
the freelancer's annual personal income tax, so the app tracks which
certificates have arrived.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional

from .reports import as_date
from .taxes import _amount

WHT_STATUSES = ("all", "received", "pending")


def wht_amount(doc: Dict) -> float:
    """Withheld amount on one document: ``subtotal * rate / 100``."""
    return _amount(doc.get("subtotal")) * _amount(doc.get("withholding_tax_rate")) / 100


def withholding_documents(docs: Iterable[Dict]) -> List[Dict]:
    """Documents that carry a positive withholding rate."""
    return [d for d in docs if _amount(d.get("withholding_tax_rate")) > 0]


def _issued_in(doc: Dict, year: int) -> bool:
    issued = as_date(doc.get("issue_date"))
    return issued is not None and issued.year == year


@dataclass
class WhtSummary:
    documents: List[Dict] = field(default_factory=list)
    total_amount: float = 0.0
    received_amount: float = 0.0
    received_count: int = 0
    pending_count: int = 0


def summarize_withholding(docs: Iterable[Dict], year: int, status: str = "all") -> WhtSummary:
    """Filter WHT documents by issue year and certificate status and total them."""
    if status not in WHT_STATUSES:
        raise ValueError(f"Unknown status {status!r}; expected one of {WHT_STATUSES}")
    selected = [d for d in withholding_documents(docs) if _issued_in(d, year)]
    if status == "received":
        selected = [d for d in selected if d.get("wht_received")]
    elif status == "pending":
        selected = [d for d in selected if not d.get("wht_received")]

    received = [d for d in selected if d.get("wht_received")]
    return WhtSummary(
        documents=selected,
        total_amount=sum(wht_amount(d) for d in selected),
        received_amount=sum(wht_amount(d) for d in received),
        received_count=len(received),
        pending_count=len(selected) - len(received),
    )


def received_credit(docs: Iterable[Dict], year: int) -> float:
    """WHT credit usable for ``year``: certificates received for invoices issued that year."""
    return sum(wht_amount(d) for d in docs if d.get("wht_received") and _issued_in(d, year))


def mark_received(doc: Dict, received: bool, on: Optional[date] = None) -> Dict:
    """Return a copy of ``doc`` with the certificate flag toggled.

    The received date is set to ``on`` when marking received and cleared
    otherwise.
    """
    updated = dict(doc)
    updated["wht_received"] = bool(received)
    updated["wht_received_date"] = on if received else None
    return updated


def withholding_rows(docs: Iterable[Dict]) -> List[Dict]:
    """Flat rows for the yearly WHT report export."""
    rows = []
    for d in docs:
        rows.append({
            "document_no": d.get("document_no", ""),
            "customer": d.get("customer_name", ""),
            "customer_tax_id": d.get("customer_tax_id") or "-",
            "issue_date": as_date(d.get("issue_date")),
            "subtotal": _amount(d.get("subtotal")),
            "rate_pct": _amount(d.get("withholding_tax_rate")),
            "wht_amount": wht_amount(d),
            "certificate": "received" if d.get("wht_received") else "pending",
            "received_date": as_date(d.get("wht_received_date")),
        })
    return rows


__all__ = [
    "WHT_STATUSES",
    "WhtSummary",
    "wht_amount",
    "withholding_documents",
    "summarize_withholding",
    "received_credit",
    "mark_received",
    "withholding_rows",
]
