"""Sales document totals and running numbers.

Quotations, invoices and receipts share one shape: a list of line items, a VAT
rate and an optional withholding rate, both in percent.  Withholding is taken
from the pre-VAT subtotal.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from typing import Dict, Iterable, Mapping, Sequence

from .taxes import _amount

DEFAULT_VAT_RATE = 7.0

DOCUMENT_PREFIXES = {
    "quotation": "QT",
    "invoice": "INV",
    "receipt": "RC",
    "tax_invoice": "TX",
    "tax_receipt": "TR",
}
DEFAULT_PREFIX = "DOC"

_NUMBER_RE = re.compile(r"^([A-Z]+)-(\d{4})-(\d+)$")


@dataclass
class DocumentTotals:
    subtotal: float
    vat_amount: float
    grand_total: float
    wht_amount: float
    net_total: float  # what the client actually transfers


def item_amount(item: Mapping) -> float:
    """Line amount; ``quantity * price`` when the item has no stored amount."""
    if item.get("amount") is not None:
        return _amount(item.get("amount"))
    return _amount(item.get("quantity")) * _amount(item.get("price"))


def document_totals(items: Sequence[Mapping], vat_rate: float = DEFAULT_VAT_RATE,
                    wht_rate: float = 0.0) -> DocumentTotals:
    """Subtotal, VAT, grand total and withholding for a list of line items.

    >>> document_totals([{"amount": 1000}], wht_rate=3).net_total
    1040.0
    """
    subtotal = sum(item_amount(i) for i in items)
    vat = subtotal * _amount(vat_rate) / 100
    grand = subtotal + vat
    wht = subtotal * _amount(wht_rate) / 100
    return DocumentTotals(
        subtotal=subtotal,
        vat_amount=vat,
        grand_total=grand,
        wht_amount=wht,
        net_total=grand - wht,
    )


def with_totals(doc: Dict) -> Dict:
    """Copy of ``doc`` with ``subtotal``, ``vat_amount`` and ``grand_total`` filled from its items.

    Documents without items are returned unchanged.
    """
    if not doc.get("items"):
        return doc
    vat_rate = doc.get("vat_rate")
    totals = document_totals(
        doc["items"],
        vat_rate=DEFAULT_VAT_RATE if vat_rate is None else vat_rate,
        wht_rate=doc.get("withholding_tax_rate") or 0.0,
    )
    updated = dict(doc)
    for key in ("subtotal", "vat_amount", "grand_total"):
        updated[key] = asdict(totals)[key]
    return updated


def document_prefix(doc_type: str) -> str:
    return DOCUMENT_PREFIXES.get(doc_type, DEFAULT_PREFIX)


def next_document_no(doc_type: str, year: int, existing_nos: Iterable[str]) -> str:
    """Next ``PREFIX-YYYY-NNN`` number for ``doc_type`` in ``year``.

    Numbering restarts every year and per prefix; malformed numbers are ignored.

    >>> next_document_no("invoice", 2025, ["INV-2025-001", "INV-2025-002", "QT-2025-007"])
    'INV-2025-003'
    """
    prefix = document_prefix(doc_type)
    last = 0
    for no in existing_nos:
        m = _NUMBER_RE.match(str(no or ""))
        if m and m.group(1) == prefix and int(m.group(2)) == year:
            last = max(last, int(m.group(3)))
    return f"{prefix}-{year}-{last + 1:03d}"


__all__ = [
    "DEFAULT_VAT_RATE",
    "DOCUMENT_PREFIXES",
    "DocumentTotals",
    "item_amount",
    "document_totals",
    "with_totals",
    "document_prefix",
    "next_document_no",
]
