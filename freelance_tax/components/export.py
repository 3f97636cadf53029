"""Download helpers for the filing assistant: a CSV-ready table and a PDF summary."""

import io
from typing import Iterable, Sequence, Tuple

import pandas as pd
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ..calculators.taxes import BracketTax
from .charts import bracket_label

_TABLE_STYLE = TableStyle(
    [
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#E6ECE9")),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("ALIGN", (1, 1), (-1, -1), "RIGHT"),
    ]
)


def _fmt(value) -> str:
    if isinstance(value, (int, float)):
        return f"{value:,.2f}"
    return str(value)


def filing_frame(rows: Iterable[Tuple[str, object]]) -> pd.DataFrame:
    """Summary rows as a two-column DataFrame."""
    return pd.DataFrame(list(rows), columns=["Item", "Amount (THB)"])


def build_filing_pdf(rows: Sequence[Tuple[str, object]],
                     steps: Sequence[BracketTax],
                     title: str = "Personal Income Tax Summary") -> bytes:
    """Create a PDF with the filing summary and the per-bracket breakdown."""
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4, leftMargin=36, rightMargin=36)
    styles = getSampleStyleSheet()
    story = [Paragraph(title, styles["Title"]), Spacer(1, 12)]

    # ---- Summary ----
    story.append(Paragraph("Summary", styles["Heading2"]))
    summary = [["Item", "Amount (THB)"]] + [[label, _fmt(value)] for label, value in rows]
    table = Table(summary, hAlign="LEFT")
    table.setStyle(_TABLE_STYLE)
    story.extend([table, Spacer(1, 12)])

    # ---- Brackets ----
    story.append(Paragraph("Tax by Bracket", styles["Heading2"]))
    breakdown = [["Bracket", "Income in bracket", "Tax"]]
    for s in steps:
        breakdown.append([bracket_label(s.bracket), _fmt(s.taxable_amount), _fmt(s.tax)])
    table = Table(breakdown, hAlign="LEFT")
    table.setStyle(_TABLE_STYLE)
    story.append(table)

    doc.build(story)
    pdf_bytes = buffer.getvalue()
    buffer.close()
    return pdf_bytes
