"""Expose component submodules for convenience."""

from .forms import tax_form
from .charts import bracket_chart, method_comparison_chart, vat_gauge, tax_curve_chart
from .insights import generate_tax_insight
from .export import filing_frame, build_filing_pdf

__all__ = [
    "tax_form",
    "bracket_chart",
    "method_comparison_chart",
    "vat_gauge",
    "tax_curve_chart",
    "generate_tax_insight",
    "filing_frame",
    "build_filing_pdf",
]
