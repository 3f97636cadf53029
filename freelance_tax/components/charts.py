"""Plotly chart helpers for the tax planner.

All functions return a Plotly Figure for ``st.plotly_chart``.
"""

from typing import Optional, Sequence

import numpy as np
import plotly.graph_objects as go
import plotly.io as pio

from ..calculators.taxes import (
    VAT_DANGER_LEVEL,
    VAT_THRESHOLD,
    VAT_WARNING_LEVEL,
    BracketTax,
    ExpenseComparison,
    TaxBracket,
    VatInfo,
    compute_tax,
)

pio.templates.default = "plotly_white"


def bracket_label(bracket: TaxBracket) -> str:
    """'150,000 - 300,000 (5%)' style label; open-ended for the top bracket."""
    pct = f"{bracket.rate * 100:g}%"
    if bracket.upper is None:
        return f"> {bracket.lower:,.0f} ({pct})"
    return f"{bracket.lower:,.0f} - {bracket.upper:,.0f} ({pct})"


# ---------- Tax per bracket ----------
def bracket_chart(steps: Sequence[BracketTax],
                  title: str = "Tax by Bracket") -> go.Figure:
    """Bars of tax owed in each bracket; hover shows the income slice."""
    labels = [bracket_label(s.bracket) for s in steps]
    fig = go.Figure(go.Bar(
        x=labels,
        y=[s.tax for s in steps],
        customdata=[s.taxable_amount for s in steps],
        name="Tax",
        hovertemplate="%{x}<br>Income in bracket ฿%{customdata:,.0f}<br>Tax ฿%{y:,.0f}<extra></extra>",
    ))
    fig.update_layout(
        title=title,
        height=380,
        margin=dict(l=10, r=10, t=40, b=10),
        xaxis_title="Bracket",
        yaxis_title="Baht",
    )
    return fig


# ---------- Flat vs actual expenses ----------
def method_comparison_chart(comparison: ExpenseComparison,
                            title: str = "Flat vs Actual Expenses") -> go.Figure:
    """Grouped bars of net income and tax under each expense method."""
    methods = ["Flat 60%", "Actual"]
    fig = go.Figure()
    fig.add_bar(x=methods, y=[comparison.net_income_flat, comparison.net_income_actual],
                name="Net income")
    fig.add_bar(x=methods, y=[comparison.flat_tax, comparison.actual_tax], name="Tax")
    fig.update_layout(
        barmode="group",
        title=title,
        height=320,
        margin=dict(l=10, r=10, t=40, b=10),
        yaxis_title="Baht",
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1)
    )
    return fig


# ---------- VAT gauge ----------
def vat_gauge(info: VatInfo) -> go.Figure:
    """0–100% radial gauge of progress toward VAT registration."""
    warn = VAT_WARNING_LEVEL / VAT_THRESHOLD * 100
    danger = VAT_DANGER_LEVEL / VAT_THRESHOLD * 100
    fig = go.Figure(go.Indicator(
        mode="gauge+number",
        value=round(info.percent_of_threshold, 1),
        number={"suffix": "%"},
        gauge={
            "axis": {"range": [0, 100]},
            "bar": {"thickness": 0.35},
            "steps": [
                {"range": [0, warn], "color": "#E6ECE9"},
                {"range": [warn, danger], "color": "#FFF3CD"},
                {"range": [danger, 100], "color": "#F8D7DA"},
            ],
        }
    ))
    fig.update_layout(height=220, margin=dict(l=10, r=10, t=10, b=10))
    return fig


# ---------- Tax curve ----------
def tax_curve_chart(current_net_income: float,
                    max_income: Optional[float] = None,
                    points: int = 200,
                    title: str = "Tax vs Net Income") -> go.Figure:
    """Tax owed across a range of net incomes with a marker at the current one."""
    top = max_income or max(1_000_000.0, current_net_income * 1.5)
    incomes = np.linspace(0.0, top, points)
    taxes = np.array([compute_tax(x) for x in incomes])

    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=incomes, y=taxes, mode="lines", name="Tax",
        hovertemplate="Net ฿%{x:,.0f}<br>Tax ฿%{y:,.0f}<extra></extra>"
    ))
    fig.add_trace(go.Scatter(
        x=[current_net_income], y=[compute_tax(current_net_income)],
        mode="markers", name="You", marker=dict(size=12),
        hovertemplate="Net ฿%{x:,.0f}<br>Tax ฿%{y:,.0f}<extra></extra>"
    ))
    fig.update_layout(
        title=title,
        height=380,
        margin=dict(l=10, r=10, t=40, b=10),
        xaxis_title="Net income (baht)",
        yaxis_title="Tax (baht)",
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1)
    )
    return fig
