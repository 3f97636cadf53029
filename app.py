# app.py
import io
import json
import logging
from datetime import date

import pandas as pd
import streamlit as st

from freelance_tax.calculators import alerts, corporate, filing, reports, withholding
from freelance_tax.calculators.documents import next_document_no, with_totals
from freelance_tax.calculators.taxes import (
    Deductions,
    ExpenseMethod,
    PersonalTaxInput,
    analyze_tax_bracket,
    base_deduction_total,
    calculate_personal_tax,
    calculate_vat_info,
    compare_expense_methods,
    simulate_job_impact,
)
from freelance_tax.components.forms import tax_form
from freelance_tax.components.charts import (
    bracket_chart,
    method_comparison_chart,
    tax_curve_chart,
    vat_gauge,
)
from freelance_tax.components.export import build_filing_pdf, filing_frame
from freelance_tax.components.insights import generate_tax_insight
from freelance_tax.currency import baht_text, format_thb

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
logger = logging.getLogger("freelance_tax.app")


# ---------- Page config ----------
st.set_page_config(
    page_title="Freelance Tax Planner",
    page_icon="🧾",
    layout="wide",
    initial_sidebar_state="auto",
)

# Hide Streamlit's default menu and footer
HIDE_STREAMLIT_STYLE = """
    <style>
        #MainMenu {visibility: hidden;}
        footer {visibility: hidden;}
    </style>
"""
st.markdown(HIDE_STREAMLIT_STYLE, unsafe_allow_html=True)

st.markdown(
    """
<style>
.block-container { padding: 1.5rem 2rem; max-width: 1400px; margin: auto; }
section[data-testid="stSidebar"] { background-color: #E6ECE9; border-right: 1px solid #D1D9D6; }
div[data-testid="stMetric"] {
    background: #FFFFFF;
    border-radius: 12px;
    padding: 1rem;
    box-shadow: 0 2px 8px rgba(0,0,0,0.05);
    border: 1px solid #E6ECE9;
}
div.stPlotlyChart { background: #FFFFFF; border-radius: 12px; padding: 0.75rem; border: 1px solid #E6ECE9; }
</style>
""",
    unsafe_allow_html=True,
)

# ---------- Session boot ----------
st.session_state.setdefault("form_defaults", {})
st.session_state.setdefault("transactions", [])
st.session_state.setdefault("documents", [])
st.session_state.setdefault("alert_keys", [])
st.session_state.setdefault("export_pdf_bytes", None)

TODAY = date.today()
RANGE_LABELS = {
    "this_month": "This month",
    "3_months": "Last 3 months",
    "6_months": "Last 6 months",
    "year": "This year",
    "all": "All time",
}


def _load_transactions(uploaded) -> list:
    """Read a transactions CSV with date, type and amount columns."""
    df = pd.read_csv(uploaded)
    missing = {"date", "type", "amount"} - set(df.columns)
    if missing:
        raise ValueError(f"Missing columns: {', '.join(sorted(missing))}")
    return df.to_dict("records")


def _load_documents(uploaded) -> list:
    """Read a JSON list of documents, filling totals from items and missing numbers."""
    data = json.load(uploaded)
    if not isinstance(data, list) or not all(isinstance(d, dict) for d in data):
        raise ValueError("Expected a JSON list of documents.")
    docs = [with_totals(d) for d in data]
    numbers = [d.get("document_no") for d in docs]
    for d in docs:
        if not d.get("document_no"):
            issued = reports.as_date(d.get("issue_date")) or TODAY
            d["document_no"] = next_document_no(d.get("type", ""), issued.year, numbers)
            numbers.append(d["document_no"])
    return docs


def _defaults_from_records(transactions: list, documents: list) -> dict:
    """Prefill the form from this year's records."""
    income, expense = reports.summarize_transactions(transactions, reports.range_start("year", TODAY))
    defaults = dict(st.session_state["form_defaults"])
    defaults["income"] = income
    defaults["actual_expense"] = expense
    defaults["withholding_credit"] = withholding.received_credit(documents, TODAY.year)
    return defaults


# ---------- Header ----------
st.markdown(
    """
    ### **Freelance Tax Planner**
    _Personal income tax, expense method comparison, VAT tracking and withholding credits for Thai freelancers._
    """
)

# ====== SIDEBAR: DATA + FORM ======
st.sidebar.header("Records")
st.sidebar.caption("Upload this year's records to prefill the calculator.")
tx_file = st.sidebar.file_uploader("Transactions CSV", type="csv")
doc_file = st.sidebar.file_uploader("Documents JSON", type="json")
if st.sidebar.button("Load records"):
    try:
        if tx_file:
            st.session_state["transactions"] = _load_transactions(tx_file)
        if doc_file:
            st.session_state["documents"] = _load_documents(doc_file)
        st.session_state["form_defaults"] = _defaults_from_records(
            st.session_state["transactions"], st.session_state["documents"]
        )
        logger.info("loaded %d transactions, %d documents",
                    len(st.session_state["transactions"]), len(st.session_state["documents"]))
        st.sidebar.success("Records loaded.")
        st.rerun()
    except (ValueError, json.JSONDecodeError) as e:
        logger.warning("rejected upload: %s", e)
        st.sidebar.error(f"Could not read records: {e}")

inputs = tax_form()
transactions = st.session_state["transactions"]
documents = st.session_state["documents"]

# ====== CALCULATIONS ======
deductions = Deductions(**inputs["deductions"])
tax_input = PersonalTaxInput(
    total_income=inputs["total_income"],
    expense_method=inputs["expense_method"],
    actual_expense=inputs["actual_expense"],
    deductions=deductions,
    withholding_credit=inputs["withholding_credit"],
)
result = calculate_personal_tax(tax_input)
comparison = compare_expense_methods(
    inputs["total_income"], inputs["actual_expense"], base_deduction_total(deductions)
)
bracket = analyze_tax_bracket(result.net_income)
vat = calculate_vat_info(inputs["total_income"])

# ====== ALERTS ======
invoices = [d for d in documents if d.get("type") == "invoice"]
new_alerts = alerts.generate_alerts(invoices, inputs["total_income"], TODAY, st.session_state["alert_keys"])
for a in new_alerts:
    icon = {"error": "🚨", "warning": "⚠️"}.get(a.level, "ℹ️")
    st.toast(f"{a.title}: {a.message}", icon=icon)
st.session_state["alert_keys"].extend(a.trigger_key for a in new_alerts)

tab_dash, tab_tax, tab_plan, tab_wht, tab_filing, tab_corp = st.tabs(
    ["Dashboard", "Personal Tax", "Planning", "Withholding", "Filing Assistant", "Corporate"]
)

# ---------- Dashboard ----------
with tab_dash:
    range_name = st.selectbox("Period", list(RANGE_LABELS), index=3, format_func=RANGE_LABELS.get)
    summary = reports.dashboard_summary(transactions, documents, range_name, TODAY)
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Income", format_thb(summary.income))
    c2.metric("Expenses", format_thb(summary.expense))
    c3.metric("Profit", format_thb(summary.profit))
    c4.metric("Awaiting payment", format_thb(summary.pending_income))

    t1, t2, t3 = st.columns(3)
    t1.metric("Overdue invoices", len(summary.overdue_invoices))
    t2.metric("Due within 7 days", len(summary.due_soon_invoices))
    t3.metric("WHT certificates pending", summary.pending_wht)

    if summary.pending_invoices:
        st.markdown("### Pending Invoices")
        df_pending = pd.DataFrame(summary.pending_invoices)
        st.dataframe(df_pending, use_container_width=True, height=300)
        st.download_button(
            "⬇️ CSV (pending invoices)",
            data=df_pending.to_csv(index=False).encode("utf-8"),
            file_name="pending_invoices.csv",
            mime="text/csv",
        )
    if summary.recent_documents:
        st.markdown("### Recent Documents")
        st.dataframe(pd.DataFrame(summary.recent_documents), use_container_width=True)

# ---------- Personal tax ----------
with tab_tax:
    k1, k2, k3, k4 = st.columns(4)
    k1.metric("Net taxable income", format_thb(result.net_income))
    k2.metric("Tax before credit", format_thb(result.tax_before_credit))
    label = "Refund due" if result.is_refund else "Tax payable"
    k3.metric(label, format_thb(abs(result.tax_payable)))
    k4.metric("Average rate", f"{result.average_rate:.2f}%")
    st.caption(baht_text(abs(result.tax_payable)))

    c1, c2 = st.columns(2)
    with c1:
        st.plotly_chart(bracket_chart(result.steps), use_container_width=True)
    with c2:
        st.plotly_chart(tax_curve_chart(result.net_income), use_container_width=True)

    st.divider()
    st.subheader("Insight")
    st.info(generate_tax_insight(result, comparison, bracket, vat))

# ---------- Planning ----------
with tab_plan:
    st.subheader("Expense Method")
    c1, c2 = st.columns(2)
    with c1:
        st.plotly_chart(method_comparison_chart(comparison), use_container_width=True)
    with c2:
        better = "Flat 60%" if comparison.recommended_method is ExpenseMethod.FLAT else "Actual expenses"
        st.metric("Recommended", better, delta=f"saves {format_thb(comparison.savings)}")
        st.caption(
            f"Actual expenses must exceed {format_thb(comparison.break_even_expense)} "
            f"({comparison.break_even_percentage:.1f}% of income) to beat the flat rate."
        )

    st.divider()
    st.subheader("Tax Bracket")
    rate_now = bracket.current_bracket.rate * 100
    if bracket.next_bracket is None:
        st.write(f"You are in the top {rate_now:g}% bracket.")
    else:
        st.write(
            f"You are in the {rate_now:g}% bracket; {format_thb(bracket.income_to_next)} more net income "
            f"moves you to {bracket.next_bracket.rate * 100:g}%."
        )
        if bracket.is_near_boundary:
            st.warning("You are close to the next bracket. Extra allowances now save the higher rate.")

    st.divider()
    st.subheader("VAT Registration")
    c1, c2 = st.columns(2)
    with c1:
        st.plotly_chart(vat_gauge(vat), use_container_width=True)
    with c2:
        st.metric("Remaining before 1.8M", format_thb(vat.remaining_to_threshold))
        if vat.status == "danger":
            st.error("At or near the VAT threshold. Register within 30 days of passing 1.8M.")
        elif vat.status == "warning":
            st.warning("Income is above 1.5M baht.")

    st.divider()
    st.subheader("Should I Take This Job?")
    if inputs["additional_income"] > 0:
        impact = simulate_job_impact(
            inputs["total_income"], result.total_deductions, inputs["additional_income"]
        )
        j1, j2, j3 = st.columns(3)
        j1.metric("Extra tax", format_thb(impact.additional_tax))
        j2.metric("Take-home", format_thb(impact.net_gain))
        j3.metric("Kept", f"{impact.net_gain_percentage:.1f}%")
        if impact.should_accept:
            st.success("Worth it: you keep more than half of the fee after tax.")
        else:
            st.warning("Less than half of the fee survives tax.")
    else:
        st.info("Enter a job fee in the sidebar to simulate it.")

# ---------- Withholding ----------
with tab_wht:
    years = sorted({d.year for d in (reports.as_date(x.get("issue_date")) for x in invoices) if d}
                   | {TODAY.year}, reverse=True)
    c1, c2 = st.columns(2)
    year = c1.selectbox("Year", years)
    status = c2.selectbox("Certificate", withholding.WHT_STATUSES)
    wht = withholding.summarize_withholding(invoices, year, status)
    w1, w2, w3 = st.columns(3)
    w1.metric("Received", f"{wht.received_count} item(s)")
    w2.metric("Pending", f"{wht.pending_count} item(s)")
    w3.metric("Total withheld", format_thb(wht.total_amount))
    if wht.documents:
        df_wht = pd.DataFrame(withholding.withholding_rows(wht.documents))
        st.dataframe(df_wht, use_container_width=True)
        st.download_button(
            "⬇️ CSV (withholding)",
            data=df_wht.to_csv(index=False).encode("utf-8"),
            file_name=f"withholding_{year}.csv",
            mime="text/csv",
        )

        st.markdown("#### Certificate Received")
        chosen = st.selectbox("Document", [d.get("document_no", "") for d in wht.documents], key="wht_doc")
        current = next(d for d in wht.documents if d.get("document_no", "") == chosen)
        was_received = bool(current.get("wht_received"))
        received = st.checkbox("50 Tawi received", value=was_received, key=f"wht_received_{chosen}")
        if received != was_received:
            st.session_state["documents"] = [
                withholding.mark_received(d, received, TODAY) if d is current else d
                for d in st.session_state["documents"]
            ]
            logger.info("certificate for %s marked %s", chosen, "received" if received else "pending")
            st.rerun()
    else:
        st.info("No withholding documents for this selection.")

# ---------- Filing assistant ----------
with tab_filing:
    form_type = st.radio("Form", list(filing.FORM_TYPES), format_func=filing.FORM_TYPES.get, horizontal=True)
    c1, c2 = st.columns(2)
    items = {}
    with c1:
        items["social_security"] = st.number_input("Social security", min_value=0.0,
                                                   value=deductions.social_security)
        items["life_insurance"] = st.number_input("Life insurance", min_value=0.0)
        items["health_insurance"] = st.number_input("Health insurance", min_value=0.0)
        items["provident_fund"] = st.number_input("Provident fund", min_value=0.0)
        items["rmf"] = st.number_input("RMF", min_value=0.0)
    with c2:
        items["ssf"] = st.number_input("SSF / ThaiESG", min_value=0.0)
        items["donation"] = st.number_input("Donations", min_value=0.0)
        items["donation_double"] = st.number_input("Donations counted twice", min_value=0.0)
        items["home_interest"] = st.number_input("Home loan interest", min_value=0.0)
        items["other"] = st.number_input("Other", min_value=0.0, key="filing_other")
    fd = filing.FilingDeductions(**items)

    filed = filing.prepare_filing(inputs["total_income"], fd, inputs["withholding_credit"])
    rows = filing.filing_summary_rows(filed, form_type, claimed=fd.claimed_total())
    df_filing = filing_frame(rows)
    st.table(df_filing)

    d1, d2 = st.columns(2)
    with d1:
        st.download_button(
            "⬇️ CSV (filing summary)",
            data=df_filing.to_csv(index=False).encode("utf-8"),
            file_name=f"tax_filing_{TODAY.year}.csv",
            mime="text/csv",
        )
    with d2:
        if st.button("Build PDF"):
            st.session_state["export_pdf_bytes"] = build_filing_pdf(rows, filed.steps)
        if st.session_state.get("export_pdf_bytes"):
            st.download_button(
                "⬇️ Download PDF",
                data=io.BytesIO(st.session_state["export_pdf_bytes"]),
                file_name=f"tax_filing_{TODAY.year}.pdf",
                mime="application/pdf",
            )

# ---------- Corporate ----------
with tab_corp:
    c1, c2, c3 = st.columns(3)
    revenue = c1.number_input("Revenue", min_value=0.0, step=10000.0)
    costs = c2.number_input("Expenses", min_value=0.0, step=10000.0)
    is_sme = c3.checkbox("SME", value=True)
    corp = corporate.calculate_corporate_tax(revenue, costs, is_sme)
    m1, m2 = st.columns(2)
    m1.metric("Net profit", format_thb(corp.net_profit))
    m2.metric("Corporate tax", format_thb(corp.tax))
    st.dataframe(pd.DataFrame(corp.brackets), use_container_width=True)
