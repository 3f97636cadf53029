import streamlit as st

from ..calculators.taxes import ExpenseMethod

# Stable widget keys so we can programmatically set values on load
WIDGET_KEYS = {
    "income": "in_income",
    "other_income": "in_other_income",
    "expense_method": "in_expense_method",
    "actual_expense": "in_actual_expense",

    "social_security": "in_social_security",
    "life_insurance": "in_life_insurance",
    "provident_fund": "in_provident_fund",
    "donation": "in_donation",
    "other": "in_other",

    "withholding_credit": "in_withholding_credit",
    "additional_income": "in_additional_income",
}

EXPENSE_LABELS = {
    ExpenseMethod.FLAT.value: "Flat 60% (max 600,000)",
    ExpenseMethod.ACTUAL.value: "Actual expenses",
}


def _d(key, fallback):
    return st.session_state.get("form_defaults", {}).get(key, fallback)


def tax_form():
    # -------- Income --------
    st.sidebar.header("Income")
    income = st.sidebar.number_input(
        "Income from records", min_value=0.0, step=1000.0,
        value=float(_d("income", 0.0)), key=WIDGET_KEYS["income"],
        help="Income booked this year. Filled from uploaded transactions when available."
    )
    other_income = st.sidebar.number_input(
        "Other income", min_value=0.0, step=1000.0,
        value=float(_d("other_income", 0.0)), key=WIDGET_KEYS["other_income"],
        help="Income not recorded in the app, e.g. cash jobs."
    )

    # -------- Expenses --------
    st.sidebar.header("Expenses")
    methods = list(EXPENSE_LABELS)
    expense_method = st.sidebar.radio(
        "Deduction method", methods,
        index=methods.index(_d("expense_method", ExpenseMethod.FLAT.value)),
        format_func=EXPENSE_LABELS.get, key=WIDGET_KEYS["expense_method"],
    )
    actual_expense = st.sidebar.number_input(
        "Actual expenses", min_value=0.0, step=1000.0,
        value=float(_d("actual_expense", 0.0)), key=WIDGET_KEYS["actual_expense"],
        help="Used with the actual method and for the method comparison."
    )

    # -------- Allowances --------
    st.sidebar.header("Allowances")
    with st.sidebar.expander("Deductions", expanded=False):
        social_security = st.number_input("Social security (max 9,000)", min_value=0.0,
                                          value=float(_d("social_security", 0.0)),
                                          key=WIDGET_KEYS["social_security"])
        life_insurance = st.number_input("Life & health insurance (max 100,000)", min_value=0.0,
                                         value=float(_d("life_insurance", 0.0)),
                                         key=WIDGET_KEYS["life_insurance"])
        provident_fund = st.number_input("Provident / RMF / SSF", min_value=0.0,
                                         value=float(_d("provident_fund", 0.0)),
                                         key=WIDGET_KEYS["provident_fund"])
        donation = st.number_input("Donations (max 10% of net income)", min_value=0.0,
                                   value=float(_d("donation", 0.0)),
                                   key=WIDGET_KEYS["donation"])
        other = st.number_input("Other allowances", min_value=0.0,
                                value=float(_d("other", 0.0)),
                                key=WIDGET_KEYS["other"])

    st.sidebar.header("Credits")
    withholding_credit = st.sidebar.number_input(
        "Withholding tax credit", min_value=0.0, step=100.0,
        value=float(_d("withholding_credit", 0.0)), key=WIDGET_KEYS["withholding_credit"],
        help="Tax withheld by clients (50 Tawi certificates received)."
    )

    st.sidebar.header("Job Simulator")
    additional_income = st.sidebar.number_input(
        "New job fee", min_value=0.0, step=1000.0,
        value=float(_d("additional_income", 0.0)), key=WIDGET_KEYS["additional_income"],
    )

    # Return a full inputs dict
    return {
        "total_income": float(income) + float(other_income),
        "expense_method": expense_method,
        "actual_expense": float(actual_expense),
        "deductions": {
            "social_security": float(social_security),
            "life_insurance": float(life_insurance),
            "provident_fund": float(provident_fund),
            "donation": float(donation),
            "other": float(other),
        },
        "withholding_credit": float(withholding_credit),
        "additional_income": float(additional_income),
    }
