"""Thai freelancer tax planner.

Calculators live in :mod:`freelance_tax.calculators`; Streamlit widgets and
chart helpers used by ``app.py`` live in :mod:`freelance_tax.components`.
"""

__version__ = "0.1.0"
