"""Pure calculators behind the freelancer tax planner.

The `calculators` package contains small, focused modules:

* ``taxes`` – Thai personal income tax: brackets, deductions, expense method
  comparison, bracket proximity, VAT threshold and the job simulator.
* ``corporate`` – corporate income tax for SME and regular companies.
* ``withholding`` – withholding tax amounts, yearly summaries and credits.
* ``reports`` – dashboard totals and invoice to-do lists.
* ``alerts`` – proactive invoice, VAT and bracket alerts.
* ``filing`` – PND 90/94 filing assistant.
* ``documents`` – sales document totals and running numbers.

Each module exposes a few public functions with clear parameters and returns.  See
individual docstrings for details.
"""

from . import taxes, corporate, reports, withholding, alerts, filing, documents  # noqa: F401

__all__ = ["taxes", "corporate", "reports", "withholding", "alerts", "filing", "documents"]
