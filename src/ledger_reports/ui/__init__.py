"""NiceGUI-based web UI for Ledger Reports.

This package is optional: it requires the `frontend` extra.
Importing `ledger_reports.ui` does not import NiceGUI.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
