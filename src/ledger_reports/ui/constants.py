"""UI constants for the reports page."""

from __future__ import annotations

from typing import Final

from ledger_reports.domain.reports import AccountFilter, AgingType, ExportFormat, ReportType

REPORT_TYPE_OPTIONS: Final[dict[str, str]] = {rt.value: rt.title for rt in ReportType}

ACCOUNT_FILTER_OPTIONS: Final[dict[str, str]] = {
    AccountFilter.ALL.value: "All Accounts",
    AccountFilter.ASSET.value: "Assets",
    AccountFilter.LIABILITY.value: "Liabilities",
    AccountFilter.EQUITY.value: "Equity",
    AccountFilter.REVENUE.value: "Revenue",
    AccountFilter.EXPENSE.value: "Expenses",
}

AGING_TYPE_OPTIONS: Final[dict[str, str]] = {
    AgingType.RECEIVABLES.value: "Receivables",
    AgingType.PAYABLES.value: "Payables",
}

SERVER_EXPORT_OPTIONS: Final[dict[str, str]] = {
    ExportFormat.PDF.value: "PDF",
    ExportFormat.EXCEL.value: "Excel",
}


# Tailwind class constants
CARD: Final[str] = "bg-white rounded-lg shadow-sm border border-slate-200"
CARD_PAD: Final[str] = "p-4"

BUTTON_PRIMARY: Final[str] = (
    "bg-blue-600 text-white hover:bg-blue-700 focus:ring-2 focus:ring-blue-300"
)
BUTTON_SECONDARY: Final[str] = (
    "bg-slate-200 text-slate-900 hover:bg-slate-300 focus:ring-2 focus:ring-slate-300"
)

INPUT: Final[str] = "border border-slate-300 rounded-md px-3 py-2"

NAV_LINK: Final[str] = "block px-3 py-2 rounded hover:bg-slate-100"
