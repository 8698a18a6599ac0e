from ledger_reports.services.controller import (
    ReportController,
    ReportState,
    ReportStatus,
    begin_fetch,
    complete_fetch,
    fail_fetch,
    set_date_range,
    set_filters,
    set_report_type,
)
from ledger_reports.services.exporter import ReportExporterImpl
from ledger_reports.services.fetcher import ReportDataFetcherImpl
from ledger_reports.services.formatter import ReportFormatterImpl
from ledger_reports.services.interfaces import (
    ReportDataFetcher,
    ReportExporter,
    ReportFormatter,
    ReportPreviewRenderer,
)
from ledger_reports.services.preview import HTMLPreviewRenderer

__all__ = [
    "HTMLPreviewRenderer",
    "ReportController",
    "ReportDataFetcher",
    "ReportDataFetcherImpl",
    "ReportExporter",
    "ReportExporterImpl",
    "ReportFormatter",
    "ReportFormatterImpl",
    "ReportPreviewRenderer",
    "ReportState",
    "ReportStatus",
    "begin_fetch",
    "complete_fetch",
    "fail_fetch",
    "set_date_range",
    "set_filters",
    "set_report_type",
]
