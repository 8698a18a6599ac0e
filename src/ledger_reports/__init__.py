from ledger_reports.domain.reports import (
    AccountFilter,
    ExportFormat,
    ExportOptions,
    ReportRequest,
    ReportResult,
    ReportType,
)

__all__ = [
    "AccountFilter",
    "ExportFormat",
    "ExportOptions",
    "ReportRequest",
    "ReportResult",
    "ReportType",
]

__version__ = "0.1.0"
