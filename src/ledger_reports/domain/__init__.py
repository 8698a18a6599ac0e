from ledger_reports.domain.reports import (
    AccountFilter,
    AgingType,
    ExportFormat,
    ExportOptions,
    ReportRequest,
    ReportResult,
    ReportType,
    export_filename,
)

__all__ = [
    "AccountFilter",
    "AgingType",
    "ExportFormat",
    "ExportOptions",
    "ReportRequest",
    "ReportResult",
    "ReportType",
    "export_filename",
]
