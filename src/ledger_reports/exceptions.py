"""Exception hierarchy for the report pipeline.

All pipeline exceptions inherit from LedgerReportsError so the controller
can catch them at a single boundary while preserving specificity for
individual error types.
"""

from typing import Any


class LedgerReportsError(Exception):
    """Base exception for all report pipeline errors.

    Includes an error_code for notifications and logs, and extra context.
    """

    error_code: str = "LEDGER_REPORTS_ERROR"

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logs and notifications."""
        return {
            "error": self.error_code,
            "message": self.message,
            "context": self.context,
        }


# =============================================================================
# Fetch Errors
# =============================================================================


class ReportFetchError(LedgerReportsError):
    """Base exception for failures talking to the backend."""

    error_code = "REPORT_FETCH_ERROR"


class NetworkError(ReportFetchError):
    """Raised when no readable HTTP response arrived."""

    error_code = "NETWORK_ERROR"

    def __init__(self, message: str = "Network error occurred", *, url: str = "") -> None:
        super().__init__(message, context={"url": url} if url else None)


class HTTPError(ReportFetchError):
    """Raised when the backend answers with a non-2xx status."""

    error_code = "HTTP_ERROR"

    def __init__(self, status_code: int, detail: str, *, code: str | None = None) -> None:
        super().__init__(
            detail or f"HTTP {status_code}",
            context={"status_code": status_code, "code": code},
        )
        self.status_code = status_code
        self.detail = detail
        self.code = code

    def __str__(self) -> str:
        return f"HTTPError({self.status_code}): {self.detail}"


class MalformedReportDataError(ReportFetchError):
    """Raised when a backend payload does not match its report type's schema."""

    error_code = "MALFORMED_REPORT_DATA"

    def __init__(self, report_type: str, reason: str) -> None:
        super().__init__(
            f"Malformed {report_type} data: {reason}",
            context={"report_type": report_type, "reason": reason},
        )


# =============================================================================
# Report Errors
# =============================================================================


class UnsupportedReportTypeError(LedgerReportsError):
    """Raised for a report type outside the supported enumeration."""

    error_code = "UNSUPPORTED_REPORT_TYPE"

    def __init__(self, report_type: Any, message: str = "Report type not implemented") -> None:
        super().__init__(
            f"{message}: {report_type}",
            context={"report_type": str(report_type)},
        )


class ReportShapeError(LedgerReportsError):
    """Raised when a report's rows or totals do not match its headers."""

    error_code = "REPORT_SHAPE_ERROR"


class InvalidDateRangeError(LedgerReportsError):
    """Raised when a report period starts after it ends."""

    error_code = "INVALID_DATE_RANGE"

    def __init__(self, start_date: str, end_date: str) -> None:
        super().__init__(
            f"Start date {start_date} is after end date {end_date}",
            context={"start_date": start_date, "end_date": end_date},
        )


# =============================================================================
# Export Errors
# =============================================================================


class NoReportDataError(LedgerReportsError):
    """Raised when an export is requested before any report was generated."""

    error_code = "NO_REPORT_DATA"

    def __init__(self, message: str = "Please generate a report first") -> None:
        super().__init__(message)


class ExportError(LedgerReportsError):
    """Raised when assembling or writing an export file fails."""

    error_code = "EXPORT_ERROR"

    def __init__(self, export_format: str, reason: str) -> None:
        super().__init__(
            f"Failed to export {export_format}: {reason}",
            context={"format": export_format, "reason": reason},
        )
