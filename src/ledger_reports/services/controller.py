"""Report page state and the controller that drives the pipeline.

State lives in an immutable ``ReportState``; every change goes through one
of the pure transition functions below, so the UI (or a test) can reason
about exactly one value at a time. ``ReportController`` wires the fetcher,
formatter, renderer and exporter together and is the only place pipeline
errors are caught and turned into user notifications.

A generation is tagged with a monotonically increasing request id. When a
response arrives for an id that is no longer the latest (the user clicked
Generate again, or switched report type), it is dropped.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

from ledger_reports.api.client import ReportsAPIClient
from ledger_reports.config import Settings, get_settings
from ledger_reports.domain.reports import (
    ExportFormat,
    ExportOptions,
    ReportRequest,
    ReportResult,
    ReportType,
)
from ledger_reports.exceptions import (
    ExportError,
    InvalidDateRangeError,
    LedgerReportsError,
    NoReportDataError,
    ReportFetchError,
)
from ledger_reports.logging_config import LogContext, get_logger
from ledger_reports.services.interfaces import (
    ReportDataFetcher,
    ReportExporter,
    ReportFormatter,
    ReportPreviewRenderer,
)

logger = get_logger(__name__)

_FORMAT_LABELS = {
    ExportFormat.PDF: "PDF",
    ExportFormat.EXCEL: "Excel",
    ExportFormat.CSV: "CSV",
    ExportFormat.JSON: "JSON",
}


class Notifier(Protocol):
    def __call__(self, message: str, *, type: str = "info") -> None: ...


def log_notifier(message: str, *, type: str = "info") -> None:
    """Fallback notifier for headless use."""
    logger.info("notification", message=message, type=type)


class ReportStatus(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    DISPLAYED = "displayed"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class ReportState:
    request: ReportRequest
    status: ReportStatus = ReportStatus.IDLE
    result: ReportResult | None = None
    error: str | None = None
    latest_request_id: int = 0
    # Request of the latest fetch, and the one that produced ``result``
    fetch_request: ReportRequest | None = None
    result_request: ReportRequest | None = None

    @classmethod
    def initial(
        cls,
        report_type: ReportType = ReportType.TRIAL_BALANCE,
        today: date | None = None,
    ) -> ReportState:
        """Current month to date, nothing generated yet."""
        today = today or date.today()
        return cls(
            request=ReportRequest(
                report_type=report_type,
                start_date=today.replace(day=1),
                end_date=today,
            )
        )

    @property
    def is_fetching(self) -> bool:
        return self.status is ReportStatus.FETCHING

    @property
    def displayed_request(self) -> ReportRequest:
        """Selection behind the held result, or the form when nothing is held."""
        return self.result_request or self.request


# --- Transitions ---


def set_report_type(state: ReportState, report_type: ReportType) -> ReportState:
    """Switch report type, dropping the held result and any in-flight fetch."""
    if report_type is state.request.report_type:
        return state
    return replace(
        state,
        request=replace(state.request, report_type=report_type),
        status=ReportStatus.IDLE,
        result=None,
        result_request=None,
        error=None,
        latest_request_id=state.latest_request_id + 1,
    )


def set_date_range(state: ReportState, start_date: date, end_date: date) -> ReportState:
    return replace(
        state, request=replace(state.request, start_date=start_date, end_date=end_date)
    )


def set_filters(state: ReportState, **changes: Any) -> ReportState:
    """Update account filter or option toggles; ``report_type`` is not allowed here."""
    if "report_type" in changes:
        raise TypeError("use set_report_type to change the report type")
    return replace(state, request=replace(state.request, **changes))


def begin_fetch(state: ReportState) -> tuple[ReportState, int]:
    request_id = state.latest_request_id + 1
    return (
        replace(
            state,
            status=ReportStatus.FETCHING,
            error=None,
            latest_request_id=request_id,
            fetch_request=state.request,
        ),
        request_id,
    )


def complete_fetch(state: ReportState, request_id: int, result: ReportResult) -> ReportState:
    if request_id != state.latest_request_id:
        return state
    return replace(
        state,
        status=ReportStatus.DISPLAYED,
        result=result,
        result_request=state.fetch_request,
        error=None,
    )


def fail_fetch(state: ReportState, request_id: int, message: str) -> ReportState:
    # The previous result, if any, stays in place.
    if request_id != state.latest_request_id:
        return state
    return replace(state, status=ReportStatus.ERROR, error=message)


def reject_request(state: ReportState, message: str) -> ReportState:
    """Record a validation failure without starting a fetch."""
    return replace(state, status=ReportStatus.ERROR, error=message)


# --- Controller ---


class ReportController:
    """Coordinates one report page: generate, preview, export.

    Pipeline errors never escape the public coroutines; they are logged and
    handed to ``notify``.
    """

    def __init__(
        self,
        fetcher: ReportDataFetcher,
        formatter: ReportFormatter,
        renderer: ReportPreviewRenderer,
        exporter: ReportExporter,
        notify: Notifier | None = None,
        *,
        client: ReportsAPIClient | None = None,
        settings: Settings | None = None,
        state: ReportState | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._formatter = formatter
        self._renderer = renderer
        self._exporter = exporter
        self._notify: Notifier = notify or log_notifier
        self._client = client
        self._settings = settings or get_settings()
        self._state = state or ReportState.initial()
        self._listeners: list[Callable[[ReportState], None]] = []

    @property
    def state(self) -> ReportState:
        return self._state

    @property
    def export_dir(self) -> Path:
        return self._settings.export_dir

    def set_notifier(self, notify: Notifier) -> None:
        self._notify = notify

    def subscribe(self, listener: Callable[[ReportState], None]) -> None:
        """Call ``listener`` with the new state after every change."""
        self._listeners.append(listener)

    def _apply(self, state: ReportState) -> None:
        if state is self._state:
            return
        self._state = state
        for listener in list(self._listeners):
            listener(state)

    # --- Selection ---

    def set_report_type(self, report_type: ReportType | str) -> None:
        self._apply(set_report_type(self._state, ReportType.parse(report_type)))

    def set_date_range(self, start_date: date, end_date: date) -> None:
        self._apply(set_date_range(self._state, start_date, end_date))

    def set_filters(self, **changes: Any) -> None:
        self._apply(set_filters(self._state, **changes))

    # --- Generation ---

    async def generate(self) -> ReportResult | None:
        """Fetch and format the selected report.

        Returns the new result, or None when the request failed or a newer
        request superseded it.
        """
        request = self._state.request
        if not request.has_valid_range:
            error = InvalidDateRangeError(
                request.start_date.isoformat(), request.end_date.isoformat()
            )
            logger.warning("report_request_rejected", **error.to_dict())
            self._apply(reject_request(self._state, error.message))
            self._notify(error.message, type="negative")
            return None

        state, request_id = begin_fetch(self._state)
        self._apply(state)

        with LogContext(report_type=request.report_type.value, request_id=request_id):
            try:
                raw = await self._fetcher.fetch(request.report_type, request)
                result = self._formatter.format(request.report_type, raw, request)
            except LedgerReportsError as e:
                if request_id != self._state.latest_request_id:
                    logger.info("stale_report_error_discarded", error=e.message)
                    return None
                logger.warning("report_generation_failed", **e.to_dict())
                self._apply(fail_fetch(self._state, request_id, e.message))
                self._notify(f"Failed to generate report: {e.message}", type="negative")
                return None

            if request_id != self._state.latest_request_id:
                logger.info(
                    "stale_report_discarded", latest_request_id=self._state.latest_request_id
                )
                return None

            self._apply(complete_fetch(self._state, request_id, result))
            logger.info("report_generated", rows=len(result.rows))
            self._notify(f"{result.title} generated", type="positive")
            return result

    def preview(self) -> str:
        return self._renderer.render(self._state.result)

    # --- Client-side exports ---

    async def export(self, export_format: ExportFormat | str) -> Path | None:
        """Export the held result; returns the written path or None."""
        export_format = ExportFormat(export_format)
        label = _FORMAT_LABELS[export_format]
        result = self._state.result
        options = ExportOptions.from_request(
            self._state.displayed_request, export_format, self.export_dir
        )

        try:
            if result is not None:
                self._notify(f"Exporting {result.title} to {label}...", type="info")
            path = await asyncio.to_thread(self._exporter.export, result, options)
        except NoReportDataError as e:
            logger.info("export_refused", format=export_format.value, reason=e.message)
            self._notify(e.message, type="warning")
            return None
        except ExportError as e:
            self._notify(e.message, type="negative")
            return None

        self._notify(f"{label} export saved to {path}", type="positive")
        return path

    async def export_pdf(self) -> Path | None:
        return await self.export(ExportFormat.PDF)

    async def export_excel(self) -> Path | None:
        return await self.export(ExportFormat.EXCEL)

    async def export_csv(self) -> Path | None:
        return await self.export(ExportFormat.CSV)

    async def export_json(self) -> Path | None:
        return await self.export(ExportFormat.JSON)

    async def _generate_one(
        self, report_type: ReportType, request: ReportRequest
    ) -> ReportResult:
        request = replace(request, report_type=report_type)
        raw = await self._fetcher.fetch(report_type, request)
        return self._formatter.format(report_type, raw, request)

    async def export_all(self) -> Path | None:
        """Generate every report type for the current period into one PDF.

        Types that fail are skipped and listed in the final notification.
        """
        request = self._state.request
        if not request.has_valid_range:
            error = InvalidDateRangeError(
                request.start_date.isoformat(), request.end_date.isoformat()
            )
            self._notify(error.message, type="negative")
            return None

        self._notify("Generating all reports...", type="info")
        report_types = list(ReportType)
        outcomes = await asyncio.gather(
            *(self._generate_one(rt, request) for rt in report_types),
            return_exceptions=True,
        )

        results: list[ReportResult] = []
        skipped: list[ReportType] = []
        for report_type, outcome in zip(report_types, outcomes):
            if isinstance(outcome, LedgerReportsError):
                logger.warning(
                    "report_skipped", report_type=report_type.value, error=outcome.message
                )
                skipped.append(report_type)
            elif isinstance(outcome, Exception):
                logger.error(
                    "report_skipped_unexpected",
                    report_type=report_type.value,
                    exc_info=outcome,
                )
                skipped.append(report_type)
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                results.append(outcome)

        try:
            path = await asyncio.to_thread(
                self._exporter.export_all,
                results,
                request.start_date,
                request.end_date,
                self.export_dir,
            )
        except (NoReportDataError, ExportError) as e:
            self._notify(e.message, type="negative")
            return None

        message = f"Exported {len(results)} reports to {path}"
        if skipped:
            names = ", ".join(rt.title for rt in skipped)
            self._notify(f"{message} (skipped: {names})", type="warning")
        else:
            self._notify(message, type="positive")
        return path

    # --- Server-side exports ---

    async def export_from_server(self, export_format: ExportFormat | str) -> Path | None:
        """Download the backend's rendering of the selected report."""
        export_format = ExportFormat(export_format)
        if self._client is None:
            self._notify("Server-side export is not available", type="warning")
            return None
        if not export_format.server_rendered:
            label = _FORMAT_LABELS[export_format]
            self._notify(f"The server does not provide {label} exports", type="warning")
            return None

        options = ExportOptions.from_request(
            self._state.request, export_format, self.export_dir
        )
        self._notify(
            f"Downloading {_FORMAT_LABELS[export_format]} from server...", type="info"
        )
        try:
            content = await self._client.export_report(options)
            path = await asyncio.to_thread(self._exporter.save_download, content, options)
        except (ReportFetchError, ExportError) as e:
            logger.warning("server_export_failed", **e.to_dict())
            self._notify(f"Export failed: {e.message}", type="negative")
            return None

        self._notify(f"Saved {path.name}", type="positive")
        return path
