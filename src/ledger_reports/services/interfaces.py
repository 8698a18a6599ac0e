from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import date
from pathlib import Path

from ledger_reports.api.schemas import RawReportData
from ledger_reports.domain.reports import (
    ExportOptions,
    ReportRequest,
    ReportResult,
    ReportType,
)


class ReportDataFetcher(ABC):
    @abstractmethod
    async def fetch(
        self, report_type: ReportType | str, request: ReportRequest
    ) -> RawReportData:
        pass


class ReportFormatter(ABC):
    @abstractmethod
    def format(
        self,
        report_type: ReportType | str,
        raw: RawReportData,
        request: ReportRequest | None = None,
    ) -> ReportResult:
        pass


class ReportPreviewRenderer(ABC):
    @abstractmethod
    def render(self, result: ReportResult | None) -> str:
        pass


class ReportExporter(ABC):
    @abstractmethod
    def export(self, result: ReportResult | None, options: ExportOptions) -> Path:
        pass

    @abstractmethod
    def export_pdf(self, result: ReportResult | None, options: ExportOptions) -> Path:
        pass

    @abstractmethod
    def export_excel(self, result: ReportResult | None, options: ExportOptions) -> Path:
        pass

    @abstractmethod
    def export_csv(self, result: ReportResult | None, options: ExportOptions) -> Path:
        pass

    @abstractmethod
    def export_json(self, result: ReportResult | None, options: ExportOptions) -> Path:
        pass

    @abstractmethod
    def export_all(
        self,
        results: Sequence[ReportResult],
        start_date: date,
        end_date: date,
        output_dir: Path,
    ) -> Path:
        pass

    @abstractmethod
    def save_download(self, content: bytes, options: ExportOptions) -> Path:
        pass
