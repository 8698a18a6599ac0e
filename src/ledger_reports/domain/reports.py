from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any

from ledger_reports.exceptions import ReportShapeError, UnsupportedReportTypeError


class ReportType(str, Enum):
    TRIAL_BALANCE = "trial-balance"
    PROFIT_LOSS = "profit-loss"
    BALANCE_SHEET = "balance-sheet"
    CASH_FLOW = "cash-flow"
    CHART_OF_ACCOUNTS = "chart-of-accounts"
    JOURNAL_ENTRIES = "journal-entries"
    GENERAL_LEDGER = "general-ledger"
    ACCOUNT_SUMMARY = "account-summary"
    AGING_ANALYSIS = "aging-analysis"

    @property
    def title(self) -> str:
        return _REPORT_TITLES[self]

    @classmethod
    def parse(cls, value: ReportType | str) -> ReportType:
        """Convert a raw value, raising UnsupportedReportTypeError if unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value))
        except ValueError as e:
            raise UnsupportedReportTypeError(value) from e


_REPORT_TITLES: dict[ReportType, str] = {
    ReportType.TRIAL_BALANCE: "Trial Balance",
    ReportType.PROFIT_LOSS: "Profit & Loss Statement",
    ReportType.BALANCE_SHEET: "Balance Sheet",
    ReportType.CASH_FLOW: "Cash Flow Statement",
    ReportType.CHART_OF_ACCOUNTS: "Chart of Accounts",
    ReportType.JOURNAL_ENTRIES: "Journal Entries",
    ReportType.GENERAL_LEDGER: "General Ledger",
    ReportType.ACCOUNT_SUMMARY: "Account Summary",
    ReportType.AGING_ANALYSIS: "Aging Analysis",
}


class AccountFilter(str, Enum):
    ALL = "all"
    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"

    def matches(self, account_type: str | None) -> bool:
        if self is AccountFilter.ALL:
            return True
        return (account_type or "").strip().lower() == self.value


class AgingType(str, Enum):
    RECEIVABLES = "receivables"
    PAYABLES = "payables"


class ExportFormat(str, Enum):
    PDF = "pdf"
    EXCEL = "excel"
    CSV = "csv"
    JSON = "json"

    @property
    def extension(self) -> str:
        return "xlsx" if self is ExportFormat.EXCEL else self.value

    @property
    def server_rendered(self) -> bool:
        """Whether the backend has an export endpoint for this format."""
        return self in (ExportFormat.PDF, ExportFormat.EXCEL)


def _flag(value: bool) -> str:
    return "true" if value else "false"


@dataclass(frozen=True, slots=True)
class ReportRequest:
    """Everything the user selected for one report generation.

    Immutable; use dataclasses.replace (or the controller's transition
    functions) to derive a changed request.
    """

    report_type: ReportType
    start_date: date
    end_date: date
    account_filter: AccountFilter = AccountFilter.ALL
    include_zero_balance: bool = True
    show_transaction_details: bool = False
    group_by_account_type: bool = False
    as_of_date: date | None = None
    account_id: str | None = None
    aging_type: AgingType = AgingType.RECEIVABLES

    @property
    def effective_as_of_date(self) -> date:
        return self.as_of_date if self.as_of_date is not None else self.end_date

    @property
    def has_valid_range(self) -> bool:
        return self.start_date <= self.end_date

    def to_query_params(self) -> dict[str, str]:
        params: dict[str, str] = {
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
        }
        if self.account_filter is not AccountFilter.ALL:
            params["accountFilter"] = self.account_filter.value
        params["includeZeroBalance"] = _flag(self.include_zero_balance)
        params["showTransactionDetails"] = _flag(self.show_transaction_details)
        params["groupByAccountType"] = _flag(self.group_by_account_type)
        return params


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class ReportResult:
    """Generic tabular report: what is shown on screen is what gets exported.

    Every row, and the totals row when present, has exactly one cell per header.
    """

    report_type: ReportType
    title: str
    headers: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...]
    totals: tuple[str, ...] | None = None
    summary: Mapping[str, Any] = field(default_factory=dict)
    generated_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        width = len(self.headers)
        if width == 0:
            raise ReportShapeError(f"{self.title}: report has no headers")
        for index, row in enumerate(self.rows):
            if len(row) != width:
                raise ReportShapeError(
                    f"{self.title}: row {index} has {len(row)} cells, expected {width}",
                    context={"row": index, "cells": len(row), "headers": width},
                )
        if self.totals is not None and len(self.totals) != width:
            raise ReportShapeError(
                f"{self.title}: totals row has {len(self.totals)} cells, expected {width}",
                context={"cells": len(self.totals), "headers": width},
            )
        object.__setattr__(self, "summary", MappingProxyType(dict(self.summary)))

    @classmethod
    def build(
        cls,
        report_type: ReportType,
        title: str,
        headers: Sequence[str],
        rows: Iterable[Sequence[str]],
        totals: Sequence[str] | None = None,
        summary: Mapping[str, Any] | None = None,
    ) -> ReportResult:
        return cls(
            report_type=report_type,
            title=title,
            headers=tuple(headers),
            rows=tuple(tuple(row) for row in rows),
            totals=tuple(totals) if totals is not None else None,
            summary=summary or {},
        )

    @property
    def is_empty(self) -> bool:
        return not self.rows

    def table(self, *, include_totals: bool = True) -> list[list[str]]:
        """Headers, rows and (optionally) totals as one list of lists."""
        out = [list(self.headers)]
        out.extend(list(row) for row in self.rows)
        if include_totals and self.totals is not None:
            out.append(list(self.totals))
        return out


@dataclass(frozen=True, slots=True)
class ExportOptions:
    format: ExportFormat
    report_type: ReportType
    start_date: date
    end_date: date
    account_filter: AccountFilter = AccountFilter.ALL
    as_of_date: date | None = None
    output_dir: Path = Path("exports")

    @classmethod
    def from_request(
        cls, request: ReportRequest, export_format: ExportFormat, output_dir: Path
    ) -> ExportOptions:
        return cls(
            format=export_format,
            report_type=request.report_type,
            start_date=request.start_date,
            end_date=request.end_date,
            account_filter=request.account_filter,
            as_of_date=request.as_of_date,
            output_dir=output_dir,
        )

    @property
    def filename(self) -> str:
        return export_filename(
            self.report_type.value, self.start_date, self.end_date, self.format
        )

    @property
    def path(self) -> Path:
        return self.output_dir / self.filename

    def to_query_params(self) -> dict[str, str]:
        params: dict[str, str] = {
            "format": self.format.value,
            "reportType": self.report_type.value,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "accountFilter": self.account_filter.value,
        }
        if self.as_of_date is not None:
            params["asOfDate"] = self.as_of_date.isoformat()
        return params


def export_filename(
    report_kind: str, start_date: date, end_date: date, export_format: ExportFormat
) -> str:
    """`<reportKind>_<startDate>_to_<endDate>.<ext>`."""
    return (
        f"{report_kind}_{start_date.isoformat()}_to_{end_date.isoformat()}"
        f".{export_format.extension}"
    )
