"""Pydantic v2 schemas for the backend's report payloads.

One model per report type. Together they form a union discriminated by
ReportType: the fetcher validates every payload against the model for the
report it asked for, so a payload missing a field is rejected instead of
being papered over.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from ledger_reports.domain.reports import ReportType
from ledger_reports.exceptions import MalformedReportDataError


class _Payload(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


class _Dated(_Payload):
    generated_at: datetime | None = None


# Shared pieces
class AccountBalance(_Payload):
    code: str
    name: str
    type: str = ""
    debit: Decimal = Decimal("0")
    credit: Decimal = Decimal("0")
    balance: Decimal = Decimal("0")
    is_active: bool = True

    @field_validator("code", mode="before")
    @classmethod
    def coerce_code(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v


class AccountAmount(_Payload):
    name: str
    amount: Decimal
    code: str | None = None

    @field_validator("code", mode="before")
    @classmethod
    def coerce_code(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v


class StatementSection(_Payload):
    accounts: list[AccountAmount] = Field(default_factory=list)
    total: Decimal


class CashFlowActivity(_Payload):
    inflows: Decimal
    outflows: Decimal
    net: Decimal


class AgingBucket(_Payload):
    count: int
    amount: Decimal


# Per-report payloads
class TrialBalanceData(_Dated):
    accounts: list[AccountBalance]
    total_debits: Decimal | None = None
    total_credits: Decimal | None = None
    is_balanced: bool | None = None


class ProfitLossData(_Dated):
    revenue: StatementSection
    expenses: StatementSection
    net_income: Decimal | None = None
    profit_margin: Decimal | None = None


class BalanceSheetData(_Dated):
    assets: StatementSection
    liabilities: StatementSection
    equity: StatementSection
    is_balanced: bool | None = None
    as_of_date: date | None = None


class CashFlowData(_Dated):
    operating_activities: CashFlowActivity
    investing_activities: CashFlowActivity
    financing_activities: CashFlowActivity
    beginning_cash: Decimal
    ending_cash: Decimal | None = None
    total_cash_flow: Decimal | None = None


class ChartOfAccountsData(_Dated):
    accounts: list[AccountBalance]


class JournalEntry(_Payload):
    id: str | int
    entry_date: date = Field(alias="date")
    description: str = ""
    reference: str | None = None
    debit: Decimal = Decimal("0")
    credit: Decimal = Decimal("0")
    account_code: str | None = None
    account_name: str | None = None

    @field_validator("entry_date", mode="before")
    @classmethod
    def strip_time(cls, v: Any) -> Any:
        # Backend dates may arrive as full ISO timestamps
        if isinstance(v, str) and "T" in v:
            return v.split("T", 1)[0]
        return v


class JournalEntriesData(_Dated):
    entries: list[JournalEntry]
    total_entries: int | None = None


class LedgerLine(_Payload):
    entry_date: date = Field(alias="date")
    description: str = ""
    reference: str | None = None
    debit: Decimal = Decimal("0")
    credit: Decimal = Decimal("0")

    @field_validator("entry_date", mode="before")
    @classmethod
    def strip_time(cls, v: Any) -> Any:
        if isinstance(v, str) and "T" in v:
            return v.split("T", 1)[0]
        return v


class GeneralLedgerData(_Dated):
    account_code: str
    account_name: str
    entries: list[LedgerLine]
    beginning_balance: Decimal = Decimal("0")
    ending_balance: Decimal | None = None


class AccountTypeSummary(_Payload):
    type: str
    count: int
    total_debit: Decimal
    total_credit: Decimal


class AccountSummaryData(_Dated):
    summary: list[AccountTypeSummary]


class AgingAnalysisData(_Dated):
    current: AgingBucket
    thirty_days: AgingBucket
    sixty_days: AgingBucket
    ninety_days: AgingBucket
    total: AgingBucket | None = None


RawReportData = Union[
    TrialBalanceData,
    ProfitLossData,
    BalanceSheetData,
    CashFlowData,
    ChartOfAccountsData,
    JournalEntriesData,
    GeneralLedgerData,
    AccountSummaryData,
    AgingAnalysisData,
]


PAYLOAD_MODELS: dict[ReportType, type[_Dated]] = {
    ReportType.TRIAL_BALANCE: TrialBalanceData,
    ReportType.PROFIT_LOSS: ProfitLossData,
    ReportType.BALANCE_SHEET: BalanceSheetData,
    ReportType.CASH_FLOW: CashFlowData,
    ReportType.CHART_OF_ACCOUNTS: ChartOfAccountsData,
    ReportType.JOURNAL_ENTRIES: JournalEntriesData,
    ReportType.GENERAL_LEDGER: GeneralLedgerData,
    ReportType.ACCOUNT_SUMMARY: AccountSummaryData,
    ReportType.AGING_ANALYSIS: AgingAnalysisData,
}


def parse_payload(report_type: ReportType, payload: Any) -> RawReportData:
    """Validate a decoded JSON payload against the model for report_type."""
    model = PAYLOAD_MODELS[report_type]
    if not isinstance(payload, dict):
        raise MalformedReportDataError(
            report_type.value, f"expected a JSON object, got {type(payload).__name__}"
        )
    try:
        return model.model_validate(payload)  # type: ignore[return-value]
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise MalformedReportDataError(
            report_type.value, f"{location}: {first['msg']}"
        ) from e
