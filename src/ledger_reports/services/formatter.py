from __future__ import annotations

from collections.abc import Callable, Iterable
from decimal import Decimal
from typing import Any

from ledger_reports.api.schemas import (
    PAYLOAD_MODELS,
    AccountBalance,
    AccountSummaryData,
    AgingAnalysisData,
    BalanceSheetData,
    CashFlowActivity,
    CashFlowData,
    ChartOfAccountsData,
    GeneralLedgerData,
    JournalEntriesData,
    JournalEntry,
    ProfitLossData,
    RawReportData,
    StatementSection,
    TrialBalanceData,
)
from ledger_reports.config import get_settings
from ledger_reports.domain.formatting import (
    EMPTY_CELL,
    format_count,
    format_currency,
    format_currency_or_dash,
    format_percentage,
    is_balanced,
)
from ledger_reports.domain.reports import (
    AccountFilter,
    ReportRequest,
    ReportResult,
    ReportType,
)
from ledger_reports.exceptions import MalformedReportDataError, UnsupportedReportTypeError
from ledger_reports.logging_config import get_logger
from ledger_reports.services.interfaces import ReportFormatter

logger = get_logger(__name__)

ZERO = Decimal("0")
BLANK_ROW = ("", "")

# Ordering used when grouping accounts by type
_TYPE_ORDER: dict[str, int] = {
    "asset": 0,
    "liability": 1,
    "equity": 2,
    "revenue": 3,
    "income": 3,
    "expense": 4,
}

AGING_BUCKETS: tuple[tuple[str, str], ...] = (
    ("current", "Current (0-30 days)"),
    ("thirty_days", "31-60 days"),
    ("sixty_days", "61-90 days"),
    ("ninety_days", "Over 90 days"),
)


def _sum(values: Iterable[Decimal]) -> Decimal:
    return sum(values, ZERO)


class ReportFormatterImpl(ReportFormatter):
    """Maps raw backend payloads to the generic ReportResult table.

    Column layouts and labels are fixed per report type; amounts are rendered
    once here and reused verbatim by the preview and every export format.
    """

    def __init__(self, currency_label: str | None = None) -> None:
        self._label = (
            currency_label if currency_label is not None else get_settings().currency_label
        )
        self._handlers: dict[
            ReportType,
            Callable[[Any, ReportRequest | None], ReportResult],
        ] = {
            ReportType.TRIAL_BALANCE: self._trial_balance,
            ReportType.PROFIT_LOSS: self._profit_loss,
            ReportType.BALANCE_SHEET: self._balance_sheet,
            ReportType.CASH_FLOW: self._cash_flow,
            ReportType.CHART_OF_ACCOUNTS: self._chart_of_accounts,
            ReportType.JOURNAL_ENTRIES: self._journal_entries,
            ReportType.GENERAL_LEDGER: self._general_ledger,
            ReportType.ACCOUNT_SUMMARY: self._account_summary,
            ReportType.AGING_ANALYSIS: self._aging_analysis,
        }

    @property
    def currency_label(self) -> str:
        return self._label

    def format(
        self,
        report_type: ReportType | str,
        raw: RawReportData,
        request: ReportRequest | None = None,
    ) -> ReportResult:
        report_type = ReportType.parse(report_type)
        handler = self._handlers.get(report_type)
        if handler is None:
            raise UnsupportedReportTypeError(report_type.value)

        expected = PAYLOAD_MODELS[report_type]
        if not isinstance(raw, expected):
            raise MalformedReportDataError(
                report_type.value,
                f"expected {expected.__name__}, got {type(raw).__name__}",
            )

        result = handler(raw, request)
        logger.debug(
            "report_formatted",
            report_type=report_type.value,
            rows=len(result.rows),
            has_totals=result.totals is not None,
        )
        return result

    # ------------------------------------------------------------------ helpers

    def _money(self, value: Decimal) -> str:
        return format_currency(value, self._label)

    def _money_or_dash(self, value: Decimal) -> str:
        return format_currency_or_dash(value, self._label)

    @staticmethod
    def _account_filter(request: ReportRequest | None) -> AccountFilter:
        return request.account_filter if request is not None else AccountFilter.ALL

    def _select_accounts(
        self,
        accounts: list[AccountBalance],
        request: ReportRequest | None,
        *,
        is_zero: Callable[[AccountBalance], bool],
    ) -> list[AccountBalance]:
        account_filter = self._account_filter(request)
        include_zero = request.include_zero_balance if request is not None else True

        selected = [
            a
            for a in accounts
            if account_filter.matches(a.type) and (include_zero or not is_zero(a))
        ]
        if request is not None and request.group_by_account_type:
            selected.sort(key=lambda a: _TYPE_ORDER.get(a.type.strip().lower(), 99))
        return selected

    def _section_rows(
        self, heading: str, section: StatementSection, total_label: str
    ) -> list[tuple[str, str]]:
        rows = [(heading, "")]
        rows.extend((a.name, self._money(a.amount)) for a in section.accounts)
        rows.append((total_label, self._money(section.total)))
        return rows

    # ------------------------------------------------------------ report types

    def _trial_balance(
        self, data: TrialBalanceData, request: ReportRequest | None
    ) -> ReportResult:
        accounts = self._select_accounts(
            data.accounts, request, is_zero=lambda a: a.debit == 0 and a.credit == 0
        )
        total_debits = _sum(a.debit for a in accounts)
        total_credits = _sum(a.credit for a in accounts)

        return ReportResult.build(
            ReportType.TRIAL_BALANCE,
            ReportType.TRIAL_BALANCE.title,
            ["Account Code", "Account Name", "Debit Balance", "Credit Balance"],
            [
                (
                    a.code,
                    a.name,
                    self._money_or_dash(a.debit),
                    self._money_or_dash(a.credit),
                )
                for a in accounts
            ],
            totals=["Total", "", self._money(total_debits), self._money(total_credits)],
            summary={
                "isBalanced": is_balanced(total_debits, total_credits),
                "accountCount": len(accounts),
                "totalDebits": total_debits,
                "totalCredits": total_credits,
            },
        )

    def _profit_loss(
        self, data: ProfitLossData, request: ReportRequest | None
    ) -> ReportResult:
        revenue = data.revenue.total
        expenses = data.expenses.total
        net_income = revenue - expenses
        margin = (net_income / revenue * 100) if revenue != 0 else ZERO

        rows: list[tuple[str, str]] = []
        rows.extend(self._section_rows("REVENUE", data.revenue, "Total Revenue"))
        rows.append(BLANK_ROW)
        rows.extend(self._section_rows("EXPENSES", data.expenses, "Total Expenses"))
        rows.append(BLANK_ROW)
        rows.append(("NET INCOME", self._money(net_income)))
        rows.append(("Profit Margin", format_percentage(margin)))

        return ReportResult.build(
            ReportType.PROFIT_LOSS,
            ReportType.PROFIT_LOSS.title,
            ["Account", "Amount"],
            rows,
            summary={
                "totalRevenue": revenue,
                "totalExpenses": expenses,
                "netIncome": net_income,
                "profitMargin": margin,
            },
        )

    def _balance_sheet(
        self, data: BalanceSheetData, request: ReportRequest | None
    ) -> ReportResult:
        total_assets = data.assets.total
        total_liabilities = data.liabilities.total
        total_equity = data.equity.total
        liabilities_and_equity = total_liabilities + total_equity

        rows: list[tuple[str, str]] = []
        rows.extend(self._section_rows("ASSETS", data.assets, "Total Assets"))
        rows.append(BLANK_ROW)
        rows.extend(
            self._section_rows("LIABILITIES", data.liabilities, "Total Liabilities")
        )
        rows.append(BLANK_ROW)
        rows.extend(self._section_rows("EQUITY", data.equity, "Total Equity"))
        rows.append(BLANK_ROW)
        rows.append(("Total Liabilities + Equity", self._money(liabilities_and_equity)))

        as_of = data.as_of_date or (
            request.effective_as_of_date if request is not None else None
        )
        title = ReportType.BALANCE_SHEET.title
        if as_of is not None:
            title = f"{title} as of {as_of.isoformat()}"

        return ReportResult.build(
            ReportType.BALANCE_SHEET,
            title,
            ["Account", "Amount"],
            rows,
            summary={
                "totalAssets": total_assets,
                "totalLiabilities": total_liabilities,
                "totalEquity": total_equity,
                "isBalanced": is_balanced(total_assets, liabilities_and_equity),
            },
        )

    def _cash_flow(self, data: CashFlowData, request: ReportRequest | None) -> ReportResult:
        categories: tuple[tuple[str, CashFlowActivity], ...] = (
            ("Operating", data.operating_activities),
            ("Investing", data.investing_activities),
            ("Financing", data.financing_activities),
        )

        rows: list[tuple[str, str]] = []
        for name, activity in categories:
            rows.append((f"{name.upper()} ACTIVITIES", ""))
            rows.append(("Cash Inflows", self._money(activity.inflows)))
            rows.append(("Cash Outflows", self._money(activity.outflows)))
            rows.append(
                (f"Net Cash from {name} Activities", self._money(activity.net))
            )
            rows.append(BLANK_ROW)

        net_change = _sum(activity.net for _, activity in categories)
        beginning = data.beginning_cash
        ending = data.ending_cash if data.ending_cash is not None else beginning + net_change

        rows.append(("Net Change in Cash", self._money(net_change)))
        rows.append(("Beginning Cash", self._money(beginning)))
        rows.append(("Ending Cash", self._money(ending)))

        return ReportResult.build(
            ReportType.CASH_FLOW,
            ReportType.CASH_FLOW.title,
            ["Activity", "Amount"],
            rows,
            summary={
                "netOperating": data.operating_activities.net,
                "netInvesting": data.investing_activities.net,
                "netFinancing": data.financing_activities.net,
                "totalCashFlow": net_change,
                "beginningCash": beginning,
                "endingCash": ending,
            },
        )

    def _chart_of_accounts(
        self, data: ChartOfAccountsData, request: ReportRequest | None
    ) -> ReportResult:
        accounts = self._select_accounts(
            data.accounts, request, is_zero=lambda a: a.balance == 0
        )
        rows = [
            (
                a.code,
                a.name,
                a.type.title(),
                self._money(abs(a.balance)) if a.balance != 0 else EMPTY_CELL,
            )
            for a in accounts
        ]

        return ReportResult.build(
            ReportType.CHART_OF_ACCOUNTS,
            ReportType.CHART_OF_ACCOUNTS.title,
            ["Account Code", "Account Name", "Account Type", "Balance"],
            rows,
            summary={
                "accountCount": len(accounts),
                "activeCount": sum(1 for a in accounts if a.is_active),
            },
        )

    def _entry_description(self, entry: JournalEntry, request: ReportRequest | None) -> str:
        if request is None or not request.show_transaction_details:
            return entry.description
        account = " ".join(p for p in (entry.account_code, entry.account_name) if p)
        if not account:
            return entry.description
        return f"{entry.description} ({account})" if entry.description else account

    def _journal_entries(
        self, data: JournalEntriesData, request: ReportRequest | None
    ) -> ReportResult:
        entries = sorted(data.entries, key=lambda e: e.entry_date)
        total_debits = _sum(e.debit for e in entries)
        total_credits = _sum(e.credit for e in entries)

        rows = [
            (
                e.entry_date.isoformat(),
                e.reference or "",
                self._entry_description(e, request),
                self._money_or_dash(e.debit),
                self._money_or_dash(e.credit),
            )
            for e in entries
        ]

        return ReportResult.build(
            ReportType.JOURNAL_ENTRIES,
            ReportType.JOURNAL_ENTRIES.title,
            ["Date", "Reference", "Description", "Debit", "Credit"],
            rows,
            totals=[
                "Total",
                "",
                "",
                self._money(total_debits),
                self._money(total_credits),
            ],
            summary={
                "entryCount": len(entries),
                "totalDebits": total_debits,
                "totalCredits": total_credits,
                "isBalanced": is_balanced(total_debits, total_credits),
            },
        )

    def _general_ledger(
        self, data: GeneralLedgerData, request: ReportRequest | None
    ) -> ReportResult:
        lines = sorted(data.entries, key=lambda line: line.entry_date)
        balance = data.beginning_balance

        rows: list[tuple[str, ...]] = [
            ("", "", "Opening Balance", EMPTY_CELL, EMPTY_CELL, self._money(balance))
        ]
        for line in lines:
            balance = balance + line.debit - line.credit
            rows.append(
                (
                    line.entry_date.isoformat(),
                    line.reference or "",
                    line.description,
                    self._money_or_dash(line.debit),
                    self._money_or_dash(line.credit),
                    self._money(balance),
                )
            )

        total_debits = _sum(line.debit for line in lines)
        total_credits = _sum(line.credit for line in lines)

        return ReportResult.build(
            ReportType.GENERAL_LEDGER,
            f"{ReportType.GENERAL_LEDGER.title} - {data.account_code} {data.account_name}",
            ["Date", "Reference", "Description", "Debit", "Credit", "Balance"],
            rows,
            totals=[
                "Total",
                "",
                "",
                self._money(total_debits),
                self._money(total_credits),
                self._money(balance),
            ],
            summary={
                "accountCode": data.account_code,
                "accountName": data.account_name,
                "entryCount": len(lines),
                "beginningBalance": data.beginning_balance,
                "endingBalance": balance,
            },
        )

    def _account_summary(
        self, data: AccountSummaryData, request: ReportRequest | None
    ) -> ReportResult:
        account_filter = self._account_filter(request)
        groups = [s for s in data.summary if account_filter.matches(s.type)]
        groups.sort(key=lambda s: _TYPE_ORDER.get(s.type.strip().lower(), 99))

        total_count = sum(s.count for s in groups)
        total_debit = _sum(s.total_debit for s in groups)
        total_credit = _sum(s.total_credit for s in groups)

        return ReportResult.build(
            ReportType.ACCOUNT_SUMMARY,
            ReportType.ACCOUNT_SUMMARY.title,
            ["Account Type", "Accounts", "Total Debit", "Total Credit"],
            [
                (
                    s.type.title(),
                    format_count(s.count),
                    self._money(s.total_debit),
                    self._money(s.total_credit),
                )
                for s in groups
            ],
            totals=[
                "Total",
                format_count(total_count),
                self._money(total_debit),
                self._money(total_credit),
            ],
            summary={
                "typeCount": len(groups),
                "accountCount": total_count,
                "totalDebit": total_debit,
                "totalCredit": total_credit,
            },
        )

    def _aging_analysis(
        self, data: AgingAnalysisData, request: ReportRequest | None
    ) -> ReportResult:
        buckets = [(label, getattr(data, field)) for field, label in AGING_BUCKETS]
        total_count = sum(bucket.count for _, bucket in buckets)
        total_amount = _sum(bucket.amount for _, bucket in buckets)

        summary: dict[str, Any] = {
            "totalCount": total_count,
            "totalAmount": total_amount,
        }
        if request is not None:
            summary["agingType"] = request.aging_type.value

        return ReportResult.build(
            ReportType.AGING_ANALYSIS,
            ReportType.AGING_ANALYSIS.title,
            ["Aging Period", "Count", "Amount"],
            [
                (label, format_count(bucket.count), self._money(bucket.amount))
                for label, bucket in buckets
            ],
            totals=[
                "Total Outstanding",
                format_count(total_count),
                self._money(total_amount),
            ],
            summary=summary,
        )
