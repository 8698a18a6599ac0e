"""Tests for mapping backend payloads to report tables."""

from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from ledger_reports.api.schemas import parse_payload
from ledger_reports.domain.formatting import format_percentage
from ledger_reports.domain.reports import AccountFilter, AgingType, ReportType
from ledger_reports.exceptions import MalformedReportDataError, UnsupportedReportTypeError
from ledger_reports.services.formatter import ReportFormatterImpl


@pytest.fixture
def formatter() -> ReportFormatterImpl:
    return ReportFormatterImpl(currency_label="EGP")


def _format(formatter, kind, raw, request=None):
    report_type = ReportType(kind)
    return formatter.format(report_type, parse_payload(report_type, raw), request)


class TestShape:
    @pytest.mark.parametrize("report_type", list(ReportType))
    def test_every_row_matches_headers(self, formatter, payload, january, report_type):
        request = replace(january, report_type=report_type)

        result = _format(formatter, report_type.value, payload(report_type.value), request)

        assert result.report_type is report_type
        assert result.headers
        for row in result.rows:
            assert len(row) == len(result.headers)
        if result.totals is not None:
            assert len(result.totals) == len(result.headers)

    def test_unknown_type_raises(self, formatter, payload):
        raw = parse_payload(ReportType.TRIAL_BALANCE, payload("trial-balance"))

        with pytest.raises(UnsupportedReportTypeError):
            formatter.format("budget-variance", raw)

    def test_payload_of_wrong_type_raises(self, formatter, payload):
        raw = parse_payload(ReportType.TRIAL_BALANCE, payload("trial-balance"))

        with pytest.raises(MalformedReportDataError):
            formatter.format(ReportType.PROFIT_LOSS, raw)

    def test_currency_label_applies(self, payload):
        result = _format(
            ReportFormatterImpl(currency_label="USD"), "aging-analysis", payload("aging-analysis")
        )

        assert result.totals == ("Total Outstanding", "3", "USD 9,000.00")


class TestTrialBalance:
    def test_single_account(self, formatter):
        raw = {"accounts": [{"code": "1000", "name": "Cash", "debit": 50000, "credit": 0}]}

        result = _format(formatter, "trial-balance", raw)

        assert result.headers == (
            "Account Code",
            "Account Name",
            "Debit Balance",
            "Credit Balance",
        )
        assert result.rows == (("1000", "Cash", "EGP 50,000.00", "-"),)
        assert result.totals == ("Total", "", "EGP 50,000.00", "EGP 0.00")
        assert result.summary["isBalanced"] is False

    def test_balanced_sample(self, formatter, payload):
        result = _format(formatter, "trial-balance", payload("trial-balance"))

        assert len(result.rows) == 4
        assert result.totals == ("Total", "", "EGP 50,000.00", "EGP 50,000.00")
        assert result.summary["isBalanced"] is True
        assert result.summary["accountCount"] == 4

    def test_account_filter(self, formatter, payload, january):
        request = replace(january, account_filter=AccountFilter.LIABILITY)

        result = _format(formatter, "trial-balance", payload("trial-balance"), request)

        assert [row[0] for row in result.rows] == ["2000"]
        assert result.totals == ("Total", "", "EGP 0.00", "EGP 20,000.00")

    def test_exclude_zero_balances(self, formatter, payload, january):
        request = replace(january, include_zero_balance=False)

        result = _format(formatter, "trial-balance", payload("trial-balance"), request)

        assert "1500" not in [row[0] for row in result.rows]

    def test_group_by_account_type(self, formatter, january):
        raw = {
            "accounts": [
                {"code": "5000", "name": "Rent", "type": "expense", "debit": 10},
                {"code": "1000", "name": "Cash", "type": "asset", "debit": 10},
                {"code": "4000", "name": "Sales", "type": "revenue", "credit": 20},
            ]
        }
        request = replace(january, group_by_account_type=True)

        result = _format(formatter, "trial-balance", raw, request)

        assert [row[0] for row in result.rows] == ["1000", "4000", "5000"]

    def test_empty(self, formatter):
        result = _format(formatter, "trial-balance", {"accounts": []})

        assert result.is_empty
        assert result.totals == ("Total", "", "EGP 0.00", "EGP 0.00")


class TestProfitLoss:
    def test_net_income_and_margin(self, formatter, payload):
        result = _format(formatter, "profit-loss", payload("profit-loss"))

        assert ("NET INCOME", "EGP 78,000.00") in result.rows
        assert ("Profit Margin", "43.33%") in result.rows
        assert result.summary["netIncome"] == Decimal("78000")
        assert format_percentage(result.summary["profitMargin"]) == "43.33%"
        assert result.totals is None

    def test_sections(self, formatter, payload):
        result = _format(formatter, "profit-loss", payload("profit-loss"))

        assert result.rows[:3] == (
            ("REVENUE", ""),
            ("Sales", "EGP 180,000.00"),
            ("Total Revenue", "EGP 180,000.00"),
        )
        assert ("Total Expenses", "EGP 102,000.00") in result.rows

    def test_zero_revenue_margin(self, formatter):
        raw = {
            "revenue": {"accounts": [], "total": 0},
            "expenses": {"accounts": [{"name": "Rent", "amount": 500}], "total": 500},
        }

        result = _format(formatter, "profit-loss", raw)

        assert ("Profit Margin", "0.00%") in result.rows
        assert ("NET INCOME", "EGP -500.00") in result.rows


class TestBalanceSheet:
    def test_sections_and_balance(self, formatter, payload):
        result = _format(formatter, "balance-sheet", payload("balance-sheet"))

        assert result.title == "Balance Sheet as of 2024-01-31"
        assert ("Total Assets", "EGP 75,000.00") in result.rows
        assert result.rows[-1] == ("Total Liabilities + Equity", "EGP 75,000.00")
        assert result.summary["isBalanced"] is True

    def test_as_of_from_request(self, formatter, payload, january):
        raw = payload("balance-sheet")
        del raw["asOfDate"]

        result = _format(
            formatter, "balance-sheet", raw, replace(january, as_of_date=date(2024, 1, 15))
        )

        assert result.title == "Balance Sheet as of 2024-01-15"


class TestCashFlow:
    def test_rows(self, formatter, payload):
        result = _format(formatter, "cash-flow", payload("cash-flow"))

        assert ("OPERATING ACTIVITIES", "") in result.rows
        assert ("Net Cash from Investing Activities", "EGP -15,000.00") in result.rows
        assert result.rows[-3:] == (
            ("Net Change in Cash", "EGP 35,000.00"),
            ("Beginning Cash", "EGP 25,000.00"),
            ("Ending Cash", "EGP 60,000.00"),
        )

    def test_ending_cash_computed_when_absent(self, formatter, payload):
        raw = payload("cash-flow")
        del raw["endingCash"]

        result = _format(formatter, "cash-flow", raw)

        assert result.summary["endingCash"] == Decimal("60000")


class TestChartOfAccounts:
    def test_rows(self, formatter, payload):
        result = _format(formatter, "chart-of-accounts", payload("chart-of-accounts"))

        assert result.rows == (
            ("1000", "Cash", "Asset", "EGP 50,000.00"),
            ("2000", "Accounts Payable", "Liability", "EGP 20,000.00"),
            ("4999", "Legacy Revenue", "Revenue", "-"),
        )
        assert result.summary["activeCount"] == 2


class TestJournalEntries:
    def test_sorted_by_date_with_totals(self, formatter, payload):
        result = _format(formatter, "journal-entries", payload("journal-entries"))

        assert result.rows == (
            ("2024-01-05", "JE-001", "Cash sale", "-", "EGP 5,000.00"),
            ("2024-01-15", "JE-002", "Office rent", "EGP 5,000.00", "-"),
        )
        assert result.totals == ("Total", "", "", "EGP 5,000.00", "EGP 5,000.00")
        assert result.summary["isBalanced"] is True

    def test_transaction_details(self, formatter, payload, january):
        request = replace(january, show_transaction_details=True)

        result = _format(formatter, "journal-entries", payload("journal-entries"), request)

        assert result.rows[0][2] == "Cash sale (4000 Sales)"


class TestGeneralLedger:
    def test_running_balance(self, formatter, payload):
        result = _format(formatter, "general-ledger", payload("general-ledger"))

        assert result.title == "General Ledger - 1000 Cash"
        assert result.rows[0] == ("", "", "Opening Balance", "-", "-", "EGP 10,000.00")
        assert result.rows[1][-1] == "EGP 15,000.00"
        assert result.rows[2][-1] == "EGP 12,000.00"
        assert result.totals == (
            "Total",
            "",
            "",
            "EGP 5,000.00",
            "EGP 3,000.00",
            "EGP 12,000.00",
        )


class TestAccountSummary:
    def test_grouped_in_type_order(self, formatter, payload):
        result = _format(formatter, "account-summary", payload("account-summary"))

        assert [row[0] for row in result.rows] == ["Asset", "Revenue", "Expense"]
        assert result.totals == ("Total", "6", "EGP 177,000.00", "EGP 180,000.00")


class TestAgingAnalysis:
    def test_total_outstanding(self, formatter, payload):
        result = _format(formatter, "aging-analysis", payload("aging-analysis"))

        assert result.rows == (
            ("Current (0-30 days)", "2", "EGP 7,000.00"),
            ("31-60 days", "1", "EGP 2,000.00"),
            ("61-90 days", "0", "EGP 0.00"),
            ("Over 90 days", "0", "EGP 0.00"),
        )
        assert result.totals == ("Total Outstanding", "3", "EGP 9,000.00")

    def test_aging_type_in_summary(self, formatter, payload, january):
        request = replace(january, aging_type=AgingType.PAYABLES)

        result = _format(formatter, "aging-analysis", payload("aging-analysis"), request)

        assert result.summary["agingType"] == "payables"
