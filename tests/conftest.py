from __future__ import annotations

import copy
from collections.abc import Callable
from datetime import date
from typing import Any

import httpx
import pytest

from ledger_reports.api.client import ReportsAPIClient
from ledger_reports.config import Settings
from ledger_reports.domain.reports import ReportRequest, ReportType

BASE_URL = "http://erp.test"

SAMPLE_PAYLOADS: dict[str, dict[str, Any]] = {
    "trial-balance": {
        "accounts": [
            {
                "code": "1000",
                "name": "Cash",
                "type": "asset",
                "debit": 50000,
                "credit": 0,
                "balance": 50000,
                "isActive": True,
            },
            {
                "code": "1500",
                "name": "Prepaid Expenses",
                "type": "asset",
                "debit": 0,
                "credit": 0,
                "balance": 0,
                "isActive": True,
            },
            {
                "code": "2000",
                "name": "Accounts Payable",
                "type": "liability",
                "debit": 0,
                "credit": 20000,
                "balance": -20000,
                "isActive": True,
            },
            {
                "code": "3000",
                "name": "Owner Equity",
                "type": "equity",
                "debit": 0,
                "credit": 30000,
                "balance": -30000,
                "isActive": True,
            },
        ],
        "totalDebits": 50000,
        "totalCredits": 50000,
        "isBalanced": True,
        "generatedAt": "2024-02-01T09:00:00.000Z",
        "period": {"startDate": "2024-01-01", "endDate": "2024-01-31"},
    },
    "profit-loss": {
        "revenue": {"accounts": [{"name": "Sales", "amount": 180000}], "total": 180000},
        "expenses": {
            "accounts": [
                {"name": "Salaries", "amount": 60000},
                {"name": "Rent", "amount": 42000},
            ],
            "total": 102000,
        },
        "netIncome": 78000,
        "profitMargin": 43.33,
        "generatedAt": "2024-02-01T09:00:00.000Z",
    },
    "balance-sheet": {
        "assets": {
            "accounts": [
                {"name": "Cash", "amount": 50000},
                {"name": "Inventory", "amount": 25000},
            ],
            "total": 75000,
        },
        "liabilities": {
            "accounts": [{"name": "Accounts Payable", "amount": 20000}],
            "total": 20000,
        },
        "equity": {"accounts": [{"name": "Owner Equity", "amount": 55000}], "total": 55000},
        "isBalanced": True,
        "asOfDate": "2024-01-31",
        "generatedAt": "2024-02-01T09:00:00.000Z",
    },
    "cash-flow": {
        "operatingActivities": {"inflows": 120000, "outflows": 80000, "net": 40000},
        "investingActivities": {"inflows": 0, "outflows": 15000, "net": -15000},
        "financingActivities": {"inflows": 10000, "outflows": 0, "net": 10000},
        "totalCashFlow": 35000,
        "beginningCash": 25000,
        "endingCash": 60000,
        "generatedAt": "2024-02-01T09:00:00.000Z",
    },
    "chart-of-accounts": {
        "accounts": [
            {"code": 1000, "name": "Cash", "type": "asset", "balance": 50000, "isActive": True},
            {
                "code": "2000",
                "name": "Accounts Payable",
                "type": "liability",
                "balance": -20000,
                "isActive": True,
            },
            {
                "code": "4999",
                "name": "Legacy Revenue",
                "type": "revenue",
                "balance": 0,
                "isActive": False,
            },
        ],
        "generatedAt": "2024-02-01T09:00:00.000Z",
    },
    "journal-entries": {
        "entries": [
            {
                "id": "2",
                "date": "2024-01-15T10:00:00.000Z",
                "description": "Office rent",
                "reference": "JE-002",
                "debit": 5000,
                "credit": 0,
                "accountCode": "5100",
                "accountName": "Rent Expense",
            },
            {
                "id": "1",
                "date": "2024-01-05",
                "description": "Cash sale",
                "reference": "JE-001",
                "debit": 0,
                "credit": 5000,
                "accountCode": "4000",
                "accountName": "Sales",
            },
        ],
        "totalEntries": 2,
        "generatedAt": "2024-02-01T09:00:00.000Z",
    },
    "general-ledger": {
        "accountCode": "1000",
        "accountName": "Cash",
        "beginningBalance": 10000,
        "endingBalance": 12000,
        "entries": [
            {
                "date": "2024-01-20",
                "description": "Supplier payment",
                "reference": "PAY-7",
                "debit": 0,
                "credit": 3000,
                "runningBalance": 12000,
            },
            {
                "date": "2024-01-10",
                "description": "Customer deposit",
                "reference": "DEP-1",
                "debit": 5000,
                "credit": 0,
                "runningBalance": 15000,
            },
        ],
        "generatedAt": "2024-02-01T09:00:00.000Z",
    },
    "account-summary": {
        "summary": [
            {"type": "expense", "count": 3, "totalDebit": 102000, "totalCredit": 0},
            {"type": "asset", "count": 2, "totalDebit": 75000, "totalCredit": 0},
            {"type": "revenue", "count": 1, "totalDebit": 0, "totalCredit": 180000},
        ],
        "generatedAt": "2024-02-01T09:00:00.000Z",
    },
    "aging-analysis": {
        "current": {"count": 2, "amount": 7000},
        "thirtyDays": {"count": 1, "amount": 2000},
        "sixtyDays": {"count": 0, "amount": 0},
        "ninetyDays": {"count": 0, "amount": 0},
        "total": {"count": 3, "amount": 9000},
        "generatedAt": "2024-02-01T09:00:00.000Z",
    },
}


def sample_payload(report_kind: str) -> dict[str, Any]:
    return copy.deepcopy(SAMPLE_PAYLOADS[report_kind])


class FakeBackend:
    """Routes /api/reports/<kind> to canned payloads and records every request."""

    def __init__(self) -> None:
        self.payloads: dict[str, Any] = copy.deepcopy(SAMPLE_PAYLOADS)
        self.failures: dict[str, httpx.Response] = {}
        self.requests: list[httpx.Request] = []
        self.export_content = b"%PDF-1.4 server export"

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        parts = request.url.path.strip("/").split("/")
        if parts[:2] != ["api", "reports"] or len(parts) < 3:
            return httpx.Response(404, json={"message": "Not found"})

        kind = parts[2]
        if kind in self.failures:
            return self.failures[kind]
        if len(parts) == 5 and parts[3] == "export":
            return httpx.Response(
                200,
                content=self.export_content,
                headers={"content-type": "application/octet-stream"},
            )
        if kind not in self.payloads:
            return httpx.Response(404, json={"message": f"Unknown report {kind}"})
        return httpx.Response(200, json=self.payloads[kind])

    def last_params(self) -> dict[str, str]:
        return dict(self.requests[-1].url.params)


def make_client(
    handler: Callable[[httpx.Request], httpx.Response], settings: Settings
) -> ReportsAPIClient:
    transport = httpx.MockTransport(handler)
    return ReportsAPIClient(
        client=httpx.AsyncClient(transport=transport, base_url=BASE_URL),
        base_url=BASE_URL,
        settings=settings,
    )


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        api_base_url=BASE_URL,
        currency_label="EGP",
        export_dir=tmp_path / "exports",
        environment="testing",
    )


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
async def api_client(backend: FakeBackend, settings: Settings):
    client = make_client(backend, settings)
    try:
        yield client
    finally:
        await client.aclose()


@pytest.fixture
def january() -> ReportRequest:
    return ReportRequest(
        report_type=ReportType.TRIAL_BALANCE,
        start_date=date(2024, 1, 1),
        end_date=date(2024, 1, 31),
    )


@pytest.fixture
def payload() -> Callable[[str], dict[str, Any]]:
    """Deep copy of the canned backend payload for a report kind."""
    return sample_payload


@pytest.fixture
async def client_factory(settings: Settings):
    """Build a ReportsAPIClient over an arbitrary MockTransport handler."""
    created: list[ReportsAPIClient] = []

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> ReportsAPIClient:
        client = make_client(handler, settings)
        created.append(client)
        return client

    yield factory
    for client in created:
        await client.aclose()
