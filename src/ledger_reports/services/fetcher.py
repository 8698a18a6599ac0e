from __future__ import annotations

from ledger_reports.api.client import ReportsAPIClient
from ledger_reports.api.schemas import RawReportData, parse_payload
from ledger_reports.domain.reports import ReportRequest, ReportType
from ledger_reports.logging_config import get_logger
from ledger_reports.services.interfaces import ReportDataFetcher

logger = get_logger(__name__)


class ReportDataFetcherImpl(ReportDataFetcher):
    """Fetches raw report payloads, one GET per call, no retry, no cache."""

    def __init__(self, client: ReportsAPIClient) -> None:
        self._client = client

    async def fetch(
        self, report_type: ReportType | str, request: ReportRequest
    ) -> RawReportData:
        report_type = ReportType.parse(report_type)
        params = self.query_params(report_type, request)

        logger.debug("report_fetch_started", report_type=report_type.value, params=params)
        payload = await self._client.get_report(report_type.value, params)
        data = parse_payload(report_type, payload)
        logger.debug("report_fetch_completed", report_type=report_type.value)
        return data

    @staticmethod
    def query_params(report_type: ReportType, request: ReportRequest) -> dict[str, str]:
        """Query parameters each endpoint understands."""
        if report_type is ReportType.BALANCE_SHEET:
            return {"asOfDate": request.effective_as_of_date.isoformat()}
        if report_type in (ReportType.CHART_OF_ACCOUNTS, ReportType.ACCOUNT_SUMMARY):
            return {}
        if report_type is ReportType.AGING_ANALYSIS:
            return {"type": request.aging_type.value}

        params = request.to_query_params()
        if report_type is ReportType.GENERAL_LEDGER and request.account_id:
            params["accountId"] = request.account_id
        return params
