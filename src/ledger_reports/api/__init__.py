from ledger_reports.api.client import ReportsAPIClient
from ledger_reports.api.schemas import RawReportData, parse_payload

__all__ = ["RawReportData", "ReportsAPIClient", "parse_payload"]
