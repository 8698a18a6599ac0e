"""HTTP client wrapper for the ERP backend's report endpoints."""

from __future__ import annotations

from typing import Any

import httpx

from ledger_reports.config import Settings, get_settings
from ledger_reports.domain.reports import ExportOptions
from ledger_reports.exceptions import HTTPError, NetworkError
from ledger_reports.logging_config import get_logger

logger = get_logger(__name__)


def _error_detail(r: httpx.Response) -> tuple[str, str | None]:
    """Pull a human-readable message (and optional code) out of an error response."""
    fallback = f"HTTP {r.status_code} {r.reason_phrase}".strip()
    content_type = r.headers.get("content-type", "")
    try:
        if "application/json" in content_type:
            payload = r.json()
            if isinstance(payload, dict):
                raw = payload.get("message") or payload.get("error") or payload.get("detail")
                code = payload.get("code")
                return (str(raw) if raw else fallback), (str(code) if code else None)
            return fallback, None
        return (r.text or fallback), None
    except ValueError:
        return fallback, None


class ReportsAPIClient:
    def __init__(
        self,
        base_url: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
        reports_path: str | None = None,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or get_settings()
        base_url = base_url or settings.api_base_url
        self._reports_path = reports_path or settings.reports_path
        self._client = (
            client
            if client is not None
            else httpx.AsyncClient(
                base_url=base_url,
                timeout=timeout if timeout is not None else settings.api_timeout,
            )
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> ReportsAPIClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    def report_path(self, *parts: str) -> str:
        return "/".join([self._reports_path, *parts])

    async def _send(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        try:
            r = await self._client.request(method, path, params=params)
        except httpx.RequestError as e:
            logger.warning("report_api_unreachable", path=path, error=str(e))
            raise NetworkError(str(e) or "Network error occurred", url=path) from e

        if 200 <= r.status_code < 300:
            return r

        detail, code = _error_detail(r)
        logger.warning(
            "report_api_error", path=path, status_code=r.status_code, detail=detail
        )
        raise HTTPError(status_code=r.status_code, detail=detail, code=code)

    async def _request_json(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
    ) -> Any:
        r = await self._send(method, path, params=params)
        if r.status_code == 204:
            return None
        try:
            return r.json()
        except ValueError as e:
            raise HTTPError(
                status_code=r.status_code, detail="Response is not valid JSON"
            ) from e

    async def get_report(
        self, report_kind: str, params: dict[str, str] | None = None
    ) -> Any:
        """GET <reports_path>/<report_kind> and return the decoded JSON body."""
        return await self._request_json(
            "GET", self.report_path(report_kind), params=params or None
        )

    async def export_report(self, options: ExportOptions) -> bytes:
        """Download a backend-rendered export as raw bytes."""
        params = options.to_query_params()
        params.pop("format")
        params.pop("reportType")
        if params.get("accountFilter") == "all":
            params.pop("accountFilter")
        r = await self._send(
            "GET",
            self.report_path(options.report_type.value, "export", options.format.value),
            params=params,
        )
        return r.content
