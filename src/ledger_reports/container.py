"""Dependency injection container for Ledger Reports.

Builds the HTTP client and the five report pipeline components from
settings, lazily and once per container.

Usage:
    from ledger_reports.container import Container

    async with Container() as container:
        controller = container.controller()
        await controller.generate()
"""

from functools import cached_property
from typing import TYPE_CHECKING

from ledger_reports.config import Settings, get_settings
from ledger_reports.logging_config import get_logger

if TYPE_CHECKING:
    from ledger_reports.api.client import ReportsAPIClient
    from ledger_reports.services.controller import Notifier, ReportController
    from ledger_reports.services.exporter import ReportExporterImpl
    from ledger_reports.services.fetcher import ReportDataFetcherImpl
    from ledger_reports.services.formatter import ReportFormatterImpl
    from ledger_reports.services.preview import HTMLPreviewRenderer

logger = get_logger(__name__)


class Container:
    """Lazy access to the report pipeline.

    Tests pass their own settings (and may replace ``client`` before first
    use of ``fetcher``):

        container = Container(settings=Settings(api_base_url="http://test"))
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()
        logger.debug(
            "container_created",
            api_base_url=self._settings.api_base_url,
            environment=self._settings.environment.value,
        )

    @property
    def settings(self) -> Settings:
        return self._settings

    @cached_property
    def client(self) -> "ReportsAPIClient":
        from ledger_reports.api.client import ReportsAPIClient

        return ReportsAPIClient(settings=self._settings)

    @cached_property
    def fetcher(self) -> "ReportDataFetcherImpl":
        from ledger_reports.services.fetcher import ReportDataFetcherImpl

        return ReportDataFetcherImpl(self.client)

    @cached_property
    def formatter(self) -> "ReportFormatterImpl":
        from ledger_reports.services.formatter import ReportFormatterImpl

        return ReportFormatterImpl(currency_label=self._settings.currency_label)

    @cached_property
    def renderer(self) -> "HTMLPreviewRenderer":
        from ledger_reports.services.preview import HTMLPreviewRenderer

        return HTMLPreviewRenderer()

    @cached_property
    def exporter(self) -> "ReportExporterImpl":
        from ledger_reports.services.exporter import ReportExporterImpl

        return ReportExporterImpl(settings=self._settings)

    def controller(self, notify: "Notifier | None" = None) -> "ReportController":
        """Create a controller with its own page state over the shared pipeline."""
        from ledger_reports.services.controller import ReportController

        return ReportController(
            self.fetcher,
            self.formatter,
            self.renderer,
            self.exporter,
            notify,
            client=self.client,
            settings=self._settings,
        )

    async def aclose(self) -> None:
        """Close the HTTP client if it was ever created."""
        if "client" in self.__dict__:
            logger.info("closing_api_client")
            await self.client.aclose()

    async def __aenter__(self) -> "Container":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()
