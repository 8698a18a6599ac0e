"""Tests for the dependency injection container."""

from ledger_reports.container import Container
from ledger_reports.services.controller import ReportController


class TestContainer:
    def test_components_are_cached(self, settings):
        container = Container(settings=settings)

        assert container.fetcher is container.fetcher
        assert container.exporter is container.exporter
        assert container.formatter.currency_label == "EGP"

    def test_controllers_have_separate_state(self, settings):
        container = Container(settings=settings)

        first = container.controller()
        second = container.controller()

        assert isinstance(first, ReportController)
        assert first is not second
        assert first.export_dir == settings.export_dir

    async def test_aclose_without_client(self, settings):
        container = Container(settings=settings)

        await container.aclose()

        assert "client" not in container.__dict__

    async def test_context_manager_closes_client(self, settings):
        async with Container(settings=settings) as container:
            client = container.client

        assert client._client.is_closed
