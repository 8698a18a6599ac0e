# pyright: reportMissingImports=false

"""NiceGUI entry point and routing."""

from __future__ import annotations

from typing import Any

from ledger_reports.config import Settings, get_settings
from ledger_reports.logging_config import get_logger

logger = get_logger(__name__)


def _require_nicegui() -> Any:
    try:
        from nicegui import ui
    except ImportError as e:  # pragma: no cover
        raise ImportError(
            "NiceGUI is required for the frontend. Install with 'ledger-reports[frontend]'."
        ) from e
    return ui


def add_global_styles() -> None:
    ui = _require_nicegui()
    ui.add_head_html(
        """
<style type="text/tailwindcss">
  @layer components {
    .lr-page {
      @apply bg-slate-50 min-h-screen;
    }
    .lr-report-table th {
      @apply bg-blue-700 text-white;
    }
  }
</style>
"""
    )


def create_ui() -> None:
    ui = _require_nicegui()

    from ledger_reports.ui.components.nav import header, sidebar
    from ledger_reports.ui.pages import reports

    def shell(page_title: str, render_fn: Any) -> None:
        add_global_styles()
        header()
        sidebar()
        with ui.column().classes("lr-page"):  # noqa: SIM117
            with ui.column().classes("max-w-[1200px] w-full mx-auto p-6 gap-4"):
                ui.label(page_title).classes("sr-only")
                render_fn()

    @ui.page("/")  # type: ignore[untyped-decorator]
    def index() -> None:
        ui.navigate.to("/reports")

    @ui.page("/reports")  # type: ignore[untyped-decorator]
    def reports_page() -> None:
        shell("Reports", reports.render)


def run(
    *,
    port: int | None = None,
    api_url: str | None = None,
    reload: bool | None = None,
    settings: Settings | None = None,
) -> None:
    ui = _require_nicegui()
    from nicegui import app

    from ledger_reports.ui.state import state

    settings = settings or get_settings()
    if api_url:
        settings = settings.model_copy(update={"api_base_url": api_url.rstrip("/")})
    container = state.configure(settings)
    app.on_shutdown(container.aclose)

    create_ui()
    logger.info("ui_starting", port=port or settings.ui_port, api_url=settings.api_base_url)
    ui.run(
        title=settings.app_name,
        host=settings.ui_host,
        port=port or settings.ui_port,
        reload=settings.ui_reload if reload is None else reload,
    )
