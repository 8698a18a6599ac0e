# pyright: reportMissingImports=false

"""Navigation components."""

from __future__ import annotations

from nicegui import ui  # pyright: ignore[reportMissingImports]

from ledger_reports.ui.constants import NAV_LINK
from ledger_reports.ui.state import state


def header() -> None:
    settings = state.require_container().settings
    with ui.header(elevated=True).classes("bg-white border-b border-slate-200"):  # noqa: SIM117
        with ui.row().classes("w-full items-center justify-between px-4 py-2"):
            ui.label(settings.brand_name).classes("text-lg font-semibold text-slate-900")
            ui.label(settings.api_base_url).classes("text-xs text-slate-500 font-mono")


def sidebar() -> None:
    with (
        ui.left_drawer(top_corner=True, bottom_corner=True).classes(
            "bg-white border-r border-slate-200"
        ),
        ui.column().classes("w-56 p-3 gap-1"),
    ):
        ui.link("Reports", "/reports").classes(NAV_LINK)
