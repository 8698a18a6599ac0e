# pyright: reportMissingImports=false

"""Reports page."""

from __future__ import annotations

from nicegui import ui  # pyright: ignore[reportMissingImports]

from ledger_reports.domain.reports import AccountFilter, AgingType, ReportType
from ledger_reports.services.controller import ReportState
from ledger_reports.ui.components.forms import date_field, parse_date, select_field
from ledger_reports.ui.components.modals import confirm_dialog
from ledger_reports.ui.components.tables import refresh_report_table, report_table
from ledger_reports.ui.constants import (
    ACCOUNT_FILTER_OPTIONS,
    AGING_TYPE_OPTIONS,
    BUTTON_PRIMARY,
    BUTTON_SECONDARY,
    CARD,
    CARD_PAD,
    REPORT_TYPE_OPTIONS,
    SERVER_EXPORT_OPTIONS,
)
from ledger_reports.ui.state import state


def _notify(message: str, *, type: str = "info") -> None:
    ui.notify(message, type=type, position="top")


def render() -> None:
    controller = state.require_container().controller(notify=_notify)
    request = controller.state.request

    ui.label("Financial Reports").classes("text-xl font-semibold text-slate-900")

    with ui.card().classes(f"{CARD} {CARD_PAD} w-full"):
        with ui.row().classes("w-full gap-4 items-end"):
            select_field(
                "Report Type",
                options=REPORT_TYPE_OPTIONS,
                value=request.report_type.value,
                on_change=lambda e: controller.set_report_type(e.value),
            )
            start_in = date_field("Start Date", request.start_date)
            end_in = date_field("End Date", request.end_date)
            select_field(
                "Account Filter",
                options=ACCOUNT_FILTER_OPTIONS,
                value=request.account_filter.value,
                on_change=lambda e: controller.set_filters(
                    account_filter=AccountFilter(e.value)
                ),
            )
            aging_select = select_field(
                "Aging",
                options=AGING_TYPE_OPTIONS,
                value=request.aging_type.value,
                on_change=lambda e: controller.set_filters(aging_type=AgingType(e.value)),
            )

        with ui.row().classes("w-full gap-6"):
            ui.checkbox(
                "Include zero balances",
                value=request.include_zero_balance,
                on_change=lambda e: controller.set_filters(include_zero_balance=bool(e.value)),
            )
            ui.checkbox(
                "Show transaction details",
                value=request.show_transaction_details,
                on_change=lambda e: controller.set_filters(
                    show_transaction_details=bool(e.value)
                ),
            )
            ui.checkbox(
                "Group by account type",
                value=request.group_by_account_type,
                on_change=lambda e: controller.set_filters(
                    group_by_account_type=bool(e.value)
                ),
            )

        def sync_dates() -> bool:
            start = parse_date(start_in.value)
            end = parse_date(end_in.value)
            if start is None or end is None:
                _notify("Enter dates as YYYY-MM-DD", type="warning")
                return False
            controller.set_date_range(start, end)
            return True

        async def generate() -> None:
            if sync_dates():
                await controller.generate()

        async def export_all() -> None:
            if sync_dates():
                await controller.export_all()

        async def export_from_server(export_format: str) -> None:
            if sync_dates():
                await controller.export_from_server(export_format)

        export_all_dialog = confirm_dialog(
            title="Export all reports",
            message="Generate every report for the selected period into one PDF?",
            on_confirm=export_all,
        )

        with ui.row().classes("w-full gap-2 pt-2"):
            generate_btn = ui.button("Generate Report", on_click=generate).classes(
                BUTTON_PRIMARY
            )
            ui.button("Export PDF", on_click=controller.export_pdf).classes(BUTTON_SECONDARY)
            ui.button("Export Excel", on_click=controller.export_excel).classes(
                BUTTON_SECONDARY
            )
            ui.button("Export CSV", on_click=controller.export_csv).classes(BUTTON_SECONDARY)
            ui.button("Export JSON", on_click=controller.export_json).classes(
                BUTTON_SECONDARY
            )
            ui.button("Export All", on_click=export_all_dialog.open).classes(
                BUTTON_SECONDARY
            )
            with ui.button("Server Export", icon="cloud_download").classes(BUTTON_SECONDARY):
                with ui.menu():
                    for value, label in SERVER_EXPORT_OPTIONS.items():
                        ui.menu_item(
                            label,
                            on_click=lambda _, v=value: export_from_server(v),
                        )

    error = ui.label("").classes("text-rose-700")
    with ui.card().classes(f"{CARD} {CARD_PAD} w-full"):
        preview = report_table(controller.preview())

    def on_state(new_state: ReportState) -> None:
        if new_state.is_fetching:
            generate_btn.props("loading")
        else:
            generate_btn.props(remove="loading")
        aging_select.set_visibility(
            new_state.request.report_type is ReportType.AGING_ANALYSIS
        )
        error.set_text(new_state.error or "")
        refresh_report_table(preview, controller.preview())

    controller.subscribe(on_state)
    on_state(controller.state)
