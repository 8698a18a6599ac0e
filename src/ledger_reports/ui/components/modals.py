# pyright: reportMissingImports=false

"""Dialog/modal helpers."""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from typing import Any

from nicegui import ui  # pyright: ignore[reportMissingImports]


def confirm_dialog(
    *,
    title: str,
    message: str,
    on_confirm: Callable[[], Awaitable[Any] | None],
    on_cancel: Callable[[], None] | None = None,
) -> Any:
    with ui.dialog() as dialog, ui.card().classes("w-[28rem]"):
        ui.label(title).classes("text-lg font-semibold")
        ui.label(message).classes("text-slate-700")
        with ui.row().classes("w-full justify-end gap-2"):

            def _cancel() -> None:
                if on_cancel:
                    on_cancel()
                dialog.close()

            async def _confirm() -> None:
                dialog.close()
                outcome = on_confirm()
                if inspect.isawaitable(outcome):
                    await outcome

            ui.button("Cancel", on_click=_cancel).props("flat")
            ui.button("Confirm", on_click=_confirm).classes("bg-blue-600 text-white")
    return dialog
