# pyright: reportMissingImports=false

"""Form field helpers."""

from __future__ import annotations

from collections.abc import Callable
from datetime import date
from typing import Any

from nicegui import ui  # pyright: ignore[reportMissingImports]

from ledger_reports.ui.constants import INPUT


def select_field(
    label: str,
    *,
    options: dict[str, str],
    value: str | None = None,
    on_change: Callable[[Any], None] | None = None,
) -> Any:
    return ui.select(
        options=options, label=label, value=value, on_change=on_change
    ).props("dense outlined")


def date_field(label: str, value: date | None = None) -> Any:
    with ui.input(label=label, value=value.isoformat() if value else None).classes(
        INPUT
    ) as inp:
        with inp.add_slot("append"):
            ui.icon("edit_calendar").classes("cursor-pointer").on(
                "click", lambda: menu.open()
            )
        menu: Any
        with ui.menu() as menu:
            ui.date(on_change=lambda e: (inp.set_value(e.value), menu.close()))
    return inp


def parse_date(raw: Any) -> date | None:
    """ISO date from an input's value, or None if it is not one."""
    try:
        return date.fromisoformat(str(raw))
    except ValueError:
        return None
