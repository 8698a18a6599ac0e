# pyright: reportMissingImports=false

"""Report preview table."""

from __future__ import annotations

from typing import Any

from nicegui import ui  # pyright: ignore[reportMissingImports]


def report_table(html: str) -> Any:
    """Mount pre-rendered (already escaped) report HTML."""
    return ui.html(html, sanitize=False).classes("w-full overflow-x-auto")


def refresh_report_table(element: Any, html: str) -> None:
    if element.content != html:
        element.set_content(html)
