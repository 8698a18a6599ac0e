"""HTML table rendering for the report preview.

Output is a pure function of the ReportResult so the page can re-render
freely; the NiceGUI page mounts it with ``ui.html``.
"""

from __future__ import annotations

from collections.abc import Sequence
from html import escape

from ledger_reports.domain.reports import ReportResult
from ledger_reports.services.interfaces import ReportPreviewRenderer

NO_REPORT_MESSAGE = "No report generated yet. Choose a report type and click Generate."
NO_ROWS_MESSAGE = "No data found for the selected period."

TABLE_CLASS = "lr-report-table w-full text-sm border-collapse"
TOTALS_CLASS = "lr-totals bg-slate-100 font-semibold border-t-2 border-slate-400"
SECTION_CLASS = "lr-section bg-slate-50 font-semibold text-slate-700"
PLACEHOLDER_CLASS = "lr-placeholder text-center text-slate-500 italic py-6"


def cell_class(index: int) -> str:
    """Column 0 is an identifier, column 1 free text, the rest are amounts."""
    if index == 0:
        return "text-left font-mono"
    if index == 1:
        return "text-left"
    return "text-right font-bold"


def _is_section_row(row: Sequence[str]) -> bool:
    return bool(row[0]) and not any(row[1:])


def _cells(tag: str, row: Sequence[str]) -> str:
    return "".join(
        f'<{tag} class="{cell_class(i)} px-3 py-2">{escape(cell)}</{tag}>'
        for i, cell in enumerate(row)
    )


class HTMLPreviewRenderer(ReportPreviewRenderer):
    def render(self, result: ReportResult | None) -> str:
        if result is None:
            return f'<div class="{PLACEHOLDER_CLASS}">{escape(NO_REPORT_MESSAGE)}</div>'

        parts = [
            f'<table class="{TABLE_CLASS}" data-report-type="{result.report_type.value}">',
            f"<caption class=\"text-left font-semibold py-2\">{escape(result.title)}</caption>",
            f'<thead><tr class="border-b border-slate-300">{_cells("th", result.headers)}</tr></thead>',
            "<tbody>",
        ]

        if result.is_empty:
            parts.append(
                f'<tr><td class="{PLACEHOLDER_CLASS}" colspan="{len(result.headers)}">'
                f"{escape(NO_ROWS_MESSAGE)}</td></tr>"
            )
        for row in result.rows:
            row_class = SECTION_CLASS if _is_section_row(row) else "border-b border-slate-100"
            parts.append(f'<tr class="{row_class}">{_cells("td", row)}</tr>')
        parts.append("</tbody>")

        if result.totals is not None:
            parts.append(
                f'<tfoot><tr class="{TOTALS_CLASS}">{_cells("td", result.totals)}</tr></tfoot>'
            )
        parts.append("</table>")
        return "".join(parts)
