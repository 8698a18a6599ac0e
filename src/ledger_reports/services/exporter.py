from __future__ import annotations

import csv
import io
import json
from collections.abc import Sequence
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any

from openpyxl import Workbook  # type: ignore[import-untyped]
from openpyxl.styles import Alignment, Font, PatternFill  # type: ignore[import-untyped]
from openpyxl.utils import get_column_letter  # type: ignore[import-untyped]
from reportlab.lib import colors
from reportlab.lib.enums import TA_LEFT, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import (
    PageBreak,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from ledger_reports.config import Settings, get_settings
from ledger_reports.domain.formatting import (
    format_currency,
    format_percentage,
    humanize_key,
)
from ledger_reports.domain.reports import (
    ExportFormat,
    ExportOptions,
    ReportResult,
    export_filename,
)
from ledger_reports.exceptions import ExportError, NoReportDataError
from ledger_reports.logging_config import get_logger
from ledger_reports.services.interfaces import ReportExporter
from ledger_reports.services.preview import NO_ROWS_MESSAGE

logger = get_logger(__name__)

# --- Palette ---
ACCENT_HEX = "1976D2"
ACCENT = colors.HexColor(f"#{ACCENT_HEX}")
ROW_SHADE = colors.HexColor("#F8F9FA")
TOTALS_SHADE = colors.HexColor("#E3F2FD")
BORDER = colors.HexColor("#DCDCDC")
MUTED = colors.HexColor("#6C757D")

ALL_REPORTS_KIND = "financial-reports"


def _escape(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _period(start_date: date, end_date: date) -> str:
    return f"{start_date.isoformat()} to {end_date.isoformat()}"


class ReportExporterImpl(ReportExporter):
    """Writes a ReportResult to PDF, XLSX, CSV or JSON.

    Cells are exported as the formatted strings the preview shows, never as
    raw numbers.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self._brand = settings.brand_name
        self._label = settings.currency_label

        self.page_width, self.page_height = A4
        self.left_margin = 1.8 * cm
        self.right_margin = 1.8 * cm
        self.top_margin = 3.2 * cm
        self.bottom_margin = 2.2 * cm
        self.content_width = self.page_width - self.left_margin - self.right_margin

        self.styles = getSampleStyleSheet()
        self._define_styles()

    def _define_styles(self) -> None:
        base = self.styles["Normal"]
        self.styles.add(
            ParagraphStyle(
                name="ReportTitle",
                parent=base,
                fontName="Helvetica-Bold",
                fontSize=16,
                leading=20,
                textColor=ACCENT,
                spaceAfter=4,
            )
        )
        self.styles.add(
            ParagraphStyle(
                name="ReportMeta", parent=base, fontSize=9, leading=11, textColor=MUTED
            )
        )
        self.styles.add(
            ParagraphStyle(
                name="CellLeft", parent=base, fontSize=8.5, leading=10, alignment=TA_LEFT
            )
        )
        self.styles.add(
            ParagraphStyle(
                name="CellMono",
                parent=self.styles["CellLeft"],
                fontName="Courier",
            )
        )
        self.styles.add(
            ParagraphStyle(
                name="CellRight",
                parent=self.styles["CellLeft"],
                fontName="Helvetica-Bold",
                alignment=TA_RIGHT,
            )
        )
        self.styles.add(
            ParagraphStyle(
                name="CellHeader",
                parent=self.styles["CellLeft"],
                fontName="Helvetica-Bold",
                textColor=colors.white,
            )
        )
        self.styles.add(
            ParagraphStyle(
                name="CellTotal",
                parent=self.styles["CellLeft"],
                fontName="Helvetica-Bold",
            )
        )
        self.styles.add(
            ParagraphStyle(
                name="CellTotalRight",
                parent=self.styles["CellTotal"],
                alignment=TA_RIGHT,
            )
        )

    # ---------------------------------------------------------------- dispatch

    def export(self, result: ReportResult | None, options: ExportOptions) -> Path:
        handlers = {
            ExportFormat.PDF: self.export_pdf,
            ExportFormat.EXCEL: self.export_excel,
            ExportFormat.CSV: self.export_csv,
            ExportFormat.JSON: self.export_json,
        }
        return handlers[options.format](result, options)

    def export_pdf(self, result: ReportResult | None, options: ExportOptions) -> Path:
        result = self._require(result)
        content = self._assemble(
            ExportFormat.PDF,
            lambda: self.build_pdf([result], _period(options.start_date, options.end_date)),
        )
        return self._write(options.path, content, ExportFormat.PDF, result)

    def export_excel(self, result: ReportResult | None, options: ExportOptions) -> Path:
        result = self._require(result)
        content = self._assemble(
            ExportFormat.EXCEL,
            lambda: self.to_xlsx(result, _period(options.start_date, options.end_date)),
        )
        return self._write(options.path, content, ExportFormat.EXCEL, result)

    def export_csv(self, result: ReportResult | None, options: ExportOptions) -> Path:
        result = self._require(result)
        content = self._assemble(
            ExportFormat.CSV, lambda: self.to_csv(result).encode("utf-8-sig")
        )
        return self._write(options.path, content, ExportFormat.CSV, result)

    def export_json(self, result: ReportResult | None, options: ExportOptions) -> Path:
        result = self._require(result)
        content = self._assemble(
            ExportFormat.JSON, lambda: self.to_json(result).encode("utf-8")
        )
        return self._write(options.path, content, ExportFormat.JSON, result)

    def export_all(
        self,
        results: Sequence[ReportResult],
        start_date: date,
        end_date: date,
        output_dir: Path,
    ) -> Path:
        if not results:
            raise NoReportDataError("No reports available to export")
        content = self._assemble(
            ExportFormat.PDF,
            lambda: self.build_pdf(results, _period(start_date, end_date)),
        )
        path = output_dir / export_filename(
            ALL_REPORTS_KIND, start_date, end_date, ExportFormat.PDF
        )
        self._write_bytes(path, content, ExportFormat.PDF)
        logger.info(
            "all_reports_exported", path=str(path), reports=len(results), bytes=len(content)
        )
        return path

    def save_download(self, content: bytes, options: ExportOptions) -> Path:
        if not content:
            raise ExportError(options.format.value, "server returned an empty file")
        self._write_bytes(options.path, content, options.format)
        logger.info(
            "server_export_saved",
            report_type=options.report_type.value,
            format=options.format.value,
            path=str(options.path),
            bytes=len(content),
        )
        return options.path

    # ------------------------------------------------------------ serializers

    def to_csv(self, result: ReportResult, delimiter: str = ",") -> str:
        buffer = io.StringIO()
        writer = csv.writer(
            buffer, delimiter=delimiter, quoting=csv.QUOTE_MINIMAL, lineterminator="\n"
        )
        writer.writerows(result.table())
        return buffer.getvalue()

    def to_json(self, result: ReportResult) -> str:
        payload = {
            "reportType": result.report_type.value,
            "title": result.title,
            "headers": list(result.headers),
            "rows": [list(row) for row in result.rows],
            "totals": list(result.totals) if result.totals is not None else None,
            "summary": dict(result.summary),
            "generatedAt": result.generated_at,
        }
        return json.dumps(payload, indent=2, default=_json_default)

    def to_xlsx(self, result: ReportResult, period: str = "") -> bytes:
        wb = Workbook()
        ws = wb.active
        ws.title = result.report_type.title[:31]

        header_fill = PatternFill(start_color=ACCENT_HEX, end_color=ACCENT_HEX, fill_type="solid")
        totals_fill = PatternFill(start_color="E3F2FD", end_color="E3F2FD", fill_type="solid")
        header_font = Font(bold=True, color="FFFFFF")
        right = Alignment(horizontal="right")

        ws.cell(row=1, column=1, value=result.title).font = Font(bold=True, size=14)
        if period:
            ws.cell(row=2, column=1, value=f"Period: {period}")
        ws.cell(
            row=3,
            column=1,
            value=f"Generated: {result.generated_at.strftime('%Y-%m-%d %H:%M')}",
        )

        first_row = 5
        for col, header in enumerate(result.headers, start=1):
            cell = ws.cell(row=first_row, column=col, value=header)
            cell.font = header_font
            cell.fill = header_fill

        row_idx = first_row
        for row_idx, row in enumerate(result.rows, start=first_row + 1):
            for col, value in enumerate(row, start=1):
                cell = ws.cell(row=row_idx, column=col, value=value)
                if col > 2:
                    cell.alignment = right

        if result.totals is not None:
            row_idx += 1
            for col, value in enumerate(result.totals, start=1):
                cell = ws.cell(row=row_idx, column=col, value=value)
                cell.font = Font(bold=True)
                cell.fill = totals_fill
                if col > 2:
                    cell.alignment = right

        for col, header in enumerate(result.headers, start=1):
            values = [header, *(row[col - 1] for row in result.rows)]
            if result.totals is not None:
                values.append(result.totals[col - 1])
            ws.column_dimensions[get_column_letter(col)].width = min(
                max(len(v) for v in values) + 2, 60
            )

        output = io.BytesIO()
        wb.save(output)
        return output.getvalue()

    def build_pdf(self, results: Sequence[ReportResult], period: str) -> bytes:
        """One document, each report starting on its own page."""
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            leftMargin=self.left_margin,
            rightMargin=self.right_margin,
            topMargin=self.top_margin,
            bottomMargin=self.bottom_margin,
            title=results[0].title if len(results) == 1 else "Financial Reports",
            author=self._brand,
        )
        story: list[Any] = []
        for index, result in enumerate(results):
            if index:
                story.append(PageBreak())
            story.extend(self._report_flowables(result, period))
        doc.build(story, onFirstPage=self._decorate_page, onLaterPages=self._decorate_page)
        return buffer.getvalue()

    # ------------------------------------------------------------ PDF pieces

    def _decorate_page(self, canvas: Any, doc: Any) -> None:
        canvas.saveState()

        band_height = 1.8 * cm
        canvas.setFillColor(ACCENT)
        canvas.rect(0, self.page_height - band_height, self.page_width, band_height, stroke=0, fill=1)
        canvas.setFillColor(colors.white)
        canvas.setFont("Helvetica-Bold", 14)
        canvas.drawString(self.left_margin, self.page_height - 1.15 * cm, self._brand.upper())
        canvas.setFont("Helvetica", 9)
        canvas.drawRightString(
            self.page_width - self.right_margin,
            self.page_height - 1.15 * cm,
            "Financial Reports",
        )

        canvas.setStrokeColor(ACCENT)
        canvas.setLineWidth(0.5)
        canvas.line(self.left_margin, 1.6 * cm, self.page_width - self.right_margin, 1.6 * cm)
        canvas.setFont("Helvetica", 8)
        canvas.setFillColor(MUTED)
        canvas.drawString(
            self.left_margin,
            1.1 * cm,
            f"{self._brand} | Generated {datetime.now().strftime('%Y-%m-%d %H:%M')}",
        )
        canvas.setFillColor(ACCENT)
        canvas.setFont("Helvetica-Bold", 8)
        canvas.drawRightString(self.page_width - self.right_margin, 1.1 * cm, f"Page {doc.page}")

        canvas.restoreState()

    def _summary_value(self, key: str, value: Any) -> str:
        if isinstance(value, bool):
            return "Yes" if value else "No"
        if isinstance(value, Decimal):
            if "margin" in key.lower():
                return format_percentage(value)
            return format_currency(value, self._label)
        return str(value)

    def _report_flowables(self, result: ReportResult, period: str) -> list[Any]:
        flow: list[Any] = [
            Paragraph(_escape(result.title), self.styles["ReportTitle"]),
            Paragraph(f"Period: {_escape(period)}", self.styles["ReportMeta"]),
            Paragraph(
                f"Generated: {result.generated_at.strftime('%Y-%m-%d %H:%M UTC')}",
                self.styles["ReportMeta"],
            ),
            Spacer(1, 0.4 * cm),
        ]

        if result.summary:
            pairs = [
                (humanize_key(k), self._summary_value(k, v)) for k, v in result.summary.items()
            ]
            summary = Table(
                [
                    [
                        Paragraph(_escape(label), self.styles["ReportMeta"]),
                        Paragraph(_escape(value), self.styles["CellTotal"]),
                    ]
                    for label, value in pairs
                ],
                colWidths=[5 * cm, 6 * cm],
                hAlign="LEFT",
            )
            summary.setStyle(
                TableStyle(
                    [
                        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                        ("TOPPADDING", (0, 0), (-1, -1), 1),
                        ("BOTTOMPADDING", (0, 0), (-1, -1), 1),
                    ]
                )
            )
            flow.extend([summary, Spacer(1, 0.4 * cm)])

        flow.append(self._report_table(result))
        return flow

    def _cell_style(self, index: int) -> ParagraphStyle:
        if index == 0:
            return self.styles["CellMono"]
        if index == 1:
            return self.styles["CellLeft"]
        return self.styles["CellRight"]

    def _column_widths(self, count: int) -> list[float]:
        # The free-text column gets double weight
        weights = [2.0 if i == 1 else 1.0 for i in range(count)] if count > 2 else [1.0] * count
        unit = self.content_width / sum(weights)
        return [w * unit for w in weights]

    def _report_table(self, result: ReportResult) -> Table:
        width = len(result.headers)
        data: list[list[Any]] = [
            [Paragraph(_escape(h), self.styles["CellHeader"]) for h in result.headers]
        ]
        for row in result.rows:
            data.append(
                [Paragraph(_escape(cell), self._cell_style(i)) for i, cell in enumerate(row)]
            )
        if result.is_empty:
            data.append(
                [Paragraph(NO_ROWS_MESSAGE, self.styles["ReportMeta"])]
                + [""] * (width - 1)
            )
        if result.totals is not None:
            data.append(
                [
                    Paragraph(
                        _escape(cell),
                        self.styles["CellTotalRight" if i > 1 else "CellTotal"],
                    )
                    for i, cell in enumerate(result.totals)
                ]
            )

        table = Table(data, colWidths=self._column_widths(width), repeatRows=1)
        commands: list[tuple[Any, ...]] = [
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ("BACKGROUND", (0, 0), (-1, 0), ACCENT),
            ("LINEBELOW", (0, 0), (-1, -1), 0.25, BORDER),
            ("TOPPADDING", (0, 0), (-1, -1), 4),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
        ]
        body_end = len(data) - (2 if result.totals is not None else 1)
        if body_end >= 1:
            commands.append(
                ("ROWBACKGROUNDS", (0, 1), (-1, body_end), [colors.white, ROW_SHADE])
            )
        if result.is_empty:
            commands.append(("SPAN", (0, 1), (-1, 1)))
        if result.totals is not None:
            commands.extend(
                [
                    ("BACKGROUND", (0, -1), (-1, -1), TOTALS_SHADE),
                    ("LINEABOVE", (0, -1), (-1, -1), 1, ACCENT),
                ]
            )
        table.setStyle(TableStyle(commands))
        return table

    # ---------------------------------------------------------------- helpers

    @staticmethod
    def _require(result: ReportResult | None) -> ReportResult:
        if result is None:
            raise NoReportDataError()
        return result

    @staticmethod
    def _assemble(export_format: ExportFormat, build: Any) -> bytes:
        try:
            return build()
        except Exception as e:
            logger.exception("report_export_failed", format=export_format.value)
            raise ExportError(export_format.value, str(e) or type(e).__name__) from e

    def _write(
        self, path: Path, content: bytes, export_format: ExportFormat, result: ReportResult
    ) -> Path:
        self._write_bytes(path, content, export_format)
        logger.info(
            "report_exported",
            report_type=result.report_type.value,
            format=export_format.value,
            path=str(path),
            rows=len(result.rows),
            bytes=len(content),
        )
        return path

    @staticmethod
    def _write_bytes(path: Path, content: bytes, export_format: ExportFormat) -> None:
        # A file already at ``path`` is only replaced once the new bytes are complete
        partial = path.with_name(f".{path.name}.part")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            partial.write_bytes(content)
            partial.replace(path)
        except OSError as e:
            if partial.is_file():
                partial.unlink()
            logger.error("report_export_write_failed", path=str(path), error=str(e))
            raise ExportError(export_format.value, str(e)) from e
