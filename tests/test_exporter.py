"""Tests for report file exports."""

import csv
import io
import json
from datetime import date

import pytest
from openpyxl import load_workbook

from ledger_reports.domain.reports import ExportFormat, ExportOptions, ReportResult, ReportType
from ledger_reports.exceptions import ExportError, NoReportDataError
from ledger_reports.services.exporter import ReportExporterImpl


@pytest.fixture
def exporter(settings) -> ReportExporterImpl:
    return ReportExporterImpl(settings=settings)


@pytest.fixture
def result() -> ReportResult:
    return ReportResult.build(
        ReportType.TRIAL_BALANCE,
        "Trial Balance",
        ["Account Code", "Account Name", "Debit Balance", "Credit Balance"],
        [
            ["1000", "Cash", "EGP 50,000.00", "-"],
            ["2000", 'Payables, "trade"', "-", "EGP 50,000.00"],
        ],
        totals=["Total", "", "EGP 50,000.00", "EGP 50,000.00"],
        summary={"isBalanced": True, "accountCount": 2},
    )


def _options(tmp_path, export_format, report_type=ReportType.TRIAL_BALANCE) -> ExportOptions:
    return ExportOptions(
        format=export_format,
        report_type=report_type,
        start_date=date(2024, 1, 1),
        end_date=date(2024, 1, 31),
        output_dir=tmp_path,
    )


class TestCSV:
    def test_round_trip(self, exporter, result, tmp_path):
        path = exporter.export_csv(result, _options(tmp_path, ExportFormat.CSV))

        assert path.name == "trial-balance_2024-01-01_to_2024-01-31.csv"
        raw = path.read_bytes()
        assert raw.startswith(b"\xef\xbb\xbf")
        rows = list(csv.reader(io.StringIO(raw.decode("utf-8-sig"))))
        assert rows == [list(r) for r in result.table()]

    def test_quotes_only_when_needed(self, exporter, result):
        text = exporter.to_csv(result)

        assert text.splitlines()[0] == "Account Code,Account Name,Debit Balance,Credit Balance"
        assert '"Payables, ""trade"""' in text
        assert '"EGP 50,000.00"' in text


class TestExcel:
    def test_writes_real_workbook(self, exporter, result, tmp_path):
        path = exporter.export_excel(result, _options(tmp_path, ExportFormat.EXCEL))

        assert path.suffix == ".xlsx"
        assert path.read_bytes()[:2] == b"PK"
        ws = load_workbook(path).active
        assert ws.cell(row=1, column=1).value == "Trial Balance"
        assert ws.cell(row=2, column=1).value == "Period: 2024-01-01 to 2024-01-31"
        assert [ws.cell(row=5, column=c).value for c in range(1, 5)] == list(result.headers)
        assert ws.cell(row=6, column=3).value == "EGP 50,000.00"
        assert ws.cell(row=8, column=1).value == "Total"
        assert ws.cell(row=8, column=1).font.bold

    def test_empty_report(self, exporter, tmp_path):
        empty = ReportResult.build(ReportType.JOURNAL_ENTRIES, "Journal Entries", ["A", "B"], [])

        path = exporter.export_excel(empty, _options(tmp_path, ExportFormat.EXCEL))

        ws = load_workbook(path).active
        assert ws.cell(row=5, column=1).value == "A"


class TestPDF:
    def test_writes_pdf(self, exporter, result, tmp_path):
        path = exporter.export_pdf(result, _options(tmp_path, ExportFormat.PDF))

        assert path.name == "trial-balance_2024-01-01_to_2024-01-31.pdf"
        assert path.read_bytes().startswith(b"%PDF")

    def test_empty_report_still_renders(self, exporter, tmp_path):
        empty = ReportResult.build(ReportType.JOURNAL_ENTRIES, "Journal Entries", ["A", "B"], [])

        path = exporter.export_pdf(
            empty, _options(tmp_path, ExportFormat.PDF, ReportType.JOURNAL_ENTRIES)
        )

        assert path.read_bytes().startswith(b"%PDF")


class TestJSON:
    def test_serializes_result(self, exporter, result, tmp_path):
        path = exporter.export_json(result, _options(tmp_path, ExportFormat.JSON))

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["reportType"] == "trial-balance"
        assert data["rows"][0] == ["1000", "Cash", "EGP 50,000.00", "-"]
        assert data["summary"] == {"isBalanced": True, "accountCount": 2}


class TestDispatchAndErrors:
    @pytest.mark.parametrize("export_format", list(ExportFormat))
    def test_no_result_refused(self, exporter, tmp_path, export_format):
        with pytest.raises(NoReportDataError) as exc:
            exporter.export(None, _options(tmp_path, export_format))

        assert exc.value.message == "Please generate a report first"
        assert list(tmp_path.iterdir()) == []

    def test_dispatch_by_format(self, exporter, result, tmp_path):
        path = exporter.export(result, _options(tmp_path, ExportFormat.CSV))

        assert path.suffix == ".csv"

    def test_assembly_failure_wrapped(self, exporter, result, tmp_path, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError("renderer crashed")

        monkeypatch.setattr(exporter, "to_xlsx", boom)

        with pytest.raises(ExportError) as exc:
            exporter.export_excel(result, _options(tmp_path, ExportFormat.EXCEL))

        assert str(exc.value) == "Failed to export excel: renderer crashed"
        assert isinstance(exc.value.__cause__, RuntimeError)
        assert list(tmp_path.iterdir()) == []

    def test_write_failure_wrapped(self, exporter, result, tmp_path):
        blocker = tmp_path / "blocked"
        blocker.write_text("not a directory")

        with pytest.raises(ExportError):
            exporter.export_csv(result, _options(blocker, ExportFormat.CSV))

    def test_failed_overwrite_keeps_previous_file(self, exporter, result, tmp_path):
        options = _options(tmp_path, ExportFormat.CSV)
        options.path.write_text("previous export")
        (tmp_path / f".{options.filename}.part").mkdir()

        with pytest.raises(ExportError):
            exporter.export_csv(result, options)

        assert options.path.read_text() == "previous export"

    def test_overwrite_replaces_file(self, exporter, result, tmp_path):
        options = _options(tmp_path, ExportFormat.JSON)
        options.path.write_text("stale")

        path = exporter.export_json(result, options)

        assert json.loads(path.read_text(encoding="utf-8"))["title"] == "Trial Balance"
        assert [p.name for p in tmp_path.iterdir()] == [options.filename]


class TestExportAll:
    def test_one_pdf_for_many_reports(self, exporter, result, tmp_path):
        other = ReportResult.build(
            ReportType.AGING_ANALYSIS,
            "Aging Analysis",
            ["Aging Period", "Count", "Amount"],
            [["Current (0-30 days)", "2", "EGP 7,000.00"]],
            totals=["Total Outstanding", "2", "EGP 7,000.00"],
        )

        path = exporter.export_all(
            [result, other], date(2024, 1, 1), date(2024, 1, 31), tmp_path
        )

        assert path.name == "financial-reports_2024-01-01_to_2024-01-31.pdf"
        assert path.read_bytes().startswith(b"%PDF")

    def test_nothing_to_export(self, exporter, tmp_path):
        with pytest.raises(NoReportDataError):
            exporter.export_all([], date(2024, 1, 1), date(2024, 1, 31), tmp_path)


class TestSaveDownload:
    def test_writes_bytes(self, exporter, tmp_path):
        path = exporter.save_download(b"%PDF-1.4", _options(tmp_path, ExportFormat.PDF))

        assert path.read_bytes() == b"%PDF-1.4"

    def test_empty_download_rejected(self, exporter, tmp_path):
        with pytest.raises(ExportError):
            exporter.save_download(b"", _options(tmp_path, ExportFormat.PDF))
