"""Command-line interface for Ledger Reports."""

import argparse
import asyncio
import sys
from datetime import date
from pathlib import Path

from ledger_reports import __version__
from ledger_reports.config import Settings, get_settings
from ledger_reports.container import Container
from ledger_reports.domain.reports import (
    AccountFilter,
    AgingType,
    ExportFormat,
    ReportResult,
    ReportType,
)
from ledger_reports.logging_config import configure_logging
from ledger_reports.services.controller import ReportController

ALL_REPORTS = "all"


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid date '{value}', expected YYYY-MM-DD") from e


def cli_notifier(message: str, *, type: str = "info") -> None:
    if type == "negative":
        print(f"Error: {message}", file=sys.stderr)
    elif type == "warning":
        print(f"Warning: {message}", file=sys.stderr)
    else:
        print(message)


def render_text_table(result: ReportResult) -> str:
    """Plain-text rendering of a report for the terminal."""
    table = result.table()
    widths = [max(len(row[i]) for row in table) for i in range(len(result.headers))]

    def line(cells: list[str]) -> str:
        return "  ".join(
            cell.ljust(widths[i]) if i < 2 else cell.rjust(widths[i])
            for i, cell in enumerate(cells)
        ).rstrip()

    rule = "  ".join("-" * w for w in widths)
    lines = [result.title, "", line(table[0]), rule]
    body = table[1:]
    if result.totals is not None:
        lines.extend(line(row) for row in body[:-1])
        lines.append(rule)
        lines.append(line(body[-1]))
    else:
        lines.extend(line(row) for row in body)
    if result.is_empty:
        lines.append("No data found for the selected period.")
    return "\n".join(lines)


def _settings_for(args: argparse.Namespace) -> Settings:
    settings = get_settings()
    updates: dict[str, object] = {}
    if getattr(args, "api_url", None):
        updates["api_base_url"] = args.api_url.rstrip("/")
    if getattr(args, "output_dir", None):
        updates["export_dir"] = Path(args.output_dir)
    return settings.model_copy(update=updates) if updates else settings


def _prepare(
    controller: ReportController, args: argparse.Namespace, report_type: ReportType
) -> None:
    controller.set_report_type(report_type)
    controller.set_date_range(args.start, args.end)
    controller.set_filters(
        account_filter=AccountFilter(args.filter),
        include_zero_balance=not args.hide_zero,
        show_transaction_details=args.details,
        group_by_account_type=args.group,
        aging_type=AgingType(args.aging),
        account_id=args.account_id,
        as_of_date=args.as_of,
    )


def cmd_version(args: argparse.Namespace) -> int:
    """Show version information."""
    print(f"Ledger Reports v{__version__}")
    return 0


def cmd_ui(args: argparse.Namespace) -> int:
    """Launch the NiceGUI web interface."""
    try:
        from ledger_reports.ui.main import run
    except ImportError:
        print("Frontend dependencies are not installed.")
        print("Install with: pip install 'ledger-reports[frontend]'")
        return 1

    run(port=args.port, api_url=args.api_url, reload=False if args.no_reload else None)
    return 0


async def _generate(args: argparse.Namespace) -> int:
    async with Container(_settings_for(args)) as container:
        controller = container.controller(notify=cli_notifier)
        _prepare(controller, args, ReportType.parse(args.report_type))
        result = await controller.generate()
    if result is None:
        return 1
    print(render_text_table(result))
    return 0


def cmd_generate(args: argparse.Namespace) -> int:
    """Generate one report and print it."""
    return asyncio.run(_generate(args))


async def _export(args: argparse.Namespace) -> int:
    export_format = ExportFormat(args.format)
    async with Container(_settings_for(args)) as container:
        controller = container.controller(notify=cli_notifier)
        if args.report_type == ALL_REPORTS:
            _prepare(controller, args, ReportType.TRIAL_BALANCE)
            path = await controller.export_all()
        else:
            _prepare(controller, args, ReportType.parse(args.report_type))
            if args.server:
                path = await controller.export_from_server(export_format)
            elif await controller.generate() is None:
                return 1
            else:
                path = await controller.export(export_format)
    return 0 if path is not None else 1


def cmd_export(args: argparse.Namespace) -> int:
    """Export one report, or every report into a single PDF."""
    if args.report_type == ALL_REPORTS and args.format != ExportFormat.PDF.value:
        print("Error: 'export all' only produces PDF", file=sys.stderr)
        return 1
    if args.server and not ExportFormat(args.format).server_rendered:
        print(f"Error: the server does not provide {args.format} exports", file=sys.stderr)
        return 1
    return asyncio.run(_export(args))


def _add_report_options(parser: argparse.ArgumentParser) -> None:
    today = date.today()
    parser.add_argument(
        "--start",
        type=_parse_date,
        default=today.replace(day=1),
        help="Period start, YYYY-MM-DD (default: first of this month)",
    )
    parser.add_argument(
        "--end",
        type=_parse_date,
        default=today,
        help="Period end, YYYY-MM-DD (default: today)",
    )
    parser.add_argument(
        "--filter",
        choices=[f.value for f in AccountFilter],
        default=AccountFilter.ALL.value,
        help="Account type filter (default: all)",
    )
    parser.add_argument(
        "--hide-zero", action="store_true", help="Exclude zero-balance accounts"
    )
    parser.add_argument(
        "--details", action="store_true", help="Show transaction details"
    )
    parser.add_argument(
        "--group", action="store_true", help="Group accounts by account type"
    )
    parser.add_argument(
        "--as-of", type=_parse_date, default=None, help="Balance sheet date (default: --end)"
    )
    parser.add_argument(
        "--account-id", default=None, help="Account for the general ledger"
    )
    parser.add_argument(
        "--aging",
        choices=[a.value for a in AgingType],
        default=AgingType.RECEIVABLES.value,
        help="Aging analysis type (default: receivables)",
    )
    parser.add_argument("--api-url", default=None, help="Backend API base URL")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="lr",
        description="Ledger Reports - financial reports from the ERP backend",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # version command
    version_parser = subparsers.add_parser("version", help="Show version")
    version_parser.set_defaults(func=cmd_version)

    # ui command
    ui_parser = subparsers.add_parser("ui", help="Launch the web interface")
    ui_parser.add_argument(
        "--port", type=int, default=None, help="Port to run frontend (default: 3000)"
    )
    ui_parser.add_argument("--api-url", default=None, help="Backend API base URL")
    ui_parser.add_argument(
        "--no-reload", action="store_true", help="Disable auto-reload"
    )
    ui_parser.set_defaults(func=cmd_ui)

    # generate command
    generate_parser = subparsers.add_parser("generate", help="Generate and print a report")
    generate_parser.add_argument(
        "report_type", choices=[rt.value for rt in ReportType], help="Report type"
    )
    _add_report_options(generate_parser)
    generate_parser.set_defaults(func=cmd_generate)

    # export command
    export_parser = subparsers.add_parser("export", help="Export a report to a file")
    export_parser.add_argument(
        "report_type",
        choices=[rt.value for rt in ReportType] + [ALL_REPORTS],
        help="Report type, or 'all' for every report in one PDF",
    )
    export_parser.add_argument(
        "--format",
        choices=[f.value for f in ExportFormat],
        default=ExportFormat.PDF.value,
        help="Export format (default: pdf)",
    )
    export_parser.add_argument(
        "--output-dir", default=None, help="Directory for the exported file"
    )
    export_parser.add_argument(
        "--server",
        action="store_true",
        help="Download the backend's own export instead of rendering locally",
    )
    _add_report_options(export_parser)
    export_parser.set_defaults(func=cmd_export)

    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 0

    configure_logging()
    result: int = args.func(args)
    return result


if __name__ == "__main__":
    sys.exit(main())
