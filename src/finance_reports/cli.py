"""Command-line interface for finance reports."""

import argparse
import sys
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from finance_reports import __version__
from finance_reports.config import Config, load_config
from finance_reports.errors import FinanceReportsError
from finance_reports.ledger import CSVLedger
from finance_reports.models.export import ExportArtifact
from finance_reports.models.goal import Goal
from finance_reports.models.report import MonthlySummary, ReportType
from finance_reports.output import PDFRenderer
from finance_reports.processing.exporter import ReportExporter
from finance_reports.processing.period_resolver import PERIOD_LABELS, PeriodKey
from finance_reports.utils.decimal_utils import format_currency, parse_amount
from finance_reports.utils.logging_config import get_logger, setup_logging

# Load environment variables from .env file (if it exists)
load_dotenv()

console = Console()
logger = get_logger(__name__)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to settings.yaml (default: config/settings.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for info, -vv for debug)",
    )


def _add_period_arguments(parser: argparse.ArgumentParser) -> None:
    period_keys = [key.value for key in PeriodKey]
    parser.add_argument(
        "--period",
        choices=period_keys,
        default=None,
        help="Symbolic period (default: current-month)",
    )
    parser.add_argument(
        "--start",
        default=None,
        help="Custom period start (DD/MM/YYYY)",
    )
    parser.add_argument(
        "--end",
        default=None,
        help="Custom period end (DD/MM/YYYY)",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser.

    Returns:
        Configured ArgumentParser.
    """
    parser = argparse.ArgumentParser(
        prog="finance-reports",
        description="Export transactions and financial reports as PDF documents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s transactions --user alice --period last-month
  %(prog)s transactions --user alice --start 01/01/2026 --end 31/03/2026 --type expense
  %(prog)s report category --user alice --month 2026-09
  %(prog)s report top --user alice --period current-year --limit 5
  %(prog)s goal --target 5000 --current 1200 --monthly 300 --deadline 2027-06-30
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # transactions
    txn_parser = subparsers.add_parser("transactions", help="Export a transaction listing")
    txn_parser.add_argument("--user", required=True, help="Ledger owner")
    _add_period_arguments(txn_parser)
    txn_parser.add_argument(
        "--type",
        choices=["income", "expense"],
        default=None,
        help="Only export this transaction type",
    )
    txn_parser.add_argument("--no-summary", action="store_true", help="Omit the summary block")
    txn_parser.add_argument("--title", default=None, help="Document title override")
    _add_common_arguments(txn_parser)

    # report
    report_parser = subparsers.add_parser("report", help="Export a financial report")
    report_parser.add_argument(
        "report_type",
        choices=[r.value for r in ReportType],
        help="Report to generate",
    )
    report_parser.add_argument("--user", required=True, help="Ledger owner")
    _add_period_arguments(report_parser)
    report_parser.add_argument(
        "--month",
        default=None,
        help="Single calendar month (YYYY-MM)",
    )
    report_parser.add_argument(
        "--months",
        type=int,
        default=None,
        help="Trailing months for the evolution report (1-24)",
    )
    report_parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Number of transactions for the top report (1-50)",
    )
    report_parser.add_argument(
        "--type",
        choices=["income", "expense"],
        default=None,
        help="Only include this transaction type",
    )
    report_parser.add_argument("--no-charts", action="store_true", help="Omit charts")
    report_parser.add_argument("--no-summary", action="store_true", help="Omit the summary block")
    report_parser.add_argument("--title", default=None, help="Document title override")
    _add_common_arguments(report_parser)

    # goal
    goal_parser = subparsers.add_parser("goal", help="Show progress towards a savings goal")
    goal_parser.add_argument("--name", default="Savings goal", help="Goal name")
    goal_parser.add_argument("--target", required=True, help="Target amount")
    goal_parser.add_argument("--current", default="0", help="Amount saved so far")
    goal_parser.add_argument("--monthly", default=None, help="Monthly contribution")
    goal_parser.add_argument(
        "--deadline",
        type=lambda s: date.fromisoformat(s),
        default=None,
        help="Deadline (YYYY-MM-DD)",
    )
    _add_common_arguments(goal_parser)

    return parser


def get_log_level(verbosity: int) -> str:
    """Convert verbosity count to log level.

    Args:
        verbosity: Number of -v flags.

    Returns:
        Log level string.
    """
    if verbosity >= 2:
        return "DEBUG"
    elif verbosity >= 1:
        return "INFO"
    else:
        return "WARNING"


def build_exporter(config: Config) -> ReportExporter:
    """Wire the CSV ledger and PDF renderer from configuration."""
    ledger = CSVLedger(config.ledger.data_dir, strict=config.ledger.strict)
    renderer = PDFRenderer(
        config.output.export_dir,
        currency_symbol=config.output.currency_symbol,
        date_format=config.output.date_format,
    )
    return ReportExporter(ledger, renderer, settings=config.reports)


def display_artifact(artifact: ExportArtifact, currency_symbol: str = "$") -> None:
    """Print what was written."""
    console.print(f"\n[green]✓[/green] Exported [bold]{artifact.filename}[/bold]")
    console.print(f"  Path: {artifact.filepath}")
    console.print(f"  Pages: {artifact.pages}")
    console.print(f"  Size: {artifact.size_kb:.1f} KB")
    if artifact.transaction_count is not None:
        console.print(f"  Transactions: {artifact.transaction_count}")
    if artifact.summary is not None:
        display_summary(artifact.summary, currency_symbol)


def display_summary(summary: MonthlySummary, currency_symbol: str = "$") -> None:
    """Print income, expense and balance totals."""
    balance_color = "green" if summary.balance >= 0 else "red"
    console.print("\n[bold]Summary[/bold]")
    console.print(f"  Income: {format_currency(summary.total_income, currency_symbol)}")
    console.print(f"  Expense: {format_currency(summary.total_expense, currency_symbol)}")
    console.print(
        f"  Balance: [{balance_color}]"
        f"{format_currency(summary.balance, currency_symbol)}[/{balance_color}]"
    )


def transactions_command(args: argparse.Namespace, config: Config) -> int:
    """Export a transaction listing.

    Args:
        args: Parsed command-line arguments.
        config: Loaded configuration.

    Returns:
        Exit code.
    """
    filters: dict[str, object] = {}
    if args.period:
        filters["period"] = args.period
    if args.start or args.end:
        filters["start_date"] = args.start
        filters["end_date"] = args.end
    if args.type:
        filters["type"] = args.type

    exporter = build_exporter(config)
    with console.status("Exporting transactions..."):
        artifact = exporter.export_transactions(
            args.user,
            filters,
            include_summary=not args.no_summary,
            title=args.title,
        )

    display_artifact(artifact, config.output.currency_symbol)
    return 0


def report_command(args: argparse.Namespace, config: Config) -> int:
    """Export a report.

    Args:
        args: Parsed command-line arguments.
        config: Loaded configuration.

    Returns:
        Exit code.
    """
    options = {
        "period": args.period,
        "start_date": args.start,
        "end_date": args.end,
        "month": args.month,
        "months": args.months,
        "limit": args.limit,
        "type": args.type,
        "include_charts": not args.no_charts,
        "include_summary": not args.no_summary,
        "title": args.title,
    }
    if args.period:
        console.print(f"[dim]Period: {PERIOD_LABELS[PeriodKey(args.period)]}[/dim]")

    exporter = build_exporter(config)
    with console.status(f"Generating {args.report_type} report..."):
        artifact = exporter.export_report(args.user, args.report_type, options)

    display_artifact(artifact, config.output.currency_symbol)
    return 0


def goal_command(args: argparse.Namespace, config: Config, today: Optional[date] = None) -> int:
    """Show progress and a completion estimate for a savings goal.

    Args:
        args: Parsed command-line arguments.
        config: Loaded configuration.
        today: Reference date (defaults to today).

    Returns:
        Exit code.
    """
    today = today or date.today()
    symbol = config.output.currency_symbol
    try:
        target = parse_amount(args.target)
        current = parse_amount(args.current)
        monthly: Optional[Decimal] = parse_amount(args.monthly) if args.monthly else None
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    goal = Goal.create(
        name=args.name,
        target_amount=target,
        current_amount=current,
        monthly_contribution=monthly,
        deadline=args.deadline,
        today=today,
    )
    progress = goal.progress()

    table = Table(title=goal.name, show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Target", format_currency(progress.target, symbol))
    table.add_row("Saved", format_currency(progress.current, symbol))
    table.add_row("Remaining", format_currency(progress.remaining, symbol))
    table.add_row("Progress", f"{progress.percentage}%")

    if goal.deadline is not None:
        days = goal.days_remaining(today)
        style = "red" if goal.is_urgent(today) else None
        table.add_row("Deadline", f"{goal.deadline.isoformat()} ({days} days)", style=style)

    estimate = goal.estimate_completion(today)
    if estimate is not None:
        table.add_row("Months needed", str(estimate.months_needed))
        table.add_row("Estimated completion", estimate.date.isoformat())
        if goal.deadline is not None:
            verdict = "[green]on track[/green]" if estimate.is_on_track else "[red]behind[/red]"
            table.add_row("Status", verdict)

    console.print(table)
    if progress.is_completed:
        console.print("[green]Goal reached![/green]")
    return 0


COMMANDS = {
    "transactions": transactions_command,
    "report": report_command,
    "goal": goal_command,
}


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Arguments to parse (defaults to sys.argv).

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    try:
        config = load_config(args.config)
    except (FileNotFoundError, FinanceReportsError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    # Set up logging
    log_level = get_log_level(args.verbose) if args.verbose else config.logging.level
    setup_logging(
        level=log_level,
        log_file=config.logging.file,
        console_output=args.verbose > 0,
    )
    logger.debug(f"Running {args.command} command")

    try:
        return COMMANDS[args.command](args, config)
    except FinanceReportsError as e:
        logger.debug(f"{args.command} failed: {e}")
        console.print(f"[red]Error: {e}[/red]")
        return 1


if __name__ == "__main__":
    sys.exit(main())
