"""PDF renderer for transaction listings and reports."""

import os
from decimal import Decimal
from pathlib import Path
from typing import Callable, Optional, Sequence

import pdfplumber
from reportlab.graphics.charts.barcharts import VerticalBarChart
from reportlab.graphics.charts.legends import Legend
from reportlab.graphics.charts.piecharts import Pie
from reportlab.graphics.shapes import Drawing
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Flowable, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from finance_reports.errors import RenderError
from finance_reports.models.export import ExportArtifact, ExportConfig
from finance_reports.models.report import (
    CategoryBreakdown,
    ComparativeReport,
    EvolutionSeries,
    MonthlySummary,
    PatternAnalysis,
    TopTransactions,
    TransactionListing,
)
from finance_reports.models.transaction import Transaction
from finance_reports.output.base import BaseRenderer, RenderInput
from finance_reports.utils.date_utils import format_date
from finance_reports.utils.decimal_utils import ZERO, format_currency, percentage
from finance_reports.utils.logging_config import get_logger
from finance_reports.utils.sanitize import sanitize_for_pdf, truncate

logger = get_logger(__name__)

HEADER_COLOR = colors.HexColor("#4472C4")
ALT_ROW_COLOR = colors.HexColor("#EEF2FA")
INCOME_COLOR = colors.HexColor("#2E7D32")
EXPENSE_COLOR = colors.HexColor("#C62828")
BALANCE_COLOR = colors.HexColor("#4472C4")
PIE_COLORS = [
    colors.HexColor(c)
    for c in ("#4472C4", "#ED7D31", "#A5A5A5", "#FFC000", "#5B9BD5", "#70AD47", "#264478", "#9E480E")
]

CHART_WIDTH = 170 * mm
CHART_HEIGHT = 70 * mm

# Pie slices beyond this are folded into "Other"
MAX_PIE_SLICES = len(PIE_COLORS)

TEMP_SUFFIX = ".part"


class PDFRenderer(BaseRenderer):
    """Renders exports as A4 PDF documents with reportlab.

    Layout: title and generation time, period line, optional summary
    block, one or more tables for the report type, optional chart, and a
    "Page N" footer. The file is written next to its final name with a
    .part suffix, its page count is read back with pdfplumber, and only
    then is it moved into place.
    """

    def __init__(
        self,
        export_dir: Path,
        currency_symbol: str = "$",
        date_format: str = "%d/%m/%Y",
    ):
        """Initialize the renderer.

        Args:
            export_dir: Directory documents are written to.
            currency_symbol: Currency symbol for amounts.
            date_format: strftime format for dates.
        """
        self.export_dir = Path(export_dir)
        self.currency_symbol = currency_symbol
        self.date_format = date_format

        styles = getSampleStyleSheet()
        self.title_style = styles["Title"]
        self.heading_style = styles["Heading2"]
        self.body_style = styles["BodyText"]
        self.meta_style = ParagraphStyle(
            "Meta", parent=styles["Normal"], fontSize=9, textColor=colors.grey
        )
        self.cell_style = ParagraphStyle("Cell", parent=styles["Normal"], fontSize=8, leading=10)

        self._builders: dict[type, Callable[[object, ExportConfig], list[Flowable]]] = {
            TransactionListing: self._build_listing,  # type: ignore[dict-item]
            MonthlySummary: self._build_monthly,  # type: ignore[dict-item]
            CategoryBreakdown: self._build_category,  # type: ignore[dict-item]
            EvolutionSeries: self._build_evolution,  # type: ignore[dict-item]
            TopTransactions: self._build_top,  # type: ignore[dict-item]
            ComparativeReport: self._build_comparative,  # type: ignore[dict-item]
            PatternAnalysis: self._build_patterns,  # type: ignore[dict-item]
        }

    def render(self, data: RenderInput, config: ExportConfig) -> ExportArtifact:
        """Render data to <export_dir>/<generated filename>.

        Raises:
            RenderError: On an unsupported input type or any write failure.
                No file is left behind in that case.
        """
        builder = self._builders.get(type(data))
        if builder is None:
            raise RenderError(f"No PDF layout for {type(data).__name__}")

        filename = config.generate_filename()
        final_path = self.export_dir / filename
        temp_path = final_path.with_name(filename + TEMP_SUFFIX)

        logger.info(f"Rendering {config.get_title()} to {final_path}")
        try:
            self.export_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise RenderError(
                f"Cannot create export directory {self.export_dir}: {e}", filepath=final_path
            ) from e

        try:
            story = self._build_header(config) + builder(data, config)

            doc = SimpleDocTemplate(
                str(temp_path),
                pagesize=A4,
                title=config.get_title(),
                leftMargin=18 * mm,
                rightMargin=18 * mm,
                topMargin=18 * mm,
                bottomMargin=20 * mm,
            )
            doc.build(story, onFirstPage=self._draw_footer, onLaterPages=self._draw_footer)

            pages = self._count_pages(temp_path)
            os.replace(temp_path, final_path)
            size = final_path.stat().st_size
        except RenderError:
            temp_path.unlink(missing_ok=True)
            raise
        except Exception as e:
            temp_path.unlink(missing_ok=True)
            raise RenderError(f"Failed to render {filename}: {e}", filepath=final_path) from e

        logger.debug(f"Wrote {final_path} ({pages} pages, {size} bytes)")
        return ExportArtifact(filename=filename, filepath=final_path, pages=pages, size=size)

    def _count_pages(self, path: Path) -> int:
        with pdfplumber.open(path) as pdf:
            pages = len(pdf.pages)
        if pages == 0:
            raise RenderError(f"Rendered document has no pages: {path}", filepath=path)
        return pages

    @staticmethod
    def _draw_footer(canvas, doc) -> None:  # type: ignore[no-untyped-def]
        canvas.saveState()
        canvas.setFont("Helvetica", 8)
        canvas.setFillColor(colors.grey)
        canvas.drawCentredString(A4[0] / 2, 10 * mm, f"Page {canvas.getPageNumber()}")
        canvas.restoreState()

    # Formatting helpers

    def _money(self, amount: Decimal) -> str:
        return format_currency(amount, self.currency_symbol)

    def _date(self, value) -> str:  # type: ignore[no-untyped-def]
        return format_date(value, self.date_format)

    def _table(
        self,
        rows: list[list[object]],
        col_widths: Optional[Sequence[float]] = None,
        numeric_from: Optional[int] = 1,
    ) -> Table:
        """Styled table with a header row; columns from numeric_from are right-aligned."""
        table = Table(rows, colWidths=col_widths, repeatRows=1, hAlign="LEFT")
        table.setStyle(
            TableStyle(
                [
                    ("BACKGROUND", (0, 0), (-1, 0), HEADER_COLOR),
                    ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                    ("FONTSIZE", (0, 0), (-1, -1), 8),
                    ("GRID", (0, 0), (-1, -1), 0.25, colors.lightgrey),
                    ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, ALT_ROW_COLOR]),
                    ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ]
            )
        )
        if numeric_from is not None:
            table.setStyle(TableStyle([("ALIGN", (numeric_from, 1), (-1, -1), "RIGHT")]))
        return table

    def _heading(self, text: str) -> Paragraph:
        return Paragraph(sanitize_for_pdf(text), self.heading_style)

    def _note(self, text: str) -> Paragraph:
        return Paragraph(sanitize_for_pdf(text), self.body_style)

    def _summary_table(self, summary: MonthlySummary) -> Table:
        rows: list[list[object]] = [
            ["Metric", "Value"],
            ["Total income", self._money(summary.total_income)],
            ["Total expense", self._money(summary.total_expense)],
            ["Balance", self._money(summary.balance)],
            ["Transactions", str(summary.count)],
            ["Average income", self._money(summary.average_income)],
            ["Average expense", self._money(summary.average_expense)],
        ]
        return self._table(rows, col_widths=[60 * mm, 40 * mm])

    def _transaction_rows(
        self, transactions: Sequence[Transaction], ranked: bool = False
    ) -> list[list[object]]:
        header = ["Date", "Description", "Category", "Type", "Amount"]
        rows: list[list[object]] = [(["#"] if ranked else []) + header]
        for index, txn in enumerate(transactions, start=1):
            row: list[object] = [
                self._date(txn.date),
                Paragraph(sanitize_for_pdf(txn.description, 80), self.cell_style),
                truncate(txn.category, 30),
                txn.type.value.capitalize(),
                self._money(txn.signed_amount),
            ]
            rows.append(([str(index)] if ranked else []) + row)
        return rows

    def _transaction_table(self, transactions: Sequence[Transaction], ranked: bool = False) -> Table:
        widths = [22 * mm, 62 * mm, 34 * mm, 20 * mm, 30 * mm]
        if ranked:
            widths = [8 * mm, 22 * mm, 56 * mm, 32 * mm, 20 * mm, 30 * mm]
        table = self._table(self._transaction_rows(transactions, ranked), col_widths=widths)
        table.setStyle(TableStyle([("ALIGN", (0, 1), (-2, -1), "LEFT")]))
        return table

    # Charts

    def _bar_chart(
        self,
        labels: Sequence[str],
        series: Sequence[Sequence[Decimal]],
        names: Sequence[str],
        series_colors: Sequence[colors.Color],
    ) -> Drawing:
        drawing = Drawing(CHART_WIDTH, CHART_HEIGHT)
        chart = VerticalBarChart()
        chart.x = 45
        chart.y = 30
        chart.width = CHART_WIDTH - 130
        chart.height = CHART_HEIGHT - 45
        chart.data = [[float(v) for v in values] for values in series]
        chart.categoryAxis.categoryNames = list(labels)
        chart.categoryAxis.labels.fontSize = 7
        chart.valueAxis.labels.fontSize = 7
        chart.bars.strokeWidth = 0
        for index, color in enumerate(series_colors):
            chart.bars[index].fillColor = color
        drawing.add(chart)

        legend = Legend()
        legend.x = CHART_WIDTH - 75
        legend.y = CHART_HEIGHT - 20
        legend.fontSize = 7
        legend.alignment = "right"
        legend.colorNamePairs = list(zip(series_colors, names))
        drawing.add(legend)
        return drawing

    def _pie_chart(self, breakdown: CategoryBreakdown) -> Drawing:
        items = list(breakdown.items)
        labels = [truncate(item.category, 20) for item in items[: MAX_PIE_SLICES - 1]]
        values = [item.total for item in items[: MAX_PIE_SLICES - 1]]
        if len(items) >= MAX_PIE_SLICES:
            labels.append("Other")
            values.append(sum((item.total for item in items[MAX_PIE_SLICES - 1 :]), ZERO))

        drawing = Drawing(CHART_WIDTH, CHART_HEIGHT)
        pie = Pie()
        pie.x = CHART_WIDTH / 2 - 90
        pie.y = 15
        pie.width = CHART_HEIGHT - 30
        pie.height = CHART_HEIGHT - 30
        pie.data = [float(v) for v in values]
        pie.labels = [f"{label} ({percentage(v, breakdown.total)}%)" for label, v in zip(labels, values)]
        pie.slices.strokeWidth = 0.5
        pie.slices.fontSize = 7
        for index in range(len(values)):
            pie.slices[index].fillColor = PIE_COLORS[index % len(PIE_COLORS)]
        drawing.add(pie)
        return drawing

    # Sections

    def _build_header(self, config: ExportConfig) -> list[Flowable]:
        story: list[Flowable] = [
            Paragraph(sanitize_for_pdf(config.get_title(), 120), self.title_style),
            Paragraph(
                f"Generated on {config.created_at.strftime(self.date_format + ' %H:%M')}",
                self.meta_style,
            ),
        ]

        filters = config.filters
        if filters.start_date or filters.end_date:
            start = self._date(filters.start_date) if filters.start_date else "the beginning"
            end = self._date(filters.end_date) if filters.end_date else "today"
            story.append(Paragraph(f"Period: {start} to {end}", self.meta_style))
        if filters.type is not None:
            story.append(Paragraph(f"Type: {filters.type.value}", self.meta_style))

        story.append(Spacer(1, 6 * mm))
        return story

    def _highlights(self, lines: Sequence[str], config: ExportConfig) -> list[Flowable]:
        if not config.include_summary or not lines:
            return []
        story: list[Flowable] = [self._heading("Summary")]
        story.extend(self._note(line) for line in lines)
        story.append(Spacer(1, 4 * mm))
        return story

    def _build_listing(self, listing: TransactionListing, config: ExportConfig) -> list[Flowable]:
        story: list[Flowable] = []
        if config.include_summary:
            story += [self._heading("Summary"), self._summary_table(listing.summary), Spacer(1, 6 * mm)]

        story.append(self._heading(f"Transactions ({len(listing.transactions)})"))
        if not listing.transactions:
            story.append(self._note("No transactions found for this period."))
            return story
        story.append(self._transaction_table(listing.transactions))
        return story

    def _build_monthly(self, summary: MonthlySummary, config: ExportConfig) -> list[Flowable]:
        lines = []
        if summary.total_income > 0:
            lines.append(
                f"You kept {percentage(summary.balance, summary.total_income)}% of your income."
            )
        elif summary.count:
            lines.append("No income was recorded in this period.")
        story = self._highlights(lines, config)

        story += [self._heading("Totals"), self._summary_table(summary)]
        if config.include_charts and (summary.total_income or summary.total_expense):
            story += [
                Spacer(1, 6 * mm),
                self._bar_chart(
                    ["Income", "Expense"],
                    [[summary.total_income, summary.total_expense]],
                    ["Amount"],
                    [BALANCE_COLOR],
                ),
            ]
        return story

    def _build_category(self, breakdown: CategoryBreakdown, config: ExportConfig) -> list[Flowable]:
        if not breakdown.items:
            return [self._note("No transactions found for this period.")]

        top = breakdown.items[0]
        story = self._highlights(
            [
                f"{len(breakdown.items)} categories totalling {self._money(breakdown.total)}.",
                f"Largest category: {top.category} ({top.percentage}%).",
            ],
            config,
        )

        rows: list[list[object]] = [["Category", "Transactions", "Total", "Share"]]
        for item in breakdown.items:
            rows.append(
                [truncate(item.category, 40), str(item.count), self._money(item.total), f"{item.percentage}%"]
            )
        widths = [70 * mm, 28 * mm, 36 * mm, 24 * mm]
        story += [self._heading("By category"), self._table(rows, col_widths=widths)]

        if config.include_charts and breakdown.total > 0:
            story += [Spacer(1, 6 * mm), self._pie_chart(breakdown)]
        return story

    def _build_evolution(self, series: EvolutionSeries, config: ExportConfig) -> list[Flowable]:
        if not series.months:
            return [self._note("No months to show.")]

        lines = [f"Balance trend over the period: {self._money(series.trend)}."]
        best, worst = series.best_month, series.worst_month
        if best is not None and worst is not None and best is not worst:
            lines.append(f"Best month: {best.label} ({self._money(best.summary.balance)}).")
            lines.append(f"Worst month: {worst.label} ({self._money(worst.summary.balance)}).")
        story = self._highlights(lines, config)

        rows: list[list[object]] = [["Month", "Income", "Expense", "Balance", "Transactions"]]
        for entry in series.months:
            rows.append(
                [
                    entry.label,
                    self._money(entry.summary.total_income),
                    self._money(entry.summary.total_expense),
                    self._money(entry.summary.balance),
                    str(entry.summary.count),
                ]
            )
        story += [self._heading("Month by month"), self._table(rows)]

        has_values = any(m.summary.total_income or m.summary.total_expense for m in series.months)
        if config.include_charts and has_values:
            story += [
                Spacer(1, 6 * mm),
                self._bar_chart(
                    [m.label for m in series.months],
                    [
                        [m.summary.total_income for m in series.months],
                        [m.summary.total_expense for m in series.months],
                    ],
                    ["Income", "Expense"],
                    [INCOME_COLOR, EXPENSE_COLOR],
                ),
            ]
        return story

    def _build_top(self, top: TopTransactions, config: ExportConfig) -> list[Flowable]:
        if not top.items:
            return [self._note("No transactions found for this period.")]

        story = self._highlights(
            [f"These {len(top.items)} transactions account for {top.share_of_total}% of all movement."],
            config,
        )
        story += [
            self._heading(f"Top {top.limit} transactions"),
            self._transaction_table(top.items, ranked=True),
        ]
        for heading, items in (("Top incomes", top.top_incomes), ("Top expenses", top.top_expenses)):
            if items:
                story += [
                    Spacer(1, 6 * mm),
                    self._heading(heading),
                    self._transaction_table(items, ranked=True),
                ]
        return story

    def _build_comparative(self, report: ComparativeReport, config: ExportConfig) -> list[Flowable]:
        previous, current = report.previous, report.current
        balance_delta = report.deltas.get("balance")
        before_label = previous.period.label or "Previous"
        now_label = current.period.label or "Current"
        lines = [
            f"Comparing {previous.period.display(self.date_format)} "
            f"with {current.period.display(self.date_format)}."
        ]
        if balance_delta is not None:
            lines.append(f"Balance changed by {balance_delta}%.")
        lines.extend(f"{insight.message}." for insight in report.insights)
        story = self._highlights(lines, config)

        metrics = (
            ("Income", "income", True),
            ("Expense", "expense", True),
            ("Balance", "balance", True),
            ("Transactions", "count", False),
        )
        values = {
            "income": (previous.summary.total_income, current.summary.total_income),
            "expense": (previous.summary.total_expense, current.summary.total_expense),
            "balance": (previous.summary.balance, current.summary.balance),
            "count": (Decimal(previous.summary.count), Decimal(current.summary.count)),
        }
        rows: list[list[object]] = [["Metric", before_label, now_label, "Difference", "Change"]]
        for label, key, is_money in metrics:
            before, now = values[key]
            fmt = self._money if is_money else (lambda v: str(int(v)))
            delta = report.deltas.get(key)
            rows.append(
                [
                    label,
                    fmt(before),
                    fmt(now),
                    fmt(report.differences.get(key, now - before)),
                    f"{delta}%" if delta is not None else "n/a",
                ]
            )
        story += [self._heading("Key figures"), self._table(rows)]

        if report.category_changes:
            change_rows: list[list[object]] = [
                ["Category", "Previous", "Current", "Difference", "Change"]
            ]
            for change in report.category_changes:
                change_rows.append(
                    [
                        truncate(change.category, 40),
                        self._money(change.previous),
                        self._money(change.current),
                        self._money(change.difference),
                        f"{change.variation}%" if change.variation is not None else "n/a",
                    ]
                )
            story += [Spacer(1, 6 * mm), self._heading("Spending by category"), self._table(change_rows)]

        has_values = any(v != 0 for pair in values.values() for v in pair)
        if config.include_charts and has_values:
            story += [
                Spacer(1, 6 * mm),
                self._bar_chart(
                    ["Income", "Expense", "Balance"],
                    [
                        [values[k][0] for k in ("income", "expense", "balance")],
                        [values[k][1] for k in ("income", "expense", "balance")],
                    ],
                    [before_label, now_label],
                    [colors.HexColor("#A5A5A5"), BALANCE_COLOR],
                ),
            ]
        return story

    def _build_patterns(self, analysis: PatternAnalysis, config: ExportConfig) -> list[Flowable]:
        if not analysis.signals:
            return [self._note("Not enough activity in this period to detect patterns.")]

        story = self._highlights([f"{len(analysis.signals)} patterns detected."], config)
        rows: list[list[object]] = [["Signal", "Evidence"]]
        for signal in analysis.signals:
            rows.append(
                [
                    signal.signal.replace("_", " ").capitalize(),
                    Paragraph(sanitize_for_pdf(signal.evidence), self.cell_style),
                ]
            )
        table = self._table(rows, col_widths=[50 * mm, 120 * mm], numeric_from=None)
        story += [self._heading("Patterns"), table]
        return story
