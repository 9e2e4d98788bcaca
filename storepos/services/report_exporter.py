"""
Report Exporter

Renders sales into downloadable reports at three detail levels:

- basic: one row per sale
- detailed: one row per sale item
- comprehensive: summary block, the basic table, then product performance

The same rows feed three outputs: CSV text (`render`), a print-ready PDF
(`render_print`) and an Excel workbook (`render_workbook`).

Author: TM3
Date: 2026-10-11
"""
import csv
import io
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable, List, Optional, Sequence, Tuple
from xml.sax.saxutils import escape

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from storepos.core.config import settings
from storepos.domain.product import Product
from storepos.domain.report import DetailLevel
from storepos.domain.sale import Sale
from storepos.services import sales_aggregator

logger = logging.getLogger(__name__)

NO_DATA_MESSAGE = "No data to export"

BASIC_HEADERS = ["Date", "Invoice", "Customer", "Items", "Amount"]
DETAILED_HEADERS = ["Date", "Sale ID", "Customer", "Product", "Quantity", "Unit Price", "Total"]
PERFORMANCE_HEADERS = ["Product ID", "Product Name", "Quantity Sold", "Revenue"]

SUMMARY_TITLE = "SALES REPORT SUMMARY"
DETAILS_TITLE = "SALES DETAILS"
PERFORMANCE_TITLE = "PRODUCT PERFORMANCE"

DateRange = Tuple[Optional[date], Optional[date]]


def format_currency(
    amount: Decimal,
    symbol: Optional[str] = None,
    decimals: Optional[int] = None
) -> str:
    """Currency symbol followed by the amount with thousands separators"""
    symbol = settings.CURRENCY_SYMBOL if symbol is None else symbol
    decimals = settings.CURRENCY_DECIMALS if decimals is None else decimals
    return f"{symbol}{Decimal(amount):,.{decimals}f}"


def format_period(date_range: Optional[DateRange]) -> str:
    start, end = date_range or (None, None)
    start_label = start.isoformat() if start else "All time"
    end_label = end.isoformat() if end else "Present"
    return f"{start_label} to {end_label}"


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


class CsvTableBuilder:
    """
    Accumulates CSV rows and section labels into one text document

    Fields are written through the csv module, so commas, quotes and line
    breaks inside text values are quoted instead of breaking the row.
    """

    def __init__(self):
        self._buffer = io.StringIO()
        self._writer = csv.writer(self._buffer, lineterminator="\n")

    def section(self, title: str) -> "CsvTableBuilder":
        self._writer.writerow([title])
        return self

    def row(self, values: Sequence[Any]) -> "CsvTableBuilder":
        self._writer.writerow([_cell_text(v) for v in values])
        return self

    def table(self, headers: Sequence[str], rows: Iterable[Sequence[Any]]) -> "CsvTableBuilder":
        self.row(headers)
        for values in rows:
            self.row(values)
        return self

    def blank(self) -> "CsvTableBuilder":
        self._buffer.write("\n")
        return self

    def build(self) -> str:
        return self._buffer.getvalue()


class ReportExporter:
    """
    Sales report renderer

    Args:
        walk_in_label: Customer label for sales without a customer name
        store_name: Shown in the title of the printed report
    """

    def __init__(self, walk_in_label: Optional[str] = None, store_name: Optional[str] = None):
        self.walk_in_label = walk_in_label or settings.WALK_IN_CUSTOMER_LABEL
        self.store_name = store_name or settings.STORE_NAME

    # ------------------------------------------------------------------
    # Rows
    # ------------------------------------------------------------------

    def _customer(self, sale: Sale) -> str:
        return sale.customer_name or self.walk_in_label

    def basic_rows(self, sales: List[Sale]) -> List[list]:
        return [
            [
                sale.date.date(),
                sale.invoice_number or sale.id,
                self._customer(sale),
                sale.total_quantity,
                sale.total_amount,
            ]
            for sale in sales
        ]

    def detailed_rows(self, sales: List[Sale]) -> List[list]:
        return [
            [
                sale.date.date(),
                sale.id,
                self._customer(sale),
                item.product_name,
                item.quantity,
                item.price,
                item.total,
            ]
            for sale in sales
            for item in sale.items
        ]

    def performance_rows(self, sales: List[Sale], products: List[Product]) -> List[list]:
        """Product performance, falling back to the catalog name for unnamed items"""
        names = {product.id: product.name for product in products}
        return [
            [p.product_id, p.name or names.get(p.product_id, ""), p.quantity, p.revenue]
            for p in sales_aggregator.product_performance(sales)
        ]

    def summary_rows(self, sales: List[Sale], date_range: Optional[DateRange] = None) -> List[list]:
        summary = sales_aggregator.summarize(sales)
        return [
            ["Period", format_period(date_range)],
            ["Total Revenue", summary.total_revenue],
            ["Total Transactions", summary.transaction_count],
            ["Total Items Sold", summary.items_sold],
            ["Average Order Value", summary.average_order_value],
        ]

    def sections(
        self,
        sales: List[Sale],
        products: List[Product],
        detail_level: DetailLevel,
        date_range: Optional[DateRange] = None
    ) -> List[Tuple[str, Optional[List[str]], List[list]]]:
        """
        The report as (title, headers, rows) sections in output order

        Summary rows are label/value pairs and have no header row.
        """
        detail_level = DetailLevel(detail_level)

        if detail_level == DetailLevel.BASIC:
            return [(DETAILS_TITLE, BASIC_HEADERS, self.basic_rows(sales))]

        if detail_level == DetailLevel.DETAILED:
            return [(DETAILS_TITLE, DETAILED_HEADERS, self.detailed_rows(sales))]

        return [
            (SUMMARY_TITLE, None, self.summary_rows(sales, date_range)),
            (DETAILS_TITLE, BASIC_HEADERS, self.basic_rows(sales)),
            (PERFORMANCE_TITLE, PERFORMANCE_HEADERS, self.performance_rows(sales, products)),
        ]

    # ------------------------------------------------------------------
    # Outputs
    # ------------------------------------------------------------------

    def render(
        self,
        sales: List[Sale],
        products: List[Product],
        detail_level: DetailLevel,
        date_range: Optional[DateRange] = None
    ) -> str:
        """
        CSV text for the requested detail level

        Basic and detailed reports are a single table. The comprehensive
        report labels each section and separates them with a blank line.
        Returns "No data to export" when there are no sales.
        """
        if not sales:
            return NO_DATA_MESSAGE

        detail_level = DetailLevel(detail_level)
        sections = self.sections(sales, products, detail_level, date_range)

        builder = CsvTableBuilder()
        if detail_level != DetailLevel.COMPREHENSIVE:
            _, headers, rows = sections[0]
            return builder.table(headers, rows).build()

        for index, (title, headers, rows) in enumerate(sections):
            if index:
                builder.blank()
            builder.section(title)
            if headers:
                builder.table(headers, rows)
            else:
                for values in rows:
                    builder.row(values)

        return builder.build()

    def render_print(
        self,
        sales: List[Sale],
        products: List[Product],
        detail_level: DetailLevel,
        date_range: Optional[DateRange] = None
    ) -> bytes:
        """Print-ready PDF of the report with currency formatted amounts"""
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(buffer, pagesize=letter, title=f"{self.store_name} Sales Report")
        styles = getSampleStyleSheet()
        story = []

        story.append(Paragraph(escape(f"{self.store_name} Sales Report"), styles["Title"]))
        story.append(Spacer(1, 12))
        story.append(Paragraph(
            f"Generated on: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}", styles["Normal"]
        ))
        story.append(Paragraph(f"Period: {format_period(date_range)}", styles["Normal"]))
        story.append(Spacer(1, 12))

        if not sales:
            story.append(Paragraph(NO_DATA_MESSAGE, styles["Normal"]))
            doc.build(story)
            return buffer.getvalue()

        for title, headers, rows in self.sections(sales, products, detail_level, date_range):
            story.append(Paragraph(escape(title.title()), styles["Heading2"]))
            story.append(Spacer(1, 6))

            table_data = [list(headers)] if headers else []
            table_data.extend([self._print_cell(v) for v in values] for values in rows)

            table = Table(table_data, repeatRows=1 if headers else 0)
            table.setStyle(self._table_style(has_header=bool(headers)))
            story.append(table)
            story.append(Spacer(1, 12))

        story.append(Paragraph(
            f"Total sales: {len(sales)} | Total revenue: "
            f"{escape(format_currency(sales_aggregator.summarize(sales).total_revenue))}",
            styles["Normal"]
        ))

        doc.build(story)
        logger.info(f"Rendered PDF report for {len(sales)} sales")
        return buffer.getvalue()

    @staticmethod
    def _print_cell(value: Any) -> str:
        if isinstance(value, Decimal):
            return format_currency(value)
        return _cell_text(value)

    @staticmethod
    def _table_style(has_header: bool) -> TableStyle:
        commands = [
            ("FONTNAME", (0, 0), (-1, -1), "Helvetica"),
            ("FONTSIZE", (0, 0), (-1, -1), 8),
            ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ("ALIGN", (-1, 0), (-1, -1), "RIGHT"),
        ]
        if has_header:
            commands.extend([
                ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#366092")),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("BOTTOMPADDING", (0, 0), (-1, 0), 8),
            ])
        return TableStyle(commands)

    def render_workbook(
        self,
        sales: List[Sale],
        products: List[Product],
        detail_level: DetailLevel,
        date_range: Optional[DateRange] = None
    ) -> io.BytesIO:
        """Excel workbook with one sheet per report section"""
        wb = Workbook()
        wb.remove(wb.active)

        header_fill = PatternFill(start_color="366092", end_color="366092", fill_type="solid")
        header_font = Font(color="FFFFFF", bold=True, size=12)
        border = Border(
            left=Side(style='thin'),
            right=Side(style='thin'),
            top=Side(style='thin'),
            bottom=Side(style='thin')
        )

        if sales:
            sections = self.sections(sales, products, detail_level, date_range)
        else:
            sections = [(DETAILS_TITLE, None, [[NO_DATA_MESSAGE]])]

        for title, headers, rows in sections:
            ws = wb.create_sheet(title=title.title()[:31])
            first_data_row = 1

            if headers:
                for col_num, header in enumerate(headers, 1):
                    cell = ws.cell(row=1, column=col_num, value=header)
                    cell.fill = header_fill
                    cell.font = header_font
                    cell.alignment = Alignment(horizontal='center', vertical='center')
                    cell.border = border
                    ws.column_dimensions[cell.column_letter].width = max(14, len(header) + 4)
                ws.freeze_panes = 'A2'
                first_data_row = 2

            for row_num, values in enumerate(rows, first_data_row):
                for col_num, value in enumerate(values, 1):
                    if isinstance(value, Decimal):
                        cell = ws.cell(row=row_num, column=col_num, value=float(value))
                        cell.number_format = '#,##0.00'
                        cell.alignment = Alignment(horizontal='right', vertical='center')
                    else:
                        cell = ws.cell(row=row_num, column=col_num, value=value)
                    cell.border = border

        excel_file = io.BytesIO()
        wb.save(excel_file)
        excel_file.seek(0)

        return excel_file
