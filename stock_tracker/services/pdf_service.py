"""
PDF generation service for weekly stock reports.
"""
from io import BytesIO
from typing import Optional
import logging

from reportlab.lib import colors
from reportlab.lib.pagesizes import letter, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer

from stock_tracker.models.stock import StockRecord

logger = logging.getLogger(__name__)

HEADER_ROW = [
    "Week", "Item", "Received", "Sold", "Remaining",
    "Unit Price", "Selling Price", "Cost", "Revenue",
]


def describe_period(
    year: int,
    week: Optional[int] = None,
    start_week: Optional[int] = None,
    end_week: Optional[int] = None,
) -> str:
    """Human readable label matching the filter precedence."""
    if start_week is not None and end_week is not None:
        return f"Weeks {start_week}-{end_week}, {year}"
    if week is not None:
        return f"Week {week}, {year}"
    return f"All weeks, {year}"


def summarize(records: list[StockRecord]) -> dict:
    """Totals for a set of records; revenue only counts priced lines."""
    received = sum(r.quantity_received for r in records)
    sold = sum(r.quantity_sold for r in records)
    cost = sum(r.quantity_received * r.unit_price for r in records)
    revenue = sum(
        r.quantity_sold * r.selling_price
        for r in records
        if r.selling_price is not None
    )
    return {
        "lines": len(records),
        "received": received,
        "sold": sold,
        "cost": cost,
        "revenue": revenue,
    }


class PDFService:
    """Service for generating PDF reports."""

    def generate_stock_report(self, records: list[StockRecord], period: str) -> BytesIO:
        """
        Render *records* as a one-table PDF followed by a totals table.

        Args:
            records: Stock records already filtered and ordered by week
            period: Label printed under the title

        Returns:
            BytesIO buffer containing the PDF
        """
        logger.info("Generating stock PDF report for %s", period)

        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=landscape(letter),
            rightMargin=0.5 * inch,
            leftMargin=0.5 * inch,
            topMargin=0.5 * inch,
            bottomMargin=0.5 * inch,
        )

        styles = getSampleStyleSheet()
        elements = [
            Paragraph("Weekly Stock Report", styles["Heading1"]),
            Spacer(1, 0.2 * inch),
            Paragraph(f"Period: {period}", styles["Heading2"]),
            Spacer(1, 0.3 * inch),
        ]

        if not records:
            elements.append(
                Paragraph("No stock recorded for the selected period.", styles["Normal"])
            )
        else:
            elements.append(self._records_table(records))
            elements.append(Spacer(1, 0.3 * inch))
            elements.append(Paragraph("Summary", styles["Heading2"]))
            elements.append(Spacer(1, 0.1 * inch))
            elements.append(self._summary_table(summarize(records)))

        doc.build(elements)
        buffer.seek(0)

        logger.info("Stock PDF report generated with %s lines", len(records))
        return buffer

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    def _records_table(self, records: list[StockRecord]) -> Table:
        data = [HEADER_ROW]
        for r in records:
            selling = f"${r.selling_price:.2f}" if r.selling_price is not None else "-"
            revenue = (
                f"${r.quantity_sold * r.selling_price:.2f}"
                if r.selling_price is not None
                else "-"
            )
            data.append([
                str(r.week),
                r.item_name,
                str(r.quantity_received),
                str(r.quantity_sold),
                str(r.quantity_remaining),
                f"${r.unit_price:.2f}",
                selling,
                f"${r.quantity_received * r.unit_price:.2f}",
                revenue,
            ])

        table = Table(data, repeatRows=1, hAlign="LEFT")
        style = TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#2c3e50")),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
            ("ALIGN", (0, 0), (-1, 0), "CENTER"),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, 0), 9),
            ("BOTTOMPADDING", (0, 0), (-1, 0), 8),

            ("FONTNAME", (0, 1), (-1, -1), "Helvetica"),
            ("FONTSIZE", (0, 1), (-1, -1), 8),
            ("ALIGN", (2, 1), (-1, -1), "RIGHT"),
            ("BOTTOMPADDING", (0, 1), (-1, -1), 6),

            ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
        ])
        for i in range(2, len(data), 2):
            style.add("BACKGROUND", (0, i), (-1, i), colors.HexColor("#f7f9fb"))
        table.setStyle(style)
        return table

    def _summary_table(self, totals: dict) -> Table:
        data = [
            ["Metric", "Value"],
            ["Stock Lines", str(totals["lines"])],
            ["Units Received", str(totals["received"])],
            ["Units Sold", str(totals["sold"])],
            ["Total Cost", f"${totals['cost']:.2f}"],
            ["Total Revenue", f"${totals['revenue']:.2f}"],
        ]
        table = Table(data, colWidths=[3 * inch, 2 * inch])
        table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#3498db")),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("ALIGN", (1, 1), (1, -1), "RIGHT"),
            ("FONTNAME", (0, 1), (0, -1), "Helvetica-Bold"),
            ("FONTSIZE", (0, 1), (-1, -1), 9),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 8),
            ("GRID", (0, 0), (-1, -1), 1, colors.grey),
        ]))
        return table
