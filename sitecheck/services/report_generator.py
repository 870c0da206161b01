"""
sitecheck Report Generator

Renders an audit result (the JSON shape returned by POST /check) as:
- Excel workbook (openpyxl)
- PDF document (reportlab platypus, A4)

Both writers work on plain dicts so a client can post back a result it
received earlier without it being re-validated.
"""

import io
import logging
from datetime import date
from typing import Any
from xml.sax.saxutils import escape

from openpyxl import Workbook
from openpyxl.styles import Font
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from sitecheck.schemas.audit import CATEGORY_KEYS

logger = logging.getLogger(__name__)

REPORT_TITLE = "Website Check Results"
LINK_SHEET_TITLE = "Link Crawl"
LINK_COLUMNS = ("URL", "HTTP Status", "Reachable", "HTTPS Valid", "Error")


def status_text(value: Any) -> str:
    """Pass/Fail for booleans, the value's text otherwise."""
    if isinstance(value, bool):
        return "Pass" if value else "Fail"
    if value is None:
        return ""
    return str(value)


def present_categories(results: dict[str, Any]) -> list[tuple[str, dict[str, Any]]]:
    """Categories present in results, in fixed report order."""
    return [
        (category, results[category])
        for category in CATEGORY_KEYS
        if isinstance(results.get(category), dict)
    ]


def _check_date() -> str:
    return date.today().isoformat()


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _link_rows(results: dict[str, Any]) -> list[list[Any]]:
    link_crawl = results.get("LinkCrawl") or {}
    rows = []
    for link in link_crawl.get("perLink") or []:
        rows.append([
            link.get("url"),
            link.get("httpStatus"),
            "Yes" if link.get("reachable") else "No",
            "Yes" if link.get("httpsValid") else "No",
            link.get("errorMessage") or None,
        ])
    return rows


def _summary_rows(results: dict[str, Any]) -> list[tuple[str, Any]]:
    rows: list[tuple[str, Any]] = []
    sitemap = results.get("Sitemap")
    if isinstance(sitemap, dict):
        rows.extend((key, value) for key, value in sitemap.items() if value is not None)
    link_crawl = results.get("LinkCrawl")
    if isinstance(link_crawl, dict):
        rows.append(("Total Links", link_crawl.get("totalLinks", 0)))
        rows.append(("Tested Links", link_crawl.get("testedLinks", 0)))
    return rows


def _has_crawl_data(results: dict[str, Any]) -> bool:
    return isinstance(results.get("Sitemap"), dict) or isinstance(results.get("LinkCrawl"), dict)


class ExcelReportGenerator:
    """Writes audit results to an .xlsx workbook."""

    media_type = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    filename = "website-check-results.xlsx"

    def generate(self, results: dict[str, Any], url: str) -> bytes:
        workbook = Workbook()
        sheet = workbook.active
        sheet.title = REPORT_TITLE

        sheet.append(["Category", "Test", "Status"])
        for cell in sheet[1]:
            cell.font = Font(bold=True)
        for column, width in zip("ABC", (20, 30, 20)):
            sheet.column_dimensions[column].width = width

        sheet.append(["Website URL:", url])
        sheet.append(["Check Date:", _check_date()])
        sheet.append([])

        for category, checks in present_categories(results):
            sheet.append([category])
            sheet.cell(row=sheet.max_row, column=1).font = Font(bold=True)
            for test, value in checks.items():
                sheet.append([None, test, status_text(value)])
            sheet.append([])

        if _has_crawl_data(results):
            self._add_link_sheet(workbook, results)

        buffer = io.BytesIO()
        workbook.save(buffer)
        logger.info(f"Excel report generated for {url}")
        return buffer.getvalue()

    def _add_link_sheet(self, workbook: Workbook, results: dict[str, Any]):
        sheet = workbook.create_sheet(LINK_SHEET_TITLE)
        for key, value in _summary_rows(results):
            sheet.append([key, value])
        sheet.append([])

        sheet.append(list(LINK_COLUMNS))
        for cell in sheet[sheet.max_row]:
            cell.font = Font(bold=True)
        for row in _link_rows(results):
            sheet.append(row)

        for column, width in zip("ABCDE", (60, 15, 12, 12, 40)):
            sheet.column_dimensions[column].width = width


class PDFReportGenerator:
    """Writes audit results to an A4 PDF."""

    media_type = "application/pdf"
    filename = "website-check-results.pdf"

    def __init__(self):
        self.styles = getSampleStyleSheet()

    def generate(self, results: dict[str, Any], url: str) -> bytes:
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            title=REPORT_TITLE,
            leftMargin=18 * mm,
            rightMargin=18 * mm,
            topMargin=18 * mm,
            bottomMargin=18 * mm,
        )

        body = self.styles["BodyText"]
        elements = [
            Paragraph(REPORT_TITLE, self.styles["Title"]),
            Paragraph(f"Website URL: {escape(url)}", body),
            Paragraph(f"Check Date: {_check_date()}", body),
            Spacer(1, 8 * mm),
        ]

        for category, checks in present_categories(results):
            elements.append(Paragraph(escape(category), self.styles["Heading2"]))
            rows = [[Paragraph(escape(str(test)), body), status_text(value)] for test, value in checks.items()]
            if rows:
                elements.append(self._table(rows, (110 * mm, 40 * mm)))
            elements.append(Spacer(1, 5 * mm))

        if _has_crawl_data(results):
            elements.extend(self._crawl_section(results))

        doc.build(elements)
        logger.info(f"PDF report generated for {url}")
        return buffer.getvalue()

    def _crawl_section(self, results: dict[str, Any]) -> list:
        body = self.styles["BodyText"]
        small = self.styles["Code"]
        elements = [Paragraph("Sitemap / Link Crawl", self.styles["Heading2"])]

        summary = [[key, str(value)] for key, value in _summary_rows(results)]
        if summary:
            elements.append(self._table(summary, (60 * mm, 90 * mm)))
            elements.append(Spacer(1, 4 * mm))

        links = _link_rows(results)
        if links:
            header = list(LINK_COLUMNS)
            rows = [
                [Paragraph(escape(_text(row[0])), small), _text(row[1]), row[2], row[3], Paragraph(escape(_text(row[4])), body)]
                for row in links
            ]
            elements.append(
                self._table([header] + rows, (70 * mm, 18 * mm, 18 * mm, 18 * mm, 50 * mm), header=True)
            )
        return elements

    @staticmethod
    def _table(rows: list, widths: tuple, header: bool = False) -> Table:
        table = Table(rows, colWidths=list(widths), repeatRows=1 if header else 0)
        style = [
            ("FONTNAME", (0, 0), (-1, -1), "Helvetica"),
            ("FONTSIZE", (0, 0), (-1, -1), 10),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ("LINEBELOW", (0, 0), (-1, -1), 0.25, colors.lightgrey),
        ]
        if header:
            style.append(("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"))
            style.append(("BACKGROUND", (0, 0), (-1, 0), colors.whitesmoke))
        table.setStyle(TableStyle(style))
        return table
