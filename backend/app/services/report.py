from __future__ import annotations

import io
import re
from dataclasses import dataclass
from datetime import datetime

from reportlab.lib.colors import Color, HexColor
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from app.core.config import settings
from app.core.logging_setup import logger
from app.services.narrative import BARRIERS, INTERVENTIONS, PROGRESS, TASKS, parse_sections, sanitize_text
from app.services.reporting import AggregatedReport

PAGE_WIDTH, PAGE_HEIGHT = A4

# Vertical positions are millimetres from the top edge.
TOP_MARGIN = 20
FOOTER_Y = 285
TABLE_BREAK = 260
NARRATIVE_LINE_BREAK = 270
DAY_HEADING_BREAK = 230
NARRATIVE_START_BREAK = 200
SIGNATURE_BREAK = 220

PRIMARY_BLUE = HexColor("#0284c7")
DARK_TEXT = HexColor("#1e293b")
GRAY_TEXT = HexColor("#64748b")
TABLE_FILL = Color(240 / 255, 249 / 255, 1)

SECTION_COLORS = {
    TASKS: Color(0, 116 / 255, 217 / 255),
    BARRIERS: Color(217 / 255, 119 / 255, 6 / 255),
    INTERVENTIONS: Color(124 / 255, 58 / 255, 237 / 255),
    PROGRESS: Color(21 / 255, 128 / 255, 61 / 255),
}

IPE_GOAL_LIMIT = 40


@dataclass
class RenderedReport:
    content: bytes
    page_count: int
    filename: str


def truncate_goal(goal: str | None) -> str:
    if not goal:
        return "N/A"
    if len(goal) > IPE_GOAL_LIMIT:
        return goal[:IPE_GOAL_LIMIT] + "..."
    return goal


def report_filename(client_name: str, month_year: str) -> str:
    base = f"{sanitize_text(client_name)}_Report_{month_year.replace(' ', '_')}"
    return re.sub(r"[^A-Za-z0-9.-]+", "_", base).strip("_") + ".pdf"


def wrap_text(value: str, font_name: str, font_size: float, width: float) -> list[str]:
    """Word-wrap ``value`` to ``width`` points, hard-breaking any single word that is wider."""
    lines: list[str] = []
    for line in simpleSplit(value, font_name, font_size, width):
        while len(line) > 1 and stringWidth(line, font_name, font_size) > width:
            cut = 1
            while cut < len(line) and stringWidth(line[: cut + 1], font_name, font_size) <= width:
                cut += 1
            lines.append(line[:cut])
            line = line[cut:].lstrip()
        if line:
            lines.append(line)
    return lines


class _PageWriter:
    """Canvas wrapper that tracks the cursor in millimetres from the top of the page."""

    def __init__(self, buffer: io.BytesIO, footer: str) -> None:
        self.canvas = canvas.Canvas(buffer, pagesize=A4, pageCompression=0)
        self.footer = footer
        self.y = float(TOP_MARGIN)
        self.pages = 1

    def _draw_footer(self) -> None:
        self.canvas.setFont("Helvetica", 8)
        self.canvas.setFillColor(GRAY_TEXT)
        self.canvas.drawCentredString(PAGE_WIDTH / 2, PAGE_HEIGHT - FOOTER_Y * mm, self.footer)

    def new_page(self) -> None:
        self._draw_footer()
        self.canvas.showPage()
        self.pages += 1
        self.y = float(TOP_MARGIN)

    def break_after(self, threshold: float) -> None:
        if self.y > threshold:
            self.new_page()

    def text(self, x: float, value: str, *, size: float = 10, bold: bool = False, color: Color = DARK_TEXT) -> None:
        self.canvas.setFont("Helvetica-Bold" if bold else "Helvetica", size)
        self.canvas.setFillColor(color)
        self.canvas.drawString(x * mm, PAGE_HEIGHT - self.y * mm, sanitize_text(value))

    def centred(self, value: str, *, size: float, color: Color) -> None:
        self.canvas.setFont("Helvetica", size)
        self.canvas.setFillColor(color)
        self.canvas.drawCentredString(PAGE_WIDTH / 2, PAGE_HEIGHT - self.y * mm, sanitize_text(value))

    def fill_band(self, top: float, height: float) -> None:
        self.canvas.setFillColor(TABLE_FILL)
        self.canvas.rect(
            15 * mm,
            PAGE_HEIGHT - (top + height) * mm,
            PAGE_WIDTH - 30 * mm,
            height * mm,
            stroke=0,
            fill=1,
        )

    def line(self, x1: float, x2: float) -> None:
        self.canvas.setStrokeColor(DARK_TEXT)
        self.canvas.setLineWidth(0.5)
        self.canvas.line(x1 * mm, PAGE_HEIGHT - self.y * mm, x2 * mm, PAGE_HEIGHT - self.y * mm)

    def finish(self) -> None:
        self._draw_footer()
        self.canvas.showPage()
        self.canvas.save()


class ReportService:
    """Draws the monthly activity report for one client as an A4 PDF."""

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now

    def render(self, report: AggregatedReport) -> RenderedReport:
        now = self.now or datetime.now()
        month_year = f"{report.start_date:%B} {report.start_date.year}"
        buffer = io.BytesIO()
        writer = _PageWriter(buffer, footer=f"Generated by CoachAlly on {now:%m/%d/%Y, %I:%M:%S %p}")

        self._title(writer, month_year)
        self._client_box(writer, report)
        self._attendance(writer, report)
        self._narrative(writer, report)
        self._signatures(writer, now)
        writer.finish()

        filename = report_filename(report.client.full_name, month_year)
        logger.info("Rendered report %s (%s pages)", filename, writer.pages)
        return RenderedReport(content=buffer.getvalue(), page_count=writer.pages, filename=filename)

    def _title(self, writer: _PageWriter, month_year: str) -> None:
        writer.centred("Monthly Activity Report", size=20, color=PRIMARY_BLUE)
        writer.y += 12
        writer.centred(month_year, size=10, color=GRAY_TEXT)
        writer.y += 15

    def _client_box(self, writer: _PageWriter, report: AggregatedReport) -> None:
        client = report.client
        writer.canvas.setStrokeColor(PRIMARY_BLUE)
        writer.canvas.setLineWidth(0.5)
        writer.canvas.rect(15 * mm, PAGE_HEIGHT - (writer.y + 35) * mm, PAGE_WIDTH - 30 * mm, 35 * mm, stroke=1, fill=0)
        writer.y += 8

        rows = (
            (("Consumer:", client.full_name or "N/A", 50), ("UCI #:", client.uci_number or "N/A", 130)),
            (
                ("Vendor:", client.vendor or settings.report_vendor_default, 50),
                ("Job Site:", client.job_site or client.job_title or "N/A", 135),
            ),
            (
                ("SE Provider:", client.se_service_provider or "N/A", 55),
                ("IPE Goal:", truncate_goal(client.ipe_goal), 135),
            ),
        )
        for left, right in rows:
            for column, (label, value, value_x) in zip((20, 110), (left, right)):
                writer.text(column, label, bold=True)
                writer.text(value_x, value)
            writer.y += 8
        writer.y += 12

    def _attendance(self, writer: _PageWriter, report: AggregatedReport) -> None:
        writer.text(15, "Attendance Log", size=14, bold=True, color=PRIMARY_BLUE)
        writer.y += 8
        writer.fill_band(writer.y, 8)
        writer.y += 5
        for x, label in ((20, "Date"), (55, "Start Time"), (90, "End Time"), (125, "Coach Hrs"), (160, "Consumer Hrs")):
            writer.text(x, label, size=9, bold=True)
        writer.y += 6

        if not report.shifts:
            writer.text(20, "No shifts recorded for this period", size=9, color=GRAY_TEXT)
            writer.y += 6
        for row in report.shifts:
            writer.break_after(TABLE_BREAK)
            writer.text(20, f"{row.clock_in_at:%m/%d/%y}", size=9)
            writer.text(55, f"{row.clock_in_at:%I:%M %p}", size=9)
            writer.text(90, f"{row.clock_out_at:%I:%M %p}", size=9)
            writer.text(130, f"{row.coach_hours:.1f}", size=9)
            consumer = "-" if row.consumer_hours is None else f"{row.consumer_hours:g}"
            writer.text(168, consumer, size=9)
            writer.y += 6

        writer.y += 2
        writer.break_after(TABLE_BREAK)
        writer.fill_band(writer.y - 4, 8)
        writer.text(90, "Total Hours:", size=9, bold=True)
        writer.text(130, f"{report.total_coach_hours:.1f}", size=9, bold=True)
        writer.text(168, f"{report.total_consumer_hours:.1f}", size=9, bold=True)
        writer.y += 15

    def _narrative(self, writer: _PageWriter, report: AggregatedReport) -> None:
        writer.break_after(NARRATIVE_START_BREAK)
        writer.text(15, "Narrative Summary", size=14, bold=True, color=PRIMARY_BLUE)
        writer.y += 10

        if not report.days:
            writer.text(20, "No narrative entries for this period.", color=GRAY_TEXT)
            writer.y += 15
            return

        wrap_width = PAGE_WIDTH - 50 * mm
        for day in report.days:
            writer.break_after(DAY_HEADING_BREAK)
            writer.text(20, day.label, bold=True, color=PRIMARY_BLUE)
            writer.y += 8
            for entry in day.entries:
                for section in parse_sections(entry.formatted_note):
                    writer.break_after(TABLE_BREAK)
                    if section.header:
                        writer.text(25, f"{section.header}:", bold=True, color=SECTION_COLORS[section.header])
                        writer.y += 5
                    for line in wrap_text(sanitize_text(section.content), "Helvetica", 10, wrap_width):
                        writer.break_after(NARRATIVE_LINE_BREAK)
                        writer.text(28, line)
                        writer.y += 5
                    writer.y += 3
            writer.y += 8
        writer.y += 15

    def _signatures(self, writer: _PageWriter, now: datetime) -> None:
        writer.break_after(SIGNATURE_BREAK)
        writer.text(15, "Signatures", size=14, bold=True, color=PRIMARY_BLUE)
        writer.y += 15

        writer.text(20, "Consumer Signature:")
        writer.line(65, 120)
        writer.text(125, "Date:")
        writer.line(140, 180)
        writer.y += 15

        writer.text(20, "Job Coach Signature:")
        writer.line(65, 120)
        writer.text(125, "Date:")
        writer.text(140, f"{now.month}/{now.day}/{now.year}")
        writer.y += 10
