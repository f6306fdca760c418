"""
reports.pdf — Printable dossier export.

Renders a report to an A4 PDF with reportlab's platypus layer: cover
page, narrative, tactical map tables, legend, evidence and linked
confiscations.  Every page carries the footer
``Narcotic Division — Report <number> — Page i / n``.
"""

from __future__ import annotations

import io
import re
from typing import Any

from django.utils.html import escape, strip_tags
from reportlab.lib.colors import HexColor
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.pdfgen import canvas as rl_canvas
from reportlab.platypus import PageBreak, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from . import tactical
from .models import Report

_BLOCK_BREAK_RE = re.compile(r"(?i)<br\s*/?>|</(p|div|li|h[1-6])>")


def _footer_text(report: Report, page: int, total: int) -> str:
    return f"Narcotic Division — Report {report.report_number or 'DRAFT'} — Page {page} / {total}"


def _numbered_canvas(report: Report):
    """Canvas class that defers page output until the page count is known."""

    class NumberedCanvas(rl_canvas.Canvas):
        def __init__(self, *args, **kwargs):
            super().__init__(*args, **kwargs)
            self._saved_page_states: list[dict] = []

        def showPage(self):
            self._saved_page_states.append(dict(self.__dict__))
            self._startPage()

        def save(self):
            total = len(self._saved_page_states)
            for state in self._saved_page_states:
                self.__dict__.update(state)
                self.setFont("Helvetica", 8)
                self.setFillColor(HexColor("#6b7280"))
                self.drawCentredString(A4[0] / 2, 0.5 * inch, _footer_text(report, self._pageNumber, total))
                super().showPage()
            super().save()

    return NumberedCanvas


def html_to_paragraphs(html: str) -> list[str]:
    """Plain-text paragraphs from the narrative's HTML."""
    text = _BLOCK_BREAK_RE.sub("\n", html or "")
    return [line.strip() for line in strip_tags(text).splitlines() if line.strip()]


class ReportPdfRenderer:
    def __init__(self):
        self.styles = getSampleStyleSheet()
        self.styles.add(ParagraphStyle(
            name="CoverTitle",
            parent=self.styles["Title"],
            fontSize=24,
            textColor=HexColor("#1a1a1a"),
            alignment=TA_CENTER,
            fontName="Helvetica-Bold",
        ))
        self.styles.add(ParagraphStyle(
            name="CoverMeta",
            parent=self.styles["Normal"],
            fontSize=12,
            textColor=HexColor("#4a4a4a"),
            alignment=TA_CENTER,
            spaceAfter=6,
        ))
        self.styles.add(ParagraphStyle(
            name="Cell",
            parent=self.styles["Normal"],
            fontSize=9,
        ))

    # ── Building blocks ──────────────────────────────────────────────

    def _heading(self, text: str) -> Paragraph:
        return Paragraph(escape(text), self.styles["Heading2"])

    def _table(self, header: list[str], rows: list[list[Any]]) -> Table:
        cell = self.styles["Cell"]
        data = [[Paragraph(f"<b>{escape(h)}</b>", cell) for h in header]]
        data += [[Paragraph(escape(str(value)), cell) for value in row] for row in rows]
        table = Table(data, repeatRows=1)
        table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), HexColor("#e5e7eb")),
            ("GRID", (0, 0), (-1, -1), 0.25, HexColor("#9ca3af")),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ]))
        return table

    def _empty(self, text: str) -> Paragraph:
        return Paragraph(f"<i>{escape(text)}</i>", self.styles["Normal"])

    # ── Sections ─────────────────────────────────────────────────────

    def _cover(self, report: Report) -> list:
        meta = self.styles["CoverMeta"]
        co_authors = ", ".join(u.display_name for u in report.co_authors.all()) or "—"
        story = [
            Spacer(1, 2 * inch),
            Paragraph("Narcotic Division", meta),
            Paragraph(escape(report.title), self.styles["CoverTitle"]),
            Spacer(1, 0.3 * inch),
            Paragraph(f"Report {escape(report.report_number or 'DRAFT')}", meta),
            Paragraph(f"Status: {escape(report.get_status_display())}", meta),
            Paragraph(f"Author: {escape(report.author.display_name)}", meta),
            Paragraph(f"Co-authors: {escape(co_authors)}", meta),
            Paragraph(f"Created: {report.created_at:%Y-%m-%d %H:%M}", meta),
        ]
        if report.submitted_at:
            story.append(Paragraph(f"Submitted: {report.submitted_at:%Y-%m-%d %H:%M}", meta))
        story.append(PageBreak())
        return story

    def _narrative(self, report: Report) -> list:
        story = [self._heading("Narrative")]
        paragraphs = html_to_paragraphs(report.content)
        if not paragraphs:
            return story + [self._empty("No narrative recorded.")]
        return story + [Paragraph(escape(p), self.styles["BodyText"]) for p in paragraphs]

    def _map(self, report: Report) -> list:
        map_data = report.map_data or {}
        markers = map_data.get("markers", [])
        shapes = map_data.get("shapes", [])
        story = [self._heading("Tactical Map — Markers")]
        if markers:
            story.append(self._table(
                ["ID", "X", "Y", "Colour", "Title", "Description"],
                [[m.get("id", ""), f"{m['x']:.0f}", f"{m['y']:.0f}", m.get("color", ""),
                  m.get("title", ""), m.get("desc", "")] for m in markers],
            ))
        else:
            story.append(self._empty("No markers placed."))

        story.append(self._heading("Tactical Map — Shapes"))
        if shapes:
            rows = []
            for shape in shapes:
                bounds = tactical.shape_bounds(shape)
                rows.append([
                    shape.get("id", ""),
                    shape["type"],
                    tactical.color_hex(shape.get("color", "")),
                    "({:.0f}, {:.0f}) – ({:.0f}, {:.0f})".format(*bounds),
                    shape.get("title", ""),
                ])
            story.append(self._table(["ID", "Type", "Colour", "Bounds", "Title"], rows))
        else:
            story.append(self._empty("No shapes drawn."))

        legend_rows = tactical.exportable_legend(markers, report.legend)
        if legend_rows:
            story.append(self._heading("Legend"))
            story.append(self._table(["Colour", "Meaning"], [list(row) for row in legend_rows]))
        return story

    @staticmethod
    def _captured_by(captured_by: dict[str, Any], officers: dict[int, str]) -> str:
        if captured_by.get("type") == "INTERNAL":
            return officers.get(captured_by.get("officer_id"), f"Officer #{captured_by.get('officer_id')}")
        details = captured_by.get("external_details") or {}
        affiliation = details.get("affiliation")
        return f"{details.get('full_name', '')} ({affiliation})" if affiliation else details.get("full_name", "")

    def _evidence(self, report: Report, officers: dict[int, str]) -> list:
        evidence = report.evidence or {}
        story = [self._heading("Photo Evidence")]
        photos = evidence.get("photo", [])
        if photos:
            story.append(self._table(
                ["ID", "Title", "Timestamp", "Captured By", "Markers", "File"],
                [[p.get("id", ""), p.get("title", ""), p.get("timestamp", ""),
                  self._captured_by(p.get("captured_by", {}), officers),
                  ", ".join(p.get("linked_marker_ids", [])), p.get("file_name", "")] for p in photos],
            ))
        else:
            story.append(self._empty("No photo evidence."))

        story.append(self._heading("Video Evidence"))
        videos = evidence.get("video", [])
        if videos:
            rows = []
            for v in videos:
                source = v.get("source_type", "")
                if source == "OTHER" and v.get("other_source_text"):
                    source = f"OTHER: {v['other_source_text']}"
                rows.append([
                    v.get("id", ""), v.get("title", ""), source, v.get("timestamp", ""),
                    v.get("duration", "") or "—",
                    self._captured_by(v.get("captured_by", {}), officers),
                    v.get("url", ""),
                ])
            story.append(self._table(
                ["ID", "Title", "Source", "Timestamp", "Duration", "Captured By", "URL"], rows,
            ))
        else:
            story.append(self._empty("No video evidence."))
        return story

    def _confiscations(self, report: Report) -> list:
        story = [self._heading("Linked Confiscations")]
        rows = [
            [c.created_at.strftime("%Y-%m-%d"), c.citizen_name or "—", c.drug_type,
             f"{c.quantity:g} g", c.officer.display_name]
            for c in report.confiscations.select_related("officer").all()
        ]
        if not rows:
            return story + [self._empty("No confiscations linked.")]
        return story + [self._table(["Date", "Citizen", "Drug", "Quantity", "Officer"], rows)]

    # ── Entry point ──────────────────────────────────────────────────

    def render(self, report: Report, officers: dict[int, str] | None = None) -> bytes:
        """
        Render ``report`` to PDF bytes.  ``officers`` maps officer ids to
        display names for INTERNAL evidence capture.
        """
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            rightMargin=54,
            leftMargin=54,
            topMargin=54,
            bottomMargin=72,
            title=report.title,
            author=report.author.display_name,
        )
        story: list = []
        story.extend(self._cover(report))
        story.extend(self._narrative(report))
        story.extend(self._map(report))
        story.extend(self._evidence(report, officers or {}))
        story.extend(self._confiscations(report))
        doc.build(story, canvasmaker=_numbered_canvas(report))
        return buffer.getvalue()
