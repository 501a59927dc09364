"""
AVM Valuation Report

Generates a client-ready PDF summarising one valuation report.
Uses ReportLab for deterministic PDF generation.

Output Structure:
1. Header (subject reference, report date)
2. Valuation Summary (weighted value, confidence, range)
3. Subject Property
4. Model Results
5. Comparable Evidence
6. Risks & Considerations
7. Disclaimer
"""

import logging
from dataclasses import dataclass
from datetime import date
from io import BytesIO
from pathlib import Path
from typing import Optional, Union
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_JUSTIFY, TA_LEFT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import (
    HRFlowable,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from core.avm.valuation import AVMReport
from utils.formatting import (
    format_area,
    format_confidence,
    format_currency,
    format_distance,
    format_percent,
)


logger = logging.getLogger(__name__)


# =============================================================================
# Report Generation Result Types
# =============================================================================

@dataclass
class ReportSuccess:
    """Returned when PDF generation succeeds."""
    path: Path
    models_included: int


@dataclass
class ReportNoValuation:
    """Returned when the report carries no model results."""
    message: str = "No comparables were selected; a valuation report cannot be produced."


ReportResult = Union[ReportSuccess, ReportNoValuation]

DISCLAIMER = (
    "This automated valuation is an estimate derived from comparable sales and "
    "statistical models. It is not a formal appraisal and should not be relied "
    "upon as the sole basis for lending or purchase decisions."
)

MAX_COMPARABLES_LISTED = 10


# =============================================================================
# Color Palette
# =============================================================================

class Palette:
    """Print-friendly palette: charcoal text, navy accent."""
    CHARCOAL = colors.Color(0.2, 0.2, 0.22)
    SLATE = colors.Color(0.35, 0.38, 0.42)
    GRAY = colors.Color(0.5, 0.5, 0.5)
    LIGHT_GRAY = colors.Color(0.85, 0.85, 0.85)
    PALE_GRAY = colors.Color(0.95, 0.95, 0.95)
    WHITE = colors.white

    ACCENT = colors.Color(0.15, 0.25, 0.4)
    ACCENT_LIGHT = colors.Color(0.92, 0.94, 0.97)


def get_report_styles():
    """Paragraph styles for the valuation report."""
    styles = getSampleStyleSheet()

    styles.add(ParagraphStyle(
        name='ReportTitle',
        parent=styles['Normal'],
        fontSize=18,
        leading=24,
        textColor=Palette.CHARCOAL,
        alignment=TA_LEFT,
        fontName='Helvetica-Bold',
        spaceAfter=4*mm,
    ))

    styles.add(ParagraphStyle(
        name='ReportSubtitle',
        parent=styles['Normal'],
        fontSize=10,
        leading=14,
        textColor=Palette.SLATE,
        fontName='Helvetica',
        spaceAfter=6*mm,
    ))

    styles.add(ParagraphStyle(
        name='SectionTitle',
        parent=styles['Normal'],
        fontSize=13,
        leading=17,
        textColor=Palette.CHARCOAL,
        fontName='Helvetica-Bold',
        spaceBefore=16,
        spaceAfter=10,
    ))

    styles['BodyText'].fontSize = 9.5
    styles['BodyText'].leading = 14
    styles['BodyText'].textColor = Palette.CHARCOAL
    styles['BodyText'].alignment = TA_JUSTIFY

    styles.add(ParagraphStyle(
        name='Disclaimer',
        parent=styles['Normal'],
        fontSize=7.5,
        leading=11,
        textColor=Palette.GRAY,
        alignment=TA_JUSTIFY,
        spaceBefore=14,
    ))

    return styles


def _table_style(header: bool = True) -> TableStyle:
    commands = [
        ('FONTNAME', (0, 0), (-1, -1), 'Helvetica'),
        ('FONTSIZE', (0, 0), (-1, -1), 8.5),
        ('TEXTCOLOR', (0, 0), (-1, -1), Palette.CHARCOAL),
        ('LINEBELOW', (0, 0), (-1, -1), 0.25, Palette.LIGHT_GRAY),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('TOPPADDING', (0, 0), (-1, -1), 4),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 4),
    ]
    if header:
        commands += [
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('BACKGROUND', (0, 0), (-1, 0), Palette.ACCENT_LIGHT),
            ('TEXTCOLOR', (0, 0), (-1, 0), Palette.ACCENT),
        ]
    return TableStyle(commands)


class ValuationReportGenerator:
    """
    Generates AVM valuation report PDFs.

    Usage:
        generator = ValuationReportGenerator(output_dir=Path("reports"))
        result = generator.generate_report(report)

    The same report always produces the same document content.
    """

    MARGIN = 18*mm

    def __init__(self, output_dir: Path = Path("reports"), currency: str = "EUR"):
        self.output_dir = Path(output_dir)
        self.currency = currency
        self.styles = get_report_styles()

    def generate_report(self, report: AVMReport, report_date: Optional[date] = None) -> ReportResult:
        """
        Generate a valuation report PDF.

        Args:
            report: Complete AVM report for one subject
            report_date: Date printed on the report (default: today)

        Returns:
            ReportSuccess with path if PDF generated successfully
            ReportNoValuation if the report has no model results
        """
        if not report.results:
            logger.warning("Skipping PDF for %s: no model results", report.subject.id)
            return ReportNoValuation()

        self.output_dir.mkdir(parents=True, exist_ok=True)
        output_path = self.output_dir / f"AVM-{report.subject.id}.pdf"
        output_path.write_bytes(self.generate_to_buffer(report, report_date))

        logger.info("Wrote valuation report %s", output_path)
        return ReportSuccess(path=output_path, models_included=len(report.results))

    def generate_to_buffer(self, report: AVMReport, report_date: Optional[date] = None) -> bytes:
        """Generate PDF and return as bytes (for testing or streaming)."""
        buffer = BytesIO()
        self._build_document(report, report_date or date.today(), buffer)
        return buffer.getvalue()

    def _build_document(self, report: AVMReport, report_date: date, buffer: BytesIO):
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            leftMargin=self.MARGIN,
            rightMargin=self.MARGIN,
            topMargin=self.MARGIN,
            bottomMargin=self.MARGIN,
            title=f"Valuation Report - {report.subject.id}",
            author="AVM Engine",
            subject="Automated Valuation",
        )

        story = []
        story.extend(self._build_header(report, report_date))
        story.extend(self._build_summary(report))
        story.extend(self._build_subject(report))
        story.extend(self._build_model_results(report))
        story.extend(self._build_comparables(report))
        story.extend(self._build_risks(report))
        story.append(Paragraph(DISCLAIMER, self.styles['Disclaimer']))

        doc.build(story)

    def _money(self, amount: int) -> str:
        return format_currency(amount, self.currency)

    def _build_header(self, report: AVMReport, report_date: date) -> list:
        subject = report.subject
        # Paragraph parses its text as markup
        title = escape(subject.address or subject.id)
        return [
            Paragraph("Automated Valuation Report", self.styles['ReportTitle']),
            Paragraph(
                f"{title} &nbsp;|&nbsp; Report date {report_date.isoformat()}",
                self.styles['ReportSubtitle'],
            ),
            HRFlowable(width="100%", thickness=0.5, color=Palette.LIGHT_GRAY),
        ]

    def _build_summary(self, report: AVMReport) -> list:
        weighted = report.weighted
        first = report.results[0]
        spread_low = min(r.confidence_range.low for r in report.results)
        spread_high = max(r.confidence_range.high for r in report.results)

        rows = [
            ["Estimated value", self._money(weighted.value)],
            ["Confidence", format_confidence(weighted.confidence)],
            [
                f"Range ({first.confidence_range.percentage}%)",
                f"{self._money(spread_low)} - {self._money(spread_high)}",
            ],
            ["Comparables used", f"{report.selection.comp_count} of {report.selection.total_candidates}"],
            ["Market median price", self._money(report.statistics.median_price)],
        ]
        table = Table(rows, colWidths=[60*mm, 100*mm])
        table.setStyle(_table_style(header=False))
        return [Paragraph("Valuation Summary", self.styles['SectionTitle']), table]

    def _build_subject(self, report: AVMReport) -> list:
        s = report.subject
        rows = [
            ["Property type", s.property_type.value.title()],
            ["Area", format_area(s.area)],
            ["Building year", str(s.building_year)],
            ["Rooms / bathrooms", f"{s.rooms} / {s.bathrooms}"],
            ["Condition", s.condition.value.title()],
        ]
        if s.floor is not None:
            rows.append(["Floor", str(s.floor)])
        if s.features:
            rows.append(["Features", ", ".join(s.features)])

        table = Table(rows, colWidths=[60*mm, 100*mm])
        table.setStyle(_table_style(header=False))
        return [Paragraph("Subject Property", self.styles['SectionTitle']), table]

    def _build_model_results(self, report: AVMReport) -> list:
        rows = [["Model", "Value", "Confidence", "Price/m²", "Position"]]
        for r in report.results:
            rows.append([
                r.model_id,
                self._money(r.estimated_value),
                format_confidence(r.confidence),
                self._money(r.price_per_m2),
                r.market_position.value,
            ])

        table = Table(rows, colWidths=[40*mm, 35*mm, 28*mm, 30*mm, 25*mm])
        table.setStyle(_table_style())
        return [Paragraph("Model Results", self.styles['SectionTitle']), table]

    def _build_comparables(self, report: AVMReport) -> list:
        rows = [["Comparable", "Sale price", "Adjusted", "Similarity", "Distance", "Adj. total"]]
        for comp in report.selection.comps[:MAX_COMPARABLES_LISTED]:
            rows.append([
                comp.id,
                self._money(comp.sale_price),
                self._money(comp.adjusted_price),
                f"{comp.similarity:.2f}",
                format_distance(comp.distance_to_subject),
                format_percent(comp.adjustments.total),
            ])

        table = Table(rows, colWidths=[32*mm, 28*mm, 28*mm, 22*mm, 22*mm, 24*mm])
        table.setStyle(_table_style())
        return [Paragraph("Comparable Evidence", self.styles['SectionTitle']), table]

    def _build_risks(self, report: AVMReport) -> list:
        seen = {}
        for r in report.results:
            for risk in r.risk_factors:
                seen.setdefault(risk.factor, risk)

        elements = [Paragraph("Risks &amp; Considerations", self.styles['SectionTitle'])]
        if not seen:
            elements.append(Paragraph("No material risk factors identified.", self.styles['BodyText']))
            return elements

        for risk in seen.values():
            elements.append(Paragraph(
                f"<b>{escape(risk.factor.replace('_', ' ').title())}</b> "
                f"({risk.severity.value}): {escape(risk.description)}",
                self.styles['BodyText'],
            ))
        elements.append(Spacer(1, 4*mm))
        return elements
