"""
Protectron - Certificate PDF Renderer

Single-page A4 "Certificate of Compliance" built with ReportLab platypus.

Output is deterministic: the document is written with invariant=1 so
ReportLab pins its creation date and document ID, and every date shown
comes from the certificate data rather than the clock.
"""

from dataclasses import dataclass
from datetime import datetime
from io import BytesIO
from typing import List, Optional

from reportlab.graphics.barcode.qr import QrCodeWidget
from reportlab.graphics.shapes import Drawing
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_LEFT, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import (
    HRFlowable,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from ...config import PUBLIC_APP_URL
from ...models.certification import ComplianceChecks, RequirementsSummary
from .badges import format_long_date, format_score


PRIMARY = colors.HexColor("#1F6D68")
SUCCESS = colors.HexColor("#9CD323")
ERROR = colors.HexColor("#CE2C60")
LIGHT = colors.HexColor("#E8F5F4")
MUTED = colors.HexColor("#667085")
TEXT = colors.HexColor("#101828")

QR_SIZE = 3.2 * cm

# ZapfDingbats glyphs: "4" is a check mark, "8" is a cross
_CHECK = '<font name="ZapfDingbats">4</font>'
_CROSS = '<font name="ZapfDingbats">8</font>'


@dataclass(frozen=True)
class CertificatePdfData:
    cert_id: str
    system_name: str
    organization_name: str
    certification_level: str
    compliance_score: float
    issued_at: datetime
    valid_until: datetime
    requirements: RequirementsSummary
    checks: ComplianceChecks
    app_url: str = PUBLIC_APP_URL

    @property
    def verify_url(self) -> str:
        return f"{self.app_url}/verify/{self.cert_id}"


def _styles():
    base = getSampleStyleSheet()
    return {
        "brand": ParagraphStyle("Brand", parent=base["Normal"], fontName="Helvetica-Bold",
                                fontSize=14, textColor=PRIMARY),
        "header_right": ParagraphStyle("HeaderRight", parent=base["Normal"], fontSize=8,
                                       textColor=MUTED, alignment=TA_RIGHT),
        "title": ParagraphStyle("CertTitle", parent=base["Title"], fontSize=26, leading=32,
                                textColor=PRIMARY, alignment=TA_CENTER, spaceAfter=4),
        "subtitle": ParagraphStyle("CertSubtitle", parent=base["Normal"], fontSize=12,
                                   textColor=MUTED, alignment=TA_CENTER, spaceAfter=18),
        "level": ParagraphStyle("Level", parent=base["Normal"], fontName="Helvetica-Bold",
                                fontSize=12, textColor=colors.white, alignment=TA_CENTER, leading=16),
        "system": ParagraphStyle("System", parent=base["Normal"], fontName="Helvetica-Bold",
                                 fontSize=20, leading=24, textColor=TEXT, alignment=TA_CENTER),
        "org": ParagraphStyle("Org", parent=base["Normal"], fontSize=12, textColor=MUTED,
                              alignment=TA_CENTER, spaceAfter=14),
        "label": ParagraphStyle("Label", parent=base["Normal"], fontSize=9, textColor=MUTED,
                                alignment=TA_LEFT, leading=14),
        "score": ParagraphStyle("Score", parent=base["Normal"], fontName="Helvetica-Bold",
                                fontSize=28, leading=32, textColor=PRIMARY, alignment=TA_CENTER),
        "score_label": ParagraphStyle("ScoreLabel", parent=base["Normal"], fontSize=9,
                                      textColor=MUTED, alignment=TA_CENTER),
        "cell": ParagraphStyle("Cell", parent=base["Normal"], fontSize=10, textColor=TEXT),
        "small": ParagraphStyle("Small", parent=base["Normal"], fontSize=8, textColor=MUTED,
                                alignment=TA_CENTER),
    }


def _escape(value: Optional[str]) -> str:
    return (value or "").replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _check_row(label: str, ok: bool, yes: str, no: str, style) -> list:
    if ok:
        status = f'<font color="#9CD323">{_CHECK}</font> {yes}'
    else:
        status = f'<font color="#CE2C60">{_CROSS}</font> {no}'
    return [Paragraph(label, style), Paragraph(status, style)]


def _qr_drawing(url: str) -> Drawing:
    widget = QrCodeWidget(url)
    x1, y1, x2, y2 = widget.getBounds()
    width, height = x2 - x1, y2 - y1
    drawing = Drawing(QR_SIZE, QR_SIZE, transform=[QR_SIZE / width, 0, 0, QR_SIZE / height, 0, 0])
    drawing.add(widget)
    return drawing


def _build_story(data: CertificatePdfData) -> List:
    s = _styles()
    story = []

    header = Table(
        [[Paragraph("Protectron", s["brand"]),
          Paragraph("Compliance Certificate | Confidential", s["header_right"])]],
        colWidths=[8.5 * cm, 8.5 * cm],
    )
    header.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "MIDDLE")]))
    story.append(header)
    story.append(HRFlowable(width="100%", thickness=1, color=PRIMARY, spaceBefore=6, spaceAfter=24))

    story.append(Paragraph("Certificate of Compliance", s["title"]))
    story.append(Paragraph("EU Artificial Intelligence Act", s["subtitle"]))

    level = (data.certification_level or "none").upper()
    level_table = Table(
        [[Paragraph(f"{level} CERTIFICATION", s["level"])],
         [Paragraph("EU AI ACT COMPLIANT", s["level"])]],
        colWidths=[9 * cm],
    )
    level_table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, -1), PRIMARY),
        ("ALIGN", (0, 0), (-1, -1), "CENTER"),
        ("TOPPADDING", (0, 0), (-1, -1), 5),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 5),
        ("ROUNDEDCORNERS", [6, 6, 6, 6]),
    ]))
    story.append(level_table)
    story.append(Spacer(1, 0.7 * cm))

    story.append(Paragraph(_escape(data.system_name), s["system"]))
    story.append(Paragraph(_escape(data.organization_name), s["org"]))

    details = Paragraph(
        f"<b>Certificate ID:</b> {_escape(data.cert_id)}<br/>"
        f"<b>Issued:</b> {format_long_date(data.issued_at)}<br/>"
        f"<b>Valid Until:</b> {format_long_date(data.valid_until)}<br/>"
        f"<b>Prepared by:</b> Protectron Compliance Platform",
        s["label"],
    )
    score_box = Table(
        [[Paragraph(f"{format_score(data.compliance_score)}%", s["score"])],
         [Paragraph("Compliance Score", s["score_label"])],
         [Paragraph(f"Requirements Met: {data.requirements.completed}/{data.requirements.total}",
                    s["score_label"])]],
        colWidths=[5.5 * cm],
    )
    score_box.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, -1), LIGHT),
        ("BOX", (0, 0), (-1, -1), 1, PRIMARY),
        ("TOPPADDING", (0, 0), (-1, -1), 4),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
    ]))
    summary = Table([[details, score_box]], colWidths=[11 * cm, 6 * cm])
    summary.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "MIDDLE")]))
    story.append(summary)
    story.append(Spacer(1, 0.8 * cm))

    checks = data.checks
    checks_table = Table(
        [
            [Paragraph("<b>Compliance Check</b>", s["cell"]), Paragraph("<b>Status</b>", s["cell"])],
            _check_row("SDK Integration", checks.sdk_connected,
                       "Connected", "Not Connected", s["cell"]),
            _check_row("Human-in-the-Loop Rules", checks.hitl_rules_active,
                       "Active", "Not Active", s["cell"]),
            _check_row("Incident Status", checks.no_open_incidents,
                       "No Open Incidents", "Has Open Incidents", s["cell"]),
            _check_row("Audit Logging", checks.logging_active,
                       "Active", "Not Active", s["cell"]),
        ],
        colWidths=[8.5 * cm, 8.5 * cm],
    )
    checks_table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), LIGHT),
        ("LINEBELOW", (0, 0), (-1, -1), 0.5, colors.HexColor("#E4E7EC")),
        ("TOPPADDING", (0, 0), (-1, -1), 6),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
    ]))
    story.append(checks_table)
    story.append(Spacer(1, 0.8 * cm))

    qr = Table(
        [[_qr_drawing(data.verify_url)], [Paragraph("Scan to verify certificate", s["small"])]],
        colWidths=[17 * cm],
    )
    qr.setStyle(TableStyle([("ALIGN", (0, 0), (-1, -1), "CENTER")]))
    story.append(qr)
    return story


def _footer(data: CertificatePdfData):
    host = data.app_url.split("://", 1)[-1]

    def draw(canvas, doc):
        canvas.saveState()
        canvas.setFont("Helvetica", 8)
        canvas.setFillColor(MUTED)
        y = 1.2 * cm
        canvas.drawString(doc.leftMargin, y, f"Valid until {format_long_date(data.valid_until)}")
        canvas.drawCentredString(A4[0] / 2, y, "Page 1 of 1")
        canvas.drawRightString(A4[0] - doc.rightMargin, y, f"{host}/verify/{data.cert_id}")
        canvas.restoreState()

    return draw


def render_certificate_pdf(data: CertificatePdfData) -> bytes:
    """Render the certificate to PDF bytes."""
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=2 * cm,
        rightMargin=2 * cm,
        topMargin=1.5 * cm,
        bottomMargin=2 * cm,
        title=f"Certificate of Compliance - {data.system_name}",
        author="Protectron",
        invariant=1,
    )
    footer = _footer(data)
    doc.build(_build_story(data), onFirstPage=footer, onLaterPages=footer)
    return buffer.getvalue()
