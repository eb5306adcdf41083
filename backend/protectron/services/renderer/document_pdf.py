"""
Protectron - Document PDF Renderer

Exports a generated compliance document (technical documentation, risk
assessment, data governance policy, model card) as a PDF.

The document body lives in `generation_prompt`: the answers collected
when the document was generated, stored as a JSON object (or a JSON
string from older rows). Each answer is rendered as a question/answer
pair. Content that cannot be parsed still yields a valid PDF with a
placeholder paragraph.
"""

import json
import logging
from io import BytesIO
from typing import Any, Dict, List, Optional

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import HRFlowable, Paragraph, SimpleDocTemplate, Spacer

from .badges import format_long_date

logger = logging.getLogger(__name__)


PRIMARY = colors.HexColor("#7F56D9")
MUTED = colors.HexColor("#667085")
TEXT = colors.HexColor("#101828")

DOCUMENT_TYPE_LABELS = {
    "technical": "Technical Documentation",
    "risk": "Risk Assessment",
    "policy": "Data Governance Policy",
    "model_card": "Model Card",
}

UNPARSEABLE_CONTENT = "Document content is available in the DOCX format."
GENERIC_CONTENT = (
    "This document was generated using the Protectron compliance platform.",
    "For the full formatted document, please download the DOCX version.",
)


def _escape(value: Any) -> str:
    return str(value).replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _enum_value(value: Any) -> Optional[str]:
    return getattr(value, "value", value)


def question_label(key: str) -> str:
    """risk_mitigation_measures -> Risk Mitigation Measures"""
    return " ".join(word.capitalize() for word in str(key).replace("_", " ").split())


def answer_text(value: Any) -> str:
    """Unanswered questions print as N/A. 0 and False are answers."""
    if value is None or value == "":
        return "N/A"
    return str(value)


def parse_generation_prompt(raw: Any) -> Optional[Dict[str, Any]]:
    """
    Normalize stored document content to a dict.

    Returns None when there is no content. Raises ValueError when content
    exists but is not a JSON object.
    """
    if raw is None or raw == "" or raw == {}:
        return None
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, (str, bytes)):
        parsed = json.loads(raw)
        if isinstance(parsed, dict):
            return parsed
    raise ValueError(f"unsupported document content of type {type(raw).__name__}")


def _styles():
    base = getSampleStyleSheet()
    return {
        "brand": ParagraphStyle("DocBrand", parent=base["Normal"], fontName="Helvetica-Bold",
                                fontSize=14, textColor=PRIMARY),
        "tagline": ParagraphStyle("DocTagline", parent=base["Normal"], fontSize=8, textColor=MUTED),
        "confidential": ParagraphStyle("DocConfidential", parent=base["Normal"], fontSize=8,
                                       fontName="Helvetica-Bold", textColor=MUTED),
        "title": ParagraphStyle("DocTitle", parent=base["Heading1"], fontSize=20, leading=24,
                                textColor=TEXT, spaceBefore=12, spaceAfter=4),
        "type": ParagraphStyle("DocType", parent=base["Normal"], fontSize=11, textColor=PRIMARY,
                               spaceAfter=6),
        "meta": ParagraphStyle("DocMeta", parent=base["Normal"], fontSize=9, textColor=MUTED,
                               spaceAfter=12),
        "section": ParagraphStyle("DocSection", parent=base["Heading2"], fontSize=14,
                                  textColor=PRIMARY, spaceBefore=10, spaceAfter=8),
        "question": ParagraphStyle("DocQuestion", parent=base["Normal"], fontName="Helvetica-Bold",
                                   fontSize=10, textColor=TEXT, spaceBefore=6, spaceAfter=2),
        "body": ParagraphStyle("DocBody", parent=base["Normal"], fontSize=10, leading=14,
                               textColor=TEXT, spaceAfter=6),
    }


def _content_paragraphs(raw: Any, styles) -> List:
    try:
        content = parse_generation_prompt(raw)
    except (ValueError, TypeError) as e:
        logger.warning(f"Unparseable document content, rendering placeholder: {e}")
        return [Paragraph(UNPARSEABLE_CONTENT, styles["body"])]

    if content is None:
        return [Paragraph(line, styles["body"]) for line in GENERIC_CONTENT]

    flowables = []
    for key, value in content.items():
        flowables.append(Paragraph(_escape(question_label(key)), styles["question"]))
        flowables.append(Paragraph(_escape(answer_text(value)), styles["body"]))
    return flowables


def render_document_pdf(document, system_name: Optional[str] = None,
                        organization_name: Optional[str] = None) -> bytes:
    """
    Render a document row (DocumentDB or any object with the same
    attributes) to PDF bytes. Never raises for bad content.
    """
    s = _styles()
    doc_type = _enum_value(getattr(document, "document_type", None))
    created_at = getattr(document, "created_at", None)
    status = _enum_value(getattr(document, "status", None)) or "draft"

    story = [
        Paragraph("PROTECTRON", s["brand"]),
        Paragraph("EU AI Act Compliance Platform", s["tagline"]),
        Paragraph("CONFIDENTIAL", s["confidential"]),
        HRFlowable(width="100%", thickness=1, color=PRIMARY, spaceBefore=6, spaceAfter=6),
        Paragraph(_escape(getattr(document, "name", None) or "Untitled Document"), s["title"]),
        Paragraph(DOCUMENT_TYPE_LABELS.get(doc_type, "Compliance Document"), s["type"]),
    ]

    meta = [f"AI System: {_escape(system_name or 'N/A')}"]
    if organization_name:
        meta.append(f"Organization: {_escape(organization_name)}")
    if created_at is not None:
        meta.append(f"Generated: {format_long_date(created_at)}")
    meta.append(f"Status: {status.capitalize()}")
    story.append(Paragraph("  |  ".join(meta), s["meta"]))

    story.append(Paragraph("Document Content", s["section"]))
    story.extend(_content_paragraphs(getattr(document, "generation_prompt", None), s))
    story.append(Spacer(1, 0.5 * cm))

    buffer = BytesIO()
    pdf = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=2 * cm,
        rightMargin=2 * cm,
        topMargin=2 * cm,
        bottomMargin=2 * cm,
        title=getattr(document, "name", None) or "Untitled Document",
        author="Protectron",
        invariant=1,
    )
    pdf.build(story)
    return buffer.getvalue()
