"""Protectron - Renderers (badge SVG, certificate PDF, document PDF)"""
from .badges import (
    BadgeData,
    BadgeStyle,
    RISK_COLORS,
    LEVEL_BADGE_COLORS,
    badge_color_for_level,
    badge_payload,
    embed_snippets,
    escape_xml,
    render_badge,
    render_expired_badge,
    render_not_found_badge,
    risk_color,
    truncate,
)
from .certificate_pdf import CertificatePdfData, render_certificate_pdf
from .document_pdf import DOCUMENT_TYPE_LABELS, answer_text, parse_generation_prompt, render_document_pdf

__all__ = [
    "BadgeData",
    "BadgeStyle",
    "RISK_COLORS",
    "LEVEL_BADGE_COLORS",
    "badge_color_for_level",
    "badge_payload",
    "embed_snippets",
    "escape_xml",
    "render_badge",
    "render_expired_badge",
    "render_not_found_badge",
    "risk_color",
    "truncate",
    "CertificatePdfData",
    "render_certificate_pdf",
    "DOCUMENT_TYPE_LABELS",
    "answer_text",
    "parse_generation_prompt",
    "render_document_pdf",
]
