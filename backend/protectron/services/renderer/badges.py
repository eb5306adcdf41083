"""
Protectron - Badge Renderer

Renders embeddable SVG compliance badges from a certificate snapshot.

Three layouts with fixed canvases:
    standard  280 x 120
    compact   200 x 36
    detailed  340 x 200

Rendering is a pure string transform. Identical BadgeData and style
always produce byte-identical SVG: no clock reads, no locale-dependent
formatting. Missing or expired certificates get a placeholder badge
instead of an error.
"""
from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from ...config import PUBLIC_APP_URL


class BadgeStyle(str, Enum):
    STANDARD = "standard"
    COMPACT = "compact"
    DETAILED = "detailed"

    @classmethod
    def parse(cls, value: Optional[str]) -> "BadgeStyle":
        """Unknown or missing styles fall back to standard."""
        try:
            return cls((value or "").lower())
        except ValueError:
            return cls.STANDARD


BADGE_DIMENSIONS = {
    BadgeStyle.STANDARD: (280, 120),
    BadgeStyle.COMPACT: (200, 36),
    BadgeStyle.DETAILED: (340, 200),
}

RISK_COLORS = {
    "minimal": "#12B76A",
    "limited": "#7F56D9",
    "high": "#F79009",
    "prohibited": "#F04438",
}
DEFAULT_RISK_COLOR = "#667085"

# Accent color per certification tier, stored on the certificate at issuance
LEVEL_BADGE_COLORS = {
    "bronze": "#B54708",
    "silver": "#475467",
    "gold": "#CA8504",
}
DEFAULT_BADGE_COLOR = "#12B76A"

FONT = "Inter, system-ui, sans-serif"

_MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


@dataclass(frozen=True)
class BadgeData:
    """Snapshot of a certificate as shown on a badge."""
    certificate_number: str
    ai_system_name: str
    risk_level: str
    compliance_score: float
    issued_at: datetime
    expires_at: datetime
    badge_color: str = DEFAULT_BADGE_COLOR
    organization_name: Optional[str] = None
    certification_level: Optional[str] = None


# =============================================================================
# HELPERS
# =============================================================================

def risk_color(level: Optional[str]) -> str:
    return RISK_COLORS.get((level or "").lower(), DEFAULT_RISK_COLOR)


def badge_color_for_level(level: Optional[str]) -> str:
    return LEVEL_BADGE_COLORS.get((level or "").lower(), DEFAULT_BADGE_COLOR)


def escape_xml(value: str) -> str:
    return (
        value.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&apos;")
    )


def truncate(value: str, max_len: int) -> str:
    return value[: max_len - 1] + "…" if len(value) > max_len else value


def _text(value: Optional[str], max_len: Optional[int] = None) -> str:
    value = value or ""
    if max_len:
        value = truncate(value, max_len)
    return escape_xml(value)


def format_score(score: float) -> str:
    """85.0 -> '85', 87.5 -> '87.5'."""
    rounded = round(float(score), 1)
    return str(int(rounded)) if rounded == int(rounded) else f"{rounded:.1f}"


def format_month_year(dt: datetime) -> str:
    return f"{_MONTHS[dt.month - 1][:3]} {dt.year}"


def format_long_date(dt: datetime) -> str:
    return f"{_MONTHS[dt.month - 1]} {dt.day}, {dt.year}"


def verify_url(certificate_number: str, app_url: str = PUBLIC_APP_URL) -> str:
    return f"{app_url}/verify/{certificate_number}"


# =============================================================================
# LAYOUTS
# =============================================================================

def render_standard_badge(badge: BadgeData) -> str:
    color = escape_xml(badge.badge_color)
    rcolor = risk_color(badge.risk_level)
    risk = (badge.risk_level or "unknown").lower()
    pill_width = len(risk) * 7 + 30

    return f"""<svg xmlns="http://www.w3.org/2000/svg" width="280" height="120" viewBox="0 0 280 120" fill="none">
  <defs>
    <linearGradient id="bg" x1="0" y1="0" x2="280" y2="120" gradientUnits="userSpaceOnUse">
      <stop offset="0%" stop-color="#FAFAFA"/>
      <stop offset="100%" stop-color="#F5F5F5"/>
    </linearGradient>
    <filter id="shadow" x="-4" y="-2" width="288" height="128">
      <feDropShadow dx="0" dy="2" stdDeviation="4" flood-color="#000" flood-opacity="0.08"/>
    </filter>
  </defs>
  <rect width="280" height="120" rx="12" fill="url(#bg)" filter="url(#shadow)" stroke="#E4E7EC" stroke-width="1"/>
  <rect x="0" y="0" width="4" height="120" rx="2" fill="{color}"/>
  <g transform="translate(20, 20)">
    <circle cx="20" cy="20" r="20" fill="{color}" opacity="0.1"/>
    <path d="M20 8L10 13V20C10 26.5 14.3 32.4 20 34C25.7 32.4 30 26.5 30 20V13L20 8Z" fill="{color}"/>
    <path d="M17 21L19.5 23.5L24 18" stroke="white" stroke-width="2" stroke-linecap="round" stroke-linejoin="round"/>
  </g>
  <text x="68" y="30" font-family="{FONT}" font-size="11" font-weight="700" fill="#101828">EU AI Act Compliant</text>
  <text x="68" y="48" font-family="{FONT}" font-size="10" fill="#475467">{_text(badge.ai_system_name, 28)}</text>
  <rect x="68" y="56" width="{pill_width}" height="18" rx="9" fill="{rcolor}" opacity="0.1"/>
  <circle cx="77" cy="65" r="3" fill="{rcolor}"/>
  <text x="84" y="69" font-family="{FONT}" font-size="9" font-weight="600" fill="{rcolor}">{_text(risk.capitalize())} Risk</text>
  <text x="220" y="42" font-family="{FONT}" font-size="24" font-weight="800" fill="{color}" text-anchor="middle">{format_score(badge.compliance_score)}%</text>
  <text x="220" y="55" font-family="{FONT}" font-size="8" fill="#667085" text-anchor="middle">Score</text>
  <line x1="16" y1="88" x2="264" y2="88" stroke="#E4E7EC" stroke-width="1"/>
  <text x="16" y="106" font-family="{FONT}" font-size="8" fill="#98A2B3">Cert: {_text(badge.certificate_number)}</text>
  <text x="264" y="106" font-family="{FONT}" font-size="8" fill="#98A2B3" text-anchor="end">Verified by Protectron · {format_month_year(badge.issued_at)}</text>
</svg>"""


def render_compact_badge(badge: BadgeData) -> str:
    color = escape_xml(badge.badge_color)
    rcolor = risk_color(badge.risk_level)

    return f"""<svg xmlns="http://www.w3.org/2000/svg" width="200" height="36" viewBox="0 0 200 36" fill="none">
  <rect width="200" height="36" rx="18" fill="#FAFAFA" stroke="#E4E7EC" stroke-width="1"/>
  <circle cx="18" cy="18" r="12" fill="{color}" opacity="0.1"/>
  <path d="M18 10L12 13.5V18C12 22.25 14.7 26.15 18 27.25C21.3 26.15 24 22.25 24 18V13.5L18 10Z" fill="{color}"/>
  <path d="M16 18.5L17.5 20L20.5 16.5" stroke="white" stroke-width="1.5" stroke-linecap="round" stroke-linejoin="round"/>
  <text x="36" y="15" font-family="{FONT}" font-size="9" font-weight="700" fill="#101828">EU AI Act Compliant</text>
  <text x="36" y="27" font-family="{FONT}" font-size="8" fill="#667085">{_text(badge.certificate_number, 24)}</text>
  <circle cx="175" cy="18" r="13" fill="{rcolor}" opacity="0.1"/>
  <text x="175" y="22" font-family="{FONT}" font-size="10" font-weight="800" fill="{rcolor}" text-anchor="middle">{format_score(badge.compliance_score)}%</text>
</svg>"""


def render_detailed_badge(badge: BadgeData, app_url: str = PUBLIC_APP_URL) -> str:
    color = escape_xml(badge.badge_color)
    rcolor = risk_color(badge.risk_level)
    risk = (badge.risk_level or "unknown").lower()
    pill_width = len(risk) * 6 + 24
    host = app_url.split("://", 1)[-1]

    return f"""<svg xmlns="http://www.w3.org/2000/svg" width="340" height="200" viewBox="0 0 340 200" fill="none">
  <defs>
    <linearGradient id="bg" x1="0" y1="0" x2="340" y2="200" gradientUnits="userSpaceOnUse">
      <stop offset="0%" stop-color="#FAFAFA"/>
      <stop offset="100%" stop-color="#F2F4F7"/>
    </linearGradient>
  </defs>
  <rect width="340" height="200" rx="16" fill="url(#bg)" stroke="#E4E7EC" stroke-width="1"/>
  <rect x="0" y="0" width="340" height="4" rx="2" fill="{color}"/>
  <g transform="translate(20, 20)">
    <circle cx="18" cy="18" r="18" fill="{color}" opacity="0.12"/>
    <path d="M18 7L8 12V19C8 25.5 12.3 31.4 18 33C23.7 31.4 28 25.5 28 19V12L18 7Z" fill="{color}"/>
    <path d="M15 20L17.5 22.5L22 17" stroke="white" stroke-width="2" stroke-linecap="round" stroke-linejoin="round"/>
  </g>
  <text x="64" y="30" font-family="{FONT}" font-size="14" font-weight="700" fill="#101828">EU AI Act Compliance Certificate</text>
  <text x="64" y="48" font-family="{FONT}" font-size="10" fill="#475467">Verified by Protectron</text>
  <line x1="20" y1="62" x2="320" y2="62" stroke="#E4E7EC" stroke-width="1"/>
  <text x="20" y="82" font-family="{FONT}" font-size="9" fill="#98A2B3">ORGANIZATION</text>
  <text x="20" y="96" font-family="{FONT}" font-size="11" font-weight="600" fill="#344054">{_text(badge.organization_name or "Organization", 30)}</text>
  <text x="200" y="82" font-family="{FONT}" font-size="9" fill="#98A2B3">AI SYSTEM</text>
  <text x="200" y="96" font-family="{FONT}" font-size="11" font-weight="600" fill="#344054">{_text(badge.ai_system_name, 20)}</text>
  <text x="20" y="120" font-family="{FONT}" font-size="9" fill="#98A2B3">RISK LEVEL</text>
  <rect x="20" y="126" width="{pill_width}" height="16" rx="8" fill="{rcolor}" opacity="0.1"/>
  <text x="32" y="137" font-family="{FONT}" font-size="9" font-weight="600" fill="{rcolor}">{_text(risk.capitalize())}</text>
  <text x="200" y="120" font-family="{FONT}" font-size="9" fill="#98A2B3">COMPLIANCE SCORE</text>
  <text x="200" y="140" font-family="{FONT}" font-size="22" font-weight="800" fill="{color}">{format_score(badge.compliance_score)}%</text>
  <line x1="20" y1="158" x2="320" y2="158" stroke="#E4E7EC" stroke-width="1"/>
  <text x="20" y="176" font-family="{FONT}" font-size="8" fill="#98A2B3">Certificate: {_text(badge.certificate_number)}</text>
  <text x="20" y="190" font-family="{FONT}" font-size="8" fill="#98A2B3">Issued: {format_long_date(badge.issued_at)} · Expires: {format_long_date(badge.expires_at)}</text>
  <text x="320" y="190" font-family="{FONT}" font-size="8" fill="{color}" text-anchor="end">Verify at {_text(host)}</text>
</svg>"""


def _placeholder(message: str, fill: str, stroke: str, text_color: str) -> str:
    return f"""<svg xmlns="http://www.w3.org/2000/svg" width="200" height="36" viewBox="0 0 200 36" fill="none">
  <rect width="200" height="36" rx="18" fill="{fill}" stroke="{stroke}" stroke-width="1"/>
  <text x="100" y="22" font-family="{FONT}" font-size="10" font-weight="600" fill="{text_color}" text-anchor="middle">{message}</text>
</svg>"""


def render_not_found_badge() -> str:
    return _placeholder("Certificate Not Found", "#FEF3F2", "#FEC8C8", "#D92D20")


def render_expired_badge() -> str:
    return _placeholder("Certificate Expired", "#FFFAEB", "#FEDF89", "#B54708")


# =============================================================================
# ENTRY POINTS
# =============================================================================

def render_badge(
    badge: Optional[BadgeData],
    style: Any = BadgeStyle.STANDARD,
    now: Optional[datetime] = None,
    app_url: str = PUBLIC_APP_URL,
) -> str:
    """
    Render a badge in the requested style.

    badge=None renders the not-found placeholder. When `now` is given and
    the certificate is past expires_at the expired placeholder is returned.
    app_url is the verification host printed on the detailed layout.
    Never raises for missing or stale data.
    """
    if badge is None:
        return render_not_found_badge()
    if now is not None and badge.expires_at < now:
        return render_expired_badge()

    style = style if isinstance(style, BadgeStyle) else BadgeStyle.parse(style)
    if style == BadgeStyle.COMPACT:
        return render_compact_badge(badge)
    if style == BadgeStyle.DETAILED:
        return render_detailed_badge(badge, app_url)
    return render_standard_badge(badge)


def badge_payload(badge: BadgeData, status: str = "active") -> Dict[str, Any]:
    """JSON variant of a badge (format=json)."""
    return {
        "certificateNumber": badge.certificate_number,
        "aiSystemName": badge.ai_system_name,
        "riskLevel": badge.risk_level,
        "complianceScore": badge.compliance_score,
        "certificationLevel": badge.certification_level,
        "status": status,
        "issuedAt": badge.issued_at.isoformat(),
        "expiresAt": badge.expires_at.isoformat(),
        "organization": badge.organization_name,
    }


def embed_snippets(
    certificate_number: str,
    ai_system_name: str,
    style: Any = BadgeStyle.STANDARD,
    app_url: str = PUBLIC_APP_URL,
) -> Dict[str, str]:
    """HTML, Markdown and direct-URL embed code for a badge."""
    style = style if isinstance(style, BadgeStyle) else BadgeStyle.parse(style)
    badge_url = f"{app_url}/badges/{certificate_number}?style={style.value}"
    link = verify_url(certificate_number, app_url)
    name = escape_xml(ai_system_name)
    html = (
        f'<a href="{link}" target="_blank" rel="noopener noreferrer" '
        f'title="Verify EU AI Act Compliance - {name}">\n'
        f'  <img src="{badge_url}" alt="EU AI Act Compliant - {name}" />\n'
        f"</a>"
    )
    markdown = f"[![EU AI Act Compliant - {ai_system_name}]({badge_url})]({link})"
    return {"html": html, "markdown": markdown, "url": badge_url, "verify_url": link}
