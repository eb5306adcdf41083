"""
Certificate Lifecycle

Derives certification status from live signals and issues certificates.

State machine (read side, recomputed on every request):
    NotEligible  score < 50
    Pending      score in [50, 70), or tier reached but checklist incomplete,
                 or everything satisfied but no certificate generated yet
    Certified    tier != none AND requirements 100% AND certificate present

Transitions into Certified only happen through an explicit generation
call (issue_certificate). Expiry is lazy: valid_until is compared with
the caller-supplied "now"; no job ever flips a stored state.
"""

import secrets
import string
from datetime import datetime, timedelta
from typing import Callable, Optional

from dateutil.relativedelta import relativedelta

from ...config import ScoringConfig
from ...models.certification import (
    CertificateRecord,
    CertificationLevel,
    CertificationStatus,
    Certified,
    ComplianceCertification,
    ComplianceSignals,
    IssuedCertificate,
    NotEligible,
    Pending,
)
from .engine import DEFAULT_CONFIG, PENDING_FLOOR, classify_level, compute_bonus_points, score_from_checks


class CertificationError(Exception):
    """Base error for certification operations."""
    pass


class CertificationNotEligibleError(CertificationError):
    """Raised when a certificate is requested for a system that does not qualify."""

    def __init__(self, reasons):
        self.reasons = list(reasons)
        super().__init__(
            "System does not meet minimum certification requirements: " + "; ".join(self.reasons)
        )


# =============================================================================
# EXPIRY
# =============================================================================

def is_expired(valid_until: Optional[datetime], now: datetime) -> bool:
    """A certificate is expired once valid_until lies strictly in the past."""
    if valid_until is None:
        return False
    return valid_until < now


# =============================================================================
# STATUS DERIVATION
# =============================================================================

def certificate_allowed(level: CertificationLevel, requirements_percentage: int) -> bool:
    """A certificate may exist only with a tier and a fully complete checklist."""
    return level != CertificationLevel.NONE and requirements_percentage == 100


def derive_status(
    score: int,
    level: CertificationLevel,
    requirements_percentage: int,
    certificate: Optional[CertificateRecord],
    sdk_connected: bool,
    now: datetime,
) -> CertificationStatus:
    """
    Compute the tagged certification status.

    A stored certificate is only surfaced while the live signals still
    allow one; if the checklist regresses the view falls back to Pending
    without touching the stored row.
    """
    allowed = certificate_allowed(level, requirements_percentage)

    if allowed and certificate is not None:
        return Certified(
            cert_id=certificate.cert_id,
            issued_at=certificate.issued_at,
            valid_until=certificate.valid_until,
            next_verification_at=certificate.next_verification_at,
            expired=is_expired(certificate.valid_until, now),
        )

    if score < PENDING_FLOOR:
        return NotEligible()

    return Pending(eligible_for_certificate=allowed and sdk_connected)


def build_certification_view(
    signals: ComplianceSignals,
    now: datetime,
    config: Optional[ScoringConfig] = None,
) -> ComplianceCertification:
    """Project live signals into the full certification view."""
    config = config or DEFAULT_CONFIG
    checks = signals.checks
    percentage = signals.requirements.percentage

    score = score_from_checks(percentage, checks, config)
    level = classify_level(score)
    bonus = compute_bonus_points(
        checks.hitl_rules_active, checks.no_open_incidents, checks.logging_active, config
    )
    status = derive_status(score, level, percentage, signals.certificate, checks.sdk_connected, now)

    return ComplianceCertification(
        agent_id=signals.ai_system_id,
        compliance_score=score,
        certification_level=level,
        bonus_points=bonus,
        requirements=signals.requirements,
        checks=checks,
        status=status,
    )


# =============================================================================
# ISSUANCE
# =============================================================================

_CERT_ALPHABET = string.ascii_uppercase + string.digits


def _base36(value: int) -> str:
    digits = string.digits + string.ascii_uppercase
    if value == 0:
        return "0"
    out = []
    while value:
        value, rem = divmod(value, 36)
        out.append(digits[rem])
    return "".join(reversed(out))


def generate_cert_id(now: datetime, random_suffix: Optional[Callable[[], str]] = None) -> str:
    """CERT-<base36 epoch millis>-<6 random A-Z0-9>."""
    epoch = datetime(1970, 1, 1, tzinfo=now.tzinfo)
    millis = int((now - epoch).total_seconds() * 1000)
    suffix = random_suffix() if random_suffix else "".join(secrets.choice(_CERT_ALPHABET) for _ in range(6))
    return f"CERT-{_base36(millis)}-{suffix}"


def eligibility_failures(view: ComplianceCertification) -> list:
    """Human-readable reasons a certificate cannot be issued. Empty means eligible."""
    reasons = []
    if view.certification_level == CertificationLevel.NONE:
        reasons.append(f"compliance score {view.compliance_score}% is below 70%")
    if not view.requirements.complete:
        reasons.append(
            f"{view.requirements.completed} of {view.requirements.total} requirements completed"
        )
    if not view.checks.sdk_connected:
        reasons.append("SDK must be connected")
    return reasons


def issue_certificate(
    view: ComplianceCertification,
    now: datetime,
    config: Optional[ScoringConfig] = None,
    cert_id: Optional[str] = None,
) -> IssuedCertificate:
    """
    Issue a certificate for an eligible view.

    Validity and re-verification offsets come from config (defaults:
    12 months, 90 days). Raises CertificationNotEligibleError otherwise.
    """
    config = config or DEFAULT_CONFIG
    reasons = eligibility_failures(view)
    if reasons:
        raise CertificationNotEligibleError(reasons)

    return IssuedCertificate(
        cert_id=cert_id or generate_cert_id(now),
        certification_level=view.certification_level,
        compliance_score=view.compliance_score,
        issued_at=now,
        valid_until=now + relativedelta(months=config.validity_months),
        next_verification_at=now + timedelta(days=config.verification_interval_days),
        checks=view.checks,
        requirements=view.requirements,
    )
