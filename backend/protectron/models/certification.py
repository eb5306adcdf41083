"""
Protectron - Certification Data Contracts

Dataclasses for the compliance certification view. The view is a pure
projection of live signals: nothing here is persisted, and every field is
recomputed on each read.

Status is a tagged union (NotEligible | Pending | Certified). Consumers
branch on the concrete class (or its `status` tag), never on optional
fields.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Union


# =============================================================================
# ENUMS
# =============================================================================

class CertificationLevel(str, Enum):
    NONE = "none"
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"


class CertificationStatusTag(str, Enum):
    NOT_ELIGIBLE = "not_eligible"
    PENDING = "pending"
    CERTIFIED = "certified"


def _iso(dt: Optional[datetime]) -> Optional[str]:
    return dt.isoformat() if dt else None


# =============================================================================
# SIGNALS (input side)
# =============================================================================

@dataclass(frozen=True)
class ComplianceChecks:
    """Boolean signals read from system state and agent telemetry."""
    sdk_connected: bool = False
    hitl_rules_active: bool = False
    no_open_incidents: bool = False
    logging_active: bool = False

    def to_dict(self) -> Dict[str, bool]:
        return {
            "sdk_connected": self.sdk_connected,
            "hitl_rules_active": self.hitl_rules_active,
            "no_open_incidents": self.no_open_incidents,
            "logging_active": self.logging_active,
        }


@dataclass(frozen=True)
class RequirementsSummary:
    """
    Completion ratio over the applicable requirement checklist.

    total == 0 means "not applicable" (no checklist yet), which is a
    distinct empty state and not a 0% score.
    """
    total: int
    completed: int
    percentage: int

    @property
    def applicable(self) -> bool:
        return self.total > 0

    @property
    def complete(self) -> bool:
        return self.applicable and self.percentage == 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "completed": self.completed,
            "percentage": self.percentage,
            "applicable": self.applicable,
        }


@dataclass(frozen=True)
class CertificateRecord:
    """The parts of a stored certificate the lifecycle needs."""
    cert_id: str
    issued_at: datetime
    valid_until: datetime
    next_verification_at: datetime


@dataclass(frozen=True)
class ComplianceSignals:
    """Everything scoring needs for one AI system, already fetched."""
    ai_system_id: str
    requirements: RequirementsSummary
    checks: ComplianceChecks
    certificate: Optional[CertificateRecord] = None


# =============================================================================
# STATUS UNION
# =============================================================================

@dataclass(frozen=True)
class NotEligible:
    """Score below the pending floor (50)."""
    status: CertificationStatusTag = field(default=CertificationStatusTag.NOT_ELIGIBLE, init=False)


@dataclass(frozen=True)
class Pending:
    """
    On the way to certification.

    eligible_for_certificate is True once a certificate could be generated
    right now (tier reached, checklist complete, SDK connected).
    """
    eligible_for_certificate: bool = False
    status: CertificationStatusTag = field(default=CertificationStatusTag.PENDING, init=False)


@dataclass(frozen=True)
class Certified:
    """Tier reached, checklist complete, certificate generated."""
    cert_id: str
    issued_at: datetime
    valid_until: datetime
    next_verification_at: datetime
    expired: bool = False
    status: CertificationStatusTag = field(default=CertificationStatusTag.CERTIFIED, init=False)

    def certificate_dict(self) -> Dict[str, Any]:
        return {
            "cert_id": self.cert_id,
            "issued_at": _iso(self.issued_at),
            "valid_until": _iso(self.valid_until),
            "next_verification_at": _iso(self.next_verification_at),
            "expired": self.expired,
        }


CertificationStatus = Union[NotEligible, Pending, Certified]


# =============================================================================
# VIEW (output side)
# =============================================================================

@dataclass(frozen=True)
class ComplianceCertification:
    """
    Materialized certification view for one AI system.

    Serialized with to_dict() into the public JSON contract:
    {agent_id, compliance_score, certification_level, certification_status,
     requirements, checks, bonus_points, certification}
    """
    agent_id: str
    compliance_score: int
    certification_level: CertificationLevel
    bonus_points: int
    requirements: RequirementsSummary
    checks: ComplianceChecks
    status: CertificationStatus

    @property
    def certificate(self) -> Optional[Certified]:
        return self.status if isinstance(self.status, Certified) else None

    def to_dict(self) -> Dict[str, Any]:
        certificate = self.certificate
        data = {
            "agent_id": self.agent_id,
            "compliance_score": self.compliance_score,
            "certification_level": self.certification_level.value,
            "certification_status": self.status.status.value,
            "requirements": self.requirements.to_dict(),
            "checks": self.checks.to_dict(),
            "bonus_points": self.bonus_points,
            "certification": certificate.certificate_dict() if certificate else None,
        }
        if isinstance(self.status, Pending):
            data["eligible_for_certificate"] = self.status.eligible_for_certificate
        return data


@dataclass(frozen=True)
class IssuedCertificate:
    """Result of an explicit certificate generation."""
    cert_id: str
    certification_level: CertificationLevel
    compliance_score: int
    issued_at: datetime
    valid_until: datetime
    next_verification_at: datetime
    checks: ComplianceChecks
    requirements: RequirementsSummary

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cert_id": self.cert_id,
            "certification_level": self.certification_level.value,
            "compliance_score": self.compliance_score,
            "issued_at": _iso(self.issued_at),
            "valid_until": _iso(self.valid_until),
            "next_verification_at": _iso(self.next_verification_at),
        }
