"""
Certification Service

Orchestrates the certificate lifecycle against the database.

Key responsibilities:
- Build the live certification view for an AI system (read-only)
- Generate certificates (state change, explicit call only)
- Public verification and badge lookup by certificate id
- Embed code for an organization's badges
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from uuid import uuid4

from sqlalchemy.orm import Session

from ..config import PUBLIC_APP_URL, ScoringConfig
from ..models.certification import (
    ComplianceCertification,
    ComplianceChecks,
    IssuedCertificate,
    RequirementsSummary,
)
from ..models.context import OrgContext
from ..models.db_models import (
    ActivityLogDB,
    CertificationDB,
    CertificateRecordStatus,
)
from .renderer import (
    BadgeData,
    CertificatePdfData,
    badge_color_for_level,
    embed_snippets,
    render_certificate_pdf,
)
from .scoring import (
    CertificationError,
    SignalCollector,
    build_certification_view,
    is_expired,
    issue_certificate,
)
from .scoring.engine import DEFAULT_CONFIG

logger = logging.getLogger(__name__)


class CertificateNotFoundError(CertificationError):
    """No certificate with this id (within the caller's scope)."""

    def __init__(self, cert_id: str):
        self.cert_id = cert_id
        super().__init__(f"Certificate {cert_id} not found")


class CertificationService:
    """
    Certificate lifecycle service.

    Usage:
        service = CertificationService(db)
        view = service.get_view(ctx, ai_system_id, now)
        record, issued = service.generate(ctx, ai_system_id, now)
    """

    def __init__(self, db: Session, config: Optional[ScoringConfig] = None, app_url: str = PUBLIC_APP_URL):
        self.db = db
        self.config = config or DEFAULT_CONFIG
        self.app_url = app_url
        self.signals = SignalCollector(db, self.config)

    # =========================================================================
    # READ SIDE
    # =========================================================================

    def get_view(self, ctx: OrgContext, ai_system_id: str, now: datetime) -> ComplianceCertification:
        """Live certification view. Recomputed on every call."""
        signals = self.signals.collect(ctx, ai_system_id, now)
        return build_certification_view(signals, now, self.config)

    def list_certificates(self, ctx: OrgContext) -> List[CertificationDB]:
        return (
            self.db.query(CertificationDB)
            .filter(CertificationDB.organization_id == ctx.organization_id)
            .order_by(CertificationDB.certified_at.desc())
            .all()
        )

    def get_for_org(self, ctx: OrgContext, cert_id: str) -> CertificationDB:
        record = (
            self.db.query(CertificationDB)
            .filter(
                CertificationDB.cert_id == cert_id,
                CertificationDB.organization_id == ctx.organization_id,
            )
            .first()
        )
        if record is None:
            raise CertificateNotFoundError(cert_id)
        return record

    # =========================================================================
    # GENERATION (STATE CHANGE)
    # =========================================================================

    def generate(self, ctx: OrgContext, ai_system_id: str, now: datetime) -> Tuple[CertificationDB, IssuedCertificate]:
        """
        Issue a certificate for an AI system.

        Re-generation replaces the system's existing record (new cert_id,
        fresh validity window). Raises CertificationNotEligibleError when
        the live view does not qualify.
        """
        system = self.signals.get_system(ctx, ai_system_id)
        signals = self.signals.collect_for_system(system, now)
        view = build_certification_view(signals, now, self.config)
        issued = issue_certificate(view, now, self.config)

        record = (
            self.db.query(CertificationDB)
            .filter(CertificationDB.ai_system_id == system.id)
            .first()
        )
        if record is None:
            record = CertificationDB(
                id=str(uuid4()),
                ai_system_id=system.id,
                organization_id=system.organization_id,
            )
            self.db.add(record)

        level = issued.certification_level.value
        record.cert_id = issued.cert_id
        record.certification_level = level
        record.compliance_score = float(issued.compliance_score)
        record.status = CertificateRecordStatus.ACTIVE
        record.system_name = system.name
        record.risk_level = _enum_value(system.risk_level) or "minimal"
        record.badge_color = badge_color_for_level(level)
        record.requirements_snapshot = {
            **issued.requirements.to_dict(),
            "checks": issued.checks.to_dict(),
        }
        record.certified_at = issued.issued_at
        record.valid_until = issued.valid_until
        record.next_verification_at = issued.next_verification_at

        self.db.add(ActivityLogDB(
            id=str(uuid4()),
            organization_id=system.organization_id,
            ai_system_id=system.id,
            user_id=ctx.user_id,
            action_type="certificate_generated",
            action_description=(
                f"Generated {level.capitalize()} compliance certificate for {system.name}"
            ),
        ))
        self.db.commit()
        self.db.refresh(record)

        logger.info(
            f"Certificate {issued.cert_id} issued for AI system {system.id} "
            f"({level}, score {issued.compliance_score})"
        )
        return record, issued

    # =========================================================================
    # PUBLIC LOOKUP
    # =========================================================================

    def find_by_cert_id(self, cert_id: str) -> Optional[CertificationDB]:
        """Unscoped lookup for the public verify and badge endpoints."""
        return self.db.query(CertificationDB).filter(CertificationDB.cert_id == cert_id).first()

    def find_for_badge(self, identifier: str) -> Optional[CertificationDB]:
        """Active certificate by cert_id, falling back to the row id."""
        query = self.db.query(CertificationDB).filter(
            CertificationDB.status == CertificateRecordStatus.ACTIVE
        )
        record = query.filter(CertificationDB.cert_id == identifier).first()
        if record is None:
            record = query.filter(CertificationDB.id == identifier).first()
        return record

    def verify(self, cert_id: str, now: datetime) -> Optional[Dict[str, Any]]:
        """
        Public verification payload, or None when the id is unknown.

        valid is True only for an active certificate that has not expired.
        """
        record = self.find_by_cert_id(cert_id)
        if record is None:
            return None

        expired = is_expired(record.valid_until, now)
        status = "expired" if expired else _enum_value(record.status)
        snapshot = record.requirements_snapshot or {}
        return {
            "valid": status == CertificateRecordStatus.ACTIVE.value,
            "cert_id": record.cert_id,
            "system_name": record.system_name,
            "organization_name": record.organization.name if record.organization else None,
            "certification_level": record.certification_level,
            "compliance_score": record.compliance_score,
            "issued_at": record.certified_at.isoformat(),
            "valid_until": record.valid_until.isoformat(),
            "status": status,
            "checks": snapshot.get("checks", {}),
        }

    # =========================================================================
    # RENDER INPUTS
    # =========================================================================

    def badge_data(self, record: CertificationDB) -> BadgeData:
        return BadgeData(
            certificate_number=record.cert_id,
            ai_system_name=record.system_name,
            risk_level=record.risk_level,
            compliance_score=record.compliance_score,
            issued_at=record.certified_at,
            expires_at=record.valid_until,
            badge_color=record.badge_color,
            organization_name=record.organization.name if record.organization else None,
            certification_level=record.certification_level,
        )

    def certificate_pdf(self, record: CertificationDB) -> bytes:
        snapshot = record.requirements_snapshot or {}
        checks = snapshot.get("checks", {})
        data = CertificatePdfData(
            cert_id=record.cert_id,
            system_name=record.system_name,
            organization_name=record.organization.name if record.organization else "",
            certification_level=record.certification_level,
            compliance_score=record.compliance_score,
            issued_at=record.certified_at,
            valid_until=record.valid_until,
            requirements=RequirementsSummary(
                total=snapshot.get("total", 0),
                completed=snapshot.get("completed", 0),
                percentage=snapshot.get("percentage", 0),
            ),
            checks=ComplianceChecks(
                sdk_connected=bool(checks.get("sdk_connected")),
                hitl_rules_active=bool(checks.get("hitl_rules_active")),
                no_open_incidents=bool(checks.get("no_open_incidents")),
                logging_active=bool(checks.get("logging_active")),
            ),
            app_url=self.app_url,
        )
        return render_certificate_pdf(data)

    def embed(self, ctx: OrgContext, cert_id: str, style: Optional[str] = None) -> Dict[str, Any]:
        record = self.get_for_org(ctx, cert_id)
        snippets = embed_snippets(record.cert_id, record.system_name, style, self.app_url)
        return {"cert_id": record.cert_id, **snippets}


def _enum_value(value):
    return getattr(value, "value", value)


def download_filename(system_name: str, cert_id: str) -> str:
    """'Support Bot' -> 'Support-Bot-certificate-CERT-...pdf'"""
    slug = "-".join((system_name or "system").split())
    return f"{slug}-certificate-{cert_id}.pdf"
