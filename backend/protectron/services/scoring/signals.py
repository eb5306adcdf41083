"""
Signal Collector

Reads the live inputs of the scoring engine for one AI system:
requirement completion, SDK connection, active HITL rules, open
incidents, recent telemetry, and the latest issued certificate.

Every lookup is scoped by the OrgContext passed in. A system owned by
another organization is indistinguishable from a missing one.
"""

from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...config import ScoringConfig
from ...models.certification import (
    CertificateRecord,
    ComplianceChecks,
    ComplianceSignals,
    RequirementsSummary,
)
from ...models.context import OrgContext
from ...models.db_models import (
    AISystemDB,
    AuditEventDB,
    CertificationDB,
    CertificateRecordStatus,
    DONE_REQUIREMENT_STATUSES,
    HITLRuleDB,
    IncidentDB,
    IncidentStatus,
    RequirementDB,
    RequirementStatus,
)
from .engine import DEFAULT_CONFIG, requirements_percentage
from .lifecycle import CertificationError


class AISystemNotFoundError(CertificationError):
    """AI system does not exist within the caller's organization."""

    def __init__(self, ai_system_id: str):
        self.ai_system_id = ai_system_id
        super().__init__(f"AI system {ai_system_id} not found")


class SignalCollector:
    """
    Collects ComplianceSignals from the database.

    Usage:
        collector = SignalCollector(db)
        signals = collector.collect(ctx, ai_system_id, now)
    """

    def __init__(self, db: Session, config: Optional[ScoringConfig] = None):
        self.db = db
        self.config = config or DEFAULT_CONFIG

    def get_system(self, ctx: OrgContext, ai_system_id: str) -> AISystemDB:
        """Fetch an AI system inside the caller's organization or raise."""
        system = (
            self.db.query(AISystemDB)
            .filter(
                AISystemDB.id == ai_system_id,
                AISystemDB.organization_id == ctx.organization_id,
            )
            .first()
        )
        if system is None:
            raise AISystemNotFoundError(ai_system_id)
        return system

    def collect(self, ctx: OrgContext, ai_system_id: str, now: datetime) -> ComplianceSignals:
        system = self.get_system(ctx, ai_system_id)
        return self.collect_for_system(system, now)

    def collect_for_system(self, system: AISystemDB, now: datetime) -> ComplianceSignals:
        return ComplianceSignals(
            ai_system_id=system.id,
            requirements=self.requirements_summary(system.id),
            checks=ComplianceChecks(
                sdk_connected=bool(system.sdk_connected),
                hitl_rules_active=self.active_hitl_rules(system.id) >= 1,
                no_open_incidents=self.open_incidents(system.id) == 0,
                logging_active=self.recent_events(system.id, now) > 0,
            ),
            certificate=self.latest_certificate(system.id),
        )

    # =========================================================================
    # INDIVIDUAL SIGNALS
    # =========================================================================

    def requirements_summary(self, ai_system_id: str) -> RequirementsSummary:
        """Completed vs applicable requirements. not_applicable rows are excluded."""
        rows = (
            self.db.query(RequirementDB.status, func.count(RequirementDB.id))
            .filter(RequirementDB.ai_system_id == ai_system_id)
            .group_by(RequirementDB.status)
            .all()
        )
        total = 0
        completed = 0
        for status, count in rows:
            if status == RequirementStatus.NOT_APPLICABLE:
                continue
            total += count
            if status in DONE_REQUIREMENT_STATUSES:
                completed += count
        return RequirementsSummary(
            total=total,
            completed=completed,
            percentage=requirements_percentage(completed, total),
        )

    def active_hitl_rules(self, ai_system_id: str) -> int:
        return (
            self.db.query(func.count(HITLRuleDB.id))
            .filter(HITLRuleDB.ai_system_id == ai_system_id, HITLRuleDB.is_active.is_(True))
            .scalar()
        ) or 0

    def open_incidents(self, ai_system_id: str) -> int:
        return (
            self.db.query(func.count(IncidentDB.id))
            .filter(IncidentDB.ai_system_id == ai_system_id, IncidentDB.status != IncidentStatus.CLOSED)
            .scalar()
        ) or 0

    def recent_events(self, ai_system_id: str, now: datetime) -> int:
        """Telemetry events inside the logging window (default 30 days)."""
        since = now - timedelta(days=self.config.logging_window_days)
        return (
            self.db.query(func.count(AuditEventDB.id))
            .filter(AuditEventDB.ai_system_id == ai_system_id, AuditEventDB.event_timestamp >= since)
            .scalar()
        ) or 0

    def latest_certificate(self, ai_system_id: str) -> Optional[CertificateRecord]:
        """Most recent active certificate, if one was ever generated."""
        row = (
            self.db.query(CertificationDB)
            .filter(
                CertificationDB.ai_system_id == ai_system_id,
                CertificationDB.status == CertificateRecordStatus.ACTIVE,
            )
            .order_by(CertificationDB.certified_at.desc())
            .first()
        )
        if row is None:
            return None
        return CertificateRecord(
            cert_id=row.cert_id,
            issued_at=row.certified_at,
            valid_until=row.valid_until,
            next_verification_at=row.next_verification_at,
        )
