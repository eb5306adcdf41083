"""
Tests for the Signal Collector (database reads).

1. Requirement counting: completed + compliant done, not_applicable excluded
2. HITL, incident and telemetry signals
3. Organization scoping
4. Latest active certificate lookup
"""
from datetime import datetime, timedelta
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from protectron.config import ScoringConfig
from protectron.models.context import OrgContext
from protectron.models.db_models import (
    AuditEventDB,
    CertificateRecordStatus,
    CertificationDB,
    HITLRuleDB,
    IncidentDB,
    IncidentStatus,
    RequirementDB,
    RequirementStatus,
)
from protectron.services.scoring import AISystemNotFoundError, SignalCollector


def _requirement(system, status):
    return RequirementDB(id=str(uuid4()), ai_system_id=system.id, title="Requirement", status=status)


def _incident(system, status):
    return IncidentDB(
        id=str(uuid4()), ai_system_id=system.id, incident_type="bias",
        title="Incident", description="Something happened", status=status,
    )


def _event(system, timestamp):
    return AuditEventDB(
        id=str(uuid4()), ai_system_id=system.id, event_id=str(uuid4()),
        event_type="agent_action", event_timestamp=timestamp,
    )


def _certificate(system, certified_at, status=CertificateRecordStatus.ACTIVE, cert_id=None):
    return CertificationDB(
        id=str(uuid4()),
        ai_system_id=system.id,
        organization_id=system.organization_id,
        cert_id=cert_id or f"CERT-{uuid4().hex[:6].upper()}-AAAAAA",
        certification_level="gold",
        compliance_score=100.0,
        status=status,
        system_name=system.name,
        risk_level="high",
        badge_color="#CA8504",
        certified_at=certified_at,
        valid_until=certified_at + timedelta(days=365),
        next_verification_at=certified_at + timedelta(days=90),
    )


# =============================================================================
# TEST: REQUIREMENTS
# =============================================================================

class TestRequirementsSummary:

    def test_counts_completed_and_compliant(self, db_session, ai_system):
        db_session.add_all([
            _requirement(ai_system, RequirementStatus.COMPLETED),
            _requirement(ai_system, RequirementStatus.COMPLIANT),
            _requirement(ai_system, RequirementStatus.IN_PROGRESS),
            _requirement(ai_system, RequirementStatus.NOT_STARTED),
        ])
        db_session.commit()

        summary = SignalCollector(db_session).requirements_summary(ai_system.id)
        assert (summary.total, summary.completed, summary.percentage) == (4, 2, 50)

    def test_not_applicable_excluded_from_total(self, db_session, ai_system):
        db_session.add_all([
            _requirement(ai_system, RequirementStatus.COMPLETED),
            _requirement(ai_system, RequirementStatus.NOT_APPLICABLE),
            _requirement(ai_system, RequirementStatus.NOT_APPLICABLE),
        ])
        db_session.commit()

        summary = SignalCollector(db_session).requirements_summary(ai_system.id)
        assert (summary.total, summary.completed, summary.percentage) == (1, 1, 100)
        assert summary.complete is True

    def test_no_requirements_is_not_applicable(self, db_session, ai_system):
        summary = SignalCollector(db_session).requirements_summary(ai_system.id)
        assert summary.total == 0
        assert summary.applicable is False


# =============================================================================
# TEST: CHECKS
# =============================================================================

class TestChecks:

    def test_fresh_system_has_no_signals(self, db_session, ai_system, now):
        signals = SignalCollector(db_session).collect_for_system(ai_system, now)
        assert signals.checks.sdk_connected is False
        assert signals.checks.hitl_rules_active is False
        assert signals.checks.no_open_incidents is True
        assert signals.checks.logging_active is False
        assert signals.certificate is None

    def test_only_active_hitl_rules_count(self, db_session, ai_system):
        db_session.add(HITLRuleDB(id=str(uuid4()), ai_system_id=ai_system.id, name="Off", is_active=False))
        db_session.commit()
        collector = SignalCollector(db_session)
        assert collector.active_hitl_rules(ai_system.id) == 0

        db_session.add(HITLRuleDB(id=str(uuid4()), ai_system_id=ai_system.id, name="On", is_active=True))
        db_session.commit()
        assert collector.active_hitl_rules(ai_system.id) == 1

    def test_resolved_incident_is_still_open(self, db_session, ai_system):
        """Only closed incidents stop counting."""
        db_session.add_all([
            _incident(ai_system, IncidentStatus.RESOLVED),
            _incident(ai_system, IncidentStatus.CLOSED),
        ])
        db_session.commit()
        assert SignalCollector(db_session).open_incidents(ai_system.id) == 1

    def test_logging_window(self, db_session, ai_system, now):
        db_session.add(_event(ai_system, now - timedelta(days=45)))
        db_session.commit()
        collector = SignalCollector(db_session)
        assert collector.recent_events(ai_system.id, now) == 0

        db_session.add(_event(ai_system, now - timedelta(days=3)))
        db_session.commit()
        assert collector.recent_events(ai_system.id, now) == 1

    def test_logging_window_is_configurable(self, db_session, ai_system, now):
        db_session.add(_event(ai_system, now - timedelta(days=45)))
        db_session.commit()
        collector = SignalCollector(db_session, ScoringConfig(logging_window_days=60))
        assert collector.recent_events(ai_system.id, now) == 1


# =============================================================================
# TEST: SCOPING
# =============================================================================

class TestOrganizationScoping:

    def test_system_of_other_organization_is_not_found(self, db_session, ai_system, now):
        other = OrgContext(organization_id=str(uuid4()))
        with pytest.raises(AISystemNotFoundError):
            SignalCollector(db_session).collect(other, ai_system.id, now)

    def test_own_system_is_found(self, db_session, ai_system, now):
        ctx = OrgContext(organization_id=ai_system.organization_id)
        signals = SignalCollector(db_session).collect(ctx, ai_system.id, now)
        assert signals.ai_system_id == ai_system.id

    def test_missing_system_raises(self):
        mock_db = MagicMock()
        mock_db.query.return_value.filter.return_value.first.return_value = None

        with pytest.raises(AISystemNotFoundError) as exc_info:
            SignalCollector(mock_db).get_system(OrgContext(organization_id="org-1"), "missing")
        assert exc_info.value.ai_system_id == "missing"


# =============================================================================
# TEST: CERTIFICATE LOOKUP
# =============================================================================

class TestLatestCertificate:

    def test_latest_active_certificate(self, db_session, ai_system):
        db_session.add_all([
            _certificate(ai_system, datetime(2025, 1, 1), cert_id="CERT-OLD-AAAAAA"),
            _certificate(ai_system, datetime(2025, 5, 1), cert_id="CERT-NEW-BBBBBB"),
            _certificate(ai_system, datetime(2025, 6, 1), CertificateRecordStatus.REVOKED, "CERT-REV-CCCCCC"),
        ])
        db_session.commit()

        record = SignalCollector(db_session).latest_certificate(ai_system.id)
        assert record.cert_id == "CERT-NEW-BBBBBB"
        assert record.valid_until == datetime(2026, 5, 1)
