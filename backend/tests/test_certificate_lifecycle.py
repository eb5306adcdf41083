"""
Tests for the Certificate Lifecycle.

1. Status derivation: NotEligible / Pending / Certified
2. Certificate payload present only with tier + complete checklist
3. Issuance gated on tier, checklist and SDK connection
4. Validity (12 months) and re-verification (90 days) offsets
5. Certificate id format
6. Lazy expiry
"""
import re
from datetime import datetime

import pytest

from protectron.config import ScoringConfig
from protectron.models.certification import (
    CertificateRecord,
    CertificationLevel,
    Certified,
    ComplianceChecks,
    ComplianceSignals,
    NotEligible,
    Pending,
    RequirementsSummary,
)
from protectron.services.scoring.lifecycle import (
    CertificationNotEligibleError,
    _base36,
    build_certification_view,
    derive_status,
    eligibility_failures,
    generate_cert_id,
    is_expired,
    issue_certificate,
)

NOW = datetime(2025, 6, 15, 12, 0, 0)

ALL_CHECKS = ComplianceChecks(sdk_connected=True, hitl_rules_active=True, no_open_incidents=True, logging_active=True)
NO_CHECKS = ComplianceChecks()

RECORD = CertificateRecord(
    cert_id="CERT-ABC123-XYZ789",
    issued_at=datetime(2025, 1, 1),
    valid_until=datetime(2026, 1, 1),
    next_verification_at=datetime(2025, 4, 1),
)


def _signals(completed, total, checks=ALL_CHECKS, certificate=None):
    pct = (completed * 100) // total if total else 0
    return ComplianceSignals(
        ai_system_id="sys-1",
        requirements=RequirementsSummary(total=total, completed=completed, percentage=pct),
        checks=checks,
        certificate=certificate,
    )


# =============================================================================
# TEST: STATUS DERIVATION
# =============================================================================

class TestDeriveStatus:

    def test_below_fifty_is_not_eligible(self):
        status = derive_status(40, CertificationLevel.NONE, 40, None, True, NOW)
        assert isinstance(status, NotEligible)
        assert status.status.value == "not_eligible"

    def test_between_fifty_and_seventy_is_pending(self):
        status = derive_status(60, CertificationLevel.NONE, 60, None, False, NOW)
        assert isinstance(status, Pending)
        assert status.eligible_for_certificate is False

    def test_tier_without_complete_checklist_is_pending(self):
        status = derive_status(90, CertificationLevel.SILVER, 80, RECORD, True, NOW)
        assert isinstance(status, Pending)

    def test_eligible_but_not_generated_is_pending(self):
        status = derive_status(100, CertificationLevel.GOLD, 100, None, True, NOW)
        assert isinstance(status, Pending)
        assert status.eligible_for_certificate is True

    def test_not_eligible_for_certificate_without_sdk(self):
        status = derive_status(100, CertificationLevel.GOLD, 100, None, False, NOW)
        assert isinstance(status, Pending)
        assert status.eligible_for_certificate is False

    def test_certified_with_record(self):
        status = derive_status(100, CertificationLevel.GOLD, 100, RECORD, True, NOW)
        assert isinstance(status, Certified)
        assert status.cert_id == RECORD.cert_id
        assert status.expired is False

    def test_expired_certificate_stays_certified_but_flagged(self):
        later = datetime(2026, 2, 1)
        status = derive_status(100, CertificationLevel.GOLD, 100, RECORD, True, later)
        assert isinstance(status, Certified)
        assert status.expired is True


# =============================================================================
# TEST: CERTIFICATION VIEW
# =============================================================================

class TestCertificationView:

    def test_full_compliance_view(self):
        """{100%, sdk, hitl, no incidents, logging} → 100, gold, bonus 15."""
        view = build_certification_view(_signals(10, 10, certificate=RECORD), NOW)
        data = view.to_dict()

        assert data["agent_id"] == "sys-1"
        assert data["compliance_score"] == 100
        assert data["certification_level"] == "gold"
        assert data["certification_status"] == "certified"
        assert data["bonus_points"] == 15
        assert data["requirements"] == {"total": 10, "completed": 10, "percentage": 100, "applicable": True}
        assert data["checks"] == ALL_CHECKS.to_dict()
        assert data["certification"]["cert_id"] == RECORD.cert_id
        assert data["certification"]["valid_until"] == "2026-01-01T00:00:00"

    def test_sixty_percent_no_bonus_is_pending_without_level(self):
        view = build_certification_view(_signals(6, 10, checks=NO_CHECKS), NOW)
        assert view.compliance_score == 60
        assert view.certification_level == CertificationLevel.NONE
        assert isinstance(view.status, Pending)
        assert view.to_dict()["certification"] is None

    def test_certificate_hidden_when_checklist_regresses(self):
        """A stored certificate is not surfaced once a requirement is reopened."""
        view = build_certification_view(_signals(9, 10, NO_CHECKS, RECORD), NOW)
        assert view.certification_level == CertificationLevel.SILVER
        assert view.certificate is None
        assert view.to_dict()["certification"] is None
        assert view.to_dict()["certification_status"] == "pending"

    def test_certificate_payload_iff_tier_and_complete(self):
        for completed in range(0, 11):
            for checks in (ALL_CHECKS, NO_CHECKS):
                view = build_certification_view(_signals(completed, 10, checks, RECORD), NOW)
                expected = view.requirements.percentage == 100 and view.certification_level != CertificationLevel.NONE
                assert (view.to_dict()["certification"] is not None) == expected

    def test_empty_checklist_is_not_applicable(self):
        view = build_certification_view(_signals(0, 0), NOW)
        assert view.requirements.applicable is False
        assert view.compliance_score == 15
        assert isinstance(view.status, NotEligible)

    def test_pending_view_exposes_eligibility(self):
        view = build_certification_view(_signals(10, 10), NOW)
        assert view.to_dict()["eligible_for_certificate"] is True


# =============================================================================
# TEST: ISSUANCE
# =============================================================================

class TestIssueCertificate:

    def test_issues_with_default_offsets(self):
        view = build_certification_view(_signals(10, 10), NOW)
        issued = issue_certificate(view, NOW, cert_id="CERT-TEST-000001")

        assert issued.cert_id == "CERT-TEST-000001"
        assert issued.certification_level == CertificationLevel.GOLD
        assert issued.issued_at == NOW
        assert issued.valid_until == datetime(2026, 6, 15, 12, 0, 0)
        assert issued.next_verification_at == datetime(2025, 9, 13, 12, 0, 0)

    def test_month_end_validity(self):
        """Jan 31 + 12 months stays on Jan 31."""
        issued_at = datetime(2025, 1, 31)
        view = build_certification_view(_signals(10, 10), issued_at)
        issued = issue_certificate(view, issued_at)
        assert issued.valid_until == datetime(2026, 1, 31)

    def test_offsets_are_configurable(self):
        config = ScoringConfig(validity_months=6, verification_interval_days=30)
        view = build_certification_view(_signals(10, 10), NOW, config)
        issued = issue_certificate(view, NOW, config)
        assert issued.valid_until == datetime(2025, 12, 15, 12, 0, 0)
        assert issued.next_verification_at == datetime(2025, 7, 15, 12, 0, 0)

    def test_refused_without_sdk(self):
        checks = ComplianceChecks(sdk_connected=False, hitl_rules_active=True, no_open_incidents=True, logging_active=True)
        view = build_certification_view(_signals(10, 10, checks), NOW)
        with pytest.raises(CertificationNotEligibleError) as exc_info:
            issue_certificate(view, NOW)
        assert "SDK must be connected" in exc_info.value.reasons

    def test_refused_with_incomplete_checklist(self):
        view = build_certification_view(_signals(9, 10), NOW)
        with pytest.raises(CertificationNotEligibleError) as exc_info:
            issue_certificate(view, NOW)
        assert "9 of 10 requirements completed" in exc_info.value.reasons

    def test_refused_below_bronze(self):
        view = build_certification_view(_signals(5, 10, NO_CHECKS), NOW)
        reasons = eligibility_failures(view)
        assert any("below 70%" in reason for reason in reasons)

    def test_refused_with_empty_checklist(self):
        view = build_certification_view(_signals(0, 0), NOW)
        with pytest.raises(CertificationNotEligibleError):
            issue_certificate(view, NOW)

    def test_eligible_view_has_no_failures(self):
        view = build_certification_view(_signals(10, 10), NOW)
        assert eligibility_failures(view) == []


# =============================================================================
# TEST: CERTIFICATE ID
# =============================================================================

class TestCertificateId:

    def test_format(self):
        cert_id = generate_cert_id(NOW)
        assert re.fullmatch(r"CERT-[0-9A-Z]+-[0-9A-Z]{6}", cert_id)

    def test_timestamp_part_is_base36_millis(self):
        cert_id = generate_cert_id(datetime(1970, 1, 1, 0, 0, 1), random_suffix=lambda: "ABCDEF")
        assert cert_id == "CERT-RS-ABCDEF"

    def test_base36(self):
        assert _base36(0) == "0"
        assert _base36(35) == "Z"
        assert _base36(36) == "10"

    def test_ids_are_unique(self):
        assert len({generate_cert_id(NOW) for _ in range(50)}) == 50


# =============================================================================
# TEST: EXPIRY
# =============================================================================

class TestExpiry:

    def test_not_expired_before_valid_until(self):
        assert is_expired(datetime(2026, 1, 1), NOW) is False

    def test_expired_after_valid_until(self):
        assert is_expired(datetime(2025, 1, 1), NOW) is True

    def test_boundary_is_still_valid(self):
        assert is_expired(NOW, NOW) is False

    def test_missing_valid_until_never_expires(self):
        assert is_expired(None, NOW) is False
