"""Protectron - Data Models"""
from .context import OrgContext
from .certification import (
    # Enums
    CertificationLevel, CertificationStatusTag,
    # Signals
    ComplianceChecks, RequirementsSummary, CertificateRecord, ComplianceSignals,
    # Status union
    NotEligible, Pending, Certified, CertificationStatus,
    # Views
    ComplianceCertification, IssuedCertificate,
)

__all__ = [
    "OrgContext",
    "CertificationLevel", "CertificationStatusTag",
    "ComplianceChecks", "RequirementsSummary", "CertificateRecord", "ComplianceSignals",
    "NotEligible", "Pending", "Certified", "CertificationStatus",
    "ComplianceCertification", "IssuedCertificate",
]
