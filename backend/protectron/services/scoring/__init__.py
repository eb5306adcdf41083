"""
Protectron - Compliance Scoring

Score, tier and certificate lifecycle for AI systems.
Pure functions in engine/lifecycle; database reads in signals.
"""
from .engine import (
    BRONZE_THRESHOLD,
    SILVER_THRESHOLD,
    GOLD_THRESHOLD,
    PENDING_FLOOR,
    classify_level,
    compute_bonus_points,
    compute_compliance_score,
    requirements_percentage,
)
from .lifecycle import (
    CertificationError,
    CertificationNotEligibleError,
    build_certification_view,
    derive_status,
    eligibility_failures,
    issue_certificate,
    is_expired,
)
from .signals import SignalCollector, AISystemNotFoundError

__all__ = [
    "BRONZE_THRESHOLD",
    "SILVER_THRESHOLD",
    "GOLD_THRESHOLD",
    "PENDING_FLOOR",
    "classify_level",
    "compute_bonus_points",
    "compute_compliance_score",
    "requirements_percentage",
    "CertificationError",
    "CertificationNotEligibleError",
    "build_certification_view",
    "derive_status",
    "eligibility_failures",
    "issue_certificate",
    "is_expired",
    "SignalCollector",
    "AISystemNotFoundError",
]
