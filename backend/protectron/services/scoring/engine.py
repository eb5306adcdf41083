"""
Scoring Engine

Turns requirement completion and telemetry checks into a 0-100
compliance score, and the score into a certification tier.

All functions are pure. Tier thresholds are hard-locked constants:
they are printed verbatim in the product ("70% Bronze", "85% Silver",
"95% Gold") and must not drift with configuration.
"""

from typing import Optional

from ...config import ScoringConfig
from ...models.certification import CertificationLevel, ComplianceChecks


# =============================================================================
# CONSTANTS (HARD-LOCKED)
# =============================================================================

BRONZE_THRESHOLD = 70
SILVER_THRESHOLD = 85
GOLD_THRESHOLD = 95

# Status messaging floor: below this a system is "not eligible" rather than "pending"
PENDING_FLOOR = 50

# Three independent +5 signals
MAX_BONUS_POINTS = 15
MAX_SCORE = 100
MIN_SCORE = 0

DEFAULT_CONFIG = ScoringConfig()


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


# =============================================================================
# REQUIREMENTS
# =============================================================================

def requirements_percentage(completed: int, total: int) -> int:
    """
    Integer completion percentage, floored.

    Flooring means 100 is only reported when every applicable requirement
    is done (199/200 is 99, not 100). total == 0 yields 0; callers treat
    that as "not applicable" through RequirementsSummary.applicable.
    """
    if total <= 0:
        return 0
    completed = max(0, min(completed, total))
    return (completed * 100) // total


# =============================================================================
# SCORE
# =============================================================================

def compute_bonus_points(
    hitl_rules_active: bool,
    no_open_incidents: bool,
    logging_active: bool,
    config: Optional[ScoringConfig] = None,
) -> int:
    """+bonus for each active signal. Never exceeds 3 * 5 = 15."""
    config = config or DEFAULT_CONFIG
    per_signal = int(_clamp(config.signal_bonus, 0, 5))
    active = sum(1 for flag in (hitl_rules_active, no_open_incidents, logging_active) if flag)
    return min(active * per_signal, MAX_BONUS_POINTS)


def compute_compliance_score(
    requirements_percentage: float,
    sdk_connected: bool = False,
    hitl_rules_active: bool = False,
    no_open_incidents: bool = False,
    logging_active: bool = False,
    config: Optional[ScoringConfig] = None,
) -> int:
    """
    Compute the 0-100 compliance score.

    base = requirements_percentage * base_weight, plus up to three bonuses,
    rounded and clamped to [0, 100]. Bonuses augment the base signal;
    with 0% requirements the score can reach at most the bonus total.

    sdk_connected contributes no points. It gates certificate issuance
    (see lifecycle.issue_certificate), not the score.
    """
    config = config or DEFAULT_CONFIG
    pct = _clamp(requirements_percentage, 0, 100)
    base = pct * config.base_weight
    bonus = compute_bonus_points(hitl_rules_active, no_open_incidents, logging_active, config)
    return int(_clamp(round(base + bonus), MIN_SCORE, MAX_SCORE))


def score_from_checks(
    requirements_percentage: float,
    checks: ComplianceChecks,
    config: Optional[ScoringConfig] = None,
) -> int:
    """compute_compliance_score over a ComplianceChecks bundle."""
    return compute_compliance_score(
        requirements_percentage,
        sdk_connected=checks.sdk_connected,
        hitl_rules_active=checks.hitl_rules_active,
        no_open_incidents=checks.no_open_incidents,
        logging_active=checks.logging_active,
        config=config,
    )


# =============================================================================
# TIER CLASSIFIER
# =============================================================================

def classify_level(score: float) -> CertificationLevel:
    """
    Map a score to a certification tier.

    Half-open intervals: [70, 85) bronze, [85, 95) silver, [95, 100] gold.
    """
    if score >= GOLD_THRESHOLD:
        return CertificationLevel.GOLD
    if score >= SILVER_THRESHOLD:
        return CertificationLevel.SILVER
    if score >= BRONZE_THRESHOLD:
        return CertificationLevel.BRONZE
    return CertificationLevel.NONE
