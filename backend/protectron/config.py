"""
Protectron - Runtime Configuration

Environment-driven settings for scoring and certificate issuance.
Values are read once at import; scoring code receives them through an
explicit ScoringConfig rather than reading module globals.
"""
import os
from dataclasses import dataclass


# =============================================================================
# ENVIRONMENT
# =============================================================================

# Public base URL used in badge embed code, QR codes and verification links
PUBLIC_APP_URL = os.getenv("PUBLIC_APP_URL", "https://protectron.ai").rstrip("/")

# Certificate validity and re-verification cadence
CERT_VALIDITY_MONTHS = int(os.getenv("CERT_VALIDITY_MONTHS", "12"))
CERT_VERIFICATION_INTERVAL_DAYS = int(os.getenv("CERT_VERIFICATION_INTERVAL_DAYS", "90"))

# Telemetry window for the "logging active" signal
LOGGING_WINDOW_DAYS = int(os.getenv("LOGGING_WINDOW_DAYS", "30"))

# Base score = requirements percentage * weight
SCORE_BASE_WEIGHT = float(os.getenv("SCORE_BASE_WEIGHT", "1.0"))

# Points added per active bonus signal (HITL, no incidents, logging)
SCORE_SIGNAL_BONUS = int(os.getenv("SCORE_SIGNAL_BONUS", "5"))


@dataclass(frozen=True)
class ScoringConfig:
    """
    Tunable parameters of the scoring and certificate lifecycle.

    Tier thresholds (70/85/95) are not configurable: they are fixed
    constants in the scoring engine.
    """
    base_weight: float = 1.0
    signal_bonus: int = 5
    validity_months: int = 12
    verification_interval_days: int = 90
    logging_window_days: int = 30


def load_scoring_config() -> ScoringConfig:
    """Build a ScoringConfig from the environment."""
    return ScoringConfig(
        base_weight=SCORE_BASE_WEIGHT,
        signal_bonus=SCORE_SIGNAL_BONUS,
        validity_months=CERT_VALIDITY_MONTHS,
        verification_interval_days=CERT_VERIFICATION_INTERVAL_DAYS,
        logging_window_days=LOGGING_WINDOW_DAYS,
    )
