"""
Tests for the Scoring Engine and Tier Classifier.

1. Bonus points: +5 per signal, capped at 15
2. Score always within [0, 100]
3. Requirement percentage is floored
4. Tier boundaries are half-open: 70 / 85 / 95
5. Base weight and bonus are configurable, thresholds are not
"""
import pytest

from protectron.config import ScoringConfig
from protectron.models.certification import CertificationLevel, ComplianceChecks
from protectron.services.scoring.engine import (
    BRONZE_THRESHOLD,
    GOLD_THRESHOLD,
    MAX_BONUS_POINTS,
    SILVER_THRESHOLD,
    classify_level,
    compute_bonus_points,
    compute_compliance_score,
    requirements_percentage,
    score_from_checks,
)


# =============================================================================
# TEST: BONUS POINTS
# =============================================================================

class TestBonusPoints:

    def test_no_signals_no_bonus(self):
        assert compute_bonus_points(False, False, False) == 0

    def test_each_signal_worth_five(self):
        assert compute_bonus_points(True, False, False) == 5
        assert compute_bonus_points(False, True, False) == 5
        assert compute_bonus_points(False, False, True) == 5

    def test_all_signals_capped_at_fifteen(self):
        assert compute_bonus_points(True, True, True) == MAX_BONUS_POINTS == 15

    def test_configured_bonus_never_exceeds_cap(self):
        """A misconfigured per-signal bonus is clamped to 5."""
        config = ScoringConfig(signal_bonus=50)
        assert compute_bonus_points(True, True, True, config) == 15


# =============================================================================
# TEST: COMPLIANCE SCORE
# =============================================================================

class TestComplianceScore:

    def test_full_compliance_scores_100(self):
        score = compute_compliance_score(
            100, sdk_connected=True, hitl_rules_active=True,
            no_open_incidents=True, logging_active=True,
        )
        assert score == 100

    def test_sixty_percent_without_bonuses(self):
        assert compute_compliance_score(60) == 60

    def test_bonuses_add_to_base(self):
        assert compute_compliance_score(70, hitl_rules_active=True, logging_active=True) == 80

    def test_zero_requirements_capped_by_bonus_total(self):
        score = compute_compliance_score(
            0, hitl_rules_active=True, no_open_incidents=True, logging_active=True,
        )
        assert score == 15

    def test_sdk_connected_adds_no_points(self):
        assert compute_compliance_score(80, sdk_connected=True) == compute_compliance_score(80)

    @pytest.mark.parametrize("pct", [0, 1, 33, 50, 69, 70, 84, 85, 94, 95, 99, 100])
    def test_score_within_bounds(self, pct):
        for hitl in (False, True):
            for incidents in (False, True):
                for logging_active in (False, True):
                    score = compute_compliance_score(
                        pct, hitl_rules_active=hitl,
                        no_open_incidents=incidents, logging_active=logging_active,
                    )
                    assert 0 <= score <= 100
                    assert isinstance(score, int)

    def test_out_of_range_percentage_is_clamped(self):
        assert compute_compliance_score(250) == 100
        assert compute_compliance_score(-40) == 0

    def test_base_weight_is_configurable(self):
        config = ScoringConfig(base_weight=0.85)
        assert compute_compliance_score(100, config=config) == 85
        assert compute_compliance_score(
            100, hitl_rules_active=True, no_open_incidents=True, logging_active=True, config=config,
        ) == 100

    def test_score_from_checks_matches_keyword_form(self):
        checks = ComplianceChecks(sdk_connected=True, hitl_rules_active=True, no_open_incidents=False, logging_active=True)
        assert score_from_checks(75, checks) == compute_compliance_score(
            75, sdk_connected=True, hitl_rules_active=True, logging_active=True,
        ) == 85


# =============================================================================
# TEST: REQUIREMENT PERCENTAGE
# =============================================================================

class TestRequirementsPercentage:

    def test_all_done_is_100(self):
        assert requirements_percentage(7, 7) == 100

    def test_floor_never_rounds_up_to_100(self):
        """199/200 must not be reported as complete."""
        assert requirements_percentage(199, 200) == 99

    def test_floor_on_thirds(self):
        assert requirements_percentage(2, 3) == 66

    def test_empty_checklist_is_zero(self):
        assert requirements_percentage(0, 0) == 0

    def test_completed_above_total_is_capped(self):
        assert requirements_percentage(12, 10) == 100


# =============================================================================
# TEST: TIER CLASSIFIER
# =============================================================================

class TestClassifyLevel:

    @pytest.mark.parametrize("score,expected", [
        (0, CertificationLevel.NONE),
        (69, CertificationLevel.NONE),
        (70, CertificationLevel.BRONZE),
        (84, CertificationLevel.BRONZE),
        (85, CertificationLevel.SILVER),
        (94, CertificationLevel.SILVER),
        (95, CertificationLevel.GOLD),
        (100, CertificationLevel.GOLD),
    ])
    def test_boundaries(self, score, expected):
        assert classify_level(score) == expected

    def test_fractional_scores_use_half_open_intervals(self):
        assert classify_level(69.99) == CertificationLevel.NONE
        assert classify_level(84.5) == CertificationLevel.BRONZE

    def test_thresholds_are_locked(self):
        assert (BRONZE_THRESHOLD, SILVER_THRESHOLD, GOLD_THRESHOLD) == (70, 85, 95)

    def test_level_serializes_lowercase(self):
        assert classify_level(96).value == "gold"
