"""Tests for CEFR mapping and tier progression."""

import pytest

from speakscore.assessment.cefr import (
    cefr_from_scores,
    describe_cefr_level,
    describe_performance,
    determine_cefr_level,
)
from speakscore.assessment.progression import record_completed_test, unlocked_after
from speakscore.models.prompt import DifficultyTier
from speakscore.models.user import UserProgress


class TestCefrMapping:
    @pytest.mark.parametrize(
        "score,level",
        [(95, "C2"), (90, "C2"), (89, "C1"), (80, "C1"), (70, "B2"), (60, "B1"), (50, "A2"), (49, "A1"), (0, "A1")],
    )
    def test_thresholds(self, score, level):
        assert determine_cefr_level(score) == level

    def test_from_dimension_scores(self):
        assert cefr_from_scores(80, 70, 60, 70) == "B2"

    def test_descriptions(self):
        assert describe_cefr_level("B1").startswith("Intermediate")
        assert describe_cefr_level("Z9") == "Not determined"
        assert describe_performance(92) == "Excellent"
        assert describe_performance(10) == "Needs Improvement"


class TestUnlock:
    def test_passing_at_highest_advances(self):
        assert unlocked_after(DifficultyTier.BEGINNER, DifficultyTier.BEGINNER, 80) == (
            DifficultyTier.INTERMEDIATE
        )

    def test_failing_score_stays(self):
        assert unlocked_after(DifficultyTier.BEGINNER, DifficultyTier.BEGINNER, 79) == (
            DifficultyTier.BEGINNER
        )

    def test_lower_tier_does_not_advance(self):
        assert unlocked_after(DifficultyTier.ADVANCED, DifficultyTier.BEGINNER, 100) == (
            DifficultyTier.ADVANCED
        )

    def test_expert_is_terminal(self):
        assert unlocked_after(DifficultyTier.EXPERT, DifficultyTier.EXPERT, 100) == (
            DifficultyTier.EXPERT
        )

    def test_custom_threshold(self):
        assert unlocked_after(DifficultyTier.BEGINNER, DifficultyTier.BEGINNER, 65, threshold=60) == (
            DifficultyTier.INTERMEDIATE
        )


class TestRecordCompletedTest:
    def test_rollup(self):
        progress = UserProgress(user_id=1)
        record_completed_test(progress, DifficultyTier.BEGINNER, 85)
        record_completed_test(progress, DifficultyTier.BEGINNER, 60)

        assert progress.tests_completed == 2
        assert progress.average_score == 72.5
        assert progress.best_scores[DifficultyTier.BEGINNER] == 85
        assert progress.highest_unlocked == DifficultyTier.INTERMEDIATE
        assert progress.last_test_at is not None

    def test_unlock_is_monotonic(self):
        progress = UserProgress(user_id=1, highest_unlocked=DifficultyTier.ADVANCED)
        record_completed_test(progress, DifficultyTier.BEGINNER, 20)
        assert progress.highest_unlocked == DifficultyTier.ADVANCED
