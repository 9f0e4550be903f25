"""Difficulty-tier unlocking and progress rollup."""

from datetime import datetime

import structlog

from speakscore.models.prompt import DifficultyTier
from speakscore.models.user import UserProgress

logger = structlog.get_logger()

DEFAULT_UNLOCK_THRESHOLD = 80


def unlocked_after(
    highest_unlocked: DifficultyTier,
    tier: DifficultyTier,
    overall_score: float,
    threshold: int = DEFAULT_UNLOCK_THRESHOLD,
) -> DifficultyTier:
    """Highest unlocked tier after completing a test at ``tier``.

    Only a passing score at the currently highest unlocked tier advances;
    the result is never lower than ``highest_unlocked``.
    """
    if tier != highest_unlocked or overall_score < threshold:
        return highest_unlocked
    return tier.next_tier() or highest_unlocked


def record_completed_test(
    progress: UserProgress,
    tier: DifficultyTier,
    overall_score: int,
    threshold: int = DEFAULT_UNLOCK_THRESHOLD,
) -> UserProgress:
    """Apply one completed test to a user's progress in place.

    Args:
        progress: Progress record to update.
        tier: Difficulty tier the test was taken at.
        overall_score: Overall score 0-100.
        threshold: Minimum score that unlocks the next tier.

    Returns:
        The updated progress record.
    """
    completed = progress.tests_completed + 1
    progress.average_score = round(
        (progress.average_score * progress.tests_completed + overall_score) / completed, 1
    )
    progress.tests_completed = completed
    progress.best_scores[tier] = max(progress.best_scores.get(tier, 0), overall_score)
    progress.last_test_at = datetime.now()

    new_tier = unlocked_after(progress.highest_unlocked, tier, overall_score, threshold)
    if new_tier != progress.highest_unlocked:
        logger.info(
            "tier_unlocked",
            user_id=progress.user_id,
            old_tier=progress.highest_unlocked.value,
            new_tier=new_tier.value,
            score=overall_score,
        )
        progress.highest_unlocked = new_tier
    return progress
