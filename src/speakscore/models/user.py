"""User and progress models."""

from datetime import datetime

from pydantic import Field

from speakscore.models.base import ApiModel
from speakscore.models.prompt import DifficultyTier


class UserCreate(ApiModel):
    username: str = Field(min_length=1, max_length=64)
    display_name: str | None = None


class User(ApiModel):
    id: int
    username: str
    display_name: str
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)


class UserProgress(ApiModel):
    """Per-user rollup, mutated after every completed test."""

    user_id: int
    tests_completed: int = 0
    average_score: float = 0.0
    highest_unlocked: DifficultyTier = DifficultyTier.BEGINNER
    best_scores: dict[DifficultyTier, int] = Field(default_factory=dict)
    last_test_at: datetime | None = None
