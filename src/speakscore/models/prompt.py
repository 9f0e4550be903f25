"""Test prompt and reference data models."""

from enum import StrEnum

from pydantic import Field

from speakscore.models.base import ApiModel


class DifficultyTier(StrEnum):
    """Ordered difficulty tiers, lowest first."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"

    @property
    def rank(self) -> int:
        return list(DifficultyTier).index(self)

    def next_tier(self) -> "DifficultyTier | None":
        """Tier unlocked after this one, or None at the top."""
        tiers = list(DifficultyTier)
        if self.rank + 1 < len(tiers):
            return tiers[self.rank + 1]
        return None


class PromptType(StrEnum):
    """Kinds of speaking tasks."""

    SPEAKING = "speaking"
    READ_ALOUD = "read_aloud"
    PICTURE_DESCRIPTION = "picture_description"


class PromptCreate(ApiModel):
    prompt: str
    type: PromptType = PromptType.SPEAKING
    difficulty: DifficultyTier = DifficultyTier.INTERMEDIATE
    cefr_level: str = "B1"
    tips: list[str] = Field(default_factory=list)
    resource_url: str | None = None
    time_limit_seconds: int = Field(default=60, gt=0)
    category_id: int | None = None


class TestPrompt(PromptCreate):
    """A seeded prompt the user answers by speaking."""

    __test__ = False

    id: int


class TestCategory(ApiModel):
    __test__ = False

    id: int
    name: str
    description: str = ""


class LearningResource(ApiModel):
    id: int
    title: str
    url: str
    description: str = ""
    difficulty: DifficultyTier | None = None
    category_id: int | None = None
