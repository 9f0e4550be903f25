"""Evaluation, test result and submission models."""

from datetime import datetime
from typing import Any

from pydantic import Field, field_validator

from speakscore.models.base import ApiModel
from speakscore.models.prompt import DifficultyTier

CEFR_LEVELS: tuple[str, ...] = ("A1", "A2", "B1", "B2", "C1", "C2")

SCORE_FIELDS: tuple[str, ...] = (
    "overall_score",
    "vocabulary_score",
    "grammar_score",
    "fluency_score",
    "pronunciation_score",
)


def clamp_score(value: float) -> int:
    """Round a raw score and clamp it into 0-100."""
    return int(round(max(0.0, min(100.0, float(value)))))


def _normalize_cefr(value: str | None) -> str | None:
    if value is None:
        return None
    level = str(value).strip().upper()
    if level not in CEFR_LEVELS:
        raise ValueError(f"CEFR level must be one of {', '.join(CEFR_LEVELS)}")
    return level


class Evaluation(ApiModel):
    """Scores and feedback for a single spoken answer.

    Scores from model output are clamped rather than rejected.
    """

    overall_score: int = 0
    vocabulary_score: int = 0
    grammar_score: int = 0
    fluency_score: int = 0
    pronunciation_score: int = 0
    cefr_level: str = "B1"
    strengths: list[str] = Field(default_factory=list)
    improvements: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    feedback: str = ""
    fallback: bool = False

    @field_validator(*SCORE_FIELDS, mode="before")
    @classmethod
    def _clamp(cls, value: Any) -> int:
        try:
            return clamp_score(value)
        except (TypeError, ValueError) as e:
            raise ValueError(f"score must be a number, got {value!r}") from e

    @field_validator("cefr_level", mode="before")
    @classmethod
    def _cefr(cls, value: Any) -> str:
        return _normalize_cefr(value) or "B1"


class TestResultBase(ApiModel):
    __test__ = False

    user_id: int | None = None
    category_id: int | None = None
    difficulty: DifficultyTier | None = None
    overall_score: int = Field(ge=0, le=100)
    vocabulary_score: int = Field(ge=0, le=100)
    grammar_score: int = Field(ge=0, le=100)
    fluency_score: int = Field(ge=0, le=100)
    pronunciation_score: int = Field(ge=0, le=100)
    cefr_level: str | None = None
    strengths: list[str] = Field(default_factory=list)
    improvements: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    feedback: str = ""
    test_duration_seconds: int | None = Field(default=None, ge=0)
    fallback: bool = False

    @field_validator("cefr_level", mode="before")
    @classmethod
    def _cefr(cls, value: Any) -> str | None:
        return _normalize_cefr(value)


class SubmissionCreate(ApiModel):
    prompt_id: int
    transcript: str | None = None
    audio_url: str | None = None
    evaluation: dict[str, Any] | None = None


class TestResultCreate(TestResultBase):
    """Payload of POST /api/submit-test-results."""

    submissions: list[SubmissionCreate] = Field(default_factory=list)


class TestResult(TestResultBase):
    """A stored, completed test."""

    id: int
    cefr_level: str
    created_at: datetime = Field(default_factory=datetime.now)


class TestSubmission(ApiModel):
    """One recorded answer to one prompt, child of a TestResult."""

    __test__ = False

    id: int
    test_result_id: int
    prompt_id: int
    audio_url: str | None = None
    transcript: str | None = None
    evaluation: dict[str, Any] | None = None
