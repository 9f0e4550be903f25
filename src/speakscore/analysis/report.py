"""Aggregate per-answer evaluations into a test result and text report."""

from datetime import datetime

from speakscore.assessment.cefr import (
    describe_cefr_level,
    describe_performance,
    determine_cefr_level,
)
from speakscore.models.assessment import Evaluation, TestResultBase, TestResultCreate
from speakscore.models.prompt import DifficultyTier


def _mean(values: list[int]) -> int:
    return round(sum(values) / len(values)) if values else 0


def summarize_evaluations(
    evaluations: list[Evaluation],
    user_id: int | None = None,
    difficulty: DifficultyTier | None = None,
    category_id: int | None = None,
    test_duration_seconds: int | None = None,
) -> TestResultCreate:
    """Combine answer evaluations into one test result.

    Scores are rounded means. Fluency and pronunciation are averaged over the
    answers that scored them (non-zero). Lists, feedback and level come from
    the latest answer.

    Raises:
        ValueError: If there are no evaluations.
    """
    if not evaluations:
        raise ValueError("No evaluations to summarize")

    latest = evaluations[-1]
    overall = _mean([e.overall_score for e in evaluations])
    return TestResultCreate(
        user_id=user_id,
        category_id=category_id,
        difficulty=difficulty,
        overall_score=overall,
        vocabulary_score=_mean([e.vocabulary_score for e in evaluations]),
        grammar_score=_mean([e.grammar_score for e in evaluations]),
        fluency_score=_mean([e.fluency_score for e in evaluations if e.fluency_score]),
        pronunciation_score=_mean(
            [e.pronunciation_score for e in evaluations if e.pronunciation_score]
        ),
        cefr_level=latest.cefr_level or determine_cefr_level(overall),
        strengths=list(latest.strengths),
        improvements=list(latest.improvements),
        recommendations=list(latest.recommendations),
        feedback=latest.feedback,
        test_duration_seconds=test_duration_seconds,
        fallback=any(e.fallback for e in evaluations),
    )


def _bullets(items: list[str]) -> list[str]:
    return [f"  - {item}" for item in items] or ["  (none)"]


def render_report(result: TestResultBase, taken_at: datetime | None = None) -> str:
    """Plain-text report for download or terminal display."""
    level = result.cefr_level or determine_cefr_level(result.overall_score)
    taken_at = taken_at or datetime.now()

    lines = [
        "ENGLISH SPEAKING ASSESSMENT REPORT",
        "=" * 34,
        f"Date: {taken_at:%Y-%m-%d %H:%M}",
        "",
        f"Overall Score: {result.overall_score}/100 ({describe_performance(result.overall_score)})",
        f"CEFR Level: {level} - {describe_cefr_level(level)}",
        "",
        "Skill Breakdown:",
        f"  Vocabulary:    {result.vocabulary_score}/100",
        f"  Grammar:       {result.grammar_score}/100",
        f"  Fluency:       {result.fluency_score}/100",
        f"  Pronunciation: {result.pronunciation_score}/100",
        "",
        "Strengths:",
        *_bullets(result.strengths),
        "",
        "Areas for Improvement:",
        *_bullets(result.improvements),
        "",
        "Recommendations:",
        *_bullets(result.recommendations),
    ]
    if result.feedback:
        lines += ["", "Feedback:", result.feedback]
    if result.fallback:
        lines += [
            "",
            "Note: some answers were scored with an automatic estimate because "
            "the evaluation service was unavailable.",
        ]
    return "\n".join(lines) + "\n"
