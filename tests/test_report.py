"""Tests for result aggregation and the text report."""

from datetime import datetime

import pytest

from speakscore.analysis.report import render_report, summarize_evaluations
from speakscore.models.assessment import Evaluation
from speakscore.models.prompt import DifficultyTier


def _evaluation(score: int, **overrides) -> Evaluation:
    data = dict(
        overall_score=score,
        vocabulary_score=score,
        grammar_score=score,
        fluency_score=score,
        pronunciation_score=score,
        cefr_level="B1",
    )
    data.update(overrides)
    return Evaluation(**data)


class TestSummarize:
    def test_averages(self):
        result = summarize_evaluations(
            [_evaluation(70), _evaluation(81, cefr_level="C1", feedback="Well done")],
            user_id=2,
            difficulty=DifficultyTier.INTERMEDIATE,
        )
        assert result.overall_score == 76
        assert result.cefr_level == "C1"
        assert result.feedback == "Well done"
        assert result.user_id == 2
        assert result.fallback is False

    def test_skips_missing_fluency(self):
        result = summarize_evaluations([_evaluation(80), _evaluation(60, fluency_score=0)])
        assert result.fluency_score == 80
        assert result.overall_score == 70

    def test_any_fallback_flags_result(self):
        result = summarize_evaluations([_evaluation(80), _evaluation(60, fallback=True)])
        assert result.fallback is True

    def test_empty(self):
        with pytest.raises(ValueError):
            summarize_evaluations([])


class TestRenderReport:
    def test_contents(self):
        result = summarize_evaluations(
            [_evaluation(82, cefr_level="C1", strengths=["Rich vocabulary"], feedback="Great.")]
        )
        report = render_report(result, taken_at=datetime(2026, 3, 1, 9, 30))

        assert "Date: 2026-03-01 09:30" in report
        assert "Overall Score: 82/100 (Very Good)" in report
        assert "CEFR Level: C1 - Advanced" in report
        assert "  - Rich vocabulary" in report
        assert "Great." in report
        assert "automatic estimate" not in report

    def test_fallback_note(self):
        result = summarize_evaluations([_evaluation(50, fallback=True)])
        assert "automatic estimate" in render_report(result)
