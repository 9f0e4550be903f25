"""Smoke tests for Pydantic models."""

import pytest
from pydantic import ValidationError

from speakscore.models.assessment import (
    Evaluation,
    TestResult,
    TestResultCreate,
    TestSubmission,
    clamp_score,
)
from speakscore.models.prompt import DifficultyTier, PromptCreate, TestCategory, TestPrompt
from speakscore.models.session import TestSession


def _scores(**overrides):
    data = {
        "overallScore": 70,
        "vocabularyScore": 70,
        "grammarScore": 70,
        "fluencyScore": 70,
        "pronunciationScore": 70,
    }
    data.update(overrides)
    return data


class TestDifficultyTier:
    def test_order(self):
        assert [t.rank for t in DifficultyTier] == [0, 1, 2, 3]

    def test_next_tier(self):
        assert DifficultyTier.BEGINNER.next_tier() == DifficultyTier.INTERMEDIATE
        assert DifficultyTier.ADVANCED.next_tier() == DifficultyTier.EXPERT

    def test_expert_is_terminal(self):
        assert DifficultyTier.EXPERT.next_tier() is None


class TestEvaluation:
    def test_clamps_scores(self):
        evaluation = Evaluation(overall_score=130, vocabulary_score=-5, grammar_score=72.6)
        assert evaluation.overall_score == 100
        assert evaluation.vocabulary_score == 0
        assert evaluation.grammar_score == 73

    def test_rejects_non_numeric_score(self):
        with pytest.raises(ValidationError):
            Evaluation(overall_score="great")

    def test_cefr_normalized(self):
        assert Evaluation(cefr_level="b2").cefr_level == "B2"

    def test_camel_case_serialization(self):
        data = Evaluation(overall_score=80, cefr_level="C1").model_dump(by_alias=True)
        assert data["overallScore"] == 80
        assert data["cefrLevel"] == "C1"
        assert data["fallback"] is False

    def test_clamp_score_rounds(self):
        assert clamp_score(79.5) == 80
        assert clamp_score(101) == 100


class TestTestResultCreate:
    def test_accepts_camel_case(self):
        result = TestResultCreate.model_validate(
            _scores(userId=1, difficulty="beginner", submissions=[{"promptId": 2}])
        )
        assert result.user_id == 1
        assert result.difficulty == DifficultyTier.BEGINNER
        assert result.submissions[0].prompt_id == 2

    def test_rejects_out_of_range_score(self):
        with pytest.raises(ValidationError):
            TestResultCreate.model_validate(_scores(overallScore=101))

    def test_rejects_invalid_cefr(self):
        with pytest.raises(ValidationError):
            TestResultCreate.model_validate(_scores(cefrLevel="D1"))


class TestPromptCreate:
    def test_defaults(self):
        prompt = PromptCreate(prompt="Describe your town.")
        assert prompt.tips == []
        assert prompt.time_limit_seconds == 60

    def test_time_limit_must_be_positive(self):
        with pytest.raises(ValidationError):
            PromptCreate(prompt="x", time_limit_seconds=0)


class TestTestSession:
    def test_advance_and_complete(self):
        session = TestSession()
        assert session.advance(2) is True
        assert session.current_question == 1
        assert session.advance(2) is False
        assert session.completed is True

    def test_reset(self):
        session = TestSession()
        session.add_result(Evaluation(overall_score=60))
        session.advance(1)
        session.reset()
        assert session.current_question == 0
        assert session.evaluations == []
        assert session.completed is False


class TestCollection:
    @pytest.mark.parametrize(
        "model", [TestPrompt, TestCategory, TestResultCreate, TestResult, TestSubmission, TestSession]
    )
    def test_models_not_collected_as_tests(self, model):
        assert model.__test__ is False
        assert "__test__" not in model.model_fields
