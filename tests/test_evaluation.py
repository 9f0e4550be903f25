"""Tests for evaluation parsing, fallbacks and the LLM evaluator."""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest

from speakscore.analysis.transcript import text_statistics
from speakscore.assessment.fallback import (
    DEFAULT_RECOMMENDATIONS,
    constant_evaluation,
    fallback_evaluation,
    heuristic_evaluation,
)
from speakscore.assessment.llm_evaluator import LLMEvaluator, build_evaluation_prompt
from speakscore.assessment.parsing import EvaluationParseError, extract_json, parse_evaluation
from speakscore.models.prompt import DifficultyTier, PromptType, TestPrompt

FULL_RESPONSE = {
    "vocabularyScore": 78,
    "grammarScore": 74,
    "fluencyScore": 80,
    "pronunciationScore": 76,
    "overallScore": 77,
    "strengths": ["Clear structure"],
    "improvements": ["Use more linking words"],
    "recommendations": ["Record yourself daily"],
    "level": "B2",
    "feedback": "A solid answer.",
}


@pytest.fixture
def prompt():
    return TestPrompt(
        id=1,
        prompt="Describe your hometown.",
        difficulty=DifficultyTier.BEGINNER,
    )


def _completion(content: str):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class TestTextStatistics:
    def test_counts(self):
        stats = text_statistics("I like tea. It is warm!")
        assert stats["word_count"] == 6
        assert stats["sentence_count"] == 2
        assert stats["avg_word_length"] == pytest.approx(3.0)

    def test_empty_text_keeps_ratio_finite(self):
        stats = text_statistics("")
        assert stats["word_count"] == 1
        assert stats["sentence_count"] == 0


class TestFallbacks:
    def test_heuristic(self):
        evaluation = heuristic_evaluation("I like tea. It is warm!")
        assert evaluation.fluency_score == 72
        assert evaluation.vocabulary_score == 80
        assert evaluation.grammar_score == 75
        assert evaluation.pronunciation_score == 75
        assert evaluation.overall_score == 76
        assert evaluation.cefr_level == "B2"
        assert evaluation.fallback is True

    def test_heuristic_scores_bounded(self):
        evaluation = heuristic_evaluation("Supercalifragilisticexpialidocious.")
        assert evaluation.vocabulary_score == 100

    def test_constant(self):
        evaluation = constant_evaluation()
        assert evaluation.overall_score == 50
        assert evaluation.fallback is True
        assert "Technical issues" in evaluation.improvements[0]

    def test_fallback_chooses_by_transcript(self):
        assert fallback_evaluation("   ").overall_score == 50
        assert fallback_evaluation(None).overall_score == 50
        assert fallback_evaluation("Hello there.").grammar_score == 75


class TestParsing:
    def test_full_response(self):
        evaluation = parse_evaluation(json.dumps(FULL_RESPONSE))
        assert evaluation.overall_score == 77
        assert evaluation.cefr_level == "B2"
        assert evaluation.strengths == ["Clear structure"]
        assert evaluation.fallback is False

    def test_json_embedded_in_prose(self):
        text = "Here is my assessment:\n" + json.dumps(FULL_RESPONSE) + "\nHope this helps."
        assert parse_evaluation(text).overall_score == 77

    def test_short_key_shape(self):
        evaluation = parse_evaluation(
            json.dumps(
                {
                    "fluency": 60,
                    "pronunciation": 70,
                    "grammar": 80,
                    "vocabulary": 90,
                    "overall": 75,
                    "strengths": ["a"],
                    "weaknesses": ["b"],
                    "feedback": "ok",
                }
            )
        )
        assert evaluation.vocabulary_score == 90
        assert evaluation.improvements == ["b"]
        assert evaluation.recommendations == DEFAULT_RECOMMENDATIONS

    def test_missing_overall_uses_mean(self):
        evaluation = parse_evaluation(json.dumps({"vocabularyScore": 80, "grammarScore": 60}))
        assert evaluation.overall_score == 70
        assert evaluation.fluency_score == 70

    def test_scores_clamped(self):
        evaluation = parse_evaluation(json.dumps({"overallScore": 140, "grammarScore": -3}))
        assert evaluation.overall_score == 100
        assert evaluation.grammar_score == 0

    def test_out_of_range_dimension_clamped_before_mean(self):
        evaluation = parse_evaluation(
            json.dumps({"vocabulary": 400, "grammar": 0, "fluency": 0, "pronunciation": 0})
        )
        assert evaluation.vocabulary_score == 100
        assert evaluation.overall_score == 25
        assert evaluation.cefr_level == "A1"

    def test_invalid_level_derived_from_overall(self):
        evaluation = parse_evaluation(json.dumps({"overallScore": 65, "level": "Intermediate"}))
        assert evaluation.cefr_level == "B1"

    def test_lists_capped(self):
        evaluation = parse_evaluation(
            json.dumps({"overallScore": 50, "strengths": [str(i) for i in range(9)]})
        )
        assert len(evaluation.strengths) == 5

    @pytest.mark.parametrize("text", ["", "no json here", "[1, 2]", "{not json}"])
    def test_unparsable(self, text):
        with pytest.raises(EvaluationParseError):
            extract_json(text)

    def test_no_scores(self):
        with pytest.raises(EvaluationParseError):
            parse_evaluation(json.dumps({"feedback": "nice"}))


class TestLLMEvaluator:
    def test_prompt_template_by_type(self, prompt):
        speaking = build_evaluation_prompt("hello", prompt)
        assert "Original Test Prompt" in speaking
        assert "Difficulty Level: beginner" in speaking

        picture = prompt.model_copy(update={"type": PromptType.PICTURE_DESCRIPTION})
        assert "Image Description Task" in build_evaluation_prompt("hello", picture)

    async def test_evaluate_success(self, prompt):
        evaluator = LLMEvaluator(api_key="test-key")
        with patch.object(
            evaluator.client.chat.completions,
            "create",
            new=AsyncMock(return_value=_completion(json.dumps(FULL_RESPONSE))),
        ) as create:
            evaluation = await evaluator.evaluate("My hometown is small.", prompt)

        assert evaluation.overall_score == 77
        assert evaluation.fallback is False
        kwargs = create.call_args.kwargs
        assert kwargs["model"] == "mistral-large-latest"
        assert kwargs["temperature"] == 0.3
        assert kwargs["max_tokens"] == 2048
        assert kwargs["response_format"] == {"type": "json_object"}

    async def test_api_error_falls_back(self, prompt):
        evaluator = LLMEvaluator(api_key="test-key")
        with patch.object(
            evaluator.client.chat.completions,
            "create",
            new=AsyncMock(side_effect=RuntimeError("rate limited")),
        ):
            evaluation = await evaluator.evaluate("My hometown is small.", prompt)
        assert evaluation.fallback is True
        assert evaluation.grammar_score == 75

    async def test_unparsable_response_falls_back(self, prompt):
        evaluator = LLMEvaluator(api_key="test-key")
        with patch.object(
            evaluator.client.chat.completions,
            "create",
            new=AsyncMock(return_value=_completion("I cannot help with that.")),
        ):
            evaluation = await evaluator.evaluate("My hometown is small.", prompt)
        assert evaluation.fallback is True

    async def test_empty_transcript_skips_call(self, prompt):
        evaluator = LLMEvaluator(api_key="test-key")
        with patch.object(evaluator.client.chat.completions, "create", new=AsyncMock()) as create:
            evaluation = await evaluator.evaluate("  ", prompt)
        create.assert_not_called()
        assert evaluation.overall_score == 50
