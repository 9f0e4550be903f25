"""Recover a structured evaluation from free-form model output."""

import json
import re
from typing import Any

from speakscore.assessment.cefr import determine_cefr_level
from speakscore.assessment.fallback import DEFAULT_RECOMMENDATIONS
from speakscore.models.assessment import CEFR_LEVELS, Evaluation, clamp_score

MAX_LIST_ITEMS = 5

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")

# Evaluation field -> accepted response keys, in order of preference
_SCORE_KEYS: dict[str, tuple[str, ...]] = {
    "overall_score": ("overallScore", "overall_score", "overall"),
    "vocabulary_score": ("vocabularyScore", "vocabulary_score", "vocabulary"),
    "grammar_score": ("grammarScore", "grammar_score", "grammar"),
    "fluency_score": ("fluencyScore", "fluency_score", "fluency"),
    "pronunciation_score": ("pronunciationScore", "pronunciation_score", "pronunciation"),
}
_LIST_KEYS: dict[str, tuple[str, ...]] = {
    "strengths": ("strengths",),
    "improvements": ("improvements", "weaknesses"),
    "recommendations": ("recommendations",),
}
_LEVEL_KEYS = ("cefrLevel", "cefr_level", "level")


class EvaluationParseError(ValueError):
    """Model output did not contain a usable evaluation."""


def extract_json(text: str | None) -> dict[str, Any]:
    """Parse a JSON object, falling back to the first {...} block in the text.

    Raises:
        EvaluationParseError: If no JSON object can be recovered.
    """
    if not text:
        raise EvaluationParseError("empty response")
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        match = _JSON_OBJECT.search(text)
        if match is None:
            raise EvaluationParseError("no JSON object in response") from None
        try:
            data = json.loads(match.group(0))
        except json.JSONDecodeError as e:
            raise EvaluationParseError(f"embedded JSON is malformed: {e}") from e
    if not isinstance(data, dict):
        raise EvaluationParseError("response is not a JSON object")
    return data


def _first(data: dict[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _as_list(value: Any) -> list[str]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item][:MAX_LIST_ITEMS]


def parse_evaluation(text: str | None) -> Evaluation:
    """Build an Evaluation from model output.

    Accepts both the long (``overallScore``) and short (``overall``) key
    shapes. A missing overall score becomes the mean of the dimension
    scores; missing dimensions take the overall score.

    Raises:
        EvaluationParseError: If the output holds no JSON object or no score.
    """
    data = extract_json(text)

    scores: dict[str, int | None] = {}
    for field, keys in _SCORE_KEYS.items():
        value = _as_number(_first(data, keys))
        scores[field] = None if value is None else clamp_score(value)
    dimensions = [v for k, v in scores.items() if k != "overall_score" and v is not None]
    if scores["overall_score"] is None:
        if not dimensions:
            raise EvaluationParseError("response contains no scores")
        scores["overall_score"] = clamp_score(sum(dimensions) / len(dimensions))
    for field, value in scores.items():
        if value is None:
            scores[field] = scores["overall_score"]

    level = _first(data, _LEVEL_KEYS)
    if not isinstance(level, str) or level.strip().upper() not in CEFR_LEVELS:
        level = determine_cefr_level(scores["overall_score"])

    lists = {field: _as_list(_first(data, keys)) for field, keys in _LIST_KEYS.items()}
    if not lists["recommendations"]:
        lists["recommendations"] = list(DEFAULT_RECOMMENDATIONS)

    return Evaluation(
        **scores,
        **lists,
        cefr_level=level,
        feedback=str(data.get("feedback") or ""),
    )
