"""Substitute evaluations used when the hosted evaluation is unavailable."""

from speakscore.analysis.transcript import text_statistics
from speakscore.assessment.cefr import determine_cefr_level
from speakscore.models.assessment import Evaluation

DEFAULT_RECOMMENDATIONS: list[str] = [
    "Practice speaking regularly",
    "Listen to native speakers",
    "Join language exchange programs",
]


def heuristic_evaluation(transcript: str) -> Evaluation:
    """Score a transcript from word and sentence counts alone.

    Args:
        transcript: Transcribed speech.

    Returns:
        Evaluation flagged as a fallback.
    """
    stats = text_statistics(transcript)
    fluency = min(100.0, max(60.0, 70 + stats["sentence_count"]))
    vocabulary = min(100.0, max(60.0, 65 + stats["avg_word_length"] * 5))
    grammar = 75.0
    pronunciation = 75.0
    overall = round((fluency + vocabulary + grammar + pronunciation) / 4)

    return Evaluation(
        overall_score=overall,
        vocabulary_score=vocabulary,
        grammar_score=grammar,
        fluency_score=fluency,
        pronunciation_score=pronunciation,
        cefr_level=determine_cefr_level(overall),
        strengths=[
            "Attempted to address the prompt",
            "Used some appropriate vocabulary",
            "Communicated basic ideas",
        ],
        improvements=[
            "Consider expanding vocabulary usage",
            "Practice more complex grammatical structures",
            "Work on sentence fluency and transitions",
        ],
        recommendations=list(DEFAULT_RECOMMENDATIONS),
        feedback=(
            f"Response shows approximately {determine_cefr_level(overall)} level English "
            "proficiency. Continue practicing with more complex prompts to improve "
            "fluency and vocabulary range."
        ),
        fallback=True,
    )


def constant_evaluation() -> Evaluation:
    """Fixed mid-range evaluation for when nothing usable was transcribed."""
    return Evaluation(
        overall_score=50,
        vocabulary_score=50,
        grammar_score=50,
        fluency_score=50,
        pronunciation_score=50,
        cefr_level="B1",
        strengths=["Attempted to answer the prompt"],
        improvements=["Technical issues prevented full assessment"],
        recommendations=["Try again with a clearer recording"],
        feedback="There was an error analyzing your response. Please try again.",
        fallback=True,
    )


def fallback_evaluation(transcript: str | None) -> Evaluation:
    """Heuristic evaluation when there is text to measure, constant otherwise."""
    if transcript and transcript.strip():
        return heuristic_evaluation(transcript)
    return constant_evaluation()
