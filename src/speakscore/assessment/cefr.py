"""CEFR level mapping and score descriptions."""

# (minimum overall score, level), highest first
CEFR_THRESHOLDS: list[tuple[int, str]] = [
    (90, "C2"),
    (80, "C1"),
    (70, "B2"),
    (60, "B1"),
    (50, "A2"),
]

CEFR_DESCRIPTIONS: dict[str, str] = {
    "C2": "Proficient - Can use language with precision in complex situations",
    "C1": "Advanced - Can use language flexibly in demanding contexts",
    "B2": "Upper Intermediate - Can interact with fluency and spontaneity",
    "B1": "Intermediate - Can communicate on familiar matters",
    "A2": "Elementary - Can communicate in simple, routine situations",
    "A1": "Beginner - Can interact in a simple way with basic expressions",
}

PERFORMANCE_BANDS: list[tuple[int, str]] = [
    (90, "Excellent"),
    (80, "Very Good"),
    (70, "Good"),
    (60, "Satisfactory"),
    (50, "Fair"),
]


def determine_cefr_level(score: float) -> str:
    """Map a 0-100 score to a CEFR level.

    Args:
        score: Overall score 0-100.

    Returns:
        One of A1, A2, B1, B2, C1, C2.
    """
    for minimum, level in CEFR_THRESHOLDS:
        if score >= minimum:
            return level
    return "A1"


def cefr_from_scores(
    vocabulary: float,
    grammar: float,
    fluency: float,
    pronunciation: float,
) -> str:
    """CEFR level of the mean of the four dimension scores."""
    return determine_cefr_level((vocabulary + grammar + fluency + pronunciation) / 4)


def describe_cefr_level(level: str) -> str:
    return CEFR_DESCRIPTIONS.get(level, "Not determined")


def describe_performance(score: float) -> str:
    for minimum, label in PERFORMANCE_BANDS:
        if score >= minimum:
            return label
    return "Needs Improvement"
