"""Default prompts and reference data loaded into an empty store."""

import structlog

from speakscore.models.prompt import DifficultyTier, PromptCreate, PromptType
from speakscore.storage.memory import MemStorage

logger = structlog.get_logger()

DEFAULT_CATEGORIES: list[dict[str, str]] = [
    {
        "name": "Personal Experience",
        "description": "Talk about your life, memories and the people around you.",
    },
    {
        "name": "Opinion & Argument",
        "description": "Give and justify an opinion on a familiar or abstract topic.",
    },
    {
        "name": "Reading Aloud",
        "description": "Read a short passage clearly with natural rhythm and stress.",
    },
    {
        "name": "Picture Description",
        "description": "Describe a scene in detail and speculate about what is happening.",
    },
]

# category_id refers to the 1-based position in DEFAULT_CATEGORIES
DEFAULT_PROMPTS: list[PromptCreate] = [
    PromptCreate(
        prompt="Describe a memorable event from your childhood.",
        difficulty=DifficultyTier.BEGINNER,
        cefr_level="A2",
        category_id=1,
        tips=[
            "What happened during this event",
            "Where and when it took place",
            "Why this event was significant to you",
        ],
    ),
    PromptCreate(
        prompt=(
            "Read this aloud: My name is Sam. I live in a small town near the sea. "
            "Every morning I walk my dog on the beach before I go to work."
        ),
        type=PromptType.READ_ALOUD,
        difficulty=DifficultyTier.BEGINNER,
        cefr_level="A2",
        category_id=3,
        time_limit_seconds=45,
        tips=[
            "Read slowly and clearly",
            "Pause briefly at each full stop",
        ],
    ),
    PromptCreate(
        prompt="Describe your favorite place to visit and explain why you enjoy going there.",
        difficulty=DifficultyTier.INTERMEDIATE,
        cefr_level="B1",
        category_id=1,
        tips=[
            "What this place is and where it's located",
            "What activities you can do there",
            "Why it's special to you or what memories you have of it",
        ],
    ),
    PromptCreate(
        prompt="Talk about a skill you would like to learn and why it interests you.",
        difficulty=DifficultyTier.INTERMEDIATE,
        cefr_level="B1",
        category_id=1,
        tips=[
            "What the skill is and why you want to learn it",
            "How you plan to learn this skill",
            "How you think this skill will benefit you in the future",
        ],
    ),
    PromptCreate(
        prompt="Talk about a person who has influenced your life in a positive way.",
        difficulty=DifficultyTier.INTERMEDIATE,
        cefr_level="B1",
        category_id=1,
        tips=[
            "Who this person is and your relationship with them",
            "How they have influenced you",
            "What qualities you admire in this person",
        ],
    ),
    PromptCreate(
        prompt=(
            "Imagine a picture of a busy street market on a rainy afternoon. "
            "Describe what you can see and what the people might be doing."
        ),
        type=PromptType.PICTURE_DESCRIPTION,
        difficulty=DifficultyTier.INTERMEDIATE,
        cefr_level="B1",
        category_id=4,
        time_limit_seconds=90,
        tips=[
            "Start with the overall scene, then the details",
            "Use prepositions of place (in front of, behind, next to)",
            "Speculate: they might be..., it looks as if...",
        ],
    ),
    PromptCreate(
        prompt="If you could change one thing about your city or town, what would it be and why?",
        difficulty=DifficultyTier.ADVANCED,
        cefr_level="B2",
        category_id=2,
        tips=[
            "What aspect of your city or town needs improvement",
            "Why this change would be beneficial",
            "How this change would impact the community",
        ],
    ),
    PromptCreate(
        prompt="Some people say technology makes us less patient. Do you agree?",
        difficulty=DifficultyTier.ADVANCED,
        cefr_level="C1",
        category_id=2,
        time_limit_seconds=90,
        tips=[
            "State your position clearly",
            "Support it with an example from your own experience",
            "Acknowledge the opposite view before concluding",
        ],
    ),
    PromptCreate(
        prompt=(
            "Should governments prioritise economic growth or environmental protection "
            "when the two conflict? Argue your case."
        ),
        difficulty=DifficultyTier.EXPERT,
        cefr_level="C2",
        category_id=2,
        time_limit_seconds=120,
        tips=[
            "Define the trade-off precisely",
            "Weigh short-term and long-term consequences",
            "Use hedging and concession (admittedly, while it is true that...)",
        ],
    ),
]

DEFAULT_RESOURCES: list[dict] = [
    {
        "title": "LearnEnglish speaking skills",
        "url": "https://learnenglish.britishcouncil.org/skills/speaking",
        "description": "Graded speaking lessons with example conversations.",
        "difficulty": None,
    },
    {
        "title": "BBC Learning English",
        "url": "https://www.bbc.co.uk/learningenglish",
        "description": "Short daily lessons on pronunciation, grammar and vocabulary.",
        "difficulty": DifficultyTier.BEGINNER,
    },
    {
        "title": "CEFR global scale",
        "url": "https://www.coe.int/en/web/common-european-framework-reference-languages",
        "description": "What each CEFR level means in practice.",
        "difficulty": None,
    },
]


def seed_storage(storage: MemStorage) -> None:
    """Load default prompts, categories and resources if the store is empty."""
    if storage.get_all_prompts():
        return
    for category in DEFAULT_CATEGORIES:
        storage.create_category(**category)
    for prompt in DEFAULT_PROMPTS:
        storage.create_prompt(prompt)
    for resource in DEFAULT_RESOURCES:
        storage.create_resource(**resource)
    logger.info(
        "storage_seeded",
        prompts=len(DEFAULT_PROMPTS),
        categories=len(DEFAULT_CATEGORIES),
        resources=len(DEFAULT_RESOURCES),
    )
