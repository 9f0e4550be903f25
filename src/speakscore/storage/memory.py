"""In-process storage keyed by auto-incrementing integer ids."""

import itertools
from datetime import datetime

import structlog

from speakscore.assessment.cefr import determine_cefr_level
from speakscore.models.assessment import (
    SubmissionCreate,
    TestResult,
    TestResultCreate,
    TestSubmission,
)
from speakscore.models.prompt import (
    DifficultyTier,
    LearningResource,
    PromptCreate,
    TestCategory,
    TestPrompt,
)
from speakscore.models.user import User, UserCreate, UserProgress

logger = structlog.get_logger()


class MemStorage:
    """Dict-backed store for users, prompts, results, submissions and progress.

    Not synchronized: each server process owns its own store.
    """

    def __init__(self) -> None:
        self._users: dict[int, User] = {}
        self._prompts: dict[int, TestPrompt] = {}
        self._categories: dict[int, TestCategory] = {}
        self._resources: dict[int, LearningResource] = {}
        self._results: dict[int, TestResult] = {}
        self._submissions: dict[int, TestSubmission] = {}
        self._progress: dict[int, UserProgress] = {}

        self._user_ids = itertools.count(1)
        self._prompt_ids = itertools.count(1)
        self._category_ids = itertools.count(1)
        self._resource_ids = itertools.count(1)
        self._result_ids = itertools.count(1)
        self._submission_ids = itertools.count(1)

    # Users

    def get_user(self, user_id: int) -> User | None:
        return self._users.get(user_id)

    def get_user_by_username(self, username: str) -> User | None:
        return next((u for u in self._users.values() if u.username == username), None)

    def create_user(self, data: UserCreate) -> User:
        user = User(
            id=next(self._user_ids),
            username=data.username,
            display_name=data.display_name or data.username,
        )
        self._users[user.id] = user
        logger.info("user_created", user_id=user.id)
        return user

    # Prompts

    def get_prompt(self, prompt_id: int) -> TestPrompt | None:
        return self._prompts.get(prompt_id)

    def get_all_prompts(self) -> list[TestPrompt]:
        return list(self._prompts.values())

    def get_prompts_by_difficulty(self, difficulty: DifficultyTier) -> list[TestPrompt]:
        return [p for p in self._prompts.values() if p.difficulty == difficulty]

    def create_prompt(self, data: PromptCreate) -> TestPrompt:
        prompt = TestPrompt(id=next(self._prompt_ids), **data.model_dump())
        self._prompts[prompt.id] = prompt
        return prompt

    # Reference data

    def get_categories(self) -> list[TestCategory]:
        return list(self._categories.values())

    def create_category(self, name: str, description: str = "") -> TestCategory:
        category = TestCategory(id=next(self._category_ids), name=name, description=description)
        self._categories[category.id] = category
        return category

    def get_resources(self, difficulty: DifficultyTier | None = None) -> list[LearningResource]:
        resources = list(self._resources.values())
        if difficulty is not None:
            resources = [r for r in resources if r.difficulty in (None, difficulty)]
        return resources

    def create_resource(self, **fields) -> LearningResource:
        resource = LearningResource(id=next(self._resource_ids), **fields)
        self._resources[resource.id] = resource
        return resource

    # Results and submissions

    def get_test_result(self, result_id: int) -> TestResult | None:
        return self._results.get(result_id)

    def get_test_results_by_user_id(self, user_id: int) -> list[TestResult]:
        return [r for r in self._results.values() if r.user_id == user_id]

    def create_test_result(self, data: TestResultCreate) -> TestResult:
        fields = data.model_dump(exclude={"submissions"})
        if fields["cefr_level"] is None:
            fields["cefr_level"] = determine_cefr_level(data.overall_score)
        result = TestResult(id=next(self._result_ids), **fields)
        self._results[result.id] = result
        logger.info(
            "test_result_created",
            result_id=result.id,
            user_id=result.user_id,
            overall_score=result.overall_score,
        )
        return result

    def get_test_submission(self, submission_id: int) -> TestSubmission | None:
        return self._submissions.get(submission_id)

    def get_test_submissions_by_result_id(self, result_id: int) -> list[TestSubmission]:
        return [s for s in self._submissions.values() if s.test_result_id == result_id]

    def create_test_submission(self, result_id: int, data: SubmissionCreate) -> TestSubmission:
        """Store one answer of a result.

        Raises:
            KeyError: If the result or the prompt does not exist.
        """
        if result_id not in self._results:
            raise KeyError(f"test result {result_id} not found")
        if data.prompt_id not in self._prompts:
            raise KeyError(f"prompt {data.prompt_id} not found")
        submission = TestSubmission(
            id=next(self._submission_ids),
            test_result_id=result_id,
            **data.model_dump(),
        )
        self._submissions[submission.id] = submission
        return submission

    # Progress

    def get_user_progress(self, user_id: int) -> UserProgress | None:
        return self._progress.get(user_id)

    def save_user_progress(self, progress: UserProgress) -> UserProgress:
        self._progress[progress.user_id] = progress
        return progress

    def touch_user(self, user_id: int) -> None:
        user = self._users.get(user_id)
        if user is not None:
            user.updated_at = datetime.now()
