"""REST API routes for prompts, audio submission, evaluation and results."""

import functools
import uuid
from pathlib import Path

import structlog
from fastapi import APIRouter, File, Form, HTTPException, UploadFile

from speakscore.assessment.progression import record_completed_test
from speakscore.assessment.service import EvaluationService, build_evaluation_service
from speakscore.config import get_settings
from speakscore.models.assessment import Evaluation, TestResult, TestResultCreate, TestSubmission
from speakscore.models.base import ApiModel
from speakscore.models.prompt import DifficultyTier, LearningResource, TestCategory, TestPrompt
from speakscore.models.user import User, UserCreate, UserProgress
from speakscore.storage.memory import MemStorage
from speakscore.storage.seed import seed_storage
from speakscore.transcription.base import TranscriptionError

logger = structlog.get_logger()
router = APIRouter(prefix="/api")

UPLOAD_CHUNK_BYTES = 1024 * 1024
_TRUTHY = {"true", "1", "yes", "on"}


@functools.lru_cache
def get_storage() -> MemStorage:
    """Process-wide store, seeded on first use."""
    storage = MemStorage()
    seed_storage(storage)
    return storage


@functools.lru_cache
def get_evaluation_service() -> EvaluationService:
    return build_evaluation_service(get_settings())


class EvaluateRequest(ApiModel):
    transcript: str | None = None
    prompt_id: int | None = None


def parse_difficulty(value: str) -> DifficultyTier:
    try:
        return DifficultyTier(value.lower())
    except ValueError:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid difficulty. Must be one of: {', '.join(DifficultyTier)}",
        )


def parse_prompt_id(value: str | int | None) -> int:
    try:
        prompt_id = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail="Invalid prompt ID")
    if prompt_id < 0:
        raise HTTPException(status_code=400, detail="Invalid prompt ID")
    return prompt_id


def require_prompt(storage: MemStorage, prompt_id: int) -> TestPrompt:
    prompt = storage.get_prompt(prompt_id)
    if prompt is None:
        raise HTTPException(status_code=404, detail="Prompt not found")
    return prompt


def require_user(storage: MemStorage, user_id: int) -> User:
    user = storage.get_user(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}


# Prompts and reference data


@router.get("/prompts")
async def list_prompts() -> list[TestPrompt]:
    return get_storage().get_all_prompts()


@router.get("/prompts/difficulty/{difficulty}")
async def list_prompts_by_difficulty(difficulty: str) -> list[TestPrompt]:
    return get_storage().get_prompts_by_difficulty(parse_difficulty(difficulty))


@router.get("/prompts/{prompt_id}")
async def get_prompt(prompt_id: int) -> TestPrompt:
    return require_prompt(get_storage(), prompt_id)


@router.get("/categories")
async def list_categories() -> list[TestCategory]:
    return get_storage().get_categories()


@router.get("/resources")
async def list_resources(difficulty: str | None = None) -> list[LearningResource]:
    tier = parse_difficulty(difficulty) if difficulty else None
    return get_storage().get_resources(tier)


# Users and progress


@router.post("/users", status_code=201)
async def create_user(data: UserCreate) -> User:
    storage = get_storage()
    if storage.get_user_by_username(data.username) is not None:
        raise HTTPException(status_code=409, detail="Username already exists")
    return storage.create_user(data)


@router.get("/users/{user_id}/test-results")
async def list_user_test_results(user_id: int) -> list[TestResult]:
    storage = get_storage()
    require_user(storage, user_id)
    return storage.get_test_results_by_user_id(user_id)


@router.get("/user-progress/{user_id}")
async def get_user_progress(user_id: int) -> UserProgress:
    """Progress rollup; a fresh record for a user with no completed tests."""
    storage = get_storage()
    require_user(storage, user_id)
    return storage.get_user_progress(user_id) or UserProgress(user_id=user_id)


# Audio and evaluation


async def _save_upload(audio: UploadFile, path: Path, max_bytes: int) -> None:
    """Stream an upload to disk, enforcing the size limit."""
    size = 0
    with open(path, "wb") as f:
        while chunk := await audio.read(UPLOAD_CHUNK_BYTES):
            size += len(chunk)
            if size > max_bytes:
                raise HTTPException(status_code=413, detail="Audio file too large")
            f.write(chunk)
    if size == 0:
        raise HTTPException(status_code=400, detail="Audio file is empty")


@router.post("/submit-audio")
async def submit_audio(
    audio: UploadFile | None = File(None),
    prompt_id: str | None = Form(None, alias="promptId"),
    analyze: str | None = Form(None),
) -> dict:
    """Transcribe an uploaded answer, optionally evaluating it.

    The uploaded file is removed once the request finishes, whatever the outcome.
    """
    if audio is None:
        raise HTTPException(status_code=400, detail="No audio file provided")
    settings = get_settings()
    storage = get_storage()
    prompt = require_prompt(storage, parse_prompt_id(prompt_id))
    service = get_evaluation_service()

    suffix = Path(audio.filename or "").suffix or ".webm"
    path = settings.uploads_dir / f"{uuid.uuid4().hex}{suffix}"
    try:
        await _save_upload(audio, path, settings.max_upload_bytes)
        try:
            transcript = await service.transcribe(path)
        except TranscriptionError as e:
            logger.error("transcription_failed", prompt_id=prompt.id, error=str(e))
            raise HTTPException(status_code=502, detail="Failed to transcribe audio")

        logger.info("audio_submitted", prompt_id=prompt.id, transcript_chars=len(transcript.text))
        response: dict = {"transcript": transcript.text}
        if (analyze or "").lower() in _TRUTHY:
            evaluation = await service.evaluate(transcript.text, prompt, transcript.id)
            response["evaluation"] = evaluation.model_dump(by_alias=True)
        return response
    finally:
        path.unlink(missing_ok=True)


@router.post("/evaluate")
async def evaluate(data: EvaluateRequest) -> Evaluation:
    """Score a transcript against a prompt; falls back rather than failing."""
    if not data.transcript or not data.transcript.strip():
        raise HTTPException(status_code=400, detail="Transcript is required")
    prompt = require_prompt(get_storage(), parse_prompt_id(data.prompt_id))
    return await get_evaluation_service().evaluate(data.transcript, prompt)


# Results


@router.post("/submit-test-results")
async def submit_test_results(data: TestResultCreate) -> TestResult:
    """Store a completed test with its answers and update the user's progress."""
    settings = get_settings()
    storage = get_storage()
    if data.user_id is not None:
        require_user(storage, data.user_id)
    for submission in data.submissions:
        require_prompt(storage, submission.prompt_id)

    result = storage.create_test_result(data)
    for submission in data.submissions:
        storage.create_test_submission(result.id, submission)

    if data.user_id is not None and data.difficulty is not None:
        progress = storage.get_user_progress(data.user_id) or UserProgress(user_id=data.user_id)
        record_completed_test(
            progress, data.difficulty, result.overall_score, settings.unlock_threshold
        )
        storage.save_user_progress(progress)
    if data.user_id is not None:
        storage.touch_user(data.user_id)

    logger.info(
        "test_results_submitted",
        result_id=result.id,
        submissions=len(data.submissions),
        fallback=result.fallback,
    )
    return result


@router.get("/test-results/{result_id}")
async def get_test_result(result_id: int) -> TestResult:
    result = get_storage().get_test_result(result_id)
    if result is None:
        raise HTTPException(status_code=404, detail="Test result not found")
    return result


@router.get("/test-results/{result_id}/submissions")
async def list_test_submissions(result_id: int) -> list[TestSubmission]:
    storage = get_storage()
    if storage.get_test_result(result_id) is None:
        raise HTTPException(status_code=404, detail="Test result not found")
    return storage.get_test_submissions_by_result_id(result_id)
