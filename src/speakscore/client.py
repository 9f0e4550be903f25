"""Async HTTP client for the SpeakScore API."""

from typing import Any

import httpx
import structlog

from speakscore.models.assessment import Evaluation, TestResult, TestResultCreate
from speakscore.models.prompt import DifficultyTier, TestCategory, TestPrompt
from speakscore.models.user import User, UserProgress

logger = structlog.get_logger()


class ApiError(RuntimeError):
    """Request rejected by the server or returned an unusable body."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class SpeakScoreClient:
    """Thin wrapper over the backend endpoints.

    Args:
        base_url: Server root, e.g. ``http://localhost:8000``.
        app_secret: Sent as ``X-App-Secret`` when set.
        timeout: Request timeout in seconds; uploads wait on transcription.
        transport: Optional httpx transport (used in tests).
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        app_secret: str | None = None,
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        headers = {"X-App-Secret": app_secret} if app_secret else {}
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "SpeakScoreClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise ApiError(f"Request to {url} failed: {e}") from e
        if response.is_error:
            try:
                detail = response.json().get("detail", response.text)
            except ValueError:
                detail = response.text
            raise ApiError(f"{response.status_code}: {detail}", response.status_code)
        return response.json()

    async def upload_audio(
        self, blob: bytes, prompt_id: int, analyze: bool = False
    ) -> dict[str, Any]:
        """Upload a recording for transcription.

        Returns:
            ``{"transcript": str}`` plus an ``evaluation`` when ``analyze`` is set.

        Raises:
            ApiError: On invalid input, HTTP failure or a missing transcript.
        """
        if not blob:
            raise ApiError("Audio recording is empty")
        if prompt_id < 0:
            raise ApiError("Invalid prompt id")

        data = {"promptId": str(prompt_id)}
        if analyze:
            data["analyze"] = "true"
        body = await self._request(
            "POST",
            "/api/submit-audio",
            files={"audio": ("recording.wav", blob, "audio/wav")},
            data=data,
        )
        if "transcript" not in body:
            raise ApiError("Server returned no transcript")
        logger.info("audio_uploaded", prompt_id=prompt_id, bytes=len(blob))

        result: dict[str, Any] = {"transcript": body["transcript"]}
        if body.get("evaluation"):
            result["evaluation"] = Evaluation.model_validate(body["evaluation"])
        return result

    async def evaluate_transcription(self, transcript: str, prompt_id: int) -> Evaluation:
        body = await self._request(
            "POST",
            "/api/evaluate",
            json={"transcript": transcript, "promptId": prompt_id},
        )
        return Evaluation.model_validate(body)

    async def submit_test_results(self, result: TestResultCreate) -> TestResult:
        body = await self._request(
            "POST",
            "/api/submit-test-results",
            json=result.model_dump(mode="json", by_alias=True, exclude_none=True),
        )
        return TestResult.model_validate(body)

    async def get_prompts(self, difficulty: DifficultyTier | None = None) -> list[TestPrompt]:
        url = f"/api/prompts/difficulty/{difficulty.value}" if difficulty else "/api/prompts"
        return [TestPrompt.model_validate(p) for p in await self._request("GET", url)]

    async def get_categories(self) -> list[TestCategory]:
        return [TestCategory.model_validate(c) for c in await self._request("GET", "/api/categories")]

    async def get_user_progress(self, user_id: int) -> UserProgress:
        return UserProgress.model_validate(
            await self._request("GET", f"/api/user-progress/{user_id}")
        )

    async def create_user(self, username: str, display_name: str | None = None) -> User:
        payload = {"username": username}
        if display_name:
            payload["displayName"] = display_name
        return User.model_validate(await self._request("POST", "/api/users", json=payload))
