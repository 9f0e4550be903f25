"""AssemblyAI REST client: upload, transcribe, poll, and LeMUR tasks."""

import asyncio
import time
from pathlib import Path
from typing import Any

import httpx
import structlog

from speakscore.config import Settings
from speakscore.transcription.base import Transcript, TranscriptionError

logger = structlog.get_logger()


class AssemblyAIClient:
    """Async client for the AssemblyAI v2 transcript and LeMUR APIs.

    Args:
        api_key: AssemblyAI API key.
        base_url: API root.
        poll_interval: Seconds between transcript status checks.
        timeout: Overall seconds to wait for a transcript.
        final_model: LeMUR model name.
        transport: Optional httpx transport (used in tests).
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.assemblyai.com",
        poll_interval: float = 2.0,
        timeout: float = 300.0,
        final_model: str = "default",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.poll_interval = poll_interval
        self.timeout = timeout
        self.final_model = final_model
        self._headers = {"authorization": api_key}
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "AssemblyAIClient":
        return cls(
            api_key=settings.assemblyai_api_key or "",
            base_url=settings.assemblyai_base_url,
            poll_interval=settings.assemblyai_poll_interval_seconds,
            timeout=settings.assemblyai_timeout_seconds,
            final_model=settings.lemur_final_model,
        )

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=self._headers,
            timeout=60,
            transport=self._transport,
        )

    async def transcribe(self, path: Path) -> Transcript:
        """Upload a local audio file and wait for its transcript.

        Raises:
            TranscriptionError: On HTTP failure, provider error or timeout.
        """
        data = Path(path).read_bytes()
        try:
            async with self._client() as client:
                upload = await client.post("/v2/upload", content=data)
                upload.raise_for_status()
                audio_url = upload.json()["upload_url"]

                submitted = await client.post(
                    "/v2/transcript",
                    json={"audio_url": audio_url, "language_code": "en_us"},
                )
                submitted.raise_for_status()
                transcript_id = submitted.json()["id"]
                logger.info("transcript_submitted", transcript_id=transcript_id, bytes=len(data))

                result = await self._poll(client, transcript_id)
        except (httpx.HTTPError, KeyError, ValueError) as e:
            raise TranscriptionError(f"Failed to transcribe audio: {e}") from e

        return Transcript(id=transcript_id, text=result.get("text") or "")

    async def _poll(self, client: httpx.AsyncClient, transcript_id: str) -> dict[str, Any]:
        deadline = time.monotonic() + self.timeout
        while True:
            response = await client.get(f"/v2/transcript/{transcript_id}")
            response.raise_for_status()
            result = response.json()
            status = result.get("status")
            if status == "completed":
                logger.info("transcript_completed", transcript_id=transcript_id)
                return result
            if status == "error":
                raise TranscriptionError(
                    f"Transcription failed: {result.get('error', 'Unknown error')}"
                )
            if time.monotonic() >= deadline:
                raise TranscriptionError(
                    f"Transcript {transcript_id} not ready after {self.timeout:.0f}s"
                )
            await asyncio.sleep(self.poll_interval)

    async def lemur_task(
        self,
        prompt: str,
        transcript_id: str | None = None,
        input_text: str | None = None,
    ) -> str:
        """Run a LeMUR task over a transcript id or raw text.

        Returns:
            The model's response text.

        Raises:
            httpx.HTTPError: On request failure.
            ValueError: If neither transcript_id nor input_text is given.
        """
        payload: dict[str, Any] = {"prompt": prompt, "final_model": self.final_model}
        if transcript_id:
            payload["transcript_ids"] = [transcript_id]
        elif input_text:
            payload["input_text"] = input_text
        else:
            raise ValueError("lemur_task needs a transcript_id or input_text")

        async with self._client() as client:
            response = await client.post("/lemur/v3/generate/task", json=payload)
            response.raise_for_status()
            return response.json().get("response", "")
