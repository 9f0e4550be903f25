"""OpenAI Whisper transcription."""

from pathlib import Path

import structlog
from openai import AsyncOpenAI, OpenAIError

from speakscore.transcription.base import Transcript, TranscriptionError

logger = structlog.get_logger()


class WhisperTranscriber:
    def __init__(self, api_key: str, model: str = "whisper-1"):
        self.client = AsyncOpenAI(api_key=api_key)
        self.model = model

    async def transcribe(self, path: Path) -> Transcript:
        path = Path(path)
        try:
            with open(path, "rb") as f:
                result = await self.client.audio.transcriptions.create(
                    model=self.model,
                    file=(path.name, f.read()),
                    language="en",
                )
        except OpenAIError as e:
            raise TranscriptionError(f"Failed to transcribe audio: {e}") from e

        logger.info("whisper_transcript_completed", model=self.model)
        return Transcript(text=result.text or "")
