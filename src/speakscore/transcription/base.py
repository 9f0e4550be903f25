"""Shared transcription types and provider selection."""

from pathlib import Path
from typing import Protocol

from pydantic import BaseModel

from speakscore.config import Settings


class TranscriptionError(RuntimeError):
    """Speech-to-text provider failed or is not configured."""


class Transcript(BaseModel):
    """Text of a recording, with the provider's transcript id when it has one."""

    id: str | None = None
    text: str = ""


class Transcriber(Protocol):
    async def transcribe(self, path: Path) -> Transcript: ...


def build_transcriber(settings: Settings) -> Transcriber:
    """Create the transcriber for the configured provider.

    Raises:
        TranscriptionError: If the provider's API key is missing.
    """
    if settings.transcription_provider == "openai":
        from speakscore.transcription.whisper import WhisperTranscriber

        if not settings.openai_api_key:
            raise TranscriptionError("OPENAI_API_KEY is not configured")
        return WhisperTranscriber(
            api_key=settings.openai_api_key,
            model=settings.openai_transcription_model,
        )

    from speakscore.transcription.assemblyai import AssemblyAIClient

    if not settings.assemblyai_api_key:
        raise TranscriptionError("ASSEMBLYAI_API_KEY is not configured")
    return AssemblyAIClient.from_settings(settings)
