"""Transcription and evaluation behind one seam for the route handlers."""

from pathlib import Path
from typing import Protocol

import structlog

from speakscore.assessment.fallback import fallback_evaluation
from speakscore.assessment.lemur import LeMUREvaluator
from speakscore.assessment.llm_evaluator import LLMEvaluator
from speakscore.config import Settings
from speakscore.models.assessment import Evaluation
from speakscore.models.prompt import TestPrompt
from speakscore.transcription.assemblyai import AssemblyAIClient
from speakscore.transcription.base import (
    Transcriber,
    Transcript,
    TranscriptionError,
    build_transcriber,
)

logger = structlog.get_logger()


class Evaluator(Protocol):
    async def evaluate(
        self, transcript: str, prompt: TestPrompt, transcript_id: str | None = None
    ) -> Evaluation: ...


class EvaluationService:
    """Transcribes recordings and scores transcripts.

    ``evaluate`` never raises; a missing evaluator (unconfigured provider)
    or any evaluator error yields a fallback evaluation.

    Args:
        transcriber: Speech-to-text backend, or None when unconfigured.
        evaluator: Scoring backend, or None when unconfigured.
    """

    def __init__(self, transcriber: Transcriber | None, evaluator: Evaluator | None):
        self.transcriber = transcriber
        self.evaluator = evaluator

    async def transcribe(self, path: Path) -> Transcript:
        """Transcribe an audio file.

        Raises:
            TranscriptionError: If no transcriber is configured or it fails.
        """
        if self.transcriber is None:
            raise TranscriptionError("No transcription provider is configured")
        return await self.transcriber.transcribe(path)

    async def evaluate(
        self,
        transcript: str,
        prompt: TestPrompt,
        transcript_id: str | None = None,
    ) -> Evaluation:
        if self.evaluator is None:
            logger.warning("evaluation_provider_unconfigured", prompt_id=prompt.id)
            return fallback_evaluation(transcript)
        try:
            return await self.evaluator.evaluate(transcript, prompt, transcript_id)
        except Exception:
            logger.exception("evaluation_failed", prompt_id=prompt.id)
            return fallback_evaluation(transcript)


def build_evaluation_service(settings: Settings) -> EvaluationService:
    """Wire the configured transcription and evaluation providers."""
    try:
        transcriber = build_transcriber(settings)
    except TranscriptionError as e:
        logger.warning("transcription_provider_unconfigured", error=str(e))
        transcriber = None

    evaluator: Evaluator | None = None
    provider = settings.evaluation_provider
    if provider == "mistral" and settings.mistral_api_key:
        evaluator = LLMEvaluator(
            api_key=settings.mistral_api_key,
            model=settings.mistral_model,
            base_url=settings.mistral_base_url,
            temperature=settings.evaluation_temperature,
            max_tokens=settings.evaluation_max_tokens,
        )
    elif provider == "openai" and settings.openai_api_key:
        evaluator = LLMEvaluator(
            api_key=settings.openai_api_key,
            model=settings.openai_evaluation_model,
            temperature=settings.evaluation_temperature,
            max_tokens=settings.evaluation_max_tokens,
        )
    elif provider == "lemur" and settings.assemblyai_api_key:
        evaluator = LeMUREvaluator(AssemblyAIClient.from_settings(settings))

    logger.info(
        "evaluation_service_ready",
        evaluation_provider=provider if evaluator else None,
        transcription_provider=settings.transcription_provider if transcriber else None,
    )
    return EvaluationService(transcriber, evaluator)
