"""Evaluation through AssemblyAI LeMUR."""

import structlog

from speakscore.assessment.fallback import constant_evaluation, fallback_evaluation
from speakscore.assessment.parsing import EvaluationParseError, parse_evaluation
from speakscore.models.assessment import Evaluation
from speakscore.models.prompt import TestPrompt
from speakscore.transcription.assemblyai import AssemblyAIClient

logger = structlog.get_logger()

LEMUR_TEMPLATE = """\
You are an expert English language evaluator. Analyze the following spoken English \
response to the prompt: "{prompt}"

Spoken response transcript: "{transcript}"

Evaluate the response across these categories:
1. Fluency (1-100): How smoothly and naturally the language flows
2. Pronunciation (1-100): Clarity and accuracy of sounds, stress, and intonation
3. Grammar (1-100): Correct use of grammar structures and verb tenses
4. Vocabulary (1-100): Range and accuracy of vocabulary used
5. Overall Score (1-100): Overall English speaking proficiency

Then provide:
- Three specific strengths in the response
- Three specific areas for improvement
- Brief feedback (2-3 sentences) including an estimated CEFR level (A1, A2, B1, B2, C1, C2)

Format your response as a JSON object with the following structure:
{{
  "fluency": number,
  "pronunciation": number,
  "grammar": number,
  "vocabulary": number,
  "overall": number,
  "strengths": [string, string, string],
  "weaknesses": [string, string, string],
  "level": string,
  "feedback": string
}}
"""


class LeMUREvaluator:
    """Scores transcripts with a LeMUR task.

    Uses the stored transcript when its id is known, the raw text otherwise.
    """

    def __init__(self, client: AssemblyAIClient):
        self.client = client

    async def evaluate(
        self,
        transcript: str,
        prompt: TestPrompt,
        transcript_id: str | None = None,
    ) -> Evaluation:
        if not transcript.strip():
            return constant_evaluation()

        task = LEMUR_TEMPLATE.format(prompt=prompt.prompt, transcript=transcript)
        try:
            if transcript_id:
                content = await self.client.lemur_task(task, transcript_id=transcript_id)
            else:
                content = await self.client.lemur_task(task, input_text=transcript)
        except Exception:
            logger.exception("lemur_evaluation_failed", prompt_id=prompt.id)
            return fallback_evaluation(transcript)

        try:
            evaluation = parse_evaluation(content)
        except EvaluationParseError as e:
            logger.warning("lemur_response_unparsable", error=str(e), response=content[:200])
            return fallback_evaluation(transcript)

        logger.info(
            "lemur_evaluation_complete",
            prompt_id=prompt.id,
            overall_score=evaluation.overall_score,
        )
        return evaluation
