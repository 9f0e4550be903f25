"""Hosted LLM evaluation of a spoken answer's transcript."""

import structlog
from openai import AsyncOpenAI

from speakscore.assessment.fallback import constant_evaluation, fallback_evaluation
from speakscore.assessment.parsing import EvaluationParseError, parse_evaluation
from speakscore.models.assessment import Evaluation
from speakscore.models.prompt import PromptType, TestPrompt

logger = structlog.get_logger()

_RESPONSE_SHAPE = """\
Format your response as a JSON object with the following structure:
{{
  "vocabularyScore": number,
  "grammarScore": number,
  "fluencyScore": number,
  "pronunciationScore": number,
  "overallScore": number,
  "strengths": string[],
  "improvements": string[],
  "recommendations": string[],
  "level": string,
  "feedback": string
}}
"""

_FOLLOW_UPS = """\
Then provide:
1. A list of 3-5 strengths demonstrated in the transcript
2. A list of 3-5 areas for improvement
3. A list of 3-5 specific recommendations for practice
4. A CEFR level assessment (A1, A2, B1, B2, C1, C2) with brief justification
5. A paragraph of constructive feedback
"""

SPEAKING_TEMPLATE = """\
You are an expert English language assessment professional with expertise in \
CEFR (Common European Framework of Reference for Languages) levels.

Evaluate the following spoken English transcript based on a language proficiency \
test. Provide a detailed assessment across multiple dimensions.

Original Test Prompt: "{prompt}"
Test Type: {test_type}
Difficulty Level: {difficulty}

Speaker's Transcript: "{transcript}"

Evaluate the speech on the following criteria, with scores from 0-100 (where 100 is perfect):
1. Vocabulary Score: Assess range, appropriateness, and accuracy of vocabulary
2. Grammar Score: Evaluate grammatical accuracy and complexity
3. Fluency Score: Rate smoothness of delivery, hesitation, and naturalness
4. Pronunciation Score: Evaluate pronunciation clarity, accent, and intonation
5. Overall Score: Provide a combined assessment of all dimensions

""" + _FOLLOW_UPS + "\n" + _RESPONSE_SHAPE

PICTURE_TEMPLATE = """\
You are an expert English language assessment professional with expertise in \
CEFR (Common European Framework of Reference for Languages) levels.

Evaluate the following spoken English transcript based on an image description \
task. Provide a detailed assessment across multiple dimensions.

Image Description Task: "{prompt}"
Difficulty Level: {difficulty}

Speaker's Transcript: "{transcript}"

Evaluate the speech on the following criteria, with scores from 0-100 (where 100 is perfect):
1. Vocabulary Score: Assess range, appropriateness, and accuracy of vocabulary used \
to describe visual elements
2. Grammar Score: Evaluate grammatical accuracy and complexity
3. Fluency Score: Rate smoothness of delivery, hesitation, and naturalness
4. Pronunciation Score: Evaluate pronunciation clarity, accent, and intonation
5. Overall Score: Provide a combined assessment of all dimensions

""" + _FOLLOW_UPS + "\n" + _RESPONSE_SHAPE

TEMPLATES: dict[PromptType, str] = {
    PromptType.SPEAKING: SPEAKING_TEMPLATE,
    PromptType.READ_ALOUD: SPEAKING_TEMPLATE,
    PromptType.PICTURE_DESCRIPTION: PICTURE_TEMPLATE,
}


def build_evaluation_prompt(transcript: str, prompt: TestPrompt) -> str:
    """Fill the instruction template for the prompt's task type."""
    template = TEMPLATES.get(prompt.type, SPEAKING_TEMPLATE)
    return template.format(
        prompt=prompt.prompt,
        test_type=prompt.type.value.replace("_", " "),
        difficulty=prompt.difficulty.value,
        transcript=transcript,
    )


class LLMEvaluator:
    """Scores transcripts with a chat-completion model.

    Works against OpenAI and any OpenAI-compatible endpoint such as Mistral's.

    Args:
        api_key: Provider API key.
        model: Model to use for evaluation.
        base_url: API base URL (None for OpenAI).
        temperature: Sampling temperature.
        max_tokens: Completion token limit.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "mistral-large-latest",
        base_url: str | None = None,
        temperature: float = 0.3,
        max_tokens: int = 2048,
    ):
        self.client = AsyncOpenAI(api_key=api_key, base_url=base_url)
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def evaluate(
        self,
        transcript: str,
        prompt: TestPrompt,
        transcript_id: str | None = None,
    ) -> Evaluation:
        """Evaluate one answer.

        Args:
            transcript: Transcribed answer.
            prompt: Prompt the user was answering.
            transcript_id: Unused; accepted for interface parity with LeMUR.

        Returns:
            Evaluation; a fallback evaluation if the call or parsing fails.
        """
        if not transcript.strip():
            return constant_evaluation()

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "user", "content": build_evaluation_prompt(transcript, prompt)},
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                response_format={"type": "json_object"},
            )
            content = response.choices[0].message.content
        except Exception:
            logger.exception("llm_evaluation_failed", model=self.model, prompt_id=prompt.id)
            return fallback_evaluation(transcript)

        try:
            evaluation = parse_evaluation(content)
        except EvaluationParseError as e:
            logger.warning(
                "llm_response_unparsable",
                model=self.model,
                error=str(e),
                response=(content or "")[:200],
            )
            return fallback_evaluation(transcript)

        logger.info(
            "llm_evaluation_complete",
            model=self.model,
            prompt_id=prompt.id,
            overall_score=evaluation.overall_score,
            cefr_level=evaluation.cefr_level,
        )
        return evaluation
