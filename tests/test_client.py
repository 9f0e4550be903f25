"""Tests for the HTTP API client."""

import json

import httpx
import pytest

from speakscore.client import ApiError, SpeakScoreClient
from speakscore.models.assessment import TestResultCreate
from speakscore.models.prompt import DifficultyTier

EVALUATION = {
    "overallScore": 72,
    "vocabularyScore": 70,
    "grammarScore": 74,
    "fluencyScore": 71,
    "pronunciationScore": 73,
    "cefrLevel": "B2",
    "strengths": [],
    "improvements": [],
    "recommendations": [],
    "feedback": "",
    "fallback": False,
}


def _client(handler, **kwargs) -> SpeakScoreClient:
    return SpeakScoreClient("http://test", transport=httpx.MockTransport(handler), **kwargs)


class TestUploadAudio:
    async def test_rejects_empty_blob(self):
        client = _client(lambda r: httpx.Response(200))
        with pytest.raises(ApiError, match="empty"):
            await client.upload_audio(b"", 1)

    async def test_rejects_negative_prompt(self):
        client = _client(lambda r: httpx.Response(200))
        with pytest.raises(ApiError):
            await client.upload_audio(b"abc", -1)

    async def test_upload_with_analysis(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/submit-audio"
            body = request.read()
            assert b'name="promptId"' in body
            assert b'name="analyze"' in body
            assert b'filename="recording.wav"' in body
            return httpx.Response(200, json={"transcript": "hello", "evaluation": EVALUATION})

        result = await _client(handler).upload_audio(b"RIFF", 2, analyze=True)
        assert result["transcript"] == "hello"
        assert result["evaluation"].overall_score == 72

    async def test_missing_transcript(self):
        client = _client(lambda r: httpx.Response(200, json={}))
        with pytest.raises(ApiError, match="transcript"):
            await client.upload_audio(b"RIFF", 1)

    async def test_server_error(self):
        client = _client(lambda r: httpx.Response(502, json={"detail": "Failed to transcribe audio"}))
        with pytest.raises(ApiError) as excinfo:
            await client.upload_audio(b"RIFF", 1)
        assert excinfo.value.status_code == 502
        assert "Failed to transcribe" in str(excinfo.value)


class TestOtherEndpoints:
    async def test_app_secret_header(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.headers["X-App-Secret"] == "s3cret"
            return httpx.Response(200, json=[])

        assert await _client(handler, app_secret="s3cret").get_categories() == []

    async def test_prompts_by_difficulty(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/prompts/difficulty/advanced"
            return httpx.Response(200, json=[{"id": 1, "prompt": "Discuss.", "difficulty": "advanced"}])

        prompts = await _client(handler).get_prompts(DifficultyTier.ADVANCED)
        assert prompts[0].difficulty == DifficultyTier.ADVANCED

    async def test_evaluate_transcription(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert json.loads(request.read()) == {"transcript": "hi", "promptId": 4}
            return httpx.Response(200, json=EVALUATION)

        evaluation = await _client(handler).evaluate_transcription("hi", 4)
        assert evaluation.cefr_level == "B2"

    async def test_submit_test_results_sends_camel_case(self):
        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.read())
            assert body["overallScore"] == 72
            assert body["userId"] == 5
            return httpx.Response(
                200,
                json={**body, "id": 1, "cefrLevel": "B2", "createdAt": "2026-01-01T10:00:00"},
            )

        result = TestResultCreate(
            user_id=5,
            overall_score=72,
            vocabulary_score=70,
            grammar_score=74,
            fluency_score=71,
            pronunciation_score=73,
        )
        stored = await _client(handler).submit_test_results(result)
        assert stored.id == 1

    async def test_user_progress_not_found(self):
        client = _client(lambda r: httpx.Response(404, json={"detail": "User not found"}))
        with pytest.raises(ApiError) as excinfo:
            await client.get_user_progress(9)
        assert excinfo.value.status_code == 404

    async def test_create_user(self):
        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.read())
            return httpx.Response(201, json={"id": 1, "username": body["username"], "displayName": "Ana"})

        user = await _client(handler).create_user("ana", "Ana")
        assert user.display_name == "Ana"
