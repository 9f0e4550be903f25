"""Terminal test runner: record answers, get them scored, print the report."""

import argparse
import asyncio
import os
import sys
from pathlib import Path

import structlog

from speakscore.analysis.report import render_report, summarize_evaluations
from speakscore.audio.encoder import wav_duration_seconds
from speakscore.audio.recorder import AudioRecorder, RecorderError
from speakscore.client import ApiError, SpeakScoreClient
from speakscore.models.assessment import Evaluation
from speakscore.models.prompt import DifficultyTier, TestPrompt
from speakscore.models.session import TestSession

logger = structlog.get_logger()


async def _ainput(message: str) -> str:
    return await asyncio.to_thread(input, message)


async def record_answer(prompt: TestPrompt, sample_rate: int, device: int | None) -> bytes | None:
    """Record one answer; None means the user skipped the question."""
    while True:
        choice = (await _ainput("[Enter] start recording, [s] skip: ")).strip().lower()
        if choice == "s":
            return None

        async with AudioRecorder(
            sample_rate=sample_rate,
            time_limit_seconds=prompt.time_limit_seconds,
            device=device,
        ) as recorder:
            try:
                await recorder.start()
            except RecorderError as e:
                print(f"Microphone error: {e}")
                continue

            print(f"Recording... press Enter to stop ({prompt.time_limit_seconds}s limit)")
            enter = asyncio.create_task(_ainput(""))
            limit = asyncio.create_task(recorder.wait_for_limit())
            await asyncio.wait({enter, limit}, return_when=asyncio.FIRST_COMPLETED)
            limit.cancel()
            try:
                blob = await recorder.stop()
            except RecorderError as e:
                print(f"Recording failed: {e}")
                blob = None
            if not enter.done():
                print("Time is up. Press Enter to continue.")
                await enter
            if blob is not None:
                return blob


async def score_answer(
    client: SpeakScoreClient, prompt: TestPrompt, blob: bytes
) -> Evaluation | None:
    try:
        uploaded = await client.upload_audio(blob, prompt.id, analyze=True)
    except ApiError as e:
        print(f"Upload failed: {e}")
        return None

    transcript = uploaded["transcript"]
    print(f'\nTranscript: "{transcript}"')
    evaluation = uploaded.get("evaluation")
    if evaluation is None:
        try:
            evaluation = await client.evaluate_transcription(transcript, prompt.id)
        except ApiError as e:
            print(f"Evaluation failed: {e}")
            return None
    print(f"Score: {evaluation.overall_score}/100 ({evaluation.cefr_level})")
    return evaluation


async def run(args: argparse.Namespace) -> int:
    difficulty = DifficultyTier(args.difficulty)
    session = TestSession()
    async with SpeakScoreClient(args.server, app_secret=args.app_secret) as client:
        prompts = await client.get_prompts(difficulty)
        if not prompts:
            print(f"No prompts available for {difficulty.value}.")
            return 1

        total_seconds = 0.0
        for index, prompt in enumerate(prompts, start=1):
            print(f"\nQuestion {index}/{len(prompts)} [{prompt.type.value}]")
            print(prompt.prompt)
            for tip in prompt.tips:
                print(f"  tip: {tip}")

            blob = await record_answer(prompt, args.sample_rate, args.device)
            if blob is not None:
                total_seconds += wav_duration_seconds(blob)
                evaluation = await score_answer(client, prompt, blob)
                if evaluation is not None:
                    session.add_result(evaluation)
            session.advance(len(prompts))

        if not session.evaluations:
            print("\nNo answers were scored.")
            return 1

        result = summarize_evaluations(
            session.evaluations,
            user_id=args.user_id,
            difficulty=difficulty,
            test_duration_seconds=round(total_seconds),
        )
        stored = await client.submit_test_results(result)
        report = render_report(stored, taken_at=stored.created_at)
        print("\n" + report)
        if args.report:
            Path(args.report).write_text(report, encoding="utf-8")
            print(f"Report saved to {args.report}")

        if args.user_id is not None:
            progress = await client.get_user_progress(args.user_id)
            print(
                f"Tests completed: {progress.tests_completed}, "
                f"average score: {progress.average_score}, "
                f"highest unlocked tier: {progress.highest_unlocked.value}"
            )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="speakscore-test",
        description="Take a spoken English test from the terminal.",
    )
    parser.add_argument("--server", default="http://localhost:8000", help="API base URL")
    parser.add_argument(
        "--difficulty",
        choices=[tier.value for tier in DifficultyTier],
        default=DifficultyTier.BEGINNER.value,
    )
    parser.add_argument("--user-id", type=int, default=None, help="Record progress for this user")
    parser.add_argument("--report", default=None, help="Write the text report to this file")
    parser.add_argument("--sample-rate", type=int, default=16000)
    parser.add_argument("--device", type=int, default=None, help="Input device index")
    parser.add_argument("--app-secret", default=os.getenv("APP_SECRET"))
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    try:
        code = asyncio.run(run(args))
    except ApiError as e:
        print(f"Error: {e}", file=sys.stderr)
        code = 1
    except KeyboardInterrupt:
        code = 130
    sys.exit(code)


if __name__ == "__main__":
    main()
