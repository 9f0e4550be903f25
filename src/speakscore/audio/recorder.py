"""Microphone recorder for a single spoken answer."""

import asyncio
import threading
from enum import StrEnum

import numpy as np
import structlog

from speakscore.audio.encoder import pcm_to_wav_bytes

logger = structlog.get_logger()


class RecordingState(StrEnum):
    INACTIVE = "inactive"
    RECORDING = "recording"
    STOPPING = "stopping"


class RecorderError(RuntimeError):
    """Microphone could not be opened or produced no audio."""


class AudioRecorder:
    """Records one answer from the microphone into a WAV blob.

    Chunks arrive from the sounddevice callback thread every
    ``chunk_duration_ms``; a once-per-second timer tracks elapsed time and
    ends capture when ``time_limit_seconds`` is reached.

    Args:
        sample_rate: Audio sample rate in Hz.
        channels: Number of audio channels.
        chunk_duration_ms: Callback block length in milliseconds.
        time_limit_seconds: Countdown length, or None for no limit.
        device: Input device index (None for default).
    """

    def __init__(
        self,
        sample_rate: int = 16000,
        channels: int = 1,
        chunk_duration_ms: int = 250,
        time_limit_seconds: int | None = None,
        device: int | None = None,
    ):
        self.sample_rate = sample_rate
        self.channels = channels
        self.chunk_duration_ms = chunk_duration_ms
        self.time_limit_seconds = time_limit_seconds
        self.device = device

        self.state = RecordingState.INACTIVE
        self.chunks: list[np.ndarray] = []
        self.audio_blob: bytes | None = None
        self.recording_time = 0
        self.error: str | None = None

        self._lock = threading.Lock()
        self._stream = None
        self._timer: asyncio.Task | None = None
        self._limit_reached = asyncio.Event()

    @property
    def remaining_seconds(self) -> int | None:
        if self.time_limit_seconds is None:
            return None
        return max(0, self.time_limit_seconds - self.recording_time)

    def _open_stream(self):
        # PortAudio is loaded when sounddevice is imported
        import sounddevice as sd  # noqa: PLC0415

        return sd.InputStream(
            samplerate=self.sample_rate,
            channels=self.channels,
            dtype="float32",
            blocksize=int(self.sample_rate * self.chunk_duration_ms / 1000),
            device=self.device,
            callback=self._audio_callback,
        )

    def _audio_callback(self, indata: np.ndarray, frames: int, time_info: object, status) -> None:
        if status:
            logger.warning("audio_capture_status", status=str(status))
        with self._lock:
            if self.state == RecordingState.RECORDING:
                self.chunks.append(indata.copy())

    async def _tick(self) -> None:
        while True:
            await asyncio.sleep(1)
            self.recording_time += 1
            if self.time_limit_seconds is not None and self.recording_time >= self.time_limit_seconds:
                with self._lock:
                    self.state = RecordingState.STOPPING
                self._close_stream()
                logger.info("recorder_time_limit_reached", seconds=self.recording_time)
                self._limit_reached.set()
                return

    async def start(self) -> None:
        """Open the microphone and begin buffering.

        Raises:
            RecorderError: If already recording or the device cannot be opened.
        """
        if self.state != RecordingState.INACTIVE:
            raise RecorderError("Recording is already in progress")
        self.reset()
        try:
            self._stream = self._open_stream()
            self._stream.start()
        except Exception as e:
            self._release()
            self.state = RecordingState.INACTIVE
            self.error = f"Could not access microphone: {e}"
            logger.error("recorder_start_failed", error=str(e))
            raise RecorderError(self.error) from e

        self.state = RecordingState.RECORDING
        self._timer = asyncio.create_task(self._tick())
        logger.info("recorder_started", time_limit=self.time_limit_seconds)

    async def stop(self) -> bytes:
        """Stop recording and return the WAV blob.

        Capture may already have ended at the time limit; the blob then
        holds only audio recorded before the limit.

        Raises:
            RecorderError: If not recording or nothing was captured.
        """
        if self.state == RecordingState.INACTIVE:
            raise RecorderError("No recording in progress")
        with self._lock:
            self.state = RecordingState.STOPPING
        self._release()

        with self._lock:
            chunks = list(self.chunks)
        self.state = RecordingState.INACTIVE
        if not chunks:
            self.error = "No audio was captured"
            raise RecorderError(self.error)

        audio = np.concatenate(chunks)
        self.audio_blob = pcm_to_wav_bytes(audio, self.sample_rate, self.channels)
        logger.info(
            "recorder_stopped",
            seconds=self.recording_time,
            bytes=len(self.audio_blob),
        )
        return self.audio_blob

    async def wait_for_limit(self) -> None:
        """Block until the time limit is reached."""
        await self._limit_reached.wait()

    def _release(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._close_stream()

    def _close_stream(self) -> None:
        if self._stream is not None:
            try:
                self._stream.stop()
                self._stream.close()
            except Exception as e:
                logger.warning("recorder_release_failed", error=str(e))
            self._stream = None

    def reset(self) -> None:
        """Release the device and clear all buffered state."""
        self._release()
        self.state = RecordingState.INACTIVE
        with self._lock:
            self.chunks = []
        self.audio_blob = None
        self.recording_time = 0
        self.error = None
        self._limit_reached = asyncio.Event()

    async def __aenter__(self) -> "AudioRecorder":
        return self

    async def __aexit__(self, *exc) -> None:
        self.reset()
