"""WAV encoding for captured microphone audio."""

import io
import wave

import numpy as np


def pcm_to_wav_bytes(audio: np.ndarray, sample_rate: int = 16000, channels: int = 1) -> bytes:
    """Encode float32 samples as a 16-bit PCM WAV file.

    Args:
        audio: Float32 audio array in range [-1.0, 1.0], shape (frames,) or
            (frames, channels).
        sample_rate: Sample rate in Hz.
        channels: Number of interleaved channels.

    Returns:
        Complete WAV file contents.
    """
    clipped = np.clip(audio, -1.0, 1.0)
    pcm16 = (clipped * 32767).astype(np.int16)
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(2)  # 16-bit
        wf.setframerate(sample_rate)
        wf.writeframes(pcm16.tobytes())
    return buf.getvalue()


def wav_duration_seconds(data: bytes) -> float:
    """Duration of an in-memory WAV file."""
    with wave.open(io.BytesIO(data), "rb") as wf:
        return wf.getnframes() / float(wf.getframerate())
