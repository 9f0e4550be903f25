"""Surface statistics of a transcript."""

import re


def text_statistics(text: str) -> dict[str, float]:
    """Count words and sentences in a transcript.

    Args:
        text: Transcribed speech.

    Returns:
        Dict with word_count, sentence_count, avg_word_length.
    """
    words = text.split()
    # An empty transcript still counts as one word to keep ratios finite
    word_count = len(words) or 1
    sentences = [s for s in re.split(r"[.!?]+", text) if s.strip()]
    letters = len(re.sub(r"\s+", "", text))

    return {
        "word_count": word_count,
        "sentence_count": len(sentences),
        "avg_word_length": letters / word_count,
    }
