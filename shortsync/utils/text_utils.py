"""Text utility functions for narration processing."""

# This module is part of shortsync.utils package

import re

SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+")
_PUNCTUATION = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """
    Normalize text for length comparisons.

    Lower-cases, strips punctuation and collapses whitespace.

    Args:
        text: Input text.

    Returns:
        Normalized text.
    """
    text = _PUNCTUATION.sub("", (text or "").lower())
    return _WHITESPACE.sub(" ", text).strip()


def normalized_length_ratio(part: str, whole: str) -> float:
    """
    Share of the normalized `whole` reconstructed by the normalized `part`, clipped to 1.0.

    Returns 0.0 when `whole` normalizes to nothing.
    """
    whole_len = len(normalize_text(whole))
    if whole_len == 0:
        return 0.0
    return min(1.0, len(normalize_text(part)) / whole_len)


def count_words(text: str) -> int:
    return len((text or "").split())


def split_sentences(text: str) -> list[str]:
    """
    Split text into sentences on '.', '!' or '?' followed by whitespace.

    Args:
        text: Input text.

    Returns:
        Non-empty sentences. Text without a boundary comes back as one sentence.
    """
    text = (text or "").strip()
    if not text:
        return []
    sentences = [s.strip() for s in SENTENCE_BOUNDARY.split(text) if s.strip()]
    if not sentences:
        return [" ".join(text.split())]
    return sentences


def estimate_spoken_duration(text: str, words_per_minute: int = 150) -> float:
    """
    Estimate the spoken duration of text in seconds.

    Args:
        text: Text to estimate duration for.
        words_per_minute: Average speaking rate (default 150 WPM).

    Returns:
        Estimated duration in seconds.
    """
    word_count = count_words(text)
    minutes = word_count / words_per_minute
    return round(minutes * 60, 3)


def truncate_to_target_duration(text: str, target_seconds: float, words_per_minute: int = 150) -> str:
    """
    Truncate text to approximately match a target spoken duration.

    Args:
        text: Text to truncate.
        target_seconds: Target duration in seconds.
        words_per_minute: Average speaking rate (default 150 WPM).

    Returns:
        Truncated text that should be close to target duration.
    """
    target_words = int((target_seconds / 60) * words_per_minute)
    words = text.split()
    if len(words) <= target_words:
        return text
    # Truncate to target word count, trying to end at sentence boundary
    truncated_words = words[:target_words]
    truncated_text = " ".join(truncated_words)
    # Try to find last sentence boundary
    last_period = truncated_text.rfind(".")
    last_exclamation = truncated_text.rfind("!")
    last_question = truncated_text.rfind("?")
    last_boundary = max(last_period, last_exclamation, last_question)
    if last_boundary > len(truncated_text) * 0.7:  # Only use if not too early
        truncated_text = truncated_text[: last_boundary + 1]
    return truncated_text
