"""Text Segmenter - splits continuous narration into one text segment per clip."""

import math
from typing import Any, Optional

from shortsync.core.config import SegmentationPolicy, Settings
from shortsync.utils.text_utils import count_words, split_sentences


def split_words_evenly(text: str, segment_count: int) -> list[str]:
    """
    Distribute words across `segment_count` buckets.

    Each bucket takes ceil(remaining words / remaining buckets), so every bucket
    gets at least one word while words remain; the last bucket takes the rest.

    Args:
        text: Narration text
        segment_count: Number of buckets

    Returns:
        `segment_count` strings (trailing ones empty when there are fewer words than buckets)
    """
    if segment_count <= 0:
        return []
    words = (text or "").split()
    buckets: list[str] = []
    cursor = 0
    for slot in range(segment_count):
        remaining_words = len(words) - cursor
        remaining_slots = segment_count - slot
        if slot == segment_count - 1:
            take = remaining_words
        else:
            take = math.ceil(remaining_words / remaining_slots) if remaining_words > 0 else 0
        buckets.append(" ".join(words[cursor : cursor + take]))
        cursor += take
    return buckets


class TextSegmenter:
    """Splits freeform narration into N ordered segments along sentence boundaries."""

    def __init__(self, settings: Settings, logger: Any, policy: Optional[SegmentationPolicy] = None):
        """
        Initialize the text segmenter.

        Args:
            settings: Application settings
            logger: Logger instance
            policy: Optional explicit policy (defaults to values from settings)
        """
        self.settings = settings
        self.logger = logger
        self.policy = policy or SegmentationPolicy.from_settings(settings)

    def split_narration(self, text: str, segment_count: int) -> list[str]:
        """
        Split narration into `segment_count` segments.

        Sentences are grouped greedily by word-count weight. When there are not
        more sentences than segments, words are split evenly instead.

        Args:
            text: Full narration
            segment_count: Number of segments (available clip count)

        Returns:
            Exactly `segment_count` strings in narration order
        """
        if segment_count <= 0:
            return []

        if not (text or "").strip():
            self.logger.warning(f"Narration is empty; returning {segment_count} empty segments")
            return [""] * segment_count

        sentences = split_sentences(text)
        if len(sentences) <= segment_count:
            self.logger.debug(
                f"{len(sentences)} sentence(s) for {segment_count} segments, splitting by word count"
            )
            return split_words_evenly(" ".join(sentences), segment_count)

        groups = self._group_sentences(sentences, segment_count)

        if len(groups) < segment_count:
            self.logger.info(
                f"Sentence grouping produced {len(groups)}/{segment_count} segments, splitting by word count"
            )
            return split_words_evenly(" ".join(sentences), segment_count)

        if len(groups) > segment_count:
            head = groups[: segment_count - 1]
            tail = [sentence for group in groups[segment_count - 1 :] for sentence in group]
            groups = head + [tail]

        segments = [" ".join(group) for group in groups]
        self.logger.info(
            f"Split {len(sentences)} sentences into {len(segments)} segments "
            f"(words per segment: {[count_words(s) for s in segments]})"
        )
        return segments

    def _group_sentences(self, sentences: list[str], segment_count: int) -> list[list[str]]:
        weights = [max(1, count_words(s)) for s in sentences]
        target = sum(weights) / segment_count
        fill_threshold = target * self.policy.greedy_fill_ratio

        groups: list[list[str]] = []
        current: list[str] = []
        current_weight = 0

        for idx, sentence in enumerate(sentences):
            # The final segment absorbs everything left
            if len(groups) == segment_count - 1:
                current.append(sentence)
                continue

            if current:
                sentences_left = len(sentences) - idx
                slots_after_current = segment_count - len(groups) - 1
                can_close = sentences_left >= slots_after_current
                must_close = sentences_left == slots_after_current
                overshoots = current_weight + weights[idx] > target
                filled = current_weight >= fill_threshold
                if must_close or (can_close and (overshoots or filled)):
                    groups.append(current)
                    current = []
                    current_weight = 0

            current.append(sentence)
            current_weight += weights[idx]

        if current:
            groups.append(current)
        return groups
