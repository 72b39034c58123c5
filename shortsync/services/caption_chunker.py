"""Caption Chunker - derives short subtitle cues from an approved timeline."""

import re
from datetime import timedelta
from typing import Any, Optional

import srt

from shortsync.core.config import CaptionPolicy, Settings
from shortsync.models.schemas import CaptionCue, NarrationSegment, SegmentMap

_DASHES = re.compile(r"[-\u2010-\u2015]+")


def cues_to_srt(cues: list[CaptionCue]) -> str:
    """Render cues as an SRT document."""
    subtitles = [
        srt.Subtitle(
            index=number,
            start=timedelta(seconds=cue.start_sec),
            end=timedelta(seconds=cue.end_sec),
            content=cue.text,
        )
        for number, cue in enumerate(cues, 1)
    ]
    return srt.compose(subtitles)


class CaptionChunker:
    """Splits narration segments into small, time-proportional caption cues."""

    def __init__(self, settings: Settings, logger: Any, policy: Optional[CaptionPolicy] = None):
        """
        Initialize the caption chunker.

        Args:
            settings: Application settings
            logger: Logger instance
            policy: Optional explicit caption policy (defaults to values from settings)
        """
        self.settings = settings
        self.logger = logger
        self.policy = policy or CaptionPolicy.from_settings(settings)

    def build_caption_cues(self, segment_map: SegmentMap) -> list[CaptionCue]:
        """
        Build caption cues for the whole timeline.

        Cues of one segment exactly span the segment. Once the cue cap would be
        exceeded, the remaining segments are left uncaptioned.

        Args:
            segment_map: Approved timeline

        Returns:
            Ordered caption cues
        """
        cues: list[CaptionCue] = []
        for segment in segment_map.segments:
            chunks = self._chunk_words(segment.text)
            if not chunks:
                continue
            if len(cues) + len(chunks) > self.policy.max_total_cues:
                self.logger.warning(
                    f"Caption cap of {self.policy.max_total_cues} cues reached at segment "
                    f"{segment.clip_index}; remaining segments are not captioned"
                )
                break
            cues.extend(self._time_chunks(segment, chunks))

        self.logger.info(f"Built {len(cues)} caption cues for {segment_map.clip_count} segments")
        return cues

    def _chunk_words(self, text: str) -> list[str]:
        text = _DASHES.sub(" ", text or "")
        # Only trailing stops are dropped so decimals like "3.5" stay whole
        words = [word.rstrip(".!?") for word in text.split()]
        words = [word for word in words if word]
        size = self.policy.words_per_cue
        chunks = [" ".join(words[i : i + size]) for i in range(0, len(words), size)]
        if self.policy.uppercase:
            chunks = [chunk.upper() for chunk in chunks]
        return chunks

    def _time_chunks(self, segment: NarrationSegment, chunks: list[str]) -> list[CaptionCue]:
        span = segment.end_sec - segment.start_sec
        floor = min(self.policy.min_cue_duration_sec, span / len(chunks))
        weights = [max(1, len(chunk)) for chunk in chunks]
        spare = span - floor * len(chunks)
        durations = [floor + spare * w / sum(weights) for w in weights]

        cues = []
        start = segment.start_sec
        elapsed = 0.0
        for idx, (chunk, duration) in enumerate(zip(chunks, durations)):
            elapsed += duration
            if idx == len(chunks) - 1:
                end = segment.end_sec
            else:
                end = round(segment.start_sec + elapsed, 3)
            cues.append(CaptionCue(start_sec=start, end_sec=end, text=chunk, clip_index=segment.clip_index))
            start = end
        return cues
