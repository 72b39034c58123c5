"""Timeline Builder - turns per-segment durations into a contiguous timeline."""

import math
from typing import Iterable, NamedTuple, Optional

from shortsync.models.schemas import NarrationSegment, SegmentationMode, SegmentMap

MIN_SEGMENT_DURATION_SEC = 0.1


class TimelineEntry(NamedTuple):
    """One row fed to build_timeline."""

    clip_index: int
    text: str
    duration_sec: float
    source: SegmentationMode
    source_clip_duration_sec: Optional[float] = None


def allocate_durations(total: float, weights: list[float]) -> list[float]:
    """
    Split `total` seconds across segments in proportion to `weights`.

    Non-positive or non-finite weights count as 1. Each share is rounded to
    milliseconds with a 0.1s floor; the rounding residual goes to the last
    share so the list sums back to `total`.

    Args:
        total: Total duration in seconds
        weights: One weight per segment (word counts)

    Returns:
        Durations, or an empty list when `total <= 0` or there are no weights
    """
    if not weights or not math.isfinite(total) or total <= 0:
        return []

    normalized = [w if isinstance(w, (int, float)) and math.isfinite(w) and w > 0 else 1 for w in weights]
    weight_sum = sum(normalized)

    durations = [max(MIN_SEGMENT_DURATION_SEC, round(w / weight_sum * total, 3)) for w in normalized]
    residual = total - sum(durations)
    durations[-1] = max(MIN_SEGMENT_DURATION_SEC, round(durations[-1] + residual, 3))
    return durations


def build_timeline(entries: Iterable[TimelineEntry]) -> list[NarrationSegment]:
    """
    Lay entries end to end.

    Start of each segment is the end of the previous one, the first starts at 0.
    Times are rounded to milliseconds. The same entries always give the same timeline.

    Args:
        entries: Ordered (clip_index, text, duration_sec, source, source_clip_duration_sec) rows

    Returns:
        Fresh NarrationSegment list
    """
    segments = []
    cursor = 0.0
    for entry in entries:
        start = round(cursor, 3)
        end = round(start + entry.duration_sec, 3)
        segments.append(
            NarrationSegment(
                clip_index=entry.clip_index,
                text=entry.text,
                duration_sec=round(entry.duration_sec, 3),
                start_sec=start,
                end_sec=end,
                source=entry.source,
                source_clip_duration_sec=entry.source_clip_duration_sec,
            )
        )
        cursor = end
    return segments


def build_segment_map(
    mode: SegmentationMode,
    texts: list[str],
    durations: list[float],
    audio_duration_sec: float,
    source_clip_durations: Optional[list[Optional[float]]] = None,
) -> SegmentMap:
    """
    Build a SegmentMap from parallel text and duration lists.

    Args:
        mode: Segmentation mode for every segment
        texts: Narration per clip
        durations: Seconds per clip
        audio_duration_sec: Measured duration of the concatenated narration track
        source_clip_durations: Natural clip durations (None where unknown)

    Returns:
        SegmentMap
    """
    if len(texts) != len(durations):
        raise ValueError(f"{len(texts)} texts but {len(durations)} durations")
    source_clip_durations = source_clip_durations or [None] * len(texts)

    entries = [
        TimelineEntry(idx, text, duration, mode, source_clip_durations[idx])
        for idx, (text, duration) in enumerate(zip(texts, durations))
    ]
    segments = build_timeline(entries)
    return SegmentMap(
        mode=mode,
        clip_count=len(segments),
        audio_duration_sec=round(max(0.0, audio_duration_sec), 3),
        segments=segments,
    )
