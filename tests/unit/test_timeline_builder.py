"""Tests for duration allocation and timeline building."""

import pytest

from shortsync.models.schemas import SegmentationMode
from shortsync.services.timeline_builder import (
    MIN_SEGMENT_DURATION_SEC,
    TimelineEntry,
    allocate_durations,
    build_segment_map,
    build_timeline,
)


def test_allocate_durations_invalid_weights_count_as_one():
    """Test zero and negative weights still get a positive share."""
    durations = allocate_durations(10.0, [0, 5, -1])

    assert len(durations) == 3
    assert all(d > 0 for d in durations)
    assert sum(durations) == pytest.approx(10.0, abs=0.001)
    # Rounding residue lands on one share, so equal weights may differ by a millisecond
    assert durations[0] == pytest.approx(durations[2], abs=0.002)
    assert durations[1] > durations[0]


def test_allocate_durations_proportional():
    """Test shares follow word-count weights."""
    durations = allocate_durations(9.0, [1, 2, 3, 3])

    assert durations == [1.0, 2.0, 3.0, 3.0]


def test_allocate_durations_floor():
    """Test tiny shares are floored to the minimum segment duration."""
    durations = allocate_durations(1.0, [1, 1000])

    assert durations[0] == MIN_SEGMENT_DURATION_SEC
    assert all(d >= MIN_SEGMENT_DURATION_SEC for d in durations)


@pytest.mark.parametrize("total,weights", [(0, [1, 2]), (-3.0, [1]), (5.0, []), (float("nan"), [1])])
def test_allocate_durations_empty(total, weights):
    """Test nothing is allocated without a positive total or any weights."""
    assert allocate_durations(total, weights) == []


def test_build_timeline_is_contiguous():
    """Test each segment starts where the previous one ended."""
    entries = [
        TimelineEntry(0, "one", 1.2345, SegmentationMode.CLIP_DRIVEN),
        TimelineEntry(1, "two", 2.5, SegmentationMode.CLIP_DRIVEN),
        TimelineEntry(2, "three", 0.75, SegmentationMode.CLIP_DRIVEN),
    ]
    segments = build_timeline(entries)

    assert segments[0].start_sec == 0.0
    for prev, cur in zip(segments, segments[1:]):
        assert cur.start_sec == prev.end_sec
    assert segments[-1].end_sec == pytest.approx(4.485, abs=0.002)


def test_build_timeline_is_idempotent():
    """Test the same input always produces an equal timeline."""
    entries = [
        TimelineEntry(0, "a", 1.1, SegmentationMode.SCENE_DRIVEN, 3.0),
        TimelineEntry(1, "b", 2.2, SegmentationMode.SCENE_DRIVEN, 3.0),
    ]

    assert build_timeline(entries) == build_timeline(entries)


def test_build_segment_map(segment_map_factory):
    """Test map metadata follows the segments."""
    segment_map = segment_map_factory(["a", "b"], [1.5, 2.5], source_durations=[4.0, None])

    assert segment_map.clip_count == 2
    assert segment_map.audio_duration_sec == 4.0
    assert segment_map.total_duration_sec == 4.0
    assert segment_map.segments[0].source_clip_duration_sec == 4.0
    assert segment_map.segments[1].source_clip_duration_sec is None


def test_build_segment_map_rejects_length_mismatch():
    """Test texts and durations must line up."""
    with pytest.raises(ValueError):
        build_segment_map(SegmentationMode.CLIP_DRIVEN, ["a", "b"], [1.0], 1.0)
