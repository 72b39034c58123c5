"""Tests for Alignment Validator."""

import pytest

from shortsync.core.config import AlignmentPolicy
from shortsync.core.exceptions import AlignmentBlockedError
from shortsync.models.schemas import SegmentationMode
from shortsync.services.alignment_validator import AlignmentValidator, stretch_ratio


@pytest.fixture
def validator(settings, logger):
    """Create AlignmentValidator instance for testing."""
    return AlignmentValidator(settings, logger)


def test_clean_map_passes(validator, segment_map_factory):
    """Test a well-formed clip-driven map passes every check."""
    segment_map = segment_map_factory(
        ["The first line.", "The second line."], [2.0, 2.0], source_durations=[3.0, 3.0]
    )

    report = validator.build_alignment_checks(segment_map, "The first line. The second line.", 4.1, 2, 2)

    assert report.passed
    assert report.reasons == []
    assert report.hint is None
    assert report.required_files == []
    assert report.checks.coverage_ratio == 1.0
    assert report.checks.duration_delta_sec == pytest.approx(0.1)
    validator.ensure_alignment_or_block(report, scene_count=2)


def test_empty_segment_blocks_with_required_files(validator, segment_map_factory):
    """Test an empty clip-driven segment blocks and lists every required clip."""
    segment_map = segment_map_factory(["a", "b", "", "d", "e"], [1.0] * 5)

    report = validator.build_alignment_checks(segment_map, "a b d e", 5.0, 5, 5, scene_count=7)

    assert not report.passed
    assert report.reasons == ["empty_segment_text"]
    assert report.checks.empty_segment_count == 1

    with pytest.raises(AlignmentBlockedError) as exc_info:
        validator.ensure_alignment_or_block(report, scene_count=7)

    error = exc_info.value
    assert error.reason == "empty_segment_text"
    assert error.required_files == [f"clip_{i}.mp4" for i in range(7)]
    assert report.required_files == error.required_files
    assert error.payload.hint == report.hint
    assert error.report is report


def test_empty_scene_text_hint_in_scene_driven_mode(validator, segment_map_factory):
    """Test scene-driven empty text asks for voiceover on every scene."""
    segment_map = segment_map_factory(["Scene one.", ""], [1.5, 1.5], mode=SegmentationMode.SCENE_DRIVEN)

    report = validator.build_alignment_checks(segment_map, "Scene one.", 3.0, 2, 2)

    assert report.reasons == ["empty_segment_text"]
    assert report.hint == "Ensure every scene has voiceover text."


def test_stretch_ratio_names_segment(validator, segment_map_factory):
    """Test a clip slowed past the short-form limit is reported by index."""
    segment_map = segment_map_factory(["Quick.", "A much longer sentence here."], [2.0, 9.0], source_durations=[3.0, 3.0])

    report = validator.build_alignment_checks(segment_map, "Quick. A much longer sentence here.", 11.0, 2, 2)

    assert report.reasons == ["stretch_ratio_too_high:segment_1"]
    assert report.checks.max_stretch_ratio == 3.0
    assert report.checks.stretch_segment_index == 1
    assert "clip_1.mp4" in report.hint


def test_stretch_ratio_relaxed_for_long_form(settings, logger, segment_map_factory):
    """Test the long-form preset allows slower clips and larger timing drift."""
    validator = AlignmentValidator(settings, logger, policy=AlignmentPolicy(video_format="long"))
    segment_map = segment_map_factory(["Quick.", "A much longer sentence here."], [2.0, 9.0], source_durations=[3.0, 3.0])

    report = validator.build_alignment_checks(segment_map, "Quick. A much longer sentence here.", 12.0, 2, 2)

    assert report.passed


def test_coverage_only_fails_clip_driven(validator, segment_map_factory):
    """Test dropped narration fails clip-driven maps but is tolerated scene-driven."""
    full = "The quick brown fox jumps."

    clip_map = segment_map_factory(["the quick brown fox"], [2.0])
    clip_report = validator.build_alignment_checks(clip_map, full, 2.0, 1, 1)
    assert clip_report.reasons == ["coverage_too_low"]
    assert clip_report.checks.coverage_ratio < 0.98

    scene_map = segment_map_factory(["the quick brown fox"], [2.0], mode=SegmentationMode.SCENE_DRIVEN)
    scene_report = validator.build_alignment_checks(scene_map, full, 2.0, 1, 1)
    assert scene_report.passed
    assert scene_report.checks.coverage_ratio == clip_report.checks.coverage_ratio


def test_duration_delta_thresholds(validator, segment_map_factory):
    """Test a 1s drift fails short clip-driven maps but not scene-driven ones."""
    texts = ["One sentence.", "Another sentence."]

    clip_map = segment_map_factory(texts, [5.0, 5.0])
    assert validator.build_alignment_checks(clip_map, " ".join(texts), 11.0, 2, 2).reasons == [
        "duration_delta_too_high"
    ]

    scene_map = segment_map_factory(texts, [5.0, 5.0], mode=SegmentationMode.SCENE_DRIVEN)
    assert validator.build_alignment_checks(scene_map, " ".join(texts), 11.0, 2, 2).passed


def test_insufficient_clips(validator, segment_map_factory):
    """Test fewer clips than scenes blocks with the missing filenames in the hint."""
    segment_map = segment_map_factory(["First half.", "Second half."], [2.0, 2.0])

    report = validator.build_alignment_checks(segment_map, "First half. Second half.", 4.0, 2, 4)

    assert report.reasons == ["insufficient_clips"]
    assert report.hint == "Upload 2 more clips: clip_2.mp4, clip_3.mp4."
    assert report.required_files == ["clip_0.mp4", "clip_1.mp4", "clip_2.mp4", "clip_3.mp4"]


def test_reasons_keep_check_order(validator, segment_map_factory):
    """Test every failing check is reported, primary reason first."""
    segment_map = segment_map_factory(["half of it", ""], [1.0, 1.0])

    report = validator.build_alignment_checks(segment_map, "half of it and then the whole rest of it", 5.0, 2, 3)

    assert report.reasons == [
        "coverage_too_low",
        "duration_delta_too_high",
        "empty_segment_text",
        "insufficient_clips",
    ]
    assert report.primary_reason == "coverage_too_low"


def test_stretch_ratio_unknown_source(segment_map_factory):
    """Test clips without a known duration are never considered stretched."""
    segment_map = segment_map_factory(["text"], [4.0])

    assert stretch_ratio(segment_map.segments[0]) == 1.0


def test_scene_driven_skips_stretch_check(validator, segment_map_factory):
    """Test scene-driven maps may slow a clip past the short-form limit."""
    texts = ["Quick.", "A much longer sentence here."]
    segment_map = segment_map_factory(
        texts, [2.0, 9.0], mode=SegmentationMode.SCENE_DRIVEN, source_durations=[3.0, 3.0]
    )

    report = validator.build_alignment_checks(segment_map, " ".join(texts), 11.0, 2, 2)

    assert report.passed
    assert report.checks.max_stretch_ratio == 3.0


def test_scene_driven_skips_clip_sufficiency(validator, segment_map_factory):
    """Test scene-driven maps pass with fewer clips than scenes."""
    texts = ["Scene one.", "Scene two.", "Scene three."]
    segment_map = segment_map_factory(texts, [1.0, 1.0, 1.0], mode=SegmentationMode.SCENE_DRIVEN)

    report = validator.build_alignment_checks(segment_map, " ".join(texts), 3.0, 1, 3)

    assert report.passed
    assert report.checks.available_clip_count == 1
    assert report.checks.required_clip_count == 3


def test_long_audio_switches_short_format_to_long_form(settings, logger, segment_map_factory):
    """Test narration of three minutes or more gets the long-form limits in short format."""
    validator = AlignmentValidator(settings, logger, policy=AlignmentPolicy(video_format="short"))
    texts = ["An opening line.", "Then the rest of a long story."]

    long_map = segment_map_factory(texts, [20.0, 180.0], source_durations=[10.0, 60.0])
    long_report = validator.build_alignment_checks(long_map, " ".join(texts), 201.0, 2, 2)
    assert long_report.passed
    assert long_report.checks.duration_delta_sec == pytest.approx(1.0)
    assert long_report.checks.max_stretch_ratio == 3.0

    short_map = segment_map_factory(texts, [20.0, 150.0], source_durations=[10.0, 50.0])
    short_report = validator.build_alignment_checks(short_map, " ".join(texts), 171.0, 2, 2)
    assert short_report.reasons == ["duration_delta_too_high", "stretch_ratio_too_high:segment_1"]


def test_report_and_payload_list_the_same_files(validator, segment_map_factory):
    """Test a blocked attempt persists one required-files list, sized by the script."""
    segment_map = segment_map_factory(["One.", "", "Three."], [1.0, 1.0, 1.0])

    report = validator.build_alignment_checks(segment_map, "One. Three.", 3.0, 2, 2, scene_count=2)
    with pytest.raises(AlignmentBlockedError) as exc_info:
        validator.ensure_alignment_or_block(report, scene_count=2)

    assert report.required_files == ["clip_0.mp4", "clip_1.mp4"]
    assert exc_info.value.required_files == report.required_files
