"""Tests for segment artifact storage."""

import json

import pytest

from shortsync.models.schemas import BlockedPayload, CaptionCue, ScriptData
from shortsync.services.alignment_validator import AlignmentValidator
from shortsync.storage.repository import SegmentArtifactRepository


@pytest.fixture
def repository(settings, logger):
    """Create SegmentArtifactRepository instance for testing."""
    return SegmentArtifactRepository(settings, logger)


def test_segment_map_round_trip(repository, segment_map_factory, tmp_path):
    """Test the map is stored with camelCase keys and loads back equal."""
    segment_map = segment_map_factory(["One.", "Two."], [1.25, 2.0], source_durations=[3.0, None])

    path = repository.save_segment_map(segment_map, tmp_path)
    data = json.loads(path.read_text(encoding="utf-8"))

    assert path.name == "clip_segment_map.json"
    assert data["mode"] == "clip-driven"
    assert data["clipCount"] == 2
    assert data["segments"][0]["startSec"] == 0.0
    assert data["segments"][0]["sourceClipDurationSec"] == 3.0
    assert "sourceClipDurationSec" not in data["segments"][1]
    assert repository.load_segment_map(tmp_path) == segment_map


def test_alignment_report_round_trip(repository, settings, logger, segment_map_factory, tmp_path):
    """Test the report is stored self-contained and loads back."""
    segment_map = segment_map_factory(["One.", ""], [1.0, 1.0])
    report = AlignmentValidator(settings, logger).build_alignment_checks(segment_map, "One.", 2.0, 2, 2)

    path = repository.save_alignment_report(report, tmp_path)
    data = json.loads(path.read_text(encoding="utf-8"))

    assert data["passed"] is False
    assert data["reasons"] == ["empty_segment_text"]
    assert data["checks"]["emptySegmentCount"] == 1
    assert len(data["segments"]) == 2
    assert repository.load_alignment_report(tmp_path) == report


def test_missing_or_invalid_artifacts_load_as_none(repository, tmp_path):
    """Test absent and corrupt files are treated as not found."""
    assert repository.load_segment_map(tmp_path) is None

    (tmp_path / "segment_alignment.json").write_text("{not json", encoding="utf-8")
    assert repository.load_alignment_report(tmp_path) is None


def test_blocked_payload_lifecycle(repository, tmp_path):
    """Test the waiting marker is written and cleared."""
    payload = BlockedPayload(
        reason="insufficient_clips",
        reasons=["insufficient_clips"],
        hint="Upload one more clip: clip_2.mp4.",
        required_files=["clip_0.mp4", "clip_1.mp4", "clip_2.mp4"],
    )

    path = repository.save_blocked_payload(payload, tmp_path)
    assert json.loads(path.read_text(encoding="utf-8"))["requiredFiles"][-1] == "clip_2.mp4"
    assert repository.load_blocked_payload(tmp_path) == payload

    repository.clear_blocked_payload(tmp_path)
    assert not path.exists()
    repository.clear_blocked_payload(tmp_path)


def test_save_caption_cues(repository, tmp_path):
    """Test captions are written as JSON and SRT."""
    cues = [CaptionCue(start_sec=0.0, end_sec=1.0, text="HELLO", clip_index=0)]

    srt_path = repository.save_caption_cues(cues, tmp_path)

    assert srt_path.read_text(encoding="utf-8").startswith("1\n00:00:00,000 --> 00:00:01,000\nHELLO")
    data = json.loads((tmp_path / "captions.json").read_text(encoding="utf-8"))
    assert data == [{"startSec": 0.0, "endSec": 1.0, "text": "HELLO", "clipIndex": 0}]


def test_save_clip_prompts(repository, tmp_path):
    """Test one prompt row per scene with its expected filename."""
    script = ScriptData(voiceover="", scenes=[{"prompt": "a foggy pier"}, {"prompt": "a lamp flickers"}])

    path = repository.save_clip_prompts(script, tmp_path)

    assert json.loads(path.read_text(encoding="utf-8")) == [
        {"index": 0, "prompt": "a foggy pier", "filename": "clip_0.mp4"},
        {"index": 1, "prompt": "a lamp flickers", "filename": "clip_1.mp4"},
    ]


def test_project_paths(repository, settings):
    """Test workspace and output directories derive from the project id."""
    assert repository.workspace_for("demo").name == "demo"
    assert repository.output_dir_for("demo") == repository.workspace_for("demo") / settings.output_subdir
