"""Tests for Clip Discovery."""

from unittest.mock import MagicMock

import pytest

from shortsync.core.exceptions import ClipContiguityError
from shortsync.models.schemas import ClipKind
from shortsync.services.clip_discovery import ClipDiscovery


@pytest.fixture
def mock_probe():
    """Probe reporting 4 seconds for every file."""
    probe = MagicMock()
    probe.get_duration.return_value = 4.0
    return probe


@pytest.fixture
def discovery(settings, logger, mock_probe):
    """Create ClipDiscovery instance with a mocked probe."""
    return ClipDiscovery(settings, logger, media_probe=mock_probe)


def test_discovers_contiguous_clips(discovery, tmp_path):
    """Test clips are collected from index 0 with probed durations."""
    for idx in range(3):
        (tmp_path / f"clip_{idx}.mp4").write_bytes(b"x")

    inventory = discovery.discover(tmp_path)

    assert inventory.count == 3
    assert [c.index for c in inventory.clips] == [0, 1, 2]
    assert all(c.kind == ClipKind.VIDEO for c in inventory.clips)
    assert all(c.source_duration_sec == 4.0 for c in inventory.clips)


def test_image_stands_in_for_missing_clip(discovery, tmp_path, mock_probe):
    """Test image_<i> fills an index that has no video."""
    (tmp_path / "clip_0.mp4").write_bytes(b"x")
    (tmp_path / "image_1.jpg").write_bytes(b"x")

    inventory = discovery.discover(tmp_path)

    assert inventory.count == 2
    assert inventory.clips[1].kind == ClipKind.IMAGE
    assert inventory.clips[1].source_duration_sec is None
    mock_probe.get_duration.assert_called_once()


def test_video_wins_over_image(discovery, tmp_path):
    """Test the video is used when both files exist for one index."""
    (tmp_path / "clip_0.mp4").write_bytes(b"x")
    (tmp_path / "image_0.png").write_bytes(b"x")

    inventory = discovery.discover(tmp_path)

    assert inventory.clips[0].kind == ClipKind.VIDEO


def test_unreadable_clip_has_unknown_duration(discovery, tmp_path, mock_probe):
    """Test a zero probe result leaves the natural duration unknown."""
    mock_probe.get_duration.return_value = 0.0
    (tmp_path / "clip_0.mp4").write_bytes(b"x")

    inventory = discovery.discover(tmp_path)

    assert inventory.clips[0].source_duration_sec is None


def test_gap_raises_contiguity_error(discovery, tmp_path):
    """Test clips past a missing index are rejected."""
    (tmp_path / "clip_0.mp4").write_bytes(b"x")
    (tmp_path / "clip_2.mp4").write_bytes(b"x")

    with pytest.raises(ClipContiguityError) as exc_info:
        discovery.discover(tmp_path)

    assert exc_info.value.gap_index == 1
    assert exc_info.value.stray_files == ["clip_2.mp4"]


def test_empty_workspace(discovery, tmp_path):
    """Test a workspace without clips yields an empty inventory."""
    (tmp_path / "script.json").write_text("{}")

    assert discovery.discover(tmp_path).count == 0


def test_upper_case_extensions_are_found(discovery, tmp_path):
    """Test clip and image names match regardless of extension case."""
    (tmp_path / "clip_0.MP4").write_bytes(b"x")
    (tmp_path / "image_1.PNG").write_bytes(b"x")
    (tmp_path / "clip_2.mp4").write_bytes(b"x")

    inventory = discovery.discover(tmp_path)

    assert inventory.count == 3
    assert inventory.clips[0].kind == ClipKind.VIDEO
    assert inventory.clips[0].path.name == "clip_0.MP4"
    assert inventory.clips[1].kind == ClipKind.IMAGE
    assert inventory.clips[1].path.name == "image_1.PNG"


def test_image_extension_preference(discovery, tmp_path):
    """Test jpg is preferred over png when both stills exist for one index."""
    (tmp_path / "image_0.png").write_bytes(b"x")
    (tmp_path / "image_0.JPG").write_bytes(b"x")

    inventory = discovery.discover(tmp_path)

    assert inventory.clips[0].path.name == "image_0.JPG"
