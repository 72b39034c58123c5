"""Shared pytest fixtures and configuration."""

import json
from pathlib import Path
from typing import Optional

import pytest

from shortsync.core.config import Settings
from shortsync.core.logging_config import get_logger
from shortsync.models.schemas import SegmentationMode, SegmentMap
from shortsync.services.timeline_builder import build_segment_map


@pytest.fixture
def settings(tmp_path):
    """Create test settings instance."""
    return Settings(workspace_root=str(tmp_path / "projects"), elevenlabs_api_key=None, openai_api_key=None)


@pytest.fixture
def logger():
    """Create test logger instance."""
    return get_logger(__name__)


def make_segment_map(
    texts: list[str],
    durations: list[float],
    mode: SegmentationMode = SegmentationMode.CLIP_DRIVEN,
    audio_duration: Optional[float] = None,
    source_durations: Optional[list[Optional[float]]] = None,
) -> SegmentMap:
    """Build a SegmentMap whose audio duration defaults to the sum of segment durations."""
    if audio_duration is None:
        audio_duration = sum(durations)
    return build_segment_map(mode, texts, durations, audio_duration, source_durations)


def write_workspace(
    workspace: Path,
    voiceover: str,
    scenes: list[dict],
    clip_count: int = 0,
    image_indices: tuple = (),
) -> Path:
    """Create a project workspace with script.json and placeholder clip files."""
    workspace.mkdir(parents=True, exist_ok=True)
    with open(workspace / "script.json", "w", encoding="utf-8") as f:
        json.dump({"voiceover": voiceover, "scenes": scenes}, f)
    for idx in range(clip_count):
        if idx in image_indices:
            (workspace / f"image_{idx}.png").write_bytes(b"fake image")
        else:
            (workspace / f"clip_{idx}.mp4").write_bytes(b"fake video")
    return workspace


@pytest.fixture
def segment_map_factory():
    """Factory for SegmentMaps built through the timeline builder."""
    return make_segment_map


@pytest.fixture
def workspace_factory(tmp_path):
    """Factory creating project workspaces under tmp_path."""

    def _create(voiceover: str, scenes: list[dict], clip_count: int = 0, image_indices: tuple = (), name: str = "demo"):
        return write_workspace(tmp_path / "projects" / name, voiceover, scenes, clip_count, image_indices)

    return _create
