"""Pydantic models and schemas for narration-to-clip alignment."""

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


# ============================================================================
# Enums
# ============================================================================


class SegmentationMode(str, Enum):
    """Which allocation strategy produced a timeline."""

    SCENE_DRIVEN = "scene-driven"
    CLIP_DRIVEN = "clip-driven"


class ClipKind(str, Enum):
    """Visual source for one clip index."""

    VIDEO = "video"
    IMAGE = "image"


class CamelModel(BaseModel):
    """Base for models persisted with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Script Models
# ============================================================================


class ScriptScene(BaseModel):
    """One visual scene from the generated script."""

    prompt: str = Field(..., description="Visual prompt used to produce the clip")
    duration: Optional[float] = Field(default=None, description="Requested clip length in seconds")
    narration: Optional[str] = Field(default=None, description="Voiceover text authored for this scene")

    @property
    def has_narration(self) -> bool:
        return bool(self.narration and self.narration.strip())


class ScriptData(BaseModel):
    """Script produced upstream: full voiceover plus scene list."""

    voiceover: str = Field(default="", description="Full narration text")
    scenes: list[ScriptScene] = Field(..., min_length=1, description="Scenes, one clip per scene")

    @property
    def scene_count(self) -> int:
        return len(self.scenes)


# ============================================================================
# Clip Models
# ============================================================================


class ClipAsset(BaseModel):
    """A clip (or still-image stand-in) discovered in the workspace."""

    index: int = Field(..., ge=0, description="Clip index")
    path: Path = Field(..., description="File path")
    kind: ClipKind = Field(default=ClipKind.VIDEO, description="Video clip or still image")
    source_duration_sec: Optional[float] = Field(
        default=None, description="Natural duration of a video clip (None for images or unreadable files)"
    )


class ClipInventory(BaseModel):
    """Contiguous clips available for one assembly attempt."""

    clips: list[ClipAsset] = Field(default_factory=list, description="Clips ordered by index")

    @property
    def count(self) -> int:
        return len(self.clips)

    def truncated(self, limit: int) -> "ClipInventory":
        return ClipInventory(clips=self.clips[:limit])


class ModeDecision(BaseModel):
    """Outcome of segmentation mode selection."""

    mode: SegmentationMode
    clip_count: int = Field(..., ge=0, description="Clips the timeline will use")
    truncated_clip_count: int = Field(default=0, ge=0, description="Extra clips dropped beyond scene count")
    reason: str = Field(default="", description="Why this mode was chosen")


# ============================================================================
# Timeline Models
# ============================================================================


class NarrationSegment(CamelModel):
    """One unit of narration bound to exactly one clip."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    clip_index: int = Field(..., ge=0, description="Index of the clip this segment plays over")
    text: str = Field(..., description="Narration spoken during this segment")
    duration_sec: float = Field(..., gt=0, description="Seconds this segment occupies")
    start_sec: float = Field(..., ge=0, description="Timeline start")
    end_sec: float = Field(..., description="Timeline end")
    source: SegmentationMode = Field(..., description="Strategy that produced this segment")
    source_clip_duration_sec: Optional[float] = Field(
        default=None, description="Natural duration of the underlying clip, used for stretch checks only"
    )


class SegmentMap(CamelModel):
    """The full, persisted timeline for one video."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    mode: SegmentationMode
    clip_count: int = Field(..., ge=0)
    audio_duration_sec: float = Field(..., ge=0)
    segments: list[NarrationSegment] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_segments(self) -> "SegmentMap":
        if self.clip_count != len(self.segments):
            raise ValueError(f"clip_count {self.clip_count} does not match {len(self.segments)} segments")
        for expected, segment in enumerate(self.segments):
            if segment.clip_index != expected:
                raise ValueError(f"segment clip indices must be contiguous from 0, got {segment.clip_index} at {expected}")
            if segment.source != self.mode:
                raise ValueError(f"segment {expected} was produced by {segment.source.value}, map is {self.mode.value}")
        return self

    @property
    def total_duration_sec(self) -> float:
        return round(sum(s.duration_sec for s in self.segments), 3)


# ============================================================================
# Alignment Models
# ============================================================================


class AlignmentChecks(CamelModel):
    """Measured values behind an alignment verdict."""

    coverage_ratio: float = Field(..., ge=0.0, le=1.0)
    duration_delta_sec: float = Field(..., ge=0.0)
    empty_segment_count: int = Field(..., ge=0)
    available_clip_count: int = Field(..., ge=0)
    required_clip_count: int = Field(..., ge=0)
    max_stretch_ratio: float = Field(..., ge=1.0)
    stretch_segment_index: Optional[int] = Field(default=None)


class AlignmentReport(CamelModel):
    """Pass/fail verdict over a SegmentMap, self-contained for diagnosis."""

    mode: SegmentationMode
    passed: bool
    reasons: list[str] = Field(default_factory=list, description="Reason codes, empty iff passed")
    hint: Optional[str] = Field(default=None, description="Remediation for the primary reason")
    checks: AlignmentChecks
    required_files: list[str] = Field(default_factory=list, description="Clip filenames still needed")
    segments: list[NarrationSegment] = Field(default_factory=list)

    @property
    def primary_reason(self) -> Optional[str]:
        return self.reasons[0] if self.reasons else None


class BlockedPayload(CamelModel):
    """Structured payload carried by a blocked alignment."""

    reason: str
    reasons: list[str] = Field(default_factory=list)
    hint: Optional[str] = None
    required_files: list[str] = Field(default_factory=list)


# ============================================================================
# Caption Models
# ============================================================================


class CaptionCue(CamelModel):
    """One on-screen subtitle unit."""

    start_sec: float = Field(..., ge=0)
    end_sec: float = Field(..., ge=0)
    text: str
    clip_index: int = Field(..., ge=0, description="Segment this cue belongs to")


# ============================================================================
# Synthesis / Assembly Models
# ============================================================================


class SynthesizedSegment(BaseModel):
    """Audio produced for one narration segment."""

    index: int = Field(..., ge=0)
    path: Path
    duration_sec: float = Field(..., gt=0, description="Measured duration of the audio file")


class AssemblyResult(BaseModel):
    """Outcome of one approved assembly attempt."""

    project_id: str
    segment_map: SegmentMap
    report: AlignmentReport
    caption_count: int = Field(default=0, ge=0)
    narration_path: Optional[Path] = None
    manifest_path: Optional[Path] = None
    output_dir: Path
