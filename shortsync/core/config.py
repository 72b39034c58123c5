"""Application configuration using pydantic-settings."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be configured via environment variables or a .env file.
    See .env.example for a template.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================================================
    # Application Settings
    # ========================================================================
    app_name: str = Field(default="ShortSync", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR)")
    log_file: Optional[str] = Field(default=None, description="Optional log file path (rotated, zip-compressed)")

    # ========================================================================
    # Workspace Settings
    # ========================================================================
    workspace_root: str = Field(
        default="projects",
        description="Root directory holding one workspace per project (script.json, clip_<i>.mp4, audio)",
    )
    output_subdir: str = Field(
        default="output",
        description="Sub-directory of a project workspace where artifacts are written",
    )

    # ========================================================================
    # TTS (Text-to-Speech) Settings
    # ========================================================================
    elevenlabs_api_key: Optional[str] = Field(default=None, description="ElevenLabs API key")
    elevenlabs_voice_id: Optional[str] = Field(default=None, description="ElevenLabs voice ID")
    elevenlabs_model_id: str = Field(default="eleven_multilingual_v2", description="ElevenLabs model ID")
    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API key")
    openai_tts_voice: str = Field(default="onyx", description="OpenAI TTS voice name")
    tts_timeout_seconds: int = Field(default=60, description="HTTP timeout for a single TTS request")
    tts_max_attempts: int = Field(
        default=2,
        description="Attempts per narration segment before the whole batch is abandoned (default: 2, one retry)",
    )
    per_segment_synthesis: bool = Field(
        default=True,
        description="Synthesize narration one segment at a time and time the timeline from measured segment audio",
    )
    words_per_minute: int = Field(
        default=150, description="Speaking rate used when narration length has to be estimated"
    )

    # ========================================================================
    # Alignment Thresholds
    # ========================================================================
    video_format: Literal["short", "long"] = Field(
        default="short", description="Format preset: 'short' (vertical short) or 'long' (multi-minute)"
    )
    min_coverage_ratio: float = Field(
        default=0.98, description="Minimum share of the narration that clip-driven segments must reconstruct"
    )
    max_duration_delta_short_sec: float = Field(
        default=0.35, description="Allowed |sum of segments - narration track| for short-form clip-driven runs"
    )
    max_duration_delta_relaxed_sec: float = Field(
        default=1.25, description="Allowed duration delta for scene-driven and long-form runs"
    )
    max_stretch_ratio_short: float = Field(
        default=1.8, description="Maximum slow-motion stretch of a source clip for short-form content"
    )
    max_stretch_ratio_long: float = Field(
        default=4.5, description="Maximum slow-motion stretch of a source clip for long-form content"
    )
    long_form_min_audio_sec: float = Field(
        default=180.0, description="Narration length from which a clip-driven run is treated as long-form"
    )

    # ========================================================================
    # Segmentation Settings
    # ========================================================================
    scene_narration_min_coverage: float = Field(
        default=0.90,
        description="Share of the full voiceover that per-scene narration must cover for scene-driven mode",
    )
    greedy_fill_ratio: float = Field(
        default=0.85, description="Fraction of the per-segment target weight at which a segment is closed"
    )

    # ========================================================================
    # Caption Settings
    # ========================================================================
    captions_enabled: bool = Field(default=True, description="Generate caption cues for the final video")
    caption_words_per_cue: int = Field(default=4, description="Maximum words shown in one caption cue")
    caption_min_cue_duration_sec: float = Field(
        default=0.25, description="Minimum on-screen time of a caption cue"
    )
    caption_max_total_cues: int = Field(
        default=400, description="Hard cap on caption cues for a whole video"
    )
    caption_uppercase: bool = Field(default=True, description="Display captions in upper case")

    # ========================================================================
    # Video Rendering Settings
    # ========================================================================
    video_width: int = Field(default=1080, description="Output width in pixels (default: 1080 for vertical format)")
    video_height: int = Field(default=1920, description="Output height in pixels (default: 1920 for vertical format)")
    video_fps: int = Field(default=30, description="Frame rate of synthetic still-image clips")
    image_zoom_amount: float = Field(
        default=0.10, description="Zoom-in applied over a still-image clip (0.10 = 100% to 110%)"
    )
    auto_shorten_narration: bool = Field(
        default=False,
        description="Shorten over-long clip-driven narration and retry once when alignment blocks on timing",
    )


class AlignmentPolicy(BaseModel):
    """Alignment thresholds, fixed for the lifetime of one validator."""

    model_config = ConfigDict(frozen=True)

    video_format: Literal["short", "long"] = "short"
    min_coverage_ratio: float = 0.98
    max_duration_delta_short_sec: float = 0.35
    max_duration_delta_relaxed_sec: float = 1.25
    max_stretch_ratio_short: float = 1.8
    max_stretch_ratio_long: float = 4.5
    long_form_min_audio_sec: float = 180.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "AlignmentPolicy":
        return cls(
            video_format=settings.video_format,
            min_coverage_ratio=settings.min_coverage_ratio,
            max_duration_delta_short_sec=settings.max_duration_delta_short_sec,
            max_duration_delta_relaxed_sec=settings.max_duration_delta_relaxed_sec,
            max_stretch_ratio_short=settings.max_stretch_ratio_short,
            max_stretch_ratio_long=settings.max_stretch_ratio_long,
            long_form_min_audio_sec=settings.long_form_min_audio_sec,
        )

    def is_long_form(self, audio_duration_sec: float) -> bool:
        return self.video_format == "long" or audio_duration_sec >= self.long_form_min_audio_sec


class SegmentationPolicy(BaseModel):
    """Thresholds used by the mode selector and text segmenter."""

    model_config = ConfigDict(frozen=True)

    scene_narration_min_coverage: float = 0.90
    greedy_fill_ratio: float = 0.85

    @classmethod
    def from_settings(cls, settings: Settings) -> "SegmentationPolicy":
        return cls(
            scene_narration_min_coverage=settings.scene_narration_min_coverage,
            greedy_fill_ratio=settings.greedy_fill_ratio,
        )


class CaptionPolicy(BaseModel):
    """Caption chunking parameters."""

    model_config = ConfigDict(frozen=True)

    words_per_cue: int = Field(default=4, ge=1)
    min_cue_duration_sec: float = Field(default=0.25, ge=0.0)
    max_total_cues: int = Field(default=400, ge=0)
    uppercase: bool = True

    @classmethod
    def from_settings(cls, settings: Settings) -> "CaptionPolicy":
        return cls(
            words_per_cue=settings.caption_words_per_cue,
            min_cue_duration_sec=settings.caption_min_cue_duration_sec,
            max_total_cues=settings.caption_max_total_cues,
            uppercase=settings.caption_uppercase,
        )


# Global settings instance
settings = Settings()
