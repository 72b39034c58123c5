"""Compositor hand-off - describes the approved timeline for an external video compositor."""

from pathlib import Path
from typing import Any, Optional

from shortsync.core.config import Settings
from shortsync.models.schemas import ClipAsset, SegmentMap
from shortsync.utils.io_utils import write_json

MANIFEST_FILENAME = "assembly_manifest.json"


class VideoCompositor:
    """
    Writes the assembly manifest consumed by the muxing step.

    Each entry names the clip file to play and the exact duration it must be
    trimmed or time-stretched to. Encoding itself happens outside this project.
    """

    def __init__(self, settings: Settings, logger: Any):
        """
        Initialize the compositor hand-off.

        Args:
            settings: Application settings
            logger: Logger instance
        """
        self.settings = settings
        self.logger = logger

    def compose(
        self,
        segment_map: SegmentMap,
        clip_paths: dict[int, Path],
        clips: list[ClipAsset],
        narration_path: Optional[Path],
        captions_path: Optional[Path],
        output_dir: Path,
    ) -> Path:
        """
        Write assembly_manifest.json for an approved segment map.

        Args:
            segment_map: Approved timeline
            clip_paths: Playable clip per index (image stand-ins already rendered)
            clips: Discovered clips (for kind and natural duration)
            narration_path: Concatenated narration track
            captions_path: SRT caption track, if captions are enabled
            output_dir: Artifact directory

        Returns:
            Manifest path
        """
        clips_by_index = {clip.index: clip for clip in clips}
        entries = []
        for segment in segment_map.segments:
            clip = clips_by_index.get(segment.clip_index)
            source_duration = segment.source_clip_duration_sec
            entries.append(
                {
                    "clipIndex": segment.clip_index,
                    "path": str(clip_paths[segment.clip_index]),
                    "kind": clip.kind.value if clip else "video",
                    "startSec": segment.start_sec,
                    "endSec": segment.end_sec,
                    "targetDurationSec": segment.duration_sec,
                    "sourceDurationSec": source_duration,
                    "speedFactor": round(source_duration / segment.duration_sec, 4) if source_duration else 1.0,
                }
            )

        manifest = {
            "mode": segment_map.mode.value,
            "width": self.settings.video_width,
            "height": self.settings.video_height,
            "audioDurationSec": segment_map.audio_duration_sec,
            "narrationPath": str(narration_path) if narration_path else None,
            "captionsPath": str(captions_path) if captions_path else None,
            "clips": entries,
        }
        path = write_json(output_dir / MANIFEST_FILENAME, manifest)
        self.logger.info(f"Assembly manifest written: {path} ({len(entries)} clips)")
        return path
