"""Storage repository for segmentation artifacts."""

from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from shortsync.core.config import Settings
from shortsync.models.schemas import AlignmentReport, BlockedPayload, CaptionCue, ScriptData, SegmentMap
from shortsync.services.caption_chunker import cues_to_srt
from shortsync.utils.io_utils import clip_filename, read_json, write_json

SEGMENT_MAP_FILENAME = "clip_segment_map.json"
ALIGNMENT_FILENAME = "segment_alignment.json"
CAPTIONS_JSON_FILENAME = "captions.json"
CAPTIONS_SRT_FILENAME = "captions.srt"
WAITING_FILENAME = "waiting_for_clips.json"
CLIP_PROMPTS_FILENAME = "clip_prompts.json"


def _dump(model: BaseModel) -> dict:
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


class SegmentArtifactRepository:
    """Persists segment maps, alignment reports and caption tracks as JSON."""

    def __init__(self, settings: Settings, logger: Any):
        """
        Initialize the repository.

        Args:
            settings: Application settings
            logger: Logger instance
        """
        self.settings = settings
        self.logger = logger
        self.workspace_root = Path(settings.workspace_root)

    def workspace_for(self, project_id: str) -> Path:
        return self.workspace_root / project_id

    def output_dir_for(self, project_id: str) -> Path:
        return self.workspace_for(project_id) / self.settings.output_subdir

    def save_segment_map(self, segment_map: SegmentMap, output_dir: Path) -> Path:
        """
        Save the segment map (clip_segment_map.json).

        Args:
            segment_map: Timeline to persist
            output_dir: Artifact directory

        Returns:
            Written path
        """
        path = write_json(output_dir / SEGMENT_MAP_FILENAME, _dump(segment_map))
        self.logger.info(f"Segment map saved to: {path}")
        return path

    def save_alignment_report(self, report: AlignmentReport, output_dir: Path) -> Path:
        """
        Save the alignment report (segment_alignment.json).

        Args:
            report: Verdict to persist
            output_dir: Artifact directory

        Returns:
            Written path
        """
        path = write_json(output_dir / ALIGNMENT_FILENAME, _dump(report))
        self.logger.info(f"Alignment report saved to: {path} (passed={report.passed})")
        return path

    def save_caption_cues(self, cues: list[CaptionCue], output_dir: Path) -> Path:
        """
        Save caption cues as captions.json and captions.srt.

        Returns:
            Path of the SRT file
        """
        write_json(output_dir / CAPTIONS_JSON_FILENAME, [_dump(cue) for cue in cues])
        srt_path = output_dir / CAPTIONS_SRT_FILENAME
        with open(srt_path, "w", encoding="utf-8") as f:
            f.write(cues_to_srt(cues))
        self.logger.info(f"Saved {len(cues)} caption cues to: {srt_path}")
        return srt_path

    def save_blocked_payload(self, payload: BlockedPayload, output_dir: Path) -> Path:
        path = write_json(output_dir / WAITING_FILENAME, _dump(payload))
        self.logger.info(f"Waiting for input: {', '.join(payload.required_files)}")
        return path

    def clear_blocked_payload(self, output_dir: Path) -> None:
        path = output_dir / WAITING_FILENAME
        if path.exists():
            path.unlink()
            self.logger.debug(f"Cleared {path}")

    def save_clip_prompts(self, script: ScriptData, output_dir: Path) -> Path:
        """Export one {index, prompt, filename} row per scene so missing clips can be produced."""
        rows = [
            {"index": idx, "prompt": scene.prompt, "filename": clip_filename(idx)}
            for idx, scene in enumerate(script.scenes)
        ]
        path = write_json(output_dir / CLIP_PROMPTS_FILENAME, rows)
        self.logger.info(f"Exported {len(rows)} clip prompts to: {path}")
        return path

    def load_segment_map(self, output_dir: Path) -> Optional[SegmentMap]:
        """
        Load a segment map.

        Returns:
            SegmentMap if found and valid, None otherwise
        """
        return self._load(output_dir / SEGMENT_MAP_FILENAME, SegmentMap)

    def load_alignment_report(self, output_dir: Path) -> Optional[AlignmentReport]:
        return self._load(output_dir / ALIGNMENT_FILENAME, AlignmentReport)

    def load_blocked_payload(self, output_dir: Path) -> Optional[BlockedPayload]:
        return self._load(output_dir / WAITING_FILENAME, BlockedPayload)

    def _load(self, path: Path, model: type[BaseModel]) -> Optional[Any]:
        if not path.exists():
            self.logger.debug(f"Artifact not found: {path}")
            return None
        try:
            return model.model_validate(read_json(path))
        except (ValueError, ValidationError) as e:
            self.logger.warning(f"Failed to load {path}: {e}")
            return None
