"""Assembly pipeline orchestrator - script + clips → validated timeline → compositor hand-off."""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from shortsync.core.config import Settings, settings
from shortsync.core.exceptions import (
    AlignmentBlockedError,
    ClipContiguityError,
    ScriptValidationError,
    ShortSyncError,
)
from shortsync.core.logging_config import get_logger, setup_logging
from shortsync.models.schemas import (
    AlignmentReport,
    AssemblyResult,
    ClipInventory,
    ClipKind,
    ModeDecision,
    ScriptData,
    SegmentationMode,
    SegmentMap,
)
from shortsync.services.alignment_validator import REASON_CLIPS, REASON_DURATION, REASON_STRETCH, AlignmentValidator
from shortsync.services.caption_chunker import CaptionChunker
from shortsync.services.clip_discovery import ClipDiscovery
from shortsync.services.compositor import VideoCompositor
from shortsync.services.image_clip_renderer import ImageClipRenderer
from shortsync.services.media_probe import MediaProbe
from shortsync.services.mode_selector import SegmentationModeSelector
from shortsync.services.narration_synthesizer import NarrationSynthesizer
from shortsync.services.text_segmenter import TextSegmenter
from shortsync.services.timeline_builder import MIN_SEGMENT_DURATION_SEC, allocate_durations, build_segment_map
from shortsync.services.tts_client import TTSClient
from shortsync.storage.repository import SegmentArtifactRepository
from shortsync.utils.io_utils import read_json, segment_audio_filename, slugify
from shortsync.utils.text_utils import count_words, estimate_spoken_duration, truncate_to_target_duration

SCRIPT_FILENAME = "script.json"
VOICEOVER_FILENAME = "voiceover.mp3"
DEFAULT_SCENE_SECONDS = 5.0

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_BLOCKED = 2


def load_script(workspace: Path) -> ScriptData:
    """
    Load and validate <workspace>/script.json.

    Raises:
        ScriptValidationError: Missing file, bad JSON, or no voiceover / scenes
    """
    script_path = Path(workspace) / SCRIPT_FILENAME
    if not script_path.exists():
        raise ScriptValidationError(f"{script_path} not found. Generate the script first.")
    try:
        script = ScriptData.model_validate(read_json(script_path))
    except (ValueError, ValidationError) as e:
        raise ScriptValidationError(f"{script_path} is invalid: {e}") from e
    if not script.voiceover.strip() and not all(scene.has_narration for scene in script.scenes):
        raise ScriptValidationError(f"{script_path} invalid: need a voiceover or narration on every scene.")
    return script


class AssemblyPipeline:
    """Runs one assembly attempt for a project workspace."""

    def __init__(
        self,
        settings: Settings,
        logger: Any,
        tts_client: Optional[TTSClient] = None,
        media_probe: Optional[MediaProbe] = None,
        compositor: Optional[VideoCompositor] = None,
        image_renderer: Optional[ImageClipRenderer] = None,
    ):
        """
        Initialize the pipeline and its services.

        Args:
            settings: Application settings
            logger: Logger instance
            tts_client: Speech synthesis collaborator
            media_probe: Duration probe collaborator
            compositor: Video compositing hand-off
            image_renderer: Renderer for still-image stand-ins
        """
        self.settings = settings
        self.logger = logger
        self.media_probe = media_probe or MediaProbe(settings, logger)
        self.repository = SegmentArtifactRepository(settings, logger)
        self.clip_discovery = ClipDiscovery(settings, logger, media_probe=self.media_probe)
        self.mode_selector = SegmentationModeSelector(settings, logger)
        self.text_segmenter = TextSegmenter(settings, logger)
        self.synthesizer = NarrationSynthesizer(
            settings, logger, tts_client=tts_client, media_probe=self.media_probe
        )
        self.validator = AlignmentValidator(settings, logger)
        self.caption_chunker = CaptionChunker(settings, logger)
        self.compositor = compositor or VideoCompositor(settings, logger)
        self.image_renderer = image_renderer or ImageClipRenderer(settings, logger)

    def run(self, workspace: Path, output_dir: Optional[Path] = None, project_id: Optional[str] = None) -> AssemblyResult:
        """
        Run one assembly attempt.

        Args:
            workspace: Directory with script.json, clip_<i>.mp4 / image_<i>.* and optional audio
            output_dir: Artifact directory (defaults to <workspace>/<output_subdir>)
            project_id: Identifier used in logs and results

        Returns:
            AssemblyResult for an approved timeline

        Raises:
            ScriptValidationError: script.json unusable
            ClipContiguityError: clips are not contiguous
            SynthesisError: narration could not be voiced
            AlignmentBlockedError: alignment failed (artifacts persisted)
        """
        workspace = Path(workspace)
        output_dir = Path(output_dir) if output_dir else workspace / self.settings.output_subdir
        project_id = project_id or slugify(workspace.resolve().name) or "project"

        self.logger.info("=" * 60)
        self.logger.info(f"Starting assembly attempt for project: {project_id}")
        self.logger.info("=" * 60)

        script = load_script(workspace)
        inventory = self.clip_discovery.discover(workspace)
        has_segment_audio = all(
            (workspace / segment_audio_filename(i)).exists() for i in range(script.scene_count)
        )
        decision = self.mode_selector.select_mode(script, inventory.count, has_segment_audio)
        clips = inventory.truncated(decision.clip_count)

        return self._attempt(
            project_id,
            script,
            clips,
            decision,
            workspace,
            output_dir,
            has_segment_audio=has_segment_audio,
            allow_shorten=self.settings.auto_shorten_narration,
        )

    def _attempt(
        self,
        project_id: str,
        script: ScriptData,
        clips: ClipInventory,
        decision: ModeDecision,
        workspace: Path,
        output_dir: Path,
        has_segment_audio: bool,
        allow_shorten: bool,
    ) -> AssemblyResult:
        scene_driven = decision.mode == SegmentationMode.SCENE_DRIVEN

        scene_texts = [(scene.narration or "").strip() for scene in script.scenes]
        full_narration = script.voiceover if script.voiceover.strip() else " ".join(scene_texts)
        if scene_driven:
            texts = scene_texts
        else:
            texts = self.text_segmenter.split_narration(full_narration, clips.count)

        narration_path = None
        blocked_before_synthesis = not scene_driven and (
            clips.count == 0 or clips.count < script.scene_count or any(not t.strip() for t in texts)
        )
        if blocked_before_synthesis:
            self.logger.info("Alignment cannot pass with these inputs; skipping synthesis")
            segment_map = self._provisional_map(decision.mode, texts, full_narration, clips, workspace)
        else:
            segment_map, narration_path = self._measured_map(
                decision.mode, texts, full_narration, clips, workspace, output_dir, has_segment_audio and scene_driven
            )

        report = self.validator.build_alignment_checks(
            segment_map,
            full_narration,
            segment_map.audio_duration_sec,
            available_clip_count=clips.count,
            required_clip_count=script.scene_count,
            scene_count=script.scene_count,
        )
        self.repository.save_segment_map(segment_map, output_dir)
        self.repository.save_alignment_report(report, output_dir)

        if not report.passed:
            if allow_shorten and not scene_driven and self._blocked_on_timing(report):
                shortened = self._shortened_script(script, clips)
                if shortened is not None:
                    self.logger.info("Retrying with shortened narration")
                    return self._attempt(
                        project_id, shortened, clips, decision, workspace, output_dir,
                        has_segment_audio=False, allow_shorten=False,
                    )
            try:
                self.validator.ensure_alignment_or_block(report, script.scene_count)
            except AlignmentBlockedError as e:
                self.repository.save_blocked_payload(e.payload, output_dir)
                if REASON_CLIPS in report.reasons:
                    self.repository.save_clip_prompts(script, output_dir)
                raise

        self.repository.clear_blocked_payload(output_dir)
        return self._hand_off(project_id, segment_map, report, clips, narration_path, output_dir)

    def _measured_map(
        self,
        mode: SegmentationMode,
        texts: list[str],
        full_narration: str,
        clips: ClipInventory,
        workspace: Path,
        output_dir: Path,
        reuse_segment_audio: bool,
    ) -> tuple[SegmentMap, Optional[Path]]:
        audio_dir = output_dir / "audio"
        narration_path = audio_dir / VOICEOVER_FILENAME

        synthesized = self.synthesizer.load_existing(workspace, len(texts)) if reuse_segment_audio else None
        if synthesized is None and not self.settings.per_segment_synthesis:
            voiceover_path = workspace / VOICEOVER_FILENAME
            audio_duration = self.media_probe.get_duration(voiceover_path)
            if audio_duration <= 0:
                voiceover_path = self.synthesizer.tts_client.generate_speech(full_narration, narration_path)
                audio_duration = self.media_probe.get_duration(voiceover_path)
            durations = allocate_durations(audio_duration, [count_words(t) for t in texts])
            if not durations:
                raise ShortSyncError("Narration track has no measurable duration")
            self.logger.info(f"Allocated {audio_duration:.3f}s of narration across {len(texts)} segments")
            return (
                build_segment_map(mode, texts, durations, audio_duration, self._source_durations(clips, durations)),
                voiceover_path,
            )

        if synthesized is None:
            synthesized = self.synthesizer.synthesize_segments(texts, audio_dir)
        audio_duration = self.synthesizer.concatenate(synthesized, narration_path)
        durations = [s.duration_sec for s in synthesized]
        segment_map = build_segment_map(mode, texts, durations, audio_duration, self._source_durations(clips, durations))
        return segment_map, narration_path

    def _provisional_map(
        self,
        mode: SegmentationMode,
        texts: list[str],
        full_narration: str,
        clips: ClipInventory,
        workspace: Path,
    ) -> SegmentMap:
        total = self.media_probe.get_duration(workspace / VOICEOVER_FILENAME)
        if total <= 0:
            total = estimate_spoken_duration(full_narration, self.settings.words_per_minute)
        if total <= 0:
            total = MIN_SEGMENT_DURATION_SEC * max(1, len(texts))
        durations = allocate_durations(total, [count_words(t) for t in texts])
        return build_segment_map(mode, texts, durations, total, self._source_durations(clips, durations))

    def _source_durations(self, clips: ClipInventory, durations: list[float]) -> list[Optional[float]]:
        # Still images are rendered to exactly the segment duration
        sources: list[Optional[float]] = []
        for clip, duration in zip(clips.clips, durations):
            sources.append(duration if clip.kind == ClipKind.IMAGE else clip.source_duration_sec)
        return sources

    def _blocked_on_timing(self, report: AlignmentReport) -> bool:
        return bool(report.reasons) and all(
            reason == REASON_DURATION or reason.startswith(REASON_STRETCH) for reason in report.reasons
        )

    def _shortened_script(self, script: ScriptData, clips: ClipInventory) -> Optional[ScriptData]:
        capacity = 0.0
        for idx, clip in enumerate(clips.clips):
            scene_seconds = script.scenes[idx].duration if idx < script.scene_count else None
            capacity += clip.source_duration_sec or scene_seconds or DEFAULT_SCENE_SECONDS
        shortened = truncate_to_target_duration(script.voiceover, capacity, self.settings.words_per_minute)
        if shortened == script.voiceover or not shortened.strip():
            self.logger.info("Narration cannot be shortened further")
            return None
        self.logger.info(
            f"Shortened narration from {count_words(script.voiceover)} to {count_words(shortened)} words "
            f"to fit {capacity:.1f}s of clips"
        )
        return script.model_copy(update={"voiceover": shortened})

    def _hand_off(
        self,
        project_id: str,
        segment_map: SegmentMap,
        report: AlignmentReport,
        clips: ClipInventory,
        narration_path: Optional[Path],
        output_dir: Path,
    ) -> AssemblyResult:
        captions_path = None
        caption_count = 0
        if self.settings.captions_enabled:
            cues = self.caption_chunker.build_caption_cues(segment_map)
            caption_count = len(cues)
            captions_path = self.repository.save_caption_cues(cues, output_dir)

        clip_paths: dict[int, Path] = {}
        for clip, segment in zip(clips.clips, segment_map.segments):
            if clip.kind == ClipKind.IMAGE:
                clip_paths[clip.index] = self.image_renderer.render_zoom_clip(
                    clip.path, segment.duration_sec, output_dir / "clips" / f"image_clip_{clip.index}.mp4"
                )
            else:
                clip_paths[clip.index] = clip.path

        manifest_path = self.compositor.compose(
            segment_map, clip_paths, clips.clips, narration_path, captions_path, output_dir
        )

        self.logger.info("=" * 60)
        self.logger.info(f"Assembly approved: {segment_map.clip_count} clips, {segment_map.audio_duration_sec:.2f}s")
        self.logger.info("=" * 60)
        return AssemblyResult(
            project_id=project_id,
            segment_map=segment_map,
            report=report,
            caption_count=caption_count,
            narration_path=narration_path,
            manifest_path=manifest_path,
            output_dir=output_dir,
        )


def main(argv: Optional[list[str]] = None) -> int:
    """Main entrypoint for one assembly attempt."""
    parser = argparse.ArgumentParser(
        description="ShortSync - align narration with clips and prepare assembly",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--workspace",
        type=str,
        required=True,
        help="Project workspace with script.json and clip_<i>.mp4 files",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Artifact directory (default: <workspace>/output)",
    )
    parser.add_argument(
        "--format",
        type=str,
        choices=["short", "long"],
        default=None,
        help="Format preset for alignment thresholds (default: from settings)",
    )
    parser.add_argument(
        "--no-captions",
        action="store_true",
        help="Skip caption cue generation",
    )
    parser.add_argument(
        "--auto-shorten",
        action="store_true",
        help="Shorten over-long narration and retry once when alignment blocks on timing",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Logging level (default: from settings)",
    )
    args = parser.parse_args(argv)

    overrides: dict[str, Any] = {}
    if args.format:
        overrides["video_format"] = args.format
    if args.no_captions:
        overrides["captions_enabled"] = False
    if args.auto_shorten:
        overrides["auto_shorten_narration"] = True
    run_settings = settings.model_copy(update=overrides)

    setup_logging(
        log_level=args.log_level or run_settings.log_level,
        log_file=Path(run_settings.log_file) if run_settings.log_file else None,
    )
    workspace = Path(args.workspace)
    logger = get_logger(__name__, project_id=workspace.name)

    try:
        pipeline = AssemblyPipeline(run_settings, logger)
        result = pipeline.run(workspace, output_dir=Path(args.output_dir) if args.output_dir else None)
    except AlignmentBlockedError as e:
        logger.warning(f"Blocked: {e.payload.hint or e.payload.reason}")
        print(json.dumps(e.payload.model_dump(mode="json", by_alias=True, exclude_none=True)))
        return EXIT_BLOCKED
    except (ScriptValidationError, ClipContiguityError) as e:
        logger.error(str(e))
        return EXIT_ERROR
    except ShortSyncError as e:
        logger.error(f"Assembly failed: {e}")
        return EXIT_ERROR

    logger.info(f"Manifest: {result.manifest_path}")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
