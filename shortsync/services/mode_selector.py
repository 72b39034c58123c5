"""Segmentation Mode Selector - decides between scene-driven and clip-driven timelines."""

from typing import Any, Optional

from shortsync.core.config import SegmentationPolicy, Settings
from shortsync.models.schemas import ModeDecision, ScriptData, SegmentationMode
from shortsync.utils.text_utils import normalized_length_ratio


class SegmentationModeSelector:
    """Chooses how narration is mapped onto clips for one assembly attempt."""

    def __init__(self, settings: Settings, logger: Any, policy: Optional[SegmentationPolicy] = None):
        """
        Initialize the mode selector.

        Args:
            settings: Application settings
            logger: Logger instance
            policy: Optional explicit policy (defaults to values from settings)
        """
        self.settings = settings
        self.logger = logger
        self.policy = policy or SegmentationPolicy.from_settings(settings)

    def select_mode(
        self,
        script: ScriptData,
        available_clip_count: int,
        has_segment_audio: bool = False,
    ) -> ModeDecision:
        """
        Pick the segmentation mode.

        Scene-driven needs at least one clip per scene (extras are dropped),
        narration on every scene, and either pre-rendered audio for every scene
        or scene narration covering most of the full voiceover.

        Args:
            script: Script with voiceover and scenes
            available_clip_count: Contiguous clips found in the workspace
            has_segment_audio: Every scene already has its own audio file

        Returns:
            ModeDecision (never raises)
        """
        scene_count = script.scene_count

        if available_clip_count < scene_count:
            return self._clip_driven(
                available_clip_count,
                f"{available_clip_count} clip(s) available for {scene_count} scene(s)",
            )

        if not all(scene.has_narration for scene in script.scenes):
            return self._clip_driven(available_clip_count, "not every scene carries narration")

        if not has_segment_audio:
            joined = " ".join(scene.narration or "" for scene in script.scenes)
            full = script.voiceover if script.voiceover.strip() else joined
            coverage = normalized_length_ratio(joined, full)
            if coverage < self.policy.scene_narration_min_coverage:
                return self._clip_driven(
                    available_clip_count,
                    f"scene narration covers {coverage:.0%} of the voiceover",
                )

        truncated = available_clip_count - scene_count
        if truncated > 0:
            self.logger.info(f"Using first {scene_count} clips, ignoring {truncated} extra clip(s)")

        decision = ModeDecision(
            mode=SegmentationMode.SCENE_DRIVEN,
            clip_count=scene_count,
            truncated_clip_count=truncated,
            reason="per-scene narration matches clips",
        )
        self.logger.info(f"Segmentation mode: {decision.mode.value} ({decision.clip_count} clips)")
        return decision

    def _clip_driven(self, clip_count: int, reason: str) -> ModeDecision:
        self.logger.info(f"Segmentation mode: clip-driven ({clip_count} clips) - {reason}")
        return ModeDecision(mode=SegmentationMode.CLIP_DRIVEN, clip_count=clip_count, reason=reason)
