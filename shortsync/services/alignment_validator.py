"""Alignment Validator - quality gate between segmentation and video assembly."""

from typing import Any, Optional

from shortsync.core.config import AlignmentPolicy, Settings
from shortsync.core.exceptions import AlignmentBlockedError
from shortsync.models.schemas import (
    AlignmentChecks,
    AlignmentReport,
    BlockedPayload,
    NarrationSegment,
    SegmentationMode,
    SegmentMap,
)
from shortsync.utils.error_handler import remediation_hint
from shortsync.utils.io_utils import clip_filename, required_clip_filenames
from shortsync.utils.text_utils import normalized_length_ratio

REASON_COVERAGE = "coverage_too_low"
REASON_DURATION = "duration_delta_too_high"
REASON_EMPTY = "empty_segment_text"
REASON_STRETCH = "stretch_ratio_too_high"
REASON_CLIPS = "insufficient_clips"


def stretch_ratio(segment: NarrationSegment) -> float:
    """How far a segment slows its clip down; 1.0 when the clip is long enough or unknown."""
    source = segment.source_clip_duration_sec
    base = source if source and source > 0 else segment.duration_sec
    return max(1.0, segment.duration_sec / base)


def required_file_count(scene_count: int, required_clip_count: int) -> int:
    """Number of clip files a blocked attempt asks for."""
    return max(scene_count, required_clip_count)


class AlignmentValidator:
    """Checks a candidate SegmentMap and reports why it cannot be assembled."""

    def __init__(self, settings: Settings, logger: Any, policy: Optional[AlignmentPolicy] = None):
        """
        Initialize the alignment validator.

        Args:
            settings: Application settings
            logger: Logger instance
            policy: Optional explicit thresholds (defaults to values from settings)
        """
        self.settings = settings
        self.logger = logger
        self.policy = policy or AlignmentPolicy.from_settings(settings)

    def build_alignment_checks(
        self,
        segment_map: SegmentMap,
        full_narration: str,
        measured_audio_duration_sec: float,
        available_clip_count: int,
        required_clip_count: int,
        scene_count: Optional[int] = None,
    ) -> AlignmentReport:
        """
        Evaluate every check and build the report.

        All checks run; reasons are ordered coverage, duration, empty text,
        stretch, clip sufficiency. Coverage, stretch and clip sufficiency only
        apply to clip-driven maps.

        Args:
            segment_map: Candidate timeline
            full_narration: Full voiceover text the segments were derived from
            measured_audio_duration_sec: Measured length of the narration track
            available_clip_count: Clips found in the workspace
            required_clip_count: Clips the script asks for (scene count)
            scene_count: Scenes in the script, when it differs from required_clip_count

        Returns:
            AlignmentReport
        """
        clip_driven = segment_map.mode == SegmentationMode.CLIP_DRIVEN
        segments = segment_map.segments
        long_form = self.policy.is_long_form(measured_audio_duration_sec)
        reasons: list[str] = []

        joined = " ".join(s.text for s in segments)
        coverage = normalized_length_ratio(joined, full_narration)
        if clip_driven and coverage < self.policy.min_coverage_ratio:
            reasons.append(REASON_COVERAGE)

        duration_delta = round(abs(segment_map.total_duration_sec - measured_audio_duration_sec), 3)
        if clip_driven and not long_form:
            max_delta = self.policy.max_duration_delta_short_sec
        else:
            max_delta = self.policy.max_duration_delta_relaxed_sec
        if duration_delta > max_delta:
            reasons.append(REASON_DURATION)

        empty_count = sum(1 for s in segments if not s.text.strip())
        if empty_count:
            reasons.append(REASON_EMPTY)

        max_stretch = 1.0
        stretch_index = None
        for segment in segments:
            ratio = stretch_ratio(segment)
            if ratio > max_stretch:
                max_stretch = ratio
                stretch_index = segment.clip_index
        max_ratio_allowed = self.policy.max_stretch_ratio_long if long_form else self.policy.max_stretch_ratio_short
        if clip_driven and max_stretch > max_ratio_allowed:
            reasons.append(f"{REASON_STRETCH}:segment_{stretch_index}")

        if clip_driven and available_clip_count < required_clip_count:
            reasons.append(REASON_CLIPS)

        checks = AlignmentChecks(
            coverage_ratio=round(coverage, 4),
            duration_delta_sec=duration_delta,
            empty_segment_count=empty_count,
            available_clip_count=available_clip_count,
            required_clip_count=required_clip_count,
            max_stretch_ratio=round(max_stretch, 3),
            stretch_segment_index=stretch_index,
        )

        passed = not reasons
        hint = None
        required_files: list[str] = []
        if not passed:
            missing = [clip_filename(i) for i in range(available_clip_count, required_clip_count)]
            hint = remediation_hint(
                reasons[0],
                missing_files=missing,
                stretch_ratio=max_stretch,
                scene_driven=not clip_driven,
            )
            if scene_count is None:
                scene_count = required_clip_count
            required_files = required_clip_filenames(required_file_count(scene_count, required_clip_count))

        report = AlignmentReport(
            mode=segment_map.mode,
            passed=passed,
            reasons=reasons,
            hint=hint,
            checks=checks,
            required_files=required_files,
            segments=list(segments),
        )

        if passed:
            self.logger.info(
                f"Alignment passed ({segment_map.mode.value}): coverage={coverage:.3f}, "
                f"delta={duration_delta:.3f}s, max_stretch={max_stretch:.2f}"
            )
        else:
            self.logger.warning(f"Alignment failed ({segment_map.mode.value}): {', '.join(reasons)}")
        return report

    def ensure_alignment_or_block(self, report: AlignmentReport, scene_count: int) -> None:
        """
        Raise the blocked signal when the report failed.

        Args:
            report: Alignment report (already persisted by the caller)
            scene_count: Scenes in the script

        Raises:
            AlignmentBlockedError: When `report.passed` is False
        """
        if report.passed:
            return

        file_count = required_file_count(scene_count, report.checks.required_clip_count)
        payload = BlockedPayload(
            reason=report.primary_reason or "alignment_failed",
            reasons=list(report.reasons),
            hint=report.hint,
            required_files=required_clip_filenames(file_count),
        )
        self.logger.warning(f"Assembly blocked: {payload.reason} - {payload.hint}")
        raise AlignmentBlockedError(payload, report)
