"""Error types raised across the assembly pipeline."""

from typing import Optional

from shortsync.models.schemas import AlignmentReport, BlockedPayload


class ShortSyncError(Exception):
    """Base error for the project."""


class ScriptValidationError(ShortSyncError):
    """script.json is missing or does not carry a voiceover and scenes."""


class ClipContiguityError(ShortSyncError):
    """A clip exists past the first missing index."""

    def __init__(self, gap_index: int, stray_files: list[str]):
        self.gap_index = gap_index
        self.stray_files = stray_files
        super().__init__(
            f"Clips must be contiguous: clip index {gap_index} is missing but "
            f"{', '.join(stray_files)} exist. Upload clip_{gap_index}.mp4 or remove the later files."
        )


class SynthesisError(ShortSyncError):
    """A narration segment could not be synthesized after retrying."""

    def __init__(self, segment_index: int, message: str):
        self.segment_index = segment_index
        super().__init__(f"Narration segment {segment_index} failed: {message}")


class AlignmentBlockedError(ShortSyncError):
    """
    Alignment failed; the caller should ask for more input and retry.

    The segment map and alignment report are already persisted when this is raised.
    """

    def __init__(self, payload: BlockedPayload, report: Optional[AlignmentReport] = None):
        self.payload = payload
        self.report = report
        super().__init__(payload.hint or payload.reason)

    @property
    def reason(self) -> str:
        return self.payload.reason

    @property
    def required_files(self) -> list[str]:
        return self.payload.required_files
