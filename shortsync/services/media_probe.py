"""Media Probe - measures audio and video durations."""

from pathlib import Path
from typing import Any

from moviepy import AudioFileClip, VideoFileClip

from shortsync.core.config import Settings
from shortsync.utils.error_handler import format_error_message, get_fallback_suggestion

VIDEO_SUFFIXES = {".mp4", ".mov", ".m4v", ".webm", ".mkv"}


class MediaProbe:
    """Reads file durations; never trusts durations reported by other services."""

    def __init__(self, settings: Settings, logger: Any):
        """
        Initialize the media probe.

        Args:
            settings: Application settings
            logger: Logger instance
        """
        self.settings = settings
        self.logger = logger

    def get_duration(self, path: Path) -> float:
        """
        Duration of an audio or video file in seconds.

        Args:
            path: Local file path

        Returns:
            Duration in seconds, or 0.0 if the file is missing or unreadable
        """
        path = Path(path)
        if not path.exists():
            self.logger.debug(f"Cannot probe missing file: {path}")
            return 0.0

        clip_class = VideoFileClip if path.suffix.lower() in VIDEO_SUFFIXES else AudioFileClip
        clip = None
        try:
            clip = clip_class(str(path))
            return round(float(clip.duration or 0.0), 3)
        except (OSError, ValueError, KeyError, IndexError) as e:
            self.logger.warning(
                format_error_message(
                    "Reading media duration",
                    e,
                    context={"file": path.name},
                    suggestion=get_fallback_suggestion("Media Probe", e),
                )
            )
            return 0.0
        finally:
            if clip is not None:
                clip.close()
