"""Image Clip Renderer - turns a still image into a zooming clip of a given length."""

from pathlib import Path
from typing import Any

from moviepy import CompositeVideoClip, ImageClip

from shortsync.core.config import Settings


class ImageClipRenderer:
    """Renders still-image stand-ins for missing video clips."""

    def __init__(self, settings: Settings, logger: Any):
        """
        Initialize the image clip renderer.

        Args:
            settings: Application settings
            logger: Logger instance
        """
        self.settings = settings
        self.logger = logger

    def render_zoom_clip(self, image_path: Path, duration: float, output_path: Path) -> Path:
        """
        Render a slow zoom-in over a still image.

        The image is cover-scaled to the output frame, then zoomed from 100% to
        100% + `image_zoom_amount` over the clip.

        Args:
            image_path: Source image
            duration: Clip length in seconds (the segment's target duration)
            output_path: Destination .mp4

        Returns:
            output_path
        """
        width = self.settings.video_width
        height = self.settings.video_height
        zoom = self.settings.image_zoom_amount

        image_clip = ImageClip(str(image_path)).with_duration(duration)
        cover_scale = max(width / image_clip.w, height / image_clip.h)
        zooming = image_clip.resized(lambda t: cover_scale * (1 + zoom * t / duration))
        frame = CompositeVideoClip([zooming.with_position("center")], size=(width, height)).with_duration(duration)

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            frame.write_videofile(
                str(output_path),
                fps=self.settings.video_fps,
                codec="libx264",
                audio=False,
                logger=None,
            )
        finally:
            frame.close()
            image_clip.close()

        self.logger.info(f"Rendered still image {image_path.name} as {duration:.2f}s zoom clip")
        return output_path
