"""Clip Discovery - finds contiguous clips (or still-image stand-ins) in a workspace."""

import re
from pathlib import Path
from typing import Any, Optional

from shortsync.core.config import Settings
from shortsync.core.exceptions import ClipContiguityError
from shortsync.models.schemas import ClipAsset, ClipInventory, ClipKind
from shortsync.services.media_probe import MediaProbe
from shortsync.utils.io_utils import IMAGE_EXTENSIONS, clip_filename

_INDEXED_ASSET = re.compile(r"^(?:clip_(0|[1-9]\d*)\.mp4|image_(0|[1-9]\d*)\.(?:jpg|jpeg|png|webp))$", re.IGNORECASE)


class ClipDiscovery:
    """Probes clip_<i>.mp4 / image_<i>.* from index 0 until the first gap."""

    def __init__(self, settings: Settings, logger: Any, media_probe: Optional[MediaProbe] = None):
        """
        Initialize clip discovery.

        Args:
            settings: Application settings
            logger: Logger instance
            media_probe: Probe used to read natural clip durations
        """
        self.settings = settings
        self.logger = logger
        self.media_probe = media_probe or MediaProbe(settings, logger)

    def discover(self, workspace: Path) -> ClipInventory:
        """
        Collect the contiguous clips of a workspace.

        File names match case-insensitively, so clip_0.MP4 and image_1.PNG count.

        Args:
            workspace: Project workspace directory

        Returns:
            ClipInventory ordered by index

        Raises:
            ClipContiguityError: A clip or image exists past the first missing index
        """
        workspace = Path(workspace)
        candidates = self._indexed_files(workspace)
        clips: list[ClipAsset] = []
        index = 0
        while index in candidates:
            clips.append(self._to_asset(index, candidates.pop(index)))
            index += 1

        stray = sorted(path.name for paths in candidates.values() for path in paths)
        if stray:
            self.logger.error(f"Non-contiguous clips: index {index} missing, found {', '.join(stray)}")
            raise ClipContiguityError(index, stray)

        images = sum(1 for c in clips if c.kind == ClipKind.IMAGE)
        self.logger.info(f"Discovered {len(clips)} contiguous clip(s) ({images} still image(s))")
        return ClipInventory(clips=clips)

    def _indexed_files(self, workspace: Path) -> dict[int, list[Path]]:
        if not workspace.is_dir():
            return {}
        found: dict[int, list[Path]] = {}
        for path in sorted(workspace.iterdir()):
            match = _INDEXED_ASSET.match(path.name)
            if match and path.is_file():
                found.setdefault(int(match.group(1) or match.group(2)), []).append(path)
        return found

    def _to_asset(self, index: int, paths: list[Path]) -> ClipAsset:
        # Video wins over stills, canonical lower-case names win over other casings
        videos = [p for p in paths if p.suffix.lower() == ".mp4"]
        if videos:
            video_path = min(videos, key=lambda p: p.name != clip_filename(index))
            duration = self.media_probe.get_duration(video_path)
            return ClipAsset(
                index=index,
                path=video_path,
                kind=ClipKind.VIDEO,
                source_duration_sec=duration if duration > 0 else None,
            )
        image_path = min(paths, key=lambda p: (IMAGE_EXTENSIONS.index(p.suffix.lower()), p.suffix != p.suffix.lower()))
        return ClipAsset(index=index, path=image_path, kind=ClipKind.IMAGE)
