"""I/O utility functions for workspace files and JSON artifacts."""

# This module is part of shortsync.utils package

import json
import re
from pathlib import Path
from typing import Any

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".webp")


def slugify(text: str) -> str:
    """
    Convert text to a filesystem-safe slug.

    Args:
        text: Input text to slugify.

    Returns:
        Filesystem-safe slug string.
    """
    text = text.lower()
    text = re.sub(r"[^\w\s-]", "", text)
    text = re.sub(r"[-\s]+", "-", text)
    text = text.strip("-")
    if len(text) > 100:
        text = text[:100].rstrip("-")
    return text


def clip_filename(index: int) -> str:
    return f"clip_{index}.mp4"


def segment_audio_filename(index: int) -> str:
    return f"voiceover_segment_{index}.mp3"


def required_clip_filenames(count: int) -> list[str]:
    """Expected clip filenames clip_0.mp4 .. clip_<count-1>.mp4."""
    return [clip_filename(i) for i in range(max(0, count))]


def write_json(path: Path, payload: Any) -> Path:
    """
    Write a JSON document with stable formatting.

    Args:
        path: Destination file
        payload: JSON-serialisable object (dict key order is preserved)

    Returns:
        The written path
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)
        f.write("\n")
    return path


def read_json(path: Path) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)
