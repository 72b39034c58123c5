"""Utility functions for ShortSync."""

from shortsync.utils.io_utils import clip_filename, read_json, required_clip_filenames, slugify, write_json
from shortsync.utils.text_utils import (
    count_words,
    estimate_spoken_duration,
    normalize_text,
    split_sentences,
    truncate_to_target_duration,
)

__all__ = [
    "clip_filename",
    "read_json",
    "required_clip_filenames",
    "slugify",
    "write_json",
    "count_words",
    "estimate_spoken_duration",
    "normalize_text",
    "split_sentences",
    "truncate_to_target_duration",
]
