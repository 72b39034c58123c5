"""ShortSync - narration-to-clip segmentation and alignment for short-form video."""

__version__ = "1.0.0"
