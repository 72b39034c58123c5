"""Error Handler - provides user-friendly error messages and remediation hints."""

from typing import Optional


def format_error_message(
    operation: str,
    error: Exception,
    context: Optional[dict] = None,
    suggestion: Optional[str] = None,
) -> str:
    """
    Format a user-friendly error message.

    Args:
        operation: What operation was being performed (e.g., "Synthesizing narration segment")
        error: The exception that occurred
        context: Additional context (e.g., {"segment": 3, "project_id": "demo"})
        suggestion: Optional suggestion for how to fix the issue

    Returns:
        Formatted error message
    """
    error_type = type(error).__name__
    error_msg = str(error)

    context_str = ""
    if context:
        context_parts = [f"{k}={v}" for k, v in context.items()]
        context_str = f" ({', '.join(context_parts)})"

    message = f"❌ {operation} failed{context_str}\n"
    message += f"   Error: {error_type}: {error_msg}"

    if suggestion:
        message += f"\n   💡 Suggestion: {suggestion}"

    return message


def get_fallback_suggestion(service: str, error: Exception) -> Optional[str]:
    """
    Get a suggestion for how to handle a collaborator failure.

    Args:
        service: Service name ("TTS", "Media Probe", "Image Clip Render")
        error: The exception

    Returns:
        Suggestion string or None
    """
    error_msg = str(error).lower()

    if service == "TTS":
        if "api key" in error_msg or "not configured" in error_msg:
            return "Check your TTS API key in .env file."
        elif "rate limit" in error_msg or "429" in error_msg:
            return "Rate limit exceeded. Wait a few minutes and run the assembly again."
        elif "network" in error_msg or "timeout" in error_msg:
            return "Network error. Check your internet connection and run the assembly again."
        else:
            return "Narration synthesis failed. Partial audio was discarded; rerun the assembly."

    elif service == "Media Probe":
        if "ffmpeg" in error_msg or "ffprobe" in error_msg:
            return "FFmpeg is required to read media durations. Install it and make sure it is on PATH."
        else:
            return "The file could not be read. Re-export it as MP4 (H.264) or MP3."

    elif service == "Image Clip Render":
        return "Still image could not be rendered. Replace it with a video clip of the same index."

    return None


def remediation_hint(
    reason: str,
    missing_files: Optional[list[str]] = None,
    stretch_ratio: Optional[float] = None,
    scene_driven: bool = False,
) -> str:
    """
    Human-actionable hint for an alignment reason code.

    Args:
        reason: Primary reason code
        missing_files: Clip filenames still required
        stretch_ratio: Worst stretch ratio (for stretch failures)
        scene_driven: Whether the failing attempt was scene-driven

    Returns:
        Hint text
    """
    missing_files = missing_files or []

    if reason == "insufficient_clips":
        count = len(missing_files)
        noun = "clip" if count == 1 else "clips"
        amount = "one more" if count == 1 else f"{count} more"
        return f"Upload {amount} {noun}: {', '.join(missing_files)}."

    if reason == "coverage_too_low":
        return "Part of the narration could not be placed on the clips. Upload more clips or shorten the narration."

    if reason == "duration_delta_too_high":
        return "Segment audio does not add up to the narration track. Shorten the narration or regenerate the voiceover."

    if reason == "empty_segment_text":
        if scene_driven:
            return "Ensure every scene has voiceover text."
        return "Some clips received no narration. Remove extra clips or write more narration."

    if reason.startswith("stretch_ratio_too_high"):
        _, _, segment = reason.partition(":")
        index = segment.replace("segment_", "") if segment else "?"
        ratio = f" {stretch_ratio:.1f}x" if stretch_ratio else ""
        return (
            f"Clip {index} would be slowed down{ratio} to fit its narration. "
            f"Upload a longer clip_{index}.mp4 or shorten the narration."
        )

    return "Alignment failed. Review segment_alignment.json for details."
