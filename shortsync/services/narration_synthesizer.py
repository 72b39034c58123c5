"""Narration Synthesizer - voices narration segments one at a time and measures them."""

from pathlib import Path
from typing import Any, Optional

from pydub import AudioSegment

from shortsync.core.config import Settings
from shortsync.core.exceptions import SynthesisError
from shortsync.models.schemas import SynthesizedSegment
from shortsync.services.media_probe import MediaProbe
from shortsync.services.tts_client import TTSClient
from shortsync.utils.error_handler import format_error_message, get_fallback_suggestion
from shortsync.utils.io_utils import segment_audio_filename


class NarrationSynthesizer:
    """
    Synthesizes per-segment narration strictly in order.

    Segment i+1 is only requested after segment i finished, because each
    request carries its neighbours' text as prosody context. A segment gets
    `tts_max_attempts` tries; if it still fails, every file written in this
    attempt is deleted and SynthesisError is raised.
    """

    def __init__(
        self,
        settings: Settings,
        logger: Any,
        tts_client: Optional[TTSClient] = None,
        media_probe: Optional[MediaProbe] = None,
    ):
        """
        Initialize the narration synthesizer.

        Args:
            settings: Application settings
            logger: Logger instance
            tts_client: Speech synthesis collaborator
            media_probe: Duration probe collaborator
        """
        self.settings = settings
        self.logger = logger
        self.tts_client = tts_client or TTSClient(settings, logger)
        self.media_probe = media_probe or MediaProbe(settings, logger)

    def synthesize_segments(self, texts: list[str], output_dir: Path) -> list[SynthesizedSegment]:
        """
        Synthesize and measure one audio file per narration segment.

        Args:
            texts: Narration per segment, in timeline order
            output_dir: Directory for voiceover_segment_<i>.mp3 files

        Returns:
            Measured segments in order

        Raises:
            SynthesisError: A segment failed every attempt (partial audio already deleted)
        """
        output_dir.mkdir(parents=True, exist_ok=True)
        produced: list[SynthesizedSegment] = []

        for index, text in enumerate(texts):
            path = output_dir / segment_audio_filename(index)
            previous_text = texts[index - 1] if index > 0 else None
            next_text = texts[index + 1] if index + 1 < len(texts) else None

            try:
                duration = self._synthesize_with_retry(index, text, path, previous_text, next_text)
            except SynthesisError:
                self._discard([s.path for s in produced] + [path])
                raise

            produced.append(SynthesizedSegment(index=index, path=path, duration_sec=duration))
            self.logger.info(f"Segment {index + 1}/{len(texts)} voiced: {duration:.3f}s")

        return produced

    def _synthesize_with_retry(
        self,
        index: int,
        text: str,
        path: Path,
        previous_text: Optional[str],
        next_text: Optional[str],
    ) -> float:
        attempts = max(1, self.settings.tts_max_attempts)
        last_error: Optional[Exception] = None

        for attempt in range(1, attempts + 1):
            try:
                self.tts_client.generate_speech(text, path, previous_text=previous_text, next_text=next_text)
                duration = self.media_probe.get_duration(path)
                if duration <= 0:
                    raise SynthesisError(index, f"audio file {path.name} is empty or unreadable")
                return duration
            except Exception as e:
                last_error = e
                self.logger.warning(
                    format_error_message(
                        "Synthesizing narration segment",
                        e,
                        context={"segment": index, "attempt": f"{attempt}/{attempts}"},
                        suggestion=get_fallback_suggestion("TTS", e) if attempt == attempts else None,
                    )
                )

        raise SynthesisError(index, str(last_error)) from last_error

    def _discard(self, paths: list[Path]) -> None:
        for path in paths:
            if path.exists():
                path.unlink()
        self.logger.warning(f"Discarded {len(paths)} partial narration file(s) from this attempt")

    def load_existing(self, output_dir: Path, count: int) -> Optional[list[SynthesizedSegment]]:
        """
        Measure pre-rendered voiceover_segment_<i>.mp3 files.

        Returns:
            Segments when every file exists and is readable, otherwise None
        """
        segments = []
        for index in range(count):
            path = output_dir / segment_audio_filename(index)
            duration = self.media_probe.get_duration(path)
            if duration <= 0:
                return None
            segments.append(SynthesizedSegment(index=index, path=path, duration_sec=duration))
        self.logger.info(f"Reusing {count} pre-rendered narration segment(s)")
        return segments

    def concatenate(self, segments: list[SynthesizedSegment], output_path: Path) -> float:
        """
        Join segment audio into one narration track and measure it.

        Args:
            segments: Segments in order
            output_path: Destination (voiceover.mp3)

        Returns:
            Measured duration of the written track
        """
        track = AudioSegment.empty()
        for segment in segments:
            track += AudioSegment.from_file(str(segment.path))
        output_path.parent.mkdir(parents=True, exist_ok=True)
        track.export(str(output_path), format="mp3")
        duration = self.media_probe.get_duration(output_path)
        self.logger.info(f"Narration track written: {output_path.name} ({duration:.3f}s)")
        return duration
