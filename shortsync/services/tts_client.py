"""TTS (Text-to-Speech) client abstraction for multiple providers."""

from pathlib import Path
from typing import Any, Optional

import requests

from shortsync.core.config import Settings
from shortsync.core.exceptions import ShortSyncError
from shortsync.utils.text_utils import estimate_spoken_duration


class TTSError(ShortSyncError):
    """A TTS provider call failed."""


class TTSClient:
    """TTS client supporting ElevenLabs, OpenAI and a silent stub."""

    def __init__(self, settings: Settings, logger: Any):
        """
        Initialize TTS client.

        Args:
            settings: Application settings
            logger: Logger instance
        """
        self.settings = settings
        self.logger = logger
        self.provider = self._detect_provider()

    def _detect_provider(self) -> str:
        """Detect which TTS provider to use based on available credentials."""
        if self.settings.elevenlabs_api_key:
            return "elevenlabs"
        elif self.settings.openai_api_key:
            return "openai"
        else:
            return "stub"

    def generate_speech(
        self,
        text: str,
        output_path: Path,
        previous_text: Optional[str] = None,
        next_text: Optional[str] = None,
        voice_id: Optional[str] = None,
    ) -> Path:
        """
        Generate speech from text and save to file.

        Args:
            text: Text to convert to speech
            output_path: Path to save audio file
            previous_text: Narration spoken just before (prosody context, if supported)
            next_text: Narration spoken just after (prosody context, if supported)
            voice_id: Optional provider-specific voice ID

        Returns:
            Path of the written audio file

        Raises:
            ValueError: If text is empty
            TTSError: If the provider call fails
        """
        if not text or not text.strip():
            raise ValueError("Text cannot be empty")

        self.logger.debug(f"Generating speech using {self.provider} provider for {len(text)} characters...")
        output_path.parent.mkdir(parents=True, exist_ok=True)

        if self.provider == "elevenlabs":
            self._generate_elevenlabs(text, output_path, previous_text, next_text, voice_id)
        elif self.provider == "openai":
            self._generate_openai(text, output_path, voice_id)
        else:
            self._generate_stub(text, output_path)

        return output_path

    def _generate_elevenlabs(
        self,
        text: str,
        output_path: Path,
        previous_text: Optional[str],
        next_text: Optional[str],
        voice_id: Optional[str] = None,
    ) -> None:
        """Generate speech using ElevenLabs API."""
        voice_id = voice_id or self.settings.elevenlabs_voice_id
        if not voice_id:
            raise TTSError("ElevenLabs voice ID not configured")

        url = f"https://api.elevenlabs.io/v1/text-to-speech/{voice_id}"

        headers = {
            "Accept": "audio/mpeg",
            "Content-Type": "application/json",
            "xi-api-key": self.settings.elevenlabs_api_key,
        }

        data = {
            "text": text,
            "model_id": self.settings.elevenlabs_model_id,
            "voice_settings": {
                "stability": 0.5,
                "similarity_boost": 0.75,
            },
        }
        if previous_text:
            data["previous_text"] = previous_text
        if next_text:
            data["next_text"] = next_text

        try:
            response = requests.post(url, json=data, headers=headers, timeout=self.settings.tts_timeout_seconds)
        except requests.exceptions.RequestException as e:
            raise TTSError(f"Network error calling ElevenLabs API: {e}") from e

        if response.status_code != 200:
            raise TTSError(f"ElevenLabs API returned status {response.status_code}: {response.text[:200]}")

        with open(output_path, "wb") as f:
            f.write(response.content)

    def _generate_openai(self, text: str, output_path: Path, voice_id: Optional[str] = None) -> None:
        """Generate speech using OpenAI TTS API."""
        try:
            from openai import OpenAI, OpenAIError
        except ImportError:
            raise ImportError("OpenAI package not installed. Install with: pip install openai")

        client = OpenAI(api_key=self.settings.openai_api_key, timeout=self.settings.tts_timeout_seconds)

        try:
            with client.audio.speech.with_streaming_response.create(
                model="tts-1",
                voice=voice_id or self.settings.openai_tts_voice,
                input=text,
            ) as response:
                response.stream_to_file(str(output_path))
        except OpenAIError as e:
            raise TTSError(f"OpenAI TTS API error: {e}") from e

    def _generate_stub(self, text: str, output_path: Path) -> None:
        """
        Generate stub audio (silent placeholder).

        Length follows the spoken-duration estimate so timelines stay realistic
        when no TTS provider is configured.
        """
        from pydub import AudioSegment

        self.logger.warning("Using stub TTS - generating silent audio placeholder")
        duration_seconds = max(1.0, estimate_spoken_duration(text, self.settings.words_per_minute))
        silent_audio = AudioSegment.silent(duration=int(duration_seconds * 1000))
        silent_audio.export(str(output_path), format="mp3")
