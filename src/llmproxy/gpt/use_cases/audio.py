"""Speech use cases: text-to-speech and transcription."""

import logging
from pathlib import Path
from typing import Any, Optional

from openai import AsyncOpenAI

from ..storage import GeneratedFileStore

logger = logging.getLogger(__name__)

TTS_MODEL = "tts-1"
TRANSCRIBE_MODEL = "gpt-4o-mini-transcribe"

VOICES = ("nova", "alloy", "echo", "fable", "onyx", "shimmer")
DEFAULT_VOICE = "nova"


class TextToAudioUseCase:
    """Synthesize speech into generated/audios/<id>.mp3.

    Unknown voice names fall back to ``nova``.
    """

    def __init__(self, client: AsyncOpenAI, store: GeneratedFileStore):
        self.client = client
        self.store = store

    async def execute(self, prompt: str, voice: Optional[str] = None) -> Path:
        selected = voice.lower() if voice and voice.lower() in VOICES else DEFAULT_VOICE
        path = self.store.new_audio_path()

        response = await self.client.audio.speech.create(
            model=TTS_MODEL,
            voice=selected,
            input=prompt,
            response_format="mp3",
        )
        path.write_bytes(response.content)

        logger.info(f"Generated audio {path.name} with voice {selected}")
        return path


class AudioToTextUseCase:
    """Transcribe an uploaded audio file.

    The optional prompt must be in the same language as the audio.
    """

    def __init__(self, client: AsyncOpenAI, language: str = "es"):
        self.client = client
        self.language = language

    async def execute(self, audio_path: Path, prompt: Optional[str] = None) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "model": TRANSCRIBE_MODEL,
            "file": audio_path,
            "language": self.language,
            "response_format": "json",
        }
        if prompt:
            kwargs["prompt"] = prompt

        transcription = await self.client.audio.transcriptions.create(**kwargs)
        logger.info(f"Transcribed {audio_path.name}")
        return transcription.model_dump(exclude_none=True)
