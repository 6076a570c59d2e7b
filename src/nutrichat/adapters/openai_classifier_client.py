"""OpenAI client for meal photo and voice classification."""

import base64
import logging
from dataclasses import dataclass

from openai import AsyncOpenAI

from nutrichat.services.classifier import MealClassifierClient

logger = logging.getLogger(__name__)

# Chat completions only accept these two formats as input_audio.
_AUDIO_FORMATS = {
    "audio/wav": "wav",
    "audio/x-wav": "wav",
    "audio/wave": "wav",
    "audio/mpeg": "mp3",
    "audio/mp3": "mp3",
}

DEFAULT_TRANSCRIPTION_MODEL = "whisper-1"


@dataclass
class OpenAIClassifierClient(MealClassifierClient):
    """Classifier backed by the Responses API (images) and chat audio input.

    Browser recordings (webm, ogg, m4a) cannot be sent as chat audio, so they
    are transcribed first and the transcript is classified as text.
    """

    client: AsyncOpenAI
    transcription_model: str = DEFAULT_TRANSCRIPTION_MODEL

    @classmethod
    def create(
        cls, api_key: str, transcription_model: str = DEFAULT_TRANSCRIPTION_MODEL
    ) -> "OpenAIClassifierClient":
        """Create a classifier client."""
        return cls(
            client=AsyncOpenAI(api_key=api_key),
            transcription_model=transcription_model,
        )

    async def classify_image(self, *, model: str, data_url: str, prompt: str) -> str:
        """Send an inline image with the rubric and return the output text."""
        response = await self.client.responses.create(
            model=model,
            input=[
                {
                    "role": "user",
                    "content": [
                        {"type": "input_image", "image_url": data_url},
                        {"type": "input_text", "text": prompt},
                    ],
                }
            ],
        )
        return response.output_text or ""

    async def classify_audio(
        self, *, model: str, mime_type: str, data: str, prompt: str
    ) -> str:
        """Classify base64 audio with the rubric and return the text."""
        fmt = audio_format(mime_type)
        if fmt is None:
            transcript = await self.transcribe(mime_type, data)
            content: list[dict[str, object]] = [
                {"type": "text", "text": prompt},
                {"type": "text", "text": f"Voice note transcript: {transcript}"},
            ]
        else:
            content = [
                {"type": "text", "text": prompt},
                {"type": "input_audio", "input_audio": {"data": data, "format": fmt}},
            ]
        response = await self.client.chat.completions.create(
            model=model,
            modalities=["text"],
            messages=[{"role": "user", "content": content}],
        )
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    async def transcribe(self, mime_type: str, data: str) -> str:
        """Transcribe base64 audio in any container the transcription API reads."""
        upload = (f"voice.{file_extension(mime_type)}", base64.b64decode(data))
        logger.info("Transcribing %s voice note", mime_type)
        transcription = await self.client.audio.transcriptions.create(
            model=self.transcription_model, file=upload
        )
        return transcription.text

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.close()


def audio_format(mime_type: str) -> str | None:
    """Return the chat input_audio format for a MIME type, or None if unsupported."""
    base = mime_type.split(";", maxsplit=1)[0].strip().lower()
    return _AUDIO_FORMATS.get(base)


def file_extension(mime_type: str) -> str:
    """Map a MIME type such as ``audio/webm;codecs=opus`` to a file extension."""
    base = mime_type.split(";", maxsplit=1)[0].strip().lower()
    subtype = base.rsplit("/", maxsplit=1)[-1].removeprefix("x-")
    if subtype == "mpeg":
        return "mp3"
    if subtype == "mp4":
        return "m4a"
    return subtype or "webm"
