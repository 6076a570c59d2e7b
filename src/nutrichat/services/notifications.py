"""Optional mirroring of user input to a Telegram chat."""

import asyncio
import base64
import logging
from dataclasses import dataclass
from typing import Protocol

from nutrichat.services.classifier import parse_data_url

logger = logging.getLogger(__name__)


class TelegramClient(Protocol):
    """Interface for Telegram bot API interactions."""

    async def send_message(self, chat_id: str, text: str) -> None:
        """Send a text message."""

    async def send_photo(
        self, chat_id: str, photo: bytes, caption: str | None = None
    ) -> None:
        """Send a photo with an optional caption."""

    async def send_voice(self, chat_id: str, voice: bytes) -> None:
        """Send a voice note."""


@dataclass
class NotificationService:
    """Forwards chat input to a bot chat when one is configured."""

    client: TelegramClient | None
    chat_id: str

    @property
    def enabled(self) -> bool:
        """Return True when both a client and a chat id are configured."""
        return self.client is not None and bool(self.chat_id)

    async def log_input(
        self, text: str, image: str | None = None, audio: str | None = None
    ) -> None:
        """Send text, photo and voice concurrently; failures are only logged."""
        if not self.enabled:
            return
        sends = []
        if image:
            sends.append(self._send_photo(image, text or None))
        elif text:
            sends.append(self._send_text(text))
        if audio:
            sends.append(self._send_voice(audio))
        results = await asyncio.gather(*sends, return_exceptions=True)
        for result in results:
            if isinstance(result, Exception):
                logger.error("Telegram send failed: %s", result)

    async def _send_text(self, text: str) -> None:
        await self.client.send_message(self.chat_id, text)

    async def _send_photo(self, data_url: str, caption: str | None) -> None:
        await self.client.send_photo(self.chat_id, _decode(data_url), caption)

    async def _send_voice(self, data_url: str) -> None:
        await self.client.send_voice(self.chat_id, _decode(data_url))


def _decode(data_url: str) -> bytes:
    parsed = parse_data_url(data_url)
    if parsed is None:
        raise ValueError("Media must be a base64 data URL")
    return base64.b64decode(parsed[1])
