"""Telegram API client adapter."""

from dataclasses import dataclass

import httpx

from nutrichat.services.notifications import TelegramClient


@dataclass
class HttpxTelegramClient(TelegramClient):
    """Telegram client implemented with httpx."""

    bot_token: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, bot_token: str) -> "HttpxTelegramClient":
        """Create a Telegram client with a managed httpx session."""
        return cls(bot_token=bot_token, http_client=httpx.AsyncClient())

    async def send_message(self, chat_id: str, text: str) -> None:
        """Send a message using Telegram's sendMessage API."""
        url = f"https://api.telegram.org/bot{self.bot_token}/sendMessage"
        payload: dict[str, object] = {"chat_id": chat_id, "text": text}
        response = await self.http_client.post(url, json=payload, timeout=10)
        response.raise_for_status()

    async def send_photo(
        self, chat_id: str, photo: bytes, caption: str | None = None
    ) -> None:
        """Upload a photo using Telegram's sendPhoto API."""
        url = f"https://api.telegram.org/bot{self.bot_token}/sendPhoto"
        data = {"chat_id": chat_id}
        if caption:
            data["caption"] = caption
        response = await self.http_client.post(
            url,
            data=data,
            files={"photo": ("image.jpg", photo)},
            timeout=30,
        )
        response.raise_for_status()

    async def send_voice(self, chat_id: str, voice: bytes) -> None:
        """Upload a voice note using Telegram's sendVoice API."""
        url = f"https://api.telegram.org/bot{self.bot_token}/sendVoice"
        response = await self.http_client.post(
            url,
            data={"chat_id": chat_id},
            files={"voice": ("voice.ogg", voice)},
            timeout=30,
        )
        response.raise_for_status()

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()
