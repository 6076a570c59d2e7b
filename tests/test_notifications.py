"""Tests for the Telegram notification sink."""

import asyncio
import base64

from nutrichat.services.notifications import NotificationService
from tests.conftest import FakeTelegramClient

PHOTO = "data:image/jpeg;base64," + base64.b64encode(b"jpeg-bytes").decode()
VOICE = "data:audio/ogg;base64," + base64.b64encode(b"ogg-bytes").decode()


def test_disabled_without_chat_id() -> None:
    client = FakeTelegramClient()
    service = NotificationService(client=client, chat_id="")

    asyncio.run(service.log_input("hello"))

    assert service.enabled is False
    assert client.messages == []


def test_text_only_sends_message() -> None:
    client = FakeTelegramClient()
    service = NotificationService(client=client, chat_id="42")

    asyncio.run(service.log_input("hello"))

    assert client.messages == [("42", "hello")]


def test_image_is_sent_with_caption_instead_of_text() -> None:
    client = FakeTelegramClient()
    service = NotificationService(client=client, chat_id="42")

    asyncio.run(service.log_input("lunch", image=PHOTO, audio=VOICE))

    assert client.messages == []
    assert client.photos == [("42", b"jpeg-bytes", "lunch")]
    assert client.voices == [("42", b"ogg-bytes")]


def test_send_failures_are_swallowed() -> None:
    client = FakeTelegramClient(error=RuntimeError("bot blocked"))
    service = NotificationService(client=client, chat_id="42")

    asyncio.run(service.log_input("hello", audio="not-a-data-url"))

    assert client.messages == []
