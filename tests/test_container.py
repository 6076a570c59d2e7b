"""Tests for container wiring."""

import asyncio

from nutrichat.adapters.json_file_store import JsonFileLocalStore
from nutrichat.config import Settings, missing_datastore_keys
from nutrichat.containers import build_container
from nutrichat.services.preferences import InMemoryLocalStore


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)

    assert container.session_manager is not None
    assert container.chat_service.client is not None
    assert container.classifier.client is not None
    assert container.notifications.enabled is True
    assert isinstance(container.preferences.store, InMemoryLocalStore)
    asyncio.run(container.close_resources())


def test_adapter_settings_are_wired(settings) -> None:
    settings = settings.model_copy(
        update={
            "sheets_timeout_seconds": 2.5,
            "classifier_transcription_model": "gpt-4o-mini-transcribe",
        }
    )

    container = build_container(settings)

    assert container.sync_service.sheets_client.timeout == 2.5
    assert container.classifier.client.transcription_model == (
        "gpt-4o-mini-transcribe"
    )
    asyncio.run(container.close_resources())


def test_missing_keys_degrade_to_disabled_clients(tmp_path) -> None:
    settings = Settings(
        supabase_url="",
        supabase_key="",
        chat_api_key="",
        classifier_api_key="",
        telegram_bot_token="",
        preferences_path=str(tmp_path / "prefs.json"),
    )

    container = build_container(settings)

    assert missing_datastore_keys(settings) == ["SUPABASE_URL", "SUPABASE_KEY"]
    assert container.chat_service.client is None
    assert container.classifier.client is None
    assert container.notifications.enabled is False
    assert isinstance(container.preferences.store, JsonFileLocalStore)
    asyncio.run(container.close_resources())
