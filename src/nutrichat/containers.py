"""Dependency container wiring for the application."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nutrichat.adapters.json_file_store import JsonFileLocalStore
from nutrichat.adapters.openai_chat_client import OpenAIChatClient
from nutrichat.adapters.openai_classifier_client import OpenAIClassifierClient
from nutrichat.adapters.sheets_webhook_client import HttpxSheetsWebhookClient
from nutrichat.adapters.supabase_meal_repository import SupabaseMealRepository
from nutrichat.adapters.supabase_profile_repository import (
    SupabaseProfileRepository,
)
from nutrichat.adapters.telegram_client import HttpxTelegramClient
from nutrichat.config import Settings, missing_datastore_keys
from nutrichat.services.advisor import AdvisorService
from nutrichat.services.chat import CoachChatService
from nutrichat.services.classifier import MealClassifierService
from nutrichat.services.food_log import FoodLogService
from nutrichat.services.notifications import NotificationService
from nutrichat.services.preferences import (
    InMemoryLocalStore,
    LocalStore,
    PreferencesService,
)
from nutrichat.services.profiles import AuthService, ProfileService
from nutrichat.services.sessions import SessionManager
from nutrichat.services.sync import MealSyncService

logger = logging.getLogger(__name__)

PLACEHOLDER_SUPABASE_URL = "https://placeholder.supabase.co"
PLACEHOLDER_SUPABASE_KEY = "placeholder-key"


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    preferences: PreferencesService
    profile_service: ProfileService
    auth_service: AuthService
    food_log_service: FoodLogService
    chat_service: CoachChatService
    classifier: MealClassifierService
    sync_service: MealSyncService
    notifications: NotificationService
    advisor: AdvisorService
    session_manager: SessionManager
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    missing = missing_datastore_keys(resolved_settings)
    if missing:
        # The datastore client still needs a URL; calls against it fail and
        # are logged by the services that make them.
        logger.warning(
            "Missing critical keys: %s. App may function in offline mode.",
            ", ".join(missing),
        )
    supabase_client = create_client(
        resolved_settings.supabase_url or PLACEHOLDER_SUPABASE_URL,
        resolved_settings.supabase_key or PLACEHOLDER_SUPABASE_KEY,
    )
    profile_service = ProfileService(SupabaseProfileRepository(supabase_client))
    food_log_service = FoodLogService(SupabaseMealRepository(supabase_client))

    store: LocalStore
    if resolved_settings.preferences_path:
        store = JsonFileLocalStore.create(resolved_settings.preferences_path)
    else:
        store = InMemoryLocalStore()
    preferences = PreferencesService(store)

    chat_client = (
        OpenAIChatClient.create(
            api_key=resolved_settings.chat_api_key,
            base_url=resolved_settings.chat_base_url,
        )
        if resolved_settings.chat_api_key
        else None
    )
    chat_service = CoachChatService(
        client=chat_client,
        model=resolved_settings.chat_model,
        temperature=resolved_settings.chat_temperature,
    )
    classifier_client = (
        OpenAIClassifierClient.create(
            resolved_settings.classifier_api_key,
            transcription_model=resolved_settings.classifier_transcription_model,
        )
        if resolved_settings.classifier_api_key
        else None
    )
    classifier = MealClassifierService(
        client=classifier_client,
        image_model=resolved_settings.classifier_model,
        audio_model=resolved_settings.classifier_audio_model,
    )
    sheets_client = HttpxSheetsWebhookClient.create(
        timeout=resolved_settings.sheets_timeout_seconds
    )
    sync_service = MealSyncService(
        sheets_client=sheets_client, food_log_service=food_log_service
    )
    telegram_client = (
        HttpxTelegramClient.create(resolved_settings.telegram_bot_token)
        if resolved_settings.telegram_bot_token
        else None
    )
    notifications = NotificationService(
        client=telegram_client, chat_id=resolved_settings.telegram_chat_id
    )
    advisor = AdvisorService(chat_service=chat_service, preferences=preferences)
    auth_service = AuthService(profile_service)
    session_manager = SessionManager(
        auth_service=auth_service,
        profile_service=profile_service,
        preferences=preferences,
        food_log_service=food_log_service,
        chat_service=chat_service,
        classifier=classifier,
        sync_service=sync_service,
        notifications=notifications,
        advisor=advisor,
        history_window=resolved_settings.history_window,
        behavioral_delay=resolved_settings.behavioral_insight_delay_seconds,
        biometric_delay=resolved_settings.biometric_insight_delay_seconds,
    )

    async def close_resources() -> None:
        session_manager.close_all()
        await sheets_client.close()
        if telegram_client:
            await telegram_client.close()
        if chat_client:
            await chat_client.close()
        if classifier_client:
            await classifier_client.close()

    return AppContainer(
        settings=resolved_settings,
        preferences=preferences,
        profile_service=profile_service,
        auth_service=auth_service,
        food_log_service=food_log_service,
        chat_service=chat_service,
        classifier=classifier,
        sync_service=sync_service,
        notifications=notifications,
        advisor=advisor,
        session_manager=session_manager,
        close_resources=close_resources,
    )
