"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Credentials default to empty strings: a missing key degrades the feature
    that needs it into an inline error message instead of failing startup.
    """

    supabase_url: str = ""
    supabase_key: str = ""
    chat_api_key: str = ""
    chat_base_url: str = "https://api.deepseek.com"
    chat_model: str = "deepseek-chat"
    chat_temperature: float = 0.7
    classifier_api_key: str = ""
    classifier_model: str = "gpt-4o-mini"
    classifier_audio_model: str = "gpt-4o-audio-preview"
    classifier_transcription_model: str = "whisper-1"
    telegram_bot_token: str = ""
    telegram_chat_id: str = ""
    sheets_timeout_seconds: float = 5.0
    history_window: int = 10
    behavioral_insight_delay_seconds: float = 1.5
    biometric_insight_delay_seconds: float = 3.0
    preferences_path: str | None = None
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def missing_datastore_keys(settings: Settings) -> list[str]:
    """Return the names of unset datastore credentials."""
    missing = []
    if not settings.supabase_url:
        missing.append("SUPABASE_URL")
    if not settings.supabase_key:
        missing.append("SUPABASE_KEY")
    return missing
