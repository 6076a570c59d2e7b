"""Locally persisted user preferences."""

import json
import logging
from dataclasses import asdict, dataclass, fields
from typing import Protocol

from nutrichat.domain.profile import UserProfile, WearableConfig

logger = logging.getLogger(__name__)

PROFILE_KEY = "USER_PROFILE"
WEARABLES_KEY = "WEARABLES_CONFIG"
DASHBOARD_KEY = "DASHBOARD_LAYOUT"
THEME_KEY = "THEME_MODE"
SHEET_URL_KEY = "GOOGLE_SHEETS_URL"
ADVISOR_CACHE_PREFIX = "ADVISOR_CACHE_"


class LocalStore(Protocol):
    """String key-value store for preferences."""

    def get(self, key: str) -> str | None:
        """Return the stored value for a key."""

    def set(self, key: str, value: str) -> None:
        """Store a value."""

    def remove(self, key: str) -> None:
        """Remove a key if present."""


@dataclass
class InMemoryLocalStore(LocalStore):
    """Process-local store used when no preferences file is configured."""

    _values: dict[str, str]

    def __init__(self) -> None:
        self._values = {}

    def get(self, key: str) -> str | None:
        """Return the stored value for a key."""
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        """Store a value."""
        self._values[key] = value

    def remove(self, key: str) -> None:
        """Remove a key if present."""
        self._values.pop(key, None)


@dataclass
class PreferencesService:
    """Typed access to preference keys, namespaced per phone number."""

    store: LocalStore

    def load_profile(self, phone_number: str) -> UserProfile | None:
        """Return the cached profile, if any."""
        raw = self._load_json(phone_number, PROFILE_KEY)
        if not isinstance(raw, dict):
            return None
        known = {item.name for item in fields(UserProfile)}
        try:
            return UserProfile(**{k: v for k, v in raw.items() if k in known})
        except TypeError:
            logger.warning("Ignoring malformed cached profile")
            return None

    def save_profile(self, profile: UserProfile) -> None:
        """Cache the profile under its phone number."""
        if profile.phone_number:
            self._save_json(profile.phone_number, PROFILE_KEY, asdict(profile))

    def clear_profile(self, phone_number: str) -> None:
        """Forget the cached profile."""
        self.store.remove(_key(phone_number, PROFILE_KEY))

    def load_wearables(self, phone_number: str) -> WearableConfig:
        """Return wearable flags, defaulting to none connected."""
        raw = self._load_json(phone_number, WEARABLES_KEY)
        if not isinstance(raw, dict):
            return WearableConfig()
        return WearableConfig(
            has_oura=bool(raw.get("has_oura", False)),
            has_apple_health=bool(raw.get("has_apple_health", False)),
            has_cgm=bool(raw.get("has_cgm", False)),
        )

    def save_wearables(self, phone_number: str, config: WearableConfig) -> None:
        """Persist wearable flags."""
        self._save_json(phone_number, WEARABLES_KEY, asdict(config))

    def load_dashboard(self, phone_number: str) -> list[str] | None:
        """Return the stored widget order verbatim."""
        raw = self._load_json(phone_number, DASHBOARD_KEY)
        if not isinstance(raw, list):
            return None
        return [str(item) for item in raw]

    def save_dashboard(self, phone_number: str, items: list[str]) -> None:
        """Persist the widget order."""
        self._save_json(phone_number, DASHBOARD_KEY, items)

    def load_dark_mode(self, phone_number: str) -> bool:
        """Return True when the dark theme is selected."""
        return self.store.get(_key(phone_number, THEME_KEY)) == "dark"

    def save_dark_mode(self, phone_number: str, dark: bool) -> None:
        """Persist the theme flag."""
        self.store.set(_key(phone_number, THEME_KEY), "dark" if dark else "light")

    def load_sheet_url(self, phone_number: str) -> str:
        """Return the spreadsheet webhook URL, or an empty string."""
        return self.store.get(_key(phone_number, SHEET_URL_KEY)) or ""

    def save_sheet_url(self, phone_number: str, url: str) -> None:
        """Persist the spreadsheet webhook URL."""
        self.store.set(_key(phone_number, SHEET_URL_KEY), url.strip())

    def get_cached_advice(self, phone_number: str, cache_key: str) -> str | None:
        """Return cached advisor text."""
        return self.store.get(_key(phone_number, cache_key))

    def cache_advice(self, phone_number: str, cache_key: str, advice: str) -> None:
        """Cache advisor text; failures only log."""
        try:
            self.store.set(_key(phone_number, cache_key), advice)
        except OSError:
            logger.warning("Advice cache write failed", exc_info=True)

    def _load_json(self, phone_number: str, name: str) -> object | None:
        raw = self.store.get(_key(phone_number, name))
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.exception("Preference load failed", extra={"key": name})
            return None

    def _save_json(self, phone_number: str, name: str, value: object) -> None:
        self.store.set(_key(phone_number, name), json.dumps(value))


def _key(phone_number: str, name: str) -> str:
    return f"{phone_number}:{name}"
