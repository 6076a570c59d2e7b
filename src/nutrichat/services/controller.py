"""Session controller owning the application state."""

import logging
import random
from dataclasses import asdict, dataclass, field, replace

from nutrichat.domain.chat import Message
from nutrichat.domain.food import DEFAULT_QUANTITY, FoodItem
from nutrichat.domain.insights import InsightAlert
from nutrichat.domain.profile import UserProfile, WearableConfig
from nutrichat.domain.state import AppState
from nutrichat.services.advisor import AdvisorService
from nutrichat.services.dashboard import render_dashboard, reorder
from nutrichat.services.food_log import (
    FoodLogService,
    new_food_item,
    search_items,
    today_iso,
)
from nutrichat.services.insights import InsightScheduler, biometric_insight
from nutrichat.services.orchestrator import ConversationOrchestrator
from nutrichat.services.preferences import PreferencesService
from nutrichat.services.profiles import ProfileService
from nutrichat.services.scoring import (
    FALLBACK_CALORIE_TARGET,
    FALLBACK_PROTEIN_TARGET,
    compute_nutri_score,
)

logger = logging.getLogger(__name__)

BIOMETRIC_FIELDS = ("weight", "height", "age", "gender")


@dataclass
class AppController:
    """Applies user actions to one session's state.

    Persisted fields are loaded once in ``start`` and written back by the
    action that changes them.
    """

    state: AppState
    preferences: PreferencesService
    profile_service: ProfileService
    food_log_service: FoodLogService
    orchestrator: ConversationOrchestrator
    advisor: AdvisorService
    insight_scheduler: InsightScheduler
    biometric_delay: float = 3.0
    rng: random.Random = field(default_factory=random.Random)

    @property
    def phone_number(self) -> str:
        """Return the signed-in phone number."""
        return self.state.profile.phone_number or ""

    def start(self) -> None:
        """Load persisted preferences and today's log for a new session."""
        phone = self.phone_number
        cached = self.preferences.load_profile(phone)
        if cached:
            biometrics = {name: getattr(cached, name) for name in BIOMETRIC_FIELDS}
            self.state.profile = replace(self.state.profile, **biometrics)
        self.preferences.save_profile(self.state.profile)
        self.state.wearables = self.preferences.load_wearables(phone)
        self.state.dashboard = (
            self.preferences.load_dashboard(phone) or self.state.dashboard
        )
        self.state.dark_mode = self.preferences.load_dark_mode(phone)
        self.state.sheet_url = self.preferences.load_sheet_url(phone)
        self.refresh()
        self._schedule_biometric_insight()

    def stop(self) -> None:
        """Cancel pending timers and clear session data."""
        self.insight_scheduler.cancel_all()
        self.preferences.clear_profile(self.phone_number)
        self.state.food_log.clear()
        self.state.messages.clear()
        self.state.insight = None

    def refresh(self) -> bool:
        """Reload today's meals; keep the current log if the fetch fails."""
        if not self.phone_number:
            return False
        logs = self.food_log_service.load_today(self.phone_number)
        if logs is None:
            return False
        self.state.food_log = logs
        return True

    def add_food(self, fields: dict[str, object]) -> FoodItem:
        """Log a manually entered food."""
        item = new_food_item(
            name=str(fields["name"]),
            calories=float(fields.get("calories", 0)),
            protein=float(fields.get("protein", 0)),
            carbs=float(fields.get("carbs", 0)),
            fat=float(fields.get("fat", 0)),
            quantity=str(fields.get("quantity") or DEFAULT_QUANTITY),
        )
        self.state.food_log.append(item)
        if self.phone_number:
            self.food_log_service.add(self.phone_number, item)
        return item

    def update_food(self, item_id: str, updates: dict[str, object]) -> FoodItem | None:
        """Edit a logged food; return None when the id is unknown."""
        for index, item in enumerate(self.state.food_log):
            if item.id == item_id:
                updated = self.food_log_service.update(item, updates)
                self.state.food_log[index] = updated
                return updated
        return None

    def remove_food(self, item_id: str) -> bool:
        """Delete a logged food; return False when the id is unknown."""
        remaining = [item for item in self.state.food_log if item.id != item_id]
        if len(remaining) == len(self.state.food_log):
            return False
        self.food_log_service.delete(item_id)
        self.state.food_log = remaining
        return True

    def search_food(self, query: str) -> list[FoodItem]:
        """Return logged foods matching a name query, newest first."""
        return search_items(self.state.food_log, query)

    def update_settings(self, values: dict[str, object]) -> UserProfile:
        """Apply submitted settings fields to the profile and persist it.

        Keys missing from values keep their current value. A submitted blank or
        non-positive biometric clears it; a blank target falls back to the
        default.
        """
        changes: dict[str, object] = {}
        if "name" in values:
            changes["name"] = str(values["name"] or self.state.profile.name)
        if "age" in values:
            changes["age"] = _positive_int(values["age"])
        if "weight" in values:
            changes["weight"] = _positive_float(values["weight"])
        if "height" in values:
            changes["height"] = _positive_float(values["height"])
        if "gender" in values:
            changes["gender"] = str(values["gender"] or "Male")
        if "calorie_target" in values:
            changes["calorie_target"] = (
                _positive_int(values["calorie_target"]) or FALLBACK_CALORIE_TARGET
            )
        if "protein_target" in values:
            changes["protein_target"] = (
                _positive_int(values["protein_target"]) or FALLBACK_PROTEIN_TARGET
            )
        profile = replace(self.state.profile, **changes)
        self.state.profile = profile
        self.preferences.save_profile(profile)
        self.profile_service.save(profile)
        return profile

    def update_wearables(self, config: WearableConfig) -> None:
        """Persist wearable flags and re-run the biometric check."""
        self.state.wearables = config
        self.preferences.save_wearables(self.phone_number, config)
        self._schedule_biometric_insight()

    def set_dark_mode(self, dark: bool) -> None:
        """Persist the theme flag."""
        self.state.dark_mode = dark
        self.preferences.save_dark_mode(self.phone_number, dark)

    def toggle_theme(self) -> bool:
        """Flip the theme and return the new dark-mode flag."""
        self.set_dark_mode(not self.state.dark_mode)
        return self.state.dark_mode

    def set_sheet_url(self, url: str) -> None:
        """Persist the spreadsheet webhook URL."""
        self.state.sheet_url = url.strip()
        self.preferences.save_sheet_url(self.phone_number, self.state.sheet_url)

    def reorder_dashboard(self, active_id: str, over_id: str | None) -> list[str]:
        """Apply a drag gesture to the widget order and persist it."""
        self.state.dashboard = reorder(self.state.dashboard, active_id, over_id)
        self.preferences.save_dashboard(self.phone_number, self.state.dashboard)
        return self.state.dashboard

    def set_dashboard(self, items: list[str]) -> None:
        """Store a widget order verbatim."""
        self.state.dashboard = list(items)
        self.preferences.save_dashboard(self.phone_number, self.state.dashboard)

    async def send_message(
        self, text: str, image: str | None = None, audio: str | None = None
    ) -> Message | None:
        """Run a chat turn through the orchestrator."""
        return await self.orchestrator.handle(self.state, text, image, audio)

    def delete_message(self, message_id: str) -> None:
        """Remove a chat message by id."""
        self.state.messages = [m for m in self.state.messages if m.id != message_id]

    async def get_advice(self) -> str:
        """Return advisor text for the current log."""
        return await self.advisor.get_advice(
            self.state.profile,
            self.state.daily_stats,
            self.state.food_log,
            today_iso(),
        )

    def take_insight(self) -> InsightAlert | None:
        """Return the pending alert once and discard it."""
        alert, self.state.insight = self.state.insight, None
        return alert

    def snapshot(self) -> dict[str, object]:
        """Return the dashboard view of the current state."""
        stats = self.state.daily_stats
        score = compute_nutri_score(
            stats.total_calories,
            stats.total_protein,
            self.state.profile.calorie_target,
            self.state.profile.protein_target,
        )
        return {
            "profile": asdict(self.state.profile),
            "stats": asdict(stats),
            "score": asdict(score),
            "dashboard": list(self.state.dashboard),
            "widgets": render_dashboard(self.state),
            "wearables": asdict(self.state.wearables),
            "dark_mode": self.state.dark_mode,
            "is_processing": self.state.is_processing,
            "last_sync": [asdict(result) for result in self.state.last_sync],
        }

    def _schedule_biometric_insight(self) -> None:
        alert = biometric_insight(self.state.wearables, self.rng)
        if alert:
            self.insight_scheduler.schedule(alert, self.biometric_delay, self._deliver)

    def _deliver(self, alert: InsightAlert) -> None:
        self.state.insight = alert


def _positive_int(value: object) -> int | None:
    number = _positive_float(value)
    return int(number) if number else None


def _positive_float(value: object) -> float | None:
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None
