"""Per-session application state."""

from dataclasses import dataclass, field

from nutrichat.domain.chat import Message
from nutrichat.domain.food import DailyStats, FoodItem, aggregate_daily_stats
from nutrichat.domain.insights import InsightAlert
from nutrichat.domain.profile import UserProfile, WearableConfig
from nutrichat.domain.sync import SyncResult

DEFAULT_DASHBOARD: tuple[str, ...] = (
    "nutriscore",
    "charts",
    "calories",
    "protein",
    "carbs",
    "fat",
    "foodlog",
)


@dataclass
class AppState:
    """Everything one signed-in user sees, owned by a single controller."""

    profile: UserProfile
    food_log: list[FoodItem] = field(default_factory=list)
    messages: list[Message] = field(default_factory=list)
    wearables: WearableConfig = field(default_factory=WearableConfig)
    dashboard: list[str] = field(default_factory=lambda: list(DEFAULT_DASHBOARD))
    dark_mode: bool = False
    sheet_url: str = ""
    insight: InsightAlert | None = None
    last_sync: list[SyncResult] = field(default_factory=list)
    in_flight: int = 0
    generation: int = 0

    @property
    def daily_stats(self) -> DailyStats:
        """Totals derived from the current food log."""
        return aggregate_daily_stats(self.food_log)

    @property
    def is_processing(self) -> bool:
        """Return True while a chat request is in flight."""
        return self.in_flight > 0
