"""Food log service backed by the remote meal table."""

import logging
from dataclasses import dataclass, replace
from datetime import UTC, date, datetime
from typing import Protocol
from uuid import uuid4

from nutrichat.domain.food import DEFAULT_QUANTITY, FoodItem

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "quantity", "calories", "protein", "carbs", "fat")


class MealRepository(Protocol):
    """Persistence interface for logged meals."""

    def list_logs(self, phone_number: str, day: date | None = None) -> list[FoodItem]:
        """Return meals for a phone number, newest first."""

    def add_log(self, phone_number: str, item: FoodItem) -> None:
        """Insert a meal row."""

    def update_log(self, log_id: str, updates: dict[str, object]) -> None:
        """Update the given fields of a meal row."""

    def delete_log(self, log_id: str) -> None:
        """Delete a meal row."""


def new_food_item(  # noqa: PLR0913
    name: str,
    calories: float,
    protein: float,
    carbs: float,
    fat: float,
    quantity: str = DEFAULT_QUANTITY,
) -> FoodItem:
    """Create a food item with a client-side id and the current timestamp."""
    return FoodItem(
        id=str(uuid4()),
        name=name,
        quantity=quantity,
        calories=calories,
        protein=protein,
        carbs=carbs,
        fat=fat,
        timestamp=now_millis(),
    )


def now_millis() -> int:
    """Return the current UTC time in epoch milliseconds."""
    return int(datetime.now(tz=UTC).timestamp() * 1000)


def today_iso() -> str:
    """Return today's UTC date as YYYY-MM-DD."""
    return datetime.now(tz=UTC).date().isoformat()


def sort_newest_first(items: list[FoodItem]) -> list[FoodItem]:
    """Return items ordered by timestamp, newest first."""
    return sorted(items, key=lambda item: item.timestamp, reverse=True)


def search_items(items: list[FoodItem], query: str) -> list[FoodItem]:
    """Filter items by case-insensitive name substring, newest first."""
    needle = query.lower()
    return sort_newest_first([item for item in items if needle in item.name.lower()])


@dataclass
class FoodLogService:
    """Reads and writes meals in the remote datastore.

    Datastore failures are logged and treated as no-ops so the caller keeps
    its local state.
    """

    repository: MealRepository

    def load_today(self, phone_number: str) -> list[FoodItem] | None:
        """Return today's meals, or None when the datastore is unreachable."""
        try:
            return self.repository.list_logs(
                phone_number, datetime.now(tz=UTC).date()
            )
        except Exception:
            logger.exception("Failed to fetch logs", extra={"phone": phone_number})
            return None

    def add(self, phone_number: str, item: FoodItem) -> bool:
        """Persist a new meal; return False if the write failed."""
        try:
            self.repository.add_log(phone_number, item)
        except Exception:
            logger.exception("Error adding log", extra={"log_id": item.id})
            return False
        return True

    def update(self, item: FoodItem, updates: dict[str, object]) -> FoodItem:
        """Apply editable updates to an item and persist them."""
        changes = {key: updates[key] for key in EDITABLE_FIELDS if key in updates}
        updated = replace(item, **changes)
        try:
            self.repository.update_log(item.id, changes)
        except Exception:
            logger.exception("Error updating log", extra={"log_id": item.id})
        return updated

    def delete(self, log_id: str) -> None:
        """Delete a meal row."""
        try:
            self.repository.delete_log(log_id)
        except Exception:
            logger.exception("Error deleting log", extra={"log_id": log_id})
