"""Supabase repository for logged meals."""

from dataclasses import dataclass
from datetime import UTC, date, datetime

from supabase import Client

from nutrichat.domain.food import DEFAULT_QUANTITY, FoodItem
from nutrichat.services.food_log import MealRepository

_COLUMNS = {
    "name": "meal_description",
    "calories": "calories",
    "protein": "proteins",
    "carbs": "carbs",
    "fat": "fats",
}


@dataclass
class SupabaseMealRepository(MealRepository):
    """Supabase implementation for the ``Meals`` table.

    Macro columns are string-encoded. The table has no serving-size column, so
    quantity is never written and reads back as the default.
    """

    client: Client

    def list_logs(self, phone_number: str, day: date | None = None) -> list[FoodItem]:
        """Return meals for a phone number, optionally for one day."""
        query = self.client.table("Meals").select("*").eq("phone_number", phone_number)
        if day is not None:
            query = query.eq("date", day.isoformat())
        response = query.order("created_at", desc=True).execute()
        return [_parse_meal(row) for row in response.data or []]

    def add_log(self, phone_number: str, item: FoodItem) -> None:
        """Insert a meal row keyed by the item's id."""
        created_at = datetime.fromtimestamp(item.timestamp / 1000, tz=UTC)
        self.client.table("Meals").insert(
            {
                "uuid": item.id,
                "phone_number": phone_number,
                "meal_description": item.name,
                "calories": _encode(item.calories),
                "proteins": _encode(item.protein),
                "carbs": _encode(item.carbs),
                "fats": _encode(item.fat),
                "date": created_at.date().isoformat(),
                "created_at": created_at.isoformat(),
            }
        ).execute()

    def update_log(self, log_id: str, updates: dict[str, object]) -> None:
        """Update the mapped columns present in updates."""
        payload: dict[str, object] = {}
        for field_name, column in _COLUMNS.items():
            if field_name not in updates:
                continue
            value = updates[field_name]
            payload[column] = value if field_name == "name" else _encode(value)
        if not payload:
            return
        self.client.table("Meals").update(payload).eq("uuid", log_id).execute()

    def delete_log(self, log_id: str) -> None:
        """Delete a meal row."""
        self.client.table("Meals").delete().eq("uuid", log_id).execute()


def _encode(value: object) -> str:
    number = float(value)  # type: ignore[arg-type]
    if number.is_integer():
        return str(int(number))
    return str(number)


def _decode(value: object) -> float:
    try:
        return float(str(value))
    except ValueError:
        return 0.0


def _parse_meal(row: dict[str, object]) -> FoodItem:
    created_at = row.get("created_at")
    timestamp = (
        int(datetime.fromisoformat(str(created_at)).timestamp() * 1000)
        if created_at
        else 0
    )
    return FoodItem(
        id=str(row.get("uuid", "")),
        name=str(row.get("meal_description") or ""),
        quantity=DEFAULT_QUANTITY,
        calories=_decode(row.get("calories")),
        protein=_decode(row.get("proteins")),
        carbs=_decode(row.get("carbs")),
        fat=_decode(row.get("fats")),
        timestamp=timestamp,
    )
