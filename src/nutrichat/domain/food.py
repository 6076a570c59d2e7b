"""Domain models for the food log."""

from dataclasses import dataclass

DEFAULT_QUANTITY = "1 serving"


@dataclass(frozen=True)
class FoodItem:
    """A logged food entry with its macros."""

    id: str
    name: str
    quantity: str
    calories: float
    protein: float
    carbs: float
    fat: float
    timestamp: int


@dataclass(frozen=True)
class DailyStats:
    """Macro totals for the current day's log."""

    total_calories: float = 0.0
    total_protein: float = 0.0
    total_carbs: float = 0.0
    total_fat: float = 0.0


def aggregate_daily_stats(items: list[FoodItem]) -> DailyStats:
    """Fold a food log into daily totals."""
    total = DailyStats()
    for item in items:
        total = DailyStats(
            total_calories=total.total_calories + item.calories,
            total_protein=total.total_protein + item.protein,
            total_carbs=total.total_carbs + item.carbs,
            total_fat=total.total_fat + item.fat,
        )
    return total
