"""Dashboard widget ordering and rendering."""

from dataclasses import asdict

from nutrichat.domain.state import AppState
from nutrichat.services.food_log import sort_newest_first
from nutrichat.services.scoring import compute_nutri_score

CARBS_GOAL_G = 250
FAT_GOAL_G = 70


def move_item(items: list[str], old_index: int, new_index: int) -> list[str]:
    """Return a copy of items with one element moved to a new index."""
    moved = list(items)
    if not moved:
        return moved
    element = moved.pop(old_index)
    moved.insert(new_index, element)
    return moved


def reorder(items: list[str], active_id: str, over_id: str | None) -> list[str]:
    """Apply a drag that dropped active_id onto over_id."""
    if over_id is None or active_id == over_id:
        return list(items)
    if active_id not in items or over_id not in items:
        return list(items)
    return move_item(items, items.index(active_id), items.index(over_id))


def render_widget(widget_id: str, state: AppState) -> dict[str, object] | None:
    """Return the payload for a widget, or None when the id is unknown."""
    stats = state.daily_stats
    profile = state.profile
    if widget_id == "nutriscore":
        score = compute_nutri_score(
            stats.total_calories,
            stats.total_protein,
            profile.calorie_target,
            profile.protein_target,
        )
        return {
            "score": score.score,
            "label": score.label,
            "calorie_percent": round(score.calorie_ratio * 100),
            "protein_percent": round(score.protein_ratio * 100),
            "overeating": score.overeating,
        }
    if widget_id == "charts":
        slices = [
            {"name": "Protein", "value": stats.total_protein},
            {"name": "Carbs", "value": stats.total_carbs},
            {"name": "Fat", "value": stats.total_fat},
        ]
        return {"slices": [entry for entry in slices if entry["value"] > 0]}
    if widget_id == "calories":
        return _macro_card("Calories", stats.total_calories, profile.calorie_target)
    if widget_id == "protein":
        return _macro_card("Protein", stats.total_protein, profile.protein_target)
    if widget_id == "carbs":
        return _macro_card("Carbs", stats.total_carbs, CARBS_GOAL_G)
    if widget_id == "fat":
        return _macro_card("Fat", stats.total_fat, FAT_GOAL_G)
    if widget_id == "foodlog":
        items = sort_newest_first(state.food_log)
        return {"items": [asdict(item) for item in items]}
    return None


def render_dashboard(state: AppState) -> list[dict[str, object]]:
    """Render every widget in the user's order."""
    return [
        {"id": widget_id, "data": render_widget(widget_id, state)}
        for widget_id in state.dashboard
    ]


def _macro_card(nutrient: str, value: float, goal: float) -> dict[str, object]:
    raw_percentage = (value / goal) * 100 if goal > 0 else 0.0
    unit = "kcal" if nutrient == "Calories" else "g"
    return {
        "type": nutrient,
        "value": value,
        "goal": goal,
        "unit": unit,
        "percentage": min(100.0, max(0.0, raw_percentage)),
        "is_over": raw_percentage > 100,
        "is_met": raw_percentage >= 100,
    }
