"""Tool schema and executor for assistant function calls."""

import json
import logging
from collections.abc import Awaitable, Callable
from dataclasses import asdict, dataclass, replace

from nutrichat.domain.insights import InsightAlert
from nutrichat.domain.state import AppState
from nutrichat.services.food_log import new_food_item
from nutrichat.services.insights import InsightScheduler, behavioral_insight
from nutrichat.services.preferences import PreferencesService
from nutrichat.services.profiles import ProfileService
from nutrichat.services.sync import MealSyncService

logger = logging.getLogger(__name__)

TOOL_SCHEMA: list[dict[str, object]] = [
    {
        "type": "function",
        "function": {
            "name": "appendMealData",
            "description": "Store a meal row in the logs after analyzing food input.",
            "parameters": {
                "type": "object",
                "properties": {
                    "description": {
                        "type": "string",
                        "description": "Short description of the meal",
                    },
                    "calories": {"type": "number"},
                    "protein": {"type": "number"},
                    "carbs": {"type": "number"},
                    "fat": {"type": "number"},
                },
                "required": ["description", "calories", "protein", "carbs", "fat"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "updateProfileData",
            "description": "Update the user's profile targets.",
            "parameters": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "calorieTarget": {"type": "number"},
                    "proteinTarget": {"type": "number"},
                },
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "getUserData",
            "description": "Fetch the user's current profile info.",
        },
    },
    {
        "type": "function",
        "function": {
            "name": "getReport",
            "description": "Generate or fetch the daily report.",
            "parameters": {
                "type": "object",
                "properties": {
                    "date": {"type": "string", "description": "YYYY-MM-DD"},
                },
                "required": ["date"],
            },
        },
    },
]

ToolHandler = Callable[[AppState, dict[str, object]], Awaitable[str]]


@dataclass
class ToolExecutor:
    """Runs assistant tool calls against a session's state."""

    profile_service: ProfileService
    preferences: PreferencesService
    sync_service: MealSyncService
    insight_scheduler: InsightScheduler
    behavioral_delay: float = 1.5

    async def execute(self, state: AppState, name: str, arguments: str) -> str:
        """Dispatch a tool by name and return its JSON-encoded result."""
        handler = self._handlers().get(name)
        if handler is None:
            logger.warning("Unknown tool requested: %s", name)
            return json.dumps({"error": "Tool not found"})
        return await handler(state, parse_arguments(arguments))

    def _handlers(self) -> dict[str, ToolHandler]:
        return {
            "appendMealData": self.append_meal,
            "updateProfileData": self.update_profile,
            "getUserData": self.get_user_data,
            "getReport": self.get_report,
        }

    async def append_meal(self, state: AppState, args: dict[str, object]) -> str:
        """Log a meal, check for trigger foods, and mirror it externally."""
        item = new_food_item(
            name=str(args.get("description") or "Meal"),
            calories=_number(args.get("calories")),
            protein=_number(args.get("protein")),
            carbs=_number(args.get("carbs")),
            fat=_number(args.get("fat")),
        )
        state.food_log.append(item)
        alert = behavioral_insight(item)
        if alert:
            self.insight_scheduler.schedule(
                alert, self.behavioral_delay, lambda value: _deliver(state, value)
            )
        state.last_sync = await self.sync_service.mirror(
            item, state.profile.phone_number, state.sheet_url
        )
        for result in state.last_sync:
            if not result.ok:
                logger.warning(
                    "Meal sync to %s failed: %s", result.target, result.error
                )
        return json.dumps({"success": True, "message": "Meal logged successfully"})

    async def update_profile(self, state: AppState, args: dict[str, object]) -> str:
        """Merge the supplied fields into the profile and persist it."""
        changes: dict[str, object] = {}
        if args.get("name"):
            changes["name"] = str(args["name"])
        if args.get("calorieTarget"):
            changes["calorie_target"] = int(_number(args["calorieTarget"]))
        if args.get("proteinTarget"):
            changes["protein_target"] = int(_number(args["proteinTarget"]))
        state.profile = replace(state.profile, **changes)
        self.preferences.save_profile(state.profile)
        self.profile_service.save(state.profile)
        return json.dumps({"success": True, "message": "Profile updated"})

    async def get_user_data(self, state: AppState, args: dict[str, object]) -> str:
        """Return the current profile."""
        return json.dumps(asdict(state.profile))

    async def get_report(self, state: AppState, args: dict[str, object]) -> str:
        """Return the loaded day's totals, echoing the requested date."""
        # The date is not used for filtering; only today's log is loaded.
        return json.dumps(
            {
                "date": args.get("date"),
                "stats": asdict(state.daily_stats),
                "mealsLogged": len(state.food_log),
            }
        )


def parse_arguments(arguments: str) -> dict[str, object]:
    """Decode a tool call's JSON arguments, treating bad input as empty."""
    if not arguments:
        return {}
    try:
        parsed = json.loads(arguments)
    except json.JSONDecodeError:
        logger.warning("Malformed tool arguments: %s", arguments)
        return {}
    return parsed if isinstance(parsed, dict) else {}


def _deliver(state: AppState, alert: InsightAlert) -> None:
    state.insight = alert


def _number(value: object) -> float:
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return 0.0
    return 0.0
