"""Tests for assistant tool execution."""

import asyncio
import json

from nutrichat.domain.state import AppState
from nutrichat.services.insights import InsightScheduler
from nutrichat.services.tools import TOOL_SCHEMA, parse_arguments
from tests.conftest import make_executor, make_food, make_profile


def test_schema_declares_four_tools() -> None:
    names = [tool["function"]["name"] for tool in TOOL_SCHEMA]

    assert names == ["appendMealData", "updateProfileData", "getUserData", "getReport"]


def test_append_meal_logs_and_mirrors(executor, state, meal_repository) -> None:
    arguments = json.dumps(
        {
            "description": "Oatmeal",
            "calories": 300,
            "protein": 10,
            "carbs": 50,
            "fat": 6,
        }
    )

    output = asyncio.run(executor.execute(state, "appendMealData", arguments))

    assert json.loads(output) == {
        "success": True,
        "message": "Meal logged successfully",
    }
    assert [item.name for item in state.food_log] == ["Oatmeal"]
    assert state.food_log[0].quantity == "1 serving"
    assert meal_repository.rows["5551234"] == state.food_log
    assert [result.target for result in state.last_sync] == ["datastore"]


def test_append_meal_posts_to_sheet_when_configured(
    executor, state, sheets_client
) -> None:
    state.sheet_url = "https://script.google.com/macros/s/abc/exec"

    asyncio.run(
        executor.execute(
            state,
            "appendMealData",
            '{"description": "Toast", "calories": 150, "protein": 5, '
            '"carbs": 25, "fat": 2}',
        )
    )

    url, row = sheets_client.rows[0]
    assert url == state.sheet_url
    assert row["name"] == "Toast"
    assert row["quantity"] == "1 serving"
    assert all(result.ok for result in state.last_sync)


def test_append_meal_trigger_food_delivers_insight(
    profile_repository, meal_repository, sheets_client, preferences
) -> None:
    state = AppState(profile=make_profile())
    executor = make_executor(
        profile_repository,
        meal_repository,
        sheets_client,
        preferences,
        scheduler=InsightScheduler(),
        behavioral_delay=0.01,
    )

    async def run() -> None:
        await executor.execute(
            state,
            "appendMealData",
            '{"description": "Chocolate Cake", "calories": 450}',
        )
        assert state.insight is None
        await asyncio.sleep(0.05)

    asyncio.run(run())

    assert state.insight is not None
    assert state.insight.type == "behavioral"


def test_append_meal_tolerates_missing_numbers(executor, state) -> None:
    asyncio.run(executor.execute(state, "appendMealData", '{"description": "Tea"}'))

    assert state.food_log[0].calories == 0


def test_update_profile_maps_targets(executor, state, profile_repository) -> None:
    output = asyncio.run(
        executor.execute(
            state,
            "updateProfileData",
            '{"calorieTarget": 2500, "proteinTarget": "180"}',
        )
    )

    assert json.loads(output)["success"] is True
    assert state.profile.calorie_target == 2500
    assert state.profile.protein_target == 180
    assert state.profile.name == "Alex"
    assert profile_repository.updates == [
        (
            "profile-1",
            {"name": "Alex", "calorie_target": 2500, "protein_target": 180},
        )
    ]


def test_update_profile_caches_locally(executor, state, preferences) -> None:
    asyncio.run(executor.execute(state, "updateProfileData", '{"name": "Sam"}'))

    cached = preferences.load_profile("5551234")
    assert cached is not None
    assert cached.name == "Sam"


def test_get_user_data_returns_profile(executor, state) -> None:
    output = json.loads(asyncio.run(executor.execute(state, "getUserData", "")))

    assert output["name"] == "Alex"
    assert output["calorie_target"] == 2200


def test_get_report_echoes_date_with_loaded_totals(executor, state) -> None:
    state.food_log.extend([make_food(), make_food(calories=100)])

    output = json.loads(
        asyncio.run(executor.execute(state, "getReport", '{"date": "2020-01-01"}'))
    )

    assert output["date"] == "2020-01-01"
    assert output["mealsLogged"] == 2
    assert output["stats"]["total_calories"] == 600


def test_unknown_tool_returns_error(executor, state) -> None:
    output = asyncio.run(executor.execute(state, "deleteEverything", "{}"))

    assert json.loads(output) == {"error": "Tool not found"}
    assert state.food_log == []


def test_parse_arguments_handles_bad_json() -> None:
    assert parse_arguments("") == {}
    assert parse_arguments("{not json") == {}
    assert parse_arguments("[1, 2]") == {}
    assert parse_arguments('{"a": 1}') == {"a": 1}
