"""Tests for meal mirroring."""

import asyncio

from nutrichat.services.food_log import FoodLogService
from nutrichat.services.sync import MealSyncService
from tests.conftest import FakeSheetsClient, InMemoryMealRepository, make_food


def test_mirror_reports_each_target() -> None:
    sheets = FakeSheetsClient()
    repository = InMemoryMealRepository()
    service = MealSyncService(sheets, FoodLogService(repository))
    item = make_food("Toast", calories=150)

    results = asyncio.run(service.mirror(item, "5551234", "https://hook"))

    assert [(result.target, result.ok) for result in results] == [
        ("sheets", True),
        ("datastore", True),
    ]
    assert sheets.rows[0][1]["calories"] == 150
    assert repository.rows["5551234"] == [item]


def test_mirror_skips_unconfigured_targets() -> None:
    service = MealSyncService(
        FakeSheetsClient(), FoodLogService(InMemoryMealRepository())
    )

    assert asyncio.run(service.mirror(make_food(), None, "")) == []


def test_mirror_failures_do_not_block_other_targets() -> None:
    sheets = FakeSheetsClient(error=RuntimeError("403 Forbidden"))
    repository = InMemoryMealRepository()
    service = MealSyncService(sheets, FoodLogService(repository))
    item = make_food()

    results = asyncio.run(service.mirror(item, "5551234", "https://hook"))

    assert results[0].ok is False
    assert results[0].error == "403 Forbidden"
    assert results[1].ok is True
    repository.fail = True
    failed = asyncio.run(service.mirror(item, "5551234", ""))
    assert failed[0].target == "datastore"
    assert failed[0].ok is False
