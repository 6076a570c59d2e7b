"""Mirroring of logged meals to external targets."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

from nutrichat.domain.food import FoodItem
from nutrichat.domain.sync import SyncResult
from nutrichat.services.food_log import FoodLogService

logger = logging.getLogger(__name__)

SHEETS_TARGET = "sheets"
DATASTORE_TARGET = "datastore"


class SheetsWebhookClient(Protocol):
    """Interface for a spreadsheet webhook."""

    async def post_row(self, url: str, row: dict[str, object]) -> None:
        """Post one row to the webhook."""


@dataclass
class MealSyncService:
    """Mirrors a meal to the spreadsheet webhook and the datastore.

    Each configured target yields one SyncResult; nothing is rolled back when
    a target fails.
    """

    sheets_client: SheetsWebhookClient
    food_log_service: FoodLogService

    async def mirror(
        self, item: FoodItem, phone_number: str | None, sheet_url: str
    ) -> list[SyncResult]:
        """Send the meal to every configured target."""
        results: list[SyncResult] = []
        if sheet_url:
            results.append(await self._post_to_sheet(sheet_url, item))
        if phone_number:
            ok = self.food_log_service.add(phone_number, item)
            results.append(
                SyncResult(
                    target=DATASTORE_TARGET,
                    ok=ok,
                    error=None if ok else "Datastore write failed",
                )
            )
        return results

    async def _post_to_sheet(self, url: str, item: FoodItem) -> SyncResult:
        row = {
            "date": datetime.now(tz=UTC).isoformat(),
            "name": item.name,
            "calories": item.calories,
            "protein": item.protein,
            "carbs": item.carbs,
            "fat": item.fat,
            "quantity": item.quantity,
        }
        try:
            await self.sheets_client.post_row(url, row)
        except Exception as exc:
            logger.exception("Google Sheets sync failed", extra={"log_id": item.id})
            return SyncResult(target=SHEETS_TARGET, ok=False, error=str(exc))
        logger.info("Synced meal to Google Sheets", extra={"log_id": item.id})
        return SyncResult(target=SHEETS_TARGET, ok=True)
