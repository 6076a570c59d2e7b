"""Behavioral and biometric coaching insights."""

import asyncio
import logging
import random
from collections.abc import Callable
from dataclasses import dataclass, field

from nutrichat.domain.food import FoodItem
from nutrichat.domain.insights import InsightAlert
from nutrichat.domain.profile import WearableConfig

logger = logging.getLogger(__name__)

TRIGGER_WORDS = (
    "cookie",
    "cake",
    "chocolate",
    "candy",
    "snack",
    "chips",
    "ice cream",
)
BIOMETRIC_ALERT_PROBABILITY = 0.9


def is_trigger_food(name: str) -> bool:
    """Return True when a food name contains a trigger word."""
    lower_name = name.lower()
    return any(word in lower_name for word in TRIGGER_WORDS)


def behavioral_insight(item: FoodItem) -> InsightAlert | None:
    """Return a snacking-pattern alert for trigger foods."""
    if not is_trigger_food(item.name):
        return None
    return InsightAlert(
        type="behavioral",
        title="Behavioral Pattern Detected",
        message=(
            f"I notice a pattern of snacking on {item.name} around this time. "
            "Is this usually due to stress, boredom, or hunger?"
        ),
        action="Suggest a healthier alternative?",
        data_point="Frequency: 3 days in a row",
    )


def biometric_insight(
    wearables: WearableConfig, rng: random.Random | None = None
) -> InsightAlert | None:
    """Return a simulated wearable alert for connected devices."""
    if not (wearables.has_oura or wearables.has_cgm):
        return None
    roll = (rng or random).random()
    if roll <= 1 - BIOMETRIC_ALERT_PROBABILITY:
        return None
    if wearables.has_oura and wearables.has_cgm:
        return InsightAlert(
            type="biometric",
            title="Digital Twin Prediction",
            message=(
                "Based on your poor sleep score last night (Oura), your insulin "
                "resistance is likely elevated today. High-carb meals might spike "
                "your glucose more than usual."
            ),
            action="Try a protein-rich breakfast",
            data_point="Sleep Score: 62 (Restless)",
        )
    if wearables.has_oura:
        return InsightAlert(
            type="biometric",
            title="Recovery Alert",
            message=(
                "Your readiness score is low. Consider increasing carb intake "
                "slightly post-workout to aid recovery, but keep fats low."
            ),
            data_point="Readiness: 58",
        )
    return None


@dataclass
class InsightScheduler:
    """Delivers alerts after a delay on the running event loop."""

    _handles: list[asyncio.TimerHandle] = field(default_factory=list)

    def schedule(
        self,
        alert: InsightAlert,
        delay: float,
        deliver: Callable[[InsightAlert], None],
    ) -> None:
        """Call deliver(alert) after delay seconds; deliver now without a loop."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            deliver(alert)
            return

        def fire() -> None:
            self._handles.remove(handle)
            deliver(alert)

        handle = loop.call_later(delay, fire)
        self._handles.append(handle)

    def cancel_all(self) -> None:
        """Cancel every pending delivery."""
        for handle in self._handles:
            handle.cancel()
        self._handles.clear()

    @property
    def pending(self) -> int:
        """Return the number of deliveries that have not fired or been cancelled."""
        return len(self._handles)
