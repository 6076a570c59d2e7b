"""Nutrition advice with a per-day cache."""

import json
import logging
from dataclasses import dataclass

from nutrichat.domain.food import DailyStats, FoodItem
from nutrichat.domain.profile import UserProfile
from nutrichat.services.chat import CoachChatService, MissingCredentialsError
from nutrichat.services.preferences import ADVISOR_CACHE_PREFIX, PreferencesService

logger = logging.getLogger(__name__)

MISSING_KEY_ADVICE = (
    "Please provide a valid DeepSeek API Key in settings to receive advice."
)
FAILED_ADVICE = "Could not generate advice at this time."


@dataclass
class AdvisorService:
    """Produces a short nutrition analysis for today's log."""

    chat_service: CoachChatService
    preferences: PreferencesService

    async def get_advice(
        self,
        profile: UserProfile,
        stats: DailyStats,
        food_log: list[FoodItem],
        today: str,
    ) -> str:
        """Return cached advice for this log signature or ask the provider."""
        phone_number = profile.phone_number or ""
        key = cache_key(today, stats, food_log)
        cached = self.preferences.get_cached_advice(phone_number, key)
        if cached:
            return cached
        try:
            advice = await self.chat_service.ask(build_prompt(profile, stats, food_log))
        except MissingCredentialsError:
            return MISSING_KEY_ADVICE
        except Exception:
            logger.exception("Advice request failed")
            return FAILED_ADVICE
        self.preferences.cache_advice(phone_number, key, advice)
        return advice


def cache_key(today: str, stats: DailyStats, food_log: list[FoodItem]) -> str:
    """Key advice by day and a signature of log size and totals."""
    signature = json.dumps(
        {
            "count": len(food_log),
            "cals": stats.total_calories,
            "prot": stats.total_protein,
        }
    )
    return f"{ADVISOR_CACHE_PREFIX}{today}_{signature}"


def build_prompt(
    profile: UserProfile, stats: DailyStats, food_log: list[FoodItem]
) -> str:
    """Return the advisor prompt for a profile and today's log."""
    if food_log:
        meals = "\n".join(
            f"- {item.name} ({item.calories:g} kcal, P:{item.protein:g}g)"
            for item in food_log
        )
    else:
        meals = "No meals logged yet."
    return f"""
You are a world-class Nutritionist Advisor.

User Profile:
- Name: {profile.name}
- Age: {_or_unknown(profile.age, " years")}
- Gender: {profile.gender or "Not specified"}
- Height: {_or_unknown(profile.height, " cm")}
- Weight: {_or_unknown(profile.weight, " kg")}
- Goals: {profile.calorie_target} kcal/day, {profile.protein_target}g protein/day.

Today's Status:
- Consumed: {stats.total_calories:g} kcal
- Protein: {stats.total_protein:g}g
- Carbs: {stats.total_carbs:g}g
- Fat: {stats.total_fat:g}g

Meals Logged Today:
{meals}

Task:
Provide a personalized nutritional analysis (approx. 200 words) incorporating \
their biometrics.

Requirements:
1. **BMR & TDEE Context**: If Age, Weight, Height, and Gender are provided, \
calculate their BMR (Mifflin-St Jeor equation) and estimate TDEE (assume \
sedentary x1.2 if unknown). Compare their current intake/goals to these \
biological baselines.
2. **Macro Analysis**: Analyze their protein intake relative to their weight \
(if known, aim for ~1.6-2.2g/kg for active individuals) or lean mass context.
3. **Status & Adjustments**: Are they on track? What specific macronutrient \
needs adjustment?
4. **Actionable Advice**: Provide one concrete food recommendation or habit \
change.

Output Format (Use Markdown):
**Biological Baseline**: [BMR/TDEE calculation and comparison if data exists. \
Otherwise say "Please update profile with weight/height for BMR analysis."]
**Daily Analysis**: [Status check and macro split observation]
**Coach's Recommendation**: [Actionable advice]

Tone: Professional, encouraging, and data-driven.
"""


def _or_unknown(value: float | None, suffix: str) -> str:
    if not value:
        return "Not specified"
    return f"{value:g}{suffix}"
