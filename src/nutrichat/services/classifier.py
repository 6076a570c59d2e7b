"""Meal classification of photos and voice notes using LLMs."""

import logging
import re
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from nutrichat.domain.classifier import MealEstimate

logger = logging.getLogger(__name__)

ANALYSIS_PROMPT = """
Estimation method (internal only; do not output these steps)

Identify components: list the main foods (e.g., chicken breast, white rice, \
mixed salad, sauce) based on the input (visual or audio description).

Choose references: map each component to a standard reference food.

Estimate volume/size: use visible objects for scale or context clues from the \
description. Approximate shapes/portions.

Convert to grams (densities, g/ml): meats 1.05; cooked rice 0.66; cooked pasta \
0.60; potato/solid starchy veg 0.80; leafy salad 0.15; sauces creamy 1.00; \
oils 0.91. If the image clearly suggests deep-fried or glossy/oily coating, \
account for added oil.

Macros & energy per 100 g (reference values):
White rice, cooked: 130 kcal, P 2.7, C 28, F 0.3
Pasta, cooked: 131 kcal, P 5.0, C 25, F 1.1
Chicken breast, cooked skinless: 165 kcal, P 31, C 0, F 3.6
Salmon, cooked: 208 kcal, P 20, C 0, F 13
Lean ground beef (~10% fat), cooked: 217 kcal, P 26, C 0, F 12
Black beans, cooked: 132 kcal, P 8.9, C 23.7, F 0.5
Potato, baked: 93 kcal, P 2.5, C 21, F 0.1
Lettuce/leafy salad: 15 kcal, P 1.4, C 2.9, F 0.2
Avocado: 160 kcal, P 2, C 9, F 15
Bread (white): 265 kcal, P 9, C 49, F 3.2
Egg, cooked: 155 kcal, P 13, C 1.1, F 11
Cheddar cheese: 403 kcal, P 25, C 1.3, F 33
Olive oil: 884 kcal, P 0, C 0, F 100
(If a food is not listed, pick the closest standard equivalent.)

Hidden oil & sauces: if pan-fried or visibly glossy, add ~1 tablespoon oil = \
13.5 g = 120 kcal = 13.5 g fat per clearly coated serving.

Sum totals: compute grams per component x (per-100 g macros/energy) and add \
all components.

Validation: enforce Calories ~ 4xProtein + 4xCarbs + 9xFat. If off by >8%, \
adjust fat first, then carbs, keeping protein consistent with visible lean mass.

Rounding: round all final totals to integers. Never output ranges or decimals.

Output rules (must follow exactly)
Plain text only.
Use this exact structure and field order.
Values are numbers only (no units, no "g" or "kcal"), no extra text, no JSON, \
no notes.

Meal Description: [short description]
Calories: [number]
Proteins: [number]
Carbs: [number]
Fat: [number]
"""

VOICE_PREFIX = "Analyze this voice note describing a meal. "
MISSING_KEY_ERROR = "Error: API Key missing. Please configure API_KEY."
DEFAULT_AUDIO_MIME = "audio/webm"

_DATA_URL = re.compile(r"^data:(.+);base64,(.+)$", re.DOTALL)
_ESTIMATE_FIELDS = {
    "meal description": "description",
    "calories": "calories",
    "proteins": "proteins",
    "carbs": "carbs",
    "fat": "fat",
}


class MealClassifierClient(Protocol):
    """Interface for LLM meal classification."""

    async def classify_image(self, *, model: str, data_url: str, prompt: str) -> str:
        """Return the classifier's text for an image."""

    async def classify_audio(
        self, *, model: str, mime_type: str, data: str, prompt: str
    ) -> str:
        """Return the classifier's text for a base64 audio clip."""


@dataclass
class MealClassifierService:
    """Validates media payloads and returns classifier text.

    Every failure is reported as an ``Error``-prefixed string rather than an
    exception, so the chat flow can keep going.
    """

    client: MealClassifierClient | None
    image_model: str
    audio_model: str

    async def analyze_image(self, data_url: str) -> str:
        """Estimate the macros of the meal in a photo."""
        if self.client is None:
            return MISSING_KEY_ERROR
        parsed = parse_data_url(data_url)
        if parsed is None:
            return "Error: Invalid image format."
        try:
            result = await self.client.classify_image(
                model=self.image_model, data_url=data_url, prompt=ANALYSIS_PROMPT
            )
        except Exception:
            logger.exception("Image analysis failed")
            return "Error analyzing image. Please ensure API Key is valid."
        return result or "Could not analyze image."

    async def analyze_audio(self, data_url: str) -> str:
        """Estimate the macros of a meal described in a voice note."""
        if self.client is None:
            return MISSING_KEY_ERROR
        parsed = parse_data_url(data_url)
        if parsed is None:
            return "Error: Invalid audio format."
        mime_type, data = parsed
        mime_type = mime_type.lower().strip()
        if not mime_type or mime_type == "application/octet-stream":
            logger.warning("Unknown audio type, defaulting to %s", DEFAULT_AUDIO_MIME)
            mime_type = DEFAULT_AUDIO_MIME
        try:
            result = await self.client.classify_audio(
                model=self.audio_model,
                mime_type=mime_type,
                data=data,
                prompt=VOICE_PREFIX + ANALYSIS_PROMPT,
            )
        except Exception:
            logger.exception("Audio analysis failed")
            return "Error analyzing audio. Please ensure API Key is valid."
        return result or "Could not analyze audio."


def parse_data_url(data_url: str) -> tuple[str, str] | None:
    """Split a base64 data URL into its MIME type and payload."""
    match = _DATA_URL.match(data_url or "")
    if not match:
        return None
    return match.group(1), match.group(2)


def parse_meal_estimate(text: str) -> MealEstimate | None:
    """Parse classifier output in the mandated five-line grammar."""
    values: dict[str, str] = {}
    for line in text.splitlines():
        label, sep, value = line.partition(":")
        if not sep:
            continue
        field_name = _ESTIMATE_FIELDS.get(label.strip().lower())
        if field_name:
            values[field_name] = value.strip()
    try:
        return MealEstimate.model_validate(values)
    except ValidationError:
        return None
