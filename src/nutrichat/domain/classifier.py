"""Models for meal classifier results."""

from pydantic import BaseModel, Field


class MealEstimate(BaseModel):
    """Structured meal estimate parsed from classifier text."""

    description: str
    calories: int = Field(ge=0)
    proteins: int = Field(ge=0)
    carbs: int = Field(ge=0)
    fat: int = Field(ge=0)
