"""Pydantic models for API request bodies."""

from pydantic import BaseModel, Field


class CodeRequest(BaseModel):
    """First sign-in step."""

    phone_number: str


class VerifyRequest(BaseModel):
    """Second sign-in step."""

    phone_number: str
    code: str


class FoodCreate(BaseModel):
    """Manually logged food."""

    name: str = Field(min_length=1)
    quantity: str | None = None
    calories: float = Field(default=0, ge=0)
    protein: float = Field(default=0, ge=0)
    carbs: float = Field(default=0, ge=0)
    fat: float = Field(default=0, ge=0)


class FoodUpdate(BaseModel):
    """Partial edit of a logged food."""

    name: str | None = None
    quantity: str | None = None
    calories: float | None = Field(default=None, ge=0)
    protein: float | None = Field(default=None, ge=0)
    carbs: float | None = Field(default=None, ge=0)
    fat: float | None = Field(default=None, ge=0)


class ChatRequest(BaseModel):
    """A chat turn; media is passed as base64 data URLs."""

    text: str = ""
    image: str | None = None
    audio: str | None = None


class ProfileUpdate(BaseModel):
    """Settings form values."""

    name: str | None = None
    age: int | None = None
    weight: float | None = None
    height: float | None = None
    gender: str | None = None
    calorie_target: int | None = None
    protein_target: int | None = None


class WearablesUpdate(BaseModel):
    """Connected wearable flags."""

    has_oura: bool = False
    has_apple_health: bool = False
    has_cgm: bool = False


class ReorderRequest(BaseModel):
    """A drag gesture over the dashboard."""

    active_id: str
    over_id: str | None = None


class LayoutUpdate(BaseModel):
    """A full dashboard order."""

    items: list[str]


class ThemeUpdate(BaseModel):
    """Theme flag."""

    dark_mode: bool


class SheetUrlUpdate(BaseModel):
    """Spreadsheet webhook URL; empty disables the sync."""

    url: str = ""
