"""Domain models for user profiles and device settings."""

from dataclasses import dataclass


@dataclass(frozen=True)
class UserProfile:
    """Represents the signed-in user's profile and goals."""

    name: str
    calorie_target: int
    protein_target: int
    uuid: str | None = None
    phone_number: str | None = None
    weight: float | None = None
    height: float | None = None
    age: int | None = None
    gender: str | None = "Male"


@dataclass(frozen=True)
class WearableConfig:
    """Simulated wearable connections."""

    has_oura: bool = False
    has_apple_health: bool = False
    has_cgm: bool = False
