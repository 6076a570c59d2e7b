"""Domain models for adherence scoring."""

from dataclasses import dataclass


@dataclass(frozen=True)
class NutriScore:
    """Composite adherence score with its components."""

    score: int
    calorie_ratio: float
    protein_ratio: float
    calorie_score: float
    protein_score: float
    label: str
    overeating: bool
