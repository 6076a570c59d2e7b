"""Adherence scoring for daily calorie and protein goals."""

import math

from nutrichat.domain.scoring import NutriScore

FALLBACK_CALORIE_TARGET = 2000
FALLBACK_PROTEIN_TARGET = 150
CALORIE_WEIGHT = 0.6
PROTEIN_WEIGHT = 0.4
OVERAGE_PENALTY = 200.0
OVEREATING_THRESHOLD = 1.1

_LABELS: tuple[tuple[int, str], ...] = (
    (85, "Excellent!"),
    (70, "Good Job"),
    (50, "Fair Start"),
)


def calorie_ratio(consumed: float, target: float) -> float:
    """Return consumed calories as a fraction of the target."""
    return max(consumed, 0.0) / (target if target > 0 else FALLBACK_CALORIE_TARGET)


def protein_ratio(consumed: float, target: float) -> float:
    """Return consumed protein as a fraction of the target."""
    return max(consumed, 0.0) / (target if target > 0 else FALLBACK_PROTEIN_TARGET)


def calorie_subscore(consumed: float, target: float) -> float:
    """Score calories linearly up to the target, penalizing any overage."""
    ratio = calorie_ratio(consumed, target)
    if ratio <= 1.0:
        return ratio * 100
    return max(0.0, 100 - (ratio - 1) * OVERAGE_PENALTY)


def protein_subscore(consumed: float, target: float) -> float:
    """Score protein linearly up to the target; excess is not penalized."""
    return min(100.0, protein_ratio(consumed, target) * 100)


def composite_score(
    calories: float, protein: float, calorie_target: float, protein_target: float
) -> int:
    """Return the weighted 0-100 adherence score."""
    weighted = CALORIE_WEIGHT * calorie_subscore(
        calories, calorie_target
    ) + PROTEIN_WEIGHT * protein_subscore(protein, protein_target)
    # Round half up; the built-in round() uses banker's rounding.
    return min(100, max(0, math.floor(weighted + 0.5)))


def score_label(score: int) -> str:
    """Return the headline shown next to a score."""
    for threshold, label in _LABELS:
        if score >= threshold:
            return label
    return "Needs Improvement"


def compute_nutri_score(
    calories: float, protein: float, calorie_target: float, protein_target: float
) -> NutriScore:
    """Compute the score together with its components."""
    score = composite_score(calories, protein, calorie_target, protein_target)
    cal_ratio = calorie_ratio(calories, calorie_target)
    return NutriScore(
        score=score,
        calorie_ratio=cal_ratio,
        protein_ratio=protein_ratio(protein, protein_target),
        calorie_score=calorie_subscore(calories, calorie_target),
        protein_score=protein_subscore(protein, protein_target),
        label=score_label(score),
        overeating=cal_ratio > OVEREATING_THRESHOLD,
    )
