"""Domain models for coaching insights."""

from dataclasses import dataclass


@dataclass(frozen=True)
class InsightAlert:
    """Ephemeral notification shown once to the user."""

    type: str
    title: str
    message: str
    action: str | None = None
    data_point: str | None = None
