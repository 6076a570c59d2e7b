"""Domain models for external sync results."""

from dataclasses import dataclass


@dataclass(frozen=True)
class SyncResult:
    """Outcome of mirroring a record to one external target."""

    target: str
    ok: bool
    error: str | None = None
