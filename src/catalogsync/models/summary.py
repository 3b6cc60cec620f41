from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class RunSummary:
    """Before/after reconciliation of one classification run.

    Created when the "before" snapshot is taken and completed once after the
    dispatch loop. ``resolved`` is the drop in the service's uncategorized
    count; it can be lower than ``attempted`` when the service rejects items,
    or higher (even negative the other way) when other activity changes the
    count during the run.
    """

    uncategorized_before: int
    uncategorized_after: int | None = None
    attempted: int = 0
    accepted: int = 0
    rejected: int = 0
    simulated: int = 0
    excluded: int = 0
    skipped: int = 0
    declined: int = 0
    elapsed_seconds: float = 0.0
    dry_run: bool = False
    completed: bool = False

    @property
    def resolved(self) -> int | None:
        if self.uncategorized_after is None:
            return None
        return self.uncategorized_before - self.uncategorized_after

    def to_dict(self) -> dict[str, Any]:
        """JSON-serializable form for schedulers and other machine consumers."""
        return {
            "uncategorizedBefore": self.uncategorized_before,
            "uncategorizedAfter": self.uncategorized_after,
            "attempted": self.attempted,
            "accepted": self.accepted,
            "rejected": self.rejected,
            "simulated": self.simulated,
            "excluded": self.excluded,
            "skipped": self.skipped,
            "declined": self.declined,
            "resolved": self.resolved,
            "elapsedSeconds": round(self.elapsed_seconds, 3),
            "dryRun": self.dry_run,
            "completed": self.completed,
        }
