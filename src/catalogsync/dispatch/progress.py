"""Linear progress and remaining-time estimation for dispatch runs."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import time


@dataclass(frozen=True, slots=True)
class ProgressEvent:
    """One entry of the progress stream emitted per processed candidate."""

    index: int
    total: int
    identity: str
    eta_seconds: float | None
    done: int = 0


ProgressObserver = Callable[[ProgressEvent], None]


def estimate_remaining(
    elapsed_seconds: float, items_done: int, total_planned: int
) -> float | None:
    """Extrapolate remaining time assuming uniform per-item latency.

    Returns None until at least one item is done.
    """
    if items_done < 1:
        return None
    remaining_items = max(total_planned - items_done, 0)
    return max((elapsed_seconds / items_done) * remaining_items, 0.0)


class ProgressEstimator:
    """Tracks elapsed time for a run and produces ``ProgressEvent`` values."""

    def __init__(
        self, total_planned: int, *, clock: Callable[[], float] = time.monotonic
    ) -> None:
        self._total_planned = total_planned
        self._clock = clock
        self._started_at = clock()

    @property
    def total_planned(self) -> int:
        return self._total_planned

    def elapsed(self) -> float:
        return self._clock() - self._started_at

    def event(
        self, index: int, identity: str, done: int | None = None
    ) -> ProgressEvent:
        """Build the event for the ``index``-th candidate (1-based).

        Args:
            index: Source position of the candidate
            identity: Label shown to the operator
            done: Units of planned work already finished; defaults to the
                ``index - 1`` candidates before this one, so the first event
                carries no ETA
        """
        if done is None:
            done = index - 1
        return ProgressEvent(
            index=index,
            total=self._total_planned,
            identity=identity,
            eta_seconds=estimate_remaining(
                self.elapsed(), done, self._total_planned
            ),
            done=done,
        )
