from __future__ import annotations

from dataclasses import dataclass
import enum


class CandidateState(enum.Enum):
    """Lifecycle state of an inventory record in the classification workflow."""

    UNCATEGORIZED = "uncategorized"
    PENDING = "pending"
    CATEGORIZED = "categorized"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: str | int | None) -> CandidateState:
        """Map a service-reported state onto the enum.

        The management service reports states either as names
        ("Uncategorized") or as numeric codes; anything not recognised is
        ``UNKNOWN`` so it can never be mistaken for an eligible record.
        """
        if value is None:
            return cls.UNKNOWN
        if isinstance(value, int):
            return _STATE_CODES.get(value, cls.UNKNOWN)
        normalized = value.strip().lower().replace(" ", "").replace("_", "")
        if normalized.isdigit():
            return _STATE_CODES.get(int(normalized), cls.UNKNOWN)
        return _STATE_NAMES.get(normalized, cls.UNKNOWN)


_STATE_NAMES: dict[str, CandidateState] = {
    "uncategorized": CandidateState.UNCATEGORIZED,
    "pending": CandidateState.PENDING,
    "pendingcategorization": CandidateState.PENDING,
    "categorized": CandidateState.CATEGORIZED,
    "identified": CandidateState.CATEGORIZED,
}

_STATE_CODES: dict[int, CandidateState] = {
    0: CandidateState.UNCATEGORIZED,
    1: CandidateState.PENDING,
    2: CandidateState.CATEGORIZED,
}


@dataclass(frozen=True, slots=True)
class CandidateRecord:
    """Read-only snapshot of one software title awaiting classification."""

    key: str
    display_name: str
    publisher_name: str = ""
    state: CandidateState = CandidateState.UNCATEGORIZED

    @property
    def is_eligible(self) -> bool:
        return self.state is CandidateState.UNCATEGORIZED

    @property
    def is_malformed(self) -> bool:
        return not self.key.strip()

    @property
    def identity(self) -> str:
        """Human-readable label used in progress output and logs."""
        if self.publisher_name:
            return f"{self.display_name} ({self.publisher_name})"
        return self.display_name or self.key
