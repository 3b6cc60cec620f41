from __future__ import annotations

from catalogsync.core.config import clamp_limit


def effective_max(candidate_count: int, configured_limit: int) -> int:
    """Number of submissions a run may attempt.

    Only attempted submissions count against this value; excluded and skipped
    candidates never consume it.
    """
    return min(max(candidate_count, 0), clamp_limit(configured_limit))
