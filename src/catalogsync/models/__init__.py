"""Data types shared by the dispatch engine and its collaborators."""

from catalogsync.models.candidate import CandidateRecord, CandidateState
from catalogsync.models.exclusion import ExclusionField, ExclusionRule
from catalogsync.models.summary import RunSummary

__all__ = [
    "CandidateRecord",
    "CandidateState",
    "ExclusionField",
    "ExclusionRule",
    "RunSummary",
]
