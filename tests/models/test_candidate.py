from __future__ import annotations

import pytest

from catalogsync.models.candidate import CandidateRecord, CandidateState


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("Uncategorized", CandidateState.UNCATEGORIZED),
        ("uncategorized", CandidateState.UNCATEGORIZED),
        ("Pending Categorization", CandidateState.PENDING),
        ("pending_categorization", CandidateState.PENDING),
        ("Identified", CandidateState.CATEGORIZED),
        (0, CandidateState.UNCATEGORIZED),
        (1, CandidateState.PENDING),
        ("2", CandidateState.CATEGORIZED),
        (42, CandidateState.UNKNOWN),
        ("retired", CandidateState.UNKNOWN),
        (None, CandidateState.UNKNOWN),
    ],
)
def test_state_parse(raw: str | int | None, expected: CandidateState) -> None:
    assert CandidateState.parse(raw) is expected


def test_only_uncategorized_records_are_eligible() -> None:
    eligible = [
        CandidateRecord("K1", "Viewer", state=state).is_eligible
        for state in CandidateState
    ]

    assert eligible == [True, False, False, False]


@pytest.mark.parametrize("key", ["", "   "])
def test_record_without_key_is_malformed(key: str) -> None:
    assert CandidateRecord(key, "Viewer").is_malformed is True


def test_identity_includes_publisher_when_known() -> None:
    assert CandidateRecord("K1", "Viewer", "Contoso").identity == "Viewer (Contoso)"


def test_identity_falls_back_to_name_then_key() -> None:
    assert CandidateRecord("K1", "Viewer").identity == "Viewer"
    assert CandidateRecord("K1", "").identity == "K1"
