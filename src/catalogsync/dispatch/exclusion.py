"""Exclusion filter that keeps sensitive product and publisher names local.

Evaluation is a pure predicate: no I/O and no mutation. Callers log which rule
fired using the returned ``ExclusionMatch``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from catalogsync.models.exclusion import ExclusionField, ExclusionRule

if TYPE_CHECKING:
    from catalogsync.core.config import RunConfiguration
    from catalogsync.models.candidate import CandidateRecord


@dataclass(frozen=True, slots=True)
class ExclusionMatch:
    """Which rule excluded a record, for operator diagnostics."""

    rule: ExclusionRule
    value: str

    @property
    def field(self) -> ExclusionField:
        return self.rule.field


def _field_value(record: CandidateRecord, field: ExclusionField) -> str:
    if field is ExclusionField.DISPLAY_NAME:
        return record.display_name
    return record.publisher_name


def find_exclusion(
    record: CandidateRecord, config: RunConfiguration
) -> ExclusionMatch | None:
    """Return the first rule that excludes the record, or None.

    Name rules are evaluated before publisher rules, each in configured order.
    """
    for rule in (*config.name_exclusions, *config.publisher_exclusions):
        value = _field_value(record, rule.field)
        if rule.matches(value):
            return ExclusionMatch(rule=rule, value=value)
    return None


def should_exclude(record: CandidateRecord, config: RunConfiguration) -> bool:
    return find_exclusion(record, config) is not None
