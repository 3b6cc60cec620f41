from __future__ import annotations

import pytest

from catalogsync.core.config import RunConfiguration
from catalogsync.dispatch.exclusion import find_exclusion, should_exclude
from catalogsync.models.exclusion import ExclusionField, ExclusionRule
from tests.fixtures.management import create_candidate


def test_empty_rule_set_never_excludes() -> None:
    record = create_candidate(0, display_name="Secret Project", publisher_name="Acme")

    assert should_exclude(record, RunConfiguration.build()) is False


def test_name_rule_matches_case_insensitive_substring() -> None:
    record = create_candidate(0, display_name="Internal Payroll Tool")
    config = RunConfiguration.build(ignore_products=["PAYROLL"])

    match = find_exclusion(record, config)

    assert match is not None
    assert match.field is ExclusionField.DISPLAY_NAME
    assert match.rule.pattern == "PAYROLL"
    assert match.value == "Internal Payroll Tool"


def test_publisher_rule_only_checks_publisher_field() -> None:
    record = create_candidate(0, display_name="Acme Viewer", publisher_name="Contoso")
    config = RunConfiguration.build(ignore_publishers=["acme"])

    assert should_exclude(record, config) is False


def test_name_rule_only_checks_display_name() -> None:
    record = create_candidate(0, display_name="Viewer", publisher_name="Acme")
    config = RunConfiguration.build(ignore_products=["acme"])

    assert should_exclude(record, config) is False


def test_any_matching_rule_excludes() -> None:
    record = create_candidate(0, display_name="Viewer", publisher_name="Acme Ltd")
    config = RunConfiguration.build(
        ignore_products=["nothing", "else"], ignore_publishers=["zzz", "ltd"]
    )

    match = find_exclusion(record, config)

    assert match is not None
    assert match.rule.pattern == "ltd"


def test_empty_pattern_is_inert() -> None:
    record = create_candidate(0, display_name="Anything", publisher_name="")
    config = RunConfiguration.build(ignore_products=[""], ignore_publishers=[""])

    assert should_exclude(record, config) is False


def test_overlapping_rules_are_evaluated_independently() -> None:
    record = create_candidate(0, display_name="Secret Sauce")
    config = RunConfiguration.build(ignore_products=["Secrets", "Secret"])

    match = find_exclusion(record, config)

    assert match is not None
    assert match.rule.pattern == "Secret"
    assert len(config.name_exclusions) == 2


@pytest.mark.parametrize(
    ("pattern", "value", "expected"),
    [
        ("internal*", "Internal Tools", True),
        ("internal*", "My Internal Tools", False),
        ("*tool?", "Internal Tools", True),
        ("[ab]*", "acme", True),
        ("[ab]*", "contoso", False),
    ],
)
def test_glob_patterns_match_whole_field(
    pattern: str, value: str, expected: bool
) -> None:
    rule = ExclusionRule(pattern, ExclusionField.DISPLAY_NAME)

    assert rule.matches(value) is expected


def test_find_exclusion_is_pure() -> None:
    record = create_candidate(0, publisher_name="Acme")
    config = RunConfiguration.build(ignore_publishers=["acme"])

    first = find_exclusion(record, config)
    second = find_exclusion(record, config)

    assert first == second
    assert record.publisher_name == "Acme"


@pytest.mark.parametrize(
    ("pattern", "value"),
    [
        ("Tool [x64]", "Build Tool [x64] Edition"),
        ("what?", "So what? Player"),
    ],
)
def test_brackets_and_question_marks_are_literal_without_star(
    pattern: str, value: str
) -> None:
    rule = ExclusionRule(pattern, ExclusionField.DISPLAY_NAME)

    assert rule.is_glob is False
    assert rule.matches(value) is True
    assert rule.matches("Build Tool x Edition") is False
