from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from catalogsync.errors import ConfigurationError
from catalogsync.models.exclusion import ExclusionField, ExclusionRule

_SECTIONS: dict[str, ExclusionField] = {
    "products": ExclusionField.DISPLAY_NAME,
    "publishers": ExclusionField.PUBLISHER_NAME,
}


class ExclusionRulesLoader:
    """
    Loads exclusion rules from a YAML file.

    The file holds two optional lists of patterns:

        products:
          - "Internal*"
        publishers:
          - Acme

    Patterns keep their file order and are never merged or deduplicated.
    """

    def __init__(self, rules_path: Path) -> None:
        self._rules_path = rules_path
        self._rules: dict[ExclusionField, tuple[ExclusionRule, ...]] | None = None

    @property
    def rules_path(self) -> Path:
        return self._rules_path

    def load(self) -> dict[ExclusionField, tuple[ExclusionRule, ...]]:
        """
        Read and validate the rules file.

        Content is cached after the first load. A missing file yields no rules.

        Raises:
            ConfigurationError: If the file is not valid YAML or has the wrong
                shape.
        """
        if self._rules is not None:
            return self._rules

        rules: dict[ExclusionField, tuple[ExclusionRule, ...]] = {
            field: () for field in _SECTIONS.values()
        }
        if not self._rules_path.exists():
            self._rules = rules
            return rules

        try:
            data: Any = yaml.safe_load(self._rules_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in exclusions file {self._rules_path}: {e}"
            ) from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Exclusions file {self._rules_path} must contain a mapping"
            )

        unknown = sorted(set(data) - set(_SECTIONS))
        if unknown:
            raise ConfigurationError(
                f"Unknown sections in exclusions file {self._rules_path}: {unknown}"
            )

        for section, field in _SECTIONS.items():
            patterns = data.get(section) or []
            if not isinstance(patterns, list) or not all(
                isinstance(pattern, str) for pattern in patterns
            ):
                raise ConfigurationError(
                    f"'{section}' in {self._rules_path} must be a list of strings"
                )
            rules[field] = tuple(ExclusionRule(pattern, field) for pattern in patterns)

        self._rules = rules
        return rules

    def patterns(self, field: ExclusionField) -> list[str]:
        return [rule.pattern for rule in self.load()[field]]
