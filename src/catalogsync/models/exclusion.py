from __future__ import annotations

from dataclasses import dataclass
import enum
from fnmatch import fnmatchcase

_GLOB_MARKER = "*"


class ExclusionField(enum.Enum):
    DISPLAY_NAME = "display_name"
    PUBLISHER_NAME = "publisher_name"


@dataclass(frozen=True, slots=True)
class ExclusionRule:
    """A case-insensitive pattern bound to exactly one record field.

    Plain patterns are "contains" tests, with `?` and `[` taken literally.
    Patterns holding `*` are globs matched against the whole field, where `?`
    and `[...]` keep their glob meaning. An empty pattern never matches.
    """

    pattern: str
    field: ExclusionField

    @property
    def is_glob(self) -> bool:
        return _GLOB_MARKER in self.pattern

    def matches(self, value: str) -> bool:
        if not self.pattern:
            return False
        needle = self.pattern.casefold()
        haystack = value.casefold()
        if self.is_glob:
            return fnmatchcase(haystack, needle)
        return needle in haystack
