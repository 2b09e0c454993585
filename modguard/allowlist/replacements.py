"""Replacement suggestions for blocked imports.

A ReplacementRule names one or more module prefixes, the module that should
be used instead, and a human-readable reason. ReplacementTable.get() returns
the FIRST rule whose prefixes match a package path — later rules are never
consulted once a rule matches.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from modguard.allowlist.policy import has_prefix_fold
from modguard.constants import REPLACEMENT_SUGGESTION


@dataclass(frozen=True)
class ReplacementRule:
    """Blocked module prefixes with a suggested replacement module.

    Fields:
        modules:      Trigger prefixes, matched case-insensitively against
                      the imported package path.
        replacement:  Module that should be used instead.
        reason:       Why the replacement is recommended.
    """

    modules: tuple[str, ...]
    replacement: str
    reason: str = ""

    def matches(self, package_path: str) -> bool:
        """Return True if the package path starts with any trigger prefix."""
        return any(has_prefix_fold(package_path, module) for module in self.modules)

    def suggestion(self) -> str:
        """Return the replacement sentence appended to a blocked-import message."""
        return REPLACEMENT_SUGGESTION.format(
            replacement=self.replacement,
            reason=self.reason,
        )


@dataclass(frozen=True)
class ReplacementTable:
    """Ordered sequence of replacement rules. Declared order is match order."""

    rules: tuple[ReplacementRule, ...] = field(default_factory=tuple)

    def get(self, package_path: str) -> Optional[ReplacementRule]:
        """Return the first rule matching the package path, or None."""
        for rule in self.rules:
            if rule.matches(package_path):
                return rule
        return None

    def __len__(self) -> int:
        return len(self.rules)
