"""modguard allowlist — policy resolution and replacement suggestions.

Public API:
    AllowConfiguration      — allowed modules and module domains
    compute_blocked_modules — go.mod requirements → blocked module set
    is_blocked_package      — prefix match of an import against the blocked set
    ReplacementRule         — suggestion shown alongside a violation
    ReplacementTable        — ordered rules, first match wins
"""
from modguard.allowlist.policy import (
    AllowConfiguration,
    compute_blocked_modules,
    has_prefix_fold,
    is_blocked_package,
)
from modguard.allowlist.replacements import ReplacementRule, ReplacementTable

__all__ = [
    "AllowConfiguration",
    "ReplacementRule",
    "ReplacementTable",
    "compute_blocked_modules",
    "has_prefix_fold",
    "is_blocked_package",
]
