"""Blocked module computation for modguard.

compute_blocked_modules() is the ONLY function that decides which go.mod
requirements are blocked. It runs once per processor; its output is cached
and consumed read-only by every scan.

MATCHING RULES:
  - Every comparison is case-insensitive (both sides lower-cased).
  - "Prefix" means plain string prefix, NOT path-segment aware:
    a blocked "example.com/foo" also blocks "example.com/foobar", and an
    allowed domain "example.com" also allows "example.community/x".
    Configure a trailing slash ("example.com/") to avoid over-matching.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from modguard.models.lint import BlockedModuleSet, Dependency


# ─── AllowConfiguration dataclass ─────────────────────────────────────────────


@dataclass(frozen=True)
class AllowConfiguration:
    """Modules and module domains that may be required by go.mod.

    Fields:
        modules:  Exact module paths (case-insensitive equality).
        domains:  Module path prefixes (case-insensitive prefix match),
                  used to allow a whole publisher at once, e.g. "golang.org".

    INVARIANT: immutable after load. Both empty → every direct dependency
    is blocked.
    """

    modules: tuple[str, ...] = ()
    domains: tuple[str, ...] = ()


# ─── Matching primitives ──────────────────────────────────────────────────────


def has_prefix_fold(candidate: str, pattern: str) -> bool:
    """Return True if lower(candidate) starts with lower(pattern)."""
    return candidate.lower().startswith(pattern.lower())


def is_allowed_module_domain(module: str, allow: AllowConfiguration) -> bool:
    """Return True if the module path starts with any allowed domain."""
    return any(has_prefix_fold(module, domain) for domain in allow.domains)


def is_allowed_module(module: str, allow: AllowConfiguration) -> bool:
    """Return True if the module path equals any allowed module."""
    lowered = module.lower()
    return any(lowered == allowed.lower() for allowed in allow.modules)


# ─── Policy resolution ────────────────────────────────────────────────────────


def compute_blocked_modules(
    dependencies: Iterable[Dependency],
    allow: AllowConfiguration,
) -> BlockedModuleSet:
    """Filter go.mod requirements down to the blocked module set.

    INVARIANT:
      - Pure: no I/O, same input → same ordered output.
      - Indirect requirements are never blocked.
      - Output keeps input order; duplicate requirements are evaluated
        independently, so the result may contain duplicates.

    For each direct requirement, the domain allow list is checked first and
    the exact module allow list second. A requirement matching neither is
    blocked.

    Args:
        dependencies: Requirements parsed from go.mod, in declaration order.
        allow:        Allowed modules and module domains.

    Returns:
        Tuple of blocked module paths in encounter order.
    """
    blocked: list[str] = []

    for dep in dependencies:
        if not dep.is_direct:
            continue

        if is_allowed_module_domain(dep.module_path, allow):
            continue

        if is_allowed_module(dep.module_path, allow):
            continue

        blocked.append(dep.module_path)

    return tuple(blocked)


def is_blocked_package(package_path: str, blocked: BlockedModuleSet) -> bool:
    """Return True if the imported package is provided by a blocked module.

    A package is blocked when its path starts with any blocked module path
    (case-insensitive, no segment boundary check).
    """
    return any(has_prefix_fold(package_path, module) for module in blocked)
