"""modguard models package.

Defines the shared data contracts used across the policy resolver and the
import scanner:

  - lint.py — Dependency, ImportReference, Diagnostic, ScanResult

These models are the single source of truth for what the scanner emits.
"""

from modguard.models.lint import (
    BlockedModuleSet,
    Dependency,
    Diagnostic,
    ImportReference,
    ScanResult,
)

__all__ = [
    "BlockedModuleSet",
    "Dependency",
    "Diagnostic",
    "ImportReference",
    "ScanResult",
]
