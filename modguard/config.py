"""Config loading for modguard.

Reads `.modguard.yaml` (or `~/.modguard.yaml`).
Raises SystemExit on parse errors or malformed sections.
If no config file is found, returns default values: empty allow lists
(every direct dependency blocked) and no replacement rules.

Config search order:
  1. `config_path` argument (if provided — for testing or explicit override)
  2. MODGUARD_CONFIG environment variable (if set)
  3. `.modguard.yaml` (working directory)
  4. `~/.modguard.yaml` (home directory)

Environment variable overrides:
  MODGUARD_GOMOD — overrides the go.mod path (default: ./go.mod)

Example:
    allow:
      modules:
        - gopkg.in/yaml.v2
      domains:
        - golang.org
    replacements:
      - modules:
          - github.com/mitchellh/go-homedir
        replacement: github.com/golang/go
        reason: "Go 1.12+ has os.UserHomeDir()"
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from typing import NoReturn, Optional

import yaml

from modguard.allowlist.policy import AllowConfiguration
from modguard.allowlist.replacements import ReplacementRule, ReplacementTable
from modguard.constants import CONFIG_FILE_NAME, GO_MOD_FILE
from modguard.utils.logger import get_logger

logger = get_logger(__name__)

# ─── Version constants ────────────────────────────────────────────────────────

# Current supported config version. The `version` key is optional.
SUPPORTED_CONFIG_VERSION = 1

SUPPORTED_VERSIONS: frozenset[int] = frozenset({1})

# Default config search paths (MODGUARD_CONFIG env var prepended at runtime)
DEFAULT_CONFIG_PATHS = [
    CONFIG_FILE_NAME,
    os.path.join("~", CONFIG_FILE_NAME),
]


# ─── Dataclasses ─────────────────────────────────────────────────────────────


@dataclass
class Config:
    """Root configuration object populated from .modguard.yaml.

    All fields have safe defaults — modguard can run without any config file.
    """

    version: int = SUPPORTED_CONFIG_VERSION
    allow: AllowConfiguration = field(default_factory=AllowConfiguration)
    replacements: ReplacementTable = field(default_factory=ReplacementTable)
    gomod_path: str = GO_MOD_FILE
    path: Optional[str] = None  # Path to the loaded config file

    @classmethod
    def defaults(cls) -> "Config":
        """Return a fully-default Config (no file required)."""
        return cls()

    @classmethod
    def from_dict(cls, raw: dict, path: Optional[str] = None) -> "Config":
        """Construct Config from a parsed YAML dict.

        Unknown keys are silently ignored.

        Args:
            raw:  Parsed YAML mapping.
            path: Path to the config file (stored in Config.path).

        Returns:
            Config with all fields populated from raw + defaults for missing fields.

        Raises:
            SystemExit(1): On a section or list of the wrong shape.
        """
        source = path or "<config>"

        # ── Allow ─────────────────────────────────────────────────────────────
        allow_raw = raw.get("allow") or {}
        if not isinstance(allow_raw, dict):
            _fail(f"CONFIG ERROR: {source}: 'allow' must be a mapping.")
        allow = AllowConfiguration(
            modules=_string_list(allow_raw.get("modules"), "allow.modules", source),
            domains=_string_list(allow_raw.get("domains"), "allow.domains", source),
        )

        # ── Replacements ──────────────────────────────────────────────────────
        replacements_raw = raw.get("replacements") or []
        if not isinstance(replacements_raw, list):
            _fail(f"CONFIG ERROR: {source}: 'replacements' must be a list.")
        rules: list[ReplacementRule] = []
        for i, item in enumerate(replacements_raw):
            if not isinstance(item, dict):
                _fail(f"CONFIG ERROR: {source}: replacements[{i}] must be a mapping.")
            replacement = item.get("replacement")
            if not replacement or not isinstance(replacement, str):
                _fail(
                    f"CONFIG ERROR: {source}: replacements[{i}] is missing "
                    "the required 'replacement' field."
                )
            reason = item.get("reason", "")
            rules.append(
                ReplacementRule(
                    modules=_string_list(
                        item.get("modules"), f"replacements[{i}].modules", source
                    ),
                    replacement=replacement,
                    reason="" if reason is None else str(reason),
                )
            )

        return cls(
            version=raw.get("version", SUPPORTED_CONFIG_VERSION),
            allow=allow,
            replacements=ReplacementTable(rules=tuple(rules)),
            path=path,
        )


# ─── Config loading ───────────────────────────────────────────────────────────


def load_config(config_path: Optional[str] = None) -> Config:
    """Load and validate modguard configuration.

    Search order:
      1. ``config_path`` argument (if provided)
      2. ``MODGUARD_CONFIG`` environment variable (if set)
      3. ``.modguard.yaml`` (current working directory)
      4. ``~/.modguard.yaml`` (home directory)

    An explicit ``config_path`` must exist; a missing one is fatal.
    If no file is found at the other paths, returns default Config (not an error).
    If a file is found but invalid, writes error to stderr and raises SystemExit(1).

    After loading (or defaulting), ``MODGUARD_GOMOD`` env var is applied as an
    override to ``config.gomod_path``.

    Raises:
        SystemExit(1): On a missing explicit config file, YAML parse error,
                       non-mapping root, unsupported version, or malformed
                       allow / replacements sections.
    """
    search_paths: list[str] = []
    if config_path:
        if not os.path.isfile(os.path.expanduser(config_path)):
            _fail(f"CONFIG ERROR: config file not found: {config_path}")
        search_paths.append(config_path)
    env_config = os.environ.get("MODGUARD_CONFIG")
    if env_config:
        search_paths.append(env_config)
    search_paths.extend(DEFAULT_CONFIG_PATHS)

    found_path: Optional[str] = None
    for candidate in search_paths:
        expanded = os.path.expanduser(candidate)
        if os.path.isfile(expanded):
            found_path = expanded
            break

    # ── No config file found ─────────────────────────────────────────────────
    if found_path is None:
        logger.info("No config file found — using defaults", searched=search_paths)
        config = Config.defaults()
        _apply_env_overrides(config)
        return config

    # ── Parse config file ─────────────────────────────────────────────────────
    logger.info("Loading config", path=found_path)

    try:
        with open(found_path) as fh:
            raw = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        _fail(
            f"CONFIG ERROR: Failed to parse {found_path}: {exc}\n"
            "Check the YAML syntax and try again."
        )
    except OSError as exc:
        _fail(f"CONFIG ERROR: Could not read {found_path}: {exc}")

    # Empty file: same as an explicit empty mapping
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        _fail(
            f"CONFIG ERROR: {found_path} is not a valid YAML mapping.\n"
            "The config file must be a YAML dictionary at the top level."
        )

    # ── Version validation ────────────────────────────────────────────────────
    version = raw.get("version", SUPPORTED_CONFIG_VERSION)
    if version not in SUPPORTED_VERSIONS:
        _fail(
            f"CONFIG ERROR: Unsupported config version: {version}. "
            f"Supported versions: {sorted(SUPPORTED_VERSIONS)}."
        )

    config = Config.from_dict(raw, path=found_path)
    _apply_env_overrides(config)

    logger.info(
        "Config loaded",
        path=found_path,
        allowed_modules=len(config.allow.modules),
        allowed_domains=len(config.allow.domains),
        replacements=len(config.replacements),
    )
    return config


def _apply_env_overrides(config: Config) -> None:
    """Apply environment variable overrides to a Config object in-place.

    Currently handles:
      MODGUARD_GOMOD — overrides config.gomod_path
    """
    env_gomod = os.environ.get("MODGUARD_GOMOD")
    if env_gomod:
        config.gomod_path = env_gomod


def _string_list(value: object, key: str, source: str) -> tuple[str, ...]:
    """Validate an optional YAML list of strings; None → empty tuple."""
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        _fail(f"CONFIG ERROR: {source}: '{key}' must be a list of strings.")
    return tuple(value)


def _fail(msg: str) -> NoReturn:
    print(msg, file=sys.stderr)
    raise SystemExit(1)
