"""
puzzle-solvers — configuration schema and validation.

File: src/puzzle_solvers/config/schema.py

Purpose
- Declare every setting once, as a ``ConfigField``, and derive defaults,
  validation and profile overlays from that table.

Functional requirements
- Validation collects every problem as a ``ConfigValidationIssue`` (dotted path + message).
- Profiles may only overlay the setting sections, never ``meta`` or other profiles.
"""

from __future__ import annotations

import copy
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final, Literal

from puzzle_solvers.constants import (
    CONFIG_SCHEMA_VERSION,
    DEFAULT_DEPARTURE_PREFIX,
    DEFAULT_ROOT_RULE,
    LOG_FORMATS,
    LOG_LEVELS,
)

ConfigSchemaVersion: Final[int] = CONFIG_SCHEMA_VERSION

FieldKind = Literal["int", "str", "bool"]


@dataclass(frozen=True, slots=True)
class ConfigField:
    """One ``section.name`` setting with its type and constraints."""

    section: str
    name: str
    kind: FieldKind
    default: object
    choices: tuple[str, ...] = ()
    minimum: int | None = None
    is_path: bool = False

    @property
    def path(self) -> str:
        return f"{self.section}.{self.name}"

    def check(self, value: object) -> object:
        """Return the normalized value, or raise ``ValueError`` naming the problem."""
        if self.kind == "bool":
            if not isinstance(value, bool):
                raise ValueError(f"expected boolean, got {type(value).__name__}")
            return value
        if self.kind == "int":
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"expected integer, got {type(value).__name__}")
            if self.minimum is not None and value < self.minimum:
                raise ValueError(f"must be >= {self.minimum}")
            return value
        if not isinstance(value, str):
            raise ValueError(f"expected string, got {type(value).__name__}")
        text = value.strip()
        if not text:
            raise ValueError("must not be empty")
        if self.choices and text not in self.choices:
            expected = ", ".join(sorted(self.choices))
            raise ValueError(f"invalid value {text!r}; expected one of: {expected}")
        return text


FIELDS: Final[tuple[ConfigField, ...]] = (
    ConfigField("observability", "log_level", "str", "INFO", choices=LOG_LEVELS),
    ConfigField("observability", "log_format", "str", "json", choices=LOG_FORMATS),
    ConfigField("observability", "log_dir", "str", "logs/", is_path=True),
    ConfigField("observability", "log_to_stderr", "bool", False),
    ConfigField("grammar", "root_rule", "int", DEFAULT_ROOT_RULE, minimum=0),
    ConfigField("tickets", "departure_prefix", "str", DEFAULT_DEPARTURE_PREFIX),
    ConfigField("paths", "report_dir", "str", "reports/", is_path=True),
)

SECTIONS: Final[tuple[str, ...]] = tuple(dict.fromkeys(field.section for field in FIELDS))

_FIELDS_BY_SECTION: Final[dict[str, dict[str, ConfigField]]] = {
    section: {field.name: field for field in FIELDS if field.section == section}
    for section in SECTIONS
}

_BUILTIN_PROFILES: Final[dict[str, dict[str, Any]]] = {
    "debug": {"observability": {"log_level": "DEBUG", "log_to_stderr": True}},
    "quiet": {"observability": {"log_level": "WARNING", "log_to_stderr": False}},
}

_PROFILE_NAME = re.compile(r"[a-z][a-z0-9_-]*")
_SCHEMA_VERSION_FIELD: Final = ConfigField(
    "meta", "schema_version", "int", ConfigSchemaVersion, minimum=1
)


@dataclass(frozen=True, slots=True)
class ConfigValidationIssue:
    path: str
    message: str


@dataclass(frozen=True, slots=True)
class ConfigValidationResult:
    """Normalized config when valid, otherwise ``None`` plus the issues found."""

    config: dict[str, Any] | None
    issues: tuple[ConfigValidationIssue, ...]

    @property
    def is_valid(self) -> bool:
        return self.config is not None


class ConfigValidationError(ValueError):
    """Raised when strict config validation fails."""

    def __init__(self, issues: Sequence[ConfigValidationIssue]) -> None:
        self.issues = tuple(issues)
        lines = "\n".join(f"- {issue.path}: {issue.message}" for issue in self.issues)
        super().__init__(f"invalid config:\n{lines or '- unknown validation failure'}")


def default_config() -> dict[str, Any]:
    """Built-in defaults, freshly built on every call."""
    config: dict[str, Any] = {"meta": {"schema_version": ConfigSchemaVersion}}
    for field in FIELDS:
        config.setdefault(field.section, {})[field.name] = field.default
    config["profiles"] = copy.deepcopy(_BUILTIN_PROFILES)
    return config


def migration_guidance(found_version: int) -> str:
    if found_version < ConfigSchemaVersion:
        return (
            f"schema version {found_version} is older than supported {ConfigSchemaVersion}; "
            "upgrade puzzles.toml to the current schema"
        )
    if found_version > ConfigSchemaVersion:
        return (
            f"schema version {found_version} is newer than supported {ConfigSchemaVersion}; "
            "upgrade the puzzle-solvers runtime"
        )
    return "schema version is current"


def merge_config(base: Mapping[str, Any], overlay: Mapping[str, Any]) -> dict[str, Any]:
    """Deep-merge ``overlay`` onto a copy of ``base``; neither input is modified."""
    merged = copy.deepcopy(dict(base))
    for key, value in overlay.items():
        current = merged.get(key)
        if isinstance(value, Mapping) and isinstance(current, Mapping):
            merged[key] = merge_config(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def apply_profile_overlay(config: Mapping[str, Any], profile: str) -> dict[str, Any]:
    """Overlay the named profile onto ``config`` and re-validate the result."""
    profiles = config.get("profiles")
    overlay = profiles.get(profile) if isinstance(profiles, Mapping) else None
    if not isinstance(overlay, Mapping):
        raise ConfigValidationError(
            (ConfigValidationIssue("profiles", f"profile {profile!r} is not defined"),)
        )
    return assert_valid_config(merge_config(config, overlay), active_profile=profile)


def validate_config(
    config: object, *, active_profile: str | None = None
) -> ConfigValidationResult:
    issues: list[ConfigValidationIssue] = []
    if not isinstance(config, Mapping):
        issues.append(ConfigValidationIssue("<root>", _expected_object(config)))
        return ConfigValidationResult(config=None, issues=tuple(issues))

    for key in sorted(set(config) - {"meta", "profiles", *SECTIONS}):
        issues.append(ConfigValidationIssue(key, "unknown field"))

    normalized: dict[str, Any] = {"meta": _check_meta(config.get("meta"), issues)}
    normalized.update(_check_sections(config, "", issues, partial=False))
    normalized["profiles"] = _check_profiles(config.get("profiles", {}), issues)

    if active_profile and active_profile not in normalized["profiles"]:
        issues.append(
            ConfigValidationIssue("profiles", f"profile {active_profile!r} is not defined")
        )

    if issues:
        return ConfigValidationResult(config=None, issues=tuple(issues))
    return ConfigValidationResult(config=normalized, issues=())


def assert_valid_config(config: object, *, active_profile: str | None = None) -> dict[str, Any]:
    result = validate_config(config, active_profile=active_profile)
    if result.config is None:
        raise ConfigValidationError(result.issues)
    return result.config


def _check_meta(raw: object, issues: list[ConfigValidationIssue]) -> dict[str, Any]:
    if raw is None:
        issues.append(ConfigValidationIssue("meta", "missing required field"))
        return {}
    if not isinstance(raw, Mapping):
        issues.append(ConfigValidationIssue("meta", _expected_object(raw)))
        return {}
    for key in sorted(set(raw) - {"schema_version"}):
        issues.append(ConfigValidationIssue(f"meta.{key}", "unknown field"))

    version = raw.get("schema_version")
    version_field = _SCHEMA_VERSION_FIELD
    if version is None:
        issues.append(ConfigValidationIssue(version_field.path, "missing required field"))
        return {}
    try:
        checked = version_field.check(version)
    except ValueError as exc:
        issues.append(ConfigValidationIssue(version_field.path, str(exc)))
        return {}
    if checked != ConfigSchemaVersion:
        issues.append(ConfigValidationIssue(version_field.path, migration_guidance(int(version))))
    return {"schema_version": checked}


def _check_sections(
    payload: Mapping[str, Any],
    prefix: str,
    issues: list[ConfigValidationIssue],
    *,
    partial: bool,
) -> dict[str, Any]:
    """Validate the setting sections; ``partial`` overlays may omit anything."""
    out: dict[str, Any] = {}
    for section, fields in _FIELDS_BY_SECTION.items():
        section_path = f"{prefix}{section}"
        raw = payload.get(section)
        if raw is None:
            if not partial:
                issues.append(ConfigValidationIssue(section_path, "missing required field"))
            continue
        if not isinstance(raw, Mapping):
            issues.append(ConfigValidationIssue(section_path, _expected_object(raw)))
            continue
        for key in sorted(set(raw) - set(fields)):
            issues.append(ConfigValidationIssue(f"{section_path}.{key}", "unknown field"))

        values: dict[str, Any] = {}
        for name, field in fields.items():
            if name not in raw:
                if not partial:
                    issues.append(
                        ConfigValidationIssue(f"{section_path}.{name}", "missing required field")
                    )
                continue
            try:
                values[name] = field.check(raw[name])
            except ValueError as exc:
                issues.append(ConfigValidationIssue(f"{section_path}.{name}", str(exc)))
        out[section] = values
    return out


def _check_profiles(raw: object, issues: list[ConfigValidationIssue]) -> dict[str, Any]:
    if not isinstance(raw, Mapping):
        issues.append(ConfigValidationIssue("profiles", _expected_object(raw)))
        return {}
    profiles: dict[str, Any] = {}
    for name in sorted(raw):
        path = f"profiles.{name}"
        if not _PROFILE_NAME.fullmatch(name):
            issues.append(ConfigValidationIssue(path, "profile names must match [a-z][a-z0-9_-]*"))
            continue
        overlay = raw[name]
        if not isinstance(overlay, Mapping):
            issues.append(ConfigValidationIssue(path, _expected_object(overlay)))
            continue
        for key in sorted(set(overlay) - set(SECTIONS)):
            issues.append(ConfigValidationIssue(f"{path}.{key}", "unknown field"))
        profiles[name] = _check_sections(overlay, f"{path}.", issues, partial=True)
    return profiles


def _expected_object(value: object) -> str:
    return f"expected object, got {type(value).__name__}"


__all__ = [
    "FIELDS",
    "SECTIONS",
    "ConfigField",
    "ConfigSchemaVersion",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "apply_profile_overlay",
    "assert_valid_config",
    "default_config",
    "merge_config",
    "migration_guidance",
    "validate_config",
]
