"""
puzzle-solvers — unit tests for config schema validation

File: tests/unit/config/test_schema.py

Purpose
- Validate strict config schema behavior, structured errors, and profile overlays.

What this test file should cover
- Validates the repository's live puzzles.toml successfully.
- Rejects unknown keys and invalid types with actionable paths.
- Reports schema version mismatches with migration guidance.
- Deep merge is non-destructive.
"""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from pathlib import Path

import pytest

from puzzle_solvers.config.schema import (
    ConfigSchemaVersion,
    ConfigValidationError,
    apply_profile_overlay,
    assert_valid_config,
    default_config,
    merge_config,
    migration_guidance,
    validate_config,
)

REPO_ROOT = Path(__file__).resolve().parents[3]


def _load_toml(path: Path) -> dict[str, object]:
    with path.open("rb") as handle:
        data = tomllib.load(handle)
    assert isinstance(data, dict)
    return data


def _as_object_dict(value: object) -> dict[str, object]:
    assert isinstance(value, Mapping)
    return {str(key): item for key, item in value.items()}


@pytest.mark.unit
def test_puzzles_toml_validates_successfully() -> None:
    config = _load_toml(REPO_ROOT / "puzzles.toml")

    result = validate_config(config)

    assert result.is_valid
    assert result.config is not None
    assert result.config["meta"]["schema_version"] == ConfigSchemaVersion


@pytest.mark.unit
def test_defaults_validate_successfully() -> None:
    assert validate_config(default_config()).is_valid


@pytest.mark.unit
def test_unknown_key_rejection_is_explicit() -> None:
    config = _load_toml(REPO_ROOT / "puzzles.toml")
    grammar = _as_object_dict(config["grammar"])
    grammar["start_rule"] = 3
    config["grammar"] = grammar
    config["extras"] = {}

    result = validate_config(config)

    assert not result.is_valid
    issues = {issue.path: issue.message for issue in result.issues}
    assert issues["grammar.start_rule"] == "unknown field"
    assert issues["extras"] == "unknown field"


@pytest.mark.unit
def test_type_validation_reports_structured_paths() -> None:
    config = _load_toml(REPO_ROOT / "puzzles.toml")
    grammar = _as_object_dict(config["grammar"])
    grammar["root_rule"] = "zero"
    config["grammar"] = grammar
    observability = _as_object_dict(config["observability"])
    observability["log_to_stderr"] = "no"
    config["observability"] = observability

    result = validate_config(config)

    assert not result.is_valid
    issues = {issue.path: issue.message for issue in result.issues}
    assert "expected integer" in issues["grammar.root_rule"]
    assert "expected boolean" in issues["observability.log_to_stderr"]


@pytest.mark.unit
def test_range_and_enum_violations_report_exact_path() -> None:
    config = merge_config(
        default_config(),
        {
            "grammar": {"root_rule": -2},
            "observability": {"log_format": "xml"},
            "tickets": {"departure_prefix": "   "},
        },
    )

    result = validate_config(config)

    issues = {issue.path: issue.message for issue in result.issues}
    assert issues["grammar.root_rule"] == "must be >= 0"
    assert "expected one of: json, text" in issues["observability.log_format"]
    assert issues["tickets.departure_prefix"] == "must not be empty"


@pytest.mark.unit
def test_missing_section_is_reported() -> None:
    config = _as_object_dict(default_config())
    del config["tickets"]

    result = validate_config(config)

    assert not result.is_valid
    assert any(issue.path == "tickets" for issue in result.issues)


@pytest.mark.unit
@pytest.mark.parametrize("version", [0, 2])
def test_schema_version_mismatch_includes_migration_guidance(version: int) -> None:
    config = merge_config(default_config(), {"meta": {"schema_version": version}})

    with pytest.raises(ConfigValidationError) as excinfo:
        assert_valid_config(config)

    paths = [issue.path for issue in excinfo.value.issues]
    assert paths == ["meta.schema_version"]
    if version > ConfigSchemaVersion:
        assert "upgrade the puzzle-solvers runtime" in migration_guidance(version)


@pytest.mark.unit
def test_profile_overlay_deep_merges_known_sections_and_revalidates() -> None:
    config = _load_toml(REPO_ROOT / "puzzles.toml")
    profiles = _as_object_dict(config["profiles"])
    profiles["solver"] = {"grammar": {"root_rule": 8}, "tickets": {"departure_prefix": "arr"}}
    config["profiles"] = profiles

    merged = apply_profile_overlay(config, "solver")
    result = validate_config(merged, active_profile="solver")

    assert result.is_valid
    assert result.config is not None
    assert result.config["grammar"]["root_rule"] == 8
    assert result.config["tickets"]["departure_prefix"] == "arr"
    assert result.config["observability"]["log_level"] == "INFO"


@pytest.mark.unit
def test_profile_overlay_rejects_unknown_sections_and_bad_names() -> None:
    config = merge_config(
        default_config(),
        {"profiles": {"broken": {"meta": {"schema_version": 1}}, "Bad Name": {}}},
    )

    result = validate_config(config)

    paths = {issue.path for issue in result.issues}
    assert "profiles.broken.meta" in paths
    assert "profiles.Bad Name" in paths


@pytest.mark.unit
def test_merge_config_does_not_mutate_inputs() -> None:
    base = default_config()
    overlay = {"grammar": {"root_rule": 5}}

    merged = merge_config(base, overlay)
    merged["observability"]["log_level"] = "ERROR"

    assert base["grammar"]["root_rule"] == 0
    assert base["observability"]["log_level"] == "INFO"
    assert overlay == {"grammar": {"root_rule": 5}}
