"""
puzzle-solvers — unit tests for config loader

File: tests/unit/config/test_loader.py

Purpose
- Validate deterministic config loading from defaults, TOML, env overrides, and CLI overrides.

What this test file should cover
- Precedence: CLI > env > file > defaults.
- Deterministic env var path mapping and type coercion.
- Path normalization relative to the config file.
- Profile selection from argument, CLI override, and environment.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path

import pytest

from puzzle_solvers.config import ConfigValidationError
from puzzle_solvers.config.loader import (
    ConfigLoadError,
    effective_config,
    env_var_name,
    load_config,
)
from puzzle_solvers.config.schema import FIELDS

REPO_ROOT = Path(__file__).resolve().parents[3]


def _write_config(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def _sha256_json(data: dict[str, object]) -> str:
    payload = json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


@pytest.mark.unit
def test_loader_precedence_default_file_env_cli(tmp_path: Path) -> None:
    config_path = tmp_path / "puzzles.toml"
    default_path = tmp_path / "default.toml"
    _write_config(default_path, "")
    _write_config(
        config_path,
        """
[grammar]
root_rule = 4
""".strip(),
    )

    default_loaded = load_config(default_path, environ={})
    file_loaded = load_config(config_path, environ={})
    env_loaded = load_config(config_path, environ={"PUZZLES_GRAMMAR_ROOT_RULE": "6"})
    cli_loaded = load_config(
        config_path,
        environ={"PUZZLES_GRAMMAR_ROOT_RULE": "6"},
        cli_overrides={"grammar.root_rule": 7},
    )

    assert default_loaded["grammar"]["root_rule"] == 0
    assert file_loaded["grammar"]["root_rule"] == 4
    assert env_loaded["grammar"]["root_rule"] == 6
    assert cli_loaded["grammar"]["root_rule"] == 7


@pytest.mark.unit
def test_env_mapping_coerces_strings_and_booleans(tmp_path: Path) -> None:
    config_path = tmp_path / "puzzles.toml"
    _write_config(config_path, "")

    loaded = load_config(
        config_path,
        environ={
            "PUZZLES_TICKETS_DEPARTURE_PREFIX": "  arrival ",
            "PUZZLES_OBSERVABILITY_LOG_TO_STDERR": "yes",
            "PUZZLES_OBSERVABILITY_LOG_FORMAT": "text",
        },
    )

    assert loaded["tickets"]["departure_prefix"] == "arrival"
    assert loaded["observability"]["log_to_stderr"] is True
    assert loaded["observability"]["log_format"] == "text"


@pytest.mark.unit
@pytest.mark.parametrize(
    ("env_name", "raw"),
    [
        ("PUZZLES_GRAMMAR_ROOT_RULE", "not-an-int"),
        ("PUZZLES_OBSERVABILITY_LOG_TO_STDERR", "maybe"),
    ],
)
def test_invalid_env_coercion_raises_actionable_error(
    tmp_path: Path, env_name: str, raw: str
) -> None:
    config_path = tmp_path / "puzzles.toml"
    _write_config(config_path, "")

    with pytest.raises(ConfigLoadError, match=env_name):
        load_config(config_path, environ={env_name: raw})


@pytest.mark.unit
def test_env_values_are_still_validated(tmp_path: Path) -> None:
    config_path = tmp_path / "puzzles.toml"
    _write_config(config_path, "")

    with pytest.raises(ConfigValidationError, match="grammar.root_rule"):
        load_config(config_path, environ={"PUZZLES_GRAMMAR_ROOT_RULE": "-1"})


@pytest.mark.unit
def test_loader_is_deterministic_for_same_inputs(tmp_path: Path) -> None:
    config_path = tmp_path / "puzzles.toml"
    _write_config(config_path, "")

    env = {"PUZZLES_GRAMMAR_ROOT_RULE": "3", "PUZZLES_OBSERVABILITY_LOG_LEVEL": "DEBUG"}
    cli = {"tickets.departure_prefix": "seat"}

    first = load_config(config_path, environ=env, cli_overrides=cli)
    second = load_config(config_path, environ=env, cli_overrides=cli)

    assert _sha256_json(first) == _sha256_json(second)


@pytest.mark.unit
def test_path_normalization_is_relative_to_config_file(tmp_path: Path) -> None:
    config_path = tmp_path / "nested" / "puzzles.toml"
    _write_config(
        config_path,
        """
[paths]
report_dir = "out/reports"
""".strip(),
    )

    loaded = load_config(config_path, environ={})

    assert loaded["paths"]["report_dir"] == (config_path.parent / "out/reports").as_posix()
    assert loaded["observability"]["log_dir"] == (config_path.parent / "logs").as_posix()


@pytest.mark.unit
def test_profile_selection_sources(tmp_path: Path) -> None:
    config_path = tmp_path / "puzzles.toml"
    _write_config(config_path, "")

    by_argument = load_config(config_path, profile="debug", environ={})
    by_cli = load_config(config_path, cli_overrides={"profile": "quiet"}, environ={})
    by_env = load_config(config_path, environ={"PUZZLES_PROFILE": "debug"})
    env_beats_profile = load_config(
        config_path,
        profile="debug",
        environ={"PUZZLES_OBSERVABILITY_LOG_LEVEL": "ERROR"},
    )

    assert by_argument["observability"]["log_level"] == "DEBUG"
    assert by_argument["observability"]["log_to_stderr"] is True
    assert by_cli["observability"]["log_level"] == "WARNING"
    assert by_env["observability"]["log_level"] == "DEBUG"
    assert env_beats_profile["observability"]["log_level"] == "ERROR"


@pytest.mark.unit
def test_unknown_profile_is_rejected(tmp_path: Path) -> None:
    config_path = tmp_path / "puzzles.toml"
    _write_config(config_path, "")

    with pytest.raises(ConfigValidationError, match="profile 'nope' is not defined"):
        load_config(config_path, profile="nope", environ={})


@pytest.mark.unit
def test_explicit_missing_config_file_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigLoadError, match="config file not found"):
        load_config(tmp_path / "missing.toml", environ={})


@pytest.mark.unit
def test_implicit_config_file_is_optional(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)

    loaded = load_config(environ={})

    assert loaded["grammar"]["root_rule"] == 0
    assert loaded["paths"]["report_dir"] == (tmp_path.resolve() / "reports").as_posix()


@pytest.mark.unit
def test_invalid_toml_is_a_load_error(tmp_path: Path) -> None:
    config_path = tmp_path / "puzzles.toml"
    _write_config(config_path, "[grammar\nroot_rule = 1")

    with pytest.raises(ConfigLoadError, match="invalid TOML"):
        load_config(config_path, environ={})


@pytest.mark.unit
def test_effective_config_omits_profiles_without_mutating_input(tmp_path: Path) -> None:
    config_path = tmp_path / "puzzles.toml"
    _write_config(config_path, "")

    loaded = load_config(config_path, environ={})
    shown = effective_config(loaded)
    shown["tickets"]["departure_prefix"] = "changed"

    assert "profiles" not in shown
    assert "profiles" in loaded
    assert loaded["tickets"]["departure_prefix"] == "departure"


@pytest.mark.unit
def test_every_setting_has_an_environment_variable(tmp_path: Path) -> None:
    config_path = tmp_path / "puzzles.toml"
    _write_config(config_path, "")

    names = {env_var_name(field) for field in FIELDS}
    loaded = load_config(
        config_path,
        environ={"PUZZLES_PATHS_REPORT_DIR": "/srv/reports", "PUZZLES_UNRELATED": "x"},
    )

    assert len(names) == len(FIELDS)
    assert "PUZZLES_GRAMMAR_ROOT_RULE" in names
    assert "PUZZLES_TICKETS_DEPARTURE_PREFIX" in names
    assert loaded["paths"]["report_dir"] == "/srv/reports"


@pytest.mark.unit
def test_malformed_cli_override_key_is_a_load_error(tmp_path: Path) -> None:
    config_path = tmp_path / "puzzles.toml"
    _write_config(config_path, "")

    with pytest.raises(ConfigLoadError, match="invalid CLI override key"):
        load_config(config_path, environ={}, cli_overrides={"root_rule": 3})


@pytest.mark.unit
def test_can_load_repo_puzzles_toml_with_profile_and_env_override() -> None:
    loaded = load_config(
        REPO_ROOT / "puzzles.toml",
        profile="plain",
        environ={"PUZZLES_GRAMMAR_ROOT_RULE": "9"},
    )

    assert loaded["grammar"]["root_rule"] == 9
    assert loaded["observability"]["log_format"] == "text"


@pytest.mark.unit
def test_config_package_exports_loader_and_errors(tmp_path: Path) -> None:
    import puzzle_solvers.config as config_pkg

    config_path = tmp_path / "puzzles.toml"
    _write_config(config_path, "")

    loaded = config_pkg.load_config(config_path, environ={})
    assert loaded["meta"]["schema_version"] == 1

    with pytest.raises(config_pkg.ConfigLoadError):
        config_pkg.load_config(tmp_path / "missing.toml")
