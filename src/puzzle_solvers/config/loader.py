"""
puzzle-solvers — runtime config loader.

File: src/puzzle_solvers/config/loader.py

Purpose
- Build the effective config from defaults, ``puzzles.toml``, a profile overlay,
  ``PUZZLES_<SECTION>_<NAME>`` environment variables and CLI overrides, in that order.

Functional requirements
- An explicitly named config file must exist; the implicit ``./puzzles.toml`` is optional.
- Path settings resolve relative to the directory holding the config file.
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from puzzle_solvers.config.schema import (
    FIELDS,
    ConfigField,
    apply_profile_overlay,
    assert_valid_config,
    default_config,
    merge_config,
)

DEFAULT_CONFIG_FILE: Final[str] = "puzzles.toml"
ENV_PREFIX: Final[str] = "PUZZLES_"

_TRUE_WORDS: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})
_FALSE_WORDS: Final[frozenset[str]] = frozenset({"0", "false", "no", "off"})


class ConfigLoadError(ValueError):
    """Raised when config cannot be read or an override cannot be coerced."""


def load_config(
    config_path: str | Path | None = None,
    *,
    profile: str | None = None,
    cli_overrides: Mapping[str, object] | None = None,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Return the validated effective config.

    ``cli_overrides`` maps dotted ``section.name`` keys to values; ``None``
    values are ignored. A ``"profile"`` key selects the profile when the
    ``profile`` argument is not given; ``PUZZLES_PROFILE`` is the last resort.
    """

    env = os.environ if environ is None else environ
    overrides = dict(cli_overrides or {})
    path = Path(config_path or DEFAULT_CONFIG_FILE).expanduser().resolve()

    config = merge_config(default_config(), _read_toml(path, required=config_path is not None))
    config = assert_valid_config(config)

    selected = _first_text(
        profile, overrides.pop("profile", None), env.get(f"{ENV_PREFIX}PROFILE")
    )
    if selected is not None:
        config = apply_profile_overlay(config, selected)

    config = merge_config(config, _env_overrides(env))
    config = merge_config(config, _cli_overrides(overrides))
    config = assert_valid_config(config, active_profile=selected)
    return _resolve_paths(config, base_dir=path.parent)


def effective_config(config: Mapping[str, Any]) -> dict[str, Any]:
    """The settings actually in force, without the profile table."""
    return {key: value for key, value in merge_config({}, config).items() if key != "profiles"}


def env_var_name(field: ConfigField) -> str:
    return f"{ENV_PREFIX}{field.section.upper()}_{field.name.upper()}"


def _read_toml(path: Path, *, required: bool) -> dict[str, Any]:
    if not path.is_file():
        if required:
            raise ConfigLoadError(f"config file not found: {path}")
        return {}
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigLoadError(f"invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigLoadError(f"unable to read config file {path}: {exc}") from exc


def _first_text(*candidates: object) -> str | None:
    for candidate in candidates:
        if isinstance(candidate, str) and candidate.strip():
            return candidate.strip()
    return None


def _env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    payload: dict[str, Any] = {}
    for field in FIELDS:
        raw = environ.get(env_var_name(field))
        if raw is not None:
            payload.setdefault(field.section, {})[field.name] = _coerce_env(field, raw)
    return payload


def _coerce_env(field: ConfigField, raw: str) -> object:
    text = raw.strip()
    if field.kind == "str":
        return text
    if field.kind == "int":
        try:
            return int(text)
        except ValueError as exc:
            raise ConfigLoadError(
                f"{env_var_name(field)} -> {field.path} must be an integer"
            ) from exc
    if text.lower() in _TRUE_WORDS:
        return True
    if text.lower() in _FALSE_WORDS:
        return False
    raise ConfigLoadError(
        f"{env_var_name(field)} -> {field.path} must be a boolean (true/false/1/0/yes/no/on/off)"
    )


def _cli_overrides(overrides: Mapping[str, object]) -> dict[str, Any]:
    payload: dict[str, Any] = {}
    for key, value in overrides.items():
        if value is None:
            continue
        section, _, name = key.partition(".")
        if not section or not name:
            raise ConfigLoadError(f"invalid CLI override key {key!r}")
        payload.setdefault(section, {})[name] = value
    return payload


def _resolve_paths(config: dict[str, Any], *, base_dir: Path) -> dict[str, Any]:
    for field in FIELDS:
        if not field.is_path:
            continue
        raw = Path(os.path.expandvars(config[field.section][field.name])).expanduser()
        absolute = raw if raw.is_absolute() else base_dir / raw
        config[field.section][field.name] = Path(os.path.normpath(absolute)).as_posix()
    return config


__all__ = [
    "DEFAULT_CONFIG_FILE",
    "ENV_PREFIX",
    "ConfigLoadError",
    "effective_config",
    "env_var_name",
    "load_config",
]
